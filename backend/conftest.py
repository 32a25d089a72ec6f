"""
Configuration pytest commune
Base SQLite en mémoire, tables recréées à chaque test
"""

import os

# Doit précéder tout import de `app` : le moteur est créé à l'import
os.environ["TESTING"] = "True"
os.environ["ENVIRONMENT"] = "testing"
os.environ["TEST_DATABASE_URL"] = "sqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient

from app.core.database import SessionLocal, create_all_tables, drop_all_tables, get_db


@pytest.fixture
def db_session():
    """Session sur une base vide"""
    create_all_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        drop_all_tables()


@pytest.fixture
def client(db_session):
    """Client HTTP avec la session de test injectée"""
    from app.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    # sans `with` : le lifespan (dispose du moteur) ne tourne pas en test
    yield TestClient(app)
    app.dependency_overrides.clear()
