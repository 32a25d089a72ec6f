"""
Tests de la configuration
"""

import pytest
from pydantic import ValidationError

from app.core.config import Settings, get_settings, settings, validate_environment


def test_settings_de_test():
    assert settings.TESTING is True
    assert settings.database_url == "sqlite:///:memory:"
    assert get_settings() is settings


def test_valeurs_metier_par_defaut():
    assert settings.DISTANCIA_MINIMA_ENTRE_AGENCIAS == 1.0
    assert settings.LIMITE_CONSULTA_AGENCIAS == 1000
    assert settings.PREFIXO_NOME_AGENCIA == "AGENCIA_"


def test_url_postgres_derivee():
    config = Settings(
        TESTING=False,
        POSTGRES_SERVER="db",
        POSTGRES_USER="u",
        POSTGRES_PASSWORD="p",
        POSTGRES_DB="agencias",
        POSTGRES_PORT=5433,
        SQLALCHEMY_DATABASE_URI=None,
    )

    assert config.SQLALCHEMY_DATABASE_URI == "postgresql+psycopg://u:p@db:5433/agencias"
    assert config.database_url == config.SQLALCHEMY_DATABASE_URI


def test_cors_depuis_chaine():
    config = Settings(BACKEND_CORS_ORIGINS="http://a.com, http://b.com")

    assert config.BACKEND_CORS_ORIGINS == ["http://a.com", "http://b.com"]


@pytest.mark.parametrize("champ,valeur", [
    ("DISTANCIA_MINIMA_ENTRE_AGENCIAS", -1.0),
    ("LIMITE_CONSULTA_AGENCIAS", 0),
])
def test_valeurs_invalides(champ, valeur):
    with pytest.raises(ValidationError):
        Settings(**{champ: valeur})


def test_validate_environment_production():
    config = Settings(ENVIRONMENT="production", DEBUG=True, TESTING=False)

    with pytest.raises(ValueError, match="DEBUG"):
        validate_environment(config)


def test_validate_environment_ok():
    validate_environment(Settings(ENVIRONMENT="production", DEBUG=False, TESTING=False))
