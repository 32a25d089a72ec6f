"""
Tests du script de seeds
"""

from database.seeds.seed_data import seed_agencias
from app.repositories.agencia_repository import AgenciaRepository


def test_seed_agencias(db_session):
    criadas = seed_agencias(db_session, quantidade=10, seed=42)

    assert 0 < len(criadas) <= 10
    assert AgenciaRepository(db_session).count() == len(criadas)
    for agencia in criadas:
        assert agencia.nome == f"AGENCIA_{agencia.id}"
        assert -180.0 <= agencia.pos_x <= 180.0
        assert -90.0 <= agencia.pos_y <= 90.0


def test_seed_respecte_l_espacement(db_session):
    criadas = seed_agencias(db_session, quantidade=15, seed=7)

    positions = [(a.pos_x, a.pos_y) for a in criadas]
    for i, (x1, y1) in enumerate(positions):
        for x2, y2 in positions[i + 1:]:
            assert ((x1 - x2) ** 2 + (y1 - y2) ** 2) ** 0.5 > 1.0
