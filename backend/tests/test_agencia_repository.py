"""
Tests du dépôt des agences sur une base SQLite en mémoire
"""

import logging
import math
from datetime import datetime

import pytest
from sqlalchemy.exc import DataError, OperationalError

from app.core.exceptions import InvalidArgumentError, StorageFailureError
from app.models.agencia import Agencia
from app.repositories.agencia_repository import AgenciaProxima, AgenciaRepository

# ============================================================================
# Fixtures de test
# ============================================================================

@pytest.fixture
def repository(db_session):
    return AgenciaRepository(db_session)


@pytest.fixture
def trois_agencias(db_session):
    """Agences en (0,0), (3,4) et (10,10)"""
    agencias = []
    for i, (x, y) in enumerate([(0.0, 0.0), (3.0, 4.0), (10.0, 10.0)], start=1):
        agencia = Agencia(pos_x=x, pos_y=y, nome=f"AGENCIA_{i}", data_criacao=datetime.now())
        db_session.add(agencia)
        agencias.append(agencia)
    db_session.commit()
    return agencias

# ============================================================================
# Tests
# ============================================================================

class TestAgenciaRepository:

    def test_save_attribue_un_id(self, repository, db_session):
        agencia = repository.save(Agencia(pos_x=5.0, pos_y=-5.0, data_criacao=datetime.now()))
        db_session.commit()

        assert agencia.id is not None
        assert repository.count() == 1

    def test_count(self, repository, trois_agencias):
        assert repository.count() == 3

    def test_find_by_id(self, repository, trois_agencias):
        agencia = repository.find_by_id(trois_agencias[1].id)

        assert agencia is not None
        assert (agencia.pos_x, agencia.pos_y) == (3.0, 4.0)
        assert repository.find_by_id(9999) is None

    def test_find_proximas_ordre_et_distances(self, repository, trois_agencias):
        rows = repository.find_proximas_com_distancia(0.0, 0.0, 1000)

        assert all(isinstance(row, AgenciaProxima) for row in rows)
        assert [row.nome for row in rows] == ["AGENCIA_1", "AGENCIA_2", "AGENCIA_3"]
        assert rows[0].distancia == pytest.approx(0.0)
        assert rows[1].distancia == pytest.approx(5.0)
        assert rows[2].distancia == pytest.approx(math.sqrt(200))
        assert isinstance(rows[0].data_criacao, datetime)

    def test_find_proximas_depuis_un_autre_point(self, repository, trois_agencias):
        rows = repository.find_proximas_com_distancia(9.0, 9.0, 1000)

        assert [row.nome for row in rows] == ["AGENCIA_3", "AGENCIA_2", "AGENCIA_1"]

    def test_find_proximas_limite(self, repository, trois_agencias):
        rows = repository.find_proximas_com_distancia(0.0, 0.0, 2)

        assert len(rows) == 2

    def test_find_proximas_base_vide(self, repository):
        assert repository.find_proximas_com_distancia(0.0, 0.0, 1000) == []

    def test_exists_proxima(self, repository, trois_agencias):
        assert repository.exists_proxima(0.5, 0.5, 1.0) is True
        assert repository.exists_proxima(50.0, 50.0, 1.0) is False

    def test_exists_proxima_bord_inclus(self, repository, trois_agencias):
        # distance exactement égale au rayon : considérée comme proche
        assert repository.exists_proxima(1.0, 0.0, 1.0) is True
        assert repository.exists_proxima(1.5, 0.0, 1.0) is False

    def test_delete(self, repository, trois_agencias, db_session):
        assert repository.delete(trois_agencias[0].id) is True
        db_session.commit()

        assert repository.count() == 2
        assert repository.delete(9999) is False

    def test_delete_all(self, repository, trois_agencias, db_session):
        assert repository.delete_all() == 3
        db_session.commit()

        assert repository.count() == 0

    def test_transacao_rollback_sur_erreur(self, repository):
        with pytest.raises(ValueError):
            with repository.transacao() as repo:
                repo.save(Agencia(pos_x=1.0, pos_y=1.0, data_criacao=datetime.now()))
                raise ValueError("abandon")

        assert repository.count() == 0

    def test_transacao_commit(self, repository):
        with repository.transacao(isolation_level="SERIALIZABLE") as repo:
            repo.save(Agencia(pos_x=1.0, pos_y=1.0, data_criacao=datetime.now()))

        assert repository.count() == 1

    def test_transacao_deja_ouverte_avertit(self, repository, caplog):
        repository.count()  # ouvre la transaction de la session

        with caplog.at_level(logging.WARNING, logger="app.repositories.agencia_repository"):
            with repository.transacao(isolation_level="SERIALIZABLE") as repo:
                repo.save(Agencia(pos_x=1.0, pos_y=1.0, data_criacao=datetime.now()))

        assert "SERIALIZABLE non appliquée" in caplog.text
        assert repository.count() == 1

    def test_transacao_sans_avertissement(self, repository, caplog):
        with caplog.at_level(logging.WARNING, logger="app.repositories.agencia_repository"):
            with repository.transacao(isolation_level="SERIALIZABLE"):
                pass

        assert "non appliquée" not in caplog.text

    def test_find_proximas_distance_hors_plage(self, repository, trois_agencias):
        with pytest.raises(InvalidArgumentError, match="fora do intervalo"):
            repository.find_proximas_com_distancia(1e200, 0.0, 1000)

    def test_find_proximas_data_error_converti(self, repository, monkeypatch):
        def overflow(*args, **kwargs):
            raise DataError("SELECT", {}, Exception("value out of range: overflow"))

        monkeypatch.setattr(repository.db, "execute", overflow)

        with pytest.raises(InvalidArgumentError) as exc_info:
            repository.find_proximas_com_distancia(0.0, 0.0, 1000)

        assert isinstance(exc_info.value.__cause__, DataError)

    def test_erreur_sql_convertie(self, repository, monkeypatch):
        def boom(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(repository.db, "execute", boom)

        with pytest.raises(StorageFailureError) as exc_info:
            repository.count()

        assert isinstance(exc_info.value.__cause__, OperationalError)


class TestAgenciaModel:

    def test_nome_immuable(self, db_session):
        agencia = Agencia(pos_x=0.0, pos_y=0.0, nome="AGENCIA_1", data_criacao=datetime.now())

        with pytest.raises(ValueError):
            agencia.nome = "AUTRE"

    def test_data_criacao_immuable(self, db_session):
        agencia = Agencia(pos_x=0.0, pos_y=0.0, data_criacao=datetime(2024, 1, 1))

        with pytest.raises(ValueError):
            agencia.data_criacao = datetime(2025, 1, 1)

    def test_nome_affecte_une_fois(self):
        agencia = Agencia(pos_x=0.0, pos_y=0.0)
        agencia.nome = "AGENCIA_5"

        assert agencia.nome == "AGENCIA_5"
