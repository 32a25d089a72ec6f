"""
Accès aux données des agences
Requêtes SQL paramétrées (distance euclidienne calculée par la base)
"""

import logging
import math
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, NamedTuple, Optional

from sqlalchemy import DateTime, Float, Integer, String, func, select, text
from sqlalchemy.exc import DataError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidArgumentError, StorageFailureError
from app.models.agencia import Agencia

logger = logging.getLogger(__name__)

# Distance hors de la plage des flottants de la base (coordonnées de requête énormes)
MENSAGEM_FORA_DE_ALCANCE = "Posição informada fora do intervalo de cálculo de distância"

# ================================
# REQUÊTES
# ================================

SQL_AGENCIAS_PROXIMAS = text("""
    SELECT a.id, a.nome, a.pos_x, a.pos_y, a.data_criacao,
           SQRT(POWER(a.pos_x - :pos_x, 2) + POWER(a.pos_y - :pos_y, 2)) AS distancia
    FROM agencias a
    ORDER BY distancia ASC, a.id ASC
    LIMIT :limite
""").columns(
    id=Integer,
    nome=String,
    pos_x=Float,
    pos_y=Float,
    data_criacao=DateTime,
    distancia=Float,
)

SQL_EXISTE_AGENCIA_PROXIMA = text("""
    SELECT COUNT(*)
    FROM agencias a
    WHERE SQRT(POWER(a.pos_x - :pos_x, 2) + POWER(a.pos_y - :pos_y, 2)) <= :distancia_minima
""")


class AgenciaProxima(NamedTuple):
    """Ligne retournée par la recherche de proximité"""
    id: int
    nome: Optional[str]
    pos_x: float
    pos_y: float
    data_criacao: datetime
    distancia: float


class AgenciaRepository:
    """Passerelle de stockage des agences, liée à une session SQLAlchemy"""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transacao(self, isolation_level: Optional[str] = None) -> Iterator["AgenciaRepository"]:
        """
        Unité de travail atomique : commit en sortie, rollback sur erreur.
        Le niveau d'isolation ne s'applique qu'à une transaction non commencée.
        """
        if isolation_level and self.db.in_transaction():
            logger.warning(
                f"⚠️ Isolation {isolation_level} non appliquée : une transaction est déjà ouverte sur la session"
            )
            isolation_level = None

        try:
            if isolation_level:
                self.db.connection(execution_options={"isolation_level": isolation_level})
            yield self
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageFailureError("Erro ao acessar a base de agências") from e
        except Exception:
            self.db.rollback()
            raise

    def count(self) -> int:
        try:
            return self.db.execute(select(func.count()).select_from(Agencia)).scalar_one()
        except SQLAlchemyError as e:
            raise StorageFailureError("Erro ao contar agências") from e

    def exists_proxima(self, pos_x: float, pos_y: float, distancia_minima: float) -> bool:
        """Vrai si une agence est à une distance <= distancia_minima de (pos_x, pos_y)."""
        try:
            total = self.db.execute(
                SQL_EXISTE_AGENCIA_PROXIMA,
                {"pos_x": pos_x, "pos_y": pos_y, "distancia_minima": distancia_minima},
            ).scalar_one()
        except DataError as e:
            raise InvalidArgumentError(MENSAGEM_FORA_DE_ALCANCE) from e
        except SQLAlchemyError as e:
            raise StorageFailureError("Erro ao verificar agências próximas") from e
        return total > 0

    def find_proximas_com_distancia(self, pos_x: float, pos_y: float, limite: int) -> List[AgenciaProxima]:
        """Agences triées par distance croissante à (pos_x, pos_y), au plus `limite`."""
        try:
            rows = self.db.execute(
                SQL_AGENCIAS_PROXIMAS,
                {"pos_x": pos_x, "pos_y": pos_y, "limite": limite},
            ).all()
        except DataError as e:
            # PostgreSQL : "value out of range: overflow"
            raise InvalidArgumentError(MENSAGEM_FORA_DE_ALCANCE) from e
        except SQLAlchemyError as e:
            raise StorageFailureError("Erro ao buscar agências próximas") from e
        proximas = [AgenciaProxima(*row) for row in rows]
        # SQLite : POWER renvoie inf au lieu d'échouer
        if any(p.distancia is None or not math.isfinite(p.distancia) for p in proximas):
            raise InvalidArgumentError(MENSAGEM_FORA_DE_ALCANCE)
        return proximas

    def save(self, agencia: Agencia) -> Agencia:
        """Insère l'agence et récupère l'id attribué par la base (flush, sans commit)."""
        try:
            self.db.add(agencia)
            self.db.flush()
        except SQLAlchemyError as e:
            raise StorageFailureError("Erro ao salvar agência") from e
        return agencia

    def find_by_id(self, agencia_id: int) -> Optional[Agencia]:
        try:
            return self.db.get(Agencia, agencia_id)
        except SQLAlchemyError as e:
            raise StorageFailureError("Erro ao buscar agência") from e

    # ================================
    # ADMINISTRATION (non exposée en HTTP)
    # ================================

    def delete(self, agencia_id: int) -> bool:
        agencia = self.find_by_id(agencia_id)
        if agencia is None:
            return False
        try:
            self.db.delete(agencia)
            self.db.flush()
        except SQLAlchemyError as e:
            raise StorageFailureError("Erro ao remover agência") from e
        logger.info(f"🗑️ Agence supprimée: {agencia_id}")
        return True

    def delete_all(self) -> int:
        try:
            result = self.db.execute(text("DELETE FROM agencias"))
            self.db.flush()
        except SQLAlchemyError as e:
            raise StorageFailureError("Erro ao remover agências") from e
        return result.rowcount
