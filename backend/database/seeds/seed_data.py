"""
Seeds - Données de test pour peupler la base de données
database/seeds/seed_data.py
"""

import logging
import sys
from typing import List, Optional

from faker import Faker
from sqlalchemy.orm import Session

from app.core.database import create_all_tables, db_transaction
from app.core.exceptions import InvalidArgumentError
from app.repositories.agencia_repository import AgenciaRepository
from app.schemas.agencia import CadastroAgenciaResponse
from app.services.agencia_service import AgenciaService

logger = logging.getLogger(__name__)

# ============================================================================
# AGENCES
# ============================================================================

def seed_agencias(db: Session, quantidade: int = 20, seed: Optional[int] = None) -> List[CadastroAgenciaResponse]:
    """
    Enregistrer `quantidade` agences à des positions aléatoires
    Les positions refusées par la règle d'espacement sont ignorées
    """
    fake = Faker('pt_BR')
    if seed is not None:
        fake.seed_instance(seed)

    service = AgenciaService(AgenciaRepository(db))
    criadas = []
    recusadas = 0

    for _ in range(quantidade):
        pos_x = round(float(fake.longitude()), 4)
        pos_y = round(float(fake.latitude()), 4)
        try:
            criadas.append(service.cadastrar_agencia(pos_x, pos_y))
        except InvalidArgumentError:
            recusadas += 1

    logger.info(f"🌱 {len(criadas)} agences créées, {recusadas} positions refusées")
    return criadas


def main(quantidade: int = 20) -> None:
    logging.basicConfig(level=logging.INFO)
    create_all_tables()
    with db_transaction() as db:
        criadas = seed_agencias(db, quantidade)
    for agencia in criadas:
        print(f"{agencia.nome}: ({agencia.pos_x}, {agencia.pos_y})")


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 20)
