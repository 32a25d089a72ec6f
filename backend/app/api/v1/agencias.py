"""
API Endpoint - Agences
Cadastro d'une agence et consultation des agences par distance
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.repositories.agencia_repository import AgenciaRepository
from app.schemas.agencia import (
    CadastroAgenciaRequest,
    CadastroAgenciaResponse,
    DistanciaResponse,
    ErrorResponse,
)
from app.services.agencia_service import AgenciaService

logger = logging.getLogger(__name__)
router = APIRouter(prefix=settings.DESAFIO_PREFIX, tags=["Agencias"])


def get_agencia_service(db: Session = Depends(get_db)) -> AgenciaService:
    """Dépendance FastAPI : service lié à la session de la requête."""
    return AgenciaService(AgenciaRepository(db))


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post(
    "/cadastrar",
    response_model=CadastroAgenciaResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def cadastrar_agencia(
    request: CadastroAgenciaRequest,
    service: AgenciaService = Depends(get_agencia_service),
):
    """
    Cadastrar uma nova agência

    - **posX**: entre -180 e 180
    - **posY**: entre -90 e 90
    """
    logger.info(f"Demande de cadastro en ({request.pos_x}, {request.pos_y})")

    response = service.cadastrar_agencia(request.pos_x, request.pos_y)

    logger.info(f"Agence créée - ID: {response.id}")
    return response


@router.get(
    "/distancia",
    response_model=DistanciaResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def buscar_agencias_proximas(
    pos_x: float = Query(..., alias="posX", allow_inf_nan=False),
    pos_y: float = Query(..., alias="posY", allow_inf_nan=False),
    service: AgenciaService = Depends(get_agencia_service),
):
    """Agências ordenadas pela distância ao ponto (posX, posY)"""
    logger.info(f"Demande de recherche autour de ({pos_x}, {pos_y})")

    response = service.buscar_agencias_proximas(pos_x, pos_y)

    logger.info(f"Consultation terminée - {response.total_agencias} agences")
    return response
