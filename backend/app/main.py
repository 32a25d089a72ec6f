"""
Point d'entrée principal de l'API FastAPI
Cadastro d'agences et consultation par proximité
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.v1 import agencias
from app.core.config import settings
from app.core.database import create_all_tables, engine, get_db, get_performance_metrics, health_check_db
from app.core.exceptions import AgenciaError, ErrorKind
from app.repositories.agencia_repository import AgenciaRepository
from app.schemas.agencia import MENSAGENS_VALIDACAO

# Erreurs pydantic correspondant à une valeur non numérique
ERROS_DE_TIPO = {"float_parsing", "float_type"}

# Configuration du logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format=settings.LOG_FORMAT,
)
logger = logging.getLogger(__name__)

# ============================================================================
# LIFESPAN EVENTS
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestion du cycle de vie de l'application
    """
    logger.info("🚀 Démarrage de l'application...")

    # Créer les tables si nécessaire (hors production : migrations Alembic)
    if settings.ENVIRONMENT != "production":
        try:
            create_all_tables()
            logger.info("✅ Tables vérifiées/créées")
        except Exception as e:
            logger.error(f"❌ Erreur création tables: {e}")

    db_status = health_check_db()
    if db_status["status"] == "healthy":
        logger.info("✅ Base de données connectée")
    else:
        logger.error("❌ Erreur connexion base de données")

    yield

    logger.info("👋 Arrêt de l'application...")
    engine.dispose()
    logger.info("✅ Connexions DB fermées")

# ============================================================================
# APPLICATION FASTAPI
# ============================================================================

app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_DESCRIPTION,
    version=settings.PROJECT_VERSION,
    docs_url="/docs" if settings.SHOW_DOCS else None,
    redoc_url="/redoc" if settings.SHOW_DOCS else None,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Agencias", "description": "Cadastro e consulta de agências"},
        {"name": "Health", "description": "Endpoints de santé"},
        {"name": "Root", "description": "Endpoints racine"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials="*" not in settings.BACKEND_CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log toutes les requêtes HTTP
    """
    start_time = time.time()
    request_id = f"{int(start_time * 1000)}"

    logger.info(f"📥 {request_id} - {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = (time.time() - start_time) * 1000
    logger.info(f"📤 {request_id} - Status: {response.status_code} - Time: {process_time:.2f}ms")

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
    return response

# ============================================================================
# GESTION D'ERREURS
# ============================================================================

def error_body(
    status_code: int, error: str, message: str, details: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """Enveloppe d'erreur uniforme {timestamp, status, error, message[, details]}"""
    body: Dict[str, Any] = {
        "timestamp": datetime.now().isoformat(),
        "status": status_code,
        "error": error,
        "message": message,
    }
    if details is not None:
        body["details"] = details
    return body


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Erreurs de validation : carte champ -> message
    """
    errors: Dict[str, str] = {}
    tipo_invalido = False
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = str(loc[-1]) if loc else "request"
        message = MENSAGENS_VALIDACAO.get((field, err.get("type", "")), err.get("msg", "Valor inválido"))
        errors.setdefault(field, message)
        tipo_invalido = tipo_invalido or err.get("type") in ERROS_DE_TIPO

    logger.warning(f"⚠️ Erreur de validation: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            status.HTTP_400_BAD_REQUEST,
            "Tipo de parâmetro inválido" if tipo_invalido else "Dados inválidos",
            "Erro de validação nos dados fornecidos",
            errors,
        ),
    )


@app.exception_handler(AgenciaError)
async def agencia_exception_handler(request: Request, exc: AgenciaError):
    """
    Erreurs métier : le type d'erreur choisit le statut HTTP
    """
    if exc.kind == ErrorKind.INVALID_ARGUMENT:
        logger.warning(f"⚠️ Argument invalide: {exc.message}")
        code, error, message = status.HTTP_400_BAD_REQUEST, "Parâmetros inválidos", exc.message
    elif exc.kind == ErrorKind.NOT_FOUND:
        logger.warning(f"⚠️ Ressource introuvable: {exc.message}")
        code, error, message = status.HTTP_404_NOT_FOUND, "Recurso não encontrado", exc.message
    else:
        logger.error(f"❌ Erreur interne: {exc.message}", exc_info=exc)
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
        error = "Erro interno do servidor"
        message = "Ocorreu um erro interno. Tente novamente mais tarde."

    return JSONResponse(status_code=code, content=error_body(code, error, message))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Gestionnaire d'exceptions générales
    """
    logger.error(f"❌ Erreur non gérée: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Erro interno do servidor",
            "Ocorreu um erro inesperado. Tente novamente mais tarde.",
        ),
    )

# ============================================================================
# ENDPOINTS RACINE
# ============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Point d'entrée racine de l'API
    """
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.PROJECT_VERSION,
        "status": "online",
        "documentation": "/docs" if settings.SHOW_DOCS else None,
        "endpoints": {
            "cadastrar": f"{settings.DESAFIO_PREFIX}/cadastrar",
            "distancia": f"{settings.DESAFIO_PREFIX}/distancia",
            "health": "/health",
        },
        "timestamp": datetime.now().isoformat(),
    }


@app.get("/health", tags=["Health"])
def health_check(db: Session = Depends(get_db)):
    """
    Health check de l'application
    """
    db_status = health_check_db()
    healthy = db_status["status"] == "healthy"

    total_agencias = None
    if healthy:
        try:
            total_agencias = AgenciaRepository(db).count()
        except AgenciaError as e:
            logger.warning(f"⚠️ Comptage des agences indisponible: {e.message}")

    return {
        "status": "healthy" if healthy else "degraded",
        "version": settings.PROJECT_VERSION,
        "timestamp": datetime.now().isoformat(),
        "environment": settings.ENVIRONMENT,
        "database": healthy,
        "total_agencias": total_agencias,
        "details": {
            "database": db_status,
            "metrics": get_performance_metrics(),
        },
    }


app.include_router(agencias.router)

# ===== POINT D'ENTRÉE =====
if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
