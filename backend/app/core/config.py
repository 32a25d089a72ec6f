"""
Configuration centrale de l'application (Pydantic v2)
Gestion des paramètres d'environnement avec pydantic-settings
"""

from typing import Any, List, Optional, Union

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration principale de l'application
    Utilise Pydantic Settings (v2) pour la validation et le typage
    """

    # ================================
    # APPLICATION SETTINGS
    # ================================
    PROJECT_NAME: str = "Agencia API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Cadastro de agências e consulta por proximidade"

    ENVIRONMENT: str = "development"  # development, testing, production
    DEBUG: bool = True
    SHOW_DOCS: bool = True

    HOST: str = "0.0.0.0"
    PORT: int = 8080
    DESAFIO_PREFIX: str = "/desafio"

    # ================================
    # CORS SETTINGS
    # ================================
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            # ex: "http://localhost:3000, http://127.0.0.1:5173"
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError("Valeur CORS invalide")

    # ================================
    # DATABASE SETTINGS
    # ================================
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "agencia_user"
    POSTGRES_PASSWORD: str = "agencia_password"
    POSTGRES_DB: str = "agencias"
    POSTGRES_PORT: int = 5432

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600

    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # ================================
    # LOGGING SETTINGS
    # ================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    LOG_SQL_QUERIES: bool = False
    SLOW_QUERY_THRESHOLD: float = 1.0  # secondes

    # ================================
    # AGENCES
    # ================================
    DISTANCIA_MINIMA_ENTRE_AGENCIAS: float = 1.0
    LIMITE_CONSULTA_AGENCIAS: int = 1000
    PREFIXO_NOME_AGENCIA: str = "AGENCIA_"

    @field_validator("DISTANCIA_MINIMA_ENTRE_AGENCIAS")
    @classmethod
    def check_distancia_minima(cls, v: float) -> float:
        if v < 0:
            raise ValueError("La distance minimale entre agences doit être positive")
        return v

    @field_validator("LIMITE_CONSULTA_AGENCIAS")
    @classmethod
    def check_limite_consulta(cls, v: int) -> int:
        if v < 1:
            raise ValueError("La limite de consultation doit être au moins 1")
        return v

    # ================================
    # TESTING
    # ================================
    TESTING: bool = False
    TEST_DATABASE_URL: Optional[str] = None

    # ----------------
    # Pydantic v2 config
    # ----------------
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",           # ignore unknown env vars
        validate_default=True,    # valide les valeurs par défaut
    )

    # Post-validation : construire les URLs dépendantes d'autres champs
    @model_validator(mode="after")
    def build_derived_urls(self) -> "Settings":
        if not self.SQLALCHEMY_DATABASE_URI:
            # driver SQLAlchemy moderne : psycopg (plutôt que psycopg2)
            self.SQLALCHEMY_DATABASE_URI = (
                f"postgresql+psycopg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )
        return self

    @property
    def database_url(self) -> str:
        """URL effectivement utilisée par le moteur (base de test si TESTING)."""
        if self.TESTING and self.TEST_DATABASE_URL:
            return self.TEST_DATABASE_URL
        return str(self.SQLALCHEMY_DATABASE_URI)


# Instance globale des settings
settings = Settings()


def get_settings() -> Settings:
    """Factory pour obtenir l'instance des settings (tests / DI)."""
    return settings


# ================================
# VALIDATION FUNCTIONS
# ================================
def validate_environment(config: Any = None) -> None:
    """Valide la configuration pour l'environnement courant."""
    config = config or settings
    errors = []

    if config.ENVIRONMENT == "production":
        if config.DEBUG:
            errors.append("DEBUG ne doit pas être activé en production")
        if config.TESTING:
            errors.append("TESTING ne doit pas être activé en production")

    if not config.SQLALCHEMY_DATABASE_URI:
        errors.append("URL de base de données manquante")
    if config.TESTING and not config.TEST_DATABASE_URL:
        errors.append("TEST_DATABASE_URL manquante en mode test")

    if errors:
        raise ValueError(f"Erreurs de configuration: {'; '.join(errors)}")


# Validation automatique (sauf en tests)
if not settings.TESTING:
    try:
        validate_environment()
    except ValueError as e:
        print(f"⚠️  Avertissement de configuration: {e}")


__all__ = ["Settings", "settings", "get_settings", "validate_environment"]
