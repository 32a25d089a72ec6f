from app.models.agencia import Agencia

__all__ = ["Agencia"]
