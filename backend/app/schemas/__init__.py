# app/schemas/__init__.py
from app.schemas.agencia import (
    MENSAGEM_SUCESSO_CADASTRO,
    MENSAGENS_VALIDACAO,
    CadastroAgenciaRequest,
    CadastroAgenciaResponse,
    DistanciaResponse,
    ErrorResponse,
    PosicaoUsuario,
)

__all__ = [
    "MENSAGEM_SUCESSO_CADASTRO", "MENSAGENS_VALIDACAO",
    "CadastroAgenciaRequest", "CadastroAgenciaResponse",
    "DistanciaResponse", "PosicaoUsuario", "ErrorResponse",
]
