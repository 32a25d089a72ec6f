"""
Schémas Pydantic des agences
Les noms JSON (posX, dataCriacao, ...) sont ceux du contrat public de l'API
"""

from datetime import datetime
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

MENSAGEM_SUCESSO_CADASTRO = "Agência cadastrada com sucesso!"

# Messages de validation par (champ, type d'erreur pydantic)
MENSAGENS_VALIDACAO: Dict[Tuple[str, str], str] = {
    ("posX", "missing"): "Posição X é obrigatória",
    ("posX", "greater_than_equal"): "Posição X deve ser maior ou igual a -180",
    ("posX", "less_than_equal"): "Posição X deve ser menor ou igual a 180",
    ("posY", "missing"): "Posição Y é obrigatória",
    ("posY", "greater_than_equal"): "Posição Y deve ser maior ou igual a -90",
    ("posY", "less_than_equal"): "Posição Y deve ser menor ou igual a 90",
}

# Valeur non numérique ou non finie (inf, nan)
for _campo in ("posX", "posY"):
    MENSAGENS_VALIDACAO[(_campo, "float_parsing")] = f"O parâmetro '{_campo}' deve ser do tipo numérico"
    MENSAGENS_VALIDACAO[(_campo, "float_type")] = f"O parâmetro '{_campo}' deve ser do tipo numérico"
    MENSAGENS_VALIDACAO[(_campo, "finite_number")] = f"O parâmetro '{_campo}' deve ser um número finito"


class CadastroAgenciaRequest(BaseModel):
    """Corps de POST /desafio/cadastrar"""
    model_config = ConfigDict(populate_by_name=True)

    pos_x: float = Field(..., alias="posX", ge=-180.0, le=180.0, allow_inf_nan=False)
    pos_y: float = Field(..., alias="posY", ge=-90.0, le=90.0, allow_inf_nan=False)


class CadastroAgenciaResponse(BaseModel):
    """Réponse 201 d'un cadastro réussi"""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    nome: str
    pos_x: float = Field(..., alias="posX")
    pos_y: float = Field(..., alias="posY")
    data_criacao: datetime = Field(..., alias="dataCriacao")
    mensagem: str = MENSAGEM_SUCESSO_CADASTRO


class PosicaoUsuario(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pos_x: float = Field(..., alias="posX")
    pos_y: float = Field(..., alias="posY")


class DistanciaResponse(BaseModel):
    """
    Réponse de GET /desafio/distancia
    `agencias` garde l'ordre d'insertion : distance croissante
    """
    model_config = ConfigDict(populate_by_name=True)

    posicao_usuario: PosicaoUsuario = Field(..., alias="posicaoUsuario")
    agencias: Dict[str, str]
    total_agencias: int = Field(..., alias="totalAgencias")
    agencia_mais_proxima: Optional[str] = Field(None, alias="agenciaMaisProxima")
    menor_distancia: Optional[float] = Field(None, alias="menorDistancia")


class ErrorResponse(BaseModel):
    """Enveloppe d'erreur uniforme"""
    timestamp: datetime
    status: int
    error: str
    message: str
    details: Optional[Dict[str, str]] = None
