"""
Service des agences
Cadastro avec règle d'espacement minimal et recherche par proximité
"""

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, Optional

from app.core.config import settings
from app.core.exceptions import InvalidArgumentError, NotFoundError, StorageFailureError
from app.models.agencia import Agencia
from app.repositories.agencia_repository import AgenciaProxima, AgenciaRepository
from app.schemas.agencia import (
    MENSAGEM_SUCESSO_CADASTRO,
    CadastroAgenciaResponse,
    DistanciaResponse,
    PosicaoUsuario,
)

logger = logging.getLogger(__name__)

ISOLAMENTO_CADASTRO = "SERIALIZABLE"


class AgenciaService:
    """
    Moteur de cadastro et de consultation des agences

    Le cadastro (vérification d'espacement + insertion + nommage) s'exécute
    dans une seule transaction sérialisable ; le nom est dérivé de l'id
    réellement attribué par la base.
    """

    def __init__(
        self,
        repository: AgenciaRepository,
        distancia_minima: Optional[float] = None,
        limite_consulta: Optional[int] = None,
        prefixo_nome: Optional[str] = None,
    ):
        self.repository = repository
        self.distancia_minima = (
            settings.DISTANCIA_MINIMA_ENTRE_AGENCIAS if distancia_minima is None else distancia_minima
        )
        self.limite_consulta = settings.LIMITE_CONSULTA_AGENCIAS if limite_consulta is None else limite_consulta
        self.prefixo_nome = settings.PREFIXO_NOME_AGENCIA if prefixo_nome is None else prefixo_nome

    # ============================================================================
    # CADASTRO
    # ============================================================================

    def cadastrar_agencia(self, pos_x: Optional[float], pos_y: Optional[float]) -> CadastroAgenciaResponse:
        self._validar_coordenadas(pos_x, pos_y)

        logger.info(f"🏦 Début du cadastro d'une agence en ({pos_x}, {pos_y})")

        with self.repository.transacao(isolation_level=ISOLAMENTO_CADASTRO) as repo:
            if repo.exists_proxima(pos_x, pos_y, self.distancia_minima):
                logger.warning(
                    f"⚠️ Cadastro refusé: agence trop proche d'une agence existante en ({pos_x}, {pos_y})"
                )
                raise InvalidArgumentError(
                    "Já existe uma agência próxima a esta posição. "
                    f"Distância mínima permitida: {self.distancia_minima:.1f} unidades"
                )

            agencia = repo.save(Agencia(pos_x=pos_x, pos_y=pos_y, data_criacao=datetime.now()))
            agencia.nome = self.obter_nome_agencia(agencia)
            repo.save(agencia)

        logger.info(f"✅ Agence enregistrée - ID: {agencia.id}, Nom: {agencia.nome}")

        return CadastroAgenciaResponse(
            id=agencia.id,
            nome=agencia.nome,
            pos_x=agencia.pos_x,
            pos_y=agencia.pos_y,
            data_criacao=agencia.data_criacao,
            mensagem=MENSAGEM_SUCESSO_CADASTRO,
        )

    # ============================================================================
    # CONSULTA PAR PROXIMITÉ
    # ============================================================================

    def buscar_agencias_proximas(self, pos_x: Optional[float], pos_y: Optional[float]) -> DistanciaResponse:
        self._validar_coordenadas(pos_x, pos_y)

        logger.info(f"🔍 Recherche des agences proches de ({pos_x}, {pos_y})")

        try:
            resultados = self.repository.find_proximas_com_distancia(pos_x, pos_y, self.limite_consulta)
            response = self._processar_resultados(resultados, pos_x, pos_y)
        except InvalidArgumentError:
            raise
        except Exception as e:
            logger.error(f"❌ Erreur recherche agences proches: {e}", exc_info=True)
            raise StorageFailureError("Erro interno ao buscar agências próximas") from e

        logger.info(f"{response.total_agencias} agences trouvées autour de ({pos_x}, {pos_y})")
        return response

    def _processar_resultados(
        self, resultados: Iterable[AgenciaProxima], pos_x: float, pos_y: float
    ) -> DistanciaResponse:
        agencias: Dict[str, str] = {}
        agencia_mais_proxima: Optional[str] = None
        menor_distancia: Optional[float] = None

        for resultado in resultados:
            distancia = float(resultado.distancia)
            nome = resultado.nome or f"{self.prefixo_nome}{resultado.id}"
            agencias[nome] = self.formatar_distancia(distancia)

            # premier vu gagne en cas d'égalité
            if agencia_mais_proxima is None or distancia < menor_distancia:
                agencia_mais_proxima = nome
                menor_distancia = distancia

        return DistanciaResponse(
            posicao_usuario=PosicaoUsuario(pos_x=pos_x, pos_y=pos_y),
            agencias=agencias,
            total_agencias=len(agencias),
            agencia_mais_proxima=agencia_mais_proxima,
            menor_distancia=menor_distancia,
        )

    # ============================================================================
    # CONSULTA PAR ID
    # ============================================================================

    def buscar_agencia_por_id(self, agencia_id: Optional[int]) -> Agencia:
        if agencia_id is None:
            raise InvalidArgumentError("ID da agência é obrigatório")

        logger.info(f"Recherche agence ID: {agencia_id}")

        agencia = self.repository.find_by_id(agencia_id)
        if agencia is None:
            logger.warning(f"⚠️ Agence introuvable ID: {agencia_id}")
            raise NotFoundError(f"Agência não encontrada com ID: {agencia_id}")

        logger.info(f"Agence trouvée - ID: {agencia.id}, Nom: {agencia.nome}")
        return agencia

    # ============================================================================
    # UTILITAIRES
    # ============================================================================

    @staticmethod
    def _validar_coordenadas(pos_x: Optional[float], pos_y: Optional[float]) -> None:
        if pos_x is None or pos_y is None:
            raise InvalidArgumentError("Parâmetros posX e posY são obrigatórios")
        if not (math.isfinite(pos_x) and math.isfinite(pos_y)):
            raise InvalidArgumentError("Parâmetros posX e posY devem ser números finitos")

    @staticmethod
    def formatar_distancia(distancia: float) -> str:
        """Toujours un point comme séparateur décimal."""
        return ("distancia = %.2f" % distancia).replace(",", ".")

    @staticmethod
    def calcular_distancia(agencia: Agencia, pos_x: float, pos_y: float) -> float:
        return math.hypot(agencia.pos_x - pos_x, agencia.pos_y - pos_y)

    def obter_nome_agencia(self, agencia: Agencia) -> str:
        return f"{self.prefixo_nome}{agencia.id if agencia.id is not None else 'NOVA'}"


__all__ = ["AgenciaService", "ISOLAMENTO_CADASTRO"]
