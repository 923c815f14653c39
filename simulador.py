# -*- coding: utf-8 -*-
# simulador.py — Orquestração de uma simulação completa
# -------------------------------------------------------------
# Entradas validadas -> impacto do primeiro ano, projeção do
# período, acumulado e memória de cálculo, num único objeto que é
# repassado explicitamente à UI e aos exportadores.
# -------------------------------------------------------------

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from cronograma import SETORES, Setor, cronograma_do_setor
from memoria_calculo import memorias_da_projecao
from split_core import (
    EntradasSimulacao,
    ImpactoAcumulado,
    ImpactoAnual,
    ProjecaoTemporal,
    acumular,
    projetar,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultadoSimulacao:
    entradas: EntradasSimulacao
    impacto_base: Optional[ImpactoAnual]
    projecao: ProjecaoTemporal
    impacto_acumulado: ImpactoAcumulado
    memoria_calculo: Dict[int, str] = field(default_factory=dict)
    cronograma_setor: Optional[Dict[int, float]] = None


def simular(e: EntradasSimulacao, setores: Mapping[str, Setor] = SETORES) -> ResultadoSimulacao:
    cronograma_setor = cronograma_do_setor(e.setor, setores)

    projecao = projetar(e, e.ano_inicial, e.ano_final, e.cenario, e.taxa_crescimento, cronograma_setor)
    acumulado = acumular(projecao.resultados_anuais, e.ano_inicial, e.ano_final)
    memorias = memorias_da_projecao(e, projecao)

    logger.info("Simulação %s (%s): necessidade acumulada %.2f",
                e.empresa, e.setor, acumulado.total_necessidade_capital_giro)
    return ResultadoSimulacao(
        entradas=e,
        impacto_base=projecao.resultados_anuais.get(e.ano_inicial),
        projecao=projecao,
        impacto_acumulado=acumulado,
        memoria_calculo=memorias,
        cronograma_setor=cronograma_setor,
    )
