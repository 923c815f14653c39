# -*- coding: utf-8 -*-
# split_core.py — Motor de cálculo do impacto do Split Payment
# -------------------------------------------------------------
# Compara o capital de giro no regime atual (imposto recolhido no
# dia 25 do mês seguinte) com o regime de Split Payment (fração do
# imposto retida na liquidação), ano a ano, com crescimento composto
# do faturamento e acumulado do período.
# Funções puras: nenhum estado entre chamadas.
# -------------------------------------------------------------

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Mapping, Optional

from config import (
    ALIASES_CENARIO,
    CENARIO_PADRAO,
    CENARIO_PERSONALIZADO,
    FATOR_MARGEM_SEGURANCA,
    PRAZO_RECOLHIMENTO,
    TAXA_CAPITAL_GIRO_PADRAO,
    TAXAS_CENARIO,
)
from cronograma import percentual_implementacao
from erros import CenarioInvalidoError, InvarianteCapitalError

logger = logging.getLogger(__name__)


# ============================
# Modelos de dados
# ============================

@dataclass(frozen=True)
class EntradasSimulacao:
    empresa: str
    setor: str
    regime: str
    faturamento: float          # faturamento mensal (R$)
    margem: float               # margem operacional (fração)
    pmr: int                    # prazo médio de recebimento (dias)
    pmp: int                    # prazo médio de pagamento (dias)
    pme: int                    # prazo médio de estoque (dias)
    perc_vista: float
    perc_prazo: float
    aliquota: float             # alíquota efetiva (fração)
    data_inicial: date
    data_final: date
    creditos: float = 0.0
    cenario: str = CENARIO_PADRAO
    taxa_crescimento: Optional[float] = None   # só para "personalizado"
    taxa_capital_giro: float = TAXA_CAPITAL_GIRO_PADRAO

    @property
    def ano_inicial(self) -> int:
        return self.data_inicial.year

    @property
    def ano_final(self) -> int:
        return self.data_final.year

    @property
    def ciclo_financeiro(self) -> int:
        return self.pmr + self.pme - self.pmp


@dataclass(frozen=True)
class ResultadoAtual:
    faturamento: float
    valor_imposto_total: float
    creditos: float
    valor_imposto_liquido: float
    capital_giro_disponivel: float
    dias_capital_disponivel: int
    recebimento_vista: float
    recebimento_prazo: float
    tempo_medio_capital_giro: float
    beneficio_dias_capital_giro: float
    fluxo_caixa_liquido: float


@dataclass(frozen=True)
class ResultadoSplitPayment:
    faturamento: float
    percentual_implementacao: float
    valor_imposto_total: float
    valor_imposto_liquido: float
    valor_imposto_split: float      # retido na liquidação
    valor_imposto_normal: float     # recolhido no prazo normal
    recebimento_liquido: float
    capital_giro_disponivel: float
    recebimento_vista: float
    recebimento_prazo: float
    tempo_medio_capital_giro: float
    beneficio_dias_capital_giro: float


@dataclass(frozen=True)
class ImpactoAnual:
    ano: int
    faturamento: float
    resultado_atual: ResultadoAtual
    resultado_split: ResultadoSplitPayment
    diferenca_capital_giro: float
    percentual_impacto: float
    necessidade_adicional_capital_giro: float
    impacto_dias_faturamento: float
    impacto_relativo: float
    impacto_dias_recebimento: float
    custo_mensal_capital_giro: float
    custo_anual_capital_giro: float
    impacto_margem: float           # pontos percentuais
    margem_operacional_original: float
    margem_operacional_ajustada: float
    percentual_reducao_margem: float


@dataclass(frozen=True)
class ProjecaoTemporal:
    ano_inicial: int
    ano_final: int
    cenario: str
    taxa_crescimento: float
    resultados_anuais: Dict[int, ImpactoAnual] = field(default_factory=dict)


@dataclass(frozen=True)
class ImpactoAcumulado:
    total_necessidade_capital_giro: float
    custo_financeiro_total: float
    impacto_medio_margem: float


# ============================
# Regime atual x Split Payment
# ============================

def tempo_medio_capital_giro(pmr: float, prazo_recolhimento: float,
                             perc_vista: float, perc_prazo: float) -> float:
    """
    Tempo médio (dias) em que o imposto fica em giro:
      vendas à vista  -> prazo de recolhimento
      vendas a prazo  -> max(0, prazo de recolhimento - PMR)
    """
    tempo_vista = prazo_recolhimento
    tempo_prazo = max(0.0, prazo_recolhimento - pmr)
    return perc_vista * tempo_vista + perc_prazo * tempo_prazo

def _imposto(e: EntradasSimulacao):
    total = e.faturamento * e.aliquota
    liquido = max(0.0, total - (e.creditos or 0.0))
    return total, liquido

def calcular_fluxo_atual(e: EntradasSimulacao) -> ResultadoAtual:
    total, liquido = _imposto(e)
    capital = liquido
    tempo = tempo_medio_capital_giro(e.pmr, PRAZO_RECOLHIMENTO, e.perc_vista, e.perc_prazo)
    beneficio = (capital / e.faturamento) * tempo if e.faturamento > 0 else 0.0
    return ResultadoAtual(
        faturamento=e.faturamento,
        valor_imposto_total=total,
        creditos=e.creditos,
        valor_imposto_liquido=liquido,
        capital_giro_disponivel=capital,
        dias_capital_disponivel=e.pmr + PRAZO_RECOLHIMENTO,
        recebimento_vista=e.faturamento * e.perc_vista,
        recebimento_prazo=e.faturamento * e.perc_prazo,
        tempo_medio_capital_giro=tempo,
        beneficio_dias_capital_giro=beneficio,
        fluxo_caixa_liquido=e.faturamento - liquido,
    )

def calcular_fluxo_split_payment(e: EntradasSimulacao, ano: int,
                                 cronograma_setor: Optional[Mapping[int, float]] = None) -> ResultadoSplitPayment:
    percentual = percentual_implementacao(ano, cronograma_setor)
    total, liquido = _imposto(e)

    retido = liquido * percentual
    normal = liquido - retido

    # retenção distribuída proporcionalmente ao mix de vendas
    mix = e.perc_vista + e.perc_prazo
    peso_vista = e.perc_vista / mix if mix > 0 else 0.0
    peso_prazo = e.perc_prazo / mix if mix > 0 else 0.0
    rec_vista = e.faturamento * e.perc_vista - retido * peso_vista
    rec_prazo = e.faturamento * e.perc_prazo - retido * peso_prazo

    tempo = tempo_medio_capital_giro(e.pmr, PRAZO_RECOLHIMENTO, e.perc_vista, e.perc_prazo)
    beneficio = (normal / e.faturamento) * tempo if e.faturamento > 0 else 0.0

    return ResultadoSplitPayment(
        faturamento=e.faturamento,
        percentual_implementacao=percentual,
        valor_imposto_total=total,
        valor_imposto_liquido=liquido,
        valor_imposto_split=retido,
        valor_imposto_normal=normal,
        recebimento_liquido=e.faturamento - retido,
        capital_giro_disponivel=normal,
        recebimento_vista=rec_vista,
        recebimento_prazo=rec_prazo,
        tempo_medio_capital_giro=tempo,
        beneficio_dias_capital_giro=beneficio,
    )

def calcular_impacto_ano(e: EntradasSimulacao, ano: int,
                         cronograma_setor: Optional[Mapping[int, float]] = None) -> ImpactoAnual:
    atual = calcular_fluxo_atual(e)
    split = calcular_fluxo_split_payment(e, ano, cronograma_setor)

    diferenca = split.capital_giro_disponivel - atual.capital_giro_disponivel
    if diferenca > 0:
        raise InvarianteCapitalError(ano, diferenca)

    base = atual.capital_giro_disponivel
    percentual_impacto = (diferenca / base) * 100 if base else 0.0

    custo_mensal = abs(diferenca) * e.taxa_capital_giro
    impacto_margem = (custo_mensal / e.faturamento) * 100 if e.faturamento > 0 else 0.0
    reducao_margem = (impacto_margem / (e.margem * 100)) * 100 if e.margem else 0.0

    impacto_relativo = e.aliquota * split.percentual_implementacao

    impacto = ImpactoAnual(
        ano=ano,
        faturamento=e.faturamento,
        resultado_atual=atual,
        resultado_split=split,
        diferenca_capital_giro=diferenca,
        percentual_impacto=percentual_impacto,
        necessidade_adicional_capital_giro=abs(diferenca) * FATOR_MARGEM_SEGURANCA,
        impacto_dias_faturamento=atual.beneficio_dias_capital_giro - split.beneficio_dias_capital_giro,
        impacto_relativo=impacto_relativo,
        impacto_dias_recebimento=e.pmr * impacto_relativo,
        custo_mensal_capital_giro=custo_mensal,
        custo_anual_capital_giro=custo_mensal * 12,
        impacto_margem=impacto_margem,
        margem_operacional_original=e.margem,
        margem_operacional_ajustada=e.margem - impacto_margem / 100,
        percentual_reducao_margem=reducao_margem,
    )
    logger.debug("Impacto %s: faturamento=%.2f retido=%.2f diferenca=%.2f",
                 ano, e.faturamento, split.valor_imposto_split, diferenca)
    return impacto


# ============================
# Projeção temporal
# ============================

def normalizar_cenario(cenario: Optional[str]) -> str:
    nome = (cenario or CENARIO_PADRAO).strip().lower()
    return ALIASES_CENARIO.get(nome, nome)

def resolver_taxa_crescimento(cenario: Optional[str], taxa_personalizada: Optional[float] = None) -> float:
    nome = normalizar_cenario(cenario)
    if nome == CENARIO_PERSONALIZADO:
        if taxa_personalizada is None:
            raise CenarioInvalidoError(nome, "taxa de crescimento personalizada não informada")
        return float(taxa_personalizada)
    if nome not in TAXAS_CENARIO:
        raise CenarioInvalidoError(nome, "cenário desconhecido")
    return TAXAS_CENARIO[nome]

def projetar(e: EntradasSimulacao, ano_inicial: int, ano_final: int,
             cenario: Optional[str] = CENARIO_PADRAO, taxa_personalizada: Optional[float] = None,
             cronograma_setor: Optional[Mapping[int, float]] = None) -> ProjecaoTemporal:
    taxa = resolver_taxa_crescimento(cenario, taxa_personalizada)

    resultados: Dict[int, ImpactoAnual] = {}
    faturamento_atual = e.faturamento
    for ano in range(ano_inicial, ano_final + 1):
        dados_ano = replace(e, faturamento=faturamento_atual)
        resultados[ano] = calcular_impacto_ano(dados_ano, ano, cronograma_setor)
        faturamento_atual = faturamento_atual * (1 + taxa)

    logger.info("Projeção %s-%s (%s, %.2f%% a.a.): %d ano(s)",
                ano_inicial, ano_final, normalizar_cenario(cenario), taxa * 100, len(resultados))
    return ProjecaoTemporal(
        ano_inicial=ano_inicial,
        ano_final=ano_final,
        cenario=normalizar_cenario(cenario),
        taxa_crescimento=taxa,
        resultados_anuais=resultados,
    )


# ============================
# Acumulado
# ============================

def acumular(resultados_anuais: Mapping[int, ImpactoAnual], ano_inicial: int, ano_final: int) -> ImpactoAcumulado:
    num_anos = ano_final - ano_inicial + 1
    if num_anos <= 0:
        return ImpactoAcumulado(0.0, 0.0, 0.0)

    total_necessidade = 0.0
    custo_total = 0.0
    soma_margem = 0.0
    for ano in range(ano_inicial, ano_final + 1):
        impacto = resultados_anuais.get(ano)
        if impacto is None:
            continue
        total_necessidade += impacto.necessidade_adicional_capital_giro
        custo_total += impacto.custo_mensal_capital_giro * 12
        soma_margem += impacto.impacto_margem

    return ImpactoAcumulado(
        total_necessidade_capital_giro=total_necessidade,
        custo_financeiro_total=custo_total,
        impacto_medio_margem=soma_margem / num_anos,
    )
