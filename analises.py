# -*- coding: utf-8 -*-
# analises.py — Análises complementares do Split Payment
# -------------------------------------------------------------
# Sensibilidade ao percentual de implementação, elasticidade ao
# crescimento, ciclo financeiro, necessidade de capital com opções
# de financiamento e compensação de créditos.
# -------------------------------------------------------------

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from config import ANO_REFERENCIA, FATOR_MARGEM_SEGURANCA
from erros import ParametroInvalidoError
from split_core import (
    EntradasSimulacao,
    acumular,
    calcular_impacto_ano,
    projetar,
    resolver_taxa_crescimento,
)

logger = logging.getLogger(__name__)

PERCENTUAIS_SENSIBILIDADE = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]

CENARIOS_ELASTICIDADE = [
    ("Recessão", -0.02),
    ("Estagnação", 0.00),
    ("Conservador", 0.02),
    ("Moderado", 0.05),
    ("Otimista", 0.08),
    ("Acelerado", 0.12),
]
CENARIO_REFERENCIA_ELASTICIDADE = "Moderado"

FATOR_SAZONALIDADE = 1.3
TAXA_ANTECIPACAO = 0.018      # a.m.
SPREAD_BANCARIO = 0.005       # a.m. sobre a taxa de capital de giro
TAXA_DESCONTO_CREDITOS = 0.01 # a.m.

TIPOS_COMPENSACAO = ("automatica", "mensal", "trimestral")
_PRAZO_COMPENSACAO = {"automatica": 0, "mensal": 30, "trimestral": 90}


# ============================
# Sensibilidade
# ============================

@dataclass(frozen=True)
class AnaliseSensibilidade:
    ano: int
    percentual_original: float
    resultados: Dict[float, float]     # percentual -> diferença de capital de giro
    impacto_por_ponto: float
    impacto_por_10_pontos: float


def analise_sensibilidade(e: EntradasSimulacao, ano: int,
                          cronograma_setor: Optional[Mapping[int, float]] = None) -> AnaliseSensibilidade:
    original = calcular_impacto_ano(e, ano, cronograma_setor).resultado_split.percentual_implementacao

    resultados: Dict[float, float] = {}
    for perc in PERCENTUAIS_SENSIBILIDADE:
        cronograma = dict(cronograma_setor or {})
        cronograma[ano] = perc
        resultados[perc] = calcular_impacto_ano(e, ano, cronograma).diferenca_capital_giro

    por_ponto = abs(resultados[1.0] / 100)
    return AnaliseSensibilidade(
        ano=ano,
        percentual_original=original,
        resultados=resultados,
        impacto_por_ponto=por_ponto,
        impacto_por_10_pontos=por_ponto * 10,
    )


# ============================
# Elasticidade ao crescimento
# ============================

@dataclass(frozen=True)
class ResultadoCenario:
    nome: str
    taxa: float
    impacto_acumulado: float
    custo_financeiro_total: float
    impacto_medio_margem: float


@dataclass(frozen=True)
class AnaliseElasticidade:
    resultados: Dict[str, ResultadoCenario]
    elasticidades: Dict[str, float]


def analise_elasticidade(e: EntradasSimulacao, ano_inicial: int, ano_final: int,
                         cronograma_setor: Optional[Mapping[int, float]] = None) -> AnaliseElasticidade:
    """
    Projeta o período para cada taxa de CENARIOS_ELASTICIDADE e mede
    (Δ% necessidade acumulada) / (Δ% taxa) em relação ao cenário Moderado.
    """
    resultados: Dict[str, ResultadoCenario] = {}
    for nome, taxa in CENARIOS_ELASTICIDADE:
        proj = projetar(e, ano_inicial, ano_final, "personalizado", taxa, cronograma_setor)
        acc = acumular(proj.resultados_anuais, ano_inicial, ano_final)
        resultados[nome] = ResultadoCenario(
            nome=nome,
            taxa=taxa,
            impacto_acumulado=acc.total_necessidade_capital_giro,
            custo_financeiro_total=acc.custo_financeiro_total,
            impacto_medio_margem=acc.impacto_medio_margem,
        )

    ref = resultados[CENARIO_REFERENCIA_ELASTICIDADE]
    elasticidades: Dict[str, float] = {}
    for nome, taxa in CENARIOS_ELASTICIDADE:
        if nome == CENARIO_REFERENCIA_ELASTICIDADE:
            continue
        if ref.impacto_acumulado == 0 or ref.taxa == 0:
            elasticidades[nome] = 0.0
            continue
        var_impacto = (resultados[nome].impacto_acumulado - ref.impacto_acumulado) / ref.impacto_acumulado
        var_taxa = (taxa - ref.taxa) / ref.taxa
        elasticidades[nome] = var_impacto / var_taxa if var_taxa != 0 else 0.0

    return AnaliseElasticidade(resultados=resultados, elasticidades=elasticidades)


# ============================
# Ciclo financeiro
# ============================

@dataclass(frozen=True)
class ImpactoCicloFinanceiro:
    ciclo_financeiro_atual: float
    ciclo_financeiro_ajustado: float
    dias_adicionais: float
    percentual_implementacao: float
    ncg_atual: float
    ncg_ajustada: float
    diferenca_ncg: float


def impacto_ciclo_financeiro(e: EntradasSimulacao, ano: int,
                             cronograma_setor: Optional[Mapping[int, float]] = None) -> ImpactoCicloFinanceiro:
    split = calcular_impacto_ano(e, ano, cronograma_setor).resultado_split

    ciclo = e.ciclo_financeiro
    # imposto bruto retido (sem abater créditos) convertido em dias de faturamento, mês de 30 dias
    retido_bruto = split.valor_imposto_total * split.percentual_implementacao
    dias = (retido_bruto / e.faturamento) * 30 if e.faturamento > 0 else 0.0
    ajustado = ciclo + dias

    ncg_atual = (e.faturamento / 30) * ciclo
    ncg_ajustada = (e.faturamento / 30) * ajustado
    return ImpactoCicloFinanceiro(
        ciclo_financeiro_atual=ciclo,
        ciclo_financeiro_ajustado=ajustado,
        dias_adicionais=dias,
        percentual_implementacao=split.percentual_implementacao,
        ncg_atual=ncg_atual,
        ncg_ajustada=ncg_ajustada,
        diferenca_ncg=ncg_ajustada - ncg_atual,
    )


# ============================
# Necessidade de capital e financiamento
# ============================

@dataclass
class OpcaoFinanciamento:
    tipo: str
    taxa_mensal: float
    prazo: int          # meses
    carencia: int       # meses
    valor_maximo: float
    valor_aprovado: float = 0.0
    custo_mensal: float = 0.0
    custo_total: float = 0.0
    custo_anual: float = 0.0
    taxa_efetiva_anual: float = 0.0
    valor_parcela: float = 0.0


@dataclass(frozen=True)
class ImpactoResultado:
    faturamento_anual: float
    lucro_operacional_anual: float
    custo_anual: float
    percentual_da_receita: float
    percentual_do_lucro: float
    resultado_ajustado: float
    margem_ajustada: float


@dataclass(frozen=True)
class NecessidadeCapital:
    necessidade_basica: float
    fator_margem_seguranca: float
    fator_sazonalidade: float
    fator_crescimento: float
    necessidade_com_margem_seguranca: float
    necessidade_com_sazonalidade: float
    necessidade_com_crescimento: float
    necessidade_total: float
    opcoes: List[OpcaoFinanciamento] = field(default_factory=list)
    opcao_recomendada: Optional[OpcaoFinanciamento] = None
    impacto_resultado: Optional[ImpactoResultado] = None


def fator_crescimento(e: EntradasSimulacao, ano: int) -> float:
    taxa = resolver_taxa_crescimento(e.cenario, e.taxa_crescimento)
    return (1 + taxa) ** (ano - ANO_REFERENCIA)

def opcoes_financiamento(e: EntradasSimulacao, valor_necessidade: float) -> List[OpcaoFinanciamento]:
    """Opções ordenadas pelo custo total (a primeira é a recomendada)."""
    opcoes = [
        OpcaoFinanciamento("Capital de Giro", e.taxa_capital_giro, 12, 3, valor_necessidade * 1.5),
        OpcaoFinanciamento("Antecipação de Recebíveis", TAXA_ANTECIPACAO, 6, 0,
                           e.faturamento * e.perc_prazo * 3),
        OpcaoFinanciamento("Empréstimo Bancário", e.taxa_capital_giro + SPREAD_BANCARIO, 24, 6,
                           valor_necessidade * 2),
    ]
    for op in opcoes:
        op.valor_aprovado = min(valor_necessidade, op.valor_maximo)
        op.custo_mensal = op.valor_aprovado * op.taxa_mensal
        op.custo_total = op.custo_mensal * (op.prazo - op.carencia)
        op.custo_anual = op.custo_mensal * 12
        op.taxa_efetiva_anual = (1 + op.taxa_mensal) ** 12 - 1
        op.valor_parcela = op.valor_aprovado / op.prazo + op.custo_mensal
    opcoes.sort(key=lambda op: op.custo_total)
    return opcoes

def impacto_resultado(e: EntradasSimulacao, custo_anual: float) -> ImpactoResultado:
    fat_anual = e.faturamento * 12
    lucro = fat_anual * e.margem
    ajustado = lucro - custo_anual
    return ImpactoResultado(
        faturamento_anual=fat_anual,
        lucro_operacional_anual=lucro,
        custo_anual=custo_anual,
        percentual_da_receita=(custo_anual / fat_anual) * 100 if fat_anual > 0 else 0.0,
        percentual_do_lucro=(custo_anual / lucro) * 100 if lucro > 0 else 0.0,
        resultado_ajustado=ajustado,
        margem_ajustada=ajustado / fat_anual if fat_anual > 0 else 0.0,
    )

def necessidade_capital(e: EntradasSimulacao, ano: int = ANO_REFERENCIA,
                        cronograma_setor: Optional[Mapping[int, float]] = None) -> NecessidadeCapital:
    impacto = calcular_impacto_ano(e, ano, cronograma_setor)
    basica = abs(impacto.diferenca_capital_giro)
    f_cresc = fator_crescimento(e, ano)

    total = basica * FATOR_MARGEM_SEGURANCA * FATOR_SAZONALIDADE * f_cresc
    opcoes = opcoes_financiamento(e, total)
    recomendada = opcoes[0]

    logger.debug("Necessidade de capital %s: basica=%.2f total=%.2f recomendada=%s",
                 ano, basica, total, recomendada.tipo)
    return NecessidadeCapital(
        necessidade_basica=basica,
        fator_margem_seguranca=FATOR_MARGEM_SEGURANCA,
        fator_sazonalidade=FATOR_SAZONALIDADE,
        fator_crescimento=f_cresc,
        necessidade_com_margem_seguranca=basica * FATOR_MARGEM_SEGURANCA,
        necessidade_com_sazonalidade=basica * FATOR_SAZONALIDADE,
        necessidade_com_crescimento=basica * f_cresc,
        necessidade_total=total,
        opcoes=opcoes,
        opcao_recomendada=recomendada,
        impacto_resultado=impacto_resultado(e, recomendada.custo_anual),
    )


# ============================
# Compensação de créditos
# ============================

@dataclass(frozen=True)
class RetencaoEfetiva:
    debito_tributario: float
    creditos_disponiveis: float
    retencao_efetiva: float
    creditos_utilizados: float
    creditos_remanescentes: float
    tipo_compensacao: str


@dataclass(frozen=True)
class ImpactoCompensacao:
    impacto_imediato: float
    beneficio_futuro: float
    prazo_recebimento_beneficio: int
    impacto_liquido_descontado: float
    tipo_compensacao: str


def calcular_retencao_efetiva(debito: float, creditos: float, tipo: str = "automatica") -> RetencaoEfetiva:
    """
    automatica: créditos abatidos na própria retenção.
    mensal/trimestral: retenção integral, créditos devolvidos depois.
    """
    if tipo not in TIPOS_COMPENSACAO:
        raise ParametroInvalidoError("tipo_compensacao", tipo)

    utilizados = min(creditos, debito)
    retencao = debito - utilizados if tipo == "automatica" else debito
    return RetencaoEfetiva(
        debito_tributario=debito,
        creditos_disponiveis=creditos,
        retencao_efetiva=retencao,
        creditos_utilizados=utilizados,
        creditos_remanescentes=max(0.0, creditos - utilizados),
        tipo_compensacao=tipo,
    )

def impacto_fluxo_caixa(retencao: RetencaoEfetiva) -> ImpactoCompensacao:
    prazo = _PRAZO_COMPENSACAO[retencao.tipo_compensacao]
    beneficio = 0.0 if retencao.tipo_compensacao == "automatica" else retencao.creditos_utilizados
    descontado = beneficio / (1 + TAXA_DESCONTO_CREDITOS) ** (prazo / 30)
    return ImpactoCompensacao(
        impacto_imediato=retencao.retencao_efetiva,
        beneficio_futuro=beneficio,
        prazo_recebimento_beneficio=prazo,
        impacto_liquido_descontado=retencao.retencao_efetiva - descontado,
        tipo_compensacao=retencao.tipo_compensacao,
    )
