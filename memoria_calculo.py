# -*- coding: utf-8 -*-
# memoria_calculo.py — Memória de cálculo em texto
# -------------------------------------------------------------
# Renderiza, para cada ano, o passo a passo (expressão = resultado)
# a partir dos mesmos ImpactoAnual produzidos por projetar(),
# de modo que o texto sempre confere com os números exibidos.
# -------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from config import FATOR_MARGEM_SEGURANCA, PRAZO_RECOLHIMENTO
from formatacao import format_brl, format_num_br, format_pct_br
from split_core import (
    EntradasSimulacao,
    ImpactoAcumulado,
    ImpactoAnual,
    ProjecaoTemporal,
    projetar,
)

logger = logging.getLogger(__name__)


def _titulo(texto: str) -> str:
    return f"=== {texto} ==="

def gerar_memoria_ano(e: EntradasSimulacao, impacto: ImpactoAnual) -> str:
    atual = impacto.resultado_atual
    split = impacto.resultado_split
    fat = impacto.faturamento
    ano = impacto.ano

    linhas: List[str] = [
        _titulo(f"MEMÓRIA DE CÁLCULO - ANO {ano}"),
        "",
        _titulo("PARÂMETROS BÁSICOS"),
        f"Empresa: {e.empresa}",
        f"Setor: {e.setor} | Regime: {e.regime}",
        f"Faturamento Mensal: {format_brl(fat)}",
        f"Alíquota Efetiva: {format_pct_br(e.aliquota)}",
        f"Créditos Tributários: {format_brl(atual.creditos)}",
        f"Prazo Médio de Recebimento: {e.pmr} dias",
        f"Prazo Médio de Pagamento: {e.pmp} dias",
        f"Prazo Médio de Estoque: {e.pme} dias",
        f"Ciclo Financeiro: {e.pmr} + {e.pme} - {e.pmp} = {e.ciclo_financeiro} dias",
        f"Vendas à Vista: {format_pct_br(e.perc_vista)} | Vendas a Prazo: {format_pct_br(e.perc_prazo)}",
        "",
        _titulo("CÁLCULO DO IMPACTO NO FLUXO DE CAIXA"),
        f"Valor do Imposto Mensal: {format_brl(fat)} × {format_pct_br(e.aliquota)} = "
        f"{format_brl(atual.valor_imposto_total)}",
        f"Imposto Líquido: max(0, {format_brl(atual.valor_imposto_total)} - {format_brl(atual.creditos)}) = "
        f"{format_brl(atual.valor_imposto_liquido)}",
        f"Percentual de Implementação ({ano}): {format_pct_br(split.percentual_implementacao)}",
        f"Imposto Retido (Split): {format_brl(split.valor_imposto_liquido)} × "
        f"{format_pct_br(split.percentual_implementacao)} = {format_brl(split.valor_imposto_split)}",
        f"Imposto Recolhido no Prazo Normal: {format_brl(split.valor_imposto_liquido)} - "
        f"{format_brl(split.valor_imposto_split)} = {format_brl(split.valor_imposto_normal)}",
        f"Recebimento Líquido: {format_brl(fat)} - {format_brl(split.valor_imposto_split)} = "
        f"{format_brl(split.recebimento_liquido)}",
        "",
        _titulo("ANÁLISE DO CAPITAL DE GIRO"),
        f"Capital de Giro (regime atual): {format_brl(atual.capital_giro_disponivel)} "
        f"por {atual.dias_capital_disponivel} dias ({e.pmr} + {PRAZO_RECOLHIMENTO})",
        f"Capital de Giro (Split Payment): {format_brl(split.capital_giro_disponivel)}",
        f"Diferença: {format_brl(split.capital_giro_disponivel)} - {format_brl(atual.capital_giro_disponivel)} = "
        f"{format_brl(impacto.diferenca_capital_giro)} ({format_num_br(impacto.percentual_impacto)}%)",
        f"Tempo Médio do Imposto em Giro: {format_num_br(atual.tempo_medio_capital_giro)} dias",
        f"Benefício em Dias de Faturamento: {format_num_br(atual.beneficio_dias_capital_giro)} → "
        f"{format_num_br(split.beneficio_dias_capital_giro)} "
        f"(perda de {format_num_br(impacto.impacto_dias_faturamento)} dias)",
        f"Impacto em Dias de Recebimento: {e.pmr} × {format_pct_br(impacto.impacto_relativo)} = "
        f"{format_num_br(impacto.impacto_dias_recebimento)} dias",
        f"Necessidade Adicional de Capital de Giro: |{format_brl(impacto.diferenca_capital_giro)}| × {format_num_br(FATOR_MARGEM_SEGURANCA, 1)} = "
        f"{format_brl(impacto.necessidade_adicional_capital_giro)}",
        "",
        _titulo("IMPACTO NA RENTABILIDADE"),
        f"Margem Operacional Original: {format_pct_br(impacto.margem_operacional_original)}",
        f"Custo Financeiro Mensal: {format_brl(abs(impacto.diferenca_capital_giro))} × "
        f"{format_pct_br(e.taxa_capital_giro)} = {format_brl(impacto.custo_mensal_capital_giro)}",
        f"Custo Financeiro Anual: {format_brl(impacto.custo_mensal_capital_giro)} × 12 = "
        f"{format_brl(impacto.custo_anual_capital_giro)}",
        f"Impacto na Margem: {format_brl(impacto.custo_mensal_capital_giro)} ÷ {format_brl(fat)} × 100 = "
        f"{format_num_br(impacto.impacto_margem, 4)} p.p.",
        f"Margem Ajustada: {format_pct_br(impacto.margem_operacional_original)} - "
        f"{format_num_br(impacto.impacto_margem, 4)} p.p. = {format_pct_br(impacto.margem_operacional_ajustada)}",
        f"Redução Relativa da Margem: {format_num_br(impacto.percentual_reducao_margem)}%",
        "",
        _titulo("CONCLUSÃO"),
    ]

    if impacto.diferenca_capital_giro < 0:
        linhas.append(
            f"Em {ano}, o Split Payment reduz o capital de giro em "
            f"{format_brl(abs(impacto.diferenca_capital_giro))} por mês, exigindo "
            f"{format_brl(impacto.necessidade_adicional_capital_giro)} de capital adicional "
            f"e reduzindo a margem em {format_num_br(impacto.impacto_margem, 4)} p.p."
        )
    else:
        linhas.append(f"Em {ano}, não há retenção na liquidação: o capital de giro permanece inalterado.")

    return "\n".join(linhas) + "\n"

def gerar_memoria_calculo(e: EntradasSimulacao, ano_inicial: int, ano_final: int,
                          cronograma_setor: Optional[Mapping[int, float]] = None) -> Dict[int, str]:
    """Memória de cálculo por ano, a partir da projeção do cenário de `e`."""
    projecao = projetar(e, ano_inicial, ano_final, e.cenario, e.taxa_crescimento, cronograma_setor)
    return memorias_da_projecao(e, projecao)

def memorias_da_projecao(e: EntradasSimulacao, projecao: ProjecaoTemporal) -> Dict[int, str]:
    memorias = {ano: gerar_memoria_ano(e, impacto) for ano, impacto in projecao.resultados_anuais.items()}
    logger.debug("Memória de cálculo gerada para %d ano(s)", len(memorias))
    return memorias

def gerar_secao_projecao(projecao: ProjecaoTemporal, acumulado: ImpactoAcumulado) -> str:
    linhas = [
        _titulo("PROJEÇÃO TEMPORAL"),
        f"Período: {projecao.ano_inicial} a {projecao.ano_final} | Cenário: {projecao.cenario} "
        f"({format_pct_br(projecao.taxa_crescimento)} a.a.)",
        "",
        f"{'Ano':<6}{'Implementação':>15}{'Faturamento':>22}{'Diferença CG':>22}{'Necessidade':>22}",
    ]
    for ano, imp in projecao.resultados_anuais.items():
        linhas.append(
            f"{ano:<6}{format_pct_br(imp.resultado_split.percentual_implementacao):>15}"
            f"{format_brl(imp.faturamento):>22}{format_brl(imp.diferenca_capital_giro):>22}"
            f"{format_brl(imp.necessidade_adicional_capital_giro):>22}"
        )
    linhas += [
        "",
        _titulo("IMPACTO ACUMULADO"),
        f"Necessidade Total de Capital de Giro: {format_brl(acumulado.total_necessidade_capital_giro)}",
        f"Custo Financeiro Total: {format_brl(acumulado.custo_financeiro_total)}",
        f"Impacto Médio na Margem: {format_num_br(acumulado.impacto_medio_margem, 4)} p.p.",
    ]
    return "\n".join(linhas) + "\n"
