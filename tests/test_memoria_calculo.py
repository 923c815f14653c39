"""Tests for the calculation trace."""
from dataclasses import replace

import pytest

from formatacao import format_brl
from memoria_calculo import gerar_memoria_ano, gerar_memoria_calculo, gerar_secao_projecao
from split_core import acumular, calcular_impacto_ano, projetar

SECOES = [
    "PARÂMETROS BÁSICOS",
    "CÁLCULO DO IMPACTO NO FLUXO DE CAIXA",
    "ANÁLISE DO CAPITAL DE GIRO",
    "IMPACTO NA RENTABILIDADE",
    "CONCLUSÃO",
]


def test_trace_has_all_sections_in_order(entradas_base):
    texto = gerar_memoria_ano(entradas_base, calcular_impacto_ano(entradas_base, 2026))
    posicoes = [texto.index(s) for s in SECOES]
    assert posicoes == sorted(posicoes)
    assert texto.startswith("=== MEMÓRIA DE CÁLCULO - ANO 2026 ===")


def test_trace_shows_engine_figures(entradas_base):
    imp = calcular_impacto_ano(entradas_base, 2026)
    texto = gerar_memoria_ano(entradas_base, imp)

    assert "R$ 100.000,00 × 26,50% = R$ 26.500,00" in texto
    assert "Percentual de Implementação (2026): 10,00%" in texto
    assert f"= {format_brl(2650.0)}" in texto
    assert format_brl(imp.necessidade_adicional_capital_giro) in texto
    assert "Ciclo Financeiro: 30 + 30 - 30 = 30 dias" in texto


def test_trace_per_year_matches_projection(entradas_base):
    memorias = gerar_memoria_calculo(entradas_base, 2026, 2027)
    proj = projetar(entradas_base, 2026, 2027, entradas_base.cenario)

    assert list(memorias) == [2026, 2027]
    imp_2027 = proj.resultados_anuais[2027]
    assert format_brl(imp_2027.faturamento) in memorias[2027]
    assert format_brl(imp_2027.resultado_split.valor_imposto_split) in memorias[2027]
    assert memorias[2027] == gerar_memoria_ano(entradas_base, imp_2027)


def test_trace_empty_range(entradas_base):
    assert gerar_memoria_calculo(entradas_base, 2027, 2026) == {}


def test_conclusion_without_withholding(entradas_base):
    texto = gerar_memoria_ano(entradas_base, calcular_impacto_ano(entradas_base, 2025))
    assert "não há retenção" in texto


def test_trace_respects_custom_scenario(entradas_base):
    e = replace(entradas_base, cenario="personalizado", taxa_crescimento=0.10)
    memorias = gerar_memoria_calculo(e, 2026, 2027)
    assert format_brl(110000.0) in memorias[2027]


def test_projection_section(entradas_base):
    proj = projetar(entradas_base, 2026, 2027)
    acc = acumular(proj.resultados_anuais, 2026, 2027)
    texto = gerar_secao_projecao(proj, acc)

    assert "PROJEÇÃO TEMPORAL" in texto
    assert "IMPACTO ACUMULADO" in texto
    assert format_brl(acc.total_necessidade_capital_giro) in texto
    assert texto.count("\n2026") == 1 and texto.count("\n2027") == 1


def test_margin_line_shows_percentage_points(entradas_base):
    imp = calcular_impacto_ano(entradas_base, 2026)
    texto = gerar_memoria_ano(entradas_base, imp)
    assert f"{format_brl(imp.custo_mensal_capital_giro)} ÷ R$ 100.000,00 × 100 = " in texto
    assert imp.impacto_margem == pytest.approx(imp.custo_mensal_capital_giro / 100000.0 * 100)
