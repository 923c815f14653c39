"""Tests for the regime calculator, projection and accumulation."""
from dataclasses import replace

import pytest

from erros import CenarioInvalidoError, InvarianteCapitalError
from split_core import (
    acumular,
    calcular_fluxo_atual,
    calcular_impacto_ano,
    projetar,
    resolver_taxa_crescimento,
    tempo_medio_capital_giro,
)


def test_reference_example_2026(entradas_base):
    imp = calcular_impacto_ano(entradas_base, 2026)

    assert imp.resultado_atual.valor_imposto_total == pytest.approx(26500.0)
    assert imp.resultado_atual.capital_giro_disponivel == pytest.approx(26500.0)
    assert imp.resultado_atual.dias_capital_disponivel == 55
    assert imp.resultado_split.valor_imposto_split == pytest.approx(2650.0)
    assert imp.resultado_split.capital_giro_disponivel == pytest.approx(23850.0)
    assert imp.resultado_split.recebimento_liquido == pytest.approx(97350.0)
    assert imp.diferenca_capital_giro == pytest.approx(-2650.0)
    assert imp.percentual_impacto == pytest.approx(-10.0)
    assert imp.necessidade_adicional_capital_giro == pytest.approx(3180.0)


def test_profitability_fields(entradas_base):
    imp = calcular_impacto_ano(entradas_base, 2026)

    assert imp.custo_mensal_capital_giro == pytest.approx(2650.0 * 0.021)
    assert imp.custo_anual_capital_giro == pytest.approx(2650.0 * 0.021 * 12)
    assert imp.impacto_margem == pytest.approx(2650.0 * 0.021 / 100000.0 * 100)
    assert imp.margem_operacional_ajustada == pytest.approx(0.15 - imp.impacto_margem / 100)
    assert imp.impacto_relativo == pytest.approx(0.265 * 0.10)
    assert imp.impacto_dias_recebimento == pytest.approx(30 * 0.265 * 0.10)


def test_receipts_split_by_sales_mix(entradas_base):
    imp = calcular_impacto_ano(entradas_base, 2026)
    split = imp.resultado_split
    assert split.recebimento_vista == pytest.approx(30000.0 - 2650.0 * 0.3)
    assert split.recebimento_prazo == pytest.approx(70000.0 - 2650.0 * 0.7)
    assert split.recebimento_vista + split.recebimento_prazo == pytest.approx(split.recebimento_liquido)


def test_float_time_weighted_by_mix():
    assert tempo_medio_capital_giro(30, 25, 0.3, 0.7) == pytest.approx(7.5)
    assert tempo_medio_capital_giro(10, 25, 0.5, 0.5) == pytest.approx(12.5 + 7.5)


def test_credits_reduce_net_tax(entradas_base):
    com_creditos = replace(entradas_base, creditos=6500.0)
    atual = calcular_fluxo_atual(com_creditos)
    assert atual.valor_imposto_liquido == pytest.approx(20000.0)

    sem_imposto = replace(entradas_base, creditos=50000.0)
    imp = calcular_impacto_ano(sem_imposto, 2026)
    assert imp.resultado_atual.valor_imposto_liquido == 0.0
    assert imp.percentual_impacto == 0.0
    assert imp.diferenca_capital_giro == 0.0


def test_zero_fraction_gives_no_impact(entradas_base):
    imp = calcular_impacto_ano(entradas_base, 2025)
    assert imp.resultado_split.percentual_implementacao == 0.0
    assert imp.diferenca_capital_giro == 0.0
    assert imp.necessidade_adicional_capital_giro == 0.0


def test_positive_delta_is_rejected(entradas_base, monkeypatch):
    import split_core

    monkeypatch.setattr(split_core, "percentual_implementacao", lambda ano, crono=None: -0.1)
    with pytest.raises(InvarianteCapitalError) as exc:
        calcular_impacto_ano(entradas_base, 2026)
    assert exc.value.code == "CALC001"


def test_calculation_is_idempotent(entradas_base):
    assert calcular_impacto_ano(entradas_base, 2028) == calcular_impacto_ano(entradas_base, 2028)


@pytest.mark.parametrize(
    "cenario, esperado",
    [("conservador", 0.02), ("moderado", 0.05), ("otimista", 0.08), ("moderate", 0.05), (None, 0.05)],
)
def test_growth_rates(cenario, esperado):
    assert resolver_taxa_crescimento(cenario) == pytest.approx(esperado)


def test_custom_growth_rate():
    assert resolver_taxa_crescimento("personalizado", 0.1) == pytest.approx(0.1)
    assert resolver_taxa_crescimento("custom", -0.02) == pytest.approx(-0.02)
    with pytest.raises(CenarioInvalidoError):
        resolver_taxa_crescimento("personalizado")


def test_unknown_scenario_raises():
    with pytest.raises(CenarioInvalidoError) as exc:
        resolver_taxa_crescimento("hiperinflacao")
    assert exc.value.to_dict()["error"]["code"] == "CFG001"


def test_projection_second_year(entradas_base):
    proj = projetar(entradas_base, 2026, 2027, "moderado")
    imp = proj.resultados_anuais[2027]

    assert list(proj.resultados_anuais) == [2026, 2027]
    assert imp.faturamento == pytest.approx(105000.0)
    assert imp.resultado_split.percentual_implementacao == pytest.approx(0.25)
    assert imp.resultado_atual.valor_imposto_total == pytest.approx(27825.0)
    assert imp.resultado_split.valor_imposto_split == pytest.approx(6956.25)


@pytest.mark.parametrize("cenario, taxa", [("conservador", 0.02), ("moderado", 0.05), ("otimista", 0.08)])
def test_projection_compounds_revenue(entradas_base, cenario, taxa):
    proj = projetar(entradas_base, 2026, 2033, cenario)
    assert list(proj.resultados_anuais) == list(range(2026, 2034))
    for k, ano in enumerate(range(2026, 2034)):
        assert proj.resultados_anuais[ano].faturamento == pytest.approx(100000.0 * (1 + taxa) ** k)


def test_projection_does_not_mutate_inputs(entradas_base):
    projetar(entradas_base, 2026, 2030, "otimista")
    assert entradas_base.faturamento == 100000.0


def test_projection_single_and_empty_ranges(entradas_base):
    unico = projetar(entradas_base, 2026, 2026)
    assert unico.resultados_anuais[2026] == calcular_impacto_ano(entradas_base, 2026)

    vazio = projetar(entradas_base, 2027, 2026)
    assert vazio.resultados_anuais == {}


def test_projection_uses_sector_schedule(entradas_base):
    proj = projetar(entradas_base, 2026, 2027, cronograma_setor={2026: 0.05})
    assert proj.resultados_anuais[2026].resultado_split.percentual_implementacao == pytest.approx(0.05)
    assert proj.resultados_anuais[2027].resultado_split.percentual_implementacao == pytest.approx(0.25)


def test_accumulation(entradas_base):
    proj = projetar(entradas_base, 2026, 2027, "moderado")
    acc = acumular(proj.resultados_anuais, 2026, 2027)
    anos = proj.resultados_anuais.values()

    assert acc.total_necessidade_capital_giro == pytest.approx(sum(i.necessidade_adicional_capital_giro for i in anos))
    assert acc.total_necessidade_capital_giro == pytest.approx(3180.0 + 6956.25 * 1.2)
    assert acc.custo_financeiro_total == pytest.approx(sum(i.custo_mensal_capital_giro * 12 for i in anos))
    assert acc.impacto_medio_margem == pytest.approx(sum(i.impacto_margem for i in anos) / 2)


def test_accumulation_empty_range_is_zero():
    acc = acumular({}, 2027, 2026)
    assert acc.total_necessidade_capital_giro == 0.0
    assert acc.custo_financeiro_total == 0.0
    assert acc.impacto_medio_margem == 0.0
