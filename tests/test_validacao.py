"""Tests for form validation."""
from datetime import date

import pytest

from erros import EntradaInvalidaError
from validacao import validar_entradas


def test_valid_form_builds_inputs(dados_formulario):
    e = validar_entradas(dados_formulario)

    assert e.faturamento == pytest.approx(100000.0)
    assert e.aliquota == pytest.approx(0.265)
    assert e.creditos == 0.0
    assert e.ano_inicial == 2026 and e.ano_final == 2033
    assert e.cenario == "moderado"
    assert e.ciclo_financeiro == 30


def test_percent_strings_and_iso_dates(dados_formulario):
    dados = dict(dados_formulario, aliquota="26,5%", margem="15", perc_vista="30%", perc_prazo=None,
                 data_inicial="2026-01-01", data_final="31/12/2028")
    e = validar_entradas(dados)

    assert e.aliquota == pytest.approx(0.265)
    assert e.margem == pytest.approx(0.15)
    assert e.perc_prazo == pytest.approx(0.7)
    assert e.data_final == date(2028, 12, 31)


def test_english_scenario_alias(dados_formulario):
    e = validar_entradas(dict(dados_formulario, cenario="Optimistic"))
    assert e.cenario == "otimista"


def test_collects_every_field_error(dados_formulario):
    dados = dict(dados_formulario, empresa="  ", faturamento="abc", margem=1.5 * 100, pmr=-1,
                 perc_vista=0.5, perc_prazo=0.6, creditos="-10")
    with pytest.raises(EntradaInvalidaError) as exc:
        validar_entradas(dados)

    erros = exc.value.erros
    assert {"empresa", "faturamento", "margem", "pmr", "perc_vista", "creditos"} <= set(erros)
    assert exc.value.code == "VAL001"
    assert exc.value.to_dict()["error"]["details"]["campos"] == erros


def test_non_positive_revenue_and_rate(dados_formulario):
    with pytest.raises(EntradaInvalidaError) as exc:
        validar_entradas(dict(dados_formulario, faturamento=0, aliquota=0))
    assert set(exc.value.erros) == {"faturamento", "aliquota"}


def test_dates_out_of_order(dados_formulario):
    with pytest.raises(EntradaInvalidaError) as exc:
        validar_entradas(dict(dados_formulario, data_inicial=date(2030, 1, 1), data_final=date(2026, 1, 1)))
    assert "data_final" in exc.value.erros


def test_custom_scenario_requires_rate(dados_formulario):
    with pytest.raises(EntradaInvalidaError) as exc:
        validar_entradas(dict(dados_formulario, cenario="personalizado"))
    assert "cenario" in exc.value.erros

    e = validar_entradas(dict(dados_formulario, cenario="personalizado", taxa_crescimento="-2%"))
    assert e.taxa_crescimento == pytest.approx(-0.02)


def test_unknown_scenario(dados_formulario):
    with pytest.raises(EntradaInvalidaError) as exc:
        validar_entradas(dict(dados_formulario, cenario="hiperinflacao"))
    assert "cenario" in exc.value.erros


def test_validation_failure_is_logged(dados_formulario, caplog):
    with caplog.at_level("WARNING", logger="validacao"):
        with pytest.raises(EntradaInvalidaError):
            validar_entradas(dict(dados_formulario, setor=""))
    assert "Entradas inválidas" in caplog.text


@pytest.mark.parametrize(
    "taxa, esperado",
    [("5", 0.05), ("-2", -0.02), ("5%", 0.05), ("0,05", 0.05), (-0.02, -0.02), (7.5, 0.075)],
)
def test_custom_growth_rate_reads_like_other_percent_fields(dados_formulario, taxa, esperado):
    e = validar_entradas(dict(dados_formulario, cenario="personalizado", taxa_crescimento=taxa))
    assert e.taxa_crescimento == pytest.approx(esperado)


def test_field_errors_use_field_titles(dados_formulario):
    with pytest.raises(EntradaInvalidaError) as exc:
        validar_entradas(dict(dados_formulario, faturamento=-1, pmr=-5))
    assert exc.value.erros["faturamento"] == "Faturamento mensal deve ser maior que zero"
    assert exc.value.erros["pmr"] == "PMR não pode ser negativo"


def test_missing_sales_mix(dados_formulario):
    with pytest.raises(EntradaInvalidaError) as exc:
        validar_entradas(dict(dados_formulario, perc_vista="", perc_prazo=None))
    assert exc.value.erros["perc_vista"] == "Informe o percentual de vendas à vista"


def test_sales_mix_completed_from_term_side(dados_formulario):
    e = validar_entradas(dict(dados_formulario, perc_vista=None, perc_prazo="60%"))
    assert e.perc_vista == pytest.approx(0.4)
