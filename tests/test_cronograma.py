"""Tests for the implementation schedule."""
import pytest

from cronograma import (
    CRONOGRAMA_PADRAO,
    CRONOGRAMA_SETORIAL_BASE,
    SETORES,
    Setor,
    cronograma_do_setor,
    cronograma_efetivo,
    cronograma_monotonico,
    percentual_implementacao,
    validar_cronograma,
)
from erros import CronogramaInvalidoError


@pytest.mark.parametrize(
    "ano, esperado",
    [(2026, 0.10), (2027, 0.25), (2030, 0.70), (2033, 1.00)],
)
def test_default_schedule(ano, esperado):
    assert percentual_implementacao(ano) == pytest.approx(esperado)


def test_years_outside_table_are_zero():
    assert percentual_implementacao(2025) == 0.0
    assert percentual_implementacao(2040) == 0.0


def test_default_schedule_is_monotonic():
    assert cronograma_monotonico(CRONOGRAMA_PADRAO)


def test_sector_schedule_overrides_only_listed_years():
    setor = {2026: 0.5}
    assert percentual_implementacao(2026, setor) == 0.5
    assert percentual_implementacao(2027, setor) == pytest.approx(0.25)


def test_sector_zero_value_still_overrides():
    assert percentual_implementacao(2026, {2026: 0.0}) == 0.0


def test_fraction_out_of_range_raises():
    with pytest.raises(CronogramaInvalidoError) as exc:
        percentual_implementacao(2026, {2026: 1.5})
    assert exc.value.code == "CFG002"


def test_validar_cronograma_normalizes_keys():
    assert validar_cronograma({"2026": "0.2"}) == {2026: 0.2}
    with pytest.raises(CronogramaInvalidoError):
        validar_cronograma({"dois mil": 0.2})


def test_sector_lookup():
    assert cronograma_do_setor("comercio") is None
    assert cronograma_do_setor("setor_inexistente") is None
    agro = cronograma_do_setor("agronegocio")
    assert agro[2026] == pytest.approx(0.05)
    assert SETORES["agronegocio"].cronograma_proprio


def test_effective_schedule_merges_sector_and_default():
    efetivo = cronograma_efetivo({2026: 0.0, 2027: 0.0})
    assert efetivo[2026] == 0.0
    assert efetivo[2027] == 0.0
    assert efetivo[2028] == pytest.approx(0.40)
    assert list(efetivo) == sorted(efetivo)


@pytest.mark.parametrize(
    "codigo",
    ["combustiveis_energia", "financeiro_seguros", "planos_saude", "industria_petroleo", "bens_capital",
     "industria_exportacao", "lojas_francas", "reporto", "agronegocio", "eventos_perse"],
)
def test_sectors_with_own_schedule_follow_sector_table(codigo):
    cronograma = cronograma_do_setor(codigo)
    assert cronograma[2026] == pytest.approx(SETORES[codigo].implementacao_inicial / 100)
    for ano, esperado in CRONOGRAMA_SETORIAL_BASE.items():
        assert percentual_implementacao(ano, cronograma) == pytest.approx(esperado)
    assert cronograma_monotonico(cronograma)


def test_fuel_and_events_sectors():
    assert percentual_implementacao(2027, cronograma_do_setor("combustiveis_energia")) == pytest.approx(0.15)
    assert percentual_implementacao(2026, cronograma_do_setor("combustiveis_energia")) == pytest.approx(0.10)
    assert percentual_implementacao(2026, cronograma_do_setor("eventos_perse")) == 0.0
    assert percentual_implementacao(2027, cronograma_do_setor("eventos_perse")) == pytest.approx(0.15)


def test_registry_covers_reduced_and_zero_rate_sectors():
    assert len(SETORES) == 31
    assert SETORES["educacao"].aliquota_liquida == pytest.approx(0.106)
    assert SETORES["cesta_basica"].aliquota_liquida == 0.0
    assert cronograma_do_setor("higiene_limpeza") is None


def test_sector_schedule_is_validated_on_lookup():
    setores = {"x": Setor("x", "X", 0.265, implementacao_inicial=150, cronograma_proprio=True)}
    with pytest.raises(CronogramaInvalidoError):
        cronograma_do_setor("x", setores)
