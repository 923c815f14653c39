"""Tests for orchestration and exports."""
import io
import zipfile
from dataclasses import replace
from datetime import date

import pandas as pd
import pytest

from exportadores import df_acumulado, df_impacto, df_projecao, gerar_excel, gerar_pdf
from simulador import simular


@pytest.fixture
def resultado(entradas_base):
    return simular(entradas_base)


def test_simulation_bundle(resultado, entradas_base):
    assert resultado.entradas is entradas_base
    assert resultado.impacto_base.ano == 2026
    assert list(resultado.projecao.resultados_anuais) == [2026, 2027]
    assert list(resultado.memoria_calculo) == [2026, 2027]
    assert resultado.cronograma_setor is None
    assert resultado.impacto_acumulado.total_necessidade_capital_giro == pytest.approx(3180.0 + 6956.25 * 1.2)


def test_simulation_applies_sector_schedule(entradas_base):
    res = simular(replace(entradas_base, setor="agronegocio"))
    assert res.cronograma_setor[2026] == pytest.approx(0.05)
    assert res.impacto_base.resultado_split.percentual_implementacao == pytest.approx(0.05)


def test_simulation_single_year(entradas_base):
    res = simular(replace(entradas_base, data_inicial=date(2026, 1, 1), data_final=date(2026, 1, 1)))
    assert list(res.projecao.resultados_anuais) == [2026]


def test_projection_dataframe(resultado):
    df = df_projecao(resultado.projecao)
    assert list(df["Ano"]) == [2026, 2027]
    assert df.loc[1, "Faturamento"] == pytest.approx(105000.0)
    assert df.loc[0, "Diferença"] == pytest.approx(-2650.0)


def test_comparison_dataframe(resultado):
    df = df_impacto(resultado.impacto_base).set_index("Item")
    assert df.loc["Retido na Liquidação", "Split Payment"] == pytest.approx(2650.0)
    assert df.loc["Capital de Giro Disponível", "Regime Atual"] == pytest.approx(26500.0)
    assert pd.isna(df.loc["Diferença de Capital de Giro", "Regime Atual"])


def test_accumulated_dataframe(resultado):
    df = df_acumulado(resultado.impacto_acumulado)
    assert len(df) == 3


def test_excel_export(resultado):
    dados = gerar_excel(resultado)
    assert dados[:2] == b"PK"

    with zipfile.ZipFile(io.BytesIO(dados)) as z:
        workbook = z.read("xl/workbook.xml").decode("utf-8")
    for aba in ("Resumo", "Projeção", "Memória de Cálculo"):
        assert f'name="{aba}"' in workbook


def test_pdf_export(resultado):
    dados = gerar_pdf(resultado)
    assert dados.startswith(b"%PDF")
