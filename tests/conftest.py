from __future__ import annotations

from datetime import date

import pytest

from split_core import EntradasSimulacao


@pytest.fixture
def entradas_base() -> EntradasSimulacao:
    """Empresa de referência: R$ 100.000/mês, alíquota 26,5%, 2026–2027."""
    return EntradasSimulacao(
        empresa="Empresa Teste",
        setor="comercio",
        regime="Lucro Real",
        faturamento=100000.0,
        margem=0.15,
        pmr=30,
        pmp=30,
        pme=30,
        perc_vista=0.3,
        perc_prazo=0.7,
        aliquota=0.265,
        data_inicial=date(2026, 1, 1),
        data_final=date(2027, 12, 31),
    )


@pytest.fixture
def dados_formulario() -> dict:
    """Dados crus como chegam da sidebar."""
    return {
        "empresa": "Empresa Teste",
        "setor": "comercio",
        "regime": "Lucro Real",
        "faturamento": "R$ 100.000,00",
        "margem": 0.15,
        "aliquota": 0.265,
        "creditos": "",
        "pmr": 30,
        "pmp": 30,
        "pme": 30,
        "perc_vista": 0.3,
        "perc_prazo": 0.7,
        "data_inicial": date(2026, 1, 1),
        "data_final": date(2033, 12, 31),
        "cenario": "moderado",
        "taxa_crescimento": None,
        "taxa_capital_giro": 0.021,
    }
