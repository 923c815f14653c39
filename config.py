# -*- coding: utf-8 -*-
# config.py — Constantes do Simulador de Split Payment
# -------------------------------------------------------------
# Parâmetros fixos do motor de cálculo e da aplicação.
# Nível/formato de log podem ser ajustados por variáveis de ambiente.
# -------------------------------------------------------------

import os

APP_NAME = "Simulador de Split Payment"
APP_VERSION = "1.0.0"
APP_SUBTITLE = "Impacto no capital de giro — regime atual x Split Payment"

# ============================
# Motor de cálculo
# ============================
PRAZO_RECOLHIMENTO = 25          # dias até o recolhimento (dia 25 do mês seguinte)
FATOR_MARGEM_SEGURANCA = 1.2     # +20% sobre a redução de capital de giro
TAXA_CAPITAL_GIRO_PADRAO = 0.021 # 2,1% a.m.
ANO_REFERENCIA = 2026            # início da transição

TAXAS_CENARIO = {
    "conservador": 0.02,
    "moderado": 0.05,
    "otimista": 0.08,
}
CENARIO_PERSONALIZADO = "personalizado"
CENARIO_PADRAO = "moderado"

ALIASES_CENARIO = {
    "conservative": "conservador",
    "moderate": "moderado",
    "optimistic": "otimista",
    "custom": CENARIO_PERSONALIZADO,
}

# ============================
# Logging
# ============================
LOG_LEVEL = os.getenv("SPLIT_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("SPLIT_LOG_FORMAT", "text")  # "text" ou "json"
