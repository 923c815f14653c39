# -*- coding: utf-8 -*-
# validacao.py — Leitura e validação dos dados do formulário
# -------------------------------------------------------------
# Recebe um dict cru (sidebar do Streamlit, planilha, JSON), valida
# com o modelo FormularioSimulacao (pydantic) e devolve
# EntradasSimulacao. Os erros de todos os campos são reunidos em
# EntradaInvalidaError, com mensagens em português.
# -------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

from config import CENARIO_PADRAO, TAXA_CAPITAL_GIRO_PADRAO
from erros import CenarioInvalidoError, EntradaInvalidaError
from formatacao import brl_to_float, parse_percent_to_frac, parse_taxa_to_frac
from split_core import EntradasSimulacao, normalizar_cenario, resolver_taxa_crescimento

logger = logging.getLogger(__name__)

TOLERANCIA_MIX = 1e-6
_FORMATO_DATA_BR = "%d/%m/%Y"

# tipo de erro do pydantic -> complemento da mensagem (prefixada pelo título do campo)
_MENSAGENS = {
    "missing": "é obrigatório",
    "string_too_short": "é obrigatório",
    "string_type": "deve ser texto",
    "greater_than": "deve ser maior que zero",
    "greater_than_equal": "não pode ser negativo",
    "less_than_equal": "não pode passar de 100%",
    "float_parsing": "deve ser numérico",
    "float_type": "deve ser numérico",
    "int_parsing": "deve ser numérico",
    "int_type": "deve ser numérico",
    "int_from_float": "deve ser um número inteiro de dias",
    "date_parsing": "inválida",
    "date_from_datetime_parsing": "inválida",
    "date_type": "inválida",
    "value_error": "inválido",
}


def _vazio(v: Any) -> bool:
    return v is None or (isinstance(v, str) and v.strip() == "")


class FormularioSimulacao(BaseModel):
    """Dados do formulário já convertidos (frações, dias, datas)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    empresa: str = Field(..., min_length=1, title="Nome da empresa")
    setor: str = Field(..., min_length=1, title="Setor")
    regime: str = Field(..., min_length=1, title="Regime tributário")
    faturamento: float = Field(..., gt=0, title="Faturamento mensal")
    margem: float = Field(..., ge=0, le=1, title="Margem operacional")
    aliquota: float = Field(..., gt=0, le=1, title="Alíquota efetiva")
    creditos: float = Field(0.0, ge=0, title="Créditos tributários")
    pmr: int = Field(0, ge=0, title="PMR")
    pmp: int = Field(0, ge=0, title="PMP")
    pme: int = Field(0, ge=0, title="PME")
    perc_vista: Optional[float] = Field(None, ge=0, le=1, title="Vendas à vista")
    perc_prazo: Optional[float] = Field(None, ge=0, le=1, validate_default=True, title="Vendas a prazo")
    data_inicial: date = Field(..., title="Data inicial")
    data_final: date = Field(..., title="Data final")
    cenario: str = Field(CENARIO_PADRAO, title="Cenário de crescimento")
    # pode ser negativa; só é exigida no cenário personalizado
    taxa_crescimento: Optional[float] = Field(None, validate_default=True, title="Taxa de crescimento")
    taxa_capital_giro: float = Field(TAXA_CAPITAL_GIRO_PADRAO, ge=0, title="Taxa de capital de giro")

    # ---------- conversões (antes da validação de tipo) ----------

    @field_validator("faturamento", mode="before")
    @classmethod
    def _ler_moeda(cls, v: Any) -> float:
        return brl_to_float(v)

    @field_validator("creditos", mode="before")
    @classmethod
    def _ler_creditos(cls, v: Any) -> float:
        return 0.0 if _vazio(v) else brl_to_float(v)

    @field_validator("margem", "aliquota", mode="before")
    @classmethod
    def _ler_percentual(cls, v: Any) -> float:
        return parse_percent_to_frac(v)

    @field_validator("taxa_capital_giro", mode="before")
    @classmethod
    def _ler_taxa_capital_giro(cls, v: Any) -> float:
        return TAXA_CAPITAL_GIRO_PADRAO if _vazio(v) else parse_percent_to_frac(v)

    @field_validator("pmr", "pmp", "pme", mode="before")
    @classmethod
    def _ler_dias(cls, v: Any) -> int:
        return 0 if _vazio(v) else int(round(brl_to_float(v)))

    @field_validator("perc_vista", "perc_prazo", mode="before")
    @classmethod
    def _ler_mix(cls, v: Any) -> Optional[float]:
        return None if _vazio(v) else parse_percent_to_frac(v)

    @field_validator("data_inicial", "data_final", mode="before")
    @classmethod
    def _ler_data(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "/" in v:
            return datetime.strptime(v.strip(), _FORMATO_DATA_BR).date()
        return v

    @field_validator("cenario", mode="before")
    @classmethod
    def _ler_cenario(cls, v: Any) -> str:
        return CENARIO_PADRAO if _vazio(v) else normalizar_cenario(str(v))

    @field_validator("taxa_crescimento", mode="before")
    @classmethod
    def _ler_taxa_crescimento(cls, v: Any) -> Optional[float]:
        return None if _vazio(v) else parse_taxa_to_frac(v)

    # ---------- regras entre campos ----------

    @field_validator("perc_prazo")
    @classmethod
    def _mix_vendas(cls, prazo: Optional[float], info: ValidationInfo) -> Optional[float]:
        if "perc_vista" not in info.data:
            return prazo
        vista = info.data["perc_vista"]
        if vista is None and prazo is None:
            raise PydanticCustomError("mix_vendas", "Informe o percentual de vendas à vista",
                                      {"campo": "perc_vista"})
        if vista is not None and prazo is not None and abs(vista + prazo - 1.0) > TOLERANCIA_MIX:
            raise PydanticCustomError("mix_vendas", "Vendas à vista + a prazo devem somar 100%",
                                      {"campo": "perc_vista"})
        return prazo

    @field_validator("data_final")
    @classmethod
    def _datas_em_ordem(cls, fim: date, info: ValidationInfo) -> date:
        inicio = info.data.get("data_inicial")
        if inicio is not None and inicio > fim:
            raise PydanticCustomError("datas_fora_de_ordem", "Data final deve ser posterior à data inicial")
        return fim

    @field_validator("taxa_crescimento")
    @classmethod
    def _taxa_do_cenario(cls, taxa: Optional[float], info: ValidationInfo) -> Optional[float]:
        cenario = info.data.get("cenario")
        if cenario is None:
            return taxa
        try:
            resolver_taxa_crescimento(cenario, taxa)
        except CenarioInvalidoError as exc:
            raise PydanticCustomError("cenario_invalido", "{motivo}",
                                      {"campo": "cenario", "motivo": exc.message}) from None
        return taxa

    @model_validator(mode="after")
    def _completar_mix(self) -> "FormularioSimulacao":
        # só um lado informado: o outro é o complemento
        if self.perc_vista is None:
            self.perc_vista = 1.0 - self.perc_prazo
        elif self.perc_prazo is None:
            self.perc_prazo = 1.0 - self.perc_vista
        return self


def _erros_por_campo(exc: ValidationError) -> Dict[str, str]:
    campos = FormularioSimulacao.model_fields
    erros: Dict[str, str] = {}
    for err in exc.errors():
        ctx = err.get("ctx") or {}
        campo = ctx.get("campo") or (str(err["loc"][0]) if err["loc"] else "formulario")
        if err["type"] in _MENSAGENS:
            info = campos.get(campo)
            rotulo = info.title if info is not None and info.title else campo
            mensagem = f"{rotulo} {_MENSAGENS[err['type']]}"
        else:
            mensagem = err["msg"]
        erros.setdefault(campo, mensagem)
    return erros


def validar_entradas(dados: Mapping[str, Any]) -> EntradasSimulacao:
    try:
        formulario = FormularioSimulacao.model_validate(dict(dados))
    except ValidationError as exc:
        erros = _erros_por_campo(exc)
        logger.warning("Entradas inválidas: %s", erros)
        raise EntradaInvalidaError(erros) from exc
    return EntradasSimulacao(**formulario.model_dump())
