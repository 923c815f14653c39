# -*- coding: utf-8 -*-
"""Exceções do simulador.

Códigos seguem o padrão [CATEGORIA][NÚMERO]:
- VAL: validação de entradas
- CFG: configuração (cenário, cronograma, parâmetros)
- CALC: invariantes do cálculo
"""

from __future__ import annotations

from typing import Any


class SimuladorError(Exception):
    """Base de todos os erros do simulador."""

    def __init__(self, message: str, code: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


class EntradaInvalidaError(SimuladorError):
    """Um ou mais campos do formulário são inválidos."""

    def __init__(self, erros: dict[str, str]):
        campos = ", ".join(erros)
        super().__init__(
            message=f"Dados de entrada inválidos: {campos}",
            code="VAL001",
            details={"campos": dict(erros)},
        )
        self.erros = dict(erros)


class CenarioInvalidoError(SimuladorError):
    def __init__(self, cenario: str, motivo: str):
        super().__init__(
            message=f"Cenário de crescimento inválido ({cenario}): {motivo}",
            code="CFG001",
            details={"cenario": cenario},
        )


class CronogramaInvalidoError(SimuladorError):
    def __init__(self, ano: Any, valor: Any, motivo: str):
        super().__init__(
            message=f"Cronograma inválido para {ano}: {motivo}",
            code="CFG002",
            details={"ano": ano, "valor": valor},
        )


class ParametroInvalidoError(SimuladorError):
    def __init__(self, parametro: str, valor: Any):
        super().__init__(
            message=f"Valor não suportado para '{parametro}': {valor}",
            code="CFG003",
            details={"parametro": parametro, "valor": valor},
        )


class InvarianteCapitalError(SimuladorError):
    """A diferença de capital de giro ficou positiva (retenção não pode aumentar o float)."""

    def __init__(self, ano: int, diferenca: float):
        super().__init__(
            message=f"Diferença de capital de giro positiva em {ano}: {diferenca:.2f}",
            code="CALC001",
            details={"ano": ano, "diferenca": diferenca},
        )
