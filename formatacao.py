# -*- coding: utf-8 -*-
# formatacao.py — apresentação e leitura pt-BR (R$ 1.234,56 / 12,34%)

import re


def format_brl(valor: float) -> str:
    return f"R$ {valor:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")

def format_pct_br(frac: float, casas: int = 2) -> str:
    s = f"{frac*100:,.{casas}f}%"
    return s.replace(",", "_").replace(".", ",").replace("_", ".")

def format_num_br(valor: float, casas: int = 2) -> str:
    return f"{valor:,.{casas}f}".replace(",", "_").replace(".", ",").replace("_", ".")

def brl_to_float(txt) -> float:
    """
    Converte 'R$ 1.234,56', '1234,56' ou '1234.56' em float.
    Levanta ValueError se não sobrar número.
    """
    if isinstance(txt, (int, float)):
        return float(txt)
    s = str(txt).replace("R$", "").replace(" ", "").strip()
    s = re.sub(r"[^0-9.,-]", "", s)
    if "," in s:
        partes = s.split(",")
        s = "".join(partes[:-1]).replace(".", "") + "." + partes[-1]
    elif s.count(".") > 1:
        s = s.replace(".", "")
    return float(s)

def parse_percent_to_frac(x) -> float:
    """
    '18', '18,5', '18%' -> 0.18 / 0.185.
    Números entre 0 e 1 já são fração; acima de 1 são tratados como percentual.
    """
    if isinstance(x, (int, float)):
        return float(x) if 0.0 <= float(x) <= 1.0 else float(x) / 100.0
    s = str(x).strip()
    tem_simbolo = "%" in s
    val = brl_to_float(s.replace("%", ""))
    if tem_simbolo or val > 1.0:
        return val / 100.0
    return val

def parse_taxa_to_frac(x) -> float:
    """
    Como parse_percent_to_frac, mas aceita taxas negativas:
    '-2' e '-2%' -> -0.02; '-0,02' -> -0.02.
    """
    if isinstance(x, (int, float)):
        return float(x) if abs(float(x)) <= 1.0 else float(x) / 100.0
    s = str(x).strip()
    val = brl_to_float(s.replace("%", ""))
    if "%" in s or abs(val) > 1.0:
        return val / 100.0
    return val
