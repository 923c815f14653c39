# -*- coding: utf-8 -*-
# cronograma.py — Cronograma de implementação do Split Payment
# -------------------------------------------------------------
# Percentual do imposto retido na liquidação, por ano (2026–2033).
# Setores podem ter cronograma próprio, que sobrescreve o padrão
# apenas nos anos informados; os demais anos seguem o padrão.
# -------------------------------------------------------------

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from erros import CronogramaInvalidoError

logger = logging.getLogger(__name__)

CRONOGRAMA_PADRAO: Dict[int, float] = {
    2026: 0.10,
    2027: 0.25,
    2028: 0.40,
    2029: 0.55,
    2030: 0.70,
    2031: 0.85,
    2032: 0.95,
    2033: 1.00,
}


# ============================
# Setores
# ============================

# anos 2027+ dos setores com cronograma próprio; 2026 vem de implementacao_inicial
CRONOGRAMA_SETORIAL_BASE: Dict[int, float] = {
    2027: 0.15,
    2028: 0.30,
    2029: 0.45,
    2030: 0.60,
    2031: 0.75,
    2032: 0.90,
    2033: 1.00,
}

CATEGORIAS_IVA = {"standard": "Alíquota padrão", "reduced": "Alíquota reduzida", "exempt": "Alíquota zero"}


@dataclass(frozen=True)
class Setor:
    codigo: str
    nome: str
    aliquota_efetiva: float
    reducao_especial: float = 0.0
    implementacao_inicial: int = 10   # % retido em 2026 (cronograma próprio)
    cronograma_proprio: bool = False
    categoria_iva: str = "standard"   # standard | reduced | exempt
    regime_especifico: str = ""
    observacao: str = ""

    @property
    def aliquota_liquida(self) -> float:
        """Alíquota efetiva já descontada a redução especial."""
        return self.aliquota_efetiva - self.reducao_especial

    @property
    def cronograma(self) -> Optional[Dict[int, float]]:
        if not self.cronograma_proprio:
            return None
        return {2026: self.implementacao_inicial / 100.0, **CRONOGRAMA_SETORIAL_BASE}


def _reduzido(codigo: str, nome: str, implementacao_inicial: int = 10) -> Setor:
    # redução de 60% na alíquota
    return Setor(codigo, nome, 0.265, reducao_especial=0.159,
                 implementacao_inicial=implementacao_inicial, categoria_iva="reduced")

def _aliquota_zero(codigo: str, nome: str, **kw) -> Setor:
    return Setor(codigo, nome, 0.0, implementacao_inicial=0, categoria_iva="exempt", **kw)

def _regime_especifico(codigo: str, nome: str, **kw) -> Setor:
    return Setor(codigo, nome, 0.265, cronograma_proprio=True, **kw)


_SETORES_LISTA = [
    # gerais
    Setor("comercio", "Comércio Varejista", 0.265),
    Setor("industria", "Indústria de Transformação", 0.220, categoria_iva="reduced"),
    Setor("servicos", "Serviços Contínuos", 0.265),
    Setor("agronegocio", "Agronegócio", 0.195, implementacao_inicial=5, cronograma_proprio=True,
          categoria_iva="reduced"),
    Setor("construcao", "Construção Civil", 0.240, categoria_iva="reduced"),
    Setor("tecnologia", "Tecnologia", 0.265, implementacao_inicial=15),

    # redução de 60%
    _reduzido("educacao", "Serviços de Educação"),
    _reduzido("saude", "Serviços de Saúde"),
    _reduzido("dispositivos_medicos", "Dispositivos Médicos"),
    _reduzido("dispositivos_acessibilidade", "Dispositivos de Acessibilidade"),
    _reduzido("medicamentos", "Medicamentos", 5),
    _reduzido("cuidados_menstruais", "Produtos de Cuidados Menstruais", 5),
    _reduzido("transporte_coletivo", "Transporte Coletivo"),
    _reduzido("alimentos_consumo_humano", "Alimentos para Consumo Humano", 5),
    _reduzido("higiene_limpeza", "Produtos de Higiene e Limpeza"),
    _reduzido("producoes_artisticas", "Produções Artísticas e Culturais"),
    _reduzido("insumos_agropecuarios", "Insumos Agropecuários", 5),
    _reduzido("seguranca_nacional", "Segurança e Soberania Nacional", 5),

    # alíquota zero
    _aliquota_zero("cesta_basica", "Cesta Básica Nacional"),
    _aliquota_zero("alimentos_in_natura", "Produtos Hortícolas, Frutas e Ovos"),
    _aliquota_zero("educacao_prouni", "Serviços de Educação Superior - ProUni"),
    _aliquota_zero("eventos_perse", "Serviços do Setor de Eventos - PERSE", cronograma_proprio=True,
                   observacao="Válido até 28.02.2027"),
    _aliquota_zero("recuperacao_urbana", "Recuperação Urbana em Áreas Históricas"),

    # regimes específicos
    _regime_especifico("combustiveis_energia", "Combustíveis e Energia", regime_especifico="monofásico"),
    _regime_especifico("financeiro_seguros", "Financeiro e Seguros"),
    _regime_especifico("planos_saude", "Planos e Seguros de Saúde", reducao_especial=0.159,
                       categoria_iva="reduced"),
    _regime_especifico("industria_petroleo", "Indústria de Petróleo", observacao="Válido até 31.12.2040"),
    _regime_especifico("bens_capital", "Bens de Capital",
                       observacao="Suspensão por 5 anos para compras até 31.12.2028"),
    _regime_especifico("industria_exportacao", "Industrialização para Exportação"),
    _regime_especifico("lojas_francas", "Regimes Aduaneiros - Lojas Francas"),
    _regime_especifico("reporto", "Regime Reporto (Modernização de Portos)"),
]

SETORES: Dict[str, Setor] = {s.codigo: s for s in _SETORES_LISTA}


# ============================
# Consulta
# ============================

def _checar_fracao(ano, valor) -> float:
    try:
        frac = float(valor)
    except (TypeError, ValueError):
        raise CronogramaInvalidoError(ano, valor, "percentual não numérico") from None
    if not 0.0 <= frac <= 1.0:
        raise CronogramaInvalidoError(ano, valor, "percentual fora do intervalo [0, 1]")
    return frac

def validar_cronograma(mapa: Mapping) -> Dict[int, float]:
    """Normaliza {ano: fração}; anos devem ser inteiros e frações em [0, 1]."""
    normalizado: Dict[int, float] = {}
    for ano, valor in mapa.items():
        try:
            ano_int = int(ano)
        except (TypeError, ValueError):
            raise CronogramaInvalidoError(ano, valor, "ano não inteiro") from None
        normalizado[ano_int] = _checar_fracao(ano_int, valor)
    return normalizado

def percentual_implementacao(ano: int, cronograma_setor: Optional[Mapping[int, float]] = None) -> float:
    """
    Fração do imposto retida no ano.
      1) cronograma do setor, se contiver o ano (inclusive valor 0);
      2) cronograma padrão;
      3) 0.0 para anos fora das duas tabelas (regime ainda não vigente).
    """
    if cronograma_setor is not None and ano in cronograma_setor:
        return _checar_fracao(ano, cronograma_setor[ano])
    return _checar_fracao(ano, CRONOGRAMA_PADRAO.get(ano, 0.0))

def cronograma_do_setor(codigo: str, setores: Mapping[str, Setor] = SETORES) -> Optional[Dict[int, float]]:
    setor = setores.get(codigo)
    if setor is None:
        logger.debug("Setor %s não cadastrado; usando cronograma padrão", codigo)
        return None
    cronograma = setor.cronograma
    return None if cronograma is None else validar_cronograma(cronograma)

def cronograma_efetivo(cronograma_setor: Optional[Mapping[int, float]] = None) -> Dict[int, float]:
    """Tabela completa resultante da sobreposição setor -> padrão."""
    anos = sorted(set(CRONOGRAMA_PADRAO) | set(cronograma_setor or {}))
    return {ano: percentual_implementacao(ano, cronograma_setor) for ano in anos}

def cronograma_monotonico(mapa: Mapping[int, float]) -> bool:
    anos = sorted(mapa)
    return all(mapa[a] <= mapa[b] for a, b in zip(anos, anos[1:]))
