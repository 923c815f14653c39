# -*- coding: utf-8 -*-
# app.py — Simulador de Split Payment (Streamlit)
# -------------------------------------------------------------
# Compara o capital de giro no regime atual com o Split Payment,
# ano a ano, conforme o cronograma de implementação (2026–2033).
# Projeção com crescimento do faturamento, acumulado do período,
# memória de cálculo e análises (sensibilidade, elasticidade,
# ciclo financeiro, necessidade de capital, compensação de créditos).
# Exporta Excel e PDF.
# -------------------------------------------------------------

import logging
from datetime import date

import altair as alt
import pandas as pd
import streamlit as st

from analises import (
    TIPOS_COMPENSACAO,
    analise_elasticidade,
    analise_sensibilidade,
    calcular_retencao_efetiva,
    impacto_ciclo_financeiro,
    impacto_fluxo_caixa,
    necessidade_capital,
)
from config import APP_NAME, APP_SUBTITLE, CENARIO_PERSONALIZADO, TAXA_CAPITAL_GIRO_PADRAO, TAXAS_CENARIO
from cronograma import CATEGORIAS_IVA, SETORES, cronograma_efetivo
from erros import SimuladorError
from exportadores import df_acumulado, df_impacto, df_projecao, gerar_excel, gerar_pdf
from formatacao import brl_to_float, format_brl, format_num_br, format_pct_br
from logger import init_logging
from memoria_calculo import gerar_secao_projecao
from simulador import ResultadoSimulacao, simular
from validacao import validar_entradas

logger = logging.getLogger(__name__)

SIDEBAR_WIDTH_PX = 420
REGIMES = ["Lucro Real", "Lucro Presumido", "Simples Nacional"]
CENARIOS = list(TAXAS_CENARIO) + [CENARIO_PERSONALIZADO]


# ============================
# Utilidades de exibição
# ============================

def set_sidebar_style(width_px: int = SIDEBAR_WIDTH_PX):
    st.markdown(f"""
<style>
  [data-testid="stSidebar"] {{
    min-width: {width_px}px !important;
    max-width: {width_px}px !important;
    border-right: 1px solid #e7eef5;
  }}
  h1, h2, h3 {{ letter-spacing: .2px; }}
  button[kind="primary"] {{ border-radius: 12px; }}
  .stDownloadButton button {{ border-radius: 12px; }}
  div[data-testid="stMetric"] {{
    padding: 8px 20px; align-items: center; border: 2px solid #eef2f7; border-radius: 12px;
  }}
</style>
""", unsafe_allow_html=True)

def style_df(df: pd.DataFrame, money_cols=(), perc_cols=(), num_cols=()):
    def _money(x):
        return "" if pd.isna(x) else format_brl(float(x))

    def _perc(x):
        return "" if pd.isna(x) else format_pct_br(float(x))

    def _num(x):
        return "" if pd.isna(x) else format_num_br(float(x), 4)

    sty = df.style.hide(axis="index")
    for cols, fn in ((money_cols, _money), (perc_cols, _perc), (num_cols, _num)):
        presentes = [c for c in cols if c in df.columns]
        if presentes:
            sty = sty.format(fn, subset=presentes)
    return sty

def moeda_input(label: str, key: str, value: float = 0.0) -> str:
    """Campo texto que se reformata em BRL ao confirmar."""
    if key not in st.session_state:
        st.session_state[key] = format_brl(value) if value else ""

    def _format_callback(_key=key):
        raw = st.session_state[_key]
        if str(raw).strip() == "":
            return
        try:
            st.session_state[_key] = format_brl(brl_to_float(raw))
        except ValueError:
            pass  # mantém o texto; a validação aponta o campo

    st.text_input(label, key=key, on_change=_format_callback)
    return st.session_state[key]


# ============================
# UI (Streamlit)
# ============================

def _legenda_setor(setor) -> None:
    partes = [CATEGORIAS_IVA.get(setor.categoria_iva, setor.categoria_iva)]
    if setor.reducao_especial:
        partes.append(f"redução especial de {format_pct_br(setor.reducao_especial)} "
                      f"(líquida {format_pct_br(setor.aliquota_liquida)})")
    if setor.regime_especifico:
        partes.append(f"regime {setor.regime_especifico}")
    if setor.cronograma_proprio:
        partes.append(f"cronograma próprio, {setor.implementacao_inicial}% em 2026")
    if setor.observacao:
        partes.append(setor.observacao)
    st.caption(" · ".join(partes))

def _formulario() -> dict:
    with st.sidebar:
        st.header("Empresa")
        empresa = st.text_input("Nome da empresa", value="")
        codigos = list(SETORES)
        setor = st.selectbox("Setor", codigos, index=0, format_func=lambda c: SETORES[c].nome)
        setor_info = SETORES[setor]
        _legenda_setor(setor_info)
        regime = st.selectbox("Regime tributário", REGIMES, index=0)

        st.header("Dados financeiros")
        faturamento = moeda_input("Faturamento mensal (R$)", key="faturamento")
        margem = st.number_input("Margem operacional (%)", 0.0, 100.0, 15.0, 0.5)
        aliquota = st.number_input("Alíquota efetiva (%)", 0.0, 100.0,
                                   round(setor_info.aliquota_liquida * 100, 2) or 26.5, 0.1)
        creditos = moeda_input("Créditos tributários mensais (R$)", key="creditos")

        st.header("Ciclo financeiro")
        c1, c2, c3 = st.columns(3)
        pmr = c1.number_input("PMR (dias)", 0, 365, 30, 1)
        pmp = c2.number_input("PMP (dias)", 0, 365, 30, 1)
        pme = c3.number_input("PME (dias)", 0, 365, 30, 1)
        perc_vista = st.slider("Vendas à vista (%)", 0, 100, 30, 5)
        st.caption(f"Vendas a prazo: {100 - perc_vista}%")

        st.header("Período e cenário")
        data_inicial = st.date_input("Data inicial", value=date(2026, 1, 1), format="DD/MM/YYYY")
        data_final = st.date_input("Data final", value=date(2033, 12, 31), format="DD/MM/YYYY")
        cenario = st.selectbox("Cenário de crescimento", CENARIOS, index=CENARIOS.index("moderado"),
                               format_func=str.capitalize)
        taxa_crescimento = None
        if cenario == CENARIO_PERSONALIZADO:
            taxa_crescimento = st.number_input("Taxa de crescimento (% a.a.)", -50.0, 100.0, 5.0, 0.5) / 100.0
        taxa_cg = st.number_input("Taxa de capital de giro (% a.m.)", 0.0, 20.0,
                                  TAXA_CAPITAL_GIRO_PADRAO * 100, 0.1)

    return {
        "empresa": empresa,
        "setor": setor,
        "regime": regime,
        "faturamento": faturamento,
        "margem": margem / 100.0,
        "aliquota": aliquota / 100.0,
        "creditos": creditos,
        "pmr": pmr,
        "pmp": pmp,
        "pme": pme,
        "perc_vista": perc_vista / 100.0,
        "perc_prazo": (100 - perc_vista) / 100.0,
        "data_inicial": data_inicial,
        "data_final": data_final,
        "cenario": cenario,
        "taxa_crescimento": taxa_crescimento,
        "taxa_capital_giro": taxa_cg / 100.0,
    }

def _kpis(res: ResultadoSimulacao):
    imp = res.impacto_base
    acc = res.impacto_acumulado
    cols = st.columns(4)
    with cols[0]:
        st.metric(f"Retenção em {imp.ano}", format_brl(imp.resultado_split.valor_imposto_split),
                  format_pct_br(imp.resultado_split.percentual_implementacao) + " implementado",
                  delta_color="off")
    with cols[1]:
        st.metric("Redução do capital de giro", format_brl(imp.diferenca_capital_giro),
                  f"{format_num_br(imp.percentual_impacto)}%", delta_color="inverse")
    with cols[2]:
        st.metric("Necessidade acumulada", format_brl(acc.total_necessidade_capital_giro))
    with cols[3]:
        st.metric("Impacto médio na margem", f"{format_num_br(acc.impacto_medio_margem, 4)} p.p.")

def _aba_projecao(res: ResultadoSimulacao):
    dfp = df_projecao(res.projecao)
    st.dataframe(
        style_df(dfp,
                 money_cols=["Faturamento", "Imposto Líquido", "Valor Retido", "Capital de Giro Atual",
                             "Capital de Giro Split", "Diferença", "Necessidade Adicional",
                             "Custo Mensal", "Custo Anual"],
                 perc_cols=["Implementação", "Margem Ajustada"],
                 num_cols=["Impacto Margem (p.p.)"]),
        use_container_width=True,
    )

    if len(dfp):
        dfg = dfp.assign(Ano=dfp["Ano"].astype(str))
        barras = (
            alt.Chart(dfg)
            .mark_bar(size=36, cornerRadiusTopLeft=6, cornerRadiusTopRight=6)
            .encode(
                x=alt.X("Ano:N", title="", axis=alt.Axis(labelAngle=0)),
                y=alt.Y("Necessidade Adicional:Q", title="Necessidade adicional (R$)",
                        axis=alt.Axis(format=",.0f")),
                tooltip=[
                    alt.Tooltip("Ano:N", title="Ano"),
                    alt.Tooltip("Necessidade Adicional:Q", title="Necessidade (R$)", format=",.2f"),
                    alt.Tooltip("Implementação:Q", title="Implementação", format=".0%"),
                ],
            )
            .properties(height=280)
        )
        linha = (
            alt.Chart(dfg)
            .mark_line(point=True, color="#38B0DE")
            .encode(
                x=alt.X("Ano:N", title=""),
                y=alt.Y("Implementação:Q", title="Implementação", axis=alt.Axis(format="%")),
            )
        )
        st.caption("Necessidade adicional de capital de giro e percentual de implementação")
        st.altair_chart(alt.layer(barras, linha).resolve_scale(y="independent"), use_container_width=True)

    st.markdown("#### Impacto acumulado")
    st.dataframe(style_df(df_acumulado(res.impacto_acumulado), money_cols=["Valor"]), use_container_width=True)

def _aba_impacto(res: ResultadoSimulacao):
    imp = res.impacto_base
    st.dataframe(style_df(df_impacto(imp), money_cols=["Regime Atual", "Split Payment"]),
                 use_container_width=True)
    c1, c2, c3 = st.columns(3)
    c1.metric("Margem original", format_pct_br(imp.margem_operacional_original))
    c2.metric("Margem ajustada", format_pct_br(imp.margem_operacional_ajustada))
    c3.metric("Custo mensal do capital", format_brl(imp.custo_mensal_capital_giro))

    with st.expander("Cronograma aplicado"):
        crono = cronograma_efetivo(res.cronograma_setor)
        st.dataframe(pd.DataFrame({"Ano": list(crono), "Implementação": list(crono.values())})
                     .pipe(style_df, perc_cols=["Implementação"]), use_container_width=True)

def _aba_memoria(res: ResultadoSimulacao):
    anos = list(res.memoria_calculo)
    if not anos:
        st.info("Nenhum ano no período informado.")
        return
    ano = st.selectbox("Ano", anos, index=0, key="memoria_ano")
    st.code(res.memoria_calculo[ano], language=None)
    with st.expander("Projeção e acumulado"):
        st.code(gerar_secao_projecao(res.projecao, res.impacto_acumulado), language=None)

def _aba_analises(res: ResultadoSimulacao):
    e = res.entradas
    ano = res.impacto_base.ano
    crono = res.cronograma_setor

    st.markdown("#### Sensibilidade ao percentual de implementação")
    sens = analise_sensibilidade(e, ano, crono)
    df_sens = pd.DataFrame({"Implementação": list(sens.resultados), "Diferença": list(sens.resultados.values())})
    st.altair_chart(
        alt.Chart(df_sens).mark_line(point=True).encode(
            x=alt.X("Implementação:Q", axis=alt.Axis(format="%")),
            y=alt.Y("Diferença:Q", title="Diferença de capital de giro (R$)", axis=alt.Axis(format=",.0f")),
        ).properties(height=240),
        use_container_width=True,
    )
    st.caption(f"Impacto por ponto percentual: {format_brl(sens.impacto_por_ponto)} | "
               f"por 10 pontos: {format_brl(sens.impacto_por_10_pontos)}")

    st.markdown("#### Elasticidade ao crescimento")
    elas = analise_elasticidade(e, e.ano_inicial, e.ano_final, crono)
    df_elas = pd.DataFrame([
        {"Cenário": r.nome, "Taxa": r.taxa, "Necessidade Acumulada": r.impacto_acumulado,
         "Custo Financeiro": r.custo_financeiro_total, "Elasticidade": elas.elasticidades.get(r.nome)}
        for r in elas.resultados.values()
    ])
    st.dataframe(style_df(df_elas, money_cols=["Necessidade Acumulada", "Custo Financeiro"],
                          perc_cols=["Taxa"], num_cols=["Elasticidade"]), use_container_width=True)

    st.markdown("#### Ciclo financeiro")
    ciclo = impacto_ciclo_financeiro(e, ano, crono)
    c1, c2, c3 = st.columns(3)
    c1.metric("Ciclo atual", f"{format_num_br(ciclo.ciclo_financeiro_atual, 0)} dias")
    c2.metric("Ciclo com Split", f"{format_num_br(ciclo.ciclo_financeiro_ajustado)} dias",
              f"+{format_num_br(ciclo.dias_adicionais)} dias", delta_color="inverse")
    c3.metric("Aumento da NCG", format_brl(ciclo.diferenca_ncg))

    st.markdown("#### Necessidade de capital e financiamento")
    nec = necessidade_capital(e, ano, crono)
    st.caption(f"Básica {format_brl(nec.necessidade_basica)} × segurança {nec.fator_margem_seguranca} × "
               f"sazonalidade {nec.fator_sazonalidade} × crescimento {format_num_br(nec.fator_crescimento, 4)} "
               f"= {format_brl(nec.necessidade_total)}")
    df_fin = pd.DataFrame([
        {"Opção": o.tipo, "Taxa Mensal": o.taxa_mensal, "Prazo": o.prazo, "Carência": o.carencia,
         "Valor Aprovado": o.valor_aprovado, "Custo Total": o.custo_total, "Parcela": o.valor_parcela,
         "Taxa Efetiva Anual": o.taxa_efetiva_anual}
        for o in nec.opcoes
    ])
    st.dataframe(style_df(df_fin, money_cols=["Valor Aprovado", "Custo Total", "Parcela"],
                          perc_cols=["Taxa Mensal", "Taxa Efetiva Anual"]), use_container_width=True)
    st.success(f"Opção recomendada: **{nec.opcao_recomendada.tipo}** — "
               f"custo anual {format_brl(nec.opcao_recomendada.custo_anual)} "
               f"({format_num_br(nec.impacto_resultado.percentual_do_lucro)}% do lucro operacional)")

    st.markdown("#### Compensação de créditos")
    tipo = st.radio("Tipo de compensação", TIPOS_COMPENSACAO, horizontal=True, format_func=str.capitalize)
    split = res.impacto_base.resultado_split
    ret = calcular_retencao_efetiva(split.valor_imposto_total * split.percentual_implementacao, e.creditos, tipo)
    fluxo = impacto_fluxo_caixa(ret)
    c1, c2, c3 = st.columns(3)
    c1.metric("Retenção efetiva", format_brl(ret.retencao_efetiva))
    c2.metric("Benefício futuro", format_brl(fluxo.beneficio_futuro),
              f"em {fluxo.prazo_recebimento_beneficio} dias", delta_color="off")
    c3.metric("Impacto líquido descontado", format_brl(fluxo.impacto_liquido_descontado))

def _exportar(res: ResultadoSimulacao):
    st.divider()
    st.subheader("Exportar Relatório")

    excel_bytes = None
    pdf_bytes = None
    try:
        excel_bytes = gerar_excel(res)
    except Exception as e:
        logger.exception("Falha ao gerar Excel")
        st.error(f"Falha ao gerar Excel: {e}")

    try:
        pdf_bytes = gerar_pdf(res)
    except Exception as e:
        logger.exception("Falha ao gerar PDF")
        st.error(f"Falha ao gerar PDF: {e}")

    left, right = st.columns(2)
    with left:
        if excel_bytes is not None:
            st.download_button("⬇️ Baixar Excel", data=excel_bytes,
                file_name="simulacao_split_payment.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                use_container_width=True)
    with right:
        if pdf_bytes is not None:
            st.download_button("⬇️ Baixar PDF", data=pdf_bytes,
                file_name="simulacao_split_payment.pdf",
                mime="application/pdf",
                use_container_width=True)

def ui() -> None:
    st.set_page_config(page_title=APP_NAME, layout="wide")
    st.title(f"💸 {APP_NAME}")
    st.caption(APP_SUBTITLE + " — Ferramenta de planejamento. Verifique a regulamentação antes de decidir.")
    set_sidebar_style(SIDEBAR_WIDTH_PX)

    dados = _formulario()

    if st.sidebar.button("Calcular", type="primary", use_container_width=True):
        try:
            entradas = validar_entradas(dados)
            st.session_state["resultado"] = simular(entradas)
        except SimuladorError as exc:
            st.session_state.pop("resultado", None)
            st.error(exc.message)
            for campo, msg in exc.details.get("campos", {}).items():
                st.warning(f"{campo}: {msg}")

    res = st.session_state.get("resultado")
    if res is None:
        st.info("Preencha os dados na barra lateral e clique em **Calcular**.")
        return
    if res.impacto_base is None:
        st.warning("Período sem anos a projetar.")
        return

    _kpis(res)
    st.divider()
    tab_proj, tab_imp, tab_mem, tab_an = st.tabs(
        ["Projeção", f"Impacto {res.impacto_base.ano}", "Memória de Cálculo", "Análises"]
    )
    with tab_proj:
        _aba_projecao(res)
    with tab_imp:
        _aba_impacto(res)
    with tab_mem:
        _aba_memoria(res)
    with tab_an:
        try:
            _aba_analises(res)
        except SimuladorError as exc:
            st.error(exc.message)

    _exportar(res)

    with st.expander("Notas e Premissas"):
        st.markdown("""
        - **Regime atual**: o imposto líquido (débito − créditos) fica em giro até o **dia 25** do mês seguinte.
        - **Split Payment**: a fração do cronograma é retida na liquidação; o restante segue o prazo normal.
        - **Custo do capital**: diferença de capital de giro × taxa mensal informada (padrão **2,1% a.m.**).
        - **Necessidade adicional**: diferença × **1,2** (margem de segurança de 20%).
        - Setores com cronograma próprio sobrescrevem apenas os anos informados.
        - Ferramenta para **simulação**.
        """)

# ============================
# Self-tests
# ============================

def _run_self_tests():
    from split_core import EntradasSimulacao, acumular, calcular_impacto_ano, projetar

    assert format_brl(1234.5) == "R$ 1.234,50"
    assert brl_to_float("R$ 1.234,50") == 1234.5
    e = EntradasSimulacao("Teste", "comercio", "Lucro Real", 100000.0, 0.15, 30, 30, 30, 0.3, 0.7,
                          0.265, date(2026, 1, 1), date(2027, 12, 31))
    imp = calcular_impacto_ano(e, 2026)
    assert round(imp.resultado_split.valor_imposto_split, 2) == 2650.00
    assert round(imp.diferenca_capital_giro, 2) == -2650.00
    assert round(imp.necessidade_adicional_capital_giro, 2) == 3180.00
    proj = projetar(e, 2026, 2027, "moderado")
    assert round(proj.resultados_anuais[2027].faturamento, 2) == 105000.00
    assert round(proj.resultados_anuais[2027].resultado_split.valor_imposto_split, 2) == 6956.25
    assert projetar(e, 2027, 2026).resultados_anuais == {}
    acc = acumular(proj.resultados_anuais, 2026, 2027)
    assert round(acc.total_necessidade_capital_giro, 2) == round(3180 + 6956.25 * 1.2, 2)
    print("Self-tests OK")

if __name__ == "__main__":
    import sys
    init_logging()
    if "--selftest" in sys.argv:
        _run_self_tests()
    else:
        _ = ui()   # evita que o Streamlit escreva "None" na tela
