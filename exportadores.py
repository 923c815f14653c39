# -*- coding: utf-8 -*-
# exportadores.py — Tabelas (pandas), Excel (xlsxwriter) e PDF (reportlab)
# -------------------------------------------------------------
# Tudo parte de um ResultadoSimulacao; nada é recalculado aqui.
# -------------------------------------------------------------

import io

import numpy as np
import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas
from xlsxwriter.utility import xl_range

from config import APP_NAME, APP_VERSION
from formatacao import format_brl, format_num_br, format_pct_br
from memoria_calculo import gerar_secao_projecao
from simulador import ResultadoSimulacao
from split_core import EntradasSimulacao, ImpactoAcumulado, ImpactoAnual, ProjecaoTemporal

COLUNAS_MOEDA = {
    "Faturamento", "Imposto Líquido", "Valor Retido", "Capital de Giro Atual",
    "Capital de Giro Split", "Diferença", "Necessidade Adicional", "Custo Mensal",
    "Custo Anual", "Regime Atual", "Split Payment", "Valor",
}
COLUNAS_PERC = {"Implementação", "Margem Ajustada"}


# ============================
# DataFrames
# ============================

def df_projecao(projecao: ProjecaoTemporal) -> pd.DataFrame:
    linhas = []
    for ano, imp in projecao.resultados_anuais.items():
        linhas.append({
            "Ano": ano,
            "Implementação": imp.resultado_split.percentual_implementacao,
            "Faturamento": imp.faturamento,
            "Imposto Líquido": imp.resultado_atual.valor_imposto_liquido,
            "Valor Retido": imp.resultado_split.valor_imposto_split,
            "Capital de Giro Atual": imp.resultado_atual.capital_giro_disponivel,
            "Capital de Giro Split": imp.resultado_split.capital_giro_disponivel,
            "Diferença": imp.diferenca_capital_giro,
            "Necessidade Adicional": imp.necessidade_adicional_capital_giro,
            "Custo Mensal": imp.custo_mensal_capital_giro,
            "Custo Anual": imp.custo_anual_capital_giro,
            "Impacto Margem (p.p.)": imp.impacto_margem,
            "Margem Ajustada": imp.margem_operacional_ajustada,
        })
    colunas = ["Ano", "Implementação", "Faturamento", "Imposto Líquido", "Valor Retido",
               "Capital de Giro Atual", "Capital de Giro Split", "Diferença", "Necessidade Adicional",
               "Custo Mensal", "Custo Anual", "Impacto Margem (p.p.)", "Margem Ajustada"]
    return pd.DataFrame(linhas, columns=colunas)

def df_impacto(impacto: ImpactoAnual) -> pd.DataFrame:
    """Comparativo regime atual x Split Payment para um ano."""
    a, s = impacto.resultado_atual, impacto.resultado_split
    linhas = [
        {"Item": "Imposto Total", "Regime Atual": a.valor_imposto_total, "Split Payment": s.valor_imposto_total},
        {"Item": "Imposto Líquido", "Regime Atual": a.valor_imposto_liquido, "Split Payment": s.valor_imposto_liquido},
        {"Item": "Retido na Liquidação", "Regime Atual": 0.0, "Split Payment": s.valor_imposto_split},
        {"Item": "Recolhido no Prazo", "Regime Atual": a.valor_imposto_liquido, "Split Payment": s.valor_imposto_normal},
        {"Item": "Recebimento à Vista", "Regime Atual": a.recebimento_vista, "Split Payment": s.recebimento_vista},
        {"Item": "Recebimento a Prazo", "Regime Atual": a.recebimento_prazo, "Split Payment": s.recebimento_prazo},
        {"Item": "Capital de Giro Disponível", "Regime Atual": a.capital_giro_disponivel,
         "Split Payment": s.capital_giro_disponivel},
        {"Item": "Diferença de Capital de Giro", "Regime Atual": np.nan,
         "Split Payment": impacto.diferenca_capital_giro},
    ]
    return pd.DataFrame(linhas, columns=["Item", "Regime Atual", "Split Payment"])

def df_acumulado(acumulado: ImpactoAcumulado) -> pd.DataFrame:
    return pd.DataFrame([
        {"Item": "Necessidade Total de Capital de Giro", "Valor": acumulado.total_necessidade_capital_giro},
        {"Item": "Custo Financeiro Total", "Valor": acumulado.custo_financeiro_total},
        {"Item": "Impacto Médio na Margem (p.p.)", "Valor": acumulado.impacto_medio_margem},
    ], columns=["Item", "Valor"])

def _linhas_parametros(e: EntradasSimulacao):
    return [
        ("Empresa", e.empresa, "text"),
        ("Setor", e.setor, "text"),
        ("Regime Tributário", e.regime, "text"),
        ("Faturamento Mensal", e.faturamento, "money"),
        ("Margem Operacional", e.margem, "percent"),
        ("Alíquota Efetiva", e.aliquota, "percent"),
        ("Créditos", e.creditos, "money"),
        ("PMR (dias)", e.pmr, "int"),
        ("PMP (dias)", e.pmp, "int"),
        ("PME (dias)", e.pme, "int"),
        ("Vendas à Vista", e.perc_vista, "percent"),
        ("Vendas a Prazo", e.perc_prazo, "percent"),
        ("Período", f"{e.data_inicial:%d/%m/%Y} a {e.data_final:%d/%m/%Y}", "text"),
        ("Cenário", e.cenario, "text"),
        ("Taxa de Capital de Giro (a.m.)", e.taxa_capital_giro, "percent"),
    ]


# ============================
# Excel
# ============================

def gerar_excel(resultado: ResultadoSimulacao) -> bytes:
    e = resultado.entradas
    dfp = df_projecao(resultado.projecao)
    dfa = df_acumulado(resultado.impacto_acumulado)
    dfi = df_impacto(resultado.impacto_base) if resultado.impacto_base is not None else None

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        pd.DataFrame().to_excel(writer, sheet_name="Resumo", index=False)
        wb = writer.book
        ws = writer.sheets["Resumo"]

        money_fmt = wb.add_format({"num_format": "R$ #,##0.00"})
        perc_fmt = wb.add_format({"num_format": "0.00%"})
        num_fmt = wb.add_format({"num_format": "0.0000"})
        header_fmt = wb.add_format({"bg_color": "#38B0DE", "font_color": "#FFFFFF", "bold": True,
                                    "align": "center", "valign": "vcenter"})
        title_fmt = wb.add_format({"bold": True, "font_size": 14})

        def fmt_coluna(col):
            if col in COLUNAS_MOEDA:
                return money_fmt
            if col in COLUNAS_PERC:
                return perc_fmt
            if "p.p." in col:
                return num_fmt
            return None

        def write_block(sheet, title, start_row, start_col, df):
            sheet.merge_range(start_row, start_col, start_row, start_col + max(df.shape[1] - 1, 1), title, title_fmt)
            r = start_row + 1
            for j, col in enumerate(df.columns):
                sheet.write(r, start_col + j, col, header_fmt)
            r += 1
            for i in range(len(df)):
                rotulo = str(df.iloc[i, 0])
                for j, col in enumerate(df.columns):
                    val = df.iloc[i, j]
                    fmt = fmt_coluna(col)
                    if col == "Valor" and "p.p." in rotulo:
                        fmt = num_fmt
                    if pd.isna(val):
                        sheet.write_blank(r + i, start_col + j, None, fmt)
                    elif isinstance(val, (int, float, np.integer, np.floating)):
                        sheet.write_number(r + i, start_col + j, float(val), fmt)
                    else:
                        sheet.write(r + i, start_col + j, val, fmt)
            for j, col in enumerate(df.columns):
                sheet.set_column(start_col + j, start_col + j, 30 if col == "Item" else 18)
            return r + len(df) + 2

        # — Resumo: impacto do primeiro ano + acumulado
        row = 0
        if dfi is not None:
            row = write_block(ws, f"Impacto Imediato ({resultado.impacto_base.ano})", row, 0, dfi)
        row = write_block(ws, "Impacto Acumulado", row, 0, dfa)

        # — Parâmetros (lado direito)
        ws.merge_range(0, 5, 0, 6, "Entradas (Parâmetros)", title_fmt)
        ws.write(1, 5, "Parâmetro", header_fmt)
        ws.write(1, 6, "Informação", header_fmt)
        for i, (nome, valor, tipo) in enumerate(_linhas_parametros(e), start=2):
            ws.write(i, 5, nome)
            if tipo == "money":
                ws.write_number(i, 6, float(valor), money_fmt)
            elif tipo == "percent":
                ws.write_number(i, 6, float(valor), perc_fmt)
            elif tipo == "int":
                ws.write_number(i, 6, int(valor))
            else:
                ws.write(i, 6, str(valor))
        ws.set_column(5, 5, 30)
        ws.set_column(6, 6, 26)

        # — Projeção com gráfico
        pd.DataFrame().to_excel(writer, sheet_name="Projeção", index=False)
        wsp = writer.sheets["Projeção"]
        write_block(wsp, f"Projeção {resultado.projecao.ano_inicial}–{resultado.projecao.ano_final} "
                         f"({resultado.projecao.cenario})", 0, 0, dfp)

        if len(dfp):
            first, last = 2, 1 + len(dfp)
            col_ano = 0
            col_nec = list(dfp.columns).index("Necessidade Adicional")
            chart = wb.add_chart({"type": "column"})
            chart.add_series({
                "name": "Necessidade Adicional",
                "categories": f"='Projeção'!{xl_range(first, col_ano, last, col_ano)}",
                "values": f"='Projeção'!{xl_range(first, col_nec, last, col_nec)}",
                "data_labels": {"value": True, "num_format": "R$ #,##0"},
            })
            chart.set_title({"name": "Necessidade adicional de capital de giro por ano"})
            chart.set_legend({"none": True})
            chart.set_y_axis({"num_format": "R$ #,##0"})
            chart.set_size({"width": 620, "height": 320})
            wsp.insert_chart(last + 3, 0, chart)

        # — Memória de cálculo: uma linha por linha de texto
        pd.DataFrame().to_excel(writer, sheet_name="Memória de Cálculo", index=False)
        wsm = writer.sheets["Memória de Cálculo"]
        r = 0
        textos = list(resultado.memoria_calculo.values())
        textos.append(gerar_secao_projecao(resultado.projecao, resultado.impacto_acumulado))
        for texto in textos:
            for linha in texto.splitlines():
                wsm.write(r, 0, linha, title_fmt if linha.startswith("===") else None)
                r += 1
            r += 1
        wsm.set_column(0, 0, 120)

    return output.getvalue()


# ============================
# PDF
# ============================

def gerar_pdf(resultado: ResultadoSimulacao) -> bytes:
    e = resultado.entradas
    acc = resultado.impacto_acumulado

    buff = io.BytesIO()
    c = canvas.Canvas(buff, pagesize=A4)
    w, h = A4
    y = h - 2*cm

    def quebra(y, fonte=("Helvetica", 10)):
        if y < 3*cm:
            c.showPage()
            c.setFont(*fonte)
            return h - 2*cm
        return y

    def titulo(texto, y):
        y = quebra(y - 0.2*cm)
        c.setFont("Helvetica-Bold", 12)
        c.drawString(2*cm, y, texto)
        c.setFont("Helvetica", 10)
        return y - 0.5*cm

    c.setFont("Helvetica-Bold", 16)
    c.drawString(2*cm, y, f"{APP_NAME} — Relatório")
    y -= 0.5*cm
    c.setFont("Helvetica", 8)
    c.drawString(2*cm, y, f"v{APP_VERSION}")
    y -= 0.6*cm

    y = titulo("Parâmetros informados", y)
    for nome, valor, tipo in _linhas_parametros(e):
        if tipo == "money":
            txt = format_brl(float(valor))
        elif tipo == "percent":
            txt = format_pct_br(float(valor))
        else:
            txt = str(valor)
        c.drawString(2.5*cm, y, f"{nome}: {txt}"); y -= 0.4*cm
        y = quebra(y)

    imp = resultado.impacto_base
    if imp is not None:
        y = titulo(f"Impacto imediato ({imp.ano})", y)
        for _, linha in df_impacto(imp).iterrows():
            atual = "" if pd.isna(linha["Regime Atual"]) else format_brl(float(linha["Regime Atual"]))
            c.drawString(2.5*cm, y, linha["Item"])
            c.drawRightString(13*cm, y, atual)
            c.drawRightString(18*cm, y, format_brl(float(linha["Split Payment"])))
            y -= 0.38*cm
            y = quebra(y)

    y = titulo(f"Projeção ({resultado.projecao.cenario}, "
               f"{format_pct_br(resultado.projecao.taxa_crescimento)} a.a.)", y)
    c.setFont("Helvetica-Bold", 9)
    cabecalho = [("Ano", 2.5), ("Impl.", 5.0), ("Faturamento", 9.0), ("Diferença", 13.0), ("Necessidade", 18.0)]
    c.drawString(cabecalho[0][1]*cm, y, cabecalho[0][0])
    for nome, x in cabecalho[1:]:
        c.drawRightString(x*cm, y, nome)
    y -= 0.4*cm
    c.setFont("Helvetica", 9)
    for ano, r in resultado.projecao.resultados_anuais.items():
        c.drawString(2.5*cm, y, str(ano))
        c.drawRightString(5.0*cm, y, format_pct_br(r.resultado_split.percentual_implementacao, 0))
        c.drawRightString(9.0*cm, y, format_brl(r.faturamento))
        c.drawRightString(13.0*cm, y, format_brl(r.diferenca_capital_giro))
        c.drawRightString(18.0*cm, y, format_brl(r.necessidade_adicional_capital_giro))
        y -= 0.36*cm
        y = quebra(y, ("Helvetica", 9))

    y = titulo("Impacto acumulado", y)
    for nome, val in (
        ("Necessidade total de capital de giro", format_brl(acc.total_necessidade_capital_giro)),
        ("Custo financeiro total", format_brl(acc.custo_financeiro_total)),
        ("Impacto médio na margem", f"{format_num_br(acc.impacto_medio_margem, 4)} p.p."),
    ):
        c.drawString(2.5*cm, y, f"{nome}: {val}"); y -= 0.4*cm
        y = quebra(y)

    c.showPage(); c.save()
    return buff.getvalue()
