# app.py
import pandas as pd
import streamlit as st
from structlog import get_logger

from co2viz import charts, transforms
from co2viz.alluvial import AlluvialError, LayoutParams, OverflowPolicy, compute_alluvial
from co2viz.config import (
    ALLUVIAL_MARGIN,
    ALLUVIAL_SIZE,
    CONTINENT_MAP,
    DATA_URL,
    DECADE_WINDOW,
    FLOW_CATEGORIES,
    FOCUS_COUNTRIES,
    FUEL_CATEGORIES,
    REFERENCE_YEAR,
    TOP_EMITTERS,
    category_label,
)
from co2viz.data import DataError, available_years, load_raw, prepare

log = get_logger()


# -----------------------------
# Carrega + preprocessament base
# -----------------------------
@st.cache_data(show_spinner=False)
def load_prepared(url: str = DATA_URL) -> pd.DataFrame:
    return prepare(load_raw(url))


def alluvial_params(overflow: OverflowPolicy) -> LayoutParams:
    w, h = ALLUVIAL_SIZE
    return LayoutParams(
        width=w - ALLUVIAL_MARGIN["left"] - ALLUVIAL_MARGIN["right"],
        height=h - ALLUVIAL_MARGIN["top"] - ALLUVIAL_MARGIN["bottom"],
        overflow=overflow,
    )


def render_alluvial(df: pd.DataFrame, year: int, overflow: OverflowPolicy) -> None:
    nodes, edges = transforms.alluvial_graph(df, CONTINENT_MAP, year, FLOW_CATEGORIES)
    params = alluvial_params(overflow)
    try:
        layout = compute_alluvial(nodes, edges, params)
    except AlluvialError as e:
        # Aborto només aquest gràfic; la resta de la pàgina continua
        log.error("alluvial.failed", error=str(e), kind=type(e).__name__)
        st.error(f"No s'ha pogut calcular el diagrama al·luvial: {e}")
        return
    st.plotly_chart(charts.alluvial_chart(nodes, layout, params), use_container_width=False)


# -----------------------------
# UI
# -----------------------------
st.set_page_config(page_title="OWID CO₂ — Emissions per país i categoria", layout="wide")

try:
    df = load_prepared()
except DataError as e:
    log.error("data.invalid", error=str(e))
    st.error(f"El dataset no té el format esperat: {e}")
    st.stop()

st.title("Emissions de CO₂ (OWID) — Comparacions per país i per font")
st.caption("Deu països de referència. Emissions territorials; els valors absents es compten com a zero.")

# Sidebar controls
st.sidebar.header("Controls")

years = available_years(df)
year = st.sidebar.select_slider(
    "Any de referència",
    options=years,
    value=REFERENCE_YEAR if REFERENCE_YEAR in years else years[-1],
)
window = st.sidebar.slider("Finestra de la mitjana (anys)", 1, 30, DECADE_WINDOW, 1)

overflow = st.sidebar.radio(
    "Al·luvial: si els nodes no hi caben",
    options=list(OverflowPolicy),
    format_func=lambda p: {"raise": "Error", "scale": "Reduir espaiat", "allow": "Desbordar"}[p.value],
    index=0,
)

tab1, tab2, tab3, tab4, tab5 = st.tabs(["Per càpita", "Per categoria", "Waffle", "Al·luvial", "Mapa"])


with tab1:
    st.subheader("CO₂ per càpita")

    bars = transforms.grouped_bar_data(df, FOCUS_COUNTRIES, year, window=window)
    st.plotly_chart(charts.grouped_bar_chart(bars), use_container_width=True)

    heat = transforms.heatmap_data(df, FOCUS_COUNTRIES, year)
    if len(heat) == 0:
        st.warning(f"No hi ha dades de CO₂ per càpita per a {year}.")
    else:
        st.plotly_chart(charts.heatmap_chart(heat), use_container_width=True)

with tab2:
    st.subheader("Emissions per categoria")

    top = transforms.category_stack_data(df, TOP_EMITTERS, year, FUEL_CATEGORIES)
    if len(top) == 0:
        st.warning(f"No hi ha dades per als principals emissors el {year}.")
    else:
        st.plotly_chart(charts.stacked_bar_chart(top, FUEL_CATEGORIES), use_container_width=True)

    stack = transforms.category_stack_data(df, FOCUS_COUNTRIES, year, FUEL_CATEGORIES, sort_by_total=True)
    share = transforms.category_share_data(df, FOCUS_COUNTRIES, year, FUEL_CATEGORIES)
    if len(stack) == 0:
        st.warning(f"No hi ha dades per als països seleccionats el {year}.")
    else:
        st.plotly_chart(charts.horizontal_stacked_bar_chart(stack, FUEL_CATEGORIES), use_container_width=True)
        st.plotly_chart(charts.stacked_share_chart(share, FUEL_CATEGORIES), use_container_width=True)

with tab3:
    st.subheader("Waffle: composició de les emissions")

    cells = transforms.waffle_cells(df, FOCUS_COUNTRIES, year, FUEL_CATEGORIES)
    if len(cells) == 0:
        st.warning(f"No hi ha emissions per categoria el {year}.")
    else:
        st.plotly_chart(charts.waffle_chart(cells, FUEL_CATEGORIES), use_container_width=True)
        st.caption("Percentatges arrodonits pel mètode del residu més gran: cada país suma exactament 100 quadrats.")

with tab4:
    st.subheader("Continent → país → categoria")
    render_alluvial(df, year, overflow)
    st.caption("Gruix de l'enllaç = Mt / 1000 (mínim 2 px).")

with tab5:
    st.subheader("Mapa d'emissions")

    column = st.selectbox(
        "Categoria",
        options=["co2"] + FLOW_CATEGORIES,
        format_func=lambda c: "Total" if c == "co2" else category_label(c),
        key="map_category",
    )
    dM = transforms.map_data(df, year, FLOW_CATEGORIES)
    if len(dM) == 0:
        st.warning(f"No hi ha dades de països per a {year}.")
    else:
        st.plotly_chart(charts.choropleth_map(dM, column, FLOW_CATEGORIES), use_container_width=True)
        st.caption("Gris = sense dades o zero per a la categoria seleccionada.")
