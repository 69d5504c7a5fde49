import numpy as np
import pandas as pd

from co2viz.alluvial import Edge, Node, Tier
from co2viz.config import DECADE_WINDOW
from co2viz.data import iso3_countries


def _rows_for_year(df: pd.DataFrame, countries: list[str], year: int) -> pd.DataFrame:
    d = df[(df["year"] == year) & (df["country"].isin(countries))]
    # Respecto l'ordre de la llista de països, no el del CSV
    d = d.drop_duplicates(subset=["country"]).set_index("country")
    order = [c for c in countries if c in d.index]
    return d.loc[order].reset_index()


# -----------------------------
# Barres agrupades + heatmap
# -----------------------------
def grouped_bar_data(
    df: pd.DataFrame,
    countries: list[str],
    year: int,
    window: int = DECADE_WINDOW,
) -> pd.DataFrame:
    y0 = year - window
    d = df[df["country"].isin(countries) & (df["year"] >= y0) & (df["year"] <= year)]

    current_label = str(year)
    decade_label = f"Mitjana {y0}–{year}"
    rows = []
    for country in countries:
        dc = d[d["country"] == country]
        cur = dc.loc[dc["year"] == year, "co2_per_capita"].dropna()
        avg = dc["co2_per_capita"].mean()  # ignora NaN
        rows.append({"country": country, "label": current_label, "value": float(cur.iloc[0]) if len(cur) else 0.0})
        rows.append({"country": country, "label": decade_label, "value": float(avg) if np.isfinite(avg) else 0.0})
    return pd.DataFrame(rows, columns=["country", "label", "value"])


def heatmap_data(df: pd.DataFrame, countries: list[str], year: int) -> pd.DataFrame:
    d = _rows_for_year(df, countries, year)
    return d[["country", "co2_per_capita"]].dropna(subset=["co2_per_capita"]).reset_index(drop=True)


# -----------------------------
# Barres apilades (absolut i 100%)
# -----------------------------
def category_stack_data(
    df: pd.DataFrame,
    countries: list[str],
    year: int,
    categories: list[str],
    sort_by_total: bool = False,
) -> pd.DataFrame:
    d = _rows_for_year(df, countries, year)
    out = d[["country"] + categories].copy()
    out[categories] = out[categories].fillna(0.0)
    out["total"] = out[categories].sum(axis=1)
    if sort_by_total:
        out = out.sort_values("total", ascending=False, kind="stable")
    return out.reset_index(drop=True)


def category_share_data(
    df: pd.DataFrame,
    countries: list[str],
    year: int,
    categories: list[str],
) -> pd.DataFrame:
    out = category_stack_data(df, countries, year, categories)
    total = out["total"].replace(0, np.nan)
    out[categories] = out[categories].div(total, axis=0).fillna(0.0)
    return out.drop(columns=["total"])


# -----------------------------
# Waffle
# -----------------------------
def _largest_remainder(values: np.ndarray, cells: int) -> np.ndarray:
    total = values.sum()
    if total <= 0:
        return np.zeros(len(values), dtype=int)
    exact = values / total * cells
    counts = np.floor(exact).astype(int)
    left = cells - counts.sum()
    if left > 0:
        # mergesort: en cas d'empat guanya la primera categoria
        order = np.argsort(-(exact - counts), kind="mergesort")
        counts[order[:left]] += 1
    return counts


def waffle_cells(
    df: pd.DataFrame,
    countries: list[str],
    year: int,
    categories: list[str],
    cells: int = 100,
    per_row: int = 10,
) -> pd.DataFrame:
    stack = category_stack_data(df, countries, year, categories)
    rows = []
    for _, r in stack.iterrows():
        counts = _largest_remainder(r[categories].to_numpy(dtype=float), cells)
        i = 0
        for cat, n in zip(categories, counts):
            for _ in range(n):
                rows.append({"country": r["country"], "category": cat, "index": i, "row": i // per_row, "col": i % per_row})
                i += 1
    return pd.DataFrame(rows, columns=["country", "category", "index", "row", "col"])


# -----------------------------
# Al·luvial
# -----------------------------
def alluvial_graph(
    df: pd.DataFrame,
    continent_map: dict[str, str],
    year: int,
    categories: list[str],
) -> tuple[list[Node], list[Edge]]:
    d = df[df["year"] == year].drop_duplicates(subset=["country"]).set_index("country")

    nodes: list[Node] = []
    edges: list[Edge] = []
    seen: set[str] = set()

    def add(node_id: str, tier: Tier) -> None:
        if node_id not in seen:
            nodes.append(Node(node_id, tier))
            seen.add(node_id)

    for country, continent in continent_map.items():
        add(continent, Tier.ROOT)
        add(country, Tier.MID)

        row = d.loc[country] if country in d.index else None
        total = row["co2"] if row is not None else 0.0
        edges.append(Edge(continent, country, float(total) if pd.notna(total) else 0.0))

        for cat in categories:
            add(cat, Tier.LEAF)
            value = row[cat] if row is not None and cat in row.index else 0.0
            if pd.notna(value) and value > 0:
                edges.append(Edge(country, cat, float(value)))

    return nodes, edges


# -----------------------------
# Mapa
# -----------------------------
def map_data(df: pd.DataFrame, year: int, categories: list[str]) -> pd.DataFrame:
    d = iso3_countries(df)
    d = d[d["year"] == year]
    out = d[["country", "iso_code", "co2"] + categories].copy()
    out[["co2"] + categories] = out[["co2"] + categories].fillna(0.0)
    return out.reset_index(drop=True)
