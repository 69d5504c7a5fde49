import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from co2viz.alluvial import AlluvialLayout, LayoutParams, Node
from co2viz.config import (
    ALLUVIAL_MARGIN,
    BAR_COLORS,
    CATEGORY_COLORS,
    CHART_HEIGHT,
    LINK_COLOR,
    LINK_OPACITY,
    MAP_HEIGHT,
    NO_DATA_COLOR,
    TIER_COLORS,
    WAFFLE_COLORS,
    category_label,
)

CO2_PC_LABEL = "CO₂ per càpita (t/persona)"
MT_LABEL = "CO₂ (Mt)"


def _long_by_category(data: pd.DataFrame, categories: list[str]) -> pd.DataFrame:
    d = data.melt(id_vars="country", value_vars=categories, var_name="category", value_name="value")
    d["categoria"] = d["category"].map(category_label)
    return d


def _color_map(categories: list[str], palette: list[str]) -> dict[str, str]:
    return {category_label(c): palette[i % len(palette)] for i, c in enumerate(categories)}


# -----------------------------
# Barres agrupades
# -----------------------------
def grouped_bar_chart(data: pd.DataFrame) -> go.Figure:
    labels = list(dict.fromkeys(data["label"]))
    colors = [BAR_COLORS["current"], BAR_COLORS["decade"]]
    fig = px.bar(
        data,
        x="country",
        y="value",
        color="label",
        barmode="group",
        title="CO₂ per càpita: any de referència vs mitjana de la dècada",
        labels={"country": "País", "value": CO2_PC_LABEL, "label": ""},
        color_discrete_map={lab: colors[i % 2] for i, lab in enumerate(labels)},
        category_orders={"country": list(dict.fromkeys(data["country"])), "label": labels},
        height=CHART_HEIGHT,
    )
    fig.update_traces(hovertemplate="País: %{x}<br>%{y:.2f} t/persona<extra></extra>")
    fig.update_xaxes(tickangle=-45)
    return fig


# -----------------------------
# Heatmap
# -----------------------------
def heatmap_chart(data: pd.DataFrame) -> go.Figure:
    fig = go.Figure(
        go.Heatmap(
            z=[data["co2_per_capita"].tolist()],
            x=data["country"].tolist(),
            y=["CO₂ per càpita"],
            colorscale="Blues",
            zmin=0,
            xgap=2,
            hovertemplate="País: %{x}<br>CO₂ per càpita: %{z:.2f} t<extra></extra>",
        )
    )
    fig.update_layout(title="CO₂ per càpita (heatmap)", height=CHART_HEIGHT)
    fig.update_xaxes(tickangle=-45)
    return fig


# -----------------------------
# Barres apilades
# -----------------------------
def stacked_bar_chart(data: pd.DataFrame, categories: list[str]) -> go.Figure:
    d = _long_by_category(data, categories)
    fig = px.bar(
        d,
        x="country",
        y="value",
        color="categoria",
        title="Emissions per categoria (principals emissors)",
        labels={"country": "País", "value": MT_LABEL, "categoria": "Categoria"},
        color_discrete_map=_color_map(categories, CATEGORY_COLORS),
        category_orders={"country": data["country"].tolist()},
        height=CHART_HEIGHT,
    )
    fig.update_traces(hovertemplate="%{x}<br>%{y:.1f} Mt<extra></extra>")
    fig.update_xaxes(tickangle=-45)
    return fig


def stacked_share_chart(data: pd.DataFrame, categories: list[str]) -> go.Figure:
    d = _long_by_category(data, categories)
    fig = px.bar(
        d,
        x="country",
        y="value",
        color="categoria",
        title="Composició de les emissions (100%)",
        labels={"country": "País", "value": "Percentatge", "categoria": "Categoria"},
        color_discrete_map=_color_map(categories, CATEGORY_COLORS),
        category_orders={"country": data["country"].tolist()},
        height=CHART_HEIGHT,
    )
    fig.update_traces(hovertemplate="%{x}<br>%{y:.1%}<extra></extra>")
    fig.update_yaxes(tickformat=".0%", range=[0, 1])
    fig.update_xaxes(tickangle=-45)
    return fig


def horizontal_stacked_bar_chart(data: pd.DataFrame, categories: list[str]) -> go.Figure:
    d = _long_by_category(data, categories)
    fig = px.bar(
        d,
        x="value",
        y="country",
        color="categoria",
        orientation="h",
        title="Emissions per categoria (ordenat pel total)",
        labels={"country": "País", "value": MT_LABEL, "categoria": "Categoria"},
        color_discrete_map=_color_map(categories, CATEGORY_COLORS),
        category_orders={"country": data["country"].tolist()},
        height=CHART_HEIGHT,
    )
    fig.update_traces(hovertemplate="%{y}<br>%{x:.1f} Mt<extra></extra>")
    return fig


# -----------------------------
# Waffle
# -----------------------------
def waffle_chart(cells: pd.DataFrame, categories: list[str], per_row: int = 10) -> go.Figure:
    d = cells.copy()
    d["categoria"] = d["category"].map(category_label)
    countries = list(dict.fromkeys(d["country"]))
    fig = px.scatter(
        d,
        x="col",
        y="row",
        color="categoria",
        facet_col="country",
        facet_col_wrap=5,
        title="Cada quadrat = 1% de les emissions del país",
        color_discrete_map=_color_map(categories, WAFFLE_COLORS),
        category_orders={"country": countries, "categoria": [category_label(c) for c in categories]},
        labels={"categoria": "Categoria"},
        hover_data={"country": True, "col": False, "row": False},
        height=260 * max(1, -(-len(countries) // 5)),
    )
    fig.update_traces(marker=dict(symbol="square", size=14, line=dict(width=0)))
    fig.update_xaxes(visible=False, range=[-0.7, per_row - 0.3])
    fig.update_yaxes(visible=False, range=[per_row - 0.3, -0.7])
    # "country=China" -> "China"
    fig.for_each_annotation(lambda a: a.update(text=a.text.split("=")[-1]))
    return fig


# -----------------------------
# Al·luvial
# -----------------------------
def alluvial_chart(
    nodes: list[Node],
    layout: AlluvialLayout,
    params: LayoutParams,
    margin: dict | None = None,
) -> go.Figure:
    if margin is None:
        margin = ALLUVIAL_MARGIN
    fig = go.Figure()
    pos = layout.positions

    # Enllaços primer perquè quedin per sota dels nodes
    for c in layout.curves:
        fig.add_shape(
            type="path",
            path=c.svg_path(),
            line=dict(color=LINK_COLOR, width=c.stroke_width),
            opacity=LINK_OPACITY,
            layer="below",
        )

    for n in nodes:
        p = pos[n.id]
        fig.add_shape(
            type="rect",
            x0=p.x,
            y0=p.y,
            x1=p.x + params.node_width,
            y1=p.y + params.node_height,
            fillcolor=TIER_COLORS[int(n.tier) % len(TIER_COLORS)],
            line=dict(width=0),
        )

    fig.add_trace(
        go.Scatter(
            x=[pos[n.id].x + 10 for n in nodes],
            y=[pos[n.id].y + params.node_height / 2 for n in nodes],
            text=[n.id for n in nodes],
            mode="text",
            textposition="middle right",
            textfont=dict(size=12, color="#000"),
            hoverinfo="skip",
            showlegend=False,
        )
    )

    # Marcadors invisibles al mig de cada corba per tenir hover
    mids = [c.point_at(0.5) for c in layout.curves]
    fig.add_trace(
        go.Scatter(
            x=[m.x for m in mids],
            y=[m.y for m in mids],
            mode="markers",
            marker=dict(size=10, opacity=0),
            hovertext=[f"{c.source} → {c.target}: {c.weight:,.1f} Mt" for c in layout.curves],
            hoverinfo="text",
            showlegend=False,
        )
    )

    fig.update_xaxes(visible=False, range=[-margin["left"], params.width + margin["right"]])
    # Eix Y invertit: y creix cap avall, com en SVG
    fig.update_yaxes(visible=False, range=[params.height + margin["bottom"], -margin["top"]])
    fig.update_layout(
        title="Fluxos d'emissions: continent → país → categoria",
        width=params.width + margin["left"] + margin["right"],
        height=params.height + margin["top"] + margin["bottom"] + 60,
        plot_bgcolor="white",
        margin=dict(l=0, r=0, t=60, b=0),
    )
    return fig


# -----------------------------
# Mapa
# -----------------------------
def choropleth_map(data: pd.DataFrame, column: str, categories: list[str]) -> go.Figure:
    d = data.copy()
    # Sense dades (o zero) -> NaN, es veu amb el color de terra gris
    d["valor"] = d[column].where(d[column] > 0)
    vmax = float(d["valor"].max()) if d["valor"].notna().any() else 1.0

    hover = {"valor": False, "iso_code": False, "co2": ":.1f"}
    hover.update({c: ":.1f" for c in categories})
    labels = {c: category_label(c) for c in categories}
    labels.update({"co2": "Total (Mt)", "valor": "Mt"})

    fig = px.choropleth(
        d,
        locations="iso_code",
        color="valor",
        hover_name="country",
        hover_data=hover,
        labels=labels,
        color_continuous_scale="Blues",
        range_color=(0, vmax),
        projection="mercator",
        title=f"Emissions per país — {labels.get(column, column)}",
        height=MAP_HEIGHT,
    )
    fig.update_geos(showland=True, landcolor=NO_DATA_COLOR, showcountries=True, countrycolor="#000", fitbounds=False)
    fig.update_traces(marker_line_width=0.5, marker_line_color="#000")
    return fig
