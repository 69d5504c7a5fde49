import pytest

from co2viz.alluvial import Tier
from co2viz.config import FLOW_CATEGORIES, FUEL_CATEGORIES
from co2viz.transforms import (
    alluvial_graph,
    category_share_data,
    category_stack_data,
    grouped_bar_data,
    heatmap_data,
    map_data,
    waffle_cells,
)


def test_grouped_bar_data(co2_df):
    d = grouped_bar_data(co2_df, ["China", "United States", "Brazil"], 2020)

    assert d["country"].tolist() == ["China", "China", "United States", "United States", "Brazil", "Brazil"]
    assert d["label"].tolist()[:2] == ["2020", "Mitjana 2010–2020"]

    china = d[d["country"] == "China"]["value"].tolist()
    assert china[0] == 7.0
    # 2009 queda fora de la finestra
    assert china[1] == pytest.approx((7.0 + 7.2 + 6.0) / 3)

    us = d[d["country"] == "United States"]["value"].tolist()
    assert us == [14.0, 15.0]

    # país sense dades -> 0
    assert d[d["country"] == "Brazil"]["value"].tolist() == [0.0, 0.0]


def test_grouped_bar_data_missing_current_value(co2_df):
    d = grouped_bar_data(co2_df, ["India"], 2020)
    assert d["value"].tolist() == [0.0, 0.0]


def test_heatmap_data_keeps_requested_order(co2_df):
    d = heatmap_data(co2_df, ["United States", "China", "India"], 2020)
    assert d["country"].tolist() == ["United States", "China"]
    assert d["co2_per_capita"].tolist() == [14.0, 7.0]


def test_category_stack_data(co2_df):
    d = category_stack_data(co2_df, ["India", "United States", "China"], 2020, FUEL_CATEGORIES)
    assert d["country"].tolist() == ["India", "United States", "China"]
    assert d["total"].tolist() == [2400, 4700, 10000]


def test_category_stack_data_sorted_by_total(co2_df):
    d = category_stack_data(co2_df, ["India", "United States", "China"], 2020, FUEL_CATEGORIES, sort_by_total=True)
    assert d["country"].tolist() == ["China", "United States", "India"]


def test_category_share_data(co2_df):
    d = category_share_data(co2_df, ["China", "United States"], 2020, FUEL_CATEGORIES)
    assert "total" not in d.columns
    assert d[FUEL_CATEGORIES].sum(axis=1).tolist() == pytest.approx([1.0, 1.0])
    assert d.loc[d["country"] == "China", "coal_co2"].item() == pytest.approx(0.75)


def test_category_share_data_zero_total(co2_df):
    df = co2_df.copy()
    df.loc[df["country"] == "India", FUEL_CATEGORIES] = 0.0
    d = category_share_data(df, ["India"], 2020, FUEL_CATEGORIES)
    assert d[FUEL_CATEGORIES].sum(axis=1).tolist() == [0.0]


def test_waffle_cells_always_fill_the_grid(co2_df):
    cells = waffle_cells(co2_df, ["China", "United States", "Japan"], 2020, FUEL_CATEGORIES)

    counts = cells.groupby("country").size()
    assert counts.to_dict() == {"China": 100, "United States": 100}

    china = cells[cells["country"] == "China"].groupby("category").size()
    assert china.to_dict() == {"coal_co2": 75, "oil_co2": 15, "gas_co2": 6, "cement_co2": 4}

    # 19.15 / 42.55 / 34.04 / 0.85 / 3.40 -> residu més gran
    us = cells[cells["country"] == "United States"].groupby("category").size()
    assert us.to_dict() == {"coal_co2": 19, "oil_co2": 43, "gas_co2": 34, "cement_co2": 1, "other_industry_co2": 3}


def test_waffle_cells_grid_positions(co2_df):
    cells = waffle_cells(co2_df, ["China"], 2020, FUEL_CATEGORIES, per_row=10)
    last = cells.iloc[-1]
    assert (last["index"], last["row"], last["col"]) == (99, 9, 9)
    first_oil = cells[cells["category"] == "oil_co2"].iloc[0]
    assert (first_oil["row"], first_oil["col"]) == (7, 5)


def test_alluvial_graph(co2_df):
    mapping = {"China": "Asia", "India": "Asia", "United States": "North America"}
    nodes, edges = alluvial_graph(co2_df, mapping, 2020, FLOW_CATEGORIES)

    ids = [n.id for n in nodes]
    assert ids == ["Asia", "China"] + FLOW_CATEGORIES + ["India", "North America", "United States"]
    assert len(ids) == len(set(ids))

    tiers = {n.id: n.tier for n in nodes}
    assert tiers["Asia"] == Tier.ROOT
    assert tiers["United States"] == Tier.MID
    assert all(tiers[c] == Tier.LEAF for c in FLOW_CATEGORIES)

    pairs = {(e.source, e.target): e.weight for e in edges}
    assert pairs[("Asia", "China")] == 10000
    assert pairs[("China", "coal_co2")] == 7500
    assert pairs[("Asia", "India")] == 2400
    # valors zero no generen enllaç
    assert ("India", "cement_co2") not in pairs
    assert ("United States", "land_use_change_co2") not in pairs


def test_alluvial_graph_country_without_data(co2_df):
    nodes, edges = alluvial_graph(co2_df, {"Brazil": "South America"}, 2020, FLOW_CATEGORIES)
    assert [n.id for n in nodes][:2] == ["South America", "Brazil"]
    assert [(e.source, e.target, e.weight) for e in edges] == [("South America", "Brazil", 0.0)]


def test_map_data(co2_df):
    d = map_data(co2_df, 2020, FLOW_CATEGORIES)
    assert set(d["iso_code"]) == {"CHN", "USA", "IND"}
    assert list(d.columns) == ["country", "iso_code", "co2"] + FLOW_CATEGORIES
    assert d[FLOW_CATEGORIES].isna().sum().sum() == 0
