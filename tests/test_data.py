import pandas as pd
import pytest

from co2viz.config import ALL_CATEGORIES
from co2viz.data import DataError, available_years, iso3_countries, load_raw, prepare


def test_prepare_fills_categories_with_zero(co2_df):
    india = co2_df[(co2_df["country"] == "India") & (co2_df["year"] == 2020)].iloc[0]
    assert india["cement_co2"] == 0
    assert india["land_use_change_co2"] == 0
    # per càpita es manté NaN perquè les mitjanes l'ignorin
    assert pd.isna(india["co2_per_capita"])


def test_prepare_adds_missing_category_columns():
    raw = pd.DataFrame({"country": ["Spain"], "year": ["2020"], "co2": [200.0]})
    d = prepare(raw)
    for c in ALL_CATEGORIES:
        assert d[c].tolist() == [0.0]
    assert d["year"].tolist() == [2020]
    assert "iso_code" in d.columns


def test_prepare_requires_country_and_year():
    with pytest.raises(DataError):
        prepare(pd.DataFrame({"country": ["Spain"], "co2": [1.0]}))


def test_prepare_coerces_numeric_strings():
    raw = pd.DataFrame({"country": ["Spain"], "year": [2020], "coal_co2": ["n/a"], "co2": ["12.5"]})
    d = prepare(raw)
    assert d["coal_co2"].tolist() == [0.0]
    assert d["co2"].tolist() == [12.5]


def test_iso3_countries_drops_aggregates(co2_df):
    countries = set(iso3_countries(co2_df)["country"])
    assert countries == {"China", "United States", "India"}


def test_available_years(co2_df):
    assert available_years(co2_df) == [2009, 2010, 2015, 2019, 2020]


def test_load_raw_reads_csv(tmp_path, raw_co2):
    path = tmp_path / "co2.csv"
    raw_co2.to_csv(path, index=False)
    df = load_raw(str(path))
    assert len(df) == len(raw_co2)
    assert list(df.columns) == list(raw_co2.columns)
