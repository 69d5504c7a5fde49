import numpy as np
import pandas as pd
import pytest

from co2viz.data import prepare


@pytest.fixture
def raw_co2():
    nan = np.nan
    cols = [
        "country", "iso_code", "year", "co2", "co2_per_capita", "population",
        "coal_co2", "oil_co2", "gas_co2", "cement_co2", "other_industry_co2",
        "land_use_change_co2", "flaring_co2",
    ]
    rows = [
        ["China", "CHN", 2020, 10000, 7.0, 1.4e9, 7500, 1500, 600, 400, 0, 500, 0],
        ["China", "CHN", 2019, 9800, 7.2, 1.4e9, 7400, 1400, 600, 400, nan, 500, 0],
        ["China", "CHN", 2010, 8500, 6.0, 1.3e9, 6500, 1200, 400, 400, nan, 500, 0],
        ["China", "CHN", 2009, 8000, 100.0, 1.3e9, 6000, 1100, 400, 500, nan, 500, 0],
        ["United States", "USA", 2020, 4700, 14.0, 3.3e8, 900, 2000, 1600, 40, 160, 0, 0],
        ["United States", "USA", 2015, 5300, 16.0, 3.2e8, 1400, 2200, 1500, 40, 160, nan, 0],
        ["India", "IND", 2020, 2400, nan, 1.4e9, 1700, 600, 100, nan, nan, nan, nan],
        ["World", "OWID_WRL", 2020, 35000, 4.5, 7.8e9, 15000, 11000, 7500, 1600, 300, 4000, 400],
    ]
    return pd.DataFrame(rows, columns=cols)


@pytest.fixture
def co2_df(raw_co2):
    return prepare(raw_co2)
