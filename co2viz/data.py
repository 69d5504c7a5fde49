import pandas as pd
from structlog import get_logger

from co2viz.config import ALL_CATEGORIES, DATA_URL

log = get_logger()

BASE_COLUMNS = ["country", "iso_code", "year", "co2", "co2_per_capita", "population"]
REQUIRED_COLUMNS = ["country", "year"]


class DataError(ValueError):
    pass


def load_raw(url: str = DATA_URL) -> pd.DataFrame:
    log.info("data.load", url=url)
    df = pd.read_csv(url)
    log.info("data.loaded", rows=len(df), columns=len(df.columns))
    return df


def prepare(df: pd.DataFrame) -> pd.DataFrame:
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DataError(f"Falten columnes obligatòries: {missing}")

    cols = [c for c in BASE_COLUMNS + ALL_CATEGORIES if c in df.columns]
    d = df[cols].copy()

    # Columnes de categoria absents -> 0 (com el `|| 0` original)
    for c in ALL_CATEGORIES:
        if c not in d.columns:
            d[c] = 0.0
    for c in ["co2", "co2_per_capita", "population"]:
        if c not in d.columns:
            d[c] = float("nan")
    if "iso_code" not in d.columns:
        d["iso_code"] = pd.NA

    num = ["co2", "co2_per_capita", "population"] + ALL_CATEGORIES
    d[num] = d[num].apply(pd.to_numeric, errors="coerce")
    d[ALL_CATEGORIES] = d[ALL_CATEGORIES].fillna(0.0)

    d["year"] = pd.to_numeric(d["year"], errors="coerce")
    d = d.dropna(subset=["year"]).copy()
    d["year"] = d["year"].astype(int)
    return d


def iso3_countries(df: pd.DataFrame) -> pd.DataFrame:
    # Només ISO3 reals (fora OWID_* i agregats sense codi)
    iso = df["iso_code"].astype("string")
    mask = iso.str.fullmatch(r"[A-Z]{3}").fillna(False).astype(bool)
    return df[mask].copy()


def available_years(df: pd.DataFrame) -> list[int]:
    return sorted(int(y) for y in df["year"].dropna().unique())
