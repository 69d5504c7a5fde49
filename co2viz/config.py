DATA_URL = "https://raw.githubusercontent.com/owid/co2-data/master/owid-co2-data.csv"

REFERENCE_YEAR = 2020
DECADE_WINDOW = 10

# -----------------------------
# Països
# -----------------------------
FOCUS_COUNTRIES = [
    "United States", "China", "India", "Russia", "Japan",
    "Germany", "Canada", "Brazil", "United Kingdom", "Australia",
]
TOP_EMITTERS = ["United States", "China", "India", "Russia", "Japan"]

# Mapeig estàtic país -> continent (l'ordre defineix l'ordre dels nodes)
CONTINENT_MAP = {
    "United States": "North America",
    "Canada": "North America",
    "Brazil": "South America",
    "China": "Asia",
    "India": "Asia",
    "Russia": "Europe",
    "Germany": "Europe",
    "United Kingdom": "Europe",
    "Japan": "Asia",
    "Australia": "Oceania",
}

# -----------------------------
# Categories d'emissió
# -----------------------------
# Combustibles + indústria (barres apilades, 100%, waffle)
FUEL_CATEGORIES = ["coal_co2", "oil_co2", "gas_co2", "cement_co2", "other_industry_co2"]
# Fluxos i mapa: inclou canvi d'ús del sòl
FLOW_CATEGORIES = ["coal_co2", "oil_co2", "gas_co2", "cement_co2", "land_use_change_co2"]

ALL_CATEGORIES = list(dict.fromkeys(FUEL_CATEGORIES + FLOW_CATEGORIES))

# -----------------------------
# Colors
# -----------------------------
BAR_COLORS = {"current": "#00b4db", "decade": "#0083b0"}
CATEGORY_COLORS = ["#4CAF50", "#FF5722", "#03A9F4", "#FFC107", "#9E9E9E"]
WAFFLE_COLORS = ["#FF5733", "#FFC300", "#DAF7A6", "#C70039", "#900C3F"]
TIER_COLORS = ["#66c2a5", "#fc8d62", "#8da0cb"]
LINK_COLOR = "#ccc"
LINK_OPACITY = 0.8
NO_DATA_COLOR = "#ccc"

# -----------------------------
# Mides
# -----------------------------
CHART_WIDTH = 800
CHART_HEIGHT = 400
ALLUVIAL_SIZE = (800, 600)
ALLUVIAL_MARGIN = {"top": 20, "right": 20, "bottom": 20, "left": 50}
MAP_HEIGHT = 600


def category_label(category: str) -> str:
    return category.replace("_co2", "").upper()
