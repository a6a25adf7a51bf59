import os
from enum import Enum
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv

# Load environment variables from backend/.env
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path)


# 🤖 QWEN (DashScope) CONFIGURATION
QWEN_API_KEY = os.getenv("QWEN_API_KEY")
QWEN_API_URL = os.getenv(
    "QWEN_API_URL",
    "https://dashscope.aliyuncs.com/api/v1/services/aigc/text-generation/generation",
)
QWEN_MODEL = os.getenv("QWEN_MODEL", "qwen-turbo")

# Sampling is fixed server-side, never taken from the user
LLM_TEMPERATURE = 0.7
LLM_MAX_TOKENS = 1000
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))

SOURCE_TIMEOUT_SECONDS = float(os.getenv("SOURCE_TIMEOUT_SECONDS", "10"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# ☀️ WEATHER (気象庁)
JMA_FORECAST_URL = "https://www.jma.go.jp/bosai/forecast/data/forecast/{code}.json"
JMA_OVERVIEW_URL = "https://www.jma.go.jp/bosai/forecast/data/overview_forecast/{code}.json"


class WeatherArea(str, Enum):
    TOKYO = "tokyo"
    OSAKA = "osaka"
    AICHI = "aichi"
    FUKUOKA = "fukuoka"
    HOKKAIDO = "hokkaido"


AREA_CODES: Dict[WeatherArea, str] = {
    WeatherArea.TOKYO: "130000",
    WeatherArea.OSAKA: "270000",
    WeatherArea.AICHI: "230000",
    WeatherArea.FUKUOKA: "400000",
    WeatherArea.HOKKAIDO: "016000",
}


# 🏙️ REGIONAL INFO (東京都オープンデータ)
TOKYO_API_BASE = "https://service.api.metro.tokyo.lg.jp/api"


class DatasetType(str, Enum):
    POPULATION = "population"
    FACILITIES = "facilities"
    TOURISM = "tourism"
    TRANSPORT = "transport"


DATASETS: Dict[DatasetType, str] = {
    DatasetType.POPULATION: "t000001d0000000001-population-data-0",
    DatasetType.FACILITIES: "t132047d0000000004-44947822b3c13ba51b59e3278e2d018c-0",
    DatasetType.TOURISM: "t132047d0000000005-tourism-spots-data-0",
    DatasetType.TRANSPORT: "t000001d0000000020-transport-info-0",
}

DEFAULT_DATASET_LIMIT = 20


# 🚃 TRANSPORT (全国交通情報)
TRAIN_DELAY_URL = "https://rti-giken.jp/fhc/api/train_tetsudo/delay.json"
TRANSPORT_USER_AGENT = "Spec-AI/1.0"


class Region(str, Enum):
    HOKKAIDO = "hokkaido"
    TOHOKU = "tohoku"
    KANTO = "kanto"
    CHUBU = "chubu"
    KANSAI = "kansai"
    CHUGOKU = "chugoku"
    SHIKOKU = "shikoku"
    KYUSHU = "kyushu"


MAJOR_STATIONS: Dict[Region, List[str]] = {
    Region.HOKKAIDO: ["札幌", "新千歳空港", "函館"],
    Region.TOHOKU: ["仙台", "青森", "盛岡", "秋田", "山形", "福島"],
    Region.KANTO: ["東京", "新宿", "渋谷", "池袋", "横浜", "大宮"],
    Region.CHUBU: ["名古屋", "金沢", "新潟", "長野", "静岡"],
    Region.KANSAI: ["大阪", "京都", "神戸", "奈良", "和歌山"],
    Region.CHUGOKU: ["広島", "岡山", "山口", "鳥取", "島根"],
    Region.SHIKOKU: ["高松", "徳島", "松山", "高知"],
    Region.KYUSHU: ["福岡", "博多", "熊本", "鹿児島", "長崎", "大分"],
}


def validate_lookup_tables() -> None:
    """Fail fast if any enum member has no entry in its lookup table."""
    tables = (
        ("AREA_CODES", WeatherArea, AREA_CODES),
        ("DATASETS", DatasetType, DATASETS),
        ("MAJOR_STATIONS", Region, MAJOR_STATIONS),
    )
    for table_name, enum_cls, table in tables:
        missing = [member.value for member in enum_cls if not table.get(member)]
        if missing:
            raise ValueError(f"{table_name} is missing entries for: {', '.join(missing)}")


validate_lookup_tables()
