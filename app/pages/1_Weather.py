import sys
from pathlib import Path
from typing import Optional

import pandas as pd
import streamlit as st

APP_DIR = Path(__file__).resolve().parents[1]
sys.path.extend([str(APP_DIR.parent), str(APP_DIR)])

from farm_assistant.errors import FarmAssistantError  # noqa: E402
from farm_assistant.weather import WEATHER_ERROR, WeatherReport, fetch_current_weather  # noqa: E402

from utils.session import configure_logging, get_client, language_selector, leave_screens, load_app_settings  # noqa: E402

st.set_page_config(page_title="Weather · Farm Assistant", layout="centered")
configure_logging()

settings = load_app_settings()
t = language_selector(settings)
leave_screens()


@st.cache_data(ttl=600, show_spinner="Fetching weather...")
def load_weather(server_url: Optional[str], use_mock: bool, timeout: Optional[float]) -> WeatherReport:
    client = get_client(server_url, use_mock, timeout)
    if client is None:
        raise FarmAssistantError(WEATHER_ERROR)
    return fetch_current_weather(client)


st.title(t("weatherInfo"))

try:
    report = load_weather(settings.server_url, settings.use_mock, settings.timeout)
except FarmAssistantError as e:
    st.error(e.message)
else:
    city, temp, description = report.headline()
    st.subheader(city)
    st.metric("🌡️", temp)
    st.write(description)

    df = pd.DataFrame(report.details(), columns=["Measure", "Value"])
    st.table(df.set_index("Measure"))
