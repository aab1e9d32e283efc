import sys
from pathlib import Path

import streamlit as st

APP_DIR = Path(__file__).resolve().parents[1]
sys.path.extend([str(APP_DIR.parent), str(APP_DIR)])

from utils.session import configure_logging  # noqa: E402
from utils.widgets import render_image_checkup  # noqa: E402

st.set_page_config(page_title="Disease Checkup · Farm Assistant", layout="centered")
configure_logging()

render_image_checkup(
    "disease-image",
    title_key="diseaseCheckup",
    subtitle_key="diseaseSubtitle",
    action_key="diagnosePlant",
)
