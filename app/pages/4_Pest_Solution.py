import sys
from pathlib import Path

import streamlit as st

APP_DIR = Path(__file__).resolve().parents[1]
sys.path.extend([str(APP_DIR.parent), str(APP_DIR)])

from farm_assistant.presenter import present  # noqa: E402

from utils.session import configure_logging, get_screen, language_selector, load_app_settings  # noqa: E402
from utils.widgets import render_display, submit_clicked  # noqa: E402

ENDPOINT = "pest-by-text-query"
QUERY_KEY = f"{ENDPOINT}-query"

st.set_page_config(page_title="Pest Solution · Farm Assistant", layout="centered")
configure_logging()

settings = load_app_settings()
t = language_selector(settings)
screen = get_screen(ENDPOINT, settings, with_media=False)
pipeline = screen.pipeline

st.title(t("pestSolution"))
st.caption(t("pestSolutionSubtitle"))

if not settings.backend_available:
    st.warning(t("noBackend"))

st.text_input(t("pestSolution"), placeholder=t("pestQueryPlaceholder"), label_visibility="collapsed", key=QUERY_KEY)

model = present(pipeline.state, t)
st.button(
    t("processing") if model.is_loading else t("identifyPest"),
    disabled=model.is_loading or not settings.backend_available,
    key=f"{ENDPOINT}-submit",
    type="primary",
    on_click=submit_clicked,
    args=(ENDPOINT, screen.submissions, t("processing")),
    kwargs={"query_key": QUERY_KEY},
)

render_display(model)
