# ======================================================
# Farm Assistant — plant diagnosis front-end
# ======================================================

import sys
from pathlib import Path

import streamlit as st

# ======================================================
# PATHS
# ======================================================
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from farm_assistant.i18n import TextProvider  # noqa: E402

from utils.session import configure_logging, language_selector, leave_screens, load_app_settings  # noqa: E402

# ======================================================
# STREAMLIT CONFIG
# ======================================================
st.set_page_config(page_title="Farm Assistant", page_icon="🌱", layout="centered")
configure_logging()

settings = load_app_settings()
t: TextProvider = language_selector(settings)
leave_screens()

# ======================================================
# HEADER
# ======================================================
st.title(f"🌱 {t('appTitle')}")

if not settings.backend_available:
    st.warning(t("noBackend"))
elif settings.use_mock:
    st.info("Offline mode: responses are canned examples, not real diagnoses.")

# ======================================================
# SCREENS
# ======================================================
st.page_link("pages/1_Weather.py", label=t("weatherInfo"), icon="⛅")
st.page_link("pages/2_Disease_Checkup.py", label=t("diseaseCheckup"), icon="🦠")
st.page_link("pages/3_Pest_Checkup.py", label=t("pestCheckup"), icon="🪲")
st.page_link("pages/4_Pest_Solution.py", label=t("pestSolution"), icon="🐛")

st.divider()
st.caption(t("appTitle"))
