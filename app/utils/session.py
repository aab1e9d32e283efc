# app/utils/session.py
"""Settings, client and per-screen state for the Streamlit screens."""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

import streamlit as st

from farm_assistant.adapters import get_adapter
from farm_assistant.api_client import ApiClient
from farm_assistant.capability import CapabilityGate
from farm_assistant.config import Settings, load_settings
from farm_assistant.i18n import LANGUAGES, TextProvider
from farm_assistant.media import MediaSourceSelector, MediaStore
from farm_assistant.mock_api_client import MockApiClient
from farm_assistant.pipeline import DiagnosticPipeline, PipelineState

from utils.devices import SessionPermission

logger = logging.getLogger(__name__)

ACTIVE_SCREEN_KEY = "active_screen"
LANGUAGE_KEY = "language"


def configure_logging():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _secret(name: str) -> Optional[str]:
    # Streamlit Cloud provides secrets in TOML; locally there may be no secrets file.
    try:
        return st.secrets.get(name)
    except FileNotFoundError:
        return None


def load_app_settings() -> Settings:
    settings = load_settings()
    if not settings.server_url:
        server_url = (_secret("FARM_ASSISTANT_SERVER_URL") or "").strip().rstrip("/")
        if server_url:
            settings = replace(settings, server_url=server_url)
    return settings


@st.cache_resource
def get_client(server_url: Optional[str], use_mock: bool, timeout: Optional[float]) -> Optional[ApiClient]:
    if use_mock:
        logger.info("Using the offline mock service")
        return MockApiClient()
    if not server_url:
        return None
    return ApiClient(server_url, timeout=timeout)


def client_for(settings: Settings) -> Optional[ApiClient]:
    return get_client(settings.server_url, settings.use_mock, settings.timeout)


def language_selector(settings: Settings) -> TextProvider:
    """Sidebar language picker; returns the text lookup for the chosen language."""
    if LANGUAGE_KEY not in st.session_state:
        st.session_state[LANGUAGE_KEY] = settings.language if settings.language in LANGUAGES else "en"
    t = TextProvider(st.session_state[LANGUAGE_KEY])
    codes = list(LANGUAGES)
    st.sidebar.selectbox(
        t("selectLanguage"),
        codes,
        format_func=LANGUAGES.get,
        key=LANGUAGE_KEY,
    )
    return TextProvider(st.session_state[LANGUAGE_KEY])


@dataclass
class ScreenState:
    """Everything one diagnostic screen owns while it is shown."""

    name: str
    pipeline: DiagnosticPipeline
    gate: Optional[CapabilityGate] = None
    selector: Optional[MediaSourceSelector] = None
    seen_uploads: Dict[str, str] = field(default_factory=dict)
    submissions: int = 0

    def is_new_upload(self, widget_key: str, uploaded_file) -> bool:
        """True once per upload a widget hands back; an emptied widget is forgotten."""
        if uploaded_file is None:
            self.seen_uploads.pop(widget_key, None)
            return False
        if self.seen_uploads.get(widget_key) == uploaded_file.file_id:
            return False
        self.seen_uploads[widget_key] = uploaded_file.file_id
        return True

    def submit(self, token: int, query: Optional[str] = None) -> PipelineState:
        """Submit-button callback.

        ``token`` is the submission count the button was drawn with. A click
        queued while an earlier submission was running still carries the old
        count, so it is dropped instead of sending the request again.
        """
        if token != self.submissions:
            logger.info("Ignoring stale %s submit click", self.name)
            return self.pipeline.state
        self.submissions += 1
        return self.pipeline.submit(query)


def _screen_key(name: str) -> str:
    return f"screen::{name}"


def _unmount(name: str) -> None:
    screen = st.session_state.pop(_screen_key(name), None)
    if screen is not None and screen.selector is not None:
        screen.selector.close_camera()
    logger.info("Screen %s left; its media and result were discarded", name)


def get_screen(endpoint: str, settings: Settings, with_media: bool = True) -> ScreenState:
    """Return this session's state for the screen, creating it on first visit.

    Visiting another diagnostic screen discards the previous one's state.
    """
    previous = st.session_state.get(ACTIVE_SCREEN_KEY)
    if previous and previous != endpoint:
        _unmount(previous)
    st.session_state[ACTIVE_SCREEN_KEY] = endpoint

    key = _screen_key(endpoint)
    if key not in st.session_state:
        pipeline = DiagnosticPipeline(get_adapter(endpoint), client_for(settings))
        screen = ScreenState(name=endpoint, pipeline=pipeline)
        if with_media:
            provider = SessionPermission(st.session_state, "camera_permission", settings.camera_allowed)
            screen.gate = CapabilityGate(provider)
            screen.selector = MediaSourceSelector(screen.gate, MediaStore(settings.media_dir), pipeline)
        st.session_state[key] = screen
    return st.session_state[key]


def leave_screens() -> None:
    """Called from screens without a pipeline (home, weather)."""
    previous = st.session_state.pop(ACTIVE_SCREEN_KEY, None)
    if previous:
        _unmount(previous)


def current_screen(endpoint: str) -> Optional[ScreenState]:
    return st.session_state.get(_screen_key(endpoint))
