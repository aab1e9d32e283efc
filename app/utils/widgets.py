# app/utils/widgets.py
from typing import Optional

import streamlit as st

from farm_assistant.capability import Permission
from farm_assistant.errors import FarmAssistantError
from farm_assistant.presenter import DisplayModel, present

from utils.devices import WidgetCamera, WidgetGallery
from utils.session import current_screen, get_screen, language_selector, load_app_settings


def render_display(model: DisplayModel):
    if model.error_text:
        st.error(model.error_text)

    record = model.result_fields
    if record is None:
        return
    with st.container(border=True):
        for field in record.fields:
            st.markdown(f"**{field.label}**")
            st.write(field.value)
        if record.image_url:
            st.markdown(f"**{record.image_label}**")
            st.image(record.image_url, width="stretch")


def submit_clicked(endpoint: str, token: int, label: str, query_key: Optional[str] = None):
    """on_click handler shared by the submit buttons; runs before the page redraws."""
    screen = current_screen(endpoint)
    if screen is None:
        return
    query = st.session_state.get(query_key) if query_key else None
    with st.spinner(label):
        screen.submit(token, query)


def render_image_checkup(endpoint: str, title_key: str, subtitle_key: str, action_key: str):
    """Shared body of the disease and pest image screens."""
    settings = load_app_settings()
    t = language_selector(settings)
    screen = get_screen(endpoint, settings)
    pipeline, gate, selector = screen.pipeline, screen.gate, screen.selector

    st.title(t(title_key))
    st.caption(t(subtitle_key))

    if not settings.backend_available:
        st.warning(t("noBackend"))

    if gate.mount() == Permission.UNKNOWN:
        st.info(t("requestingCameraPermission"))
    if not gate.capture_enabled:
        st.warning(t("noCameraAccess"))
        if st.button(t("grantPermission"), key=f"{endpoint}-grant"):
            gate.request()
            st.rerun()

    scan_col, upload_col = st.columns(2)
    if scan_col.button(t("scan"), key=f"{endpoint}-scan", disabled=not gate.capture_enabled, width="stretch"):
        try:
            selector.open_camera()
        except FarmAssistantError as e:
            pipeline.report_error(e)

    upload_key = f"{endpoint}-upload"
    uploaded = upload_col.file_uploader(
        t("upload"),
        type=["jpg", "jpeg", "png"],
        key=upload_key,
    )
    if screen.is_new_upload(upload_key, uploaded):
        try:
            selector.pick_from_gallery(WidgetGallery(uploaded, settings.gallery_allowed))
        except FarmAssistantError as e:
            pipeline.report_error(e)

    if selector.camera_open:
        camera_key = f"{endpoint}-camera"
        shot = st.camera_input(t("capture"), key=camera_key)
        if screen.is_new_upload(camera_key, shot):
            try:
                selector.capture_from_camera(WidgetCamera(shot))
            except FarmAssistantError as e:
                pipeline.report_error(e)
            else:
                st.rerun()

    preview = pipeline.media.uri if pipeline.media and not selector.camera_open else None
    if preview:
        st.image(preview, caption=t("previewCaption"), width="stretch")

    model = present(pipeline.state, t, preview)
    st.button(
        t("processing") if model.is_loading else t(action_key),
        key=f"{endpoint}-submit",
        disabled=model.is_loading or pipeline.media is None or not settings.backend_available,
        type="primary",
        on_click=submit_clicked,
        args=(endpoint, screen.submissions, t("processing")),
    )

    render_display(model)
