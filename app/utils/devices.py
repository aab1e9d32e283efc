# app/utils/devices.py
"""Streamlit-backed camera, gallery and permission collaborators.

The browser owns the real camera/file dialogs; these wrappers adapt the
widgets' uploaded files to the protocols the core expects.
"""
from typing import MutableMapping, Optional

from farm_assistant.capability import Permission
from farm_assistant.media import MAX_QUALITY


class SessionPermission:
    """Permission state kept in a session mapping (``st.session_state`` in the app)."""

    def __init__(self, state: MutableMapping, key: str, allowed: bool = True):
        self._state = state
        self._key = key
        self._allowed = allowed

    def status(self) -> Permission:
        return Permission(self._state.get(self._key, Permission.UNKNOWN))

    def request(self) -> Permission:
        result = Permission.GRANTED if self._allowed else Permission.DENIED
        self._state[self._key] = result
        return result


class WidgetCamera:
    """Wraps the file returned by ``st.camera_input``."""

    def __init__(self, uploaded_file):
        self._file = uploaded_file

    def take_picture(self, quality: float = MAX_QUALITY) -> Optional[bytes]:
        if self._file is None:
            return None
        return self._file.getvalue()

    def release(self) -> None:
        # The widget stops streaming once it is no longer rendered.
        self._file = None


class WidgetGallery:
    """Wraps the file returned by ``st.file_uploader``; None means nothing was picked."""

    def __init__(self, uploaded_file, allowed: bool = True):
        self._file = uploaded_file
        self._allowed = allowed

    def request_permission(self) -> bool:
        return self._allowed

    def pick(self, allow_editing: bool = True, quality: float = MAX_QUALITY) -> Optional[bytes]:
        if self._file is None:
            return None
        return self._file.getvalue()
