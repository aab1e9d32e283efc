"""Media acquisition: camera capture, gallery pick and the handle both produce."""
from __future__ import annotations

import hashlib
import io
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Protocol, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from .capability import CapabilityGate
from .errors import CaptureError, PermissionDenied

if TYPE_CHECKING:
    from .pipeline import DiagnosticPipeline

logger = logging.getLogger(__name__)

JPEG_MIME = "image/jpeg"
MAX_QUALITY = 1.0
# Pillow's scale; values above 95 disable some JPEG compression steps.
JPEG_SAVE_QUALITY = 100


class SourceKind(str, Enum):
    CAMERA = "camera"
    GALLERY = "gallery"


@dataclass(frozen=True)
class MediaHandle:
    uri: str
    source_kind: SourceKind
    content: bytes = field(repr=False)
    mime_type: str = JPEG_MIME

    def __post_init__(self) -> None:
        if not self.uri:
            raise ValueError("MediaHandle needs a uri")
        if not self.content:
            raise ValueError("MediaHandle needs non-empty content")
        if self.mime_type != JPEG_MIME:
            raise ValueError(f"unsupported mime type {self.mime_type!r}")


def encode_media(handle: MediaHandle, filename: str) -> Dict[str, Tuple[str, bytes, str]]:
    """Build the ``files`` mapping for a multipart upload with one ``file`` field."""
    return {"file": (filename, handle.content, handle.mime_type)}


def content_hash(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def normalize_to_jpeg(data: bytes) -> bytes:
    """Auto-rotate by EXIF orientation and re-encode as RGB JPEG."""
    try:
        img = Image.open(io.BytesIO(data))
        img = ImageOps.exif_transpose(img)
        img = img.convert("RGB")
    except (UnidentifiedImageError, OSError) as exc:
        raise CaptureError("The selected file is not a readable image.") from exc
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=JPEG_SAVE_QUALITY)
    return buffer.getvalue()


class MediaStore:
    """Writes acquired images under a local directory, one file per content digest."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def save(self, data: bytes, source_kind: SourceKind) -> MediaHandle:
        jpeg = normalize_to_jpeg(data)
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / f"{content_hash(jpeg)}.jpg"
        path.write_bytes(jpeg)
        return MediaHandle(uri=str(path), source_kind=source_kind, content=jpeg)


class Camera(Protocol):
    def take_picture(self, quality: float = MAX_QUALITY) -> Optional[bytes]: ...

    def release(self) -> None: ...


class GalleryPicker(Protocol):
    def request_permission(self) -> bool: ...

    def pick(self, allow_editing: bool = True, quality: float = MAX_QUALITY) -> Optional[bytes]:
        """Return the picked image, or None when the user cancels."""
        ...


class MediaSourceSelector:
    def __init__(self, gate: CapabilityGate, store: MediaStore, pipeline: "DiagnosticPipeline") -> None:
        self.gate = gate
        self.store = store
        self.pipeline = pipeline
        self.camera_open = False

    def open_camera(self) -> None:
        if not self.gate.capture_enabled:
            raise PermissionDenied("No access to camera")
        self.camera_open = True

    def close_camera(self, camera: Optional[Camera] = None) -> None:
        if camera is not None:
            camera.release()
        self.camera_open = False

    def capture_from_camera(self, camera: Camera) -> MediaHandle:
        if not self.gate.capture_enabled:
            raise PermissionDenied("No access to camera")
        try:
            data = camera.take_picture(quality=MAX_QUALITY)
        except Exception as exc:
            logger.exception("Camera capture error")
            raise CaptureError() from exc
        if not data:
            logger.error("Camera returned no image")
            raise CaptureError()

        try:
            handle = self.store.save(data, SourceKind.CAMERA)
        finally:
            self.close_camera(camera)
        self.pipeline.attach_media(handle)
        return handle

    def pick_from_gallery(self, picker: GalleryPicker) -> Optional[MediaHandle]:
        if not picker.request_permission():
            raise PermissionDenied("Permission to access gallery was denied.")

        data = picker.pick(allow_editing=True, quality=MAX_QUALITY)
        if data is None:
            return None

        handle = self.store.save(data, SourceKind.GALLERY)
        self.close_camera()
        self.pipeline.attach_media(handle)
        return handle
