import io

import pytest
from PIL import Image

from farm_assistant.adapters import DiseaseImageAdapter, PestImageAdapter, PestQueryAdapter
from farm_assistant.api_client import ApiClient
from farm_assistant.capability import CapabilityGate, Permission
from farm_assistant.media import MediaSourceSelector, MediaStore
from farm_assistant.pipeline import DiagnosticPipeline

BASE_URL = "http://farm.test"


def image_bytes(fmt="JPEG", mode="RGB", color="green", size=(8, 8)):
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakePermission:
    def __init__(self, status=Permission.UNKNOWN, answers=(Permission.GRANTED,)):
        self._status = status
        self._answers = list(answers)
        self.requests = 0

    def status(self):
        return self._status

    def request(self):
        self.requests += 1
        answer = self._answers.pop(0) if self._answers else self._status
        self._status = answer
        return answer


class FakeCamera:
    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.shots = 0
        self.released = False

    def take_picture(self, quality=1.0):
        self.shots += 1
        if self.error is not None:
            raise self.error
        return self.data

    def release(self):
        self.released = True


class FakeGallery:
    def __init__(self, data=None, allowed=True):
        self.data = data
        self.allowed = allowed
        self.picks = 0

    def request_permission(self):
        return self.allowed

    def pick(self, allow_editing=True, quality=1.0):
        self.picks += 1
        return self.data


@pytest.fixture
def client():
    return ApiClient(BASE_URL)


@pytest.fixture
def jpeg():
    return image_bytes()


@pytest.fixture
def store(tmp_path):
    return MediaStore(tmp_path / "media")


@pytest.fixture
def media(store, jpeg):
    from farm_assistant.media import SourceKind

    return store.save(jpeg, SourceKind.GALLERY)


@pytest.fixture
def disease_pipeline(client):
    return DiagnosticPipeline(DiseaseImageAdapter(), client)


@pytest.fixture
def pest_pipeline(client):
    return DiagnosticPipeline(PestImageAdapter(), client)


@pytest.fixture
def query_pipeline(client):
    return DiagnosticPipeline(PestQueryAdapter(), client)


@pytest.fixture
def granted_gate():
    return CapabilityGate(FakePermission(status=Permission.GRANTED))


@pytest.fixture
def selector(granted_gate, store, disease_pipeline):
    return MediaSourceSelector(granted_gate, store, disease_pipeline)
