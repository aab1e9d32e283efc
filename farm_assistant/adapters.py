"""Endpoint adapters.

Each adapter knows one service endpoint: how to encode a request for it and
how to turn its response body into a normalized result. The pipeline drives
all three through the same state machine.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Union

from .api_client import ApiClient
from .errors import (
    CaptureError,
    FarmAssistantError,
    InvalidQuery,
    MalformedResponse,
    NoMediaSelected,
    PermissionDenied,
    ServiceError,
)
from .media import MediaHandle, encode_media

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiseaseResult:
    predicted_label: str
    explanation: str


@dataclass(frozen=True)
class PestImageResult:
    predicted_label: str
    explanation: str
    control: str


@dataclass(frozen=True)
class PestQueryResult:
    pest_name: str
    pesticide: str
    ai_explanation: str
    image_url: Optional[str] = None


DiagnosticResult = Union[DiseaseResult, PestImageResult, PestQueryResult]


def _record(body: Any, key: Optional[str], required: tuple, what: str) -> Mapping[str, Any]:
    record = body.get(key) if key is not None and isinstance(body, Mapping) else body
    if not isinstance(record, Mapping):
        raise MalformedResponse(f"No valid {what} in response")
    missing = [name for name in required if name not in record]
    if missing:
        raise MalformedResponse(f"No valid {what} in response (missing {', '.join(missing)})")
    return record


class EndpointAdapter:
    name = ""
    path = ""
    requires_media = True
    error_prefix = "Failed to process the image: "

    def validate(self, media: Optional[MediaHandle], query: Optional[str]) -> None:
        if self.requires_media and media is None:
            raise NoMediaSelected()

    def send(self, client: ApiClient, media: Optional[MediaHandle], query: Optional[str]) -> Any:
        raise NotImplementedError

    def parse(self, body: Any) -> DiagnosticResult:
        raise NotImplementedError

    def enrich(self, result: DiagnosticResult, client: ApiClient) -> DiagnosticResult:
        return result

    def describe_error(self, error: FarmAssistantError) -> str:
        if isinstance(error, (NoMediaSelected, InvalidQuery, PermissionDenied, CaptureError)):
            return error.message
        if isinstance(error, ServiceError):
            return f"{self.error_prefix}Upload failed! {error.message}"
        return f"{self.error_prefix}{error.message}"


class DiseaseImageAdapter(EndpointAdapter):
    name = "disease-image"
    path = "/upload/plant-image"
    filename = "plant-image.jpg"

    def send(self, client, media, query):
        return client.post_file(self.path, encode_media(media, self.filename))

    def parse(self, body):
        if not isinstance(body, Mapping) or "status" not in body:
            raise MalformedResponse("No valid disease prediction in response (missing status)")
        if body["status"] != "success":
            raise MalformedResponse(f"No valid disease prediction in response (status {body['status']!r})")
        prediction = _record(body, "disease_prediction", ("predicted", "explanation"), "disease prediction")
        return DiseaseResult(
            predicted_label=prediction["predicted"],
            explanation=prediction["explanation"],
        )


class PestImageAdapter(EndpointAdapter):
    name = "pest-image"
    path = "/upload-pest-image/"
    filename = "pest-image.jpg"

    def send(self, client, media, query):
        return client.post_file(self.path, encode_media(media, self.filename))

    def parse(self, body):
        detection = _record(body, "pest_detection", ("predicted_class", "explanation", "control"), "pest detection")
        return PestImageResult(
            predicted_label=detection["predicted_class"],
            explanation=detection["explanation"],
            control=detection["control"],
        )


class PestQueryAdapter(EndpointAdapter):
    name = "pest-by-text-query"
    path = "/retrieve_pest_data"
    requires_media = False
    error_prefix = "Error: "

    def validate(self, media, query):
        if query is None or not query.strip():
            raise InvalidQuery()

    def send(self, client, media, query):
        return client.post_json(self.path, {"query": query})

    def parse(self, body):
        data = _record(body, None, ("pest_name", "pesticide", "ai_response"), "pest data")
        return PestQueryResult(
            pest_name=data["pest_name"],
            pesticide=data["pesticide"],
            ai_explanation=data["ai_response"],
        )

    def enrich(self, result, client):
        image_url = client.pest_image_url(result.pest_name)
        if client.probe(image_url):
            return replace(result, image_url=image_url)
        logger.warning("No image found for pest: %s", result.pest_name)
        return result

    def describe_error(self, error):
        if isinstance(error, ServiceError):
            return f"{self.error_prefix}Failed to retrieve pest data: {error.message}"
        return super().describe_error(error)


ADAPTERS = {
    adapter.name: adapter
    for adapter in (DiseaseImageAdapter(), PestImageAdapter(), PestQueryAdapter())
}


def get_adapter(name: str) -> EndpointAdapter:
    try:
        return ADAPTERS[name]
    except KeyError:
        raise ValueError(f"Unknown endpoint {name!r}; expected one of {sorted(ADAPTERS)}")
