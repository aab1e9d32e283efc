"""Per-screen diagnostic request pipeline.

One ``DiagnosticPipeline`` belongs to one screen. It holds the current
``MediaHandle`` and a single ``PipelineState``; at most one request is in
flight at a time and a ``submit()`` made while one is pending is ignored.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Optional

from .adapters import DiagnosticResult, EndpointAdapter
from .api_client import ApiClient
from .errors import FarmAssistantError, MalformedResponse, TransportFailure
from .media import MediaHandle

logger = logging.getLogger(__name__)


class PipelineStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineState:
    status: PipelineStatus = PipelineStatus.IDLE
    result: Optional[DiagnosticResult] = None
    error: Optional[FarmAssistantError] = None
    error_message: Optional[str] = None

    @classmethod
    def idle(cls) -> "PipelineState":
        return cls()

    @classmethod
    def submitting(cls) -> "PipelineState":
        return cls(status=PipelineStatus.SUBMITTING)

    @classmethod
    def succeeded(cls, result: DiagnosticResult) -> "PipelineState":
        return cls(status=PipelineStatus.SUCCEEDED, result=result)

    @classmethod
    def failed(cls, error: FarmAssistantError, message: str) -> "PipelineState":
        return cls(status=PipelineStatus.FAILED, error=error, error_message=message)


@dataclass(frozen=True)
class DiagnosticRequest:
    endpoint: str
    media: Optional[MediaHandle] = None
    query: Optional[str] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class DiagnosticPipeline:
    def __init__(self, adapter: EndpointAdapter, client: Optional[ApiClient]) -> None:
        self.adapter = adapter
        self.client = client
        self.media: Optional[MediaHandle] = None
        self.state = PipelineState.idle()
        self.request: Optional[DiagnosticRequest] = None
        self._lock = Lock()

    @property
    def is_submitting(self) -> bool:
        return self.state.status == PipelineStatus.SUBMITTING

    def attach_media(self, handle: MediaHandle) -> None:
        """Hold a newly acquired image; any previous result or error is dropped."""
        self.media = handle
        if not self.is_submitting:
            self.state = PipelineState.idle()

    def report_error(self, error: FarmAssistantError) -> PipelineState:
        """Show a capture/pick failure without touching the held media."""
        if not self.is_submitting:
            self.state = PipelineState.failed(error, self.adapter.describe_error(error))
        return self.state

    def submit(self, query: Optional[str] = None) -> PipelineState:
        if not self._lock.acquire(blocking=False):
            logger.info("Submit ignored: a %s request is already in flight", self.adapter.name)
            return self.state
        try:
            return self._run(query)
        finally:
            self._lock.release()

    def _run(self, query: Optional[str]) -> PipelineState:
        try:
            self.adapter.validate(self.media, query)
        except FarmAssistantError as e:
            self.state = PipelineState.failed(e, self.adapter.describe_error(e))
            return self.state

        if self.client is None:
            error = TransportFailure("No backend URL configured")
            self.state = PipelineState.failed(error, self.adapter.describe_error(error))
            return self.state

        self.request = DiagnosticRequest(endpoint=self.adapter.name, media=self.media, query=query)
        self.state = PipelineState.submitting()
        logger.info(
            "Submitting %s request (media=%s)",
            self.adapter.name,
            self.media.uri if self.media else None,
        )

        try:
            body = self.adapter.send(self.client, self.request.media, query)
            result = self.adapter.parse(body)
        except MalformedResponse as e:
            logger.warning("Malformed response from %s: %s", self.adapter.path, e.message)
            return self._finish(PipelineState.failed(e, self.adapter.describe_error(e)))
        except FarmAssistantError as e:
            logger.error("%s request failed: %s", self.adapter.name, e.message)
            return self._finish(PipelineState.failed(e, self.adapter.describe_error(e)))

        try:
            result = self.adapter.enrich(result, self.client)
        except FarmAssistantError as e:
            logger.warning("Ignoring %s enrichment failure: %s", self.adapter.name, e.message)

        logger.info("%s request succeeded", self.adapter.name)
        return self._finish(PipelineState.succeeded(result))

    def _finish(self, outcome: PipelineState) -> PipelineState:
        # The outcome belongs to the media that was sent; a newer image voids it.
        if self.media is not self.request.media:
            logger.info("Discarding %s %s outcome; media changed during the request", self.adapter.name, outcome.status.value)
            self.state = PipelineState.idle()
        else:
            self.state = outcome
        return self.state
