"""Camera capability gate.

The OS/browser permission dialog is hidden behind a ``PermissionProvider``;
the gate only tracks the tri-state and the single mount-time request.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    UNKNOWN = "unknown"
    DENIED = "denied"
    GRANTED = "granted"


class PermissionProvider(Protocol):
    def status(self) -> Permission: ...

    def request(self) -> Permission: ...


class CapabilityGate:
    def __init__(self, provider: PermissionProvider) -> None:
        self._provider = provider
        self._mounted = False

    def current_permission(self) -> Permission:
        return self._provider.status()

    def request(self) -> Permission:
        result = self._provider.request()
        if result not in (Permission.GRANTED, Permission.DENIED):
            # A provider that cannot decide is treated as a refusal.
            result = Permission.DENIED
        logger.info("Camera permission request resolved: %s", result.value)
        return result

    def mount(self) -> Permission:
        """Issue the one automatic request a screen makes when first shown."""
        if self._mounted:
            return self.current_permission()
        self._mounted = True
        if self.current_permission() == Permission.UNKNOWN:
            return self.request()
        return self.current_permission()

    @property
    def capture_enabled(self) -> bool:
        return self.current_permission() == Permission.GRANTED
