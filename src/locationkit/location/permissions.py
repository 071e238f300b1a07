"""
Location permission gating.

`PermissionGate.ensure_location_permission()` implements the prompt workflow:
1. already granted -> True, no prompt
2. request; granted -> True
3. permanently denied -> open settings (fire-and-forget), re-query status immediately
4. anything else -> notify the user once, False

The permission state is queried fresh from the `PermissionService` on every check;
the gate itself keeps no state.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from enum import Enum
from typing import Callable, Protocol, TextIO

from locationkit.core.tasks import fire_and_forget

logger = logging.getLogger(__name__)

PERMISSION_NOTICE = "Enable location permission for better experience."


class PermissionState(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    PERMANENTLY_DENIED = "permanently_denied"


class PermissionService(Protocol):
    async def is_granted(self) -> bool: ...

    async def request(self) -> PermissionState: ...

    async def status(self) -> PermissionState: ...

    async def open_settings(self) -> None: ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class LoggingNotifier:
    """Surface user-facing notices through the logging system."""

    def __init__(self, logger_name: str = "locationkit.notice"):
        self._logger = logging.getLogger(logger_name)

    def notify(self, message: str) -> None:
        self._logger.warning(message)


class NullNotifier:
    def notify(self, message: str) -> None:
        return None


class StaticPermissionService:
    """Answers every query with a configured state (servers, CI, headless hosts)."""

    def __init__(self, state: PermissionState, *, settings_url: str | None = None):
        self._state = state
        self._settings_url = settings_url

    async def is_granted(self) -> bool:
        return self._state is PermissionState.GRANTED

    async def request(self) -> PermissionState:
        return self._state

    async def status(self) -> PermissionState:
        return self._state

    async def open_settings(self) -> None:
        if self._settings_url:
            logger.info("Location permission can be changed at %s", self._settings_url)
        else:
            logger.info("Location permission is fixed by configuration (permissions.state)")


class ConsolePermissionService:
    """Interactive permission prompt on a terminal.

    Mirrors a mobile OS dialog: it is shown at most once per process, and
    answering "never" moves to permanently denied.
    """

    def __init__(
        self,
        *,
        input_func: Callable[[str], str] = input,
        output: TextIO | None = None,
        app_name: str = "locationkit",
    ):
        self._input = input_func
        self._output = output
        self._app_name = app_name
        self._state = PermissionState.DENIED
        self._asked = False

    async def is_granted(self) -> bool:
        return self._state is PermissionState.GRANTED

    async def status(self) -> PermissionState:
        return self._state

    async def request(self) -> PermissionState:
        if self._asked or self._state is not PermissionState.DENIED:
            return self._state
        self._asked = True
        prompt = f"Allow {self._app_name} to access this device's location? [y/N/never] "
        answer = (await asyncio.to_thread(self._input, prompt)).strip().lower()
        if answer in {"y", "yes"}:
            self._state = PermissionState.GRANTED
        elif answer == "never":
            self._state = PermissionState.PERMANENTLY_DENIED
        return self._state

    async def open_settings(self) -> None:
        out = self._output or sys.stderr
        print(
            f"Location access for {self._app_name} is blocked for this session; "
            "restart to be asked again.",
            file=out,
        )


class PermissionGate:
    def __init__(self, permissions: PermissionService, notifier: Notifier):
        self._permissions = permissions
        self._notifier = notifier

    @property
    def permissions(self) -> PermissionService:
        return self._permissions

    async def ensure_location_permission(self) -> bool:
        """Return True when location permission is (or becomes) granted."""
        if await self._permissions.is_granted():
            return True

        status = await self._permissions.request()
        if status is PermissionState.GRANTED:
            return True

        if status is PermissionState.PERMANENTLY_DENIED:
            logger.info("Location permission permanently denied; opening settings")
            fire_and_forget(self._permissions.open_settings(), name="open-location-settings")
            # Not a post-user-action state: the user has not had time to act yet.
            return await self._permissions.status() is PermissionState.GRANTED

        self._notifier.notify(PERMISSION_NOTICE)
        return False
