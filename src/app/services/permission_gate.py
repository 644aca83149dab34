from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from src.app.ports.output import ILocationPlatform
from src.domain.models import PermissionState

logger = logging.getLogger(__name__)

PermissionListener = Callable[[PermissionState], None]

# Every state may be re-requested; only a prompt may settle REQUESTING.
_ALLOWED_TRANSITIONS: dict[PermissionState, frozenset[PermissionState]] = {
    PermissionState.UNKNOWN: frozenset({PermissionState.REQUESTING}),
    PermissionState.REQUESTING: frozenset(
        {PermissionState.GRANTED, PermissionState.DENIED}
    ),
    PermissionState.GRANTED: frozenset({PermissionState.REQUESTING}),
    PermissionState.DENIED: frozenset({PermissionState.REQUESTING}),
}


@dataclass(slots=True)
class PermissionGate:
    """Owns the device-location authorization state machine.

    UNKNOWN -> REQUESTING -> GRANTED | DENIED, and any settled state can be
    re-requested. A denial is never retried here; the presentation layer
    decides when to prompt again.
    """

    platform: ILocationPlatform
    timeout_s: float = 12.0

    _state: PermissionState = PermissionState.UNKNOWN
    _listeners: list[PermissionListener] = field(default_factory=list, repr=False)
    _pending: asyncio.Future[PermissionState] | None = field(default=None, repr=False)

    def current_state(self) -> PermissionState:
        return self._state

    def subscribe(self, listener: PermissionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def request_permission(self) -> PermissionState:
        # A prompt already on screen answers every caller waiting on it.
        if self._pending is not None:
            return await asyncio.shield(self._pending)

        self._pending = asyncio.get_running_loop().create_future()
        self._transition(PermissionState.REQUESTING)
        try:
            granted = await asyncio.wait_for(
                self.platform.request_foreground_permission(),
                timeout=self.timeout_s,
            )
        except asyncio.CancelledError:
            self._settle(PermissionState.DENIED)
            raise
        except Exception:
            logger.warning("Location permission prompt failed", exc_info=True)
            granted = False

        return self._settle(
            PermissionState.GRANTED if granted else PermissionState.DENIED
        )

    def _settle(self, outcome: PermissionState) -> PermissionState:
        pending, self._pending = self._pending, None
        self._transition(outcome)
        if pending is not None and not pending.done():
            pending.set_result(outcome)
        return outcome

    def _transition(self, new_state: PermissionState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self._state]:
            raise RuntimeError(
                f"Illegal permission transition {self._state.value} -> {new_state.value}"
            )

        logger.info(
            "Location permission %s -> %s", self._state.value, new_state.value
        )
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
