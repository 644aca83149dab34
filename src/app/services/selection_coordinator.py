from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Callable

from src.app.services.clinic_catalog import ClinicCatalog
from src.app.services.location_source import LocationSource
from src.app.services.route_resolver import RouteResolver
from src.domain.algorithms.viewport import fit_viewport
from src.domain.exceptions import (
    LocationUnavailable,
    PermissionDenied,
    RouteResolutionFailed,
)
from src.domain.models import (
    CameraCommand,
    Clinic,
    Coordinate,
    EdgePadding,
    ErrorKind,
    SelectionState,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[SelectionState], None]
CameraListener = Callable[[CameraCommand], None]

_LOCATION_ERRORS = frozenset({ErrorKind.PERMISSION_DENIED, ErrorKind.LOCATION_UNAVAILABLE})


@dataclass(frozen=True, slots=True)
class _RouteRequest:
    """Staleness tag: a result is applied only while its request is the latest."""

    seq: int
    clinic_id: str
    origin: Coordinate
    destination: Coordinate


@dataclass(slots=True)
class SelectionCoordinator:
    """Keeps the selected clinic's route in sync with origin and selection.

    Setters return immediately: the previous route is cleared synchronously
    and a new resolution runs as a task. Results are applied in "last
    request wins" order, never completion order.
    """

    catalog: ClinicCatalog
    resolver: RouteResolver
    location_source: LocationSource | None = None
    padding: EdgePadding = field(default_factory=EdgePadding)

    _state: SelectionState = field(default_factory=SelectionState)
    _seq: int = 0
    _latest: _RouteRequest | None = None
    _origin_version: int = 0
    _closed: bool = False
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, repr=False)
    _listeners: list[StateListener] = field(default_factory=list, repr=False)
    _camera_listeners: list[CameraListener] = field(default_factory=list, repr=False)
    _pending_camera: CameraCommand | None = None
    _destination: Coordinate | None = None
    _catalog_unsubscribe: Callable[[], None] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._catalog_unsubscribe = self.catalog.subscribe(self._catalog_replaced)

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def selected_clinic(self) -> Clinic | None:
        if self._state.selected_clinic_id is None:
            return None
        return self.catalog.get(self._state.selected_clinic_id)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._remove(self._listeners, listener)

    def on_camera_command(self, listener: CameraListener) -> Callable[[], None]:
        self._camera_listeners.append(listener)
        return lambda: self._remove(self._camera_listeners, listener)

    def take_camera_command(self) -> CameraCommand | None:
        """Return the pending camera command once; later calls get None."""

        command, self._pending_camera = self._pending_camera, None
        return command

    def set_selected_clinic(self, clinic_id: str | None) -> asyncio.Task[None] | None:
        self._ensure_open()
        self._state = replace(self._state, selected_clinic_id=clinic_id)
        return self._reresolve()

    def set_origin(self, coordinate: Coordinate | None) -> asyncio.Task[None] | None:
        self._ensure_open()
        self._origin_version += 1
        self._state = replace(self._state, origin=coordinate)
        return self._reresolve()

    def dismiss_error(self) -> None:
        if self._state.route_error is not None:
            self._publish(replace(self._state, route_error=None))

    async def locate(self) -> Coordinate | None:
        """Acquire the device coordinate and use it as the new origin.

        Returns None when no coordinate could be acquired; the reason is
        recorded as the state's route_error.
        """

        self._ensure_open()
        if self.location_source is None:
            raise RuntimeError("Location source not configured")

        version = self._origin_version
        try:
            coordinate = await self.location_source.get_current_coordinate()
        except LocationUnavailable as exc:
            if self._closed or version != self._origin_version:
                return None
            kind = (
                ErrorKind.PERMISSION_DENIED
                if isinstance(exc, PermissionDenied)
                else ErrorKind.LOCATION_UNAVAILABLE
            )
            logger.warning("Location unavailable: %s", exc)
            self._latest = None
            self._publish(
                replace(self._state, route=None, loading_route=False, route_error=kind)
            )
            return None

        # A newer origin (or an unmount) arrived while the fix was pending.
        if self._closed or version != self._origin_version:
            return None

        self.set_origin(coordinate)
        return coordinate

    def record_error(self, kind: ErrorKind) -> None:
        """Surface an error raised outside route resolution, clearing the route."""

        self._ensure_open()
        self._latest = None
        self._publish(
            replace(self._state, route=None, loading_route=False, route_error=kind)
        )

    async def wait_until_settled(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Stop applying results; every in-flight resolution becomes stale."""

        self._closed = True
        self._latest = None
        self._pending_camera = None
        self._listeners.clear()
        self._camera_listeners.clear()
        if self._catalog_unsubscribe is not None:
            self._catalog_unsubscribe()
            self._catalog_unsubscribe = None

    def _reresolve(self) -> asyncio.Task[None] | None:
        self._seq += 1
        state = self._state

        clinic = self.selected_clinic()
        destination = clinic.location if clinic is not None else None
        if state.origin is None or clinic is None or destination is None:
            self._latest = None
            self._destination = None
            error = state.route_error
            if state.origin is not None or error not in _LOCATION_ERRORS:
                error = None
            self._publish(
                replace(state, route=None, loading_route=False, route_error=error)
            )
            return None

        request = _RouteRequest(
            seq=self._seq,
            clinic_id=clinic.id,
            origin=state.origin,
            destination=destination,
        )
        self._latest = request
        self._destination = destination
        self._publish(replace(state, route=None, loading_route=True, route_error=None))

        task = asyncio.get_running_loop().create_task(self._resolve(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _resolve(self, request: _RouteRequest) -> None:
        try:
            route = await self.resolver.resolve(request.origin, request.destination)
        except RouteResolutionFailed as exc:
            if self._is_current(request):
                logger.warning(
                    "No route to clinic %s: %s", request.clinic_id, exc
                )
                self._fail()
            return
        except Exception:
            logger.exception(
                "Route resolution for clinic %s crashed", request.clinic_id
            )
            if self._is_current(request):
                self._fail()
            return

        if not self._is_current(request):
            logger.debug("Discarding stale route for request #%d", request.seq)
            return

        region = fit_viewport(route.polyline, self.padding)
        self._latest = None
        self._publish(
            replace(self._state, route=route, loading_route=False, route_error=None)
        )
        logger.info(
            "Route to clinic %s applied: %.3f km, %.1f min",
            request.clinic_id,
            route.distance_km,
            route.duration_min,
        )
        self._emit_camera(CameraCommand(region=region))

    def _catalog_replaced(self, clinics: tuple[Clinic, ...]) -> None:
        clinic_id = self._state.selected_clinic_id
        if self._closed or clinic_id is None:
            return

        clinic = self.catalog.get(clinic_id)
        if clinic is None:
            logger.info("Selected clinic %s left the catalog", clinic_id)
            self._state = replace(self._state, selected_clinic_id=None)
            self._reresolve()
        elif self._state.origin is not None and clinic.location != self._destination:
            logger.info("Selected clinic %s moved, re-resolving", clinic_id)
            self._reresolve()

    def _fail(self) -> None:
        self._latest = None
        self._publish(
            replace(
                self._state,
                route=None,
                loading_route=False,
                route_error=ErrorKind.ROUTE_RESOLUTION_FAILED,
            )
        )

    def _is_current(self, request: _RouteRequest) -> bool:
        return not self._closed and self._latest is request

    def _publish(self, state: SelectionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _emit_camera(self, command: CameraCommand) -> None:
        self._pending_camera = command
        for listener in list(self._camera_listeners):
            listener(command)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Selection coordinator is closed")

    @staticmethod
    def _remove(listeners: list, listener: object) -> None:
        if listener in listeners:
            listeners.remove(listener)
