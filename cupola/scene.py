# ABOUTME: Scene controller for the globe view: camera, picking, per-frame motion and the click-to-fetch flow.
# ABOUTME: Rendering is left to the host; this module owns state, pointer subscriptions and fetch tasks.

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from contextlib import contextmanager
from functools import partial
from typing import NamedTuple

from pydantic import BaseModel

from cupola.deps import WeatherDeps, api_base_url
from cupola.geo import GLOBE_RADIUS, Vector3, resolve_point
from cupola.models import GeoCoordinate, PanelState, RegionSnapshot
from cupola.panel import close_panel, open_region, region_failed, region_loaded
from cupola.region import RegionFetchError, fetch_region

logger = logging.getLogger(__name__)

CAMERA_POSITION = Vector3(0.0, 0.0, 12.0)
CAMERA_FOV_DEG = 8.0
GLOBE_ROTATION_STEP = 0.0003141592653589793
EDGE_THRESHOLD = 0.85
EDGE_ROTATION_SPEED = 0.02
ZOOM_SPEED = 0.3
MIN_CAMERA_DISTANCE = 8.0
MAX_CAMERA_DISTANCE = 20.0

Fetcher = Callable[[GeoCoordinate], Awaitable[RegionSnapshot]]


class Rect(NamedTuple):
    left: float
    top: float
    width: float
    height: float


class PointerEvent(NamedTuple):
    client_x: float
    client_y: float


class WheelEvent(NamedTuple):
    delta_y: float


class Ray(NamedTuple):
    origin: Vector3
    direction: Vector3


def pointer_to_ndc(client_x: float, client_y: float, rect: Rect) -> tuple[float, float]:
    """Map a pointer position to normalized device coordinates in [-1, 1], +y up."""
    x = (client_x - rect.left) / rect.width * 2 - 1
    y = -(client_y - rect.top) / rect.height * 2 + 1
    return x, y


def intersect_sphere(ray: Ray, radius: float = GLOBE_RADIUS) -> Vector3 | None:
    """Nearest point where the ray meets the origin-centred sphere, None on a miss."""
    o, d = ray.origin, ray.direction.normalized()
    b = o.dot(d)
    c = o.dot(o) - radius * radius
    disc = b * b - c
    if disc < 0:
        return None

    root = math.sqrt(disc)
    t = -b - root
    if t < 0:
        t = -b + root
    if t < 0:
        return None
    return o.add(d.scale(t))


class Camera(BaseModel):
    """Perspective camera looking down its local -Z axis, rotated by pitch (x) then yaw (y)."""

    position: Vector3 = CAMERA_POSITION
    fov: float = CAMERA_FOV_DEG
    aspect: float = 1.0
    pitch: float = 0.0
    yaw: float = 0.0

    def ray(self, ndc_x: float, ndc_y: float) -> Ray:
        half = math.tan(math.radians(self.fov) / 2)
        x, y, z = ndc_x * half * self.aspect, ndc_y * half, -1.0

        # Euler XYZ: world = Rx(pitch) . Ry(yaw) . local
        cy, sy = math.cos(self.yaw), math.sin(self.yaw)
        x, z = x * cy + z * sy, -x * sy + z * cy
        cp, sp = math.cos(self.pitch), math.sin(self.pitch)
        y, z = y * cp - z * sp, y * sp + z * cp

        return Ray(origin=self.position, direction=Vector3(x, y, z).normalized())

    def distance(self) -> float:
        return self.position.length()

    def zoom(self, delta_y: float) -> None:
        """Dolly towards (delta_y < 0) or away from (delta_y > 0) the globe centre.

        Each wheel step scales the distance by 0.95 ** ZOOM_SPEED, clamped to
        [MIN_CAMERA_DISTANCE, MAX_CAMERA_DISTANCE].
        """
        if delta_y == 0:
            return
        step = 0.95**ZOOM_SPEED
        distance = self.distance() * step if delta_y < 0 else self.distance() / step
        distance = min(max(distance, MIN_CAMERA_DISTANCE), MAX_CAMERA_DISTANCE)
        self.position = self.position.normalized().scale(distance)


class Globe(BaseModel):
    """Globe mesh state. rotation_y is read by the host renderer to spin the texture; picking ignores it."""

    radius: float = GLOBE_RADIUS
    rotation_y: float = 0.0

    def tick(self) -> None:
        self.rotation_y += GLOBE_ROTATION_STEP


class CameraController:
    """Rotates the camera while the pointer rests near a viewport edge."""

    def __init__(self, viewport: Rect):
        self.viewport = viewport
        self.pointer = (0.0, 0.0)

    def on_move(self, event: PointerEvent) -> None:
        self.pointer = pointer_to_ndc(event.client_x, event.client_y, self.viewport)

    def tick(self, camera: Camera) -> None:
        x, y = self.pointer
        if abs(x) > EDGE_THRESHOLD:
            camera.yaw -= x * EDGE_ROTATION_SPEED
        if abs(y) > EDGE_THRESHOLD:
            camera.pitch += y * EDGE_ROTATION_SPEED


class EventSurface:
    """Minimal canvas stand-in: a bounding rectangle plus named event listeners."""

    def __init__(self, rect: Rect):
        self.rect = rect
        self._listeners: dict[str, list[Callable]] = {}

    def add_listener(self, event_type: str, handler: Callable) -> None:
        self._listeners.setdefault(event_type, []).append(handler)

    def remove_listener(self, event_type: str, handler: Callable) -> None:
        handlers = self._listeners.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch(self, event_type: str, event) -> None:
        for handler in list(self._listeners.get(event_type, [])):
            handler(event)


class SceneController:
    """Owns the globe scene state and turns clicks on the globe into region fetches.

    A new click cancels any fetch still in flight, and results for a coordinate that
    is no longer selected are dropped, so the panel always shows the last click.
    """

    def __init__(
        self,
        surface: EventSurface,
        fetch: Fetcher,
        on_state: Callable[[PanelState], None] | None = None,
    ):
        self.surface = surface
        self.camera = Camera(aspect=surface.rect.width / surface.rect.height)
        self.globe = Globe()
        self.camera_controller = CameraController(surface.rect)
        self.state = PanelState()
        self._fetch = fetch
        self._on_state = on_state
        self._task: asyncio.Task | None = None

    @classmethod
    def for_api(cls, surface: EventSurface, deps: WeatherDeps, base_url: str | None = None, **kwargs):
        """Build a controller that fetches from the weather endpoint at ``base_url``."""
        fetch = partial(fetch_region, deps.http_client, base_url or api_base_url())
        return cls(surface, fetch, **kwargs)

    @contextmanager
    def attach(self):
        """Subscribe pointer handlers for the lifetime of the block."""
        self.surface.add_listener("click", self.on_click)
        self.surface.add_listener("mousemove", self.camera_controller.on_move)
        self.surface.add_listener("wheel", self.on_wheel)
        try:
            yield self
        finally:
            self.surface.remove_listener("click", self.on_click)
            self.surface.remove_listener("mousemove", self.camera_controller.on_move)
            self.surface.remove_listener("wheel", self.on_wheel)
            self._cancel_pending()

    def pick(self, event: PointerEvent) -> GeoCoordinate | None:
        """Resolve the geographic coordinate under the pointer, None when it misses the globe."""
        ndc = pointer_to_ndc(event.client_x, event.client_y, self.surface.rect)
        hit = intersect_sphere(self.camera.ray(*ndc), self.globe.radius)
        if hit is None:
            return None
        return resolve_point(hit, self.globe.radius)

    def on_click(self, event: PointerEvent) -> GeoCoordinate | None:
        coord = self.pick(event)
        if coord is None:
            return None

        logger.debug("Region clicked: lat=%s lon=%s", coord.latitude, coord.longitude)
        self._set_state(open_region(self.state, coord))
        self._cancel_pending()
        self._task = asyncio.get_running_loop().create_task(self._load(coord))
        return coord

    def on_wheel(self, event: WheelEvent) -> None:
        self.camera.zoom(event.delta_y)

    def close(self) -> None:
        self._cancel_pending()
        self._set_state(close_panel(self.state))

    def tick(self) -> None:
        """Advance one display frame."""
        self.globe.tick()
        self.camera_controller.tick(self.camera)

    async def wait_idle(self) -> None:
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    async def _load(self, coord: GeoCoordinate) -> None:
        try:
            snapshot = await self._fetch(coord)
        except RegionFetchError as e:
            logger.warning("Region fetch failed: %s", e)
            self._set_state(region_failed(self.state, coord, str(e)))
            return
        except Exception as e:
            logger.exception("Unexpected error loading region data")
            self._set_state(region_failed(self.state, coord, str(e) or type(e).__name__))
            return
        self._set_state(region_loaded(self.state, coord, snapshot))

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _set_state(self, state: PanelState) -> None:
        if state is self.state:
            return
        self.state = state
        if self._on_state is not None:
            self._on_state(state)
