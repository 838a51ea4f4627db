"""Inspection helpers: an orbiting camera, a mesh selector and debug lines."""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field
from typing import Mapping, Optional

import numpy as np

from .scene import GL_TRIANGLES, Camera, Scene, angle_axis, quat_multiply, quat_rotate

__all__ = [
    "OrbitCamera",
    "MeshInfo",
    "MeshSelector",
    "Line",
    "scene_decorations",
    "mesh_decorations",
]

_PI = 3.1415926
_MIN_RADIUS = 1e-1
_MAX_RADIUS = 1e6
_AXIS_LENGTH = 0.2


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _wrap_angle(angle: float) -> float:
    """Wrap ``angle`` into [-pi, pi]."""
    turns = angle / (2.0 * _PI)
    turns -= _round_half_away(turns)
    return turns * 2.0 * _PI


@dataclass
class OrbitCamera:
    """Z-up trackball camera orbiting ``target`` at distance ``radius``.

    ``azimuth`` is measured counter-clockwise from the -y axis and
    ``elevation`` above the ground, both in radians within [-pi, pi].
    """

    radius: float = 2.0
    azimuth: float = 0.3
    elevation: float = 0.2
    target: np.ndarray = field(default_factory=lambda: np.zeros(3))
    flip_x: bool = False

    def __post_init__(self) -> None:
        self.target = np.array(self.target, dtype=float)

    def begin_drag(self) -> None:
        """Start a drag; horizontal motion is reversed while upside-down."""
        self.flip_x = abs(self.elevation) > 0.5 * _PI

    def drag(self, xrel: float, yrel: float, window_size, shift: bool, frame=None) -> None:
        """Apply a mouse drag of (``xrel``, ``yrel``) window pixels.

        With ``shift`` the target pans in the plane of ``frame`` (the
        camera's 3x3 rotation matrix, axes as columns); otherwise the
        camera tumbles around the target.
        """
        width, height = (float(v) for v in window_size)
        delta_x = xrel / width * 2.0
        delta_x *= height / width
        delta_y = yrel / height * -2.0

        if shift:
            if frame is None:
                raise ValueError("panning needs the camera frame")
            frame = np.asarray(frame, dtype=float)
            self.target = self.target - (
                frame[:, 0] * (delta_x * self.radius) + frame[:, 1] * (delta_y * self.radius)
            )
        else:
            self.azimuth -= 3.0 * delta_x * (-1.0 if self.flip_x else 1.0)
            self.elevation -= 3.0 * delta_y
            self.azimuth = _wrap_angle(self.azimuth)
            self.elevation = _wrap_angle(self.elevation)

    def dolly(self, wheel_y: float) -> None:
        """Move closer or farther by a mouse wheel step, within limits."""
        self.radius *= math.pow(0.5, 0.1 * wheel_y)
        self.radius = min(max(self.radius, _MIN_RADIUS), _MAX_RADIUS)

    def apply(self, camera: Camera, drawable_size) -> None:
        """Place ``camera`` according to this orbit and the drawable size."""
        rotation = quat_multiply(
            angle_axis(self.azimuth, (0.0, 0.0, 1.0)),
            angle_axis(0.5 * _PI - self.elevation, (1.0, 0.0, 0.0)),
        )
        transform = camera.transform
        transform.rotation = rotation
        transform.position = self.target + self.radius * quat_rotate(rotation, (0.0, 0.0, 1.0))
        transform.scale = np.ones(3)
        width, height = drawable_size
        camera.aspect = float(width) / float(height)


@dataclass
class MeshInfo:
    """Draw range and bounding box of one mesh in a buffer."""

    type: int = GL_TRIANGLES
    start: int = 0
    count: int = 0
    min: np.ndarray = field(default_factory=lambda: np.zeros(3))
    max: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.min = np.array(self.min, dtype=float)
        self.max = np.array(self.max, dtype=float)


class MeshSelector:
    """Steps through meshes in name order; starts at the first one."""

    def __init__(self, meshes: Mapping[str, MeshInfo]) -> None:
        self.meshes = dict(meshes)
        self._names = sorted(self.meshes)
        self.current_name = ""
        self.type = GL_TRIANGLES
        self.start = 0
        self.count = 0
        self.current_min = np.zeros(3)
        self.current_max = np.zeros(3)
        self.select_prev()

    def _select(self, name: Optional[str]) -> None:
        if name is None:
            self.current_name = ""
            self.type = GL_TRIANGLES
            self.start = 0
            self.count = 0
            self.current_min = np.zeros(3)
            self.current_max = np.zeros(3)
            return
        mesh = self.meshes[name]
        self.current_name = name
        self.type = mesh.type
        self.start = mesh.start
        self.count = mesh.count
        self.current_min = mesh.min.copy()
        self.current_max = mesh.max.copy()

    def _position(self) -> Optional[int]:
        try:
            return self._names.index(self.current_name)
        except ValueError:
            return None

    def select_prev(self) -> None:
        """Select the previous mesh; stays on the first, or jumps to it if unknown."""
        if not self._names:
            self._select(None)
            return
        index = self._position()
        if index is None or index == 0:
            self._select(self._names[0])
        else:
            self._select(self._names[index - 1])

    def select_next(self) -> None:
        """Select the next mesh; stays on the last, or jumps to it if unknown."""
        if not self._names:
            self._select(None)
            return
        index = self._position()
        if index is None or index + 1 >= len(self._names):
            self._select(self._names[-1])
        else:
            self._select(self._names[index + 1])


@dataclass(eq=False)
class Line:
    """A coloured line segment in world space."""

    start: np.ndarray
    end: np.ndarray
    color: tuple

    def __post_init__(self) -> None:
        self.start = np.array(self.start, dtype=float)
        self.end = np.array(self.end, dtype=float)
        self.color = tuple(self.color)


_RED = (0xFF, 0x00, 0x00, 0xFF)
_DARK_RED = (0x88, 0x00, 0x00, 0xFF)
_GREEN = (0x00, 0xFF, 0x00, 0xFF)
_DARK_GREEN = (0x00, 0x88, 0x00, 0xFF)
_BLUE = (0x00, 0x00, 0xFF, 0xFF)
_DARK_BLUE = (0x00, 0x00, 0x88, 0xFF)
_YELLOW = (0xFF, 0xFF, 0x00, 0xFF)
_BOX_GREY = (0xDD, 0xDD, 0xDD, 0xFF)


def scene_decorations(scene: Scene) -> list:
    """Lines linking each transform to its parent, plus its local axes."""
    lines = []
    for transform in scene.transforms:
        local_to_world = transform.make_local_to_world()

        def xf(v, m=local_to_world):
            return m @ np.append(np.asarray(v, dtype=float), 1.0)

        origin = xf((0.0, 0.0, 0.0))
        if transform.parent is not None:
            parent_origin = transform.parent.make_local_to_world()[:, 3]
            lines.append(Line(parent_origin, origin, _YELLOW))

        length = _AXIS_LENGTH
        for direction, color in (
            ((length, 0.0, 0.0), _RED),
            ((-length, 0.0, 0.0), _DARK_RED),
            ((0.0, length, 0.0), _GREEN),
            ((0.0, -length, 0.0), _DARK_GREEN),
            ((0.0, 0.0, length), _BLUE),
            ((0.0, 0.0, -length), _DARK_BLUE),
        ):
            lines.append(Line(origin, xf(direction), color))
    return lines


def mesh_decorations(selector: MeshSelector) -> list:
    """Unit axes at the origin and the bounding box of the selected mesh."""
    zero = np.zeros(3)
    lines = [
        Line(zero, (1.0, 0.0, 0.0), _RED),
        Line(zero, (0.0, 1.0, 0.0), _GREEN),
        Line(zero, (0.0, 0.0, 1.0), _BLUE),
    ]
    half = 0.5 * (selector.current_max - selector.current_min)
    center = 0.5 * (selector.current_max + selector.current_min)
    for signs in itertools.product((-1.0, 1.0), repeat=3):
        for axis in range(3):
            if signs[axis] > 0:
                continue
            other = list(signs)
            other[axis] = 1.0
            a = center + half * np.array(signs)
            b = center + half * np.array(other)
            lines.append(Line(a, b, _BOX_GREY))
    return lines