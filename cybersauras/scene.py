"""A hierarchy of transforms with attached drawables, cameras and lights.

Scenes can be loaded from the chunked ``.scene`` format and copied with
all transform references remapped onto the copy.
"""

from __future__ import annotations

import dataclasses
import enum
import math
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Optional

import numpy as np

from .chunks import read_chunk

__all__ = [
    "SceneError",
    "Transform",
    "Pipeline",
    "Drawable",
    "Camera",
    "LightType",
    "Light",
    "Scene",
    "angle_axis",
    "quat_multiply",
    "quat_inverse",
    "quat_to_mat3",
    "quat_rotate",
]

GL_TRIANGLES = 0x0004
GL_TEXTURE_2D = 0x0DE1
NO_LOCATION = 0xFFFFFFFF

_NO_PARENT = 0xFFFFFFFF
_PI = 3.1415926


class SceneError(ValueError):
    """Raised when a scene file is malformed."""


# ---------------------------------------------------------------------------
# quaternion helpers; quaternions are (w, x, y, z) arrays


def angle_axis(angle: float, axis) -> np.ndarray:
    """Quaternion rotating by ``angle`` radians about the unit ``axis``."""
    axis = np.asarray(axis, dtype=float)
    half = 0.5 * angle
    s = math.sin(half)
    return np.array([math.cos(half), axis[0] * s, axis[1] * s, axis[2] * s])


def quat_multiply(a, b) -> np.ndarray:
    """Hamilton product ``a * b``."""
    aw, ax, ay, az = (float(v) for v in a)
    bw, bx, by, bz = (float(v) for v in b)
    return np.array([
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    ])


def quat_inverse(q) -> np.ndarray:
    """Inverse quaternion: the conjugate divided by the squared norm."""
    q = np.asarray(q, dtype=float)
    conjugate = np.array([q[0], -q[1], -q[2], -q[3]])
    return conjugate / float(np.dot(q, q))


def quat_to_mat3(q) -> np.ndarray:
    """3x3 rotation matrix (acting on column vectors) for ``q``."""
    w, x, y, z = (float(v) for v in q)
    return np.array([
        [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)],
        [2.0 * (x * y + w * z), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - w * x)],
        [2.0 * (x * z - w * y), 2.0 * (y * z + w * x), 1.0 - 2.0 * (x * x + y * y)],
    ])


def quat_rotate(q, v) -> np.ndarray:
    """Rotate the vector ``v`` by ``q``."""
    return quat_to_mat3(q) @ np.asarray(v, dtype=float)


def _pad(m: np.ndarray) -> np.ndarray:
    """Extend a 3x4 affine matrix with a (0, 0, 0, 1) row."""
    return np.vstack([m, [0.0, 0.0, 0.0, 1.0]])


# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Transform:
    """Position, rotation and scale relative to an optional parent."""

    name: str = ""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    parent: Optional["Transform"] = None

    def __post_init__(self) -> None:
        self.position = np.array(self.position, dtype=float)
        self.rotation = np.array(self.rotation, dtype=float)
        self.scale = np.array(self.scale, dtype=float)

    def make_local_to_parent(self) -> np.ndarray:
        """3x4 matrix: translate * rotate * scale."""
        rot = quat_to_mat3(self.rotation)
        return np.column_stack([rot * self.scale[np.newaxis, :], self.position])

    def make_parent_to_local(self) -> np.ndarray:
        """3x4 matrix: 1/scale * rotate^-1 * translate^-1.

        A zero scale component gives a degenerate matrix rather than NaNs.
        """
        inv_scale = np.array([0.0 if s == 0.0 else 1.0 / s for s in self.scale])
        inv_rot = quat_to_mat3(quat_inverse(self.rotation)) * inv_scale[:, np.newaxis]
        return np.column_stack([inv_rot, inv_rot @ -self.position])

    def make_local_to_world(self) -> np.ndarray:
        if self.parent is None:
            return self.make_local_to_parent()
        return self.parent.make_local_to_world() @ _pad(self.make_local_to_parent())

    def make_world_to_local(self) -> np.ndarray:
        if self.parent is None:
            return self.make_parent_to_local()
        return self.make_parent_to_local() @ _pad(self.parent.make_world_to_local())


@dataclass
class Pipeline:
    """Everything needed to issue one draw call for a drawable."""

    @dataclass
    class TextureInfo:
        texture: int = 0
        target: int = GL_TEXTURE_2D

    TEXTURE_COUNT = 4

    program: int = 0
    vao: int = 0
    type: int = GL_TRIANGLES
    start: int = 0
    count: int = 0
    OBJECT_TO_CLIP_mat4: int = NO_LOCATION
    OBJECT_TO_LIGHT_mat4x3: int = NO_LOCATION
    NORMAL_TO_LIGHT_mat3: int = NO_LOCATION
    set_uniforms: Optional[Callable[[], None]] = None
    textures: list = field(
        default_factory=lambda: [Pipeline.TextureInfo() for _ in range(Pipeline.TEXTURE_COUNT)]
    )

    def _copy(self) -> "Pipeline":
        return dataclasses.replace(
            self, textures=[dataclasses.replace(t) for t in self.textures]
        )


def _require_transform(transform) -> None:
    if transform is None:
        raise ValueError("a transform is required")


@dataclass(eq=False)
class Drawable:
    """Attaches drawing data to a transform."""

    transform: Transform
    pipeline: Pipeline = field(default_factory=Pipeline)

    def __post_init__(self) -> None:
        _require_transform(self.transform)


@dataclass(eq=False)
class Camera:
    """Perspective camera looking down its transform's -z axis."""

    transform: Transform
    fovy: float = math.radians(60.0)
    aspect: float = 1.0
    near: float = 0.01

    def __post_init__(self) -> None:
        _require_transform(self.transform)

    def make_projection(self) -> np.ndarray:
        """4x4 infinite perspective projection matrix."""
        extent = math.tan(self.fovy / 2.0) * self.near
        left, right = -extent * self.aspect, extent * self.aspect
        bottom, top = -extent, extent
        m = np.zeros((4, 4))
        m[0, 0] = (2.0 * self.near) / (right - left)
        m[1, 1] = (2.0 * self.near) / (top - bottom)
        m[2, 2] = -1.0
        m[3, 2] = -1.0
        m[2, 3] = -2.0 * self.near
        return m


class LightType(enum.Enum):
    POINT = "p"
    HEMISPHERE = "h"
    SPOT = "s"
    DIRECTIONAL = "d"


@dataclass(eq=False)
class Light:
    """Light attached to a transform; directed lights point along -z."""

    transform: Transform
    type: LightType = LightType.POINT
    energy: np.ndarray = field(default_factory=lambda: np.ones(3))
    spot_fov: float = math.radians(45.0)

    def __post_init__(self) -> None:
        _require_transform(self.transform)
        self.energy = np.array(self.energy, dtype=float)


DrawableCallback = Callable[["Scene", Transform, str], None]
ExtraLoader = Callable[["Scene", BinaryIO, bytes, list], None]

_NAMES_FORMAT = "=B"
_HIERARCHY_FORMAT = "=III3f4f3f"
_MESH_FORMAT = "=III"
_CAMERA_FORMAT = "=I4sfff"
_LIGHT_FORMAT = "=IcBBBfff"


@dataclass(eq=False)
class Scene:
    """Transforms plus the drawables, cameras and lights attached to them.

    ``extra_loader``, when set, is called after the standard chunks of a
    scene file have been read, to read any further chunks.
    """

    transforms: list = field(default_factory=list)
    drawables: list = field(default_factory=list)
    cameras: list = field(default_factory=list)
    lights: list = field(default_factory=list)
    extra_loader: Optional[ExtraLoader] = field(default=None, repr=False)

    def load(self, filename: str, on_drawable: Optional[DrawableCallback] = None) -> None:
        """Add the contents of the scene file ``filename`` to this scene."""
        with open(filename, "rb") as stream:
            self.load_stream(stream, filename, on_drawable)

    def load_stream(
        self,
        stream: BinaryIO,
        filename: str = "<stream>",
        on_drawable: Optional[DrawableCallback] = None,
    ) -> None:
        """Add scene data read from ``stream``; ``filename`` is used in messages."""
        names = bytes(b for (b,) in read_chunk(stream, "str0", _NAMES_FORMAT))
        hierarchy = read_chunk(stream, "xfh0", _HIERARCHY_FORMAT)
        meshes = read_chunk(stream, "msh0", _MESH_FORMAT)
        cameras = read_chunk(stream, "cam0", _CAMERA_FORMAT)
        lights = read_chunk(stream, "lmp0", _LIGHT_FORMAT)

        def name_at(begin: int, end: int) -> Optional[str]:
            if begin <= end <= len(names):
                return names[begin:end].decode("utf-8", errors="replace")
            return None

        def transform_at(index: int, kind: str) -> Transform:
            if index >= len(created):
                raise SceneError(
                    f"scene file '{filename}' contains {kind} entry with invalid "
                    f"transform index ({index})"
                )
            return created[index]

        created: list[Transform] = []
        for parent, begin, end, px, py, pz, rx, ry, rz, rw, sx, sy, sz in hierarchy:
            transform = Transform()
            self.transforms.append(transform)
            if parent != _NO_PARENT:
                if parent >= len(created):
                    raise SceneError(
                        f"scene file '{filename}' did not contain transforms in "
                        "topological-sort order."
                    )
                transform.parent = created[parent]
            name = name_at(begin, end)
            if name is None:
                raise SceneError(
                    f"scene file '{filename}' contains hierarchy entry with invalid name indices"
                )
            transform.name = name
            transform.position = np.array([px, py, pz], dtype=float)
            transform.rotation = np.array([rw, rx, ry, rz], dtype=float)
            transform.scale = np.array([sx, sy, sz], dtype=float)
            created.append(transform)

        for index, begin, end in meshes:
            transform = transform_at(index, "mesh")
            name = name_at(begin, end)
            if name is None:
                raise SceneError(
                    f"scene file '{filename}' contains mesh entry with invalid name indices"
                )
            if on_drawable is not None:
                on_drawable(self, transform, name)

        for index, kind, fov, clip_near, _clip_far in cameras:
            transform = transform_at(index, "camera")
            kind_text = kind.decode("latin-1")
            if kind_text != "pers":
                print(f"Ignoring non-perspective camera ({kind_text}) stored in file.")
                continue
            # The far plane is unused: projections are infinite.
            self.cameras.append(
                Camera(transform, fovy=fov / 180.0 * _PI, near=clip_near)
            )

        for index, kind, r, g, b, energy, _distance, fov in lights:
            transform = transform_at(index, "lamp")
            kind_text = kind.decode("latin-1")
            try:
                light_type = LightType(kind_text)
            except ValueError:
                print(f"Ignoring unrecognized lamp type ({kind_text}) stored in file.")
                continue
            self.lights.append(
                Light(
                    transform,
                    type=light_type,
                    energy=np.array([r, g, b], dtype=float) / 255.0 * energy,
                    spot_fov=fov / 180.0 * _PI,
                )
            )

        self.load_extra(stream, names, created)

        if stream.read(1):
            print(f"WARNING: trailing data in scene file '{filename}'", file=sys.stderr)

    def load_extra(self, stream: BinaryIO, names: bytes, transforms: list) -> None:
        """Read further chunks after the standard ones.

        Hands the stream, the name table and the loaded transforms to
        ``extra_loader`` when one is set; subclasses may override this instead.
        """
        if self.extra_loader is not None:
            self.extra_loader(self, stream, names, transforms)

    def copy(self) -> "Scene":
        """Return an independent copy of this scene."""
        duplicate = type(self)()
        duplicate.set(self)
        return duplicate

    def set(self, other: "Scene") -> dict:
        """Replace this scene's contents with a copy of ``other``.

        Returns the mapping from ``other``'s transforms to the new ones.
        """
        mapping: dict = {}
        new_transforms = []
        for t in other.transforms:
            fresh = Transform(
                name=t.name,
                position=t.position.copy(),
                rotation=t.rotation.copy(),
                scale=t.scale.copy(),
                parent=t.parent,
            )
            mapping[t] = fresh
            new_transforms.append(fresh)
        for t in new_transforms:
            if t.parent is not None:
                t.parent = mapping[t.parent]

        self.transforms = new_transforms
        self.drawables = [
            Drawable(mapping[d.transform], d.pipeline._copy()) for d in other.drawables
        ]
        self.cameras = [
            Camera(mapping[c.transform], fovy=c.fovy, aspect=c.aspect, near=c.near)
            for c in other.cameras
        ]
        self.lights = [
            Light(mapping[l.transform], type=l.type, energy=l.energy.copy(), spot_fov=l.spot_fov)
            for l in other.lights
        ]
        return mapping

    def find_transform(self, name: str) -> Transform:
        """Return the first transform called ``name``."""
        for transform in self.transforms:
            if transform.name == name:
                return transform
        raise KeyError(name)