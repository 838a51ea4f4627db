# cybersauras

The game rules and asset handling behind *CyberSauras Dash*, a lane-dodging
runner: steer the dinosaur across the platform, eat the small enemies for fuel,
shoot or avoid the obstacles and shooters, and keep going as the game speeds up.

Everything here runs without a window or a GPU, so the game can be driven,
inspected and tested from plain Python.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## What is inside

| Module | Purpose |
| --- | --- |
| `cybersauras.chunks` | `read_chunk` and `write_chunk` read and write tagged binary chunks (a four-byte magic tag, a four-byte size, then fixed-size records described by a `struct` format). Malformed data raises `ChunkError`. |
| `cybersauras.png` | `read_png`, `write_png`, `load_png` and `save_png` move 8-bit RGBA pixels in and out of PNG images; `Origin` says whether the first row is the top (`UPPER_LEFT`) or the bottom (`LOWER_LEFT`) of the picture. |
| `cybersauras.scene` | `Scene`, `Transform`, `Pipeline`, `Drawable`, `Camera`, `Light` and `LightType`: a transform hierarchy loaded from `.scene` files, with matrix helpers and quaternion functions (`angle_axis`, `quat_multiply`, `quat_inverse`, `quat_to_mat3`, `quat_rotate`). Bad files raise `SceneError`. |
| `cybersauras.game` | `PlayMode`, the game itself: key input through `handle_event` with `KeyEvent` and `Key`, one frame of simulation through `update`, and the score and fuel lines through `hud_text`. |
| `cybersauras.viewer` | Inspection tools: `OrbitCamera` for trackball-style camera control, `MeshSelector` for stepping through `MeshInfo` entries in name order, and `scene_decorations` / `mesh_decorations`, which return `Line` segments outlining a scene's transforms or a mesh's bounding box. |

## Loading a scene

```python
from cybersauras.scene import Scene

scene = Scene()
scene.load("CyberSauras.scene")

player = scene.find_transform("Player_Head")
print(player.make_local_to_world())
```

`Scene.load` takes an optional callback that is called with the scene, the
transform and the mesh name for every mesh entry in the file; that is the
place to attach `Drawable` objects. `Scene.load_stream` reads from an open
binary stream instead. `Scene.copy()` returns an independent copy whose
parent links, drawables, cameras and lights all point at the new transforms.

## Running the game rules

```python
import random

from cybersauras.game import Key, KeyEvent, PlayMode

game = PlayMode(scene, random.Random(0))
game.handle_event(KeyEvent(Key.A, down=True))
for _ in range(600):
    game.update(1 / 60)
print(game.hud_text())
```

`PlayMode` works on its own copy of the scene, which must hold the named
player, platform, obstacle, enemy and laser objects and exactly one camera.
A and D move across the platform, W and S move forward and back, and Space
fires. Running out of fuel or touching an obstacle, a shooter or a laser
resets the round.

## Images

```python
from cybersauras.png import Origin, load_png, save_png

width, height, pixels = load_png("screenshot.png", Origin.UPPER_LEFT)
save_png("copy.png", width, height, pixels, Origin.UPPER_LEFT)
```

`pixels` is a NumPy array of shape `(height, width, 4)`.

## What this package does not do

There is no command to start the game, no window, no rendering and no sound:
`Pipeline` and `Camera.make_projection` describe draw calls but nothing here
issues them. There is no mesh-buffer file reader; `MeshSelector` is given its
`MeshInfo` entries by the caller. Asset files are found by the paths you pass
in; the package does not look them up next to the running program.