"""Game state and rules for the side-scrolling dash game."""

from __future__ import annotations

import enum
import math
import random
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .scene import Scene, SceneError, Transform, angle_axis, quat_multiply

__all__ = ["Key", "KeyEvent", "Button", "PlayMode"]

HIDDEN_X = 350.0
HIDDEN_Y = -350.0

ENEMY_SLOTS = 6
LASER_SLOTS = 20

# 0: obstacle, 1: eatable enemy, 2: shooting enemy
SPAWN_WEIGHTS = (0, 0, 0, 0, 1, 1, 1, 2, 2, 2)

_X_AXIS = (1.0, 0.0, 0.0)


class Key(enum.Enum):
    """Keys the game reacts to."""

    A = "a"
    D = "d"
    W = "w"
    S = "s"
    SPACE = "space"


@dataclass(frozen=True)
class KeyEvent:
    """A key going down (``down=True``) or coming back up."""

    key: Key
    down: bool


@dataclass
class Button:
    """Input state for one key."""

    downs: int = 0
    pressed: bool = False


class PlayMode:
    """Plays the game on a private copy of a loaded scene.

    ``rng`` needs a ``randrange(n)`` method; it decides what spawns and where.
    """

    def __init__(self, scene: Scene, rng=None) -> None:
        self.scene = scene.copy()
        self.rng = rng if rng is not None else random.Random()

        self.left = Button()
        self.right = Button()
        self.up = Button()
        self.down = Button()
        self.space = Button()

        self.laser_movement_dir = [0] * LASER_SLOTS
        self.weight = SPAWN_WEIGHTS
        self.randnum = 0

        self.init_state(0)

    # ------------------------------------------------------------------
    # setup

    def get_transforms(self) -> None:
        """Find every named object of the game in the scene."""
        fixed = {
            "Platform_Base": "platform",
            "Left_Bound": "left_bound_obj",
            "Right_Bound": "right_bound_obj",
            "Player_Leg_L": "player_left_leg",
            "Player_Leg_R": "player_right_leg",
            "Player_Head": "player_head",
            "Player_Torso": "player_torso",
        }
        slotted = {}
        for i in range(ENEMY_SLOTS):
            slotted[f"Obstacle_{i + 1}"] = (self.obstacle, i)
            slotted[f"EnemyE_Body_{i + 1}"] = (self.enemy_eatable, i)
            slotted[f"EnemyS_Body_{i + 1}"] = (self.enemy_shooter, i)
        for i in range(LASER_SLOTS):
            slotted[f"Mball_{i + 1}"] = (self.laser, i)

        for transform in self.scene.transforms:
            if transform.name in fixed:
                setattr(self, fixed[transform.name], transform)
            elif transform.name in slotted:
                slots, index = slotted[transform.name]
                slots[index] = transform

        for attribute, label in (
            ("platform", "platform"),
            ("left_bound_obj", "left_bound_obj"),
            ("right_bound_obj", "right_bound_obj leg"),
            ("player_left_leg", "player_left_leg"),
            ("player_right_leg", "player_right_leg"),
            ("player_head", "player_head"),
            ("player_torso", "player_torso"),
        ):
            if getattr(self, attribute) is None:
                raise SceneError(f"{label} not found.")

        for i in range(ENEMY_SLOTS):
            if self.obstacle[i] is None:
                raise SceneError(f"Obstacle_{i + 1} not found.")
            if self.enemy_eatable[i] is None:
                raise SceneError(f"EnemyE_Body_{i + 1} not found.")
            if self.enemy_shooter[i] is None:
                raise SceneError(f"EnemyS_Body_{i + 1} not found.")
        for i in range(LASER_SLOTS):
            if self.laser[i] is None:
                raise SceneError(f"Mball_{i + 1} not found")

        self.left_leg_rotation = self.player_left_leg.rotation.copy()
        self.right_leg_rotation = self.player_right_leg.rotation.copy()

        if len(self.scene.cameras) != 1:
            raise SceneError(
                "Expecting scene to have exactly one camera, but it has "
                f"{len(self.scene.cameras)}"
            )
        self.camera = self.scene.cameras[0]

    def init_state(self, state: int) -> None:
        """Reset the game values; ``state == 0`` also sets up the scene."""
        self.wobble = 0.0
        self.wobble_factor = 14.0
        self.speedup = 1.09

        self.player_speed = 0.7
        self.enemy_speed = 0.7

        self.score = 0
        self.fuel = 100
        self.update_val = 0
        self.score_update_rate = 10
        self.level_update_rate = 200
        self.fuel_update_rate = 50
        self.laser_speed = self.enemy_speed * 2.0

        self.enemy_update_rate = 50.0
        self.enemy_frame_counter = 0.0
        self.enemy_frame_rate = 0.5

        self.enemy_laser_update_rate = 50.0
        self.enemy_laser_frame_counter = 0.0
        self.enemy_laser_frame_rate = 0.5

        self.object_size = 2.0
        self.space_debounce = 0
        self.collision_scale_x = 1.0

        if state == 0:
            self.camera = None
            self.platform: Optional[Transform] = None
            self.left_bound_obj: Optional[Transform] = None
            self.right_bound_obj: Optional[Transform] = None
            self.player_head: Optional[Transform] = None
            self.player_torso: Optional[Transform] = None
            self.player_left_leg: Optional[Transform] = None
            self.player_right_leg: Optional[Transform] = None
            self.obstacle: list = [None] * ENEMY_SLOTS
            self.enemy_eatable: list = [None] * ENEMY_SLOTS
            self.enemy_shooter: list = [None] * ENEMY_SLOTS
            self.laser: list = [None] * LASER_SLOTS

            self.get_transforms()

            for eatable in self.enemy_eatable:
                eatable.position[2] = self.player_head.position[2]
            for beam in self.laser:
                beam.position[2] = self.enemy_shooter[0].position[2]

            self.camera.transform.position = np.array([-190.143188, 0.052472, 56.843361])

            self.bound_left = 36.0 + 500.0
            self.bound_right = -36.0 + 500.0
            self.bound_front = 250.0 + 100.0
            self.bound_back = -17.0 + 100.0

            for transform in (
                self.left_bound_obj,
                self.right_bound_obj,
                self.platform,
                self.player_head,
                self.player_torso,
                self.player_left_leg,
                self.player_right_leg,
                self.camera.transform,
            ):
                transform.position[0] += 100.0
                transform.position[1] += 500.0

        for group in (self.obstacle, self.enemy_eatable, self.enemy_shooter, self.laser):
            for obj in group:
                self.hide_object(obj)

    # ------------------------------------------------------------------
    # rules

    @property
    def _player_parts(self) -> tuple:
        return (
            self.player_right_leg,
            self.player_left_leg,
            self.player_head,
            self.player_torso,
        )

    def hide_object(self, obj: Transform) -> None:
        """Park ``obj`` out of view; parked objects count as inactive."""
        obj.position[0] = HIDDEN_X
        obj.position[1] = HIDDEN_Y

    @staticmethod
    def _visible(obj: Transform) -> bool:
        return obj.position[1] != HIDDEN_Y

    def is_collided(self, obj1: Transform, obj2: Transform, scalex: float, scaley: float) -> bool:
        """Whether the two objects overlap in the ground plane."""
        dx = abs(obj1.position[0] - obj2.position[0])
        dy = abs(obj1.position[1] - obj2.position[1])
        return dx <= self.object_size + scalex - 1.0 and dy <= self.object_size + scaley

    def _touches_player(self, obj: Transform) -> bool:
        return any(
            self.is_collided(obj, part, self.collision_scale_x, 0.0)
            for part in self._player_parts
        )

    def level_up(self) -> None:
        """Speed everything up by one step."""
        self.wobble_factor *= self.speedup
        self.player_speed *= self.speedup
        self.enemy_speed *= self.speedup
        self.enemy_frame_rate *= self.speedup
        self.enemy_laser_frame_rate *= self.speedup
        self.laser_speed *= self.speedup
        self.collision_scale_x *= self.speedup

    def game_over(self) -> None:
        """Start again from the initial values."""
        self.init_state(1)

    def handle_event(self, event: KeyEvent) -> bool:
        """Record a key event; return whether it was used."""
        buttons = {
            Key.A: self.left,
            Key.D: self.right,
            Key.W: self.up,
            Key.S: self.down,
            Key.SPACE: self.space,
        }
        button = buttons.get(event.key)
        if button is None:
            return False
        if event.down:
            if event.key is Key.SPACE:
                if self.space_debounce != 0:
                    return False
                self.space_debounce = 1
            button.downs += 1
            button.pressed = True
            return True
        button.pressed = False
        if event.key is Key.SPACE:
            self.space_debounce = 0
        return True

    def update(self, elapsed: float) -> None:
        """Advance the game by one frame."""
        self._animate_legs(elapsed)
        self._move_player()

        self.update_val += 1
        if self.update_val % self.score_update_rate == 0:
            self.score += 1
        if self.update_val % self.fuel_update_rate == 0:
            self.fuel -= 1
        if self.fuel <= 0:
            self.game_over()
        if self.score % self.level_update_rate == 0 and self.score != 0:
            self.level_up()

        self._spawn_enemy()
        self._move_enemies()
        self._collide_enemies()
        self._player_shoot()
        self._enemies_shoot()
        self._move_lasers()
        self._collide_lasers()

        for beam in self.laser:
            if self._visible(beam) and not (
                self.bound_back <= beam.position[0] <= self.bound_front
            ):
                self.hide_object(beam)

        for button in (self.left, self.right, self.up, self.down, self.space):
            button.downs = 0

    def _animate_legs(self, elapsed: float) -> None:
        self.wobble += elapsed / 10.0
        self.wobble -= math.floor(self.wobble)
        swing = math.sin(self.wobble * self.wobble_factor * 2.0 * math.pi)
        self.player_left_leg.rotation = quat_multiply(
            self.left_leg_rotation, angle_axis(math.radians(25.0 * swing), _X_AXIS)
        )
        self.player_right_leg.rotation = quat_multiply(
            self.right_leg_rotation, angle_axis(math.radians(-25.0 * swing), _X_AXIS)
        )

    def _move_player(self) -> None:
        move_x = move_y = 0.0
        if self.left.pressed and not self.right.pressed:
            move_y = 1.0
        if not self.left.pressed and self.right.pressed:
            move_y = -1.0
        if self.down.pressed and not self.up.pressed:
            move_x = -1.0
        if not self.down.pressed and self.up.pressed:
            move_x = 1.0
        move_x *= self.player_speed
        move_y *= self.player_speed

        if self.player_left_leg.position[1] + move_y >= self.bound_left:
            move_y = self.bound_left - self.player_left_leg.position[1]
        if self.player_right_leg.position[1] + move_y <= self.bound_right:
            move_y = self.bound_right - self.player_right_leg.position[1]
        if self.player_head.position[0] + move_x >= self.bound_front:
            move_x = self.bound_front - self.player_head.position[0]
        if self.player_head.position[0] + move_x <= self.bound_back:
            move_x = self.bound_back - self.player_head.position[0]

        for part in self._player_parts:
            part.position[0] += move_x
            part.position[1] += move_y

    def _spawn_enemy(self) -> None:
        self.enemy_frame_counter += self.enemy_frame_rate
        if self.enemy_frame_counter < self.enemy_update_rate:
            return
        self.enemy_frame_counter = 0.0
        self.randnum = self.rng.randrange(10)
        enemy_pos = float(
            self.rng.randrange(int(self.bound_left - self.bound_right))
        ) + self.bound_right
        group = (self.obstacle, self.enemy_eatable, self.enemy_shooter)[self.weight[self.randnum]]
        for obj in group:
            if not self._visible(obj):
                obj.position[1] = enemy_pos
                break

    def _move_enemies(self) -> None:
        for group in (self.obstacle, self.enemy_eatable, self.enemy_shooter):
            for obj in group:
                if self._visible(obj):
                    obj.position[0] -= self.enemy_speed
                    if obj.position[0] < self.bound_back:
                        self.hide_object(obj)

    def _collide_enemies(self) -> None:
        for obj in self.obstacle:
            if self._touches_player(obj):
                self.game_over()
        for obj in self.enemy_eatable:
            if self._touches_player(obj):
                self.fuel = min(self.fuel + 10, 100)
                self.hide_object(obj)
        for obj in self.enemy_shooter:
            if self._touches_player(obj):
                self.game_over()

    def _free_laser(self) -> Optional[int]:
        return next(
            (index for index, beam in enumerate(self.laser) if not self._visible(beam)),
            None,
        )

    def _player_shoot(self) -> None:
        if not (self.space.pressed and self.space_debounce == 1):
            return
        self.space_debounce = 2
        index = self._free_laser()
        if index is None:
            return
        beam = self.laser[index]
        beam.position[0] = self.player_head.position[0] + self.laser_speed
        beam.position[1] = self.player_head.position[1]
        self.fuel -= 5
        if self.fuel <= 0:
            self.game_over()
        self.laser_movement_dir[index] = 1

    def _enemies_shoot(self) -> None:
        self.enemy_laser_frame_counter += self.enemy_laser_frame_rate
        if self.enemy_laser_frame_counter < self.enemy_laser_update_rate:
            return
        self.enemy_laser_frame_counter = 0.0
        for shooter in self.enemy_shooter:
            if not self._visible(shooter):
                continue
            index = self._free_laser()
            if index is None:
                continue
            beam = self.laser[index]
            beam.position[0] = shooter.position[0] - self.laser_speed
            beam.position[1] = shooter.position[1]
            self.laser_movement_dir[index] = 0

    def _move_lasers(self) -> None:
        for beam, direction in zip(self.laser, self.laser_movement_dir):
            if self._visible(beam):
                if direction == 1:
                    beam.position[0] += self.laser_speed
                elif direction == 0:
                    beam.position[0] -= self.laser_speed

    def _collide_lasers(self) -> None:
        scale = self.collision_scale_x
        for beam in self.laser:
            if not self._visible(beam):
                continue
            for obstacle, eatable, shooter in zip(
                self.obstacle, self.enemy_eatable, self.enemy_shooter
            ):
                if self.is_collided(obstacle, beam, scale, 1.0):
                    self.hide_object(obstacle)
                    self.hide_object(beam)
                elif self.is_collided(eatable, beam, scale, 1.0):
                    self.hide_object(eatable)
                    self.hide_object(beam)
                elif self.is_collided(shooter, beam, scale, 1.0):
                    self.hide_object(shooter)
                    self.hide_object(beam)
            if self.is_collided(self.player_head, beam, scale, 1.0):
                self.game_over()
            if self.is_collided(self.player_torso, beam, scale, 1.0):
                self.game_over()

    def hud_text(self) -> tuple[str, str]:
        """The score and fuel lines shown on screen."""
        return f"Score:{self.score}", f"Fuel Left:{self.fuel}"