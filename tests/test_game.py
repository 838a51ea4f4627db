import numpy as np
import pytest

from cybersauras.game import Button, Key, KeyEvent, PlayMode
from cybersauras.scene import Camera, Scene, SceneError, Transform


class FixedRng:
    def __init__(self, values):
        self.values = list(values)

    def randrange(self, n):
        value = self.values.pop(0)
        assert 0 <= value < n
        return value


def _names(skip=()):
    names = [
        "Platform_Base",
        "Left_Bound",
        "Right_Bound",
        "Player_Leg_L",
        "Player_Leg_R",
        "Player_Head",
        "Player_Torso",
    ]
    for i in range(1, 7):
        names += [f"Obstacle_{i}", f"EnemyE_Body_{i}", f"EnemyS_Body_{i}"]
    names += [f"Mball_{i}" for i in range(1, 21)]
    return [n for n in names if n not in skip]


def make_scene(skip=(), cameras=1):
    scene = Scene()
    base = {
        "Player_Leg_L": (0.0, 1.0, 1.0),
        "Player_Leg_R": (0.0, -1.0, 1.0),
        "Player_Head": (0.0, 0.0, 4.0),
        "Player_Torso": (0.0, 0.0, 2.5),
    }
    for name in _names(skip):
        scene.transforms.append(Transform(name=name, position=base.get(name, (0.0, 0.0, 3.0))))
    for _ in range(cameras):
        holder = Transform(name="Camera")
        scene.transforms.append(holder)
        scene.cameras.append(Camera(holder))
    return scene


@pytest.fixture
def mode():
    return PlayMode(make_scene(), rng=FixedRng([]))


def test_init_hides_all_enemies_and_lasers(mode):
    for group in (mode.obstacle, mode.enemy_eatable, mode.enemy_shooter, mode.laser):
        for obj in group:
            assert obj.position[0] == 350.0
            assert obj.position[1] == -350.0


def test_init_shifts_player_and_camera(mode):
    assert mode.player_head.position[0] == pytest.approx(100.0)
    assert mode.player_head.position[1] == pytest.approx(500.0)
    assert mode.camera.transform.position[0] == pytest.approx(-190.143188 + 100.0)
    assert mode.camera.transform.position[1] == pytest.approx(0.052472 + 500.0)
    assert mode.camera.transform.position[2] == pytest.approx(56.843361)


def test_init_aligns_depths(mode):
    for eatable in mode.enemy_eatable:
        assert eatable.position[2] == mode.player_head.position[2]
    for beam in mode.laser:
        assert beam.position[2] == mode.enemy_shooter[0].position[2]


def test_original_scene_untouched():
    scene = make_scene()
    PlayMode(scene, rng=FixedRng([]))
    assert scene.find_transform("Player_Head").position[0] == 0.0


def test_missing_obstacle_raises():
    with pytest.raises(SceneError, match="Obstacle_3 not found."):
        PlayMode(make_scene(skip=("Obstacle_3",)), rng=FixedRng([]))


def test_missing_laser_raises():
    with pytest.raises(SceneError, match="Mball_5 not found"):
        PlayMode(make_scene(skip=("Mball_5",)), rng=FixedRng([]))


def test_missing_platform_raises():
    with pytest.raises(SceneError, match="platform not found."):
        PlayMode(make_scene(skip=("Platform_Base",)), rng=FixedRng([]))


def test_camera_count_checked():
    with pytest.raises(SceneError, match="exactly one camera"):
        PlayMode(make_scene(cameras=2), rng=FixedRng([]))


def test_handle_key_down_and_up(mode):
    assert mode.handle_event(KeyEvent(Key.A, True)) is True
    assert mode.left == Button(downs=1, pressed=True)
    assert mode.handle_event(KeyEvent(Key.A, False)) is True
    assert mode.left.pressed is False


def test_space_debounce(mode):
    assert mode.handle_event(KeyEvent(Key.SPACE, True)) is True
    assert mode.handle_event(KeyEvent(Key.SPACE, True)) is False
    assert mode.space.downs == 1
    assert mode.handle_event(KeyEvent(Key.SPACE, False)) is True
    assert mode.space_debounce == 0


def test_move_left_moves_all_parts(mode):
    before = [p.position[1] for p in (mode.player_head, mode.player_torso)]
    mode.handle_event(KeyEvent(Key.A, True))
    mode.update(0.0)
    after = [p.position[1] for p in (mode.player_head, mode.player_torso)]
    for b, a in zip(before, after):
        assert a - b == pytest.approx(mode.player_speed)
    assert mode.left.downs == 0


def test_movement_stays_in_bounds(mode):
    mode.handle_event(KeyEvent(Key.A, True))
    mode.handle_event(KeyEvent(Key.W, True))
    for _ in range(400):
        mode.update(0.0)
        assert mode.player_left_leg.position[1] <= mode.bound_left + 1e-9
        assert mode.player_head.position[0] <= mode.bound_front + 1e-9


def test_score_and_fuel_rates(mode):
    for _ in range(mode.score_update_rate):
        mode.update(0.01)
    assert mode.score == 1
    for _ in range(mode.fuel_update_rate - mode.score_update_rate):
        mode.update(0.01)
    assert mode.fuel == 99


def test_leg_rotation_stays_unit(mode):
    for _ in range(5):
        mode.update(0.05)
        assert np.linalg.norm(mode.player_left_leg.rotation) == pytest.approx(1.0)
        assert np.linalg.norm(mode.player_right_leg.rotation) == pytest.approx(1.0)


def test_shooting_spends_fuel_and_moves_forward(mode):
    mode.handle_event(KeyEvent(Key.SPACE, True))
    mode.update(0.0)
    beam = mode.laser[0]
    assert mode.fuel == 95
    assert beam.position[1] == mode.player_head.position[1]
    assert mode.laser_movement_dir[0] == 1
    x = beam.position[0]
    mode.update(0.0)
    assert beam.position[0] == pytest.approx(x + mode.laser_speed)
    assert mode.fuel == 95


def test_eating_restores_fuel(mode):
    mode.fuel = 50
    eatable = mode.enemy_eatable[0]
    eatable.position[:2] = mode.player_head.position[:2]
    mode.update(0.0)
    assert mode.fuel == 60
    assert eatable.position[1] == -350.0


def test_fuel_capped(mode):
    eatable = mode.enemy_eatable[0]
    eatable.position[:2] = mode.player_head.position[:2]
    mode.update(0.0)
    assert mode.fuel == 100


def test_obstacle_collision_ends_game(mode):
    mode.score = 7
    mode.fuel = 40
    obstacle = mode.obstacle[0]
    obstacle.position[:2] = mode.player_head.position[:2]
    mode.update(0.0)
    assert mode.score == 0
    assert mode.fuel == 100
    assert obstacle.position[1] == -350.0


def test_level_up_scales_speeds(mode):
    player, enemy, laser = mode.player_speed, mode.enemy_speed, mode.laser_speed
    mode.level_up()
    assert mode.player_speed == pytest.approx(player * mode.speedup)
    assert mode.enemy_speed == pytest.approx(enemy * mode.speedup)
    assert mode.laser_speed == pytest.approx(laser * mode.speedup)


def test_game_over_resets_values(mode):
    mode.level_up()
    mode.score = 12
    mode.game_over()
    assert mode.hud_text() == ("Score:0", "Fuel Left:100")
    assert mode.player_speed == pytest.approx(0.7)


def test_spawn_uses_rng():
    mode = PlayMode(make_scene(), rng=FixedRng([0, 5]))
    steps = int(mode.enemy_update_rate / mode.enemy_frame_rate)
    for _ in range(steps):
        mode.update(0.0)
    assert mode.obstacle[0].position[1] == pytest.approx(mode.bound_right + 5)
    assert mode.obstacle[0].position[0] == pytest.approx(350.0 - mode.enemy_speed)
    assert all(o.position[1] == -350.0 for o in mode.obstacle[1:])


def test_enemy_shooter_fires_backward(mode):
    shooter = mode.enemy_shooter[0]
    shooter.position[1] = 470.0
    shooter.position[0] = 300.0
    mode.enemy_laser_frame_counter = mode.enemy_laser_update_rate - mode.enemy_laser_frame_rate
    mode.update(0.0)
    beam = mode.laser[0]
    assert beam.position[1] == 470.0
    assert mode.laser_movement_dir[0] == 0
    assert beam.position[0] == pytest.approx(shooter.position[0] - 2 * mode.laser_speed)


def test_laser_destroys_obstacle(mode):
    beam = mode.laser[0]
    obstacle = mode.obstacle[0]
    obstacle.position[:2] = (200.0, 470.0)
    beam.position[:2] = (200.0 - mode.enemy_speed, 470.0)
    mode.laser_movement_dir[0] = 1
    mode.update(0.0)
    assert obstacle.position[1] == -350.0
    assert beam.position[1] == -350.0


def test_hud_text_reports_state(mode):
    mode.score = 3
    mode.fuel = 42
    assert mode.hud_text() == ("Score:3", "Fuel Left:42")