"""
Tests for the projection and splatting helpers and the orbit camera.
"""
import math

import numpy as np
import pytest

from config import AUTO_ROTATE_SPEED, CAMERA_START_POSITION, MAX_CAMERA_DISTANCE, MIN_CAMERA_DISTANCE
from geometry import GalaxyGeometry, Scene, star_sprite
from renderer import (
    OrbitCamera,
    camera_view_rotation,
    project_points,
    rasterize,
    resize_sprite,
    splat,
)


class TestProjection:
    def test_camera_lands_on_z_axis(self):
        """The start position rotates onto +z at the camera distance."""
        camera = OrbitCamera()
        start = np.array([CAMERA_START_POSITION])
        rotated = camera_view_rotation(start, camera.yaw, camera.pitch)
        np.testing.assert_allclose(rotated[0], [0.0, 0.0, camera.distance], atol=1e-9)

    def test_origin_projects_to_centre(self):
        sx, sy, depth, visible = project_points(np.zeros((1, 3)), 5.0, 800, 600)
        assert (sx[0], sy[0]) == (400, 300)
        assert depth[0] == 5.0
        assert visible[0]

    def test_up_is_up_on_screen(self):
        sx, sy, _, _ = project_points(np.array([[0.0, 1.0, 0.0]]), 5.0, 800, 600)
        assert sy[0] < 300

    def test_behind_camera_hidden(self):
        _, _, depth, visible = project_points(np.array([[0.0, 0.0, 10.0]]), 5.0, 800, 600)
        assert depth[0] < 0
        assert not visible[0]

    def test_closer_is_bigger(self):
        near = project_points(np.array([[1.0, 0.0, 2.0]]), 5.0, 800, 600)[0][0]
        far = project_points(np.array([[1.0, 0.0, -2.0]]), 5.0, 800, 600)[0][0]
        assert near - 400 > far - 400


class TestSplat:
    def test_resize_sprite_sizes(self):
        sprite = star_sprite(9)
        assert resize_sprite(sprite, 0).shape == (1, 1)
        assert resize_sprite(sprite, 2).shape == (5, 5)
        assert resize_sprite(sprite, 0)[0, 0] == pytest.approx(1.0)

    def test_single_point(self):
        image = splat(10, 10, np.array([5]), np.array([4]), np.array([[0.5, 0.25, 1.0]]),
                      np.array([0]), star_sprite(9))
        assert image.shape == (10, 10, 3)
        np.testing.assert_allclose(image[4, 5], [0.5, 0.25, 1.0])
        assert image.sum() == pytest.approx(1.75)

    def test_overlap_adds_up(self):
        """Two stars on the same pixel are twice as bright."""
        colors = np.array([[0.2, 0.2, 0.2], [0.2, 0.2, 0.2]])
        image = splat(4, 4, np.array([1, 1]), np.array([1, 1]), colors, np.array([0, 0]), star_sprite())
        np.testing.assert_allclose(image[1, 1], [0.4, 0.4, 0.4])

    def test_off_screen_ignored(self):
        image = splat(4, 4, np.array([-10, 50]), np.array([1, 1]), np.ones((2, 3)),
                      np.array([1, 1]), star_sprite())
        assert image.sum() == 0


class TestRasterize:
    def test_no_galaxy_is_black(self):
        image = rasterize(None, OrbitCamera(), 64, 48)
        assert image.shape == (48, 64, 3)
        assert image.dtype == np.uint8
        assert image.max() == 0

    def test_galaxy_lights_pixels(self, params, rng):
        params.set("count", 2000)
        galaxy = GalaxyGeometry(params, Scene(), rng=rng)
        image = rasterize(galaxy.regenerate(), OrbitCamera(), 160, 120)
        assert image.shape == (120, 160, 3)
        assert image.max() > 0


class TestOrbitCamera:
    def test_start_position(self):
        camera = OrbitCamera()
        assert camera.distance == pytest.approx(math.sqrt(27))
        assert camera.yaw == pytest.approx(45.0)

    def test_auto_rotate_speed(self):
        """Default speed turns 12 degrees a second, a full circle in 30 s."""
        camera = OrbitCamera()
        start = camera.yaw
        camera.update(1.0, auto_rotate=True)
        assert camera.yaw == pytest.approx(start + 6.0 * AUTO_ROTATE_SPEED)

    def test_no_auto_rotate(self):
        camera = OrbitCamera()
        start = camera.yaw
        camera.update(1.0, auto_rotate=False)
        assert camera.yaw == start

    def test_damping_slows_orbit(self):
        camera = OrbitCamera()
        camera.orbit(100, 0)
        first = camera.yaw_velocity
        camera.update(1 / 60)
        assert abs(camera.yaw_velocity) < abs(first)

    def test_pitch_clamped(self):
        camera = OrbitCamera()
        camera.pitch_velocity = 500
        camera.update(1 / 60)
        assert camera.pitch == 89

    def test_zoom_limits(self):
        camera = OrbitCamera()
        for _ in range(200):
            camera.zoom(1.1)
        assert camera.distance == MAX_CAMERA_DISTANCE
        for _ in range(200):
            camera.zoom(1 / 1.1)
        assert camera.distance == MIN_CAMERA_DISTANCE

    def test_reset(self):
        camera = OrbitCamera()
        camera.pan(10, 5)
        camera.zoom(2)
        camera.reset()
        assert (camera.pan_x, camera.pan_y) == (0, 0)
        assert camera.distance == pytest.approx(math.sqrt(27))
