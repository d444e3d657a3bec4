"""
Tests for the OpenCV renderer
=============================
"""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.types import InteractionState, HandStats, FrameSnapshot, GestureType, ProcessedHand, ParticleShape
from modules.control.dwell_selector import DwellSelector, Rect
from modules.visualization.particle_field import ParticleFieldAnimator
from modules.visualization.renderer import Renderer, project_points


@pytest.fixture
def renderer():
    return Renderer({"width": 320, "height": 240, "focal_length": 100.0, "camera_distance": 10.0})


@pytest.fixture
def animator():
    field = ParticleFieldAnimator({"count": 50, "seed": 3})
    field.update(0.1, InteractionState(), HandStats())
    return field


def snapshot_for(animator, hands=None):
    return FrameSnapshot(
        interaction=InteractionState(), stats=HandStats(), hands=hands or [],
        field=animator.summary(),
    )


class TestProjection:
    def test_origin_projects_to_center(self):
        pixels, depth = project_points(np.zeros((1, 3)), 320, 240, 100.0, 10.0)
        assert tuple(pixels[0]) == (160, 120)
        assert depth[0] == pytest.approx(10.0)

    def test_axes(self):
        world = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        pixels, _ = project_points(world, 320, 240, 100.0, 10.0)
        assert pixels[0, 0] == 170      # +x is right
        assert pixels[1, 1] == 110      # +y is up

    def test_farther_points_shrink_toward_center(self):
        world = np.array([[1.0, 0.0, 0.0], [1.0, 0.0, 10.0]])
        pixels, depth = project_points(world, 320, 240, 100.0, 10.0)
        assert pixels[1, 0] < pixels[0, 0]
        assert depth[1] > depth[0]

    def test_points_behind_camera_do_not_divide_by_zero(self):
        pixels, depth = project_points(np.array([[0.0, 0.0, -20.0]]), 320, 240)
        assert np.all(np.isfinite(depth))
        assert depth[0] > 0


class TestRender:
    def test_canvas_size(self, renderer):
        assert renderer.new_canvas().shape == (240, 320, 3)

    def test_camera_background_is_dimmed(self, renderer):
        frame = np.full((480, 640, 3), 200, dtype=np.uint8)
        canvas = renderer.new_canvas(frame)
        assert canvas.shape == (240, 320, 3)
        assert 0 < canvas.mean() < 200

    @pytest.mark.parametrize("shape", list(ParticleShape))
    def test_particles_drawn_for_every_shape(self, renderer, animator, shape):
        animator._shape = shape
        canvas = renderer.new_canvas()
        renderer.draw_particles(canvas, animator)
        assert canvas.any()

    def test_full_render(self, renderer, animator):
        hand = ProcessedHand(0, GestureType.OPEN_PALM, (0.5, 0.5), (90, 0), (0.0, 0.0))
        selector = DwellSelector("exit", Rect(200, 150, 100, 60), viewport=(320, 240))
        selector.update([hand], 0)
        canvas = renderer.render(renderer.new_canvas(), snapshot_for(animator, [hand]),
                                 animator, [selector])
        assert canvas.shape == (240, 320, 3)
        assert canvas.any()

    def test_selector_progress_fill(self, renderer):
        selector = DwellSelector("go", Rect(10, 10, 100, 100),
                                 config={"dwell_time_ms": 1000}, viewport=(320, 240))
        hand = ProcessedHand(0, GestureType.OPEN_PALM, (1.0 - 60 / 320, 60 / 240), (0, 0), (0.0, 0.0))
        selector.update([hand], 0)
        selector.advance(500)

        canvas = renderer.new_canvas()
        renderer.draw_selector(canvas, selector)
        # Lower half filled with the accent colour, upper half not
        assert tuple(canvas[100, 20]) == (255, 170, 0)
        assert tuple(canvas[30, 20]) != (255, 170, 0)
