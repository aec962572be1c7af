"""
Tests for the pygame control panel.

Events are built by hand with pygame.event.Event, nothing is drawn.
"""
import pygame
import pytest

from config import MODES, PARAMETER_RANGES
from controls import ControlPanel, Slider, format_value, step_decimals
from geometry import GalaxyGeometry, RegenerationPolicy, Scene


def click(pos, button=1):
    return pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=pos, button=button)


def release(pos, button=1):
    return pygame.event.Event(pygame.MOUSEBUTTONUP, pos=pos, button=button)


def move(pos):
    return pygame.event.Event(pygame.MOUSEMOTION, pos=pos, rel=(0, 0), buttons=(1, 0, 0))


def key(k, unicode=""):
    return pygame.event.Event(pygame.KEYDOWN, key=k, unicode=unicode, mod=0)


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, name, value, finished):
        self.events.append((name, value, finished))


@pytest.fixture
def panel(params):
    return ControlPanel(params, 1400)


@pytest.fixture
def policy(params, rng):
    params.set("count", 300)
    policy = RegenerationPolicy(GalaxyGeometry(params, Scene(), rng=rng))
    params.subscribe(policy)
    return policy


class TestSlider:
    def test_ends_of_track(self, panel):
        slider = panel.control("spin")
        track = slider.track_rect
        assert slider.x_to_value(track.left) == -5.0
        assert slider.x_to_value(track.right) == 5.0
        assert slider.x_to_value(track.left - 50) == -5.0

    def test_count_snaps_to_step(self, panel):
        slider = panel.control("count")
        track = slider.track_rect
        for x in range(track.left, track.right, 7):
            value = slider.x_to_value(x)
            assert isinstance(value, int)
            assert value % 100 == 0

    def test_drag_is_live_until_release(self, panel, params):
        """Dragging sends live values, letting go sends exactly one settled value."""
        recorder = params.subscribe(Recorder())
        track = panel.control("radius").track_rect

        assert panel.handle_event(click((track.left + 10, track.centery)))
        assert panel.handle_event(move((track.centerx, track.centery)))
        assert panel.handle_event(move((track.right - 10, track.centery)))
        assert all(finished is False for _, _, finished in recorder.events)

        assert panel.handle_event(release((track.right - 10, track.centery)))
        settled = [e for e in recorder.events if e[2]]
        assert len(settled) == 1
        assert settled[0][0] == "radius"
        assert settled[0][1] == params.radius

    def test_drag_regenerates_once(self, panel, params, policy):
        track = panel.control("branches").track_rect
        panel.handle_event(click((track.left, track.centery)))
        for x in range(track.left, track.right, 20):
            panel.handle_event(move((x, track.centery)))
        assert policy.regenerations == 0
        panel.handle_event(release((track.right, track.centery)))
        assert policy.regenerations == 1

    def test_hiding_mid_drag_settles(self, panel, params, policy):
        """H during a drag ends it with one settled edit, later motion changes nothing."""
        track = panel.control("spin").track_rect
        panel.handle_event(click((track.left, track.centery)))
        assert params.spin == -5.0
        assert policy.regenerations == 0

        panel.handle_event(key(pygame.K_h, "h"))
        assert policy.regenerations == 1
        assert not panel.control("spin").dragging

        panel.handle_event(release((track.left, track.centery)))
        panel.handle_event(key(pygame.K_h, "h"))
        panel.handle_event(move((track.right, track.centery)))
        assert params.spin == -5.0
        assert policy.regenerations == 1

    def test_resize_mid_drag_settles(self, panel, params, policy):
        track = panel.control("count").track_rect
        panel.handle_event(click((track.left, track.centery)))
        assert params.count == 100
        assert policy.regenerations == 0

        panel.layout(1000)
        assert policy.regenerations == 1
        assert policy.galaxy.current.count == 100
        assert not any(getattr(c, "dragging", False) for c in panel.controls)

    def test_click_without_change_does_not_rebuild(self, panel, params, policy):
        track = panel.control("spin").track_rect
        panel.handle_event(click((track.left, track.centery)))
        panel.handle_event(release((track.left, track.centery)))
        assert policy.regenerations == 1

        panel.handle_event(click((track.left, track.centery)))
        panel.handle_event(release((track.left, track.centery)))
        assert policy.regenerations == 1

    def test_motion_without_drag_ignored(self, panel, params):
        recorder = params.subscribe(Recorder())
        track = panel.control("spin").track_rect
        panel.handle_event(move((track.centerx, track.centery)))
        assert recorder.events == []

    def test_value_to_x_round_trip(self, panel, params):
        slider = panel.control("randomnessPower")
        x = slider.value_to_x(params.randomnessPower)
        assert slider.x_to_value(x) == pytest.approx(params.randomnessPower, abs=0.01)


class TestOptionCycler:
    def test_left_click_next_mode(self, panel, params, policy):
        panel.handle_event(click(panel.control("mode").rect.center))
        assert params.mode == MODES[1]
        assert policy.regenerations == 1

    def test_right_click_previous_mode(self, panel, params):
        panel.handle_event(click(panel.control("mode").rect.center, button=3))
        assert params.mode == MODES[-1]

    def test_theme_cycles_and_sets_colours(self, panel, params, policy):
        panel.handle_event(click(panel.control("colorTheme").rect.center))
        assert params.colorTheme == "Nebula Fantasy"
        assert params.insideColor == "#ff66cc"
        assert params.outsideColor == "#6633cc"
        assert policy.regenerations == 1


class TestColorField:
    def type_text(self, panel, text):
        for _ in range(10):
            panel.handle_event(key(pygame.K_BACKSPACE))
        for ch in text:
            panel.handle_event(key(0, ch))

    def test_enter_settles_colour(self, panel, params, policy):
        panel.handle_event(click(panel.control("insideColor").rect.center))
        self.type_text(panel, "#00ff00")
        assert policy.regenerations == 0
        panel.handle_event(key(pygame.K_RETURN))
        assert params.insideColor == "#00ff00"
        assert policy.regenerations == 1

    def test_bad_colour_kept_out(self, panel, params, capsys):
        panel.handle_event(click(panel.control("outsideColor").rect.center))
        self.type_text(panel, "#zz")
        panel.handle_event(key(pygame.K_RETURN))
        assert params.outsideColor == "#4d4dff"
        assert "Ignoring colour" in capsys.readouterr().out

    def test_unchanged_colour_does_not_rebuild(self, panel, params, policy, capsys):
        panel.handle_event(click(panel.control("insideColor").rect.center))
        self.type_text(panel, "#FF6B6B")
        panel.handle_event(key(pygame.K_RETURN))
        assert params.insideColor == "#ff6b6b"
        assert policy.regenerations == 0
        assert capsys.readouterr().out == ""

    def test_escape_cancels(self, panel, params):
        field = panel.control("insideColor")
        panel.handle_event(click(field.rect.center))
        self.type_text(panel, "#000000")
        panel.handle_event(key(pygame.K_ESCAPE))
        assert params.insideColor == "#ff6b6b"
        assert not field.active

    def test_h_types_while_editing(self, panel):
        """H is a letter while a colour field is active, not the hide key."""
        panel.handle_event(click(panel.control("insideColor").rect.center))
        panel.handle_event(key(pygame.K_h, "h"))
        assert panel.visible


class TestPanel:
    def test_toggle_autorotate(self, panel, params, policy):
        panel.handle_event(click(panel.control("autoRotate").rect.center))
        assert params.autoRotate is False
        assert policy.regenerations == 0

    def test_h_hides_panel(self, panel, params):
        panel.handle_event(key(pygame.K_h, "h"))
        assert not panel.visible
        # hidden panel ignores clicks
        assert not panel.handle_event(click(panel.control("mode").rect.center))
        assert params.mode == "spiral"

    def test_clicks_outside_panel_not_used(self, panel):
        assert not panel.handle_event(click((100, 100)))

    def test_clicks_on_panel_background_used(self, panel):
        assert panel.handle_event(click((panel.panel_rect.right - 2, panel.panel_rect.bottom - 2)))

    def test_layout_follows_width(self, panel):
        panel.layout(1000)
        assert panel.panel_rect.right == 1000
        assert all(c.rect.right <= 1000 for c in panel.controls)

    def test_unknown_control(self, panel):
        with pytest.raises(KeyError):
            panel.control("gravity")


class TestFormatting:
    def test_step_decimals(self):
        assert step_decimals(100) == 0
        assert step_decimals(0.01) == 2
        assert step_decimals(0.001) == 3

    def test_format_value(self):
        assert format_value("count", 10000) == "10000"
        assert format_value("radius", 5) == "5.00"
        assert format_value("spin", 1) == "1.000"

    def test_every_slider_has_a_range(self):
        for name, _label in ControlPanel.SLIDERS:
            assert name in PARAMETER_RANGES
            assert isinstance(Slider(name, name, (0, 0, 100, 30)).step, (int, float))
