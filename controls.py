import math
import pygame
from config import *
from parameters import ParameterError, normalize_color

"""
CONTROLS MODULE
---------------
The in-window control panel, drawn with plain pygame on the right side of the screen.

Every control edits the GalaxyParameters through `params.set(name, value, finished)`:
-   OptionCycler (mode, colorTheme): left click = next option, right click = previous.
    Always a settled edit.
-   Slider (count, size, radius, branches, spin, randomnessPower): live values while the handle
    is dragged, one settled edit when the mouse button is released or the drag is cut short
    by hiding the panel or resizing the window. A value that ends where it started is not resent.
-   ColorField (insideColor, outsideColor): type a hex colour, Enter settles it, Escape cancels.
-   Toggle (autoRotate): flips on click.
"""


def step_decimals(step):
    """How many decimals a slider step shows, e.g. 0.001 -> 3, 100 -> 0."""
    if step >= 1:
        return 0
    return int(math.ceil(-math.log10(step) - 1e-9))


def format_value(name, value):
    if name in INTEGER_PARAMETERS:
        return str(int(value))
    return f"{value:.{step_decimals(PARAMETER_RANGES[name][2])}f}"


class Control:
    def __init__(self, name, label, rect):
        self.name = name
        self.label = label
        self.rect = pygame.Rect(rect)

    def handle_event(self, event, params):
        """Returns True if the event was used by this control."""
        return False

    def draw(self, screen, font, params):
        pass


class Slider(Control):
    handle_radius = 7

    def __init__(self, name, label, rect):
        super().__init__(name, label, rect)
        self.lo, self.hi, self.step = PARAMETER_RANGES[name]
        self.dragging = False
        self.pending = None  # live value not yet settled
        self.start_value = None  # value the galaxy was last built with

    @property
    def track_rect(self):
        return pygame.Rect(self.rect.x, self.rect.y + 24, self.rect.w, 3)

    def value_to_x(self, value):
        fraction = (value - self.lo) / (self.hi - self.lo)
        return self.track_rect.left + fraction * self.track_rect.w

    def x_to_value(self, x):
        """Maps a mouse x position to a value, snapped to the slider step and clamped to the range."""
        track = self.track_rect
        fraction = max(0.0, min(1.0, (x - track.left) / track.w))
        raw = self.lo + fraction * (self.hi - self.lo)
        snapped = self.lo + round((raw - self.lo) / self.step) * self.step
        snapped = round(max(self.lo, min(self.hi, snapped)), step_decimals(self.step))
        if self.name in INTEGER_PARAMETERS:
            return int(round(snapped))
        return snapped

    def _drag_to(self, x, params):
        value = self.x_to_value(x)
        if value != getattr(params, self.name):
            params.set(self.name, value, finished=False)
        self.pending = value

    def finish_drag(self, params):
        """
        Ends the drag and announces the final value once as settled.
        Nothing is announced if the value ended up where the drag started.
        """
        if not self.dragging:
            return
        self.dragging = False
        value = self.pending if self.pending is not None else getattr(params, self.name)
        start = self.start_value
        self.pending = None
        self.start_value = None
        if value != start:
            params.set(self.name, value, finished=True)

    def handle_event(self, event, params):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.track_rect.inflate(self.handle_radius * 2, 18).collidepoint(event.pos):
                self.dragging = True
                self.start_value = getattr(params, self.name)
                self._drag_to(event.pos[0], params)
                return True

        elif event.type == pygame.MOUSEMOTION and self.dragging:
            self._drag_to(event.pos[0], params)
            return True

        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and self.dragging:
            self.finish_drag(params)
            return True

        return False

    def draw(self, screen, font, params):
        value = getattr(params, self.name)
        label = font.render(f"{self.label}: {format_value(self.name, value)}", True, LIGHT_GREY)
        screen.blit(label, (self.rect.x, self.rect.y + 2))
        pygame.draw.rect(screen, SLIDER_TRACK, self.track_rect)
        handle_color = ACCENT if self.dragging else WHITE
        handle_pos = (int(self.value_to_x(value)), self.track_rect.centery)
        pygame.draw.circle(screen, handle_color, handle_pos, self.handle_radius, 2)


class OptionCycler(Control):
    def __init__(self, name, label, rect, options):
        super().__init__(name, label, rect)
        self.options = list(options)

    def handle_event(self, event, params):
        if event.type != pygame.MOUSEBUTTONDOWN or event.button not in (1, 3):
            return False
        if not self.rect.collidepoint(event.pos):
            return False

        current = getattr(params, self.name)
        index = self.options.index(current) if current in self.options else -1
        direction = 1 if event.button == 1 else -1
        params.set(self.name, self.options[(index + direction) % len(self.options)])
        return True

    def draw(self, screen, font, params):
        pygame.draw.rect(screen, GREY, self.rect)
        pygame.draw.rect(screen, SLIDER_TRACK, self.rect, 1)
        text = font.render(f"{self.label}: {getattr(params, self.name)}", True, WHITE)
        screen.blit(text, (self.rect.x + 6, self.rect.y + 6))


class ColorField(Control):
    max_length = 7

    def __init__(self, name, label, rect):
        super().__init__(name, label, rect)
        self.active = False
        self.text = ""

    def commit(self, params):
        """
        Hands the typed colour to the store. A bad colour is reported and the old one kept,
        an unchanged one is not sent at all.
        """
        self.active = False
        try:
            if normalize_color(self.text) != getattr(params, self.name):
                params.set(self.name, self.text, finished=True)
        except ParameterError as e:
            print(f"Ignoring colour for {self.label}: {e}")
        self.text = getattr(params, self.name)

    def handle_event(self, event, params):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.active = True
                self.text = getattr(params, self.name)
                return True
            if self.active:
                # clicking elsewhere settles the edit like Enter does
                self.commit(params)
            return False

        if event.type == pygame.KEYDOWN and self.active:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self.commit(params)
            elif event.key == pygame.K_ESCAPE:
                self.active = False
                self.text = getattr(params, self.name)
            elif event.key == pygame.K_BACKSPACE:
                self.text = self.text[:-1]
            elif event.unicode and event.unicode.isprintable() and len(self.text) < self.max_length:
                self.text += event.unicode
            return True

        return False

    def draw(self, screen, font, params):
        value = getattr(params, self.name)
        text = self.text if self.active else value
        pygame.draw.rect(screen, MID_GREY if self.active else GREY, self.rect)
        pygame.draw.rect(screen, SLIDER_TRACK, self.rect, 1)
        screen.blit(font.render(f"{self.label}: {text}", True, WHITE), (self.rect.x + 6, self.rect.y + 6))

        swatch = pygame.Rect(self.rect.right - self.rect.h + 4, self.rect.y + 4, self.rect.h - 8, self.rect.h - 8)
        pygame.draw.rect(screen, pygame.Color(value), swatch)


class Toggle(Control):
    def handle_event(self, event, params):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self.rect.collidepoint(event.pos):
            params.set(self.name, not getattr(params, self.name))
            return True
        return False

    def draw(self, screen, font, params):
        box = pygame.Rect(self.rect.x, self.rect.y + 5, 16, 16)
        pygame.draw.rect(screen, WHITE, box, 1)
        if getattr(params, self.name):
            pygame.draw.rect(screen, ACCENT, box.inflate(-6, -6))
        screen.blit(font.render(self.label, True, LIGHT_GREY), (box.right + 8, self.rect.y + 4))


class ControlPanel:
    """
    The column of controls. Hidden / shown with H (unless a colour field is being typed in).
    """
    SLIDERS = [
        ("count", "Count"),
        ("size", "Size"),
        ("radius", "Radius"),
        ("branches", "Branches"),
        ("spin", "Spin"),
        ("randomnessPower", "Randomness power"),
    ]

    def __init__(self, params, screen_width=SCREEN_WIDTH):
        self.params = params
        self.visible = True
        self.font = None
        self.controls = []
        self.layout(screen_width)

    def layout(self, screen_width):
        """(Re)builds the controls along the right edge, call again after a window resize."""
        self.finish_drags()

        x = screen_width - PANEL_WIDTH + PANEL_MARGIN
        w = PANEL_WIDTH - PANEL_MARGIN * 2
        row_h = ROW_HEIGHT - 6
        y = PANEL_MARGIN

        def next_rect(height=row_h):
            nonlocal y
            rect = pygame.Rect(x, y, w, height)
            y += ROW_HEIGHT
            return rect

        self.controls = [
            OptionCycler("mode", "Mode", next_rect(), MODES),
            OptionCycler("colorTheme", "Theme", next_rect(), list(COLOR_THEMES.keys())),
        ]
        for name, label in self.SLIDERS:
            self.controls.append(Slider(name, label, next_rect()))
        self.controls.append(ColorField("insideColor", "Inside", next_rect()))
        self.controls.append(ColorField("outsideColor", "Outside", next_rect()))
        self.controls.append(Toggle("autoRotate", "Auto rotate", next_rect()))

        self.panel_rect = pygame.Rect(screen_width - PANEL_WIDTH, 0, PANEL_WIDTH, y + PANEL_MARGIN)

    @property
    def typing(self):
        return any(isinstance(c, ColorField) and c.active for c in self.controls)

    def control(self, name):
        for c in self.controls:
            if c.name == name:
                return c
        raise KeyError(name)

    def finish_drags(self):
        """Settles any slider still being dragged, e.g. when the panel is hidden mid-drag."""
        for c in self.controls:
            if isinstance(c, Slider):
                c.finish_drag(self.params)

    def handle_event(self, event):
        """
        Passes the event through the controls.
        Returns True when the panel used it, so the caller should not also orbit the camera with it.
        """
        if event.type == pygame.KEYDOWN and event.key == pygame.K_h and not self.typing:
            self.finish_drags()
            self.visible = not self.visible
            return True
        if not self.visible:
            return False

        # every control sees the event, an active colour field has to notice clicks elsewhere
        used = False
        for c in self.controls:
            if c.handle_event(event, self.params):
                used = True

        if event.type == pygame.MOUSEBUTTONDOWN and self.panel_rect.collidepoint(event.pos):
            used = True
        return used

    def draw(self, screen):
        if not self.visible:
            return
        if self.font is None:
            self.font = pygame.font.Font(None, 22)

        panel = pygame.Surface(self.panel_rect.size, pygame.SRCALPHA)
        panel.fill((*PANEL_BG, 210))
        screen.blit(panel, self.panel_rect.topleft)
        for c in self.controls:
            c.draw(screen, self.font, self.params)
