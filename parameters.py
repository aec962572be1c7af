import math
from matplotlib.colors import to_hex, to_rgb
from config import *

"""
PARAMETERS MODULE
-----------------
Holds the one set of galaxy parameters the app works with.

Key Concepts:
1.  **Explicit store**: `GalaxyParameters` is created once in `main.py` and handed to the
    generator, the geometry lifecycle and the controls. Nothing reads a global.

2.  **Change notifications**: Every edit made through `set()` is broadcast to subscribers as
    `(name, value, finished)`.
    - finished=False: a live value, e.g. a slider that is still being dragged.
    - finished=True: the edit has settled (mouse released, Enter pressed, option picked).
    What to do with either flavour is the subscriber's business (see `geometry.RegenerationPolicy`).

3.  **Boundary validation**: Numbers are clamped into the control ranges from `config.py`,
    colours are normalised to '#rrggbb', unknown modes and themes are refused outright.
"""


class ParameterError(ValueError):
    """Raised when a parameter name or value cannot be accepted."""


class UnknownModeError(ParameterError):
    pass


class UnknownThemeError(ParameterError):
    pass


class InvalidColorError(ParameterError):
    pass


def normalize_color(value):
    """
    Converts any matplotlib colour spec ('#00ffcc', 'cyan', (0, 1, 0.8)) to a '#rrggbb' string.
    """
    try:
        return to_hex(to_rgb(value))
    except (TypeError, ValueError) as e:
        raise InvalidColorError(f"Not a colour: {value!r}") from e


def color_to_rgb(value):
    """Returns the colour as an (r, g, b) tuple of floats in [0, 1]."""
    try:
        return tuple(float(c) for c in to_rgb(value))
    except (TypeError, ValueError) as e:
        raise InvalidColorError(f"Not a colour: {value!r}") from e


def validate_mode(mode):
    if mode not in MODES:
        raise UnknownModeError(f"Unknown galaxy mode '{mode}'. Expected one of: {', '.join(MODES)}")
    return mode


def clamp_parameter(name, value):
    """
    Clamps a numeric parameter into its control range.
    count and branches are rounded to whole numbers.
    """
    lo, hi, _step = PARAMETER_RANGES[name]
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ParameterError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise ParameterError(f"{name} must be finite, got {value!r}")

    number = max(lo, min(hi, number))
    if name in INTEGER_PARAMETERS:
        return int(round(number))
    return number


class GalaxyParameters:
    """
    The Parameter Store.

    Attributes mirror the names the controls show (mode, count, size, radius, branches, spin,
    randomnessPower, colorTheme, insideColor, outsideColor, autoRotate).
    Read them directly, change them with `set()` so subscribers hear about it.
    """
    FIELDS = tuple(DEFAULT_PARAMETERS.keys())

    def __init__(self, **overrides):
        self._subscribers = []
        self.reset()
        # nobody is subscribed yet, so this is a silent validated set
        for name, value in overrides.items():
            self.set(name, value)

    def reset(self):
        """Restores every field to the startup defaults. Does not notify."""
        for name, value in DEFAULT_PARAMETERS.items():
            setattr(self, name, value)

    def subscribe(self, callback):
        """Registers callback(name, value, finished). Returns the callback so it can be used as a decorator."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self, name, value, finished):
        for callback in list(self._subscribers):
            callback(name, value, finished)

    def _validate(self, name, value):
        if name not in self.FIELDS:
            raise ParameterError(f"Unknown parameter '{name}'")
        if name == "mode":
            return validate_mode(value)
        if name == "colorTheme":
            if value not in COLOR_THEMES:
                raise UnknownThemeError(f"Unknown colour theme '{value}'")
            return value
        if name in COLOR_PARAMETERS:
            return normalize_color(value)
        if name == "autoRotate":
            return bool(value)
        return clamp_parameter(name, value)

    def set(self, name, value, finished=True):
        """
        Validates, stores and broadcasts a single parameter.

        Setting colorTheme goes through `apply_theme()` so the gradient colours follow it.

        Returns:
            The value actually stored (after clamping / normalising).
        """
        if name == "colorTheme":
            self.apply_theme(value)
            return self.colorTheme

        value = self._validate(name, value)
        setattr(self, name, value)
        self._notify(name, value, finished)
        return value

    def apply_theme(self, theme_name):
        """
        Switches to a colour theme.

        The inside/outside colours are overwritten and announced as live updates so the colour
        controls can refresh, then the theme itself is announced as settled. Subscribers that only
        act on settled edits therefore react once.
        """
        if theme_name not in COLOR_THEMES:
            raise UnknownThemeError(f"Unknown colour theme '{theme_name}'")

        inside, outside = COLOR_THEMES[theme_name]
        self.colorTheme = theme_name
        self.insideColor = normalize_color(inside)
        self.outsideColor = normalize_color(outside)
        self._notify("insideColor", self.insideColor, False)
        self._notify("outsideColor", self.outsideColor, False)
        self._notify("colorTheme", theme_name, True)

    @property
    def inside_rgb(self):
        return color_to_rgb(self.insideColor)

    @property
    def outside_rgb(self):
        return color_to_rgb(self.outsideColor)

    def as_dict(self):
        return {name: getattr(self, name) for name in self.FIELDS}

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in self.as_dict().items())
        return f"GalaxyParameters({fields})"
