"""
General config file for the Galaxy Generator
Contains constants and global variables which can be altered.
Parameter defaults live here too, the app resets to them on every launch.
"""

# --- Constants ---
SCREEN_WIDTH = 1400
SCREEN_HEIGHT = 800
FPS = 60
WINDOW_TITLE = "Galaxy Generator"

# Colors
WHITE = (255, 255, 255)
GREY = (30, 30, 30)
MID_GREY = (90, 90, 90)
LIGHT_GREY = (135, 135, 135)
PANEL_BG = (20, 20, 26)
SLIDER_TRACK = (70, 70, 80)
ACCENT = (100, 149, 237)

# --- Galaxy Modes ---
MODES = [
    "spiral",
    "elliptical",
    "cluster",
    "explosion",
    "tornado",
    "swirl",
    "helix",
    "blackHole",
    "galaxyMerge",
]

# --- Color Themes ---
# theme name -> (insideColor, outsideColor)
COLOR_THEMES = {
    "Vibrant Cosmic Glow": ("#ff6b6b", "#4d4dff"),
    "Nebula Fantasy": ("#ff66cc", "#6633cc"),
    "Milky Way Classic": ("#ffffcc", "#9999ff"),
    "Supernova Heat": ("#ff9900", "#ff3300"),
    "Chilled Space": ("#ccffff", "#003366"),
    "Alien Glow": ("#00ffcc", "#330066"),
}
DEFAULT_THEME = "Vibrant Cosmic Glow"

# --- Galaxy Parameters ---
DEFAULT_PARAMETERS = {
    "mode": "spiral",
    "count": 10000,
    "size": 0.04,
    "radius": 5.0,
    "branches": 3,
    "spin": 1.0,
    "randomnessPower": 3.0,
    "colorTheme": DEFAULT_THEME,
    "insideColor": COLOR_THEMES[DEFAULT_THEME][0],
    "outsideColor": COLOR_THEMES[DEFAULT_THEME][1],
    "autoRotate": True,
}

# (min, max, step) for every slider controlled parameter
PARAMETER_RANGES = {
    "count": (100, 20000, 100),
    "size": (0.001, 0.1, 0.001),
    "radius": (0.1, 20.0, 0.01),
    "branches": (1, 10, 1),
    "spin": (-5.0, 5.0, 0.001),
    "randomnessPower": (1.0, 10.0, 0.001),
}
INTEGER_PARAMETERS = ("count", "branches")
COLOR_PARAMETERS = ("insideColor", "outsideColor")

# --- Camera ---
CAMERA_FOV = 75
CAMERA_NEAR = 0.1
CAMERA_FAR = 100
CAMERA_START_POSITION = (3.0, 3.0, 3.0)
MIN_CAMERA_DISTANCE = 0.5
MAX_CAMERA_DISTANCE = 60.0
ZOOM_STEP = 1.1
DAMPING_FACTOR = 0.05  # fraction of orbit velocity kept per frame is (1 - this)
ROTATE_SPEED = 0.5  # degrees per pixel of mouse drag
AUTO_ROTATE_SPEED = 2.0  # 2.0 = one full turn every 30 seconds

# --- Points ---
SPRITE_SIZE = 9  # pixels, odd so the sprite has a centre pixel
STAR_TEXTURE = None  # path to a star sprite image; None uses the generated one
MAX_SPLAT_RADIUS = 4  # largest star, in pixels from its centre

# --- Control Panel ---
PANEL_WIDTH = 300
PANEL_MARGIN = 12
ROW_HEIGHT = 34
