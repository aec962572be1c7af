import os
import sys
import time
import numpy as np
import pygame
from config import *
from generator import generate

"""
GEOMETRY MODULE
---------------
Owns the point cloud that is on screen.

Key Concepts:
1.  **Resources**: A `PointsObject` bundles a position buffer, a colour buffer and a
    `PointsMaterial` (blend mode, point size, sprite). They are released with `dispose()`,
    after which touching the buffers raises `DisposedResourceError`.

2.  **Scene**: The list of things the renderer draws. Holds at most one `PointsObject` at a time.

3.  **Lifecycle**: `GalaxyGeometry.regenerate()` builds the next generation completely before
    it takes the current one out of the scene and disposes it. So the renderer never sees
    an empty scene or two galaxies at once.

4.  **When to regenerate**: `RegenerationPolicy` listens to the parameter store.
    - mode / colorTheme: straight away.
    - sliders and colour fields: only once the edit has settled.
    - autoRotate: never, the renderer reads it every frame.
"""


class DisposedResourceError(RuntimeError):
    """Raised when a buffer or material is used after dispose()."""


def resource_path(relative_path):
    """ Get absolute path to resource, works for dev and for PyInstaller """
    try:
        # PyInstaller creates a temp folder and stores path in _MEIPASS
        base_path = sys._MEIPASS
    except AttributeError:
        base_path = os.path.abspath(".")

    return os.path.join(base_path, relative_path)


# --- Star Sprite ---

def star_sprite(size=SPRITE_SIZE):
    """
    Builds a soft round star as a (size, size) array of weights in [0, 1], brightest in the centre.
    Stands in for a star texture image.
    """
    size = max(1, int(size))
    half = (size - 1) / 2
    ys, xs = np.mgrid[0:size, 0:size]
    dist = np.hypot(xs - half, ys - half) / max(half, 1.0)
    return (np.clip(1.0 - dist, 0.0, 1.0) ** 2).astype(np.float32)


def load_sprite(path=STAR_TEXTURE):
    """
    Loads a star sprite from an image file.
    Uses the alpha channel if the image has one, otherwise its brightness.
    Falls back to `star_sprite()` if there is no path or the file can't be read.
    """
    if not path:
        return star_sprite()

    try:
        image = pygame.image.load(resource_path(path))
        if image.get_flags() & pygame.SRCALPHA:
            weights = pygame.surfarray.array_alpha(image).astype(np.float32)
        else:
            weights = pygame.surfarray.array3d(image).astype(np.float32).mean(axis=2)
        # surfarray is indexed [x][y]; the splatter wants [row][col]
        return (weights.T / 255.0).astype(np.float32)
    except (pygame.error, FileNotFoundError) as e:
        print(f"Error loading star texture '{path}': {e}. Using generated sprite.")
        return star_sprite()


# --- Resources ---

class BufferAttribute:
    """A flat float32 buffer viewed as rows of `item_size` values."""

    def __init__(self, array, item_size=3):
        self._array = np.ascontiguousarray(array, dtype=np.float32).reshape(-1, item_size)
        self.item_size = item_size

    @property
    def array(self):
        if self._array is None:
            raise DisposedResourceError("Buffer has been disposed")
        return self._array

    @property
    def count(self):
        return 0 if self._array is None else len(self._array)

    @property
    def disposed(self):
        return self._array is None

    def dispose(self):
        self._array = None


class PointsMaterial:
    """
    Draw settings for a point cloud.
    Defaults are the ones every galaxy is drawn with: additive, no depth write, per-point colours.
    """

    def __init__(self, size, texture=None, blending="additive", depth_write=False,
                 vertex_colors=True, size_attenuation=True):
        self.size = float(size)
        self.texture = texture
        self.blending = blending
        self.depth_write = depth_write
        self.vertex_colors = vertex_colors
        self.size_attenuation = size_attenuation
        self.disposed = False

    def dispose(self):
        # The sprite is shared between generations, only our reference goes.
        self.texture = None
        self.disposed = True


class PointsObject:
    """The renderable galaxy: two buffers plus a material."""

    def __init__(self, cloud, material, generation=0):
        self.position = BufferAttribute(cloud.positions)
        self.color = BufferAttribute(cloud.colors)
        self.material = material
        self.mode = cloud.mode
        self.generation = generation

    @property
    def positions(self):
        return self.position.array

    @property
    def colors(self):
        return self.color.array

    @property
    def count(self):
        return self.position.count

    @property
    def disposed(self):
        return self.position.disposed and self.color.disposed and self.material.disposed

    def dispose(self):
        self.position.dispose()
        self.color.dispose()
        self.material.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False

    def __repr__(self):
        state = "disposed" if self.disposed else f"{self.count} points"
        return f"PointsObject(#{self.generation}, {self.mode}, {state})"


class Scene:
    def __init__(self):
        self.children = []

    def add(self, obj):
        if obj not in self.children:
            self.children.append(obj)

    def remove(self, obj):
        if obj in self.children:
            self.children.remove(obj)

    @property
    def points(self):
        """The attached galaxy, or None."""
        for obj in reversed(self.children):
            if isinstance(obj, PointsObject):
                return obj
        return None

    def __len__(self):
        return len(self.children)


# --- Lifecycle ---

class GalaxyGeometry:
    """
    The Geometry Buffer Lifecycle Manager.

    Exclusively owns the PointsObject it puts into the scene and disposes it on every
    replacement, on `dispose()` and when used as a context manager:

        with GalaxyGeometry(params, scene) as galaxy:
            galaxy.regenerate()
    """

    def __init__(self, params, scene, rng=None, texture=None):
        self.params = params
        self.scene = scene
        self.rng = rng
        self.texture = texture if texture is not None else star_sprite()
        self.current = None
        self.generation = 0
        self.last_duration_ms = 0.0

    def regenerate(self):
        """
        Throws the current galaxy away and builds a new one from the current parameters.

        Steps:
        1. Generate the point cloud (raises here on a bad mode, old galaxy untouched).
        2. Wrap it in fresh buffers and a fresh material.
        3. Swap: take the old object out of the scene, dispose it, put the new one in.

        Returns:
            PointsObject: The newly attached galaxy.
        """
        start = time.perf_counter()

        cloud = generate(self.params, self.rng)
        material = PointsMaterial(size=self.params.size, texture=self.texture)
        new_points = PointsObject(cloud, material, generation=self.generation + 1)

        old_points = self.current
        if old_points is not None:
            self.scene.remove(old_points)
            old_points.dispose()
        self.scene.add(new_points)
        self.current = new_points
        self.generation += 1

        self.last_duration_ms = (time.perf_counter() - start) * 1000.0
        return new_points

    def dispose(self):
        if self.current is not None:
            self.scene.remove(self.current)
            self.current.dispose()
            self.current = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False


class RegenerationPolicy:
    """
    Decides which parameter edits rebuild the galaxy. Subscribe it to a GalaxyParameters:

        params.subscribe(RegenerationPolicy(galaxy))
    """
    IMMEDIATE = ("mode", "colorTheme")
    ON_SETTLE = ("count", "size", "radius", "branches", "spin", "randomnessPower",
                 "insideColor", "outsideColor")

    def __init__(self, galaxy, on_regenerate=None):
        self.galaxy = galaxy
        self.on_regenerate = on_regenerate
        self.regenerations = 0

    def should_regenerate(self, name, finished):
        if name in self.IMMEDIATE:
            return True
        if name in self.ON_SETTLE:
            return finished
        return False

    def __call__(self, name, value, finished):
        if self.should_regenerate(name, finished):
            self.regenerate()

    def regenerate(self):
        points = self.galaxy.regenerate()
        self.regenerations += 1
        if self.on_regenerate:
            self.on_regenerate(points)
        return points
