import numpy as np
from dataclasses import dataclass
from enum import Enum
from parameters import validate_mode

"""
GENERATOR MODULE
----------------
This module turns a set of galaxy parameters into a point cloud: one position and one colour per star.
Nothing here is simulated. Every star is placed by a closed-form formula evaluated once.

Key Concepts:
1.  **Shared Draws**: Every star gets the same set of ingredients, whatever the mode.
    - radius (r): uniform(0, 1) * radius parameter. Also drives the colour.
    - branch angle: (i mod branches) / branches * 2*pi. Picked by index, not by chance, so
      star i always lands on the same arm.
    - spin angle: r * spin. The further out, the more the arm is twisted.
    - randomness (rx, ry, rz): sign * uniform(0, 1) ** randomnessPower.
      A higher power squeezes the jitter towards 0, so arms get sharper.

2.  **Mode Kernels**: One small function per mode maps the shared draws to (x, y, z).
    The kernels live in the `KERNELS` table. Adding a mode = writing one function with `@kernel`.
    cluster, blackHole and galaxyMerge deliberately ignore the shared jitter and arm angles
    and pull their own fresh numbers from the generator instead.

3.  **Colour**: t = r / radius, then colour = inside * (1 - t) + outside * t.
    Since r < radius, t is always in [0, 1): centre stars take the inside colour.

Everything is done with numpy arrays (one row per star) instead of a per-star loop.
"""


class GalaxyMode(str, Enum):
    SPIRAL = "spiral"
    ELLIPTICAL = "elliptical"
    CLUSTER = "cluster"
    EXPLOSION = "explosion"
    TORNADO = "tornado"
    SWIRL = "swirl"
    HELIX = "helix"
    BLACK_HOLE = "blackHole"
    GALAXY_MERGE = "galaxyMerge"


@dataclass
class Draws:
    """The per-star ingredients handed to every mode kernel."""
    index: np.ndarray          # i, 0 .. count-1
    count: int
    radius_param: float        # the configured radius, not the per-star one
    radius: np.ndarray         # per-star drawn radius
    branch_angle: np.ndarray
    spin_angle: np.ndarray
    rx: np.ndarray
    ry: np.ndarray
    rz: np.ndarray
    rng: np.random.Generator   # for kernels that need fresh numbers


@dataclass
class PointCloud:
    positions: np.ndarray  # (count, 3) float32
    colors: np.ndarray     # (count, 3) float32, each channel in [0, 1]
    radii: np.ndarray      # (count,) float32, the radius each colour was mixed from
    mode: str

    @property
    def count(self):
        return len(self.positions)

    def flat_positions(self):
        """x0, y0, z0, x1, y1, z1, ... (length 3 * count)"""
        return self.positions.reshape(-1)

    def flat_colors(self):
        return self.colors.reshape(-1)


KERNELS = {}


def kernel(mode):
    """Registers the decorated function as the position law for `mode`."""
    def register(func):
        KERNELS[GalaxyMode(mode)] = func
        return func
    return register


# --- Mode Kernels ---
# Each takes a Draws and returns x, y, z arrays of length count.

@kernel(GalaxyMode.SPIRAL)
def spiral(d):
    angle = d.branch_angle + d.spin_angle
    x = np.cos(angle) * d.radius + d.rx
    y = d.ry
    z = np.sin(angle) * d.radius + d.rz
    return x, y, z


@kernel(GalaxyMode.ELLIPTICAL)
def elliptical(d):
    x = np.cos(d.branch_angle) * d.radius * 1.2 + d.rx * 0.5
    y = d.ry * 0.2
    z = np.sin(d.branch_angle) * d.radius * 0.8 + d.rz * 0.5
    return x, y, z


@kernel(GalaxyMode.CLUSTER)
def cluster(d):
    # A plain cube around the origin, sized by the radius parameter.
    x = (d.rng.random(d.count) - 0.5) * d.radius_param * 2
    y = (d.rng.random(d.count) - 0.5) * d.radius_param * 2
    z = (d.rng.random(d.count) - 0.5) * d.radius_param * 2
    return x, y, z


@kernel(GalaxyMode.EXPLOSION)
def explosion(d):
    return d.radius * d.rx, d.radius * d.ry, d.radius * d.rz


@kernel(GalaxyMode.TORNADO)
def tornado(d):
    angle = d.branch_angle + d.spin_angle
    height = d.radius * 2
    x = np.sin(angle) * d.radius
    y = height * (d.index / d.count) - d.radius_param
    z = np.cos(angle) * d.radius
    return x, y, z


@kernel(GalaxyMode.SWIRL)
def swirl(d):
    swirl_factor = np.sin(d.index / 100) * 0.5
    angle = d.branch_angle + d.spin_angle + swirl_factor
    x = np.cos(angle) * d.radius + d.rx * 0.5
    y = np.sin(swirl_factor * 5) * 2 + d.ry * 0.5
    z = np.sin(angle) * d.radius + d.rz * 0.5
    return x, y, z


@kernel(GalaxyMode.HELIX)
def helix(d):
    angle = d.index * 0.02 + d.branch_angle
    helix_radius = d.radius * 0.6
    x = np.cos(angle) * helix_radius + d.rx * 0.3
    y = (d.index / d.count) * d.radius_param * 4 - d.radius_param * 2
    z = np.sin(angle) * helix_radius + d.rz * 0.3
    return x, y, z


@kernel(GalaxyMode.BLACK_HOLE)
def black_hole(d):
    # Thin flat disc. The arm angle is replaced by a fresh random one.
    angle = d.rng.random(d.count) * np.pi * 2
    x = np.cos(angle) * d.radius
    y = d.rng.random(d.count) * 0.1
    z = np.sin(angle) * d.radius
    return x, y, z


@kernel(GalaxyMode.GALAXY_MERGE)
def galaxy_merge(d):
    merge_radius = d.radius * 2
    x = (d.rng.random(d.count) - 0.5) * merge_radius
    y = (d.rng.random(d.count) - 0.5) * merge_radius
    z = (d.rng.random(d.count) - 0.5) * merge_radius
    return x, y, z


# --- Shared Steps ---

def randomness(rng, count, power):
    """
    Draws the signed jitter for every star and axis.

    Each value is sign * u ** power with u uniform in [0, 1) and sign +1 or -1 with equal odds.
    u ** power leans towards 0 as the power grows, so the magnitude is always < 1.

    Returns:
        np.ndarray: shape (count, 3), columns rx, ry, rz.
    """
    magnitude = rng.random((count, 3)) ** power
    sign = np.where(rng.random((count, 3)) < 0.5, 1.0, -1.0)
    return magnitude * sign


def mix_colors(inside_rgb, outside_rgb, t):
    """
    Linear blend between two RGB colours for every factor in t.

    colour = inside * (1 - t) + outside * t, evaluated channel by channel.
    """
    t = np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)[:, None]
    inside = np.asarray(inside_rgb, dtype=np.float64)[None, :]
    outside = np.asarray(outside_rgb, dtype=np.float64)[None, :]
    return np.clip(inside * (1.0 - t) + outside * t, 0.0, 1.0)


def empty_cloud(mode):
    return PointCloud(
        positions=np.empty((0, 3), dtype=np.float32),
        colors=np.empty((0, 3), dtype=np.float32),
        radii=np.empty(0, dtype=np.float32),
        mode=mode,
    )


def generate(params, rng=None):
    """
    Generates the point cloud for the given parameters.

    Steps:
    1. Check the mode (an unknown mode is the caller's mistake and raises).
    2. Draw the per-star radius, then work out branch and spin angles.
    3. Draw the signed jitter.
    4. Run the mode kernel.
    5. Mix the colours from the per-star radius.

    Args:
        params: A GalaxyParameters (or anything with the same attributes).
        rng (np.random.Generator): Source of randomness. A new unseeded one if None,
            pass `np.random.default_rng(seed)` for repeatable output.

    Returns:
        PointCloud: positions and colors of shape (count, 3).
    """
    mode = GalaxyMode(validate_mode(params.mode))
    if rng is None:
        rng = np.random.default_rng()

    # Degenerate values can show up mid-drag; answer with an empty cloud rather than a crash.
    count = int(params.count)
    if count <= 0:
        return empty_cloud(mode.value)

    radius_param = float(params.radius)
    branches = max(1, int(params.branches))

    # 1. Radius, branch and spin
    index = np.arange(count, dtype=np.float64)
    if radius_param > 0:
        radius = rng.random(count) * radius_param
    else:
        radius = np.zeros(count)
    branch_angle = (np.arange(count) % branches) / branches * np.pi * 2
    spin_angle = radius * params.spin

    # 2. Jitter
    jitter = randomness(rng, count, params.randomnessPower)

    draws = Draws(
        index=index,
        count=count,
        radius_param=radius_param,
        radius=radius,
        branch_angle=branch_angle,
        spin_angle=spin_angle,
        rx=jitter[:, 0],
        ry=jitter[:, 1],
        rz=jitter[:, 2],
        rng=rng,
    )

    # 3. Positions
    x, y, z = KERNELS[mode](draws)
    positions = np.empty((count, 3), dtype=np.float32)
    positions[:, 0] = x
    positions[:, 1] = y
    positions[:, 2] = z

    # 4. Colours
    t = radius / radius_param if radius_param > 0 else np.zeros(count)
    colors = mix_colors(params.inside_rgb, params.outside_rgb, t).astype(np.float32)

    return PointCloud(
        positions=positions,
        colors=colors,
        radii=radius.astype(np.float32),
        mode=mode.value,
    )
