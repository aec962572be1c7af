import math
import numpy as np
import pygame
from config import *
from geometry import star_sprite


# --- Projection Helper Functions ---
def camera_view_rotation(points, yaw_deg, pitch_deg):
    """
    Rotates world points so the camera ends up on the +z axis, looking back at the origin.

    The camera sits on a sphere around the origin at (yaw, pitch):
    first undo the yaw (rotation around Y), then the pitch (rotation around X).

    Args:
        points (np.ndarray): (N, 3) world positions.

    Returns:
        np.ndarray: (N, 3) positions in camera space.
    """
    yaw = math.radians(yaw_deg)
    pitch = math.radians(pitch_deg)
    x, y, z = points[:, 0], points[:, 1], points[:, 2]

    x_yawed = x * math.cos(yaw) - z * math.sin(yaw)
    z_yawed = x * math.sin(yaw) + z * math.cos(yaw)

    y_pitched = y * math.cos(pitch) - z_yawed * math.sin(pitch)
    z_pitched = y * math.sin(pitch) + z_yawed * math.cos(pitch)
    return np.stack((x_yawed, y_pitched, z_pitched), axis=-1)


def project_points(points_cam, camera_distance, width, height, fov_deg=CAMERA_FOV):
    """
    Perspective projection of camera space points onto the screen.

    The Math:
    depth = camera distance - z (how far in front of the camera the point is)
    focal = (height / 2) / tan(fov / 2)
    screen x = width / 2 + x * focal / depth
    screen y = height / 2 - y * focal / depth   (screen y grows downwards)

    Returns:
        tuple: sx, sy (float arrays), depth, visible (bool mask, inside the near/far planes)
    """
    depth = camera_distance - points_cam[:, 2]
    visible = (depth > CAMERA_NEAR) & (depth < CAMERA_FAR)
    safe_depth = np.where(visible, depth, 1.0)

    focal = (height / 2) / math.tan(math.radians(fov_deg) / 2)
    sx = width / 2 + points_cam[:, 0] * focal / safe_depth
    sy = height / 2 - points_cam[:, 1] * focal / safe_depth
    return sx, sy, depth, visible


def resize_sprite(sprite, radius):
    """Nearest neighbour resample of the sprite to (2 * radius + 1) pixels square."""
    if radius <= 0:
        return np.array([[sprite.max()]], dtype=np.float32)
    size = 2 * radius + 1
    rows = np.linspace(0, sprite.shape[0] - 1, size).round().astype(int)
    cols = np.linspace(0, sprite.shape[1] - 1, size).round().astype(int)
    return sprite[np.ix_(rows, cols)]


def splat(width, height, sx, sy, colors, radii_px, sprite):
    """
    Additively draws every point as a sprite into a float image.

    Points are grouped by their pixel radius, and for each group every (point, sprite pixel)
    pair is summed into the image with np.bincount. Adding means overlap makes things brighter
    and draw order does not matter, which is why no depth sorting is needed.

    Args:
        sx, sy (np.ndarray): integer pixel centres.
        colors (np.ndarray): (N, 3) colour of each point (already scaled by brightness).
        radii_px (np.ndarray): integer sprite radius of each point.

    Returns:
        np.ndarray: (height, width, 3) float image, not clipped.
    """
    n_pixels = width * height
    flat = np.zeros((3, n_pixels), dtype=np.float64)

    for radius in np.unique(radii_px):
        selected = radii_px == radius
        kernel = resize_sprite(sprite, int(radius))
        dy, dx = np.mgrid[-radius:radius + 1, -radius:radius + 1]
        weights = kernel.ravel()
        keep = weights > 0
        dx, dy, weights = dx.ravel()[keep], dy.ravel()[keep], weights[keep]

        px = sx[selected][:, None] + dx[None, :]
        py = sy[selected][:, None] + dy[None, :]
        on_screen = (px >= 0) & (px < width) & (py >= 0) & (py < height)

        pixel_index = (py * width + px)[on_screen]
        pixel_weight = np.broadcast_to(weights, px.shape)[on_screen]
        owner = np.broadcast_to(np.arange(px.shape[0])[:, None], px.shape)[on_screen]
        owner_colors = colors[selected][owner]

        for channel in range(3):
            flat[channel] += np.bincount(pixel_index, weights=pixel_weight * owner_colors[:, channel],
                                         minlength=n_pixels)

    return flat.T.reshape(height, width, 3)


def rasterize(points, camera, width, height):
    """
    Renders a PointsObject as seen from the camera.

    Steps:
    1. Rotate into camera space and project.
    2. Work out each point's on-screen size. With size attenuation the world space size shrinks
       with depth: diameter = size * (height / 2) / depth. Points under one pixel get dimmer
       instead of smaller.
    3. Splat additively and convert to 8 bit.

    Returns:
        np.ndarray: (height, width, 3) uint8 image.
    """
    if points is None or points.count == 0:
        return np.zeros((height, width, 3), dtype=np.uint8)

    material = points.material
    cam = camera_view_rotation(points.positions, camera.yaw, camera.pitch)
    sx, sy, depth, visible = project_points(cam, camera.distance, width, height)

    sx = np.round(sx[visible] + camera.pan_x).astype(np.int64)
    sy = np.round(sy[visible] + camera.pan_y).astype(np.int64)
    depth = depth[visible]

    if material.size_attenuation:
        diameter = material.size * (height / 2) / depth
    else:
        diameter = np.full(len(depth), material.size)
    radii_px = np.clip(np.round(diameter / 2), 0, MAX_SPLAT_RADIUS).astype(np.int64)
    brightness = np.clip(diameter, 0.0, 1.0)

    if material.vertex_colors:
        colors = points.colors[visible].astype(np.float64)
    else:
        colors = np.ones((len(depth), 3))
    colors = colors * brightness[:, None]

    sprite = material.texture if material.texture is not None else star_sprite()
    image = splat(width, height, sx, sy, colors, radii_px, sprite)
    return (np.clip(image, 0.0, 1.0) * 255).astype(np.uint8)


# --- Camera ---
class OrbitCamera:
    """
    Orbit camera around the origin.

    Dragging feeds angular velocity which then bleeds off a little each frame (damping), so the
    view glides to a stop. Auto rotation spins the yaw at AUTO_ROTATE_SPEED (2 = 30 s a turn).
    """
    def __init__(self):
        self.reset()

    def reset(self):
        x, y, z = CAMERA_START_POSITION
        self.distance = math.sqrt(x * x + y * y + z * z)
        self.yaw = math.degrees(math.atan2(x, z))
        self.pitch = math.degrees(math.asin(y / self.distance))
        self.yaw_velocity = 0.0
        self.pitch_velocity = 0.0
        self.pan_x = 0
        self.pan_y = 0

    def orbit(self, dx, dy):
        self.yaw_velocity -= dx * ROTATE_SPEED * DAMPING_FACTOR
        self.pitch_velocity += dy * ROTATE_SPEED * DAMPING_FACTOR

    def zoom(self, factor):
        self.distance = max(MIN_CAMERA_DISTANCE, min(MAX_CAMERA_DISTANCE, self.distance * factor))

    def pan(self, dx, dy):
        self.pan_x += dx
        self.pan_y += dy

    def update(self, dt_seconds, auto_rotate=False):
        if auto_rotate:
            # 360 degrees / 60 seconds per unit of speed
            self.yaw += 6.0 * AUTO_ROTATE_SPEED * dt_seconds

        self.yaw += self.yaw_velocity
        self.pitch = max(-89, min(89, self.pitch + self.pitch_velocity))
        self.yaw_velocity *= (1 - DAMPING_FACTOR)
        self.pitch_velocity *= (1 - DAMPING_FACTOR)
        self.yaw %= 360


# --- Main View Class ---
class GalaxyView:
    """
    Draws the scene each frame.
    Only reads: the attached galaxy, the camera and the parameters. Never changes them.
    """
    def __init__(self):
        self.camera = OrbitCamera()
        self.ui_font = None

    def reset_view(self):
        """Back to the start position."""
        self.camera.reset()

    def update(self, dt_seconds, params):
        self.camera.update(dt_seconds, auto_rotate=params.autoRotate)

    def draw(self, screen, scene, params, fps=0.0):
        """
        Renders the galaxy and the info overlay.
        Flipping the display is left to the caller, the controls are drawn on top first.
        """
        if self.ui_font is None:
            self.ui_font = pygame.font.Font(None, 24)

        width, height = screen.get_size()
        points = scene.points
        frame = rasterize(points, self.camera, width, height)
        # surfarray is [x][y], the frame is [row][col]
        pygame.surfarray.blit_array(screen, frame.transpose(1, 0, 2))

        if points is not None:
            info_text = f"{points.mode} | {points.count} stars | generation #{points.generation}"
        else:
            info_text = "No galaxy"
        screen.blit(self.ui_font.render(info_text, True, WHITE), (25, 25))
        screen.blit(self.ui_font.render(f"FPS {fps:.0f}", True, LIGHT_GREY), (25, 50))

        help_text = "Left drag: orbit | Wheel: zoom | Middle drag: pan | Middle double click: reset | H: controls"
        help_surface = self.ui_font.render(help_text, True, MID_GREY)
        screen.blit(help_surface, (25, height - 30))
