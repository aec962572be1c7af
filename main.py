import argparse
import sys
import numpy as np
import pygame
from config import *
from parameters import GalaxyParameters, ParameterError
from geometry import GalaxyGeometry, RegenerationPolicy, Scene, load_sprite
from renderer import GalaxyView
from controls import ControlPanel
import preview


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Procedurally generate and view a galaxy shaped point cloud."
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random generator. Same seed + same parameters = same galaxy.",
    )
    parser.add_argument(
        "--mode",
        choices=MODES,
        default=None,
        help=f"Galaxy mode to start with (default: {DEFAULT_PARAMETERS['mode']}).",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=None,
        help=f"Number of stars, clamped to {PARAMETER_RANGES['count'][0]}-{PARAMETER_RANGES['count'][1]}.",
    )
    parser.add_argument(
        "--theme",
        choices=list(COLOR_THEMES.keys()),
        default=None,
        help=f"Colour theme to start with (default: {DEFAULT_THEME}).",
    )
    parser.add_argument(
        "--inside-color",
        default=None,
        help="Colour of the galaxy centre, e.g. '#ffcc00' or 'gold'. Overrides the theme.",
    )
    parser.add_argument(
        "--outside-color",
        default=None,
        help="Colour of the galaxy edge. Overrides the theme.",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Open the matplotlib preview window instead of the pygame viewer.",
    )
    parser.add_argument(
        "--save",
        metavar="PATH",
        default=None,
        help="Render the matplotlib preview to an image file and exit.",
    )
    return parser.parse_args(argv)


def build_parameters(args):
    """Startup parameters: the defaults, with whatever the command line overrides."""
    overrides = {}
    if args.theme:
        overrides["colorTheme"] = args.theme
    if args.mode:
        overrides["mode"] = args.mode
    if args.count is not None:
        overrides["count"] = args.count
    # after the theme, so they win over its colours
    if args.inside_color:
        overrides["insideColor"] = args.inside_color
    if args.outside_color:
        overrides["outsideColor"] = args.outside_color
    return GalaxyParameters(**overrides)


def run_viewer(params, rng=None):
    """
    The pygame viewer.

    Sets up the window, builds the first galaxy and runs the main loop.

    The Loop:
    1.  **Event Handling**: The control panel gets every event first. Whatever it does not use
        moves the camera (left drag orbit, middle drag pan, wheel zoom).
        Parameter edits made by the panel regenerate the galaxy synchronously, right here.
    2.  **Update**: Camera damping and auto rotation.
    3.  **Draw**: Galaxy, overlay, controls, flip.
    """
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.RESIZABLE)
    pygame.display.set_caption(WINDOW_TITLE)

    scene = Scene()
    galaxy = GalaxyGeometry(params, scene, rng=rng, texture=load_sprite(STAR_TEXTURE))

    def report(points):
        print(f"Generated {points.count} points ({points.mode}) in {galaxy.last_duration_ms:.1f} ms")
        pygame.display.set_caption(f"{WINDOW_TITLE} | {points.mode} | {points.count} stars")

    policy = RegenerationPolicy(galaxy, on_regenerate=report)
    params.subscribe(policy)
    policy.regenerate()

    view = GalaxyView()
    panel = ControlPanel(params, screen.get_width())
    clock = pygame.time.Clock()

    running = True
    left_mouse_dragging = False
    middle_mouse_dragging = False
    last_mouse_pos = None
    last_middle_click_time = 0

    with galaxy:
        while running:
            dt_ms = clock.tick(FPS)
            dt_seconds = dt_ms / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                    continue
                if event.type == pygame.VIDEORESIZE:
                    screen = pygame.display.set_mode(event.size, pygame.RESIZABLE)
                    panel.layout(event.w)
                    continue

                if panel.handle_event(event):
                    continue

                if event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r:
                        # same parameters, fresh randomness
                        policy.regenerate()
                    elif event.key == pygame.K_SPACE:
                        params.set("autoRotate", not params.autoRotate)

                if event.type == pygame.MOUSEBUTTONDOWN:
                    if event.button == 1:
                        left_mouse_dragging = True
                        last_mouse_pos = event.pos
                    elif event.button == 2:
                        current_time = pygame.time.get_ticks()
                        if last_middle_click_time and (current_time - last_middle_click_time < 500):
                            view.reset_view()
                            last_middle_click_time = 0
                        else:
                            last_middle_click_time = current_time
                            middle_mouse_dragging = True
                            last_mouse_pos = event.pos
                    elif event.button == 4:
                        view.camera.zoom(1 / ZOOM_STEP)
                    elif event.button == 5:
                        view.camera.zoom(ZOOM_STEP)
                if event.type == pygame.MOUSEBUTTONUP:
                    if event.button == 1:
                        left_mouse_dragging = False
                    elif event.button == 2:
                        middle_mouse_dragging = False
                    if not left_mouse_dragging and not middle_mouse_dragging:
                        last_mouse_pos = None
                if event.type == pygame.MOUSEMOTION and last_mouse_pos:
                    dx = event.pos[0] - last_mouse_pos[0]
                    dy = event.pos[1] - last_mouse_pos[1]
                    if left_mouse_dragging:
                        view.camera.orbit(dx, dy)
                    elif middle_mouse_dragging:
                        view.camera.pan(dx, dy)
                    last_mouse_pos = event.pos

            view.update(dt_seconds, params)
            view.draw(screen, scene, params, fps=clock.get_fps())
            panel.draw(screen)
            pygame.display.flip()

    params.unsubscribe(policy)
    pygame.quit()


def main(argv=None):
    """
    Entry point. Returns the exit code.

    argparse itself exits with 2 on an unknown mode or theme. Colours can't be checked by
    argparse, so a bad --inside-color / --outside-color is reported here with the same code.
    """
    args = parse_args(argv)
    try:
        params = build_parameters(args)
    except ParameterError as e:
        print(f"Error: {e}")
        return 2

    rng = np.random.default_rng(args.seed) if args.seed is not None else None

    if args.preview or args.save:
        preview.main(params, rng=rng, save_path=args.save)
    else:
        run_viewer(params, rng=rng)
    return 0


if __name__ == '__main__':
    sys.exit(main())
