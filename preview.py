import matplotlib.pyplot as plt
from matplotlib.widgets import RadioButtons, Slider
from config import *
from geometry import GalaxyGeometry, RegenerationPolicy, Scene


class GalaxyPreview:
    """
    A matplotlib window showing the galaxy from the top (X/Z) and from the side (X/Y).

    It drives its own GalaxyGeometry off the same parameter store as the pygame viewer.
    Sliders send live values while dragged and settle when the mouse is released,
    the mode and theme buttons settle straight away.
    """
    SLIDERS = ["count", "radius", "branches", "spin", "randomnessPower"]

    def __init__(self, params, rng=None):
        self.params = params
        self.scene = Scene()
        self.galaxy = GalaxyGeometry(params, self.scene, rng=rng)
        self.policy = RegenerationPolicy(self.galaxy, on_regenerate=self.refresh)
        self.unsettled = set()
        self.sliders = {}

        self._build_figure()
        params.subscribe(self.policy)
        self.policy.regenerate()

    def _style_axes(self, ax, title, ylabel):
        ax.set_facecolor('black')
        ax.grid(True, color='grey', linestyle='-', linewidth=0.5, alpha=0.3)
        ax.tick_params(axis='x', colors='grey', labelsize=6)
        ax.tick_params(axis='y', colors='grey', labelsize=6)
        for side in ('bottom', 'top', 'left', 'right'):
            ax.spines[side].set_color('grey')
        ax.set_aspect('equal', adjustable='box')
        ax.set_title(title, color='white', fontsize=10)
        ax.set_xlabel("X", color='grey')
        ax.set_ylabel(ylabel, color='grey')

    def _build_figure(self):
        self.fig, (self.ax_top, self.ax_side) = plt.subplots(1, 2, figsize=(12, 6))
        plt.subplots_adjust(left=0.22, bottom=0.3) # Make room for the buttons and sliders
        self.fig.patch.set_facecolor('black')
        self._style_axes(self.ax_top, "Top", "Z")
        self._style_axes(self.ax_side, "Side", "Y")

        self.top_scatter = self.ax_top.scatter([], [], s=1, edgecolors='none')
        self.side_scatter = self.ax_side.scatter([], [], s=1, edgecolors='none')

        ax_mode = self.fig.add_axes([0.02, 0.45, 0.15, 0.45], facecolor='black')
        self.mode_buttons = RadioButtons(ax_mode, MODES, active=MODES.index(self.params.mode))
        self.mode_buttons.on_clicked(lambda label: self.params.set("mode", label))

        themes = list(COLOR_THEMES.keys())
        ax_theme = self.fig.add_axes([0.02, 0.05, 0.15, 0.35], facecolor='black')
        self.theme_buttons = RadioButtons(ax_theme, themes, active=themes.index(self.params.colorTheme))
        self.theme_buttons.on_clicked(lambda label: self.params.set("colorTheme", label))

        for buttons in (self.mode_buttons, self.theme_buttons):
            for label in buttons.labels:
                label.set_color('grey')
                label.set_fontsize(8)

        for row, name in enumerate(self.SLIDERS):
            lo, hi, step = PARAMETER_RANGES[name]
            ax_slider = self.fig.add_axes([0.3, 0.2 - row * 0.04, 0.55, 0.03], facecolor='grey')
            slider = Slider(ax_slider, name, lo, hi, valinit=getattr(self.params, name),
                            valstep=step, color='grey')
            slider.label.set_color('grey')
            slider.valtext.set_color('grey')
            slider.on_changed(self._slider_handler(name))
            self.sliders[name] = slider

        self.fig.canvas.mpl_connect('button_release_event', self._on_release)

    def _slider_handler(self, name):
        def on_change(val):
            self.params.set(name, val, finished=False)
            self.unsettled.add(name)
        return on_change

    def _on_release(self, event):
        # The drag is over: settle every slider that moved.
        for name in sorted(self.unsettled):
            self.params.set(name, self.sliders[name].val, finished=True)
        self.unsettled.clear()

    def refresh(self, points):
        """Shows the newly attached galaxy."""
        positions = points.positions
        colors = points.colors
        marker_size = max(0.2, self.params.size * 25)

        self.top_scatter.set_offsets(positions[:, [0, 2]])
        self.side_scatter.set_offsets(positions[:, [0, 1]])
        for scatter in (self.top_scatter, self.side_scatter):
            scatter.set_facecolors(colors)
            scatter.set_sizes([marker_size])

        # helix reaches 2 * radius up and down, the merge cube 2 * radius across
        limit = self.params.radius * 2.5
        for ax in (self.ax_top, self.ax_side):
            ax.set_xlim(-limit, limit)
            ax.set_ylim(-limit, limit)

        self.fig.suptitle(f"{points.mode} | {points.count} stars | {self.params.colorTheme}",
                          color='white', fontsize=12)
        self.fig.canvas.draw_idle()

    def save(self, path):
        self.fig.savefig(path, facecolor=self.fig.get_facecolor())
        print(f"Saved preview to {path}")

    def close(self):
        self.params.unsubscribe(self.policy)
        self.galaxy.dispose()
        plt.close(self.fig)


def main(params, rng=None, save_path=None):
    preview = GalaxyPreview(params, rng=rng)
    if save_path:
        preview.save(save_path)
        preview.close()
        return
    plt.show()
    preview.close()
