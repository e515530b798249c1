"""Rendering of configurations and their runs as text and images."""

import numpy as np
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image

from .configuration import Configuration
from .simulator import LifeSimulator

BORDER_CHAR = "▫"
ALIVE_CHAR = "■"
DEAD_CHAR = "□"

LIVE_SHADE = 255
DEAD_SHADE = 30
BORDER_SHADE = 90


def render_text(grid: np.ndarray) -> str:
    """Render a grid for the terminal, framed by the dead border."""
    h, w = grid.shape
    edge = " ".join([BORDER_CHAR] * (w + 2))
    lines = [edge]
    for y in range(h):
        cells = [ALIVE_CHAR if grid[y, x] else DEAD_CHAR for x in range(w)]
        lines.append(" ".join([BORDER_CHAR] + cells + [BORDER_CHAR]))
    lines.append(edge)
    return "\n".join(lines)


def grid_image(grid: np.ndarray, cell_size: int = 4, border: bool = True) -> Image.Image:
    """Grayscale image with one cell_size square per cell, framed by the dead border."""
    shades = np.where(grid, LIVE_SHADE, DEAD_SHADE).astype(np.uint8)
    if border:
        shades = np.pad(shades, 1, constant_values=BORDER_SHADE)
    h, w = shades.shape
    return Image.fromarray(shades).resize((w * cell_size, h * cell_size), Image.Resampling.NEAREST)


def save_image(grid: np.ndarray, filepath: str, cell_size: int = 4, border: bool = True):
    """Save grid state as PNG image."""
    grid_image(grid, cell_size, border).save(filepath)


def save_animation(
    history: List[np.ndarray],
    filepath: str,
    cell_size: int = 4,
    duration: int = 100,
    loop: int = 0,
):
    """Save simulation history as animated GIF."""
    if not history:
        return
    first, *rest = [grid_image(grid, cell_size) for grid in history]
    first.save(filepath, save_all=True, append_images=rest, duration=duration, loop=loop)


def visualize_configuration(
    config: Configuration,
    steps: int = 30,
    output_dir: str = "output",
    name: str = "best",
    save_gif: bool = True,
    cell_size: int = 16,
    simulator: Optional[LifeSimulator] = None,
) -> Tuple[str, List[str]]:
    """
    Run a configuration and save its evolution as a GIF plus start/end snapshots.

    Returns:
        Tuple of (gif_path, list of snapshot paths)
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    if simulator is None:
        simulator = LifeSimulator(config.height, config.width)
    _, history = simulator.record_run(config, steps)

    gif_path = ""
    if save_gif:
        gif_path = str(output_path / f"{name}.gif")
        save_animation(history, gif_path, cell_size=cell_size)

    start_path = str(output_path / f"{name}_start.png")
    save_image(history[0], start_path, cell_size=cell_size)
    final_path = str(output_path / f"{name}_final.png")
    save_image(history[-1], final_path, cell_size=cell_size)

    return gif_path, [start_path, final_path]
