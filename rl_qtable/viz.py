import numpy as np
import matplotlib.pyplot as plt
from .utils import draw_path_on_image


def moving_average(values, window):
    values = np.asarray(values, dtype=float)
    if window < 1 or len(values) < window:
        return np.array([])
    cumsum = np.cumsum(np.insert(values, 0, 0))
    return (cumsum[window:] - cumsum[:-window]) / float(window)


def plot_learning_curve(returns, window=50, save_path=None):
    """Plot episodic returns and their moving average."""
    returns = np.asarray(returns, dtype=float)
    fig, ax = plt.subplots()
    ax.plot(np.arange(1, len(returns) + 1), returns, label="Episode Return")
    ma = moving_average(returns, window)
    if len(ma):
        ax.plot(np.arange(window, len(returns) + 1), ma, label=f"Moving Avg ({window})")
    ax.set_xlabel("Episode")
    ax.set_ylabel("Return")
    ax.legend()
    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight")
    return fig


def value_grid(table, grid):
    """(grid_size, grid_size) array of the best action value per cell; NaN for terminal cells."""
    values = np.full((grid.grid_size, grid.grid_size), np.nan)
    for state, actions in table.table.items():
        if actions:
            values[state.row, state.col] = max(actions.values())
    return values


def plot_value_grid(table, grid, save_path=None):
    """Heat-map of value_grid; target cells are left blank."""
    fig, ax = plt.subplots()
    im = ax.imshow(value_grid(table, grid), cmap="viridis")
    fig.colorbar(im, ax=ax, label="max Q")
    ax.set_title("Best action value per cell")
    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight")
    return fig


def plot_path_over_image(image, grid_coords, path, targets=(), save_path=None):
    """Overlay the path (list of (r, c)) and target cells on the image and save it."""
    img = draw_path_on_image(image, grid_coords, path, targets)
    if save_path is not None:
        img.save(save_path)
    return img
