"""
Plots for reaction-time models.

Density overlays compare observed RTs with simulated (posterior or prior
predictive) RTs. The animation helpers move a distribution's parameters
between keyframes with a cosine ease, which is how the book's figures show
what each parameter does to the shape of an RT distribution.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib import animation
from scipy import stats

from .distributions import RTDistribution, get_distribution


def _kde(values, grid):
    values = np.asarray(values, dtype=float).ravel()
    values = values[np.isfinite(values)]
    if values.size < 2 or np.ptp(values) == 0:
        return np.zeros_like(grid)
    return stats.gaussian_kde(values)(grid)


def _default_grid(observed, n_points=500):
    arrays = [np.asarray(v, dtype=float).ravel() for v in observed]
    pooled = np.concatenate(arrays) if arrays else np.empty(0)
    pooled = pooled[np.isfinite(pooled)]
    upper = np.quantile(pooled, 0.99) * 1.25 if pooled.size else 2.0
    return np.linspace(0.0, upper, n_points)


def plot_density_overlay(observed: Union[np.ndarray, Mapping], simulated: Union[np.ndarray, Mapping],
                         ax=None, grid: Optional[np.ndarray] = None, n_lines: int = 50,
                         labels: Optional[Mapping] = None):
    """
    Overlay simulated RT densities on the observed RT density.

    Parameters
    ----------
    observed : array or dict
        Observed RTs, or predictor value -> observed RTs.
    simulated : array or dict
        Array of shape (draws, n_obs), or predictor value -> such array (as
        returned by ``summary.predictive_draws``).
    ax : matplotlib Axes, optional
    grid : array, optional
        RT values at which densities are evaluated.
    n_lines : int, default=50
        Maximum simulated densities drawn per group.
    labels : dict, optional
        Predictor value -> legend label.

    Returns
    -------
    matplotlib Axes
    """
    if grid is None:
        grid = _default_grid(list(observed.values()) if isinstance(observed, Mapping) else [observed])
    if not isinstance(simulated, Mapping):
        simulated = {None: simulated}
    if not isinstance(observed, Mapping):
        # no simulated groups: still draw the observed density
        observed = {key: observed for key in simulated} if simulated else {None: observed}
    labels = labels or {}

    if ax is None:
        _, ax = plt.subplots(figsize=(10, 6))

    colors = plt.rcParams['axes.prop_cycle'].by_key()['color']
    keys = list(simulated) + [key for key in observed if key not in simulated]
    for i, key in enumerate(keys):
        color = colors[i % len(colors)]
        label = labels.get(key, 'RT' if key is None else f'condition = {key}')
        for draw in np.asarray(simulated.get(key, np.empty((0, 0))))[:n_lines]:
            ax.plot(grid, _kde(draw, grid), color=color, alpha=0.1, linewidth=1)
        if key in observed:
            ax.plot(grid, _kde(observed[key], grid), color=color, linewidth=3,
                    label=f'Observed ({label})')

    ax.set_xlabel('RT (s)')
    ax.set_ylabel('Density')
    ax.set_yticks([])
    ax.legend()
    return ax


def rescale_param(p, original_range=(-1, 1), new_range=(-3, 3)):
    """Linearly map ``p`` from ``original_range`` onto ``new_range``."""
    p = (p - original_range[0]) / (original_range[1] - original_range[0])
    return p * (new_range[1] - new_range[0]) + new_range[0]


def change_param(frame, frame_range=(0, 1), param_range=(0, 1)):
    """
    Cosine-eased parameter value for an animation frame.

    Within ``frame_range`` the value moves from ``param_range[0]`` to
    ``param_range[1]``, slow at both ends.
    """
    frame = rescale_param(frame, original_range=frame_range, new_range=(np.pi, 2 * np.pi))
    return rescale_param(np.cos(frame), original_range=(-1, 1), new_range=param_range)


@dataclass(frozen=True)
class Keyframe:
    """Move ``param`` across ``param_range`` while the frame is in ``frame_range``."""

    param: str
    frame_range: Tuple[float, float]
    param_range: Tuple[float, float]


def params_at(frame: float, start: Mapping[str, float], keyframes: Sequence[Keyframe]) -> Dict[str, float]:
    """
    Parameter values at ``frame`` (0 to 1).

    Keyframes are applied in order; a parameter keeps the value its last
    finished keyframe left it at.
    """
    params = dict(start)
    for key in keyframes:
        lo, hi = key.frame_range
        if frame >= hi:
            params[key.param] = key.param_range[1]
        elif frame >= lo:
            params[key.param] = change_param(frame, frame_range=key.frame_range,
                                             param_range=key.param_range)
    return params


def animate_distribution(distribution: Union[str, RTDistribution], start: Mapping[str, float],
                         keyframes: Sequence[Keyframe], path: str, rt: Optional[np.ndarray] = None,
                         x: Optional[np.ndarray] = None, frames: int = 60, fps: int = 30,
                         show_mean: bool = False, n_mean: int = 100_000, random_seed=None):
    """
    Render a GIF of a density whose parameters change over time.

    Parameters
    ----------
    distribution : str or RTDistribution
        Adapter (or its name) whose density is drawn.
    start : dict
        Initial parameter values.
    keyframes : sequence of Keyframe
        Parameter movements, frame ranges on a 0-1 scale.
    path : str
        Output file (.gif).
    rt : array, optional
        Observed RTs drawn as a grey density behind the curve.
    x : array, optional
        RT grid. Defaults to 1000 points on [-0.1, 2].
    frames, fps : int
        Number of frames and frame rate.
    show_mean : bool, default=False
        Draw a vertical line at the simulated mean RT.
    n_mean : int
        Samples used to estimate the mean RT.

    Returns
    -------
    str
        ``path``
    """
    if isinstance(distribution, str):
        distribution = get_distribution(distribution)
    if x is None:
        x = np.linspace(-0.1, 2, 1000)
    rng = np.random.default_rng(random_seed)

    fig, ax = plt.subplots()
    ax.set_xlabel('RT (s)')
    ax.set_ylabel('Distribution')
    ax.set_yticks([])
    if rt is not None:
        ax.fill_between(x, _kde(rt, x), color='grey', alpha=0.5)
    line, = ax.plot(x, distribution.pdf(x, **start), linewidth=4, color='orange')
    mean_line = ax.axvline(0.0, color='green', label='Average RT') if show_mean else None
    if show_mean:
        ax.legend(loc='upper right')

    def update(frame):
        params = params_at(frame, start, keyframes)
        y = np.nan_to_num(distribution.pdf(x, **params))
        line.set_ydata(y)
        ax.set_ylim(0, max(np.max(y), 1e-6) * 1.1)
        shown = ', '.join(f'{name} = {value:.2f}' for name, value in params.items())
        ax.set_title(f'{type(distribution).__name__}({shown})')
        artists = [line]
        if mean_line is not None:
            m = float(np.mean(distribution.rvs(size=n_mean, random_state=rng, **params)))
            mean_line.set_xdata([m, m])
            artists.append(mean_line)
        return artists

    anim = animation.FuncAnimation(fig, update, frames=np.linspace(0, 1, frames), blit=False)
    anim.save(path, writer=animation.PillowWriter(fps=fps))
    plt.close(fig)
    return path
