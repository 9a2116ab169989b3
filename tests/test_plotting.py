import matplotlib.pyplot as plt
import numpy as np
import pytest

from pycogmodels.plotting import (
    Keyframe,
    animate_distribution,
    change_param,
    params_at,
    plot_density_overlay,
    rescale_param,
)


def test_rescale_param():
    assert rescale_param(0.0) == pytest.approx(0.0)
    assert rescale_param(1.0) == pytest.approx(3.0)
    assert rescale_param(5, original_range=(0, 10), new_range=(0, 1)) == pytest.approx(0.5)


def test_change_param_eases_between_values():
    assert change_param(0.0, frame_range=(0, 0.2), param_range=(0.4, 0.1)) == pytest.approx(0.4)
    assert change_param(0.1, frame_range=(0, 0.2), param_range=(0.4, 0.1)) == pytest.approx(0.25)
    assert change_param(0.2, frame_range=(0, 0.2), param_range=(0.4, 0.1)) == pytest.approx(0.1)


def test_params_at_keeps_finished_keyframes():
    keyframes = [Keyframe('mu', (0.0, 0.2), (0.0, 1.0)), Keyframe('mu', (0.7, 1.0), (1.0, 0.0))]
    start = {'mu': 0.0, 'sigma': 0.4}

    assert params_at(0.0, start, keyframes)['mu'] == pytest.approx(0.0)
    assert params_at(0.5, start, keyframes) == {'mu': 1.0, 'sigma': 0.4}
    assert params_at(1.0, start, keyframes)['mu'] == pytest.approx(0.0)


def test_plot_density_overlay():
    rng = np.random.default_rng(0)
    observed = {0: rng.normal(0.5, 0.1, 200), 1: rng.normal(0.7, 0.1, 200)}
    simulated = {0: rng.normal(0.5, 0.1, (5, 200)), 1: np.empty((0, 200))}

    ax = plot_density_overlay(observed, simulated, n_lines=3)

    assert len(ax.lines) == 3 + 1 + 1
    assert ax.get_xlabel() == 'RT (s)'
    plt.close('all')


def test_animate_distribution(tmp_path):
    path = animate_distribution(
        'exgaussian',
        start={'mu': 0.3, 'sigma': 0.2, 'tau': 0.001},
        keyframes=[Keyframe('tau', (0.0, 0.5), (0.001, 0.4)),
                   Keyframe('tau', (0.5, 1.0), (0.4, 0.001))],
        path=str(tmp_path / 'rt_exgaussian.gif'),
        rt=np.random.default_rng(1).normal(0.5, 0.1, 100),
        frames=4,
        fps=4,
        show_mean=True,
        n_mean=1000,
        random_seed=1,
    )
    assert (tmp_path / 'rt_exgaussian.gif').stat().st_size > 0
    assert path.endswith('.gif')


def test_plot_density_overlay_without_simulated_draws():
    observed = np.array([0.4, 0.5, 0.6])

    ax = plot_density_overlay(observed, {})

    assert len(ax.lines) == 1
    assert ax.lines[0].get_xdata().max() > 0.6
    plt.close('all')
