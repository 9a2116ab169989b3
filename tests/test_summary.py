import arviz as az
import numpy as np
import pytest

from pycogmodels.summary import (
    NoPosterior,
    PosteriorSummary,
    predictive_draws,
    summarize_posterior,
)


def wald_draws(n=400, seed=0, drift_slope=-0.5):
    rng = np.random.default_rng(seed)
    return {
        'drift_intercept': rng.normal(3.0, 0.1, n),
        'drift_slope': rng.normal(drift_slope, 0.05, n),
        'threshold_intercept': rng.normal(1.5, 0.05, n),
        'threshold_slope': rng.normal(0.3, 0.05, n),
        'ndt_intercept': rng.normal(0.15, 0.01, n),
        'ndt_slope': rng.normal(0.0, 0.005, n),
    }


@pytest.mark.parametrize('samples', [None, {}, {'mu': []}, {'mu': [0.3]}])
def test_empty_or_trivial_posterior(samples):
    result = summarize_posterior(samples)
    assert isinstance(result, NoPosterior)
    assert result.empty
    assert 'No posterior summary' in str(result)


def test_inference_data_without_posterior():
    idata = az.from_dict(prior={'mu': np.zeros((1, 10))})
    assert isinstance(summarize_posterior(idata), NoPosterior)


def test_missing_variable():
    result = summarize_posterior({'mu': np.zeros(10)}, var_names=['sigma'])
    assert isinstance(result, NoPosterior)
    assert 'sigma' in result.reason


def test_credible_intervals():
    rng = np.random.default_rng(1)
    result = summarize_posterior({'mu': rng.normal(0.5, 0.1, 4000)}, hdi_prob=0.9)

    assert isinstance(result, PosteriorSummary)
    assert list(result.table.columns) == ['mean', 'sd', 'lower', 'upper']
    interval = result.interval('mu')
    assert interval.mean == pytest.approx(0.5, abs=0.01)
    assert interval.lower == pytest.approx(0.5 - 1.645 * 0.1, abs=0.02)
    assert interval.upper == pytest.approx(0.5 + 1.645 * 0.1, abs=0.02)
    assert interval.prob == 0.9
    assert '90% HDI' in str(interval)


def test_summary_of_chains():
    draws = np.random.default_rng(2).normal(size=(2, 100))
    result = summarize_posterior({'a': draws, 'b': draws + 1})
    assert [ci.parameter for ci in result.intervals()] == ['a', 'b']


def test_predictive_draws_shape():
    simulated = predictive_draws('wald', wald_draws(), predictor_values=(0, 1),
                                 n_obs=200, n_draws=50, random_seed=4)

    assert set(simulated) == {0, 1}
    assert simulated[0].shape == (50, 200)
    # accuracy condition: lower drift, higher threshold => slower
    assert simulated[1].mean() > simulated[0].mean()
    assert simulated[0].min() > 0.1


def test_predictive_draws_drop_infeasible_draws():
    # drift becomes negative at condition 1 for every draw
    simulated = predictive_draws('wald', wald_draws(drift_slope=-5.0), predictor_values=(0, 1),
                                 n_obs=20, n_draws=30, random_seed=5)
    assert simulated[0].shape == (30, 20)
    assert simulated[1].shape == (0, 20)


def test_predictive_draws_are_reproducible():
    a = predictive_draws('wald', wald_draws(), n_obs=10, n_draws=5, random_seed=6)
    b = predictive_draws('wald', wald_draws(), n_obs=10, n_draws=5, random_seed=6)
    np.testing.assert_array_equal(a[1], b[1])


def test_predictive_draws_without_slope_variable():
    rng = np.random.default_rng(7)
    samples = {
        'mu_intercept': rng.normal(0.5, 0.01, 100),
        'mu_slope': rng.normal(0.1, 0.01, 100),
        'sigma_intercept': np.abs(rng.normal(0.1, 0.01, 100)),
    }
    simulated = predictive_draws('gaussian', samples, n_obs=1000, n_draws=10, random_seed=7)
    assert simulated[1].mean() == pytest.approx(0.6, abs=0.02)


def test_predictive_draws_missing_variables():
    with pytest.raises(ValueError, match='sigma_slope'):
        predictive_draws('scaled_gaussian', {'mu_intercept': np.ones(5), 'mu_slope': np.ones(5),
                                             'sigma_intercept': np.ones(5)})


def test_predictive_draws_empty_samples():
    assert predictive_draws('wald', None) == {}


def test_non_finite_draws():
    draws = {'mu': np.full(50, np.nan), 'sigma': np.ones(50)}

    result = summarize_posterior(draws)
    assert isinstance(result, NoPosterior)
    assert 'no finite draws' in result.reason
    assert 'mu' in result.reason
    assert isinstance(summarize_posterior(draws, var_names=['sigma']), PosteriorSummary)
