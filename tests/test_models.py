import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import pymc as pm
import pytest

from pycogmodels import RTModel
from pycogmodels.exceptions import UnknownFamilyError
from pycogmodels.families import FAMILIES, get_family
from pycogmodels.summary import NoPosterior, PosteriorSummary


def test_unknown_family():
    with pytest.raises(UnknownFamilyError):
        RTModel(family='lba')


def test_family_variables():
    assert get_family('gaussian').var_names == ['mu_intercept', 'mu_slope', 'sigma_intercept']
    assert get_family('wald').parameter_names == ('drift', 'threshold', 'ndt')
    assert get_family('shifted_lognormal').var_names[-1] == 'ndt_intercept'


def test_prepare_data(rt_frame):
    model = RTModel(family='gaussian')
    data = model.prepare_data(rt_frame)

    assert data.n_obs == (~rt_frame['Error']).sum()
    assert data.n_participants == 1
    assert set(np.unique(data.condition)) == {0.0, 1.0}


def test_build_requires_data():
    with pytest.raises(ValueError, match='prepare data'):
        RTModel().build_model()


@pytest.mark.parametrize('family', sorted(FAMILIES))
def test_initial_point_is_feasible(rt_frame, family):
    model = RTModel(family=family)
    model.prepare_data(rt_frame)
    pymc_model = model.build_model()

    for name in get_family(family).var_names:
        assert name in pymc_model.named_vars
    logp = pymc_model.compile_logp()(pymc_model.initial_point())
    assert np.isfinite(logp)


@pytest.mark.parametrize('family, slope', [
    ('scaled_gaussian', 'sigma_slope'),
    ('exgaussian', 'tau_slope'),
    ('wald', 'drift_slope'),
    ('wald', 'threshold_slope'),
])
def test_negative_composed_parameter_has_zero_likelihood(rt_frame, family, slope):
    model = RTModel(family=family)
    model.prepare_data(rt_frame)
    pymc_model = model.build_model()

    point = pymc_model.initial_point()
    point[slope] = -10.0
    logp = pymc_model.compile_logp()(point)
    assert np.isneginf(logp)


def test_infeasible_point_has_finite_gradient(rt_frame):
    model = RTModel(family='scaled_gaussian')
    model.prepare_data(rt_frame)
    pymc_model = model.build_model()

    point = pymc_model.initial_point()
    point['sigma_slope'] = -10.0
    gradient = pymc_model.compile_dlogp()(point)
    assert np.all(np.isfinite(gradient))


def test_hierarchical_model(rt_frame):
    model = RTModel(family='exgaussian', use_hierarchical=True)
    data = model.prepare_data(rt_frame)
    pymc_model = model.build_model()

    assert data.n_participants == 2
    assert pymc_model['mu_participant_z'].eval().shape == (2,)
    assert np.isfinite(pymc_model.compile_logp()(pymc_model.initial_point()))


def test_results_before_fit(rt_frame, tmp_path):
    model = RTModel(family='wald')

    assert isinstance(model.summary(), NoPosterior)
    with pytest.raises(ValueError, match='not been fitted'):
        model.save_results(str(tmp_path / 'trace.nc'))
    with pytest.raises(ValueError, match='not been fitted'):
        model.posterior_predictive_check()
    with pytest.raises(ValueError, match='not been built'):
        model.prior_predictive_check()


def test_prior_predictive_check(rt_frame, monkeypatch):
    monkeypatch.setattr('matplotlib.pyplot.show', lambda: None)
    model = RTModel(family='wald')
    model.prepare_data(rt_frame)
    model.build_model()

    simulated = model.prior_predictive_check(samples=50, n_draws=10, random_seed=1)

    assert set(simulated) == {0.0, 1.0}
    for draws in simulated.values():
        assert draws.shape[1] == model.data.n_obs
        assert draws.shape[0] <= 10


def test_non_decision_prior_is_nearly_flat(rt_frame):
    model = RTModel(family='wald')
    model.prepare_data(rt_frame)
    pymc_model = model.build_model()

    ndt = pymc_model['ndt_intercept']
    low, high = (float(pm.logp(ndt, value).eval()) for value in (0.05, 0.15))
    assert abs(high - low) < 0.2


def wald_trace(n_chains=2, n_draws=100, seed=0):
    rng = np.random.default_rng(seed)
    shape = (n_chains, n_draws)
    return az.from_dict(posterior={
        'drift_intercept': rng.normal(3.0, 0.1, shape),
        'drift_slope': rng.normal(-0.5, 0.05, shape),
        'threshold_intercept': rng.normal(1.5, 0.05, shape),
        'threshold_slope': rng.normal(0.3, 0.05, shape),
        'ndt_intercept': rng.normal(0.15, 0.01, shape),
        'ndt_slope': rng.normal(0.0, 0.005, shape),
    })


@pytest.fixture
def fitted_wald(rt_frame, monkeypatch):
    monkeypatch.setattr('matplotlib.pyplot.show', lambda: None)
    model = RTModel(family='wald')
    model.prepare_data(rt_frame)
    model.trace = wald_trace()
    yield model
    plt.close('all')


def test_summary_after_fit(fitted_wald, capsys):
    result = fitted_wald.summary(hdi_prob=0.9)

    assert isinstance(result, PosteriorSummary)
    assert set(result.table.index) == set(get_family('wald').var_names)
    interval = result.interval('drift_intercept')
    assert interval.lower < 3.0 < interval.upper
    assert 'drift_intercept' in capsys.readouterr().out


def test_diagnostics_after_fit(fitted_wald):
    table = fitted_wald.diagnostics()

    assert set(table.index) == set(get_family('wald').var_names)
    assert 'r_hat' in table.columns
    assert 'ess_bulk' in table.columns


def test_posterior_predictive_check(fitted_wald):
    simulated = fitted_wald.posterior_predictive_check(n_draws=10, random_seed=3)

    assert set(simulated) == {0.0, 1.0}
    for draws in simulated.values():
        assert draws.shape == (10, fitted_wald.data.n_obs)
        assert np.all(draws > 0)


def test_plots_after_fit(fitted_wald):
    fitted_wald.plot_traces()
    fitted_wald.plot_posterior()
    assert plt.get_fignums()


def test_save_and_load_results(fitted_wald, tmp_path):
    path = str(tmp_path / 'trace.nc')
    original = fitted_wald.trace.posterior['drift_slope'].values

    fitted_wald.save_results(path)
    reloaded = RTModel(family='wald').load_results(path)

    np.testing.assert_allclose(reloaded.posterior['drift_slope'].values, original)
