"""
Posterior summaries and predictive draws.

Summaries are computed with ArviZ; predictive draws reuse the family's
composer and distribution adapter so that draws whose composed parameters are
infeasible are discarded instead of simulated.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Union

import arviz as az
import numpy as np
import pandas as pd

from .families import ModelFamily, get_family


@dataclass(frozen=True)
class CredibleInterval:
    parameter: str
    mean: float
    lower: float
    upper: float
    prob: float

    def __str__(self):
        return (f"{self.parameter}: {self.mean:.3f} "
                f"[{self.lower:.3f}, {self.upper:.3f}] ({self.prob:.0%} HDI)")


@dataclass(frozen=True)
class PosteriorSummary:
    """Per-variable posterior mean, sd and highest-density interval."""

    table: pd.DataFrame
    hdi_prob: float

    @property
    def empty(self) -> bool:
        return False

    def interval(self, name: str) -> CredibleInterval:
        row = self.table.loc[name]
        return CredibleInterval(name, float(row['mean']), float(row['lower']),
                                float(row['upper']), self.hdi_prob)

    def intervals(self):
        return [self.interval(name) for name in self.table.index]

    def __str__(self):
        return self.table.to_string()


@dataclass(frozen=True)
class NoPosterior:
    """Explicit result for a missing, empty or single-draw posterior."""

    reason: str

    @property
    def empty(self) -> bool:
        return True

    def __str__(self):
        return f"No posterior summary: {self.reason}"


Samples = Union[az.InferenceData, Mapping[str, Iterable[float]], None]


def _draw_count(idata: az.InferenceData) -> int:
    sizes = idata.posterior.sizes
    return int(sizes.get('chain', 0) * sizes.get('draw', 0))


def _as_inference_data(samples: Samples) -> Optional[az.InferenceData]:
    """Convert ``samples`` to InferenceData, or None if there is nothing to convert."""
    if samples is None:
        return None
    if isinstance(samples, az.InferenceData):
        if 'posterior' not in samples.groups() or not samples.posterior.data_vars:
            return None
        return samples if _draw_count(samples) > 0 else None
    if isinstance(samples, Mapping):
        posterior = {}
        for name, values in samples.items():
            array = np.asarray(values, dtype=float)
            if array.size == 0:
                return None
            if array.ndim == 1:
                # one chain
                array = array[np.newaxis, :]
            posterior[name] = array
        if not posterior:
            return None
        return az.from_dict(posterior=posterior)
    raise TypeError(f"Cannot summarize samples of type {type(samples).__name__}")


def summarize_posterior(samples: Samples, var_names: Optional[Sequence[str]] = None,
                        hdi_prob: float = 0.95) -> Union[PosteriorSummary, NoPosterior]:
    """
    Summarize posterior draws with means and highest-density intervals.

    Parameters
    ----------
    samples : InferenceData or mapping
        Posterior draws. A mapping holds name -> draws, 1-D arrays are read as
        a single chain and 2-D arrays as (chain, draw).
    var_names : sequence of str, optional
        Variables to summarize. If None, summarizes all.
    hdi_prob : float, default=0.95
        Probability mass of the credible interval.

    Returns
    -------
    PosteriorSummary or NoPosterior
        ``NoPosterior`` when there are no draws, fewer than two draws, or a
        requested variable is absent or has no finite draws. This function does not raise on empty
        input.
    """
    idata = _as_inference_data(samples)
    if idata is None:
        return NoPosterior("no posterior draws")
    n_draws = _draw_count(idata)
    if n_draws < 2:
        return NoPosterior(f"need at least two draws, got {n_draws}")
    if var_names is not None:
        missing = [name for name in var_names if name not in idata.posterior]
        if missing:
            return NoPosterior(f"no draws for {missing}")
    names = var_names if var_names is not None else list(idata.posterior.data_vars)
    not_finite = [name for name in names if not np.isfinite(idata.posterior[name].values).any()]
    if not_finite:
        return NoPosterior(f"no finite draws for {not_finite}")

    table = az.summary(idata, var_names=var_names, kind='stats', hdi_prob=hdi_prob)
    # kind='stats' columns are mean, sd, hdi_low%, hdi_high%
    table.columns = ['mean', 'sd', 'lower', 'upper']
    return PosteriorSummary(table=table, hdi_prob=hdi_prob)


def predictive_draws(family: Union[str, ModelFamily], samples: Samples,
                     predictor_values: Iterable[float] = (0, 1), n_obs: int = 500,
                     n_draws: int = 100, random_seed=None) -> Dict[float, np.ndarray]:
    """
    Simulate reaction times from parameter draws.

    Works for posterior and prior draws alike. For each predictor value,
    ``n_draws`` parameter draws are composed; infeasible ones are dropped and
    every remaining draw simulates ``n_obs`` trials.

    Parameters
    ----------
    family : str or ModelFamily
        Family whose ``*_intercept`` / ``*_slope`` variables are in ``samples``.
    samples : InferenceData or mapping
        Parameter draws.
    predictor_values : iterable of float, default=(0, 1)
        Predictor values to simulate.
    n_obs : int, default=500
        Trials simulated per draw.
    n_draws : int, default=100
        Parameter draws used (subsampled without replacement).
    random_seed : int or Generator, optional

    Returns
    -------
    dict
        Predictor value -> array of shape (feasible draws, n_obs). Empty
        if ``samples`` holds no draws.
    """
    if isinstance(family, str):
        family = get_family(family)
    idata = _as_inference_data(samples)
    if idata is None:
        return {}

    posterior = idata.posterior
    missing = [name for name in family.var_names if name not in posterior]
    if missing:
        raise ValueError(f"Samples are missing variables for '{family.name}': {missing}")
    flat = {name: posterior[name].values.reshape(-1) for name in family.var_names}

    rng = np.random.default_rng(random_seed)
    total = len(next(iter(flat.values())))
    picked = rng.choice(total, size=min(n_draws, total), replace=False)
    coefficients = family.coefficients_from({name: values[picked] for name, values in flat.items()})

    composer = family.composer()
    distribution = family.distribution
    draws = {}
    for value in predictor_values:
        composed = {name: intercept + slope * value
                    for name, (intercept, slope) in coefficients.items()}
        mask = composer.feasible_mask(composed)
        n_feasible = int(mask.sum())
        if n_feasible == 0:
            draws[value] = np.empty((0, n_obs))
            continue
        params = {name: values[mask] for name, values in composed.items()}
        simulated = distribution.rvs(size=(n_obs, n_feasible), random_state=rng, **params)
        draws[value] = np.asarray(simulated).T
    return draws
