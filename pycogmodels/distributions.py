"""
Reaction-time distribution adapters.

Each adapter wraps existing distribution implementations: SciPy for numeric
densities and random draws (posterior predictive checks, plots), PyMC for
log-densities inside a model graph. No density math is implemented here,
only the mapping from the psychological parameterisation to the library's.
"""

from typing import Dict, Tuple

import numpy as np
import pymc as pm
import pytensor.tensor as pt
from scipy import stats

from .exceptions import UnknownFamilyError


class RTDistribution:
    """
    Base class for a reaction-time distribution adapter.

    Subclasses define ``name``, ``parameters`` and the two mappings
    ``frozen`` (SciPy) and ``pymc_logp`` (PyMC).
    """

    name: str = ''
    parameters: Tuple[str, ...] = ()

    def frozen(self, **params):
        raise NotImplementedError

    def pymc_logp(self, value, **params):
        raise NotImplementedError

    def logpdf(self, x, **params) -> np.ndarray:
        """Log-density of ``x`` under the given parameters."""
        return self.frozen(**params).logpdf(x)

    def pdf(self, x, **params) -> np.ndarray:
        return self.frozen(**params).pdf(x)

    def rvs(self, size=None, random_state=None, **params) -> np.ndarray:
        """Draw samples; parameters broadcast against ``size``."""
        return self.frozen(**params).rvs(size=size, random_state=random_state)

    def mean(self, **params):
        return self.frozen(**params).mean()

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(self.parameters)})"


class Normal(RTDistribution):
    """Gaussian RT distribution with mean ``mu`` and scale ``sigma``."""

    name = 'normal'
    parameters = ('mu', 'sigma')

    def frozen(self, mu, sigma):
        return stats.norm(loc=mu, scale=sigma)

    def pymc_logp(self, value, mu, sigma):
        return pm.logp(pm.Normal.dist(mu=mu, sigma=sigma), value)


class ShiftedLogNormal(RTDistribution):
    """
    LogNormal shifted by a non-decision time.

    ``mu`` and ``sigma`` live on the log scale of ``rt - ndt``.
    """

    name = 'shifted_lognormal'
    parameters = ('mu', 'sigma', 'ndt')

    def frozen(self, mu, sigma, ndt):
        return stats.lognorm(s=sigma, scale=np.exp(mu), loc=ndt)

    def pymc_logp(self, value, mu, sigma, ndt):
        return pm.logp(pm.LogNormal.dist(mu=mu, sigma=sigma), value - ndt)


class ExGaussian(RTDistribution):
    """Sum of a Gaussian (``mu``, ``sigma``) and an exponential with mean ``tau``."""

    name = 'exgaussian'
    parameters = ('mu', 'sigma', 'tau')

    def frozen(self, mu, sigma, tau):
        sigma = np.asarray(sigma, dtype=float)
        return stats.exponnorm(K=np.asarray(tau, dtype=float) / sigma, loc=mu, scale=sigma)

    def pymc_logp(self, value, mu, sigma, tau):
        return pm.logp(pm.ExGaussian.dist(mu=mu, sigma=sigma, nu=tau), value)


class ShiftedWald(RTDistribution):
    """
    Shifted Wald (inverse Gaussian) first-passage time distribution.

    A single accumulator drifts at ``drift`` towards ``threshold`` after a
    non-decision delay ``ndt``. In mean/shape form this is an inverse Gaussian
    with mean ``threshold / drift`` and shape ``threshold ** 2``.
    """

    name = 'shifted_wald'
    parameters = ('drift', 'threshold', 'ndt')

    def frozen(self, drift, threshold, ndt):
        drift = np.asarray(drift, dtype=float)
        threshold = np.asarray(threshold, dtype=float)
        # scipy's invgauss(mu, scale) has mean mu * scale and shape scale
        return stats.invgauss(mu=1.0 / (drift * threshold), scale=threshold ** 2, loc=ndt)

    def pymc_logp(self, value, drift, threshold, ndt):
        return pm.logp(
            pm.Wald.dist(mu=threshold / drift, lam=pt.square(threshold), alpha=ndt),
            value,
        )


DISTRIBUTIONS: Dict[str, RTDistribution] = {
    dist.name: dist for dist in (Normal(), ShiftedLogNormal(), ExGaussian(), ShiftedWald())
}


def get_distribution(name: str) -> RTDistribution:
    """
    Look up a distribution adapter by name.

    Raises
    ------
    UnknownFamilyError
        If ``name`` is not one of ``DISTRIBUTIONS``.
    """
    try:
        return DISTRIBUTIONS[name]
    except KeyError:
        raise UnknownFamilyError(
            f"Unknown distribution '{name}'. Available: {sorted(DISTRIBUTIONS)}"
        ) from None
