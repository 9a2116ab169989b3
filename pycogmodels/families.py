"""
Model families for reaction times.

A family ties a distribution adapter to a list of parameter specifications:
the prior on each parameter's intercept, the prior on its slope (or none, in
which case the parameter does not depend on the predictor) and its domain
constraint. Priors follow the reaction-time chapters of the book; the
predictor is a binary condition indicator.

Families
--------
gaussian          : mu ~ condition, sigma constant
scaled_gaussian   : mu ~ condition, sigma ~ condition (sigma > 0)
shifted_lognormal : mu, sigma ~ condition, ndt constant (ndt >= 0)
exgaussian        : mu, sigma, tau ~ condition (sigma, tau > 0)
wald              : drift, threshold, ndt ~ condition (drift, threshold > 0, ndt >= 0)
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import numpy as np
import pymc as pm

from .composer import NON_NEGATIVE, POSITIVE, Constraint, ParameterComposer
from .distributions import RTDistribution, get_distribution
from .exceptions import UnknownFamilyError

# (variable name, TrialData) -> PyMC random variable; called inside a model context
PriorFactory = Callable[[str, object], object]


def _non_decision_prior(name, data):
    # Gamma(shape=1.1, scale=11) is nearly flat once truncated to [0, fastest RT]
    upper = float(data.min_rt) if data is not None else 1.0
    return pm.Truncated(name, pm.Gamma.dist(alpha=1.1, beta=1 / 11), lower=0.0, upper=upper)


def _normal(mu, sigma):
    return lambda name, data: pm.Normal(name, mu=mu, sigma=sigma)


def _positive_normal(mu, sigma):
    return lambda name, data: pm.TruncatedNormal(name, mu=mu, sigma=sigma, lower=0.0)


@dataclass(frozen=True)
class ParameterSpec:
    """One composed parameter: ``intercept + slope * condition``."""

    name: str
    intercept_prior: PriorFactory
    slope_prior: Optional[PriorFactory] = None
    constraint: Optional[Constraint] = None

    @property
    def intercept_name(self) -> str:
        return f"{self.name}_intercept"

    @property
    def slope_name(self) -> str:
        return f"{self.name}_slope"


@dataclass(frozen=True)
class ModelFamily:
    """A named reaction-time model: distribution plus parameter specifications."""

    name: str
    distribution_name: str
    parameters: Tuple[ParameterSpec, ...]
    description: str = ''

    @property
    def distribution(self) -> RTDistribution:
        return get_distribution(self.distribution_name)

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.parameters)

    @property
    def var_names(self) -> list:
        """Names of the population-level random variables of the family."""
        names = []
        for spec in self.parameters:
            names.append(spec.intercept_name)
            if spec.slope_prior is not None:
                names.append(spec.slope_name)
        return names

    def composer(self) -> ParameterComposer:
        return ParameterComposer({spec.name: spec.constraint for spec in self.parameters})

    def coefficients_from(self, samples) -> Dict[str, tuple]:
        """
        Pull ``(intercept, slope)`` arrays for every parameter out of ``samples``.

        ``samples`` is any mapping from variable name to array (e.g. an
        ``xarray.Dataset`` of posterior draws). Parameters without a slope get
        a slope of zero.
        """
        coefficients = {}
        for spec in self.parameters:
            intercept = np.asarray(samples[spec.intercept_name], dtype=float)
            if spec.slope_prior is None:
                slope = np.zeros_like(intercept)
            else:
                slope = np.asarray(samples[spec.slope_name], dtype=float)
            coefficients[spec.name] = (intercept, slope)
        return coefficients


FAMILIES: Dict[str, ModelFamily] = {}


def register_family(family: ModelFamily) -> ModelFamily:
    FAMILIES[family.name] = family
    return family


register_family(ModelFamily(
    name='gaussian',
    distribution_name='normal',
    description='Gaussian RTs whose mean depends on condition',
    parameters=(
        ParameterSpec('mu', _positive_normal(0.0, 1.0), _normal(0.0, 0.3)),
        ParameterSpec('sigma', _positive_normal(0.0, 0.5), None, POSITIVE),
    ),
))

register_family(ModelFamily(
    name='scaled_gaussian',
    distribution_name='normal',
    description='Gaussian RTs whose mean and spread depend on condition',
    parameters=(
        ParameterSpec('mu', _positive_normal(0.0, 1.0), _normal(0.0, 0.3)),
        ParameterSpec('sigma', _positive_normal(0.0, 0.5), _normal(0.0, 0.1), POSITIVE),
    ),
))

register_family(ModelFamily(
    name='shifted_lognormal',
    distribution_name='shifted_lognormal',
    description='LogNormal RTs shifted by a non-decision time',
    parameters=(
        # mu is on the log scale
        ParameterSpec('mu', _normal(0.0, np.exp(1.0)), _normal(0.0, np.exp(0.5))),
        ParameterSpec('sigma', _positive_normal(0.0, 0.5), _normal(0.0, 0.01), POSITIVE),
        ParameterSpec('ndt', _non_decision_prior, None, NON_NEGATIVE),
    ),
))

register_family(ModelFamily(
    name='exgaussian',
    distribution_name='exgaussian',
    description='Ex-Gaussian RTs with condition effects on every parameter',
    parameters=(
        ParameterSpec('mu', _normal(0.0, 1.0), _normal(0.0, 0.3)),
        ParameterSpec('sigma', _positive_normal(0.0, 0.5), _normal(0.0, 0.1), POSITIVE),
        ParameterSpec('tau', _positive_normal(0.0, 0.5), _normal(0.0, 0.1), POSITIVE),
    ),
))

register_family(ModelFamily(
    name='wald',
    distribution_name='shifted_wald',
    description='Shifted Wald (single-boundary diffusion) RTs',
    parameters=(
        ParameterSpec('drift', _positive_normal(1.0, 3.0), _normal(0.0, 1.0), POSITIVE),
        ParameterSpec('threshold', _positive_normal(0.0, 1.0), _normal(0.0, 0.5), POSITIVE),
        ParameterSpec('ndt', _non_decision_prior, _normal(0.0, 0.01), NON_NEGATIVE),
    ),
))


def get_family(name: str) -> ModelFamily:
    """
    Look up a model family by name.

    Raises
    ------
    UnknownFamilyError
        If ``name`` is not registered.
    """
    try:
        return FAMILIES[name]
    except KeyError:
        raise UnknownFamilyError(
            f"Unknown model family '{name}'. Available: {sorted(FAMILIES)}"
        ) from None
