"""
pycogmodels: Bayesian cognitive models of reaction times.

This package provides the reaction-time models of the "Cognitive Models"
book as reusable PyMC models. Every distribution parameter is written as
``intercept + slope * condition`` and checked against its domain; draws that
would give a negative scale, drift or non-decision time are soft-rejected
(zero likelihood) instead of raising.

Main Classes
------------
RTModel : Bayesian RT model for one of the families below
ParameterComposer : Constrained intercept + slope composition

Families
--------
- gaussian, scaled_gaussian : Normal RTs, condition on mean (and spread)
- shifted_lognormal : LogNormal RTs plus a non-decision time
- exgaussian : Gaussian plus exponential tail
- wald : Shifted Wald (single-boundary evidence accumulation)

Examples
--------
>>> from pycogmodels import RTModel, load_data
>>>
>>> # Speed/accuracy data (must have: RT, Condition; optionally Error, Participant)
>>> data = load_data()
>>>
>>> model = RTModel(family='exgaussian')
>>> trace = model.fit(data, draws=1000, tune=1000)
>>>
>>> model.summary()
>>> model.posterior_predictive_check()
"""

from .composer import (
    NON_NEGATIVE,
    POSITIVE,
    Constraint,
    Feasible,
    Infeasible,
    ParameterComposer,
)
from .data import TrialData, load_data, load_trials
from .distributions import get_distribution
from .exceptions import DataLoadError, PyCogModelsError, UnknownFamilyError
from .families import FAMILIES, get_family
from .models import RTModel
from .summary import NoPosterior, PosteriorSummary, predictive_draws, summarize_posterior

__version__ = "0.1.0"

__all__ = [
    "RTModel",
    "ParameterComposer",
    "Constraint",
    "POSITIVE",
    "NON_NEGATIVE",
    "Feasible",
    "Infeasible",
    "TrialData",
    "load_data",
    "load_trials",
    "get_distribution",
    "get_family",
    "FAMILIES",
    "summarize_posterior",
    "predictive_draws",
    "PosteriorSummary",
    "NoPosterior",
    "PyCogModelsError",
    "DataLoadError",
    "UnknownFamilyError",
]
