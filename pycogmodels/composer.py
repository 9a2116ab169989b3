"""
Constrained parameter composition.

Every parameter of a reaction-time model is written as
``intercept + slope * predictor`` and evaluated per observation. Some
parameters only make sense on part of the real line (a scale must be
positive, a non-decision time cannot be negative). Instead of raising when a
candidate draw leaves that region, the composer returns an ``Infeasible``
result, which the likelihood turns into ``-inf`` so the sampler simply
treats the draw as impossible and moves on.

Examples
--------
>>> from pycogmodels.composer import ParameterComposer, POSITIVE
>>> composer = ParameterComposer({'mu': None, 'sigma': POSITIVE})
>>> composer.compose({'mu': (0.3, 0.1), 'sigma': (0.14, -0.15)}, predictor=1).reason
'sigma = -0.01 violates sigma > 0'
>>> composer.compose({'mu': (0.3, 0.1), 'sigma': (0.5, 0.1)}, predictor=0)
Feasible(value={'mu': 0.3, 'sigma': 0.5})
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import numpy as np
import pytensor.tensor as pt


@dataclass(frozen=True)
class Constraint:
    """
    Lower-bound domain constraint on a composed parameter.

    Parameters
    ----------
    lower : float, default=0.0
        Bound the composed value is compared against.
    inclusive : bool, default=False
        If False the value must be strictly greater than ``lower`` (a value
        exactly at the bound is a violation). If True the bound itself is
        admissible.
    """

    lower: float = 0.0
    inclusive: bool = False

    def admits(self, value):
        """Element-wise test; works on floats, arrays and PyTensor variables."""
        if self.inclusive:
            return value >= self.lower
        return value > self.lower

    @property
    def fallback(self) -> float:
        """An admissible value used to keep likelihood graphs finite."""
        return self.lower if self.inclusive else self.lower + 1.0

    def describe(self, name: str = 'value') -> str:
        op = '>=' if self.inclusive else '>'
        return f"{name} {op} {self.lower:g}"


POSITIVE = Constraint(0.0, inclusive=False)
NON_NEGATIVE = Constraint(0.0, inclusive=True)


@dataclass(frozen=True)
class Feasible:
    """Composition succeeded; ``value`` maps parameter name to composed value."""

    value: Any

    @property
    def feasible(self) -> bool:
        return True


@dataclass(frozen=True)
class Infeasible:
    """
    Composition produced a value outside a parameter's domain.

    ``index`` is the first violating observation for vectorised composition
    and None for the scalar path.
    """

    parameter: str
    value: float
    reason: str
    index: Optional[int] = None

    @property
    def feasible(self) -> bool:
        return False

    @property
    def log_likelihood(self) -> float:
        return -np.inf


CompositionResult = Union[Feasible, Infeasible]
Coefficients = Mapping[str, Tuple[Any, Any]]


class ParameterComposer:
    """
    Compose ``intercept + slope * predictor`` for a set of named parameters.

    Parameters
    ----------
    constraints : mapping
        Parameter name to ``Constraint`` (or None for an unconstrained
        parameter). The mapping order is the order in which violations are
        checked and reported.
    """

    def __init__(self, constraints: Mapping[str, Optional[Constraint]]):
        self.constraints = dict(constraints)

    @property
    def names(self):
        return tuple(self.constraints)

    def _check_names(self, coefficients: Coefficients):
        missing = [name for name in self.constraints if name not in coefficients]
        if missing:
            raise ValueError(f"Missing coefficients for parameters: {missing}")

    def compose(self, coefficients: Coefficients, predictor: float) -> CompositionResult:
        """
        Compose scalar parameter values for one observation.

        Parameters
        ----------
        coefficients : mapping
            Parameter name to ``(intercept, slope)``.
        predictor : float
            Predictor value of the observation.

        Returns
        -------
        Feasible or Infeasible
            ``Feasible`` holding a dict of composed floats, or the first
            constraint violation in declaration order.
        """
        self._check_names(coefficients)
        composed = {}
        for name, constraint in self.constraints.items():
            intercept, slope = coefficients[name]
            value = float(intercept + slope * predictor)
            if constraint is not None and not constraint.admits(value):
                return Infeasible(
                    parameter=name,
                    value=value,
                    reason=f"{name} = {value:g} violates {constraint.describe(name)}",
                )
            composed[name] = value
        return Feasible(composed)

    def compose_all(self, coefficients: Coefficients, predictors) -> CompositionResult:
        """
        Compose parameter values for every observation at once.

        Intercepts and slopes may be scalars or arrays broadcastable against
        ``predictors`` (e.g. participant-level intercepts indexed per trial).
        A single violating observation makes the whole draw infeasible.
        """
        self._check_names(coefficients)
        predictors = np.asarray(predictors, dtype=float)
        composed = {}
        for name, constraint in self.constraints.items():
            intercept, slope = coefficients[name]
            value = np.asarray(intercept, dtype=float) + np.asarray(slope, dtype=float) * predictors
            if constraint is not None:
                bad = ~constraint.admits(value)
                if np.any(bad):
                    index = int(np.flatnonzero(bad)[0])
                    offending = float(value.ravel()[index])
                    return Infeasible(
                        parameter=name,
                        value=offending,
                        reason=(f"{name} = {offending:g} at observation {index} "
                                f"violates {constraint.describe(name)}"),
                        index=index,
                    )
            composed[name] = value
        return Feasible(composed)

    def feasible_mask(self, composed: Mapping[str, Any]) -> np.ndarray:
        """Element-wise mask of entries where every constrained parameter is admissible."""
        mask = None
        for name, constraint in self.constraints.items():
            if constraint is None:
                continue
            ok = np.asarray(constraint.admits(np.asarray(composed[name])))
            mask = ok if mask is None else mask & ok
        if mask is None:
            shapes = [np.shape(composed[name]) for name in self.constraints]
            return np.ones(np.broadcast_shapes(*shapes), dtype=bool)
        return mask

    def compose_tensor(self, coefficients: Coefficients, predictor) -> Tuple[Dict[str, Any], Any]:
        """
        Symbolic composition for use inside a PyMC model.

        Returns
        -------
        composed : dict
            Parameter name to PyTensor expression.
        feasible : TensorVariable
            Scalar boolean, True when every constrained parameter is admissible
            for every observation.
        """
        self._check_names(coefficients)
        composed = {}
        checks = []
        for name, constraint in self.constraints.items():
            intercept, slope = coefficients[name]
            value = pt.as_tensor_variable(intercept + slope * predictor)
            composed[name] = value
            if constraint is not None:
                checks.append(pt.all(constraint.admits(value)))
        if not checks:
            return composed, pt.as_tensor_variable(True)
        return composed, pt.all(pt.stack(checks))

    def guard(self, composed: Mapping[str, Any], feasible) -> Dict[str, Any]:
        """
        Swap constrained tensors for an admissible fallback when infeasible.

        The density is still evaluated on the fallback branch of the graph, so
        without this an infeasible draw would produce NaN values and gradients
        even though the final log-probability is switched to ``-inf``.
        """
        guarded = {}
        for name, value in composed.items():
            constraint = self.constraints.get(name)
            if constraint is None:
                guarded[name] = value
            else:
                guarded[name] = pt.switch(feasible, value, constraint.fallback)
        return guarded

    @staticmethod
    def log_likelihood(result: CompositionResult, logpdf: Callable[..., Any]) -> float:
        """
        Soft-reject log-likelihood of a composition result.

        ``logpdf`` is called with the composed values as keyword arguments
        only when the result is feasible.
        """
        if not result.feasible:
            return -np.inf
        return float(np.sum(logpdf(**result.value)))
