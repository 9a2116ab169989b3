"""
NUTS sampler backend handling for pycogmodels.

PyMC can hand NUTS sampling to several implementations through the
``nuts_sampler`` argument of ``pm.sample``. This module picks one that is
installed and gives the models a single place to call the sampler.
"""

import importlib.util
from typing import Dict, Optional, Tuple

import arviz as az
import pymc as pm

# Backend name -> modules that must be importable
BACKEND_REQUIREMENTS: Dict[str, Tuple[str, ...]] = {
    'nutpie': ('nutpie',),
    'numpyro': ('numpyro', 'jax'),
    'blackjax': ('blackjax', 'jax'),
    'pymc': (),
}

# Order tried by preferred='auto'
AUTO_ORDER = ('nutpie', 'numpyro', 'blackjax', 'pymc')


def is_available(name: str) -> bool:
    """Return True if every module the backend needs can be imported."""
    return all(importlib.util.find_spec(module) is not None
               for module in BACKEND_REQUIREMENTS[name])


def available_backends():
    return [name for name in AUTO_ORDER if is_available(name)]


class SamplerBackend:
    """
    Handles NUTS backend selection and sampling.

    Parameters
    ----------
    preferred : str, default='pymc'
        One of ``BACKEND_REQUIREMENTS`` or ``'auto'`` to take the first
        available backend in ``AUTO_ORDER``. PyMC's own sampler is always
        available.

    Attributes
    ----------
    backend_name : str
        Name passed to ``pm.sample(nuts_sampler=...)``.

    Raises
    ------
    ValueError
        If ``preferred`` is unknown.
    ImportError
        If ``preferred`` is known but not installed.
    """

    def __init__(self, preferred: str = 'pymc'):
        self.preferred = preferred
        self.backend_name = None
        self._initialize_backend()

    def _initialize_backend(self):
        if self.preferred == 'auto':
            # pymc is last in AUTO_ORDER and always importable
            self.backend_name = available_backends()[0]
            return

        if self.preferred not in BACKEND_REQUIREMENTS:
            raise ValueError(
                f"Unknown sampler backend '{self.preferred}'. "
                f"Choose one of {sorted(BACKEND_REQUIREMENTS)} or 'auto'."
            )

        if not is_available(self.preferred):
            modules = ' '.join(BACKEND_REQUIREMENTS[self.preferred])
            raise ImportError(
                f"Sampler backend '{self.preferred}' is not installed.\n"
                f"  pip install {modules}"
            )
        self.backend_name = self.preferred

    def sample(self, model: pm.Model, draws: int = 1000, tune: int = 1000,
               chains: int = 4, cores: Optional[int] = None, random_seed=None,
               **kwargs) -> az.InferenceData:
        """
        Sample from ``model`` with the selected backend.

        Parameters
        ----------
        model : pm.Model
            Model to sample from.
        draws, tune, chains : int
            Passed to ``pm.sample``.
        cores : int, optional
            Parallel chains. Defaults to ``chains``.
        random_seed : int, optional
            Seed for reproducible chains.
        **kwargs
            Additional arguments for ``pm.sample`` (e.g. ``target_accept``).

        Returns
        -------
        arviz.InferenceData
            Posterior samples
        """
        with model:
            return pm.sample(
                draws=draws,
                tune=tune,
                chains=chains,
                cores=cores if cores else chains,
                random_seed=random_seed,
                nuts_sampler=self.backend_name,
                **kwargs
            )

    def __repr__(self):
        return f"SamplerBackend('{self.backend_name}')"
