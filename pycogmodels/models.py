"""
Reaction-time models using PyMC.

Every model in this module has the same shape: a distribution family whose
parameters are ``intercept + slope * condition``, priors on intercepts and
slopes, and a likelihood that is ``-inf`` for any draw whose composed
parameters leave their domain (negative scale, negative drift...). The
likelihood is added with ``pm.Potential`` so the sampler sees infeasible draws
as impossible rather than failing on them.
"""

from typing import Dict, Optional, Union

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pymc as pm
import pytensor.tensor as pt

from .backends import SamplerBackend
from .data import TrialData, add_condition_indicator, filter_trials, to_trial_data
from .families import ModelFamily, get_family
from .plotting import plot_density_overlay
from .summary import NoPosterior, PosteriorSummary, predictive_draws, summarize_posterior


class RTModel:
    """
    Bayesian reaction-time model with condition effects.

    Parameters
    ----------
    family : str or ModelFamily, default='gaussian'
        One of 'gaussian', 'scaled_gaussian', 'shifted_lognormal',
        'exgaussian', 'wald'.
    use_hierarchical : bool, default=False
        Add participant-level offsets to the intercept of the first
        (location) parameter: mu, or drift for the Wald model.
    condition_column : str, default='Condition'
        Column holding the condition label.
    condition_level : str, default='Accuracy'
        Label coded as 1 in the binary predictor.

    Examples
    --------
    >>> from pycogmodels import RTModel, load_data
    >>>
    >>> df = load_data()  # Wagenmakers (2008) speed/accuracy data
    >>>
    >>> # Check priors before fitting
    >>> model = RTModel(family='wald')
    >>> model.prepare_data(df)
    >>> model.build_model()
    >>> model.prior_predictive_check()
    >>>
    >>> # Fit
    >>> trace = model.fit(df, draws=1000, tune=1000)
    >>>
    >>> # Results
    >>> model.summary()
    >>> model.posterior_predictive_check()
    """

    def __init__(self, family: Union[str, ModelFamily] = 'gaussian',
                 use_hierarchical: bool = False, condition_column: str = 'Condition',
                 condition_level: str = 'Accuracy'):
        """Initialize the reaction-time model."""
        self.family = get_family(family) if isinstance(family, str) else family
        self.use_hierarchical = use_hierarchical
        self.condition_column = condition_column
        self.condition_level = condition_level
        self.composer = self.family.composer()
        self.model = None
        self.trace = None
        self.data = None

    def prepare_data(self, data_df: pd.DataFrame, drop_errors: bool = True,
                     min_rt: Optional[float] = None, max_rt: Optional[float] = None) -> TrialData:
        """
        Prepare data for the PyMC model.

        Parameters
        ----------
        data_df : pd.DataFrame
            DataFrame with columns: RT, Condition, Error (optional),
            Participant (optional)
        drop_errors : bool, default=True
            Drop error trials if an 'Error' column is present.
        min_rt, max_rt : float, optional
            Keep only RTs strictly inside these bounds.

        Returns
        -------
        TrialData
            Frozen trial arrays
        """
        error_col = 'Error' if 'Error' in data_df.columns else None
        df = filter_trials(data_df, error_col=error_col, drop_errors=drop_errors,
                           min_rt=min_rt, max_rt=max_rt)
        df = add_condition_indicator(df, column=self.condition_column,
                                     level=self.condition_level, name='_condition')
        participant_col = 'Participant' if self.use_hierarchical else None

        self.data = to_trial_data(df, predictor='_condition', participant_col=participant_col)
        return self.data

    def _coefficients(self) -> Dict[str, tuple]:
        """Create intercept/slope random variables; must run inside the model context."""
        coefficients = {}
        for i, spec in enumerate(self.family.parameters):
            intercept = spec.intercept_prior(spec.intercept_name, self.data)
            if self.use_hierarchical and i == 0:
                # Non-centered participant offsets
                sd = pm.HalfNormal(f'{spec.name}_participant_sd', sigma=0.3)
                z = pm.Normal(f'{spec.name}_participant_z', mu=0, sigma=1, dims='participant')
                intercept = intercept + sd * z[self.data.participant_idx]
            if spec.slope_prior is not None:
                slope = spec.slope_prior(spec.slope_name, self.data)
            else:
                slope = 0.0
            coefficients[spec.name] = (intercept, slope)
        return coefficients

    def build_model(self) -> pm.Model:
        """
        Build the PyMC model.

        Returns
        -------
        pm.Model
            PyMC model object
        """
        if self.data is None:
            raise ValueError("Must prepare data first with prepare_data()")

        coords = {'participant': np.arange(self.data.n_participants)}
        with pm.Model(coords=coords) as model:
            condition = pm.Data('condition', self.data.condition)
            rt = pm.Data('rt', self.data.rt)

            coefficients = self._coefficients()
            composed, feasible = self.composer.compose_tensor(coefficients, condition)
            params = self.composer.guard(composed, feasible)

            # Soft reject: infeasible draws get zero likelihood
            log_lik = self.family.distribution.pymc_logp(rt, **params)
            pm.Potential('obs', pt.switch(feasible, pt.sum(log_lik), -np.inf))

        self.model = model
        return model

    def fit(self, data_df: pd.DataFrame, draws: int = 1000, tune: int = 1000,
            chains: int = 4, cores: Optional[int] = None, nuts_sampler: str = 'pymc',
            random_seed: Optional[int] = None, **kwargs) -> az.InferenceData:
        """
        Fit the model with NUTS.

        Parameters
        ----------
        data_df : pd.DataFrame
            Data with required columns
        draws : int, default=1000
            Number of samples to draw
        tune : int, default=1000
            Number of tuning steps
        chains : int, default=4
            Number of MCMC chains
        cores : int, optional
            Number of cores for parallel sampling
        nuts_sampler : str, default='pymc'
            Sampler backend, see ``backends.SamplerBackend``
        random_seed : int, optional
            Seed for reproducible chains
        **kwargs
            Additional arguments for pm.sample()

        Returns
        -------
        arviz.InferenceData
            Posterior samples
        """
        print("Preparing data...")
        self.prepare_data(data_df)

        print(f"Building PyMC model ({self.family.name})...")
        self.build_model()

        backend = SamplerBackend(nuts_sampler)
        print(f"Sampling {chains} chains with {draws} draws each ({backend.backend_name})...")
        self.trace = backend.sample(self.model, draws=draws, tune=tune, chains=chains,
                                    cores=cores, random_seed=random_seed, **kwargs)

        print("✓ Sampling complete!")
        return self.trace

    def summary(self, hdi_prob: float = 0.95) -> Union[PosteriorSummary, NoPosterior]:
        """
        Print and return credible intervals of the population-level parameters.

        Returns
        -------
        PosteriorSummary or NoPosterior
            ``NoPosterior`` if the model has not been fitted.
        """
        if self.trace is None:
            result = NoPosterior("model has not been fitted yet")
        else:
            result = summarize_posterior(self.trace, var_names=self.family.var_names,
                                         hdi_prob=hdi_prob)
        print(result)
        return result

    def diagnostics(self) -> pd.DataFrame:
        """Convergence diagnostics (r_hat, effective sample size) from ArviZ."""
        if self.trace is None:
            raise ValueError("Model has not been fitted yet.")
        return az.summary(self.trace, var_names=self.family.var_names, kind='diagnostics')

    def plot_traces(self, var_names: Optional[list] = None, **kwargs):
        """
        Plot MCMC traces.

        Parameters
        ----------
        var_names : list, optional
            Variables to plot. If None, plots the population-level parameters.
        **kwargs
            Additional arguments for az.plot_trace()
        """
        if self.trace is None:
            print("Model has not been fitted yet.")
            return

        az.plot_trace(self.trace, var_names=var_names or self.family.var_names, **kwargs)
        plt.tight_layout()
        plt.show()

    def plot_posterior(self, var_names: Optional[list] = None, **kwargs):
        """
        Plot posterior distributions.

        Parameters
        ----------
        var_names : list, optional
            Variables to plot
        **kwargs
            Additional arguments for az.plot_posterior()
        """
        if self.trace is None:
            print("Model has not been fitted yet.")
            return

        az.plot_posterior(self.trace, var_names=var_names or self.family.var_names, **kwargs)
        plt.tight_layout()
        plt.show()

    def save_results(self, filepath: str):
        """
        Save results to NetCDF format.

        Parameters
        ----------
        filepath : str
            Output file path (.nc)
        """
        if self.trace is None:
            raise ValueError("Model has not been fitted yet.")

        self.trace.to_netcdf(filepath)
        print(f"Results saved to: {filepath}")

    def load_results(self, filepath: str) -> az.InferenceData:
        """
        Load results from NetCDF format.

        Parameters
        ----------
        filepath : str
            Input file path (.nc)

        Returns
        -------
        arviz.InferenceData
            Loaded posterior samples
        """
        self.trace = az.from_netcdf(filepath)
        print(f"Results loaded from: {filepath}")
        return self.trace

    def _observed_by_condition(self, predictor_values):
        return {value: self.data.rt[self.data.condition == value] for value in predictor_values}

    def prior_predictive_check(self, samples: int = 500, n_draws: int = 50,
                               random_seed: Optional[int] = None, **kwargs):
        """
        Perform prior predictive checks to validate prior choices.

        Draws parameters from the priors, simulates RTs per condition from
        the feasible draws and plots them against the observed RTs.

        Parameters
        ----------
        samples : int, default=500
            Number of prior samples to draw
        n_draws : int, default=50
            Prior draws used to simulate RT datasets
        random_seed : int, optional
        **kwargs
            Additional arguments for pm.sample_prior_predictive()

        Returns
        -------
        dict
            Predictor value -> simulated RTs, shape (draws, n_obs)
        """
        if self.model is None:
            raise ValueError("Model has not been built yet. Call prepare_data() and build_model() first.")

        print(f"Sampling {samples} prior predictive samples...")
        with self.model:
            prior = pm.sample_prior_predictive(draws=samples, random_seed=random_seed, **kwargs)

        prior_draws = {name: prior.prior[name].values for name in self.family.var_names}
        predictor_values = np.unique(self.data.condition)
        simulated = predictive_draws(self.family, prior_draws, predictor_values,
                                     n_obs=self.data.n_obs, n_draws=n_draws,
                                     random_seed=random_seed)

        ax = plot_density_overlay(self._observed_by_condition(predictor_values), simulated)
        ax.set_title(f'Prior Predictive: {self.family.name}')
        plt.tight_layout()
        plt.show()

        print("✓ Prior predictive check complete!")
        return simulated

    def posterior_predictive_check(self, n_draws: int = 100, random_seed: Optional[int] = None):
        """
        Perform posterior predictive checks.

        Simulates RT datasets from posterior draws (population-level
        parameters) and overlays their densities on the observed RTs.

        Parameters
        ----------
        n_draws : int, default=100
            Number of posterior draws to simulate from
        random_seed : int, optional

        Returns
        -------
        dict
            Predictor value -> simulated RTs, shape (draws, n_obs)
        """
        if self.trace is None:
            raise ValueError("Model has not been fitted yet. Call fit() first.")
        if self.data is None:
            raise ValueError("Must prepare data first with prepare_data()")

        print("Generating posterior predictive samples...")
        predictor_values = np.unique(self.data.condition)
        simulated = predictive_draws(self.family, self.trace, predictor_values,
                                     n_obs=self.data.n_obs, n_draws=n_draws,
                                     random_seed=random_seed)

        ax = plot_density_overlay(self._observed_by_condition(predictor_values), simulated)
        ax.set_title(f'Posterior Predictive: {self.family.name}')
        plt.tight_layout()
        plt.show()

        print("✓ Posterior predictive check complete!")
        return simulated
