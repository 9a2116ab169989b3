"""
Loading and preparing reaction-time datasets.

Every step returns a new object: filtering and derived columns never mutate
the frame they are given, and ``TrialData`` freezes the arrays a model is
built from.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from .exceptions import DataLoadError

# Speed/accuracy instruction data (Wagenmakers et al., 2008) used across the book
WAGENMAKERS_URL = (
    "https://raw.githubusercontent.com/DominiqueMakowski/CognitiveModels/"
    "main/data/wagenmakers2008.csv"
)

_TRUE_STRINGS = {'true', 't', 'yes', '1'}


@dataclass(frozen=True)
class TrialData:
    """
    Model-ready trials.

    Attributes
    ----------
    rt : np.ndarray
        Reaction times in seconds.
    condition : np.ndarray
        Predictor value per trial (0/1 for a binary condition).
    participant_idx : np.ndarray
        Integer participant index per trial.
    participants : tuple
        Participant labels, position ``i`` is index ``i``.
    """

    rt: np.ndarray
    condition: np.ndarray
    participant_idx: np.ndarray
    participants: Tuple = ()

    def __post_init__(self):
        for field in ('rt', 'condition', 'participant_idx'):
            array = np.array(getattr(self, field))
            array.setflags(write=False)
            object.__setattr__(self, field, array)
        if not (len(self.rt) == len(self.condition) == len(self.participant_idx)):
            raise ValueError("rt, condition and participant_idx must have equal length")

    @property
    def n_obs(self) -> int:
        return len(self.rt)

    @property
    def n_participants(self) -> int:
        return max(len(self.participants), 1)

    @property
    def min_rt(self) -> float:
        return float(self.rt.min())


def load_data(url: str = WAGENMAKERS_URL, **read_csv_kwargs) -> pd.DataFrame:
    """
    Fetch a CSV file from a URL or local path.

    Parameters
    ----------
    url : str
        HTTP(S) URL or filesystem path. Defaults to the Wagenmakers (2008)
        dataset.
    **read_csv_kwargs
        Forwarded to ``pandas.read_csv``.

    Returns
    -------
    pd.DataFrame

    Raises
    ------
    DataLoadError
        If the file cannot be fetched or parsed. There is no retry.
    """
    try:
        return pd.read_csv(url, **read_csv_kwargs)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataLoadError(f"Could not load data from {url}: {e}") from e


def _as_bool(series: pd.Series) -> pd.Series:
    if pd.api.types.is_bool_dtype(series):
        return series.astype(bool)
    if pd.api.types.is_numeric_dtype(series):
        return series.fillna(0).astype(bool)
    return series.astype(str).str.strip().str.lower().isin(_TRUE_STRINGS)


def filter_trials(df: pd.DataFrame, rt_col: str = 'RT', error_col: Optional[str] = 'Error',
                  drop_errors: bool = True, min_rt: Optional[float] = None,
                  max_rt: Optional[float] = None) -> pd.DataFrame:
    """
    Drop error trials and RTs outside ``(min_rt, max_rt)``.

    Returns a new frame; ``df`` is left untouched.
    """
    required = [rt_col] + ([error_col] if drop_errors and error_col else [])
    missing_cols = [col for col in required if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns: {missing_cols}")

    keep = df[rt_col].notna() & (df[rt_col] > 0)
    if drop_errors and error_col:
        keep &= ~_as_bool(df[error_col])
    if min_rt is not None:
        keep &= df[rt_col] > min_rt
    if max_rt is not None:
        keep &= df[rt_col] < max_rt
    return df.loc[keep].reset_index(drop=True)


def add_condition_indicator(df: pd.DataFrame, column: str = 'Condition',
                            level: str = 'Accuracy', name: Optional[str] = None) -> pd.DataFrame:
    """
    Add a 0/1 column that is 1 where ``df[column] == level``.

    The new column is called ``name`` (default: ``level``).
    """
    if column not in df.columns:
        raise ValueError(f"Missing required columns: {[column]}")
    return df.assign(**{name or level: (df[column] == level).astype(int)})


def to_trial_data(df: pd.DataFrame, rt_col: str = 'RT', predictor: str = 'Accuracy',
                  participant_col: Optional[str] = 'Participant') -> TrialData:
    """
    Freeze the columns a model needs into a ``TrialData``.

    Without a participant column all trials are assigned to one participant.
    """
    required = [rt_col, predictor]
    missing_cols = [col for col in required if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns: {missing_cols}")
    if len(df) == 0:
        raise ValueError("No valid trials after filtering")

    if participant_col and participant_col in df.columns:
        participants = tuple(sorted(df[participant_col].unique()))
        subject_map = {subj: i for i, subj in enumerate(participants)}
        participant_idx = df[participant_col].map(subject_map).to_numpy(dtype=int)
    else:
        participants = ()
        participant_idx = np.zeros(len(df), dtype=int)

    return TrialData(
        rt=df[rt_col].to_numpy(dtype=float),
        condition=df[predictor].to_numpy(dtype=float),
        participant_idx=participant_idx,
        participants=participants,
    )


def load_trials(url: str = WAGENMAKERS_URL, condition_column: str = 'Condition',
                condition_level: str = 'Accuracy', drop_errors: bool = True,
                min_rt: Optional[float] = None, max_rt: Optional[float] = None) -> TrialData:
    """Load, filter and freeze a dataset in one call."""
    df = load_data(url)
    df = filter_trials(df, drop_errors=drop_errors, min_rt=min_rt, max_rt=max_rt)
    df = add_condition_indicator(df, column=condition_column, level=condition_level)
    return to_trial_data(df, predictor=condition_level)
