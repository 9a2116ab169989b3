import matplotlib

matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def rt_frame():
    """Small speed/accuracy dataset with two participants and some errors."""
    rng = np.random.default_rng(0)
    n = 40
    return pd.DataFrame({
        'Participant': np.repeat([1, 2], n // 2),
        'Condition': np.tile(['Speed', 'Accuracy'], n // 2),
        'RT': 0.2 + rng.wald(0.4, 1.0, size=n),
        'Error': np.arange(n) % 10 == 0,
        'Frequency': 'High',
    })


@pytest.fixture
def rt_csv(tmp_path, rt_frame):
    path = tmp_path / 'rt.csv'
    rt_frame.to_csv(path, index=False)
    return str(path)
