"""
Utility functions for pycogmodels.

This module provides helper functions for setting up the environment,
especially for HPC systems where the home directory or /tmp may not be
writable for the PyTensor compilation cache.
"""

import importlib.util
import os
import tempfile
import warnings
from importlib import metadata

from .backends import BACKEND_REQUIREMENTS, is_available


def _is_writable(directory):
    test_file = os.path.join(directory, '.pycogmodels_test')
    try:
        with open(test_file, 'w') as f:
            f.write('test')
        os.remove(test_file)
        return True
    except OSError:
        return False


def _with_compiledir(flags, compiledir):
    kept = [flag for flag in flags.split(',') if flag and not flag.startswith('base_compiledir=')]
    return ','.join(kept + [f'base_compiledir={compiledir}'])


def setup_hpc_environment(temp_dir=None):
    """
    Set up environment for HPC systems.

    Points temporary files and the PyTensor compilation directory to
    ``temp_dir``. PyTensor reads its flags once, at import, so the compile
    directory applies to processes started afterwards (including the worker
    processes of parallel chains); call this before importing pycogmodels for
    it to apply to the current process as well.

    Parameters
    ----------
    temp_dir : str, optional
        Custom temporary directory path. If None, uses ~/tmp

    Returns
    -------
    str
        Path to the temporary directory being used

    Examples
    --------
    >>> from pycogmodels.utils import setup_hpc_environment
    >>> setup_hpc_environment('/scratch/user/tmp')
    Using temporary directory: /scratch/user/tmp
    '/scratch/user/tmp'
    """
    if temp_dir is None:
        temp_dir = os.path.expanduser('~/tmp')
    temp_dir = str(temp_dir)

    os.makedirs(temp_dir, exist_ok=True)
    compiledir = os.path.join(temp_dir, 'pytensor')

    os.environ['TMPDIR'] = temp_dir
    os.environ['TEMP'] = temp_dir
    os.environ['TMP'] = temp_dir
    os.environ['PYTENSOR_FLAGS'] = _with_compiledir(os.environ.get('PYTENSOR_FLAGS', ''), compiledir)
    tempfile.tempdir = temp_dir

    if _is_writable(temp_dir):
        print(f"Using temporary directory: {temp_dir}")
    else:
        warnings.warn(
            f"Could not write to temporary directory {temp_dir}. "
            "You may encounter permission errors during model compilation."
        )
    return temp_dir


def _version(package):
    try:
        return metadata.version(package)
    except metadata.PackageNotFoundError:
        return 'Not installed'


def check_environment():
    """
    Check if the environment is properly configured.

    Returns
    -------
    dict
        Dictionary with environment information

    Examples
    --------
    >>> from pycogmodels.utils import check_environment
    >>> info = check_environment()
    >>> info['pymc_version']
    '5.16.2'
    """
    info = {
        'temp_dir': tempfile.gettempdir(),
        'home_dir': os.path.expanduser('~'),
        'cwd': os.getcwd(),
        'pymc_version': _version('pymc'),
        'pytensor_version': _version('pytensor'),
        'arviz_version': _version('arviz'),
    }

    if importlib.util.find_spec('pytensor') is not None:
        import pytensor
        info['compiledir'] = pytensor.config.compiledir
    else:
        info['compiledir'] = 'Not available'

    info['samplers'] = {name: is_available(name) for name in BACKEND_REQUIREMENTS}
    info['temp_writable'] = _is_writable(info['temp_dir'])
    return info


def print_environment_info():
    """
    Print detailed environment information.

    Examples
    --------
    >>> from pycogmodels.utils import print_environment_info
    >>> print_environment_info()
    Environment Information:
    ==================================================
    Temporary directory: /home/user/tmp
    ...
    """
    info = check_environment()

    print("Environment Information:")
    print("=" * 50)
    print(f"Temporary directory: {info['temp_dir']}")
    print(f"  Writable: {'Yes' if info['temp_writable'] else 'No'}")
    print(f"Home directory: {info['home_dir']}")
    print(f"Working directory: {info['cwd']}")
    print(f"PyTensor compile directory: {info['compiledir']}")
    print()
    print("Libraries:")
    print(f"  PyMC: {info['pymc_version']}")
    print(f"  PyTensor: {info['pytensor_version']}")
    print(f"  ArviZ: {info['arviz_version']}")
    print()
    print("NUTS samplers:")
    for name, available in info['samplers'].items():
        print(f"  {name}: {'Yes' if available else 'No'}")
    print()

    if not info['temp_writable']:
        print("WARNING: Temporary directory is not writable!")
        print("  Run: from pycogmodels.utils import setup_hpc_environment")
        print("       setup_hpc_environment()")
        print()
