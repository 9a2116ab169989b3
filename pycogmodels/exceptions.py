"""
Exception classes for pycogmodels.

All package-specific errors derive from PyCogModelsError so callers can catch
them with a single except clause. Domain violations of composed parameters are
not errors: they are reported as ``Infeasible`` results by the composer.
"""


class PyCogModelsError(Exception):
    """Base class for all exceptions raised by pycogmodels."""


class DataLoadError(PyCogModelsError):
    """
    Raised when a dataset cannot be fetched or parsed.

    The underlying network, IO or parser error is chained as ``__cause__``.
    """


class UnknownFamilyError(PyCogModelsError, ValueError):
    """Raised when a model family or distribution name is not registered."""
