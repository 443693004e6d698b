"""Exceptions raised by resolution models and the integration engine."""


class ResolutionModelError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(ResolutionModelError, ValueError):
    """
    A model was assembled from inconsistent parts.

    Raised at construction time, e.g. for a coefficient/model count mismatch,
    components with different convolution variables, or a basis function
    whose primary variable is not the convolution variable.
    """


class ProgrammingError(ResolutionModelError, RuntimeError):
    """
    A caller broke an API contract, e.g. by passing an integration code
    that was never negotiated.
    """
