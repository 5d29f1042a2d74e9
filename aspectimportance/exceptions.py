"""Errors and warnings raised while computing aspect importance."""


class AspectImportanceError(Exception):
    """Base class for all errors of this package."""


class InvalidParameter(AspectImportanceError, ValueError):
    """A numeric or categorical argument is out of its allowed range."""


class SchemaMismatch(AspectImportanceError, ValueError):
    """Data and observation have no column in common."""


class InvalidAspectDefinition(AspectImportanceError, ValueError):
    """An aspect refers to a variable outside the common columns."""


class PredictionFailure(AspectImportanceError):
    """The supplied predict function failed or returned unusable scores.

    The error raised by the predict function, if any, is available as
    ``original`` and as ``__cause__``.
    """

    def __init__(self, message, original=None):
        super().__init__(message)
        self.original = original


class DegenerateFit(UserWarning):
    """Least squares could not identify the coefficient of some aspects."""


class TargetInDataWarning(UserWarning):
    """The background data seems to contain the target variable."""
