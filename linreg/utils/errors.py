# linreg/utils/errors.py
"""
Error taxonomy (FINAL)

Every failure raised by the training core derives from LinRegError.
They are all recoverable: the core never exits the process, the CLI
translates them into an exit code.
"""


class LinRegError(RuntimeError):
    """
    Base class for all linreg failures.
    Should NOT print traceback at the CLI boundary.
    """


class FileIOError(LinRegError, OSError):
    """A data or model file cannot be opened, read or written."""


class FormatError(LinRegError):
    """File content does not match the expected structure or version."""


class DimensionError(LinRegError):
    """Declared or inferred N/T are inconsistent across stages."""


class DimensionMismatchError(DimensionError):
    """A vector presented at inference / scaling time has the wrong length."""


class MissingDimensionsError(LinRegError):
    """CSV data loaded without N/T declared first."""


class InvalidConfigError(LinRegError):
    """Non-sensical training configuration."""


class InsufficientDataError(LinRegError):
    """Too few samples to form the requested partitions."""


class NumericalDivergenceError(LinRegError):
    """Loss became non-finite during optimization."""


class NotFittedError(LinRegError):
    """A scaler was used before fit()."""
