"""Exceptions raised by rastersample.

All errors derive from RasterSampleError so callers can catch the whole
family. The argument/data errors are also ValueErrors and engine failures are
RuntimeErrors, so code written against the builtin types keeps working.
"""


class RasterSampleError(Exception):
    """Base class for all rastersample errors."""


class InvalidArgument(RasterSampleError, ValueError):
    """A method/type/argument combination violates a precondition."""


class InsufficientData(RasterSampleError, ValueError):
    """The requested sample size exceeds the eligible records or cells."""


class ExternalEngineFailure(RasterSampleError, RuntimeError):
    """A delegated sampling engine failed or could not converge."""
