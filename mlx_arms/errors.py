"""Exception types raised by the ARMS sampler."""


class ARMSError(Exception):
    """Base class for all sampler errors."""


class ConfigurationError(ARMSError, ValueError):
    """Malformed initial points, bounds, capacity or convexity."""


class EnvelopeViolation(ARMSError):
    """The envelope is inconsistent with a log-concave target.

    Raised when a chord intersection or an insertion detects a convexity
    violation while the Metropolis correction is disabled. Enable it
    (``metropolis=True``) for targets that are not log-concave.
    """


class NumericGuardTripped(ARMSError, ArithmeticError):
    """A computed abscissa fell outside the interval it was derived from."""


class SamplerExhausted(ARMSError):
    """The draw loop reached its retry cap without accepting a point."""

    def __init__(self, attempts):
        super().__init__(
            f"no point accepted after {attempts} attempts; "
            "check the target density or raise max_attempts"
        )
        self.attempts = attempts
