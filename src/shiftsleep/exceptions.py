"""Custom exceptions for shiftsleep.

Data-quality problems in the samples never raise; these cover contract
violations by the caller and internal guards in strict mode.
"""

from shiftsleep import config

logger = config.get_logger()


class LoggedException(Exception):
    """Base class that automatically logs messages."""

    def __init__(self, message: str) -> None:
        """Initialize a new instance of the LoggedException class.

        Args:
            message: The message to display.
        """
        logger.error(message)
        super().__init__(message)


class InvalidSamplesError(LoggedException, TypeError):
    """The sample collection itself is missing or of the wrong type."""

    pass


class InvalidDateError(LoggedException, ValueError):
    """A reference date could not be parsed."""

    pass


class InvariantViolation(LoggedException):
    """An internal invariant failed while strict checking is enabled."""

    pass
