# AegisSim Exceptions
# Error taxonomy shared by the simulator, the analyzer and the batch runner.

from typing import Any, Optional


class AegisSimError(Exception):
    """Base class for every error raised by AegisSim."""


class ConfigurationError(AegisSimError, ValueError):
    """An unknown catalog key, an invalid parameter or an unreadable config file.

    Raised before any simulation step runs. Retrying with the same input
    cannot succeed.
    """


class InsufficientDataError(AegisSimError, ValueError):
    """The analyzer was handed a trajectory it cannot summarise.

    Covers empty trajectories, non-finite samples and a zero mean (which
    would make the coefficient of variation undefined).
    """


class SimulationCancelledError(AegisSimError):
    """A running simulation observed a cancellation request.

    Attributes:
        partial_result (Optional[Any]): The `SimulationResult` assembled
            from the steps completed before cancellation, if any.
    """
    def __init__(self, message: str, partial_result: Optional[Any] = None):
        super().__init__(message)
        self.partial_result = partial_result
