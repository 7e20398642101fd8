"""
Dispatcher exceptions.

Only contract violations live here. A simulated job failure is NOT an
exception: it is a normal attempt outcome (FailReason.SIMULATED_FAILURE)
that the dispatch loop resolves by retrying or finalizing the job.
"""


class DispatcherError(Exception):
    """Base exception for dispatcher errors."""
    pass


class ConfigurationError(DispatcherError):
    """Invalid run parameters (negative job count, non-positive stddev, ...)."""
    pass


class QueueUnderflowError(DispatcherError):
    """pop_max() on an empty queue. The dispatch loop checks size first, so this is a bug."""

    def __init__(self):
        super().__init__("pop_max() called on an empty scheduling queue")
