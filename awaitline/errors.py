class AwaitlineError(Exception):
    """Base class for errors raised by awaitline itself."""


class DeferredPendingError(AwaitlineError):
    """
    Raised when the value of a deferred is read before its timer has fired.
    """

    def __init__(self, delay: float):
        self.delay = delay
        super().__init__(
            f"Deferred value with a delay of {delay:g} units has not resolved yet. "
            "Await it instead of reading `.value` directly."
        )
