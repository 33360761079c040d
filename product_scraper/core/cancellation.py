import threading

from product_scraper.core.errors import OperationCancelled


class CancellationToken:
    """Cooperative cancellation shared by every fetch of one operation.

    Fetchers check the token before a request, while waiting and between
    response chunks. Once cancelled a token stays cancelled; owners hand out
    a fresh one instead of clearing it.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation was aborted")

    def wait(self, seconds: float) -> None:
        """Sleep for up to ``seconds``, raising as soon as the token is cancelled."""
        if self._event.wait(seconds):
            raise OperationCancelled("Operation was aborted")
