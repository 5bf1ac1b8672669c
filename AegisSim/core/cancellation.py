# AegisSim Cancellation
# A small cooperative cancellation flag threaded through the step loop.

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancellation flag for a running simulation.

    The simulator checks `cancelled` at the top of every step. Calling
    `cancel()` from a callback, another task or another thread stops the
    run at the next step boundary.
    """
    def __init__(self):
        self._cancelled = False
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self._cancelled:
            logger.info(f"Cancellation requested: {reason or 'no reason given'}")
        self._cancelled = True
        self.reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"
