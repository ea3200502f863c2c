"""Cooperative, token-counted pause/resume."""

import logging
import threading
import uuid
from typing import Hashable, Optional, Set


logger = logging.getLogger('web_auditor.pause_gate')


class PauseGate:
    """Set of outstanding pause requests.

    The gate is closed while at least one token is held. Each caller resumes
    with the token it paused with, so two independent pausers need two
    resumes before work continues.
    """

    def __init__(self, poll_interval: float = 1.0):
        """Initialize pause gate.

        Args:
            poll_interval: Upper bound in seconds between re-checks while
                blocked in ``wait_if_paused``
        """
        self.poll_interval = poll_interval
        self._tokens: Set[Hashable] = set()
        self._condition = threading.Condition()

    def pause(self, token: Optional[Hashable] = None) -> Hashable:
        """Register a pause request.

        Args:
            token: Opaque caller identity; a fresh one is issued if omitted

        Returns:
            The token to pass to ``resume``
        """
        if token is None:
            token = uuid.uuid4().hex

        with self._condition:
            self._tokens.add(token)
            logger.debug(f"Pause requested ({len(self._tokens)} outstanding)")

        return token

    def resume(self, token: Hashable) -> bool:
        """Withdraw a pause request.

        Returns:
            False if ``token`` held no pause request
        """
        with self._condition:
            if token not in self._tokens:
                return False

            self._tokens.discard(token)
            if not self._tokens:
                self._condition.notify_all()
            logger.debug(f"Pause withdrawn ({len(self._tokens)} outstanding)")
            return True

    def is_paused(self) -> bool:
        with self._condition:
            return bool(self._tokens)

    def __len__(self) -> int:
        with self._condition:
            return len(self._tokens)

    def wait_if_paused(self, poll_interval: Optional[float] = None) -> None:
        """Block the calling thread until no pause request is outstanding.

        Args:
            poll_interval: Overrides the gate's poll interval for this wait
        """
        timeout = poll_interval or self.poll_interval
        with self._condition:
            while self._tokens:
                self._condition.wait(timeout=timeout)

    def clear(self) -> None:
        with self._condition:
            self._tokens.clear()
            self._condition.notify_all()
