"""Debouncing and stale-response guards.

Keystrokes that arrive within the quiet period collapse into a single call
carrying the last value. Pending timers are cancelled when superseded or
when their owner goes away.
"""

import functools
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Delay a callback until calls stop arriving for ``delay`` seconds.

    Args:
        delay: Quiet period in seconds
        callback: Function called with the arguments of the last call
        timer_factory: Callable(delay, fn) returning an object with
            ``start()`` and ``cancel()``; ``threading.Timer`` by default

    Example:
        >>> debouncer = Debouncer(0.3, run_search)
        >>> debouncer.call("li")
        >>> debouncer.call("life")   # only this one fires, 300ms later
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[..., Any],
        timer_factory: Callable[[float, Callable[[], None]], Any] = threading.Timer,
    ):
        self.delay = delay
        self.callback = callback
        self._timer_factory = timer_factory
        self._timer = None
        self._sequence = 0
        self._pending_args: Optional[tuple] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        """Whether a call is scheduled."""
        with self._lock:
            return self._timer is not None

    def call(self, *args, **kwargs) -> None:
        """Schedule the callback, cancelling any pending call."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._sequence += 1
            self._pending_args = (args, kwargs)
            timer = self._timer_factory(self.delay, functools.partial(self._fire, self._sequence))
            if hasattr(timer, 'daemon'):
                timer.daemon = True
            self._timer = timer
            timer.start()

    __call__ = call

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._sequence += 1
            self._timer = None
            self._pending_args = None

    def flush(self) -> bool:
        """Run the pending call immediately. Returns False if nothing was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            sequence = self._sequence
        self._fire(sequence)
        return True

    def _fire(self, sequence: int) -> None:
        with self._lock:
            # A superseded timer may still run after cancel(); only the latest may fire
            if sequence != self._sequence or self._timer is None:
                return
            pending = self._pending_args
            self._timer = None
            self._pending_args = None
        if pending is None:
            return
        args, kwargs = pending
        try:
            self.callback(*args, **kwargs)
        except Exception as e:
            logger.error(f"Debounced callback {getattr(self.callback, '__name__', self.callback)} failed: {e}")


class RequestGeneration:
    """Monotonic request tokens for discarding stale responses.

    Each new request takes a token with ``next()``; when its response
    arrives, ``is_current(token)`` tells whether a newer request has
    started since.
    """

    def __init__(self):
        self._current = 0
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        with self._lock:
            return self._current

    def next(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._current

    def invalidate(self) -> None:
        """Make every outstanding token stale."""
        self.next()
