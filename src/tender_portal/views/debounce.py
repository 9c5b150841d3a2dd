"""Per-instance debounce timer."""

import threading
from typing import Any, Callable, Optional


class Debouncer:
    """
    Runs func once, delay seconds after the most recent call().
    Each owner holds its own Debouncer; cancel() on teardown.
    """

    def __init__(self, delay: float, func: Callable[..., Any]):
        self._delay = delay
        self._func = func
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def call(self, *args: Any, **kwargs: Any) -> None:
        """(Re)schedule func; any earlier pending call is dropped."""
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            timer = threading.Timer(
                self._delay, self._fire, args=(self._generation, args, kwargs)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        with self._lock:
            self._cancel_locked()
            self._generation += 1

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int, args: tuple, kwargs: dict) -> None:
        with self._lock:
            # A timer that already started can't be cancelled; drop it here instead.
            if generation != self._generation:
                return
            self._timer = None
        self._func(*args, **kwargs)
