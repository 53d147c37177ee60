"""Debounced values for text filters."""

import time
from typing import Any, Callable

DEBOUNCE_SECONDS = 0.3

class Debounced:
    """
    A value that settles only after a quiet period.

    `value` follows every edit immediately (what the input shows). `settled`
    catches up once `delay` seconds pass without another edit; each edit
    restarts the wait, so intermediate values never settle.
    """

    def __init__(self, value: Any = "", delay: float = DEBOUNCE_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.delay = delay
        self._clock = clock
        self._value = value
        self._settled = value
        self._changed_at = clock()

    @property
    def value(self) -> Any:
        return self._value

    def set(self, value: Any) -> None:
        self._value = value
        self._changed_at = self._clock()

    def reset(self, value: Any) -> None:
        """Set both the shown and the settled value at once."""
        self._value = value
        self._settled = value
        self._changed_at = self._clock()

    @property
    def pending(self) -> bool:
        return self._value != self.settled

    def remaining(self) -> float:
        """Seconds until the current value settles, 0 if it already has."""
        if self._value == self._settled:
            return 0.0
        return max(0.0, self.delay - (self._clock() - self._changed_at))

    @property
    def settled(self) -> Any:
        if self._value != self._settled and self._clock() - self._changed_at >= self.delay:
            self._settled = self._value
        return self._settled
