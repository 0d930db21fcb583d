from __future__ import annotations

from typing import Callable

from loguru import logger


class PrintBarrier:
    """
    Counting barrier in front of the print action.

    Each image that reaches a terminal state (loaded or errored) calls
    `arrive()`; `on_complete` runs exactly once, when the count reaches
    `expected`. With nothing to wait for, `start()` fires it straight away.
    """

    def __init__(self, expected: int, on_complete: Callable[[], None]) -> None:
        if expected < 0:
            raise ValueError("expected must be >= 0")
        self.expected = expected
        self.arrived = 0
        self.fired = False
        self._on_complete = on_complete

    def start(self) -> None:
        if self.expected == 0:
            self._fire()

    def arrive(self) -> None:
        if self.fired:
            logger.debug("Late image event after print; ignoring")
            return
        self.arrived += 1
        if self.arrived >= self.expected:
            self._fire()

    def _fire(self) -> None:
        if self.fired:
            return
        self.fired = True
        logger.info("All {} images settled; printing", self.expected)
        self._on_complete()
