#!/usr/bin/env python3
"""
Cooperative shutdown for Kenosis

A CancellationToken is shared by the scanner and the delete executor; they
poll it and unwind with OperationCancelled. TerminalSession owns the signal
handlers and every progress indicator opened through it, and restores the
terminal exactly once when the session ends.
"""

import logging
import signal
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger("kenosis.shutdown")


class OperationCancelled(Exception):
    """Raised by a scan or deletion that observed a shutdown request."""


class CancellationToken:
    """Thread-safe cancellation flag.

    Calling the token returns its state, so it can be handed to anything
    that expects a ``shutdown_requested()`` callable.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        return self._event.is_set()


def _default_signals() -> list[int]:
    signums = [signal.SIGINT]
    for name in ("SIGTERM", "SIGQUIT"):
        if hasattr(signal, name):
            signums.append(getattr(signal, name))
    return signums


class TerminalSession:
    """Scope owner for signal handling and terminal state.

    Use as a context manager around the whole run:

        with TerminalSession(ui) as session:
            with session.progress("Scanning...") as spinner:
                ...

    The first termination signal cancels ``session.token`` (or interrupts a
    prompt that is waiting for input); a second one raises KeyboardInterrupt
    wherever the main thread is. On exit, active indicators are stopped, the
    cursor is shown and the previous handlers are put back, once.
    """

    def __init__(self, ui, token: Optional[CancellationToken] = None, signals: Optional[list[int]] = None):
        self.ui = ui
        self.token = token or CancellationToken()
        self._signals = _default_signals() if signals is None else list(signals)
        self._previous_handlers: dict[int, object] = {}
        self._indicators: list = []
        self._at_prompt = False
        self._closed = False
        self._lock = threading.Lock()

    def __enter__(self) -> "TerminalSession":
        self.ui.show_cursor()
        for signum in self._signals:
            self._previous_handlers[signum] = signal.signal(signum, self._signal_handler)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # -- signal handling ----------------------------------------------------

    def _signal_handler(self, signum, frame):
        name = signal.Signals(signum).name
        if self.token.cancelled:
            logger.debug("Second %s received, forcing exit", name)
            raise KeyboardInterrupt()

        self.token.cancel()
        logger.info("%s received, cancelling", name)
        if self._at_prompt:
            raise KeyboardInterrupt()
        self.ui.print_warning("\nShutdown requested... press Ctrl+C again to force quit.")

    # -- scoped resources ---------------------------------------------------

    @contextmanager
    def progress(self, text: str) -> Iterator:
        """Start a spinner that is guaranteed to stop when the block exits."""
        indicator = self.ui.create_indicator(text)
        self._indicators.append(indicator)
        try:
            indicator.start()
            yield indicator
        finally:
            indicator.stop()
            if indicator in self._indicators:
                self._indicators.remove(indicator)

    @contextmanager
    def prompting(self) -> Iterator[None]:
        """Mark the main thread as blocked on user input."""
        if self.token.cancelled:
            raise KeyboardInterrupt()
        self._at_prompt = True
        try:
            yield
        finally:
            self._at_prompt = False

    # -- cleanup -------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True

        for indicator in reversed(self._indicators):
            indicator.stop()
        self._indicators.clear()
        self.ui.show_cursor()

        for signum, handler in self._previous_handlers.items():
            # None means the handler was not installed from Python
            signal.signal(signum, signal.SIG_DFL if handler is None else handler)
        self._previous_handlers.clear()
