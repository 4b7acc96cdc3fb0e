"""Strategies deciding when a refreshable source re-syncs."""

from __future__ import annotations

import abc
import enum
import threading
from typing import Any, Callable, Optional

import structlog

from ..core.source import Refreshable

_log = structlog.get_logger(__name__)


class StrategyState(enum.Enum):
    CREATED = "created"
    INITIALIZED = "initialized"
    SHUT_DOWN = "shut_down"


class RefreshStrategy(abc.ABC):
    """Lifecycle shared by all strategies: ``CREATED -> INITIALIZED -> SHUT_DOWN``.

    Subclasses implement :meth:`_start` and :meth:`_stop`.
    """

    def __init__(self, logger: Optional[Any] = None):
        self._log = (logger or _log).bind(strategy=type(self).__name__)
        self._state = StrategyState.CREATED
        self._state_lock = threading.Lock()

    @property
    def state(self) -> StrategyState:
        return self._state

    def init(self, resource: Refreshable) -> None:
        """Start refreshing ``resource``.

        Raises:
            RuntimeError: If the strategy was already initialized or shut down.
        """
        with self._state_lock:
            if self._state is not StrategyState.CREATED:
                raise RuntimeError(f"Cannot initialize strategy in state {self._state.value}")
            self._state = StrategyState.INITIALIZED
        self._log.info("refresh_strategy_initializing")
        self._start(resource)

    def shutdown(self) -> None:
        """Stop refreshing. Idempotent."""
        with self._state_lock:
            previous = self._state
            self._state = StrategyState.SHUT_DOWN
        if previous is StrategyState.INITIALIZED:
            self._log.info("refresh_strategy_shutting_down")
            self._stop()

    @abc.abstractmethod
    def _start(self, resource: Refreshable) -> None:
        ...

    def _stop(self) -> None:
        pass


class OnInitRefreshStrategy(RefreshStrategy):
    """Refresh the resource exactly once, synchronously, inside :meth:`init`.

    Errors raised by ``refresh()`` propagate to the caller of ``init``.
    """

    def _start(self, resource: Refreshable) -> None:
        resource.refresh()


class PeriodicalRefreshStrategy(RefreshStrategy):
    """Refresh the resource now, then every ``interval`` seconds until shutdown.

    Refreshes run on one daemon thread per strategy. A failed refresh is
    logged and handed to ``on_error``; later refreshes are still attempted.
    Once :meth:`shutdown` returns no refresh begins, including the first one
    if ``init`` is still in progress on another thread.

    Args:
        interval: Delay between the end of one refresh and the next, in seconds.
        logger: Optional structlog logger.
        on_error: Optional callback receiving every refresh exception.
    """

    def __init__(
        self,
        interval: float,
        *,
        logger: Optional[Any] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        super().__init__(logger=logger)
        self.interval = float(interval)
        self.on_error = on_error
        self._stop_event = threading.Event()
        # reentrant so shutdown() may be called from inside a refresh
        self._refresh_lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None

    def _refresh_once(self, resource: Refreshable) -> None:
        with self._refresh_lock:
            if self._stop_event.is_set():
                return
            try:
                resource.refresh()
            except Exception as e:
                self._log.exception("refresh_failed", error=str(e))
                if self.on_error is not None:
                    try:
                        self.on_error(e)
                    except Exception:
                        self._log.exception("refresh_error_handler_failed")

    def _run(self, resource: Refreshable) -> None:
        while not self._stop_event.wait(self.interval):
            self._refresh_once(resource)

    def _start(self, resource: Refreshable) -> None:
        self._refresh_once(resource)
        with self._state_lock:
            if self._state is StrategyState.SHUT_DOWN:
                return
            thread = threading.Thread(
                target=self._run,
                args=(resource,),
                name=f"tether-refresh-{id(self):x}",
                daemon=True,
            )
            thread.start()
            self._thread = thread

    def _stop(self) -> None:
        self._stop_event.set()
        # wait out a refresh already in flight
        with self._refresh_lock:
            pass
        with self._state_lock:
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
