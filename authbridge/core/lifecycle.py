"""One-time, thread-safe initialization shared by every client."""
from __future__ import annotations

import enum
import logging
import threading

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class LifecycleState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class InitializableObject:
    """Object whose setup runs lazily, exactly once, on first use.

    Subclasses implement ``internal_init()``. Callers go through
    ``ensure_initialized()``; ``force_reinitialize()`` reruns the setup even
    when the object is already ready.

    A failing setup leaves the object UNINITIALIZED so that a later call can
    retry, and always surfaces as ConfigurationError.
    """

    def __init__(self):
        self._state = LifecycleState.UNINITIALIZED
        self._init_lock = threading.RLock()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def initialized(self) -> bool:
        return self._state is LifecycleState.READY

    def ensure_initialized(self) -> None:
        """Run the setup once across concurrent callers."""
        if self._state is LifecycleState.READY:
            return
        with self._init_lock:
            if self._state is not LifecycleState.READY:
                self._run_internal_init()

    def force_reinitialize(self) -> None:
        """Run the setup again, serialized against any other initialization."""
        with self._init_lock:
            self._state = LifecycleState.UNINITIALIZED
            self._run_internal_init()

    def internal_init(self) -> None:
        raise NotImplementedError

    def _run_internal_init(self) -> None:
        self._state = LifecycleState.INITIALIZING
        try:
            self.internal_init()
        except ConfigurationError:
            self._state = LifecycleState.UNINITIALIZED
            raise
        except Exception as exc:
            self._state = LifecycleState.UNINITIALIZED
            raise ConfigurationError(f"Initialization of {type(self).__name__} failed: {exc}") from exc
        self._state = LifecycleState.READY
        logger.debug(f"{type(self).__name__} initialized")
