"""
Single-flight loading of shared artifacts.

A ``LoadOnce`` wraps a loader callable so that, however many threads ask
for the value at once, the loader runs at most once at a time and every
waiting caller receives the outcome of that one run. A failed run leaves
the slot in the ``failed`` state and the next call starts a fresh attempt.
"""

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Callable, Generic, TypeVar

from .errors import LoadTimeoutError

logger = logging.getLogger("remark_sentiment")

T = TypeVar("T")


class LoadState(str, Enum):
    """Lifecycle of a lazily loaded artifact."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class LoadOnce(Generic[T]):
    """
    Lazily computed value shared by all callers.
    
    Transitions: uninitialized -> loading -> ready | failed,
    and failed -> loading on the next ``get``.
    """
    
    def __init__(self, loader: Callable[[], T], name: str = "artifact"):
        """
        Args:
            loader: Zero-argument callable producing the value
            name: Name used in log and error messages
        """
        self.name = name
        self._loader = loader
        self._lock = threading.Lock()
        self._future: Future | None = None
        self._state = LoadState.UNINITIALIZED
        self._value: T | None = None
    
    @property
    def state(self) -> LoadState:
        return self._state
    
    @property
    def is_ready(self) -> bool:
        return self._state is LoadState.READY
    
    @property
    def value(self) -> T | None:
        """Loaded value, or None while not ready."""
        return self._value if self.is_ready else None
    
    def get(self, timeout: float | None = None) -> tuple[T, bool]:
        """
        Return the value, loading it first if needed.
        
        Args:
            timeout: Seconds to wait for a load started by another caller
            
        Returns:
            Tuple of (value, performed_load) where performed_load is True
            only for the caller whose call actually ran the loader
            
        Raises:
            LoadTimeoutError: If an in-flight load did not finish in time
            Exception: Whatever the loader raised
        """
        if self._state is LoadState.READY:
            return self._value, False
        
        with self._lock:
            if self._state is LoadState.READY:
                return self._value, False
            
            if self._state is LoadState.LOADING:
                future = self._future
                owner = False
            else:
                future = Future()
                self._future = future
                self._state = LoadState.LOADING
                owner = True
        
        if owner:
            return self._run(future), True
        
        logger.debug(f"Waiting for in-flight {self.name} load")
        try:
            return future.result(timeout=timeout), False
        except FutureTimeoutError as exc:
            raise LoadTimeoutError(
                f"Timed out after {timeout}s waiting for {self.name} to load"
            ) from exc
    
    def _run(self, future: Future) -> T:
        try:
            value = self._loader()
        except BaseException as exc:
            with self._lock:
                self._state = LoadState.FAILED
                self._future = None
            future.set_exception(exc)
            logger.error(f"Loading {self.name} failed: {exc}")
            raise
        
        with self._lock:
            self._value = value
            self._state = LoadState.READY
            self._future = None
        future.set_result(value)
        return value
