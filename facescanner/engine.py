"""Ownership of the native recognition engine.

EngineLifecycle owns the single engine handle and its state machine.
EngineGuard is the one lock every engine call goes through: the handle
tolerates a single in-flight call, so operations are strictly serialized.

State machine:
    UNINITIALIZED --initialize ok--> READY --teardown--> UNINITIALIZED
    UNINITIALIZED --initialize error--> FAILED (terminal)
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional

from facescanner.errors import EngineGuardError, EngineInitError, EngineNotReadyError
from facescanner.interfaces import FACE_DATABASE_NAME, RecognitionEngine
from facescanner.logging_config import get_logger
from facescanner.tempfiles import delete_file, write_temp_file

logger = get_logger(__name__)

EngineFactory = Callable[[], RecognitionEngine]


class EngineState(Enum):
    """Lifecycle state of the engine handle."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


class EngineGuard:
    """Process-wide mutual exclusion for engine calls.

    Callers block until the lock is free; there is no timeout. The guard is
    not reentrant: a thread acquiring it twice gets EngineGuardError rather
    than a deadlock.

    Example:
        >>> guard = EngineGuard()
        >>> with guard.hold():
        ...     engine.process_image(image)
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._owner: Optional[int] = None

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Hold the guard for the duration of the with-block.

        Raises:
            EngineGuardError: If the calling thread already holds the guard.
        """
        thread_id = threading.get_ident()
        if self._owner == thread_id:
            raise EngineGuardError("Engine guard is not reentrant")

        with self._lock:
            self._owner = thread_id
            try:
                yield
            finally:
                self._owner = None

    @property
    def locked(self) -> bool:
        """True while some thread holds the guard."""
        return self._lock.locked()


class EngineLifecycle:
    """Owner of the single engine handle.

    The handle is created by the factory on initialize() and released by
    teardown(). Callers must hold the EngineGuard around both, and around
    every use of the handle returned by require_ready().

    Attributes:
        temp_dir: Directory for the working face database file
    """

    def __init__(self, engine_factory: EngineFactory, temp_dir: Optional[Path] = None):
        """Initialize lifecycle.

        Args:
            engine_factory: Zero-argument callable returning a new engine handle
            temp_dir: Directory for the working face database (system temp if None)
        """
        self._engine_factory = engine_factory
        self.temp_dir = temp_dir

        self._handle: Optional[RecognitionEngine] = None
        self._state = EngineState.UNINITIALIZED
        self._model_loaded = False
        self._db_path: Optional[Path] = None

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def database_path(self) -> Optional[Path]:
        """Path of the working face database file, if one was written."""
        return self._db_path

    def initialize(self, config_data: bytes, model_data: bytes, db_data: bytes) -> None:
        """Bring the engine to the READY state.

        Loads the configuration, then the model, then writes the database
        payload to a fresh temp file and has the engine reset and load it.

        Args:
            config_data: Engine configuration payload
            model_data: Engine model payload
            db_data: Initial face database payload

        Raises:
            EngineInitError: If the engine is already initialized, has failed
                before, or rejects the model or database. The state becomes
                FAILED in the last case, and for any other error raised here.
        """
        if self._state is EngineState.READY:
            raise EngineInitError("Engine is already initialized")
        if self._state is EngineState.FAILED:
            raise EngineInitError("Engine initialization failed earlier; it cannot be retried")

        try:
            self._initialize(config_data, model_data, db_data)
        except Exception:
            self._state = EngineState.FAILED
            raise

        self._state = EngineState.READY
        logger.info(f"Engine ready (face database: {self._db_path})")

    def _initialize(self, config_data: bytes, model_data: bytes, db_data: bytes) -> None:
        self._handle = self._engine_factory()

        self._handle.load_configure(config_data)
        logger.debug(f"Loaded engine configuration ({len(config_data)} bytes)")

        if self._handle.initialize(model_data) != 0:
            logger.error("Unable to initialize the recognition engine model")
            raise EngineInitError("Engine model initialization failed")

        self._model_loaded = True
        logger.debug(f"Loaded engine model ({len(model_data)} bytes)")

        self._db_path = write_temp_file(db_data, FACE_DATABASE_NAME, ".db", self.temp_dir)
        db_path = str(self._db_path)

        if self._handle.create_reset_face_database(db_path):
            raise EngineInitError(f"Engine could not create face database at {db_path}")
        if self._handle.load_face_database(db_path):
            raise EngineInitError(f"Engine could not load face database at {db_path}")

    def require_ready(self) -> RecognitionEngine:
        """Get the engine handle for an operation.

        Raises:
            EngineNotReadyError: If the engine is not in the READY state.
        """
        if self._state is not EngineState.READY or self._handle is None:
            raise EngineNotReadyError(f"Engine is not ready (state: {self._state.value})")
        return self._handle

    def teardown(self) -> None:
        """Uninitialize and release the engine handle.

        Only a handle whose model was loaded is uninitialized and released,
        and only once; calling teardown again, or when initialize never got
        that far, does nothing. A READY engine returns to UNINITIALIZED, a
        FAILED one stays FAILED.
        """
        if not self._model_loaded:
            self._handle = None
            return

        handle = self._handle
        self._model_loaded = False
        self._handle = None

        try:
            try:
                handle.uninitialize()
            finally:
                handle.release()
            logger.info("Engine uninitialized and released")
        finally:
            delete_file(self._db_path)
            self._db_path = None
            if self._state is EngineState.READY:
                self._state = EngineState.UNINITIALIZED

    def __repr__(self) -> str:
        return f"EngineLifecycle(state={self._state.value}, database={self._db_path})"
