"""Factory for wiring a ready orchestrator from configuration.

This module resolves the engine binding named in the configuration, reads
the three startup payloads (engine configuration, model, face database)
and returns an initialized FaceOrchestrator.

Usage:
    orchestrator = create_orchestrator(get_config())
    try:
        faces = orchestrator.find_all_in_image(data)
    finally:
        orchestrator.teardown()
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path

from facescanner.config import Config
from facescanner.engine import EngineFactory
from facescanner.errors import EngineInitError
from facescanner.logging_config import get_logger
from facescanner.services.orchestrator import FaceOrchestrator

logger = get_logger(__name__)


@dataclass
class EnginePayloads:
    """Startup payloads handed to the engine.

    Attributes:
        config_data: Engine configuration
        model_data: Engine model
        db_data: Initial face database
    """

    config_data: bytes
    model_data: bytes
    db_data: bytes


def load_engine_factory(spec: str) -> EngineFactory:
    """Resolve an engine factory from an import path.

    Args:
        spec: "package.module:attribute" naming a zero-argument callable

    Returns:
        The callable.

    Raises:
        EngineInitError: If the module or attribute cannot be found.

    Example:
        >>> factory = load_engine_factory("facescanner_native.binding:get_instance")
    """
    module_name, sep, attr = spec.partition(":")
    if not module_name or not sep or not attr:
        raise EngineInitError(f"Engine factory must look like 'package.module:attr', got '{spec}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise EngineInitError(f"Cannot import engine module '{module_name}': {e}") from e

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise EngineInitError(f"'{spec}' is not a callable engine factory")

    logger.debug(f"Resolved engine factory {spec}")
    return factory


def _read_payload(path: Path, what: str) -> bytes:
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.error(f"Unable to read {what} from {path}: {e}")
        raise EngineInitError(f"Unable to read {what} from {path}") from e

    logger.debug(f"Read {what}: {path} ({len(data)} bytes)")
    return data


def read_payloads(config: Config) -> EnginePayloads:
    """Read the engine startup payloads named in the configuration.

    Raises:
        EngineInitError: If any payload cannot be read.
    """
    return EnginePayloads(
        config_data=_read_payload(config.engine_config_path, "engine configuration"),
        model_data=_read_payload(config.engine_model_path, "engine model"),
        db_data=_read_payload(config.face_db_path, "face database"),
    )


def create_orchestrator(
    config: Config | None = None,
    engine_factory: EngineFactory | None = None,
) -> FaceOrchestrator:
    """Create and initialize an orchestrator.

    Args:
        config: Configuration object. If None, loads from .env
        engine_factory: Engine factory. If None, resolved from config.engine_factory

    Returns:
        FaceOrchestrator in the READY state.

    Raises:
        EngineInitError: If no engine is configured, a payload cannot be read
            or the engine fails to initialize.
    """
    if config is None:
        from facescanner.config import get_config
        config = get_config()

    if engine_factory is None:
        if not config.engine_factory:
            raise EngineInitError("No engine configured (set ENGINE_FACTORY)")
        engine_factory = load_engine_factory(config.engine_factory)

    payloads = read_payloads(config)

    orchestrator = FaceOrchestrator(engine_factory=engine_factory, temp_dir=config.temp_dir)
    try:
        orchestrator.initialize(payloads.config_data, payloads.model_data, payloads.db_data)
    except Exception:
        orchestrator.teardown()
        raise

    logger.info("Orchestrator created successfully")
    return orchestrator
