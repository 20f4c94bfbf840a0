"""Configuration management for the facescanner service.

This module loads configuration from environment variables (.env file) and
provides a centralized Config class for locating the engine payloads and
the engine factory.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    Attributes:
        engine_factory: Import path of the engine factory ("module:attr")
        engine_config_path: Engine configuration payload
        engine_model_path: Engine model payload
        face_db_path: Initial face database payload
        temp_dir: Directory for exchange files and the working database
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    engine_factory: str
    engine_config_path: Path
    engine_model_path: Path
    face_db_path: Path
    temp_dir: Path
    log_level: str

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        Returns:
            Config instance with values from environment or defaults.

        Raises:
            ValueError: If environment variables are invalid.
        """
        project_root = Path(__file__).parent.parent
        resources_dir = project_root / "resources"

        engine_factory = os.getenv("ENGINE_FACTORY", "").strip()
        if engine_factory and ":" not in engine_factory:
            raise ValueError(
                f"ENGINE_FACTORY must look like 'package.module:attr', got {engine_factory}"
            )

        engine_config_path = Path(
            os.getenv("ENGINE_CONFIG_PATH", str(resources_dir / "configure.txt"))
        )
        engine_model_path = Path(
            os.getenv("ENGINE_MODEL_PATH", str(resources_dir / "model.dat"))
        )
        face_db_path = Path(os.getenv("FACE_DB_PATH", str(resources_dir / "visitor.db")))

        temp_dir = Path(os.getenv("TEMP_DIR") or tempfile.gettempdir())
        if temp_dir.exists() and not temp_dir.is_dir():
            raise ValueError(f"TEMP_DIR must be a directory, got {temp_dir}")
        temp_dir.mkdir(parents=True, exist_ok=True)

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {VALID_LOG_LEVELS}, got {log_level}")

        return cls(
            engine_factory=engine_factory,
            engine_config_path=engine_config_path,
            engine_model_path=engine_model_path,
            face_db_path=face_db_path,
            temp_dir=temp_dir,
            log_level=log_level,
        )

    def __repr__(self) -> str:
        """Return string representation of config."""
        return (
            f"Config(\n"
            f"  Engine: {self.engine_factory or '<unset>'},\n"
            f"  Engine config: {self.engine_config_path},\n"
            f"  Engine model: {self.engine_model_path},\n"
            f"  Face DB: {self.face_db_path},\n"
            f"  Temp dir: {self.temp_dir},\n"
            f"  Log Level: {self.log_level}\n"
            f")"
        )


# Global config instance (lazy-loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get global config instance (singleton pattern).

    Returns:
        Config instance loaded from environment.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config
