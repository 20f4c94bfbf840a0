"""facescanner: serialized enrollment and recognition on a native face engine.

This package wraps a stateful, non-thread-safe recognition engine with a
lifecycle state machine, a single engine lock and scoped handling of image
buffers and temporary files.
"""

from facescanner.config import Config, get_config
from facescanner.engine import EngineGuard, EngineLifecycle, EngineState
from facescanner.errors import (
    EngineGuardError,
    EngineInitError,
    EngineNotReadyError,
    EnrollError,
    ExchangeFileError,
    FaceScannerError,
    FindError,
    ImageDecodeError,
    ImageNormalizationError,
    NoFaceDetectedError,
    RecognitionError,
    RegistrationFailedError,
    UnregisterFailedError,
)
from facescanner.factory import create_orchestrator, load_engine_factory, read_payloads
from facescanner.image import DecodedImage, ImageNormalizer, OpenCVCodec, normalized_size
from facescanner.interfaces import (
    FACE_DATABASE_NAME,
    BBox,
    DetectedFace,
    FaceResult,
    ImageCodec,
    RecognitionEngine,
    RegistrationInfo,
)
from facescanner.logging_config import get_logger, setup_logging
from facescanner.services import FaceOrchestrator
from facescanner.tempfiles import TempExchangeFile
from facescanner.utils import select_best_face

__version__ = "0.1.0"

__all__ = [
    # Config
    "Config",
    "get_config",
    # Engine
    "EngineGuard",
    "EngineLifecycle",
    "EngineState",
    # Errors
    "FaceScannerError",
    "EngineInitError",
    "EngineNotReadyError",
    "EngineGuardError",
    "ExchangeFileError",
    "EnrollError",
    "NoFaceDetectedError",
    "RegistrationFailedError",
    "FindError",
    "ImageDecodeError",
    "ImageNormalizationError",
    "RecognitionError",
    "UnregisterFailedError",
    # Factory
    "create_orchestrator",
    "load_engine_factory",
    "read_payloads",
    # Images
    "DecodedImage",
    "ImageNormalizer",
    "OpenCVCodec",
    "normalized_size",
    "TempExchangeFile",
    # Interfaces
    "FACE_DATABASE_NAME",
    "BBox",
    "DetectedFace",
    "FaceResult",
    "ImageCodec",
    "RecognitionEngine",
    "RegistrationInfo",
    # Logging
    "setup_logging",
    "get_logger",
    # Services
    "FaceOrchestrator",
    "select_best_face",
]
