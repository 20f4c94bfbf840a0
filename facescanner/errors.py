"""Exception hierarchy for the facescanner service layer.

Every failure of an engine-facing operation is raised as a subclass of
FaceScannerError. None of them are retried internally.
"""

from __future__ import annotations


class FaceScannerError(RuntimeError):
    """Base class for all facescanner errors."""


class EngineInitError(FaceScannerError):
    """Raised when the engine cannot be brought to the ready state."""


class EngineNotReadyError(FaceScannerError):
    """Raised when an operation runs while the engine is not ready."""


class EngineGuardError(FaceScannerError):
    """Raised when a thread tries to re-enter the engine guard it holds."""


class ExchangeFileError(FaceScannerError):
    """Raised when a temporary exchange file cannot be written or read."""


class EnrollError(FaceScannerError):
    """Base class for enrollment failures."""


class NoFaceDetectedError(EnrollError):
    """Raised when enrollment finds no usable face."""


class RegistrationFailedError(EnrollError):
    """Raised when the engine rejects a face registration."""


class FindError(FaceScannerError):
    """Base class for failures while preparing or reading an image."""


class ImageDecodeError(FindError):
    """Raised when image bytes cannot be decoded."""


class ImageNormalizationError(FindError):
    """Raised when a decoded image cannot be normalized."""


class RecognitionError(FindError):
    """Raised when engine recognition output cannot be translated."""


class UnregisterFailedError(FaceScannerError):
    """Raised when the engine reports a non-zero status on deletion."""
