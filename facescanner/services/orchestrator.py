"""Face orchestration service on top of the native recognition engine.

This module provides the public operations of the service layer: enroll a
face for an identity, recognize every face in an image, and remove an
enrolled identity.

Each operation follows the same discipline:
1. Acquire the engine guard and check the engine is ready
2. Write the uploaded bytes to a temp file, decode and normalize it
3. Call the engine
4. Translate the engine output into domain results
5. Release images and the temp file, then the guard, on every exit path
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Iterator, List, Optional
from uuid import UUID

from facescanner.engine import EngineFactory, EngineGuard, EngineLifecycle, EngineState
from facescanner.errors import (
    NoFaceDetectedError,
    RecognitionError,
    RegistrationFailedError,
    UnregisterFailedError,
)
from facescanner.image import DecodedImage, ImageNormalizer, OpenCVCodec
from facescanner.interfaces import (
    DetectedFace,
    FaceResult,
    ImageCodec,
    RecognitionEngine,
    RegistrationInfo,
)
from facescanner.logging_config import get_logger
from facescanner.tempfiles import TempExchangeFile
from facescanner.utils import select_best_face

logger = get_logger(__name__)


class FaceOrchestrator:
    """Serialized access to the recognition engine.

    The engine handle is not thread-safe, so every operation (including
    initialize and teardown) runs inside one EngineGuard critical section.
    Operations block until the guard is free and are never retried.

    Attributes:
        lifecycle: Owner of the engine handle and its state
        guard: Lock serializing all engine calls
        codec: Image decoder/resizer
        normalizer: Engine input normalizer
        temp_dir: Directory for exchange files (system temp if None)

    Example:
        >>> orchestrator = FaceOrchestrator(engine_factory=load_engine)
        >>> orchestrator.initialize(config_data, model_data, db_data)
        >>> orchestrator.enroll(person_id, photo_bytes)
        >>> for face in orchestrator.find_all_in_image(group_photo_bytes):
        ...     print(face.left, face.top, face.identity)
        >>> orchestrator.teardown()
    """

    def __init__(
        self,
        engine_factory: EngineFactory,
        codec: Optional[ImageCodec] = None,
        temp_dir: Optional[Path] = None,
    ):
        """Initialize orchestrator.

        Args:
            engine_factory: Zero-argument callable returning the engine handle
            codec: Image codec (OpenCVCodec if None)
            temp_dir: Directory for exchange files and the working database
        """
        self.codec = codec if codec is not None else OpenCVCodec()
        self.normalizer = ImageNormalizer(self.codec)
        self.lifecycle = EngineLifecycle(engine_factory, temp_dir=temp_dir)
        self.guard = EngineGuard()
        self.temp_dir = temp_dir

    @property
    def state(self) -> EngineState:
        return self.lifecycle.state

    def initialize(self, config_data: bytes, model_data: bytes, db_data: bytes) -> None:
        """Initialize the engine. Must succeed before any other operation.

        Raises:
            EngineInitError: If the engine cannot be brought to READY.
        """
        with self.guard.hold():
            self.lifecycle.initialize(config_data, model_data, db_data)

    def teardown(self) -> None:
        """Release the engine. Safe to call repeatedly or after a failed init."""
        with self.guard.hold():
            self.lifecycle.teardown()

    @contextmanager
    def _engine(self) -> Iterator[RecognitionEngine]:
        """Hold the guard and yield the ready engine handle."""
        with self.guard.hold():
            yield self.lifecycle.require_ready()

    def _prepare_image(self, stack: ExitStack, data: bytes) -> DecodedImage:
        """Write, decode and normalize image bytes.

        Every resource is registered on the stack, so the temp file and both
        buffers are released when the stack unwinds, however far this got.
        """
        path = stack.enter_context(TempExchangeFile(data, directory=self.temp_dir))
        original = stack.enter_context(self.codec.decode_file(str(path)))
        return stack.enter_context(self.normalizer.normalize(original))

    def enroll(self, identity: UUID, photo: bytes) -> None:
        """Register the largest face in a photo under an identity.

        Args:
            identity: Identity to enroll
            photo: Encoded image bytes (JPEG, PNG, ...)

        Raises:
            EngineNotReadyError: If the engine is not initialized.
            ExchangeFileError: If the photo cannot be written to a temp file.
            ImageDecodeError: If the photo cannot be decoded.
            ImageNormalizationError: If the photo cannot be normalized.
            NoFaceDetectedError: If the engine reports a negative face count.
            RegistrationFailedError: If the engine rejects the registration.
        """
        with self._engine() as engine, ExitStack() as stack:
            image = self._prepare_image(stack, photo)

            count, boxes = engine.get_image_face_pos(image)

            # Only an engine error code trips this; a zero count still registers
            if count < 0:
                logger.warning(f"No face detected for the ID: {identity}")
                raise NoFaceDetectedError(f"No face detected for the ID: {identity}")

            best = select_best_face(boxes, count)
            logger.info(f"Registering {identity} with face {best} ({count} detected)")

            status = engine.register_face(image, best, RegistrationInfo.for_identity(identity))
            if status != 0:
                logger.warning(f"Unable to register the face with the ID: {identity}")
                raise RegistrationFailedError(
                    f"Engine rejected registration of {identity} (status {status})"
                )

        logger.info(f"Registered {identity}")

    def find_all_in_image(self, image_data: bytes) -> List[DetectedFace]:
        """Detect and recognize every face in an image.

        Args:
            image_data: Encoded image bytes (JPEG, PNG, ...)

        Returns:
            One DetectedFace per face, in the engine's order. Boxes are in
            normalized-image coordinates. Empty if no face was found.

        Raises:
            EngineNotReadyError: If the engine is not initialized.
            ExchangeFileError: If the image cannot be written to a temp file.
            ImageDecodeError: If the image cannot be decoded.
            ImageNormalizationError: If the image cannot be normalized.
            RecognitionError: If a matched identity is not a valid UUID.
        """
        with self._engine() as engine, ExitStack() as stack:
            image = self._prepare_image(stack, image_data)

            count, results = engine.process_image(image)

            if count <= 0:
                logger.debug("No face detected in the image.")
                return []

            faces = [self._to_detected_face(result) for result in results[:count]]

        logger.debug(
            f"Found {len(faces)} face(s), "
            f"{sum(face.is_known for face in faces)} recognized"
        )
        return faces

    @staticmethod
    def _to_detected_face(result: FaceResult) -> DetectedFace:
        identity = None
        if result.matched:
            try:
                identity = UUID(result.identity_name)
            except ValueError as e:
                raise RecognitionError(
                    f"Engine matched a face to a non-UUID identity: {result.identity_name!r}"
                ) from e
        return DetectedFace(bbox=result.bbox, identity=identity)

    def unregister(self, identity: UUID) -> None:
        """Remove an enrolled identity from the face database.

        Note:
            Some engine builds report a non-zero status here even when the
            identity is gone; the status is surfaced as is.

        Raises:
            EngineNotReadyError: If the engine is not initialized.
            UnregisterFailedError: If the engine reports a non-zero status.
        """
        with self._engine() as engine:
            logger.info(f"Deleting {identity}")
            status = engine.delete_registered_id(RegistrationInfo.for_identity(identity))

        if status != 0:
            logger.warning(f"Unable to unregister the face with the ID: {identity}")
            raise UnregisterFailedError(
                f"Engine could not delete {identity} (status {status})"
            )

        logger.info(f"Delete success {identity}")

    def __enter__(self) -> FaceOrchestrator:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()

    def __repr__(self) -> str:
        """String representation."""
        return f"FaceOrchestrator(state={self.state.value}, codec={self.codec})"
