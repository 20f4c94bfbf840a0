"""Core interfaces and data structures for the facescanner service layer.

This module defines the protocols of the external collaborators (the native
recognition engine and the image codec) and the data classes passed across
those boundaries.

The service layer depends on these abstractions only, so any engine binding
exposing the same calls can be plugged in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple, runtime_checkable
from uuid import UUID

from facescanner.image import DecodedImage

# Name of the engine face database every identity is registered in
FACE_DATABASE_NAME = "people"


@dataclass
class BBox:
    """Bounding box reported by the engine.

    Coordinates are in pixels of the normalized image. Depending on the
    engine's coordinate convention width and height may come out negative,
    so the area is always taken as an absolute value.

    Attributes:
        top: Top edge y-coordinate
        bottom: Bottom edge y-coordinate
        left: Left edge x-coordinate
        right: Right edge x-coordinate
    """

    top: int = 0
    bottom: int = 0
    left: int = 0
    right: int = 0

    @property
    def width(self) -> int:
        """Get bounding box width in pixels."""
        return self.right - self.left

    @property
    def height(self) -> int:
        """Get bounding box height in pixels."""
        return self.bottom - self.top

    @property
    def area(self) -> int:
        """Get bounding box area in square pixels (always >= 0)."""
        return abs((self.top - self.bottom) * (self.right - self.left))

    def __repr__(self) -> str:
        """String representation of bounding box."""
        return (
            f"BBox(top={self.top}, bottom={self.bottom}, "
            f"left={self.left}, right={self.right})"
        )


@dataclass
class DetectedFace:
    """A face found in an image, with the enrolled identity if matched.

    Attributes:
        bbox: Bounding box in normalized-image coordinates
        identity: Enrolled identity, None when the face is not recognized
    """

    bbox: BBox
    identity: Optional[UUID] = None

    @property
    def left(self) -> int:
        return self.bbox.left

    @property
    def top(self) -> int:
        return self.bbox.top

    @property
    def width(self) -> int:
        return self.bbox.width

    @property
    def height(self) -> int:
        return self.bbox.height

    @property
    def is_known(self) -> bool:
        """True if the engine matched this face to an enrolled identity."""
        return self.identity is not None


@dataclass(frozen=True)
class RegistrationInfo:
    """Database/identity pair submitted to the engine's register and delete calls."""

    database_name: str
    identity_name: str

    @classmethod
    def for_identity(cls, identity: UUID) -> RegistrationInfo:
        return cls(database_name=FACE_DATABASE_NAME, identity_name=str(identity))


@dataclass
class FaceResult:
    """Per-face output of the engine's full-image recognition call.

    Attributes:
        bbox: Bounding box of the face
        decision: Match decision flag, 0 means the face matched identity_name
        identity_name: Stored identity string, meaningful only when matched
    """

    bbox: BBox
    decision: int
    identity_name: str = ""

    @property
    def matched(self) -> bool:
        return self.decision == 0


@runtime_checkable
class RecognitionEngine(Protocol):
    """Protocol for the native face-recognition engine handle.

    The handle is stateful and NOT safe for concurrent use: every call must
    be serialized by the caller. Integer returns are engine status codes,
    0 meaning success.
    """

    def load_configure(self, data: bytes) -> None:
        """Load the engine configuration payload."""
        ...

    def initialize(self, model: bytes) -> int:
        """Load the model payload. Returns non-zero on failure."""
        ...

    def create_reset_face_database(self, path: str) -> int:
        """Create (or reset) the face database file at path."""
        ...

    def load_face_database(self, path: str) -> int:
        """Load the face database file at path."""
        ...

    def get_image_face_pos(self, image: DecodedImage) -> Tuple[int, List[BBox]]:
        """Detect faces.

        Returns:
            Tuple of (count, boxes). A negative count is an engine error code.
        """
        ...

    def register_face(self, image: DecodedImage, bbox: BBox, info: RegistrationInfo) -> int:
        """Register the face inside bbox under info. Returns non-zero on failure."""
        ...

    def process_image(self, image: DecodedImage) -> Tuple[int, List[FaceResult]]:
        """Detect and recognize all faces.

        Returns:
            Tuple of (count, results) in the engine's enumeration order.
        """
        ...

    def delete_registered_id(self, info: RegistrationInfo) -> int:
        """Delete an enrolled identity. Returns non-zero on failure."""
        ...

    def uninitialize(self) -> None:
        """Unload the model and database."""
        ...

    def release(self) -> None:
        """Release the native engine instance."""
        ...


@runtime_checkable
class ImageCodec(Protocol):
    """Protocol for decoding and resizing images into native buffers."""

    def decode_file(self, path: str) -> DecodedImage:
        """Decode an image file.

        Raises:
            ImageDecodeError: If the file is not a readable image.
        """
        ...

    def resize(self, image: DecodedImage, width: int, height: int) -> DecodedImage:
        """Resize into a new buffer with the same channel count and depth."""
        ...
