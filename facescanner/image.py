"""Native image buffers, the OpenCV codec and the engine input normalizer.

Images handed to the engine are owned buffers: whoever creates one must
release it exactly once, whatever happens downstream. DecodedImage is also
a context manager so it can be scoped with ``with`` or an ExitStack.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import cv2
import numpy as np

from facescanner.errors import ImageDecodeError, ImageNormalizationError
from facescanner.logging_config import get_logger

if TYPE_CHECKING:
    from facescanner.interfaces import ImageCodec

logger = get_logger(__name__)

# Engine input dimensions must be multiples of this
ALIGNMENT = 4


class DecodedImage:
    """Owned pixel buffer with width/height/channel metadata.

    Attributes:
        width: Image width in pixels
        height: Image height in pixels
        channels: Number of channels per pixel
        depth: numpy dtype of a single channel value

    Example:
        >>> with DecodedImage(np.zeros((480, 640, 3), dtype=np.uint8)) as image:
        ...     print(image.width, image.height, image.channels)
        640 480 3
    """

    def __init__(self, data: np.ndarray):
        """Take ownership of a pixel array.

        Args:
            data: Pixel array, shape [H, W] or [H, W, C]

        Raises:
            ValueError: If the array is not 2-D or 3-D.
        """
        if data.ndim == 2:
            data = data[:, :, np.newaxis]
        if data.ndim != 3:
            raise ValueError(f"Image data must be [H, W] or [H, W, C], got shape {data.shape}")

        self._data: Optional[np.ndarray] = data
        self.height, self.width, self.channels = data.shape
        self.depth = data.dtype

    @property
    def data(self) -> np.ndarray:
        """Pixel array [H, W, C].

        Raises:
            ValueError: If the buffer has been released.
        """
        if self._data is None:
            raise ValueError("Image buffer has already been released")
        return self._data

    @property
    def released(self) -> bool:
        return self._data is None

    def release(self) -> None:
        """Release the pixel buffer. Releasing twice is a no-op."""
        if self._data is None:
            return
        self._data = None
        logger.debug(f"Released image buffer {self.width}x{self.height}x{self.channels}")

    def __enter__(self) -> DecodedImage:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        """String representation of image buffer."""
        state = "released" if self.released else "live"
        return (
            f"DecodedImage({self.width}x{self.height}, channels={self.channels}, "
            f"depth={self.depth}, {state})"
        )


class OpenCVCodec:
    """Image codec backed by OpenCV.

    Files are decoded as 3-channel BGR, the layout the engine consumes.
    """

    def __init__(self, interpolation: int = cv2.INTER_LINEAR):
        self.interpolation = interpolation

    def decode_file(self, path: str) -> DecodedImage:
        """Decode an image file into a BGR buffer.

        Args:
            path: Image file path

        Returns:
            New DecodedImage owned by the caller.

        Raises:
            ImageDecodeError: If OpenCV cannot read the file.
        """
        data = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if data is None:
            raise ImageDecodeError(f"Could not decode image file: {path}")

        image = DecodedImage(data)
        logger.debug(f"Decoded {path}: {image.width}x{image.height}")
        return image

    def resize(self, image: DecodedImage, width: int, height: int) -> DecodedImage:
        """Resize into a new buffer.

        Args:
            image: Source image (not released)
            width: Target width in pixels
            height: Target height in pixels

        Returns:
            New DecodedImage with the source's channel count and depth.
        """
        resized = cv2.resize(image.data, (width, height), interpolation=self.interpolation)

        # cv2.resize drops the channel axis of single-channel images
        if resized.ndim == 2:
            resized = resized[:, :, np.newaxis]

        return DecodedImage(resized)

    def __repr__(self) -> str:
        return f"OpenCVCodec(interpolation={self.interpolation})"


def normalized_size(width: int, height: int) -> tuple[int, int]:
    """Compute the engine input size for an image.

    Both dimensions are rounded down to a multiple of 4, then the height is
    capped at the width so the result is never portrait.

    Args:
        width: Source width in pixels
        height: Source height in pixels

    Returns:
        (width, height) of the normalized image.

    Example:
        >>> normalized_size(641, 963)
        (640, 640)
        >>> normalized_size(1283, 721)
        (1280, 720)
    """
    normalized_width = width // ALIGNMENT * ALIGNMENT
    normalized_height = height // ALIGNMENT * ALIGNMENT
    # change vertically long to horizontally long
    return normalized_width, min(normalized_width, normalized_height)


class ImageNormalizer:
    """Reshapes decoded images into the fixed shape the engine expects.

    The policy is lossy and fixed: a portrait image is squashed into a
    square rather than cropped or padded.
    """

    def __init__(self, codec: ImageCodec):
        self.codec = codec

    def normalize(self, image: DecodedImage) -> DecodedImage:
        """Resize an image to its normalized size.

        Args:
            image: Decoded source image. Not released; the caller still owns it.

        Returns:
            New DecodedImage, also owned by the caller.

        Raises:
            ImageNormalizationError: If the image is smaller than 4 pixels in
                either dimension or the resize fails.
        """
        width, height = normalized_size(image.width, image.height)
        if width == 0 or height == 0:
            raise ImageNormalizationError(
                f"Image too small to normalize: {image.width}x{image.height}"
            )

        try:
            normalized = self.codec.resize(image, width, height)
        except ImageNormalizationError:
            raise
        except Exception as e:
            raise ImageNormalizationError(f"Resize to {width}x{height} failed: {e}") from e

        logger.debug(
            f"Normalized image {image.width}x{image.height} -> "
            f"{normalized.width}x{normalized.height}"
        )
        return normalized
