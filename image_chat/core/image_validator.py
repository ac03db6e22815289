"""Image intake validation.

Images are checked against a ValidationPolicy before anything is sent to an
external service. validate_images stops at the first failure, so when it
raises for image 2 the images after it were never looked at. Callers that
want a full report for a batch use collect_validation_errors instead.
"""

import os
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from ..config.constants import MAX_IMAGES, MAX_FILE_SIZE, MAX_BASE64_SIZE, MAX_PIXELS
from ..utils.image_utils import base64_size, get_image_dimensions
from ..utils.logging_utils import get_logger
from .errors import (
    ImageValidationError,
    TooManyImagesError,
    ImageNotFoundError,
    ImageTooLargeError,
    EncodedPayloadTooLargeError,
    InvalidImageFormatError,
)

logger = get_logger()


@dataclass(frozen=True)
class ValidationPolicy:
    """Limits applied to every batch of uploaded images."""
    max_images: int = MAX_IMAGES
    max_file_size: int = MAX_FILE_SIZE
    max_base64_size: int = MAX_BASE64_SIZE
    max_pixels: int = MAX_PIXELS


DEFAULT_POLICY = ValidationPolicy()


@dataclass(frozen=True)
class ImageCandidate:
    """A local image that passed every per-file check."""
    path: str
    size_bytes: int
    dimensions: Tuple[int, int]

    @property
    def pixel_count(self) -> int:
        width, height = self.dimensions
        return width * height


def check_image_count(paths: Sequence[str], policy: ValidationPolicy = DEFAULT_POLICY) -> None:
    """Raise TooManyImagesError when the batch is over the count limit. Touches no files."""
    if len(paths) > policy.max_images:
        raise TooManyImagesError(len(paths), policy.max_images)


def inspect_image(image_path: str, policy: ValidationPolicy = DEFAULT_POLICY) -> ImageCandidate:
    """
    Run the per-file checks for a single image.

    Order: existence, raw size, base64 size, resolution. The raw size check
    runs before any encoded size is computed.

    Args:
        image_path: Path to the image file
        policy: Limits to enforce

    Returns:
        ImageCandidate: Size and dimensions of the accepted image

    Raises:
        ImageNotFoundError, ImageTooLargeError, EncodedPayloadTooLargeError,
        InvalidImageFormatError
    """
    if not os.path.isfile(image_path) or not os.access(image_path, os.R_OK):
        raise ImageNotFoundError(image_path)

    size_bytes = os.path.getsize(image_path)
    if size_bytes > policy.max_file_size:
        raise ImageTooLargeError(image_path, ImageTooLargeError.FILE_SIZE, size_bytes, policy.max_file_size)

    encoded_size = base64_size(size_bytes)
    if encoded_size > policy.max_base64_size:
        raise EncodedPayloadTooLargeError(image_path, encoded_size, policy.max_base64_size)

    try:
        width, height = get_image_dimensions(image_path)
    except Image.DecompressionBombError:
        raise ImageTooLargeError(image_path, ImageTooLargeError.RESOLUTION, None, policy.max_pixels)
    except UnidentifiedImageError as e:
        raise InvalidImageFormatError(image_path, "unrecognised image data") from e
    except (OSError, SyntaxError, ValueError) as e:
        # Pillow reports truncated or corrupt headers through these
        raise InvalidImageFormatError(image_path, str(e)) from e

    pixel_count = width * height
    if pixel_count > policy.max_pixels:
        raise ImageTooLargeError(image_path, ImageTooLargeError.RESOLUTION, pixel_count, policy.max_pixels)

    logger.debug(f"Accepted {image_path}: {size_bytes} bytes, {width}x{height}")
    return ImageCandidate(image_path, size_bytes, (width, height))


def validate_images(image_paths: Sequence[str], policy: ValidationPolicy = DEFAULT_POLICY) -> bool:
    """
    Validate a batch of images, raising on the first failure.

    Args:
        image_paths: Image file paths in upload order
        policy: Limits to enforce

    Returns:
        bool: True when every image is acceptable

    Raises:
        ImageValidationError: The first failure found
    """
    check_image_count(image_paths, policy)
    for image_path in image_paths:
        try:
            inspect_image(image_path, policy)
        except ImageValidationError as e:
            logger.error(f"Image validation failed: {e}")
            raise
    logger.info(f"Validated {len(image_paths)} image(s)")
    return True


def collect_validation_errors(image_paths: Sequence[str],
                              policy: ValidationPolicy = DEFAULT_POLICY) -> List[ImageValidationError]:
    """
    Validate every image and return all failures instead of raising.

    A batch over the count limit still short-circuits: the count error is the
    only entry and no file is read.

    Returns:
        List[ImageValidationError]: Failures in input order, empty when the batch is valid
    """
    try:
        check_image_count(image_paths, policy)
    except TooManyImagesError as e:
        return [e]

    errors: List[ImageValidationError] = []
    for image_path in image_paths:
        try:
            inspect_image(image_path, policy)
        except ImageValidationError as e:
            errors.append(e)
    if errors:
        logger.warning(f"{len(errors)} of {len(image_paths)} image(s) failed validation")
    return errors
