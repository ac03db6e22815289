"""Image utilities for the image chat package."""

import io
import base64
from typing import Tuple

from PIL import Image, ImageOps


def get_image_dimensions(image_path: str) -> Tuple[int, int]:
    """
    Get the dimensions of an image without loading the full image into memory.

    Pillow only parses the header here. Decoding errors (UnidentifiedImageError,
    DecompressionBombError, OSError) propagate to the caller.

    Args:
        image_path: The path to the image file.

    Returns:
        A tuple (width, height).
    """
    with Image.open(image_path) as img:
        return img.size


def base64_size(byte_count: int) -> int:
    """Length in bytes of the padded base64 text for byte_count raw bytes."""
    return 4 * ((byte_count + 2) // 3)


def scaled_size(width: int, height: int, max_width: int) -> Tuple[int, int]:
    """
    Compute the target size for a width-bounded downscale.

    Images already at or below max_width keep their size; wider images are
    scaled to exactly max_width with the height rounded to keep the aspect ratio.
    """
    if width <= max_width:
        return width, height
    new_height = max(1, round(height * max_width / width))
    return max_width, new_height


def flatten_to_rgb(img: Image.Image) -> Image.Image:
    """Convert any image mode to RGB, compositing transparency onto white."""
    if img.mode == "RGB":
        return img
    if img.mode in ("RGBA", "LA", "P", "PA"):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return img.convert("RGB")


def compress_image(image_path: str, max_width: int, quality: int) -> Tuple[bytes, Tuple[int, int]]:
    """
    Open an image, downscale it to max_width and re-encode it as JPEG.

    Args:
        image_path: Path to the source image
        max_width: Largest allowed width in pixels
        quality: JPEG quality (1-95)

    Returns:
        Tuple of (jpeg bytes, (width, height) of the encoded image)
    """
    with Image.open(image_path) as img:
        img = ImageOps.exif_transpose(img)
        img = flatten_to_rgb(img)
        target = scaled_size(img.width, img.height, max_width)
        if target != img.size:
            img = img.resize(target, Image.Resampling.LANCZOS)
        buf = io.BytesIO()
        img.save(buf, format="JPEG", quality=quality, optimize=True)
        return buf.getvalue(), img.size


def to_data_uri(data: bytes, mime_type: str = "image/jpeg") -> str:
    """Wrap raw bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
