"""Assembly of the multimodal content sent to the chat service."""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from ..config.constants import RESIZE_MAX_WIDTH, JPEG_QUALITY, IMAGE_MIME_TYPE, DEFAULT_PROMPT
from ..utils.image_utils import compress_image, to_data_uri
from ..utils.logging_utils import get_logger
from .errors import ImageChatError, ImageProcessingError

logger = get_logger()


class TextBlock(BaseModel):
    """Leading text block: the user message plus the image labels."""
    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    url: str  # data:image/jpeg;base64,...


class ImageBlock(BaseModel):
    """One re-encoded image. index is 1-based and matches the "Image N" label."""
    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl
    index: int = Field(exclude=True)
    source_path: str = Field(exclude=True)
    width: int = Field(exclude=True)
    height: int = Field(exclude=True)


class RequestPayload(BaseModel):
    """Ordered content blocks for one user turn."""
    text: TextBlock
    images: List[ImageBlock]

    @property
    def blocks(self) -> List[BaseModel]:
        return [self.text, *self.images]

    @property
    def image_paths(self) -> List[str]:
        """Original file paths, position i-1 holding image i."""
        return [block.source_path for block in self.images]

    def to_content(self) -> List[Dict[str, Any]]:
        """Serialise to the chat API content list."""
        return [block.model_dump() for block in self.blocks]


def build_text_block(message: str, image_paths: Sequence[str]) -> TextBlock:
    """
    Build the text block that labels every image by its 1-based position.

    A blank message falls back to the default prompt.
    """
    prompt = message.strip() if message and message.strip() else DEFAULT_PROMPT
    labels = "\n".join(f"Image {i}: {path}" for i, path in enumerate(image_paths, start=1))
    return TextBlock(text=f"{prompt}\n{labels}" if labels else prompt)


def encode_image_block(image_path: str, index: int, max_width: int = RESIZE_MAX_WIDTH,
                       quality: int = JPEG_QUALITY) -> ImageBlock:
    """
    Downscale and re-encode one image as a data URI block.

    Raises:
        ImageProcessingError: If the image cannot be decoded or encoded
    """
    start_time = time.time()
    try:
        data, (width, height) = compress_image(image_path, max_width, quality)
    except Exception as e:
        raise ImageProcessingError(image_path, str(e)) from e

    duration = time.time() - start_time
    logger.debug(f"Encoded image {index} ({image_path}) to {width}x{height}, "
                 f"{len(data)} bytes in {duration:.2f} seconds")
    return ImageBlock(
        image_url=ImageUrl(url=to_data_uri(data, IMAGE_MIME_TYPE)),
        index=index,
        source_path=image_path,
        width=width,
        height=height,
    )


def build_payload(message: str, image_paths: Sequence[str], max_workers: Optional[int] = None,
                  max_width: int = RESIZE_MAX_WIDTH, quality: int = JPEG_QUALITY) -> RequestPayload:
    """
    Build the ordered request payload for already validated images.

    Images are encoded concurrently; executor.map hands results back in input
    order, so image block i always belongs to image_paths[i-1].

    Args:
        message: The user's message
        image_paths: Validated image paths in upload order
        max_workers: Thread pool size (default: one per image)
        max_width: Largest width of the encoded images
        quality: JPEG quality of the encoded images

    Returns:
        RequestPayload: Text block followed by one image block per path

    Raises:
        ImageProcessingError: If any image fails; no partial payload is returned
    """
    paths = list(image_paths)
    text_block = build_text_block(message, paths)
    if not paths:
        return RequestPayload(text=text_block, images=[])

    logger.info(f"Encoding {len(paths)} image(s) for the request")
    workers = max_workers or len(paths)
    indexes = range(1, len(paths) + 1)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="image-encode") as executor:
        try:
            images = list(executor.map(
                lambda path, index: encode_image_block(path, index, max_width, quality),
                paths, indexes,
            ))
        except ImageChatError as e:
            logger.error(f"Request assembly failed: {e}")
            raise

    return RequestPayload(text=text_block, images=images)
