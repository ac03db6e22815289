"""Function-calling tool that lets the model publish one of the images.

The model only sees downscaled copies, labelled "Image 1", "Image 2", ... in
the request text. A tool call picks one of them by number (or, for older
prompts, by path/URL) and the original file is uploaded to Slack.
"""

import os
import re
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union
from urllib.parse import urlparse

from pydantic import BaseModel, StrictInt, ValidationError, model_validator

from ..config.constants import SHARE_IMAGE_TOOL_NAME
from ..utils.logging_utils import get_logger
from .errors import (
    ToolArgumentsError,
    InvalidSelectionIndexError,
    ChannelNotFoundError,
    PublishError,
)

logger = get_logger()

SHARE_IMAGE_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": SHARE_IMAGE_TOOL_NAME,
        "description": "Upload one of the attached images to a Slack channel.",
        "parameters": {
            "type": "object",
            "properties": {
                "image_index": {
                    "type": ["string", "integer"],
                    "description": "Number of the image to upload, as labelled in the message (1 for Image 1).",
                },
                "image_url": {
                    "type": "string",
                    "description": "Deprecated. Path of the image to upload, as labelled in the message.",
                },
                "channel": {
                    "type": "string",
                    "description": "Slack channel name (with or without #) or channel id.",
                },
                "context": {
                    "type": "string",
                    "description": "Optional text posted together with the image.",
                },
            },
            "required": ["channel"],
        },
    },
}

_INDEX_PATTERN = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class ToolInvocation:
    """A tool call returned by the chat service."""
    name: str
    arguments: Union[str, Dict[str, Any]]
    call_id: Optional[str] = None


class ShareImageArguments(BaseModel):
    """Schema-checked arguments of the share tool."""
    image_index: Optional[Union[StrictInt, str]] = None
    image_url: Optional[str] = None
    channel: str
    context: Optional[str] = None

    @model_validator(mode="after")
    def require_selection(self):
        if self.image_index is None and not self.image_url:
            raise ValueError("either image_index or image_url is required")
        if not self.channel.strip():
            raise ValueError("channel must not be empty")
        return self


def parse_tool_arguments(raw_arguments: Union[str, Dict[str, Any], None]) -> ShareImageArguments:
    """
    Decode tool arguments from JSON text or an already decoded dict.

    Raises:
        ToolArgumentsError: If the arguments are not valid JSON or miss required fields
    """
    if isinstance(raw_arguments, str):
        try:
            data = json.loads(raw_arguments) if raw_arguments.strip() else {}
        except json.JSONDecodeError as e:
            raise ToolArgumentsError(f"Tool arguments are not valid JSON: {e.msg}", raw_arguments) from e
    else:
        data = raw_arguments or {}

    if not isinstance(data, dict):
        raise ToolArgumentsError("Tool arguments must be a JSON object.", raw_arguments)

    try:
        return ShareImageArguments.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'arguments'}: {err['msg']}" for err in e.errors()
        )
        raise ToolArgumentsError(f"Invalid tool arguments: {problems}", raw_arguments) from e


def parse_image_index(raw_index: Union[int, str], image_count: int) -> int:
    """
    Convert a 1-based image number from the model into a list position.

    Returns:
        int: Zero-based position into the image list

    Raises:
        InvalidSelectionIndexError: If the value is not a whole number in [1, image_count]
    """
    if image_count == 0:
        raise InvalidSelectionIndexError(raw_index, 0, "No images were supplied, so there is nothing to share.")

    valid_range = f"[1,{image_count}]"
    if isinstance(raw_index, bool) or not isinstance(raw_index, (int, str)):
        raise InvalidSelectionIndexError(
            raw_index, image_count, f"Invalid image index '{raw_index}'. Use a number in {valid_range}."
        )
    if isinstance(raw_index, str):
        text = raw_index.strip()
        if not _INDEX_PATTERN.fullmatch(text):
            raise InvalidSelectionIndexError(
                raw_index, image_count, f"Invalid image index '{raw_index}'. Use a number in {valid_range}."
            )
        value = int(text)
    else:
        value = raw_index

    if value < 1 or value > image_count:
        raise InvalidSelectionIndexError(
            raw_index, image_count, f"Image index {value} is out of range. Valid range is {valid_range}."
        )
    return value - 1


def _match_legacy_reference(reference: str, image_paths: Sequence[str]) -> Optional[int]:
    """Find the position of a path or URL among the supplied images."""
    for position, path in enumerate(image_paths):
        if reference == path:
            return position

    wanted = os.path.normpath(os.path.abspath(reference))
    for position, path in enumerate(image_paths):
        if os.path.normpath(os.path.abspath(path)) == wanted:
            return position

    # /uploads/<name> URLs and bare file names
    parsed = urlparse(reference)
    name = os.path.basename(parsed.path if parsed.scheme in ("http", "https", "file") else reference)
    if not name:
        return None
    matches = [position for position, path in enumerate(image_paths) if os.path.basename(path) == name]
    return matches[0] if len(matches) == 1 else None


def resolve_image_selection(arguments: ShareImageArguments, image_paths: Sequence[str]) -> str:
    """
    Map the model's selection back to the original, full-quality file path.

    Raises:
        InvalidSelectionIndexError: If the selection does not name a supplied image
    """
    return image_paths[select_image(arguments, image_paths)]


def select_image(arguments: ShareImageArguments, image_paths: Sequence[str]) -> int:
    """
    Zero-based position of the selected image. image_index wins when both
    selection keys are present.
    """
    if arguments.image_index is not None:
        return parse_image_index(arguments.image_index, len(image_paths))

    reference = (arguments.image_url or "").strip()
    if reference.startswith("data:"):
        raise InvalidSelectionIndexError(
            "data URI", len(image_paths),
            "Embedded image data cannot be shared. Refer to the image by its number.",
        )
    position = _match_legacy_reference(reference, image_paths)
    if position is None:
        raise InvalidSelectionIndexError(
            reference, len(image_paths),
            f"Image '{reference}' is not one of the {len(image_paths)} supplied image(s).",
        )
    logger.debug(f"Legacy image reference {reference} resolved to image {position + 1}")
    return position


class ImageSharer:
    """
    Executes share tool calls against a publisher.

    The publisher needs resolve_channel(name_or_id) -> channel id and
    upload_image(channel_id, path, comment) -> bool; SlackPublisher provides both.
    Every failure comes back as a sentence for the chat reply instead of an exception.
    """

    def __init__(self, publisher):
        self.publisher = publisher

    @property
    def tools(self):
        return [SHARE_IMAGE_TOOL]

    def handle(self, invocation: ToolInvocation, image_paths: Sequence[str]) -> str:
        if invocation.name != SHARE_IMAGE_TOOL_NAME:
            logger.warning(f"Model requested unknown tool: {invocation.name}")
            return f"Unknown tool '{invocation.name}'. Nothing was shared."

        try:
            arguments = parse_tool_arguments(invocation.arguments)
            position = select_image(arguments, image_paths)
            image_path = image_paths[position]
            channel_id = self.publisher.resolve_channel(arguments.channel)
            uploaded = self.publisher.upload_image(channel_id, image_path, arguments.context)
        except (ToolArgumentsError, InvalidSelectionIndexError, ChannelNotFoundError, PublishError) as e:
            logger.warning(f"Share tool call failed: {e}")
            return str(e)

        channel = arguments.channel
        image_label = f"Image {position + 1}"
        if not uploaded:
            logger.error(f"Upload of {image_path} to {channel} was not acknowledged")
            return f"Failed to upload {image_label} to {channel}."
        logger.info(f"Shared {image_path} to channel {channel} ({channel_id})")
        return f"{image_label} was uploaded to {channel}."
