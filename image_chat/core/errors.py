"""Exceptions raised by the image chat pipeline."""

from typing import Optional


class ImageChatError(Exception):
    """Base exception for the image chat package.

    All custom exceptions in this package inherit from this class.
    """


class ImageValidationError(ImageChatError):
    """Raised when uploaded images break the intake policy.

    Attributes:
        path: The offending image path, when the failure is tied to one file
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NoImagesError(ImageValidationError):
    """Raised when a chat request arrives without any image."""


class TooManyImagesError(ImageValidationError):
    """Raised when more images are supplied than the policy allows."""

    def __init__(self, count: int, limit: int):
        super().__init__(f"Too many images ({count}). Maximum allowed is {limit}.")
        self.count = count
        self.limit = limit


class ImageNotFoundError(ImageValidationError):
    """Raised when an image path does not point to a readable file."""

    def __init__(self, path: str):
        super().__init__(f"Image not found: {path}", path)


class ImageTooLargeError(ImageValidationError):
    """Raised when an image exceeds the raw size or resolution limit.

    Attributes:
        variant: "file_size" or "resolution"
        actual: Measured byte size or pixel count
        limit: The limit that was exceeded
    """

    FILE_SIZE = "file_size"
    RESOLUTION = "resolution"

    def __init__(self, path: str, variant: str, actual: Optional[int], limit: int):
        if variant == self.RESOLUTION:
            detail = f"{actual} pixels" if actual is not None else "resolution exceeds decoder limits"
            message = f"Image {path} too large: {detail}. Maximum allowed is {limit} pixels."
        else:
            message = f"Image {path} is too large ({actual} bytes). Maximum allowed is {limit} bytes."
        super().__init__(message, path)
        self.variant = variant
        self.actual = actual
        self.limit = limit


class EncodedPayloadTooLargeError(ImageValidationError):
    """Raised when the base64 form of an image exceeds the request limit."""

    def __init__(self, path: str, encoded_size: int, limit: int):
        super().__init__(
            f"Base64 version of {path} is {encoded_size} bytes and exceeds the {limit} byte request limit.",
            path,
        )
        self.encoded_size = encoded_size
        self.limit = limit


class InvalidImageFormatError(ImageValidationError):
    """Raised when an image cannot be decoded."""

    def __init__(self, path: str, reason: str = ""):
        message = f"Invalid image format for file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, path)


class ImageProcessingError(ImageChatError):
    """Raised when an image cannot be resized or re-encoded for a request."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to process image {path}: {reason}")
        self.path = path


class ChatServiceError(ImageChatError):
    """Raised when the chat completion service fails or answers with garbage.

    Attributes:
        backend: Name of the backend that failed
        status_code: HTTP status code, when there was one
    """

    def __init__(self, message: str, backend: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.backend = backend
        self.status_code = status_code


class ToolArgumentsError(ImageChatError):
    """Raised when a tool call carries arguments that do not match the schema."""

    def __init__(self, message: str, raw_arguments: object = None):
        super().__init__(message)
        self.raw_arguments = raw_arguments


class InvalidSelectionIndexError(ImageChatError):
    """Raised when a tool call selects an image that does not exist."""

    def __init__(self, selection: object, image_count: int, reason: str):
        super().__init__(reason)
        self.selection = selection
        self.image_count = image_count


class ChannelNotFoundError(ImageChatError):
    """Raised when a Slack channel cannot be resolved by name or id."""

    def __init__(self, channel: str):
        super().__init__(f"Channel '{channel}' not found.")
        self.channel = channel


class PublishError(ImageChatError):
    """Raised when the messaging platform rejects an upload."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
