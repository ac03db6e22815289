"""Core module initialization."""

from .errors import (
    ImageChatError,
    ImageValidationError,
    NoImagesError,
    TooManyImagesError,
    ImageNotFoundError,
    ImageTooLargeError,
    EncodedPayloadTooLargeError,
    InvalidImageFormatError,
    ImageProcessingError,
    ChatServiceError,
    ToolArgumentsError,
    InvalidSelectionIndexError,
    ChannelNotFoundError,
    PublishError,
)
from .image_validator import (
    ValidationPolicy,
    DEFAULT_POLICY,
    ImageCandidate,
    inspect_image,
    validate_images,
    collect_validation_errors,
)
from .payload_builder import RequestPayload, TextBlock, ImageBlock, build_payload
from .tools import (
    SHARE_IMAGE_TOOL,
    ToolInvocation,
    ShareImageArguments,
    ImageSharer,
    parse_tool_arguments,
    resolve_image_selection,
)
from .chat_client import ChatReply, CompletionsChatClient, OllamaChatClient
from .slack_publisher import SlackPublisher
from .conversation import ImageChatService, ConversationResult
