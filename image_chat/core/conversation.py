"""End-to-end handling of one chat request with images."""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..config.constants import SYSTEM_PROMPT
from ..utils.logging_utils import get_logger
from .errors import NoImagesError
from .image_validator import DEFAULT_POLICY, ValidationPolicy, validate_images
from .payload_builder import RequestPayload, build_payload
from .tools import ImageSharer

logger = get_logger()


@dataclass(frozen=True)
class ConversationResult:
    """What the user gets back for one request."""
    reply: str
    tool_result: Optional[str] = None


class ImageChatService:
    """
    Validates images, builds the request, asks the model and runs its tool call.

    Args:
        chat_client: Object with complete(messages, tools) -> ChatReply
        sharer: Optional ImageSharer; without it no tool is offered to the model
        policy: Validation limits
        max_workers: Thread pool size for image encoding
    """

    def __init__(self, chat_client, sharer: Optional[ImageSharer] = None,
                 policy: ValidationPolicy = DEFAULT_POLICY, max_workers: Optional[int] = None):
        self.chat_client = chat_client
        self.sharer = sharer
        self.policy = policy
        self.max_workers = max_workers

    def build_messages(self, payload: RequestPayload):
        return [
            {"role": "system", "content": SYSTEM_PROMPT.strip()},
            {"role": "user", "content": payload.to_content()},
        ]

    def ask(self, message: str, image_paths: Sequence[str]) -> ConversationResult:
        """
        Run the full pipeline for one user message.

        Validation and assembly finish before the chat service is contacted;
        their errors propagate and nothing is sent.

        Raises:
            ImageValidationError: If the images break the intake policy
            ImageProcessingError: If an image cannot be re-encoded
            ChatServiceError: If the chat call fails
        """
        paths = list(image_paths)
        if not paths:
            raise NoImagesError("No images provided")

        validate_images(paths, self.policy)
        payload = build_payload(message, paths, max_workers=self.max_workers)

        tools = self.sharer.tools if self.sharer else None
        reply = self.chat_client.complete(self.build_messages(payload), tools=tools)

        if reply.tool_call is None:
            return ConversationResult(reply=reply.content or "")

        if self.sharer is None:
            logger.warning(f"Ignoring tool call {reply.tool_call.name}: no publisher configured")
            return ConversationResult(reply=reply.content or "")

        logger.info(f"Model requested tool: {reply.tool_call.name}")
        tool_result = self.sharer.handle(reply.tool_call, payload.image_paths)
        text = f"{reply.content}\n\n{tool_result}" if reply.content else tool_result
        return ConversationResult(reply=text, tool_result=tool_result)
