"""Chat completion backends.

Both clients take an OpenAI-style message list, whose last user message holds
the RequestPayload content, and return a ChatReply. There is exactly one round
trip per call and no retry; failures surface as ChatServiceError.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
import ollama
import requests
from requests.exceptions import RequestException, Timeout, HTTPError

from ..config.constants import (
    CHAT_API_URL,
    CHAT_MODEL,
    CHAT_TEMPERATURE,
    CHAT_MAX_COMPLETION_TOKENS,
    CHAT_TOP_P,
    DEFAULT_TIMEOUT,
    OLLAMA_HOST,
    OLLAMA_MODEL,
)
from ..utils.logging_utils import get_logger
from .errors import ChatServiceError
from .tools import ToolInvocation

logger = get_logger()


@dataclass(frozen=True)
class ChatReply:
    """Text answer and/or a single tool call from the model."""
    content: Optional[str] = None
    tool_call: Optional[ToolInvocation] = None


class CompletionsChatClient:
    """Client for OpenAI-compatible /chat/completions endpoints (Groq by default)."""

    backend = "groq"

    def __init__(self, api_key: Optional[str], model: str = CHAT_MODEL, api_url: str = CHAT_API_URL,
                 timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def complete(self, messages: List[Dict[str, Any]], tools: Optional[List[Dict[str, Any]]] = None) -> ChatReply:
        """
        Send one chat completion request.

        Args:
            messages: Chat messages in OpenAI format
            tools: Optional function tool definitions

        Returns:
            ChatReply: Parsed first choice

        Raises:
            ChatServiceError: On transport errors, HTTP errors or an unexpected response shape
        """
        data: Dict[str, Any] = {
            "messages": messages,
            "model": self.model,
            "temperature": CHAT_TEMPERATURE,
            "max_completion_tokens": CHAT_MAX_COMPLETION_TOKENS,
            "top_p": CHAT_TOP_P,
            "stream": False,
            "stop": None,
        }
        if tools:
            data["tools"] = tools
            data["tool_choice"] = "auto"

        logger.info(f"Sending chat request to {self.api_url}")
        logger.debug(f"Using model: {self.model}")
        start_time = time.time()
        try:
            response = self.session.post(self.api_url, json=data, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
        except Timeout as e:
            raise ChatServiceError(f"Chat request timed out after {self.timeout} seconds", self.backend) from e
        except HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise ChatServiceError(f"Chat request failed with HTTP {status}: {e}", self.backend, status) from e
        except RequestException as e:
            raise ChatServiceError(f"Chat request failed: {e}", self.backend) from e

        duration = time.time() - start_time
        logger.info(f"Chat request completed in {duration:.2f} seconds")

        try:
            body = response.json()
        except ValueError as e:
            raise ChatServiceError("Chat service returned a non-JSON response", self.backend,
                                   response.status_code) from e
        return self.parse_response(body)

    def parse_response(self, body: Dict[str, Any]) -> ChatReply:
        """Extract the first choice's text and first tool call."""
        try:
            message = body["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise ChatServiceError("Chat response has no choices", self.backend) from e
        if not isinstance(message, dict):
            raise ChatServiceError("Chat response choice has no message object", self.backend)

        tool_call = None
        tool_calls = message.get("tool_calls") or []
        if tool_calls:
            if len(tool_calls) > 1:
                logger.warning(f"Model returned {len(tool_calls)} tool calls, only the first is used")
            first = tool_calls[0]
            function = first.get("function") or {}
            tool_call = ToolInvocation(
                name=function.get("name", ""),
                arguments=function.get("arguments") or "{}",
                call_id=first.get("id"),
            )
        return ChatReply(content=message.get("content"), tool_call=tool_call)


class OllamaChatClient:
    """Client for a local Ollama server using the ollama package."""

    backend = "ollama"

    def __init__(self, model: str = OLLAMA_MODEL, host: str = OLLAMA_HOST,
                 client: Optional[ollama.Client] = None, timeout: float = DEFAULT_TIMEOUT):
        self.model = model
        self.client = client or ollama.Client(host=host, timeout=timeout)

    @staticmethod
    def convert_message(message: Dict[str, Any]) -> Dict[str, Any]:
        """Turn OpenAI-style content blocks into Ollama's content + images shape."""
        content = message.get("content")
        if not isinstance(content, list):
            return message

        texts = []
        images = []
        for block in content:
            if block.get("type") == "text":
                texts.append(block["text"])
            elif block.get("type") == "image_url":
                url = block["image_url"]["url"]
                # Ollama wants the bare base64 string
                images.append(url.split(",", 1)[1] if url.startswith("data:") else url)
        converted = {"role": message["role"], "content": "\n".join(texts)}
        if images:
            converted["images"] = images
        return converted

    def complete(self, messages: List[Dict[str, Any]], tools: Optional[List[Dict[str, Any]]] = None) -> ChatReply:
        """
        Send one non-streaming chat request to Ollama.

        Raises:
            ChatServiceError: If the server is unreachable or rejects the request
        """
        logger.info(f"Using Ollama client with {self.model} model")
        start_time = time.time()
        try:
            response = self.client.chat(
                model=self.model,
                messages=[self.convert_message(m) for m in messages],
                tools=tools or None,
                stream=False,
            )
        except ollama.ResponseError as e:
            raise ChatServiceError(f"Ollama request failed: {e.error}", self.backend, e.status_code) from e
        except (ollama.RequestError, httpx.HTTPError, ConnectionError) as e:
            raise ChatServiceError(f"Ollama request failed: {e}", self.backend) from e

        duration = time.time() - start_time
        logger.info(f"Ollama request completed in {duration:.2f} seconds")

        message = response["message"]
        tool_call = None
        tool_calls = message.get("tool_calls") or []
        if tool_calls:
            function = tool_calls[0]["function"]
            tool_call = ToolInvocation(name=function["name"], arguments=dict(function["arguments"] or {}))
        return ChatReply(content=message.get("content") or None, tool_call=tool_call)
