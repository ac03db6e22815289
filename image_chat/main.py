"""Main application logic."""

import os
import sys
import logging
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .cli import parse_arguments
from .core import (
    ImageChatError,
    ImageChatService,
    ImageSharer,
    SlackPublisher,
    CompletionsChatClient,
    OllamaChatClient,
    collect_validation_errors,
)
from .utils import save_results, setup_logger
from .utils.logging_utils import LOGGER_NAME
from .config.constants import (
    CHAT_API_KEY_ENV,
    CHAT_API_URL,
    CHAT_API_URL_ENV,
    CHAT_MODEL,
    CHAT_MODEL_ENV,
    OLLAMA_HOST,
    OLLAMA_HOST_ENV,
    OLLAMA_MODEL,
    OLLAMA_MODEL_ENV,
    SLACK_TOKEN_ENV,
    LOG_FILE,
)


def build_chat_client(args, logger: logging.Logger):
    """
    Create the chat backend selected on the command line, or None if it cannot be configured.

    Endpoints and models come from the environment (after .env is loaded),
    with --model taking precedence.
    """
    if args.backend == "ollama":
        model = args.model or os.getenv(OLLAMA_MODEL_ENV, OLLAMA_MODEL)
        host = os.getenv(OLLAMA_HOST_ENV, OLLAMA_HOST)
        logger.info(f"Using Ollama backend at {host} with model {model}")
        return OllamaChatClient(model=model, host=host)

    api_key = os.getenv(CHAT_API_KEY_ENV)
    if not api_key:
        logger.error(f"{CHAT_API_KEY_ENV} is not set")
        return None
    model = args.model or os.getenv(CHAT_MODEL_ENV, CHAT_MODEL)
    api_url = os.getenv(CHAT_API_URL_ENV, CHAT_API_URL)
    logger.info(f"Using chat completions backend at {api_url} with model {model}")
    return CompletionsChatClient(api_key=api_key, model=model, api_url=api_url)


def build_sharer(args, logger: logging.Logger) -> Optional[ImageSharer]:
    """Create the Slack sharer when --slack is given, or None."""
    if not args.slack:
        return None
    token = os.getenv(SLACK_TOKEN_ENV)
    if not token:
        logger.error(f"{SLACK_TOKEN_ENV} is not set, Slack sharing disabled")
        return None
    return ImageSharer(SlackPublisher.from_token(token))


def main(argv=None):
    """
    Main entry point for the script.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    args = parse_arguments(argv)
    load_dotenv(find_dotenv(usecwd=True))
    logger = setup_logger(LOGGER_NAME, LOG_FILE, logging.DEBUG if args.debug else logging.INFO)
    logger.debug("Debug logging enabled")

    try:
        if not args.images:
            logger.error("No image paths provided")
            print("Usage: python -m image_chat <image> [<image> ...] --message TEXT", file=sys.stderr)
            print("Run 'python -m image_chat --help' for more information", file=sys.stderr)
            return 1

        if args.check:
            errors = collect_validation_errors(args.images)
            for error in errors:
                print(error, file=sys.stderr)
            if not errors:
                print(f"All {len(args.images)} image(s) are valid.")
            return 1 if errors else 0

        chat_client = build_chat_client(args, logger)
        if chat_client is None:
            return 1
        sharer = build_sharer(args, logger)
        if args.slack and sharer is None:
            return 1

        service = ImageChatService(chat_client, sharer=sharer, max_workers=args.workers)
        result = service.ask(args.message, args.images)

        print(result.reply)

        if args.save:
            base_filename = os.path.splitext(os.path.basename(args.images[0]))[0]
            save_results(result.reply, args.images, args.output, base_filename, result.tool_result)

        logger.info("Process completed successfully")
        return 0

    except ImageChatError as e:
        logger.error(f"Request failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 130  # Standard exit code for SIGINT

    except Exception as e:
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        return 1
