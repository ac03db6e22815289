"""Command line argument handling."""

import argparse
from ..config.constants import (
    BACKENDS,
    DEFAULT_BACKEND,
    CHAT_MODEL,
    OLLAMA_MODEL,
    DEFAULT_OUTPUT_DIR,
    MAX_IMAGES,
)


def parse_arguments(argv=None):
    """
    Parse command line arguments.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        argparse.Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Ask a vision model about images and share them to Slack")
    parser.add_argument("images", nargs="*", help=f"Paths to the image files (up to {MAX_IMAGES})")
    parser.add_argument("--message", "-m", default="", help="Message to send with the images")
    parser.add_argument("--backend", "-b", choices=BACKENDS, default=DEFAULT_BACKEND,
                        help=f"Chat backend to use (default: {DEFAULT_BACKEND})")
    parser.add_argument("--model", help=f"Model to use (default: {CHAT_MODEL} for groq, {OLLAMA_MODEL} for ollama)")
    parser.add_argument("--slack", action="store_true",
                        help="Let the model upload an image to Slack (needs SLACK_BOT_TOKEN)")
    parser.add_argument("--check", action="store_true",
                        help="Only validate the images and report every problem found")
    parser.add_argument("--workers", type=int, help="Threads used to encode images (default: one per image)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--save", "-s", action="store_true", help="Save the reply to a file")
    parser.add_argument("--output", "-o", default=DEFAULT_OUTPUT_DIR,
                        help=f"Output directory for saved replies (default: {DEFAULT_OUTPUT_DIR})")

    return parser.parse_args(argv)
