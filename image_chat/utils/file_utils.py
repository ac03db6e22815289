"""File utilities for the image chat package."""

import os
import re
import time
from typing import Optional, Sequence

from ..utils.logging_utils import get_logger

logger = get_logger()


def save_results(reply: str, image_paths: Sequence[str], output_dir: str = "results",
                 base_filename: Optional[str] = None, tool_result: Optional[str] = None) -> Optional[str]:
    """
    Save a chat reply, the images it was about and any tool outcome to a text file.

    Args:
        reply: The reply text shown to the user
        image_paths: Images sent with the request, in order
        output_dir: Directory to save results in
        base_filename: Base filename to use (default: timestamp)
        tool_result: Outcome of a tool call, if one ran

    Returns:
        Optional[str]: Path of the written file, or None if saving failed
    """
    if not base_filename:
        base_filename = time.strftime("%Y%m%d_%H%M%S")
    base_filename = re.sub(r'[^\w\-\.]', '_', base_filename)

    lines = [f"Image {i}: {path}" for i, path in enumerate(image_paths, start=1)]
    lines += ["", "--- Reply ---", reply]
    if tool_result:
        lines += ["", "--- Tool result ---", tool_result]

    try:
        os.makedirs(output_dir, exist_ok=True)
        result_path = os.path.join(output_dir, f"{base_filename}_reply.txt")
        with open(result_path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
    except OSError as e:
        logger.error(f"Failed to save results: {e}")
        return None

    logger.info(f"Reply saved to {result_path}")
    return result_path
