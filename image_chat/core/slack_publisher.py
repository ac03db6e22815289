"""Slack upload of selected images."""

import os
import re
from typing import Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from ..utils.logging_utils import get_logger
from .errors import ChannelNotFoundError, PublishError

logger = get_logger()

_CHANNEL_ID_PATTERN = re.compile(r"^[CGD][A-Z0-9]{6,}$")


class SlackPublisher:
    """Uploads files to Slack channels through an injected WebClient."""

    def __init__(self, client: WebClient):
        self.client = client

    @classmethod
    def from_token(cls, token: str) -> "SlackPublisher":
        return cls(WebClient(token=token))

    def resolve_channel(self, channel: str) -> str:
        """
        Resolve a channel name ("general", "#general") or id to a channel id.

        Raises:
            ChannelNotFoundError: If no visible channel matches
        """
        wanted = channel.strip()
        if _CHANNEL_ID_PATTERN.match(wanted):
            try:
                info = self.client.conversations_info(channel=wanted)
                return info["channel"]["id"]
            except SlackApiError as e:
                logger.debug(f"conversations_info failed for {wanted}: {e.response.get('error')}")

        name = wanted.lstrip("#").lower()
        cursor = None
        while True:
            try:
                response = self.client.conversations_list(
                    types="public_channel,private_channel",
                    exclude_archived=True,
                    limit=200,
                    cursor=cursor,
                )
            except SlackApiError as e:
                logger.error(f"Error listing Slack channels: {e}")
                raise ChannelNotFoundError(channel) from e

            for item in response.get("channels", []):
                if item.get("name", "").lower() == name or item.get("id") == wanted:
                    logger.debug(f"Resolved channel {channel} to {item['id']}")
                    return item["id"]

            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                break

        raise ChannelNotFoundError(channel)

    def upload_image(self, channel_id: str, image_path: str, comment: Optional[str] = None) -> bool:
        """
        Upload the original image file to a channel.

        Returns:
            bool: The ok flag of the Slack response

        Raises:
            PublishError: If Slack rejects the upload
        """
        filename = os.path.basename(image_path)
        kwargs = {"channel": channel_id, "file": image_path, "filename": filename, "title": filename}
        if comment:
            kwargs["initial_comment"] = comment
        try:
            result = self.client.files_upload_v2(**kwargs)
        except SlackApiError as e:
            error = e.response.get("error") if e.response is not None else str(e)
            logger.error(f"Error uploading {image_path}: {error}")
            raise PublishError(f"Failed to upload {filename} to Slack: {error}", image_path) from e
        except OSError as e:
            raise PublishError(f"Failed to read {image_path} for upload: {e}", image_path) from e

        ok = bool(result.get("ok"))
        if ok:
            logger.info(f"Image uploaded: {filename} to {channel_id}")
        else:
            logger.warning(f"Slack did not acknowledge upload of {filename}")
        return ok
