"""Unit tests for share tool argument decoding and image selection."""

from unittest.mock import Mock

import pytest

from image_chat.config.constants import SHARE_IMAGE_TOOL_NAME
from image_chat.core.errors import (
    ChannelNotFoundError,
    InvalidSelectionIndexError,
    PublishError,
    ToolArgumentsError,
)
from image_chat.core.tools import (
    SHARE_IMAGE_TOOL,
    ImageSharer,
    ShareImageArguments,
    ToolInvocation,
    parse_image_index,
    parse_tool_arguments,
    resolve_image_selection,
)

PATHS = ["uploads/111-a.jpg", "uploads/222-b.jpg"]


@pytest.fixture
def publisher():
    mock_publisher = Mock()
    mock_publisher.resolve_channel.return_value = "C0123456"
    mock_publisher.upload_image.return_value = True
    return mock_publisher


def invocation(**arguments):
    return ToolInvocation(name=SHARE_IMAGE_TOOL_NAME, arguments=arguments)


class TestToolSchema:
    @pytest.mark.unit
    def test_schema_shape(self):
        function = SHARE_IMAGE_TOOL["function"]
        assert SHARE_IMAGE_TOOL["type"] == "function"
        assert function["name"] == SHARE_IMAGE_TOOL_NAME
        assert set(function["parameters"]["properties"]) == {"image_index", "image_url", "channel", "context"}
        assert function["parameters"]["required"] == ["channel"]
        assert function["parameters"]["properties"]["image_index"]["type"] == ["string", "integer"]


class TestParseToolArguments:
    @pytest.mark.unit
    def test_json_text(self):
        args = parse_tool_arguments('{"image_index": "2", "channel": "#general", "context": "look"}')
        assert args == ShareImageArguments(image_index="2", channel="#general", context="look")

    @pytest.mark.unit
    def test_dict(self):
        args = parse_tool_arguments({"image_index": 1, "channel": "general"})
        assert args.image_index == 1

    @pytest.mark.unit
    def test_malformed_json(self):
        with pytest.raises(ToolArgumentsError) as exc_info:
            parse_tool_arguments('{"image_index": ')
        assert exc_info.value.raw_arguments == '{"image_index": '

    @pytest.mark.unit
    def test_not_an_object(self):
        with pytest.raises(ToolArgumentsError):
            parse_tool_arguments("[1, 2]")

    @pytest.mark.unit
    def test_missing_channel(self):
        with pytest.raises(ToolArgumentsError, match="channel"):
            parse_tool_arguments({"image_index": "1"})

    @pytest.mark.unit
    def test_missing_selection(self):
        with pytest.raises(ToolArgumentsError, match="image_index or image_url"):
            parse_tool_arguments({"channel": "general"})

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", [True, False, 1.0])
    def test_non_integer_index_types(self, raw):
        with pytest.raises(ToolArgumentsError, match="image_index"):
            parse_tool_arguments({"image_index": raw, "channel": "general"})


class TestParseImageIndex:
    @pytest.mark.unit
    @pytest.mark.parametrize("raw, expected", [("1", 0), ("2", 1), (2, 1), (" 2 ", 1)])
    def test_valid(self, raw, expected):
        assert parse_image_index(raw, 2) == expected

    @pytest.mark.unit
    def test_out_of_range_names_valid_range(self):
        with pytest.raises(InvalidSelectionIndexError) as exc_info:
            parse_image_index("3", 2)
        assert "[1,2]" in str(exc_info.value)
        assert exc_info.value.selection == "3"
        assert exc_info.value.image_count == 2

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["0", "-1", "abc", "1.5", "", "two", True])
    def test_rejected(self, raw):
        with pytest.raises(InvalidSelectionIndexError) as exc_info:
            parse_image_index(raw, 2)
        assert "[1,2]" in str(exc_info.value)

    @pytest.mark.unit
    def test_no_images(self):
        with pytest.raises(InvalidSelectionIndexError, match="No images"):
            parse_image_index("1", 0)


class TestResolveImageSelection:
    @pytest.mark.unit
    def test_index_returns_original_path(self):
        args = ShareImageArguments(image_index="2", channel="general")
        assert resolve_image_selection(args, PATHS) == PATHS[1]

    @pytest.mark.unit
    def test_index_wins_over_url(self):
        args = ShareImageArguments(image_index="1", image_url=PATHS[1], channel="general")
        assert resolve_image_selection(args, PATHS) == PATHS[0]

    @pytest.mark.unit
    def test_legacy_exact_path(self):
        args = ShareImageArguments(image_url=PATHS[1], channel="general")
        assert resolve_image_selection(args, PATHS) == PATHS[1]

    @pytest.mark.unit
    def test_legacy_upload_url(self):
        args = ShareImageArguments(image_url="http://localhost:3000/uploads/111-a.jpg", channel="general")
        assert resolve_image_selection(args, PATHS) == PATHS[0]

    @pytest.mark.unit
    def test_legacy_unknown_path(self):
        args = ShareImageArguments(image_url="uploads/other.jpg", channel="general")
        with pytest.raises(InvalidSelectionIndexError):
            resolve_image_selection(args, PATHS)

    @pytest.mark.unit
    def test_legacy_data_uri_rejected(self):
        args = ShareImageArguments(image_url="data:image/jpeg;base64,AAAA", channel="general")
        with pytest.raises(InvalidSelectionIndexError, match="by its number"):
            resolve_image_selection(args, PATHS)


class TestImageSharer:
    @pytest.mark.unit
    def test_uploads_original_file(self, publisher):
        sharer = ImageSharer(publisher)
        result = sharer.handle(invocation(image_index="2", channel="#general", context="Nice one"), PATHS)

        publisher.resolve_channel.assert_called_once_with("#general")
        publisher.upload_image.assert_called_once_with("C0123456", PATHS[1], "Nice one")
        assert result == "Image 2 was uploaded to #general."

    @pytest.mark.unit
    def test_out_of_range_becomes_message(self, publisher):
        result = ImageSharer(publisher).handle(invocation(image_index="3", channel="general"), PATHS)
        assert "[1,2]" in result
        publisher.upload_image.assert_not_called()

    @pytest.mark.unit
    def test_boolean_index_is_not_shared(self, publisher):
        result = ImageSharer(publisher).handle(invocation(image_index=True, channel="general"), PATHS)
        assert "Invalid tool arguments" in result
        publisher.upload_image.assert_not_called()

    @pytest.mark.unit
    def test_bad_arguments_become_message(self, publisher):
        bad = ToolInvocation(name=SHARE_IMAGE_TOOL_NAME, arguments="not json")
        result = ImageSharer(publisher).handle(bad, PATHS)
        assert "not valid JSON" in result
        publisher.resolve_channel.assert_not_called()

    @pytest.mark.unit
    def test_missing_channel_becomes_message(self, publisher):
        publisher.resolve_channel.side_effect = ChannelNotFoundError("random")
        result = ImageSharer(publisher).handle(invocation(image_index="1", channel="random"), PATHS)
        assert result == "Channel 'random' not found."

    @pytest.mark.unit
    def test_publish_error_becomes_message(self, publisher):
        publisher.upload_image.side_effect = PublishError("Failed to upload 111-a.jpg to Slack: not_in_channel")
        result = ImageSharer(publisher).handle(invocation(image_index="1", channel="general"), PATHS)
        assert "not_in_channel" in result

    @pytest.mark.unit
    def test_unacknowledged_upload(self, publisher):
        publisher.upload_image.return_value = False
        result = ImageSharer(publisher).handle(invocation(image_index="1", channel="general"), PATHS)
        assert result == "Failed to upload Image 1 to general."

    @pytest.mark.unit
    def test_unknown_tool(self, publisher):
        result = ImageSharer(publisher).handle(ToolInvocation(name="delete_everything", arguments={}), PATHS)
        assert "Unknown tool" in result
        publisher.resolve_channel.assert_not_called()

    @pytest.mark.unit
    def test_offers_share_tool(self, publisher):
        assert ImageSharer(publisher).tools == [SHARE_IMAGE_TOOL]
