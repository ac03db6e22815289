"""Unit tests for request payload assembly."""

import io
import base64
import time
from unittest.mock import patch

import pytest
from PIL import Image

from image_chat.config.constants import DEFAULT_PROMPT
from image_chat.core.errors import ImageProcessingError
from image_chat.core.payload_builder import build_payload, build_text_block, encode_image_block


def decode_block_image(block: dict) -> Image.Image:
    url = block["image_url"]["url"]
    prefix = "data:image/jpeg;base64,"
    assert url.startswith(prefix)
    return Image.open(io.BytesIO(base64.b64decode(url[len(prefix):])))


class TestTextBlock:
    @pytest.mark.unit
    def test_labels_each_image_by_position(self):
        block = build_text_block("Compare these", ["x/b.png", "x/a.png"])
        assert block.text == "Compare these\nImage 1: x/b.png\nImage 2: x/a.png"

    @pytest.mark.unit
    def test_blank_message_uses_default_prompt(self):
        block = build_text_block("   ", ["a.png"])
        assert block.text.startswith(DEFAULT_PROMPT)
        assert block.text.endswith("Image 1: a.png")


class TestBuildPayload:
    @pytest.mark.unit
    def test_block_count_and_kinds(self, make_image):
        paths = [make_image(f"{name}.png") for name in ("c", "a", "b")]
        payload = build_payload("What differs?", paths)
        content = payload.to_content()

        assert len(content) == len(paths) + 1
        assert content[0]["type"] == "text"
        assert all(block["type"] == "image_url" for block in content[1:])
        for i, path in enumerate(paths, start=1):
            assert f"Image {i}: {path}" in content[0]["text"]

    @pytest.mark.unit
    def test_index_follows_position_not_name(self, make_image):
        paths = [make_image("3.png"), make_image("1.png"), make_image("2.png")]
        payload = build_payload("hi", paths)
        assert [block.index for block in payload.images] == [1, 2, 3]
        assert payload.image_paths == paths

    @pytest.mark.unit
    def test_serialised_blocks_hide_internal_fields(self, make_image):
        payload = build_payload("hi", [make_image("a.png")])
        image_block = payload.to_content()[1]
        assert set(image_block) == {"type", "image_url"}
        assert set(image_block["image_url"]) == {"url"}

    @pytest.mark.unit
    def test_wide_image_is_downscaled_to_800(self, make_image):
        path = make_image("wide.png", size=(1600, 900))
        payload = build_payload("hi", [path])
        img = decode_block_image(payload.to_content()[1])
        assert img.size == (800, 450)
        assert img.format == "JPEG"

    @pytest.mark.unit
    def test_aspect_ratio_preserved(self, make_image):
        path = make_image("odd.png", size=(1234, 567))
        block = build_payload("hi", [path]).images[0]
        assert block.width == 800
        assert abs(block.width / block.height - 1234 / 567) < 0.01

    @pytest.mark.unit
    def test_small_image_is_not_upscaled(self, make_image):
        path = make_image("small.png", size=(400, 300))
        img = decode_block_image(build_payload("hi", [path]).to_content()[1])
        assert img.size == (400, 300)

    @pytest.mark.unit
    def test_transparent_image_is_flattened(self, make_image):
        path = make_image("alpha.png", size=(50, 50), mode="RGBA")
        img = decode_block_image(build_payload("hi", [path]).to_content()[1])
        assert img.mode == "RGB"

    @pytest.mark.unit
    def test_order_kept_when_tasks_finish_out_of_order(self):
        paths = ["a.jpg", "b.jpg", "c.jpg"]
        delays = {"a.jpg": 0.3, "b.jpg": 0.15, "c.jpg": 0.0}
        finished = []

        def fake_compress(path, max_width, quality):
            time.sleep(delays[path])
            finished.append(path)
            return path.encode(), (10, 10)

        with patch("image_chat.core.payload_builder.compress_image", side_effect=fake_compress):
            payload = build_payload("hi", paths)

        assert finished[0] == "c.jpg"
        assert payload.image_paths == paths
        urls = [block.image_url.url for block in payload.images]
        assert urls == [
            "data:image/jpeg;base64," + base64.b64encode(p.encode()).decode("ascii") for p in paths
        ]

    @pytest.mark.unit
    def test_failure_names_path_and_returns_nothing(self, make_image, tmp_path):
        good = make_image("good.png")
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")

        with pytest.raises(ImageProcessingError) as exc_info:
            build_payload("hi", [good, str(bad)])
        assert exc_info.value.path == str(bad)
        assert str(bad) in str(exc_info.value)

    @pytest.mark.unit
    def test_no_images_gives_text_only(self):
        payload = build_payload("hello", [])
        assert payload.to_content() == [{"type": "text", "text": "hello"}]


class TestEncodeImageBlock:
    @pytest.mark.unit
    def test_custom_width_and_quality(self, make_image):
        path = make_image("photo.jpg", size=(1000, 500))
        block = encode_image_block(path, 4, max_width=200, quality=30)
        assert block.index == 4
        assert (block.width, block.height) == (200, 100)
        assert block.source_path == path
