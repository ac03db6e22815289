"""Shared pytest configuration and fixtures for the test suite."""

import os
from typing import Callable

import pytest
from PIL import Image


@pytest.fixture
def make_image(tmp_path) -> Callable[..., str]:
    """Factory writing a synthetic image and returning its path."""

    def _make(name: str = "image.png", size=(64, 48), mode: str = "RGB", color=(200, 30, 30)) -> str:
        path = tmp_path / name
        fmt = "JPEG" if name.lower().endswith((".jpg", ".jpeg")) else "PNG"
        if mode in ("L", "1") and isinstance(color, tuple):
            color = 128
        if mode == "RGBA" and isinstance(color, tuple) and len(color) == 3:
            color = (*color, 128)
        Image.new(mode, size, color).save(path, format=fmt)
        return str(path)

    return _make


@pytest.fixture
def make_sized_file(tmp_path) -> Callable[[str, int], str]:
    """Factory for a file of an exact byte size (sparse, so cheap on disk)."""

    def _make(name: str, size_bytes: int) -> str:
        path = tmp_path / name
        with open(path, "wb") as f:
            f.truncate(size_bytes)
        assert os.path.getsize(path) == size_bytes
        return str(path)

    return _make
