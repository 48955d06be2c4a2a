"""
Pytest configuration and shared fixtures for Watimage tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import pytest
from PIL import Image


@pytest.fixture
def temp_output_dir(tmp_path):
    """
    Provide a temporary directory for generated images.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path object pointing to a temporary directory
    """
    return tmp_path


@pytest.fixture
def opaque_canvas():
    """Provide a 400x300 opaque white RGBA canvas."""
    return Image.new("RGBA", (400, 300), (255, 255, 255, 255))


@pytest.fixture
def red_watermark():
    """Provide a 100x50 opaque red RGBA watermark."""
    return Image.new("RGBA", (100, 50), (255, 0, 0, 255))


@pytest.fixture
def sample_png(tmp_path):
    """
    Write a 500x500 opaque PNG to disk.

    Returns:
        Path to the PNG file
    """
    path = tmp_path / "sample.png"
    Image.new("RGBA", (500, 500), (30, 120, 200, 255)).save(path, format="PNG")
    return path


@pytest.fixture
def sample_jpeg(tmp_path):
    """
    Write a 120x80 JPEG to disk.

    Returns:
        Path to the JPEG file
    """
    path = tmp_path / "sample.jpg"
    Image.new("RGB", (120, 80), (200, 100, 50)).save(path, format="JPEG")
    return path
