"""Pytest configuration for ase-tools tests."""

import logging

import pytest

from .ase_tools.utils import build_document, pack_cel, pack_layer, solid


@pytest.fixture
def solid_document() -> bytes:
    """Two frames, one layer, a 4x4 red cel covering the canvas."""
    pixels = solid(4, 4, (255, 0, 0, 255))
    frames = [
        [pack_layer("Layer 1"), pack_cel(0, pixels=pixels, width=4, height=4)],
        [pack_cel(0, pixels=pixels, width=4, height=4)],
    ]
    return build_document(frames, width=4, height=4)


@pytest.fixture(autouse=True)
def debug_logging(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="ase_tools")
