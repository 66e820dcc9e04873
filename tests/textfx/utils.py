import logging
from typing import List, Tuple

import imagehash
import numpy as np
import pytest
from PIL import Image, ImageFont, features

from textfx.api.geometry import Viewport

logging.basicConfig(level=logging.DEBUG)

HAS_FREETYPE = features.check("freetype2")

# Marker to skip tests that rasterize glyphs
skip_without_freetype = pytest.mark.skipif(
    not HAS_FREETYPE,
    reason="Requires Pillow built with FreeType support",
)


class StubFonts(object):
    """Font resolver that always returns Pillow's bundled font."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, float, int]] = []

    def resolve(self, family, size, weight):
        self.calls.append((family, size, weight))
        return ImageFont.load_default(size=max(1, int(round(size))))


def solid(size: Tuple[int, int] = (64, 48), color=(40, 120, 200, 255)) -> Image.Image:
    return Image.new("RGBA", size, color)


def gradient(size: Tuple[int, int] = (64, 48)) -> Image.Image:
    width, height = size
    x = np.linspace(0, 255, width, dtype=np.float32)[None, :].repeat(height, 0)
    y = np.linspace(0, 255, height, dtype=np.float32)[:, None].repeat(width, 1)
    data = np.stack(
        (x, y, 255 - x, np.full((height, width), 255, dtype=np.float32)), axis=2
    )
    return Image.fromarray(data.astype(np.uint8), "RGBA")


def cutout(size: Tuple[int, int] = (64, 48), color=(250, 10, 10, 255)) -> Image.Image:
    """Opaque rectangle in the middle third, transparent elsewhere."""
    image = Image.new("RGBA", size, (0, 0, 0, 0))
    width, height = size
    image.paste(
        Image.new("RGBA", (width // 3, height // 3), color),
        (width // 3, height // 3),
    )
    return image


def viewport_for(image: Image.Image) -> Viewport:
    return Viewport.from_size(image.size)


def hash_distance(image1: Image.Image, image2: Image.Image) -> int:
    hash1 = imagehash.average_hash(image1.convert("RGBA").convert("L"))
    hash2 = imagehash.average_hash(image2.convert("RGBA").convert("L"))
    return hash1 - hash2
