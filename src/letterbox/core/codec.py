"""Pillow implementation of the image codec."""

import io
from typing import Tuple

from PIL import Image

from .geometry import Rect

# Modes Pillow can composite onto an RGB canvas without conversion.
_RGB_COMPATIBLE = {"RGB", "L"}


class PillowCodec:
    """Decode any Pillow-readable image and encode RGB canvases as JPEG."""

    format = "JPEG"

    def decode(self, data: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(data))
        image.load()
        if image.mode not in _RGB_COMPATIBLE:
            image = image.convert("RGB")
        return image

    def size(self, image: Image.Image) -> Tuple[int, int]:
        return image.size

    def new_canvas(self, width: int, height: int) -> Image.Image:
        return Image.new("RGB", (width, height))

    def fill(self, canvas: Image.Image, rect: Rect, color: Tuple[int, int, int]) -> None:
        canvas.paste(color, rect.as_box())

    def composite(self, canvas: Image.Image, image: Image.Image, rect: Rect) -> None:
        # no mask: source pixels replace the background
        canvas.paste(image, (rect.x0, rect.y0))

    def encode(self, image: Image.Image, quality: int) -> bytes:
        output = io.BytesIO()
        image.save(output, format=self.format, quality=quality)
        return output.getvalue()
