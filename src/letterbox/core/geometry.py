"""Canvas geometry for letterboxed output images.

All functions here are pure: they take source dimensions and configuration
values and return integer pixel geometry. Ratios are kept as
:class:`fractions.Fraction` so that truncation to whole pixels is exact.
"""

from dataclasses import dataclass
from fractions import Fraction
from numbers import Real
from typing import Tuple, Union


@dataclass(frozen=True)
class AspectRatio:
    """Target aspect ratio given as ``a:b``."""

    a: Fraction
    b: Fraction

    @property
    def factor(self) -> Fraction:
        """Dimensionless stretch factor ``max(a, b) / min(a, b)``."""
        return max(self.a, self.b) / min(self.a, self.b)

    def __str__(self) -> str:
        return f"{self.a}:{self.b}"


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle, ``(x0, y0)`` inclusive and ``(x1, y1)`` exclusive."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    def as_box(self) -> Tuple[int, int, int, int]:
        return (self.x0, self.y0, self.x1, self.y1)


@dataclass(frozen=True)
class Layout:
    """Canvas size and where the source lands on it."""

    canvas_width: int
    canvas_height: int
    placement: Rect

    @property
    def canvas(self) -> Rect:
        return Rect(0, 0, self.canvas_width, self.canvas_height)


def parse_aspect(value: str) -> AspectRatio:
    """
    Parse an ``"A:B"`` aspect ratio string.

    Both sides accept integers, decimals or fractions ("16", "2.35", "4/3").

    Raises:
        ValueError: If the string is not two positive finite numbers
            separated by a single colon.
    """
    parts = value.split(":")
    if len(parts) != 2:
        raise ValueError(f"aspect ratio must look like 'A:B', got {value!r}")

    try:
        a, b = (Fraction(part.strip()) for part in parts)
    except (ValueError, ZeroDivisionError) as exc:
        raise ValueError(f"invalid aspect ratio {value!r}: {exc}") from exc

    if a <= 0 or b <= 0:
        raise ValueError(f"aspect ratio sides must be positive, got {value!r}")

    return AspectRatio(a, b)


def _as_fraction(value: Union[Fraction, Real, str]) -> Fraction:
    if isinstance(value, float):
        # repr() is the shortest round-tripping form, so 0.1 stays 1/10
        return Fraction(repr(value))
    return Fraction(value)


def apply_aspect(width: int, height: int, aspect: AspectRatio) -> Tuple[int, int]:
    """
    Return the canvas size for a source of ``width`` x ``height``.

    The larger source axis is kept and the other axis becomes
    ``larger * factor``. Square sources keep their height and stretch the
    width.
    """
    factor = aspect.factor
    if width > height:
        return width, int(width * factor)
    return int(height * factor), height


def apply_padding(
    width: int, height: int, padding: Union[Fraction, Real, str]
) -> Tuple[int, int]:
    """Inflate both dimensions by ``padding`` (a fraction, 0.1 is 10%)."""
    fraction = _as_fraction(padding)
    if fraction < 0:
        raise ValueError(f"padding must be non-negative, got {padding!r}")
    return int(width + width * fraction), int(height + height * fraction)


def centered(
    source_width: int, source_height: int, canvas_width: int, canvas_height: int
) -> Rect:
    """Return the rectangle placing the source at the centre of the canvas."""
    x0 = canvas_width // 2 - source_width // 2
    y0 = canvas_height // 2 - source_height // 2
    return Rect(x0, y0, x0 + source_width, y0 + source_height)


def compute_layout(
    source_width: int,
    source_height: int,
    aspect_ratio: Union[AspectRatio, str],
    padding_fraction: Union[Fraction, Real, str] = 0,
) -> Layout:
    """
    Compute the letterboxed canvas and placement for one source image.

    Args:
        source_width: Width of the decoded source in pixels
        source_height: Height of the decoded source in pixels
        aspect_ratio: Parsed ratio or an ``"A:B"`` string
        padding_fraction: Proportional inflation of both canvas sides

    Returns:
        Layout with canvas dimensions and the centered placement rectangle

    Raises:
        ValueError: On non-positive source dimensions, a malformed ratio or
            negative padding
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(
            f"source dimensions must be positive, got {source_width}x{source_height}"
        )

    aspect = (
        parse_aspect(aspect_ratio) if isinstance(aspect_ratio, str) else aspect_ratio
    )

    canvas_width, canvas_height = apply_aspect(source_width, source_height, aspect)
    canvas_width, canvas_height = apply_padding(
        canvas_width, canvas_height, padding_fraction
    )
    placement = centered(source_width, source_height, canvas_width, canvas_height)

    return Layout(canvas_width, canvas_height, placement)
