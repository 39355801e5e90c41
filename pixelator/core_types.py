# pixelator/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str
Palette = Tuple[RGBTuple, ...]

U8RGBA = NDArray[np.uint8]  # (H, W, 4)
U8RGB = NDArray[np.uint8]  # (..., 3)
Lab = NDArray[np.float64]  # (..., 3) CIE Lab
OkLab = NDArray[np.float64]  # (..., 3) OKLab

ALPHA_CHANNEL = 3

# Value objects


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Row-major RGBA bytes, origin top-left.

    Invariant: data.size == width * height * 4.
    """

    width: int
    height: int
    data: NDArray[np.uint8]  # flat, uint8

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("buffer dimensions must be non-negative")
        arr = np.ascontiguousarray(self.data, dtype=np.uint8).reshape(-1)
        expected = int(self.width) * int(self.height) * 4
        if arr.size != expected:
            raise ValueError(
                f"pixel data has {arr.size} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )
        object.__setattr__(self, "data", arr)

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "PixelBuffer":
        """Wrap an (H, W, 4) uint8 array."""
        arr = assert_u8_rgba(rgba)
        return cls(int(arr.shape[1]), int(arr.shape[0]), arr.reshape(-1).copy())

    @classmethod
    def from_mapping(cls, value: Any) -> "PixelBuffer":
        """Accept a PixelBuffer or a {'width', 'height', 'data'} mapping."""
        if isinstance(value, PixelBuffer):
            return value
        if isinstance(value, Mapping):
            data = value["data"]
            if isinstance(data, (bytes, bytearray, memoryview)):
                arr = np.frombuffer(bytes(data), dtype=np.uint8)
            else:
                arr = np.asarray(data, dtype=np.uint8)
            return cls(int(value["width"]), int(value["height"]), arr)
        raise TypeError("expected PixelBuffer or mapping with width/height/data")

    def as_array(self) -> U8RGBA:
        """(H, W, 4) view of the buffer."""
        return self.data.reshape(self.height, self.width, 4)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.data.copy())

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height, "data": self.data}


@dataclass(frozen=True)
class DitherMatrix:
    """Square threshold matrix; values are integers in [0, divisor)."""

    name: str
    matrix: Tuple[Tuple[int, ...], ...]
    size: int
    divisor: int

    def as_array(self) -> NDArray[np.float64]:
        return np.asarray(self.matrix, dtype=np.float64)


@dataclass(frozen=True)
class ErrorKernel:
    """Error-diffusion taps as (dx, dy, fraction); fractions sum to 1."""

    name: str
    taps: Tuple[Tuple[int, int, float], ...]


@dataclass(frozen=True, eq=False)
class ClusterResult:
    """k-means output: centroids [k,3] and one cluster index per sample."""

    centroids: NDArray[np.float64]
    assignments: NDArray[np.int64]

    @property
    def k(self) -> int:
        return int(self.centroids.shape[0])

    def counts(self) -> NDArray[np.int64]:
        """Number of samples assigned to each centroid."""
        return np.bincount(self.assignments, minlength=self.k).astype(np.int64)


# Small helpers


def clamp_value(value: float, lo: float, hi: float) -> float:
    """Clamp value to [lo, hi]."""
    return lo if value < lo else hi if value > hi else value


def rgb_to_hex(rgb: Sequence[float]) -> HexStr:
    """RGB triple to upper-case hex string '#RRGGBB' (channels rounded)."""
    r, g, b = (int(clamp_value(math.floor(float(c) + 0.5), 0, 255)) for c in rgb[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive, '#' optional) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        s = "#" + s
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError(f"hex must be '#rrggbb' or '#rgb': {hex_str!r}")
    try:
        return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))
    except ValueError:
        raise ValueError(f"invalid hex colour: {hex_str!r}") from None


def normalise_hex(hex_str: str) -> HexStr:
    """Canonical '#RRGGBB' form used for lookups."""
    return rgb_to_hex(hex_to_rgb(hex_str))


def coerce_to_rgb_tuple(value: Union[str, Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """
    Coerce a hex string, a 3-length sequence, or an array row to an
    (int, int, int) RGB tuple.
    """
    if isinstance(value, str):
        return hex_to_rgb(value)
    if isinstance(value, np.ndarray):
        if value.size < 3:
            raise ValueError("array too small for RGB")
        flat = value.reshape(-1)
        return (int(flat[0]), int(flat[1]), int(flat[2]))
    if len(value) < 3:
        raise ValueError("sequence too small for RGB")
    return (int(value[0]), int(value[1]), int(value[2]))


def parse_palette(colours: Iterable[Union[str, Sequence[int]]]) -> Palette:
    """Hex strings or RGB triples to an ordered Palette tuple."""
    return tuple(coerce_to_rgb_tuple(c) for c in colours)


def palette_to_array(palette: Sequence[RGBTuple]) -> U8RGB:
    """Palette to a (P,3) uint8 array."""
    if len(palette) == 0:
        return np.zeros((0, 3), dtype=np.uint8)
    return np.asarray(palette, dtype=np.uint8).reshape(-1, 3)


def assert_u8_rgba(image: np.ndarray) -> U8RGBA:
    """Validate a uint8 (H,W,4) image and return it typed as U8RGBA."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) image")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "Palette",
    "U8RGBA",
    "U8RGB",
    "Lab",
    "OkLab",
    "ALPHA_CHANNEL",
    # value objects
    "PixelBuffer",
    "DitherMatrix",
    "ErrorKernel",
    "ClusterResult",
    # helpers
    "clamp_value",
    "rgb_to_hex",
    "hex_to_rgb",
    "normalise_hex",
    "coerce_to_rgb_tuple",
    "parse_palette",
    "palette_to_array",
    "assert_u8_rgba",
]
