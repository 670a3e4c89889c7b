#!/usr/bin/env python3
"""
Decode an image and extract its named Vibrant swatches.

Three stages: Decode → Quantize (LAB bins) → Select (score bins against six
lightness/saturation targets: Vibrant, Muted, DarkVibrant, DarkMuted,
LightVibrant, LightMuted).
"""

import colorsys
import io
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from color_value import ColorValue
from render_palette import Palette, Swatch


class DecodeError(ValueError):
    """Bytes are not a supported, well-formed raster image."""


class ExtractionError(ValueError):
    """No usable palette could be derived from the image."""


# =============================================================================
# Constants
# =============================================================================

JND = 2.3  # Just Noticeable Difference in LAB units
QUANTIZE_SCALE = 5.0  # Bin size in JNDs (~12 LAB units)
MAX_PALETTE_COLORS = 64  # Most populous bins kept as swatch candidates

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side
DOWNSCALE_SIZE = 256  # Longest side after downscaling

# Pixel filtering
MIN_ALPHA = 125
WHITE_THRESHOLD = 250

# Lightness targets (HSL lightness, 0-1)
TARGET_DARK_LUMA = 0.26
MAX_DARK_LUMA = 0.45
MIN_LIGHT_LUMA = 0.55
TARGET_LIGHT_LUMA = 0.74
MIN_NORMAL_LUMA = 0.3
TARGET_NORMAL_LUMA = 0.5
MAX_NORMAL_LUMA = 0.7

# Saturation targets (HSL saturation, 0-1)
TARGET_MUTED_SATURATION = 0.3
MAX_MUTED_SATURATION = 0.4
TARGET_VIBRANT_SATURATION = 1.0
MIN_VIBRANT_SATURATION = 0.35

WEIGHT_SATURATION = 3
WEIGHT_LUMA = 6
WEIGHT_POPULATION = 1

# YIQ brightness at which title text switches from white to black
TITLE_TEXT_YIQ_THRESHOLD = 200

WHITE = ColorValue(255, 255, 255)
BLACK = ColorValue(0, 0, 0)


@dataclass(frozen=True)
class SwatchTarget:
    """Lightness/saturation window and ideal values for one named swatch."""
    name: str
    target_luma: float
    min_luma: float
    max_luma: float
    target_saturation: float
    min_saturation: float
    max_saturation: float


# Selection order: earlier targets claim candidates first
SWATCH_TARGETS = [
    SwatchTarget('Vibrant', TARGET_NORMAL_LUMA, MIN_NORMAL_LUMA, MAX_NORMAL_LUMA,
                 TARGET_VIBRANT_SATURATION, MIN_VIBRANT_SATURATION, 1.0),
    SwatchTarget('LightVibrant', TARGET_LIGHT_LUMA, MIN_LIGHT_LUMA, 1.0,
                 TARGET_VIBRANT_SATURATION, MIN_VIBRANT_SATURATION, 1.0),
    SwatchTarget('DarkVibrant', TARGET_DARK_LUMA, 0.0, MAX_DARK_LUMA,
                 TARGET_VIBRANT_SATURATION, MIN_VIBRANT_SATURATION, 1.0),
    SwatchTarget('Muted', TARGET_NORMAL_LUMA, MIN_NORMAL_LUMA, MAX_NORMAL_LUMA,
                 TARGET_MUTED_SATURATION, 0.0, MAX_MUTED_SATURATION),
    SwatchTarget('LightMuted', TARGET_LIGHT_LUMA, MIN_LIGHT_LUMA, 1.0,
                 TARGET_MUTED_SATURATION, 0.0, MAX_MUTED_SATURATION),
    SwatchTarget('DarkMuted', TARGET_DARK_LUMA, 0.0, MAX_DARK_LUMA,
                 TARGET_MUTED_SATURATION, 0.0, MAX_MUTED_SATURATION),
]

# Output order of the palette
SWATCH_NAMES = ['Vibrant', 'Muted', 'DarkVibrant', 'DarkMuted', 'LightVibrant', 'LightMuted']


# =============================================================================
# Stage 1: Decode
# =============================================================================

def decode_image(data: bytes) -> Image.Image:
    """
    Decode raw image bytes with Pillow.

    Raises:
        DecodeError: If the data is empty, not a recognized format, truncated,
            or exceeds the size limits
    """
    if not data:
        raise DecodeError("Image data is empty")

    try:
        img = Image.open(io.BytesIO(data))
    except UnidentifiedImageError:
        raise DecodeError("Unrecognized or unsupported image format") from None
    except Image.DecompressionBombError as e:
        raise DecodeError(f"Image too large: {e}") from e
    except Exception as e:
        raise DecodeError(f"Could not open image: {e}") from e

    # Validate image dimensions before decoding pixel data
    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise DecodeError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise DecodeError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    try:
        img.load()
    except Exception as e:
        raise DecodeError(f"Could not decode image: {e}") from e

    return img


# =============================================================================
# Stage 2: Quantize
# =============================================================================

def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB array (0-255) to LAB color space."""
    rgb_norm = rgb.astype(np.float64) / 255.0

    # Apply gamma correction
    mask = rgb_norm > 0.04045
    rgb_linear = np.where(mask, ((rgb_norm + 0.055) / 1.055) ** 2.4, rgb_norm / 12.92)

    # RGB to XYZ matrix
    r, g, b = rgb_linear[:, 0], rgb_linear[:, 1], rgb_linear[:, 2]
    x = r * 0.4124564 + g * 0.3575761 + b * 0.1804375
    y = r * 0.2126729 + g * 0.7151522 + b * 0.0721750
    z = r * 0.0193339 + g * 0.1191920 + b * 0.9503041

    # XYZ to LAB (D65 reference white)
    x, y, z = x / 0.95047, y / 1.0, z / 1.08883

    epsilon = 0.008856
    kappa = 903.3
    fx = np.where(x > epsilon, np.cbrt(x), (kappa * x + 16) / 116)
    fy = np.where(y > epsilon, np.cbrt(y), (kappa * y + 16) / 116)
    fz = np.where(z > epsilon, np.cbrt(z), (kappa * z + 16) / 116)

    return np.column_stack([116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz)])


def prepare_pixels(img: Image.Image, downscale: bool = True) -> np.ndarray:
    """
    Flatten an image to candidate RGB pixels.

    Transparent (alpha < MIN_ALPHA) and near-white pixels are dropped.

    Returns:
        uint8 array of shape (n_pixels, 3)
    """
    img = img.convert('RGBA')
    if downscale:
        img.thumbnail((DOWNSCALE_SIZE, DOWNSCALE_SIZE))

    pixels = np.asarray(img).reshape(-1, 4)
    opaque = pixels[:, 3] >= MIN_ALPHA
    white = np.all(pixels[:, :3] > WHITE_THRESHOLD, axis=1)
    return pixels[opaque & ~white, :3]


def quantize(pixels: np.ndarray, scale: float = QUANTIZE_SCALE,
             max_colors: int = MAX_PALETTE_COLORS) -> np.ndarray:
    """
    Bin pixels into perceptually sized LAB buckets.

    Args:
        pixels: uint8 array of shape (n, 3)
        scale: Number of JNDs per bin
        max_colors: Number of most populous bins to keep

    Returns:
        int array of shape (n_colors, 4) where columns are [r, g, b, pixels].
        Each color is the mean RGB of its bin. Sorted by pixel count descending.
    """
    lab = rgb_to_lab(pixels)
    binned = np.round(lab / (scale * JND)).astype(np.int32)

    unique_bins, inverse, counts = np.unique(
        binned, axis=0, return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)

    # Mean RGB per bin
    sums = np.zeros((len(unique_bins), 3), dtype=np.float64)
    np.add.at(sums, inverse, pixels)
    means = np.round(sums / counts[:, None]).astype(np.int64)

    results = np.column_stack([means, counts.astype(np.int64)])
    order = np.argsort(-counts, kind='stable')
    return results[order][:max_colors]


# =============================================================================
# Stage 3: Select
# =============================================================================

@dataclass
class Candidate:
    """A quantized color competing for a named swatch."""
    color: ColorValue
    population: int
    saturation: float
    luma: float


def invert_diff(value: float, target: float) -> float:
    return 1 - abs(value - target)


def weighted_mean(*values_and_weights) -> float:
    total = 0.0
    weight_sum = 0.0
    for value, weight in values_and_weights:
        total += value * weight
        weight_sum += weight
    return total / weight_sum


def score_candidate(candidate: Candidate, target: SwatchTarget, max_population: int) -> float:
    """Closeness to the target's saturation and lightness, nudged by population."""
    return weighted_mean(
        (invert_diff(candidate.saturation, target.target_saturation), WEIGHT_SATURATION),
        (invert_diff(candidate.luma, target.target_luma), WEIGHT_LUMA),
        (candidate.population / max_population, WEIGHT_POPULATION),
    )


def find_color_variation(candidates: list, target: SwatchTarget,
                         used: set, max_population: int) -> Optional[int]:
    """Index of the best unused candidate inside the target's window, if any."""
    best = None
    best_score = 0.0
    for i, candidate in enumerate(candidates):
        if i in used:
            continue
        if not target.min_saturation <= candidate.saturation <= target.max_saturation:
            continue
        if not target.min_luma <= candidate.luma <= target.max_luma:
            continue
        score = score_candidate(candidate, target, max_population)
        if score > best_score:
            best = i
            best_score = score
    return best


def with_lightness(color: ColorValue, lightness: float) -> ColorValue:
    """Same hue and saturation at a different HSL lightness."""
    h, _, s = color.hls
    r, g, b = colorsys.hls_to_rgb(h, lightness, s)
    return ColorValue.from_channels(round(r * 255), round(g * 255), round(b * 255))


def title_text_color(color: ColorValue) -> ColorValue:
    """White or black, whichever reads better over `color` (YIQ brightness)."""
    yiq = (color.r * 299 + color.g * 587 + color.b * 114) / 1000
    return WHITE if yiq < TITLE_TEXT_YIQ_THRESHOLD else BLACK


def select_swatches(colors: np.ndarray) -> Palette:
    """
    Pick one quantized color per named target.

    Args:
        colors: Output of quantize(), rows of [r, g, b, pixels]

    Returns:
        Palette in SWATCH_NAMES order. Targets without a match are omitted,
        except that Vibrant and DarkVibrant are derived from each other.
    """
    candidates = []
    for r, g, b, count in colors:
        color = ColorValue.from_channels(r, g, b)
        _, luma, saturation = color.hls
        candidates.append(Candidate(color, int(count), saturation, luma))
    if not candidates:
        return {}

    max_population = max(c.population for c in candidates)
    selected = {}
    used = set()
    for target in SWATCH_TARGETS:
        index = find_color_variation(candidates, target, used, max_population)
        if index is not None:
            used.add(index)
            selected[target.name] = (candidates[index].color, candidates[index].population)

    # Derive a missing Vibrant/DarkVibrant from its counterpart
    if 'Vibrant' not in selected and 'DarkVibrant' in selected:
        selected['Vibrant'] = (with_lightness(selected['DarkVibrant'][0], TARGET_NORMAL_LUMA), 0)
    elif 'DarkVibrant' not in selected and 'Vibrant' in selected:
        selected['DarkVibrant'] = (with_lightness(selected['Vibrant'][0], TARGET_DARK_LUMA), 0)

    palette = {}
    for name in SWATCH_NAMES:
        if name in selected:
            color, population = selected[name]
            palette[name] = Swatch(color, population, title_text_color(color))
    return palette


# =============================================================================
# Main Pipeline
# =============================================================================

def extract_palette(img: Image.Image, downscale: bool = True) -> Palette:
    """
    Extract the named swatches of a decoded image.

    Raises:
        ExtractionError: If no pixels survive filtering or no target matches
    """
    pixels = prepare_pixels(img, downscale=downscale)
    if len(pixels) == 0:
        raise ExtractionError("Image has no opaque, non-white pixels")

    palette = select_swatches(quantize(pixels))
    if not palette:
        raise ExtractionError("No swatches could be derived from the image")
    return palette


def palette_from_bytes(data: bytes, downscale: bool = True) -> Palette:
    """Decode image bytes and extract their palette."""
    return extract_palette(decode_image(data), downscale=downscale)
