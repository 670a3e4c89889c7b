import io

import pytest
from PIL import Image

from color_value import ColorValue
from render_palette import Swatch


WHITE = ColorValue(255, 255, 255)
BLACK = ColorValue(0, 0, 0)


@pytest.fixture
def encode_png():
    """Encode a Pillow image to PNG bytes."""
    def _encode(img: Image.Image) -> bytes:
        buf = io.BytesIO()
        img.save(buf, format='PNG')
        return buf.getvalue()
    return _encode


@pytest.fixture
def red_png(encode_png) -> bytes:
    return encode_png(Image.new('RGB', (32, 32), (255, 0, 0)))


@pytest.fixture
def vibrant_only():
    return {'Vibrant': Swatch(ColorValue(255, 0, 0), 120, WHITE)}


@pytest.fixture
def mixed_palette():
    return {
        'Vibrant': Swatch(ColorValue(0xcc, 0x33, 0x00), 120, WHITE),
        'DarkMuted': Swatch(ColorValue(0x33, 0x44, 0x55), 40, WHITE),
        'LightVibrant': Swatch(ColorValue(0xf0, 0xc0, 0x90), 12, BLACK),
    }
