#!/usr/bin/env python3
"""
RGB color values and their textual forms.

A ColorValue renders as 6-digit hex (#rrggbb), shorthand hex (#rgb) when every
channel repeats its digit, or CSS functional notation rgb(r,g,b).
"""

import colorsys
import operator
import re
from dataclasses import dataclass


class OutOfRangeError(ValueError):
    """A color channel is not an integer in [0, 255]."""


HEX_PATTERN = re.compile(r'^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')
RGB_FUNCTIONAL_PATTERN = re.compile(r'^rgb\((\d{1,3}),(\d{1,3}),(\d{1,3})\)$')


def shorten_hex(hex_str: str) -> str:
    """Compress '#aabbcc' to '#abc'; anything else is returned unchanged."""
    if len(hex_str) != 7 or hex_str[0] != '#':
        return hex_str
    if hex_str[1] == hex_str[2] and hex_str[3] == hex_str[4] and hex_str[5] == hex_str[6]:
        return '#' + hex_str[1] + hex_str[3] + hex_str[5]
    return hex_str


@dataclass(frozen=True)
class ColorValue:
    """An immutable 8-bit RGB triple."""
    r: int
    g: int
    b: int

    def __post_init__(self):
        for name in ('r', 'g', 'b'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise OutOfRangeError(f"Channel {name}={value!r} is not an integer")
            if not 0 <= value <= 255:
                raise OutOfRangeError(f"Channel {name}={value} outside [0, 255]")

    @classmethod
    def from_channels(cls, r, g, b) -> 'ColorValue':
        """
        Build a color from integral channel values (numpy integers included).

        Raises:
            OutOfRangeError: If a channel is non-integral or outside [0, 255]
        """
        channels = []
        for value in (r, g, b):
            if isinstance(value, bool):
                raise OutOfRangeError(f"Channel value {value!r} is not an integer")
            try:
                channels.append(operator.index(value))
            except TypeError:
                raise OutOfRangeError(f"Channel value {value!r} is not an integer") from None
        return cls(*channels)

    @classmethod
    def from_hex(cls, text: str) -> 'ColorValue':
        """Parse '#rgb' or '#rrggbb' (the '#' is optional, any case)."""
        match = HEX_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Not a hex color: {text!r}")
        digits = match.group(1)
        if len(digits) == 3:
            digits = ''.join(d * 2 for d in digits)
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    @classmethod
    def from_rgb_functional(cls, text: str) -> 'ColorValue':
        """Parse 'rgb(r,g,b)' as produced by to_rgb_functional()."""
        match = RGB_FUNCTIONAL_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Not an rgb() color: {text!r}")
        return cls(*(int(group) for group in match.groups()))

    @property
    def rgb(self) -> tuple:
        return (self.r, self.g, self.b)

    @property
    def hls(self) -> tuple:
        """Hue, lightness, saturation, each in [0, 1]."""
        return colorsys.rgb_to_hls(self.r / 255.0, self.g / 255.0, self.b / 255.0)

    def to_hex(self, lowercase: bool = True) -> str:
        hex_str = f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        return hex_str if lowercase else hex_str.upper()

    def to_short_hex(self, lowercase: bool = True) -> str:
        return shorten_hex(self.to_hex(lowercase))

    def to_rgb_functional(self) -> str:
        return f"rgb({self.r},{self.g},{self.b})"
