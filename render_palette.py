#!/usr/bin/env python3
"""
Render a named swatch palette as plain text, JSON or CSS.

Every renderer is a pure function of (palette, config) and returns the exact
text to write to stdout, trailing newline included.
"""

import json
from dataclasses import dataclass
from enum import Enum

from color_value import ColorValue, shorten_hex


# =============================================================================
# Data Model
# =============================================================================

@dataclass(frozen=True)
class Swatch:
    """A palette entry as produced by extract_swatches.extract_palette()."""
    color: ColorValue
    population: int  # Relative pixel weight, never renormalized here
    title_text_color: ColorValue  # Legible text color over `color`


# Swatch name -> Swatch. Names are opaque strings to the renderers.
Palette = dict[str, Swatch]


@dataclass(frozen=True)
class RenderConfig:
    """Output options resolved once from the command line."""
    compress: bool = False
    lowercase: bool = True
    use_rgb_functional: bool = False


class OutputFormat(Enum):
    PLAIN = 'plain'
    JSON = 'json'
    CSS = 'css'


PLAIN_NAME_WIDTH = 12
JSON_INDENT = 2


# =============================================================================
# Plain
# =============================================================================

def render_plain(palette: Palette, config: RenderConfig) -> str:
    """
    One line per swatch: right-aligned name, hex color, population.

    Colors are always hex, whatever use_rgb_functional says. The lowercase flag
    sets the case of the hex digits only; swatch names keep their own case.
    """
    lines = []
    for name, swatch in palette.items():
        hex_val = swatch.color.to_hex(config.lowercase)
        lines.append(f"{name:>{PLAIN_NAME_WIDTH}}: {hex_val}, population: {swatch.population}\n")
    return ''.join(lines)


# =============================================================================
# JSON
# =============================================================================

def render_json(palette: Palette, config: RenderConfig) -> str:
    """
    Serialize the palette as a JSON object keyed by swatch name.

    In RGB mode each entry is {"r", "g", "b"} of the background color only;
    otherwise it is {"Color", "Text"} hex strings. Keys are sorted. With
    lowercase set, the whole serialized document is lowercased, keys included.
    """
    out = {}
    for name, swatch in palette.items():
        if config.use_rgb_functional:
            r, g, b = swatch.color.rgb
            out[name] = {'r': r, 'g': g, 'b': b}
        else:
            out[name] = {
                'Color': swatch.color.to_hex(config.lowercase),
                'Text': swatch.title_text_color.to_hex(config.lowercase),
            }

    if config.compress:
        text = json.dumps(out, sort_keys=True, separators=(',', ':'))
    else:
        text = json.dumps(out, sort_keys=True, indent=JSON_INDENT)

    if config.lowercase:
        text = text.lower()
    return text + '\n'


# =============================================================================
# CSS
# =============================================================================

def css_color(color: ColorValue, config: RenderConfig) -> str:
    """Format a color literal for a CSS declaration."""
    if config.use_rgb_functional:
        return color.to_rgb_functional()
    hex_val = color.to_hex(config.lowercase)
    if config.compress:
        hex_val = shorten_hex(hex_val)
    return hex_val


def render_css(palette: Palette, config: RenderConfig) -> str:
    """
    Emit one rule per swatch: `.name { background-color; color }`.

    The `color` declaration uses the swatch's title text color. Compressed
    output drops all optional whitespace and the last semicolon of each rule.
    """
    if config.compress:
        sp, lf, tb, sc = '', '', '', ''
    else:
        sp, lf, tb, sc = ' ', '\n', '  ', ';'

    rules = []
    for name, swatch in palette.items():
        selector = name.lower() if config.lowercase else name
        bgcolor = css_color(swatch.color, config)
        fgcolor = css_color(swatch.title_text_color, config)
        rules.append(
            f".{selector}{sp}{{{lf}"
            f"{tb}background-color:{sp}{bgcolor};{lf}"
            f"{tb}color:{sp}{fgcolor}{sc}{lf}}}{lf}{lf}"
        )

    text = ''.join(rules)
    if config.compress and rules:
        text += '\n'
    return text


# =============================================================================
# Dispatch
# =============================================================================

RENDERERS = {
    OutputFormat.PLAIN: render_plain,
    OutputFormat.JSON: render_json,
    OutputFormat.CSS: render_css,
}

FILE_EXTENSIONS = {
    OutputFormat.PLAIN: 'txt',
    OutputFormat.JSON: 'json',
    OutputFormat.CSS: 'css',
}


def render(palette: Palette, config: RenderConfig,
           output_format: OutputFormat = OutputFormat.PLAIN) -> str:
    """Render the palette with the renderer selected by output_format."""
    return RENDERERS[output_format](palette, config)
