"""Tests for the plain, JSON and CSS renderers."""

import dataclasses
import json
import re

import pytest

from color_value import ColorValue
from render_palette import (
    OutputFormat, RenderConfig, Swatch,
    render, render_css, render_json, render_plain,
)


CSS_RULE = re.compile(
    r'\.([\w-]+)\s*\{\s*background-color:\s*([^;]+);\s*color:\s*([^;}\s]+);?\s*\}'
)


def parse_color(text: str) -> ColorValue:
    if text.startswith('rgb('):
        return ColorValue.from_rgb_functional(text)
    return ColorValue.from_hex(text)


def parse_css(text: str) -> dict:
    """Selector -> (background, text color)."""
    return {
        name: (parse_color(bg), parse_color(fg))
        for name, bg, fg in CSS_RULE.findall(text)
    }


# =============================================================================
# Plain
# =============================================================================

def test_plain_example_line(vibrant_only):
    assert render_plain(vibrant_only, RenderConfig()) == "     Vibrant: #ff0000, population: 120\n"


def test_plain_ignores_rgb_mode(vibrant_only):
    config = RenderConfig(use_rgb_functional=True, compress=True)
    assert render_plain(vibrant_only, config) == "     Vibrant: #ff0000, population: 120\n"


def test_plain_keeps_palette_order_and_long_names(mixed_palette):
    palette = dict(mixed_palette)
    palette['SomeVeryLongName'] = Swatch(ColorValue(1, 2, 3), 0, ColorValue(255, 255, 255))
    lines = render_plain(palette, RenderConfig()).splitlines()
    assert lines == [
        "     Vibrant: #cc3300, population: 120",
        "   DarkMuted: #334455, population: 40",
        "LightVibrant: #f0c090, population: 12",
        "SomeVeryLongName: #010203, population: 0",
    ]


def test_plain_uppercase_hex(vibrant_only):
    out = render_plain(vibrant_only, RenderConfig(lowercase=False))
    assert out == "     Vibrant: #FF0000, population: 120\n"


# =============================================================================
# JSON
# =============================================================================

def test_json_pretty(vibrant_only):
    assert render_json(vibrant_only, RenderConfig()) == (
        '{\n'
        '  "vibrant": {\n'
        '    "color": "#ff0000",\n'
        '    "text": "#ffffff"\n'
        '  }\n'
        '}\n'
    )


def test_json_compact(vibrant_only):
    out = render_json(vibrant_only, RenderConfig(compress=True))
    assert out == '{"vibrant":{"color":"#ff0000","text":"#ffffff"}}\n'


def test_json_rgb_mode_has_background_only(vibrant_only):
    out = render_json(vibrant_only, RenderConfig(compress=True, use_rgb_functional=True))
    assert out == '{"vibrant":{"b":0,"g":0,"r":255}}\n'


def test_json_without_lowercase_keeps_case(vibrant_only):
    out = render_json(vibrant_only, RenderConfig(compress=True, lowercase=False))
    assert out == '{"Vibrant":{"Color":"#FF0000","Text":"#FFFFFF"}}\n'


def test_json_keys_are_sorted(mixed_palette):
    out = render_json(mixed_palette, RenderConfig(compress=True))
    assert list(json.loads(out)) == ['darkmuted', 'lightvibrant', 'vibrant']


@pytest.mark.parametrize('rgb', [False, True])
@pytest.mark.parametrize('lowercase', [False, True])
def test_json_compression_changes_layout_only(mixed_palette, rgb, lowercase):
    pretty = render_json(mixed_palette, RenderConfig(lowercase=lowercase, use_rgb_functional=rgb))
    compact = render_json(
        mixed_palette, RenderConfig(compress=True, lowercase=lowercase, use_rgb_functional=rgb)
    )
    assert json.loads(pretty) == json.loads(compact)
    assert len(compact) < len(pretty)


# =============================================================================
# CSS
# =============================================================================

def test_css_example_rule(vibrant_only):
    assert render_css(vibrant_only, RenderConfig()) == (
        ".vibrant {\n  background-color: #ff0000;\n  color: #ffffff;\n}\n\n"
    )


def test_css_compressed_uses_short_hex(mixed_palette):
    out = render_css(mixed_palette, RenderConfig(compress=True))
    assert out == (
        ".vibrant{background-color:#c30;color:#fff}"
        ".darkmuted{background-color:#345;color:#fff}"
        ".lightvibrant{background-color:#f0c090;color:#000}\n"
    )


def test_css_rgb_mode(vibrant_only):
    config = RenderConfig(use_rgb_functional=True)
    assert render_css(vibrant_only, config) == (
        ".vibrant {\n  background-color: rgb(255,0,0);\n  color: rgb(255,255,255);\n}\n\n"
    )


def test_css_compressed_rgb_mode_skips_short_hex(vibrant_only):
    config = RenderConfig(compress=True, use_rgb_functional=True)
    assert render_css(vibrant_only, config) == (
        ".vibrant{background-color:rgb(255,0,0);color:rgb(255,255,255)}\n"
    )


def test_css_without_lowercase_keeps_case(vibrant_only):
    out = render_css(vibrant_only, RenderConfig(compress=True, lowercase=False))
    assert out == ".Vibrant{background-color:#F00;color:#FFF}\n"


def test_css_rules_separated_by_blank_line(mixed_palette):
    out = render_css(mixed_palette, RenderConfig())
    assert out.count('}\n\n') == 3
    assert out.startswith('.vibrant {\n')


@pytest.mark.parametrize('rgb', [False, True])
def test_css_compression_changes_layout_only(mixed_palette, rgb):
    loose = parse_css(render_css(mixed_palette, RenderConfig(use_rgb_functional=rgb)))
    tight = parse_css(render_css(mixed_palette, RenderConfig(compress=True, use_rgb_functional=rgb)))
    assert loose == tight
    assert loose['darkmuted'] == (ColorValue(0x33, 0x44, 0x55), ColorValue(255, 255, 255))


# =============================================================================
# Shared contract
# =============================================================================

@pytest.mark.parametrize('output_format', list(OutputFormat))
@pytest.mark.parametrize('compress', [False, True])
def test_lowercase_output_has_no_uppercase_colors(mixed_palette, output_format, compress):
    out = render(mixed_palette, RenderConfig(compress=compress), output_format)
    if output_format is OutputFormat.PLAIN:
        # Names keep their case in plain output; color literals do not
        out = re.sub(r'^\s*\w+:', '', out, flags=re.MULTILINE)
    assert out == out.lower()


@pytest.mark.parametrize('output_format, expected', [
    (OutputFormat.PLAIN, ''),
    (OutputFormat.JSON, '{}\n'),
    (OutputFormat.CSS, ''),
])
@pytest.mark.parametrize('compress', [False, True])
def test_empty_palette(output_format, expected, compress):
    assert render({}, RenderConfig(compress=compress), output_format) == expected


@pytest.mark.parametrize('output_format', list(OutputFormat))
def test_unknown_names_are_emitted(output_format):
    palette = {'Accent-1': Swatch(ColorValue(10, 20, 30), 5, ColorValue(255, 255, 255))}
    out = render(palette, RenderConfig(), output_format)
    assert 'accent-1' in out.lower()


def test_render_dispatches_by_format(mixed_palette):
    config = RenderConfig(compress=True)
    assert render(mixed_palette, config, OutputFormat.CSS) == render_css(mixed_palette, config)
    assert render(mixed_palette, config, OutputFormat.JSON) == render_json(mixed_palette, config)
    assert render(mixed_palette, config) == render_plain(mixed_palette, config)


def test_render_is_deterministic_and_leaves_palette_untouched(mixed_palette):
    before = dict(mixed_palette)
    for output_format in OutputFormat:
        first = render(mixed_palette, RenderConfig(), output_format)
        assert render(mixed_palette, RenderConfig(), output_format) == first
    assert mixed_palette == before


def test_render_config_is_immutable():
    config = RenderConfig()
    assert (config.compress, config.lowercase, config.use_rgb_functional) == (False, True, False)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.compress = True
