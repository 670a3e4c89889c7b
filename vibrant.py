#!/usr/bin/env python3
"""
Print the Vibrant swatches of an image as plain text, JSON or CSS.

    vibrant [options] file
    cat image.jpg | vibrant -i [options]
"""

import argparse
import sys
from pathlib import Path

from color_value import OutOfRangeError
from extract_swatches import DecodeError, ExtractionError, palette_from_bytes
from render_palette import OutputFormat, RenderConfig, render


USAGE = """vibrant [options] file
       cat image.jpg | vibrant -i [options]"""

# Accepted spellings after `-flag=`
BOOL_VALUES = {
    '1': True, 't': True, 'true': True,
    '0': False, 'f': False, 'false': False,
}


class BoolFlagAction(argparse.Action):
    """A boolean flag that also registers its `-no-<flag>` negation."""

    def __init__(self, option_strings, dest, default=False, help=None):
        negated = ['-no-' + s.lstrip('-') for s in option_strings]
        super().__init__(
            option_strings=list(option_strings) + negated,
            dest=dest,
            nargs=0,
            default=default,
            help=help,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, not option_string.startswith('-no-'))


def add_bool_flag(parser: argparse.ArgumentParser, bool_flags: set, flag: str, **kwargs) -> None:
    """Register a BoolFlagAction and remember its positive spelling."""
    parser.add_argument(flag, action=BoolFlagAction, **kwargs)
    bool_flags.add(flag)


def build_parser() -> tuple[argparse.ArgumentParser, set]:
    """Build the parser and the set of flags accepting `-flag=value`."""
    parser = argparse.ArgumentParser(
        prog='vibrant',
        usage=USAGE,
        description='Extract the Vibrant color swatches of an image.',
        allow_abbrev=False,
    )
    parser.add_argument(
        'file',
        nargs='?',
        help='Path to the image file'
    )

    bool_flags = set()
    add_bool_flag(parser, bool_flags, '-i', dest='stdin', help='Read image data from stdin')
    add_bool_flag(parser, bool_flags, '-json', help='Output results in JSON.')
    add_bool_flag(parser, bool_flags, '-css', help='Output results in CSS.')
    add_bool_flag(parser, bool_flags, '-compress', help='Strip whitespace from output.')
    add_bool_flag(
        parser, bool_flags, '-lowercase',
        default=True,
        help='Use lowercase only for all output. (default: true)'
    )
    add_bool_flag(parser, bool_flags, '-rgb', help='Output RGB instead of HTML hex, e.g. #ffffff.')
    add_bool_flag(
        parser, bool_flags, '-downscale',
        default=True,
        help='Shrink the image before extraction. (default: true)'
    )
    return parser, bool_flags


def expand_bool_flags(parser: argparse.ArgumentParser, bool_flags: set, argv: list) -> list:
    """Rewrite `-flag=true` to `-flag` and `-flag=false` to `-no-flag`."""
    expanded = []
    for arg in argv:
        flag, sep, value = arg.partition('=')
        if not sep or flag not in bool_flags:
            expanded.append(arg)
            continue
        if value.lower() not in BOOL_VALUES:
            parser.error(f"invalid boolean value {value!r} for flag {flag}")
        expanded.append(flag if BOOL_VALUES[value.lower()] else '-no-' + flag.lstrip('-'))
    return expanded


def parse_args(argv=None) -> argparse.Namespace:
    """Parse the command line; usage errors exit with status 2."""
    parser, bool_flags = build_parser()
    if argv is None:
        argv = sys.argv[1:]
    args = parser.parse_args(expand_bool_flags(parser, bool_flags, argv))
    if args.json and args.css:
        parser.error('-json and -css are mutually exclusive')
    if not args.stdin and not args.file:
        parser.error('an image file is required unless -i is given')
    return args


def build_config(args: argparse.Namespace) -> tuple[OutputFormat, RenderConfig]:
    """Resolve parsed flags into the output format and render options."""
    if args.json:
        output_format = OutputFormat.JSON
    elif args.css:
        output_format = OutputFormat.CSS
    else:
        output_format = OutputFormat.PLAIN

    config = RenderConfig(
        compress=args.compress,
        lowercase=args.lowercase,
        use_rgb_functional=args.rgb,
    )
    return output_format, config


def read_image_bytes(args: argparse.Namespace) -> bytes:
    if args.stdin:
        return sys.stdin.buffer.read()
    return Path(args.file).read_bytes()


def main(argv=None) -> int:
    args = parse_args(argv)
    output_format, config = build_config(args)
    source = '<stdin>' if args.stdin else args.file

    try:
        data = read_image_bytes(args)
        palette = palette_from_bytes(data, downscale=args.downscale)
        output = render(palette, config, output_format)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (DecodeError, ExtractionError, OutOfRangeError) as e:
        print(f"Error: {source}: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
