#!/usr/bin/env python3
"""Batch extract swatches from a directory of images and write report files."""

import argparse
import sys
import time
from pathlib import Path

from color_value import OutOfRangeError
from extract_swatches import DecodeError, ExtractionError, palette_from_bytes
from render_palette import FILE_EXTENSIONS, OutputFormat, RenderConfig, render


IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}


def find_images(directory: Path) -> list[Path]:
    """Find all image files in directory."""
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
    )


def render_image(image_path: Path, output_dir: Path, output_format: OutputFormat,
                 config: RenderConfig, downscale: bool = True) -> tuple[Path, int]:
    """
    Extract one image's palette and write it as a report file.

    Returns:
        Tuple of (written_path, swatch_count)
    """
    palette = palette_from_bytes(image_path.read_bytes(), downscale=downscale)
    output_file = output_dir / f"{image_path.stem}-palette.{FILE_EXTENSIONS[output_format]}"
    if output_file.exists():
        print(f"  Warning: Overwriting {output_file.name}", file=sys.stderr)
    output_file.write_text(render(palette, config, output_format))
    return output_file, len(palette)


def report_summary(succeeded: int, total: int, elapsed: float, failed: list) -> int:
    """Print the batch totals and return the exit status (1 if any image failed)."""
    print()
    print(f"Completed: {succeeded}/{total} succeeded in {elapsed:.2f}s")
    if succeeded:
        print(f"Average: {elapsed / succeeded:.2f}s per image")
    if not failed:
        return 0

    print(f"Failed ({len(failed)}):")
    for name, error in failed:
        print(f"  - {name}: {error}")
    return 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Batch extract Vibrant swatches and write palette reports.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Directory containing images to analyze'
    )
    parser.add_argument(
        '--output', '-o',
        required=True,
        help='Directory for report files'
    )
    parser.add_argument(
        '--format', '-f',
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.CSS.value,
        help='Report format (default: css)'
    )
    parser.add_argument(
        '--compress',
        action='store_true',
        help='Strip whitespace from JSON and CSS reports'
    )
    parser.add_argument(
        '--rgb',
        action='store_true',
        help='Write rgb(r,g,b) instead of hex colors'
    )
    parser.add_argument(
        '--uppercase',
        action='store_true',
        help='Keep original case instead of lowercasing output'
    )
    parser.add_argument(
        '--no-downscale',
        action='store_true',
        help='Process at full resolution instead of downscaling to 256px'
    )

    args = parser.parse_args(argv)

    input_dir = Path(args.input)
    output_dir = Path(args.output)

    # Validate input directory
    if not input_dir.is_dir():
        print(f"Error: Input directory not found: {input_dir}", file=sys.stderr)
        return 2

    images = find_images(input_dir)
    if not images:
        print(f"No images found in {input_dir}", file=sys.stderr)
        return 2

    output_dir.mkdir(parents=True, exist_ok=True)

    output_format = OutputFormat(args.format)
    config = RenderConfig(
        compress=args.compress,
        lowercase=not args.uppercase,
        use_rgb_functional=args.rgb,
    )
    downscale = not args.no_downscale

    total = len(images)
    succeeded = 0
    failed = []

    batch_start = time.perf_counter()

    for i, image_path in enumerate(images, 1):
        try:
            img_start = time.perf_counter()
            _, swatch_count = render_image(image_path, output_dir, output_format, config, downscale)
            img_elapsed = time.perf_counter() - img_start

            print(f"[{i}/{total}] {image_path.name} → {swatch_count} swatches ({img_elapsed:.2f}s)")
            succeeded += 1

        except (OSError, DecodeError, ExtractionError, OutOfRangeError) as e:
            error_msg = f"{type(e).__name__}: {e}"
            print(f"[{i}/{total}] {image_path.name} → ERROR: {error_msg}", file=sys.stderr)
            failed.append((image_path.name, error_msg))

    return report_summary(succeeded, total, time.perf_counter() - batch_start, failed)


if __name__ == '__main__':
    sys.exit(main())
