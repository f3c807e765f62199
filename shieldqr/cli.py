"""shieldqr CLI: shaped QR SVGs and sticker frames from the command line."""

import argparse
import json
import sys
from pathlib import Path

from shieldqr.config import ECC_LEVELS, FINDER_PATTERNS, FINDER_STYLES, GRADIENT_PRESETS, MODULE_STYLES
from shieldqr.logging import audit, get_logger, setup_logging

log = get_logger("cli")


def _values(table) -> list[str]:
    return [member.value for member in table]


def _design_options(args) -> dict:
    """Flat option mapping from the generate flags; unset flags are left out."""
    options = {
        "shapeCategory": args.category,
        "shapeVariation": args.variation,
        "shape": args.shape,
        "preset": args.preset,
        "moduleStyle": args.module_style,
        "moduleScale": args.module_scale,
        "finderPattern": args.finder_pattern,
        "finderOuterStyle": args.finder_outer,
        "finderInnerStyle": args.finder_inner,
        "errorCorrection": args.ecc,
        "gradient": args.gradient,
        "glowEffect": True if args.glow else None,
        "innerBorder": True if args.inner_border else None,
        "centerClear": True if args.center_clear else None,
        "decorativeFill": False if args.no_decorative else None,
    }
    if args.design:
        saved = json.loads(Path(args.design).read_text())
        saved.update({k: v for k, v in options.items() if v is not None})
        return saved
    return {k: v for k, v in options.items() if v is not None}


def cmd_generate(args):
    """Generate a shaped QR code."""
    from shieldqr.generator import generate_shape_qr, svg_data_uri

    svg = generate_shape_qr(args.data, _design_options(args))

    if args.data_uri:
        print(svg_data_uri(svg))
        return

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(svg, encoding="utf-8")
    print(f"Generated: {output} ({len(svg)} bytes)")


def cmd_shapes(args):
    """List shape categories and their variations."""
    from shieldqr.shapes import create_registry

    registry = create_registry()
    for key in registry.categories():
        category = registry[key]
        if args.category and key != args.category:
            continue
        print(f"{category.icon} {key} ({category.label})")
        for var_key in registry.variations(key):
            shape = registry.get(key, var_key)
            area = shape.qr_area
            print(f"    {var_key:14s} {shape.view_box:14s} qr_area={area.x},{area.y} size {area.size}")


def cmd_presets(args):
    """List color presets, gradients and style names."""
    from shieldqr.colors import COLOR_PRESETS

    print("Color presets:")
    for key, preset in COLOR_PRESETS.items():
        print(f"  {key:12s} {preset.background} / {preset.foreground}  {preset.description}")
    print("Gradients:    " + ", ".join(GRADIENT_PRESETS))
    print("Module styles: " + ", ".join(_values(MODULE_STYLES)))
    print("Finder modes:  " + ", ".join(_values(FINDER_PATTERNS)))
    print("Finder styles: " + ", ".join(_values(FINDER_STYLES)))


def cmd_sticker(args):
    """Compute sticker geometry and optionally write the frame SVG."""
    from shieldqr.sticker import compute_geometry, generate_frame_svg

    options = {
        "outerShape": args.outer,
        "outerShieldVariant": args.outer_variant,
        "innerShape": args.inner,
        "innerShieldVariant": args.inner_variant,
        "size": args.size,
        "topText": args.top_text,
        "bottomText": args.bottom_text,
        "textOffset": args.text_offset,
        "qrPadding": args.qr_padding,
        "qrZoom": args.qr_zoom,
    }
    options = {k: v for k, v in options.items() if v is not None}

    geometry = compute_geometry(options)
    print(json.dumps(geometry.to_dict(), indent=2))

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(generate_frame_svg(options), encoding="utf-8")
        print(f"Frame: {output}")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="shieldqr", description="Shaped QR codes as SVG")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")
    parser.add_argument("--json-logs", action="store_true", help="JSON log lines on the console too")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- generate ---
    p_gen = subparsers.add_parser("generate", help="Generate a shaped QR code")
    p_gen.add_argument("data", help="URL or data to encode")
    p_gen.add_argument("-o", "--output", default="output/qr.svg", help="Output file path")
    p_gen.add_argument("--design", default=None, help="Saved design JSON to start from")
    p_gen.add_argument("-c", "--category", default=None, help="Shape category (see 'shapes')")
    p_gen.add_argument("--variation", default=None, help="Variation within the category")
    p_gen.add_argument("--shape", default=None, help="Legacy shield variation name")
    p_gen.add_argument("-p", "--preset", default=None, help="Color preset")
    p_gen.add_argument("-m", "--module-style", default=None, choices=_values(MODULE_STYLES))
    p_gen.add_argument("--module-scale", type=float, default=None, help="Module size relative to its cell")
    p_gen.add_argument("--finder-pattern", default=None, choices=_values(FINDER_PATTERNS))
    p_gen.add_argument("--finder-outer", default=None, choices=_values(FINDER_STYLES))
    p_gen.add_argument("--finder-inner", default=None, choices=_values(FINDER_STYLES))
    p_gen.add_argument("-e", "--ecc", default=None, choices=list(ECC_LEVELS), help="Error correction level")
    p_gen.add_argument("-g", "--gradient", default=None, choices=list(GRADIENT_PRESETS), help="Gradient preset")
    p_gen.add_argument("--glow", action="store_true", help="Glow filter on the silhouette")
    p_gen.add_argument("--inner-border", action="store_true", help="Inset border inside the outline")
    p_gen.add_argument("--center-clear", action="store_true", help="Clear a disc in the middle of the code")
    p_gen.add_argument("--no-decorative", action="store_true", help="Disable the decorative fill")
    p_gen.add_argument("--data-uri", action="store_true", help="Print a data URI instead of writing a file")

    # --- shapes ---
    p_shapes = subparsers.add_parser("shapes", help="List shape categories and variations")
    p_shapes.add_argument("category", nargs="?", default=None, help="Only this category")

    # --- presets ---
    subparsers.add_parser("presets", help="List color presets, gradients and styles")

    # --- sticker ---
    kinds = ["square", "circle", "portrait", "landscape", "shield"]
    p_stk = subparsers.add_parser("sticker", help="Sticker container geometry")
    p_stk.add_argument("-o", "--output", default=None, help="Write the frame SVG here")
    p_stk.add_argument("--outer", default=None, choices=kinds, help="Outer container shape")
    p_stk.add_argument("--outer-variant", default=None, help="Shield variation for a shield outer")
    p_stk.add_argument("--inner", default=None, choices=kinds, help="Inner container shape")
    p_stk.add_argument("--inner-variant", default=None, help="Shield variation for a shield inner")
    p_stk.add_argument("--size", type=float, default=None, help="Longest canvas side in px")
    p_stk.add_argument("--top-text", default=None)
    p_stk.add_argument("--bottom-text", default=None)
    p_stk.add_argument("--text-offset", type=float, default=None, help="Arc offset: 0 flat, <0 inverted")
    p_stk.add_argument("--qr-padding", type=float, default=None)
    p_stk.add_argument("--qr-zoom", type=float, default=None)

    args = parser.parse_args(argv)

    # Setup logging before any command runs
    level = "DEBUG" if args.verbose else "INFO"
    setup_logging(level=level, log_file=args.log_file, json_format=args.json_logs)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "generate": cmd_generate,
        "shapes": cmd_shapes,
        "presets": cmd_presets,
        "sticker": cmd_sticker,
    }
    commands[args.command](args)
    audit("cli.done", logger=log, command=args.command)


if __name__ == "__main__":
    main()
