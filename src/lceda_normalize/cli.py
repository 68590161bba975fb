#!/usr/bin/env python3
"""CLI tool for inspecting LCEDA/EasyEDA library documents."""
import argparse
import json
import logging
import sys

from .document import FormatUnrecognized, extract_head_and_shape
from .document.head import FOOTPRINT, SYMBOL
from .document.shapes import RawShape, parse_shape_lines
from .easyeda.compat import merge_shapes
from .easyeda.parser import ShapeParseError


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def _count_line(label: str, items) -> str:
    return f"  {label}: {len(items)}"


def cmd_extract(args):
    """Extract head and shape lines from a document."""
    extraction = extract_head_and_shape(_read_source(args.file))

    if args.json:
        print(json.dumps(extraction.to_dict(), indent=2, ensure_ascii=False))
        return

    fields = extraction.fields
    shapes = parse_shape_lines(extraction.shape)
    raw_count = sum(1 for s in shapes if isinstance(s, RawShape))

    print(f"\n  docType: {fields.doc_type or '(none)'}  domain: {fields.domain or 'unknown'}")
    print(f"  origin: ({fields.x:g}, {fields.y:g})")
    for key, value in sorted(fields.c_para.items()):
        print(f"  {key}: {value}")
    print(f"  shapes: {len(shapes)} ({len(shapes) - raw_count} legacy, {raw_count} JSON)\n")

    for line in extraction.shape[:args.limit] if args.limit else extraction.shape:
        print(f"  {line}")
    hidden = len(extraction.shape) - args.limit if args.limit else 0
    if hidden > 0:
        print(f"  ...and {hidden} more")
    print()


def cmd_parse(args):
    """Extract and merge a document into symbol or footprint primitives."""
    extraction = extract_head_and_shape(_read_source(args.file))

    domain = args.kind
    if domain == "auto":
        domain = extraction.fields.domain
        if domain is None:
            print(f"  Error: cannot tell symbol from footprint (docType={extraction.fields.doc_type!r}); "
                  f"use --kind")
            sys.exit(1)

    try:
        result = merge_shapes(extraction.shape, domain)
    except ShapeParseError as e:
        print(f"  Error: {e}")
        sys.exit(1)

    print(f"\n  {domain.capitalize()}:")
    if domain == SYMBOL:
        print(_count_line("pins", result.pins))
        print(_count_line("rectangles", result.rectangles))
        print(_count_line("circles", result.circles))
        print(_count_line("ellipses", result.ellipses))
        print(_count_line("polylines", result.polylines))
        print(_count_line("arcs", result.arcs))
        print(_count_line("texts", result.texts))
        if args.show:
            print()
            for pin in result.pins:
                print(f"  pin {pin.number:<4} {pin.name:<16} ({pin.x:g}, {pin.y:g}) rot={pin.rotation:g}")
    elif domain == FOOTPRINT:
        print(_count_line("pads", result.pads))
        print(_count_line("tracks", result.tracks))
        print(_count_line("vias", result.vias))
        print(_count_line("arcs", result.arcs))
        print(_count_line("circles", result.circles))
        print(_count_line("holes", result.holes))
        print(_count_line("rectangles", result.rectangles))
        print(_count_line("texts", result.texts))
        print(_count_line("regions", result.regions))
        if result.model:
            print(f"  3D model: {result.model.uuid}")
        has_tht = any(p.hole_radius > 0 for p in result.pads)
        print(f"  Type: {'Through-hole' if has_tht else 'SMD'}")
        if args.show:
            print()
            for pad in result.pads:
                print(f"  pad {pad.number:<4} {pad.shape:<8} ({pad.x:g}, {pad.y:g}) "
                      f"{pad.width:g}x{pad.height:g} layer={pad.layer}")
    print()


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="lceda-normalize",
        description="lceda-normalize - extract {head, shape[]} from LCEDA/EasyEDA library documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s extract part.symbol.txt
  %(prog)s extract part.footprint.txt --json
  %(prog)s parse part.footprint.txt --show
  %(prog)s parse export.txt --kind symbol
""")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command")

    # Extract subcommand
    ep = sub.add_parser("extract", aliases=["x"], help="Print the extracted head and shape lines")
    ep.add_argument("file", help="Document source file ('-' for stdin)")
    ep.add_argument("--json", action="store_true", help="Print the extraction as JSON")
    ep.add_argument("-n", "--limit", type=int, default=0, help="Show at most N shape lines (default: all)")
    ep.set_defaults(func=cmd_extract)

    # Parse subcommand
    pp = sub.add_parser("parse", aliases=["p"], help="Merge shapes into symbol/footprint primitives")
    pp.add_argument("file", help="Document source file ('-' for stdin)")
    pp.add_argument("-k", "--kind", choices=["auto", SYMBOL, FOOTPRINT], default="auto",
                    help="Document kind (default: from head docType)")
    pp.add_argument("--show", action="store_true", help="List pins or pads")
    pp.set_defaults(func=cmd_parse)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not args.command:
        parser.print_help()
        return

    try:
        args.func(args)
    except FormatUnrecognized as e:
        print(f"  Error: {e}")
        sys.exit(1)
    except OSError as e:
        print(f"  Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
