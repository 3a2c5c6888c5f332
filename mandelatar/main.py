#!/usr/bin/env python3
"""Mandelatar -- CLI Interface.

Commands:
  random    print a token (or full image URL) for a fresh random avatar
  render    render a token to a PNG file, optionally with an overlay
  overlay   write the profile overlay assets the server composites
  serve     run the HTTP server

Usage:
    python -m mandelatar.main random [--base-url URL]
    python -m mandelatar.main render TOKEN [-o avatar.png] [--overlay profile]
    python -m mandelatar.main overlay [--output-dir assets]
    python -m mandelatar.main serve [--host HOST] [--port PORT] [--no-overlays]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from mandelatar.art import compositor
from mandelatar.art.overlays import write_profile_overlays
from mandelatar.art.store import DirectoryOverlayStore
from mandelatar.config import configure_logging, settings
from mandelatar.errors import MandelatarError
from mandelatar.fractal.png import create_png
from mandelatar.params.codec import decode_token, encode_token
from mandelatar.params.descriptor import OUTPUT_BOUNDS
from mandelatar.params.post_process import PostProcessConfig
from mandelatar.params.sampler import sample

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Deterministic Mandelbrot avatars")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    rnd = sub.add_parser("random", help="Print a token for a random avatar")
    rnd.add_argument(
        "--base-url",
        default=None,
        help="Print a full image URL under this base (e.g. http://localhost:8080)",
    )

    render = sub.add_parser("render", help="Render a token to a PNG")
    render.add_argument("token", help="Image token, as found in an image URL")
    render.add_argument("-o", "--output", type=Path, default=Path("avatar.png"),
                        help="Output PNG path (default: avatar.png)")
    render.add_argument("--overlay", choices=["profile"], default=None,
                        help="Composite an overlay over the avatar")
    render.add_argument("--overlay-dir", type=Path, default=None,
                        help="Overlay asset directory (default: MANDELATAR_OVERLAY_DIR)")

    overlay = sub.add_parser("overlay", help="Write the profile overlay assets")
    overlay.add_argument("--output-dir", type=Path, default=None,
                         help="Destination directory (default: MANDELATAR_OVERLAY_DIR)")

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None, help="Bind address (default: MANDELATAR_SERVER_ADDR)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: MANDELATAR_SERVER_PORT)")
    serve.add_argument("--no-overlays", action="store_true",
                       help="Do not write missing overlay assets before starting")

    return p.parse_args(argv)


def _run_random(args) -> int:
    token = encode_token(sample(OUTPUT_BOUNDS))
    if args.base_url:
        print(f"{args.base_url.rstrip('/')}/api/v1/img/{token}")
    else:
        print(token)
    return 0


def _run_render(args) -> int:
    descriptor = decode_token(args.token)
    pairs = [("overlay", args.overlay)] if args.overlay else []
    pp_config = PostProcessConfig.from_query_params(pairs)

    png_bytes = create_png(descriptor)
    if pp_config.should_post_process():
        store = DirectoryOverlayStore(args.overlay_dir or settings.overlay_dir)
        png_bytes = compositor.apply(pp_config, png_bytes, store.get)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(png_bytes)
    print(f"Saved {args.output} ({len(png_bytes)} bytes)")
    return 0


def _run_overlay(args) -> int:
    for path in write_profile_overlays(args.output_dir or settings.overlay_dir):
        print(f"Saved {path}")
    return 0


def _run_serve(args) -> int:
    from mandelatar.server import run

    if not args.no_overlays:
        # ?overlay=profile fails with 500 until the assets exist
        for path in write_profile_overlays(settings.overlay_dir, overwrite=False):
            logger.info("wrote missing overlay %s", path)

    run(host=args.host, port=args.port)
    return 0


_COMMANDS = {
    "random": _run_random,
    "render": _run_render,
    "overlay": _run_overlay,
    "serve": _run_serve,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging("debug" if args.verbose else settings.log_level)

    try:
        return _COMMANDS[args.command](args)
    except MandelatarError as e:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"  Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
