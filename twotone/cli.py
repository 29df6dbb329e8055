"""CLI entry point for twotone.

Three build stages, runnable one at a time or chained by ``build``:
generate-site, compile-styles, highlight.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .config import DEV_MODE


def app(argv: list[str] | None = None) -> None:
    """Console script entrypoint."""
    raise SystemExit(main(argv))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="twotone",
        description="Build static sites with dual light/dark highlighted code blocks.",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"twotone {__version__}",
    )

    sub = parser.add_subparsers(dest="cmd", required=True)

    p_gen = sub.add_parser("generate-site", help="Render Markdown content into HTML pages")
    p_gen.add_argument("--content", "-c", type=Path, required=True, help="Markdown content directory")
    p_gen.add_argument("--out", "-o", type=Path, default=Path("./public"), help="Site output directory")
    p_gen.add_argument("--title", default="twotone", help="Site title")

    p_css = sub.add_parser("compile-styles", help="Compile the stylesheet for a generated site")
    p_css.add_argument("--out", "-o", type=Path, default=Path("./public"), help="Site output directory")
    p_css.add_argument("--config", type=Path, help="Theme Pair config (.toml or .json)")

    p_hl = sub.add_parser("highlight", help="Highlight code blocks in place")
    p_hl.add_argument("--root", "-r", type=Path, default=Path("./public"), help="Site output directory")
    p_hl.add_argument("--config", type=Path, help="Theme Pair config (.toml or .json)")
    p_hl.add_argument("--workers", "-j", type=int, default=None, help="Files processed concurrently")
    p_hl.add_argument("--report", type=Path, help="Write a JSON report to this path")

    p_build = sub.add_parser("build", help="Run generate-site, compile-styles and highlight")
    p_build.add_argument("--content", "-c", type=Path, required=True, help="Markdown content directory")
    p_build.add_argument("--out", "-o", type=Path, default=Path("./public"), help="Site output directory")
    p_build.add_argument("--title", default="twotone", help="Site title")
    p_build.add_argument("--config", type=Path, help="Theme Pair config (.toml or .json)")
    p_build.add_argument("--workers", "-j", type=int, default=None, help="Files processed concurrently")
    p_build.add_argument("--report", type=Path, help="Write a JSON report to this path")
    p_build.add_argument(
        "--dev",
        action="store_true",
        default=DEV_MODE,
        help="Skip the highlight stage (code blocks stay unstyled)",
    )

    args = parser.parse_args(argv)

    if args.cmd == "generate-site":
        return _cmd_generate(args)
    if args.cmd == "compile-styles":
        return _cmd_styles(args)
    if args.cmd == "highlight":
        return _cmd_highlight(args)
    if args.cmd == "build":
        return _cmd_build(args)

    parser.print_help()
    return 2


def _load_pair(config: Path | None) -> Any:
    from .highlight.theme import ThemePair, load_theme_pair

    if config is None:
        return ThemePair.from_env()
    return load_theme_pair(config)


def _cmd_generate(args: Any) -> int:
    from .site.build import generate_site

    try:
        report = generate_site(args.content, args.out, title=args.title)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("✓ Site generated")
    print(f"  Output: {report['out_dir']}")
    print(f"  Pages: {report['pages']}")
    print(f"  Code blocks: {report['code_blocks']}")
    return 0


def _cmd_styles(args: Any) -> int:
    from .highlight.theme import ConfigError
    from .site.styles import write_stylesheet

    try:
        pair = _load_pair(args.config)
        path = write_stylesheet(args.out, pair)
    except (ConfigError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"✓ Stylesheet written: {path}")
    return 0


def _cmd_highlight(args: Any) -> int:
    from .highlight.process import ResourceError, process_directory_async, write_report
    from .highlight.theme import ConfigError

    async def _run() -> int:
        try:
            pair = _load_pair(args.config)
            report = await process_directory_async(args.root, pair, workers=args.workers)
        except (ConfigError, ResourceError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        if args.report:
            write_report(report, args.report)

        _print_report(report)
        return 0 if report.ok else 1

    return asyncio.run(_run())


def _cmd_build(args: Any) -> int:
    from .highlight.theme import ConfigError

    # Validate the Theme Pair before any stage writes output.
    try:
        _load_pair(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for step in (_cmd_generate, _cmd_styles):
        status = step(args)
        if status != 0:
            return status

    if args.dev:
        print("Development build: highlight stage skipped, code blocks are unstyled")
        return 0

    args.root = args.out
    return _cmd_highlight(args)


def _print_report(report: Any) -> None:
    mark = "✓" if report.ok else "✗"
    print(f"{mark} Highlight finished")
    print(f"  Root: {report.root}")
    print(f"  Themes: {report.light} / {report.dark} (default {report.default_color})")
    print(
        f"  Files: {len(report.files)} "
        f"({report.count('highlighted')} highlighted, "
        f"{report.count('unchanged')} unchanged, {report.count('failed')} failed)"
    )

    failed = [f for f in report.files if f.status == "failed"]
    if failed:
        print(f"\nFailed files ({len(failed)}):", file=sys.stderr)
        for f in failed[:10]:
            print(f"  - {f.path}: {f.error}", file=sys.stderr)
        if len(failed) > 10:
            print(f"  ... and {len(failed) - 10} more", file=sys.stderr)

    warnings = report.warnings
    if warnings:
        print(f"\nWarnings ({len(warnings)}):")
        for w in warnings[:10]:
            print(f"  - {w}")
        if len(warnings) > 10:
            print(f"  ... and {len(warnings) - 10} more")


if __name__ == "__main__":
    app()
