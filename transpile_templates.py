"""Transpile media-site XSLT templates in templates-source/ into XenForo templates.

Usage:
    python transpile_templates.py                  # default run
    python transpile_templates.py --force          # rebuild even if outputs are up to date
    python transpile_templates.py --src templates-source --dest templates

Each NAME.xsl file in the source directory becomes NAME.html in the
destination directory. The first template that cannot be transpiled stops the
run; its output file is not written.

Exit codes:
    0 = success (even if no files processed)
    1 = a template could not be transpiled
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / 'pelican-plugins'))

from media_embed.transpilers import TranspilerError, XenForoTemplate  # noqa: E402

TEMPLATE_EXT = '.xsl'
OUTPUT_EXT = '.html'


def discover_templates(src_dir: Path) -> list[Path]:
    return [p for p in sorted(src_dir.iterdir()) if p.is_file() and p.suffix.lower() == TEMPLATE_EXT]


def is_up_to_date(src_file: Path, out_file: Path) -> bool:
    return out_file.exists() and out_file.stat().st_mtime >= src_file.stat().st_mtime


def transpile_file(cfg, transpiler, src_file: Path) -> Path | None:
    """Transpile one template. Returns the output path, or None when skipped."""
    out_file = cfg.dest / (src_file.stem + OUTPUT_EXT)
    if not cfg.force and is_up_to_date(src_file, out_file):
        if not cfg.quiet:
            print(f"[SKIP] {src_file.name} (output is up to date)")
        return None

    template = transpiler.transpile(src_file.read_text(encoding='utf-8').strip())
    out_file.write_text(template, encoding='utf-8')
    if not cfg.quiet:
        print(f"  [DONE] {src_file.name} -> {out_file.name}")
    return out_file


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Transpile media-site XSLT templates to XenForo templates")
    ap.add_argument("--src", default="templates-source", help="Directory of .xsl media-site templates")
    ap.add_argument("--dest", default="templates", help="Destination directory for transpiled templates")
    ap.add_argument("--force", action="store_true", help="Transpile even if outputs are up to date")
    ap.add_argument("--quiet", action="store_true", help="Reduce console output")
    args = ap.parse_args(argv)

    args.src = Path(args.src)
    args.dest = Path(args.dest)
    return args


def main(argv=None) -> int:
    cfg = parse_args(argv)

    if not cfg.src.exists():
        print(f"[INFO] Source directory '{cfg.src}' does not exist. Nothing to transpile.")
        return 0
    cfg.dest.mkdir(parents=True, exist_ok=True)

    sources = discover_templates(cfg.src)
    if not sources:
        print(f"[INFO] No {TEMPLATE_EXT} templates in {cfg.src}")
        return 0

    if not cfg.quiet:
        print(f"Transpiling {len(sources)} template(s) from {cfg.src} -> {cfg.dest}")

    transpiler = XenForoTemplate()
    for src_file in sources:
        try:
            transpile_file(cfg, transpiler, src_file)
        except TranspilerError as e:
            print(f"[ERROR] {src_file.name}: {e}", file=sys.stderr)
            if e.fragment:
                print(f"        at: {e.fragment}", file=sys.stderr)
            return 1

    if not cfg.quiet:
        print("Complete.")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
