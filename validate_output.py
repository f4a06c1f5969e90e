"""Post-build validator for media embed placeholders.

Checks every HTML file in the output/ directory after the media_embed plugin
has run. Reports placeholders whose iframe payload the bootstrap script could
not rebuild, marked iframes that were left in place, and pages where the
bootstrap script is missing or appended more than once.

Usage:
    python validate_output.py                     # default: output/
    python validate_output.py --output-dir public # custom output directory

Exit codes:
    0 = all validations passed
    1 = validation errors found
"""
from __future__ import annotations

import argparse
import json
import sys
from collections import defaultdict
from pathlib import Path

from bs4 import BeautifulSoup

PAYLOAD_ATTR = 'data-s9e-mediaembed-iframe'
MARKER_ATTR = 'data-s9e-mediaembed'
BOOTSTRAP_SIGNATURE = '"data-s9e-mediaembed","s9e-miniplayer"'


def check_payload(raw: str) -> str | None:
    """Return a description of what is wrong with a placeholder payload, if anything."""
    try:
        values = json.loads(raw)
    except ValueError as e:
        return f"Invalid JSON payload: {e}"
    if not isinstance(values, list):
        return "Payload is not a list"
    if len(values) % 2:
        return "Payload has an odd number of entries"
    if not all(isinstance(value, str) for value in values):
        return "Payload contains non-string entries"
    return None


def validate_html(html: str) -> list[str]:
    issues = []
    soup = BeautifulSoup(html, 'html.parser')

    placeholders = soup.find_all('span', attrs={PAYLOAD_ATTR: True})
    for span in placeholders:
        problem = check_payload(span[PAYLOAD_ATTR])
        if problem:
            issues.append(f"{problem}: {span[PAYLOAD_ATTR][:80]}")

    for iframe in soup.find_all('iframe', attrs={MARKER_ATTR: True}):
        if iframe.find_parent('template') is None:
            issues.append(f"Iframe left in place: {iframe.get('src', '')}")

    scripts = [s for s in soup.find_all('script') if BOOTSTRAP_SIGNATURE in (s.string or '')]
    if placeholders and not scripts:
        issues.append("Bootstrap script missing")
    elif len(scripts) > 1:
        issues.append(f"Bootstrap script appended {len(scripts)} times")

    return issues


def validate_output(output_dir: Path) -> dict[str, list[str]]:
    errors = defaultdict(list)
    html_files = sorted(output_dir.rglob('*.html'))

    print(f"[INFO] Validating {len(html_files)} HTML files in {output_dir}...")

    for html_file in html_files:
        try:
            html = html_file.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            print(f"[WARN] Failed to read {html_file.relative_to(output_dir)}: {e}")
            continue
        issues = validate_html(html)
        if issues:
            errors[str(html_file.relative_to(output_dir))].extend(issues)

    return errors


def print_report(errors: dict[str, list[str]]) -> int:
    """Print validation report and return exit code."""
    print("\n" + "=" * 70)
    print("MEDIA EMBED VALIDATION REPORT")
    print("=" * 70)

    if not errors:
        print("\n[OK] All media embed placeholders validated successfully.")
        return 0

    total = sum(len(v) for v in errors.values())
    print(f"\n[ERROR] {total} issue(s) in {len(errors)} file(s):\n")
    for source, issues in sorted(errors.items()):
        print(f"  {source}:")
        for issue in issues:
            print(f"    - {issue}")
    return 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Validate media embed placeholders in generated output")
    parser.add_argument('--output-dir', default='output', help='Output directory to validate (default: output)')
    args = parser.parse_args(argv)

    output_dir = Path(args.output_dir).resolve()
    if not output_dir.exists():
        print(f"[ERROR] Output directory not found: {output_dir}")
        print("Run 'pelican content' to generate the site first.")
        return 1

    return print_report(validate_output(output_dir))


if __name__ == '__main__':
    sys.exit(main())
