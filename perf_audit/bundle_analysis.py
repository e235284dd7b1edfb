"""
Bundle size report for a build output directory.

Walks the directory tree, keeps files with the script extension, and prints the
largest chunks plus a grand total.

Usage:
  bundle-analysis dist/
  bundle-analysis build/static --ext .mjs --top 20
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path


DEFAULT_EXTENSION = ".js"
DEFAULT_TOP = 10


@dataclasses.dataclass(frozen=True)
class FileSizeEntry:
    name: str
    size: int


@dataclasses.dataclass(frozen=True)
class BundleReport:
    entries: list[FileSizeEntry]
    total: int

    @property
    def count(self) -> int:
        return len(self.entries)

    def top(self, n: int) -> list[FileSizeEntry]:
        return self.entries[: max(0, n)]


def walk(root: Path, extension: str = DEFAULT_EXTENSION) -> list[FileSizeEntry]:
    results: list[FileSizeEntry] = []
    # Name order keeps ties deterministic across filesystems.
    for item in sorted(Path(root).iterdir(), key=lambda p: p.name):
        if item.is_dir():
            results.extend(walk(item, extension))
        elif item.name.endswith(extension):
            results.append(FileSizeEntry(name=item.name, size=item.stat().st_size))
    return results


def analyze(root: Path, extension: str = DEFAULT_EXTENSION) -> BundleReport:
    files = walk(root, extension)
    # sorted() is stable with reverse=True, so equal sizes keep encounter order.
    files = sorted(files, key=lambda f: f.size, reverse=True)
    return BundleReport(entries=files, total=sum(f.size for f in files))


def to_kb(size: int) -> int:
    return int(size / 1024 + 0.5)


def format_report(report: BundleReport, top: int = DEFAULT_TOP) -> list[str]:
    lines = [f"Top {top} chunks:"]
    for f in report.top(top):
        lines.append(f"  {to_kb(f.size)} kB  {f.name}")
    lines.append(f"Total: {to_kb(report.total)} kB ({report.count} chunks)")
    return lines


def _non_negative(value: str) -> int:
    try:
        n = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from e
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bundle-analysis",
        description="Report the largest script chunks in a build output directory.",
    )
    parser.add_argument("output_dir", nargs="?", help="Build output directory to scan.")
    parser.add_argument("--ext", default=DEFAULT_EXTENSION, help="File extension to count (default: .js).")
    parser.add_argument("--top", type=_non_negative, default=DEFAULT_TOP, help="Number of chunks to list.")
    args = parser.parse_args(argv)

    if not args.output_dir:
        parser.print_usage(sys.stderr)
        return 1

    root = Path(args.output_dir)
    if not root.is_dir():
        raise SystemExit(f"missing: {root}")

    try:
        report = analyze(root, args.ext)
    except OSError as e:
        raise SystemExit(f"FAIL: {e}") from e

    for line in format_report(report, top=args.top):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
