"""Write the pre-combined file for every bundle manifest under the static root.

``scripts/site.js.bundle`` -> ``scripts/site.js``; the COMBINED bundle option then
serves that single file instead of expanding the manifest per request.
Minified ``.min.*`` siblings are left to an external minifier.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from bundler.bundles import kind_for_manifest, manifest_entries
from bundler.logging_utils import maybe_enable_json_logging
from bundler.settings import get_settings


logger = logging.getLogger("bundler.build")


class BuildError(Exception):
    pass


def find_manifests(root: Path) -> List[Path]:
    return sorted(p for p in root.rglob("*.bundle") if p.is_file() and kind_for_manifest(p.name))


def combined_target(manifest: Path) -> Path:
    return manifest.with_name(manifest.name[: -len(".bundle")])


def combine(manifest: Path) -> str:
    kind = kind_for_manifest(manifest.name)
    if kind is None:
        raise BuildError(f"not a bundle manifest: {manifest}")
    lines = manifest.read_text(encoding="utf-8").splitlines()
    target = combined_target(manifest)
    chunks: List[str] = []
    for entry in manifest_entries(lines, kind):
        source = (manifest.parent / entry).resolve()
        if source == target.resolve():
            raise BuildError(f"{manifest} lists its own output {entry}")
        if not source.is_file():
            raise BuildError(f"{manifest}: missing source {entry}")
        text = source.read_text(encoding="utf-8")
        chunks.append(text if text.endswith("\n") else text + "\n")
    # ';' between scripts
    separator = ";\n" if kind.extension == ".js" else ""
    return separator.join(chunks)


def build(root: Path, dry_run: bool = False) -> List[Path]:
    written: List[Path] = []
    for manifest in find_manifests(root):
        target = combined_target(manifest)
        content = combine(manifest)
        if dry_run:
            print(f"would write {target.relative_to(root)} ({len(content)} bytes)")
        else:
            target.write_text(content, encoding="utf-8")
            logger.info("Combined %s -> %s", manifest.name, target.name)
        written.append(target)
    return written


def main(argv: Optional[List[str]] = None) -> int:
    maybe_enable_json_logging()
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Combine bundle manifests into single assets")
    parser.add_argument("--root", type=Path, default=None, help="static root (defaults to STATIC_ROOT)")
    parser.add_argument("--dry-run", action="store_true", help="list outputs without writing")
    args = parser.parse_args(argv)

    root = args.root or get_settings().static_root
    if root is None or not Path(root).is_dir():
        print("static root not found; pass --root or set STATIC_ROOT", file=sys.stderr)
        return 2
    try:
        written = build(Path(root), dry_run=args.dry_run)
    except BuildError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(f"Combined {len(written)} bundles under {root}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
