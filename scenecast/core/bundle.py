"""On-disk deployment bundles.

``scenecast prepare`` stages a deployment and writes it here so it can be
signed and submitted later:

    {bundle}/bundle.json        entity id + part index
    {bundle}/parts/{cid}        raw bytes of each part
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from scenecast.models.envelopes import FileData

logger = logging.getLogger(__name__)

INDEX_FILE = "bundle.json"
PARTS_DIR = "parts"


def read_source_files(source: Path, *, exclude: Path | None = None) -> dict[str, bytes]:
    """Read every file under *source*, keyed by POSIX path relative to it."""
    source = Path(source)
    excluded = exclude.resolve() if exclude is not None else None
    files: dict[str, bytes] = {}
    for path in sorted(source.rglob("*")):
        if not path.is_file():
            continue
        if excluded is not None and path.resolve().is_relative_to(excluded):
            continue
        files[path.relative_to(source).as_posix()] = path.read_bytes()
    return files


def write_bundle(bundle_dir: Path, entity_id: str, files: list[FileData]) -> Path:
    """Write staged parts and their index; returns the index path."""
    bundle_dir = Path(bundle_dir)
    parts_dir = bundle_dir / PARTS_DIR
    parts_dir.mkdir(parents=True, exist_ok=True)

    index = {"entityId": entity_id, "files": []}
    for file_data in files:
        (parts_dir / file_data.cid).write_bytes(file_data.content)
        index["files"].append({"cid": file_data.cid, "mimeType": file_data.mime_type})

    index_path = bundle_dir / INDEX_FILE
    index_path.write_text(json.dumps(index, indent=2), encoding="utf-8")
    logger.info("Wrote bundle for %s to %s (%d parts)", entity_id, bundle_dir, len(files))
    return index_path


def read_bundle(bundle_dir: Path) -> tuple[str, list[FileData]]:
    """Load a bundle written by ``write_bundle``."""
    bundle_dir = Path(bundle_dir)
    index = json.loads((bundle_dir / INDEX_FILE).read_text(encoding="utf-8"))
    files = [
        FileData(
            cid=entry["cid"],
            content=(bundle_dir / PARTS_DIR / entry["cid"]).read_bytes(),
            mime_type=entry["mimeType"],
        )
        for entry in index["files"]
    ]
    return index["entityId"], files
