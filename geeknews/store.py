"""
geeknews/store.py
-----------------
Reads and writes article lists as pretty-printed JSON.
"""

import json
import os
from pathlib import Path

from geeknews.models import ArticleRecord


class FatalInputError(Exception):
    """The input article file is missing or unusable; nothing can be processed."""


def load_articles(path: str | Path) -> list[ArticleRecord]:
    path = Path(path)
    if not path.exists():
        raise FatalInputError(f"{path} not found")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise FatalInputError(f"cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise FatalInputError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise FatalInputError(f"{path} must hold a JSON list of articles")

    records = []
    for i, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            raise FatalInputError(f"{path}: entry {i} is not an object")
        try:
            records.append(ArticleRecord.from_dict(item))
        except ValueError as exc:
            raise FatalInputError(f"{path}: entry {i}: {exc}") from exc
    return records


def save_articles(path: str | Path, records: list[ArticleRecord]) -> None:
    """Write *records* as one complete JSON document, replacing the file atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_text(payload + "\n", encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
