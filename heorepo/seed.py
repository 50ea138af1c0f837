"""Seed dataset bundled with the build."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

from .config import DATA_DIR, SEED_FILE
from .models import (
    Collection,
    Resource,
    WorkingCopy,
    collections_from_list,
    resources_from_list,
    tagline_words_from_list,
)

SEED_PATH = DATA_DIR / SEED_FILE


@dataclass(frozen=True)
class SeedDataset:
    """Immutable baseline content and its version number."""

    version: int
    collections: Tuple[Collection, ...]
    resources: Tuple[Resource, ...]
    tagline_words: Tuple[str, ...]

    def working_copy(self) -> WorkingCopy:
        return WorkingCopy(
            collections=self.collections,
            resources=self.resources,
            tagline_words=self.tagline_words,
            version=self.version,
        )


def parse_seed(raw: Dict[str, Any]) -> SeedDataset:
    """seed.json 내용을 SeedDataset으로 변환"""
    if not isinstance(raw, dict):
        raise ValueError("seed dataset must be a JSON object")
    version = raw.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError("seed version must be an integer")
    return SeedDataset(
        version=version,
        collections=collections_from_list(raw.get("collections", [])),
        resources=resources_from_list(raw.get("resources", [])),
        tagline_words=tagline_words_from_list(raw.get("taglineWords", [])),
    )


def load_seed(seed_path: Path = SEED_PATH) -> SeedDataset:
    """번들된 seed 파일 로드 (없으면 FileNotFoundError)"""
    if not seed_path.exists():
        raise FileNotFoundError(f"Missing seed dataset at {seed_path}")
    return parse_seed(json.loads(seed_path.read_text(encoding="utf-8")))
