"""App configuration loader."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .models import GENERAL_ID

DATA_DIR = Path(__file__).resolve().parent
CONFIG_PATH = DATA_DIR / "settings.json"
TEMPLATES_DIR = DATA_DIR / "templates"

# 전역 기본값
APP_TITLE = "HEORepo"
ADMIN_PASSWORD = "123456"
STORE_DIR = "local_store"
SEED_FILE = "seed.json"


@dataclass(frozen=True)
class AppConfig:
    """Resolved application settings."""

    app_title: str
    admin_password: str
    store_dir: Path
    seed_path: Path
    default_collection: str = GENERAL_ID


def _resolve_path(path_str: str, base: Path = DATA_DIR) -> Path:
    """경로 문자열을 Path 객체로 변환.

    - 절대 경로인 경우: 그대로 사용
    - 상대 경로인 경우: base(기본은 패키지 폴더) 기준으로 해석
    """
    path = Path(path_str).expanduser()
    if path.is_absolute():
        return path
    return (base / path).resolve()


def load_app_config(config_path: Optional[Path] = None) -> AppConfig:
    """앱 전역 설정 로드 (HEOREPO_SETTINGS 환경 변수로 다른 파일 지정 가능)"""
    if config_path is None:
        env_path = os.environ.get("HEOREPO_SETTINGS")
        config_path = Path(env_path) if env_path else CONFIG_PATH

    raw: dict = {}
    if config_path.exists():
        raw = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"{config_path} 의 최상위 값은 객체여야 합니다.")

    # 설정 파일 안의 상대 경로는 설정 파일 위치 기준
    base = config_path.resolve().parent
    return AppConfig(
        app_title=raw.get("app_title", APP_TITLE),
        admin_password=str(raw.get("admin_password", ADMIN_PASSWORD)),
        store_dir=_resolve_path(raw.get("store_dir", STORE_DIR), base),
        seed_path=_resolve_path(raw.get("seed_path", SEED_FILE), base),
        default_collection=raw.get("default_collection", GENERAL_ID),
    )
