"""URL and free-text helpers."""

import re
from typing import Optional
from urllib.parse import urlsplit

# "<"부터 다음 ">"까지 (닫히지 않은 "<"는 그대로 둠)
_TAG_RE = re.compile(r"<[^>]*>")


def sanitize(value) -> str:
    """태그 형태의 문자열 제거 후 앞뒤 공백 정리"""
    if not isinstance(value, str):
        return ""
    return _TAG_RE.sub("", value).strip()


def with_scheme(url: str) -> str:
    """스킴이 없으면 https:// 를 붙임"""
    url = url.strip()
    return url if url.startswith("http") else f"https://{url}"


def _hostname(url: str) -> Optional[str]:
    try:
        parts = urlsplit(with_scheme(url))
        parts.port  # 잘못된 포트면 ValueError
    except ValueError:
        return None
    if parts.scheme not in ("http", "https"):
        return None
    host = parts.hostname
    if not host or any(ch.isspace() for ch in host):
        return None
    return host


def is_valid_link(url: str) -> bool:
    """http/https URL 인지 확인 (도메인만 있어도 허용)"""
    if not isinstance(url, str) or not url.strip():
        return False
    return _hostname(url) is not None


def derive_domain(url: str) -> Optional[str]:
    """URL의 호스트명을 대문자로 반환, 파싱 실패 시 None"""
    if not isinstance(url, str):
        return None
    host = _hostname(url)
    return host.upper() if host else None
