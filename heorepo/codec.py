"""Snapshot and CSV import/export."""

import csv
import io
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple

from .editor import generate_id, today_string
from .errors import ExportError, ImportFailure
from .links import derive_domain
from .models import ALL, GENERAL_ID, IMPORT_IMAGE_URL, Resource, Suggestion, WorkingCopy

LOGGER = logging.getLogger(__name__)

CSV_COLUMNS = ["Title", "Description", "URL", "Contributor", "Category", "SubCategory"]
TEMPLATE_EXAMPLE = ["Example Analysis", "Resource description.", "https://example.com", "Admin", GENERAL_ID, "Basics"]

SNAPSHOT_FILENAME = "seed.json"
TEMPLATE_FILENAME = "heorepo_template.csv"


@dataclass(frozen=True)
class Snapshot:
    filename: str
    content: str
    version: int


@dataclass(frozen=True)
class ImportReport:
    imported: int
    skipped: int


def _write_csv(rows: Iterable[Iterable[Optional[str]]]) -> str:
    """헤더는 그대로, 데이터 행은 모든 칸을 큰따옴표로 감싼 CSV 문자열"""
    output = io.StringIO()
    csv.writer(output, lineterminator="\n").writerow(CSV_COLUMNS)
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(["" if v is None else v for v in row])
    return output.getvalue().rstrip("\n")


def parse_csv(text: str) -> List[List[str]]:
    """따옴표, 이중 따옴표, 따옴표 안의 쉼표/줄바꿈, \\n 과 \\r\\n 줄 끝을 처리하는 CSV 파서

    빈 줄은 무시합니다.
    """
    rows: List[List[str]] = []
    row: List[str] = []
    cell: List[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""

        if in_quotes:
            if char == '"' and next_char == '"':
                cell.append('"')
                i += 1
            elif char == '"':
                in_quotes = False
            else:
                cell.append(char)
        elif char == '"':
            in_quotes = True
        elif char == ",":
            row.append("".join(cell))
            cell = []
        elif char in "\r\n":
            if cell or row:
                row.append("".join(cell))
                rows.append(row)
            row = []
            cell = []
            if char == "\r" and next_char == "\n":
                i += 1
        else:
            cell.append(char)
        i += 1

    if cell or row:
        row.append("".join(cell))
        rows.append(row)
    return rows


def build_contribution_csv(suggestions: Iterable[Suggestion]) -> str:
    """제안 목록을 CSV 문자열로 변환 (비어 있으면 ExportError)"""
    suggestions = list(suggestions)
    if not suggestions:
        raise ExportError("Add at least one suggestion to the list before exporting.")
    return _write_csv(
        [
            item.title,
            item.description,
            item.url,
            item.credited_name,
            item.category,
            item.sub_category,
        ]
        for item in suggestions
    )


def contribution_filename(now: Optional[float] = None) -> str:
    millis = int((time.time() if now is None else now) * 1000)
    return f"heorepo_suggestions_{millis}.csv"


def build_template_csv() -> str:
    """헤더와 예시 한 줄로 된 CSV 템플릿"""
    return _write_csv([TEMPLATE_EXAMPLE])


def _cell(row: List[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


def import_resources_csv(
    working_copy: WorkingCopy,
    text: str,
    now: Optional[datetime] = None,
) -> Tuple[WorkingCopy, ImportReport]:
    """CSV의 각 행을 새 리소스로 만들어 목록 앞에 추가

    첫 행은 헤더로 건너뜁니다. 필드가 3개 미만이거나 제목/URL이 비었거나
    카탈로그에 이미 있는 URL(대소문자 무시)인 행은 건너뛰고 skipped 로 셉니다.
    """
    rows = parse_csv(text)
    if len(rows) < 2:
        raise ImportFailure("CSV has no data rows.")

    known_ids = set(working_copy.collection_ids())
    fallback_category = working_copy.collections[0].id if working_copy.collections else GENERAL_ID
    existing_urls: Set[str] = {r.url.lower() for r in working_copy.resources}
    added_date = today_string(now)

    imported: List[Resource] = []
    skipped = 0
    for row in rows[1:]:
        if len(row) < 3:
            skipped += 1
            continue
        title = _cell(row, 0)
        url = _cell(row, 2)
        if not title or not url or url.lower() in existing_urls:
            skipped += 1
            continue

        category = _cell(row, 4)
        imported.append(
            Resource(
                id=generate_id(),
                title=title,
                description=_cell(row, 1),
                url=url,
                domain=derive_domain(url) or "UNKNOWN",
                image_url=IMPORT_IMAGE_URL,
                added_date=added_date,
                contributor=_cell(row, 3) or "Admin",
                category=category if category in known_ids else fallback_category,
                sub_category=_cell(row, 5) or ALL,
            )
        )

    report = ImportReport(imported=len(imported), skipped=skipped)
    LOGGER.info("CSV import: %d imported, %d skipped", report.imported, report.skipped)
    if not imported:
        return working_copy, report
    return working_copy.with_changes(resources=tuple(imported) + working_copy.resources), report


def export_snapshot(working_copy: WorkingCopy, now: Optional[float] = None) -> Snapshot:
    """작업본을 seed.json 형식으로 내보냄 (새 버전 번호 = 현재 시각 밀리초)"""
    if not working_copy.collections or not working_copy.resources:
        raise ExportError("Cannot export empty repository.")
    version = int((time.time() if now is None else now) * 1000)
    payload = working_copy.with_changes(version=version).to_dict()
    content = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
    LOGGER.info("snapshot exported with version %s", version)
    return Snapshot(filename=SNAPSHOT_FILENAME, content=content, version=version)
