"""site_snapshot.aggregator: сборка итогового отчёта обхода (manifest и сводка по статусам)."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TypedDict, Union

from site_snapshot.crawler.models import PageResult


class PageEntry(TypedDict, total=False):
    """Запись о странице в manifest.json."""

    pathname: str
    url: str
    status: Union[int, str]
    contentType: str
    redirectTarget: str
    saved: bool
    skipped: str
    error: str


class Manifest(TypedDict):
    """Структура manifest.json."""

    crawledAt: str
    baseUrl: str
    totalPages: int
    pages: List[PageEntry]


def utc_now_iso() -> str:
    """Текущее время UTC в ISO-8601 с миллисекундами и суффиксом Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sort_results(results: Sequence[PageResult]) -> List[PageResult]:
    """Сортирует результаты по пути (затем по URL), чтобы порядок не зависел от обхода."""
    return sorted(results, key=lambda r: (r.path, r.url))


def page_entry(result: PageResult) -> PageEntry:
    """Преобразует PageResult в запись manifest."""
    entry: PageEntry = {"pathname": result.path, "url": result.url, "status": result.status_code}
    if result.content_type:
        entry["contentType"] = result.content_type
    if result.redirect_target:
        entry["redirectTarget"] = result.redirect_target
    if result.error:
        entry["error"] = result.error
    elif result.saved:
        entry["saved"] = True
    else:
        entry["skipped"] = result.skipped or "not saved"
    return entry


def build_manifest(
    results: Sequence[PageResult], base_url: str, crawled_at: Optional[str] = None
) -> Manifest:
    """Собирает manifest из результатов обхода."""
    return {
        "crawledAt": crawled_at or utc_now_iso(),
        "baseUrl": base_url,
        "totalPages": len(results),
        "pages": [page_entry(r) for r in sort_results(results)],
    }


def summarize(results: Sequence[PageResult]) -> Dict[str, int]:
    """Количество страниц по каждому коду ответа (включая ERROR), по возрастанию кода."""
    counts = Counter(str(r.status_code) for r in results)
    return dict(sorted(counts.items()))


@dataclass(slots=True)
class CrawlReport:
    """Результаты одного обхода: страницы, manifest и пути к артефактам."""

    base_url: str
    output_dir: Path
    results: List[PageResult] = field(default_factory=list)
    crawled_at: str = field(default_factory=utc_now_iso)
    manifest_path: Optional[Path] = None

    @property
    def pages(self) -> List[PageResult]:
        return sort_results(self.results)

    @property
    def saved_count(self) -> int:
        return sum(1 for r in self.results if r.saved)

    @property
    def status_counts(self) -> Dict[str, int]:
        return summarize(self.results)

    @property
    def manifest(self) -> Manifest:
        return build_manifest(self.results, self.base_url, self.crawled_at)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает manifest в виде JSON-строки."""
        return json.dumps(self.manifest, ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(
    results: Sequence[PageResult], base_url: str, output_dir: Union[str, Path]
) -> CrawlReport:
    """Собирает CrawlReport из сырых результатов обхода."""
    return CrawlReport(base_url=base_url, output_dir=Path(output_dir), results=list(results))


__all__ = [
    "CrawlReport",
    "Manifest",
    "PageEntry",
    "aggregate_results",
    "build_manifest",
    "page_entry",
    "sort_results",
    "summarize",
    "utc_now_iso",
]
