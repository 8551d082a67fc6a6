"""site_snapshot.report.text_report: текстовые сводки обхода для stdout."""

from __future__ import annotations

from typing import List

from site_snapshot.aggregator import CrawlReport


def render_listing(report: CrawlReport) -> str:
    """Список ``STATUS PATH`` по всем страницам с заголовком и сводкой по кодам."""
    lines: List[str] = [
        "# Site Crawl Results",
        f"# Crawled: {report.crawled_at}",
        f"# Base URL: {report.base_url}",
        f"# Total URLs: {len(report.results)}",
        "#",
        "# Format: STATUS_CODE PATH",
        "#",
    ]
    lines.extend(f"{r.status_code} {r.path}" for r in report.pages)
    lines.append("#")
    lines.append("# Summary:")
    lines.extend(f"#   {code}: {count}" for code, count in report.status_counts.items())
    return "\n".join(lines)


def render_summary(report: CrawlReport) -> str:
    """Итоговая сводка: число страниц, коды ответов и пути к артефактам."""
    out = report.output_dir
    lines: List[str] = [
        f"Done! Crawled {len(report.results)} pages, saved {report.saved_count}.",
        "Status codes:",
    ]
    lines.extend(f"  {code}: {count}" for code, count in report.status_counts.items())
    lines.append(f"  HTML: {out / 'html'}/")
    lines.append(f"  Screenshots: {out / 'screenshots'}/")
    if report.manifest_path is not None:
        lines.append(f"  Manifest: {report.manifest_path}")
    return "\n".join(lines)


__all__ = ["render_listing", "render_summary"]
