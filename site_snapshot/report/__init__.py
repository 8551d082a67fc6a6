"""site_snapshot.report: manifest.json, текстовые сводки и HTML-отчёт, используемые CLI и тестами."""

from __future__ import annotations

from .html_report import render_html
from .json_report import MANIFEST_NAME, render_json, write_manifest
from .text_report import render_listing, render_summary

__all__ = [
    "MANIFEST_NAME",
    "render_html",
    "render_json",
    "render_listing",
    "render_summary",
    "write_manifest",
]
