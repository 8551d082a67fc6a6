# site_snapshot/report/json_report.py

"""
Запись manifest.json для проекта SiteSnapshot.

Manifest описывает один обход: время, стартовый URL, число страниц и
отсортированный по пути список страниц с их результатом.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from site_snapshot.aggregator import CrawlReport, Manifest

MANIFEST_NAME = "manifest.json"


def render_json(manifest: Union[Manifest, CrawlReport], output_path: Path | str) -> Path:
    """
    Сохраняет manifest в формате JSON по указанному пути.

    :param manifest: словарь manifest или объект CrawlReport
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_snapshot.report.json_report import render_json
    path = render_json(report, 'snapshots-baseline/manifest.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = manifest.manifest if isinstance(manifest, CrawlReport) else manifest

    # Запись в файл с отступами и Unicode
    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.write("\n")

    return output


def write_manifest(report: CrawlReport) -> Path:
    """Пишет ``<output_dir>/manifest.json`` и запоминает путь в отчёте."""
    report.manifest_path = render_json(report, report.output_dir / MANIFEST_NAME)
    return report.manifest_path
