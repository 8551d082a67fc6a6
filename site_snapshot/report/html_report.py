"""site_snapshot.report.html_report: Генерация HTML-отчёта об обходе с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_snapshot.aggregator import CrawlReport

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def render_html(
    report: CrawlReport,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        report: объект CrawlReport.
        output_path: путь к итоговому HTML-файлу.
        template_dir: директория с Jinja2-шаблонами (по умолчанию встроенная).

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir is not None else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template("report.html.j2")

    manifest = report.manifest
    context: dict[str, Any] = {
        "base_url": manifest["baseUrl"],
        "crawled_at": manifest["crawledAt"],
        "total": manifest["totalPages"],
        "pages": manifest["pages"],
        "status_counts": report.status_counts,
        "broken": [p for p in manifest["pages"] if "error" in p or _is_client_or_server_error(p)],
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path


def _is_client_or_server_error(page: dict[str, Any]) -> bool:
    status = page.get("status")
    return isinstance(status, int) and status >= 400
