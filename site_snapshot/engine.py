# File: site_snapshot/engine.py
"""site_snapshot.engine: Orchestration layer для обхода сайта, сборки отчёта и записи manifest."""

from __future__ import annotations

from site_snapshot.aggregator import CrawlReport, aggregate_results
from site_snapshot.config import CrawlConfig
from site_snapshot.crawler.crawler import SiteCrawler
from site_snapshot.logger import logger
from site_snapshot.report.json_report import write_manifest

__all__ = ["start_crawl"]


async def start_crawl(config: CrawlConfig) -> CrawlReport:
    """
    Запускает SiteCrawler в контексте, собирает CrawlReport и пишет manifest.json.

    Ошибки запуска (некорректный стартовый URL, невозможность создать каталоги
    или записать снимок) пробрасываются; manifest в этом случае не пишется.
    """
    crawler = SiteCrawler(config)
    async with crawler:
        results = await crawler.crawl()

    report = aggregate_results(results, crawler.base_url, config.output_dir)
    manifest_path = write_manifest(report)
    logger.info("Manifest saved: %s", manifest_path)
    return report
