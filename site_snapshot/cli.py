#!/usr/bin/env python3
"""
Точка входа для запуска SiteSnapshot через командную строку.

Команды:
  crawl     Обойти сайт, сохранить HTML и скриншоты страниц и manifest.json
  config    Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (необязательно)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl:
  START_URL           Стартовый URL (обязателен, если не задан в конфиге)
  OUTPUT_DIR          Каталог для снимков (default: ./snapshots-baseline)
  --mode MODE         raw (HTTP без JS) или rendered (headless-браузер)
  --timeout SEC       Таймаут одной загрузки
  --pretty-html       Форматировать сохранённый HTML для diff
  --browser-channel   Канал Chromium (msedge, chrome, ...)
  --html PATH         Сохранить HTML-отчёт в файл
  --list              Вывести список "STATUS PATH" по всем страницам

Дополнительно:
  --version, -v       Показать версию SiteSnapshot

Пример:
  site-snapshot crawl https://example.com ./snapshots-baseline --mode raw --list
"""
import asyncio
import sys
from pathlib import Path

import click

from site_snapshot import __version__
from site_snapshot.config import load_config
from site_snapshot.crawler.snapshot import SnapshotError
from site_snapshot.crawler.urls import MalformedURL
from site_snapshot.engine import start_crawl
from site_snapshot.logger import DEFAULT_FORMAT, init_logging
from site_snapshot.report.html_report import render_html
from site_snapshot.report.text_report import render_listing, render_summary

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteSnapshot, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteSnapshot CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('start_url', required=False)
@click.argument('output_dir', required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option(
    '--mode', '-m', 'mode',
    default=None,
    type=click.Choice(['raw', 'rendered']),
    help='Режим загрузки (default: rendered)'
)
@click.option(
    '--timeout', 'timeout',
    type=float,
    default=None,
    help='Таймаут одной загрузки, секунд (default: 10 raw / 30 rendered)'
)
@click.option(
    '--pretty-html', 'pretty_html', is_flag=True,
    help='Форматировать сохранённый HTML для удобного сравнения'
)
@click.option(
    '--browser-channel', 'browser_channel',
    default=None,
    help='Канал Chromium для Playwright (msedge, chrome, ...)'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--list', 'show_listing', is_flag=True,
    help='Вывести список "STATUS PATH" по всем страницам'
)
@click.pass_context
def crawl(ctx, start_url, output_dir, mode, timeout, pretty_html, browser_channel, html_output, show_listing):
    """Обойти сайт начиная со START_URL и сохранить снимки в OUTPUT_DIR."""
    try:
        cfg = load_config(
            ctx.obj['config_path'],
            base_url=start_url,
            output_dir=output_dir,
            mode=mode,
            timeout=timeout,
            pretty_html=True if pretty_html else None,
            browser_channel=browser_channel,
        )
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')

    click.secho(f'Crawling {cfg.base_url} to {cfg.output_dir}...', err=True)
    try:
        report = asyncio.run(start_crawl(cfg))
    except MalformedURL as e:
        print_error(f'Некорректный стартовый URL: {e}')
    except SnapshotError as e:
        print_error(f'Ошибка записи снимков: {e}')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if show_listing:
        click.echo(render_listing(report))

    if html_output:
        try:
            saved_html = render_html(report, html_output)
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')
        click.echo(f'HTML report: {saved_html}')

    click.echo(render_summary(report))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.argument('start_url', required=False)
@click.pass_context
def show_config(ctx, start_url):
    """Показать итоговую конфигурацию в JSON."""
    try:
        cfg = load_config(ctx.obj['config_path'], base_url=start_url)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
