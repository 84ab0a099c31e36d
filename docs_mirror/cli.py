# === FILE: docs_mirror/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска docs-mirror через командную строку.

Команды:
  mirror    Обойти sitemap и сохранить страницы в дерево base/YYYY/MM/DD/...
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда mirror опции:
  --workers INT       Число параллельных загрузчиков
  --test INT          Сколько документов брать из каждого urlset (для тестов)
  --rate-limit        Пауза между запросами, чтобы не получать 403
  --output-dir DIR    Корень дерева с сохранёнными страницами
  --json PATH         Сохранить итоговый отчёт в JSON

Дополнительно:
  --version, -v       Показать версию docs-mirror

Пример:
  docs-mirror --log-file mirror.log mirror --workers 4 --test 5 --rate-limit
"""
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict

import click

from docs_mirror import __version__
from docs_mirror.config import load_config
from docs_mirror.errors import MirrorError
from docs_mirror.logger import DEFAULT_FORMAT, configure
from docs_mirror.report import render_json
from docs_mirror.runner import start_mirror

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='docs-mirror, version %(version)s')
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
    '--log-file', '--logfile', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд docs-mirror CLI."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('mirror', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--workers', '-w', 'workers',
    type=click.IntRange(min=1),
    default=None,
    help='Число параллельных загрузчиков (override workers)'
)
@click.option(
    '--test', '--limit', 'max_docs',
    type=click.IntRange(min=0),
    default=None,
    help='Сколько документов брать из каждого urlset (override max_docs)'
)
@click.option(
    '--rate-limit', 'rate_limit',
    is_flag=True, default=None,
    help='Пауза между запросами каждого воркера, чтобы избежать 403'
)
@click.option(
    '--output-dir', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Корень дерева с сохранёнными страницами (override base_dir)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить итоговый отчёт в JSON'
)
@click.pass_context
def mirror(ctx, workers, max_docs, rate_limit, output_dir, json_output):
    """Скачать документацию по sitemap."""
    overrides: Dict[str, Any] = {}
    if workers is not None:
        overrides['workers'] = workers
    if max_docs is not None:
        overrides['max_docs'] = max_docs
    if rate_limit:
        overrides['rate_limit'] = True
    if output_dir is not None:
        overrides['base_dir'] = output_dir
    cfg = ctx.obj['config'].model_copy(update=overrides)

    click.echo(f'Starting mirror of {cfg.sitemap_url} into {cfg.base_dir}')
    try:
        report = asyncio.run(start_mirror(cfg))
    except MirrorError as e:
        print_error(f'Ошибка при обходе sitemap: {e}')
    except Exception as e:
        print_error(f'Ошибка при зеркалировании: {e}')

    click.echo(
        f'Stored {report.stored} pages from {report.sitemaps} sitemaps '
        f'({report.fetch_failures} fetch failures, {report.store_failures} write failures, '
        f'{report.skipped} skipped) in {report.duration:.2f}s'
    )

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
