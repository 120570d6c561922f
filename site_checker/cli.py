# === FILE: site_checker/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SiteChecker через командную строку.

Команды:
  check     Проверить сайт и вывести/сохранить отчёт
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда check:
  SITE_URI            Корневой URL (перекрывает site_uri из конфига)
  --site-dir DIR      Локальная папка сайта для отчёта о лишних файлах
  --json PATH         Сохранить JSON-отчёт в файл
  --pretty            Преформатировать JSON (отступ 2)
  --external-links    fatal | warn | ignore
  --max-redirects N   Максимальная длина цепочки редиректов
  --tidy/--no-tidy    Проверять HTML программой tidy
  --check-timeout SEC Таймаут всей проверки (секунд)

Дополнительно:
  --version, -v       Показать версию SiteChecker

Пример:
  site-checker check https://example.com/ --site-dir public --json report.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from site_checker import __version__
from site_checker.config import load_config
from site_checker.engine import Engine
from site_checker.logger import init_logging
from site_checker.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _load(ctx, **overrides):
    try:
        return load_config(ctx.obj['config_path'], **overrides)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteChecker, version %(version)s')
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
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteChecker CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('check', context_settings=CONTEXT_SETTINGS)
@click.argument('site_uri', required=False)
@click.option(
    '--site-dir', '-d', 'site_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Локальная папка сайта для отчёта о лишних файлах'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--external-links', 'external_links',
    default=None,
    type=click.Choice(['fatal', 'warn', 'ignore']),
    help='Политика для мёртвых внешних ссылок'
)
@click.option(
    '--max-redirects', 'max_redirects',
    type=int,
    default=None,
    help='Максимальная длина цепочки редиректов'
)
@click.option(
    '--tidy/--no-tidy', 'tidy',
    default=None,
    help='Проверять HTML программой tidy'
)
@click.option(
    '--check-timeout', 'check_timeout',
    type=float,
    default=None,
    help='Таймаут всей проверки (секунд)'
)
@click.pass_context
def check(ctx, site_uri, site_dir, json_output, pretty, external_links, max_redirects, tidy, check_timeout):
    """Проверить сайт: все ссылки живы, вся разметка корректна."""
    cfg = _load(
        ctx,
        site_uri=site_uri,
        site_dir=site_dir,
        external_links=external_links,
        max_redirects=max_redirects,
        tidy=tidy,
    )
    click.echo(f'Checking site: {cfg.site_uri}')
    try:
        report = Engine(cfg).start_check(timeout=check_timeout)
    except asyncio.TimeoutError:
        print_error(f'Проверка не завершена за {check_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при проверке: {e}')

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    click.echo(f'Checked URIs: {len(report.checked)}')
    for warning in report.warnings:
        click.echo(f'warning: {warning}')
    if report.orphans:
        click.echo('\t' + 'unreferenced files:')
        for path in report.orphans:
            click.echo('\t\t' + path)

    if not report.ok:
        print_error(report.failure['message'])
    click.secho('OK', fg='green')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = _load(ctx)
    click.echo(json.dumps(cfg.model_dump(mode='json'), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
