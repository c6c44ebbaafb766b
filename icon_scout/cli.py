# === FILE: icon_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа IconScout через командную строку.

Команды:
  resolve   Найти иконку сайта, проверить её и (опционально) сохранить PNG
  slug      Показать нормализованный идентификатор сайта
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только консоль, если не указан)
  --log-format FORMAT Формат логирования

Команда resolve опции:
  --output PATH       Сохранить иконку в файл
  --size INT          Размер итогового PNG (override icon_size)
  --no-convert        Скопировать файл как есть, без конвертации в PNG
  --json PATH         Сохранить JSON-отчёт в файл
  --debug, -n         Подробный вывод (DEBUG)

Пример:
  icon-scout resolve https://en.wikipedia.org --output ~/.local/share/icons/wikipedia.png
"""
import json
import sys
from pathlib import Path

import click

from icon_scout import __version__
from icon_scout.config import load_config
from icon_scout.engine import Engine
from icon_scout.errors import IconScoutError
from icon_scout.logger import DEFAULT_FORMAT, configure, set_level
from icon_scout.report.json_report import build_record, render_json
from icon_scout.utils import parse_target

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str, code: int = 1):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='IconScout, version %(version)s')
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
    help='Путь к файлу логов'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Поиск иконки сайта для ярлыка SSB."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('resolve', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.argument(
    'icon_path', required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить иконку в файл'
)
@click.option(
    '--size', '-s', 'size',
    type=click.IntRange(min=1),
    default=None,
    help='Размер итогового PNG (override icon_size)'
)
@click.option(
    '--no-convert', 'no_convert', is_flag=True,
    help='Сохранить исходный файл без конвертации в PNG'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--debug', '-n', 'debug', is_flag=True,
    help='Подробный вывод (уровень DEBUG)'
)
@click.pass_context
def resolve(ctx, url, icon_path, output, size, no_convert, json_output, debug):
    """Найти иконку для URL; ICON_PATH: своя иконка вместо поиска."""
    cfg = ctx.obj['config']
    if debug:
        set_level('DEBUG')

    try:
        site = parse_target(url)
        click.echo(f'Resolving favicon for: {site.hostname} (slug: {site.normalized_slug})', err=True)
        resolved, saved = Engine(cfg).run(
            url, user_icon=icon_path, output=output, size=size, convert=not no_convert
        )
    except KeyboardInterrupt:
        print_error('Прервано пользователем', code=130)
    except IconScoutError as e:
        print_error(str(e))

    record = build_record(resolved, site, saved)
    if json_output:
        try:
            click.echo(f'JSON report: {render_json(record, json_output)}', err=True)
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    click.echo(f'{resolved.candidate.origin.value}\t{resolved.candidate.source_url}')
    if saved:
        click.echo(f'Icon: {saved}')


@cli.command('slug', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
def slug(url):
    """Показать нормализованный идентификатор сайта."""
    try:
        click.echo(parse_target(url).normalized_slug)
    except IconScoutError as e:
        print_error(str(e))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(json.dumps(cfg.model_dump(mode='json'), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    cli()
