#!/usr/bin/env python3
"""
Command-line entry point of the LinkSpider crawler.

Commands:
  crawl     Run a crawl from the configured seed and print/save the report
  config    Show the effective configuration

Global options:
  --config PATH       Path to the YAML/JSON config (default: configs/default.yaml)
  --depth INT         Override max_depth
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only if omitted)
  --log-format FORMAT Logging format string

crawl options:
  --json PATH           Save the JSON report to a file
  --html PATH           Save the HTML report to a file
  --template DIR        Directory with the Jinja2 report template
  --pretty              Indent JSON output by 2
  --crawl-timeout SEC   Stop issuing fetches after SEC seconds and report what was crawled
  --fail-on-error       Exit with status 2 when any resource failed

Example:
  link-spider --config configs/default.yaml --depth 1 crawl --json report.json
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from link_spider import __version__
from link_spider.config import load_config
from link_spider.crawler.models import CrawlReport
from link_spider.logger import init_logging
from link_spider.report import render_html, render_json
from link_spider.scanner import start_crawl

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str, code: int = 1):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


async def _run(cfg, crawl_timeout: Optional[float]) -> CrawlReport:
    stop_event = asyncio.Event()
    if crawl_timeout:
        asyncio.get_running_loop().call_later(crawl_timeout, stop_event.set)
    return await start_crawl(cfg, stop_event)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LinkSpider, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to the YAML/JSON config file.'
)
@click.option(
    '--depth', '-d', 'depth',
    type=click.IntRange(min=0),
    default=None,
    help='Maximum link depth (overrides max_depth).'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level.'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stderr only if omitted).'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Log format string.'
)
@click.pass_context
def cli(ctx, config_path, depth, log_level, log_file, log_format):
    """LinkSpider command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    if depth is not None:
        cfg = cfg.model_copy(update={'max_depth': depth})
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the JSON report to a file.'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the HTML report to a file.'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with the Jinja2 template (packaged template if omitted).'
)
@click.option(
    '--pretty', is_flag=True,
    help='Indent JSON output by 2.'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Stop issuing new fetches after this many seconds.'
)
@click.option(
    '--fail-on-error', is_flag=True,
    help='Exit with status 2 when the report contains failures.'
)
@click.pass_context
def crawl(ctx, json_output, html_output, template_dir, pretty, crawl_timeout, fail_on_error):
    """Run a crawl and produce reports."""
    cfg = ctx.obj['config']
    try:
        report = asyncio.run(_run(cfg, crawl_timeout))
    except Exception as e:
        print_error(f'Crawl failed: {e}')

    # no output files: print to stdout
    if not json_output and not html_output:
        click.echo(json.dumps(report.to_dict(), ensure_ascii=False, indent=2 if pretty else None))

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Failed to save JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Failed to save HTML: {e}')

    if fail_on_error and not report.ok:
        print_error(f'{report.failed} resource(s) failed', code=2)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the current configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
