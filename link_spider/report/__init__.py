"""link_spider.report: JSON and HTML rendering of a crawl report, used by the CLI and tests."""

from link_spider.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from link_spider.report.json_report import render_json

__all__ = ["render_json", "render_html", "DEFAULT_TEMPLATE_DIR"]
