"""
HTML table output.

Renders the table as a single self-contained HTML page. Each cell carries a
CSS class derived from its column's inferred kind (num, flag or text), an
optional link column turns values into hyperlinks built from a URL template,
and blank cells hold a non-breaking space so the grid stays intact.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from jinja2 import Template

from tabjoin.core.column_typer import is_blank
from tabjoin.core.constants import DEFAULT_HTML_TITLE, DEFAULT_LINK_TEMPLATE, FILE_ENCODING
from tabjoin.core.exceptions import ColumnNotFoundError
from tabjoin.core.table import Table
from tabjoin.reporters.base import Reporter, column_kinds, write_atomic

logger = logging.getLogger(__name__)


@dataclass
class HtmlCell:
    text: str
    css_class: str
    href: Optional[str] = None

    @property
    def blank(self) -> bool:
        return is_blank(self.text)


def build_link(template: str, value: str) -> str:
    """Insert a cell value into a URL template using '{}' (or '%s')."""
    encoded = quote(value.strip(), safe="")
    if "{}" in template:
        return template.replace("{}", encoded)
    if "%s" in template:
        return template.replace("%s", encoded)
    return template + encoded


class HTMLReporter(Reporter):
    """
    Generates an HTML page holding the table.

    Attributes:
        title: Page title and heading
        link_column: Header of the column rendered as links, if any
        link_template: URL template for link cells
    """

    def __init__(
        self,
        title: str = DEFAULT_HTML_TITLE,
        link_column: Optional[str] = None,
        link_template: str = DEFAULT_LINK_TEMPLATE
    ):
        self.title = title or DEFAULT_HTML_TITLE
        self.link_column = link_column or None
        self.link_template = link_template or DEFAULT_LINK_TEMPLATE

    def generate(self, table: Table, output_path) -> Path:
        """
        Write the page.

        Raises:
            ColumnNotFoundError: If the link column is not a table header
        """
        html_content = self.render(table)

        def _write(path: Path) -> None:
            with open(path, "w", encoding=FILE_ENCODING) as f:
                f.write(html_content)

        return write_atomic(output_path, _write)

    def render(self, table: Table) -> str:
        template_data = self._prepare_template_data(table)
        return self._render_html(template_data)

    def _prepare_template_data(self, table: Table) -> dict:
        link_idx = -1
        if self.link_column:
            link_idx = table.find_column(self.link_column)
            if link_idx < 0:
                raise ColumnNotFoundError(self.link_column, role="link column")

        classes = [kind.css_class for kind in column_kinds(table)]
        rows: List[List[HtmlCell]] = []
        for record in table.full_records():
            cells = []
            for idx, value in enumerate(record):
                href = None
                if idx == link_idx and not is_blank(value):
                    href = build_link(self.link_template, value)
                cells.append(HtmlCell(value, classes[idx], href))
            rows.append(cells)

        return {
            "title": self.title,
            "headers": list(zip(table.headers, classes)),
            "rows": rows,
        }

    def _render_html(self, template_data: dict) -> str:
        template = Template(HTML_TEMPLATE, autoescape=True)
        return template.render(**template_data)


HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>{{ title }}</title>
<style>
td.num, th.num { text-align: right; }
td.flag, th.flag { text-align: center; }
td.text, th.text { text-align: left; }
td, th { border-style: groove; padding: 2px; vertical-align: top; }
table { border-collapse: collapse; width: 95vw }
</style>
</head>
<body>
<h1>{{ title }}</h1>
<table>
<tr>{% for name, css in headers %}<th class="{{ css }}">{{ name }}</th>{% endfor %}</tr>
{% for row in rows -%}
<tr>{% for cell in row %}{% if cell.blank %}<td class="{{ cell.css_class }}">&nbsp;</td>{% elif cell.href %}<td class="{{ cell.css_class }}"><a href="{{ cell.href }}">{{ cell.text }}</a></td>{% else %}<td class="{{ cell.css_class }}">{{ cell.text }}</td>{% endif %}{% endfor %}</tr>
{% endfor -%}
</table>
</body>
</html>
"""
