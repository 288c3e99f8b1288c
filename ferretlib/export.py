"""Result exporters and text reports.

Exporters turn an AnalysisResult into a file format; the render functions
produce human-readable reports. Everything here reads a finished result and
never mutates it. Reports list tags, attributes and values by count,
highest first.
"""

import csv
import html
import io
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple, Union

from .core.model import AnalysisResult, AttributeStats

CSV_HEADERS = ["Tag", "Count", "Attribute", "Attribute Count", "Value", "Value Count"]


def _sorted_attributes(attributes: Dict[str, AttributeStats]) -> List[AttributeStats]:
    return sorted(attributes.values(), key=lambda a: (-a.count, a.name))


def _top_values(attr: AttributeStats, limit: int) -> List[Tuple[str, int]]:
    return attr.value_counts.most_common(limit)


class Exporter(ABC):
    """Base class for result exporters."""

    newline = None

    @abstractmethod
    def dumps(self, result: AnalysisResult) -> str:
        """Render the result as text."""
        pass

    def export(self, result: AnalysisResult, path: Union[str, os.PathLike]) -> None:
        """Write the rendered result to ``path`` as UTF-8.

        Raises:
            OSError: If the file cannot be written
        """
        with open(path, "w", encoding="utf-8", newline=self.newline) as handle:
            handle.write(self.dumps(result))


class JsonExporter(Exporter):
    """Pretty-printed JSON in the stable serialized shape."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def dumps(self, result: AnalysisResult) -> str:
        return result.to_json(indent=self.indent)


class CsvExporter(Exporter):
    """One row per tag/attribute/value, with blank cells where a level is empty.

    A tag without attributes gets one row with empty attribute and value
    cells, and an attribute whose histogram tracks nothing gets one row with
    empty value cells.
    """

    newline = ""

    def rows(self, result: AnalysisResult) -> List[List[str]]:
        rows = [list(CSV_HEADERS)]
        for tag in result.sorted_tags():
            tag_cells = [tag.name, str(tag.count)]
            if not tag.attributes:
                rows.append(tag_cells + ["", "", "", ""])
                continue
            for attr in _sorted_attributes(tag.attributes):
                attr_cells = tag_cells + [attr.name, str(attr.count)]
                if not attr.value_counts:
                    rows.append(attr_cells + ["", ""])
                    continue
                for value, count in attr.value_counts.most_common():
                    rows.append(attr_cells + [value, str(count)])
        return rows

    def dumps(self, result: AnalysisResult) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerows(self.rows(result))
        return buffer.getvalue()


class HtmlTreeExporter(Exporter):
    """Collapsible HTML report of tags, attributes and their top values."""

    STYLE = (
        "body { font-family: sans-serif; }\n"
        "ul { list-style-type: none; }\n"
        ".tag { color: #2c3e50; font-weight: bold; }\n"
        ".attr { color: #e67e22; }\n"
        ".val { color: #27ae60; }\n"
        ".count { color: #7f8c8d; font-size: 0.9em; }\n"
    )

    def __init__(self, top_values: int = 10):
        self.top_values = top_values

    def dumps(self, result: AnalysisResult) -> str:
        esc = html.escape
        out = [
            "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><style>",
            self.STYLE + "</style></head><body>",
            "<h1>Analysis Report</h1>",
            f"<p>Files analyzed: {result.files_analyzed}</p>",
            f"<p>Max depth: {result.max_depth}</p>",
            "<ul>",
        ]
        for tag in result.sorted_tags():
            out.append(
                f"<li><details><summary><span class='tag'>{esc(tag.name)}</span> "
                f"<span class='count'>({tag.count})</span></summary>"
            )
            if tag.attributes:
                out.append("<ul>")
                for attr in _sorted_attributes(tag.attributes):
                    out.append(
                        f"<li><details><summary><span class='attr'>@{esc(attr.name)}</span> "
                        f"<span class='count'>({attr.count})</span></summary>"
                    )
                    values = _top_values(attr, self.top_values)
                    if values:
                        out.append("<ul>")
                        for value, count in values:
                            out.append(
                                f"<li><span class='val'>{esc(value)}</span> "
                                f"<span class='count'>({count})</span></li>"
                            )
                        out.append("</ul>")
                    out.append("</details></li>")
                out.append("</ul>")
            out.append("</details></li>")
        out.append("</ul></body></html>")
        return "\n".join(out) + "\n"


def render_tree(result: AnalysisResult, top_values: int = 5) -> str:
    """Render tags, their attributes and top values as a text tree.

    Example output::

        Files analyzed: 1
        ├── div (3)
        │   └── @class (3)
        │       ├── ── box (2)
        │       └── ── wide (1)
        └── p (1)
    """
    lines = [f"Files analyzed: {result.files_analyzed}"]
    tags = result.sorted_tags()
    for i, tag in enumerate(tags):
        last_tag = i == len(tags) - 1
        lines.append(f"{'└── ' if last_tag else '├── '}{tag.name} ({tag.count})")
        tag_indent = "    " if last_tag else "│   "

        attrs = _sorted_attributes(tag.attributes)
        for j, attr in enumerate(attrs):
            last_attr = j == len(attrs) - 1
            lines.append(f"{tag_indent}{'└── ' if last_attr else '├── '}@{attr.name} ({attr.count})")
            value_indent = tag_indent + ("    " if last_attr else "│   ")

            values = _top_values(attr, top_values)
            for k, (value, count) in enumerate(values):
                prefix = '└── ' if k == len(values) - 1 else '├── '
                lines.append(f"{value_indent}{prefix}── {value} ({count})")
    return "\n".join(lines) + "\n"


def render_flat(result: AnalysisResult) -> str:
    """Render a fixed-width table with one row per tag attribute."""
    row = "{:<20} {:<10} {:<30} {:<10}"
    lines = [
        f"Files analyzed: {result.files_analyzed}",
        row.format("TAG", "COUNT", "ATTRIBUTE", "ATTR COUNT"),
        "-" * 70,
    ]
    for tag in result.sorted_tags():
        if not tag.attributes:
            lines.append(row.format(tag.name, tag.count, "-", "-"))
            continue
        for i, attr in enumerate(_sorted_attributes(tag.attributes)):
            if i == 0:
                lines.append(row.format(tag.name, tag.count, attr.name, attr.count))
            else:
                lines.append(row.format("", "", attr.name, attr.count))
    return "\n".join(line.rstrip() for line in lines) + "\n"


EXPORTERS = {
    'json': JsonExporter,
    'csv': CsvExporter,
    'html': HtmlTreeExporter,
}


def get_exporter(fmt: str) -> Exporter:
    """Look up an exporter by format name ("json", "csv" or "html").

    Raises:
        ValueError: If the format is not known
    """
    try:
        return EXPORTERS[fmt.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown export format: {fmt}. Choose from: {', '.join(EXPORTERS)}"
        ) from None
