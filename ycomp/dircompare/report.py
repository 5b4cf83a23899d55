# Copyright Red Hat
#
# ycomp/dircompare/report.py - Directory comparison result rendering
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Rendering of ``ComparisonResult`` objects for the console.
"""
from typing import Dict, List, NamedTuple, Optional
import logging

from ycomp import YCOMP_SUBSYSTEM_REPORT, YcompArgumentError
from ycomp.progress import TermControl

from .difftypes import DiffType
from .result import ComparisonResult

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Supported report formats
OUTPUT_FORMATS = ("summary", "paths", "json")


def _log_debug_report(msg, *args, **kwargs):
    """A wrapper for report subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": YCOMP_SUBSYSTEM_REPORT}, **kwargs)


class _CategoryStyle(NamedTuple):
    #: Summary count line, formatted with the category size
    count_fmt: str
    #: Label used in the details heading
    label: str
    #: ``TermControl`` color attribute name
    color: str
    #: Line prefix used by the paths format
    marker: str


_CATEGORY_STYLES: Dict[DiffType, _CategoryStyle] = {
    DiffType.MISSING: _CategoryStyle("{} files missing", "missing", "RED", "-"),
    DiffType.EXTRA: _CategoryStyle("{} extra files", "extras", "GREEN", "+"),
    DiffType.SIZE_MISMATCH: _CategoryStyle(
        "{} files of differing sizes", "differing sizes", "YELLOW", "~"
    ),
    DiffType.CONTENT_MISMATCH: _CategoryStyle(
        "{} files of differing content", "differing content", "MAGENTA", "!"
    ),
}


def _colored(tc: TermControl, diff_type: DiffType, text: str) -> str:
    color = getattr(tc, _CATEGORY_STYLES[diff_type].color)
    return f"{color}{text}{tc.NORMAL}"


def render_summary(result: ComparisonResult, tc: TermControl) -> List[str]:
    """
    Render the per-category counts of ``result``.

    :param result: The result to render.
    :type result: ``ComparisonResult``
    :param tc: The ``TermControl`` used for color output.
    :type tc: ``TermControl``
    :returns: A list of output lines.
    :rtype: ``List[str]``
    """
    lines = ["Summary:"]
    for diff_type in DiffType:
        count = len(result.entries(diff_type))
        if count:
            text = _CATEGORY_STYLES[diff_type].count_fmt.format(count)
            lines.append("\t" + _colored(tc, diff_type, text))
    if result.is_empty:
        lines.append("\tNo differences!")
    else:
        lines.append("")
    return lines


def render_details(result: ComparisonResult, tc: TermControl) -> List[str]:
    """
    Render a heading and the full path of every entry for each non-empty
    category of ``result``.

    :param result: The result to render.
    :type result: ``ComparisonResult``
    :param tc: The ``TermControl`` used for color output.
    :type tc: ``TermControl``
    :returns: A list of output lines.
    :rtype: ``List[str]``
    """
    lines = []
    for diff_type in DiffType:
        entries = result.entries(diff_type)
        if not entries:
            continue
        label = _CATEGORY_STYLES[diff_type].label
        lines.append(f"Details ({_colored(tc, diff_type, label)}):")
        lines.extend(f"\t{entry.full_path}" for entry in entries)
        lines.append("")
    return lines


def render_log(result: ComparisonResult) -> List[str]:
    """
    Render the diagnostic messages recorded in ``result``.

    :param result: The result to render.
    :type result: ``ComparisonResult``
    :returns: A list of output lines, empty if there are no messages.
    :rtype: ``List[str]``
    """
    if not result.log_messages:
        return []
    lines = ["", "Log messages:"]
    lines.extend(f"\t{message}" for message in result.log_messages)
    lines.append("")
    return lines


def render_paths(result: ComparisonResult, tc: TermControl) -> List[str]:
    """
    Render one line per classified entry: a category marker followed by
    the entry's full path.

    :param result: The result to render.
    :type result: ``ComparisonResult``
    :param tc: The ``TermControl`` used for color output.
    :type tc: ``TermControl``
    :returns: A list of output lines.
    :rtype: ``List[str]``
    """
    return [
        _colored(tc, diff_type, _CATEGORY_STYLES[diff_type].marker)
        + f" {entry.full_path}"
        for diff_type, entry in result
    ]


def render_report(
    result: ComparisonResult,
    output_format: str = "summary",
    pretty: bool = False,
    color: str = "auto",
    term_control: Optional[TermControl] = None,
) -> str:
    """
    Render ``result`` in the requested ``output_format``.

    :param result: The result to render.
    :type result: ``ComparisonResult``
    :param output_format: One of "summary" (counts, details and log
                          messages), "paths" (one marked path per line) or
                          "json".
    :type output_format: ``str``
    :param pretty: Indent JSON output to be human readable.
    :type pretty: ``bool``
    :param color: A string to control color rendering: "auto", "always", or
                  "never".
    :type color: ``str``
    :param term_control: An optional ``TermControl`` instance to use for
                         formatting. The supplied instance overrides any
                         ``color`` argument if set.
    :type term_control: ``Optional[TermControl]``
    :returns: The rendered report.
    :rtype: ``str``
    :raises YcompArgumentError: If ``output_format`` is not supported.
    """
    if output_format not in OUTPUT_FORMATS:
        raise YcompArgumentError(f"Unknown output format: {output_format}")

    _log_debug_report("Rendering %s as %s", repr(result), output_format)
    if output_format == "json":
        return result.json(pretty=pretty)

    tc = term_control or TermControl(color=color)
    if output_format == "paths":
        return "\n".join(render_paths(result, tc))

    lines = render_summary(result, tc) + render_details(result, tc)
    lines.extend(render_log(result))
    return "\n".join(lines)


__all__ = [
    "OUTPUT_FORMATS",
    "render_details",
    "render_log",
    "render_paths",
    "render_report",
    "render_summary",
]
