# Copyright Red Hat
#
# ycomp/command.py - Directory comparison command interface
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``ycomp.command`` module provides both the ycomp command line
interface infrastructure, and a simple procedural interface to the
``ycomp`` library modules.

The procedural interface is used by the ``ycomp`` command line tool,
and may be used by application programs, or interactively in the
Python shell by users who do not require all the features present
in the ycomp object API.
"""
from argparse import ArgumentParser
from threading import Event
from typing import Any, Dict, List, Optional
from os.path import basename
import logging
import json
import sys

from ycomp import (
    YCOMP_CONFIG_FILE,
    YCOMP_DEBUG_COMPARE,
    YCOMP_DEBUG_COMMAND,
    YCOMP_DEBUG_REPORT,
    YCOMP_DEBUG_ALL,
    YCOMP_SUBSYSTEM_COMMAND,
    SubsystemFilter,
    set_debug_mask,
    ProgressAwareHandler,
    YcompError,
    YcompArgumentError,
    __version__,
)
from ycomp.progress import TermControl

from .dircompare import CompareOptions, ComparisonResult, DirectoryComparator
from .dircompare.options import HASH_ALGORITHMS
from .dircompare.report import OUTPUT_FORMATS, render_report

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": YCOMP_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None

#: Separator printed before each comparison in a batch
_PAIR_SEPARATOR = "-" * 20

#: Progress header used by the CLI, which prints the pair being compared
_PROGRESS_HEADER = "Scanning"

COLOR_MODES = ["auto", "always", "never"]


def compare_dirs(
    path_a: str,
    path_b: str,
    options: Optional[CompareOptions] = None,
    cancel: Optional[Event] = None,
    term_control: Optional[TermControl] = None,
    progress_header: Optional[str] = None,
) -> ComparisonResult:
    """
    Compare a subject directory against a reference directory.

    :param path_a: The subject directory: entries only found here are
                   reported as extra.
    :type path_a: ``str``
    :param path_b: The reference directory: entries only found here are
                   reported as missing.
    :type path_b: ``str``
    :param options: Options controlling the comparison.
    :type options: ``Optional[CompareOptions]``
    :param cancel: An optional event used to cancel the comparison.
    :type cancel: ``Optional[Event]``
    :param term_control: An optional ``TermControl`` for progress output.
    :type term_control: ``Optional[TermControl]``
    :param progress_header: An optional header for progress output.
    :type progress_header: ``Optional[str]``
    :returns: The classified differences.
    :rtype: ``ComparisonResult``
    """
    comparator = DirectoryComparator(
        options=options, term_control=term_control, progress_header=progress_header
    )
    return comparator.compare(path_a, path_b, cancel=cancel)


def print_comparison(
    result: ComparisonResult,
    output_format: str = "summary",
    pretty: bool = False,
    color: str = "auto",
    term_control: Optional[TermControl] = None,
):
    """
    Print a ``ComparisonResult`` to stdout in ``output_format``.

    :param result: The result to print.
    :type result: ``ComparisonResult``
    :param output_format: The report format: "summary", "paths" or "json".
    :type output_format: ``str``
    :param pretty: Indent JSON output.
    :type pretty: ``bool``
    :param color: Color mode: "auto", "always" or "never".
    :type color: ``str``
    :param term_control: An optional ``TermControl`` overriding ``color``.
    :type term_control: ``Optional[TermControl]``
    """
    report = render_report(
        result,
        output_format=output_format,
        pretty=pretty,
        color=color,
        term_control=term_control,
    )
    if report:
        print(report)


def _load_options(cmd_args) -> CompareOptions:
    """
    Build effective ``CompareOptions``: configuration file values
    overridden by options given on the command line.
    """
    config_file = cmd_args.config or YCOMP_CONFIG_FILE
    base = CompareOptions.from_file(config_file)
    return CompareOptions.from_cmd_args(cmd_args, base=base)


def _compare_cmd(cmd_args):
    """
    Compare command handler.

    Compare each ``PATH REFERENCE`` pair given on the command line. A
    failure to compare one pair is reported and the remaining pairs are
    still compared.

    With ``--output-format=json`` a single JSON list is printed holding
    one object per pair: the pair paths and either a "result" or an
    "error" member.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    paths: List[str] = cmd_args.paths
    output_format = cmd_args.output_format
    pretty = cmd_args.pretty

    if len(paths) % 2:
        _log_error(
            "ycomp: error: paths must be given in PATH REFERENCE pairs "
            "(got %d paths)",
            len(paths),
        )
        return 1

    if pretty and output_format != "json":
        _log_error("Option --pretty only supported with --output-format=json")
        return 1

    try:
        options = _load_options(cmd_args)
    except YcompArgumentError as err:
        _log_error("Invalid options: %s", err)
        return 1

    term_control = TermControl(color=cmd_args.color)
    # Progress only shares stdout with the summary report
    progress_control = term_control
    if output_format != "summary":
        progress_control = TermControl(term_stream=sys.stderr, color=cmd_args.color)

    status = 0
    documents: List[Dict[str, Any]] = []
    for path_a, path_b in zip(paths[0::2], paths[1::2]):
        if output_format != "json":
            print(_PAIR_SEPARATOR)
            print(f"Comparing {path_a} to {path_b}")
        document: Dict[str, Any] = {"path": path_a, "reference": path_b}
        try:
            result = compare_dirs(
                path_a,
                path_b,
                options=options,
                term_control=progress_control,
                progress_header=_PROGRESS_HEADER,
            )
        except YcompError as err:
            _log_error("Comparison failed: %s", err)
            if output_format == "json":
                document["error"] = str(err)
                documents.append(document)
            else:
                print(f"\t\t** Exception: {err}")
            status = 1
            continue
        if output_format == "json":
            document["result"] = result.to_dict()
            documents.append(document)
            continue
        print_comparison(
            result,
            output_format=output_format,
            term_control=term_control,
        )

    if output_format == "json":
        print(json.dumps(documents, indent=4 if pretty else None))
    return status


def setup_logging(cmd_args):
    """
    Set up ycomp logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    ycomp_log = logging.getLogger("ycomp")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    ycomp_log.setLevel(level)
    if ycomp_log.hasHandlers():
        ycomp_log.handlers.clear()

    # Subsystem log filtering
    _ycomp_subsystem_filter = SubsystemFilter("ycomp")

    # Main console handler
    _CONSOLE_HANDLER = ProgressAwareHandler()

    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(_ycomp_subsystem_filter)

    ycomp_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down ycomp logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "compare": YCOMP_DEBUG_COMPARE,
        "command": YCOMP_DEBUG_COMMAND,
        "report": YCOMP_DEBUG_REPORT,
        "all": YCOMP_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_compare_args(parser):
    parser.add_argument(
        "-c",
        "--config",
        metavar="CONFIG",
        type=str,
        default=None,
        help=f"Read default options from CONFIG (default: {YCOMP_CONFIG_FILE})",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const=True,
        default=None,
        help="Do not output progress updates",
    )
    parser.add_argument(
        "--color",
        type=str,
        default="auto",
        choices=COLOR_MODES,
        help="Specify when to use color in output: auto, always, or never",
    )
    parser.add_argument(
        "-C",
        "--no-content",
        dest="content_compare",
        action="store_const",
        const=False,
        default=None,
        help="Only compare sizes: do not compare the content of files",
    )
    parser.add_argument(
        "-H",
        "--hash",
        dest="hash_algorithm",
        metavar="ALG",
        type=str,
        default=None,
        choices=HASH_ALGORITHMS,
        help=(
            "Compare content by digest using hash algorithm ALG "
            f"({', '.join(HASH_ALGORITHMS)}) instead of byte by byte"
        ),
    )
    parser.add_argument(
        "-F",
        "--follow-symlinks",
        action="store_const",
        const=True,
        default=None,
        help="Follow symbolic links when examining entries",
    )
    parser.add_argument(
        "-N",
        "--no-recurse",
        dest="recursive",
        action="store_const",
        const=False,
        default=None,
        help="Do not descend into directories present on both sides",
    )
    parser.add_argument(
        "-j",
        "--workers",
        metavar="N",
        type=int,
        default=None,
        help="Use N worker threads for comparison (default: 1)",
    )
    parser.add_argument(
        "-m",
        "--max-content-size",
        metavar="BYTES",
        type=int,
        default=None,
        help="Do not compare the content of files larger than BYTES (0: no limit)",
    )
    parser.add_argument(
        "-o",
        "--output-format",
        type=str,
        default="summary",
        choices=OUTPUT_FORMATS,
        help="Output format for comparison results: summary, paths, or json",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Format JSON output for readability",
    )
    parser.add_argument(
        "paths",
        metavar="PATH",
        type=str,
        nargs="+",
        help=(
            "Pairs of directories to compare: each PATH is compared against "
            "the REFERENCE directory that follows it"
        ),
    )


def main(args):
    """
    Main entry point for ycomp.
    """
    parser = ArgumentParser(
        description="Directory tree comparison", prog=basename(args[0])
    )

    # Global arguments
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of ycomp",
        version=__version__,
    )
    _add_compare_args(parser)

    cmd_args = parser.parse_args(args[1:])

    status = 1

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    if cmd_args.debug:
        status = _compare_cmd(cmd_args)
    else:
        try:
            status = _compare_cmd(cmd_args)
        # pylint: disable=broad-except
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
        except Exception as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


def run():
    """
    Console script entry point for ycomp.
    """
    sys.exit(main(sys.argv))


# vim: set et ts=4 sw=4 :
