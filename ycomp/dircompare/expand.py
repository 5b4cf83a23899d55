# Copyright Red Hat
#
# ycomp/dircompare/expand.py - Directory comparison subtree expansion
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Classification of one-sided entries and all of their descendants.
"""
from typing import Callable, List, Optional, Set, Tuple
from threading import Event
import logging
import stat
import os

from ycomp import (
    YCOMP_SUBSYSTEM_COMPARE,
    CompareCancelledError,
    DirectoryNotFoundError,
    ListingError,
    MetadataUnavailableError,
)

from .difftypes import DiffType
from .entries import FileEntry
from .listing import list_entries, stat_path
from .options import CompareOptions
from .result import ComparisonResult

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": YCOMP_SUBSYSTEM_COMPARE}, **kwargs)


class SubtreeExpander:
    """
    Record a one-sided entry, and every descendant if it is a directory,
    in a single ``ComparisonResult`` category. Nothing is compared against
    the other side of the comparison.
    """

    def __init__(
        self,
        options: Optional[CompareOptions] = None,
        cancel: Optional[Event] = None,
        tick: Optional[Callable[[], None]] = None,
    ):
        """
        Initialise a new ``SubtreeExpander``.

        :param options: Options to control this ``SubtreeExpander``.
        :type options: ``Optional[CompareOptions]``
        :param cancel: An optional event that cancels the expansion when set.
        :type cancel: ``Optional[Event]``
        :param tick: An optional callable invoked once per listed directory.
        :type tick: ``Optional[Callable[[], None]]``
        """
        self.options: CompareOptions = options or CompareOptions()
        self.cancel: Optional[Event] = cancel
        self.tick: Optional[Callable[[], None]] = tick

    def _check_cancel(self):
        if self.cancel is not None and self.cancel.is_set():
            raise CompareCancelledError("Comparison cancelled")

    def expand(
        self, name: str, parent: str, diff_type: DiffType, result: ComparisonResult
    ):
        """
        Classify ``parent/name`` and its subtree as ``diff_type``.

        Entries are recorded depth-first in pre-order with siblings in
        sorted order, so a directory always precedes its contents.

        :param name: The name of the one-sided entry.
        :type name: ``str``
        :param parent: The directory containing ``name``.
        :type parent: ``str``
        :param diff_type: ``DiffType.EXTRA`` or ``DiffType.MISSING``.
        :type diff_type: ``DiffType``
        :param result: The result to record entries in.
        :type result: ``ComparisonResult``
        :raises CompareCancelledError: If the cancel event is set.
        """
        if diff_type not in (DiffType.EXTRA, DiffType.MISSING):
            raise ValueError(f"Cannot expand subtree as {diff_type.value}")

        follow_symlinks = self.options.follow_symlinks
        visited: Set[Tuple[int, int]] = set()
        pending: List[Tuple[str, str]] = [(name, parent)]

        while pending:
            name, parent = pending.pop()
            path = os.path.join(parent, name)

            try:
                st = stat_path(path, follow_symlinks=follow_symlinks)
            except MetadataUnavailableError as err:
                result.add(diff_type, FileEntry(name, parent))
                result.log(str(err))
                continue

            result.add(diff_type, FileEntry(name, parent, st.st_size))

            if not stat.S_ISDIR(st.st_mode):
                continue

            if follow_symlinks:
                key = (st.st_dev, st.st_ino)
                if key in visited:
                    _log_debug_compare("Not descending '%s': already visited", path)
                    continue
                visited.add(key)

            self._check_cancel()
            try:
                children = list_entries(path)
            except (DirectoryNotFoundError, ListingError) as err:
                result.log(str(err))
                continue
            if self.tick:
                self.tick()

            pending.extend((child, path) for child in sorted(children, reverse=True))
