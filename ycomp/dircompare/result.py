# Copyright Red Hat
#
# ycomp/dircompare/result.py - Directory comparison results
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Accumulated results of a directory comparison.
"""
from typing import Any, Dict, Iterator, List, Optional, Tuple
import logging
import json

from ycomp import YCOMP_SUBSYSTEM_COMPARE

from .difftypes import DiffType
from .entries import FileEntry

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": YCOMP_SUBSYSTEM_COMPARE}, **kwargs)


class ComparisonResult:
    """
    Container for the classified entries of one comparison.

    Holds four ordered lists of ``FileEntry`` objects, one per
    ``DiffType``, and an ordered list of diagnostic messages for soft
    failures. Entries are kept in discovery order. A result does not
    perform any comparison itself: the comparison components push entries
    into it as they are classified.
    """

    def __init__(self):
        #: Entries present in the reference but missing from the subject
        self.missing: List[FileEntry] = []
        #: Entries present in the subject but not in the reference
        self.extra: List[FileEntry] = []
        #: Entries present in both whose sizes differ
        self.size_mismatch: List[FileEntry] = []
        #: Entries present in both with equal sizes but different content
        self.content_mismatch: List[FileEntry] = []
        #: Diagnostic messages for soft failures
        self.log_messages: List[str] = []

    def __repr__(self) -> str:
        return (
            f"ComparisonResult(missing={len(self.missing)}, "
            f"extra={len(self.extra)}, "
            f"size_mismatch={len(self.size_mismatch)}, "
            f"content_mismatch={len(self.content_mismatch)}, "
            f"log_messages={len(self.log_messages)})"
        )

    def __iter__(self) -> Iterator[Tuple[DiffType, FileEntry]]:
        """
        Iterate over ``(DiffType, FileEntry)`` pairs, category by category.
        """
        for diff_type in DiffType:
            for entry in self.entries(diff_type):
                yield diff_type, entry

    def entries(self, diff_type: DiffType) -> List[FileEntry]:
        """
        Return the list of entries for ``diff_type``.

        :param diff_type: The category to return.
        :type diff_type: ``DiffType``
        :returns: The (live) list of entries in that category.
        :rtype: ``List[FileEntry]``
        """
        return {
            DiffType.MISSING: self.missing,
            DiffType.EXTRA: self.extra,
            DiffType.SIZE_MISMATCH: self.size_mismatch,
            DiffType.CONTENT_MISMATCH: self.content_mismatch,
        }[diff_type]

    def push_missing(self, entry: FileEntry):
        """Record an entry missing from the subject directory."""
        self.missing.append(entry)

    def push_extra(self, entry: FileEntry):
        """Record an entry that only exists in the subject directory."""
        self.extra.append(entry)

    def push_size_mismatch(self, entry: FileEntry):
        """Record an entry whose size differs between the two sides."""
        self.size_mismatch.append(entry)

    def push_content_mismatch(self, entry: FileEntry):
        """Record an entry whose content differs between the two sides."""
        self.content_mismatch.append(entry)

    def add(self, diff_type: DiffType, entry: FileEntry):
        """
        Record ``entry`` in the list for ``diff_type``.

        :param diff_type: The category to record the entry in.
        :type diff_type: ``DiffType``
        :param entry: The classified entry.
        :type entry: ``FileEntry``
        """
        _log_debug_compare("Classified '%s' as %s", entry.full_path, diff_type.value)
        self.entries(diff_type).append(entry)

    def log(self, message: str):
        """
        Record a diagnostic message for a soft failure.

        :param message: The message to record.
        :type message: ``str``
        """
        _log_warn(message)
        self.log_messages.append(message)

    def merge(self, other: "ComparisonResult"):
        """
        Append the contents of ``other`` to this result, preserving the
        order of both.

        :param other: A partial result to merge into this instance.
        :type other: ``ComparisonResult``
        """
        for diff_type in DiffType:
            self.entries(diff_type).extend(other.entries(diff_type))
        self.log_messages.extend(other.log_messages)

    @property
    def is_empty(self) -> bool:
        """
        True if no differences were found. Log messages are not counted.

        :returns: ``True`` if all four categories are empty.
        :rtype: ``bool``
        """
        return self.total_differences == 0

    @property
    def total_differences(self) -> int:
        """
        Return the total number of classified entries.

        :returns: The sum of the lengths of all four categories.
        :rtype: ``int``
        """
        return sum(len(self.entries(diff_type)) for diff_type in DiffType)

    def paths(self, diff_type: Optional[DiffType] = None) -> List[str]:
        """
        Return the full paths of classified entries.

        :param diff_type: Restrict the list to one category.
        :type diff_type: ``Optional[DiffType]``
        :returns: A list of full path strings in result order.
        :rtype: ``List[str]``
        """
        if diff_type is not None:
            return [entry.full_path for entry in self.entries(diff_type)]
        return [entry.full_path for _, entry in self]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``ComparisonResult`` into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping category names to entry lists.
        :rtype: ``Dict[str, Any]``
        """
        out: Dict[str, Any] = {
            diff_type.value: [entry.to_dict() for entry in self.entries(diff_type)]
            for diff_type in DiffType
        }
        out["log_messages"] = list(self.log_messages)
        out["is_empty"] = self.is_empty
        return out

    def json(self, pretty: bool = False) -> str:
        """
        Return a string representation of this ``ComparisonResult`` in JSON
        notation.

        :param pretty: Indent JSON to be human readable.
        :type pretty: ``bool``
        :returns: A JSON representation of this instance.
        :rtype: ``str``
        """
        return json.dumps(self.to_dict(), indent=4 if pretty else None)
