# Copyright Red Hat
#
# ycomp/dircompare/evaluate.py - Directory comparison pair evaluation
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Evaluation of names present on both sides of a comparison.
"""
from typing import Optional
from enum import Enum
import logging
import stat
import os

from ycomp import YCOMP_SUBSYSTEM_COMPARE, MetadataUnavailableError

from .contentcmp import ContentComparator, get_content_comparator
from .entries import FileEntry
from .listing import stat_path
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


class PairOutcome(Enum):
    """
    Enum for the outcome of evaluating one matched name.
    """

    #: No difference was found
    SAME = "same"
    #: Sizes differ: recorded as a size mismatch
    SIZE_DIFFERS = "size_differs"
    #: Contents differ: recorded as a content mismatch
    CONTENT_DIFFERS = "content_differs"
    #: Both sides are directories: the caller decides whether to descend
    BOTH_DIRECTORIES = "both_directories"
    #: One side is a directory and the other is not
    TYPE_CONFLICT = "type_conflict"
    #: Metadata or content could not be read: a message was logged
    UNAVAILABLE = "unavailable"


class PairEvaluator:
    """
    Compare the metadata (and optionally the content) of two same-named
    entries.
    """

    def __init__(
        self,
        options: Optional[CompareOptions] = None,
        content_comparator: Optional[ContentComparator] = None,
    ):
        """
        Initialise a new ``PairEvaluator``.

        :param options: Options to control this ``PairEvaluator`` instance.
        :type options: ``Optional[CompareOptions]``
        :param content_comparator: The content check to use for same-size
                                   regular files. Defaults to the one
                                   selected by ``options``.
        :type content_comparator: ``Optional[ContentComparator]``
        """
        self.options: CompareOptions = options or CompareOptions()
        self.content_comparator: ContentComparator = (
            content_comparator or get_content_comparator(self.options)
        )

    # pylint: disable=too-many-return-statements
    def evaluate(
        self, name: str, dir_a: str, dir_b: str, result: ComparisonResult
    ) -> PairOutcome:
        """
        Evaluate ``name`` present in both ``dir_a`` and ``dir_b``.

        Size and content differences are recorded in ``result`` using side
        A's entry. Failure to obtain metadata or content for either side is
        recorded as a log message in ``result`` and the pair is excluded
        from further comparison.

        :param name: The matched entry name.
        :type name: ``str``
        :param dir_a: The side A (subject) parent directory.
        :type dir_a: ``str``
        :param dir_b: The side B (reference) parent directory.
        :type dir_b: ``str``
        :param result: The result to record differences in.
        :type result: ``ComparisonResult``
        :returns: The outcome of the evaluation.
        :rtype: ``PairOutcome``
        """
        path_a = os.path.join(dir_a, name)
        path_b = os.path.join(dir_b, name)
        follow_symlinks = self.options.follow_symlinks

        try:
            stat_a = stat_path(path_a, follow_symlinks=follow_symlinks)
            stat_b = stat_path(path_b, follow_symlinks=follow_symlinks)
        except MetadataUnavailableError as err:
            result.log(str(err))
            return PairOutcome.UNAVAILABLE

        is_dir_a = stat.S_ISDIR(stat_a.st_mode)
        is_dir_b = stat.S_ISDIR(stat_b.st_mode)
        if is_dir_a and is_dir_b:
            return PairOutcome.BOTH_DIRECTORIES
        if is_dir_a or is_dir_b:
            _log_debug_compare(
                "Type conflict for '%s': '%s' is %sa directory",
                name,
                path_a,
                "" if is_dir_a else "not ",
            )
            return PairOutcome.TYPE_CONFLICT

        entry = FileEntry(name, dir_a, stat_a.st_size)
        if stat_a.st_size != stat_b.st_size:
            result.push_size_mismatch(entry)
            return PairOutcome.SIZE_DIFFERS

        if not self.options.content_compare:
            return PairOutcome.SAME

        try:
            same = self._same_content(path_a, stat_a, path_b, stat_b)
        except OSError as err:
            result.log(f"Could not read file {err.filename or path_a}: {err}")
            return PairOutcome.UNAVAILABLE

        if same:
            return PairOutcome.SAME
        result.push_content_mismatch(entry)
        return PairOutcome.CONTENT_DIFFERS

    def _same_content(
        self,
        path_a: str,
        stat_a: os.stat_result,
        path_b: str,
        stat_b: os.stat_result,
    ) -> bool:
        """
        Decide content equality for two same-size non-directory entries.

        Entries of different file types never have the same content.
        Symbolic links compare their targets. Regular files above the
        configured maximum content size, and special files, are treated as
        equal since they are never read.
        """
        if stat.S_IFMT(stat_a.st_mode) != stat.S_IFMT(stat_b.st_mode):
            return False

        if stat.S_ISLNK(stat_a.st_mode):
            return os.readlink(path_a) == os.readlink(path_b)

        if not stat.S_ISREG(stat_a.st_mode):
            return True

        max_size = self.options.max_content_size
        if max_size and stat_a.st_size > max_size:
            _log_debug_compare(
                "Skipping content check for '%s' (%d > %d bytes)",
                path_a,
                stat_a.st_size,
                max_size,
            )
            return True

        return self.content_comparator.same_content(path_a, path_b)
