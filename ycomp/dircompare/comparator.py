# Copyright Red Hat
#
# ycomp/dircompare/comparator.py - Directory comparison orchestration
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level directory comparison.
"""
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Set, Tuple
from threading import Event, Lock
import logging
import os

from ycomp import (
    YCOMP_SUBSYSTEM_COMPARE,
    CompareCancelledError,
    DirectoryNotFoundError,
    ListingError,
    MetadataUnavailableError,
)
from ycomp.progress import ProgressFactory, TermControl, ThrobberBase

from .contentcmp import ContentComparator
from .difftypes import DiffType
from .evaluate import PairEvaluator, PairOutcome
from .expand import SubtreeExpander
from .listing import list_entries, stat_path
from .merge import MergeTag, merge_walk
from .options import CompareOptions
from .result import ComparisonResult

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: A (subject, reference) directory pair awaiting comparison
DirectoryPair = Tuple[str, str]

#: The (device, inode) identities of both directories of a pair
PairIdentity = Tuple[Tuple[int, int], Tuple[int, int]]


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": YCOMP_SUBSYSTEM_COMPARE}, **kwargs)


class DirectoryComparator:
    """
    Compare a subject directory against a reference directory.

    Both top-level listings are sorted and merge-walked. Names present on
    both sides are handed to a ``PairEvaluator`` and names present on one
    side only are handed to a ``SubtreeExpander``. Directories present on
    both sides are compared in turn when ``options.recursive`` is set,
    using an explicit stack of pending directory pairs.
    """

    def __init__(
        self,
        options: Optional[CompareOptions] = None,
        term_control: Optional[TermControl] = None,
        content_comparator: Optional[ContentComparator] = None,
        progress_header: Optional[str] = None,
    ):
        """
        Initialise a new ``DirectoryComparator``.

        :param options: Options to control comparisons.
        :type options: ``Optional[CompareOptions]``
        :param term_control: An optional ``TermControl`` used for progress
                             output.
        :type term_control: ``Optional[TermControl]``
        :param content_comparator: An optional content check overriding the
                                   one selected by ``options``.
        :type content_comparator: ``Optional[ContentComparator]``
        :param progress_header: An optional header for progress output.
                                Defaults to "Comparing PATH_A to PATH_B".
        :type progress_header: ``Optional[str]``
        """
        self.options: CompareOptions = options or CompareOptions()
        self.term_control: Optional[TermControl] = term_control
        self.progress_header: Optional[str] = progress_header
        self.evaluator: PairEvaluator = PairEvaluator(
            self.options, content_comparator=content_comparator
        )
        self._cancel: Optional[Event] = None
        self._throbber: Optional[ThrobberBase] = None
        self._tick_lock: Lock = Lock()

    def _tick(self):
        with self._tick_lock:
            if self._throbber is not None:
                self._throbber.throb()

    def _check_cancel(self):
        if self._cancel is not None and self._cancel.is_set():
            raise CompareCancelledError("Comparison cancelled")

    def _run_unit(
        self,
        tag: MergeTag,
        name: str,
        dir_a: str,
        dir_b: str,
        result: ComparisonResult,
    ) -> Optional[DirectoryPair]:
        """
        Process one merge-walk item, recording into ``result``.

        :returns: A directory pair to descend into, or ``None``.
        """
        expander = SubtreeExpander(self.options, cancel=self._cancel, tick=self._tick)
        if tag == MergeTag.ONLY_IN_A:
            expander.expand(name, dir_a, DiffType.EXTRA, result)
            return None
        if tag == MergeTag.ONLY_IN_B:
            expander.expand(name, dir_b, DiffType.MISSING, result)
            return None

        outcome = self.evaluator.evaluate(name, dir_a, dir_b, result)
        if outcome == PairOutcome.BOTH_DIRECTORIES:
            if self.options.recursive:
                return (os.path.join(dir_a, name), os.path.join(dir_b, name))
        elif outcome == PairOutcome.TYPE_CONFLICT:
            expander.expand(name, dir_a, DiffType.EXTRA, result)
            expander.expand(name, dir_b, DiffType.MISSING, result)
        return None

    def _list_pair(
        self, dir_a: str, dir_b: str, result: ComparisonResult, top: bool
    ) -> Optional[Tuple[List[str], List[str]]]:
        """
        List and sort both directories of a pair.

        Failures at the top level propagate to the caller. Failures for
        nested pairs are logged to ``result`` and the pair is skipped.
        """
        self._check_cancel()
        try:
            names_a = list_entries(dir_a, side="subject")
            names_b = list_entries(dir_b, side="reference")
        except (DirectoryNotFoundError, ListingError) as err:
            if top:
                raise
            result.log(str(err))
            return None
        self._tick()
        return sorted(names_a), sorted(names_b)

    def _unvisited(
        self, pairs: List[DirectoryPair], visited: Set[PairIdentity]
    ) -> List[DirectoryPair]:
        """
        Filter out directory pairs that were already compared.

        Only applies when following symlinks: a pair whose directories
        resolve to the same (device, inode) identities as an earlier pair
        is skipped. Pairs that cannot be examined are kept so that the
        listing failure is reported.
        """
        if not self.options.follow_symlinks:
            return pairs
        fresh: List[DirectoryPair] = []
        for dir_a, dir_b in pairs:
            try:
                st_a = stat_path(dir_a, follow_symlinks=True)
                st_b = stat_path(dir_b, follow_symlinks=True)
            except MetadataUnavailableError:
                fresh.append((dir_a, dir_b))
                continue
            key = ((st_a.st_dev, st_a.st_ino), (st_b.st_dev, st_b.st_ino))
            if key in visited:
                _log_debug_compare(
                    "Not descending '%s' and '%s': already visited", dir_a, dir_b
                )
                continue
            visited.add(key)
            fresh.append((dir_a, dir_b))
        return fresh

    def _compare_serial(self, path_a: str, path_b: str, result: ComparisonResult):
        visited: Set[PairIdentity] = set()
        pending = self._unvisited([(path_a, path_b)], visited)
        top = True
        while pending:
            dir_a, dir_b = pending.pop()
            listing = self._list_pair(dir_a, dir_b, result, top)
            top = False
            if listing is None:
                continue

            descend: List[DirectoryPair] = []
            for tag, name in merge_walk(*listing):
                pair = self._run_unit(tag, name, dir_a, dir_b, result)
                if pair:
                    descend.append(pair)
            pending.extend(reversed(self._unvisited(descend, visited)))

    def _compare_parallel(self, path_a: str, path_b: str, result: ComparisonResult):
        visited: Set[PairIdentity] = set()
        pending = self._unvisited([(path_a, path_b)], visited)
        top = True
        with ThreadPoolExecutor(
            max_workers=self.options.workers, thread_name_prefix="ycomp-compare"
        ) as executor:
            while pending:
                dir_a, dir_b = pending.pop()
                listing = self._list_pair(dir_a, dir_b, result, top)
                top = False
                if listing is None:
                    continue

                futures: List[Tuple[ComparisonResult, Future]] = []
                for tag, name in merge_walk(*listing):
                    partial = ComparisonResult()
                    future = executor.submit(
                        self._run_unit, tag, name, dir_a, dir_b, partial
                    )
                    futures.append((partial, future))

                descend: List[DirectoryPair] = []
                try:
                    for partial, future in futures:
                        pair = future.result()
                        result.merge(partial)
                        if pair:
                            descend.append(pair)
                except BaseException:
                    for _, future in futures:
                        future.cancel()
                    raise
                pending.extend(reversed(self._unvisited(descend, visited)))

    def compare(
        self, path_a: str, path_b: str, cancel: Optional[Event] = None
    ) -> ComparisonResult:
        """
        Compare the subject directory ``path_a`` against the reference
        directory ``path_b``.

        :param path_a: The subject directory.
        :type path_a: ``str``
        :param path_b: The reference directory.
        :type path_b: ``str``
        :param cancel: An optional event that cancels the comparison when
                       set. It is checked before every directory listing.
        :type cancel: ``Optional[Event]``
        :returns: The populated comparison result.
        :rtype: ``ComparisonResult``
        :raises DirectoryNotFoundError: If either path is not an existing
                                        directory.
        :raises ListingError: If either top-level directory cannot be read.
        :raises CompareCancelledError: If ``cancel`` is set before the
                                       comparison completes.
        """
        for path, side in ((path_a, "subject"), (path_b, "reference")):
            if not os.path.isdir(path):
                raise DirectoryNotFoundError(path, side=side)

        _log_debug_compare(
            "Comparing '%s' to '%s' with options:\n%s", path_a, path_b, self.options
        )
        result = ComparisonResult()
        self._cancel = cancel
        self._throbber = ProgressFactory.get_throbber(
            self.progress_header or f"Comparing {path_a} to {path_b}",
            quiet=self.options.quiet,
            term_control=self.term_control,
        )
        self._throbber.start()
        try:
            if self.options.workers > 1:
                self._compare_parallel(path_a, path_b, result)
            else:
                self._compare_serial(path_a, path_b, result)
        except BaseException:
            self._throbber.end()
            raise
        else:
            self._throbber.end(f"found {result.total_differences} differences")
        finally:
            self._cancel = None
            self._throbber = None

        _log_debug_compare("Comparison complete: %s", repr(result))
        return result


def compare(
    path_a: str,
    path_b: str,
    options: Optional[CompareOptions] = None,
    cancel: Optional[Event] = None,
) -> ComparisonResult:
    """
    Compare the subject directory ``path_a`` against the reference
    directory ``path_b`` and return the classified differences.

    :param path_a: The subject directory.
    :type path_a: ``str``
    :param path_b: The reference directory.
    :type path_b: ``str``
    :param options: Options to control the comparison.
    :type options: ``Optional[CompareOptions]``
    :param cancel: An optional cancellation event.
    :type cancel: ``Optional[Event]``
    :returns: The populated comparison result.
    :rtype: ``ComparisonResult``
    """
    return DirectoryComparator(options).compare(path_a, path_b, cancel=cancel)
