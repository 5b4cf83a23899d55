# Copyright Red Hat
#
# ycomp/dircompare/listing.py - Directory comparison entry listing
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File system access for comparisons: directory listings and metadata.
"""
from typing import List
import logging
import os

from ycomp import (
    YCOMP_SUBSYSTEM_COMPARE,
    DirectoryNotFoundError,
    ListingError,
    MetadataUnavailableError,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Pseudo-entries that never take part in a comparison
_SELF_AND_PARENT = (os.curdir, os.pardir)


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": YCOMP_SUBSYSTEM_COMPARE}, **kwargs)


def list_entries(path: str, side: str = "subject") -> List[str]:
    """
    Return the names of the immediate children of the directory at ``path``.

    The self and parent pseudo-entries are never returned. The order of
    the returned names is unspecified: callers sort the list themselves
    before merging.

    :param path: The directory to list.
    :type path: ``str``
    :param side: The comparison side ``path`` belongs to, used to label
                 errors: "subject" or "reference".
    :type side: ``str``
    :returns: A list of child names.
    :rtype: ``List[str]``
    :raises DirectoryNotFoundError: If ``path`` does not exist or is not a
                                    directory.
    :raises ListingError: If ``path`` is a directory that cannot be read.
    """
    if not os.path.isdir(path):
        raise DirectoryNotFoundError(path, side=side)
    try:
        names = os.listdir(path)
    except FileNotFoundError as err:
        # Vanished between the check and the listing.
        raise DirectoryNotFoundError(path, side=side) from err
    except OSError as err:
        raise ListingError(path, err) from err
    _log_debug_compare("Listed %d entries in '%s'", len(names), path)
    return [name for name in names if name not in _SELF_AND_PARENT]


def stat_path(path: str, follow_symlinks: bool = False) -> os.stat_result:
    """
    Return metadata for ``path`` without opening it.

    :param path: The path to examine.
    :type path: ``str``
    :param follow_symlinks: Report on the target of a symbolic link rather
                            than the link itself.
    :type follow_symlinks: ``bool``
    :returns: The ``os.stat_result`` for ``path``.
    :rtype: ``os.stat_result``
    :raises MetadataUnavailableError: If ``path`` cannot be examined.
    """
    try:
        return os.stat(path) if follow_symlinks else os.lstat(path)
    except OSError as err:
        raise MetadataUnavailableError(path, err) from err
