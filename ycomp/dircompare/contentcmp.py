# Copyright Red Hat
#
# ycomp/dircompare/contentcmp.py - Directory comparison content checks
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Content equality checks for same-size file pairs.
"""
from abc import ABC, abstractmethod
from hashlib import md5, sha1, sha256, sha512
from itertools import zip_longest
import logging

from ycomp import YCOMP_SUBSYSTEM_COMPARE, YcompArgumentError

from .options import CompareOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

_HASH_TYPES = {
    "md5": md5,
    "sha1": sha1,
    "sha256": sha256,
    "sha512": sha512,
}

#: Read size for content checks
_CHUNK_SIZE = 65536


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": YCOMP_SUBSYSTEM_COMPARE}, **kwargs)


def _read_chunks(fileobj):
    return iter(lambda: fileobj.read(_CHUNK_SIZE), b"")


class ContentComparator(ABC):
    """
    Abstract base class for content equality checks.

    Given two existing, same-size, readable files ``same_content()``
    returns whether their contents are byte-identical. Each file is opened
    only for the duration of a single call. ``OSError`` raised while
    opening or reading either file is propagated to the caller.
    """

    #: Short name used in log messages
    name: str = "abstract"

    @abstractmethod
    def same_content(self, path_a: str, path_b: str) -> bool:
        """
        Return ``True`` if the files at ``path_a`` and ``path_b`` have
        identical content.

        :param path_a: The first file.
        :type path_a: ``str``
        :param path_b: The second file.
        :type path_b: ``str``
        :returns: ``True`` if the contents are identical.
        :rtype: ``bool``
        """


class ByteContentComparator(ContentComparator):
    """
    Byte-for-byte comparison reading both files in lock step. Stops at the
    first differing chunk.
    """

    name = "bytes"

    def same_content(self, path_a: str, path_b: str) -> bool:
        with open(path_a, "rb") as file_a, open(path_b, "rb") as file_b:
            for chunk_a, chunk_b in zip_longest(
                _read_chunks(file_a), _read_chunks(file_b)
            ):
                if chunk_a != chunk_b:
                    return False
        return True


class HashContentComparator(ContentComparator):
    """
    Comparison of content digests computed with a ``hashlib`` algorithm.
    """

    def __init__(self, hash_algorithm: str = "sha256"):
        """
        Initialise a new ``HashContentComparator``.

        :param hash_algorithm: The name of the hash algorithm to use.
        :type hash_algorithm: ``str``
        :raises YcompArgumentError: If ``hash_algorithm`` is not supported.
        """
        if hash_algorithm not in _HASH_TYPES:
            raise YcompArgumentError(f"Unknown hash algorithm: {hash_algorithm}")
        self.name = hash_algorithm
        self.hasher = _HASH_TYPES[hash_algorithm]

    def content_hash(self, path: str) -> str:
        """
        Calculate the content hash of the file at ``path``.

        :param path: The path to the file to hash.
        :type path: ``str``
        :returns: The hex digest of the file content.
        :rtype: ``str``
        """
        hasher = self.hasher(usedforsecurity=False)
        with open(path, "rb") as f:
            for chunk in _read_chunks(f):
                hasher.update(chunk)
        return hasher.hexdigest()

    def same_content(self, path_a: str, path_b: str) -> bool:
        hash_a = self.content_hash(path_a)
        hash_b = self.content_hash(path_b)
        _log_debug_compare(
            "%s('%s')=%s %s('%s')=%s",
            self.name,
            path_a,
            hash_a,
            self.name,
            path_b,
            hash_b,
        )
        return hash_a == hash_b


def get_content_comparator(options: CompareOptions) -> ContentComparator:
    """
    Return the ``ContentComparator`` selected by ``options``.

    :param options: The effective comparison options.
    :type options: ``CompareOptions``
    :returns: A hash based comparator if ``options.hash_algorithm`` is set,
              or a byte comparator otherwise.
    :rtype: ``ContentComparator``
    """
    if options.hash_algorithm:
        return HashContentComparator(options.hash_algorithm)
    return ByteContentComparator()
