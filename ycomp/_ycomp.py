# Copyright Red Hat
#
# ycomp/_ycomp.py - Directory comparison global definitions
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level ycomp package.
"""
from typing import Optional, TextIO, TYPE_CHECKING
import logging
import weakref
import sys

if TYPE_CHECKING:
    from .progress import ThrobberBase

_log = logging.getLogger("ycomp")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Ycomp debugging subsystem mask
YCOMP_DEBUG_COMPARE = 1
YCOMP_DEBUG_COMMAND = 2
YCOMP_DEBUG_REPORT = 4
YCOMP_DEBUG_ALL = YCOMP_DEBUG_COMPARE | YCOMP_DEBUG_COMMAND | YCOMP_DEBUG_REPORT

# Ycomp debugging subsystem names
YCOMP_SUBSYSTEM_COMPARE = "ycomp.compare"
YCOMP_SUBSYSTEM_COMMAND = "ycomp.command"
YCOMP_SUBSYSTEM_REPORT = "ycomp.report"

_DEBUG_MASK_TO_SUBSYSTEM = {
    YCOMP_DEBUG_COMPARE: YCOMP_SUBSYSTEM_COMPARE,
    YCOMP_DEBUG_COMMAND: YCOMP_SUBSYSTEM_COMMAND,
    YCOMP_DEBUG_REPORT: YCOMP_SUBSYSTEM_REPORT,
}

_debug_subsystems = set()

# Registry of active throbber instances: uses a WeakSet so we don't prevent
# garbage collection.
_active_progress: weakref.WeakSet = weakref.WeakSet()

#: Default location of the ycomp configuration file
YCOMP_CONFIG_FILE = "/etc/ycomp/ycomp.conf"


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        if record.levelno != logging.DEBUG:
            return True

        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``ycomp`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    ycomp_log = logging.getLogger("ycomp")

    for handler in ycomp_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``ycomp`` package.

    :param mask: the logical OR of the ``YCOMP_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > YCOMP_DEBUG_ALL:
        raise ValueError(f"Invalid ycomp debug mask: {mask}")

    enabled_subsystems = [
        subsystem_name
        for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items()
        if mask & flag
    ]

    ycomp_log = logging.getLogger("ycomp")
    for handler in ycomp_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


def register_progress(progress: "ThrobberBase"):
    """Register a throbber instance for log coordination."""
    _active_progress.add(progress)
    progress.registered = True


def unregister_progress(progress: "ThrobberBase"):
    """Unregister a throbber instance."""
    _active_progress.discard(progress)
    progress.registered = False


def notify_log_output(stream: TextIO):
    """
    Notify throbber instances that log output occurred on stream.

    Called by ProgressAwareHandler after emitting a record.

    :param stream: The stream that received output.
    :type stream: ``TextIO``
    """
    if stream not in (sys.stdout, sys.stderr):
        return
    for progress in list(_active_progress):
        if hasattr(progress, "reset_position"):
            progress.reset_position()


class ProgressAwareHandler(logging.StreamHandler):
    """
    A logging handler that coordinates with active throbber instances.

    After emitting a log record, notifies any throbber writing to the same
    stream so that it redraws below the log message instead of erasing it.
    """

    def __init__(self, stream: Optional[TextIO] = None, **kwargs):
        super().__init__(stream=stream or sys.stderr, **kwargs)

    def emit(self, record):
        try:
            msg = self.format(record)
            self.stream.write(msg + "\n")
            self.stream.flush()
            notify_log_output(self.stream)
        except Exception:  # pylint: disable=broad-exception-caught
            self.handleError(record)


#
# Ycomp exception types
#


class YcompError(Exception):
    """
    Base class for directory comparison errors.
    """


class DirectoryNotFoundError(YcompError):
    """
    A directory to compare does not exist or is not a directory.
    """

    def __init__(self, path: str, side: str = "subject"):
        """
        Initialise a new ``DirectoryNotFoundError`` exception.

        :param path: The path that could not be found.
        :param side: Which side of the comparison the path belongs to:
                     "subject" or "reference".
        """
        self.path, self.side = path, side
        super().__init__(f"{side.capitalize()} directory does not exist: {path}")


class ListingError(YcompError):
    """
    A directory exists but its entries could not be read.
    """

    def __init__(self, path: str, error: OSError):
        """
        Initialise a new ``ListingError`` exception.

        :param path: The directory that could not be listed.
        :param error: The underlying ``OSError``.
        """
        self.path, self.error = path, error
        super().__init__(f"Could not list directory {path}: {error}")


class MetadataUnavailableError(YcompError):
    """
    File metadata could not be obtained for a path.
    """

    def __init__(self, path: str, error: OSError):
        """
        Initialise a new ``MetadataUnavailableError`` exception.

        :param path: The path that could not be examined.
        :param error: The underlying ``OSError``.
        """
        self.path, self.error = path, error
        super().__init__(f"Could not stat file {path}: {error}")


class CompareCancelledError(YcompError):
    """
    A comparison was cancelled before it completed.
    """


class YcompArgumentError(YcompError):
    """
    An invalid argument was passed to a ycomp API call.
    """


__all__ = [
    "YCOMP_DEBUG_COMPARE",
    "YCOMP_DEBUG_COMMAND",
    "YCOMP_DEBUG_REPORT",
    "YCOMP_DEBUG_ALL",
    "YCOMP_CONFIG_FILE",
    # Debug logging - subsystem name interface
    "SubsystemFilter",
    "YCOMP_SUBSYSTEM_COMPARE",
    "YCOMP_SUBSYSTEM_COMMAND",
    "YCOMP_SUBSYSTEM_REPORT",
    "get_debug_mask",
    "set_debug_mask",
    # Progress-aware logging
    "register_progress",
    "unregister_progress",
    "notify_log_output",
    "ProgressAwareHandler",
    # Exception classes
    "YcompError",
    "DirectoryNotFoundError",
    "ListingError",
    "MetadataUnavailableError",
    "CompareCancelledError",
    "YcompArgumentError",
]
