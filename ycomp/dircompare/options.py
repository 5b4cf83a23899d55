# Copyright Red Hat
#
# ycomp/dircompare/options.py - Directory comparison options
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory comparison options and configuration file support.
"""
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Union
from argparse import Namespace
from configparser import ConfigParser, Error as ConfigParserError
from os.path import exists
import logging

from ycomp import YcompArgumentError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Supported content hash algorithms
HASH_ALGORITHMS = ("md5", "sha1", "sha256", "sha512")

#: Configuration file section holding comparison defaults
_YCOMP_CFG_GLOBAL = "global"

_BOOL_FIELDS = ("content_compare", "follow_symlinks", "recursive", "quiet")
_INT_FIELDS = ("workers", "max_content_size")


@dataclass(frozen=True)
class CompareOptions:
    """
    Directory comparison options.
    """

    #: Compare the content of same-size regular files
    content_compare: bool = True
    #: Hash algorithm used for content comparison (``None`` compares bytes)
    hash_algorithm: Optional[str] = None
    #: Follow symlinks when examining and expanding entries
    follow_symlinks: bool = False
    #: Descend into directories present on both sides
    recursive: bool = True
    #: Number of worker threads (1 runs the comparison serially)
    workers: int = 1
    #: Maximum file size for content comparison (0 = unlimited)
    max_content_size: int = 0
    #: Do not output progress or status updates
    quiet: bool = False

    def __post_init__(self):
        if self.hash_algorithm is not None and self.hash_algorithm not in HASH_ALGORITHMS:
            raise YcompArgumentError(
                f"Unknown hash algorithm: {self.hash_algorithm} "
                f"(expected one of {', '.join(HASH_ALGORITHMS)})"
            )
        if self.workers < 1:
            raise YcompArgumentError(f"Invalid worker count: {self.workers}")
        if self.max_content_size < 0:
            raise YcompArgumentError(
                f"Invalid maximum content size: {self.max_content_size}"
            )

    def __str__(self):
        """
        Return a human readable string representation of this
        ``CompareOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        return "\n".join(f"{key}={val}" for key, val in self.__dict__.items())

    @classmethod
    def from_cmd_args(
        cls, cmd_args: Namespace, base: Optional["CompareOptions"] = None
    ) -> "CompareOptions":
        """
        Initialise CompareOptions from command line arguments.

        Arguments that are absent from ``cmd_args`` or set to ``None`` keep
        the value from ``base`` (or the class default), so that values
        loaded from a configuration file are only overridden by options
        given explicitly on the command line.

        :param cmd_args: The parsed command line arguments.
        :type cmd_args: ``Namespace``
        :param base: Options to use for values not given in ``cmd_args``.
        :type base: ``Optional[CompareOptions]``
        :returns: A new ``CompareOptions`` instance
        :rtype: ``CompareOptions``
        """
        base = base or cls()
        kwargs = {
            f.name: getattr(cmd_args, f.name)
            for f in fields(cls)
            if getattr(cmd_args, f.name, None) is not None
        }
        options = replace(base, **kwargs)
        _log_debug("Initialised CompareOptions from arguments: %s", repr(options))
        return options

    @classmethod
    def from_file(cls, config_file: str) -> "CompareOptions":
        """
        Load ``CompareOptions`` from an INI-style configuration file located
        at ``config_file``. Values are read from the ``[global]`` section
        using the option field names as keys. A missing file yields the
        default options.

        :param config_file: path to ycomp.conf
        :type config_file: ``str``.
        :returns: A ``CompareOptions`` instance initialised from
                  ``config_file``.
        :rtype: ``CompareOptions``
        :raises YcompArgumentError: If the file cannot be parsed or holds
                                    invalid values.
        """
        if not exists(config_file):
            return cls()

        _log_debug("Loading configuration from '%s'", config_file)
        cfg = ConfigParser()
        try:
            cfg.read([config_file])
        except ConfigParserError as err:
            raise YcompArgumentError(
                f"Could not parse configuration file {config_file}: {err}"
            ) from err

        if not cfg.has_section(_YCOMP_CFG_GLOBAL):
            return cls()

        section = cfg[_YCOMP_CFG_GLOBAL]
        kwargs: Dict[str, Union[bool, int, str, None]] = {}
        for name in section:
            kwargs[name] = _config_value(section, name)

        unknown = set(kwargs) - {f.name for f in fields(cls)}
        if unknown:
            raise YcompArgumentError(
                f"Unknown option(s) in {config_file}: {', '.join(sorted(unknown))}"
            )
        return cls(**kwargs)


def _config_value(section: Any, name: str) -> Union[bool, int, str, None]:
    """
    Convert one configuration value to the type of its option field.

    :param section: The ``ConfigParser`` section proxy.
    :param name: The option name.
    :returns: The converted value.
    """
    try:
        if name in _BOOL_FIELDS:
            return section.getboolean(name)
        if name in _INT_FIELDS:
            return section.getint(name)
    except ValueError as err:
        raise YcompArgumentError(f"Invalid value for {name}: {err}") from err
    value = section.get(name).strip()
    if name == "hash_algorithm" and value.lower() in ("", "none"):
        return None
    return value
