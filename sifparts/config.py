r"""
``config``: Defaults for ``sif-parts`` commands
=================================================

This module provides the :class:`SifConfig` class, which reads an
optional YAML file holding defaults for the ``split``, ``join``, and
``install-lfs`` commands. Options are addressed as
``"{section}.{option}"``, for example

.. code-block:: python

    >>> cfg = SifConfig()
    >>> cfg.get("split.chunk-size")
    '2G'

An example file, ``.sifparts.yaml``:

.. code-block:: yaml

    split:
      chunk-size: 1G
      digits: 5
    install:
      git-lt: "2.20"
      bindir: ~/.local/bin

The file is found (in order) from an explicit path, the environment
variable ``SIF_PARTS_CONFIG``, or ``.sifparts.yaml`` in the current
working directory. If none exist, built-in defaults are used. Options
may not be left empty, and version numbers must be quoted so YAML does
not read ``2.20`` as a float.
"""

# Standard library
import copy
import os

# Third-party
import yaml

# Local imports
from .siferror import InvalidConfigurationError, SifPartsIOError


# Environment variables
ENV_CONFIG = "SIF_PARTS_CONFIG"
ENV_GIT_LT = "SIF_LFS_INSTALL_IF_GIT_LT"

# Name of default config file
CONFIG_FILE = ".sifparts.yaml"

# Built-in defaults
DEFAULTS = {
    "split": {
        "chunk-size": "2G",
        "digits": 5,
        "start": 1,
        "out-dir": ".",
    },
    "join": {
        "digits": 5,
        "in-dir": ".",
    },
    "install": {
        "git-lt": "2.13.0",
        "bindir": os.path.join("~", "bin"),
    },
}


# Class for config file
class SifConfig(object):
    r"""Defaults for ``sif-parts`` commands, from YAML file if present

    :Call:
        >>> cfg = SifConfig(fname=None)
    :Inputs:
        *fname*: {``None``} | :class:`str`
            Explicit config file; default from ``$SIF_PARTS_CONFIG`` or
            ``.sifparts.yaml``
    :Outputs:
        *cfg*: :class:`SifConfig`
            Config interface
    :Attributes:
        * :attr:`fname`
        * :attr:`opts`
    """
   # --- Class attributes ---
    __slots__ = (
        "fname",
        "opts",
    )

   # --- __dunder__ ---
    def __init__(self, fname=None):
        # Locate config file
        self.fname = find_configfile(fname)
        # Start with defaults
        self.opts = copy.deepcopy(DEFAULTS)
        # Read file if any
        if self.fname is not None:
            self._merge(read_configfile(self.fname))

   # --- Get ---
    def get(self, fullopt: str, vdef=None):
        r"""Get value of an option like ``"split.chunk-size"``

        :Call:
            >>> v = cfg.get(fullopt, vdef=None)
        :Inputs:
            *cfg*: :class:`SifConfig`
                Config interface
            *fullopt*: :class:`str`
                Full option name, ``"{sec}.{opt}"``
            *vdef*: {``None``} | :class:`object`
                Value to use if option is set to ``None`` in file
        :Outputs:
            *v*: :class:`object`
                Value of option
        :Raises:
            :class:`InvalidConfigurationError` if *fullopt* is not a
            recognized option
        """
        # Split option
        sec, opt = _split_fullopt(fullopt)
        # Get value
        v = self.opts[sec][opt]
        # Use default
        return vdef if v is None else v

    def get_git_lt(self) -> str:
        r"""Get threshold git version for local git-lfs install

        Environment variable ``SIF_LFS_INSTALL_IF_GIT_LT`` overrides
        the config file.

        :Call:
            >>> vers = cfg.get_git_lt()
        :Outputs:
            *vers*: :class:`str`
                Install git-lfs only if git version is less than *vers*
        :Raises:
            :class:`InvalidConfigurationError` if the file value is not a
            string
        """
        # Check environment first
        vers = os.environ.get(ENV_GIT_LT)
        # Use it if set
        if vers:
            return vers
        # Fall back to file
        vers = self.get("install.git-lt")
        # Unquoted YAML versions like 2.20 are read as floats
        if not isinstance(vers, str):
            raise InvalidConfigurationError(
                "Option 'install.git-lt' in config file '%s' must be "
                "a quoted string; got %r" % (self.fname, vers))
        # Output
        return vers

    def get_bindir(self) -> str:
        # Expand "~"
        return os.path.expanduser(self.get("install.bindir"))

   # --- Set ---
    def _merge(self, data: dict):
        # Loop through sections in file
        for sec, secopts in data.items():
            # Check for valid section
            if sec not in DEFAULTS:
                raise InvalidConfigurationError(
                    "Unrecognized section '%s' in config file '%s'; "
                    % (sec, self.fname) +
                    "options are: " + " | ".join(DEFAULTS))
            # Empty section
            if secopts is None:
                continue
            # Must be a mapping
            if not isinstance(secopts, dict):
                raise InvalidConfigurationError(
                    "Section '%s' in config file '%s' is not a mapping"
                    % (sec, self.fname))
            # Loop through options
            for opt, val in secopts.items():
                # Check name
                _split_fullopt(f"{sec}.{opt}")
                # Empty value, e.g. "out-dir:" w/ nothing after it
                if val is None:
                    raise InvalidConfigurationError(
                        "Option '%s.%s' in config file '%s' has no value"
                        % (sec, opt, self.fname))
                # Save it
                self.opts[sec][opt] = val


# Locate config file
def find_configfile(fname=None):
    r"""Find the config file to use, if any

    :Call:
        >>> fcfg = find_configfile(fname=None)
    :Inputs:
        *fname*: {``None``} | :class:`str`
            Explicit file name; must exist if given
    :Outputs:
        *fcfg*: ``None`` | :class:`str`
            Path to config file, if one was found
    """
    # Explicit file
    if fname is not None:
        # Must exist
        if not os.path.isfile(fname):
            raise InvalidConfigurationError(
                "Config file '%s' does not exist" % fname)
        return fname
    # Environment variable
    fenv = os.environ.get(ENV_CONFIG)
    if fenv:
        # Must exist
        if not os.path.isfile(fenv):
            raise InvalidConfigurationError(
                "Config file '%s' from $%s does not exist"
                % (fenv, ENV_CONFIG))
        return fenv
    # Local file
    if os.path.isfile(CONFIG_FILE):
        return CONFIG_FILE


# Read YAML config file
def read_configfile(fname: str) -> dict:
    # Read file
    try:
        with open(fname, "r") as fp:
            data = yaml.safe_load(fp)
    except yaml.YAMLError as err:
        raise InvalidConfigurationError(
            "Could not parse config file '%s'\n%s" % (fname, err)) from err
    except OSError as err:
        raise SifPartsIOError(
            "Could not read config file '%s': %s" % (fname, err)) from err
    # Empty file
    if data is None:
        return {}
    # Check type
    if not isinstance(data, dict):
        raise InvalidConfigurationError(
            "Config file '%s' must contain a mapping of sections" % fname)
    # Output
    return data


def _split_fullopt(fullopt: str):
    # Split into section and option
    parts = fullopt.split(".", 1)
    # Check
    if len(parts) != 2:
        raise InvalidConfigurationError(
            "Config option must be 'section.option'; got '%s'" % fullopt)
    # Unpack
    sec, opt = parts
    # Check section
    if sec not in DEFAULTS:
        raise InvalidConfigurationError(
            "Unrecognized config section '%s'; options are: %s"
            % (sec, " | ".join(DEFAULTS)))
    # Check option
    if opt not in DEFAULTS[sec]:
        raise InvalidConfigurationError(
            "Unrecognized config option '%s'; options are: %s"
            % (fullopt, " | ".join(f"{sec}.{o}" for o in DEFAULTS[sec])))
    # Output
    return sec, opt
