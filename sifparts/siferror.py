r"""
``siferror``: Errors for :mod:`sifparts` modules
===========================================================

This module provides a collection of error types relevant to the
:mod:`sifparts` package. They are essentially the same as standard error
types such as :class:`FileNotFoundError`, :class:`ValueError`, etc. but
with an extra parent of :class:`SifPartsError` to enable catching all
errors specifically raised by this package

"""

# Standard library
import os


# Basic error family
class SifPartsError(Exception):
    r"""Parent error class for :mod:`sifparts` errors

    Inherits from :class:`Exception`
    """
    pass


class InputNotFoundError(FileNotFoundError, SifPartsError):
    r"""Exception for missing input file or input folder
    """
    pass


class InvalidConfigurationError(ValueError, SifPartsError):
    r"""Exception for bad chunk size, digit count, or start index

    Also raised for unrecognized config file sections and options
    """
    pass


class MissingDependencyError(SystemError, SifPartsError):
    r"""Exception for required external tool that is not installed
    """
    pass


class VersionParseError(ValueError, SifPartsError):
    r"""Exception for version string that can't be read as ``X.Y.Z``
    """
    pass


class AssetNotFoundError(LookupError, SifPartsError):
    r"""Exception for release without an archive for this platform
    """
    pass


class MalformedArchiveError(SystemError, SifPartsError):
    r"""Exception for release archive w/o expected top-level folder
    """
    pass


class NoPartsFoundError(FileNotFoundError, SifPartsError):
    r"""Exception for ``join`` when no part files match the prefix
    """
    pass


class PartSequenceError(ValueError, SifPartsError):
    r"""Exception for part sequence with missing indices (strict join)
    """
    pass


class SifPartsIOError(OSError, SifPartsError):
    r"""Exception for failure to read, write, or create files/folders
    """
    pass


class SifPartsSystemError(SystemError, SifPartsError):
    r"""Exception for external commands that exit with an error
    """
    pass


# Assert that file exists
def assert_isfile(fname: str):
    r"""Check that *fname* exists and is a regular file

    :Call:
        >>> assert_isfile(fname)
    :Inputs:
        *fname*: :class:`str`
            Name of file to check
    :Raises:
        :class:`InputNotFoundError`
    """
    # Check for file
    if not os.path.isfile(fname):
        # Start message
        msg = "Input file not found: %s" % fname
        # Check for absolute path
        if not os.path.isabs(fname):
            # Show working directory
            msg += "\n  relative to '%s'" % os.getcwd()
        raise InputNotFoundError(msg)


# Assert that folder exists
def assert_isdir(dirname: str):
    # Check for folder
    if not os.path.isdir(dirname):
        # Start message
        msg = "Input directory not found: %s" % dirname
        # Check for absolute path
        if not os.path.isabs(dirname):
            # Show working directory
            msg += "\n  relative to '%s'" % os.getcwd()
        raise InputNotFoundError(msg)
