r"""
``shellutils``: Run system commands and capture their output
==============================================================

This module provides thin wrappers around :class:`subprocess.Popen` used
by :mod:`sifparts` to talk to ``git``, ``split``, ``curl``, ``wget``,
and ``tar``. Each function takes the command in list form and returns
some combination of STDOUT, STDERR, and return code.

    * :func:`call`: return code only, output goes to terminal
    * :func:`call_o`: capture STDOUT
    * :func:`call_oe`: capture STDOUT and STDERR
    * :func:`call_q`: return code only, all output suppressed
    * :func:`check_o`: capture STDOUT, raise on non-zero exit

"""

# Standard library
import shutil
from subprocess import Popen, PIPE, DEVNULL

# Local imports
from .siferror import MissingDependencyError, SifPartsSystemError


# Default encoding for captured output
DEFAULT_ENCODING = "utf-8"


def call(cmd, cwd=None) -> int:
    r"""Run a command, letting STDOUT and STDERR reach the terminal

    :Call:
        >>> ierr = call(cmd, cwd=None)
    :Inputs:
        *cmd*: :class:`list`\ [:class:`str`]
            Command to run in list form
        *cwd*: {``None``} | :class:`str`
            Location in which to run subprocess
    :Outputs:
        *ierr*: :class:`int`
            Return code from subprocess
    """
    _, _, ierr = _call(cmd, cwd=cwd)
    return ierr


def call_o(cmd, cwd=None):
    r"""Run a command and capture STDOUT

    :Call:
        >>> stdout, stderr, ierr = call_o(cmd, cwd=None)
    :Outputs:
        *stdout*: :class:`str`
            Captured STDOUT, decoded
        *stderr*: ``None``
            STDERR is not captured
        *ierr*: :class:`int`
            Return code from subprocess
    """
    return _call(cmd, cwd=cwd, stdout=PIPE)


def call_oe(cmd, cwd=None):
    r"""Run a command and capture both STDOUT and STDERR

    :Call:
        >>> stdout, stderr, ierr = call_oe(cmd, cwd=None)
    :Outputs:
        *stdout*: :class:`str`
            Captured STDOUT, decoded
        *stderr*: :class:`str`
            Captured STDERR, decoded
        *ierr*: :class:`int`
            Return code from subprocess
    """
    return _call(cmd, cwd=cwd, stdout=PIPE, stderr=PIPE)


def call_q(cmd, cwd=None) -> int:
    r"""Run a command quietly, suppressing STDOUT and STDERR

    :Call:
        >>> ierr = call_q(cmd, cwd=None)
    :Outputs:
        *ierr*: :class:`int`
            Return code from subprocess
    """
    _, _, ierr = _call(cmd, cwd=cwd, stdout=DEVNULL, stderr=DEVNULL)
    return ierr


def check_o(cmd, cwd=None):
    r"""Run a command, capturing STDOUT and checking return code

    :Call:
        >>> stdout, stderr = check_o(cmd, cwd=None)
    :Inputs:
        *cmd*: :class:`list`\ [:class:`str`]
            Command to run in list form
        *cwd*: {``None``} | :class:`str`
            Location in which to run subprocess
    :Outputs:
        *stdout*: :class:`str`
            Captured STDOUT, decoded
        *stderr*: ``None``
            STDERR is not captured
    :Raises:
        :class:`SifPartsSystemError` if return code is not ``0``
    """
    # Run the command
    stdout, stderr, ierr = call_o(cmd, cwd=cwd)
    # Check for errors
    if ierr:
        raise SifPartsSystemError(
            ("Unexpected exit code %i from command\n" % ierr) +
            ("> %s" % " ".join(cmd)))
    # Output
    return stdout, stderr


def which(prog: str):
    r"""Find full path to an executable, if any

    :Call:
        >>> fexec = which(prog)
    :Outputs:
        *fexec*: ``None`` | :class:`str`
            Absolute path to *prog* if on ``PATH``
    """
    return shutil.which(prog)


def _call(cmd, cwd=None, stdout=None, stderr=None):
    # Start the process; missing executable -> MissingDependencyError
    try:
        proc = Popen(cmd, cwd=cwd, stdout=stdout, stderr=stderr)
    except FileNotFoundError:
        raise MissingDependencyError(
            "Command '%s' not found" % cmd[0]) from None
    # Wait for command
    out, err = proc.communicate()
    # Output
    return _decode(out), _decode(err), proc.returncode


def _decode(txt):
    # Nothing captured
    if txt is None:
        return None
    # Decode raw bytes
    return txt.decode(DEFAULT_ENCODING, errors="replace")
