r"""
``cli``: Command-line interface to ``sif-parts``
==================================================

This module provides the functions that make up the user interface to
:mod:`sifparts`. There is a function :func:`main` that reads
``sys.argv`` (the command-line strings of the current command). Then
:func:`main` dispatches one of several other functions:

    * :func:`sif_split`
    * :func:`sif_join`
    * :func:`sif_install_lfs`

These secondary commands read Python arguments and keyword arguments
rather than parsing ``sys.argv``, so they are usable to Python API
programmers as well. Defaults not given on the command line are read
from the config file (see :mod:`sifparts.config`).

A second entry point, :func:`main_install_lfs`, is used for the
``sif-install-lfs`` executable.
"""

# Standard library
import sys

# Local imports
from .argread import ArgReader, ArgReadError, KwargParser
from .config import SifConfig
from .installer import STATUS_SKIP, LFSInstaller
from .joiner import join_sif
from .siferror import SifPartsError
from .splitter import SPLIT_METHODS, split_sif


# Help message
HELP_SIFPARTS = r"""Split, join, and store SIF images (sif-parts)

Split large files (usually Singularity/Apptainer ``.sif`` images) into
numbered parts that fit storage and transfer limits, join them back, and
install git-lfs locally if needed.

:Usage:
    .. code-block:: console

        $ sif-parts CMD [OPTIONS]

:Inputs:
    * *CMD*: name of command to run

    Available commands are:

    ==================  ===========================================
    Command             Description
    ==================  ===========================================
    ``split``           Split a SIF into parts like vllm/vllm.00001.sif
    ``join``            Reassemble parts into a single .sif file
    ``install-lfs``     Install git-lfs locally to ~/bin if missing
    ==================  ===========================================

:Examples:
    .. code-block:: console

        $ sif-parts split --input /path/to/vllm.sif --prefix vllm
        $ sif-parts join --prefix vllm --output vllm.sif
        $ sif-parts install-lfs
"""

HELP_SPLIT = r"""
``sif-parts split``: Split a file into numbered parts
=======================================================

This command reads one file in chunks of *SIZE* bytes and writes each
chunk to its own file, ``{DIR}/{NAME}/{NAME}.{N}.sif``, where *N* is a
zero-padded counter. GNU ``split`` is used if available; otherwise the
parts are written directly. Both methods give identical parts.

:Usage:
    .. code-block:: console

        $ sif-parts split --input PATH [OPTIONS]
        $ sif-parts split PATH [OPTIONS]

:Inputs:
    * *PATH*: name of file to split

:Options:
    -h, --help
        Display this help message and exit

    --input PATH
        Input ``.sif`` file (required)

    --prefix NAME
        Output prefix (default: *PATH* basename without ``.sif``)

    --out-dir DIR
        Output base directory; parts go under ``{DIR}/{NAME}/``
        (default: ``.``)

    --chunk-size SIZE
        Size of each part, with optional ``k``, ``m``, ``g``, or ``t``
        suffix (powers of 1024) (default: ``2G``)

    --digits N
        Number of digits in part index (default: ``5``)

    --start N
        Index of first part (default: ``1``)

    --method gnu | python
        Force GNU ``split`` or direct file writes

    --config FILE
        Read defaults from YAML file *FILE*

    -q, --quiet
        Don't list part files
"""

HELP_JOIN = r"""
``sif-parts join``: Reassemble parts into a single file
=========================================================

This command finds all files ``{NAME}.{N}.sif`` in ``{DIR}/{NAME}/``
(or in *DIR* itself if that folder doesn't exist), sorts them, and
concatenates them into one file.

Missing parts are **not** detected unless ``--strict`` is given; a
missing part silently produces a corrupt output file.

:Usage:
    .. code-block:: console

        $ sif-parts join --prefix NAME [OPTIONS]
        $ sif-parts join NAME [OPTIONS]

:Inputs:
    * *NAME*: prefix of part files

:Options:
    -h, --help
        Display this help message and exit

    --prefix NAME
        Prefix to match (required)

    --in-dir DIR
        Input base directory; parts under ``{DIR}/{NAME}/``
        (default: ``.``)

    --output PATH
        Output ``.sif`` file (default: ``{NAME}.sif``)

    --digits N
        Number of digits in part index (default: ``5``)

    --strict
        Fail if any index between first and last part is missing

    --config FILE
        Read defaults from YAML file *FILE*

    -q, --quiet
        Don't print summary
"""

HELP_INSTALL_LFS = r"""
``sif-parts install-lfs``: Install git-lfs locally if missing
===============================================================

If ``git lfs`` is not available and the installed ``git`` is older than
a threshold version, download the latest ``linux-amd64`` git-lfs
release and install it to ``~/bin`` using its ``install.sh --local``.
Requires ``git``, ``curl``, and ``tar``.

If git is new enough, nothing is installed (exit status 8); install
git-lfs with a package manager instead.

:Usage:
    .. code-block:: console

        $ sif-parts install-lfs [OPTIONS]
        $ sif-install-lfs [OPTIONS]

:Options:
    -h, --help
        Display this help message and exit

    --config FILE
        Read ``install.git-lt`` and ``install.bindir`` from YAML file

:Environment:
    ``SIF_LFS_INSTALL_IF_GIT_LT``
        Threshold git version (default: ``2.13.0``)
"""


# Dictionary of help commands
HELP_DICT = {
    "install-lfs": HELP_INSTALL_LFS,
    "join": HELP_JOIN,
    "split": HELP_SPLIT,
}


# Customized CLI parser
class SifArgParser(ArgReader):
    # No attributes
    __slots__ = ()

    # Aliases
    _optmap = {
        "h": "help",
        "q": "quiet",
    }

    # Options that never take a value
    _optlist_noval = (
        "help",
        "quiet",
        "strict",
    )


# Options for each command
class SplitKwargs(KwargParser):
    __slots__ = ()
    _optlist = (
        "chunk_size",
        "config",
        "digits",
        "input",
        "method",
        "out_dir",
        "prefix",
        "quiet",
        "start",
    )
    _optlistreq = (
        "input",
    )
    _arglist = (
        "input",
    )
    _nargmax = 1
    _opttypes = {
        "chunk_size": (str, int),
        "config": str,
        "digits": (str, int),
        "input": str,
        "method": str,
        "out_dir": str,
        "prefix": str,
        "start": (str, int),
    }
    _optvals = {
        "method": SPLIT_METHODS,
    }


class JoinKwargs(KwargParser):
    __slots__ = ()
    _optlist = (
        "config",
        "digits",
        "in_dir",
        "output",
        "prefix",
        "quiet",
        "strict",
    )
    _optlistreq = (
        "prefix",
    )
    _arglist = (
        "prefix",
    )
    _nargmax = 1
    _opttypes = {
        "config": str,
        "digits": (str, int),
        "in_dir": str,
        "output": str,
        "prefix": str,
    }


class InstallKwargs(KwargParser):
    __slots__ = ()
    _optlist = (
        "config",
    )
    _nargmax = 0
    _opttypes = {
        "config": str,
    }


# Return codes
IERR_OK = 0
IERR_ERROR = 1
IERR_SKIP = 8
IERR_CMD = 16
IERR_ARGS = 32


@SplitKwargs.parse
def sif_split(**kw) -> int:
    r"""Split a file into numbered parts

    :Call:
        >>> ierr = sif_split(input, **kw)
        >>> ierr = sif_split(input=input, prefix=None, chunk_size="2G")
    :Inputs:
        *input*: :class:`str`
            Name of file to split
        *prefix*: {``None``} | :class:`str`
            Base name of parts
        *out_dir*: {``"."``} | :class:`str`
            Parent folder of ``{prefix}/`` folder
        *chunk_size*: {``"2G"``} | :class:`str` | :class:`int`
            Size of each part
        *digits*: {``5``} | :class:`int`
            Number of digits in part index
        *start*: {``1``} | :class:`int`
            Index of first part
        *method*: {``None``} | ``"gnu"`` | ``"python"``
            Force splitting method
        *config*: {``None``} | :class:`str`
            Config file for defaults
    :Outputs:
        *ierr*: :class:`int`
            Return code
    """
    # Read config
    cfg = SifConfig(kw.pop("config", None))
    # Apply defaults from config
    kw.setdefault("out_dir", cfg.get("split.out-dir"))
    kw.setdefault("chunk_size", cfg.get("split.chunk-size"))
    kw.setdefault("digits", cfg.get("split.digits"))
    kw.setdefault("start", cfg.get("split.start"))
    # Split
    split_sif(**kw)
    return IERR_OK


@JoinKwargs.parse
def sif_join(**kw) -> int:
    r"""Reassemble numbered parts into one file

    :Call:
        >>> ierr = sif_join(prefix, **kw)
        >>> ierr = sif_join(prefix=prefix, in_dir=".", output=None)
    :Inputs:
        *prefix*: :class:`str`
            Base name of parts
        *in_dir*: {``"."``} | :class:`str`
            Parent folder of ``{prefix}/`` folder
        *output*: {``None``} | :class:`str`
            Output file; default is ``{prefix}.sif``
        *digits*: {``5``} | :class:`int`
            Number of digits in part index
        *strict*: ``True`` | {``False``}
            Check for missing indices first
        *config*: {``None``} | :class:`str`
            Config file for defaults
    :Outputs:
        *ierr*: :class:`int`
            Return code
    """
    # Read config
    cfg = SifConfig(kw.pop("config", None))
    # Apply defaults from config
    kw.setdefault("in_dir", cfg.get("join.in-dir"))
    kw.setdefault("digits", cfg.get("join.digits"))
    # Join
    join_sif(**kw)
    return IERR_OK


@InstallKwargs.parse
def sif_install_lfs(**kw) -> int:
    r"""Install git-lfs to ``~/bin`` if missing and git is old

    The threshold version comes from ``$SIF_LFS_INSTALL_IF_GIT_LT``, the
    config file, or ``2.13.0``, in that order.

    :Call:
        >>> ierr = sif_install_lfs(config=None)
    :Outputs:
        *ierr*: :class:`int`
            ``IERR_OK`` if git-lfs is available afterward; ``IERR_SKIP``
            if git is too new for a local install
    """
    # Read config
    cfg = SifConfig(kw.pop("config", None))
    # Create installer
    installer = LFSInstaller(
        threshold=cfg.get_git_lt(),
        bindir=cfg.get_bindir())
    # Run it
    result = installer.install()
    # Check for skip
    if result.status == STATUS_SKIP:
        return IERR_SKIP
    return IERR_OK


# Command dictionary
CMD_DICT = {
    "install-lfs": sif_install_lfs,
    "join": sif_join,
    "split": sif_split,
}


# Main function
def main(argv=None) -> int:
    r"""Main command-line interface to ``sif-parts``

    The function works by reading the second word of ``sys.argv`` and
    dispatching a dedicated function for that purpose.

    :Call:
        >>> ierr = main(argv=None)
    :Inputs:
        *argv*: {``None``} | :class:`list`\ [:class:`str`]
            Command-line arguments (default from ``sys.argv``)
    :Outputs:
        *ierr*: :class:`int`
            Return code
    """
    # Create parser
    parser = SifArgParser()
    # Parse args
    try:
        a, kw = parser.parse(argv)
    except ArgReadError as err:
        _print_error(err)
        return IERR_ARGS
    kw.pop("__replaced__", None)
    # Check for no commands
    if len(a) == 0:
        # Explicit help is not an error
        if kw.get("help", False):
            print(HELP_SIFPARTS)
            return IERR_OK
        print(HELP_SIFPARTS, file=sys.stderr)
        return IERR_CMD
    # Get command name
    cmdname = a[0]
    # Get function
    func = CMD_DICT.get(cmdname)
    # Check it
    if func is None:
        # Unrecognized function
        print("Unexpected command '%s'" % cmdname, file=sys.stderr)
        print(
            "Options are: " + " | ".join(list(CMD_DICT.keys())),
            file=sys.stderr)
        return IERR_CMD
    # Run function
    return _run_cmd(cmdname, func, *a[1:], **kw)


# Entry point for sif-install-lfs
def main_install_lfs(argv=None) -> int:
    r"""Install git-lfs locally if missing (``sif-install-lfs``)

    :Call:
        >>> ierr = main_install_lfs(argv=None)
    :Outputs:
        *ierr*: :class:`int`
            Return code
    """
    # Create parser
    parser = SifArgParser()
    # Parse args
    try:
        a, kw = parser.parse(argv)
    except ArgReadError as err:
        _print_error(err)
        return IERR_ARGS
    kw.pop("__replaced__", None)
    # Install
    return _run_cmd("install-lfs", sif_install_lfs, *a, **kw)


def _run_cmd(cmdname: str, func, *a, **kw) -> int:
    # Check for "help" option
    if kw.pop("help", False):
        print(HELP_DICT[cmdname])
        return IERR_OK
    # Run function
    try:
        ierr = func(*a, **kw)
    except ArgReadError as err:
        # Bad options; show usage
        _print_error(err)
        print(HELP_DICT[cmdname], file=sys.stderr)
        return IERR_ARGS
    except SifPartsError as err:
        _print_error(err)
        return IERR_ERROR
    # Convert None -> 0
    return IERR_OK if ierr is None else ierr


def _print_error(err: Exception):
    # Message w/o KeyError's quotes
    msg = err.args[0] if err.args else ""
    # Show error type and message
    print(f"{err.__class__.__name__}:", file=sys.stderr)
    print(f"  {msg}", file=sys.stderr)
