r"""
``splitter``: Split a large file into fixed-size numbered parts
=================================================================

This module provides :func:`split_sif`, which breaks one (usually
``.sif``) file into a sequence of part files

.. code-block:: none

    {out_dir}/{prefix}/{prefix}.00001.sif
    {out_dir}/{prefix}/{prefix}.00002.sif
    ...

Each part holds exactly *chunk_size* bytes except the last, which may
be shorter. Concatenating the parts in order (see
:func:`sifparts.joiner.join_sif`) reproduces the original file.

There are two methods that produce byte-identical results:

    * ``"gnu"``: GNU ``split`` with ``--numeric-suffixes``
    * ``"python"``: plain sequential reads and writes

By default GNU ``split`` is used if available.
"""

# Standard library
import math
import os
import re

# Local imports
from . import shellutils
from .siferror import (
    InvalidConfigurationError,
    MissingDependencyError,
    SifPartsIOError,
    SifPartsSystemError,
    assert_isfile)


# Regular expression for chunk sizes like "2G" or "1.5m"
REGEX_SIZE = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)\s*([kmgt]?)\s*$", re.I)

# Multipliers for size suffixes
SIZE_UNITS = {
    "": 1,
    "k": 1024,
    "m": 1024**2,
    "g": 1024**3,
    "t": 1024**4,
}

# Extension of part files
PART_EXT = ".sif"

# Recognized split methods
SPLIT_METHODS = ("gnu", "python")

# Defaults
DEFAULT_CHUNK_SIZE = "2G"
DEFAULT_DIGITS = 5
DEFAULT_START = 1

# Read/write block for fallback method
IO_BLOCK = 16 * 1024**2


def split_sif(
        input: str,
        prefix=None,
        out_dir=".",
        chunk_size=DEFAULT_CHUNK_SIZE,
        digits=DEFAULT_DIGITS,
        start=DEFAULT_START,
        method=None,
        quiet=False) -> list:
    r"""Split a file into numbered parts of *chunk_size* bytes

    :Call:
        >>> parts = split_sif(input, prefix=None, out_dir=".", **kw)
    :Inputs:
        *input*: :class:`str`
            Name of file to split
        *prefix*: {``None``} | :class:`str`
            Base name of parts; default is basename of *input* w/o
            ``.sif``
        *out_dir*: {``"."``} | :class:`str`
            Parent folder of ``{prefix}/`` folder where parts go
        *chunk_size*: {``"2G"``} | :class:`str` | :class:`int`
            Size of each part, ``k``, ``m``, ``g``, ``t`` suffixes
            allowed (powers of 1024)
        *digits*: {``5``} | :class:`int`
            Number of digits in part index
        *start*: {``1``} | :class:`int`
            Index of first part
        *method*: {``None``} | ``"gnu"`` | ``"python"``
            Force splitting method; default is ``"gnu"`` if available
        *quiet*: ``True`` | {``False``}
            Option to suppress STDOUT listing each part
    :Outputs:
        *parts*: :class:`list`\ [:class:`str`]
            Names of part files written, in order
    :Raises:
        * :class:`InputNotFoundError` if *input* is not a file
        * :class:`InvalidConfigurationError` for bad *chunk_size*,
          *digits*, *start*, or *method*
        * :class:`SifPartsIOError` if parts can't be written
    """
    # Check input file before creating anything
    assert_isfile(input)
    # Default prefix
    if prefix is None:
        prefix = default_prefix(input)
    # Validate parameters
    nbyte = parse_size(chunk_size)
    digits = valid8_int(digits, "digits", 1)
    start = valid8_int(start, "start", 0)
    # Number of parts needed
    nparts = count_parts(os.path.getsize(input), nbyte)
    # Check that all indices fit in *digits*
    _check_index_width(start, nparts, digits)
    # Determine method
    method = _resolve_method(method)
    # Create folder for parts
    parts_dir = os.path.join(out_dir, prefix)
    try:
        os.makedirs(parts_dir, exist_ok=True)
    except OSError as err:
        raise SifPartsIOError(
            "Could not create parts folder '%s': %s"
            % (parts_dir, err)) from err
    # Split
    if method == "gnu":
        parts = _split_gnu(input, parts_dir, prefix, nbyte, digits, start)
    else:
        parts = _split_python(input, parts_dir, prefix, nbyte, digits, start)
    # Status update
    if not quiet:
        for fpart in parts:
            print(fpart)
    # Output
    return parts


def _split_gnu(input, parts_dir, prefix, nbyte, digits, start) -> list:
    # Number of parts, for the list of output files
    nparts = count_parts(os.path.getsize(input), nbyte)
    # Form command; pass byte count so both methods parse sizes alike
    cmd = [
        "split",
        "-b", str(nbyte),
        "-a", str(digits),
        f"--numeric-suffixes={start}",
        f"--additional-suffix={PART_EXT}",
        "--",
        input,
        os.path.join(parts_dir, prefix + "."),
    ]
    # Run it
    _, stderr, ierr = shellutils.call_oe(cmd)
    # Check for errors
    if ierr:
        raise SifPartsSystemError(
            ("Unexpected exit code %i from command\n" % ierr) +
            ("> %s\n\n" % " ".join(cmd)) +
            ("Original error message:\n%s" % stderr))
    # Output
    return [
        os.path.join(parts_dir, genr8_part_name(prefix, j, digits))
        for j in range(start, start + nparts)
    ]


def _split_python(input, parts_dir, prefix, nbyte, digits, start) -> list:
    # Initialize outputs
    parts = []
    # Index of next part
    j = start
    # Open input
    try:
        with open(input, "rb") as fp:
            # Loop until input is exhausted
            while True:
                # Read first block of next chunk
                block = fp.read(min(nbyte, IO_BLOCK))
                # Check for EOF
                if not block:
                    break
                # Name of part file
                fpart = os.path.join(
                    parts_dir, genr8_part_name(prefix, j, digits))
                # Write chunk, a block at a time
                with open(fpart, "wb") as fo:
                    # Bytes remaining in this chunk
                    nrem = nbyte
                    while block:
                        fo.write(block)
                        nrem -= len(block)
                        # Check if chunk is full
                        if nrem == 0:
                            break
                        # Read next block
                        block = fp.read(min(nrem, IO_BLOCK))
                # Save part
                parts.append(fpart)
                j += 1
    except OSError as err:
        raise SifPartsIOError(
            "Failed to split '%s' into '%s': %s"
            % (input, parts_dir, err)) from err
    # Output
    return parts


def parse_size(chunk_size) -> int:
    r"""Convert a size like ``"2G"`` or ``"1.5m"`` to a number of bytes

    :Call:
        >>> nbyte = parse_size(chunk_size)
    :Inputs:
        *chunk_size*: :class:`str` | :class:`int`
            Size, with optional suffix ``k``, ``m``, ``g``, or ``t``
            (case-insensitive, powers of 1024)
    :Outputs:
        *nbyte*: :class:`int`
            Size in bytes
    :Raises:
        :class:`InvalidConfigurationError` if *chunk_size* is not
        understood or is less than one byte
    """
    # Check for integer (but not bool)
    if isinstance(chunk_size, int) and not isinstance(chunk_size, bool):
        nbyte = chunk_size
    elif isinstance(chunk_size, str):
        # Parse string
        match = REGEX_SIZE.match(chunk_size)
        # Check for invalid string
        if match is None:
            raise InvalidConfigurationError(
                "Invalid chunk size '%s'; " % chunk_size +
                "expected a number with optional k, m, g, or t suffix")
        # Unpack
        num, unit = match.groups()
        mult = SIZE_UNITS[unit.lower()]
        # Avoid float round-off for integers
        if "." in num:
            nbyte = int(float(num) * mult)
        else:
            nbyte = int(num) * mult
    else:
        raise InvalidConfigurationError(
            "Invalid chunk size type '%s'" % type(chunk_size).__name__)
    # Check minimum
    if nbyte < 1:
        raise InvalidConfigurationError(
            "Chunk size must be at least 1 byte; got '%s'" % chunk_size)
    # Output
    return nbyte


def genr8_part_name(prefix: str, j: int, digits=DEFAULT_DIGITS) -> str:
    r"""Generate file name of one part

    :Call:
        >>> fname = genr8_part_name(prefix, j, digits=5)
    :Inputs:
        *prefix*: :class:`str`
            Base name of parts
        *j*: :class:`int`
            Part index
        *digits*: {``5``} | :class:`int`
            Width of zero-padded index
    :Outputs:
        *fname*: :class:`str`
            ``"{prefix}.{j:0{digits}d}.sif"``
    """
    return f"{prefix}.{j:0{digits}d}{PART_EXT}"


def default_prefix(input: str) -> str:
    r"""Get default prefix: basename of *input* w/o ``.sif``

    :Call:
        >>> prefix = default_prefix(input)
    """
    # Get base name
    prefix = os.path.basename(input)
    # Strip one .sif
    if prefix.endswith(PART_EXT):
        prefix = prefix[:-len(PART_EXT)]
    # Output
    return prefix


def count_parts(fsize: int, nbyte: int) -> int:
    # Number of chunks, zero for empty file
    return math.ceil(fsize / nbyte) if fsize else 0


def has_gnu_split() -> bool:
    r"""Check if ``split`` on this system supports numeric suffixes

    :Call:
        >>> q = has_gnu_split()
    :Outputs:
        *q*: ``True`` | ``False``
            Whether ``split --help`` mentions ``--numeric-suffixes``
    """
    # Check if there's a split executable at all
    if shellutils.which("split") is None:
        return False
    # Read help message
    stdout, _, _ = shellutils.call_oe(["split", "--help"])
    # Check for option
    return "--numeric-suffixes" in (stdout or "")


def _resolve_method(method=None) -> str:
    # Automatic
    if method is None:
        return "gnu" if has_gnu_split() else "python"
    # Check value
    if method not in SPLIT_METHODS:
        raise InvalidConfigurationError(
            "Unrecognized split method '%s'; options are: %s"
            % (method, " | ".join(SPLIT_METHODS)))
    # Check for forced GNU split
    if method == "gnu" and not has_gnu_split():
        raise MissingDependencyError(
            "GNU split with --numeric-suffixes is not available")
    # Output
    return method


def _check_index_width(start: int, nparts: int, digits: int):
    # Largest index that fits
    jmax = 10**digits - 1
    # Last index that will be used
    jlast = start + max(nparts, 1) - 1
    # Check
    if jlast > jmax:
        raise InvalidConfigurationError(
            "Part index %i does not fit in %i digits; " % (jlast, digits) +
            "increase --digits or --chunk-size")


def valid8_int(val, name: str, vmin: int) -> int:
    # Convert strings from the command line
    try:
        ival = int(val)
    except (TypeError, ValueError):
        raise InvalidConfigurationError(
            "Invalid value for %s: '%s'; expected an integer"
            % (name, val)) from None
    # Reject bools and floats with fractional parts
    if isinstance(val, bool) or (isinstance(val, float) and ival != val):
        raise InvalidConfigurationError(
            "Invalid value for %s: '%s'; expected an integer" % (name, val))
    # Check minimum
    if ival < vmin:
        raise InvalidConfigurationError(
            "Invalid value for %s: %i; must be at least %i"
            % (name, ival, vmin))
    # Output
    return ival
