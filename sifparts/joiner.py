r"""
``joiner``: Reassemble numbered part files into one file
==========================================================

This module provides :func:`join_sif`, the inverse of
:func:`sifparts.splitter.split_sif`. It finds all files named like

.. code-block:: none

    {in_dir}/{prefix}/{prefix}.00001.sif
    {in_dir}/{prefix}/{prefix}.00002.sif
    ...

(or directly in *in_dir* if there is no ``{prefix}/`` folder), sorts
them, and concatenates them into one output file.

By default the indices are **not** checked for gaps. If part ``3`` of
``1``, ``2``, ``3``, ``4`` is missing, the output silently lacks those
bytes. Use ``strict=True`` to check that indices are contiguous first.
"""

# Standard library
import fnmatch
import os
import shutil

# Local imports
from .siferror import (
    NoPartsFoundError,
    PartSequenceError,
    SifPartsIOError,
    assert_isdir)
from .splitter import DEFAULT_DIGITS, PART_EXT, valid8_int


def join_sif(
        prefix: str,
        in_dir=".",
        output=None,
        digits=DEFAULT_DIGITS,
        strict=False,
        quiet=False) -> str:
    r"""Concatenate part files ``{prefix}.NNNNN.sif`` into one file

    :Call:
        >>> fout = join_sif(prefix, in_dir=".", output=None, **kw)
    :Inputs:
        *prefix*: :class:`str`
            Base name of part files
        *in_dir*: {``"."``} | :class:`str`
            Parent folder of ``{prefix}/`` folder containing parts
        *output*: {``None``} | :class:`str`
            Name of output file; default is ``{prefix}.sif``
        *digits*: {``5``} | :class:`int`
            Exact number of digits in part index
        *strict*: ``True`` | {``False``}
            Option to check for missing indices before joining
        *quiet*: ``True`` | {``False``}
            Option to suppress STDOUT
    :Outputs:
        *fout*: :class:`str`
            Name of output file
    :Raises:
        * :class:`InputNotFoundError` if *in_dir* does not exist
        * :class:`NoPartsFoundError` if no parts match *prefix*
        * :class:`PartSequenceError` if *strict* and indices have gaps
        * :class:`SifPartsIOError` if output can't be written
    """
    # Default output
    if output is None:
        output = prefix + PART_EXT
    # Validate index width
    digits = valid8_int(digits, "digits", 1)
    # Find parts
    parts = find_parts(prefix, in_dir, digits=digits)
    # Optional check for missing parts
    if strict:
        # Find gaps
        missing = find_missing_indices(parts, prefix, digits=digits)
        # Check for any
        if missing:
            raise PartSequenceError(
                "Parts for prefix '%s' are missing indices: %s"
                % (prefix, " ".join(str(j) for j in missing)))
    # Concatenate
    try:
        with open(output, "wb") as fo:
            for fpart in parts:
                with open(fpart, "rb") as fp:
                    shutil.copyfileobj(fp, fo)
    except OSError as err:
        raise SifPartsIOError(
            "Failed to join parts into '%s': %s" % (output, err)) from err
    # Status update
    if not quiet:
        print("Joined %i parts into %s" % (len(parts), output))
    # Output
    return output


def find_parts(prefix: str, in_dir=".", digits=DEFAULT_DIGITS) -> list:
    r"""Find sorted list of part files for *prefix*

    :Call:
        >>> parts = find_parts(prefix, in_dir=".", digits=5)
    :Inputs:
        *prefix*: :class:`str`
            Base name of part files
        *in_dir*: {``"."``} | :class:`str`
            Parent folder of ``{prefix}/`` folder containing parts
        *digits*: {``5``} | :class:`int`
            Exact number of digits in part index
    :Outputs:
        *parts*: :class:`list`\ [:class:`str`]
            Full paths to part files, sorted
    :Raises:
        * :class:`InputNotFoundError` if *in_dir* does not exist
        * :class:`NoPartsFoundError` if no parts match *prefix*
        * :class:`SifPartsIOError` if the folder can't be listed
    """
    # Validate index width
    digits = valid8_int(digits, "digits", 1)
    # Folder containing parts
    parts_dir = get_parts_dir(prefix, in_dir)
    # Pattern, e.g. "vllm.[0-9][0-9][0-9][0-9][0-9].sif"
    pat = genr8_part_glob(prefix, digits)
    # List folder
    try:
        fnames = os.listdir(parts_dir)
    except OSError as err:
        raise SifPartsIOError(
            "Could not list parts folder '%s': %s" % (parts_dir, err)) from err
    # Find matches (case-sensitive on all systems)
    fnames = [fname for fname in fnames if fnmatch.fnmatchcase(fname, pat)]
    # Check for no matches
    if len(fnames) == 0:
        raise NoPartsFoundError(
            "No parts found for prefix '%s' in %s" % (prefix, parts_dir))
    # Sort (same as numeric order with fixed width)
    fnames.sort()
    # Output
    return [os.path.join(parts_dir, fname) for fname in fnames]


def get_parts_dir(prefix: str, in_dir=".") -> str:
    r"""Get folder containing parts: ``{in_dir}/{prefix}`` or *in_dir*

    :Call:
        >>> parts_dir = get_parts_dir(prefix, in_dir=".")
    """
    # Check parent folder
    assert_isdir(in_dir)
    # Preferred subfolder
    parts_dir = os.path.join(in_dir, prefix)
    # Use it if it exists
    return parts_dir if os.path.isdir(parts_dir) else in_dir


def find_missing_indices(parts: list, prefix: str, digits=DEFAULT_DIGITS):
    r"""Find indices missing between the first and last part

    :Call:
        >>> missing = find_missing_indices(parts, prefix, digits=5)
    :Inputs:
        *parts*: :class:`list`\ [:class:`str`]
            Part file names from :func:`find_parts`
        *prefix*: :class:`str`
            Base name of part files
    :Outputs:
        *missing*: :class:`list`\ [:class:`int`]
            Indices absent from the sequence
    """
    # Length of "{prefix}."
    n0 = len(prefix) + 1
    # Get indices from file names
    indices = sorted(
        int(os.path.basename(fpart)[n0:n0 + digits]) for fpart in parts)
    # Check for trivial case
    if len(indices) == 0:
        return []
    # Indices present
    present = set(indices)
    # Find gaps
    return [
        j for j in range(indices[0], indices[-1] + 1) if j not in present
    ]


def genr8_part_glob(prefix: str, digits=DEFAULT_DIGITS) -> str:
    # Escape glob characters in prefix
    prefix_pat = "".join(
        f"[{c}]" if c in "*?[" else c for c in prefix)
    # Combine
    return f"{prefix_pat}.{'[0-9]' * digits}{PART_EXT}"
