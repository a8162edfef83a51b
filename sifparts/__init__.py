r"""
SIF parts (``sifparts``) is a Python package to store large container
images, usually Singularity/Apptainer ``.sif`` files, in size-limited
places such as git-lfs. It provides both an API (see
:func:`split_sif`, :func:`join_sif`, and :class:`LFSInstaller`) and a
command-line interface (see :mod:`sifparts.cli`).

The package works by splitting one image into numbered parts of a fixed
size, like ``vllm/vllm.00001.sif``, and concatenating them back in order
to recover the original file. It can also install git-lfs into
``~/bin`` on machines with an old git and no package manager access.

"""

# Local imports
from .installer import LFSInstaller
from .joiner import join_sif
from .splitter import split_sif
