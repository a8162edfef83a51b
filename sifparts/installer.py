r"""
``installer``: Install git-lfs to a user folder without root access
=====================================================================

This module provides the :class:`LFSInstaller` class, which makes sure a
``git lfs`` command is available. It only installs something if

    * ``git lfs version`` fails, and
    * the installed ``git`` is older than a threshold version
      (default ``2.13.0``)

In that case it downloads the latest ``linux-amd64`` release archive of
git-lfs, extracts it in a temporary folder, and runs the bundled
``install.sh --local``. Newer versions of git are expected to have
git-lfs available from a package manager instead.

The external programs are reached through small collaborator classes,
each of which can be replaced (e.g. in tests):

    * :class:`GitTool`: ``git --version`` and ``git lfs version``
    * :class:`ReleaseIndex`: list of assets in latest git-lfs release
    * :class:`Downloader`: ``wget`` or ``curl``
    * :class:`Archiver`: ``tar``
    * :class:`ScriptRunner`: run ``./install.sh --local``
"""

# Standard library
import glob
import json
import os
import re
import shutil
import tempfile
from collections import namedtuple

# Local imports
from . import shellutils
from .siferror import (
    AssetNotFoundError,
    MalformedArchiveError,
    MissingDependencyError,
    SifPartsIOError,
    SifPartsSystemError,
    VersionParseError)


# Latest release of git-lfs
RELEASE_URL = "https://api.github.com/repos/git-lfs/git-lfs/releases/latest"

# Asset selection
PLATFORM_TOKEN = "linux-amd64"
ARCHIVE_EXT = ".tar.gz"

# Name of downloaded archive, and pattern for its top-level folder
ARCHIVE_NAME = "git-lfs.tar.gz"
ARCHIVE_DIR_PATTERN = "git-lfs-*"

# Install only if git is older than this
DEFAULT_GIT_LT = "2.13.0"

# Default install location
DEFAULT_BINDIR = os.path.join("~", "bin")

# Programs that must be on PATH
REQUIRED_TOOLS = ("git", "curl", "tar")

# Result status values
STATUS_PRESENT = "present"
STATUS_SKIP = "skip"
STATUS_INSTALLED = "installed"

# Result of :func:`LFSInstaller.install`
InstallResult = namedtuple("InstallResult", ["status", "message"])

# Leading numeric part of a version, e.g. "2.39.2" from "2.39.2.windows.1"
REGEX_VERSION = re.compile(r"^[0-9.]*")


# Interface to git
class GitTool(object):
    r"""Interface to the system ``git`` executable"""
    __slots__ = ()

    def has_lfs(self) -> bool:
        r"""Check if ``git lfs version`` works

        :Call:
            >>> q = git.has_lfs()
        """
        try:
            return shellutils.call_q(["git", "lfs", "version"]) == 0
        except MissingDependencyError:
            # No git at all
            return False

    def version_string(self) -> str:
        r"""Get output of ``git --version``

        :Call:
            >>> txt = git.version_string()
        :Outputs:
            *txt*: :class:`str`
                Raw version text, e.g. ``"git version 2.39.2\n"``
        """
        stdout, _ = shellutils.check_o(["git", "--version"])
        return stdout


# Interface to list of git-lfs releases
class ReleaseIndex(object):
    r"""Interface to remote index of git-lfs releases

    :Call:
        >>> index = ReleaseIndex(url=RELEASE_URL)
    """
    __slots__ = (
        "url",
    )

    def __init__(self, url=RELEASE_URL):
        self.url = url

    def get_asset_urls(self) -> list:
        r"""Get download URLs of all assets in the latest release

        :Call:
            >>> urls = index.get_asset_urls()
        :Outputs:
            *urls*: :class:`list`\ [:class:`str`]
                ``browser_download_url`` of each asset
        """
        # Read release descriptor
        stdout, _ = shellutils.check_o(["curl", "-s", self.url])
        # Parse
        try:
            release = json.loads(stdout)
        except ValueError as err:
            raise AssetNotFoundError(
                "Could not read release index '%s': %s"
                % (self.url, err)) from err
        # Check type (API errors are also JSON objects)
        if not isinstance(release, dict):
            raise AssetNotFoundError(
                "Unexpected release index from '%s'" % self.url)
        # Get URLs
        return [
            asset["browser_download_url"]
            for asset in release.get("assets", [])
            if "browser_download_url" in asset
        ]


# Downloader
class Downloader(object):
    r"""Download a file using ``wget`` (preferred) or ``curl``

    :Call:
        >>> downloader = Downloader(which=shellutils.which)
    """
    __slots__ = (
        "which",
    )

    def __init__(self, which=shellutils.which):
        self.which = which

    def download(self, url: str, fname: str):
        # Create command
        if self.which("wget"):
            cmd = ["wget", "-qO", fname, url]
        else:
            cmd = ["curl", "-sL", "-o", fname, url]
        # Run it
        _run_checked(cmd)


# Extract archives
class Archiver(object):
    r"""Extract ``.tar.gz`` archives using ``tar``"""
    __slots__ = ()

    def extract(self, fname: str, dest: str):
        _run_checked(["tar", "-xzf", fname, "-C", dest])


# Run installer scripts
class ScriptRunner(object):
    r"""Run an install script from within the extracted archive"""
    __slots__ = ()

    def run(self, cmd: list, cwd: str) -> int:
        return shellutils.call(cmd, cwd=cwd)


# Main class
class LFSInstaller(object):
    r"""Install git-lfs to a user folder if needed and allowed

    :Call:
        >>> installer = LFSInstaller(threshold="2.13.0", **kw)
    :Inputs:
        *threshold*: {``"2.13.0"``} | :class:`str`
            Only install if ``git`` version is less than this
        *bindir*: {``"~/bin"``} | :class:`str`
            Folder for executables
        *git*: {``None``} | :class:`GitTool`
            Interface to ``git``
        *index*: {``None``} | :class:`ReleaseIndex`
            Interface to git-lfs releases
        *downloader*: {``None``} | :class:`Downloader`
            Interface to ``wget``/``curl``
        *archiver*: {``None``} | :class:`Archiver`
            Interface to ``tar``
        *runner*: {``None``} | :class:`ScriptRunner`
            Runs the bundled ``install.sh``
        *which*: {:func:`shutil.which`} | **callable**
            Function to check if a program is on ``PATH``
    :Outputs:
        *installer*: :class:`LFSInstaller`
            Installer instance
    """
   # --- Class attributes ---
    __slots__ = (
        "archiver",
        "bindir",
        "downloader",
        "git",
        "index",
        "runner",
        "threshold",
        "which",
    )

   # --- __dunder__ ---
    def __init__(
            self,
            threshold=DEFAULT_GIT_LT,
            bindir=DEFAULT_BINDIR,
            git=None,
            index=None,
            downloader=None,
            archiver=None,
            runner=None,
            which=shutil.which):
        # Check threshold
        parse_version(threshold)
        # Save settings
        self.threshold = threshold
        self.bindir = os.path.expanduser(bindir)
        self.which = which
        # Collaborators
        self.git = GitTool() if git is None else git
        self.index = ReleaseIndex() if index is None else index
        self.archiver = Archiver() if archiver is None else archiver
        self.runner = ScriptRunner() if runner is None else runner
        # Downloader uses same *which*
        if downloader is None:
            downloader = Downloader(which=which)
        self.downloader = downloader

   # --- Main ---
    def install(self) -> InstallResult:
        r"""Install git-lfs if needed and if git is old enough

        :Call:
            >>> result = installer.install()
        :Outputs:
            *result*: :class:`InstallResult`
                *status* is ``"present"``, ``"skip"``, or ``"installed"``
        :Raises:
            * :class:`MissingDependencyError`
            * :class:`VersionParseError`
            * :class:`AssetNotFoundError`
            * :class:`MalformedArchiveError`
            * :class:`SifPartsSystemError`
        """
        # Check if git-lfs is already callable
        if self.git.has_lfs():
            return self._result(STATUS_PRESENT, "git-lfs already available.")
        # Check for git, curl, tar
        self.check_dependencies()
        # Get git version
        vers = self.get_git_version()
        # Only install for old git
        if not version_lt(vers, self.threshold):
            return self._result(
                STATUS_SKIP,
                f"git {vers} is new enough; skipping local git-lfs install.\n"
                "Install git-lfs via your package manager or set "
                "SIF_LFS_INSTALL_IF_GIT_LT higher.")
        # Create folder for executable
        self.make_bindir()
        # Find archive
        url = self.find_asset_url()
        # Work in temporary folder, removed on exit
        with tempfile.TemporaryDirectory(prefix="git-lfs-install.") as tmp:
            # Download
            farchive = self.download(url, tmp)
            # Extract
            install_dir = self.extract(farchive, tmp)
            # Run bundled installer
            self.run_install(install_dir)
        # Done
        return self._result(
            STATUS_INSTALLED,
            f"git-lfs installed to {self.bindir}. "
            f"Ensure {self.bindir} is on PATH.")

   # --- Steps ---
    def check_dependencies(self):
        r"""Check that ``git``, ``curl``, and ``tar`` are available

        :Call:
            >>> installer.check_dependencies()
        :Raises:
            :class:`MissingDependencyError` naming the first missing tool
        """
        for prog in REQUIRED_TOOLS:
            if not self.which(prog):
                raise MissingDependencyError(
                    f"{prog} is required to install git-lfs but was not "
                    "found on PATH")

    def get_git_version(self) -> str:
        r"""Get version of installed git, like ``"2.39.2"``

        :Call:
            >>> vers = installer.get_git_version()
        :Raises:
            :class:`VersionParseError` if version can't be determined
        """
        # Read ``git --version``
        txt = self.git.version_string()
        # Parse it
        return read_git_version(txt)

    def make_bindir(self):
        try:
            os.makedirs(self.bindir, exist_ok=True)
        except OSError as err:
            raise SifPartsIOError(
                "Could not create folder '%s': %s"
                % (self.bindir, err)) from err

    def find_asset_url(self) -> str:
        r"""Get URL of ``linux-amd64`` ``.tar.gz`` archive

        :Call:
            >>> url = installer.find_asset_url()
        :Raises:
            :class:`AssetNotFoundError` if no asset matches
        """
        # Get list of assets
        urls = self.index.get_asset_urls()
        # Find first match
        for url in urls:
            if PLATFORM_TOKEN in url and url.endswith(ARCHIVE_EXT):
                return url
        # No match
        raise AssetNotFoundError(
            f"Unable to find {PLATFORM_TOKEN} git-lfs release URL.")

    def download(self, url: str, tmp: str) -> str:
        # Name of archive
        farchive = os.path.join(tmp, ARCHIVE_NAME)
        # Status update
        print(f"Downloading {url}")
        # Download it
        self.downloader.download(url, farchive)
        # Output
        return farchive

    def extract(self, farchive: str, tmp: str) -> str:
        r"""Extract archive and find its ``git-lfs-*`` folder

        :Call:
            >>> install_dir = installer.extract(farchive, tmp)
        :Raises:
            :class:`MalformedArchiveError` unless archive contains
            exactly one ``git-lfs-*`` folder
        """
        # Status update
        print("Extracting %s" % os.path.basename(farchive))
        # Extract
        self.archiver.extract(farchive, tmp)
        # Find top-level folder
        dirs = [
            fdir for fdir in glob.glob(os.path.join(tmp, ARCHIVE_DIR_PATTERN))
            if os.path.isdir(fdir)
        ]
        # Check for exactly one
        if len(dirs) != 1:
            raise MalformedArchiveError(
                "git-lfs archive did not contain expected directory.")
        # Output
        return dirs[0]

    def run_install(self, install_dir: str):
        # Run bundled script
        cmd = ["./install.sh", "--local"]
        print("Running %s in %s" % (" ".join(cmd), install_dir))
        ierr = self.runner.run(cmd, install_dir)
        # Check for errors
        if ierr:
            raise SifPartsSystemError(
                "git-lfs install.sh exited with status %i" % ierr)

   # --- Output ---
    def _result(self, status: str, msg: str) -> InstallResult:
        # Status update
        print(msg)
        # Output
        return InstallResult(status, msg)


def read_git_version(txt: str) -> str:
    r"""Read version number from ``git --version`` output

    :Call:
        >>> vers = read_git_version(txt)
    :Inputs:
        *txt*: :class:`str`
            Output like ``"git version 2.39.2.windows.1"``
    :Outputs:
        *vers*: :class:`str`
            Numeric part of version, like ``"2.39.2"``
    :Raises:
        :class:`VersionParseError` if no version number is found
    """
    # Get third word
    words = (txt or "").split()
    vers = words[2] if len(words) >= 3 else ""
    # Keep leading digits and dots, w/o trailing "."
    vers = REGEX_VERSION.match(vers).group().rstrip(".")
    # Check for empty result
    if not vers:
        raise VersionParseError(
            "Unable to determine git version from '%s'"
            % (txt or "").strip())
    # Output
    return vers


def parse_version(vers: str) -> tuple:
    r"""Convert a version string like ``"2.13.0"`` to integers

    :Call:
        >>> parts = parse_version(vers)
    :Outputs:
        *parts*: :class:`tuple`\ [:class:`int`]
            Integer value of each ``.``-separated segment
    :Raises:
        :class:`VersionParseError` if any segment is not a whole number
    """
    # Split into segments
    segs = str(vers).strip().split(".")
    # Check each segment
    if not all(seg.isascii() and seg.isdigit() for seg in segs):
        raise VersionParseError("Invalid version string '%s'" % vers)
    # Convert
    return tuple(int(seg) for seg in segs)


def version_lt(vers1: str, vers2: str) -> bool:
    r"""Check if version *vers1* is less than *vers2*

    Versions are compared segment by segment as integers, so
    ``"2.9"`` < ``"2.13"``. Missing trailing segments count as ``0``,
    so ``"2.13"`` and ``"2.13.0"`` are equal.

    :Call:
        >>> q = version_lt(vers1, vers2)
    :Outputs:
        *q*: ``True`` | ``False``
            Whether *vers1* is strictly older than *vers2*
    """
    # Parse both
    v1 = parse_version(vers1)
    v2 = parse_version(vers2)
    # Pad shorter with zeros
    n = max(len(v1), len(v2))
    v1 += (0,) * (n - len(v1))
    v2 += (0,) * (n - len(v2))
    # Tuple comparison is segment by segment
    return v1 < v2


def _run_checked(cmd: list):
    # Run command with output to terminal
    ierr = shellutils.call(cmd)
    # Check for errors
    if ierr:
        raise SifPartsSystemError(
            ("Unexpected exit code %i from command\n" % ierr) +
            ("> %s" % " ".join(cmd)))
