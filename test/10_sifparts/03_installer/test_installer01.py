
# Standard library
import os

# Third-party
import pytest

# Local imports
from sifparts.installer import (
    STATUS_INSTALLED,
    STATUS_PRESENT,
    STATUS_SKIP,
    LFSInstaller,
    parse_version,
    read_git_version,
    version_lt)
from sifparts.siferror import (
    AssetNotFoundError,
    MalformedArchiveError,
    MissingDependencyError,
    SifPartsSystemError,
    VersionParseError)


# Asset URLs
URL_LINUX = (
    "https://github.com/git-lfs/git-lfs/releases/download/v3.4.0/"
    "git-lfs-linux-amd64-v3.4.0.tar.gz")
URL_MAC = (
    "https://github.com/git-lfs/git-lfs/releases/download/v3.4.0/"
    "git-lfs-darwin-arm64-v3.4.0.zip")


# Fake collaborators
class FakeGit(object):
    def __init__(self, lfs=False, txt="git version 2.9.5\n"):
        self.lfs = lfs
        self.txt = txt

    def has_lfs(self):
        return self.lfs

    def version_string(self):
        return self.txt


class FakeIndex(object):
    def __init__(self, urls=(URL_MAC, URL_LINUX)):
        self.urls = list(urls)
        self.calls = 0

    def get_asset_urls(self):
        self.calls += 1
        return self.urls


class FakeDownloader(object):
    def __init__(self):
        self.calls = []

    def download(self, url, fname):
        self.calls.append((url, fname))
        with open(fname, "wb") as fp:
            fp.write(b"archive")


class FakeArchiver(object):
    def __init__(self, dirnames=("git-lfs-3.4.0",)):
        self.dirnames = dirnames
        self.dest = None

    def extract(self, fname, dest):
        self.dest = dest
        for dirname in self.dirnames:
            os.mkdir(os.path.join(dest, dirname))


class FakeRunner(object):
    def __init__(self, ierr=0):
        self.ierr = ierr
        self.calls = []

    def run(self, cmd, cwd):
        self.calls.append((cmd, cwd))
        return self.ierr


def _which_all(prog):
    return "/usr/bin/" + prog


def _which_no_curl(prog):
    return None if prog == "curl" else "/usr/bin/" + prog


# Create installer w/ fakes
def _installer(tmp_path, **kw):
    kw.setdefault("git", FakeGit())
    kw.setdefault("index", FakeIndex())
    kw.setdefault("downloader", FakeDownloader())
    kw.setdefault("archiver", FakeArchiver())
    kw.setdefault("runner", FakeRunner())
    kw.setdefault("which", _which_all)
    return LFSInstaller(bindir=str(tmp_path / "bin"), **kw)


def test_present(tmp_path):
    # git-lfs already works
    index = FakeIndex()
    installer = _installer(
        tmp_path, git=FakeGit(lfs=True), index=index, which=_which_no_curl)
    result = installer.install()
    # Nothing else checked
    assert result.status == STATUS_PRESENT
    assert index.calls == 0
    assert not os.path.exists(tmp_path / "bin")


def test_missing_dependency(tmp_path):
    installer = _installer(tmp_path, which=_which_no_curl)
    try:
        installer.install()
    except MissingDependencyError as err:
        assert "curl" in err.args[0]
    else:
        assert False


def test_bad_git_version(tmp_path):
    installer = _installer(tmp_path, git=FakeGit(txt="git version\n"))
    with pytest.raises(VersionParseError):
        installer.install()


def test_skip(tmp_path, capsys):
    # New git
    index = FakeIndex()
    installer = _installer(
        tmp_path, git=FakeGit(txt="git version 2.39.2\n"), index=index)
    result = installer.install()
    # Test result
    assert result.status == STATUS_SKIP
    assert "2.39.2" in result.message
    assert "SIF_LFS_INSTALL_IF_GIT_LT" in result.message
    assert "2.39.2" in capsys.readouterr().out
    # Nothing downloaded
    assert index.calls == 0
    assert not os.path.exists(tmp_path / "bin")


def test_skip_equal(tmp_path):
    # Same as threshold is not "less than"
    installer = _installer(
        tmp_path, threshold="2.13", git=FakeGit(txt="git version 2.13.0"))
    assert installer.install().status == STATUS_SKIP


def test_asset_not_found(tmp_path):
    installer = _installer(tmp_path, index=FakeIndex(urls=[URL_MAC]))
    try:
        installer.install()
    except AssetNotFoundError as err:
        assert "linux-amd64" in err.args[0]
    else:
        assert False


def test_malformed_archive(tmp_path):
    # No folder in archive
    archiver = FakeArchiver(dirnames=())
    installer = _installer(tmp_path, archiver=archiver)
    with pytest.raises(MalformedArchiveError):
        installer.install()
    # Temp folder removed anyway
    assert not os.path.exists(archiver.dest)
    # Two folders is also bad
    installer = _installer(
        tmp_path, archiver=FakeArchiver(dirnames=("git-lfs-1", "git-lfs-2")))
    with pytest.raises(MalformedArchiveError):
        installer.install()


def test_install_fails(tmp_path):
    installer = _installer(tmp_path, runner=FakeRunner(ierr=2))
    with pytest.raises(SifPartsSystemError):
        installer.install()


def test_installed(tmp_path):
    downloader = FakeDownloader()
    archiver = FakeArchiver()
    runner = FakeRunner()
    installer = _installer(
        tmp_path, downloader=downloader, archiver=archiver, runner=runner)
    result = installer.install()
    # Test result
    assert result.status == STATUS_INSTALLED
    assert str(tmp_path / "bin") in result.message
    assert os.path.isdir(tmp_path / "bin")
    # Linux archive was downloaded
    assert downloader.calls[0][0] == URL_LINUX
    # Installer run from extracted folder
    cmd, cwd = runner.calls[0]
    assert cmd == ["./install.sh", "--local"]
    assert os.path.basename(cwd) == "git-lfs-3.4.0"
    # Temp folder cleaned up
    assert not os.path.exists(archiver.dest)


def test_bad_threshold():
    with pytest.raises(VersionParseError):
        LFSInstaller(threshold="2.x")


def test_read_git_version():
    assert read_git_version("git version 2.39.2\n") == "2.39.2"
    assert read_git_version("git version 2.39.2.windows.1") == "2.39.2"
    assert read_git_version("git version 1.8.3.1") == "1.8.3.1"
    for txt in ("", "git version", "git version abc", None):
        with pytest.raises(VersionParseError):
            read_git_version(txt)


def test_version_lt():
    assert version_lt("2.9.0", "2.13.0")
    assert not version_lt("2.13.0", "2.13.0")
    assert not version_lt("2.13", "2.13.0")
    assert not version_lt("2.13.0", "2.13")
    assert version_lt("1.8.3.1", "2.13.0")
    assert not version_lt("10.0", "9.99.99")
    assert parse_version("2.13.0") == (2, 13, 0)
    with pytest.raises(VersionParseError):
        parse_version("2..1")
