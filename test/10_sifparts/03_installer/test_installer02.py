
# Standard library
import json

# Third-party
import pytest

# Local imports
from sifparts import shellutils
from sifparts.installer import (
    Archiver,
    Downloader,
    GitTool,
    ReleaseIndex,
    ScriptRunner)
from sifparts.siferror import (
    AssetNotFoundError,
    MissingDependencyError,
    SifPartsSystemError)


# Release descriptor
RELEASE = {
    "tag_name": "v3.4.0",
    "assets": [
        {
            "name": "git-lfs-linux-amd64-v3.4.0.tar.gz",
            "browser_download_url": "https://x/git-lfs-linux-amd64.tar.gz",
        },
        {
            "name": "sha256sums",
        },
        {
            "name": "git-lfs-windows-amd64-v3.4.0.zip",
            "browser_download_url": "https://x/git-lfs-windows-amd64.zip",
        },
    ],
}


# Command recorder for shellutils.call
class CallRecorder(object):
    def __init__(self, ierr=0):
        self.ierr = ierr
        self.cmds = []
        self.cwds = []

    def __call__(self, cmd, cwd=None):
        self.cmds.append(cmd)
        self.cwds.append(cwd)
        return self.ierr


def test_release_index(monkeypatch):
    cmds = []

    def check_o(cmd, cwd=None):
        cmds.append(cmd)
        return json.dumps(RELEASE), None
    monkeypatch.setattr(shellutils, "check_o", check_o)
    # Read index
    index = ReleaseIndex(url="https://api/latest")
    urls = index.get_asset_urls()
    # Asset w/o URL is skipped
    assert urls == [
        "https://x/git-lfs-linux-amd64.tar.gz",
        "https://x/git-lfs-windows-amd64.zip",
    ]
    assert cmds == [["curl", "-s", "https://api/latest"]]


def test_release_index_errors(monkeypatch):
    index = ReleaseIndex()
    # Not JSON
    monkeypatch.setattr(
        shellutils, "check_o", lambda cmd, cwd=None: ("<html>", None))
    with pytest.raises(AssetNotFoundError):
        index.get_asset_urls()
    # JSON, but not an object
    monkeypatch.setattr(
        shellutils, "check_o", lambda cmd, cwd=None: ("[1, 2]", None))
    with pytest.raises(AssetNotFoundError):
        index.get_asset_urls()
    # No assets at all
    monkeypatch.setattr(
        shellutils, "check_o",
        lambda cmd, cwd=None: ('{"message": "rate limited"}', None))
    assert index.get_asset_urls() == []


def test_downloader_wget(monkeypatch):
    call = CallRecorder()
    monkeypatch.setattr(shellutils, "call", call)
    # Both available; wget wins
    downloader = Downloader(which=lambda prog: "/usr/bin/" + prog)
    downloader.download("https://x/a.tar.gz", "a.tar.gz")
    assert call.cmds == [["wget", "-qO", "a.tar.gz", "https://x/a.tar.gz"]]


def test_downloader_curl(monkeypatch):
    call = CallRecorder()
    monkeypatch.setattr(shellutils, "call", call)
    # No wget
    downloader = Downloader(
        which=lambda prog: None if prog == "wget" else "/usr/bin/" + prog)
    downloader.download("https://x/a.tar.gz", "a.tar.gz")
    assert call.cmds == [
        ["curl", "-sL", "-o", "a.tar.gz", "https://x/a.tar.gz"]]


def test_downloader_fails(monkeypatch):
    monkeypatch.setattr(shellutils, "call", CallRecorder(ierr=22))
    downloader = Downloader(which=lambda prog: None)
    try:
        downloader.download("https://x/a.tar.gz", "a.tar.gz")
    except SifPartsSystemError as err:
        assert "curl" in err.args[0]
        assert "22" in err.args[0]
    else:
        assert False


def test_archiver(monkeypatch):
    call = CallRecorder()
    monkeypatch.setattr(shellutils, "call", call)
    Archiver().extract("a.tar.gz", "tmp")
    assert call.cmds == [["tar", "-xzf", "a.tar.gz", "-C", "tmp"]]
    # Failed extraction
    monkeypatch.setattr(shellutils, "call", CallRecorder(ierr=2))
    with pytest.raises(SifPartsSystemError):
        Archiver().extract("a.tar.gz", "tmp")


def test_script_runner(monkeypatch):
    call = CallRecorder(ierr=3)
    monkeypatch.setattr(shellutils, "call", call)
    # Return code passed through
    ierr = ScriptRunner().run(["./install.sh", "--local"], "git-lfs-3.4.0")
    assert ierr == 3
    assert call.cwds == ["git-lfs-3.4.0"]


def test_git_tool(monkeypatch):
    cmds = []

    def call_q(cmd, cwd=None):
        cmds.append(cmd)
        return 1
    monkeypatch.setattr(shellutils, "call_q", call_q)
    monkeypatch.setattr(
        shellutils, "check_o",
        lambda cmd, cwd=None: ("git version 2.9.5\n", None))
    git = GitTool()
    # No lfs
    assert git.has_lfs() is False
    assert cmds == [["git", "lfs", "version"]]
    assert git.version_string() == "git version 2.9.5\n"


def test_git_tool_no_git(monkeypatch):
    # git not installed at all
    def call_q(cmd, cwd=None):
        raise MissingDependencyError("Command 'git' not found")
    monkeypatch.setattr(shellutils, "call_q", call_q)
    assert GitTool().has_lfs() is False
