
# Third-party
import pytest

# Local imports
from sifparts.shellutils import (
    call,
    call_o,
    call_oe,
    call_q,
    check_o,
    which)
from sifparts.siferror import MissingDependencyError, SifPartsSystemError


# This file
TEST_FILE = "empty.txt"


# Sandbox w/ one file
@pytest.fixture
def sandbox(tmp_path, monkeypatch):
    (tmp_path / TEST_FILE).write_text("")
    monkeypatch.chdir(tmp_path)
    return tmp_path


# Tests
def test_check_o(sandbox):
    # Run a simple command
    stdout, stderr = check_o(["ls"])
    # Test results
    assert stdout.strip() == TEST_FILE
    assert stderr is None


def test_check_o_raise(sandbox):
    # Run a command that doesn't work
    try:
        check_o(["test", "-d", TEST_FILE])
    except SystemError as err:
        assert isinstance(err, SifPartsSystemError)
        assert "test -d" in err.args[0]
    else:
        # Should have failed (exit code 1)
        assert False


def test_call(sandbox):
    # Run a simple command
    ierr = call(["ls"])
    # Test results
    assert ierr == 0


def test_call_cwd(sandbox):
    # Run in subfolder
    (sandbox / "sub").mkdir()
    (sandbox / "sub" / "a.sif").write_text("")
    stdout, _, ierr = call_o(["ls"], cwd="sub")
    assert ierr == 0
    assert stdout.strip() == "a.sif"


def test_call_oe(sandbox):
    # Try to create folder where file exists
    stdout, stderr, ierr = call_oe(["mkdir", TEST_FILE])
    # Should be a return code and some STDERR
    assert ierr != 0
    assert stdout.strip() == ""
    assert stderr.strip() != ""


def test_call_o(sandbox):
    # Run a simple command
    stdout, stderr, ierr = call_o(["ls"])
    # Test results
    assert ierr == 0
    assert stdout.strip() == TEST_FILE
    assert stderr is None


def test_call_q(sandbox):
    # Try to create folder where file exists
    ierr = call_q(["mkdir", TEST_FILE])
    # Should be a return code but no output
    assert ierr != 0


def test_missing_command():
    # Program that doesn't exist
    with pytest.raises(MissingDependencyError):
        call_q(["sifparts-no-such-program"])
    # Not on PATH either
    assert which("sifparts-no-such-program") is None
