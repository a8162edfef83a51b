
# Third-party
import pytest

# Local imports
from sifparts import siferror


# Test file checker
def test_isfile(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    # Name of existing, then nonexistent files
    fname00 = "sample.sif"
    fname01 = "nope.sif"
    # Create file
    (tmp_path / fname00).write_bytes(b"abc")
    # Assert that a file does *not* exist
    try:
        # Check for file
        siferror.assert_isfile(fname01)
    except siferror.InputNotFoundError as err:
        # Check message
        assert fname01 in err.args[0]
        assert "relative to" in err.args[0]
    else:
        # Error expected
        raise ValueError("Exception expected")
    # Test file that does exist
    siferror.assert_isfile(fname00)
    # A folder is not a file
    with pytest.raises(FileNotFoundError):
        siferror.assert_isfile(str(tmp_path))


# Test folder checker
def test_isdir(tmp_path):
    siferror.assert_isdir(str(tmp_path))
    # Missing folder
    with pytest.raises(siferror.InputNotFoundError):
        siferror.assert_isdir(str(tmp_path / "nope"))


# Test error families
def test_families():
    assert issubclass(siferror.InputNotFoundError, FileNotFoundError)
    assert issubclass(siferror.NoPartsFoundError, FileNotFoundError)
    assert issubclass(siferror.InvalidConfigurationError, ValueError)
    assert issubclass(siferror.VersionParseError, ValueError)
    assert issubclass(siferror.AssetNotFoundError, LookupError)
    assert issubclass(siferror.MissingDependencyError, SystemError)
    assert issubclass(siferror.SifPartsIOError, OSError)
    # All are package errors
    for cls in (
            siferror.InputNotFoundError,
            siferror.MalformedArchiveError,
            siferror.PartSequenceError,
            siferror.SifPartsSystemError):
        assert issubclass(cls, siferror.SifPartsError)
