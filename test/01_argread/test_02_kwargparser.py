
# Third-party
import pytest

# Local imports
from sifparts.argread import (
    ArgReadError,
    KWKeyError,
    KWNameError,
    KWTypeError,
    KWValueError,
    KwargParser)
from sifparts.siferror import SifPartsError


# Create a subclass
class F1Kwargs(KwargParser):
    _optlist = (
        "input",
        "method",
        "digits",
        "out_dir",
    )
    _arglist = (
        "input",
    )
    _optlistreq = (
        "input",
    )
    _optmap = {
        "i": "input",
    }
    _opttypes = {
        "input": str,
        "digits": (str, int),
    }
    _optvals = {
        "method": ("gnu", "python"),
    }
    _nargmax = 1


# Subclass w/ extra option
class F2Kwargs(F1Kwargs):
    _optlist = (
        "strict",
    )


# Test some basic calls
def test_f1():
    # Instantiate valid options
    opts = F1Kwargs(i="a.sif", method="gnu", digits=3)
    # Test results
    assert opts["input"] == "a.sif"
    assert opts["method"] == "gnu"
    assert opts.get_kwargs() == {
        "input": "a.sif",
        "method": "gnu",
        "digits": 3,
    }
    # Positional parameter mapped to kwarg
    opts = F1Kwargs("b.sif")
    assert opts["input"] == "b.sif"
    assert opts.get_args() == ()


# Test some failures
def test_f1_errors():
    # Invalid option
    with pytest.raises(KWNameError):
        F1Kwargs(methd="gnu")
    # Invalid type
    with pytest.raises(KWTypeError):
        F1Kwargs(input=3)
    # Invalid value
    with pytest.raises(KWValueError):
        F1Kwargs(method="dd")
    # Too many args
    with pytest.raises(KWTypeError):
        F1Kwargs("a.sif", "b.sif")
    # Missing required parameter
    with pytest.raises(KWKeyError):
        # Create args
        opts = F1Kwargs(digits=2)
        # Attempt to get kwarg dict, but missing *input*
        opts.get_kwargs()


def test_close_matches():
    # Misspelled option
    try:
        F1Kwargs(out_dirs="x")
    except KWNameError as err:
        # Suggestion uses CLI form
        assert "out-dir" in err.args[0]
    else:
        assert False


def test_flag_no_value():
    # "--input" given w/o value
    try:
        F1Kwargs(input=True)
    except KWTypeError as err:
        assert "requires a value" in err.args[0]
    else:
        assert False


def test_inherited_optlist():
    # Options from base class still allowed
    opts = F2Kwargs(input="a.sif", strict=True)
    assert opts["strict"] is True
    assert "input" in F2Kwargs.get_optlist()


def test_decorator():
    # Decorated function
    @F1Kwargs.parse
    def f(**kw):
        return kw
    # Call it with a positional parameter
    kw = f("a.sif", digits="4")
    assert kw == {"input": "a.sif", "digits": "4"}


def test_error_family():
    # All parse errors can be caught as package errors
    assert issubclass(KWNameError, ArgReadError)
    assert issubclass(KWKeyError, KeyError)
    assert issubclass(ArgReadError, SifPartsError)
