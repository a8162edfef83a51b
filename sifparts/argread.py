r"""
``argread``: Parse command-line arguments and validate options
================================================================

This module provides two classes:

    * :class:`KwargParser`: validate the ``**kw`` of a function
    * :class:`ArgReader`: turn ``sys.argv`` into ``(a, kw)``

Users of this module create subclasses of :class:`KwargParser` that
describe the expected keyword arguments of one function. The
capabilities of :class:`KwargParser` include

* only allowing specific keys (``_optlist``)
* mapping keys to alternate names, e.g. using *h* as a shortcut for
  *help* (``_optmap``)
* checking the type of an option value (``_opttypes``)
* restricting the values of an option (``_optvals``)
* requiring some options (``_optlistreq``)
* naming positional parameters so they can be given either way
  (``_arglist``)

The :class:`ArgReader` reads arguments like

.. code-block:: console

    $ sif-parts split --input vllm.sif --chunk-size 1G --no-quiet

and converts them to

.. code-block:: python

    a = ["split"]
    kw = {"input": "vllm.sif", "chunk_size": "1G", "quiet": False}

Hyphens in option names become underscores so that *kw* can be passed
directly to Python functions.
"""

# Standard library
import difflib
import sys
from collections import namedtuple
from functools import wraps

# Local imports
from .siferror import SifPartsError


# Basic error class
class ArgReadError(SifPartsError):
    r"""Parent error class for :mod:`argread` errors

    Enables general catching of all command-line parsing errors
    """
    pass


# Key error
class KWKeyError(KeyError, ArgReadError):
    r"""Errors for missing keys raised by :mod:`argread`"""
    pass


# Name error
class KWNameError(NameError, ArgReadError):
    r"""Errors for incorrect names raised by :mod:`argread`"""
    pass


# Type error
class KWTypeError(TypeError, ArgReadError):
    r"""Errors for incorrect type raised by :mod:`argread`"""
    pass


# Value error
class KWValueError(ValueError, ArgReadError):
    r"""Errors for invalid values raised by :mod:`argread`"""
    pass


# Option name/value pair
OptPair = namedtuple("OptPair", ["opt", "val"])


# Main class
class KwargParser(dict):
    r"""Validator for keyword arguments of one function

    :Call:
        >>> opts = KwargParser(*a, **kw)
    :Inputs:
        *a*: :class:`tuple`
            Positional parameters
        *kw*: :class:`dict`
            Keyword arguments
    :Outputs:
        *opts*: :class:`KwargParser`
            Validated options, as a :class:`dict`
    """
  # *** CLASS ATTRIBUTES ***
    # Attributes
    __slots__ = (
        "argvals",
    )

    # Options
    _optlist = ()

    # Aliases
    _optmap = {}

    # Types
    _opttypes = {}

    # Specified allowed values
    _optvals = {}

    # Required kwargs
    _optlistreq = ()

    # Positional parameter names
    _arglist = ()

    # Maximum number of positional parameters
    _nargmax = None

  # *** METHODS ***
   # --- __dunder__ ---
    def __init__(self, *args, **kw):
        # Initialize arg values
        self.argvals = []
        # Class
        cls = self.__class__
        # Check arg counter
        narg = len(args)
        nargmax = cls._nargmax
        if (nargmax is not None) and (narg > nargmax):
            raise KWTypeError(
                f"{cls.__name__}() takes at most {nargmax} arguments, "
                f"but {narg} were given")
        # Set options from *a* first
        for j, rawval in enumerate(args):
            self.set_arg(j, rawval)
        # Then set options from *kw*
        for opt, val in kw.items():
            self.set_opt(opt, val)

  # *** DECORATORS ***
    @classmethod
    def parse(cls, func):
        r"""Decorator to validate the args and kwargs of *func*

        :Call:
            >>> func = cls.parse(func)
        """
        # Create wrapper
        @wraps(func)
        def wrapper(*a, **kw):
            # Instantiate the requested class
            opts = cls(*a, **kw)
            # Call original function with parsed options
            return func(*opts.get_args(), **opts.get_kwargs())
        # Return wrapper
        return wrapper

  # *** GET/SET ***
    def get_kwargs(self) -> dict:
        r"""Get validated options, checking for required options

        :Call:
            >>> kw = opts.get_kwargs()
        :Outputs:
            *kw*: :class:`dict`
                Copy of options
        :Raises:
            :class:`KWKeyError` if a required option is missing
        """
        # Loop through required options
        for opt in self.__class__._optlistreq:
            # Check if it's present
            if opt not in self:
                raise KWKeyError(f"missing required option '{opt}'")
        # Output
        return dict(self)

    def get_args(self) -> tuple:
        return tuple(self.argvals)

    def set_opt(self, rawopt: str, rawval):
        r"""Set the value of a single option

        :Call:
            >>> opts.set_opt(rawopt, rawval)
        :Inputs:
            *opts*: :class:`KwargParser`
                Keyword argument parser instance
            *rawopt*: :class:`str`
                Name or alias of option to set
            *rawval*: :class:`object`
                Value of *rawopt*
        """
        # Validate
        opt, val = self.validate_opt(rawopt, rawval)
        # Save value
        self[opt] = val

    def set_arg(self, j: int, rawval):
        # Get parameter name, if applicable
        argname = self.__class__.get_argname(j)
        # Check for named argument
        if argname is not None:
            # Save it as kwarg instead of arg
            self.set_opt(argname, rawval)
            return
        # Save as positional parameter
        self.argvals.append(rawval)

  # *** VALIDATORS ***
    def validate_opt(self, rawopt: str, rawval) -> OptPair:
        r"""Validate a raw option name and value

        :Call:
            >>> opt, val = opts.validate_opt(rawopt, rawval)
        :Inputs:
            *opts*: :class:`KwargParser`
                Keyword argument parser instance
            *rawopt*: :class:`str`
                Name or alias of an option
            *rawval*: :class:`object`
                Value for option
        :Outputs:
            *opt*: :class:`str`
                De-aliased option name (after *optmap* applied)
            *val*: :class:`object`
                Validated value
        """
        # Apply alias
        opt = self.apply_optmap(rawopt)
        # Check option name
        self.check_optname(opt)
        # Check type and value
        self.check_opttype(opt, rawval)
        self.check_optval(opt, rawval)
        # Output
        return OptPair(opt, rawval)

    def apply_optmap(self, rawopt: str) -> str:
        # Get _optmap key
        return self.__class__.getx_cls_key("_optmap", rawopt, rawopt)

    def check_optname(self, opt: str):
        r"""Check validity of an option name

        :Call:
            >>> opts.check_optname(opt)
        :Raises:
            :class:`KWNameError` if *opt* is not recognized
        """
        # Get list of options allowed
        optlist = self.__class__.get_optlist()
        # Check
        if len(optlist) == 0 or opt in optlist:
            return
        # Get closest matches
        matches = difflib.get_close_matches(opt, optlist)
        # Common part of error message
        msg = f"unknown option '{_to_cli(opt)}'"
        # Add suggestions if able
        if len(matches):
            msg += "; nearest matches: %s" % " ".join(
                _to_cli(match) for match in matches[:3])
        raise KWNameError(msg)

    def check_opttype(self, opt: str, val):
        # Get specified type or tuple of types or None
        cls_or_tuple = self.__class__.getx_cls_key("_opttypes", opt)
        # Check if there's a constraint
        if cls_or_tuple is None or isinstance(val, cls_or_tuple):
            return
        # Flag with no value, e.g. "--input" as last arg
        if val is True:
            raise KWTypeError(f"option '{_to_cli(opt)}' requires a value")
        # Generic message
        raise KWTypeError(
            f"option '{_to_cli(opt)}' got type '{type(val).__name__}'")

    def check_optval(self, opt: str, val):
        # Get specified values
        optvals = self.__class__.getx_cls_key("_optvals", opt)
        # No checks if *optvals* is not specified
        if optvals is None:
            return
        # Otherwise check value
        if val not in optvals:
            raise KWValueError(
                f"option '{_to_cli(opt)}' invalid value {repr(val)}; " +
                "options are: " + " | ".join(optvals))

  # *** CLASS METHODS ***
    @classmethod
    def get_argname(cls, j: int):
        # Get argument list (don't combine with subclasses)
        arglist = cls._arglist
        # Check if *j* could be in here
        if j < len(arglist):
            return arglist[j]

    @classmethod
    def get_optlist(cls) -> set:
        r"""Get set of allowed options from *cls* and its bases

        If *optlist* is an empty set, then no constraints are applied to
        option names.

        :Call:
            >>> optlist = cls.get_optlist()
        :Outputs:
            *optlist*: :class:`set`\ [:class:`str`]
                Allowed option names
        """
        # Initialize output
        optlist = set(cls.__dict__.get("_optlist", ()))
        # Loop through bases
        for clsj in cls.__bases__:
            # Only recurse if KwargParser
            if issubclass(clsj, KwargParser):
                optlist.update(clsj.get_optlist())
        # Output
        return optlist

    @classmethod
    def getx_cls_key(cls, attr: str, key: str, vdef=None):
        r"""Access *key* from a :class:`dict` class attribute

        This will look in the bases of *cls* if ``getattr(cls, attr)``
        does not have *key*.

        :Call:
            >>> v = cls.getx_cls_key(attr, key, vdef=None)
        :Inputs:
            *attr*: :class:`str`
                Name of class attribute to search
            *key*: :class:`str`
                Key name in *cls.__dict__[attr]*
            *vdef*: {``None``} | :class:`object`
                Default value to use if not found in class attributes
        """
        # Walk the MRO, subclasses first
        for clsj in cls.__mro__:
            # Get attribute defined directly on *clsj*
            clsdict = clsj.__dict__.get(attr)
            # Check if found
            if isinstance(clsdict, dict) and key in clsdict:
                return clsdict[key]
        # Not found
        return vdef


# Argument read class
class ArgReader(KwargParser):
    r"""Class to parse command-line interface arguments

    :Call:
        >>> parser = ArgReader()
        >>> a, kw = parser.parse(argv=None)
    :Outputs:
        *parser*: :class:`ArgReader`
            Instance of command-line argument parser
    """
  # *** CLASS ATTRIBUTES ***
    # List of instance attributes
    __slots__ = (
        "prog",
        "kwargs_replaced",
    )

    # Options that cannot take values
    _optlist_noval = ()

   # --- __dunder__ ---
    def __init__(self):
        # Initialize attributes
        self.argvals = []
        self.prog = None
        self.kwargs_replaced = []

    def parse(self, argv=None):
        r"""Parse args

        :Call:
            >>> a, kw = parser.parse(argv=None)
        :Inputs:
            *parser*: :class:`ArgReader`
                Command-line argument parser
            *argv*: {``None``} | :class:`list`\ [:class:`str`]
                Optional arguments to parse, else ``sys.argv``
        :Outputs:
            *a*: :class:`list`
                List of positional arguments
            *kw*: :class:`dict`
                Dictionary of options and their values
            *kw["__replaced__"]*: :class:`list`\ [(:class:`str`, *any*)]
                List of any options replaced by later values
        """
        # Process optional args
        if argv is None:
            # Copy *sys.argv*
            argv = list(sys.argv)
        else:
            # Check type of *argv*
            if not isinstance(argv, list):
                raise KWTypeError(
                    "'argv': got type '%s'; expected 'list'"
                    % type(argv).__name__)
            # Check each arg is a string
            for j, arg in enumerate(argv):
                if not isinstance(arg, str):
                    raise KWTypeError(
                        "argument %i: got type '%s'; expected 'str'"
                        % (j, type(arg).__name__))
            # Copy args
            argv = list(argv)
        # (Re)initialize attributes storing parsed arguments
        self.clear()
        self.argvals = []
        self.kwargs_replaced = []
        # Check for command name
        if len(argv) == 0:
            raise KWTypeError(
                "Expected at least one argv entry (program name)")
        # Save command name
        self.prog = argv.pop(0)
        # Loop until args are gone
        while argv:
            # Extract first argument
            arg = argv.pop(0)
            # Parse argument
            prefix, key = self._parse_arg(arg)
            # Check if arg
            if prefix == "":
                # Positional parameter
                self.argvals.append(arg)
                continue
            # Python-style name, "--out-dir" -> "out_dir"
            key = key.replace("-", "_")
            # Check for "--no-mykey"
            if key.startswith("no_"):
                # This is interpreted "mykey=False"
                self._save(key[3:], False)
                continue
            # Check for "noval" options, or if next arg is available
            if self.apply_optmap(key) in self._optlist_noval or not argv:
                # No following arg to check
                self._save(key, True)
                continue
            # Check next arg
            prefix1, _ = self._parse_arg(argv[0])
            # If it is not a key, save the value
            if prefix1 == "":
                # Save value like ``--digits 3``
                self._save(key, argv.pop(0))
            else:
                # Save ``True`` for ``--quiet``
                self._save(key, True)
        # Output current values
        return self.get_args()

    def get_args(self):
        r"""Get full list of args and options from parsed inputs

        :Call:
            >>> a, kw = parser.get_args()
        :Outputs:
            *a*: :class:`list`\ [:class:`str`]
                List of positional parameter argument values
            *kw*: :class:`dict`
                Dictionary of named options and their values
        """
        # Get full dictionary of outputs
        kw = dict(self)
        # Set __replaced__
        kw["__replaced__"] = [tuple(opt) for opt in self.kwargs_replaced]
        # Output
        return list(self.argvals), kw

   # --- Parsers ---
    def _parse_arg(self, arg: str):
        # Check for lone hyphen (STDIN convention) or non-option
        if arg == "-" or not arg.startswith("-"):
            return "", None
        elif arg.startswith("--"):
            # A normal, long-form key
            return "--", arg[2:]
        else:
            # Single-dash option
            return "-", arg[1:]

    def _save(self, rawopt: str, rawval):
        # Validate value
        opt, val = self.validate_opt(rawopt, rawval)
        # Check if a previous key
        if opt in self:
            # Save to "replaced" options
            self.kwargs_replaced.append((opt, self[opt]))
        # Save to current kwargs
        self[opt] = val


# Convert Python option name back to CLI form
def _to_cli(opt: str) -> str:
    return opt.replace("_", "-")
