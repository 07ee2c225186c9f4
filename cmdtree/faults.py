"""
cmdtree faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every parse failure.
  Codes are grouped by pipeline stage to keep copy consistent and make
  logs/searches predictable.
- ParseException: base type that carries a message plus context options and
  knows how to render itself in a friendly, lowercased, actionable way.
- ParseExit: exception group used to surface every fault collected by a
  permissive (non-strict) parse at once.
- trigger(): central entry point to surface a fault (raise, or print in shell mode).
- report(): route a fault to strict (raise) or permissive (collect) mode.
- getdoc(): optional description lookup for a code from the host application.

Taxonomy (pipeline stage → exception)
- line:       InvalidLineFormatError
- routing:    UnknownCommandError, UnknownSubcommandError, MissingCommandError
- flags:      FlagArgumentShortfallError
- validation: OptionLengthError, OptionWordCountError, OptionValueRejectedError
- arguments:  ExcessArgumentsError

UX goals
- Position-first messages where a token is involved (“at third position”).
- Short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- Parsers build faults with context (title, code, hint, token, option, ...)
  and either raise them (strict mode) or collect them on the result.
- Interactive hosts call trigger(fault, shell=True) to render instead of raise.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by pipeline stage)
    - line (2110x)
      • INVALID_LINE_FORMAT
    - routing (2111x)
      • UNKNOWN_COMMAND, UNKNOWN_SUBCOMMAND, MISSING_COMMAND
    - flags (2112x)
      • FLAG_ARGUMENT_SHORTFALL
    - bounds (2113x)
      • VALUE_TOO_SHORT, VALUE_TOO_LONG, NOT_ENOUGH_WORDS, TOO_MANY_WORDS
    - values (2114x)
      • INVALID_CHOICE, PATTERN_MISMATCH
    - arguments (2115x)
      • EXCESS_ARGUMENTS
    """
    # --- line errors ---
    INVALID_LINE_FORMAT         = 21101

    # --- routing errors ---
    UNKNOWN_COMMAND             = 21111
    UNKNOWN_SUBCOMMAND          = 21112
    MISSING_COMMAND             = 21113

    # --- flag errors ---
    FLAG_ARGUMENT_SHORTFALL     = 21121

    # --- bound errors ---
    VALUE_TOO_SHORT             = 21131
    VALUE_TOO_LONG              = 21132
    NOT_ENOUGH_WORDS            = 21133
    TOO_MANY_WORDS              = 21134

    # --- value errors ---
    INVALID_CHOICE              = 21141
    PATTERN_MISMATCH            = 21142

    # --- argument errors ---
    EXCESS_ARGUMENTS            = 21151

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styler(options, styles):
    def styler(style):
        return styles[style] if options.get("colorful", True) else ""
    return styler


def _texter(options):
    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not options.get("colorful", True):
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)
    return text


class ParseException(Exception):
    """
    base type of every parse fault.

    the message is a short lowercase sentence; everything else travels in
    read-only options: title, code, hint and any context the reporter may
    want to show (token, position, option, command, leftover, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        styler = _styler(self.options, styles)
        text = _texter(self.options)

        prog = text(self.options.get("prog", getattr(main, "__prog__", "cmdtree")), styler("prog-name"))
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "?"

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code, styler("code")),
            " | ",
            text(self.options.get("title", type(self).__name__).title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint", ""), styler("hint")))

        if self.options.get("fancy", False):
            try:
                width = int((console.width - 4) * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(message, hint), title=header, title_align="left", width=width)

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidLineFormatError(ParseException): ...
class UnknownCommandError(ParseException): ...
class UnknownSubcommandError(UnknownCommandError): ...
class MissingCommandError(ParseException): ...
class FlagArgumentShortfallError(ParseException): ...


class OptionError(ParseException):
    """
    fault bound to a single option; the offending clone travels as options["option"].
    """

    @property
    def option(self):
        return self.options.get("option")


class OptionLengthError(OptionError): ...
class OptionWordCountError(OptionError): ...
class OptionValueRejectedError(OptionError): ...
class ExcessArgumentsError(ParseException): ...


class ParseExit(ExceptionGroup):
    """
    every fault collected by a permissive parse, raised as one group.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad parse", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad parse", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title
        } | getattr(main, "__styles__", {}))

        styler = _styler(self.options, styles)
        text = _texter(self.options)

        prog = text(self.options.get("prog", getattr(main, "__prog__", "cmdtree")), styler("prog-name"))

        header = Text.assemble("[ ", prog, " — ", text(self.message.title(), styler("title")), " ]")

        renders = []

        for exception in self.exceptions:
            renders.append(copy.replace(exception, **dict(self.options) | {"ratio": 2/3}))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich stderr console; otherwise, the fault is raised.

    typical options
    - shell, fancy, colorful, prog, and any other context the reporter may want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def report(fault, faults=None, /):
    """
    hand a fault to the active error mode.

    - faults is None (strict mode): the fault is triggered, i.e. raised.
    - faults is a list (permissive mode): the fault is appended and parsing
      goes on; the caller drops whatever the fault was about.
    """
    if faults is None:
        trigger(fault)
    else:
        faults.append(fault)


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ParseException",
    "InvalidLineFormatError",
    "UnknownCommandError",
    "UnknownSubcommandError",
    "MissingCommandError",
    "FlagArgumentShortfallError",
    "OptionError",
    "OptionLengthError",
    "OptionWordCountError",
    "OptionValueRejectedError",
    "ExcessArgumentsError",
    "ParseExit",
    "FaultCode",
    "trigger",
    "report",
    "getdoc",
)
