"""
cmdtree parse results.

A ParseResult is what CommandParser.parse() returns for one line:
- raw: the line, verbatim.
- path: the resolved CommandPath (empty when the line is not a command).
- options: bound option clones of the last command (flags, then arguments).
- faults: faults collected in permissive mode (always empty in strict mode).
- leftover: tokens that no command or option took.

valid is true when a command was resolved (`name != "" and levels > 0`); it
does not look at faults, use finalize() for that.
"""
from .commands import CommandPath
from .faults import ParseExit, trigger
from .utils import coalesce


class ParseResult:
    """
    Outcome of parsing one line.
    """

    def __init__(
            self,
            raw="",
            /,
            path=None,
            options=(),
            *,
            faults=None,
            leftover=(),
            prefix="",
            flagprefix="--",
            shortflagprefix="-",
            flagsuffix="",
    ):
        if not isinstance(raw, str):
            raise TypeError("parse-result 'raw' must be a string")
        if path is None:
            path = CommandPath()
        elif not isinstance(path, CommandPath):
            raise TypeError("parse-result 'path' must be a command-path")

        self._raw = raw
        self._path = path
        self._options = tuple(options)
        self._faults = tuple(faults or ())
        self._leftover = tuple(leftover)
        self._prefix = prefix
        self._flagprefix = flagprefix
        self._shortflagprefix = shortflagprefix
        self._flagsuffix = flagsuffix

    @property
    def raw(self):
        return self._raw

    @property
    def path(self):
        return self._path

    @property
    def options(self):
        return list(self._options)

    @property
    def faults(self):
        return self._faults

    @property
    def leftover(self):
        return self._leftover

    @property
    def prefix(self):
        return self._prefix

    @property
    def flagprefix(self):
        return self._flagprefix

    @property
    def shortflagprefix(self):
        return self._shortflagprefix

    @property
    def flagsuffix(self):
        return self._flagsuffix

    @property
    def name(self):
        """
        Name of the root command ("" when none); path.last names the command
        whose options were bound.
        """
        return self._path.first.name if self._path.levels else ""

    @property
    def valid(self):
        return self.name != "" and self._path.levels > 0

    @property
    def flags(self):
        return [option for option in self._options if option.isflag]

    @property
    def arguments(self):
        return [option for option in self._options if not option.isflag]

    @property
    def callback(self):
        return self._path.last.callback if self._path.levels else None

    def get(self, name, default=None, /):
        """
        Return the value (or cast default) of a bound option found by name,
        short name or alias; default when no such option was bound.
        """
        for option in self._options:
            if name in (option.name, option.shortname, *option.aliases, *option.shortaliases) and name:
                return option.getvalueordefault()
        return default

    def finalize(self):
        """
        Raise the collected faults as one ParseExit group, or return self.
        """
        if self._faults:
            trigger(ParseExit(self._faults))
        return self

    def __bool__(self):
        return self.valid

    def __str__(self):
        if not self.valid:
            return ""
        parts = [self._prefix + str(self._path)]
        parts.extend(text for option in self.arguments if (text := str(option)))
        for option in self.flags:
            if option.name:
                spelling = coalesce(option.prefix, self._flagprefix) + option.name
            else:
                spelling = coalesce(option.shortprefix, self._shortflagprefix) + option.shortname
            parts.append(spelling + coalesce(option.suffix, self._flagsuffix))
            if text := str(option):
                parts.append(text)
        return " ".join(parts)

    def __repr__(self):
        return f"parse-result({self._raw!r}, valid={self.valid!r})"

    def __rich_repr__(self):
        yield "raw", self._raw
        yield "path", str(self._path)
        yield "options", list(self._options)
        if self._faults:
            yield "faults", self._faults
        if self._leftover:
            yield "leftover", self._leftover


__all__ = (
    "ParseResult",
)
