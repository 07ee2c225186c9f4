r"""
cmdtree option schemas: flags and positional arguments under one shape.

Overview
- Option: a single schema class for both kinds of option, tagged by `kind`:
  • OptionKind.FLAG: selected by an exact spelling (prefix + name + suffix),
    followed by the words it collects, e.g. `--tag a b` or `-t a`.
  • OptionKind.ARGUMENT: positional, filled from the words no flag took.
  Both kinds share cardinality, typing and validation metadata; they differ
  only in surface syntax (arguments have no prefixes or suffixes).

- Factories
  • flag(name, ...): build a flag schema.
  • argument(name, ...): build a positional argument schema.

- Runtime state
  • Every Option also works as a value holder: setvalue() binds raw words and a
    value, getvalue() returns the value cast to the declared DataType.
  • Schemas registered on commands never carry state: parsers bind values on
    clones (clone() returns a fresh, unbound copy).

Metadata (sanitized on construction)
- identity: name, shortname, aliases, shortaliases (no whitespace, no duplicates).
- surface: prefix, shortprefix, prefixaliases, suffix, suffixaliases,
  separator, separatoraliases. A flag prefix/suffix left Unset falls back to
  the parser-level one.
- cardinality: minwords, maxwords (maxwords = max(minwords, maxwords); may be math.inf),
  minlength, maxlength, required.
- typing: type (DataType, or one of str/int/float/bool), default, choices
  (duplicates rejected), pattern (str or compiled regular expression).
- descriptive: description, shortdescription, expected, examples.

Casting
- BOOLEAN: truthiness of the value.
- INTEGER / FLOAT: leading numeric prefix ("12px" -> 12), zero when there is none.
- STRING: the text, or "" when absent.
Casting never raises.
"""
import builtins
import copy
import functools
import math
import operator
import re
from collections.abc import Iterable
from enum import Enum

from .tokens import tokenize, join
from .utils import *


class OptionKind(Enum):
    FLAG = "flag"
    ARGUMENT = "argument"


class DataType(Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"


_builtins = {
    str: DataType.STRING,
    int: DataType.INTEGER,
    float: DataType.FLOAT,
    bool: DataType.BOOLEAN,
}

_integer = re.compile(r"\s*([+-]?\d+)")
_float = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _parseint(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if match := _integer.match(str(value)):
        return int(match.group(1))
    return 0


def _parsefloat(value):
    if isinstance(value, float) and not math.isnan(value):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if match := _float.match(str(value)):
        return float(match.group(1))
    return 0.0


class OptionType(type):
    """
    Metaclass that exposes option metadata as read-only, introspectable fields.

    Responsibilities
    - Publish every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field (containers are returned as copies).
    - Provide stable, readable __repr__/__rich_repr__ implementations.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which fields are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(kind=<OptionKind.FLAG: 'flag'>, name='tag', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _strings(cls, field, object, /, *, spaces=True):
    """
    Internal: validate an iterable of non-empty, unique strings into a tuple.
    """
    if isinstance(object, str) or not isinstance(object, Iterable):
        raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of strings")
    sanitized = []
    for item in object:
        if not isinstance(item, str):
            raise TypeError(f"{cls.__typename__} {field!r} must contain only strings")
        elif not item:
            raise ValueError(f"{cls.__typename__} {field!r} cannot contain empty strings")
        elif not spaces and re.search(r"\s", item):
            raise ValueError(f"{cls.__typename__} {field!r} cannot contain whitespace")
        elif item in sanitized:
            raise ValueError(f"{cls.__typename__} {field!r} cannot contain duplicates")
        sanitized.append(item)
    return tuple(sanitized)


def _sanitize_identity(cls, metadata, /):
    """
    Internal: validate names and aliases.

    - name/shortname: strings without whitespace.
    - an argument needs a name; a flag needs a name or a shortname.
    - aliases/shortaliases: iterables of unique, non-empty, whitespace-free strings.
    """
    if not isinstance(kind := metadata["kind"], OptionKind):
        raise TypeError(f"{cls.__typename__} 'kind' must be an option-kind")

    for field in ("name", "shortname"):
        if not isinstance(value := metadata[field], str):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        elif re.search(r"\s", value):
            raise ValueError(f"{cls.__typename__} {field!r} cannot contain whitespace")

    if kind is OptionKind.ARGUMENT and not metadata["name"]:
        raise ValueError(f"{cls.__typename__} argument must specify a name")
    if kind is OptionKind.FLAG and not (metadata["name"] or metadata["shortname"]):
        raise ValueError(f"{cls.__typename__} flag must specify a name or a shortname")

    metadata["aliases"] = _strings(cls, "aliases", metadata["aliases"], spaces=False)
    metadata["shortaliases"] = _strings(cls, "shortaliases", metadata["shortaliases"], spaces=False)


def _sanitize_surface(cls, metadata, /):
    """
    Internal: validate prefixes, suffixes and key/value separators.

    - prefix/shortprefix/suffix: Unset (inherit the parser-level value) or a string.
    - arguments are positional: they never carry prefixes, suffixes or aliases of them.
    - separator: a string (" " by default, meaning "the next word").
    """
    for field in ("prefix", "shortprefix", "suffix"):
        if not isinstance(value := metadata[field], str | Unset):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        elif isinstance(value, str) and re.search(r"\s", value):
            raise ValueError(f"{cls.__typename__} {field!r} cannot contain whitespace")

    metadata["prefixaliases"] = _strings(cls, "prefixaliases", metadata["prefixaliases"], spaces=False)
    metadata["suffixaliases"] = _strings(cls, "suffixaliases", metadata["suffixaliases"], spaces=False)

    if not isinstance(metadata["separator"], str):
        raise TypeError(f"{cls.__typename__} 'separator' must be a string")
    metadata["separatoraliases"] = _strings(cls, "separatoraliases", metadata["separatoraliases"])

    if metadata["kind"] is OptionKind.ARGUMENT:
        if any((metadata["prefix"], metadata["shortprefix"], metadata["suffix"])) or \
                metadata["prefixaliases"] or metadata["suffixaliases"]:
            raise ValueError(f"{cls.__typename__} argument cannot have prefixes or suffixes")
        metadata["prefix"] = metadata["shortprefix"] = metadata["suffix"] = ""


def _sanitize_bounds(cls, metadata, /):
    """
    Internal: validate cardinality.

    - minwords/minlength: non-negative integers.
    - maxwords/maxlength: non-negative integers or math.inf (unbounded).
    - maxlength cannot be below minlength.
    - maxwords is raised to minwords when configured lower.
    """
    for field in ("minwords", "minlength"):
        if isinstance(value := metadata[field], bool) or not isinstance(value, int):
            raise TypeError(f"{cls.__typename__} {field!r} must be an integer")
        elif value < 0:
            raise ValueError(f"{cls.__typename__} {field!r} cannot be negative")

    for field in ("maxwords", "maxlength"):
        if isinstance(value := metadata[field], bool) or not isinstance(value, int | float):
            raise TypeError(f"{cls.__typename__} {field!r} must be an integer or infinity")
        elif isinstance(value, float) and value != math.inf:
            raise ValueError(f"{cls.__typename__} {field!r} must be an integer or infinity")
        elif value < 0:
            raise ValueError(f"{cls.__typename__} {field!r} cannot be negative")

    if metadata["maxlength"] < metadata["minlength"]:
        raise ValueError(f"{cls.__typename__} 'maxlength' cannot be lower than 'minlength'")

    metadata["maxwords"] = max(metadata["minwords"], metadata["maxwords"])
    metadata["required"] = bool(metadata["required"])


def _sanitize_typing(cls, metadata, /):
    """
    Internal: validate the declared data type, choices and pattern.

    - type: DataType, its value ("integer"), or one of str/int/float/bool.
    - choices: iterable without duplicates, normalized to a tuple.
    - pattern: None, a string (compiled here) or a compiled regular expression.
    """
    datatype = metadata["type"]
    try:
        metadata["type"] = _builtins[datatype] if isinstance(datatype, builtins.type) else DataType(datatype)
    except (KeyError, ValueError):
        raise ValueError(f"{cls.__typename__} 'type' must be a data-type") from None

    if isinstance(choices := metadata["choices"], str) or not isinstance(choices, Iterable):
        raise TypeError(f"{cls.__typename__} 'choices' must be iterable")
    sanitized = []
    for choice in choices:
        if choice in sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        sanitized.append(choice)
    metadata["choices"] = tuple(sanitized)

    if isinstance(pattern := metadata["pattern"], str):
        try:
            metadata["pattern"] = re.compile(pattern)
        except re.error as exception:
            raise ValueError(f"{cls.__typename__} 'pattern' is not a valid regular expression") from exception
    elif pattern is not None and not isinstance(pattern, re.Pattern):
        raise TypeError(f"{cls.__typename__} 'pattern' must be a string or a compiled regular expression")


def _sanitize_descriptions(cls, metadata, /):
    for field in ("description", "shortdescription", "expected"):
        if not isinstance(metadata[field], str):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    metadata["examples"] = _strings(cls, "examples", metadata["examples"])


class Option(metaclass=OptionType):
    """
    Schema and value holder for one flag or positional argument.

    The names listed in __introspectable__ are exposed as read-only attributes
    mirroring the sanitized metadata. Runtime state (raw words and value) is
    only changed through setvalue(); clone() yields an unbound copy.
    """

    __introspectable__ = (
        "kind",
        "name",
        "shortname",
        "aliases",
        "shortaliases",
        "prefix",
        "shortprefix",
        "prefixaliases",
        "suffix",
        "suffixaliases",
        "separator",
        "separatoraliases",
        "required",
        "minwords",
        "maxwords",
        "minlength",
        "maxlength",
        "default",
        "type",
        "choices",
        "pattern",
        "description",
        "shortdescription",
        "expected",
        "examples",
    )

    __displayable__ = (
        "kind",
        "name",
        "shortname",
        "type",
        "required",
        "minwords",
        "maxwords",
        "default",
        "raw",
    )

    def __init__(
            self,
            name="",
            /,
            kind=OptionKind.ARGUMENT,
            shortname="",
            aliases=(),
            shortaliases=(),
            *,
            prefix=Unset,
            shortprefix=Unset,
            prefixaliases=(),
            suffix=Unset,
            suffixaliases=(),
            separator=" ",
            separatoraliases=(),
            required=False,
            minwords=0,
            maxwords=0,
            minlength=0,
            maxlength=math.inf,
            default="",
            type=DataType.STRING,
            choices=(),
            pattern=None,
            description="",
            shortdescription="",
            expected="",
            examples=(),
    ):
        """
        Construct an option schema.

        Parameters
        - name: str
          Full name (e.g. "tag" for `--tag`). Required for arguments.
        - kind: OptionKind
          FLAG or ARGUMENT (prefer the flag()/argument() factories).
        - shortname: str
          Short name (e.g. "t" for `-t`), flags only in practice.
        - aliases / shortaliases: Iterable[str]
          Alternative full/short names.
        - prefix / shortprefix / suffix: Unset | str
          Surface syntax; Unset falls back to the parser-level value.
        - prefixaliases / suffixaliases: Iterable[str]
          Alternative prefixes (full names) and suffixes.
        - separator / separatoraliases: str / Iterable[str]
          Key/value separator; anything but whitespace lets `--name=value`
          be written as a single token.
        - required: bool
        - minwords / maxwords: int (maxwords may be math.inf)
          Word-count bounds; maxwords is raised to minwords when lower.
        - minlength / maxlength: int (maxlength may be math.inf)
          Character-length bounds on the assembled value.
        - default: Any
        - type: DataType | type | str
        - choices: Iterable
          Allowed values; when non-empty, supersedes the length bounds.
        - pattern: None | str | re.Pattern
          Searched in the raw captured text.
        - description / shortdescription / expected / examples:
          Descriptive metadata for help renderers.

        Raises
        - TypeError / ValueError on malformed metadata.
        """
        metadata = {
            "kind": kind,
            "name": name,
            "shortname": shortname,
            "aliases": aliases,
            "shortaliases": shortaliases,
            "prefix": prefix,
            "shortprefix": shortprefix,
            "prefixaliases": prefixaliases,
            "suffix": suffix,
            "suffixaliases": suffixaliases,
            "separator": separator,
            "separatoraliases": separatoraliases,
            "required": required,
            "minwords": minwords,
            "maxwords": maxwords,
            "minlength": minlength,
            "maxlength": maxlength,
            "default": default,
            "type": type,
            "choices": choices,
            "pattern": pattern,
            "description": description,
            "shortdescription": shortdescription,
            "expected": expected,
            "examples": examples,
        }
        cls = builtins.type(self)
        _sanitize_identity(cls, metadata)
        _sanitize_surface(cls, metadata)
        _sanitize_bounds(cls, metadata)
        _sanitize_typing(cls, metadata)
        _sanitize_descriptions(cls, metadata)

        for field, object in metadata.items():
            setattr(self, "_" + field, object)

        self._raw = []
        self._value = None

    @property
    def isflag(self):
        return self._kind is OptionKind.FLAG

    @property
    def length(self):
        """
        Character length of the current value (0 when unbound).
        """
        return len(str(self._value)) if self._value is not None else 0

    @property
    def words(self):
        """
        Number of raw words captured for the current value.
        """
        return len(self._raw)

    @property
    def raw(self):
        return list(self._raw)

    @property
    def bound(self):
        return self._value is not None

    def keys(self):
        """
        Iterate over the raw captured words.
        """
        yield from self._raw

    def setvalue(self, value, /):
        """
        Bind a value to this option.

        - None: clear words and value.
        - str: tokenized into raw words; the value is the unquoted text.
        - bool: a state without words (flag presence).
        - int/float: the value as-is; its text is the single raw word.
        - Iterable[str]: bound word for word; the value is the words joined by a space.
        """
        if value is None:
            self._raw = []
            self._value = None
        elif isinstance(value, str):
            self._raw = tokenize(value)
            self._value = " ".join(self._raw)
        elif isinstance(value, bool):
            self._raw = []
            self._value = value
        elif isinstance(value, int | float):
            self._raw = [str(value)]
            self._value = value
        elif isinstance(value, Iterable):
            words = list(value)
            if not all(isinstance(word, str) for word in words):
                raise TypeError(f"{builtins.type(self).__typename__} words must be strings")
            self._raw = words
            self._value = " ".join(words)
        else:
            raise TypeError(f"{builtins.type(self).__typename__} value must be a string, a number, a boolean or words")

    def _cast(self, value):
        match self._type:
            case DataType.BOOLEAN:
                return bool(value)
            case DataType.INTEGER:
                return _parseint(value)
            case DataType.FLOAT:
                return _parsefloat(value)
        return "" if value is None else str(value)

    def getvalue(self):
        """
        Return the current value cast to the declared type, or None when unbound.
        """
        return self._cast(self._value) if self._value is not None else None

    def getdefault(self):
        return self._cast(self._default)

    def getvalueordefault(self):
        return value if (value := self.getvalue()) is not None else self.getdefault()

    def spellings(self, prefix="", shortprefix="", suffix="", /, *, casesensitive=True):
        """
        Return every exact token spelling that selects this flag.

        Parser-level prefix/shortprefix/suffix are used only where the flag
        leaves its own Unset. Full names combine with the prefix and its
        aliases, short names with the short prefix; both with the suffix and
        its aliases. Arguments have no spellings.
        """
        if not self.isflag:
            return frozenset()

        suffixes = (coalesce(self._suffix, suffix), *self._suffixaliases)
        fulls = [
            start + name
            for start in (coalesce(self._prefix, prefix), *self._prefixaliases)
            for name in (self._name, *self._aliases) if name
        ]
        shorts = [
            coalesce(self._shortprefix, shortprefix) + name
            for name in (self._shortname, *self._shortaliases) if name
        ]
        spellings = {stem + end for stem in fulls + shorts for end in suffixes}
        return frozenset(spellings if casesensitive else map(str.casefold, spellings))

    def clone(self):
        """
        Return a copy of this schema with empty runtime state.
        """
        return copy.replace(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        metadata = {field: getattr(self, "_" + field) for field in builtins.type(self).__introspectable__}
        metadata |= overrides
        return builtins.type(self)(metadata.pop("name"), **metadata)

    def __str__(self):
        return join(self._raw)


def flag(name="", /, shortname="", aliases=(), shortaliases=(), **metadata):
    """
    Build a flag schema, e.g. flag("tag", "t", maxwords=3) for `--tag`/`-t`.
    """
    return Option(name, OptionKind.FLAG, shortname, aliases, shortaliases, **metadata)


def argument(name, /, **metadata):
    """
    Build a positional argument schema, e.g. argument("target", required=True, minwords=1).
    """
    return Option(name, OptionKind.ARGUMENT, **metadata)


__all__ = (
    "Option",
    "OptionKind",
    "DataType",
    "flag",
    "argument",
)

# The metaclass is an implementation detail of Option.
del OptionType
