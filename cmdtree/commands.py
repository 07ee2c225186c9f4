"""
cmdtree command layer: command nodes, subcommand trees and resolved paths.

What this module provides
- Command: a named schema node holding
  • its aliases and description,
  • an ordered list of declared options (flags and positional arguments
    together, told apart by Option.kind),
  • an opaque callback handle (never invoked by the parser),
  • a keyed collection of child commands (subcommands), keyed by child name.

- command(...): create a Command from a callable, or a decorator that does so.
  Command.command(...) does the same and attaches the result as a subcommand.

- CommandPath: the ordered sequence of resolved commands for one parse,
  from the root command (first) to the deepest matched subcommand (last).

Quick start
    from cmdtree import command, flag, argument

    @command(options=[argument("name", required=True, minwords=1)])
    def user(*options): ...

    @user.command(options=[flag("admin", "a")])
    def add(*options): ...

Design notes
- Registered commands are never mutated by parsing: the resolver clones each
  matched node (clone() clones the options and shares the subcommand registry
  read-only), and option values are only bound on those clones.
- Fields are exposed as read-only properties returning fresh containers.
"""
import builtins
import copy
import functools
import inspect
import operator
import re
from collections.abc import Iterable, Mapping

from .options import Option
from .utils import *


class CommandType(type):
    """
    Metaclass that exposes command metadata as read-only, introspectable fields.

    Responsibilities
    - Publish every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field.
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate command identity and descriptions.

    - name: non-empty string without whitespace.
    - aliases: unique, non-empty strings without whitespace (and not the name itself).
    - description: string; defaults to the first line of the callback docstring.
    - callback: None or a callable.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name or re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a non-empty string without whitespace")

    if isinstance(aliases := metadata["aliases"], str) or not isinstance(aliases, Iterable):
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
    sanitized = []
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must contain only strings")
        elif not alias or re.search(r"\s", alias):
            raise ValueError(f"{cls.__typename__} 'aliases' must be non-empty strings without whitespace")
        elif alias in sanitized or alias == name:
            raise ValueError(f"{cls.__typename__} 'aliases' cannot contain duplicates")
        sanitized.append(alias)
    metadata["aliases"] = tuple(sanitized)

    if (callback := metadata["callback"]) is not None and not callable(callback):
        raise TypeError(f"{cls.__typename__} 'callback' must be callable")

    if not isinstance(description := metadata["description"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    if description is Unset:
        description = (inspect.getdoc(callback) or "").strip().partition("\n")[0] if callback else ""
    metadata["description"] = description


def _sanitize_options(cls, metadata, /):
    """
    Internal: validate declared options, keeping declaration order.

    - every item must be an Option.
    - flag spellings (names, short names and aliases) must be unique among flags.
    - argument names must be unique among arguments.
    """
    if isinstance(options := metadata["options"], str) or not isinstance(options, Iterable):
        raise TypeError(f"{cls.__typename__} 'options' must be an iterable of options")

    sanitized = []
    flags = set()
    arguments = set()
    for option in options:
        if not isinstance(option, Option):
            raise TypeError(f"{cls.__typename__} 'options' must contain only options")
        if option.isflag:
            names = {option.name, *option.aliases} - {""}
            shorts = {option.shortname, *option.shortaliases} - {""}
            if {("full", name) for name in names} & flags or {("short", name) for name in shorts} & flags:
                raise ValueError(f"{cls.__typename__} flag {option.name or option.shortname!r} is declared twice")
            flags |= {("full", name) for name in names} | {("short", name) for name in shorts}
        else:
            if option.name in arguments:
                raise ValueError(f"{cls.__typename__} argument {option.name!r} is declared twice")
            arguments.add(option.name)
        sanitized.append(option)
    metadata["options"] = tuple(sanitized)


class Command(metaclass=CommandType):
    """
    A registered command node.

    Lifecycle
    - Built once by the host (directly, or through command()/Command.command()).
    - Read by parsers; cloned by the resolver whenever it lands on this node.

    Notes
    - subcommands are keyed by child name; aliases are matched by the resolver.
    - options keep declaration order, which drives positional distribution.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "description",
        "options",
        "callback",
        "subcommands",
    )

    __displayable__ = (
        "name",
        "aliases",
        "options",
        "subcommands",
    )

    def __init__(
            self,
            name,
            /,
            callback=None,
            aliases=(),
            options=(),
            subcommands=(),
            *,
            description=Unset,
    ):
        """
        Construct a command node.

        Parameters
        - name: str
          Command name, matched against the token after the command prefix.
        - callback: None | Callable
          Opaque execute handle, carried through parse results untouched.
        - aliases: Iterable[str]
        - options: Iterable[Option]
          Flags and positional arguments, in declaration order.
        - subcommands: Iterable[Command] | Mapping[str, Command]
        - description: str
          Defaults to the first docstring line of the callback.

        Raises
        - TypeError / ValueError on malformed metadata or duplicate subcommands.
        """
        metadata = {
            "name": name,
            "callback": callback,
            "aliases": aliases,
            "options": options,
            "description": description,
        }
        cls = builtins.type(self)
        _sanitize_metadata(cls, metadata)
        _sanitize_options(cls, metadata)

        for field, object in metadata.items():
            setattr(self, "_" + field, object)

        self._subcommands = {}

        if isinstance(subcommands, Mapping):
            subcommands = subcommands.values()
        elif isinstance(subcommands, str) or not isinstance(subcommands, Iterable):
            raise TypeError(f"{cls.__typename__} 'subcommands' must be an iterable of commands")
        for child in subcommands:
            self.add(child)

    @property
    def flags(self):
        return [option for option in self._options if option.isflag]

    @property
    def arguments(self):
        return [option for option in self._options if not option.isflag]

    def matches(self, token, /, *, casesensitive=False):
        """
        Return whether a token names this command or one of its aliases.
        """
        if casesensitive:
            return token == self._name or token in self._aliases
        token = token.casefold()
        return token == self._name.casefold() or token in map(str.casefold, self._aliases)

    def add(self, child, /):
        """
        Register a subcommand under its name.

        Raises
        - TypeError: when child is not a Command.
        - ValueError: when the name is already taken by another subcommand.
        """
        if not isinstance(child, Command):
            raise TypeError(f"{type(self).__typename__} subcommands must be commands")
        if self._subcommands.setdefault(child.name, child) is not child:
            raise ValueError(f"{type(self).__typename__} subcommand name {child.name!r} is already in use")
        return child

    def command(self, source=Unset, /, **kwargs):
        """
        Create a subcommand from a callable (or return a decorator) and attach it.

        Usage
            @root.command(options=[...])
            def child(*options): ...
        """
        @rename("command")
        def wrapper(source, /):
            return self.add(command(source, **kwargs))

        return wrapper(source) if source is not Unset else wrapper

    def clone(self):
        """
        Return a copy with cloned options and the same (shared) subcommands.
        """
        return copy.replace(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        metadata = {
            "callback": self._callback,
            "aliases": self._aliases,
            "options": [option.clone() for option in self._options],
            "subcommands": self._subcommands.values(),
            "description": self._description,
        } | overrides
        return type(self)(metadata.pop("name", self._name), **metadata)

    def __str__(self):
        return self._name


class CommandPath:
    """
    Ordered commands resolved by one parse, root first.

    - first: the root command (None when empty).
    - last: the deepest command, whose options are parsed (None when empty).
    - levels: number of resolved commands.
    """

    def __init__(self, commands=(), /):
        self._commands = []
        for command in commands:
            self.add(command)

    @property
    def first(self):
        return self._commands[0] if self._commands else None

    @property
    def last(self):
        return self._commands[-1] if self._commands else None

    @property
    def levels(self):
        return len(self._commands)

    def add(self, command, /):
        if not isinstance(command, Command):
            raise TypeError("command path can only hold commands")
        self._commands.append(command)

    def remove(self):
        """
        Remove and return the deepest command (None when empty).
        """
        return self._commands.pop() if self._commands else None

    def __iter__(self):
        return iter(self._commands)

    def __len__(self):
        return len(self._commands)

    def __getitem__(self, index):
        return self._commands[index]

    def __str__(self):
        return " ".join(map(str, self._commands))

    def __repr__(self):
        return f"command-path({str(self)!r})"

    def __rich_repr__(self):
        yield from self._commands


def command(source=Unset, /, **kwargs):
    """
    Create a Command from a callable, or return a decorator to build it later.

    Invocation modes
    - Direct:     cmd = command(func, name="x", options=[...])
    - Decorator:  @command(options=[...])
                  def x(*options): ...

    The command name defaults to the callable's __name__ and the description
    to the first line of its docstring.
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        options = dict(kwargs)
        return Command(options.pop("name", source.__name__), source, **options)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "CommandPath",
    "command",
)

# The metaclass is an implementation detail of Command.
del CommandType
