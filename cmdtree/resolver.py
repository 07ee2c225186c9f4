"""
cmdtree command tree resolver.

resolve() walks a token list against a collection of registered commands and
returns the CommandPath of the commands it matched, consuming the matched
tokens from the list.

Algorithm
1. Stop when there are no candidates left (the last match has no subcommands).
2. Take the first token and strip the command prefix when present. When
   `prefixed` is set, the very first token must carry the prefix, otherwise
   the line is not a command and the path stays empty.
3. Look the token up by name or alias (case-insensitive unless configured).
4. Found: clone the command, append it to the path, consume the token and
   continue with its subcommands.
5. Not found (or no token at all) where a command is required:
   UnknownCommandError / UnknownSubcommandError / MissingCommandError.
   A command is required at the root and below any command with subcommands,
   unless that command declares an option able to take the token: a
   positional argument, or a flag the token spells. Only then is the token
   left for the option parser.

Every step consumes one token before descending, so the walk is bounded by the
number of tokens.
"""
import difflib
from collections.abc import Iterable, Mapping, MutableSequence

from .commands import Command, CommandPath
from .faults import *
from .utils import ordinal


def hasprefix(token, prefix, /):
    """
    Return whether a token starts with the command prefix.

    The prefix must be followed by something that does not repeat it, so with
    "!" as prefix "!user" is a command and "!!user" or "!" are not. An empty
    prefix accepts every non-empty token.
    """
    if not token:
        return False
    if not prefix:
        return True
    return token.startswith(prefix) and len(token) > len(prefix) and not token[len(prefix):].startswith(prefix)


def stripprefix(token, prefix, /):
    return token[len(prefix):] if prefix and hasprefix(token, prefix) else token


def candidates(commands, /):
    """
    Normalize a command collection into a name -> Command mapping.
    """
    if isinstance(commands, Mapping):
        commands = commands.values()
    elif isinstance(commands, str) or not isinstance(commands, Iterable):
        raise TypeError("commands must be a mapping or an iterable of commands")
    normalized = {}
    for command in commands:
        if not isinstance(command, Command):
            raise TypeError("commands must contain only commands")
        if normalized.setdefault(command.name, command) is not command:
            raise ValueError(f"command name {command.name!r} is already in use")
    return normalized


def _suggest(token, commands, casesensitive):
    names = [name for command in commands.values() for name in (command.name, *command.aliases)]
    if not casesensitive:
        token = token.casefold()
        names = [name.casefold() for name in names]
    return difflib.get_close_matches(token, names, 3)


def _missing(parent, position, faults):
    route = parent.name if parent else "a command"
    report(MissingCommandError(
        "no %s was given at %s position" % ("subcommand" if parent else "command", ordinal(position)),
        title="missing %s" % ("subcommand" if parent else "command"),
        code=FaultCode.MISSING_COMMAND,
        hint="add a subcommand after %r" % route if parent else "type a command name after the prefix",
        position=position,
        command=parent,
    ), faults)


def _unknown(token, parent, commands, position, casesensitive, faults):
    suggestions = _suggest(token, commands, casesensitive)
    try:
        hint = "did you mean %r?" % suggestions[0]
    except IndexError:
        hint = "choose one of: %s" % ", ".join(sorted(commands))
    kind, fault, code = (
        ("subcommand", UnknownSubcommandError, FaultCode.UNKNOWN_SUBCOMMAND) if parent else
        ("command", UnknownCommandError, FaultCode.UNKNOWN_COMMAND)
    )
    report(fault(
        "unknown %s %r at %s position" % (kind, token, ordinal(position)),
        title="unknown %s" % kind,
        code=code,
        hint=hint,
        token=token,
        position=position,
        suggestions=suggestions,
        command=parent,
    ), faults)


def _takes(parent, token, spelling, casesensitive):
    """
    Return whether the parent's own options can take the next token.

    Without a token, only a positional argument makes the subcommand optional.
    """
    if parent.arguments:
        return True
    if token is None:
        return False
    if not casesensitive:
        token = token.casefold()
    for option in parent.flags:
        separators = [
            separator if casesensitive else separator.casefold()
            for separator in (option.separator, *option.separatoraliases)
            if separator.strip()
        ]
        for start in option.spellings(*spelling, casesensitive=casesensitive):
            if token == start or any(token.startswith(start + separator) for separator in separators):
                return True
    return False


def resolve(
    tokens,
    commands,
    /,
    *,
    prefix="",
    prefixed=False,
    fullprefix="--",
    shortprefix="-",
    suffix="",
    casesensitive=False,
    faults=None,
    position=1,
):
    """
    Resolve the leading tokens into a command path.

    Parameters
    - tokens: MutableSequence[str]
      Working token list; matched command tokens are removed from it.
    - commands: Mapping[str, Command] | Iterable[Command]
      Root commands.
    - prefix: str
      Command prefix, stripped from tokens that carry it.
    - prefixed: bool
      Require the prefix on the first token.
    - fullprefix, shortprefix, suffix: str
      Parser-level flag spelling, used to tell a flag from a subcommand.
    - casesensitive: bool
    - faults: None | list
      None raises faults (strict); a list collects them (permissive).
    - position: int
      1-based position of tokens[0] in the line, used in messages.

    Returns
    - CommandPath: resolved clones, root first (possibly empty).
    """
    if not isinstance(tokens, MutableSequence):
        raise TypeError("resolve() first argument must be a mutable sequence of tokens")

    path = CommandPath()

    if prefixed and tokens and not hasprefix(tokens[0], prefix):
        return path

    spelling = (fullprefix, shortprefix, suffix)
    parent = None
    level = candidates(commands)

    while level:
        # a group without a callback always needs one of its subcommands
        required = parent is None or parent.callback is None

        if not tokens:
            if required or not _takes(parent, None, spelling, casesensitive):
                _missing(parent, position, faults)
            break

        token = stripprefix(tokens[0], prefix)

        for command in level.values():
            if command.matches(token, casesensitive=casesensitive):
                break
        else:
            if required or not _takes(parent, tokens[0], spelling, casesensitive):
                _unknown(token, parent, level, position, casesensitive, faults)
            break

        path.add(parent := command.clone())
        del tokens[0]
        position += 1
        level = command.subcommands

    return path


__all__ = (
    "resolve",
    "hasprefix",
    "stripprefix",
    "candidates",
)
