"""
cmdtree parsers: word distribution over options, and the line orchestrator.

OptionParser
- Binds the tokens that follow a command path to the flags and positional
  arguments declared on the deepest command, in two passes:
  • flags first: every token that spells a declared flag opens that flag,
    which then takes the following tokens up to its maxwords, stopping at the
    next flag and never starving required positional arguments (reservation);
  • arguments second: the tokens no flag took are handed out in declaration
    order, minwords to every argument but the last, which drains up to its
    maxwords.
- Every bound option is validated (length, word count, choices, pattern) and
  the tokens nobody took are reported as excess unless overflow is allowed.

CommandParser
- Checks line-level preconditions (no leading whitespace, command prefix),
  tokenizes, resolves the command path and runs an OptionParser over the
  remaining tokens, assembling a ParseResult.

Error mode
- strict=True raises the first fault.
- strict=False collects every fault on the result, omits the offending option
  and keeps going (see ParseResult.faults / ParseResult.finalize()).
"""
import math
from collections.abc import Iterable

from .commands import Command, command
from .faults import *
from .options import DataType, Option
from .resolver import candidates, hasprefix, resolve
from .results import ParseResult
from .tokens import tokenize
from .utils import *


def _sanitize_config(cls, config, /):
    """
    Internal: validate parser configuration keywords.

    - prefixes and suffixes: strings without whitespace.
    - casesensitive/strict/overflow: booleans.
    """
    for field in ("prefix", "fullprefix", "shortprefix", "suffix"):
        if field not in config:
            continue
        if not isinstance(value := config[field], str):
            raise TypeError(f"{cls.__name__.lower()} {field!r} must be a string")
        elif any(character.isspace() for character in value):
            raise ValueError(f"{cls.__name__.lower()} {field!r} cannot contain whitespace")

    for field in ("casesensitive", "strict", "overflow"):
        if not isinstance(config[field], bool):
            raise TypeError(f"{cls.__name__.lower()} {field!r} must be a boolean")


def _take(pool, count):
    """
    Remove and return up to count leading words of pool (count may be math.inf).
    """
    taken = pool[:] if count == math.inf else pool[:count]
    del pool[:len(taken)]
    return taken


def _label(option):
    return option.name or option.shortname


class OptionParser:
    """
    Distribute tokens over the options of one command.

    Configuration
    - fullprefix / shortprefix / suffix: flag spelling used when a flag leaves
      its own prefix/suffix Unset (e.g. "--" + "tag", "-" + "t").
    - casesensitive: match flag spellings exactly; otherwise casefolded.
      Values are never case-normalized.
    - strict: raise faults (True) or drop the offending option (False).
    - overflow: tolerate tokens that no option takes.
    """

    def __init__(
            self,
            options=(),
            /,
            *,
            fullprefix="--",
            shortprefix="-",
            suffix="",
            casesensitive=False,
            strict=True,
            overflow=False,
    ):
        config = {
            "fullprefix": fullprefix,
            "shortprefix": shortprefix,
            "suffix": suffix,
            "casesensitive": casesensitive,
            "strict": strict,
            "overflow": overflow,
        }
        _sanitize_config(type(self), config)

        if isinstance(options, str) or not isinstance(options, Iterable):
            raise TypeError("optionparser 'options' must be an iterable of options")
        options = tuple(options)
        if not all(isinstance(option, Option) for option in options):
            raise TypeError("optionparser 'options' must contain only options")

        self._options = options
        for field, object in config.items():
            setattr(self, "_" + field, object)

    @property
    def flags(self):
        return [option for option in self._options if option.isflag]

    @property
    def arguments(self):
        return [option for option in self._options if not option.isflag]

    @property
    def strict(self):
        return self._strict

    @property
    def overflow(self):
        return self._overflow

    def _normalize(self, token):
        return token if self._casesensitive else token.casefold()

    def _lookup(self):
        """
        Map every flag spelling to its schema; the first declared flag wins.
        """
        lookup = {}
        for schema in self.flags:
            spellings = schema.spellings(
                self._fullprefix,
                self._shortprefix,
                self._suffix,
                casesensitive=self._casesensitive,
            )
            for spelling in spellings:
                lookup.setdefault(spelling, schema)
        return lookup

    def _split(self, tokens, lookup):
        """
        Split `<flag><separator><value>` tokens into the flag and the value.

        Only separators that are not blank take part: a blank separator means
        the value is the next token anyway. Returns the split tokens and, for
        each one, the index of the token it came from.
        """
        joined = []
        for spelling, schema in lookup.items():
            for separator in (schema.separator, *schema.separatoraliases):
                if separator.strip():
                    joined.append((spelling + self._normalize(separator), len(spelling)))
        # longest first, so "--tag-name=" is tried before "--tag="
        joined.sort(key=lambda entry: len(entry[0]), reverse=True)

        split, origins = [], []
        for index, token in enumerate(tokens):
            normalized = self._normalize(token)
            for start, length in joined:
                if normalized.startswith(start) and len(token) > len(start):
                    split.extend((token[:length], token[len(start):]))
                    origins.extend((index, index))
                    break
            else:
                split.append(token)
                origins.append(index)
        return split, origins

    def _bind(self, schema, words):
        option = schema.clone()
        if not words and not option.isflag:
            return option
        if not words and option.type is DataType.BOOLEAN:
            option.setvalue(True)
        else:
            option.setvalue(words)
        return option

    def _fail(self, fault, code, message, option, faults, /, **context):
        report(fault(
            message,
            title=code.name.lower().replace("_", " "),
            code=code,
            option=option,
            **context,
        ), faults)
        return False

    def validate(self, option, /, faults=None):
        """
        Check a bound option against its bounds, choices and pattern.

        Returns True when the option is valid. On the first failure the fault is
        reported (raised when faults is None, collected otherwise) and False is
        returned.
        """
        label = _label(option)

        if not option.choices:
            if option.length < option.minlength and option.required:
                return self._fail(
                    OptionLengthError, FaultCode.VALUE_TOO_SHORT,
                    "value of %r is too short (%d < %d characters)" % (label, option.length, option.minlength),
                    option, faults, hint="give %r at least %d characters" % (label, option.minlength),
                )
            if option.length > option.maxlength:
                return self._fail(
                    OptionLengthError, FaultCode.VALUE_TOO_LONG,
                    "value of %r is too long (%d > %d characters)" % (label, option.length, option.maxlength),
                    option, faults, hint="give %r at most %d characters" % (label, option.maxlength),
                )

        if option.words < option.minwords and option.required:
            return self._fail(
                OptionWordCountError, FaultCode.NOT_ENOUGH_WORDS,
                "not enough words for %r (%d < %d)" % (label, option.words, option.minwords),
                option, faults, hint="give %r at least %d word(s)" % (label, option.minwords),
            )

        if option.words > option.maxwords and not self._overflow:
            return self._fail(
                OptionWordCountError, FaultCode.TOO_MANY_WORDS,
                "too many words for %r (%d > %s)" % (label, option.words, option.maxwords),
                option, faults, hint="give %r at most %s word(s)" % (label, option.maxwords),
            )

        if not option.bound:
            return True

        if option.choices and (value := option.getvalue()) not in option.choices:
            return self._fail(
                OptionValueRejectedError, FaultCode.INVALID_CHOICE,
                "invalid value %r for %r" % (value, label),
                option, faults, hint="choose one of: %s" % ", ".join(map(str, option.choices)),
            )

        if option.pattern is not None and not option.pattern.search(" ".join(option.keys())):
            return self._fail(
                OptionValueRejectedError, FaultCode.PATTERN_MISMATCH,
                "value %r of %r does not match %r" % (str(option), label, option.pattern.pattern),
                option, faults, hint=option.expected or "check the expected format of %r" % label,
            )

        return True

    def distribute(self, tokens, /, faults=None, offset=0):
        """
        Bind tokens to clones of the declared options.

        Parameters
        - tokens: str | Iterable[str]
          A raw string is tokenized first; a token sequence is used verbatim.
        - faults: None | list
          None raises faults; a list collects them.
        - offset: int
          Number of line tokens before tokens[0], used for positions in messages.

        Returns
        - tuple[list[Option], list[str]]: valid bound options (matched flags in
          line order, then every declared argument) and the leftover tokens.
        """
        if isinstance(tokens, str):
            tokens = tokenize(tokens)
        elif not isinstance(tokens, Iterable):
            raise TypeError("distribute() argument must be a string or an iterable of tokens")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("distribute() argument must contain only strings")

        lookup = self._lookup()
        slots, origins = self._split(tokens, lookup)

        marks = {}
        for index, token in enumerate(slots):
            if (schema := lookup.get(self._normalize(token))) is not None:
                marks[index] = schema

        reserve = sum(argument.minwords for argument in self.arguments if argument.required)
        free = len(slots) - len(marks)

        bound = []

        # flags, in line order
        for index, schema in marks.items():
            token, slots[index] = slots[index], None
            words = []
            cursor = index + 1
            while (
                cursor < len(slots) and
                cursor not in marks and
                len(words) < schema.maxwords and
                free - 1 >= reserve
            ):
                words.append(slots[cursor])
                slots[cursor] = None
                free -= 1
                cursor += 1

            if len(words) < schema.minwords:
                report(FlagArgumentShortfallError(
                    "not enough words for flag %r at %s position (%d < %d)" % (
                        token, ordinal(offset + origins[index] + 1), len(words), schema.minwords,
                    ),
                    title="flag argument shortfall",
                    code=FaultCode.FLAG_ARGUMENT_SHORTFALL,
                    hint="give %r at least %d word(s)" % (token, schema.minwords),
                    token=token,
                    position=offset + origins[index] + 1,
                    option=schema,
                ), faults)
                continue

            option = self._bind(schema, words)
            if self.validate(option, faults):
                bound.append(option)

        # positional arguments, in declaration order
        pool = [token for token in slots if token]
        arguments = self.arguments
        for number, schema in enumerate(arguments, 1):
            count = schema.maxwords if number == len(arguments) else schema.minwords
            option = self._bind(schema, _take(pool, count))
            if self.validate(option, faults):
                bound.append(option)

        if pool and not self._overflow:
            report(ExcessArgumentsError(
                "too many arguments: %s" % ", ".join(map(repr, pool)),
                title="excess arguments",
                code=FaultCode.EXCESS_ARGUMENTS,
                hint="remove the extra words or quote a multi-word value",
                leftover=tuple(pool),
            ), faults)

        return bound, pool

    def parse(self, tokens, /):
        """
        Bind tokens to clones of the declared options and return them.

        In permissive mode (strict=False) faults are dropped along with the
        options they concern.
        """
        return self.distribute(tokens, None if self._strict else [])[0]

    def __repr__(self):
        return f"option-parser({", ".join(map(_label, self._options))})"


class CommandParser:
    """
    Parse whole lines against a registry of root commands.

    Configuration (keyword arguments)
    - prefix: command prefix ("!" for "!user add bob"); "" accepts any line.
    - fullprefix / shortprefix / suffix: default flag spelling.
    - casesensitive: match command names and flag spellings exactly.
    - strict: raise faults (True) or collect them on the result (False).
    - overflow: tolerate tokens that no option takes.

    Usage
        parser = CommandParser([user], prefix="!")
        result = parser.parse("!user add bob --admin")
        result.path.last.name  # 'add'
    """

    def __init__(
            self,
            commands=(),
            /,
            *,
            prefix="",
            shortprefix="-",
            fullprefix="--",
            suffix="",
            casesensitive=False,
            strict=True,
            overflow=False,
    ):
        config = {
            "prefix": prefix,
            "shortprefix": shortprefix,
            "fullprefix": fullprefix,
            "suffix": suffix,
            "casesensitive": casesensitive,
            "strict": strict,
            "overflow": overflow,
        }
        _sanitize_config(type(self), config)

        for field, object in config.items():
            setattr(self, "_" + field, object)

        self._commands = candidates(commands)

    @property
    def commands(self):
        return dict(self._commands)

    @property
    def prefix(self):
        return self._prefix

    @property
    def strict(self):
        return self._strict

    def add(self, root, /):
        """
        Register a root command under its name.
        """
        if not isinstance(root, Command):
            raise TypeError("commandparser can only register commands")
        if self._commands.setdefault(root.name, root) is not root:
            raise ValueError(f"commandparser command name {root.name!r} is already in use")
        return root

    def command(self, source=Unset, /, **kwargs):
        """
        Create a root command from a callable (or return a decorator) and register it.
        """
        @rename("command")
        def wrapper(source, /):
            return self.add(command(source, **kwargs))

        return wrapper(source) if source is not Unset else wrapper

    def _result(self, line, /, **fields):
        return ParseResult(
            line,
            prefix=self._prefix,
            flagprefix=self._fullprefix,
            shortflagprefix=self._shortprefix,
            flagsuffix=self._suffix,
            **fields,
        )

    def parse(self, line, /):
        """
        Parse one line into a ParseResult.

        - leading whitespace: InvalidLineFormatError (raised when strict,
          carried by an empty result otherwise).
        - empty line or no command prefix: empty, invalid result; not a fault.
        - otherwise: the resolved path plus the bound options of its last
          command.
        """
        if not isinstance(line, str):
            raise TypeError("parse() argument must be a string")

        faults = None if self._strict else []

        if line[:1].isspace():
            report(InvalidLineFormatError(
                "line cannot start with whitespace",
                title="invalid line format",
                code=FaultCode.INVALID_LINE_FORMAT,
                hint="remove the leading whitespace",
            ), faults)
            return self._result(line, faults=faults)

        if not hasprefix(line, self._prefix):
            return self._result(line)

        tokens = tokenize(line[len(self._prefix):])

        path = resolve(
            tokens,
            self._commands,
            prefix=self._prefix,
            fullprefix=self._fullprefix,
            shortprefix=self._shortprefix,
            suffix=self._suffix,
            casesensitive=self._casesensitive,
            faults=faults,
        )

        if not path.levels:
            return self._result(line, leftover=tokens, faults=faults)

        parser = OptionParser(
            path.last.options,
            fullprefix=self._fullprefix,
            shortprefix=self._shortprefix,
            suffix=self._suffix,
            casesensitive=self._casesensitive,
            strict=self._strict,
            overflow=self._overflow,
        )
        options, leftover = parser.distribute(tokens, faults, path.levels)

        return self._result(line, path=path, options=options, leftover=leftover, faults=faults)

    __call__ = parse

    def __repr__(self):
        return f"command-parser(prefix={self._prefix!r}, commands={list(self._commands)!r})"


__all__ = (
    "OptionParser",
    "CommandParser",
)
