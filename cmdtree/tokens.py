r"""
cmdtree tokenizer: quote- and escape-aware splitting of a command line.

Rules
- A token is a maximal run of non-whitespace characters, or a double-quoted
  span "…" which may contain escaped quotes (\") without being closed by them.
- A backslash-escaped quote is always literal text of its token; it never
  pairs with a later quote to open or close a span.
- An unescaped quote without a partner degrades to literal text of the
  surrounding run (and is then dropped by the cleanup pass below).
- Once boundaries are found, every unescaped quote and every backslash is
  stripped from each token: backslash is only an escape marker.
- Empty quotes ("") contribute no token.

Examples
    >>> tokenize('"a b" c')
    ['a b', 'c']
    >>> tokenize(r'\"a b\"')
    ['"a', 'b"']
    >>> tokenize(r'"123  \"   "')
    ['123  "   ']
    >>> tokenize('""')
    []

The functions here are pure and total: any string yields a (possibly empty)
list of tokens, never an error.
"""
import re

# Alternatives, tried left to right at every position:
#   1. a run ending with backslash(es) and a quote          f\"  gf\"
#   2. an escaped quote followed by a quote-free run        \"123
#   3. a quote-free run                                     word
#   4. a quoted span closed by an unescaped quote           "a \" b"
_matcher = re.compile(r'[^\s]+(?:\\)+"|(?:\\)"[^"\s]*|[^"\s]+|"(?:\\"|[^"])*(?:[^\\"]")')
_unescaped = re.compile(r'(?<!\\)"')
_whitespace = re.compile(r"\s")


def _clean(token):
    return _unescaped.sub("", token).replace("\\", "")


def tokenize(line, /):
    """
    Split a raw line into word tokens.

    Parameters
    - line: str

    Returns
    - list[str]: tokens in input order, quotes and escapes resolved.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")
    return [_clean(match.group()) for match in _matcher.finditer(line)]


def quote(token, /):
    """
    Wrap a token in double quotes when it contains whitespace.

    This is the inverse used when tokens are rendered back into a line, so
    that a multi-word token is not split again.
    """
    if not isinstance(token, str):
        raise TypeError("quote() argument must be a string")
    return f'"{token}"' if _whitespace.search(token) else token


def join(tokens, /):
    """
    Render tokens back into a single line, re-quoting multi-word tokens.
    """
    return " ".join(map(quote, tokens))


def unquote(line, /):
    """
    Remove quoting from a line, keeping escaped quotes as literal text.
    """
    return " ".join(tokenize(line))


__all__ = (
    "tokenize",
    "quote",
    "join",
    "unquote",
)
