from rich.pretty import pprint

from cmdtree import *

__prog__ = "cmdtree-demo"

parser = CommandParser(prefix="!", strict=False)


@parser.command(aliases=["u"])
def user(*options):
    """Manage users."""


@user.command(options=[
    argument("name", required=True, minwords=1, maxwords=2),
    flag("admin", "a", type=bool),
    flag("tag", "t", maxwords=5, separator="="),
])
def add(*options):
    """Add a user."""


@parser.command(options=[
    argument("target", required=True, minwords=1, pattern=r"^\w+$", expected="a single word"),
    flag("times", "n", minwords=1, maxwords=1, type=int, default=1),
    flag("mode", "m", minwords=1, maxwords=1, choices=["soft", "hard"]),
])
def poke(*options):
    """Poke somebody."""


if __name__ == '__main__':
    while True:
        try:
            line = input("> ")
        except (EOFError, KeyboardInterrupt):
            break
        result = parser(line)
        if result.faults:
            trigger(ParseExit(result.faults), shell=True, fancy=True)
            continue
        pprint(result)
        if result.valid:
            print(str(result))
