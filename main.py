"""
Sample shell.

    python main.py                      # interactive
    python main.py hello --name bob     # single-shot
    python main.py math add --a 1 --b 2
"""
import logging
import os
from dataclasses import dataclass

from rich.logging import RichHandler

from mysh import Arguments, OtherError, Shell, command

__prog__ = "mysh-demo"


@dataclass
class Info:
    user: str = os.environ.get("USER", "world")


@dataclass
class Precision:
    digits: int = 2


class Greet(Arguments):
    name: str | None
    times: int = 1
    shout: bool = False


class Pair(Arguments):
    a: float
    b: float


@command
def hello(info, args: Greet):
    """say hello

    Greets `--name` (or the current user) `--times` times, upper-cased with `--shout`.
    """
    line = " ".join([f"hello, {args.name or info.user}!"] * args.times)
    return line.upper() if args.shout else line


@command
def pwd(info, args: None):
    """print the working directory"""
    return os.getcwd()


@command
def ls(info, args: str | None):
    """list a directory (the working directory by default)"""
    try:
        return sorted(os.listdir(args or "."))
    except OSError as error:
        raise OtherError("cannot list %s" % (args or ".")) from error


@command(name="add", description="add two numbers")
async def add_numbers(info, args: Pair):
    return round(args.a + args.b, info.digits)


@command(description="divide --a by --b")
async def div(info, args: Pair):
    return round(args.a / args.b, info.digits)


def build():
    math = Shell(Precision(3), description="arithmetic").add_command(add_numbers).add_command(div)
    return (
        Shell(Info(), name=__prog__)
        .add_command(hello)
        .add_command(pwd)
        .add_command(ls)
        .add_subcommand("math", math)
    )


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(message)s", handlers=[RichHandler(rich_tracebacks=True)])
    build().run()
