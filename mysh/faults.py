"""
mysh faults (declared errors, invariant helpers) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every declared error kind.
  Codes are grouped by layer (tokenizer, arguments, routing, delegated) so logs stay
  searchable and hosts can remap them.
- ShellError and its kinds: the errors a shell session recovers from. Each one carries a
  message plus read-only options (hint, prog, colorful, fancy, ...) and knows how to render
  itself with rich and how to become an ExceptionTrace (to_trace()).
- trigger(): central entry point that prints a fault on the error console.
- ensure() / unwrap(): invariant helpers. They raise InvariantError, which is NOT a
  declared error: the shell treats it as a fault of the command that hit it.

Integration
- The tokenizer, the argument resolver and the dispatcher raise ShellError kinds.
- The execution loop catches them at the invocation boundary and calls trigger(error, ...).
"""
import copy
import sys
import traceback
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .traces import ExceptionTrace, Frame
from .utils import Unset, palette

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes of the shell (stable identifiers).

    grouping
    - tokenizer (211 0x): UNCLOSED_QUOTE
    - arguments (211 1x): ARG_PARSE
    - routing   (211 2x): MISSING_SUBCOMMAND, NO_SUCH_SUBCOMMAND, COMMAND_NOT_FOUND
    - delegated (211 3x): OTHER

    normalize() lets the host remap codes to its own labels through a __codes__
    mapping in __main__; without it the numeric value is used.
    """
    # --- tokenizer ---
    UNCLOSED_QUOTE     = 21101

    # --- arguments ---
    ARG_PARSE          = 21111

    # --- routing ---
    MISSING_SUBCOMMAND = 21121
    NO_SUCH_SUBCOMMAND = 21122
    COMMAND_NOT_FOUND  = 21123

    # --- delegated ---
    OTHER              = 21131

    def normalize(self):
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class InvariantError(AssertionError):
    """raised by ensure()/unwrap() when an internal invariant does not hold."""


def ensure(condition, message="invariant violated", /):
    """
    raise InvariantError(message) unless `condition` is truthy.
    """
    if not condition:
        raise InvariantError(message)


def unwrap(object, message="unexpected missing value", /):
    """
    return `object` unless it is None or Unset, in which case InvariantError is raised.
    """
    if object is None or object is Unset:
        raise InvariantError(message)
    return object


def _construction_stack():
    # Outermost first; the __init__ frames of the error being built are dropped.
    frames = []
    for frame, line in traceback.walk_stack(sys._getframe(1)):
        if not frames and frame.f_code.co_name == "__init__" and isinstance(frame.f_locals.get("self"), ShellError):
            continue
        frames.append(Frame.of(frame, line))
    frames.reverse()
    return tuple(frames)


class ShellError(Exception):
    """
    base of every declared (recoverable) error.

    attributes
    - message: str, the rendered description (also str(error)).
    - options: read-only mapping of rendering/context options (hint, prog, colorful, fancy,
      console, and kind-specific payload such as expected/supplied/available).
    - frames: stack captured where the error was constructed (outermost first).
    """
    code = FaultCode.OTHER
    title = "shell error"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)
        self.frames = _construction_stack()

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return self.message

    def sources(self):
        """
        descriptions of the underlying causes (empty for declared kinds).
        """
        return ()

    def to_trace(self, *, filtered_range=(None, None)):
        """
        convert this error into an ExceptionTrace (message, sources, frames).

        frames come from the traceback once the error was raised, else from the stack
        captured at construction.
        """
        frames = self.frames
        if self.__traceback__ is not None:
            frames = tuple(Frame.of(frame, line) for frame, line in traceback.walk_tb(self.__traceback__))
        return ExceptionTrace(self.message, self.sources(), frames, filtered_range)

    def __rich__(self):
        styler = palette({
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, self.options.get("colorful", True))

        prog = self.options.get("prog") or getattr(__import__("__main__"), "__prog__", "mysh")

        header = Text.assemble(
            "[ ",
            Text(str(prog), styler("prog-name")),
            " — ",
            Text(self.code.normalize(), styler("code")),
            " | ",
            Text(self.title.title(), styler("error-title")),
            " ]"
        )
        body = [Text(self.message, styler("error-message"))]
        if self.hint:
            body.append(Text.assemble(Text(" → ", styler("hint-arrow")), Text(str(self.hint), styler("hint"))))

        if self.options.get("fancy"):
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)

    def __trigger__(self):
        self.options.get("console", console).print(self)

    def __replace__(self, /, **overrides):
        clone = type(self).__new__(type(self), *self.args)
        clone.__dict__.update(self.__dict__)
        clone.options = MappingProxyType({**self.options, **overrides})
        clone.__cause__ = self.__cause__
        clone.__context__ = self.__context__
        clone.__suppress_context__ = self.__suppress_context__
        clone.__traceback__ = self.__traceback__
        return clone


class UnclosedQuoteError(ShellError):
    """input line ends inside a single or double quoted word."""
    code = FaultCode.UNCLOSED_QUOTE
    title = "unclosed quote"

    def __init__(self, message="missing closing quote", /, **options):
        super().__init__(message, **{"hint": "close the quote, or escape it with a backslash"} | options)


class ArgParseError(ShellError):
    """
    the tokens after a command name do not fit its argument shape.

    the message always carries what was expected (the shape's help descriptors) next to
    what was supplied, so it can be understood without looking the command up.
    """
    code = FaultCode.ARG_PARSE
    title = "invalid arguments"

    def __init__(self, detail, /, expected=(), supplied=(), **options):
        self.detail = detail
        expected = tuple(expected)
        supplied = tuple(supplied)
        message = "%s (expected: %s; supplied: %s)" % (
            detail,
            ", ".join(expected) or "no arguments",
            " ".join(supplied) or "nothing",
        )
        if "command" in options and "hint" not in options:
            options["hint"] = "run 'help %s' to see its options" % options["command"]
        super().__init__(message, expected=expected, supplied=supplied, **options)


class MissingSubcommandError(ShellError):
    """a namespace was invoked without naming one of its entries."""
    code = FaultCode.MISSING_SUBCOMMAND
    title = "missing subcommand"

    def __init__(self, available, /, **options):
        available = tuple(available)
        super().__init__(
            "missing subcommand, available: %s" % (", ".join(available) or "none"),
            **{"available": available, "hint": "add one of the listed names"} | options
        )


class NoSuchSubcommandError(ShellError):
    """a namespace was invoked with a name it does not know."""
    code = FaultCode.NO_SUCH_SUBCOMMAND
    title = "no such subcommand"

    def __init__(self, name, /, available=(), **options):
        available = tuple(available)
        hint = "available: %s" % ", ".join(available) if available else "this namespace is empty"
        super().__init__(
            "no such subcommand %r" % name,
            **{"name": name, "available": available, "hint": hint} | options
        )


class CommandNotFoundError(ShellError):
    """a command was requested by name and is not registered."""
    code = FaultCode.COMMAND_NOT_FOUND
    title = "command not found"

    def __init__(self, name, /, **options):
        super().__init__(
            "command not found: %s" % name,
            **{"name": name, "hint": "run 'help' to list the commands"} | options
        )


class OtherError(ShellError):
    """
    declared wrapper around any other failure of a command.

    usage
    - raise OtherError("read_dir failed") from error   # message plus cause
    - raise OtherError(error)                          # message taken from the cause
    """
    code = FaultCode.OTHER
    title = "command failed"

    def __init__(self, cause, /, **options):
        if isinstance(cause, BaseException):
            super().__init__(str(cause) or type(cause).__name__, **options)
            self.__cause__ = cause
        else:
            super().__init__(cause, **options)

    def sources(self):
        """
        descriptions of the wrapped cause chain, outermost cause first.

        the chain follows __cause__ (or __context__ unless suppressed) and stops at the
        first layer without a further cause.
        """
        return ExceptionTrace.chain(self)


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see ShellError).
    - options are merged into the fault through copy.replace() before it is printed.

    typical options
    - prog, colorful, fancy, console, hint.
    """
    if (
        not callable(getattr(fault, "__trigger__", None)) or
        not callable(getattr(fault, "__replace__", None))
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "InvariantError",
    "ensure",
    "unwrap",
    "ShellError",
    "UnclosedQuoteError",
    "ArgParseError",
    "MissingSubcommandError",
    "NoSuchSubcommandError",
    "CommandNotFoundError",
    "OtherError",
    "trigger",
)
