"""
mysh shell: dispatch of token sequences and the execution loop.

Overview
- Shell(info, ...): one level of commands and namespaces (a Registry) plus the value
  handed (as a shallow copy) to every command it runs.
  • add_command(command) / add_subcommand(name, shell): fluent builders.
  • dispatch(argv): route one token sequence (help, command, namespace or unknown).
  • main(argv, reader): single-shot when argv is not empty, interactive loop otherwise.
  • run(...): asyncio.run(main(...)) and exit the process with its ExitCode.
  • run_command(line) / call(name, *tokens): programmatic entry points, errors propagate.
- Namespace: a nested Shell registered under a fixed name; it dispatches strictly and
  runs commands with its own info.

Routing (dispatch)
- help [name...] [--args]: help of the named entry, else the listing of this level.
- command:   "--help" among its words prints its card, otherwise it is invoked.
- namespace: the remaining words are dispatched by the nested shell.
- unknown:   the listing is printed (or `unknown(name)` is raised when given).

Isolation (main)
- declared errors (ShellError) are printed through faults.trigger().
- any other exception is captured as an ExceptionTrace, logged and printed.
- single-shot: GENERAL_ERROR (declared) / UNEXPECTED_ERROR (fault); interactive: the loop
  goes on with the next line.
"""
import asyncio
import copy
import inspect
import logging
import sys
from enum import IntEnum

from rich.console import Console
from rich.pretty import pprint

from .commands import Command, Registry
from .faults import CommandNotFoundError, MissingSubcommandError, NoSuchSubcommandError, ShellError, trigger
from .faults import console as stderr
from .readers import ConsoleReader, EndOfInput, Interrupt, OtherEvent, Success
from .tokenizer import join, tokenize
from .traces import ExceptionTrace
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

# Frames up to the command boundary belong to the shell itself.
COMMAND_FRAME = "mysh.commands.Command.__invoke__"

# Seconds between two drains of a reader's external printer in single-shot mode.
PUMP_INTERVAL = 0.05


class ExitCode(IntEnum):
    """
    process exit codes of a shell run.

    - SUCCESS: everything went fine (including leaving the interactive loop).
    - GENERAL_ERROR: a declared error stopped a single-shot invocation.
    - UNEXPECTED_ERROR: an undeclared fault stopped a single-shot invocation.
    - INTERRUPTED: the process was interrupted (Ctrl-C) outside the prompt.
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    UNEXPECTED_ERROR = 2
    INTERRUPTED = 130


def _check_name(name, kind):
    if not isinstance(name, str):
        raise TypeError(f"{kind} name must be a string")
    if not name or name.startswith("-") or any(char.isspace() for char in name):
        raise ValueError(f"{kind} name {name!r} must be a single word not starting with '-'")
    if name == "help":
        raise ValueError(f"{kind} name 'help' is reserved")


class Namespace:
    """
    a nested shell reachable through a fixed leading word.

    `ns` alone raises MissingSubcommandError; `ns x ...` dispatches `x ...` in the nested shell,
    where unknown names raise NoSuchSubcommandError; `ns --help` prints the nested listing.
    """
    __slots__ = ("_name", "_shell", "_description")

    def __init__(self, name, shell, /, description=Unset):
        _check_name(name, "namespace")
        if not isinstance(shell, Shell):
            raise TypeError("namespace 'shell' must be a shell")
        self._name = name
        self._shell = shell
        self._description = coalesce(description, shell.description)

    @property
    def name(self):
        return self._name

    @property
    def shell(self):
        return self._shell

    @property
    def description(self):
        return self._description

    @property
    def info(self):
        return self._shell.info

    async def __invoke__(self, info, argv, /):
        # `info` is the caller's; the nested shell runs its commands with its own.
        tokens = list(argv[1:])
        if not tokens:
            raise MissingSubcommandError(self._shell.registry.names())
        if tokens == ["--help"]:
            self._shell.print_help()
            return None
        return await self._shell.dispatch(tokens, unknown=NoSuchSubcommandError)

    def print_help(self, console=Unset, /, *, indent=0, details=False, colorful=True):
        self._shell.registry.print_help(console, indent=indent, details=details, colorful=colorful)

    def seal(self):
        self._shell.registry.seal()

    def __repr__(self):
        return f"namespace(name={self._name!r}, description={self._description!r})"


class Shell:
    """
    a level of commands and namespaces bound to an `info` value.

    parameters
    - info: any value; every command receives copy.copy(info).
    - name: program name shown in error headers (falls back to __main__.__prog__).
    - description: shown next to the namespace name when this shell is nested.
    - colorful / fancy / console: presentation options; when Unset they are inherited from
      the parent shell, else default to True / False / a new Console.

    errors go to `console` when one is set (here or on a parent), else to stderr.
    """

    def __init__(self, info=None, /, *, name=Unset, description=Unset, colorful=Unset, fancy=Unset, console=Unset):
        self._info = info
        self._name = coalesce(name)
        self._description = coalesce(description)
        self._colorful = colorful
        self._fancy = fancy
        self._console = console
        self._default_console = Console() if console is Unset else console
        self._parent = None
        self._registry = Registry()

    @property
    def info(self):
        return self._info

    @property
    def name(self):
        return self._name

    @property
    def description(self):
        return self._description

    @property
    def registry(self):
        return self._registry

    @property
    def parent(self):
        return self._parent

    @property
    def root(self):
        shell = self
        while shell._parent is not None:
            shell = shell._parent
        return shell

    @property
    def colorful(self):
        if self._colorful is not Unset:
            return bool(self._colorful)
        return self._parent.colorful if self._parent is not None else True

    @property
    def fancy(self):
        if self._fancy is not Unset:
            return bool(self._fancy)
        return self._parent.fancy if self._parent is not None else False

    @property
    def console(self):
        if self._console is not Unset:
            return self._console
        return self._parent.console if self._parent is not None else self._default_console

    @property
    def error_console(self):
        shell = self
        while shell is not None:
            if shell._console is not Unset:
                return shell._console
            shell = shell._parent
        return stderr

    # ── builders ───────────────────────────────────────────────────────────────

    def add_command(self, command, /):
        """
        register a Command (a plain callable is wrapped into one) and return the shell.
        """
        if not isinstance(command, Command):
            command = Command(command)
        _check_name(command.name, "command")
        self._registry.register(command)
        return self

    def add_subcommand(self, name, shell, /, description=Unset):
        """
        mount `shell` under `name` and return this shell.

        raises
        - ValueError when the name is taken, or when `shell` already has a parent or is an
          ancestor of this shell.
        """
        if not isinstance(shell, Shell):
            raise TypeError("add_subcommand() 'shell' must be a shell")
        if shell._parent is not None:
            raise ValueError(f"shell is already mounted as a subcommand of {shell._parent!r}")
        ancestor = self
        while ancestor is not None:
            if ancestor is shell:
                raise ValueError("a shell cannot be mounted below itself")
            ancestor = ancestor._parent
        self._registry.register(Namespace(name, shell, description))
        shell._parent = self
        return self

    # ── routing ────────────────────────────────────────────────────────────────

    async def dispatch(self, argv, /, *, unknown=None):
        """
        route one token sequence (argv[0] names the entry) and return the command's value.

        parameters
        - unknown: error class raised as unknown(name, available=...) for names that are not
          registered; when None the listing is printed instead and None is returned.
        """
        argv = list(argv)
        if not argv:
            raise ValueError("dispatch() argument must contain at least a name")
        logger.debug("dispatch %s", join(argv))

        name, *tokens = argv
        if name == "help":
            return self._help(tokens)

        entry = self._registry.find(name)
        if entry is None:
            if unknown is not None:
                raise unknown(name, available=self._registry.names())
            self.print_help()
            return None

        if isinstance(entry, Command) and "--help" in tokens:
            entry.print_help(self.console, colorful=self.colorful)
            return None

        return await entry.__invoke__(copy.copy(self._info), argv)

    def _help(self, tokens):
        details = "--args" in tokens
        names = [token for token in tokens if not token.startswith("--")]
        entry = self._registry.find(names[0]) if names else None

        match entry:
            case Command():
                entry.print_help(self.console, colorful=self.colorful)
            case Namespace() if len(names) > 1:
                entry.shell._help(names[1:] + ["--args"] * details)
            case Namespace():
                entry.shell.print_help(details=details)
            case _:
                self.print_help(details=details)
        return None

    def print_help(self, *, details=False):
        self._registry.print_help(self.console, details=details, colorful=self.colorful)

    def trigger(self, fault, /):
        """print a fault with this shell's presentation options."""
        options = {"colorful": self.colorful, "fancy": self.fancy, "console": self.error_console}
        if (prog := self.root.name) is not None:
            options["prog"] = prog
        trigger(fault, **options)

    # ── programmatic entry points ──────────────────────────────────────────────

    async def run_command(self, line, /):
        """
        tokenize `line` and dispatch it; errors propagate, the command's value is returned.
        """
        argv = tokenize(line)
        if not argv:
            return None
        return await self.dispatch(argv)

    async def call(self, name, /, *tokens):
        """
        dispatch [name, *tokens] strictly: unknown names raise CommandNotFoundError.
        """
        return await self.dispatch([name, *tokens], unknown=CommandNotFoundError)

    # ── execution loop ─────────────────────────────────────────────────────────

    async def _isolated(self, argv):
        try:
            result = await self.dispatch(argv)
        except ShellError as error:
            logger.warning("%s: %s", argv[0], error.message)
            self.trigger(error)
            return ExitCode.GENERAL_ERROR
        except Exception as error:
            trace = ExceptionTrace.capture(error, filtered_range=(COMMAND_FRAME, None))
            logger.error("%s: unexpected failure: %s", argv[0], trace.message)
            self.error_console.print(trace.render(colorful=self.colorful))
            return ExitCode.UNEXPECTED_ERROR

        if isinstance(result, str):
            self.console.print(result, markup=False, highlight=False)
        elif result is not None:
            pprint(result, console=self.console)
        return ExitCode.SUCCESS

    @staticmethod
    def _printer(reader):
        if reader is Unset or not callable(external_printer := getattr(reader, "external_printer", None)):
            return None
        return external_printer()

    @staticmethod
    async def _pump(printer, stopped):
        while not stopped.is_set():
            printer.drain()
            await asyncio.sleep(PUMP_INTERVAL)
        printer.drain()

    async def _single(self, argv, reader):
        printer = self._printer(reader)
        if printer is None:
            return await self._isolated(argv)

        stopped = asyncio.Event()
        pump = asyncio.create_task(self._pump(printer, stopped))
        try:
            return await self._isolated(argv)
        finally:
            stopped.set()
            await pump

    async def _interactive(self, reader):
        if reader is Unset:
            reader = ConsoleReader(console=self.console, colorful=self.colorful)
        printer = self._printer(reader)

        while True:
            if printer is not None:
                printer.drain()
            signal = reader.read_line()
            if inspect.isawaitable(signal):
                signal = await signal

            match signal:
                case Success(text=text):
                    try:
                        argv = tokenize(text)
                    except ShellError as error:
                        logger.warning("unreadable line: %s", error.message)
                        self.trigger(error)
                        continue
                    if argv:
                        await self._isolated(argv)
                case EndOfInput() | Interrupt():
                    return ExitCode.SUCCESS
                case OtherEvent(detail=detail):
                    logger.warning("ignored reader event: %r", detail)
                case _:
                    raise TypeError(f"read_line() returned {signal!r}, expected a reader signal")

    async def main(self, argv=Unset, reader=Unset, /):
        """
        run the shell once.

        parameters
        - argv: Iterable[str] | Unset (sys.argv[1:]); non-empty → single-shot, empty → interactive.
        - reader: line reader for the interactive loop (ConsoleReader by default); its external
          printer, if any, is drained while a single-shot command runs.

        returns
        - ExitCode
        """
        argv = sys.argv[1:] if argv is Unset else list(argv)
        self._registry.seal()

        if argv:
            code = await self._single(argv, reader)
        else:
            code = await self._interactive(reader)
        logger.info("shell %s exits with %s", self.root.name or "mysh", code.name)
        return code

    def run(self, argv=Unset, reader=Unset, /):
        """
        asyncio.run(main(argv, reader)) and exit the process with the resulting code.
        """
        try:
            code = asyncio.run(self.main(argv, reader))
        except KeyboardInterrupt:
            code = ExitCode.INTERRUPTED
        sys.exit(int(code))

    def __repr__(self):
        return f"shell(name={self._name!r}, entries={len(self._registry)})"


__all__ = (
    "ExitCode",
    "Namespace",
    "Shell",
)
