"""
mysh line readers: where interactive input comes from.

Contract (what the shell needs from a reader)
- read_line() -> Success | EndOfInput | Interrupt | OtherEvent
  (or an awaitable of one of them)
- external_printer() -> ExternalPrinter | None    (optional method)

Signals
- Success(text): one line was read.
- EndOfInput(): the input is exhausted (Ctrl-D).
- Interrupt(): the user gave up on the prompt (Ctrl-C).
- OtherEvent(detail): anything else the reader wants reported; the shell logs and ignores it.

ConsoleReader is the default reader, built on rich.console.Console.input. Importing
readline (when the platform has it) gives it line editing and history.
"""
import threading
from dataclasses import dataclass
from queue import Empty, SimpleQueue

from rich.console import Console
from rich.text import Text

from .utils import Unset, palette

try:
    import readline  # NOQA: F-401 (line editing and history for input())
except ImportError:
    pass


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class EndOfInput:
    pass


@dataclass(frozen=True)
class Interrupt:
    pass


@dataclass(frozen=True)
class OtherEvent:
    detail: object = None


class PromptText:
    """
    lock-guarded cell holding the prompt shown by a reader.

    commands may change it while the reader owns it (e.g. to show the current directory).
    """
    __slots__ = ("_lock", "_value")

    def __init__(self, value="> ", /):
        self._lock = threading.Lock()
        self._value = str(value)

    def get(self):
        with self._lock:
            return self._value

    def set(self, value, /):
        with self._lock:
            self._value = str(value)

    def __str__(self):
        return self.get()

    def __repr__(self):
        return f"prompt-text({self.get()!r})"


class ExternalPrinter:
    """
    thread-safe queue of messages printed above the prompt.

    any thread may print(); the shell drains the queue from its event loop.
    """

    def __init__(self, console=Unset, /):
        self._console = Console() if console is Unset else console
        self._queue = SimpleQueue()

    def print(self, message, /):
        self._queue.put(message)

    def pending(self):
        return not self._queue.empty()

    def drain(self):
        """print every queued message; returns how many were printed."""
        count = 0
        while True:
            try:
                message = self._queue.get_nowait()
            except Empty:
                return count
            self._console.print(message)
            count += 1


class ConsoleReader:
    """
    default reader: rich.console.Console.input with a PromptText prompt.

    - EOFError becomes EndOfInput, KeyboardInterrupt becomes Interrupt.

    read_line() blocks the calling thread, which is the event loop thread in the interactive
    loop: other asyncio tasks do not run while the prompt waits, and messages given to the
    external printer are printed before the next prompt, not while one is shown.
    """

    def __init__(self, prompt=Unset, /, *, console=Unset, colorful=True):
        self._prompt = PromptText() if prompt is Unset else prompt
        self._console = Console() if console is Unset else console
        self._printer = ExternalPrinter(self._console)
        self._styler = palette({"prompt": "bold #36C5F0"}, colorful)

    @property
    def prompt(self):
        return self._prompt

    def external_printer(self):
        return self._printer

    def read_line(self):
        self._printer.drain()
        try:
            text = self._console.input(Text(self._prompt.get(), self._styler("prompt")))
        except EOFError:
            return EndOfInput()
        except KeyboardInterrupt:
            return Interrupt()
        return Success(text)


__all__ = (
    "Success",
    "EndOfInput",
    "Interrupt",
    "OtherEvent",
    "PromptText",
    "ExternalPrinter",
    "ConsoleReader",
)
