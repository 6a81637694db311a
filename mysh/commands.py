"""
mysh command layer: typed commands and the registries that hold them.

What this module provides
- Command: a named callback `(info, args) -> value` (sync or async) plus its metadata:
  • description (required, defaults to the first docstring line) and long_description
    (defaults to the rest of the docstring).
  • arguments: the target the words after the name are resolved into (see mysh.arguments);
    defaults to the annotation of the callback's second parameter, else dict.
  • help: the target's option descriptors, shown by `help --args` and by the card.
- command(...): create a Command or a decorator that produces one.
- Registry: commands and namespaces of one shell level, name-unique across both maps,
  sealed before the shell starts.

Quick start
    from mysh import Arguments, command

    class Greet(Arguments):
        name: str
        times: int = 1

    @command
    def hello(info, args: Greet):
        '''say hello'''
        return " ".join(["hello", args.name] * args.times)
"""
import inspect
import logging
import re

from rich.console import Console
from rich.text import Text

from .arguments import describe, resolve
from .utils import Unset, coalesce, freeze, mirror, palette, rename

logger = logging.getLogger(__name__)

_NAME = re.compile(r"[^\s-][^\s]*")


class CommandType(type):
    """
    Metaclass of command entries.

    - __typename__ is derived from the class name (Command → "command") for messages.
    - every name in __introspectable__ becomes a read-only property over "_{name}".
    - __repr__/__rich_repr__ show the names in __displayable__ (or __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(mcs, name, bases, namespace, **options):
        self = super().__new__(
            mcs,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join("%s=%r" % pair for pair in self.__rich_repr__()),
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _split_doc(callback):
    # first paragraph → description, the rest → long description
    doc = inspect.getdoc(callback) or ""
    head, _, tail = doc.strip().partition("\n\n")
    return " ".join(head.split()) or Unset, tail.strip() or Unset


def _default_target(callback):
    try:
        parameters = list(inspect.signature(callback, eval_str=True).parameters.values())
    except ValueError:
        return dict
    if len(parameters) < 2 or parameters[1].annotation is inspect.Parameter.empty:
        return dict
    return parameters[1].annotation


class Command(metaclass=CommandType):
    """
    an invocable entry of a registry.

    construction
    - callback: Callable[[info, args], value | Awaitable[value]]
    - name: defaults to callback.__name__ with underscores spelled as dashes.
    - description: short, single line; defaults to the first paragraph of the docstring.
    - long_description: defaults to the remaining docstring paragraphs, else None.
    - arguments: argument target; defaults to the second parameter's annotation, else dict.

    raises
    - TypeError when callback is not callable or the target cannot describe itself.
    - ValueError on an empty or malformed name, or a missing description.
    """
    __introspectable__ = (
        "name",
        "description",
        "long_description",
        "arguments",
        "help",
        "callback",
    )
    __displayable__ = (
        "name",
        "description",
        "help",
    )

    def __init__(self, callback, /, name=Unset, description=Unset, long_description=Unset, arguments=Unset):
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} 'callback' must be callable")

        name = coalesce(name, getattr(callback, "__name__", Unset))
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        name = name.strip("_").replace("_", "-")
        if not _NAME.fullmatch(name):
            raise ValueError(f"{type(self).__typename__} name {name!r} must be a single word not starting with '-'")

        summary, details = _split_doc(callback)
        description = coalesce(description, summary)
        if description is Unset:
            raise ValueError(f"{type(self).__typename__} {name!r} needs a description (argument or docstring)")
        if not isinstance(description, str) or not (description := description.strip()):
            raise ValueError(f"{type(self).__typename__} {name!r} description must be a non-empty string")

        long_description = coalesce(long_description, coalesce(details))
        if long_description is not None and not isinstance(long_description, str):
            raise TypeError(f"{type(self).__typename__} 'long_description' must be a string")

        if arguments is Unset:
            arguments = _default_target(callback)

        self._callback = callback
        self._name = name
        self._description = description
        self._long_description = long_description
        self._arguments = arguments
        self._descriptor = describe(arguments)
        self._help = freeze(self._descriptor.__describe__())

    async def __invoke__(self, info, argv, /):
        """
        resolve `argv` (argv[0] is this command's name) and run the callback.

        the callback's result is awaited when it is awaitable; the final value is returned.
        ArgParseError is raised before the callback runs when the words do not fit.
        """
        arguments = resolve(argv, self._descriptor)
        result = self._callback(info, arguments)
        if inspect.isawaitable(result):
            result = await result
        return result

    def print_help(self, console=Unset, /, *, colorful=True):
        """
        print the detailed card of this command.

        layout
            Name:
                <name> [OPTIONS]

            Description:
                <long description, else description>

            Options:
                --<option>: <type>
        """
        console = Console() if console is Unset else console
        styler = palette({
            "card-label": "bold #FFFFFF",
            "command-name": "bold #36C5F0",
            "options-marker": "#FFB400",
            "description": "#C8C8D0",
            "option": "#00E6FF",
        }, colorful)

        card = Text()
        card.append("Name:", styler("card-label")).append("\n    ")
        card.append(self.name, styler("command-name"))
        if self.help:
            card.append(" ").append("[OPTIONS]", styler("options-marker"))
        card.append("\n\n")
        card.append("Description:", styler("card-label")).append("\n")
        for line in (self.long_description or self.description).splitlines():
            card.append("    ").append(line, styler("description")).append("\n")
        if self.help:
            card.append("\n").append("Options:", styler("card-label"))
            for option in self.help:
                card.append("\n    ").append(option, styler("option"))
        card.rstrip()
        console.print(card)


def command(callback=Unset, /, *, name=Unset, description=Unset, long_description=Unset, arguments=Unset):
    """
    create a Command, or return a decorator that creates one.

        @command
        def pwd(info, args: None): ...

        @command(name="ls", description="list a directory")
        def list_directory(info, args: str | None): ...
    """
    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        return Command(callback, name, description, long_description, arguments)

    return wrapper(callback) if callback is not Unset else wrapper


class Registry:
    """
    entries of one shell level: commands and namespaces, looked up by name.

    rules
    - names are unique across both maps (ValueError otherwise).
    - find() checks commands first, then namespaces.
    - once sealed (and the seal reaches every namespace) register() raises RuntimeError.
    """

    def __init__(self):
        self._commands = {}
        self._namespaces = {}
        self._sealed = False

    @property
    def sealed(self):
        return self._sealed

    def register(self, entry, /):
        if self._sealed:
            raise RuntimeError("registry is sealed, entries cannot be added once the shell runs")
        if isinstance(entry, Command):
            target = self._commands
        elif callable(getattr(entry, "__invoke__", None)) and callable(getattr(entry, "print_help", None)):
            target = self._namespaces
        else:
            raise TypeError("register() argument must be a command or a namespace")

        if entry.name in self._commands or entry.name in self._namespaces:
            raise ValueError(f"name {entry.name!r} is already in use")
        target[entry.name] = entry
        logger.debug("registered %s %r", "command" if target is self._commands else "namespace", entry.name)
        return entry

    def find(self, name, /):
        """return the entry registered under `name` (commands first), or None."""
        entry = self._commands.get(name)
        if entry is None:
            entry = self._namespaces.get(name)
        return entry

    def list(self):
        """commands sorted by name."""
        return tuple(self._commands[name] for name in sorted(self._commands))

    def namespaces(self):
        """namespaces sorted by name."""
        return tuple(self._namespaces[name] for name in sorted(self._namespaces))

    def names(self):
        """every registered name, sorted."""
        return tuple(sorted(self._commands.keys() | self._namespaces.keys()))

    def seal(self):
        self._sealed = True
        for namespace in self._namespaces.values():
            if callable(seal := getattr(namespace, "seal", None)):
                seal()

    def __contains__(self, name):
        return name in self._commands or name in self._namespaces

    def __len__(self):
        return len(self._commands) + len(self._namespaces)

    def print_help(self, console=Unset, /, *, indent=0, details=False, colorful=True):
        """
        print the listing of this level: commands by name, then namespaces by name.

        - every level is indented 4 * (indent + 1) columns.
        - details: each command is followed by its option descriptors.
        - namespaces list their own entries one level deeper.
        - the top level (indent 0) is headed by the usage line and "Commands:".
        """
        console = Console() if console is Unset else console
        styler = palette({
            "usage-label": "bold #FFFFFF",
            "usage": "#36C5F0",
            "section": "bold #FFFFFF",
            "command-name": "bold #36C5F0",
            "namespace-name": "bold #FF4D94",
            "description": "#C8C8D0",
            "option": "#9CA3AF",
        }, colorful)

        padding = " " * 4 * (indent + 1)
        lines = []
        if indent == 0:
            lines.append(Text.assemble(
                Text("Usage:", styler("usage-label")), " ", Text("[name] [command]", styler("usage")), "\n"
            ))
            lines.append(Text("Commands:", styler("section")))

        for entry in self.list():
            lines.append(Text.assemble(
                padding,
                Text(f"{entry.name:10}", styler("command-name")),
                " ",
                Text(entry.description, styler("description")),
            ))
            if details and entry.help:
                lines.append(Text.assemble(padding, " " * 11, Text(" ".join(entry.help), styler("option"))))

        if lines:
            console.print(Text("\n").join(lines))

        for namespace in self.namespaces():
            header = Text(padding)
            header.append(f"{namespace.name:10}", styler("namespace-name"))
            if namespace.description:
                header.append(" ").append(namespace.description, styler("description"))
            console.print(header)
            namespace.print_help(console, indent=indent + 1, details=details, colorful=colorful)


__all__ = (
    "Command",
    "command",
    "Registry",
)

del CommandType
