r"""
mysh argument resolution: from the words after a command name to a typed value.

Overview
- Targets (what a command expects) implement the type descriptor capability:
  • __describe__() -> tuple[str, ...]: ordered help descriptors ("--count: int"); an empty
    tuple means the target takes no arguments.
  • __convert__(value) -> object: build the target from Unset (nothing given), a scalar
    (single positional word) or a Document (options), raising ArgParseError otherwise.
- describe(target) turns anything accepted as a target into such a descriptor:
  • Arguments subclasses: declarative shapes built from annotated class attributes.
  • str / int / float / bool: a single scalar value.
  • dict: the raw Document, passed through.
  • None: no arguments at all.
  • Optional(target) or `T | None`: same as target, absent allowed (converts to None).

Document building (parse)
- nothing after the name        → Unset
- one word not starting with -- → that word as a scalar (JSON-ish literal, else string)
- otherwise, left to right:
  • --key=value  → key set immediately
  • --key        → key pending; the next plain word becomes its value
  • a pending key followed by another --key, or by the end → True (bare flag)
  • a plain word with no pending key → ArgParseError("param without option")
  Values go through literal(): true/1 → True, false/0 → False, integers → int, else str.

Quick example:
    >>> class Greet(Arguments):
    ...     name: str
    ...     times: int = 1
    ...     loud: bool = False
    >>> resolve(["greet", "--name", "bob", "--loud"], Greet)
    Greet(name='bob', times=1, loud=True)
    >>> resolve(["greet", "bob"], Greet)
    Greet(name='bob', times=1, loud=False)
"""
import copy
import json
import re
import types
import typing
from collections.abc import Mapping

from .faults import ArgParseError, ensure
from .utils import Unset, freeze, kebab

_INTEGER = re.compile(r"[+-]?[0-9]+")


def literal(token, /):
    """
    scalar value of an option word: true/1 → True, false/0 → False, integers → int, else str.
    """
    match token:
        case "true" | "1":
            return True
        case "false" | "0":
            return False
    if _INTEGER.fullmatch(token):
        try:
            return int(token)
        except ValueError:
            # Longer than the interpreter accepts for int(); kept as text.
            return token
    return token


def _positional(token):
    # JSON-ish reading of a lone positional word; Unset when it is not a number or boolean.
    try:
        value = json.loads(token)
    except ValueError:
        return Unset
    return value if isinstance(value, bool | int | float) else Unset


class Document(dict):
    """
    resolved arguments: option name → bool | int | str, in the order supplied.

    `tokens` maps every option to the raw word its value came from (None for bare flags),
    so typed fields convert from the original text (e.g. "--count 1" is True in the
    document but 1 for an int field, "--name 007" stays "007" for a str field).
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tokens = {}

    def __repr__(self):
        return f"document({dict.__repr__(self)})"


def _collect(tokens, /, **context):
    document = Document()
    pending = Unset

    def put(key, value, token):
        if not key:
            raise ArgParseError("empty option name", **context)
        if key in document:
            raise ArgParseError("option --%s given more than once" % key, **context)
        document[key] = value
        document.tokens[key] = token

    for token in tokens:
        if token.startswith("--"):
            if pending is not Unset:
                put(pending, True, None)
            key, separator, value = token[2:].partition("=")
            if separator:
                put(key, literal(value), value)
                pending = Unset
            else:
                pending = key
        elif pending is Unset:
            raise ArgParseError("param without option", **context)
        else:
            put(pending, literal(token), token)
            pending = Unset

    if pending is not Unset:
        put(pending, True, None)

    return document


def parse(argv, /):
    """
    build the resolved arguments of `argv` (argv[0], the command name, is skipped).

    returns
    - Unset when nothing follows the name.
    - a scalar (bool | int | float | str) for a single positional word.
    - a Document otherwise.
    """
    ensure(argv, "argv must start with the command name")
    tokens = list(argv[1:])
    if not tokens:
        return Unset
    if len(tokens) == 1 and not tokens[0].startswith("--"):
        return value if (value := _positional(tokens[0])) is not Unset else tokens[0]
    return _collect(tokens, supplied=tokens, command=argv[0])


def render(document, /):
    """
    turn a Document back into option words: True → --key, anything else → --key=value.
    """
    tokens = []
    for key, value in document.items():
        if value is True:
            tokens.append(f"--{key}")
        elif value is False:
            tokens.append(f"--{key}=false")
        else:
            tokens.append(f"--{key}={value}")
    return tokens


# ── descriptors ────────────────────────────────────────────────────────────────

def _to_str(value):
    if isinstance(value, str):
        return value
    raise TypeError(value)


def _to_int(value):
    if isinstance(value, bool):
        raise TypeError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value)
    raise TypeError(value)


def _to_float(value):
    if isinstance(value, bool):
        raise TypeError(value)
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        return float(value)
    raise TypeError(value)


def _to_bool(value):
    if isinstance(value, bool):
        return value
    match value:
        case "true" | "1" | 1:
            return True
        case "false" | "0" | 0:
            return False
    raise ValueError(value)


class Scalar:
    """descriptor of a single scalar value."""
    __slots__ = ("type", "label", "_coerce")

    def __init__(self, type, label, coerce, /):
        self.type = type
        self.label = label
        self._coerce = coerce

    def __describe__(self):
        return (f"[{self.label}]",)

    def __convert__(self, value, /):
        if value is Unset:
            raise ArgParseError("expected a %s value" % self.label)
        if isinstance(value, Mapping):
            raise ArgParseError("expected a single %s value, got options" % self.label)
        try:
            return self._coerce(value)
        except (TypeError, ValueError):
            raise ArgParseError("invalid %s value %r" % (self.label, value)) from None

    def __repr__(self):
        return f"scalar({self.label})"


class Nothing:
    """descriptor of a command that takes no arguments."""
    __slots__ = ()

    def __describe__(self):
        return ()

    def __convert__(self, value, /):
        if value is not Unset:
            raise ArgParseError("takes no arguments")
        return None

    def __repr__(self):
        return "nothing"


class Raw:
    """
    descriptor that hands the parsed words to the command as they are.

    - options: the Document (an empty one when nothing follows the name).
    - a single positional word: that scalar (bool, int, float or str), not a mapping.
    """
    __slots__ = ()

    def __describe__(self):
        return ("[--option value]...",)

    def __convert__(self, value, /):
        return Document() if value is Unset else value

    def __repr__(self):
        return "raw"


class Optional:
    """
    wrap a target so that giving nothing is accepted (and converts to None).

    only the help changes otherwise: every descriptor is prefixed with "optional ".
    """
    __slots__ = ("target",)

    def __init__(self, target, /):
        self.target = describe(target)

    def __describe__(self):
        return tuple("optional " + descriptor for descriptor in self.target.__describe__())

    def __convert__(self, value, /):
        if value is Unset:
            return None
        return self.target.__convert__(value)

    def __repr__(self):
        return f"optional({self.target!r})"


_SCALARS = {
    str: Scalar(str, "str", _to_str),
    int: Scalar(int, "int", _to_int),
    float: Scalar(float, "float", _to_float),
    bool: Scalar(bool, "bool", _to_bool),
}
_NOTHING = Nothing()
_RAW = Raw()


def describe(target, /):
    """
    return the descriptor (an object with __describe__ and __convert__) for `target`.

    raises
    - TypeError for targets that cannot describe themselves.
    """
    if target is None or target is types.NoneType:
        return _NOTHING
    if callable(getattr(target, "__describe__", None)) and callable(getattr(target, "__convert__", None)):
        return target
    if isinstance(target, type) and target in _SCALARS:
        return _SCALARS[target]
    if target is dict:
        return _RAW
    if typing.get_origin(target) in (types.UnionType, typing.Union):
        members = typing.get_args(target)
        if len(members) == 2 and types.NoneType in members:
            inner, = (member for member in members if member is not types.NoneType)
            return Optional(inner)
    raise TypeError(f"unsupported argument target {target!r}")


def _typename(annotation):
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


class Field:
    """one option of an Arguments shape."""
    __slots__ = ("name", "option", "annotation", "descriptor", "default")

    def __init__(self, name, annotation, default=Unset, /):
        self.name = name
        self.option = kebab(name)
        self.annotation = annotation
        self.descriptor = describe(annotation)
        self.default = default

    @property
    def required(self):
        return self.default is Unset and not isinstance(self.descriptor, Optional)

    def __describe__(self):
        descriptor = f"--{self.option}: {_typename(self.annotation)}"
        if self.default is not Unset:
            descriptor += f" = {self.default!r}"
        return descriptor

    def convert(self, value, /):
        try:
            return self.descriptor.__convert__(value)
        except ArgParseError as error:
            raise ArgParseError("option --%s: %s" % (self.option, error.detail)) from None

    def __repr__(self):
        return f"field({self.__describe__()})"


class ArgumentsType(type):
    """
    metaclass of declarative argument shapes.

    every annotated class attribute (not starting with "_", not a ClassVar) becomes a Field;
    the attribute value, when present, is its default. Fields of base shapes come first.
    The class itself then implements __describe__/__convert__.
    """

    def __new__(mcs, name, bases, namespace, **options):
        cls = super().__new__(mcs, name, bases, namespace, **options)
        fields = {}
        for attribute, annotation in typing.get_type_hints(cls).items():
            if attribute.startswith("_") or typing.get_origin(annotation) is typing.ClassVar:
                continue
            fields[attribute] = Field(attribute, annotation, getattr(cls, attribute, Unset))
        cls.__fields__ = freeze(fields)
        cls.__options__ = freeze(
            {field.option: field for field in fields.values()} | {field.name: field for field in fields.values()}
        )
        return cls

    def __describe__(cls):
        return tuple(field.__describe__() for field in cls.__fields__.values())

    def __convert__(cls, value, /):
        fields = cls.__fields__

        if value is Unset:
            values = {}
        elif not isinstance(value, Mapping):
            if len(fields) != 1:
                raise ArgParseError("positional value %r needs an option name" % (value,))
            field, = fields.values()
            values = {field.name: field.convert(value)}
        else:
            tokens = getattr(value, "tokens", {})
            values = {}
            for key, object in value.items():
                if (field := cls.__options__.get(key)) is None:
                    raise ArgParseError("unknown option --%s" % key)
                raw = tokens.get(key)
                values[field.name] = field.convert(object if raw is None else raw)

        if missing := [field for name, field in fields.items() if name not in values and field.required]:
            raise ArgParseError("missing required option%s %s" % (
                "s" if len(missing) > 1 else "",
                ", ".join("--" + field.option for field in missing),
            ))

        return cls(**values)


class Arguments(metaclass=ArgumentsType):
    """
    base class of declarative argument shapes.

        class Copy(Arguments):
            source: str
            target: str
            dry_run: bool = False      # spelled --dry-run
            depth: int | None          # optional, None when not given

    instances are plain value objects: keyword construction, equality, repr, to_dict().
    """

    def __init__(self, **values):
        for name, field in type(self).__fields__.items():
            if name in values:
                value = values.pop(name)
            elif field.default is not Unset:
                value = copy.copy(field.default)
            elif isinstance(field.descriptor, Optional):
                value = None
            else:
                raise TypeError(f"{type(self).__name__}() missing value for {name!r}")
            setattr(self, name, value)
        if values:
            raise TypeError(f"{type(self).__name__}() got unexpected fields: {', '.join(values)}")

    def to_dict(self):
        return {name: getattr(self, name) for name in type(self).__fields__}

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join(f"{name}={value!r}" for name, value in self.to_dict().items()))


def _convert(shape, value, context):
    try:
        return shape.__convert__(value)
    except ArgParseError as error:
        raise ArgParseError(error.detail, **context) from None


def resolve(argv, target, /):
    """
    resolve the words of `argv` (argv[0] is the command name) into `target`.

    steps
    - nothing after the name: the target is built from Unset.
    - one word not starting with --: read as a JSON-ish literal first, and if the target
      rejects that, as the plain string.
    - otherwise: a Document is collected and converted.

    raises
    - ArgParseError listing the target's descriptors (expected) and the words given (supplied).
    """
    ensure(argv, "argv must start with the command name")
    shape = describe(target)
    name, *tokens = argv
    context = {"expected": shape.__describe__(), "supplied": tokens, "command": name}

    if not tokens:
        return _convert(shape, Unset, context)

    if len(tokens) == 1 and not tokens[0].startswith("--"):
        if (value := _positional(tokens[0])) is not Unset:
            try:
                return shape.__convert__(value)
            except ArgParseError:
                pass
        return _convert(shape, tokens[0], context)

    return _convert(shape, _collect(tokens, **context), context)


__all__ = (
    "literal",
    "Document",
    "parse",
    "render",
    "Scalar",
    "Nothing",
    "Raw",
    "Optional",
    "describe",
    "Field",
    "Arguments",
    "resolve",
)
