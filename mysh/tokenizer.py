r"""
mysh tokenizer: split one line of input into words (POSIX shell word-splitting subset).

Rules
- blanks (space, tab, newline) outside quotes separate words.
- outside quotes a backslash takes the next character literally; backslash-newline is a
  line continuation and disappears.
- single quotes: everything is literal up to the closing quote.
- double quotes: everything is literal except a backslash, which escapes only $ ` " \ and
  newline (swallowed); before any other character the backslash is kept.
- end of input inside quotes raises UnclosedQuoteError ("missing closing quote"); anywhere
  else it flushes the pending word, and a trailing lone backslash is kept as is.

Nothing but the line itself is read or written, so tokenize() can be called from anywhere.

    >>> tokenize('ls -l "my files" \\$HOME')
    ['ls', '-l', 'my files', '$HOME']
"""
import shlex
from enum import Enum, auto

from .faults import UnclosedQuoteError

_BLANKS = frozenset(" \t\n")
_DOUBLE_QUOTED_ESCAPES = frozenset('$`"\\')


class State(Enum):
    DELIMITER = auto()                # between words
    BACKSLASH = auto()                # after a backslash, before a word started
    UNQUOTED = auto()                 # inside an unquoted word
    UNQUOTED_BACKSLASH = auto()       # after a backslash inside an unquoted word
    SINGLE_QUOTED = auto()            # inside '...'
    DOUBLE_QUOTED = auto()            # inside "..."
    DOUBLE_QUOTED_BACKSLASH = auto()  # after a backslash inside "..."


def tokenize(line, /):
    """
    split `line` into a list of words.

    raises
    - TypeError when line is not a string.
    - UnclosedQuoteError when a quoted word is not closed before the end of the line.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")

    words = []
    word = []
    state = State.DELIMITER

    for char in line:
        match state:
            case State.DELIMITER:
                if char == "'":
                    state = State.SINGLE_QUOTED
                elif char == '"':
                    state = State.DOUBLE_QUOTED
                elif char == "\\":
                    state = State.BACKSLASH
                elif char not in _BLANKS:
                    word.append(char)
                    state = State.UNQUOTED

            case State.BACKSLASH:
                if char == "\n":
                    state = State.DELIMITER
                else:
                    word.append(char)
                    state = State.UNQUOTED

            case State.UNQUOTED:
                if char == "'":
                    state = State.SINGLE_QUOTED
                elif char == '"':
                    state = State.DOUBLE_QUOTED
                elif char == "\\":
                    state = State.UNQUOTED_BACKSLASH
                elif char in _BLANKS:
                    words.append("".join(word))
                    word.clear()
                    state = State.DELIMITER
                else:
                    word.append(char)

            case State.UNQUOTED_BACKSLASH:
                if char != "\n":
                    word.append(char)
                state = State.UNQUOTED

            case State.SINGLE_QUOTED:
                if char == "'":
                    state = State.UNQUOTED
                else:
                    word.append(char)

            case State.DOUBLE_QUOTED:
                if char == '"':
                    state = State.UNQUOTED
                elif char == "\\":
                    state = State.DOUBLE_QUOTED_BACKSLASH
                else:
                    word.append(char)

            case State.DOUBLE_QUOTED_BACKSLASH:
                if char in _DOUBLE_QUOTED_ESCAPES:
                    word.append(char)
                elif char != "\n":
                    word.append("\\")
                    word.append(char)
                state = State.DOUBLE_QUOTED

    # end of input
    match state:
        case State.SINGLE_QUOTED | State.DOUBLE_QUOTED | State.DOUBLE_QUOTED_BACKSLASH:
            raise UnclosedQuoteError(line=line)
        case State.BACKSLASH | State.UNQUOTED_BACKSLASH:
            word.append("\\")
            words.append("".join(word))
        case State.UNQUOTED:
            words.append("".join(word))

    return words


def join(words, /):
    """
    quote and join words into a line that tokenize() splits back into the same words.
    """
    return " ".join(map(shlex.quote, words))


__all__ = (
    "State",
    "tokenize",
    "join",
)
