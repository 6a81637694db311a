"""
mysh exception traces: the presentable record of a failure.

An ExceptionTrace holds
- message: primary description of the failure.
- sources: descriptions of the underlying causes, in chain order (outermost cause first).
- frames: stack frames in captured order (outermost first), each a Frame(function, file, line)
  where function is "module.qualname" (e.g. "mysh.shell.Shell.dispatch").
- filtered_range: (start, end) function names bounding the frames worth showing.

Frame filtering (filtered_frames)
- frames up to and including the first one named exactly `start` are skipped
  (no start: filtering begins with the first frame);
- frames of the invariant helpers in NOISE are always skipped;
- iteration stops at the first frame whose name starts with `end`.
The result is a generator of (index, frame) pairs, rebuilt from the stored frames on every call.
"""
import sys
import traceback
from typing import NamedTuple

from rich.console import Group
from rich.text import Text

from .utils import palette

# Frames of the helpers that raise on violated invariants; they never explain a failure.
NOISE = frozenset({
    "mysh.faults.ensure",
    "mysh.faults.unwrap",
})


class Frame(NamedTuple):
    function: str
    file: str | None = None
    line: int | None = None

    @classmethod
    def of(cls, frame, line, /):
        """build a Frame from a live frame object and its current line."""
        code = frame.f_code
        module = frame.f_globals.get("__name__")
        return cls(f"{module}.{code.co_qualname}" if module else code.co_qualname, code.co_filename, line)

    def is_stdlib(self):
        """True when the frame belongs to a standard library module."""
        return self.function.partition(".")[0] in sys.stdlib_module_names


class ExceptionTrace:
    __slots__ = ("message", "sources", "frames", "filtered_range")

    def __init__(self, message=None, sources=(), frames=(), filtered_range=(None, None)):
        start, end = filtered_range
        self.message = message
        self.sources = tuple(sources)
        self.frames = tuple(frames)
        self.filtered_range = (start, end)

    @classmethod
    def capture(cls, error, /, *, filtered_range=(None, None)):
        """
        build the trace of any exception.

        - declared errors (anything with to_trace()) describe themselves;
        - other exceptions use their traceback frames and their whole cause chain.
        """
        if callable(getattr(error, "to_trace", None)):
            return error.to_trace(filtered_range=filtered_range)
        frames = (Frame.of(frame, line) for frame, line in traceback.walk_tb(error.__traceback__))
        return cls(cls.describe(error), cls.chain(error), frames, filtered_range)

    @staticmethod
    def describe(error, /):
        """one-line description of an exception."""
        from .faults import ShellError

        if isinstance(error, ShellError):
            return error.message
        text = str(error).partition("\n")[0]
        return f"{type(error).__name__}: {text}" if text else type(error).__name__

    @staticmethod
    def chain(error, /):
        """descriptions of the causes of `error`, stopping at the first layer without a cause."""
        sources = []
        seen = {id(error)}
        layer = error
        while True:
            layer = layer.__cause__ if layer.__cause__ is not None else (
                None if layer.__suppress_context__ else layer.__context__
            )
            if layer is None or id(layer) in seen:
                break
            seen.add(id(layer))
            sources.append(ExceptionTrace.describe(layer))
        return tuple(sources)

    def filtered_frames(self):
        start, end = self.filtered_range
        started = start is None
        for index, frame in enumerate(self.frames):
            if not started:
                started = frame.function == start
                continue
            if end is not None and frame.function.startswith(end):
                break
            if frame.function in NOISE:
                continue
            yield index, frame

    def to_dict(self):
        """JSON-ready representation."""
        return {
            "message": self.message,
            "sources": list(self.sources),
            "frames": [frame._asdict() for frame in self.frames],
            "filtered_range": list(self.filtered_range),
        }

    def render(self, *, colorful=True):
        styler = palette({
            "trace-message": "bold #FF4DA6",
            "trace-label": "bold #FFFFFF",
            "source-index": "#FFB400",
            "source": "#C8C8D0",
            "frame-index": "#6B6F7A",
            "frame-function": "bold #36C5F0",
            "frame-location": "#9CA3AF",
        }, colorful)

        renders = [Text(self.message or "unknown error", styler("trace-message"))]

        if self.sources:
            sources = Text.assemble(Text("caused by", styler("trace-label")), ":")
            for index, source in enumerate(self.sources):
                sources.append("\n").append(f"  {index}: ", styler("source-index")).append(source, styler("source"))
            renders.append(sources)

        frames = Text()
        for index, frame in self.filtered_frames():
            if frames:
                frames.append("\n")
            frames.append(f"  {index:>3}: ", styler("frame-index")).append(frame.function, styler("frame-function"))
            if frame.file:
                location = frame.file if frame.line is None else f"{frame.file}:{frame.line}"
                frames.append("\n").append(" " * 9).append(f"at {location}", styler("frame-location"))
        if frames:
            renders.append(Text.assemble(Text("frames", styler("trace-label")), ":\n", frames))

        return Group(*renders)

    def __rich__(self):
        return self.render()

    def __repr__(self):
        return "exception-trace(message=%r, sources=%r, frames=<%d>, filtered_range=%r)" % (
            self.message, self.sources, len(self.frames), self.filtered_range
        )


__all__ = (
    "NOISE",
    "Frame",
    "ExceptionTrace",
)
