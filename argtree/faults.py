"""
Argtree faults (grammar errors and resolution faults) and rendering.

Scope
- GrammarError and its subclasses: construction-time faults. A malformed
  grammar is a programming mistake, so these are raised immediately by the
  registration API and never collected.
- FaultCode: canonical, stable numeric identifiers for every parse-time fault.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- ResolutionFault: base type for parse-time faults. The resolver never raises
  them; it appends them to Result.errors and keeps scanning. Each fault knows
  how to render itself with rich in a friendly, lowercased, actionable way.
- ResolutionExit: exception group bundling the faults of a failed result, for
  callers that prefer raising over inspecting Result.errors.

UX goals
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- Presentation flags (colorful, fancy) come from the grammar that produced the
  fault; hosts may remap codes to labels through __codes__ in __main__.
- Printing faults and choosing an exit status is left to the caller.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class GrammarError(ValueError):
    """
    base class for every construction-time (malformed grammar) fault.
    """


class OccupiedDestinationError(GrammarError): ...
class OccupiedNameError(GrammarError): ...
class MalformedNameError(GrammarError): ...
class InvalidDefaultError(GrammarError): ...
class ConflictingSettingsError(GrammarError): ...
class PositionalOrderError(GrammarError): ...
class SubCommandConflictError(GrammarError): ...
class SealedGrammarError(GrammarError): ...


class FaultCode(IntEnum):
    """
    canonical fault codes used by the resolver (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, MISSING_COMMAND
    - options (1111x)
      • UNKNOWN_OPTION, MISSING_VALUE
    - positionals (1112x)
      • UNEXPECTED_POSITIONAL
    - values and requiredness (1113x)
      • INVALID_VALUE, MISSING_REQUIRED
    - internal consistency (1119x)
      • DUPLICATE_INSERTION
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101
    MISSING_COMMAND             = 11102

    # --- option errors ---
    UNKNOWN_OPTION              = 11111
    MISSING_VALUE               = 11112

    # --- positional errors ---
    UNEXPECTED_POSITIONAL       = 11121

    # --- value errors ---
    INVALID_VALUE               = 11131
    MISSING_REQUIRED            = 11132

    # --- internal errors ---
    DUPLICATE_INSERTION         = 11191

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ResolutionFault(Exception):
    """
    one parse-time fault, accumulated into Result.errors.

    options
    - code: FaultCode, title: str, hint: str (always present)
    - grammar: the Grammar node that recorded the fault (drives presentation)
    - any context the reporter may want to show (token, argument, index, ...)
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options["code"]

    def __str__(self):
        return self.message or ""

    def __eq__(self, other):
        if not isinstance(other, ResolutionFault):
            return NotImplemented
        return (type(self), self.message, self.code) == (type(other), other.message, other.code)

    def __hash__(self):
        return hash((type(self), self.message, self.code))

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r}, code={self.code.name})"

    def __rich__(self):
        main = __import__("__main__")
        grammar = self.options.get("grammar")
        colorful = getattr(grammar, "colorful", False)
        fancy = getattr(grammar, "fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        prog = text(getattr(main, "__prog__", " ".join(step.name for step in getattr(grammar, "path", ()))), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.options["title"].title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options["hint"], "hint"))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")
        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(ResolutionFault): ...
class MissingValueError(ResolutionFault): ...
class UnexpectedPositionalError(ResolutionFault): ...
class InvalidValueError(ResolutionFault): ...
class MissingRequiredError(ResolutionFault): ...
class DuplicateInsertionError(ResolutionFault): ...
class UnknownCommandError(ResolutionFault): ...
class MissingCommandError(ResolutionFault): ...


class ResolutionExit(ExceptionGroup):
    """
    group of the faults collected by one parse (children included).
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad input", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad input", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        grammar = self.options.get("grammar")
        colorful = getattr(grammar, "colorful", False)
        style = "bold #FF4DA6" if colorful else ""
        name = " ".join(step.name for step in getattr(grammar, "path", ()))

        header = Text.assemble("[ ", name, " — ", Text(self.message.title(), style), " ]")

        if getattr(grammar, "fancy", False):
            return Panel(Group(*self.exceptions), title=header, title_align="left")
        return Group(header, *self.exceptions)


__all__ = (
    "GrammarError",
    "OccupiedDestinationError",
    "OccupiedNameError",
    "MalformedNameError",
    "InvalidDefaultError",
    "ConflictingSettingsError",
    "PositionalOrderError",
    "SubCommandConflictError",
    "SealedGrammarError",
    "FaultCode",
    "ResolutionFault",
    "UnknownOptionError",
    "MissingValueError",
    "UnexpectedPositionalError",
    "InvalidValueError",
    "MissingRequiredError",
    "DuplicateInsertionError",
    "UnknownCommandError",
    "MissingCommandError",
    "ResolutionExit",
)
