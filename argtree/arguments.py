r"""
Argtree argument descriptors.

Overview
- Descriptors
  • Positional: an unnamed argument matched purely by its position.
  • Option: a named argument (-x, --long-name or both) followed by its value;
    a non-array bool option is a toggle and takes no value token.
  Descriptors are created by a Grammar (Grammar.positional / Grammar.option),
  never directly, and keep a weak reference to the grammar that owns them.

- Chained modifiers
  • required(flag=True), default(value), defaults(values), description(text)
  Each modifier validates the prospective state against the descriptor's own
  invariants and its grammar's positional rules, then applies it and returns
  the descriptor. On failure nothing changes.

Metadata (sanitized on construction)
- destination: non-empty string, unique across the grammar tree (ancestors,
  the owning node and its descendants).
- data_type: a DataType (a bare Kind means a scalar of that kind).
- requiredness: Unset | True | False. Unset means “required unless defaults
  are present”.
- default_values: tuple of raw strings, decoded eagerly to catch bad defaults.
- descr: Unset | non-empty string (kept for external help renderers).

Validation highlights
- requiredness True and non-empty defaults are mutually exclusive.
- Scalar data types accept at most one default.
- Option names: "-x", "--long-name" or "-x, --long-name", where x is one ASCII
  alphanumeric and long names match r"[A-Za-z0-9][A-Za-z0-9-]*".
- Toggle options always hold exactly one default ("false" when not given) and
  can never be required.

Quick example:
    >>> grammar = Grammar("tool")
    >>> grammar.positional("files", DataType(Kind.PATH, array=True)).required(False)
    >>> grammar.option("-n, --number", "number", Kind.INT32).default("1")
    >>> grammar.option("-v", "verbose", Kind.BOOL)  # toggle, defaults to "false"

Public API
- Classes: Argument (abstract base), Positional, Option
"""
import re
import weakref
from collections.abc import Iterable

from .faults import *
from .utils import *
from .values import DataType, DecodeError, Kind, decode

_SHORT = re.compile(r"[A-Za-z0-9]")
_LONG = re.compile(r"[A-Za-z0-9][A-Za-z0-9-]*")


def _sanitize_defaults(cls, values, /):
    """
    Internal: normalize a defaults payload into a tuple of raw strings.

    Accepts Unset (no defaults) or any non-string iterable of strings.
    """
    if values is Unset:
        return ()
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise TypeError(f"{cls.__typename__} 'defaults' must be an iterable of strings")
    values = tuple(values)
    if not all(isinstance(value, str) for value in values):
        raise TypeError(f"{cls.__typename__} 'defaults' must be an iterable of strings")
    return values


def _sanitize_description(cls, descr, /):
    """
    Internal: validate and trim a description; Unset stays Unset.
    """
    if not isinstance(descr, str | Unset):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    return descr


def _parse_names(names, /):
    """
    Internal: split an option names string into (short, long).

    Accepted forms
    - "-x"              → ("x", None)
    - "--long-name"     → (None, "long-name")
    - "-x, --long-name" → ("x", "long-name")  (spaces around the comma are optional)

    Raises
    - TypeError: names is not a string.
    - MalformedNameError: any other shape, or a name breaking the character rules.
    """
    if not isinstance(names, str):
        raise TypeError("option names must be a string")

    short = long = None
    match [part.strip() for part in names.split(",")]:
        case [part] if part.startswith("--"):
            long = part[2:]
        case [part] if part.startswith("-"):
            short = part[1:]
        case [first, second] if first.startswith("-") and not first.startswith("--") and second.startswith("--"):
            short, long = first[1:], second[2:]
        case _:
            raise MalformedNameError(f"option names {names!r} must look like '-x', '--long' or '-x, --long'")

    if short is not None and not _SHORT.fullmatch(short):
        raise MalformedNameError(f"option short name {short!r} must be a single alphanumerical character")
    if long is not None and not _LONG.fullmatch(long):
        raise MalformedNameError(
            f"option long name {long!r} must consist of alphanumerical characters and hyphens "
            f"(and start with an alphanumerical)"
        )
    return short, long


class Argument(metaclass=Introspective):
    """
    Shared behavior of positional and option descriptors.

    A descriptor is an immutable-from-outside record: its fields are exposed
    through read-only properties and only change through the chained
    modifiers, which re-validate the whole prospective state first.
    """

    __introspectable__ = (
        "name",
        "destination",
        "data_type",
        "requiredness",
        "default_values",
        "descr",
    )

    def __init__(
            self,
            grammar,
            destination,
            data_type,
            /,
            required=Unset,
            default=Unset,
            defaults=Unset,
            description=Unset
    ):
        if not isinstance(destination, str):
            raise TypeError(f"{type(self).__typename__} 'destination' must be a string")
        elif not destination.strip():
            raise MalformedNameError(f"{type(self).__typename__} 'destination' cannot be empty")
        if grammar.is_destination_occupied(destination):
            raise OccupiedDestinationError(f"destination {destination!r} is already occupied in this grammar tree")
        if not isinstance(required, bool | Unset):
            raise TypeError(f"{type(self).__typename__} 'required' must be a boolean")
        if default is not Unset and defaults is not Unset:
            raise TypeError(f"{type(self).__typename__} accepts either 'default' or 'defaults', not both")
        if default is not Unset and not isinstance(default, str):
            raise TypeError(f"{type(self).__typename__} 'default' must be a string")

        self._grammar = weakref.ref(grammar)
        self._destination = destination
        self._data_type = DataType.of(data_type)
        self._descr = _sanitize_description(type(self), description)
        self._requiredness = Unset
        self._default_values = ()

        # The descriptor is not attached yet; the grammar vets and appends it.
        self._requiredness, self._default_values = self._validate(
            required,
            (default,) if default is not Unset else _sanitize_defaults(type(self), defaults),
        )

    @property
    def grammar(self):
        """
        The Grammar node owning this descriptor (None once it was dropped).
        """
        return self._grammar()

    @property
    def is_array(self):
        return self.data_type.array

    @property
    def is_required(self):
        """
        Explicitly required, or implicitly required (requiredness unset and no defaults).
        """
        return self._requiredness is True or (self._requiredness is Unset and not self._default_values)

    @property
    def is_trailing(self):
        """
        True when this descriptor may only be the last positional of a grammar:
        it collects many values, is optional, or carries defaults.
        """
        return self._trailing(self._requiredness, self._default_values)

    def _trailing(self, requiredness, defaults):
        return self._data_type.array or requiredness is False or bool(defaults)

    def _validate(self, requiredness, defaults):
        """
        Check the descriptor's own invariants for a prospective state.

        Returns the (requiredness, defaults) pair to store.
        """
        if requiredness is True and defaults:
            raise ConflictingSettingsError(
                f"{type(self).__typename__} {self.name!r} cannot be required and have a default value simultaneously"
            )
        if not self._data_type.array and len(defaults) > 1:
            raise InvalidDefaultError(
                f"{type(self).__typename__} {self.name!r} is not an array and can only have one default value"
            )
        for value in defaults:
            try:
                decode(value, self._data_type)
            except DecodeError as exception:
                raise InvalidDefaultError(f"invalid default {value!r} for {self.name!r}: {exception}") from None
        return requiredness, defaults

    def _update(self, requiredness, defaults):
        """
        Validate a prospective state against the descriptor and its grammar, then apply it.
        """
        if (grammar := self.grammar) is None:
            raise ReferenceError(f"{type(self).__typename__} {self.name!r} no longer belongs to a grammar")
        requiredness, defaults = self._validate(requiredness, defaults)
        grammar._vet(self, self._trailing(requiredness, defaults))
        self._requiredness, self._default_values = requiredness, defaults
        return self

    def required(self, flag=True, /):
        """
        Mark the argument as required (True) or optional (False).
        """
        if not isinstance(flag, bool):
            raise TypeError(f"{type(self).__typename__} 'required' must be a boolean")
        return self._update(flag, self._default_values)

    def default(self, value, /):
        """
        Set a single raw default value.
        """
        if not isinstance(value, str):
            raise TypeError(f"{type(self).__typename__} 'default' must be a string")
        return self._update(self._requiredness, (value,))

    def defaults(self, values, /):
        """
        Set the raw default values (several only for array types; empty clears them).
        """
        return self._update(self._requiredness, _sanitize_defaults(type(self), values))

    def description(self, text, /):
        """
        Attach a short description for external help renderers.
        """
        if self.grammar is not None:
            self.grammar._assert_open()
        self._descr = _sanitize_description(type(self), text)
        return self


class Positional(Argument):
    """
    Unnamed argument matched by position.

    Only the last positional of a grammar may collect many values, be optional
    or carry defaults, and such a positional excludes sub-commands on the same
    grammar (and vice versa).
    """

    @property
    def name(self):
        return self._destination.upper()


class Option(Argument):
    """
    Named argument introduced by "-x" and/or "--long-name".

    The value is the token that follows the name, except for toggles
    (non-array bool options): their presence yields the negation of their
    single default, without consuming a value token. Array options may be
    given many times, each occurrence contributing one value.
    """

    __introspectable__ = (
        "name",
        "short_name",
        "long_name",
        "destination",
        "data_type",
        "requiredness",
        "default_values",
        "descr",
    )

    def __init__(
            self,
            grammar,
            names,
            destination,
            data_type,
            /,
            required=Unset,
            default=Unset,
            defaults=Unset,
            description=Unset
    ):
        self._short_name, self._long_name = _parse_names(names)
        for option in grammar.options:
            if self._short_name is not None and option.short_name == self._short_name:
                raise OccupiedNameError(f"option with short name '-{self._short_name}' already exists")
            if self._long_name is not None and option.long_name == self._long_name:
                raise OccupiedNameError(f"option with long name '--{self._long_name}' already exists")

        # Toggles always carry exactly one default.
        if DataType.of(data_type) == DataType(Kind.BOOL) and default is Unset and defaults is Unset:
            if required is not True:
                default = "false"
        super().__init__(grammar, destination, data_type, required, default, defaults, description)

    @property
    def name(self):
        """
        Display name, e.g. "-n, --number", "-n" or "--number".
        """
        return ", ".join(filter(None, (
            self._short_name and "-" + self._short_name,
            self._long_name and "--" + self._long_name,
        )))

    @property
    def is_toggle(self):
        """
        Non-array bool options are toggles: presence negates their default.
        """
        return self._data_type == DataType(Kind.BOOL)

    def matches(self, token, /):
        """
        Whether a raw dash-prefixed token names this option.

        One dash selects the short name and two dashes the long name.
        """
        stripped = token.lstrip("-")
        match len(token) - len(stripped):
            case 1:
                return self._short_name is not None and stripped == self._short_name
            case 2:
                return self._long_name is not None and stripped == self._long_name
        return False

    def _validate(self, requiredness, defaults):
        if self.is_toggle:
            if requiredness is True:
                raise ConflictingSettingsError(f"toggle option {self.name!r} cannot be required")
            if len(defaults) != 1:
                raise InvalidDefaultError(f"toggle option {self.name!r} must have exactly one default value")
        return super()._validate(requiredness, defaults)


__all__ = (
    "Argument",
    "Positional",
    "Option",
)
