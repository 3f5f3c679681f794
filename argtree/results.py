"""
Argtree results: the typed output of one parse.

A Result holds, for the grammar node it was produced by:
- scalars: destination → Value, for scalar arguments,
- arrays:  destination → list of Value, for array arguments,
- the selected sub-command (command name and child Result), if any,
- errors:  the ordered ResolutionFault records collected while resolving.

A destination lives in at most one of scalars/arrays. Values are written by
the resolver only; from the outside a Result is read-only.

Reading values
- result.get("count")        → 3                (plain payload)
- result.get("files")        → [PurePath(...)]  (list of payloads for arrays)
- result.get("missing", 0)   → 0
- result["count"]            → 3 (KeyError when absent)
- result.child.get("title")  → value from the selected sub-command
"""
from .faults import *
from .utils import *


class Result(metaclass=Introspective):
    """
    Typed values, sub-command selection and faults of one grammar node.
    """

    __introspectable__ = (
        "scalars",
        "arrays",
        "command",
        "child",
        "errors",
    )

    def __init__(self, grammar=None, /):
        self._grammar = grammar
        self._scalars = {}
        self._arrays = {}
        self._command = None
        self._child = None
        self._errors = []

    @property
    def grammar(self):
        return self._grammar

    @property
    def arrays(self):
        """
        Read-only view of the array values (each list copied into a tuple).
        """
        return {destination: tuple(values) for destination, values in self._arrays.items()}

    @property
    def selected(self):
        """
        The (command, child result) pair, or None when no sub-command was selected.
        """
        return (self._command, self._child) if self._child is not None else None

    @property
    def messages(self):
        """
        The error messages of this node, in order.
        """
        return [str(error) for error in self._errors]

    @property
    def ok(self):
        """
        True when neither this node nor the selected sub-command recorded faults.
        """
        return not self._errors and (self._child is None or self._child.ok)

    def faults(self):
        """
        Every fault of this node followed by those of the selected sub-command.
        """
        faults = list(self._errors)
        if self._child is not None:
            faults.extend(self._child.faults())
        return faults

    def raise_for_errors(self):
        """
        Raise a ResolutionExit grouping every fault, if there is any.
        """
        if faults := self.faults():
            raise ResolutionExit(faults, grammar=self._grammar)
        return self

    def has(self, destination, /):
        return destination in self._scalars or destination in self._arrays

    def get(self, destination, default=Unset, /):
        """
        Return the plain payload(s) stored under destination.

        Scalars yield their payload, arrays a list of payloads. Raises KeyError
        when the destination holds nothing and no default was given.
        """
        if destination in self._scalars:
            return self._scalars[destination].payload
        if destination in self._arrays:
            return [value.payload for value in self._arrays[destination]]
        if default is Unset:
            raise KeyError(destination)
        return default

    def __getitem__(self, destination, /):
        return self.get(destination)

    def __contains__(self, destination, /):
        return self.has(destination)

    def __eq__(self, other):
        if not isinstance(other, Result):
            return NotImplemented
        return (
            self._scalars == other._scalars and
            self._arrays == other._arrays and
            self._command == other._command and
            self._child == other._child and
            self._errors == other._errors
        )

    __hash__ = None

    # Writers, used by the resolver only.

    def _record(self, fault, /):
        self._errors.append(fault)

    def _select(self, command, child, /):
        self._command = command
        self._child = child


__all__ = (
    "Result",
)
