"""
Argtree grammar layer: build command-line grammars and sub-command trees.

What this module provides
- Grammar: one node of a command-line grammar. It owns
  • an ordered list of Positional descriptors,
  • an insertion-ordered list of Option descriptors,
  • named child grammars (sub-commands), and
  • a weak back-reference to its parent, used for tree-wide destination checks.

Registration
- positional(destination, data_type, **settings) → Positional
- option(names, destination, data_type, **settings) → Option
- sub_command(name, description=Unset) → Grammar
  settings: required=, default=, defaults=, description= (same as the chained
  modifiers on the returned descriptor).

Tree invariants
- Destinations are unique across the node, its ancestors and its descendants
  (sibling sub-commands may reuse a destination).
- Option names are unique per node.
- Only the last positional may be an array, optional or default-bearing, and a
  node whose last positional is such cannot host sub-commands (and vice versa).
- Once any parse started, the whole tree is sealed against registration.

Quick start
    from argtree import Grammar, Kind, DataType

    grammar = Grammar("todo")
    grammar.option("-v, --verbose", "verbose", Kind.BOOL)
    add = grammar.sub_command("add")
    add.positional("title", Kind.STRING)
    add.option("-p, --priority", "priority", Kind.INT32).default("3")

    result = grammar.parse(["add", "buy milk", "-p", "1"])
    result.command            # "add"
    result.child.get("title")  # "buy milk"
"""
import os.path
import sys
import weakref

from .arguments import Option, Positional
from .faults import *
from .resolver import Resolver
from .utils import *


def _sanitize_name(cls, name, /):
    """
    Internal: a grammar name is a non-empty string that cannot be read as an option.
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise MalformedNameError(f"{cls.__typename__} name cannot be empty")
    elif name.startswith("-"):
        raise MalformedNameError(f"{cls.__typename__} name {name!r} cannot start with a dash")
    return name


def _program_name():
    """
    Internal: derive a root grammar name from sys.argv[0], or "prog".

    Interpreter placeholders such as "-c" or "-m" (and empty names) cannot be
    sub-command-like names, so they fall back to "prog".
    """
    argv = getattr(sys, "argv", None) or [""]
    name = os.path.basename(argv[0]).strip()
    if not name or name.startswith("-"):
        return "prog"
    return name


def _attach_to_parent(self, parent):
    """
    Internal: register a new grammar under its parent.

    Enforces an open tree, unique sub-command names per parent, and a parent
    whose last positional can still be followed by a sub-command name.
    """
    parent._assert_open()
    if self.name in parent._children:
        raise OccupiedNameError(f"sub-command name {self.name!r} is already in use under {parent.name!r}")
    if parent._positionals and (last := parent._positionals[-1]).is_trailing:
        raise SubCommandConflictError(
            f"{parent.name!r} cannot have sub-commands because its last positional {last.name!r} "
            f"is an array, optional or has default values"
        )
    self._parent = weakref.ref(parent)
    parent._children[self.name] = self


class Grammar(metaclass=Introspective):
    """
    One node of a command-line grammar (the root program or a sub-command).

    Lifecycle
    - Created empty, either directly (root), through sub_command() or with
      parent=... (child; both register the child under its parent).
    - Mutated only through positional(), option(), sub_command() and the
      descriptors' chained modifiers.
    - Sealed (tree-wide) by the first parse(); the grammar can then be reused
      for any number of parses.

    Presentation flags
    - colorful / fancy drive how faults recorded against this node render with
      rich. When Unset they are inherited from the parent (or default False).
    """

    __introspectable__ = (
        "name",
        "descr",
        "positionals",
        "options",
        "children",
        "colorful",
        "fancy",
    )

    __displayable__ = (
        "name",
        "descr",
        "positionals",
        "options",
        "children",
    )

    def __init__(self, name=Unset, description=Unset, *, colorful=Unset, fancy=Unset, parent=Unset):
        if not isinstance(parent, Grammar | Unset):
            raise TypeError(f"{type(self).__typename__} 'parent' must be a grammar")
        if not isinstance(description, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'description' must be a string")
        elif isinstance(description, str) and not (description := description.strip()):
            raise ValueError(f"{type(self).__typename__} 'description' cannot be empty")

        self._name = _program_name() if name is Unset else _sanitize_name(type(self), name)
        self._descr = description
        self._positionals = []
        self._options = []
        self._children = {}
        self._parent = None
        self._sealed = False
        self._colorful = bool(coalesce(colorful, getattr(parent, "colorful", False)))
        self._fancy = bool(coalesce(fancy, getattr(parent, "fancy", False)))

        if parent:
            _attach_to_parent(self, parent)

    @property
    def parent(self):
        """
        The parent grammar, or None for a root grammar.
        """
        return self._parent() if self._parent is not None else None

    @property
    def root(self):
        """
        Return the topmost grammar of the current tree.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the ancestry from root to this grammar as a tuple.

        Convenient for user-facing routes such as 'git remote add'.
        """
        path = [grammar := self]
        while grammar.parent:
            path.append(grammar := grammar.parent)
        return tuple(reversed(path))

    @property
    def sealed(self):
        return self.root._sealed

    def __bool__(self):
        # A grammar is a node, not a container: an empty grammar is still a grammar.
        return True

    def _owns(self, destination):
        return any(argument.destination == destination for argument in (*self._positionals, *self._options))

    def _subtree_owns(self, destination):
        return self._owns(destination) or any(child._subtree_owns(destination) for child in self._children.values())

    def is_destination_occupied(self, destination, /):
        """
        Whether a destination is used by this node, one of its ancestors, or one of its descendants.
        """
        ancestor = self.parent
        while ancestor is not None:
            if ancestor._owns(destination):
                return True
            ancestor = ancestor.parent
        return self._subtree_owns(destination)

    def _assert_open(self):
        if self.sealed:
            raise SealedGrammarError(f"grammar {self.name!r} cannot change once parsing has begun")

    def _vet(self, argument, trailing, /):
        """
        Check that `argument` may hold a state whose trailing-ness is `trailing`.

        `argument` is either a new descriptor about to be appended or one this
        grammar already owns (a modifier is about to change it).
        """
        self._assert_open()
        if not isinstance(argument, Positional):
            return

        if argument not in self._positionals and self._positionals:
            last = self._positionals[-1]
            if last.is_array:
                raise PositionalOrderError(f"only the last positional can be an array (found {last.name!r})")
            if last.default_values:
                raise PositionalOrderError(f"only the last positional can have default values (found {last.name!r})")
            if last.requiredness is False:
                raise PositionalOrderError(f"only the last positional can be optional (found {last.name!r})")

        if not trailing:
            return
        if argument in self._positionals and argument is not self._positionals[-1]:
            raise PositionalOrderError(
                f"only the last positional can be an array, optional or have default values (not {argument.name!r})"
            )
        if self._children:
            raise SubCommandConflictError(
                f"positional {argument.name!r} cannot be an array, optional or have default values "
                f"because {self.name!r} has sub-commands"
            )

    def positional(self, destination, data_type, /, **settings):
        """
        Register a positional at the end of the positional sequence.

        settings: required, default, defaults, description.

        Raises GrammarError (and subclasses) when the grammar would become
        malformed; the grammar is left unchanged in that case.
        """
        self._assert_open()
        positional = Positional(self, destination, data_type, **settings)
        self._vet(positional, positional.is_trailing)
        self._positionals.append(positional)
        return positional

    def option(self, names, destination, data_type, /, **settings):
        """
        Register an option; names is "-x", "--long-name" or "-x, --long-name".

        settings: required, default, defaults, description.
        Non-array bool options are toggles and default to "false".
        """
        self._assert_open()
        option = Option(self, names, destination, data_type, **settings)
        self._vet(option, option.is_trailing)
        self._options.append(option)
        return option

    def sub_command(self, name, /, description=Unset):
        """
        Create, register and return an empty child grammar under `name`.
        """
        return type(self)(name, description, parent=self)

    def parse(self, tokens, /):
        """
        Resolve a token sequence (normally sys.argv[1:]) against this grammar.

        The tokens are copied, the tree is sealed and a Result is returned.
        Faults in the input never raise; they are collected in Result.errors.
        """
        if isinstance(tokens, str):
            raise TypeError("parse() argument must be an iterable of strings, not a string")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")

        self.root._sealed = True
        return Resolver(self).resolve(tokens)


__all__ = (
    "Grammar",
)
