"""
Argtree resolver: turn a flat token list into a Result for one grammar node.

How a parse proceeds
- setup
  • copy the node's positionals into a deque and its options into a list;
    parsing only consumes those copies, the grammar itself is never touched.
  • start a fresh Result and the 1-based position counter used in messages.
- loop (one token at a time)
  • dash-prefixed tokens are options: "-x" looks up short names, "--name" long
    names. Toggles take no value; any other option consumes the next token.
  • other tokens feed the next positional; once positionals run out, they
    route to a sub-command (the child resolves every remaining token).
  • array arguments are handed back after each value so they can match again.
- post-pass
  • leftover descriptors either report MISSING_REQUIRED or get their defaults.
  • a node with sub-commands that selected none reports MISSING_COMMAND.

Faults never interrupt the scan: each is recorded into Result.errors and the
loop moves on (only a missing option value or a routing failure stops it).
"""
import difflib
import functools
from collections import deque

from .arguments import Option
from .faults import *
from .results import Result
from .values import DecodeError, Value, decode


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with English suffixes.
    """
    try:
        return (
            "first",
            "second",
            "third",
            "fourth",
            "fifth",
            "sixth",
            "seventh",
            "eighth",
            "ninth",
            "tenth",
        )[number - 1]
    except IndexError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}{ {1: 'st', 2: 'nd', 3: 'rd'}.get(number % 10, 'th') }"


def _kind(argument):
    return "option" if isinstance(argument, Option) else "positional"


class Resolver:
    """
    Single-use scanner binding one grammar node to one token list.

    The resolver for a sub-command is created on the fly with the tokens left
    after the sub-command name and the position that name was found at, so
    every message keeps pointing at the user's original command line.
    """

    def __init__(self, grammar, /, *, index=1):
        self._grammar = grammar
        self._index = index
        self._tokens = deque()
        self._positionals = deque(grammar.positionals)
        self._options = list(grammar.options)
        self._result = Result(grammar)

    @property
    def route(self):
        return " ".join(step.name for step in self._grammar.path)

    def _record(self, fault):
        self._result._record(fault)

    def resolve(self, tokens, /):
        """
        Scan the tokens, run the post-pass and return the Result.
        """
        self._tokens.extend(tokens)

        while self._tokens:
            token = self._tokens.popleft()

            if token.startswith("-"):
                if not self._resolve_option(token):
                    break
            elif self._positionals:
                positional = self._positionals.popleft()
                self._consume(positional, token, self._index, self._positionals.appendleft)
            elif self._grammar.children:
                self._route(token)
                break
            else:
                self._record(UnexpectedPositionalError(
                    "unexpected positional %r at %s position, nothing left to match" % (token, _ordinal(self._index)),
                    title="unexpected positional",
                    code=FaultCode.UNEXPECTED_POSITIONAL,
                    grammar=self._grammar,
                    token=token,
                    index=self._index,
                    hint="remove this extra value; every positional of '%s' already has one" % self.route,
                ))
            self._index += 1

        self._finalize()
        return self._result

    def _resolve_option(self, token):
        """
        Handle one dash-prefixed token; return False when scanning must stop.
        """
        start = self._index
        option = next((option for option in self._options if option.matches(token)), None)

        if option is None:
            if any(option.matches(token) for option in self._grammar.options):
                hint = "%r was already given; it can only be used once" % token
            else:
                spellings = [
                    spelling
                    for option in self._grammar.options
                    for spelling in (
                        option.short_name and "-" + option.short_name,
                        option.long_name and "--" + option.long_name,
                    )
                    if spelling
                ]
                try:
                    hint = "did you mean %r?" % difflib.get_close_matches(token, spellings, 1)[0]
                except IndexError:
                    hint = "check the spelling; '%s' has no such option" % self.route
            self._record(UnknownOptionError(
                "unrecognized option %r at %s position" % (token, _ordinal(start)),
                title="unknown option",
                code=FaultCode.UNKNOWN_OPTION,
                grammar=self._grammar,
                token=token,
                index=start,
                hint=hint,
            ))
            return True

        self._options.remove(option)

        if option.is_toggle:
            default = decode(option.default_values[0], option.data_type)
            self._insert(option, default._replace(payload=not default.payload), start, None)
            return True

        if not self._tokens:
            self._record(MissingValueError(
                "no value provided for option %r at %s position" % (option.name, _ordinal(start)),
                title="missing option value",
                code=FaultCode.MISSING_VALUE,
                grammar=self._grammar,
                argument=option,
                index=start,
                hint="pass a %s value right after %r" % (option.data_type.kind, token),
            ))
            return False

        self._index += 1
        self._consume(option, self._tokens.popleft(), self._index, self._options.append)
        return True

    def _consume(self, argument, raw, index, reinsert):
        """
        Decode a raw value for an argument and store it.

        Array arguments are handed back through `reinsert` so they can match
        again; an argument whose value fails to decode is not handed back.
        """
        try:
            value = decode(raw, argument.data_type)
        except DecodeError as exception:
            self._record(InvalidValueError(
                "invalid value %r for %s %r at %s position" % (raw, _kind(argument), argument.name, _ordinal(index)),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                grammar=self._grammar,
                argument=argument,
                token=raw,
                index=index,
                hint=str(exception),
            ))
            return
        self._insert(argument, value, index, reinsert if argument.is_array else None)

    def _insert(self, argument, value, index, reinsert):
        assert isinstance(value, Value)
        destination = argument.destination

        if argument.is_array:
            self._result._arrays.setdefault(destination, []).append(value)
            if reinsert is not None:
                reinsert(argument)
        elif destination in self._result._scalars:
            self._record(DuplicateInsertionError(
                "%s %r at %s position was already given a value" % (_kind(argument), argument.name, _ordinal(index)),
                title="duplicate value",
                code=FaultCode.DUPLICATE_INSERTION,
                grammar=self._grammar,
                argument=argument,
                index=index,
                hint="give %r a single value" % argument.name,
            ))
        else:
            self._result._scalars[destination] = value

    def _route(self, token):
        """
        Hand every remaining token to the sub-command named `token`.
        """
        try:
            child = self._grammar.children[token]
        except KeyError:
            suggestions = difflib.get_close_matches(token, self._grammar.children.keys(), 5)
            try:
                hint = "did you mean %r?" % suggestions[0]
            except IndexError:
                hint = "available commands: %s" % ", ".join(map(repr, self._grammar.children))
            self._record(UnknownCommandError(
                "unknown command %r at %s position" % (token, _ordinal(self._index)),
                title="unknown command",
                code=FaultCode.UNKNOWN_COMMAND,
                grammar=self._grammar,
                token=token,
                index=self._index,
                suggestions=suggestions,
                hint=hint,
            ))
            return

        tokens, self._tokens = self._tokens, deque()
        self._result._select(token, Resolver(child, index=self._index + 1).resolve(tokens))

    def _finalize(self):
        """
        Report missing required arguments, apply defaults and check routing.
        """
        for argument in (*self._positionals, *self._options):
            if argument.destination in self._result._arrays:
                continue
            if argument.is_required:
                self._record(MissingRequiredError(
                    "missing required argument %r" % argument.name,
                    title="missing required %s" % _kind(argument),
                    code=FaultCode.MISSING_REQUIRED,
                    grammar=self._grammar,
                    argument=argument,
                    hint="'%s' needs a %s value for %r" % (self.route, argument.data_type.kind, argument.name),
                ))
                continue
            for raw in argument.default_values:
                self._insert(argument, decode(raw, argument.data_type), self._index, None)

        if self._grammar.children and self._result.selected is None:
            self._record(MissingCommandError(
                "missing command for %r" % self.route,
                title="missing command",
                code=FaultCode.MISSING_COMMAND,
                grammar=self._grammar,
                hint="choose one of: %s" % ", ".join(map(repr, self._grammar.children)),
            ))


__all__ = (
    "Resolver",
)
