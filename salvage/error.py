"""Error values produced by parsers.

The engine only relies on the Error interface: merging the errors of
alternative parses that failed at the same position, relabelling, and the
constructors used by primitives and recovery strategies. Simple is the
default implementation.
"""

import abc
from typing import (
    AbstractSet,
    Any,
    FrozenSet,
    Hashable,
    Iterable,
    Optional,
    TypeVar,
)

_E = TypeVar('_E', bound='Error')


class Label:
    """An expected pattern described by name rather than by token."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f'{type(self).__qualname__}({self.name!r})'

    def __str__(self) -> str:
        return self.name

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Label):
            return self.name == other.name
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Label, self.name))


class Error(abc.ABC):
    """The interface the parsing engine needs from error values."""

    @classmethod
    @abc.abstractmethod
    def expected_input_found(
        cls: type[_E],
        span: Any,
        expected: Iterable[Optional[Hashable]],
        found: Optional[Hashable],
    ) -> _E:
        """One of the expected tokens (None meaning end of input) was
        expected, but found was found instead."""

    @classmethod
    def expected_label_found(
        cls: type[_E], span: Any, label: str, found: Optional[Hashable]
    ) -> _E:
        return cls.expected_input_found(span, (), found).with_label(label)

    @classmethod
    @abc.abstractmethod
    def unclosed_delimiter(
        cls: type[_E],
        start_span: Any,
        start: Hashable,
        span: Any,
        expected: Hashable,
        found: Optional[Hashable],
    ) -> _E:
        """The delimiter start, opened at start_span, was never closed by
        expected."""

    @abc.abstractmethod
    def with_label(self: _E, label: str) -> _E:
        """Replace what this error says was expected with label."""

    @abc.abstractmethod
    def merge(self: _E, other: _E) -> _E:
        """Combine two errors that happened at the same position."""


class SimpleReason:
    pass


class Unexpected(SimpleReason):
    def __repr__(self) -> str:
        return f'{type(self).__qualname__}()'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SimpleReason):
            return isinstance(other, Unexpected)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(Unexpected)


class Unclosed(SimpleReason):
    def __init__(self, span: Any, delimiter: Hashable) -> None:
        self.span = span
        self.delimiter = delimiter

    def __repr__(self) -> str:
        return f'{type(self).__qualname__}({self.span!r}, {self.delimiter!r})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Unclosed):
            return (self.span, self.delimiter) == (other.span, other.delimiter)
        if isinstance(other, SimpleReason):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Unclosed, self.span, self.delimiter))


class Custom(SimpleReason):
    def __init__(self, message: str) -> None:
        self.message = message

    def __repr__(self) -> str:
        return f'{type(self).__qualname__}({self.message!r})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Custom):
            return self.message == other.message
        if isinstance(other, SimpleReason):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Custom, self.message))


def describe(pattern: Optional[Hashable]) -> str:
    if pattern is None:
        return 'end of input'
    if isinstance(pattern, Label):
        return str(pattern)
    return repr(pattern)


class Simple(Error):
    """A simple error: what was expected, and what was found."""

    def __init__(
        self,
        span: Any,
        reason: SimpleReason = Unexpected(),
        expected: Iterable[Optional[Hashable]] = (),
        found: Optional[Hashable] = None,
    ) -> None:
        self.span = span
        self.reason = reason
        self.expected: FrozenSet[Optional[Hashable]] = frozenset(expected)
        self.found = found

    @classmethod
    def expected_input_found(
        cls,
        span: Any,
        expected: Iterable[Optional[Hashable]],
        found: Optional[Hashable],
    ) -> 'Simple':
        return cls(span, Unexpected(), expected, found)

    @classmethod
    def unclosed_delimiter(
        cls,
        start_span: Any,
        start: Hashable,
        span: Any,
        expected: Hashable,
        found: Optional[Hashable],
    ) -> 'Simple':
        return cls(span, Unclosed(start_span, start), [expected], found)

    @classmethod
    def custom(cls, span: Any, message: str) -> 'Simple':
        return cls(span, Custom(message))

    @property
    def labels(self) -> AbstractSet[str]:
        return {e.name for e in self.expected if isinstance(e, Label)}

    def with_label(self, label: str) -> 'Simple':
        return type(self)(self.span, self.reason, [Label(label)], self.found)

    def merge(self, other: 'Simple') -> 'Simple':
        # An unclosed delimiter says more than a plain unexpected token.
        reason = self.reason
        if not isinstance(reason, Unclosed) and isinstance(
            other.reason, Unclosed
        ):
            reason = other.reason
        return type(self)(
            self.span, reason, self.expected | other.expected, self.found
        )

    def _describe_expected(self) -> str:
        patterns = sorted(map(describe, self.expected))
        if len(patterns) == 1:
            return patterns[0]
        if len(patterns) == 2:
            return f'{patterns[0]} or {patterns[1]}'
        return f'one of {", ".join(patterns[:-1])} or {patterns[-1]}'

    def __str__(self) -> str:
        if isinstance(self.reason, Custom):
            return self.reason.message
        found = describe(self.found)
        if isinstance(self.reason, Unclosed):
            message = f'unclosed delimiter {describe(self.reason.delimiter)} (opened at {self.reason.span})'
            if self.expected:
                message += f', expected {self._describe_expected()}'
            return message + f', found {found}'
        if not self.expected:
            return f'unexpected {found}'
        return f'expected {self._describe_expected()}, found {found}'

    def __repr__(self) -> str:
        return f'{type(self).__qualname__}({self.span!r}, {self.reason!r}, {set(self.expected)!r}, {self.found!r})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Simple):
            return (self.span, self.reason, self.expected, self.found) == (
                other.span,
                other.reason,
                other.expected,
                other.found,
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.span, self.reason, self.expected, self.found))
