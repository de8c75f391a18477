from typing import Hashable, Optional, TypeVar
from typing_extensions import Protocol

_S = TypeVar('_S', bound='SupportsSpan')


class SupportsSpan(Protocol):
    """What the engine needs from a span type.

    Spans are opaque to the parsers: they are only attached to errors and
    handed to map_with_span.
    """

    @property
    def start(self) -> int:
        ...

    @property
    def end(self) -> int:
        ...

    def with_range(self: _S, start: int, end: int) -> _S:
        ...


class Span:
    """A half-open range of the input, optionally tagged with a context.

    The context is usually a file name.
    """

    def __init__(
        self, start: int, end: int, context: Optional[Hashable] = None
    ) -> None:
        if end < start:
            raise ValueError(f'span ends before it starts: {start}..{end}')
        self._start = start
        self._end = end
        self.context = context

    @property
    def start(self) -> int:
        return self._start

    @property
    def end(self) -> int:
        return self._end

    def with_range(self, start: int, end: int) -> 'Span':
        return Span(start, end, self.context)

    def union(self, other: 'Span') -> 'Span':
        return Span(
            min(self.start, other.start), max(self.end, other.end), self.context
        )

    def __len__(self) -> int:
        return self.end - self.start

    def __contains__(self, offset: object) -> bool:
        return isinstance(offset, int) and self.start <= offset < self.end

    def __repr__(self) -> str:
        if self.context is None:
            return f'{type(self).__qualname__}({self.start!r}, {self.end!r})'
        return f'{type(self).__qualname__}({self.start!r}, {self.end!r}, {self.context!r})'

    def __str__(self) -> str:
        return f'{self.start}..{self.end}'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Span):
            return (self.start, self.end, self.context) == (
                other.start,
                other.end,
                other.context,
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.start, self.end, self.context))
