"""Token streams.

A stream is a cursor over an iterable of (token, span) pairs. Tokens are
pulled from the underlying iterable lazily and buffered so that the cursor
can be rewound. The end of input is reported as a token of None, so None is
never a valid token.
"""

from salvage.span import Span, SupportsSpan
from typing import (
    Callable,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

_T = TypeVar('_T')
_S = TypeVar('_S', bound=SupportsSpan)
_R = TypeVar('_R')


class Stream(Generic[_T, _S]):
    def __init__(self, tokens: Iterable[Tuple[_T, _S]], eoi: _S) -> None:
        """Create a stream.

        eoi is the span reported for the end of input."""
        self._tokens: Iterator[Tuple[_T, _S]] = iter(tokens)
        self._buffer: List[Tuple[_T, _S]] = []
        self._offset = 0
        self._eoi = eoi

    @classmethod
    def from_text(
        cls, text: str, context: Optional[Hashable] = None
    ) -> 'Stream[str, Span]':
        """Create a stream that yields each character of text as a token."""
        return cls(
            (
                (char, Span(i, i + 1, context))  # type: ignore
                for i, char in enumerate(text)
            ),
            Span(len(text), len(text), context),  # type: ignore
        )

    @classmethod
    def from_tokens(cls, tokens: Sequence[_T]) -> 'Stream[_T, Span]':
        """Create a stream whose spans are the indices of the tokens."""
        return cls(
            ((token, Span(i, i + 1)) for i, token in enumerate(tokens)),  # type: ignore
            Span(len(tokens), len(tokens)),  # type: ignore
        )

    @property
    def offset(self) -> int:
        return self._offset

    def save(self) -> int:
        return self._offset

    def revert(self, offset: int) -> None:
        self._offset = offset

    def _pull(self, offset: int) -> Optional[Tuple[_T, _S]]:
        while len(self._buffer) <= offset:
            pair = next(self._tokens, None)
            if pair is None:
                return None
            self._buffer.append(pair)
        return self._buffer[offset]

    def _span_at(self, offset: int) -> _S:
        pair = self._pull(offset)
        return self._eoi if pair is None else pair[1]

    def peek(self) -> Tuple[int, _S, Optional[_T]]:
        """Return the current token without consuming it."""
        at = self._offset
        pair = self._pull(at)
        if pair is None:
            return at, self._eoi, None
        return at, pair[1], pair[0]

    def next(self) -> Tuple[int, _S, Optional[_T]]:
        """Consume the current token.

        Returns its position, its span and the token itself, or None as the
        token once input is exhausted. The cursor never moves past the end of
        input."""
        at, span, token = self.peek()
        if token is not None:
            self._offset += 1
        return at, span, token

    def at_end(self) -> bool:
        return self.peek()[2] is None

    def attempt(self, probe: Callable[['Stream[_T, _S]'], Tuple[bool, _R]]) -> _R:
        """Run a speculative probe.

        probe returns (commit, output). When commit is false, the input the
        probe consumed is given back."""
        before = self.save()
        commit, output = probe(self)
        if not commit:
            self.revert(before)
        return output

    def try_parse(self, op: Callable[['Stream[_T, _S]'], _R]) -> _R:
        """Run op, rewinding the cursor if op fails fatally.

        op must return a PResult."""
        before = self.save()
        result = op(self)
        if not result.is_success:  # type: ignore
            self.revert(before)
        return result

    def span_since(self, start: int) -> _S:
        """The span covering everything consumed since position start."""
        first = self._span_at(start)
        if self._offset <= start:
            return first.with_range(first.start, first.start)
        last = self._span_at(self._offset - 1)
        return first.with_range(first.start, last.end)

    def __repr__(self) -> str:
        return f'{type(self).__qualname__}(offset={self._offset!r}, buffered={len(self._buffer)!r})'
