"""Parsers that match single tokens, or no tokens at all.

A primitive consumes the token it looks at even when it fails; the
combinators that backtrack rewind the stream themselves. Each primitive
builds its errors with the error class it is given.
"""

from salvage.error import Error, Simple
from salvage.parser_combinators import Located, PResult, Parser
from salvage.stream import Stream
from typing import (
    Any,
    Callable,
    Collection,
    List,
    Sequence,
    Type,
    TypeVar,
    Union,
)

T = TypeVar('T')
U = TypeVar('U')


def just(token: T, error: Type[Error] = Simple) -> Parser[T, T]:
    """Match exactly token."""

    @Parser
    def parser(stream: Stream) -> PResult[T]:
        at, span, found = stream.next()
        if found is not None and found == token:
            return PResult.success([], found)
        return PResult.failure(
            [], Located(at, error.expected_input_found(span, [token], found))
        )

    return parser


def seq(tokens: Sequence[T], error: Type[Error] = Simple) -> Parser[T, List[T]]:
    """Match each of tokens, in order."""
    tokens = list(tokens)

    @Parser
    def parser(stream: Stream) -> PResult[List[T]]:
        for token in tokens:
            at, span, found = stream.next()
            if found is None or found != token:
                return PResult.failure(
                    [],
                    Located(at, error.expected_input_found(span, [token], found)),
                )
        return PResult.success([], list(tokens))

    return parser


def one_of(tokens: Collection[T], error: Type[Error] = Simple) -> Parser[T, T]:
    tokens = list(tokens)

    @Parser
    def parser(stream: Stream) -> PResult[T]:
        at, span, found = stream.next()
        if found is not None and found in tokens:
            return PResult.success([], found)
        return PResult.failure(
            [], Located(at, error.expected_input_found(span, tokens, found))
        )

    return parser


def none_of(tokens: Collection[T], error: Type[Error] = Simple) -> Parser[T, T]:
    tokens = list(tokens)

    @Parser
    def parser(stream: Stream) -> PResult[T]:
        at, span, found = stream.next()
        if found is not None and found not in tokens:
            return PResult.success([], found)
        return PResult.failure(
            [], Located(at, error.expected_input_found(span, [], found))
        )

    return parser


def filter(
    predicate: Callable[[T], bool], error: Type[Error] = Simple
) -> Parser[T, T]:
    """Match any token that satisfies predicate."""

    @Parser
    def parser(stream: Stream) -> PResult[T]:
        at, span, found = stream.next()
        if found is not None and predicate(found):
            return PResult.success([], found)
        return PResult.failure(
            [], Located(at, error.expected_input_found(span, [], found))
        )

    return parser


def filter_map(
    fn: Callable[[Any, T], Union[U, Error]], error: Type[Error] = Simple
) -> Parser[T, U]:
    """Match a token and transform it with fn(span, token).

    fn rejects the token by returning an error instead of an output."""

    @Parser
    def parser(stream: Stream) -> PResult[U]:
        at, span, found = stream.next()
        if found is None:
            return PResult.failure(
                [], Located(at, error.expected_input_found(span, [], None))
            )
        output = fn(span, found)
        if isinstance(output, Error):
            return PResult.failure([], Located(at, output))
        return PResult.success([], output)

    return parser


def any_token(error: Type[Error] = Simple) -> Parser[T, T]:
    return filter(lambda _: True, error)


def end(error: Type[Error] = Simple) -> Parser[Any, None]:
    """Match the end of input."""

    @Parser
    def parser(stream: Stream) -> PResult[None]:
        at, span, found = stream.next()
        if found is None:
            return PResult.success([], None)
        return PResult.failure(
            [], Located(at, error.expected_input_found(span, [None], found))
        )

    return parser


def empty() -> Parser[Any, None]:
    """Match nothing, successfully."""

    @Parser
    def parser(stream: Stream) -> PResult[None]:
        return PResult.success([], None)

    return parser
