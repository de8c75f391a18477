"""Error recovery strategies.

Inspired by chumsky:
https://github.com/zesterer/chumsky/blob/3c8488e5973c287399632a39c56fa3f3ed48d81c/src/recovery.rs.

A strategy is attached to a parser with Parser.recover_with. When that
parser fails, the stream is rewound to where the parser started and the
strategy is asked to resynchronize the stream and produce an output.
"""

import abc
from salvage.logging import get_logger
from salvage.parser_combinators import Located, PResult, Parser
from salvage.stream import Stream
from typing import (
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

_logger = get_logger(__name__)

_T = TypeVar('_T')
_U = TypeVar('_U')


class Strategy(abc.ABC, Generic[_T, _U]):
    @abc.abstractmethod
    def recover(
        self,
        recovered_errors: List[Located],
        fatal_error: Located,
        parser: Parser[_T, _U],
        stream: Stream,
    ) -> PResult[_U]:
        """Recover from fatal_error, which parser ran into.

        recovered_errors are the errors parser recovered from before it
        failed."""


class SkipThenRetryUntil(Strategy[_T, _U]):
    """Skip one token at a time, retrying the parser after each skip, until
    the parser succeeds or one of the tokens in until would be skipped."""

    def __init__(self, until: Iterable[_T]) -> None:
        self.until: Tuple[_T, ...] = tuple(until)

    def _skip(self, stream: Stream) -> Tuple[bool, bool]:
        _, _, token = stream.next()
        if token is None or token in self.until:
            return False, False
        return True, True

    def recover(
        self,
        recovered_errors: List[Located],
        fatal_error: Located,
        parser: Parser[_T, _U],
        stream: Stream,
    ) -> PResult[_U]:
        skipped = 0
        while stream.attempt(self._skip):
            skipped += 1
            result = stream.try_parse(parser)
            if result.is_success:
                _logger.debug(
                    'recovered at {} after skipping {} tokens',
                    stream.offset,
                    skipped,
                )
                return PResult.success(
                    result.errors + [fatal_error], result.output, result.alt
                )
        _logger.debug(
            'gave up recovering at {} after skipping {} tokens',
            stream.offset,
            skipped,
        )
        return PResult.failure(recovered_errors, fatal_error)

    def __repr__(self) -> str:
        return f'{type(self).__qualname__}({list(self.until)!r})'


def skip_then_retry_until(until: Iterable[_T]) -> SkipThenRetryUntil:
    """Skip tokens until the parser matches, but never skip past any of until.

    This strategy knows nothing about the structure of the input, so it can
    produce poor errors. Use it as a last resort."""
    return SkipThenRetryUntil(until)


class NestedDelimiters(Strategy[_T, _U]):
    """Skip over a balanced group of delimiters and output a default value.

    others are other pairs of delimiters that may appear inside the group.
    They are only used to report a delimiter that is closed without having
    been opened."""

    def __init__(
        self,
        start: _T,
        end: _T,
        others: Sequence[Tuple[_T, _T]],
        default: Callable[[], _U],
    ) -> None:
        if start == end:
            raise ValueError(
                f'{type(self).__qualname__} cannot be used with identical delimiters ({start!r})'
            )
        self.start = start
        self.end = end
        self.others = list(others)
        self.default = default

    def recover(
        self,
        recovered_errors: List[Located],
        fatal_error: Located,
        parser: Parser[_T, _U],
        stream: Stream,
    ) -> PResult[_U]:
        error_type = type(fatal_error.error)
        errors = list(recovered_errors)
        balance = 0
        balance_others = [0] * len(self.others)
        starts: List[object] = []
        error: Optional[Located] = None
        while True:
            at, span, token = stream.next()
            if token is None:
                if balance == 1 and error is None:
                    if starts:
                        error = Located(
                            at,
                            error_type.unclosed_delimiter(
                                starts[-1], self.start, span, self.end, None
                            ),
                        )
                    else:
                        error = Located(
                            at,
                            error_type.expected_input_found(
                                span, [self.end], None
                            ),
                        )
                recovered = False
                break
            if token == self.start:
                balance += 1
                starts.append(span)
                is_delimiter = True
            elif token == self.end:
                balance -= 1
                if starts:
                    starts.pop()
                is_delimiter = True
            else:
                is_delimiter = False
                for i, (other_start, other_end) in enumerate(self.others):
                    if token == other_start:
                        balance_others[i] += 1
                    elif token == other_end:
                        balance_others[i] -= 1
                        if (
                            balance_others[i] < 0
                            and balance == 1
                            and error is None
                        ):
                            error = Located(
                                at,
                                error_type.unclosed_delimiter(
                                    starts[-1], self.start, span, self.end, token
                                ),
                            )
            if is_delimiter:
                if balance == 0:
                    recovered = True
                    break
                if balance < 0:
                    # Closing the group we started in is no place to resume.
                    recovered = False
                    break
            elif balance == 0:
                # Neither is a token before any opening delimiter.
                recovered = False
                break

        if error is not None:
            errors.append(error)

        if recovered:
            if not errors or fatal_error.at < errors[-1].at:
                errors.append(fatal_error)
            _logger.debug('recovered at {} by skipping delimiters', stream.offset)
            return PResult.success(errors, self.default())
        _logger.debug('gave up recovering with delimiters at {}', stream.offset)
        return PResult.failure(errors, fatal_error)

    def __repr__(self) -> str:
        return f'{type(self).__qualname__}({self.start!r}, {self.end!r}, {self.others!r}, {self.default!r})'


def nested_delimiters(
    start: _T,
    end: _T,
    others: Sequence[Tuple[_T, _T]],
    default: Callable[[], _U],
) -> NestedDelimiters[_T, _U]:
    """Search for start and end delimiters, respecting nesting.

    default produces the output used in place of the group, for example an
    error node."""
    return NestedDelimiters(start, end, others, default)
