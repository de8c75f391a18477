"""The parsing engine.

Inspired by chumsky:
https://github.com/zesterer/chumsky/blob/3c8488e5973c287399632a39c56fa3f3ed48d81c/src/lib.rs.

A parser is a function from a stream to a PResult, wrapped in a Parser so
that it can be combined with other parsers. Parsers never raise on bad
input: failures are values, and a failure can be recovered from by
attaching a recovery strategy with Parser.recover_with.
"""

import functools
import operator
from salvage.error import Error
from salvage.logging import get_logger
from salvage.stream import Stream
from typing import (
    Any,
    Callable,
    Generator,
    Generic,
    Iterable,
    List,
    Optional,
    Sequence,
    TYPE_CHECKING,
    Tuple,
    TypeVar,
    Union,
    overload,
)

if TYPE_CHECKING:
    from salvage.parser_combinators.recovery import Strategy

_logger = get_logger(__name__)

T = TypeVar('T')
_T_co = TypeVar('_T_co', covariant=True)
_T_contra = TypeVar('_T_contra', contravariant=True)
U = TypeVar('U')
_U_co = TypeVar('_U_co', covariant=True)
V = TypeVar('V')
_A = TypeVar('_A')
_B = TypeVar('_B')
_E = TypeVar('_E', bound=Error)


class Located(Generic[_E]):
    """An error, and the position in the input where it happened.

    Positions are stream offsets, so they say how far parsing got before
    the error."""

    def __init__(self, at: int, error: _E) -> None:
        self.at = at
        self.error = error

    def max(self, other: Optional['Located[_E]']) -> 'Located[_E]':
        """Keep the error that got furthest into the input.

        Errors at the same position are merged."""
        if other is None:
            return self
        if self.at > other.at:
            return self
        if other.at > self.at:
            return other
        return Located(self.at, self.error.merge(other.error))

    def map(self, fn: Callable[[_E], Any]) -> 'Located':
        return Located(self.at, fn(self.error))

    def __repr__(self) -> str:
        return f'{type(self).__qualname__}({self.at!r}, {self.error!r})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Located):
            return (self.at, self.error) == (other.at, other.error)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.at, self.error))


def merge_alts(
    a: Optional[Located[_E]], b: Optional[Located[_E]]
) -> Optional[Located[_E]]:
    if a is not None and b is not None:
        return a.max(b)
    return a if a is not None else b


class PResult(Generic[_T_co]):
    """The outcome of running a parser.

    errors are the errors that were recovered from along the way; they must
    be reported whether or not the parse succeeded. A success carries an
    output and, possibly, alt: the furthest error that a different choice of
    branch or number of repetitions would have run into. A failure carries
    the fatal error."""

    def __init__(
        self,
        errors: List[Located],
        is_success: bool,
        output: Optional[_T_co] = None,
        alt: Optional[Located] = None,
        error: Optional[Located] = None,
    ) -> None:
        if not is_success and error is None:
            raise ValueError(
                f'{type(self).__qualname__} representing failure should have an error'
            )
        self.errors = errors
        self.is_success = is_success
        self.output = output
        self.alt = alt
        self.error = error

    @classmethod
    def success(
        cls,
        errors: List[Located],
        output: T,
        alt: Optional[Located] = None,
    ) -> 'PResult[T]':
        return cls(errors, True, output, alt)

    @classmethod
    def failure(cls, errors: List[Located], error: Located) -> 'PResult[Any]':
        return cls(errors, False, error=error)

    def __repr__(self) -> str:
        if self.is_success:
            return f'{type(self).__qualname__}.success({self.errors!r}, {self.output!r}, {self.alt!r})'
        return f'{type(self).__qualname__}.failure({self.errors!r}, {self.error!r})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PResult):
            return (
                self.errors,
                self.is_success,
                self.output,
                self.alt,
                self.error,
            ) == (
                other.errors,
                other.is_success,
                other.output,
                other.alt,
                other.error,
            )
        return NotImplemented

    __hash__ = None  # type: ignore


class ParseError(Exception):
    """Raised by Parser.parse when the input has errors."""

    def __init__(self, errors: Sequence[Error]) -> None:
        super().__init__('\n'.join(map(str, errors)))
        self.errors = list(errors)


class _Absent:
    def __repr__(self) -> str:
        return 'ABSENT'


# Output of delimited_by when the input between the delimiters could not be
# parsed and was skipped. Unlike None, it is never a real parser output.
ABSENT: Any = _Absent()


def _as_stream(source: Union[Stream, str, Iterable]) -> Stream:
    if isinstance(source, Stream):
        return source
    if isinstance(source, str):
        return Stream.from_text(source)
    return Stream.from_tokens(list(source))


def _chain_items(output: object) -> List[Any]:
    if output is None:
        return []
    if isinstance(output, (list, tuple)):
        return list(output)
    return [output]


class Parser(Generic[_T_contra, _U_co]):
    """A parser of _T_contra tokens that outputs _U_co.

    Parsers only ever look one token ahead: there is no backtracking except
    where a combinator (or_, or_not, repeated, recovery) explicitly rewinds
    the stream.
    """

    def __init__(self, f: Callable[[Stream], PResult[_U_co]]) -> None:
        self._f = f

    def __call__(self, stream: Stream) -> PResult[_U_co]:
        return self._f(stream)

    def _run(
        self, source: Union[Stream, str, Iterable]
    ) -> Tuple[bool, Optional[_U_co], List[Error]]:
        result = self(_as_stream(source))
        errors = list(result.errors)
        if not result.is_success:
            assert result.error is not None
            errors.append(result.error)
        return result.is_success, result.output, [e.error for e in errors]

    def parse_recovery(
        self, source: Union[Stream, str, Iterable]
    ) -> Tuple[Optional[_U_co], List[Error]]:
        """Parse source, producing an output if possible, and all the errors
        that were found along the way."""
        _, output, errors = self._run(source)
        return output, errors

    def parse(self, source: Union[Stream, str, Iterable]) -> _U_co:
        """Parse source, raising ParseError if there were any errors."""
        succeeded, output, errors = self._run(source)
        if errors:
            _logger.debug('parse failed with {} errors', len(errors))
            raise ParseError(errors)
        assert (
            succeeded
        ), 'Parsing failed, but no errors were emitted. This is troubling, to say the least.'
        return output  # type: ignore

    def map(self, fn: Callable[[_U_co], V]) -> 'Parser[_T_contra, V]':
        @Parser
        def new_parser(stream: Stream) -> PResult[V]:
            result = self(stream)
            if result.is_success:
                return PResult.success(
                    result.errors, fn(result.output), result.alt  # type: ignore
                )
            return result  # type: ignore

        return new_parser

    def map_with_span(
        self, fn: Callable[[_U_co, Any], V]
    ) -> 'Parser[_T_contra, V]':
        """Like map, but fn also receives the span of the matched input."""

        @Parser
        def new_parser(stream: Stream) -> PResult[V]:
            start = stream.save()
            result = self(stream)
            if result.is_success:
                span = stream.span_since(start)
                return PResult.success(
                    result.errors, fn(result.output, span), result.alt  # type: ignore
                )
            return result  # type: ignore

        return new_parser

    def try_map(
        self, fn: Callable[[_U_co, Any], Union[V, Error]]
    ) -> 'Parser[_T_contra, V]':
        """Like map_with_span, but fn can reject the output by returning an
        error. The error is located where this parser started."""

        @Parser
        def new_parser(stream: Stream) -> PResult[V]:
            start = stream.save()
            result = self(stream)
            if not result.is_success:
                return result  # type: ignore
            output = fn(result.output, stream.span_since(start))  # type: ignore
            if isinstance(output, Error):
                return PResult.failure(result.errors, Located(start, output))
            return PResult.success(result.errors, output, result.alt)

        return new_parser

    def map_err(
        self, fn: Callable[[Error], Error]
    ) -> 'Parser[_T_contra, _U_co]':
        """Map the error of a failure of this parser.

        Recovered errors are left alone."""

        @Parser
        def new_parser(stream: Stream) -> PResult[_U_co]:
            result = self(stream)
            if result.is_success:
                return result
            assert result.error is not None
            return PResult.failure(result.errors, result.error.map(fn))

        return new_parser

    def labelled(self, label: str) -> 'Parser[_T_contra, _U_co]':
        """Describe what this parser expects as label in its errors.

        Errors that happen after the parser has consumed input keep their
        own, more specific, description."""

        @Parser
        def new_parser(stream: Stream) -> PResult[_U_co]:
            start = stream.save()
            result = self(stream)

            def relabel(located: Located) -> Located:
                if located.at > start:
                    return located
                return located.map(lambda error: error.with_label(label))

            if result.is_success:
                alt = None if result.alt is None else relabel(result.alt)
                return PResult.success(result.errors, result.output, alt)  # type: ignore
            assert result.error is not None
            return PResult.failure(result.errors, relabel(result.error))

        return new_parser

    def to(self, value: V) -> 'Parser[_T_contra, V]':
        return self.map(lambda _: value)

    def ignored(self) -> 'Parser[_T_contra, None]':
        return self.to(None)

    def then(
        self, other: 'Parser[_T_contra, V]'
    ) -> 'Parser[_T_contra, Tuple[_U_co, V]]':
        @Parser
        def new_parser(stream: Stream) -> PResult[Tuple[_U_co, V]]:
            first = self(stream)
            if not first.is_success:
                return first  # type: ignore
            second = other(stream)
            errors = first.errors + second.errors
            if second.is_success:
                return PResult.success(
                    errors,
                    (first.output, second.output),
                    merge_alts(first.alt, second.alt),
                )
            assert second.error is not None
            return PResult.failure(errors, second.error.max(first.alt))

        return new_parser

    def chain(self, other: 'Parser[_T_contra, Any]') -> 'Parser[_T_contra, List[Any]]':
        """Parse this, then other, and concatenate their outputs into a list.

        Lists and tuples are spliced in, None contributes nothing, and any
        other output is added as a single item."""
        return self.then(other).map(
            lambda pair: _chain_items(pair[0]) + _chain_items(pair[1])
        )

    def __add__(self, other: 'Parser[_T_contra, Any]') -> 'Parser[_T_contra, List[Any]]':
        return self.chain(other)

    def ignore_then(
        self, other: 'Parser[_T_contra, V]'
    ) -> 'Parser[_T_contra, V]':
        return self.then(other).map(operator.itemgetter(1))

    def __rshift__(
        self, other: 'Parser[_T_contra, V]'
    ) -> 'Parser[_T_contra, V]':
        return self.ignore_then(other)

    def then_ignore(
        self, other: 'Parser[_T_contra, Any]'
    ) -> 'Parser[_T_contra, _U_co]':
        return self.then(other).map(operator.itemgetter(0))

    def __lshift__(
        self, other: 'Parser[_T_contra, Any]'
    ) -> 'Parser[_T_contra, _U_co]':
        return self.then_ignore(other)

    def padded_by(
        self, other: 'Parser[_T_contra, Any]'
    ) -> 'Parser[_T_contra, _U_co]':
        """Parse this with other on both sides."""
        return other >> self << other

    def delimited_by(
        self, start: T, end: T, error: Optional[type] = None
    ) -> 'Parser[_T_contra, Any]':
        """Parse this between the tokens start and end.

        The delimiters may nest. When the inside cannot be parsed, the parser
        skips to the matching end delimiter and outputs ABSENT instead, so an
        error inside the delimiters does not stop what comes after them from
        being parsed."""
        from salvage.parser_combinators.primitive import just
        from salvage.parser_combinators.recovery import nested_delimiters

        kwargs = {} if error is None else {'error': error}
        delimited = just(start, **kwargs) >> self << just(end, **kwargs)
        return delimited.recover_with(
            nested_delimiters(start, end, [], lambda: ABSENT)
        )

    def or_(
        self, other: 'Parser[_T_contra, V]'
    ) -> 'Parser[_T_contra, Union[_U_co, V]]':
        """Parse this or, failing that, other.

        other is tried from where this started. When both fail, the error
        that got furthest is kept."""

        @Parser
        def new_parser(stream: Stream) -> PResult[Union[_U_co, V]]:
            before = stream.save()
            left = self(stream)
            if left.is_success and not left.errors:
                return left
            left_end = stream.save()
            stream.revert(before)
            right = other(stream)
            if right.is_success and not right.errors:
                if left.is_success:
                    return right  # type: ignore
                return PResult.success(
                    right.errors, right.output, merge_alts(right.alt, left.error)
                )
            if not (left.is_success or right.is_success):
                assert left.error is not None and right.error is not None
                if left.error.at == right.error.at:
                    stream.revert(left_end)
                    return PResult.failure(
                        left.errors, left.error.max(right.error)
                    )
            if _prefer_left(left, right):
                stream.revert(left_end)
                return left
            return right  # type: ignore

        return new_parser

    def __or__(
        self, other: 'Parser[_T_contra, V]'
    ) -> 'Parser[_T_contra, Union[_U_co, V]]':
        return self.or_(other)

    def or_not(self) -> 'Parser[_T_contra, Optional[_U_co]]':
        """Parse this if possible, outputting None if not."""

        @Parser
        def new_parser(stream: Stream) -> PResult[Optional[_U_co]]:
            result = stream.try_parse(self)
            if result.is_success:
                return result
            return PResult.success([], None, result.error)

        return new_parser

    def recover_with(
        self, strategy: 'Strategy'
    ) -> 'Parser[_T_contra, _U_co]':
        """Fall back to strategy should this parser fail.

        The strategy starts from where this parser started."""

        @Parser
        def new_parser(stream: Stream) -> PResult[_U_co]:
            result = stream.try_parse(self)
            if result.is_success:
                return result
            assert result.error is not None
            _logger.debug(
                'recovering from {} at {} with {}',
                result.error.error,
                result.error.at,
                type(strategy).__qualname__,
            )
            return strategy.recover(result.errors, result.error, self, stream)

        return new_parser

    def repeated(
        self, at_least: int = 0, at_most: Optional[int] = None
    ) -> 'Parser[_T_contra, List[_U_co]]':
        """Parse this as many times as possible, at least at_least times and
        at most at_most times.

        Beyond the first at_least matches, a match that consumes no input
        ends the repetition, since repeating it would never terminate."""
        if at_least < 0:
            raise ValueError(f'at_least must not be negative, got {at_least}')
        if at_most is not None and at_most < at_least:
            raise ValueError(
                f'at_most ({at_most}) must not be less than at_least ({at_least})'
            )

        @Parser
        def new_parser(stream: Stream) -> PResult[List[_U_co]]:
            errors: List[Located] = []
            outputs: List[_U_co] = []
            alt: Optional[Located] = None
            while at_most is None or len(outputs) < at_most:
                before = stream.save()
                result = self(stream)
                if result.is_success:
                    alt = merge_alts(alt, result.alt)
                    if len(outputs) >= at_least and stream.offset == before:
                        _logger.debug(
                            'stopping repetition at {}: match consumed no input',
                            before,
                        )
                        break
                    errors += result.errors
                    outputs.append(result.output)  # type: ignore
                    continue
                if len(outputs) < at_least:
                    assert result.error is not None
                    return PResult.failure(
                        errors + result.errors, result.error
                    )
                stream.revert(before)
                first_recovered = result.errors[0] if result.errors else None
                alt = merge_alts(alt, merge_alts(result.error, first_recovered))
                break
            return PResult.success(errors, outputs, alt)

        return new_parser

    def separated_by(
        self,
        separator: 'Parser[_T_contra, Any]',
        at_least: int = 0,
        allow_leading: bool = False,
        allow_trailing: bool = False,
    ) -> 'Parser[_T_contra, List[_U_co]]':
        """Parse this any number of times, with separator between each.

        The separators are left out of the output."""
        if at_least < 0:
            raise ValueError(f'at_least must not be negative, got {at_least}')

        @Parser
        def new_parser(stream: Stream) -> PResult[List[_U_co]]:
            errors: List[Located] = []
            outputs: List[_U_co] = []
            alt: Optional[Located] = None

            if allow_leading:
                leading = stream.try_parse(separator)
                if leading.is_success:
                    errors += leading.errors
                    alt = merge_alts(alt, leading.alt)
                else:
                    alt = merge_alts(alt, leading.error)

            first = stream.try_parse(self)
            if first.is_success:
                errors += first.errors
                alt = merge_alts(alt, first.alt)
                outputs.append(first.output)  # type: ignore
                while True:
                    before = stream.save()
                    sep_result = separator(stream)
                    if not sep_result.is_success:
                        stream.revert(before)
                        alt = merge_alts(alt, sep_result.error)
                        break
                    after_separator = stream.save()
                    item = self(stream)
                    if not item.is_success:
                        alt = merge_alts(alt, item.error)
                        if allow_trailing:
                            stream.revert(after_separator)
                            errors += sep_result.errors
                        else:
                            stream.revert(before)
                        break
                    alt = merge_alts(alt, merge_alts(sep_result.alt, item.alt))
                    if len(outputs) >= at_least and stream.offset == before:
                        _logger.debug(
                            'stopping separated items at {}: match consumed no input',
                            before,
                        )
                        break
                    errors += sep_result.errors + item.errors
                    outputs.append(item.output)  # type: ignore
            else:
                alt = merge_alts(alt, first.error)

            if len(outputs) < at_least:
                assert alt is not None
                return PResult.failure(errors, alt)
            return PResult.success(errors, outputs, alt)

        return new_parser

    def foldl(
        self: 'Parser[_T_contra, Tuple[_A, Sequence[_B]]]',
        fn: Callable[[_A, _B], _A],
    ) -> 'Parser[_T_contra, _A]':
        """Left-fold an output of the shape (first, [rest...])."""
        return self.map(lambda pair: functools.reduce(fn, pair[1], pair[0]))

    def foldr(
        self: 'Parser[_T_contra, Tuple[Sequence[_A], _B]]',
        fn: Callable[[_A, _B], _B],
    ) -> 'Parser[_T_contra, _B]':
        """Right-fold an output of the shape ([init...], last)."""
        return self.map(
            lambda pair: functools.reduce(
                lambda acc, item: fn(item, acc), reversed(pair[0]), pair[1]
            )
        )

    def collect(self, factory: Callable[[Any], V]) -> 'Parser[_T_contra, V]':
        return self.map(factory)

    def concat(
        self: 'Parser[_T_contra, Iterable[str]]',
    ) -> 'Parser[_T_contra, str]':
        return self.map(''.join)

    def flatten(
        self: 'Parser[_T_contra, Iterable[Iterable[V]]]',
    ) -> 'Parser[_T_contra, List[V]]':
        return self.map(lambda groups: [x for group in groups for x in group])

    def boxed(self) -> 'BoxedParser[_T_contra, _U_co]':
        return BoxedParser(self)


def _prefer_left(left: PResult, right: PResult) -> bool:
    # Neither result is a clean success at this point.
    if left.is_success and right.is_success:
        if len(left.errors) != len(right.errors):
            return len(left.errors) < len(right.errors)
        return left.errors[-1].at >= right.errors[-1].at
    if left.is_success != right.is_success:
        return left.is_success
    return left.error.at > right.error.at  # type: ignore


class BoxedParser(Parser[_T_contra, _U_co]):
    """A handle to a parser that can be copied freely.

    Copies share the parser they wrap instead of duplicating it."""

    def __init__(self, parser: Parser[_T_contra, _U_co]) -> None:
        if isinstance(parser, BoxedParser):
            parser = parser.inner
        super().__init__(parser)
        self._inner = parser

    @property
    def inner(self) -> Parser[_T_contra, _U_co]:
        return self._inner

    def boxed(self) -> 'BoxedParser[_T_contra, _U_co]':
        return self

    def __copy__(self) -> 'BoxedParser[_T_contra, _U_co]':
        return BoxedParser(self._inner)

    def __deepcopy__(self, memo: dict) -> 'BoxedParser[_T_contra, _U_co]':
        return BoxedParser(self._inner)

    def __repr__(self) -> str:
        return f'{type(self).__qualname__}({self._inner!r})'


def choice(*parsers: Parser[T, Any]) -> Parser[T, Any]:
    """Try each parser in turn, like chaining them with or_."""
    if not parsers:
        raise ValueError('choice needs at least one parser')
    return functools.reduce(Parser.or_, parsers)


ParserGeneratingFunction = Callable[[], Generator[Parser[T, U], U, V]]


@overload
def generate(
    desc: str,
) -> Callable[[ParserGeneratingFunction[T, U, V]], Parser[T, V]]:
    ...


@overload
def generate(generator: ParserGeneratingFunction[T, U, V]) -> Parser[T, V]:
    ...


def generate(
    desc: Union[str, ParserGeneratingFunction[T, U, V]]
) -> Union[
    Callable[[ParserGeneratingFunction[T, U, V]], Parser[T, V]], Parser[T, V]
]:
    """Build a parser from a generator that yields the parsers to run in
    sequence and receives their outputs.

    The generator's return value is the output. A failure stops the
    generator, as in Parser.then. Passing a string labels the parser."""
    if isinstance(desc, str):
        return lambda generator: generate(generator).labelled(desc)

    @Parser
    def new_parser(stream: Stream) -> PResult[V]:
        errors: List[Located] = []
        alt: Optional[Located] = None
        iterator = desc()
        output = None
        try:
            while True:
                parser = iterator.send(output)
                result = parser(stream)
                errors += result.errors
                if not result.is_success:
                    assert result.error is not None
                    iterator.close()
                    return PResult.failure(errors, result.error.max(alt))
                output = result.output
                alt = merge_alts(alt, result.alt)
        except StopIteration as e:
            return PResult.success(errors, e.value, alt)

    return new_parser
