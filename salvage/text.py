"""Parsers for streams of characters."""

import string
from salvage.error import Error, Simple
from salvage.parser_combinators import Parser
from salvage.parser_combinators.primitive import filter, just
from typing import Type

_DIGITS = string.digits + string.ascii_lowercase


def _digit_characters(radix: int) -> str:
    if not 2 <= radix <= 36:
        raise ValueError(f'radix must be between 2 and 36, got {radix}')
    return _DIGITS[:radix]


def whitespace(error: Type[Error] = Simple) -> Parser[str, None]:
    """Skip any amount of whitespace, including none."""
    return filter(str.isspace, error).repeated().ignored()


def padded(parser: Parser[str, object], error: Type[Error] = Simple) -> Parser:
    """Allow whitespace before and after parser."""
    return parser.padded_by(whitespace(error))


def newline(error: Type[Error] = Simple) -> Parser[str, None]:
    return (
        (just('\r', error).or_not() >> just('\n', error))
        .ignored()
        .labelled('newline')
    )


def digit(radix: int = 10, error: Type[Error] = Simple) -> Parser[str, str]:
    allowed = _digit_characters(radix)
    return filter(lambda c: c.lower() in allowed, error).labelled('digit')


def digits(radix: int = 10, error: Type[Error] = Simple) -> Parser[str, str]:
    """One or more digits, as a string."""
    return digit(radix, error).repeated(at_least=1).concat()


def int_(radix: int = 10, error: Type[Error] = Simple) -> Parser[str, str]:
    """An unsigned integer without leading zeroes, as a string."""
    allowed = _digit_characters(radix)
    nonzero = filter(lambda c: c.lower() in allowed[1:], error)
    return (
        (nonzero + digit(radix, error).repeated()).concat()
        | just('0', error)
    ).labelled('integer')


def ident(error: Type[Error] = Simple) -> Parser[str, str]:
    """A C-style identifier."""
    first = filter(lambda c: c.isalpha() or c == '_', error)
    rest = filter(lambda c: c.isalnum() or c == '_', error)
    return (first + rest.repeated()).concat().labelled('identifier')


def keyword(word: str, error: Type[Error] = Simple) -> Parser[str, str]:
    """The identifier word, and not an identifier that merely starts with it."""

    def check(name: str, span: object) -> object:
        if name == word:
            return name
        return error.expected_label_found(span, f'keyword {word!r}', name)

    return ident(error).try_map(check)
