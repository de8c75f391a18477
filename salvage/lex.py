"""A regular-expression tokenizer for token-level grammars.

The tokenizer is built with parsy. It turns source text into (Token, Span)
pairs that can be fed to a Stream, so that grammars can be written over
tokens rather than characters.
"""

import dataclasses
import parsy
from salvage.error import Error, Simple
from salvage.parser_combinators import Parser
from salvage.parser_combinators.primitive import filter
from salvage.span import Span
from salvage.stream import Stream
from typing import Hashable, List, Optional, Sequence, Tuple, Type


@dataclasses.dataclass(frozen=True)
class Token:
    """Class to represent tokens.

    self.type - token type, as string.
    self.value - token value, as string.

    Positions are kept in the span that accompanies the token in a stream, so
    that equal tokens compare equal wherever they are.
    """

    type: str = ''
    value: str = ''


class LexError(Exception):
    def __init__(self, offset: int, message: str) -> None:
        super().__init__(f'cannot tokenize input at offset {offset}: {message}')
        self.offset = offset


type Rules = Sequence[Tuple[str, str]]


class Lexer:
    """Lexes text using a list of (token type, regular expression) rules.

    Rules are tried in order at each position; text matching skip between
    tokens is dropped. Neither the rules nor skip may match the empty string.
    """

    def __init__(self, rules: Rules, skip: Optional[str] = r'\s+') -> None:
        if not rules:
            raise ValueError('a lexer needs at least one rule')
        self.rules = list(rules)

        def rule_parser(type: str, pattern: str) -> parsy.Parser:
            return parsy.seq(parsy.index, parsy.regex(pattern), parsy.index).combine(
                lambda start, value, end: (Token(type, value), start, end)
            )

        separator = parsy.regex(skip).optional() if skip else parsy.success(None)
        token = parsy.alt(*(rule_parser(*rule) for rule in self.rules))
        self._parser = separator >> (token << separator).many()

    def tokenize(
        self, code: str, context: Optional[Hashable] = None
    ) -> List[Tuple[Token, Span]]:
        try:
            tokens = self._parser.parse(code)
        except parsy.ParseError as e:
            raise LexError(e.index, str(e)) from e
        return [
            (token, Span(start, end, context)) for token, start, end in tokens
        ]


def token_stream(
    tokens: Sequence[Tuple[Token, Span]], eoi: Optional[Span] = None
) -> Stream[Token, Span]:
    """Make a stream of lexed tokens.

    eoi defaults to an empty span just after the last token."""
    if eoi is None:
        if tokens:
            last = tokens[-1][1]
            eoi = last.with_range(last.end, last.end)
        else:
            eoi = Span(0, 0)
    return Stream(tokens, eoi)


def token(type: str, error: Type[Error] = Simple) -> Parser[Token, Token]:
    """Match a token of the given type."""
    description = f'{type} token'
    return filter(lambda token: token.type == type, error).labelled(description)
