"""Parsers that refer to themselves.

A Recursive parser is a placeholder that can be used in a grammar before
the parser it stands for has been built. Once that parser is built, it is
tied into the placeholder with define.
"""

from salvage.parser_combinators import BoxedParser, PResult, Parser
from salvage.set_once import SetOnce
from salvage.stream import Stream
from typing import Callable, TypeVar

_T = TypeVar('_T')
_U = TypeVar('_U')


class RecursionDefinitionError(RuntimeError):
    pass


class Recursive(Parser[_T, _U]):
    parser: SetOnce[Parser[_T, _U]] = SetOnce()

    def __init__(self) -> None:
        super().__init__(self._parse_defined)

    @property
    def is_defined(self) -> bool:
        return type(self).parser.is_set(self)

    def _parse_defined(self, stream: Stream) -> PResult[_U]:
        if not self.is_defined:
            raise RecursionDefinitionError(
                'recursive parser was used before it was defined'
            )
        return self.parser(stream)

    def define(self, parser: Parser[_T, _U]) -> None:
        self.parser = parser

    def __repr__(self) -> str:
        state = 'defined' if self.is_defined else 'undefined'
        return f'<{type(self).__qualname__} ({state})>'


def recursive(
    build: Callable[[BoxedParser[_T, _U]], Parser[_T, _U]]
) -> BoxedParser[_T, _U]:
    """Build a parser that can refer to itself.

    build receives a handle to the parser being built and returns its
    definition.

        expression = recursive(
            lambda expression: expression.delimited_by('(', ')') | atom
        )
    """
    placeholder: Recursive[_T, _U] = Recursive()
    placeholder.define(build(placeholder.boxed()))
    return placeholder.boxed()
