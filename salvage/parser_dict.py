from salvage.parser_combinators import Parser, PResult
from salvage.stream import Stream
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar, Union


T = TypeVar('T')


class ParserDict(Dict[str, Parser]):
    """A dictionary to hold named references to parsers.

    These references can be indirect, meaning you can add a new alternative to
    a parser, and the other parsers that use it will pick up that change. This
    is also how rules that refer to each other are written.
    """

    def extend_with(self: T, extension: Callable[[T], None]) -> None:
        extension(self)

    def parse(
        self, source: Union[Stream, str, Iterable], rule: str = 'top-level'
    ) -> Any:
        return self[rule].parse(source)

    def parse_recovery(
        self, source: Union[Stream, str, Iterable], rule: str = 'top-level'
    ) -> Tuple[Optional[Any], List[Any]]:
        return self[rule].parse_recovery(source)

    def ref_parser(self, name: str) -> Parser:
        """A parser that runs whatever parser is named name when it runs."""

        @Parser
        def parser(stream: Stream) -> PResult:
            return self[name](stream)

        return parser
