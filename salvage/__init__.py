"""Parser combinators that recover from errors.

Commonly used names are importable from here:

    from salvage import just, end, text, skip_then_retry_until
"""

version = '0.1.0'

from salvage import text
from salvage.error import Error, Simple
from salvage.parser_combinators import (
    ABSENT,
    BoxedParser,
    Located,
    ParseError,
    Parser,
    PResult,
    choice,
    generate,
)
from salvage.parser_combinators.primitive import (
    any_token,
    empty,
    end,
    filter,
    filter_map,
    just,
    none_of,
    one_of,
    seq,
)
from salvage.parser_combinators.recovery import (
    Strategy,
    nested_delimiters,
    skip_then_retry_until,
)
from salvage.parser_combinators.recursive import recursive
from salvage.span import Span
from salvage.stream import Stream
