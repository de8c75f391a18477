from hypothesis.strategies import (
    SearchStrategy,
    builds,
    characters,
    frozensets,
    integers,
    just,
    none,
    one_of,
)
from salvage.error import Simple
from salvage.parser_combinators import Located
from salvage.span import Span

expected_sets = frozensets(one_of(none(), characters()), max_size=5)


def simple_errors(found: SearchStrategy = just('x')) -> SearchStrategy:
    """Unexpected-token errors that differ only in what they expected.

    Errors like these are interchangeable except for their expected sets,
    which makes merging them easy to reason about."""
    return builds(
        lambda expected, found: Simple.expected_input_found(
            Span(0, 1), expected, found
        ),
        expected_sets,
        found,
    )


positions = integers(min_value=0, max_value=1000)

located_errors = builds(Located, positions, simple_errors())
