import textwrap
from typing import Iterable

from salvage.error import Error, Simple, Unclosed
from salvage.location import Location, location_of


def get_line_at(source: str, location: Location) -> str:
    lines = source.splitlines()
    if location[0] > len(lines):
        return ''
    return lines[location[0] - 1]


def _caret_line(location: Location, width: int) -> str:
    return ' ' * location[1] + '^' * max(width, 1)


def create_parsing_failure_message(source: str, error: Error) -> str:
    """Describe error, pointing at where it is in source.

    The error's span must be made of offsets into source, as the spans of
    Stream.from_text and of the lexer are."""
    span = getattr(error, 'span', None)
    if span is None:
        return str(error)
    location = location_of(source, span.start)
    line = get_line_at(source, location)
    width = min(span.end, len(line) + span.start - location[1]) - span.start
    message = f'{error} at line {location[0]}, column {location[1] + 1}:\n{line.rstrip()}\n{_caret_line(location, width)}'
    if isinstance(error, Simple) and isinstance(error.reason, Unclosed):
        opened_at = location_of(source, error.reason.span.start)
        message += '\nbecause the delimiter was opened here:\n' + textwrap.indent(
            f'{get_line_at(source, opened_at).rstrip()}\n{_caret_line(opened_at, 1)}',
            '  ',
        )
    return message


def create_parsing_failure_messages(
    source: str, errors: Iterable[Error]
) -> str:
    return '\n\n'.join(
        create_parsing_failure_message(source, error) for error in errors
    )
