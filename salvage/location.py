# (line, column), with lines counted from 1 and columns from 0.
Location = tuple[int, int]


def location_of(source: str, offset: int) -> Location:
    """Convert an offset into source into a Location."""
    offset = min(max(offset, 0), len(source))
    line = source.count('\n', 0, offset) + 1
    line_start = source.rfind('\n', 0, offset) + 1
    return line, offset - line_start
