from hypothesis import given, strategies as st
from salvage import text
from salvage.error import Label, Simple
from salvage.parser_combinators import Located, PResult
from salvage.parser_combinators.primitive import end, just
from salvage.parser_combinators.recovery import (
    NestedDelimiters,
    Strategy,
    nested_delimiters,
    skip_then_retry_until,
)
from salvage.span import Span
from salvage.stream import Stream
import unittest


def unexpected(start: int, end: int, expected, found) -> Simple:
    return Simple.expected_input_found(Span(start, end), expected, found)


class TestSkipThenRetryUntil(unittest.TestCase):
    def test_skips_until_the_parser_matches(self) -> None:
        parser = just('S').recover_with(skip_then_retry_until(['S']))
        stream = Stream.from_tokens(['x1', 'x2', 'S', 'x3'])
        with self.assertLogs('salvage', 'DEBUG') as cm:
            result = parser(stream)
        self.assertTrue(result.is_success)
        self.assertEqual(result.output, 'S')
        self.assertEqual(result.errors, [Located(0, unexpected(0, 1, ['S'], 'x1'))])
        self.assertEqual(stream.offset, 3)
        self.assertTrue(
            any('after skipping 2 tokens' in line for line in cm.output)
        )

    @given(st.integers(0, 20))
    def test_junk_before_match(self, junk: int) -> None:
        parser = just('S').recover_with(skip_then_retry_until([]))
        stream = Stream.from_tokens(['x'] * junk + ['S', 'y'])
        result = parser(stream)
        self.assertTrue(result.is_success)
        self.assertEqual(stream.offset, junk + 1)
        self.assertEqual(len(result.errors), 1 if junk else 0)

    def test_never_skips_a_sentinel(self) -> None:
        parser = just('S').recover_with(skip_then_retry_until([';']))
        stream = Stream.from_tokens(['x', ';', 'S'])
        result = parser(stream)
        self.assertFalse(result.is_success)
        self.assertEqual(result.error, Located(0, unexpected(0, 1, ['S'], 'x')))
        self.assertEqual(stream.offset, 1)

    def test_gives_up_at_end_of_input(self) -> None:
        parser = just('S').recover_with(skip_then_retry_until([]))
        result = parser(Stream.from_tokens(['x']))
        self.assertFalse(result.is_success)
        self.assertEqual(result.errors, [])

    def test_recovery_inside_repetition(self) -> None:
        digit_sequence = text.digits().recover_with(skip_then_retry_until([]))
        grammar = digit_sequence.repeated() << end()
        output, errors = grammar.parse_recovery('12a34')
        self.assertEqual(output, ['12', '34'])
        self.assertEqual(
            errors,
            [Simple.expected_label_found(Span(2, 3), 'digit', 'a')],
        )

    def test_sentinel_stops_recovery_inside_repetition(self) -> None:
        digit_sequence = text.digits().recover_with(skip_then_retry_until(['a']))
        grammar = digit_sequence.repeated() << end()
        output, errors = grammar.parse_recovery('12a34')
        self.assertIsNone(output)
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].span, Span(2, 3))
        self.assertEqual(errors[0].expected, {Label('digit'), None})


class TestNestedDelimiters(unittest.TestCase):
    def setUp(self) -> None:
        self.strategy = nested_delimiters('(', ')', [('[', ']')], lambda: 'error')
        self.parser = (just('(') >> just('z') << just(')')).recover_with(
            self.strategy
        )

    def test_skips_balanced_group(self) -> None:
        parser = (just('(') >> just('z')).recover_with(self.strategy)
        stream = Stream.from_text('(())')
        result = parser(stream)
        self.assertTrue(result.is_success)
        self.assertEqual(result.output, 'error')
        self.assertEqual(result.errors, [Located(1, unexpected(1, 2, ['z'], '('))])
        self.assertEqual(stream.offset, 4)

    def test_input_after_group_is_left(self) -> None:
        stream = Stream.from_text('(a)b')
        result = self.parser(stream)
        self.assertTrue(result.is_success)
        self.assertEqual(stream.offset, 3)

    def test_unopened_close(self) -> None:
        result = self.parser(Stream.from_text(')a'))
        self.assertFalse(result.is_success)
        self.assertEqual(result.error, Located(0, unexpected(0, 1, ['('], ')')))

    def test_token_outside_group(self) -> None:
        result = self.parser(Stream.from_text('a(b)'))
        self.assertFalse(result.is_success)

    def test_unclosed_at_end_of_input(self) -> None:
        result = self.parser(Stream.from_text('(a'))
        self.assertFalse(result.is_success)
        self.assertEqual(
            result.errors,
            [
                Located(
                    2,
                    Simple.unclosed_delimiter(
                        Span(0, 1), '(', Span(2, 2), ')', None
                    ),
                )
            ],
        )
        self.assertEqual(result.error, Located(1, unexpected(1, 2, ['z'], 'a')))

    def test_unmatched_other_delimiter(self) -> None:
        stream = Stream.from_text('(a])')
        result = self.parser(stream)
        self.assertTrue(result.is_success)
        self.assertEqual(
            result.errors,
            [
                Located(
                    2,
                    Simple.unclosed_delimiter(
                        Span(0, 1), '(', Span(2, 3), ')', ']'
                    ),
                ),
                Located(1, unexpected(1, 2, ['z'], 'a')),
            ],
        )
        self.assertEqual(stream.offset, 4)

    def test_redundant_fatal_error_is_dropped(self) -> None:
        earlier = Located(3, unexpected(3, 4, ['y'], 'q'))
        fatal = Located(3, unexpected(3, 4, ['z'], 'q'))
        result = self.strategy.recover(
            [earlier], fatal, self.parser, Stream.from_text('()')
        )
        self.assertTrue(result.is_success)
        self.assertEqual(result.errors, [earlier])

    def test_identical_delimiters(self) -> None:
        with self.assertRaises(ValueError):
            nested_delimiters('|', '|', [], lambda: None)

    def test_repr(self) -> None:
        self.assertIsInstance(self.strategy, NestedDelimiters)
        self.assertIn("'('", repr(self.strategy))


class DefaultOutput(Strategy):
    def recover(self, recovered_errors, fatal_error, parser, stream):
        return PResult.success(recovered_errors + [fatal_error], 'default')


class TestCustomStrategy(unittest.TestCase):
    def test_strategy_subclass(self) -> None:
        parser = just('a').recover_with(DefaultOutput())
        self.assertEqual(
            parser.parse_recovery('b'),
            ('default', [unexpected(0, 1, ['a'], 'b')]),
        )
