from hypothesis import given, strategies as st
from salvage.error import Simple
from salvage.parser_combinators import Located, PResult, Parser
from salvage.span import Span
from salvage.stream import Stream
import unittest


def consume_then(n: int, succeed: bool) -> Parser:
    @Parser
    def parser(stream: Stream) -> PResult:
        for _ in range(n):
            stream.next()
        if succeed:
            return PResult.success([], n)
        at, span, found = stream.next()
        return PResult.failure(
            [], Located(at, Simple.expected_input_found(span, [], found))
        )

    return parser


class TestNext(unittest.TestCase):
    def test_tokens_then_end(self) -> None:
        stream = Stream.from_text('ab')
        self.assertEqual(stream.next(), (0, Span(0, 1), 'a'))
        self.assertEqual(stream.next(), (1, Span(1, 2), 'b'))
        self.assertEqual(stream.next(), (2, Span(2, 2), None))
        self.assertEqual(stream.next(), (2, Span(2, 2), None))
        self.assertEqual(stream.offset, 2)
        self.assertTrue(stream.at_end())

    def test_peek_does_not_consume(self) -> None:
        stream = Stream.from_text('ab')
        self.assertEqual(stream.peek(), (0, Span(0, 1), 'a'))
        self.assertEqual(stream.offset, 0)

    def test_tokens_are_pulled_lazily(self) -> None:
        pulled = []

        def tokens():
            for i, char in enumerate('abc'):
                pulled.append(char)
                yield char, Span(i, i + 1)

        stream = Stream(tokens(), Span(3, 3))
        stream.next()
        self.assertEqual(pulled, ['a'])

    def test_from_tokens_uses_indices(self) -> None:
        stream = Stream.from_tokens(['let', 'x'])
        self.assertEqual(stream.next(), (0, Span(0, 1), 'let'))
        self.assertEqual(stream.next(), (1, Span(1, 2), 'x'))
        self.assertEqual(stream.next(), (2, Span(2, 2), None))

    def test_context_is_kept(self) -> None:
        stream = Stream.from_text('a', context='file.txt')
        self.assertEqual(stream.next()[1], Span(0, 1, 'file.txt'))


class TestAttempt(unittest.TestCase):
    def test_rollback(self) -> None:
        stream = Stream.from_text('abc')
        output = stream.attempt(lambda s: (False, s.next()[2]))
        self.assertEqual(output, 'a')
        self.assertEqual(stream.offset, 0)

    def test_commit(self) -> None:
        stream = Stream.from_text('abc')
        output = stream.attempt(lambda s: (True, s.next()[2]))
        self.assertEqual(output, 'a')
        self.assertEqual(stream.offset, 1)


class TestTryParse(unittest.TestCase):
    @given(st.text(max_size=20), st.integers(0, 25), st.integers(0, 25))
    def test_rewinds_on_failure(
        self, text: str, start: int, consumed: int
    ) -> None:
        stream = Stream.from_text(text)
        for _ in range(start):
            stream.next()
        before = stream.offset
        result = stream.try_parse(consume_then(consumed, succeed=False))
        self.assertFalse(result.is_success)
        self.assertEqual(stream.offset, before)

    @given(st.text(max_size=20), st.integers(0, 25))
    def test_commits_on_success(self, text: str, consumed: int) -> None:
        stream = Stream.from_text(text)
        result = stream.try_parse(consume_then(consumed, succeed=True))
        self.assertTrue(result.is_success)
        self.assertEqual(stream.offset, min(consumed, len(text)))


class TestSpanSince(unittest.TestCase):
    def test_covers_consumed_tokens(self) -> None:
        stream = Stream.from_text('hello')
        for _ in range(3):
            stream.next()
        self.assertEqual(stream.span_since(1), Span(1, 3))

    def test_nothing_consumed(self) -> None:
        stream = Stream.from_text('hello')
        stream.next()
        self.assertEqual(stream.span_since(1), Span(1, 1))

    def test_at_end(self) -> None:
        stream = Stream.from_text('ab')
        stream.next()
        stream.next()
        self.assertEqual(stream.span_since(2), Span(2, 2))


class TestSpan(unittest.TestCase):
    def test_union(self) -> None:
        self.assertEqual(Span(1, 3).union(Span(5, 8)), Span(1, 8))

    def test_backwards_span(self) -> None:
        with self.assertRaises(ValueError):
            Span(3, 1)

    def test_contains(self) -> None:
        self.assertIn(1, Span(1, 3))
        self.assertNotIn(3, Span(1, 3))
        self.assertEqual(len(Span(1, 3)), 2)
