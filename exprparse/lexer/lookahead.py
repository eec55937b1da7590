r"""@package exprparse.lexer.lookahead

Abstract stream of items supporting lookahead.

Items provided by subclasses are processed one after another. However, using
peek() (or its aliases current() and next()) one can look at upcoming items
without consuming the current one. The same buffering logic backs both the
character level (reader.LookaheadReader producing reader.Char items) and the
token level (tokenizer.Tokenizer producing token.Token items).
"""

from abc import ABCMeta, abstractmethod
from collections import deque


__all__ = [
    "Lookahead",
]


class Lookahead(metaclass=ABCMeta):
    r"""Base class for streams of items with a lookahead.

    Subclasses implement _fetch(), returning the next item or `None` once
    the underlying source is exhausted, and _end_of_input(), creating the
    end of input indicator. The indicator is created once (lazily) and then
    returned for every peek past the end.

    Problems found while producing items are appended to the
    #problem_collector list, which may be shared with other stages.
    """

    def __init__(self):
        ## Items already fetched due to lookaheads but not yet consumed.
        self._buffer = deque()
        ## Whether the underlying source signalled its end.
        self._end_reached = False
        ## Lazily created end of input indicator.
        self._end_of_input_indicator = None
        self._problem_collector = []

    @property
    def problem_collector(self):
        r"""List of `ParseError` objects collected while processing the input.

        This is the internally used list (not a copy), so that appending to
        it from the outside is visible to all stages sharing it.
        """
        return self._problem_collector
    @problem_collector.setter
    def problem_collector(self, problem_collector):
        self._problem_collector = problem_collector

    def peek(self, offset=0):
        r"""Return the item `offset` positions ahead without consuming anything.

        An offset of `0` returns the current item. Past the end of the input,
        the end of input indicator is returned.
        """
        if offset < 0:
            raise ValueError("offset < 0")
        while len(self._buffer) <= offset and not self._end_reached:
            item = self._fetch()
            if item is not None:
                self._buffer.append(item)
            else:
                self._end_reached = True
        if offset >= len(self._buffer):
            if self._end_of_input_indicator is None:
                self._end_of_input_indicator = self._end_of_input()
            return self._end_of_input_indicator
        return self._buffer[offset]

    def current(self):
        r"""Return the item the stream is currently pointing at."""
        return self.peek(0)

    def next(self, offset=1):
        r"""Return the n-th item after the current one (default: the next one)."""
        return self.peek(offset)

    def consume(self, number_of_items=1):
        r"""Remove items from the stream and return the first one removed.

        Consuming past the end of the input is a no-op, in which case the
        end of input indicator is returned.
        """
        if number_of_items < 0:
            raise ValueError("number_of_items < 0")
        result = self.current()
        while number_of_items > 0:
            number_of_items -= 1
            if self._buffer:
                self._buffer.popleft()
            elif self._end_reached:
                break
            elif self._fetch() is None:
                self._end_reached = True
        return result

    def _buffered(self):
        r"""Return up to two buffered items without triggering any fetches.

        This is used by string representations, which must not have side
        effects on the stream.
        """
        return list(self._buffer)[:2]

    @abstractmethod
    def _end_of_input(self):
        r"""Create the end of input indicator (called at most once)."""
        pass

    @abstractmethod
    def _fetch(self):
        r"""Fetch the next item from the source or return `None` at its end."""
        pass
