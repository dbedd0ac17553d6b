# Copyright (C) 2018-'25  Frank Sachsenheim
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from _xlex import matchers
from _xlex.bridge import BlockingEventQueue, ProducerBridge
from _xlex.events import ElementStart, Failure, Finish, TagEvent, Text
from _xlex.exceptions import TypeMismatch

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from _xlex.events import ElementEnd, Event
    from _xlex.parser import ParserOptions
    from _xlex.typing import (
        AttributePattern,
        Condition,
        ExecutionFacility,
        PatternFactory,
    )


class BlockingLexer:
    """
    A lexer that is used to gradually walk through an XML document.

    A document is digested by a parser that feeds events into the lexer's queue, the
    matching methods of the lexer take events from that queue until one satisfies
    their condition.  Events that are skipped on the way are discarded.  The digestion
    can happen beforehand with :meth:`run_synchronous` or concurrently with
    :meth:`run_asynchronous`, in the latter case the matching methods block until the
    parser delivered a suitable event.

    >>> lexer = BlockingLexer()
    >>> lexer.run_synchronous('<p>Read <a href="https://xlex.example">this</a>.</p>')
    >>> lexer.start("a", "href", "HTTPS://XLEX.EXAMPLE")
    ElementStart('a', {'href': 'https://xlex.example'})
    >>> lexer.next()
    Text('this')
    >>> lexer.current_text()
    'this'

    All matching methods return :obj:`None` when the end of the document is reached
    and raise the parser's exception if the parsing failed.
    """

    __slots__ = (
        "_bridge",
        "_cancelled",
        "_failure",
        "_failure_traceback",
        "_finished",
        "_last",
        "_queue",
    )

    def __init__(self):
        self._cancelled = False
        self._failure: Optional[Failure] = None
        self._failure_traceback: Optional[TracebackType] = None
        self._finished = False
        self._last: Optional[Event] = None
        self._queue = BlockingEventQueue()
        self._bridge = ProducerBridge(self._queue)

    def __iter__(self) -> Iterator[Event]:
        while (event := self.next()) is not None:
            yield event

    @property
    def cancelled(self) -> bool:
        """
        Whether the last call of a matching method ended due to a :meth:`cancel` call.
        """
        return self._cancelled

    @property
    def finished(self) -> bool:
        """Whether the end of the document has been reached."""
        return self._finished

    @property
    def last(self) -> Optional[Event]:
        """The last matched event or :obj:`None`."""
        return self._last

    # producer

    def run_synchronous(
        self,
        source: Any,
        /,
        parser_options: Optional[ParserOptions] = None,
        source_url: Optional[str] = None,
    ):
        """
        Reads the document from the given source and adds its events to the queue.
        This returns once the entire document was parsed, hence the matching methods
        can only pick from what's been buffered afterwards.  A parsing error is raised
        and will also be raised by the matching method that arrives at it.

        :param source: Anything that a registered loader can make sense of, e.g. a
                       string or bytes that contain a document, a
                       :class:`pathlib.Path`, a binary file-like object or an URL.
        :param parser_options: A :class:`xlex.ParserOptions` instance to configure
                               the used parser.
        :param source_url: An optional source URL for situations where a loader can't
                           determine one.
        """
        self._bridge.run_synchronous(source, parser_options, source_url)

    def run_asynchronous(
        self,
        source: Any,
        /,
        executor: Optional[ExecutionFacility] = None,
        parser_options: Optional[ParserOptions] = None,
        source_url: Optional[str] = None,
    ):
        """
        Like :meth:`run_synchronous`, but the parsing is scheduled on the given
        ``executor`` and the call returns immediately.  This allows to walk through
        the events while they are still being read.

        :param executor: Either an object with a ``submit`` method like
                         :class:`concurrent.futures.ThreadPoolExecutor` or a callable
                         that takes a function without arguments to execute.  A
                         dedicated thread is started if omitted.
        """
        self._bridge.run_asynchronous(source, executor, parser_options, source_url)

    # consumer

    def cancel(self):
        """
        Interrupts the pending, or else the next, wait for an event.  The
        interrupted matching method returns :obj:`None` and :attr:`cancelled` is
        :obj:`True` afterwards.  This method can be called from any thread.
        """
        self._queue.cancel()

    def end(self, tag_name: str) -> Optional[ElementEnd]:
        """
        Waits for an end tag with the given name.

        :return: The matched event or :obj:`None` if the end of the document is reached.
        """
        return self.wait_for(matchers.element_end(tag_name))  # type: ignore

    def next(self) -> Optional[Event]:
        """
        Takes the next event, whatever it is.

        :return: The next event or :obj:`None` if the end of the document is reached.
        """
        return self.wait_for(matchers.always)

    def start(
        self,
        tag_name: str,
        /,
        *attributes: Any,
        pattern_factory: Optional[PatternFactory] = None,
    ) -> Optional[ElementStart]:
        """
        Waits for a start tag.  Attributes that it must have are given as names and
        values in alternating order: ``("a", "href", "https://xlex.example")`` would
        match any link to ``https://xlex.example``.  Alternatively a mapping of names to
        values can be passed as single argument.  :class:`re.Pattern` objects as
        values are used as they are, all other objects are converted by the
        ``pattern_factory``, the default one matches their string representation
        literally and ignores case.  Attributes that aren't mentioned don't affect the
        match.

        :return: The matched event or :obj:`None` if the end of the document is reached.
        """
        patterns = matchers.attribute_patterns(attributes, pattern_factory)
        return self.wait_for(matchers.element_start(tag_name, patterns))  # type: ignore

    def text(self, match: str | AttributePattern) -> Optional[Text]:
        """
        Waits for text that fully matches the given string or pattern, either as it is
        or with stripped whitespace.  A string is matched literally.

        :return: The matched event or :obj:`None` if the end of the document is reached.
        """
        return self.wait_for(matchers.text(match))  # type: ignore

    def _raise_failure(self):
        # the producer's traceback, not the ones of earlier re-raises
        assert self._failure is not None
        cause = self._failure.cause
        raise cause.with_traceback(self._failure_traceback)

    def wait_for(self, condition: Condition) -> Optional[Event]:
        """
        Takes events until one satisfies the given condition.

        :param condition: A callable that is called with an event and returns a
                          boolean.  An event itself can be used to wait for an equal
                          one.
        :return: The matched event or :obj:`None` if the end of the document is reached
                 or the wait was cancelled.
        """
        self._cancelled = False

        if self._failure is not None:
            self._raise_failure()
        if self._finished:
            return None

        while True:
            event = self._queue.take()

            if event is None:
                self._cancelled = True
                return None

            if isinstance(event, Finish):
                self._finished = True
                self._last = None
                return None

            if isinstance(event, Failure):
                self._failure = event
                self._failure_traceback = event.cause.__traceback__
                self._raise_failure()

            if condition(event):
                self._last = event
                return event

    # cursor

    def current_attribute(self, key: str) -> Optional[str]:
        """
        Returns the value of the given attribute or :obj:`None` from the last matched
        start tag.
        """
        last = self._last
        if not isinstance(last, ElementStart):
            raise TypeMismatch("a start tag", last)
        return last.attributes.get(key)

    def current_tag_name(self) -> str:
        """Returns the tag name of the last matched start or end tag."""
        last = self._last
        if not isinstance(last, TagEvent):
            raise TypeMismatch("a start or end tag", last)
        return last.tag_name

    def current_text(self) -> str:
        """Returns the content of the last matched text."""
        last = self._last
        if not isinstance(last, Text):
            raise TypeMismatch("text", last)
        return last.content


__all__ = (BlockingLexer.__name__,)
