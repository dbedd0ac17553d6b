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

"""
The producer side of a :class:`xlex.BlockingLexer`.  Parser notifications are
translated into events and pushed onto a queue that the lexer's consumer side pulls
from.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, Optional

from _xlex.events import ElementEnd, ElementStart, Failure, Finish, Text
from _xlex.exceptions import FailedSourceLoading, InvalidOperation
from _xlex.parser import ContentSink, ParserOptions
from _xlex.plugins import plugin_manager

if TYPE_CHECKING:
    from collections.abc import Mapping

    from _xlex.events import Event
    from _xlex.typing import ExecutionFacility, Loader


logger = logging.getLogger(__name__)


class BlockingEventQueue:
    """
    An unbounded first-in-first-out queue that blocks consumers while it's empty.
    A consumer's wait can be interrupted with :meth:`cancel`.
    """

    __slots__ = ("_cancelled", "_condition", "_events")

    def __init__(self):
        self._cancelled = False
        self._condition = threading.Condition()
        self._events: deque[Event] = deque()

    def __len__(self) -> int:
        with self._condition:
            return len(self._events)

    def cancel(self):
        """
        Lets the pending or the next call of :meth:`take` return :obj:`None`.
        """
        with self._condition:
            self._cancelled = True
            self._condition.notify_all()

    def put(self, event: Event):
        with self._condition:
            self._events.append(event)
            self._condition.notify()

    def take(self) -> Optional[Event]:
        """
        Removes and returns the oldest event, waits for one if there's none.  Returns
        :obj:`None` if the wait got cancelled.
        """
        with self._condition:
            while True:
                if self._cancelled:
                    self._cancelled = False
                    return None
                if self._events:
                    return self._events.popleft()
                self._condition.wait()


class QueueingSink(ContentSink):
    __slots__ = ("finished", "queue")

    def __init__(self, queue: BlockingEventQueue):
        self.finished = False
        self.queue = queue

    def characters(self, content: str):
        self.queue.put(Text(content))

    def end_document(self):
        if not self.finished:
            self.finished = True
            self.queue.put(Finish())

    def end_element(self, tag_name: str):
        self.queue.put(ElementEnd(tag_name))

    def start_element(self, tag_name: str, attributes: Mapping[str, str]):
        self.queue.put(ElementStart(tag_name, attributes))


class ProducerBridge:
    """
    Feeds the events of one document into a queue, either on the calling thread or
    as work unit on an execution facility.

    :param queue: The queue that receives the events.
    """

    __slots__ = ("_engaged", "queue")

    def __init__(self, queue: BlockingEventQueue):
        self._engaged = False
        self.queue = queue

    def _engage(self):
        if self._engaged:
            raise InvalidOperation("A lexer can only digest one source.")
        self._engaged = True

    def _digest(
        self,
        source: Any,
        parser_options: Optional[ParserOptions],
        source_url: Optional[str],
    ):
        sink = QueueingSink(self.queue)
        config = SimpleNamespace(
            parser_options=parser_options or ParserOptions(),
            sink=sink,
            source_url=source_url,
        )
        logger.debug("Digesting %r.", source)

        try:
            _load_source(source, config)
        except Exception as e:
            if not sink.finished:
                sink.finished = True
                self.queue.put(Failure(e))
            raise

        # for adapters that omit the notification
        sink.end_document()
        logger.debug("Finished digesting %r.", source)

    def _digest_quietly(
        self,
        source: Any,
        parser_options: Optional[ParserOptions],
        source_url: Optional[str],
    ):
        try:
            self._digest(source, parser_options, source_url)
        except Exception:
            logger.debug(
                "Digesting %r failed, the error is passed to the consumer.",
                source,
                exc_info=True,
            )

    def run_synchronous(
        self,
        source: Any,
        parser_options: Optional[ParserOptions] = None,
        source_url: Optional[str] = None,
    ):
        self._engage()
        self._digest(source, parser_options, source_url)

    def run_asynchronous(
        self,
        source: Any,
        executor: Optional[ExecutionFacility] = None,
        parser_options: Optional[ParserOptions] = None,
        source_url: Optional[str] = None,
    ):
        if not (executor is None or hasattr(executor, "submit") or callable(executor)):
            raise TypeError(
                "An executor must either have a `submit` method or be callable."
            )

        self._engage()

        def work():
            self._digest_quietly(source, parser_options, source_url)

        try:
            if executor is None:
                threading.Thread(
                    target=work, name="xlex-producer", daemon=True
                ).start()
            elif hasattr(executor, "submit"):
                executor.submit(work)
            else:
                executor(work)
        except Exception as e:
            self.queue.put(Failure(e))
            raise


def _load_source(source: Any, config: SimpleNamespace):
    loader_excuses: dict[Loader, str] = {}

    for loader in plugin_manager.loaders:
        loader_result = loader(source, config)
        if isinstance(loader_result, str):
            loader_excuses[loader] = loader_result
        else:
            break
    else:
        raise FailedSourceLoading(source, loader_excuses)


__all__ = (
    BlockingEventQueue.__name__,
    ProducerBridge.__name__,
    QueueingSink.__name__,
)
