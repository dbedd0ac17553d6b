import threading
import traceback
from concurrent.futures import ThreadPoolExecutor

import pytest

from _xlex.bridge import BlockingEventQueue
from xlex import (
    BlockingLexer,
    ElementEnd,
    ElementStart,
    Failure,
    Finish,
    ParserOptions,
    Text,
)
from xlex.exceptions import (
    FailedSourceLoading,
    InvalidOperation,
    ParsingValidityError,
)

from tests import plugins
from tests.conftest import CONTRIBUTED_PARSERS


def drain(queue: BlockingEventQueue) -> list:
    result = []
    while len(queue):
        result.append(queue.take())
    return result


def test_asynchronous_failure():
    lexer = BlockingLexer()
    with ThreadPoolExecutor(max_workers=1) as executor:
        lexer.run_asynchronous(
            "<root/>",
            executor=executor,
            parser_options=ParserOptions(preferred_parsers="faulty"),
        )

    assert lexer.next() == ElementStart("root")
    assert lexer.next() == ElementStart("node", {"n": "1"})
    with pytest.raises(ParsingValidityError, match="Unexpected end"):
        lexer.next()
    # the failure sticks
    with pytest.raises(ParsingValidityError):
        lexer.start("root")
    assert not lexer.finished


@pytest.mark.parametrize("parser", CONTRIBUTED_PARSERS)
def test_asynchronous_invalid_document(parser):
    lexer = BlockingLexer()
    lexer.run_asynchronous(
        "<root><a></b></root>", parser_options=ParserOptions(preferred_parsers=parser)
    )
    with pytest.raises(ParsingValidityError):
        for event in lexer:
            assert event in (ElementStart("root"), ElementStart("a"))


def test_asynchronous_loading_failure():
    lexer = BlockingLexer()
    lexer.run_asynchronous(None)
    with pytest.raises(FailedSourceLoading):
        lexer.next()


def test_asynchronous_with_callable_executor():
    units = []
    lexer = BlockingLexer()
    lexer.run_asynchronous("<root>text</root>", executor=units.append)
    assert len(units) == 1
    assert len(lexer._queue) == 0

    thread = threading.Thread(target=units[0])
    thread.start()
    assert lexer.text("text") == Text("text")
    assert lexer.end("root") == ElementEnd("root")
    assert lexer.next() is None
    thread.join()


def test_asynchronous_with_shut_down_executor():
    executor = ThreadPoolExecutor()
    executor.shutdown()
    lexer = BlockingLexer()

    with pytest.raises(RuntimeError) as exc_info:
        lexer.run_asynchronous("<root/>", executor=executor)

    assert drain(lexer._queue) == [Failure(exc_info.value)]


def test_asynchronous_with_shut_down_executor_reaches_consumer():
    executor = ThreadPoolExecutor()
    executor.shutdown()
    lexer = BlockingLexer()

    with pytest.raises(RuntimeError) as exc_info:
        lexer.run_asynchronous("<root/>", executor=executor)
    with pytest.raises(RuntimeError) as consumer_exc_info:
        lexer.next()
    assert consumer_exc_info.value is exc_info.value


@pytest.mark.parametrize("parser", CONTRIBUTED_PARSERS)
def test_asynchronous_with_executor(links_file, parser):
    lexer = BlockingLexer()
    with ThreadPoolExecutor(max_workers=1) as executor:
        lexer.run_asynchronous(
            links_file,
            executor=executor,
            parser_options=ParserOptions(preferred_parsers=parser),
        )
        assert lexer.start("a", "rel", "next") is not None
        assert lexer.current_attribute("xl:href") == "https://xlex.example/more"
        assert lexer.text("Hello") == Text("  Hello  ")
        assert lexer.end("html") == ElementEnd("html")
        assert lexer.next() is None


def test_consumption_while_producing():
    lexer = BlockingLexer()
    lexer.run_asynchronous(
        "<root/>", parser_options=ParserOptions(preferred_parsers="gated")
    )
    assert lexer.next() == ElementStart("root")
    assert not lexer.finished

    plugins.GATE.set()
    assert lexer.text("through") == Text("through")
    assert lexer.next() == ElementEnd("root")
    assert lexer.next() is None
    assert lexer.finished


def test_cancellation_before_waiting(lex):
    lexer = lex("<root><a/></root>")
    lexer.cancel()
    assert lexer.next() is None
    assert lexer.cancelled
    assert not lexer.finished

    assert lexer.next() == ElementStart("root")
    assert not lexer.cancelled


def test_cancellation_keeps_the_cursor(lex):
    lexer = lex("<root><a/></root>")
    assert lexer.start("root") is not None
    lexer.cancel()
    assert lexer.start("a") is None
    assert lexer.cancelled
    assert lexer.current_tag_name() == "root"
    assert lexer.start("a") == ElementStart("a")


def test_cancellation_while_waiting():
    lexer = BlockingLexer()
    lexer.run_asynchronous(
        "<root/>", parser_options=ParserOptions(preferred_parsers="gated")
    )
    assert lexer.next() == ElementStart("root")

    timer = threading.Timer(0.1, lexer.cancel)
    timer.start()
    assert lexer.next() is None
    assert lexer.cancelled
    timer.join()

    plugins.GATE.set()
    assert lexer.next() == Text("through")


def test_digesting_twice(lex):
    lexer = lex("<root/>")
    with pytest.raises(InvalidOperation):
        lexer.run_synchronous("<root/>")
    with pytest.raises(InvalidOperation):
        lexer.run_asynchronous("<root/>")


def test_invalid_executor():
    lexer = BlockingLexer()
    with pytest.raises(TypeError):
        lexer.run_asynchronous("<root/>", executor=object())
    lexer.run_synchronous("<root/>")
    assert lexer.next() == ElementStart("root")


def test_missing_end_of_document_notification():
    lexer = BlockingLexer()
    lexer.run_synchronous(
        "<root/>", parser_options=ParserOptions(preferred_parsers="forgetful")
    )
    assert drain(lexer._queue) == [
        ElementStart("root"),
        ElementEnd("root"),
        Finish(),
    ]


def test_queue_order():
    queue = BlockingEventQueue()
    events = [ElementStart("a"), Text("b"), ElementEnd("a"), Finish()]
    for event in events:
        queue.put(event)
    assert len(queue) == 4
    assert drain(queue) == events


def test_queue_take_blocks():
    queue = BlockingEventQueue()
    threading.Timer(0.1, queue.put, (Text("late"),)).start()
    assert queue.take() == Text("late")


def test_synchronous_failure():
    lexer = BlockingLexer()
    with pytest.raises(ParsingValidityError):
        lexer.run_synchronous(
            "<root/>", parser_options=ParserOptions(preferred_parsers="faulty")
        )

    events = drain(lexer._queue)
    assert events[:2] == [ElementStart("root"), ElementStart("node", {"n": "1"})]
    assert len(events) == 3
    assert isinstance(events[2], Failure)
    assert isinstance(events[2].cause, ParsingValidityError)
    assert Finish() not in events


def test_synchronous_failure_reaches_consumer():
    lexer = BlockingLexer()
    with pytest.raises(ParsingValidityError) as exc_info:
        lexer.run_synchronous(
            "<root/>", parser_options=ParserOptions(preferred_parsers="faulty")
        )

    assert lexer.next() == ElementStart("root")
    assert lexer.next() == ElementStart("node", {"n": "1"})
    with pytest.raises(ParsingValidityError) as consumer_exc_info:
        lexer.next()
    assert consumer_exc_info.value is exc_info.value


@pytest.mark.parametrize("parser", CONTRIBUTED_PARSERS)
def test_synchronous_invalid_document(parser):
    lexer = BlockingLexer()
    with pytest.raises(ParsingValidityError):
        lexer.run_synchronous(
            "<root><a></b></root>",
            parser_options=ParserOptions(preferred_parsers=parser),
        )
    with pytest.raises(ParsingValidityError):
        for event in lexer:
            assert event in (ElementStart("root"), ElementStart("a"))


def test_repeated_failures_keep_the_traceback():
    lexer = BlockingLexer()
    with pytest.raises(ParsingValidityError):
        lexer.run_synchronous(
            "<root/>", parser_options=ParserOptions(preferred_parsers="faulty")
        )

    lengths = []
    for _ in range(3):
        with pytest.raises(ParsingValidityError) as exc_info:
            list(lexer)
        lengths.append(len(traceback.extract_tb(exc_info.value.__traceback__)))
    assert lengths[0] == lengths[1] == lengths[2]
