from __future__ import annotations

from threading import Event
from typing import TYPE_CHECKING

from _xlex.exceptions import ParsingValidityError
from _xlex.plugins import XMLEventParserInterface

if TYPE_CHECKING:
    from _xlex.parser import ContentSink


GATE = Event()


class FaultyParser(XMLEventParserInterface):
    """Reports two start tags and fails then."""

    name = "faulty"

    def __init__(self, options, base_url, encoding):
        pass

    def parse(self, data, sink: ContentSink):
        sink.start_element("root", {})
        sink.start_element("node", {"n": "1"})
        raise ParsingValidityError("Unexpected end of data.")


class ForgetfulParser(XMLEventParserInterface):
    """Doesn't notify about the document's end."""

    name = "forgetful"

    def __init__(self, options, base_url, encoding):
        pass

    def parse(self, data, sink: ContentSink):
        sink.start_element("root", {})
        sink.end_element("root")


class GatedParser(XMLEventParserInterface):
    """Reports a start tag and waits for the :obj:`GATE` to open before it proceeds."""

    name = "gated"

    def __init__(self, options, base_url, encoding):
        pass

    def parse(self, data, sink: ContentSink):
        sink.start_element("root", {})
        assert GATE.wait(timeout=10)
        sink.characters("through")
        sink.end_element("root")
        sink.end_document()
