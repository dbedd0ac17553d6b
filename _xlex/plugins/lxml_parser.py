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

from typing import TYPE_CHECKING, Final

from lxml import etree

from _xlex.exceptions import ParsingEmptyStream, ParsingError, ParsingValidityError
from _xlex.plugins import XMLEventParserInterface


if TYPE_CHECKING:
    from _xlex.parser import ContentSink, ParserOptions
    from _xlex.typing import Attributes, BinaryReader


XML_NAMESPACE: Final = "http://www.w3.org/XML/1998/namespace"


def qualified_name(element: etree._Element) -> str:
    local_name = etree.QName(element).localname
    if element.prefix is None:
        return local_name
    return f"{element.prefix}:{local_name}"


class LxmlParser(XMLEventParserInterface):
    __slots__ = ("fed", "parser", "sink")

    name = "lxml"

    def __init__(self, options: ParserOptions, base_url: str | None, encoding: str):
        if encoding.endswith(("-be", "-le")):
            encoding = encoding[:-3]

        self.fed = False
        self.parser = etree.XMLPullParser(
            base_url=base_url,
            dtd_validation=False,
            encoding=encoding,
            events=("end", "start"),
            load_dtd=options.load_referenced_resources,
            no_network=options.unplugged,
            remove_blank_text=False,
            remove_comments=True,
            remove_pis=True,
            resolve_entities=True,
            strip_cdata=True,
        )
        self.sink: ContentSink

    def emit_events(self):
        for event in self.parser.read_events():
            self.handle_event(event)

    def feed(self, data: bytes | str):
        if not data:
            return
        self.fed = True
        try:
            self.parser.feed(data)
        finally:
            self.emit_events()

    def handle_element_preceding_text(self, element: etree._Element):
        if ((parent := element.getparent()) is not None) and (
            parent.index(element) == 0
        ):
            if parent.text:
                self.sink.characters(parent.text)
        elif (previous := element.getprevious()) is not None:
            if previous.tail:
                self.sink.characters(previous.tail)
            previous.clear()

    def handle_event(self, event: tuple[str, etree._Element]):
        action, element = event
        assert isinstance(element, etree._Element)

        if action == "end":
            if len(element):
                if element[-1].tail:
                    self.sink.characters(element[-1].tail)
                    element[-1].tail = None
            else:
                if element.text:
                    self.sink.characters(element.text)

            self.sink.end_element(qualified_name(element))
        elif action == "start":
            self.handle_element_preceding_text(element)
            self.sink.start_element(
                qualified_name(element), self.process_attributes(element)
            )

    def parse(self, data: BinaryReader | str, sink: ContentSink):
        self.sink = sink
        try:
            if isinstance(data, str):
                self.feed(data)
            else:
                while chunk := data.read(8192):
                    self.feed(chunk)

            if not self.fed:
                raise ParsingEmptyStream
            try:
                self.parser.close()
            finally:
                self.emit_events()
        except ParsingError:
            raise
        except etree.ParseError as e:
            raise ParsingValidityError(str(e)) from e

        sink.end_document()

    def process_attributes(self, element: etree._Element) -> Attributes:
        result = {}

        nsmap = element.nsmap
        parent = element.getparent()
        inherited = {} if parent is None else parent.nsmap
        for prefix, namespace in nsmap.items():
            if inherited.get(prefix) != namespace:
                result["xmlns" if prefix is None else f"xmlns:{prefix}"] = namespace

        prefixes = {v: k for k, v in nsmap.items() if k is not None}
        prefixes[XML_NAMESPACE] = "xml"
        for name, value in element.attrib.items():
            assert isinstance(name, str)
            assert isinstance(value, str)
            qname = etree.QName(name)
            if qname.namespace is None or qname.namespace not in prefixes:
                result[qname.localname] = value
            else:
                result[f"{prefixes[qname.namespace]}:{qname.localname}"] = value

        return result


__all__ = (LxmlParser.__name__,)
