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

import codecs
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlparse
from xml import sax
from xml.sax import expatreader

from _xlex.exceptions import (
    InvalidCodePath,
    ParsingEmptyStream,
    ParsingError,
    ParsingProcessingError,
    ParsingValidityError,
)
from _xlex.plugins import XMLEventParserInterface


if TYPE_CHECKING:
    from _xlex.parser import ContentSink, ParserOptions
    from _xlex.typing import BinaryReader


class ContentHandler(sax.handler.ContentHandler):
    __slots__ = ("sink",)

    def __init__(self, sink: ContentSink):
        super().__init__()
        self.sink = sink

    def characters(self, content: str):
        self.sink.characters(content)

    def endDocument(self):  # noqa: N802
        self.sink.end_document()

    def endElement(self, name: str):  # noqa: N802
        self.sink.end_element(name)

    def ignorableWhitespace(self, whitespace: str):  # noqa: N802
        raise InvalidCodePath

    def skippedEntity(self, name: str):  # noqa: N802
        raise ParsingProcessingError(f"The entity '{name}' could not be resolved.")

    def startElement(  # noqa: N802
        self, name: str, attrs: sax.xmlreader.AttributesImpl
    ):
        self.sink.start_element(name, dict(attrs.items()))


class EntityResolver(sax.handler.EntityResolver):
    __slots__ = ("base_url", "options")

    def __init__(self, options: ParserOptions, base_url: str | None):
        self.base_url = base_url
        self.options = options

    def resolveEntity(  # noqa: N802
        self, publicId: str | None, systemId: str | None  # noqa: N803
    ):
        if not self.options.load_referenced_resources:
            raise ParsingProcessingError(
                "The document includes character entities that are declared in "
                "external resources."
            )

        _id = systemId or publicId
        assert _id is not None
        url = urljoin(self.base_url or "", _id, allow_fragments=False)

        if self.options.unplugged and urlparse(url).scheme != "file":
            raise ParsingProcessingError(f"Cannot load external resource '{_id}'.")

        return url


class _BufferingExpatReader(expatreader.ExpatParser):
    # expat would otherwise report character data in chunks that end at line breaks
    # and entity references
    def reset(self):
        super().reset()
        self._parser.buffer_text = True


class ExpatParser(XMLEventParserInterface):
    __slots__ = ("encoding", "fed", "parser")

    name = "expat"

    def __init__(self, options: ParserOptions, base_url: str | None, encoding: str):
        self.encoding = encoding
        self.fed = False
        self.parser = self.make_parser(options, base_url=base_url)

    def feed(self, data: str):
        if data:
            self.fed = True
        self.parser.feed(data)

    def make_parser(
        self, options: ParserOptions, base_url: str | None
    ) -> sax.xmlreader.IncrementalParser:
        parser = _BufferingExpatReader()
        parser.setFeature(sax.handler.feature_namespaces, False)
        parser.setEntityResolver(EntityResolver(options, base_url))
        parser.setFeature(sax.handler.feature_external_ges, True)
        return parser

    def parse(self, data: BinaryReader | str, sink: ContentSink):
        self.parser.setContentHandler(ContentHandler(sink))
        try:
            if isinstance(data, str):
                self.feed(data)
            else:
                decoder = codecs.getincrementaldecoder(self.encoding)()
                while chunk := data.read(8192):
                    self.feed(decoder.decode(chunk))
                self.feed(decoder.decode(b"", final=True))

            if not self.fed:
                raise ParsingEmptyStream
            self.parser.close()
        except ParsingError:
            raise
        except sax.SAXParseException as e:
            raise ParsingValidityError(str(e)) from e
        except UnicodeDecodeError as e:
            raise ParsingValidityError(str(e)) from e


__all__ = (ExpatParser.__name__,)
