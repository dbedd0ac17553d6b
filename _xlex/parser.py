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
import re
import warnings
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Final, TYPE_CHECKING, NamedTuple, Optional, cast

from _xlex.exceptions import ParsingProcessingError
from _xlex.plugins import plugin_manager

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from _xlex.plugins import XMLEventParserInterface
    from _xlex.typing import BinaryReader, InputStream


BOM_TO_ENCODING_NAME: Final = (
    (4, codecs.BOM_UTF32_LE, "utf-32-le"),
    (4, codecs.BOM_UTF32_BE, "utf-32-be"),
    (3, codecs.BOM_UTF8, "utf-8"),
    (2, codecs.BOM_UTF16_LE, "utf-16-le"),
    (2, codecs.BOM_UTF16_BE, "utf-16-be"),
)


_match_encoding: Final = re.compile(
    rb"""<\?xml\sversion=["']1\.0["']\sencoding=["']([A-Za-z0-9_-]+)["']"""
).match


class _EncodingDetectingReader:
    __slots__ = ("buffer", "first_bytes", "reading")

    def __init__(self, buffer: BinaryReader):
        self.buffer = buffer
        self.first_bytes = b""
        self.reading = False

    def get_encoding(self) -> str | None:
        if self.reading:
            raise RuntimeError("Get the encoding before reading from the buffer!")

        self.first_bytes = self.buffer.read(64)
        return detect_encoding(self.first_bytes)

    def read(self, n: int = -1) -> bytes:
        if self.reading:
            return self.buffer.read(n)
        else:
            self.reading = True
            return self.first_bytes + self.buffer.read(n)


class ContentSink(ABC):
    """
    The receiver of a parser's notifications.  A parser adapter calls these methods in
    document order while it's processing a stream.
    """

    __slots__ = ()

    @abstractmethod
    def start_element(self, tag_name: str, attributes: Mapping[str, str]):
        """
        Called for a start tag.  The tag name and the attributes' names are reported
        as written, including prefixes.
        """

    @abstractmethod
    def characters(self, content: str):
        """Called for a span of character data with resolved entities."""

    @abstractmethod
    def end_element(self, tag_name: str):
        """Called for an end tag and after the start tag of an empty element."""

    @abstractmethod
    def end_document(self):
        """Called once after the whole document was parsed successfully."""


class ParserOptions(NamedTuple):
    """
    The configuration options that define an XML parser's behaviour.

    The used parser backend is determined by their availability and the
    ``preferred_parsers`` setting.  *xlex* comes with two contributed implementations
    and further can be added to the plugin manager based on
    :class:`_xlex.plugins.XMLEventParserInterface`.

    Neither parser resolves namespaces, tag and attribute names are reported with
    their prefixes as they appear in the document.

    The ``expat`` parser adapter depends on the :mod:`xml.sax.expatreader` module from
    the standard library that is available with many Python distributions.

    The ``lxml`` based parser requires the *lxml* package to be present in the
    interpreter environment.  It drops comments and processing instructions before
    character data is reported, hence text around these is reported as one span.
    """

    encoding: Optional[str] = None
    """
    This should be used for streams where the encoding is not noted in an XML document
    declaration or indicated by a BOM for Unicode encodings.  It doesn't affect parsing
    of data that is passed as :class:`str`.  Default: :obj:`None`.
    """
    load_referenced_resources: bool = False
    """Allows the loading of referenced external DTDs.  Default: :obj:`False`."""
    preferred_parsers: str | Sequence[str] = ("lxml", "expat")
    """
    A parser adapter name or a sequence of such that are preferably to be used.
    Default: ``("lxml", "expat")``.
    """
    unplugged: bool = False
    """Don't load referenced resources over network.  Default: :obj:`False`."""


def detect_encoding(stream: bytes) -> str | None:
    if (match := _match_encoding(stream)) is not None:
        return match.group(1).decode("ascii")
    else:
        for bom_size, bom, name in BOM_TO_ENCODING_NAME:
            if stream[:bom_size] == bom:
                return name
        else:
            return None


def _make_parser(
    options: ParserOptions, *, base_url: str | None, encoding: str
) -> XMLEventParserInterface:
    return plugin_manager.get_parser(options.preferred_parsers)(
        options, base_url=base_url, encoding=encoding
    )


def parse_document(
    input_: InputStream,
    options: ParserOptions,
    base_url: str | None,
    sink: ContentSink,
):
    """
    Feeds the document from ``input_`` through a parser into the given ``sink``.  The
    call returns when the parser has processed the whole stream.
    """
    encoding = options.encoding
    if isinstance(input_, str):
        encoding = "utf-8"

    elif isinstance(input_, bytes):
        if encoding is None:
            encoding = detect_encoding(input_)
        input_ = BytesIO(input_)

    elif encoding is None:
        if getattr(input_, "seekable", lambda: False)():
            encoding = detect_encoding(input_.read(64))
            input_.seek(0)
        else:
            input_ = _EncodingDetectingReader(input_)
            encoding = input_.get_encoding()

    if encoding is None:
        warnings.warn(
            "No encoding known for parsing an XML stream. Defaulting to UTF-8.",
            category=UserWarning,
        )
        encoding = "utf-8"

    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ParsingProcessingError(f"Unknown encoding: {encoding!r}") from e

    _make_parser(options, base_url=base_url, encoding=encoding).parse(
        cast("BinaryReader", input_), sink
    )


__all__ = (
    ContentSink.__name__,
    ParserOptions.__name__,
    detect_encoding.__name__,
    parse_document.__name__,
)
