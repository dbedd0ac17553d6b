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

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from importlib.metadata import entry_points
from importlib.util import find_spec
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from _xlex.parser import ContentSink, ParserOptions
    from _xlex.typing import (
        BinaryReader,
        Loader,
        LoaderConstraint,
        SecondOrderDecorator,
    )


class PluginManager:
    __slots__ = (
        "loaders",
        "parsers",
    )

    def __init__(self):
        self.loaders: list[Loader] = []
        self.parsers: dict[str, type[XMLEventParserInterface]] = {}

    def get_parser(
        self, preferences: str | Sequence[str]
    ) -> type[XMLEventParserInterface]:
        if isinstance(preferences, str):
            preferences = (preferences,)

        for name in preferences:
            if (parser := self.parsers.get(name)) is not None:
                return parser

        raise ValueError(
            f"No matching parser for the preferences {preferences!r} amongst the "
            f"available ones: {tuple(self.parsers)}"
        )

    @staticmethod
    def load_plugins():
        """
        Loads all modules that are registered as entrypoint in the ``xlex`` group and
        imports contributed extensions whose dependencies are available.
        """
        if find_spec("lxml.etree"):
            import _xlex.plugins.lxml_parser
        if find_spec("xml.sax"):
            import _xlex.plugins.expat_parser
        if find_spec("httpx"):
            import _xlex.plugins.web_loader  # noqa: F401

        for entrypoint in entry_points().select(group="xlex"):
            entrypoint.load()

    def register_loader(
        self, before: LoaderConstraint = None, after: LoaderConstraint = None
    ) -> SecondOrderDecorator:
        """
        Registers a source loader.

        A loader is called with the source that was passed to
        :meth:`xlex.BlockingLexer.run_synchronous` and a :class:`types.SimpleNamespace`
        that carries the ``parser_options``, the ``sink`` to feed and possibly a
        ``source_url``.  If it can't handle the source, it returns a string that
        explains why.  Otherwise it feeds the document into the sink, typically with
        :func:`_xlex.parser.parse_document`, and returns :obj:`None`.

        An example module that is specified as ``xlex`` plugin for an IPFS loader might
        look like this:

        .. testcode::

            from os import getenv
            from types import SimpleNamespace
            from typing import Any

            from _xlex.plugins import plugin_manager
            from _xlex.plugins.web_loader import web_loader
            from _xlex.typing import LoaderResult


            IPFS_GATEWAY = getenv("IPFS_GATEWAY_PREFIX", "https://ipfs.io/ipfs/")


            @plugin_manager.register_loader(before=web_loader)
            def ipfs_loader(source: Any, config: SimpleNamespace) -> LoaderResult:
                if isinstance(source, str) and source.startswith("ipfs://"):
                    return web_loader(IPFS_GATEWAY + source[7:], config)

                # return an indication why this loader didn't attempt to load in order
                # to support debugging
                return "The input value is not an URL with the ipfs scheme."

        Loaders that retrieve a document from an URL should add the origin as string to
        the ``config`` object as ``source_url``.
        """

        if before is not None and after is not None:
            raise NotImplementedError(
                "Loaders may only define one constraint atm. Please open an issue with "
                "a use-case description if you need to define both."
            )

        registered_loaders = self.loaders

        if before is not None:
            if not isinstance(before, Iterable):
                before = (before,)
            index = min(registered_loaders.index(x) for x in before)

        elif after is not None:
            if not isinstance(after, Iterable):
                after = (after,)
            index = max(registered_loaders.index(x) for x in after) + 1

        else:
            index = len(registered_loaders)

        def registrar(loader: Loader) -> Loader:
            assert callable(loader)
            registered_loaders.insert(index, loader)
            return loader

        return registrar


class XMLEventParserInterface(ABC):
    """
    This is the base class for parser adapters.  After initialization their
    :meth:`parse` method will be called to feed a document's contents into a
    :class:`_xlex.parser.ContentSink`.  Instances don't have to care about their state
    beyond the parsing of one input stream as they're only employed once.

    :param options: The parsing options the user passed with the input stream.
    :param base_url: The base URL for resolving references.
    :param encoding: This is the encoding that was either provided by the user,
                     noted in an XML document declaration or indicated by a Byte Order
                     Mark.  But it could also be the fallback value ``utf-8`` if none of
                     the prior was available.
    """

    name: str
    """
    The parser can be selected by this class attribute's value as (member of) a
    :attr:`ParserOptions.preferred_parsers` setting.
    """

    def __init_subclass__(cls):
        plugin_manager.parsers[cls.name] = cls

    @abstractmethod
    def __init__(self, options: ParserOptions, base_url: str | None, encoding: str):
        pass

    @abstractmethod
    def parse(self, data: BinaryReader | str, sink: ContentSink):
        """
        This method must be implemented and call the sink's methods in document order.
        Its :meth:`_xlex.parser.ContentSink.end_document` method must be called
        exactly once after the whole document was processed.  Malformed input must
        be signalled with a :exc:`_xlex.exceptions.ParsingError`.
        """
        pass


plugin_manager = PluginManager()


__all__ = (PluginManager.__name__, XMLEventParserInterface.__name__, "plugin_manager")
