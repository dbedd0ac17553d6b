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
The ``core_loaders`` module provides a set of loaders to read documents from various
data sources.
"""

from __future__ import annotations

from contextlib import suppress
from io import IOBase, TextIOBase, UnsupportedOperation
from pathlib import Path
from typing import TYPE_CHECKING, Any

from _xlex.parser import parse_document
from _xlex.plugins import plugin_manager

if TYPE_CHECKING:
    from types import SimpleNamespace

    from _xlex.typing import LoaderResult


@plugin_manager.register_loader()
def path_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader reads from a file that is pointed at with a :class:`pathlib.Path`
    instance. The file's URI will be bound to ``source_url`` on the ``config``.
    """
    if isinstance(data, Path):
        if getattr(config, "source_url", None) is None:
            config.source_url = (Path.cwd() / data).as_uri()
        with data.open("rb") as file:
            return buffer_loader(file, config)
    return "The input value is not a pathlib.Path instance."


@plugin_manager.register_loader(after=path_loader)
def buffer_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader reads a document from a :term:`file-like object` that reads binary
    data.
    """
    if isinstance(data, IOBase) and not isinstance(data, TextIOBase):
        if (
            getattr(config, "source_url", None) is None
            and isinstance(name := getattr(data, "name", None), (bytes, str))
            and (
                path := Path.cwd()
                / Path(name if isinstance(name, str) else name.decode())
            ).is_file()
        ):
            config.source_url = path.as_uri()
        with suppress(UnsupportedOperation):
            data.seek(0)
        parse_document(
            data,
            config.parser_options,
            base_url=getattr(config, "source_url", None),
            sink=config.sink,
        )
        return None
    return "The input value is no binary buffer object."


@plugin_manager.register_loader()
def text_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    Parses a string or a byte sequence containing a full document.
    """
    if isinstance(data, (bytes, str)):
        parse_document(
            data,
            config.parser_options,
            base_url=getattr(config, "source_url", None),
            sink=config.sink,
        )
        return None
    return "The input value is not a byte sequence or a string."


__all__ = (
    buffer_loader.__name__,
    path_loader.__name__,
    text_loader.__name__,
)
