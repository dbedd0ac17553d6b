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

from _xlex.events import (
    ElementEnd,
    ElementStart,
    Event,
    EventType,
    Failure,
    Finish,
    TagEvent,
    Text,
)
from _xlex.lexer import BlockingLexer
from _xlex.parser import ContentSink, ParserOptions, detect_encoding
from _xlex.plugins import (
    core_loaders,  # noqa: F401
    plugin_manager as _plugin_manager,
)


# plugin loading


_plugin_manager.load_plugins()


__all__ = (
    BlockingLexer.__name__,
    ContentSink.__name__,
    ElementEnd.__name__,
    ElementStart.__name__,
    Event.__name__,
    EventType.__name__,
    Failure.__name__,
    Finish.__name__,
    ParserOptions.__name__,
    TagEvent.__name__,
    Text.__name__,
    detect_encoding.__name__,
)
