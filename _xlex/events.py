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
The event types that a :class:`xlex.BlockingLexer` emits while walking through a
document.  All events are immutable and compare by value.
"""

from __future__ import annotations

from abc import ABC
from enum import IntEnum, auto
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Optional

if TYPE_CHECKING:
    from collections.abc import Mapping


class EventType(IntEnum):
    ElementStart = auto()
    ElementEnd = auto()
    Text = auto()
    Finish = auto()
    Failure = auto()


class Event(ABC):
    """
    The base class of all events.  An event can also be used as condition for
    :meth:`xlex.BlockingLexer.wait_for`, calling it with another event tests both for
    equality:

    >>> ElementEnd("p")(ElementEnd("p"))
    True
    """

    __slots__ = ()

    type: ClassVar[EventType]

    def __call__(self, event: Event) -> bool:
        return self == event

    def __delattr__(self, name):
        raise AttributeError(f"{self.__class__.__name__} instances are immutable.")

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} instances are immutable.")

    def _init_slot(self, name: str, value: Any):
        object.__setattr__(self, name, value)


class TagEvent(Event):
    """The common base for events that are related to a tag."""

    __slots__ = ("_tag_name",)

    _tag_name: str

    def __init__(self, tag_name: str):
        self._init_slot("_tag_name", tag_name)

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._tag_name == other._tag_name

    def __hash__(self) -> int:
        return hash((self.type, self._tag_name))

    def __reduce__(self):
        return self.__class__, (self._tag_name,)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._tag_name!r})"

    @property
    def tag_name(self) -> str:
        """The tag's name as written in the document, including a prefix."""
        return self._tag_name

    def is_tag(self, name: str) -> bool:
        return self._tag_name == name


class ElementStart(TagEvent):
    """
    An element's start tag.  The attributes are copied from the given mapping and
    can't be altered afterwards.

    >>> event = ElementStart("a", {"href": "https://xlex.example"})
    >>> event.attributes["href"]
    'https://xlex.example'
    """

    __slots__ = ("_attributes",)

    type = EventType.ElementStart

    _attributes: Mapping[str, str]

    def __init__(self, tag_name: str, attributes: Optional[Mapping[str, str]] = None):
        super().__init__(tag_name)
        self._init_slot("_attributes", MappingProxyType(dict(attributes or {})))

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (
            self._tag_name == other._tag_name
            and self._attributes == other._attributes
        )

    def __hash__(self) -> int:
        return hash((self.type, self._tag_name, frozenset(self._attributes.items())))

    def __reduce__(self):
        return self.__class__, (self._tag_name, dict(self._attributes))

    def __repr__(self) -> str:
        return f"ElementStart({self._tag_name!r}, {dict(self._attributes)!r})"

    @property
    def attributes(self) -> Mapping[str, str]:
        return self._attributes


class ElementEnd(TagEvent):
    """An element's end tag."""

    __slots__ = ()

    type = EventType.ElementEnd


class Text(Event):
    """
    Character data as one contiguous span that a parser reported.  Its content is
    neither trimmed nor merged with adjacent spans.
    """

    __slots__ = ("_content",)

    type = EventType.Text

    _content: str

    def __init__(self, content: str):
        self._init_slot("_content", content)

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._content == other._content

    def __hash__(self) -> int:
        return hash((self.type, self._content))

    def __reduce__(self):
        return self.__class__, (self._content,)

    def __repr__(self) -> str:
        return f"Text({self._content!r})"

    @property
    def content(self) -> str:
        return self._content


class Finish(Event):
    """
    Signals the end of a document.  There's only one instance of this class.
    """

    __slots__ = ()

    type = EventType.Finish

    _instance: ClassVar[Optional[Finish]] = None

    def __new__(cls) -> Finish:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __reduce__(self):
        return self.__class__, ()

    def __repr__(self) -> str:
        return "Finish()"


class Failure(Event):
    """
    Signals that the producer stopped due to an error.  It is never matched by any
    condition, the lexer raises the wrapped exception instead.
    """

    __slots__ = ("_cause",)

    type = EventType.Failure

    _cause: BaseException

    def __init__(self, cause: BaseException):
        self._init_slot("_cause", cause)

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._cause is other._cause

    def __hash__(self) -> int:
        return hash((self.type, id(self._cause)))

    def __reduce__(self):
        return self.__class__, (self._cause,)

    def __repr__(self) -> str:
        return f"Failure({self._cause!r})"

    @property
    def cause(self) -> BaseException:
        return self._cause


__all__ = (
    ElementEnd.__name__,
    ElementStart.__name__,
    Event.__name__,
    EventType.__name__,
    Failure.__name__,
    Finish.__name__,
    TagEvent.__name__,
    Text.__name__,
)
