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
Factories for the conditions that the matching methods of :class:`xlex.BlockingLexer`
wait for.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from _xlex.events import ElementEnd, ElementStart, Text
from _xlex.exceptions import InvalidArgument

if TYPE_CHECKING:
    from collections.abc import Sequence

    from _xlex.events import Event
    from _xlex.typing import AttributePattern, Condition, PatternFactory


def always(event: Event) -> bool:
    return True


def literal_pattern(value: Any) -> AttributePattern:
    """
    The default pattern factory for attribute values.  Compiled patterns are returned
    as they are, any other object is converted to a string that an attribute value
    must equal, ignoring case.

    >>> literal_pattern("HTTP://example.com").fullmatch("http://example.com")
    <re.Match object; span=(0, 18), match='http://example.com'>
    """
    if isinstance(value, re.Pattern):
        return value
    return re.compile(re.escape(str(value)), re.IGNORECASE)


def attribute_patterns(
    attributes: Sequence[Any], pattern_factory: Optional[PatternFactory] = None
) -> dict[str, AttributePattern]:
    """
    Maps attribute names to patterns from either a single mapping or a flat sequence
    of names and values, e.g. ``("href", "https://xlex.example", "rel", "next")``.
    Pattern objects as values are taken as they are, other values are passed to the
    ``pattern_factory``.
    """
    if pattern_factory is None:
        pattern_factory = literal_pattern

    def make_pattern(value: Any) -> AttributePattern:
        if isinstance(value, re.Pattern):
            return value
        return pattern_factory(value)

    if len(attributes) == 1 and isinstance(attributes[0], Mapping):
        return {str(k): make_pattern(v) for k, v in attributes[0].items()}

    if len(attributes) % 2:
        raise InvalidArgument(
            "Attributes must be given as an even amount of names and values."
        )

    return {
        str(attributes[i]): make_pattern(attributes[i + 1])
        for i in range(0, len(attributes), 2)
    }


def element_start(
    tag_name: str, patterns: Optional[Mapping[str, AttributePattern]] = None
) -> Condition:
    """
    Creates a condition that matches start tags with the given name whose attributes
    include all of the given ones with fully matching values.  Other attributes are
    ignored.
    """
    patterns = dict(patterns or {})

    def condition(event: Event) -> bool:
        if not (isinstance(event, ElementStart) and event.is_tag(tag_name)):
            return False
        attributes = event.attributes
        for name, pattern in patterns.items():
            if (value := attributes.get(name)) is None:
                return False
            if pattern.fullmatch(value) is None:
                return False
        return True

    return condition


def element_end(tag_name: str) -> Condition:
    def condition(event: Event) -> bool:
        return isinstance(event, ElementEnd) and event.is_tag(tag_name)

    return condition


def text(match: str | AttributePattern) -> Condition:
    """
    Creates a condition for text events whose content fully matches the given pattern,
    either as it is or with stripped whitespace.  A string is matched literally.
    """
    pattern = re.compile(re.escape(match)) if isinstance(match, str) else match

    def condition(event: Event) -> bool:
        if not isinstance(event, Text):
            return False
        content = event.content
        return (
            pattern.fullmatch(content) is not None
            or pattern.fullmatch(content.strip()) is not None
        )

    return condition


__all__ = (
    always.__name__,
    attribute_patterns.__name__,
    element_end.__name__,
    element_start.__name__,
    literal_pattern.__name__,
    text.__name__,
)
