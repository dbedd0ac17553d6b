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

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, AnyStr, BinaryIO, Protocol, TypeAlias, TypeVar

if TYPE_CHECKING:
    import re
    from collections.abc import Iterable
    from types import SimpleNamespace

    from _xlex.events import Event


# protocols


class BinaryReader(Protocol):
    def close(self): ...

    def read(self, n: int = -1) -> bytes: ...


class Submitter(Protocol):
    def submit(self, fn: Callable[[], Any], /) -> Any: ...


# aliases


Attributes: TypeAlias = "dict[str, str]"
AttributePattern: TypeAlias = "re.Pattern[str]"
Condition: TypeAlias = "Callable[[Event], bool]"
PatternFactory: TypeAlias = "Callable[[Any], re.Pattern[str]]"

GenericDecorated = TypeVar("GenericDecorated", bound=Callable[..., Any])
SecondOrderDecorator: TypeAlias = "Callable[[GenericDecorated], GenericDecorated]"

ExecutionFacility: TypeAlias = "Submitter | Callable[[Callable[[], None]], Any]"
InputStream: TypeAlias = AnyStr | BinaryIO
LoaderResult: TypeAlias = "str | None"
Loader: TypeAlias = "Callable[[Any, SimpleNamespace], LoaderResult]"
LoaderConstraint: TypeAlias = "Loader | Iterable[Loader] | None"


#


__all__ = (
    "AttributePattern",
    "Attributes",
    "BinaryReader",
    "Condition",
    "ExecutionFacility",
    "GenericDecorated",
    "InputStream",
    "Loader",
    "LoaderConstraint",
    "LoaderResult",
    "PatternFactory",
    "SecondOrderDecorator",
    Submitter.__name__,
)
