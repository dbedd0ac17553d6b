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

"""These are the specific xlex exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from _xlex.typing import Loader


class XLexBaseException(Exception):
    pass


class FailedSourceLoading(XLexBaseException):
    """
    Raised when none of the registered loaders accepted a source that shall be
    digested.
    """

    def __init__(self, source: Any, excuses: dict[Loader, str]):
        self.source = source
        self.excuses = excuses

    def __str__(self):
        return f"Couldn't load {self.source!r} with these loaders: {self.excuses}"


class InvalidArgument(XLexBaseException, ValueError):
    """Raised when a matcher is called with malformed arguments."""

    pass


class InvalidCodePath(XLexBaseException, RuntimeError):
    """Raised when a code path that is not expected to be executed is reached."""

    def __init__(self):  # pragma: no cover
        super().__init__(
            "An unintended path was taken through the code. Please report this bug."
        )


class InvalidOperation(XLexBaseException):
    """Raised when an invalid operation is attempted by the client code."""

    pass


class ParsingError(XLexBaseException):
    pass


class ParsingProcessingError(ParsingError):
    pass


class ParsingValidityError(ParsingError):
    pass


class ParsingEmptyStream(ParsingProcessingError):
    def __init__(self):
        super().__init__("The input stream is empty.")


class TypeMismatch(XLexBaseException, TypeError):
    """
    Raised when a cursor accessor is used while the last matched event is absent or
    of another kind.
    """

    def __init__(self, expected: str, found: Any):
        self.expected = expected
        self.found = found
        super().__init__(f"The last matched event is not {expected}, but {found!r}.")


__all__ = (
    FailedSourceLoading.__name__,
    InvalidArgument.__name__,
    InvalidCodePath.__name__,
    InvalidOperation.__name__,
    ParsingEmptyStream.__name__,
    ParsingError.__name__,
    ParsingProcessingError.__name__,
    ParsingValidityError.__name__,
    TypeMismatch.__name__,
    XLexBaseException.__name__,
)
