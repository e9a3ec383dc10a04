"""Tagged success/failure results for calls that cross the service boundary.

WHY: The sync controller must never receive a half-parsed transcript.
Upstream clients raise typed exceptions; the session catches them once
and hands the UI either Ok(value) or Err(error), so the caller has to
look at the tag before touching the value.

RULES:
- Ok.value is already validated
- Err.error is an UpstreamError (see podcast_reader.api.errors)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar, Union

if TYPE_CHECKING:
    from podcast_reader.api.errors import UpstreamError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: UpstreamError

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return self.error.message


Result = Union[Ok[T], Err]
