from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"
    NETWORK = "network"

    @classmethod
    def from_status(cls, status: int) -> "ErrorKind":
        return {
            400: cls.VALIDATION,
            401: cls.UNAUTHORIZED,
            403: cls.FORBIDDEN,
            404: cls.NOT_FOUND,
            409: cls.CONFLICT,
        }.get(status, cls.INTERNAL)


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T
    ok = True


@dataclass(frozen=True)
class Failure:
    error: str
    kind: ErrorKind
    status: Optional[int] = None
    ok = False


ApiResult = Union[Success[Any], Failure]
