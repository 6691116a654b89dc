from dataclasses import dataclass
from typing import Any, Callable, NotRequired, TypedDict

type Index = int
type LengthGetter = Callable[[], int]
type Getter[T] = Callable[[Index], T]
type Setter[T] = Callable[[Index, T], None]

# callbacks mirror the array callbacks: element first, index second
type Callback[T, R] = Callable[[T, Index], R]
type Predicate[T] = Callable[[T, Index], Any]
type Reducer[T, Acc] = Callable[[Acc, T, Index], Acc]
type Invalidator[T] = Callable[[CacheContext[T]], bool | None]

class LiveArrayOptions[T](TypedDict):
    get_length: LengthGetter
    get: Getter[T]
    set: NotRequired[Setter[T]]

@dataclass(frozen=True, slots=True)
class CacheContext[T]:
    """ What an invalidator gets to see about a cached entry """
    value: T
    index: Index
    # number of entries cached at the time of the check
    cache_count: int
    # milliseconds since the entry was cached
    age_ms: float

class LiveArrayError(Exception):
    pass

class ImmutableWriteError(LiveArrayError):
    def __init__(self, message: str = "This LiveArray is read-only"):
        super().__init__(message)

class ReadOnlyMapError(ImmutableWriteError):
    def __init__(self, message: str = "This LiveArray map is read-only"):
        super().__init__(message)

class LiveArrayRangeError(LiveArrayError, IndexError):
    def __init__(self, message: str = "Index out of range"):
        super().__init__(message)
