""" Live arrays: list-like views whose elements are computed on demand by
    accessor functions instead of being stored. Derived views (map, window,
    reverse, cache) wrap a parent and stay bound to whatever store sits at
    the bottom of the chain, so changes to the store show through every view
    and writes through a view reach the store when a setter exists.

    Every aggregate reads the length exactly once and then only calls get(i),
    because get_length may be costly or have side effects. So does a for loop,
    but list(view), tuple(view) and [*view] also ask __len__ for a size hint
    and read it twice; use to_list() when that matters. """
from __future__ import annotations
from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableSequence
from dataclasses import dataclass
from time import monotonic
from typing import Any, Callable, Generic, Iterator, TypeVar, overload

from commons import (Callback, CacheContext, Getter, ImmutableWriteError, Index, Invalidator,
                     LengthGetter, LiveArrayOptions, LiveArrayRangeError, Predicate,
                     ReadOnlyMapError, Reducer, Setter)
from debug import log

T = TypeVar('T')
U = TypeVar('U')

_MISSING: Any = object()

class LiveArray(ABC, Generic[T]):

    @abstractmethod
    def get_length(self) -> int:
        pass

    @abstractmethod
    def get(self, index: Index) -> T:
        pass

    def set(self, index: Index, value: T) -> None:
        raise ImmutableWriteError()

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------

    @staticmethod
    def from_options(options: LiveArrayOptions[T] | Mapping[str, Any]) -> LiveArray[T]:
        return AccessorArray(options['get_length'], options['get'], options.get('set'))

    @staticmethod
    def from_sequence(source: MutableSequence[T]) -> LiveArray[T]:
        """ Binds to `source` by reference. Reading outside [0, len) gives None,
            like reading an absent element. """
        def get(i: Index) -> T:
            return source[i] if 0 <= i < len(source) else None  # type: ignore[return-value]

        def set(i: Index, value: T) -> None:
            source[i] = value

        return AccessorArray(lambda: len(source), get, set)

    @staticmethod
    def from_sequence_mapped(source: MutableSequence[T], forward: Callable[[T], U],
                             backward: Callable[[U], T] | None = None) -> LiveArray[U]:
        return LiveArray.from_sequence(source).map_live(
            lambda item, _: forward(item),
            (lambda item, _: backward(item)) if backward else None)

    # ------------------------------------------------------------------
    # indexing
    # ------------------------------------------------------------------

    @property
    def length(self) -> int:
        return self.get_length()

    def __len__(self) -> int:
        return self.get_length()

    @overload
    def __getitem__(self, key: int) -> T: ...
    @overload
    def __getitem__(self, key: slice) -> list[T]: ...

    def __getitem__(self, key: int | slice) -> T | list[T]:
        if isinstance(key, slice):
            return [self.get(i) for i in range(*key.indices(self.get_length()))]
        # negative keys go to get() untouched, only at() wraps them
        return self.get(key)

    def __setitem__(self, key: int, value: T):
        self.set(key, value)

    def __iter__(self) -> Iterator[T]:
        # read the length now, not on the first next()
        return self._iterate(self.get_length())

    def _iterate(self, length: int) -> Iterator[T]:
        for i in range(length):
            yield self.get(i)

    def __contains__(self, item: object) -> bool:
        return self.includes(item)

    def __repr__(self):
        """ Realizes the whole view, so every get() runs. """
        return f'{type(self).__name__}({self.to_list()})'

    def to_list(self) -> list[T]:
        return [item for item in self]

    def at(self, idx: Index) -> T:
        if idx < 0: idx += self.get_length()
        return self.get(idx)

    # ------------------------------------------------------------------
    # aggregates
    # ------------------------------------------------------------------

    def map(self, fn: Callback[T, U]) -> list[U]:
        return [item for item in self.map_live(fn)]

    def for_each(self, fn: Callback[T, Any]) -> None:
        for i in range(self.get_length()):
            fn(self.get(i), i)

    def find(self, fn: Predicate[T]) -> T | None:
        for i in range(self.get_length()):
            value = self.get(i)
            if fn(value, i): return value
        return None

    def find_index(self, fn: Predicate[T]) -> int:
        for i in range(self.get_length()):
            if fn(self.get(i), i): return i
        return -1

    def some(self, fn: Predicate[T]) -> bool:
        for i in range(self.get_length()):
            if fn(self.get(i), i): return True
        return False

    def every(self, fn: Predicate[T]) -> bool:
        for i in range(self.get_length()):
            if not fn(self.get(i), i): return False
        return True

    def filter(self, fn: Predicate[T]) -> list[T]:
        items: list[T] = []
        for i in range(self.get_length()):
            value = self.get(i)
            if fn(value, i): items.append(value)
        return items

    def join(self, glue: str = ",") -> str:
        return glue.join(str(self.get(i)) for i in range(self.get_length()))

    @overload
    def reduce(self, fn: Reducer[T, T]) -> T: ...
    @overload
    def reduce(self, fn: Reducer[T, U], initial: U) -> U: ...

    def reduce(self, fn, initial=_MISSING):
        # no empty check: without a seed an empty view still reads get(0)
        accum, start = (self.get(0), 1) if initial is _MISSING else (initial, 0)
        for i in range(start, self.get_length()):
            accum = fn(accum, self.get(i), i)
        return accum

    def includes(self, item: object, from_index: int = 0) -> bool:
        for i in range(from_index, self.get_length()):
            if self.get(i) == item: return True
        return False

    def index_of(self, item: object, from_index: int = 0) -> int:
        for i in range(from_index, self.get_length()):
            if self.get(i) == item: return i
        return -1

    def last_index_of(self, item: object, from_index: int | None = None) -> int:
        # the default start is length, one past the last index
        if from_index is None: from_index = self.get_length()
        for i in range(from_index, -1, -1):
            if self.get(i) == item: return i
        return -1

    def slice(self, start: int, end: int | None = None) -> list[T]:
        length = self.get_length()
        if end is None: end = length
        elif end < 0: end += length
        return [self.get(i) for i in range(start, end)]

    # ------------------------------------------------------------------
    # live views
    # ------------------------------------------------------------------

    def map_live(self, forward: Callback[T, U],
                 backward: Callback[U, T] | None = None) -> LiveArray[U]:
        return MappedArray(self, forward, backward)

    def slice_live(self, start: int, end: int | None = None) -> LiveArray[T]:
        return WindowArray(self, start, end)

    def reverse_live(self) -> LiveArray[T]:
        return ReversedArray(self)

    def with_cache(self, invalidator: Invalidator[T] | None = None) -> CachedArray[T]:
        return CachedArray(self, invalidator)


class AccessorArray(LiveArray[T]):
    """ The leaf of every chain: three functions supplied by the caller.
        No bounds checking happens here, out of range is up to `get`/`set`. """
    _get_length: LengthGetter
    _get: Getter[T]
    _set: Setter[T] | None

    def __init__(self, get_length: LengthGetter, get: Getter[T], set: Setter[T] | None = None):
        self._get_length = get_length
        self._get = get
        self._set = set

    def get_length(self) -> int:
        return self._get_length()

    def get(self, index: Index) -> T:
        return self._get(index)

    def set(self, index: Index, value: T) -> None:
        if self._set is None:
            raise ImmutableWriteError()
        self._set(index, value)


class MappedArray(LiveArray[U], Generic[T, U]):
    _parent: LiveArray[T]

    def __init__(self, parent: LiveArray[T], forward: Callback[T, U],
                 backward: Callback[U, T] | None = None):
        self._parent = parent
        self._forward = forward
        self._backward = backward

    def get_length(self) -> int:
        return self._parent.get_length()

    def get(self, index: Index) -> U:
        return self._forward(self._parent.get(index), index)

    def set(self, index: Index, value: U) -> None:
        if self._backward is None:
            raise ReadOnlyMapError()
        self._parent.set(index, self._backward(value, index))


class WindowArray(LiveArray[T]):
    """ A fixed window [start, end) over the parent. The bounds are taken
        from the parent's length once, here, and never follow it again. """
    _parent: LiveArray[T]
    _start: int
    _length: int

    def __init__(self, parent: LiveArray[T], start: int, end: int | None = None):
        self._parent = parent
        self._start = start
        if end is None: end = parent.get_length()
        elif end < 0: end += parent.get_length()
        self._length = end - start

    def _check(self, index: Index):
        if index >= self._length or index < 0:
            raise LiveArrayRangeError()

    def get_length(self) -> int:
        return self._length

    def get(self, index: Index) -> T:
        self._check(index)
        return self._parent.get(index + self._start)

    def set(self, index: Index, value: T) -> None:
        self._check(index)
        self._parent.set(index + self._start, value)


class ReversedArray(LiveArray[T]):
    """ Unlike a window, follows the parent's length on every access. """
    _parent: LiveArray[T]

    def __init__(self, parent: LiveArray[T]):
        self._parent = parent

    def get_length(self) -> int:
        return self._parent.get_length()

    def get(self, index: Index) -> T:
        return self._parent.get(self._parent.get_length() - 1 - index)

    def set(self, index: Index, value: T) -> None:
        self._parent.set(self._parent.get_length() - 1 - index, value)


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    value: T
    created: float


class CachedArray(LiveArray[T]):
    """ Memoizes reads per index. Entries live until the invalidator says
        otherwise or a write replaces them; without an invalidator they are
        permanent and the cache grows without bound. The length is never
        cached. """
    _parent: LiveArray[T]
    _invalidator: Invalidator[T] | None
    _cache: dict[Index, CacheEntry[T]]

    def __init__(self, parent: LiveArray[T], invalidator: Invalidator[T] | None = None):
        self._parent = parent
        self._invalidator = invalidator
        self._cache = {}

    @property
    def cache_count(self) -> int:
        return len(self._cache)

    def __repr__(self):
        # printing must not fill the cache or call the parent
        return f'{type(self).__name__}(cached={len(self._cache)})'

    def _store(self, index: Index, value: T):
        self._cache[index] = CacheEntry(value, monotonic())

    def get_length(self) -> int:
        return self._parent.get_length()

    def get(self, index: Index) -> T:
        entry = self._cache.get(index)
        if entry is not None and self._invalidator is not None:
            context = CacheContext(
                value=entry.value,
                index=index,
                cache_count=len(self._cache),
                age_ms=(monotonic() - entry.created) * 1000,
            )
            if self._invalidator(context):
                log(f"[cache] invalidated {index}")
                del self._cache[index]
                entry = None
        if entry is None:
            log(f"[cache] miss {index}")
            self._store(index, self._parent.get(index))
        else:
            log(f"[cache] hit {index}")
        return self._cache[index].value

    def set(self, index: Index, value: T) -> None:
        self._parent.set(index, value)
        # a write is trusted as current, the invalidator is not asked
        log(f"[cache] write-through {index}")
        self._store(index, value)

    def invalidate(self, index: Index | None = None) -> None:
        """ Drops the entry for `index`, or every entry if no index is given.
            For callers that change the store behind the cache's back. """
        if index is None: self._cache.clear()
        else: self._cache.pop(index, None)
