""" Ready-made cache invalidation policies for `LiveArray.with_cache`.
    An invalidator returns True when the cached entry must be re-read. """
from commons import CacheContext, Invalidator

def older_than[T](max_age_ms: float) -> Invalidator[T]:
    if max_age_ms < 0:
        raise ValueError(f"max_age_ms must not be negative, got {max_age_ms}")
    def check(context: CacheContext[T]) -> bool:
        return context.age_ms > max_age_ms
    return check

def over_capacity[T](max_entries: int) -> Invalidator[T]:
    """ Re-reads every entry it is asked about while the cache holds more
        than `max_entries`. Nothing is evicted proactively, so this only
        keeps stale values from being served out of a crowded cache. """
    if max_entries < 0:
        raise ValueError(f"max_entries must not be negative, got {max_entries}")
    def check(context: CacheContext[T]) -> bool:
        return context.cache_count > max_entries
    return check

def any_of[T](*invalidators: Invalidator[T]) -> Invalidator[T]:
    def check(context: CacheContext[T]) -> bool:
        return any(invalidator(context) for invalidator in invalidators)
    return check
