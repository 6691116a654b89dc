from sys import argv, exit
from typing import Any
from yaml import safe_load as yaml_load

import debug
from debug import log
from invalidators import any_of, older_than, over_capacity
from live_array import LiveArray

type Step = str | dict[str, Any]

def read_pipeline(file: str) -> dict[str, Any]:
    with open(file, 'r') as f:
        data = yaml_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{file}: expected a mapping at the top level")
    if not isinstance(data.get('data'), list):
        raise ValueError(f"{file}: 'data' must be a list")
    return data

def _cache_step(view: LiveArray, options: dict[str, Any] | None) -> LiveArray:
    options = options or {}
    policies = []
    if 'max_age_ms' in options: policies.append(older_than(options['max_age_ms']))
    if 'max_entries' in options: policies.append(over_capacity(options['max_entries']))
    unknown = set(options) - {'max_age_ms', 'max_entries'}
    if unknown:
        raise ValueError(f"unknown cache options: {', '.join(sorted(unknown))}")
    if not policies: return view.with_cache()
    return view.with_cache(policies[0] if len(policies) == 1 else any_of(*policies))

# yaml booleans are ints to isinstance
def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

def _number(name: str, value: Any) -> int | float:
    if not (_is_int(value) or isinstance(value, float)):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    return value

def apply_step(view: LiveArray, step: Step) -> LiveArray:
    if isinstance(step, str):
        name, arg = step, None
    elif isinstance(step, dict) and len(step) == 1:
        [(name, arg)] = step.items()
    else:
        raise ValueError(f"invalid step: {step!r}")

    log(f"[pipeline] {name}" + (f" {arg}" if arg is not None else ""))
    match name:
        case 'slice':
            bounds = arg if isinstance(arg, list) else [arg]
            if not 1 <= len(bounds) <= 2 or not all(_is_int(b) for b in bounds):
                raise ValueError(f"slice: expected [start] or [start, end] integers, got {arg!r}")
            return view.slice_live(*bounds)
        case 'reverse':
            if arg is not None and not isinstance(arg, bool):
                raise ValueError(f"reverse: expected true or false, got {arg!r}")
            return view if arg is False else view.reverse_live()
        case 'scale':
            k = _number(name, arg)
            if k == 0:
                raise ValueError("scale: factor must not be 0, writes could not be mapped back")
            return view.map_live(lambda v, _: v * k, lambda v, _: v / k)
        case 'offset':
            k = _number(name, arg)
            return view.map_live(lambda v, _: v + k, lambda v, _: v - k)
        case 'cache':
            return _cache_step(view, arg)
        case _:
            raise ValueError(f"unknown step: {name}")

def build_view(pipeline: dict[str, Any]) -> tuple[list, LiveArray]:
    """ returns the backing list (shared, not copied) and the final view """
    source = pipeline['data']
    view = LiveArray.from_sequence(source)
    for step in pipeline.get('steps') or []:
        view = apply_step(view, step)
    return source, view

def main(file: str):
    pipeline = read_pipeline(file)
    if pipeline.get('debug'): debug.DEBUG = True
    source, view = build_view(pipeline)
    print(f"view: [{view.join(', ')}]")
    writes = pipeline.get('writes') or {}
    if writes:
        for index, value in writes.items():
            view[int(index)] = value
        print(f"view after writes: [{view.join(', ')}]")
        print(f"data after writes: {source}")

if __name__ == '__main__':
    if len(argv) != 2:
        print('Usage: python3 main.py pipeline_file')
        exit(1)
    main(argv[1])
