""" Debug output shared by every module. Flip DEBUG (or set `debug: true`
    in a pipeline file) to trace cache hits, misses and pipeline steps. """

DEBUG = False

def log(*args, **kwargs):
    if DEBUG: print(*args, **kwargs)
