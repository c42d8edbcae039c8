r"""@package approxgen.utils

General utilities for simplifying certain tasks in Python.
"""

from contextlib import contextmanager
import datetime
import os
import time
from timeit import default_timer


__all__ = [
    "lmap",
    "get_chunks",
    "parallel_compute",
    "process_pool",
    "print_indented",
    "timethis",
]


def lmap(func, *iterables):
    r"""Implementation of `map` that returns a list instead of a generator."""
    return list(map(func, *iterables))


def get_chunks(items, chunksize):
    """Generator for partitioning items into chunks."""
    if not isinstance(items, (list, tuple)):
        items = list(items)
    for i in range(0, len(items), chunksize):
        yield items[i:i+chunksize]


def _available_cpus():
    if hasattr(os, 'sched_getaffinity'):
        return len(os.sched_getaffinity(0))
    return os.cpu_count() or 1


def parallel_compute(func, arg_list, args=(), kwargs=None, processes=None,
                     callstyle='plain', pool=None):
    r"""Perform a task on a list of arguments in parallel.

    This uses multiple processes to perform the computation of `func` once for
    each element of `arg_list` in parallel. All objects involved (the function
    as well as the arguments and results) must be picklable for
    cross-process transfer.

    The argument list is distributed round-robin onto `N` tasks, where
    `N==processes` is the number of parallel processes to invoke. Once all
    processes have finished, the results are collected and returned in the
    order they were passed in `arg_list`.

    @param func
        Callable to invoke for each element of `arg_list`. Must be picklable,
        e.g. a module level function.
    @param arg_list
        Iterable of arguments to let `func` work on. Each element may be the
        argument itself, or a list/tuple of arguments, or a dictionary with
        keyword arguments. The interpretation is configured using `callstyle`.
    @param args
        Additional positional arguments to pass to `func` in each call.
    @param kwargs
        Additional keyword arguments to pass to `func` in each call.
    @param processes
        Number of processes to run in parallel. If not given, uses the number
        of available threads of the current architecture. With one process,
        everything is computed sequentially in the current process.
    @param callstyle
        How to pass the individual arguments in `arg_list` to `func`.
        Default is `plain`. The values mean: `plain` to pass the argument as
        first positional argument, `list` to expand the argument into a list
        and pass the elements as individual positional arguments, or `dict` to
        treat the elements as dictionaries to pass as keyword arguments to
        `func`.
    @param pool
        Optional pool to re-use. If not given, a new pool is created for the
        given number of parallel tasks. Any supplied `pool` will be left
        as-is.
    """
    styles = ['plain', 'list', 'dict']
    if callstyle not in styles:
        raise ValueError("Unknown callstyle '%s'. Valid styles: %s"
                         % (callstyle, ", ".join(styles)))
    f = _FuncWrap(func, callstyle, args=args, kwargs=kwargs or dict())
    arg_list = list(arg_list)
    if processes is None:
        processes = _available_cpus()
    processes = min(processes, len(arg_list))
    if processes <= 1:
        return lmap(f, arg_list)
    chunks = [[] for i in range(processes)]
    for items in get_chunks(arg_list, processes):
        for i, a in enumerate(items):
            chunks[i].append(a)
    runners = [_Runner(f, chunk) for chunk in chunks]
    with process_pool(processes=processes, pool=pool) as p:
        workers = [p.apply_async(runner, ()) for runner in runners]
        results = [None] * len(arg_list)
        for i, worker in enumerate(workers):
            worker_results = worker.get()
            for j, result in enumerate(worker_results):
                results[i+j*processes] = result
    return results


@contextmanager
def process_pool(processes=None, pool=None):
    r"""Context to create a pool and terminate cleanly after usage.

    @param processes
        Number of processes to run in parallel. If not given, uses the number
        of available threads of the current architecture.
    @param pool
        If given, simply returns that pool without terminating it afterwards.
    """
    if pool is not None:
        yield pool
    else:
        if processes is None:
            processes = _available_cpus()
        from multiprocessing import Pool
        with Pool(processes=processes) as pool:
            yield pool


class _Runner():
    r"""Class to store a function and argument list chunk."""

    __slots__ = ("_f", "_arg_chunk",)

    def __init__(self, func, arg_chunk):
        self._f = func
        self._arg_chunk = arg_chunk

    def __call__(self):
        r"""Call the function on each of the arguments and return the result."""
        return [self._f(arg) for arg in self._arg_chunk]


class _FuncWrap():
    r"""Helper class to interpret arguments and call a function."""

    __slots__ = ("_f", "_callstyle", "_args", "_kwargs")

    def __init__(self, func, callstyle, args, kwargs):
        self._f = func
        self._callstyle = callstyle
        self._args = args
        self._kwargs = kwargs

    def __call__(self, args):
        r"""Call the function with the given args interpreted as configured."""
        if self._callstyle == 'plain':
            return self._f(args, *self._args, **self._kwargs)
        if self._callstyle == 'list':
            return self._f(*args, *self._args, **self._kwargs)
        return self._f(*self._args, **args, **self._kwargs)


def print_indented(prefix, obj):
    r"""Print a prefix followed by an object with correct indenting of multiple lines.

    @b Examples

    \code
        >>> print_indented("terms = ", "1.5\n-0.25\n0.125")
        terms = 1.5
                -0.25
                0.125

    \endcode
    """
    if isinstance(prefix, int):
        prefix = " " * prefix
    m = len(prefix)
    lines = (prefix + str(obj)).splitlines()
    result = [lines[0]]
    result += [(" "*m)+l for l in lines[1:]]
    print("\n".join(result))


@contextmanager
def timethis(start_msg=None, end_msg="Elapsed time: {}", silent=False, eol=True):
    r"""Context manager for timing code execution.

    @param start_msg
        String to print at the beginning. May contain the placeholder
        ``'{now}'``, which will be replaced by the current date and time. A
        value of `True` will be taken to mean ``"Started: {now}``.
    @param end_msg
        String to print after execution. Default is ``"Elapsed time: {}"``.
    @param silent
        Whether to print anything at all. Useful when a function has a
        verbosity setting to conditionally time its results.
    @param eol
        Whether to print a newline after the start message.
    """
    if silent:
        yield
        return
    if start_msg is True:
        start_msg = "Started: {now}"
    if start_msg is not None:
        print(start_msg.format(now=time.strftime('%Y-%m-%d %H:%M:%S')),
              end='\n' if eol else '', flush=not eol)
    start = default_timer()
    try:
        yield
    finally:
        if end_msg is not None:
            time_str = datetime.timedelta(seconds=default_timer()-start)
            print(end_msg.format(time_str))
