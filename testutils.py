r"""@package testutils

Utilities to add more features to `unittest` classes.

This module provides a custom subclass of `unittest.TestCase`, namely
ApproxTestCase, which obeys the global configuration settings in
TestSettings. The latter can be configured by the script invoking the test
run.

This module also introduces a new decorator slowtest, which, when applied,
leads to the test being skipped on normal runs. The script starting the test
must set `TestSettings.skipslow` to `False` for the slow tests to be run.
"""

import sys
import functools
import unittest
import time

from approxgen.bigdec import BigDecimal


__all__ = [
    "ApproxTestCase",
    "TestSettings",
    "slowtest",
]


def slowtest(func):
    """Decorator for skipping a test if TestSettings.skipslow is true."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if TestSettings.skipslow:
            raise unittest.SkipTest("skipping slow tests")
        return func(*args, **kwargs)
    return wrapper


class ApproxTestCase(unittest.TestCase):
    """Tweaked baseclass for unit tests.

    By deriving from this class, you:
        * Get timed individual tests (needs `verbosity=2`) if
          TestSettings.timing is true.
        * Can compare BigDecimal results to reference strings using
          assertDecimalAlmostEqual().
    """
    def run(self, result=None):
        self.__result = result
        self.__prevCounts = self.__resultCounts()
        self.startTime = time.time()
        self.addCleanup(self.__printTiming)
        return unittest.TestCase.run(self, result)

    def __resultCounts(self):
        r"""Number of errors, failures and skips recorded so far."""
        return tuple(len(getattr(self.__result, attr, ()))
                     for attr in ("errors", "failures", "skipped"))

    def __shouldPrintTiming(self):
        r"""Return whether timing information should be printed."""
        if not TestSettings.timing or self.__resultCounts() != self.__prevCounts:
            return False
        if self.__result is None:
            return True
        return (not getattr(self.__result, "dots", True)
                and getattr(self.__result, "showAll", False))

    def __printTiming(self):
        if self.__shouldPrintTiming():
            duration = time.time() - self.startTime
            print("(%.4f seconds) ... " % (duration), file=sys.stderr, end='')

    def assertIsType(self, obj, cls):
        r"""Assert that an object is exactly of a certain type."""
        self.assertIs(type(obj), cls)

    def assertDecimalAlmostEqual(self, value, expected, places):
        r"""Assert that a BigDecimal agrees with a reference to `places` places.

        The reference may be given as string to avoid float conversions.
        """
        self.assertIsNotNone(value)
        diff = abs(BigDecimal(value) - BigDecimal(expected))
        if diff > BigDecimal.new(1, places):
            raise self.failureException(
                "%s != %s to %d places (difference: %s)"
                % (value, expected, places, diff)
            )

    def assertListAlmostEqual(self, a, b, places=None, delta=None):
        r"""Assert that two iterables contain (almost) the same values."""
        if places is not None and delta is not None:
            raise TypeError("Cannot use delta and places at the same time")
        if places is None and delta is None:
            places = 7
        if len(a) != len(b):
            raise self.failureException("Lists have different lengths (%d != %d)" % (len(a), len(b)))
        fails = []
        for i in range(len(a)):
            if a[i] == b[i]:
                continue
            if delta is not None:
                if abs(a[i]-b[i]) > delta:
                    fails.append(i)
            else:
                if round(abs(a[i]-b[i]), places) != 0:
                    fails.append(i)
        if fails:
            msg = "%d elements differ.\n" % len(fails)
            maxN = 9
            if len(fails) <= maxN:
                msg += "Differing elements:\n"
            else:
                msg += "First few differing elements:\n"
            msg += "\n".join(["  [{i}] {a} != {b}    (difference: {d})".format(i=i, a=a[i], b=b[i], d=(b[i]-a[i]))
                              for i in fails[:maxN]])
            raise self.failureException(msg)


class TestSettings(object):
    """Global settings for tests."""
    ## Stop test run on first fail/error.
    failfast = False
    ## Whether output is buffered.\ Just information, cannot be used to toggle output buffering.
    buffering = False
    ## Whether the timing for each test case should be printed.
    timing = False
    ## Control whether tests marked as slowtest should be skipped.
    skipslow = True
