r"""@package approxgen.config

Precision policy and iteration caps.

The number of decimal digits used for an approximation depends on the width
of the floating point type the generated code targets. It is looked up once
via num_digits_for() and then passed explicitly to every function needing it.

Iteration caps are global and stored in Settings. They can be changed
temporarily using the iteration_limits() context manager:

```
    with iteration_limits(max_iterations=50):
        y = bdmath.exp(BigDecimal(100), 20)   # raises ConvergenceFailure
```
"""

from contextlib import contextmanager

from .numutils import Expected32Or64Bits


__all__ = [
    "Settings",
    "num_digits_for",
    "iteration_limits",
]


## Decimal digits used per float width in bits.
_DIGITS_PER_WIDTH = {
    32: 20,
    64: 40,
}


def num_digits_for(num_bits):
    r"""Return the number of decimal digits to compute for a float width.

    @param num_bits
        Width of the targeted IEEE-754 type, either `32` or `64`.

    @return `20` for 32-bit and `40` for 64-bit targets.

    @b Notes

    An older variant of this table used 10 and 24 digits. Those are too few to
    reach the accuracy targets of the generated functions and are not
    supported.
    """
    try:
        return _DIGITS_PER_WIDTH[int(num_bits)]
    except KeyError:
        raise Expected32Or64Bits("Expected 32 or 64 bits, got %r." % (num_bits,))


class Settings(object):
    """Global settings for the series and Newton iterations."""
    ## Maximum number of terms any series is summed over.
    max_iterations = 30000
    ## Maximum number of Newton-Raphson steps in `qnorm`.
    newton_max_iterations = 200
    ## Extra decimal places kept in divisions and square roots.
    guard_digits = 10


@contextmanager
def iteration_limits(max_iterations=None, newton_max_iterations=None):
    r"""Temporarily change the iteration caps in Settings.

    Arguments left as `None` keep their current value.
    """
    prev = Settings.max_iterations, Settings.newton_max_iterations
    try:
        if max_iterations is not None:
            Settings.max_iterations = max_iterations
        if newton_max_iterations is not None:
            Settings.newton_max_iterations = newton_max_iterations
        yield Settings
    finally:
        Settings.max_iterations, Settings.newton_max_iterations = prev
