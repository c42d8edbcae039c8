r"""@package approxgen.numutils

Numerical error types and helpers for judging approximation quality.


@b Examples

```
    >>> clip(5, 0, 3)
    3
```
"""

import math

from scipy import optimize
import numpy as np


__all__ = [
    "NumericalError",
    "FloatOverflow",
    "Expected32Or64Bits",
    "WrongNumberOfTerms",
    "CouldNotEvaluate",
    "ConvergenceFailure",
    "ParityWarning",
    "clip",
    "inf_norm1d",
    "ulp_error",
]


class NumericalError(Exception):
    r"""Base class for all errors raised while generating approximations.

    Generation either produces a complete result or fails with a subclass of
    this exception. Nothing is silently replaced by NaN or default values.
    """
    pass


class FloatOverflow(NumericalError, OverflowError):
    r"""A decimal value does not fit into the requested native float type."""
    pass


class Expected32Or64Bits(NumericalError, ValueError):
    r"""A float width other than 32 or 64 bits was requested."""
    pass


class WrongNumberOfTerms(NumericalError, ValueError):
    r"""The number of terms contradicts the requested parity.

    Odd fits need an even number of terms, even fits an odd number, and any
    fit needs at least two nodes.
    """
    pass


class CouldNotEvaluate(NumericalError):
    r"""A symbolic expression could not be evaluated to a number.

    This is raised for unbound variables as well as for named functions that
    are undefined at the given argument (e.g. `ln` of a non-positive value).
    """
    def __init__(self, msg, expr=None):
        super().__init__(msg)
        ## The (sub-)expression that failed to evaluate, if known.
        self.expr = expr


class ConvergenceFailure(NumericalError):
    r"""A series or Newton iteration exceeded its iteration cap."""
    def __init__(self, msg, iterations=None):
        super().__init__(msg)
        ## Number of iterations performed before giving up.
        self.iterations = iterations


class ParityWarning(UserWarning):
    """Warning issued when coefficients dropped due to parity are not small."""
    pass


def clip(x, x_min, x_max):
    r"""Confine a value to an interval."""
    return max(x_min, min(x_max, x))


def inf_norm1d(f1, f2=None, domain=None, Ns=50, xatol=1e-12):
    r"""Compute the L^inf norm of f1-f2 on an interval.

    The `scipy.optimize.brute` method is used to find a candidate close to the
    global maximum difference. This is then taken as starting point for a
    search for the local maximum difference. Setting the number of samples
    `Ns` high enough should lead to the global maximum difference being found.

    @param f1
        First function taking and returning floats.
    @param f2
        Second function. If not given, simply finds the maximum absolute value
        of `f1`.
    @param domain
        Domain ``[a, b]`` inside which to search for the maximum difference.
        By default, `f1` is queried for the domain.
    @param Ns
        Number of initial samples for the `scipy.optimize.brute` call. In case
        ``Ns <= 2``, the `brute()` step is skipped an a local extremum is
        found inside the given `domain`. Default is `50`.

    @return A pair ``(x, delta)``, where `x` is the point at which the maximum
        difference was found and `delta` is the difference at that point.
    """
    if domain is None:
        domain = f1.domain
    if f2 is None:
        f2 = lambda x: 0.0
    a, b = domain
    def func(x):
        # brute() passes 1-element arrays, minimize_scalar() plain floats
        x = float(np.ravel(x)[0])
        if not a <= x <= b:
            return 0.
        return -float(abs(f1(x)-f2(x)))
    if Ns <= 2:
        bounds = [a, b]
    else:
        x0 = float(np.atleast_1d(
            optimize.brute(func, [domain], Ns=Ns, finish=None)
        )[0])
        step = (b-a)/(Ns-1)
        bounds = [max(a, x0-step), min(b, x0+step)]
    res = optimize.minimize_scalar(
        func, bounds=bounds, method='bounded',
        options=dict(xatol=xatol),
    )
    return res.x, -res.fun


def ulp_error(value, reference):
    r"""Return the distance of two floats in units of the last place.

    The unit is taken at the reference value, so that a result of `1.0` means
    the two values are one representable double apart.
    """
    reference = float(reference)
    ulp = math.ulp(reference) if reference != 0.0 else math.ulp(1.0)
    return abs(float(value) - reference) / ulp
