r"""@package approxgen.approx

Polynomial approximation of functions given as expressions.

The approx() function samples a target expression at almost-Chebyshev nodes,
interpolates the samples with a Polynomial and turns the coefficients into a
chain of fused multiply-add operations, which is returned as expression. The
chain can be rendered into code or compiled into a float evaluator to check
its accuracy:

```
    expr = parse_expr("sin(2*pi*x)")
    chain = approx(expr, 16, -0.5, 0.5, parity=Parity.ODD, num_digits=20)
    f = chain.evaluator('x')
    f(0.1)                  # approx. math.sin(0.2*math.pi)
```

Odd and even target functions only need every other coefficient. The
requested Parity determines which coefficients are kept and whether the chain
is evaluated in `x` or in `x*x`.
"""

from enum import Enum
import warnings

from .bigdec import BigDecimal, round_digits
from .bdmath import cos, pi
from .config import Settings
from .exprs.basics import ConstantExpression, VariableExpression
from .exprs.numexpr import NumericExpression
from .exprs.parse import parse_expr
from .numutils import WrongNumberOfTerms, ParityWarning
from .polynomial import Polynomial
from .utils import parallel_compute, print_indented, timethis


__all__ = [
    "Parity",
    "approx",
    "approx_many",
    "chebyshev_nodes",
    "mul_add_polynomial",
]


class Parity(Enum):
    r"""Symmetry of the function to approximate."""
    ## f(-x) == -f(x): only odd powers are used.
    ODD = "odd"
    ## f(-x) == f(x): only even powers are used.
    EVEN = "even"
    ## No symmetry: all powers are used.
    NEITHER = "neither"


def _check_num_terms(num_terms, parity):
    if num_terms < 2:
        raise WrongNumberOfTerms("Need at least 2 terms, got %d." % num_terms)
    if parity is Parity.ODD and num_terms % 2:
        raise WrongNumberOfTerms(
            "Odd approximations need an even number of terms, got %d."
            % num_terms
        )
    if parity is Parity.EVEN and not num_terms % 2:
        raise WrongNumberOfTerms(
            "Even approximations need an odd number of terms, got %d."
            % num_terms
        )


def chebyshev_nodes(num_terms, xmin, xmax, num_digits):
    r"""Return the sample points for an approximation on ``[xmin, xmax]``.

    The nodes are
    \f[
        x_i = a - c \cos(i b), \qquad i = 0, \ldots, n-1,
    \f]
    with \f$ a = (x_{max}+x_{min})/2 \f$, \f$ c = (x_{max}-x_{min})/2 \f$ and
    \f$ b = \pi/(n-1) \f$, i.e. the extrema of the Chebyshev polynomial of
    degree \f$ n-1 \f$ mapped onto the interval. They include both interval
    ends and are computed with BigDecimal arithmetic.

    Only the lower half of the nodes is computed from the formula. The upper
    half is its mirror image about `a` (and the middle node of an odd count
    is `a` itself), which makes the nodes exactly symmetric. Odd or even
    functions on symmetric intervals then have negligible dropped
    coefficients.
    """
    if num_terms < 2:
        raise WrongNumberOfTerms("Need at least 2 nodes, got %d." % num_terms)
    xmin = BigDecimal(xmin)
    xmax = BigDecimal(xmax)
    digits = 2 * num_digits + Settings.guard_digits
    a = (xmax + xmin) * BigDecimal("0.5")
    c = (xmax - xmin) * BigDecimal("0.5")
    b = pi(num_digits).div(num_terms - 1, digits)
    lower = [
        round_digits(a - c * cos(b * i, num_digits), num_digits + 1)
        for i in range(num_terms // 2)
    ]
    middle = [round_digits(a, num_digits + 1)] if num_terms % 2 else []
    upper = [round_digits(a + (a - t), num_digits + 1) for t in reversed(lower)]
    return lower + middle + upper


def mul_add_polynomial(terms, variable, parity):
    r"""Create the multiply-add chain evaluating a polynomial.

    The highest coefficient seeds the chain, and each step computes
    ``acc.mul_add(x, t)`` for the next lower coefficient `t`.

    @param terms
        Coefficients, lowest degree first.
    @param variable
        Name of the variable or a VariableExpression.
    @param parity
        For Parity.ODD, only the odd coefficients are used, the chain runs in
        ``x*x`` and is finally multiplied by `x`. For Parity.EVEN, only the
        even coefficients are used with the chain running in ``x*x``. For
        Parity.NEITHER, all coefficients are used in a plain Horner chain.
    """
    parity = Parity(parity)
    k = len(terms)
    _check_num_terms(k, parity)
    if not isinstance(variable, NumericExpression):
        variable = VariableExpression(variable)
    x = variable
    acc = ConstantExpression(terms[k-1])
    if parity is Parity.ODD:
        xx = x * x
        for i in reversed(range(1, k-1, 2)):
            acc = acc.mul_add(xx, terms[i])
        return acc * x
    if parity is Parity.EVEN:
        xx = x * x
        for i in reversed(range(0, k-1, 2)):
            acc = acc.mul_add(xx, terms[i])
        return acc
    for i in reversed(range(k-1)):
        acc = acc.mul_add(x, terms[i])
    return acc


def _split_terms(terms, parity):
    r"""Return ``(dropped, kept)`` as lists of ``(power, coefficient)``."""
    indexed = list(enumerate(terms))
    if parity is Parity.ODD:
        return indexed[0::2], indexed[1::2]
    if parity is Parity.EVEN:
        return indexed[1::2], indexed[0::2]
    return [], indexed


def _check_dropped_terms(terms, parity, xmin, xmax, num_digits):
    r"""Warn if coefficients dropped due to parity are not negligible.

    Each term is weighed by its magnitude at the interval boundary, i.e.
    ``|t_k| * r**k`` with ``r = max(|xmin|, |xmax|)``.
    """
    dropped, kept = _split_terms(terms, parity)
    if not dropped:
        return
    r = max(abs(BigDecimal(xmin)), abs(BigDecimal(xmax)))
    size = lambda k, t: round_digits(abs(t) * r**k, 2 * num_digits)
    scale = max(size(k, t) for k, t in kept)
    tol = scale * BigDecimal.new(1, num_digits // 2)
    worst = max(size(k, t) for k, t in dropped)
    if worst > tol:
        warnings.warn(
            "Dropped %s coefficients contribute up to %s. The function may "
            "not have the requested symmetry."
            % ("even" if parity is Parity.ODD else "odd",
               round_digits(worst, num_digits)),
            ParityWarning,
        )


def approx(expr, num_terms, xmin, xmax, variable='x', parity=Parity.NEITHER,
           num_digits=20, verbose=False):
    r"""Approximate an expression by a polynomial on an interval.

    @param expr
        Target function as NumericExpression or formula string (see
        exprs.parse.parse_expr()).
    @param num_terms
        Number of sample nodes, which equals the number of coefficients of
        the interpolating polynomial. Must be even for Parity.ODD and odd for
        Parity.EVEN.
    @param xmin,xmax
        Interval to approximate the function on.
    @param variable
        Name of the variable of `expr`. Default is ``'x'``.
    @param parity
        Symmetry of the function (see mul_add_polynomial()). May also be given
        as string ``'odd'``, ``'even'`` or ``'neither'``.
    @param num_digits
        Decimal places for evaluating the function and computing the
        coefficients. See config.num_digits_for().
    @param verbose
        Whether to print the sample values, coefficients and timing.

    @return The multiply-add chain as NumericExpression in `variable`.

    @b Raises

    numutils.WrongNumberOfTerms if `num_terms` contradicts `parity`,
    numutils.CouldNotEvaluate if the function cannot be evaluated at one of
    the nodes and numutils.ConvergenceFailure if a series does not converge.
    """
    parity = Parity(parity)
    _check_num_terms(num_terms, parity)
    if isinstance(expr, str):
        expr = parse_expr(expr)
    with timethis("Approximating %s with %d terms..." % (expr, num_terms),
                  silent=not verbose):
        xs = chebyshev_nodes(num_terms, xmin, xmax, num_digits)
        ys = []
        for x in xs:
            y = expr.substitute(variable, x).evaluate(num_digits)
            if verbose:
                print("  f(%s) = %s" % (x, y))
            ys.append(y)
        terms = Polynomial.from_points(xs, ys, num_digits).terms()
        if verbose:
            print_indented("  terms = ", "\n".join(str(t) for t in terms))
    _check_dropped_terms(terms, parity, xmin, xmax, num_digits)
    return mul_add_polynomial(terms, variable, parity)


def approx_many(requests, processes=None):
    r"""Compute multiple independent approximations in parallel.

    @param requests
        Iterable of dictionaries, each containing the keyword arguments for
        one approx() call.
    @param processes
        Number of processes to use. By default, uses all available CPUs. A
        value of `1` computes everything in the current process.

    @return List of results in the order of `requests`.
    """
    return parallel_compute(approx, requests, processes=processes,
                            callstyle='dict')
