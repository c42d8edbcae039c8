r"""@package approxgen.bdmath

Elementary and statistical functions at arbitrary decimal precision.

All functions take BigDecimal arguments (or anything convertible to one) and
a `num_digits` argument stating how many decimal places the result should be
correct to. Internally, partial sums are rounded to ``2*num_digits`` places
and results are rounded to ``num_digits+1`` places.

Functions that are undefined for some arguments (ln(), log(), pow(), asin(),
acos(), sqrt(), qnorm()) return `None` for those instead of raising. Series
that fail to converge raise a numutils.ConvergenceFailure.

Most functions are based on the Maclaurin series evaluated by maclaurin().
The inverse trigonometric functions and the logarithm use argument reduction
to keep the series in a region of fast convergence.

@b Examples

```
    >>> sin(pi(20) / 6, 20)
    BigDecimal('0.5')
    >>> ln(0, 20) is None
    True
```
"""

import functools

from .bigdec import BigDecimal, round_digits
from .config import Settings
from .numutils import ConvergenceFailure, Expected32Or64Bits


__all__ = [
    "maclaurin",
    "pi",
    "sqrt",
    "sqrt_two",
    "one_over_root_two_pi",
    "sin",
    "cos",
    "tan",
    "exp",
    "asin",
    "acos",
    "atan",
    "ln",
    "log",
    "pow",
    "erf",
    "erfc",
    "dnorm",
    "pnorm",
    "qnorm",
    "round_ieee",
]


ZERO = BigDecimal(0)
ONE = BigDecimal(1)
TWO = BigDecimal(2)
HALF = BigDecimal("0.5")

_PI_LITERAL = BigDecimal(
    "3.14159265358979323846264338327950288419716939937510582097494459230781"
    "6406286208998628034825342117067982148086513282306647093844609550582231"
    "725359408128481"
)


def _work_digits(num_digits):
    r"""Decimal places used for divisions and roots of intermediate values."""
    return 2 * num_digits + Settings.guard_digits


def _div(a, b, num_digits):
    return BigDecimal(a).div(b, _work_digits(num_digits))


def maclaurin(x, num_digits, term, max_iterations=None):
    r"""Sum a power series in `x` until it converges.

    The series is summed term by term. In each step `i`, the callable `term`
    is given the current partial sum together with ``x**i`` and ``i!`` and
    returns the new partial sum, or `None` if the i'th term vanishes (e.g.
    even terms of an odd function). The summation stops once two successive
    partial sums agree after rounding to ``2*num_digits`` places.

    @param x
        Argument of the series.
    @param num_digits
        Number of decimal places the result should be accurate to.
    @param term
        Callable ``term(i, total, power, factorial)``, where `power` is a
        BigDecimal holding ``x**i`` (rounded) and `factorial` is the integer
        ``i!``.
    @param max_iterations
        Number of terms after which to give up. Defaults to
        config.Settings.max_iterations.

    @return The sum rounded to ``num_digits+1`` places.

    @b Raises

    numutils.ConvergenceFailure if the series did not converge.
    """
    if max_iterations is None:
        max_iterations = Settings.max_iterations
    x = BigDecimal(x)
    digits = 2 * num_digits
    power = ONE
    factorial = 1
    total = ZERO
    i = 0
    while True:
        new_total = term(i, total, power, factorial)
        if new_total is not None:
            new_total = round_digits(new_total, digits)
            if new_total == total:
                break
            if i > max_iterations:
                raise ConvergenceFailure(
                    "Series did not converge within %d terms." % max_iterations,
                    iterations=i,
                )
            total = new_total
        power = round_digits(power * x, digits)
        i += 1
        factorial *= i
    return round_digits(total, num_digits + 1).normalized()


@functools.lru_cache(maxsize=32)
def pi(num_digits):
    r"""Return pi rounded to `num_digits` decimal places.

    Below 100 digits, a stored literal is used. Otherwise, Machin's formula
    \f$ \pi = 16 \arctan(1/5) - 4 \arctan(1/239) \f$ is evaluated.
    """
    if num_digits < 100:
        return round_digits(_PI_LITERAL, num_digits)
    d = num_digits + 2
    value = (atan(_div(ONE, 5, d), d) * 4 - atan(_div(ONE, 239, d), d)) * 4
    return round_digits(value, num_digits)


def _sqrt(x, num_digits):
    return BigDecimal(x).sqrt(_work_digits(num_digits))


def sqrt(x, num_digits):
    r"""Square root of `x`, or `None` if `x` is negative."""
    root = _sqrt(x, num_digits)
    if root is None:
        return None
    return round_digits(root, num_digits + 1)


def sqrt_two(num_digits):
    r"""Return the square root of two."""
    return _sqrt(TWO, num_digits)


@functools.lru_cache(maxsize=32)
def one_over_root_two_pi(num_digits):
    r"""Return the normalization constant \f$ 1/\sqrt{2\pi} \f$."""
    return _sqrt(_div(ONE, TWO * pi(2 * num_digits), num_digits), num_digits)


@functools.lru_cache(maxsize=32)
def _two_over_root_pi(num_digits):
    return _div(TWO, _sqrt(pi(2 * num_digits), num_digits), num_digits)


def sin(x, num_digits):
    r"""Sine of `x` (in radians)."""
    def term(i, total, power, factorial):
        r = i & 3
        if r == 1:
            return total + _div(power, factorial, num_digits)
        if r == 3:
            return total - _div(power, factorial, num_digits)
        return None
    return maclaurin(x, num_digits, term)


def cos(x, num_digits):
    r"""Cosine of `x` (in radians)."""
    def term(i, total, power, factorial):
        r = i & 3
        if r == 0:
            return total + _div(power, factorial, num_digits)
        if r == 2:
            return total - _div(power, factorial, num_digits)
        return None
    return maclaurin(x, num_digits, term)


def tan(x, num_digits):
    r"""Tangent of `x`, computed as ``sin(x)/cos(x)``."""
    return round_digits(
        _div(sin(x, num_digits), cos(x, num_digits), num_digits),
        num_digits + 1
    )


def exp(x, num_digits):
    r"""Exponential function."""
    def term(i, total, power, factorial):
        return total + _div(power, factorial, num_digits)
    return maclaurin(x, num_digits, term)


def asin(x, num_digits):
    r"""Inverse sine, or `None` if ``|x| > 1``.

    For ``|x| > 1/2``, the identity
    \f$ \arcsin x = \mathrm{sgn}(x) (\pi/2 - \arctan(\sqrt{1-x^2}/|x|)) \f$
    is used. Otherwise, the binomial series is summed with its coefficients
    updated incrementally from term to term.
    """
    x = BigDecimal(x)
    if abs(x) > ONE:
        return None
    if abs(x) > HALF:
        root = _sqrt(ONE - x * x, num_digits)
        angle = pi(num_digits) * HALF - atan(_div(root, abs(x), num_digits),
                                             num_digits)
        return round_digits(angle * x.signum(), num_digits + 1)
    numer = 1
    denom = 1
    def term(i, total, power, factorial):
        nonlocal numer, denom
        if not i & 1:
            return None
        result = total + _div(power * numer, denom * i, num_digits)
        numer *= i
        denom *= i + 1
        return result
    return maclaurin(x, num_digits, term)


def acos(x, num_digits):
    r"""Inverse cosine, or `None` if ``|x| > 1``."""
    y = asin(x, num_digits)
    if y is None:
        return None
    return pi(num_digits) * HALF - y


def atan(x, num_digits):
    r"""Inverse tangent.

    Arguments with ``|x| > 1/2`` are reduced using the half-angle identity
    \f$ \arctan x = 2 \arctan(x / (1 + \sqrt{1+x^2})) \f$. Each application
    at least halves the argument, so the recursion terminates quickly.
    """
    x = BigDecimal(x)
    if abs(x) > HALF:
        root = _sqrt(ONE + x * x, num_digits)
        half_angle = atan(_div(x, ONE + root, num_digits), num_digits)
        return round_digits(half_angle * 2, num_digits + 1)
    def term(i, total, power, factorial):
        if not i & 1:
            return None
        return total + _div(power, -i if i & 2 else i, num_digits)
    return maclaurin(x, num_digits, term)


@functools.lru_cache(maxsize=32)
def _exp_half(num_digits):
    r"""Return ``(exp(1/2), exp(-1/2))``."""
    return exp(HALF, num_digits), exp(-HALF, num_digits)


def ln(x, num_digits):
    r"""Natural logarithm, or `None` if ``x <= 0``.

    The argument is multiplied by powers of \f$ e^{\pm 1/2} \f$ until it lies
    within \f$ [e^{-1/2}, e^{1/2}] \f$ and the Taylor series of
    \f$ \ln(1 \pm u) \f$ is summed for the reduced argument.
    """
    x = BigDecimal(x)
    if x <= ZERO:
        return None
    digits = 2 * num_digits
    exp_half, exp_minus_half = _exp_half(digits)
    extra = ZERO
    if x >= ONE:
        while x >= exp_half:
            extra += HALF
            x = round_digits(x * exp_minus_half, digits)
        # ln(1 + u)
        def term(i, total, power, factorial):
            if i == 0:
                return None
            return total + _div(power, i if i & 1 else -i, num_digits)
        return maclaurin(x - ONE, num_digits, term) + extra
    while x <= exp_minus_half:
        extra -= HALF
        x = round_digits(x * exp_half, digits)
    # ln(1 - u)
    def term(i, total, power, factorial):
        if i == 0:
            return None
        return total - _div(power, i, num_digits)
    return maclaurin(ONE - x, num_digits, term) + extra


def log(x, base, num_digits):
    r"""Logarithm of `x` to the given base.

    Returns `None` if either logarithm is undefined or `base` is one.
    """
    lnx = ln(x, num_digits)
    lnbase = ln(base, num_digits)
    if lnx is None or lnbase is None or lnbase.is_zero():
        return None
    return round_digits(_div(lnx, lnbase, num_digits), num_digits + 1)


def pow(x, y, num_digits):
    r"""Compute ``x**y`` as ``exp(y*ln(x))``, or `None` if ``x <= 0``."""
    lnx = ln(x, num_digits)
    if lnx is None:
        return None
    return exp(BigDecimal(y) * lnx, num_digits)


def erf(x, num_digits):
    r"""Error function.

    Uses the series
    \f[
        \mathrm{erf}(x) = \frac{2}{\sqrt\pi} \sum_{n=0}^\infty
            \frac{(-1)^n x^{2n+1}}{n! (2n+1)}.
    \f]
    """
    x = BigDecimal(x)
    def term(i, total, power, factorial):
        t = _div(power, (2*i + 1) * factorial, num_digits)
        return total - t if i & 1 else total + t
    series = maclaurin(x * x, num_digits, term)
    return round_digits(_two_over_root_pi(num_digits) * x * series,
                        num_digits + 1)


def erfc(x, num_digits):
    r"""Complementary error function ``1 - erf(x)``."""
    return ONE - erf(x, num_digits)


def dnorm(x, mean, sd, num_digits):
    r"""Density of the normal distribution with given mean and deviation."""
    z = _div(BigDecimal(x) - mean, sd, num_digits)
    k1 = one_over_root_two_pi(num_digits)
    density = k1 * exp(-(z * z) * HALF, num_digits)
    return round_digits(_div(density, sd, num_digits), num_digits + 1)


def pnorm(x, mean, sd, num_digits):
    r"""Cumulative distribution function of the normal distribution.

    Computed as \f$ (\mathrm{erf}(z/\sqrt{2}) + 1)/2 \f$ with
    \f$ z = (x - \mu)/\sigma \f$.
    """
    z = _div(BigDecimal(x) - mean, sd, num_digits)
    e = erf(_div(z, sqrt_two(num_digits), num_digits), num_digits)
    return round_digits((e + ONE) * HALF, num_digits + 1)


def qnorm(p, mean, sd, num_digits):
    r"""Quantile function (inverse of pnorm()) of the normal distribution.

    Newton-Raphson iteration ``x -= (pnorm(x) - p) / dnorm(x)`` starting at
    the mean. It stops once the residual vanishes when rounded to
    `num_digits` places.

    @return The quantile rounded to `num_digits` places, or `None` if `p` is
        not inside the open interval ``(0, 1)``.

    @b Raises

    numutils.ConvergenceFailure if more than
    config.Settings.newton_max_iterations steps are needed.
    """
    p = BigDecimal(p)
    if not ZERO < p < ONE:
        return None
    guess = BigDecimal(mean)
    for _ in range(Settings.newton_max_iterations):
        err = pnorm(guess, mean, sd, num_digits) - p
        if round_digits(abs(err), num_digits).is_zero():
            return round_digits(guess, num_digits)
        step = _div(err, dnorm(guess, mean, sd, num_digits), num_digits)
        guess = round_digits(guess - step, 2 * num_digits)
    raise ConvergenceFailure(
        "qnorm(%s) did not converge within %d Newton steps."
        % (p, Settings.newton_max_iterations),
        iterations=Settings.newton_max_iterations,
    )


def round_ieee(x, bits):
    r"""Round to the nearest value representable as 32 or 64 bit float.

    @param x
        Value to round.
    @param bits
        `32` or `64` (may be given as BigDecimal).

    @b Raises

    numutils.Expected32Or64Bits for other widths and numutils.FloatOverflow
    if the value is out of range for the requested type.
    """
    x = BigDecimal(x)
    width = int(bits)
    if width != bits:
        raise Expected32Or64Bits("Expected 32 or 64 bits, got %s." % bits)
    if width == 32:
        return BigDecimal(float(x.to_float32()))
    if width == 64:
        return BigDecimal(x.to_float())
    raise Expected32Or64Bits("Expected 32 or 64 bits, got %s." % bits)
