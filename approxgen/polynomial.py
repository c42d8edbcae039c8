r"""@package approxgen.polynomial

Polynomial interpolation through a set of sample points.

The Polynomial class builds the Newton form of the interpolating polynomial
using divided differences and converts it to power basis coefficients. All
computations use BigDecimal arithmetic with explicit rounding.

@b Examples

```
    p = Polynomial.from_points([1, 2, 3, 4], [6, 9, 2, 5], num_digits=30)
    p.eval(2)       # 9 (up to rounding)
    p.terms()       # [constant, linear, quadratic, cubic] coefficients
```
"""

from .bigdec import BigDecimal, round_digits
from .config import Settings


__all__ = [
    "Polynomial",
    "divided_differences",
]


def divided_differences(xs, ys, num_digits):
    r"""Replace `ys` in place by the divided differences of the points.

    After this call, ``ys[i]`` holds \f$ f[x_0, \ldots, x_i] \f$, i.e. the
    coefficients of the Newton form
    \f[
        p(x) = \sum_i f[x_0, \ldots, x_i] \prod_{j<i} (x - x_j).
    \f]
    Divisions are carried out with ``2*num_digits`` places plus guard digits.

    @b Raises

    `ZeroDivisionError` if two x-coordinates coincide.
    """
    k = len(ys)
    digits = 2 * num_digits + Settings.guard_digits
    for i in range(k - 1):
        for j in reversed(range(i, k - 1)):
            ys[j+1] = (ys[j+1] - ys[j]).div(xs[j+1] - xs[j-i], digits)
    return ys


class Polynomial(object):
    r"""Polynomial in power basis form.

    The coefficients are stored lowest degree first, i.e. ``terms()[0]`` is
    the constant term and ``terms()[-1]`` the coefficient of the highest
    power.
    """

    def __init__(self, terms, num_digits=None):
        r"""Create a polynomial from its coefficients (lowest degree first).

        @param terms
            Coefficients, converted to BigDecimal.
        @param num_digits
            Precision used when evaluating with eval(). If `None`, evaluation
            is exact.
        """
        if not terms:
            raise ValueError("A polynomial needs at least one coefficient.")
        self._terms = [BigDecimal(t) for t in terms]
        self._num_digits = num_digits

    @classmethod
    def from_points(cls, xs, ys, num_digits):
        r"""Create the interpolating polynomial through the given points.

        The Newton form is expanded into power basis coefficients by
        successively multiplying the product \f$ \prod_j (x - x_j) \f$ by the
        next factor. Intermediate results are rounded to ``2*num_digits``
        places and the final coefficients to ``num_digits+1`` places.

        @param xs
            Distinct x-coordinates.
        @param ys
            Values at `xs`. Not modified.
        @param num_digits
            Number of decimal places the coefficients should be accurate to.
        """
        if len(xs) != len(ys):
            raise ValueError("Got %d x-values but %d y-values."
                             % (len(xs), len(ys)))
        if not xs:
            raise ValueError("Need at least one point to interpolate.")
        xs = [BigDecimal(x) for x in xs]
        dd = divided_differences(xs, [BigDecimal(y) for y in ys], num_digits)
        k = len(dd)
        digits = 2 * num_digits
        zero = BigDecimal(0)
        newton = [BigDecimal(1)] + [zero] * (k - 1)
        terms = [zero] * k
        for i in range(k):
            for j in range(k):
                terms[j] = round_digits(terms[j] + newton[j] * dd[i], digits)
            # Multiply the Newton basis polynomial by (x - xs[i]).
            c = -xs[i]
            for j in reversed(range(1, k)):
                newton[j] = round_digits(newton[j] * c + newton[j-1], digits)
            newton[0] = round_digits(newton[0] * c, digits)
        terms = [round_digits(t, num_digits + 1).normalized() for t in terms]
        return cls(terms, num_digits=num_digits)

    def eval(self, x):
        r"""Evaluate the polynomial at `x` using Horner's scheme."""
        x = BigDecimal(x)
        terms = self._terms
        y = terms[-1]
        for t in reversed(terms[:-1]):
            y = y * x + t
            if self._num_digits is not None:
                y = round_digits(y, 2 * self._num_digits)
        return y

    __call__ = eval

    def terms(self):
        r"""Return the coefficients, lowest degree first."""
        return list(self._terms)

    @property
    def degree(self):
        r"""Highest power with a (possibly zero) coefficient."""
        return len(self._terms) - 1

    def __len__(self):
        return len(self._terms)

    def __repr__(self):
        return "<Polynomial(%s)>" % ", ".join(str(t) for t in self._terms)
