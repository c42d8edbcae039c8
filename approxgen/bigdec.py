r"""@package approxgen.bigdec

Arbitrary precision decimal numbers.

A BigDecimal stores an unscaled integer together with a decimal scale, so that
its value is ``unscaled * 10**(-scale)``. Addition, subtraction and
multiplication are exact and never lose precision. Divisions and square roots
need a number of decimal places to compute, and callers are expected to round
explicitly (using round_digits()) after operations that grow the scale, e.g.
inside series summations.

The rounding function round_digits() does not go through any library rounding
and works for values of any magnitude.

@b Examples

```
    >>> x = BigDecimal("1.23456789")
    >>> round_digits(x, 5)
    BigDecimal('1.23457')
    >>> round(x, 2)
    BigDecimal('1.23')
    >>> BigDecimal(1).div(3, 10)
    BigDecimal('0.3333333333')
```
"""

from fractions import Fraction
import math
import numbers
import re

import numpy as np

from .numutils import FloatOverflow


__all__ = [
    "BigDecimal",
    "round_digits",
    "DEFAULT_PRECISION",
]


## Significant digits computed by the `/` operator.
DEFAULT_PRECISION = 100

_number_re = re.compile(
    r"^\s*(?P<sign>[+-]?)(?P<int>\d*)(?:\.(?P<frac>\d*))?"
    r"(?:[eE](?P<exp>[+-]?\d+))?\s*$"
)


def _num_digits(n):
    r"""Number of decimal digits of the absolute value of an integer."""
    return len(str(abs(n))) if n else 0


def _div_round_half_away(num, den):
    r"""Integer quotient rounded half away from zero."""
    negative = (num < 0) != (den < 0)
    q, r = divmod(abs(num), abs(den))
    if 2 * r >= abs(den):
        q += 1
    return -q if negative else q


def _truncate(n, shift):
    r"""Drop `shift` trailing decimal digits of `n`, truncating toward zero."""
    q = abs(n) // 10**shift
    return -q if n < 0 else q


class BigDecimal(object):
    r"""Immutable arbitrary precision decimal value.

    Instances can be created from integers, strings in plain or exponent
    notation, floats and other BigDecimal objects. Floats are converted using
    their shortest round-tripping representation, i.e. ``BigDecimal(0.1)`` is
    exactly one tenth.

    Two values compare equal if they represent the same number, regardless of
    their scale, i.e. ``BigDecimal("1.50") == BigDecimal("1.5")``.
    """

    __slots__ = ("_int", "_scale")

    def __init__(self, value=0):
        if isinstance(value, BigDecimal):
            self._int, self._scale = value._int, value._scale
        elif isinstance(value, numbers.Integral):
            self._int, self._scale = int(value), 0
        elif isinstance(value, str):
            self._int, self._scale = self._parse(value)
        elif isinstance(value, numbers.Real):
            value = float(value)
            if not math.isfinite(value):
                raise ValueError("Cannot convert %r to BigDecimal." % value)
            self._int, self._scale = self._parse(repr(value))
        else:
            raise TypeError("Cannot convert %s to BigDecimal."
                            % type(value).__name__)

    @staticmethod
    def _parse(text):
        m = _number_re.match(text)
        if not m or not (m.group('int') or m.group('frac')):
            raise ValueError("Invalid decimal literal: %r" % (text,))
        frac = m.group('frac') or ''
        unscaled = int((m.group('int') or '0') + frac)
        if m.group('sign') == '-':
            unscaled = -unscaled
        return unscaled, len(frac) - int(m.group('exp') or 0)

    @classmethod
    def new(cls, unscaled, scale):
        r"""Create a value from its unscaled integer and decimal scale."""
        obj = cls.__new__(cls)
        obj._int = int(unscaled)
        obj._scale = int(scale)
        return obj

    def as_integer_and_scale(self):
        r"""Return the pair ``(unscaled, scale)`` representing this value."""
        return self._int, self._scale

    @property
    def scale(self):
        r"""Number of decimal places (may be negative)."""
        return self._scale

    def adjusted(self):
        r"""Decimal exponent of the most significant digit.

        For example, `123.4` has the adjusted exponent `2` and `0.05` has
        `-2`. Zero has the adjusted exponent `0`.
        """
        if not self._int:
            return 0
        return _num_digits(self._int) - 1 - self._scale

    def is_zero(self):
        return self._int == 0

    def is_negative(self):
        return self._int < 0

    def is_positive(self):
        return self._int > 0

    def signum(self):
        r"""Return `-1`, `0` or `1` as BigDecimal."""
        return BigDecimal.new((self._int > 0) - (self._int < 0), 0)

    @staticmethod
    def _coerce(other):
        if isinstance(other, BigDecimal):
            return other
        if isinstance(other, (numbers.Integral, float)):
            return BigDecimal(other)
        return None

    @staticmethod
    def _align(a, b):
        r"""Return the unscaled integers of `a` and `b` at a common scale."""
        if a._scale == b._scale:
            return a._int, b._int, a._scale
        if a._scale > b._scale:
            return a._int, b._int * 10**(a._scale - b._scale), a._scale
        return a._int * 10**(b._scale - a._scale), b._int, b._scale

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        a, b, scale = self._align(self, other)
        return BigDecimal.new(a + b, scale)

    __radd__ = __add__

    def __sub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        a, b, scale = self._align(self, other)
        return BigDecimal.new(a - b, scale)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other - self

    def __mul__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return BigDecimal.new(self._int * other._int,
                              self._scale + other._scale)

    __rmul__ = __mul__

    def __pow__(self, n):
        if not isinstance(n, numbers.Integral) or n < 0:
            return NotImplemented
        return BigDecimal.new(self._int**n, self._scale * n)

    def div(self, other, digits):
        r"""Divide by `other` keeping `digits` decimal places.

        The last retained place is rounded half away from zero.

        @param other
            Divisor. Raises `ZeroDivisionError` if it is zero.
        @param digits
            Number of decimal places of the result.
        """
        divisor = self._coerce(other)
        if divisor is None:
            raise TypeError("Cannot divide by %s." % type(other).__name__)
        other = divisor
        if other._int == 0:
            raise ZeroDivisionError("BigDecimal division by zero")
        e = digits - self._scale + other._scale
        if e >= 0:
            num, den = self._int * 10**e, other._int
        else:
            num, den = self._int, other._int * 10**(-e)
        return BigDecimal.new(_div_round_half_away(num, den), digits)

    def __truediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        if other._int == 0:
            raise ZeroDivisionError("BigDecimal division by zero")
        if self._int == 0:
            return BigDecimal.new(0, 0)
        exponent = self.adjusted() - other.adjusted()
        return self.div(other, DEFAULT_PRECISION - exponent).normalized()

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other / self

    def __neg__(self):
        return BigDecimal.new(-self._int, self._scale)

    def __pos__(self):
        return self

    def __abs__(self):
        return BigDecimal.new(abs(self._int), self._scale)

    def _cmp(self, other):
        a, b, _ = self._align(self, other)
        return (a > b) - (a < b)

    def __eq__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._cmp(other) == 0

    def __ne__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._cmp(other) != 0

    def __lt__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._cmp(other) < 0

    def __le__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._cmp(other) <= 0

    def __gt__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._cmp(other) > 0

    def __ge__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._cmp(other) >= 0

    def __hash__(self):
        n = self.normalized()
        if n._scale <= 0:
            return hash(n._int * 10**(-n._scale))
        # Matches equal ints, Fractions and exactly representable floats.
        return hash(Fraction(n._int, 10**n._scale))

    def __bool__(self):
        return self._int != 0

    def with_scale(self, digits):
        r"""Return the value with exactly `digits` decimal places.

        Surplus digits are truncated toward zero.
        """
        if digits >= self._scale:
            return BigDecimal.new(self._int * 10**(digits - self._scale), digits)
        return BigDecimal.new(_truncate(self._int, self._scale - digits), digits)

    def normalized(self):
        r"""Return the same value with trailing zeros removed."""
        if self._int == 0:
            return BigDecimal.new(0, 0)
        s = str(abs(self._int))
        zeros = len(s) - len(s.rstrip('0'))
        if not zeros:
            return self
        return BigDecimal.new(self._int // 10**zeros, self._scale - zeros)

    def sqrt(self, digits=DEFAULT_PRECISION):
        r"""Square root correctly rounded to `digits` decimal places.

        Returns `None` for negative values.
        """
        if self._int < 0:
            return None
        if self._int == 0:
            return BigDecimal.new(0, 0)
        # sqrt(self) * 10**digits == sqrt(num/den)
        e = 2 * digits - self._scale
        num = self._int * 10**max(e, 0)
        den = 10**max(-e, 0)
        r = math.isqrt(num // den)
        if 4 * num >= (2*r + 1)**2 * den:
            r += 1
        return BigDecimal.new(r, digits)

    def to_float(self):
        r"""Convert to the nearest double precision float."""
        value = float(str(self))
        if math.isinf(value):
            raise FloatOverflow("%s does not fit into a 64 bit float." % self)
        return value

    def to_float32(self):
        r"""Convert to the nearest single precision float (as numpy.float32)."""
        with np.errstate(over='ignore'):
            value = np.float32(self.to_float())
        if np.isinf(value):
            raise FloatOverflow("%s does not fit into a 32 bit float." % self)
        return value

    def __float__(self):
        return self.to_float()

    def __int__(self):
        if self._scale <= 0:
            return self._int * 10**(-self._scale)
        return _truncate(self._int, self._scale)

    def __round__(self, ndigits=None):
        if ndigits is None:
            return int(round_digits(self, 0))
        return round_digits(self, ndigits)

    def __str__(self):
        if self._scale <= 0:
            return str(self._int * 10**(-self._scale))
        sign = '-' if self._int < 0 else ''
        s = str(abs(self._int)).rjust(self._scale + 1, '0')
        return "%s%s.%s" % (sign, s[:-self._scale], s[-self._scale:])

    def __repr__(self):
        return "BigDecimal('%s')" % self


def round_digits(x, digits):
    r"""Round to `digits` decimal places, half away from zero.

    The value is returned unchanged if it already has at most `digits`
    decimal places or if `digits` is negative. Otherwise a half unit in the
    last retained place (with the sign of `x`) is added and the surplus digits
    are truncated.

    Example: rounding `1.23456789` to 5 places computes
    ``1.23456789 + 0.000005 = 1.23457289`` and truncates to `1.23457`.
    """
    if not isinstance(x, BigDecimal):
        x = BigDecimal(x)
    unscaled, scale = x.as_integer_and_scale()
    if digits < 0 or scale <= digits:
        return x
    shift = scale - digits
    five = 5 if unscaled > 0 else -5
    biased = unscaled + five * 10**(shift - 1)
    return BigDecimal.new(_truncate(biased, shift), digits)
