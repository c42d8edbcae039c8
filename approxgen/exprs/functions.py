r"""@package approxgen.exprs.functions

The closed set of named functions supported by the expression system.

Each member of the Function enumeration has a fixed arity and optional
default values for trailing arguments. For each function, three
implementations exist:
    * the arbitrary precision one from approxgen.bdmath (used by
      numexpr.NumericExpression.evaluate())
    * a floating point one (used by float evaluators)
    * an `mpmath` one (used by evaluators with ``use_mp=True``)

The tables are checked for completeness when this module is imported, so
adding a new member without implementing it fails immediately.
"""

from enum import Enum
import math

from mpmath import mp
from scipy import special

from .. import bdmath
from ..bigdec import BigDecimal


__all__ = [
    "Function",
]


class Function(Enum):
    r"""Named functions callable on expressions.

    The value of each member is ``(name, arity, defaults)``, where `defaults`
    holds the default values of the last ``len(defaults)`` arguments.
    """
    SIN = ("sin", 1, ())
    COS = ("cos", 1, ())
    TAN = ("tan", 1, ())
    EXP = ("exp", 1, ())
    LN = ("ln", 1, ())
    LOG = ("log", 2, ())
    POW = ("pow", 2, ())
    SQRT = ("sqrt", 1, ())
    ASIN = ("asin", 1, ())
    ACOS = ("acos", 1, ())
    ATAN = ("atan", 1, ())
    ERF = ("erf", 1, ())
    ERFC = ("erfc", 1, ())
    DNORM = ("dnorm", 3, (0, 1))
    PNORM = ("pnorm", 3, (0, 1))
    QNORM = ("qnorm", 3, (0, 1))
    ABS = ("abs", 1, ())

    def __init__(self, fname, arity, defaults):
        ## Name used when rendering and parsing.
        self.fname = fname
        ## Total number of arguments (including the receiver).
        self.arity = arity
        ## Default values of the trailing arguments.
        self.defaults = defaults

    @classmethod
    def from_name(cls, fname):
        r"""Look up a function by its name (e.g. ``'sin'``)."""
        for f in cls:
            if f.fname == fname:
                return f
        raise KeyError("Unknown function: %s" % fname)

    def evaluate(self, args, num_digits):
        r"""Evaluate at arbitrary precision.

        @return A BigDecimal or `None` if the function is undefined for the
            given arguments.
        """
        return _bdmath_impl[self](*args, num_digits)

    def float_function(self):
        r"""Return the native floating point implementation."""
        return _float_impl[self]

    def mp_function(self):
        r"""Return the `mpmath` implementation."""
        return _mp_impl[self]


def _abs(x, num_digits):
    # pylint: disable=unused-argument
    return abs(BigDecimal(x))


_bdmath_impl = {
    Function.SIN: bdmath.sin,
    Function.COS: bdmath.cos,
    Function.TAN: bdmath.tan,
    Function.EXP: bdmath.exp,
    Function.LN: bdmath.ln,
    Function.LOG: bdmath.log,
    Function.POW: bdmath.pow,
    Function.SQRT: bdmath.sqrt,
    Function.ASIN: bdmath.asin,
    Function.ACOS: bdmath.acos,
    Function.ATAN: bdmath.atan,
    Function.ERF: bdmath.erf,
    Function.ERFC: bdmath.erfc,
    Function.DNORM: bdmath.dnorm,
    Function.PNORM: bdmath.pnorm,
    Function.QNORM: bdmath.qnorm,
    Function.ABS: _abs,
}


def _float_dnorm(x, mean, sd):
    z = (x - mean) / sd
    return math.exp(-0.5 * z * z) / (sd * math.sqrt(2 * math.pi))


_float_impl = {
    Function.SIN: math.sin,
    Function.COS: math.cos,
    Function.TAN: math.tan,
    Function.EXP: math.exp,
    Function.LN: math.log,
    Function.LOG: math.log,
    Function.POW: math.pow,
    Function.SQRT: math.sqrt,
    Function.ASIN: math.asin,
    Function.ACOS: math.acos,
    Function.ATAN: math.atan,
    Function.ERF: math.erf,
    Function.ERFC: math.erfc,
    Function.DNORM: _float_dnorm,
    Function.PNORM: lambda x, mean, sd: float(special.ndtr((x - mean) / sd)),
    Function.QNORM: lambda p, mean, sd: mean + sd * float(special.ndtri(p)),
    Function.ABS: abs,
}


def _mp_qnorm(p, mean, sd):
    return mean + sd * mp.sqrt(2) * mp.erfinv(2 * p - 1)


_mp_impl = {
    Function.SIN: mp.sin,
    Function.COS: mp.cos,
    Function.TAN: mp.tan,
    Function.EXP: mp.exp,
    Function.LN: mp.ln,
    Function.LOG: mp.log,
    Function.POW: mp.power,
    Function.SQRT: mp.sqrt,
    Function.ASIN: mp.asin,
    Function.ACOS: mp.acos,
    Function.ATAN: mp.atan,
    Function.ERF: mp.erf,
    Function.ERFC: mp.erfc,
    Function.DNORM: mp.npdf,
    Function.PNORM: mp.ncdf,
    Function.QNORM: _mp_qnorm,
    Function.ABS: mp.fabs,
}


def _check_tables():
    r"""Ensure every Function member has all three implementations."""
    for table in (_bdmath_impl, _float_impl, _mp_impl):
        missing = [f.name for f in Function if f not in table]
        if missing:
            raise NotImplementedError("No implementation for: %s"
                                      % ", ".join(missing))

_check_tables()
