r"""@package approxgen.exprs.parse

Create expressions from formula strings.

Formulas are parsed by `sympy` and the resulting sympy tree is converted into
numexpr.NumericExpression objects. Any sympy expression built from the
supported operations can be converted using from_sympy().

@b Examples

```
    expr = parse_expr("sin(2*pi*x)")
    print(expr.source())        # (2 * PI * x).sin()
    expr = parse_expr("qnorm(x)")
    print(expr.source())        # x.qnorm(0, 1)
```
"""

from tokenize import TokenError

import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.parsing.sympy_parser import parse_expr as sympy_parse_expr

from ..bigdec import BigDecimal
from .basics import ConstantExpression, PiExpression, VariableExpression
from .basics import QuotientExpression, NegationExpression, CallExpression
from .basics import DifferenceExpression
from .functions import Function


__all__ = [
    "parse_expr",
    "from_sympy",
]


_SYMPY_FUNCTIONS = {
    sp.sin: Function.SIN,
    sp.cos: Function.COS,
    sp.tan: Function.TAN,
    sp.exp: Function.EXP,
    sp.log: Function.LN,
    sp.asin: Function.ASIN,
    sp.acos: Function.ACOS,
    sp.atan: Function.ATAN,
    sp.erf: Function.ERF,
    sp.erfc: Function.ERFC,
    sp.Abs: Function.ABS,
}

## Functions without a sympy counterpart, kept as undefined functions.
_UNDEFINED_FUNCTIONS = (Function.DNORM, Function.PNORM, Function.QNORM)


def _local_dict():
    d = dict((f.fname, sp.Function(f.fname)) for f in _UNDEFINED_FUNCTIONS)
    d.update(ln=sp.log, PI=sp.pi, pi=sp.pi)
    return d


def parse_expr(text):
    r"""Parse a formula into an expression.

    The formula may use the variables, the arithmetic operators ``+ - * /
    **``, the constants `pi` (or `PI`) and `E`, and the named functions of
    functions.Function (with `ln` and `log` both denoting the natural
    logarithm).

    @b Raises

    `ValueError` if the formula contains unsupported constructs.
    """
    try:
        tree = sympy_parse_expr(text, local_dict=_local_dict())
    except (SyntaxError, TokenError, TypeError) as e:
        raise ValueError("Could not parse %r: %s" % (text, e))
    return from_sympy(tree)


def from_sympy(e):
    r"""Convert a sympy expression into a NumericExpression."""
    if isinstance(e, sp.Symbol):
        return VariableExpression(e.name)
    if e is sp.pi:
        return PiExpression()
    if e is sp.E:
        return ConstantExpression(1).exp()
    if isinstance(e, sp.Integer):
        return ConstantExpression(int(e))
    if isinstance(e, sp.Rational):
        return QuotientExpression(int(e.p), int(e.q))
    if isinstance(e, sp.Float):
        return ConstantExpression(BigDecimal(str(e)).normalized())
    if isinstance(e, sp.Add):
        return _convert_add(e)
    if isinstance(e, sp.Mul):
        return _convert_mul(e)
    if isinstance(e, sp.Pow):
        return _convert_pow(e)
    if isinstance(e, AppliedUndef):
        return CallExpression(Function.from_name(e.func.__name__),
                              *[from_sympy(a) for a in e.args])
    if e.func in _SYMPY_FUNCTIONS:
        return CallExpression(_SYMPY_FUNCTIONS[e.func],
                              *[from_sympy(a) for a in e.args])
    raise ValueError("Unsupported expression: %s" % e)


def _convert_add(e):
    terms = list(e.as_ordered_terms())
    result = from_sympy(terms[0])
    for term in terms[1:]:
        if term.could_extract_minus_sign():
            result = DifferenceExpression(result, from_sympy(-term))
        else:
            result = result + from_sympy(term)
    return result


def _convert_mul(e):
    numer, denom = sp.fraction(e)
    if denom != 1:
        return QuotientExpression(from_sympy(numer), from_sympy(denom))
    coeff = e.as_coeff_mul()[0]
    if coeff == -1:
        return NegationExpression(from_sympy(-e))
    result = None
    for factor in e.args:
        factor = from_sympy(factor)
        result = factor if result is None else result * factor
    return result


def _convert_pow(e):
    base, exponent = e.args
    if exponent == sp.S.Half:
        return from_sympy(base).sqrt()
    if exponent == -sp.S.Half:
        return QuotientExpression(1, from_sympy(base).sqrt())
    if isinstance(exponent, sp.Integer) and exponent > 0:
        base = from_sympy(base)
        result = base
        for _ in range(int(exponent) - 1):
            result = result * base
        return result
    if isinstance(exponent, sp.Integer):
        return QuotientExpression(1, from_sympy(sp.Pow(base, -exponent)))
    return from_sympy(base).pow(from_sympy(exponent))
