r"""@package approxgen.exprs.basics

Collection of basic numexpr.NumericExpression subclasses.

These are the building blocks of target functions like ``(x * PI * 2).sin()``
and of the multiply-add chains generated in approxgen.approx.
"""

import math

from mpmath import mp

from ..bigdec import BigDecimal, round_digits
from ..bdmath import pi
from ..config import Settings
from ..numutils import CouldNotEvaluate
from .numexpr import NumericExpression
from .numexpr import PREC_SUM, PREC_PRODUCT, PREC_UNARY, PREC_ATOM


__all__ = [
    "ConstantExpression",
    "PiExpression",
    "VariableExpression",
    "SumExpression",
    "DifferenceExpression",
    "ProductExpression",
    "QuotientExpression",
    "NegationExpression",
    "CallExpression",
    "MulAddExpression",
]


## Fused multiply-add of native floats (Python 3.13+).
_fma = getattr(math, "fma", None)


def _work_digits(num_digits):
    return 2 * num_digits + Settings.guard_digits


class ConstantExpression(NumericExpression):
    r"""Represent an expression that is constant.

    The value is stored as a BigDecimal and converted to float (or `mpf`)
    only when creating an evaluator.
    """
    def __init__(self, value=0, name='const'):
        super().__init__(name=name)
        self._value = BigDecimal(value)

    @property
    def value(self):
        r"""The BigDecimal value of this constant."""
        return self._value

    @property
    def precedence(self):
        # Negative literals bind like a negation.
        return PREC_UNARY if self._value.is_negative() else PREC_ATOM

    def _expr_str(self):
        return str(self._value)

    def _evaluate(self, num_digits):
        return self._value

    def _evaluator(self, use_mp):
        text = str(self._value)
        if use_mp:
            return lambda env: mp.mpf(text)
        value = self._value.to_float()
        return lambda env: value


class PiExpression(NumericExpression):
    r"""The constant pi, evaluated at the precision of each evaluate() call."""
    def __init__(self, name='PI'):
        super().__init__(name=name)

    def _expr_str(self):
        return "PI"

    def _evaluate(self, num_digits):
        return pi(num_digits)

    def _evaluator(self, use_mp):
        if use_mp:
            return lambda env: +mp.pi
        return lambda env: math.pi


class VariableExpression(NumericExpression):
    r"""A named variable to be replaced using substitute()."""
    def __init__(self, var_name, name='var'):
        super().__init__(name=name)
        ## Name of the variable, e.g. ``'x'``.
        self.var_name = var_name

    def _expr_str(self):
        return self.var_name

    def _substitute(self, variable, value):
        return value if variable == self.var_name else self

    def _evaluate(self, num_digits):
        raise CouldNotEvaluate("Unbound variable: %s" % self.var_name,
                               expr=self)

    def _evaluator(self, use_mp):
        var_name = self.var_name
        return lambda env: env[var_name]


class _BinaryExpression(NumericExpression):
    r"""Base for the arithmetic operations on two sub expressions."""
    ## Operator symbol used for rendering.
    op = None

    def __init__(self, a, b, name=None):
        super().__init__(a=a, b=b, name=name)

    def _expr_str(self):
        return "%s %s %s" % (self._child_source(self.a), self.op,
                             self._child_source(self.b, strict=True))

    def _evaluate(self, num_digits):
        return self._compute(self.a.evaluate(num_digits),
                             self.b.evaluate(num_digits), num_digits)

    def _compute(self, a, b, num_digits):
        raise NotImplementedError

    def _evaluator(self, use_mp):
        a = self.a._evaluator(use_mp)
        b = self.b._evaluator(use_mp)
        op = self._float_op
        return lambda env: op(a(env), b(env))


class SumExpression(_BinaryExpression):
    r"""Sum ``a + b`` of two expressions."""
    op = "+"
    precedence = PREC_SUM

    def _expr_str(self):
        # Addition is associative, so the right operand needs no parentheses.
        return "%s + %s" % (self._child_source(self.a),
                            self._child_source(self.b))

    def _compute(self, a, b, num_digits):
        return a + b

    @staticmethod
    def _float_op(a, b):
        return a + b


class DifferenceExpression(_BinaryExpression):
    r"""Difference ``a - b`` of two expressions."""
    op = "-"
    precedence = PREC_SUM

    def _compute(self, a, b, num_digits):
        return a - b

    @staticmethod
    def _float_op(a, b):
        return a - b


class ProductExpression(_BinaryExpression):
    r"""Product ``a * b`` of two expressions."""
    op = "*"
    precedence = PREC_PRODUCT

    def _expr_str(self):
        return "%s * %s" % (self._child_source(self.a),
                            self._child_source(self.b))

    def _compute(self, a, b, num_digits):
        return round_digits(a * b, _work_digits(num_digits))

    @staticmethod
    def _float_op(a, b):
        return a * b


class QuotientExpression(_BinaryExpression):
    r"""Quotient ``a / b`` of two expressions."""
    op = "/"
    precedence = PREC_PRODUCT

    def _compute(self, a, b, num_digits):
        try:
            return a.div(b, _work_digits(num_digits))
        except ZeroDivisionError:
            raise CouldNotEvaluate("Division by zero in %s" % self.source(),
                                   expr=self)

    @staticmethod
    def _float_op(a, b):
        return a / b


class NegationExpression(NumericExpression):
    r"""Negated expression ``-a``."""
    precedence = PREC_UNARY

    def __init__(self, a, name='neg'):
        super().__init__(a=a, name=name)

    def _expr_str(self):
        return "-%s" % self._child_source(self.a, strict=True)

    def _evaluate(self, num_digits):
        return -self.a.evaluate(num_digits)

    def _evaluator(self, use_mp):
        a = self.a._evaluator(use_mp)
        return lambda env: -a(env)


class CallExpression(NumericExpression):
    r"""Call of a named function in method notation.

    The first argument is the receiver, i.e. ``CallExpression(Function.LOG,
    x, 2)`` renders as ``x.log(2)``. Missing trailing arguments are filled
    with the function's default values.
    """
    def __init__(self, function, *args, name=None):
        min_args = function.arity - len(function.defaults)
        if not min_args <= len(args) <= function.arity:
            raise TypeError("%s() takes %d to %d arguments (%d given)"
                            % (function.fname, min_args, function.arity,
                               len(args)))
        args = list(args) + list(function.defaults[len(args)-min_args:])
        super().__init__(
            name=name or function.fname,
            **dict(("arg%d" % i, arg) for i, arg in enumerate(args))
        )
        ## The functions.Function member being called.
        self.function = function

    @property
    def args(self):
        r"""All arguments, receiver first."""
        return [getattr(self, "arg%d" % i) for i in range(self.function.arity)]

    def _expr_str(self):
        receiver, *rest = self.args
        return "%s.%s(%s)" % (self._receiver_source(receiver),
                              self.function.fname,
                              ", ".join(a.source() for a in rest))

    def _evaluate(self, num_digits):
        args = [a.evaluate(num_digits) for a in self.args]
        try:
            value = self.function.evaluate(args, num_digits)
        except ZeroDivisionError:
            value = None
        if value is None:
            raise CouldNotEvaluate(
                "%s is undefined for %s" % (
                    self.function.fname, ", ".join(str(a) for a in args)
                ),
                expr=self,
            )
        return value

    def _evaluator(self, use_mp):
        if use_mp:
            f = self.function.mp_function()
        else:
            f = self.function.float_function()
        args = [a._evaluator(use_mp) for a in self.args]
        return lambda env: f(*[a(env) for a in args])


class MulAddExpression(NumericExpression):
    r"""Fused multiply-add ``a * b + c`` rendered as ``a.mul_add(b, c)``.

    At arbitrary precision, the product and sum are computed exactly and
    rounded once. Float evaluators use `math.fma` where available and
    ``a * b + c`` with two roundings otherwise.
    """
    def __init__(self, a, b, c, name='mul_add'):
        super().__init__(a=a, b=b, c=c, name=name)

    def _expr_str(self):
        return "%s.mul_add(%s, %s)" % (self._receiver_source(self.a),
                                       self.b.source(), self.c.source())

    def _evaluate(self, num_digits):
        a, b, c = [e.evaluate(num_digits) for e in (self.a, self.b, self.c)]
        return round_digits(a * b + c, _work_digits(num_digits))

    def _evaluator(self, use_mp):
        a = self.a._evaluator(use_mp)
        b = self.b._evaluator(use_mp)
        c = self.c._evaluator(use_mp)
        if use_mp or _fma is None:
            return lambda env: a(env) * b(env) + c(env)
        return lambda env: _fma(a(env), b(env), c(env))
