r"""@package approxgen.exprs

Minimal symbolic expressions for target functions and generated code.

The classes in this package represent expressions like
``(x * PI * 2).sin()`` as trees. Expressions can have variables substituted,
be evaluated at arbitrary precision and be turned into float evaluators. See
numexpr.NumericExpression for details.
"""

from .functions import Function
from .numexpr import NumericExpression
from .basics import (
    ConstantExpression, PiExpression, VariableExpression,
    SumExpression, DifferenceExpression, ProductExpression,
    QuotientExpression, NegationExpression, CallExpression,
    MulAddExpression,
)
from .parse import parse_expr, from_sympy
