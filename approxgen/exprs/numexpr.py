r"""@package approxgen.exprs.numexpr

Base of the NumericExpression system.

A numeric expression is an immutable tree of constants, variables, arithmetic
operations and named function calls, e.g. the target function of an
approximation or the Horner chain emitted for it. Expressions support three
operations:
    * substitute() a variable by a value or another expression
    * evaluate() a variable-free expression to a BigDecimal at a given
      number of decimal places (dispatching named functions to
      approxgen.bdmath)
    * create an evaluator() that computes the expression in native floating
      point (or `mpmath`) arithmetic as a function of one variable

Expressions are built using Python operators and method calls on other
expressions:

~~~.py
x = VariableExpression('x')
expr = (x * PiExpression() * 2).sin()
y = expr.substitute('x', BigDecimal('0.25')).evaluate(20)    # 1
print(expr.source())                                        # (x * PI * 2).sin()
~~~
"""

from abc import ABCMeta, abstractmethod
import copy

from ..numutils import CouldNotEvaluate
from .evaluators import Evaluator, mpmath_context
from .functions import Function


__all__ = [
    "NumericExpression",
]


## Precedence levels used when rendering expressions.
PREC_SUM = 10
PREC_PRODUCT = 20
PREC_UNARY = 30
PREC_ATOM = 40


def _function_method(function):
    r"""Create a method applying `function` with `self` as first argument."""
    def method(self, *args):
        from .basics import CallExpression
        return CallExpression(function, self, *args)
    method.__name__ = function.fname
    method.__doc__ = "Return the expression `%s(self, ...)`." % function.fname
    return method


class NumericExpression(metaclass=ABCMeta):
    """Parent class for numeric expressions.

    Expressions are treated as immutable. Operations like substitute() return
    new expression objects and leave the original unchanged.

    The methods a child has to override are:
        * _expr_str() returning the source representation of the expression
        * _evaluate() computing the value at arbitrary precision
        * _evaluator() creating a callable for floating point evaluation
    """

    ## Precedence of the outermost operation, used for parenthesizing.
    precedence = PREC_ATOM

    def __init__(self, name=None, **sub_exprs):
        r"""Base class init for numeric expressions.

        The ``**sub_exprs`` sub expressions given as keyword arguments here
        are stored in this object and can be accessed with the keys used here.
        They are used when traversing through a complete expression hierarchy
        in e.g. print_tree() or substitute().

        Args:
            name: (string, optional)
                Name for the expression. By default, the current class name is
                used as name.
        """
        self._sub_exprs = dict()
        self._name = name if name else self.__class__.__name__
        self.set_sub_exprs(**sub_exprs)

    @property
    def name(self):
        r"""Name given to this instance of the expression."""
        return self._name

    def sub_expressions(self):
        r"""Return the sub expressions in the order they were set."""
        return list(self._sub_exprs.values())

    def set_sub_exprs(self, **sub_exprs):
        r"""Set/replace sub expressions under public attributes of this object.

        Each of the ``**sub_exprs`` keyword arguments will be stored on this
        object such that it is accessible via the key name used here as
        attribute name on the object.

        Numeric values given here will be converted to ConstantExpression
        objects.
        """
        sub_exprs = dict((k, ensure_expr(e)) for k, e in sub_exprs.items())
        for k, e in sub_exprs.items():
            setattr(self, k, e)
        self._sub_exprs.update(sub_exprs)

    def traverse_tree(self, include_root=False, parents=None):
        r"""Generator that walks through a complete expression tree.

        In each iteration, the returned values represent the current node's
        parents (as a list from root to immediate parent), its key under which
        it is stored in its parent, and the node itself.

        @b Examples
        \code
            for parents, name, expr in root_expr.traverse_tree():
                print("-"*len(parents), name)
        \endcode
        """
        if parents is None:
            parents = []
        if include_root:
            yield parents, "", self
        parents = parents + [self]
        for name, expr in self._sub_exprs.items():
            yield parents, name, expr
            for node in expr.traverse_tree(include_root=False,
                                           parents=parents):
                yield node

    def print_tree(self, root_name='root'):
        r"""Print the whole expression tree."""
        def _p(expr, name, parents=()):
            print("%s%s [%s] <%s>" % (
                ". " * len(parents), name, expr.name, type(expr).__name__
            ))
        _p(self, root_name)
        for parents, name, expr in self.traverse_tree():
            _p(expr, name, parents)

    def free_variables(self):
        r"""Return the set of names of variables occurring in the expression."""
        from .basics import VariableExpression
        return set(
            expr.var_name for _, _, expr in self.traverse_tree(include_root=True)
            if isinstance(expr, VariableExpression)
        )

    def substitute(self, variable, value):
        r"""Replace all occurrences of a variable.

        @param variable
            Name of the variable (or a VariableExpression).
        @param value
            Expression or number (e.g. a BigDecimal) to put in its place.

        @return A new expression. This expression is not modified.
        """
        from .basics import VariableExpression
        if isinstance(variable, VariableExpression):
            variable = variable.var_name
        return self._substitute(variable, ensure_expr(value))

    def _substitute(self, variable, value):
        if not self._sub_exprs:
            return self
        clone = copy.copy(self)
        clone._sub_exprs = dict()
        clone.set_sub_exprs(**dict(
            (k, e._substitute(variable, value))
            for k, e in self._sub_exprs.items()
        ))
        return clone

    def evaluate(self, num_digits):
        r"""Evaluate the expression to a BigDecimal.

        @param num_digits
            Number of decimal places the result should be accurate to.

        @b Raises

        numutils.CouldNotEvaluate if the expression contains free variables
        or a named function is undefined at its argument.
        """
        value = self._evaluate(num_digits)
        if value is None:
            raise CouldNotEvaluate("Could not evaluate %s" % self.source(),
                                   expr=self)
        return value

    def evaluator(self, variable='x', use_mp=False, dps=None):
        r"""Create an evaluator computing the expression as function of `variable`.

        Use `use_mp` to control whether the evaluator will use floating point
        arithmetics (for `False`) or arbitrary precision mpmath computations
        (for `True`). Default is `False`.

        @b Raises

        numutils.CouldNotEvaluate if the expression has free variables other
        than `variable`.
        """
        unbound = self.free_variables() - set([variable])
        if unbound:
            raise CouldNotEvaluate("Unbound variables: %s"
                                   % ", ".join(sorted(unbound)), expr=self)
        f = self._evaluator(use_mp)
        return Evaluator(self, f, variable, use_mp=use_mp, dps=dps)

    @classmethod
    def mpmath_context(cls, use_mp):
        r"""Return the `mpmath.mp` or `mpmath.fp` contexts."""
        return mpmath_context(use_mp)

    def source(self):
        r"""Render the expression in method-call notation."""
        return self._expr_str()

    def _child_source(self, child, strict=False):
        r"""Render a sub expression, adding parentheses where needed."""
        if child.precedence < self.precedence or (
                strict and child.precedence == self.precedence):
            return "(%s)" % child.source()
        return child.source()

    def _receiver_source(self, receiver):
        r"""Render the receiver of a method call, e.g. `(x + 1)` in `(x + 1).sin()`."""
        from .basics import ConstantExpression
        if receiver.precedence < PREC_ATOM or isinstance(receiver,
                                                          ConstantExpression):
            return "(%s)" % receiver.source()
        return receiver.source()

    @abstractmethod
    def _expr_str(self):
        r"""Source text of this expression (without outer parentheses)."""
        pass

    @abstractmethod
    def _evaluate(self, num_digits):
        r"""Compute the value as BigDecimal, or `None` if undefined."""
        pass

    @abstractmethod
    def _evaluator(self, use_mp):
        r"""Return a callable taking a dict of variable values."""
        pass

    def __str__(self):
        return self.source()

    def __repr__(self):
        return "<%s(%s)>" % (self.__class__.__name__, self.source())

    def __add__(self, other):
        from .basics import SumExpression
        return SumExpression(self, other)

    def __radd__(self, other):
        from .basics import SumExpression
        return SumExpression(other, self)

    def __sub__(self, other):
        from .basics import DifferenceExpression
        return DifferenceExpression(self, other)

    def __rsub__(self, other):
        from .basics import DifferenceExpression
        return DifferenceExpression(other, self)

    def __mul__(self, other):
        from .basics import ProductExpression
        return ProductExpression(self, other)

    def __rmul__(self, other):
        from .basics import ProductExpression
        return ProductExpression(other, self)

    def __truediv__(self, other):
        from .basics import QuotientExpression
        return QuotientExpression(self, other)

    def __rtruediv__(self, other):
        from .basics import QuotientExpression
        return QuotientExpression(other, self)

    def __neg__(self):
        from .basics import NegationExpression
        return NegationExpression(self)

    def __abs__(self):
        return self.abs()

    def mul_add(self, factor, addend):
        r"""Return the fused multiply-add expression ``self * factor + addend``."""
        from .basics import MulAddExpression
        return MulAddExpression(self, factor, addend)

    sin = _function_method(Function.SIN)
    cos = _function_method(Function.COS)
    tan = _function_method(Function.TAN)
    exp = _function_method(Function.EXP)
    ln = _function_method(Function.LN)
    log = _function_method(Function.LOG)
    pow = _function_method(Function.POW)
    sqrt = _function_method(Function.SQRT)
    asin = _function_method(Function.ASIN)
    acos = _function_method(Function.ACOS)
    atan = _function_method(Function.ATAN)
    erf = _function_method(Function.ERF)
    erfc = _function_method(Function.ERFC)
    dnorm = _function_method(Function.DNORM)
    pnorm = _function_method(Function.PNORM)
    qnorm = _function_method(Function.QNORM)
    abs = _function_method(Function.ABS)


def ensure_expr(expr):
    """Ensure an object is an expression, converting it if necessary.

    If `expr` is not an expression object, it is converted to a
    `ConstantExpression`.
    """
    if isinstance(expr, NumericExpression):
        return expr
    from .basics import ConstantExpression
    return ConstantExpression(expr)
