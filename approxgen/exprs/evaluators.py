r"""@package approxgen.exprs.evaluators

Callable snapshots of expressions evaluated in native or `mpmath` arithmetic.

Expressions evaluate to BigDecimal values through
numexpr.NumericExpression.evaluate(). To check emitted code as it would
actually run, i.e. in IEEE-754 double precision, an expression is compiled
into an Evaluator instead, which is a plain callable of one variable.
"""

from contextlib import contextmanager

from mpmath import mp, fp

from ..bigdec import BigDecimal


__all__ = [
    "Evaluator",
    "mpmath_context",
    "context",
]


def mpmath_context(use_mp):
    r"""Return the `mpmath.mp` or `mpmath.fp` context."""
    return mp if use_mp else fp


@contextmanager
def context(use_mp, dps=None):
    r"""Convenience function to be used as context manager.

    This will automatically choose the correct context (`mp` or `fp`) based
    on the choice of `use_mp` and configure the desired decimal places.

    Args:
        use_mp: Whether to use `mp` (if `True`) or `fp`.
        dps:    Decimal places to use in `mp` computations. If `None`, the
                current setting is kept.
    """
    ctx = mpmath_context(use_mp)
    if not use_mp or dps is None:
        yield ctx
        return
    with mp.workdps(dps):
        yield ctx


class Evaluator(object):
    r"""Callable evaluating an expression for values of one variable.

    Evaluators are light-weight objects created by
    numexpr.NumericExpression.evaluator(). They store the compiled expression
    tree and evaluate it either with floats or with `mpmath.mpf` numbers.
    """
    def __init__(self, expr, f, variable, use_mp=False, dps=None):
        r"""Create an evaluator for a compiled expression.

        @param expr
            The expression object for which this evaluator is created.
        @param f
            Compiled function taking a dictionary mapping variable names to
            numbers.
        @param variable
            Name of the variable the evaluator is a function of.
        @param use_mp
            Whether `f` was compiled for `mpmath` numbers.
        @param dps
            Decimal places to use for `mpmath` evaluations.
        """
        self._expr = expr
        self._f = f
        self._use_mp = use_mp
        self._dps = dps
        ## Name of the variable this is a function of.
        self.variable = variable

    @property
    def expr(self):
        r"""The expression this evaluator was created for."""
        return self._expr

    def __call__(self, x):
        r"""Evaluate the expression at a point x."""
        with context(self._use_mp, self._dps) as ctx:
            if not self._use_mp:
                x = float(x)
            elif isinstance(x, BigDecimal):
                x = ctx.mpf(str(x))
            else:
                x = ctx.mpf(x)
            return self._f({self.variable: x})

    def __repr__(self):
        return "<%s(%s, use_mp=%r)>" % (type(self).__name__, self._expr,
                                        self._use_mp)
