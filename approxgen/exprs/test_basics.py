#!/usr/bin/env python3

import contextlib
import io
import math
import unittest
import sys

from mpmath import mp

from testutils import ApproxTestCase
from ..bigdec import BigDecimal
from ..numutils import CouldNotEvaluate
from .basics import ConstantExpression, PiExpression, VariableExpression
from .basics import CallExpression, MulAddExpression, QuotientExpression
from .functions import Function
from .parse import parse_expr


x = VariableExpression('x')
y = VariableExpression('y')


class TestRendering(ApproxTestCase):
    def test_method_notation(self):
        expr = (x * PiExpression() * 2).sin()
        self.assertEqual(expr.source(), "(x * PI * 2).sin()")
        self.assertEqual(str(expr), "(x * PI * 2).sin()")
        self.assertEqual(repr(expr), "<CallExpression((x * PI * 2).sin())>")
        self.assertEqual(x.sin().source(), "x.sin()")
        self.assertEqual(x.exp().ln().source(), "x.exp().ln()")

    def test_default_arguments(self):
        self.assertEqual(x.log(2).source(), "x.log(2)")
        self.assertEqual(x.qnorm().source(), "x.qnorm(0, 1)")
        self.assertEqual(x.dnorm(1).source(), "x.dnorm(1, 1)")
        self.assertEqual(x.pnorm(2, 3).source(), "x.pnorm(2, 3)")

    def test_parentheses(self):
        self.assertEqual((x - (y - 1)).source(), "x - (y - 1)")
        self.assertEqual((x - y - 1).source(), "x - y - 1")
        self.assertEqual((x + (y + 1)).source(), "x + y + 1")
        self.assertEqual(((x + 1) * 2).source(), "(x + 1) * 2")
        self.assertEqual((x / (y * 2)).source(), "x / (y * 2)")
        self.assertEqual((-(x + 1)).source(), "-(x + 1)")
        self.assertEqual((2 * x).source(), "2 * x")
        self.assertEqual((1 - x).source(), "1 - x")

    def test_constant_receivers(self):
        self.assertEqual(ConstantExpression(BigDecimal("-1.5")).sin().source(),
                         "(-1.5).sin()")
        chain = ConstantExpression(BigDecimal("0.5")).mul_add(x * x, 2) * x
        self.assertEqual(chain.source(), "(0.5).mul_add(x * x, 2) * x")
        self.assertEqual((x + 1).abs().source(), "(x + 1).abs()")
        self.assertEqual(abs(x).source(), "x.abs()")

    def test_print_tree(self):
        expr = (x + 1).sin()
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            expr.print_tree()
        lines = out.getvalue().splitlines()
        self.assertEqual(len(lines), 4)
        self.assertTrue(lines[0].startswith("root [sin]"))
        self.assertEqual(len(list(expr.traverse_tree())), 3)
        self.assertEqual(len(list(expr.traverse_tree(include_root=True))), 4)


class TestEvaluation(ApproxTestCase):
    def test_substitute(self):
        expr = (x * PiExpression() * 2).sin()
        y_val = expr.substitute('x', BigDecimal("0.25")).evaluate(20)
        self.assertDecimalAlmostEqual(y_val, 1, 19)
        self.assertEqual(expr.free_variables(), set(['x']))
        self.assertEqual(expr.substitute(x, 1).free_variables(), set())
        expr2 = expr.substitute('x', y + 1)
        self.assertEqual(expr2.source(), "((y + 1) * PI * 2).sin()")
        self.assertEqual(expr.source(), "(x * PI * 2).sin()")

    def test_arithmetic(self):
        expr = (x * 3 - 1) / 4 + -x
        value = expr.substitute('x', BigDecimal("0.5")).evaluate(20)
        self.assertEqual(value, BigDecimal("-0.375"))
        self.assertEqual(MulAddExpression(2, 3, 4).evaluate(10), 10)
        self.assertEqual(PiExpression().evaluate(5), BigDecimal("3.14159"))

    def test_named_functions(self):
        self.assertDecimalAlmostEqual(
            ConstantExpression(8).log(2).evaluate(20), 3, 19
        )
        self.assertDecimalAlmostEqual(
            ConstantExpression(1).dnorm(2, 3).evaluate(20),
            "0.12579440923099772133941284170576695075747160303", 20
        )
        self.assertEqual(ConstantExpression(-2).abs().evaluate(20), 2)
        self.assertEqual(ConstantExpression(4).sqrt().evaluate(20), 2)

    def test_errors(self):
        with self.assertRaises(CouldNotEvaluate):
            (x + 1).evaluate(20)
        with self.assertRaises(CouldNotEvaluate) as cm:
            ConstantExpression(0).ln().evaluate(20)
        self.assertIs(cm.exception.expr.function, Function.LN)
        with self.assertRaises(CouldNotEvaluate):
            (ConstantExpression(2) + 1).asin().evaluate(20)
        with self.assertRaises(CouldNotEvaluate):
            QuotientExpression(1, x - 1).substitute('x', 1).evaluate(20)
        with self.assertRaises(CouldNotEvaluate) as cm:
            parse_expr("dnorm(x, 0, 0)").substitute('x', 1).evaluate(20)
        self.assertIs(cm.exception.expr.function, Function.DNORM)
        with self.assertRaises(CouldNotEvaluate):
            x.pnorm(1, 0).substitute('x', 2).evaluate(20)
        with self.assertRaises(TypeError):
            x.log()
        with self.assertRaises(TypeError):
            CallExpression(Function.SIN, x, 1)


class TestEvaluators(ApproxTestCase):
    def test_float_evaluator(self):
        f = (x * PiExpression() * 2).sin().evaluator('x')
        self.assertAlmostEqual(f(0.125), math.sqrt(0.5), places=15)
        self.assertIsInstance(f(0.125), float)
        g = (x.qnorm() + x.pnorm(0, 2) + x.dnorm()).evaluator()
        with mp.workdps(30):
            p = mp.mpf("0.3")
            expected = float(mp.sqrt(2) * mp.erfinv(2*p - 1)
                             + mp.ncdf(p, 0, 2) + mp.npdf(p))
        self.assertAlmostEqual(g(0.3), expected, places=12)

    def test_mp_evaluator(self):
        f = (x.exp() - 1).evaluator('x', use_mp=True, dps=40)
        with mp.workdps(40):
            value = f(BigDecimal("0.001"))
            self.assertIsInstance(value, mp.mpf)
            self.assertLess(abs(value - mp.expm1(mp.mpf("0.001"))),
                            mp.mpf(10)**-35)

    def test_unbound_variables(self):
        with self.assertRaises(CouldNotEvaluate):
            (x + y).evaluator('x')
        f = (x + y).substitute('y', 2).evaluator('x')
        self.assertEqual(f(1), 3.0)

    def test_mul_add_chain(self):
        chain = ConstantExpression(2).mul_add(x, 3).mul_add(x, 4)
        f = chain.evaluator('x')
        self.assertEqual(f(2), 18.0)
        self.assertEqual(chain.substitute('x', 2).evaluate(20), 18)

    def test_mul_add_rounding(self):
        eps = 2.0**-27
        f = ConstantExpression(1 + eps).mul_add(x, -1).evaluator('x')
        # (1+eps)*(1-eps) rounds to 1.0 unless fused
        expected = -2.0**-54 if hasattr(math, 'fma') else 0.0
        self.assertEqual(f(1 - eps), expected)


class TestFunctionTable(ApproxTestCase):
    def test_lookup(self):
        self.assertIs(Function.from_name('qnorm'), Function.QNORM)
        with self.assertRaises(KeyError):
            Function.from_name('gamma')
        self.assertEqual(Function.LOG.arity, 2)
        self.assertEqual(Function.DNORM.defaults, (0, 1))

    def test_implementations(self):
        for f in Function:
            self.assertTrue(callable(f.float_function()))
            self.assertTrue(callable(f.mp_function()))
        self.assertEqual(Function.SQRT.evaluate([BigDecimal(4)], 20), 2)
        self.assertIsNone(Function.LN.evaluate([BigDecimal(-1)], 20))


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
