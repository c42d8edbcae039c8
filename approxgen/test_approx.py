#!/usr/bin/env python3

import contextlib
import io
import math
import unittest
import sys
import warnings

import numpy as np

from testutils import ApproxTestCase, slowtest
from .approx import Parity, approx, approx_many, chebyshev_nodes
from .approx import mul_add_polynomial
from .bigdec import BigDecimal
from .exprs import VariableExpression, PiExpression, MulAddExpression
from .exprs import ProductExpression, parse_expr
from .numutils import WrongNumberOfTerms, ParityWarning, CouldNotEvaluate
from .numutils import inf_norm1d


x = VariableExpression('x')


def max_error(chain, func, xmin, xmax, num=1001):
    f = chain.evaluator('x')
    return max(abs(f(t) - func(t)) for t in np.linspace(xmin, xmax, num))


class TestNodes(ApproxTestCase):
    def test_symmetric_interval(self):
        nodes = chebyshev_nodes(5, -1, 1, 20)
        self.assertEqual(len(nodes), 5)
        self.assertEqual(nodes[0], -1)
        self.assertEqual(nodes[-1], 1)
        self.assertDecimalAlmostEqual(nodes[2], 0, 20)
        self.assertDecimalAlmostEqual(nodes[1], -BigDecimal(2).sqrt(30) / 2, 20)
        for i in range(5):
            self.assertEqual(nodes[i], -nodes[4-i])

    def test_shifted_interval(self):
        nodes = chebyshev_nodes(4, BigDecimal("0.5"), 2, 20)
        self.assertEqual(nodes[0], BigDecimal("0.5"))
        self.assertEqual(nodes[-1], 2)
        self.assertDecimalAlmostEqual(nodes[1], "0.875", 20)
        self.assertDecimalAlmostEqual(nodes[2], "1.625", 20)
        self.assertEqual(sorted(nodes), nodes)

    def test_too_few(self):
        with self.assertRaises(WrongNumberOfTerms):
            chebyshev_nodes(1, 0, 1, 20)


class TestMulAddPolynomial(ApproxTestCase):
    def test_odd(self):
        chain = mul_add_polynomial([0, 1, 0, 2], 'x', Parity.ODD)
        self.assertIsInstance(chain, ProductExpression)
        self.assertEqual(chain.source(), "(2).mul_add(x * x, 1) * x")
        self.assertEqual(chain.evaluator()(3), 57.0)

    def test_even(self):
        chain = mul_add_polynomial([1, 0, 3, 0, -1], x, Parity.EVEN)
        self.assertIsInstance(chain, MulAddExpression)
        self.assertEqual(chain.source(),
                         "(-1).mul_add(x * x, 3).mul_add(x * x, 1)")
        self.assertEqual(chain.substitute('x', 2).evaluate(20), -3)

    def test_neither(self):
        chain = mul_add_polynomial([1, 2, 3], 'x', 'neither')
        self.assertEqual(chain.source(), "(3).mul_add(x, 2).mul_add(x, 1)")
        self.assertEqual(chain.evaluator()(2), 17.0)

    def test_parity_errors(self):
        with self.assertRaises(WrongNumberOfTerms):
            mul_add_polynomial([1, 2, 3], 'x', Parity.ODD)
        with self.assertRaises(WrongNumberOfTerms):
            mul_add_polynomial([1, 2, 3, 4], 'x', Parity.EVEN)
        with self.assertRaises(WrongNumberOfTerms):
            mul_add_polynomial([1], 'x', Parity.NEITHER)
        with self.assertRaises(ValueError):
            mul_add_polynomial([1, 2], 'x', 'sideways')


class TestApprox(ApproxTestCase):
    def test_wrong_number_of_terms(self):
        expr = (x * PiExpression() * 2).sin()
        with self.assertRaises(WrongNumberOfTerms):
            approx(expr, 15, -0.5, 0.5, parity=Parity.ODD)
        with self.assertRaises(WrongNumberOfTerms):
            approx(expr.substitute('x', x + 1), 16, -0.5, 0.5,
                   parity=Parity.EVEN)
        with self.assertRaises(WrongNumberOfTerms):
            approx(expr, 1, -0.5, 0.5)

    def test_sin_odd(self):
        expr = (x * PiExpression() * 2).sin()
        chain = approx(expr, 24, -0.5, 0.5, 'x', Parity.ODD, 20)
        self.assertTrue(chain.source().endswith(" * x"))
        self.assertEqual(chain.free_variables(), set(['x']))
        err = max_error(chain, lambda t: math.sin(2*math.pi*t), -0.5, 0.5)
        self.assertLess(err, 1e-14)
        f = chain.evaluator('x')
        self.assertEqual(f(0.0), 0.0)
        self.assertAlmostEqual(f(0.25), 1.0, places=14)
        self.assertAlmostEqual(f(-0.1), -f(0.1), places=16)

    def test_cos_even(self):
        expr = parse_expr("cos(x)")
        chain = approx(expr, 17, -1, 1, parity='even', num_digits=20)
        err = max_error(chain, math.cos, -1, 1)
        self.assertLess(err, 1e-14)
        self.assertIsInstance(chain, MulAddExpression)

    def test_exp_neither(self):
        chain = approx("exp(x)", 16, 0, 1, num_digits=20)
        err = max_error(chain, math.exp, 0, 1)
        self.assertLess(err, 4e-15)
        _, delta = inf_norm1d(chain.evaluator(), math.exp, domain=[0, 1])
        self.assertLess(delta, 4e-15)

    def test_statistical_function(self):
        chain = approx("pnorm(x)", 21, -1, 1, num_digits=20)
        from scipy.special import ndtr
        err = max_error(chain, lambda t: float(ndtr(t)), -1, 1)
        self.assertLess(err, 1e-12)

    def test_parity_warning(self):
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            approx("exp(x)", 6, -1, 1, parity=Parity.ODD)
        self.assertTrue(any(issubclass(i.category, ParityWarning) for i in w))
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            approx("sin(x)", 6, -1, 1, parity=Parity.ODD)
        self.assertFalse(any(issubclass(i.category, ParityWarning) for i in w))

    def test_undefined(self):
        with self.assertRaises(CouldNotEvaluate):
            approx("ln(x)", 4, 0, 1)

    def test_verbose(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            approx("x**2", 3, -1, 1, verbose=True)
        text = out.getvalue()
        self.assertIn("terms = ", text)
        self.assertIn("Elapsed time", text)
        self.assertEqual(text.count("  f("), 3)


class TestApproxMany(ApproxTestCase):
    def test_sequential(self):
        requests = [
            dict(expr="x**2", num_terms=3, xmin=-1, xmax=1),
            dict(expr="x**3", num_terms=4, xmin=-1, xmax=1, parity='odd'),
        ]
        chains = approx_many(requests, processes=1)
        self.assertEqual(len(chains), 2)
        self.assertAlmostEqual(chains[0].evaluator()(0.5), 0.25, places=15)
        self.assertAlmostEqual(chains[1].evaluator()(0.5), 0.125, places=15)

    @slowtest
    def test_parallel(self):
        requests = [
            dict(expr="sin(x)", num_terms=n, xmin=-1, xmax=1, parity='odd')
            for n in (4, 6, 8, 10)
        ]
        chains = approx_many(requests, processes=2)
        expected = [approx(**r) for r in requests]
        self.assertEqual([c.source() for c in chains],
                         [c.source() for c in expected])


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
