#!/usr/bin/env python3

import unittest
import sys

from testutils import ApproxTestCase
from .bigdec import BigDecimal
from .polynomial import Polynomial, divided_differences


class TestPolynomial(ApproxTestCase):
    def test_cubic(self):
        xs = [1, 2, 3, 4]
        ys = [6, 9, 2, 5]
        p = Polynomial.from_points(xs, ys, 30)
        terms = p.terms()
        self.assertEqual(len(terms), 4)
        self.assertEqual(p.degree, 3)
        self.assertDecimalAlmostEqual(terms[0], -27, 29)
        self.assertDecimalAlmostEqual(terms[1], BigDecimal(164).div(3, 40), 29)
        self.assertDecimalAlmostEqual(terms[2], -25, 29)
        self.assertDecimalAlmostEqual(terms[3], BigDecimal(10).div(3, 40), 29)
        for x, y in zip(xs, ys):
            self.assertDecimalAlmostEqual(p.eval(x), y, 28)
        self.assertDecimalAlmostEqual(p(BigDecimal("2.5")),
                                      BigDecimal("5.5"), 28)

    def test_odd_data(self):
        xs = [BigDecimal(x) for x in ("-1.5", "-0.75", "0", "0.75", "1.5")]
        ys = [BigDecimal(y) for y in
              ("-14.1014", "-0.931596", "0", "0.931596", "14.1014")]
        p = Polynomial.from_points(xs, ys, 30)
        terms = p.terms()
        for i in (0, 2, 4):
            self.assertDecimalAlmostEqual(terms[i], 0, 28)
        for x, y in zip(xs, ys):
            self.assertDecimalAlmostEqual(p.eval(x), y, 28)
        self.assertDecimalAlmostEqual(p(-1), -p(1), 28)

    def test_input_not_modified(self):
        xs = [1, 2, 3]
        ys = [BigDecimal(1), BigDecimal(4), BigDecimal(9)]
        p = Polynomial.from_points(xs, ys, 20)
        self.assertEqual(ys, [1, 4, 9])
        self.assertListAlmostEqual([float(t) for t in p.terms()], [0, 0, 1],
                                   places=15)

    def test_terms_order(self):
        p = Polynomial([1, 2, 3])
        self.assertEqual(p.eval(2), 17)
        self.assertEqual(p.terms(), [1, 2, 3])
        self.assertEqual(len(p), 3)
        p.terms()[0] = 5
        self.assertEqual(p.terms()[0], 1)
        self.assertEqual(repr(p), "<Polynomial(1, 2, 3)>")

    def test_constant(self):
        p = Polynomial.from_points([BigDecimal("0.5")], [BigDecimal("7.25")], 20)
        self.assertEqual(p.terms(), [BigDecimal("7.25")])
        self.assertEqual(p.eval(100), BigDecimal("7.25"))

    def test_errors(self):
        with self.assertRaises(ValueError):
            Polynomial.from_points([1, 2], [1], 20)
        with self.assertRaises(ValueError):
            Polynomial.from_points([], [], 20)
        with self.assertRaises(ValueError):
            Polynomial([])
        with self.assertRaises(ZeroDivisionError):
            Polynomial.from_points([1, 1], [2, 3], 20)

    def test_divided_differences(self):
        xs = [BigDecimal(x) for x in (0, 1, 2)]
        ys = [BigDecimal(y) for y in (1, 3, 7)]
        result = divided_differences(xs, ys, 10)
        self.assertIs(result, ys)
        self.assertEqual(ys, [1, 2, 1])


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
