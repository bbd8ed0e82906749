import unittest

import numpy as np

from qhopt.infrastructure.problems import (
    LinearRegressionFunction,
    QuadraticBowlFunction,
)


def finite_difference(f, x, begin, batch_size, h=1e-6):
    g = np.zeros_like(x)
    for i in range(x.size):
        e = np.zeros_like(x)
        e.flat[i] = h
        g.flat[i] = (
            f.evaluate(x + e, begin, batch_size) - f.evaluate(x - e, begin, batch_size)
        ) / (2 * h)
    return g


class TestQuadraticBowlFunction(unittest.TestCase):
    def test_evaluate_and_gradient(self):
        f = QuadraticBowlFunction([[0.0, 0.0], [2.0, 4.0], [1.0, 1.0]])
        x = np.array([1.0, 2.0])

        self.assertEqual(f.size(), 3)
        self.assertAlmostEqual(f.evaluate(x, 0, 2), (1 + 4) + (1 + 4))

        g = np.zeros(2)
        f.gradient(x, 1, g, 2)
        np.testing.assert_allclose(g, 2 * ((x - [2, 4]) + (x - [1, 1])))
        np.testing.assert_allclose(g, finite_difference(f, x, 1, 2), rtol=1e-6)

    def test_scalar_centers(self):
        f = QuadraticBowlFunction([1.0, 3.0])
        self.assertEqual(f.centers.shape, (2, 1))
        np.testing.assert_allclose(f.minimizer(), [2.0])

    def test_shuffle_reorders_terms(self):
        f = QuadraticBowlFunction([1.0, 2.0, 3.0])
        f.shuffle([2, 0, 1])
        np.testing.assert_array_equal(f.centers.ravel(), [3.0, 1.0, 2.0])


class TestLinearRegressionFunction(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(3)
        self.X = rng.normal(size=(6, 3))
        self.y = rng.normal(size=6)
        self.f = LinearRegressionFunction(self.X, self.y)

    def test_evaluate(self):
        w = np.array([0.5, -1.0, 2.0])
        r = self.X[1:4] @ w - self.y[1:4]
        self.assertAlmostEqual(self.f.evaluate(w, 1, 3), float(r @ r))

    def test_gradient_matches_finite_difference(self):
        w = np.array([0.5, -1.0, 2.0])
        g = np.zeros(3)
        self.f.gradient(w, 0, g, 6)
        np.testing.assert_allclose(
            g, finite_difference(self.f, w, 0, 6), rtol=1e-5, atol=1e-6
        )

    def test_evaluate_with_gradient_is_consistent(self):
        w = np.array([0.1, 0.2, 0.3])
        g1 = np.zeros(3)
        g2 = np.zeros(3)
        value = self.f.evaluate_with_gradient(w, 2, g1, 3)
        self.f.gradient(w, 2, g2, 3)
        self.assertAlmostEqual(value, self.f.evaluate(w, 2, 3))
        np.testing.assert_array_equal(g1, g2)

    def test_shuffle_keeps_rows_paired(self):
        w = np.array([0.1, 0.2, 0.3])
        total = self.f.evaluate(w, 0, 6)
        self.f.shuffle([5, 4, 3, 2, 1, 0])
        self.assertAlmostEqual(self.f.evaluate(w, 0, 6), total)
        r = self.X[5] @ w - self.y[5]
        self.assertAlmostEqual(self.f.evaluate(w, 0, 1), float(r * r))

    def test_invalid_inputs_raise(self):
        with self.assertRaises(ValueError):
            LinearRegressionFunction(np.zeros(3), np.zeros(3))
        with self.assertRaises(ValueError):
            LinearRegressionFunction(np.zeros((3, 2)), np.zeros(4))
        with self.assertRaises(ValueError):
            self.f.evaluate(np.zeros(2), 0, 6)


if __name__ == "__main__":
    unittest.main()
