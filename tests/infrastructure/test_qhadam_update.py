import unittest

import numpy as np

from qhopt.domain import ShapeMismatchError
from qhopt.infrastructure import QHAdamUpdate


GRADIENTS = [
    np.array([0.5, -1.0, 2.0]),
    np.array([-0.25, 0.75, 1.5]),
    np.array([1.0, -0.5, -3.0]),
]


def adam_reference(x0, grads, lr, b1, b2, eps):
    x = x0.copy()
    m = np.zeros_like(x)
    v = np.zeros_like(x)
    for t, g in enumerate(grads, start=1):
        m = b1 * m + (1 - b1) * g
        v = b2 * v + (1 - b2) * g * g
        m_hat = m / (1 - b1**t)
        v_hat = v / (1 - b2**t)
        x = x - lr * m_hat / (np.sqrt(v_hat) + eps)
    return x


class TestQHAdamUpdateRule(unittest.TestCase):
    def test_first_step_matches_reference(self):
        x0 = np.array([1.0, -2.0, 0.5])
        g = GRADIENTS[0]
        lr, b1, b2, eps, v1, v2 = 0.01, 0.9, 0.999, 1e-8, 0.7, 1.0

        policy = QHAdamUpdate(epsilon=eps, beta1=b1, beta2=b2, v1=v1, v2=v2)
        x = x0.copy()
        policy.update(x, lr, g)

        m_hat = ((1 - b1) * g) / (1 - b1)
        v_hat = ((1 - b2) * g * g) / (1 - b2)
        num = (1 - v1) * g + v1 * m_hat
        den = np.sqrt((1 - v2) * g * g + v2 * v_hat) + eps
        expected = x0 - lr * num / den

        np.testing.assert_allclose(x, expected, rtol=1e-12, atol=1e-15)
        self.assertEqual(policy.t, 1)

    def test_v1_v2_zero_is_normalized_gradient_descent(self):
        x0 = np.array([1.0, -2.0, 0.5])
        lr, eps = 0.1, 1e-8
        policy = QHAdamUpdate(epsilon=eps, v1=0.0, v2=0.0)

        x = x0.copy()
        expected = x0.copy()
        for g in GRADIENTS:
            policy.update(x, lr, g)
            expected = expected - lr * g / (np.abs(g) + eps)

        np.testing.assert_allclose(x, expected, rtol=1e-12, atol=1e-15)

    def test_v1_v2_one_matches_adam(self):
        x0 = np.array([1.0, -2.0, 0.5])
        lr, b1, b2, eps = 0.05, 0.9, 0.999, 1e-8
        policy = QHAdamUpdate(epsilon=eps, beta1=b1, beta2=b2, v1=1.0, v2=1.0)

        x = x0.copy()
        for g in GRADIENTS:
            policy.update(x, lr, g)

        expected = adam_reference(x0, GRADIENTS, lr, b1, b2, eps)
        np.testing.assert_allclose(x, expected, rtol=1e-12, atol=1e-15)

    def test_moments_track_moving_averages(self):
        b1, b2 = 0.8, 0.9
        policy = QHAdamUpdate(beta1=b1, beta2=b2)
        x = np.zeros(3)

        m = np.zeros(3)
        v = np.zeros(3)
        for g in GRADIENTS:
            policy.update(x, 0.01, g)
            m = b1 * m + (1 - b1) * g
            v = b2 * v + (1 - b2) * g * g

        np.testing.assert_allclose(policy.first_moment, m, rtol=1e-12)
        np.testing.assert_allclose(policy.second_moment, v, rtol=1e-12)
        self.assertEqual(policy.t, len(GRADIENTS))

    def test_update_is_in_place(self):
        policy = QHAdamUpdate()
        x = np.array([1.0, 2.0, 3.0])
        alias = x
        policy.update(x, 0.1, GRADIENTS[0])
        self.assertIs(alias, x)
        self.assertFalse(np.allclose(x, [1.0, 2.0, 3.0]))

    def test_zero_gradient_leaves_iterate_unchanged(self):
        policy = QHAdamUpdate()
        x = np.array([1.0, 2.0])
        policy.update(x, 0.1, np.zeros(2))
        np.testing.assert_array_equal(x, [1.0, 2.0])
        self.assertTrue(np.all(np.isfinite(x)))

    def test_large_step_count_saturates_bias_correction(self):
        b1, b2, eps, v1, v2 = 0.9, 0.999, 1e-8, 0.7, 1.0
        policy = QHAdamUpdate(epsilon=eps, beta1=b1, beta2=b2, v1=v1, v2=v2)
        policy.initialize((3,))
        state = policy.state_dict()
        state["t"] = 10**9
        policy.load_state_dict(state)

        x = np.zeros(3)
        g = GRADIENTS[0]
        policy.update(x, 0.1, g)

        # beta**t underflows to 0, so the correction factors are exactly 1
        m = (1 - b1) * g
        v = (1 - b2) * g * g
        num = (1 - v1) * g + v1 * m
        den = np.sqrt((1 - v2) * g * g + v2 * v) + eps
        np.testing.assert_allclose(x, -0.1 * num / den, rtol=1e-12)
        self.assertTrue(np.all(np.isfinite(x)))


class TestQHAdamUpdateState(unittest.TestCase):
    def test_lazy_allocation_on_first_update(self):
        policy = QHAdamUpdate()
        self.assertIsNone(policy.first_moment)
        self.assertIsNone(policy.shape)

        policy.update(np.zeros((2, 2)), 0.1, np.ones((2, 2)))
        self.assertEqual(policy.shape, (2, 2))
        self.assertEqual(policy.second_moment.shape, (2, 2))

    def test_initialize_zeroes_state(self):
        policy = QHAdamUpdate()
        policy.update(np.zeros(3), 0.1, GRADIENTS[0])
        policy.initialize((4,))
        np.testing.assert_array_equal(policy.first_moment, np.zeros(4))
        np.testing.assert_array_equal(policy.second_moment, np.zeros(4))
        self.assertEqual(policy.t, 0)

    def test_reset_is_idempotent(self):
        policy = QHAdamUpdate()
        x = np.zeros(3)
        for g in GRADIENTS:
            policy.update(x, 0.1, g)

        policy.reset()
        m1 = policy.first_moment.copy()
        v1 = policy.second_moment.copy()
        t1 = policy.t

        policy.reset()
        np.testing.assert_array_equal(policy.first_moment, m1)
        np.testing.assert_array_equal(policy.second_moment, v1)
        self.assertEqual(policy.t, t1)

        np.testing.assert_array_equal(m1, np.zeros(3))
        np.testing.assert_array_equal(v1, np.zeros(3))
        self.assertEqual(t1, 0)

    def test_reset_before_allocation(self):
        policy = QHAdamUpdate()
        policy.reset()
        self.assertIsNone(policy.first_moment)
        self.assertEqual(policy.t, 0)

    def test_iterate_shape_mismatch_raises(self):
        policy = QHAdamUpdate()
        policy.initialize((2,))
        with self.assertRaises(ShapeMismatchError) as ctx:
            policy.update(np.zeros(3), 0.1, np.ones(3))
        self.assertEqual(ctx.exception.expected, (2,))
        self.assertEqual(ctx.exception.actual, (3,))

    def test_gradient_shape_mismatch_raises(self):
        policy = QHAdamUpdate()
        x = np.zeros(2)
        with self.assertRaises(ShapeMismatchError):
            policy.update(x, 0.1, np.ones(3))

    def test_state_dict_round_trip(self):
        policy = QHAdamUpdate()
        x = np.zeros(3)
        for g in GRADIENTS:
            policy.update(x, 0.1, g)

        other = QHAdamUpdate()
        other.load_state_dict(policy.state_dict())

        self.assertEqual(other.t, policy.t)
        np.testing.assert_array_equal(other.first_moment, policy.first_moment)
        np.testing.assert_array_equal(other.second_moment, policy.second_moment)
        self.assertTrue(other.first_moment.flags.writeable)

    def test_load_state_dict_rejects_mismatched_moments(self):
        a = QHAdamUpdate()
        a.initialize((2,))
        b = QHAdamUpdate()
        b.initialize((3,))
        state = a.state_dict()
        state["second_moment"] = b.state_dict()["second_moment"]

        with self.assertRaises(ShapeMismatchError):
            QHAdamUpdate().load_state_dict(state)


class TestQHAdamUpdateHyperparameters(unittest.TestCase):
    def test_defaults(self):
        policy = QHAdamUpdate()
        self.assertEqual(policy.epsilon, 1e-8)
        self.assertEqual(policy.beta1, 0.9)
        self.assertEqual(policy.beta2, 0.999)
        self.assertEqual(policy.v1, 0.7)
        self.assertEqual(policy.v2, 1.0)

    def test_invalid_hyperparams_raise(self):
        with self.assertRaises(ValueError):
            QHAdamUpdate(beta1=1.0)
        with self.assertRaises(ValueError):
            QHAdamUpdate(beta2=-0.1)
        with self.assertRaises(ValueError):
            QHAdamUpdate(epsilon=-1e-8)
        with self.assertRaises(ValueError):
            QHAdamUpdate(epsilon=0.0)

        policy = QHAdamUpdate()
        with self.assertRaises(ValueError):
            policy.beta1 = 1.5
        with self.assertRaises(ValueError):
            policy.epsilon = 0.0

    def test_blend_coefficients_are_not_range_checked(self):
        policy = QHAdamUpdate(v1=1.2, v2=-0.1)
        self.assertEqual(policy.v1, 1.2)
        self.assertEqual(policy.v2, -0.1)

    def test_config_round_trip(self):
        policy = QHAdamUpdate(epsilon=1e-6, beta1=0.5, beta2=0.99, v1=0.3, v2=0.4)
        clone = QHAdamUpdate.from_config(policy.get_config())
        self.assertEqual(clone.get_config(), policy.get_config())


if __name__ == "__main__":
    unittest.main()
