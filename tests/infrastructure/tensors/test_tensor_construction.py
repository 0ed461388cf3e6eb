import unittest

import numpy as np

from trigrad import ConstructionError, Device, LinearCongruentialGenerator, Tensor


class TestTensorConstruction(unittest.TestCase):
    def test_defaults_to_zeros(self):
        t = Tensor((2, 3))
        self.assertEqual(t.shape, (2, 3))
        self.assertEqual(t.size, 6)
        self.assertEqual(t.device, Device("cpu"))
        self.assertEqual(t.values.dtype, np.float32)
        np.testing.assert_array_equal(t.values, np.zeros(6, dtype=np.float32))
        np.testing.assert_array_equal(t.gradient, np.zeros(6, dtype=np.float32))

    def test_values_are_copied_as_float32(self):
        src = [1, 2, 3, 4]
        t = Tensor([2, 2], src)
        self.assertEqual(t.values.dtype, np.float32)
        np.testing.assert_array_equal(t.values, [1, 2, 3, 4])
        self.assertEqual(t.shape, (2, 2))

    def test_length_mismatch_raises(self):
        with self.assertRaises(ConstructionError):
            Tensor([2, 2], [1, 2, 3])

    def test_construction_error_is_value_error(self):
        with self.assertRaises(ValueError):
            Tensor([3], [1, 2])

    def test_invalid_shapes_raise(self):
        for shape in ([], [0], [2, -1]):
            with self.subTest(shape=shape):
                with self.assertRaises(ConstructionError):
                    Tensor(shape)

    def test_nested_values_rejected(self):
        with self.assertRaises(ConstructionError):
            Tensor([2, 2], [[1, 2], [3, 4]])

    def test_leaf_has_no_parents(self):
        t = Tensor([2], [1, 2], label="t")
        self.assertIsNone(t.ctx)
        self.assertEqual(t.parents, ())
        self.assertEqual(t.op, "")
        self.assertEqual(t.label, "t")


class TestTensorFactories(unittest.TestCase):
    def test_filled(self):
        t = Tensor.filled(1.25, (2, 3))
        np.testing.assert_array_equal(t.values, np.full(6, 1.25, dtype=np.float32))

    def test_zeros_and_ones(self):
        np.testing.assert_array_equal(Tensor.zeros([3]).values, [0, 0, 0])
        np.testing.assert_array_equal(Tensor.ones([2, 2]).values, [1, 1, 1, 1])

    def test_random_is_reproducible_from_seed(self):
        a = Tensor.random((4, 5), seed=123)
        b = Tensor.random((4, 5), seed=123)
        np.testing.assert_array_equal(a.values, b.values)

    def test_random_range(self):
        t = Tensor.random((100,), min=-1.0, max=2.0, seed=7)
        self.assertTrue(np.all(t.values >= -1.0))
        self.assertTrue(np.all(t.values <= 2.0))
        self.assertGreater(len(np.unique(t.values)), 1)

    def test_random_uses_shared_generator(self):
        gen = LinearCongruentialGenerator(5)
        first = Tensor.random((3,), generator=gen)
        second = Tensor.random((3,), generator=gen)
        self.assertFalse(np.array_equal(first.values, second.values))

        replay = LinearCongruentialGenerator(5)
        expected = [replay.uniform() for _ in range(6)]
        np.testing.assert_allclose(
            np.concatenate([first.values, second.values]), expected, rtol=1e-6
        )

    def test_linear_space(self):
        t = Tensor.linear_space(0.0, 1.0, 5)
        self.assertEqual(t.shape, (5,))
        np.testing.assert_allclose(t.values, [0.0, 0.25, 0.5, 0.75, 1.0])

    def test_linear_space_single_step(self):
        np.testing.assert_array_equal(Tensor.linear_space(3.0, 9.0, 1).values, [3.0])

    def test_linear_space_rejects_zero_steps(self):
        with self.assertRaises(ConstructionError):
            Tensor.linear_space(0.0, 1.0, 0)


class TestTensorNumpyInterop(unittest.TestCase):
    def test_from_numpy_uses_axis0_fastest_layout(self):
        arr = np.array([[1, 2, 3], [4, 5, 6]], dtype=np.float32)
        t = Tensor.from_numpy(arr)
        self.assertEqual(t.shape, (2, 3))
        np.testing.assert_array_equal(t.values, [1, 4, 2, 5, 3, 6])

    def test_to_numpy_inverts_from_numpy(self):
        arr = np.arange(24, dtype=np.float32).reshape(2, 3, 4)
        np.testing.assert_array_equal(Tensor.from_numpy(arr).to_numpy(), arr)

    def test_to_numpy_returns_copy(self):
        t = Tensor([2], [1, 2])
        arr = t.to_numpy()
        arr[0] = 100
        self.assertEqual(t.values[0], 1)

    def test_from_numpy_zero_dim(self):
        t = Tensor.from_numpy(np.float32(3.5))
        self.assertEqual(t.shape, (1,))
        np.testing.assert_array_equal(t.values, [3.5])


class TestTensorString(unittest.TestCase):
    def test_str(self):
        self.assertEqual(str(Tensor([3], [1, 2.5, -3])), "<1, 2.5, -3>")

    def test_str_with_label(self):
        self.assertEqual(str(Tensor([2], [1, 2], label="t")), "<t:1, 2>")

    def test_repr_mentions_shape_and_device(self):
        text = repr(Tensor([2, 1], [1, 2], label="t"))
        self.assertIn("(2, 1)", text)
        self.assertIn("cpu", text)


if __name__ == "__main__":
    unittest.main()
