import itertools
import unittest

import numpy as np

from trigrad.infrastructure.utils import (
    dim_indices,
    flat_index,
    insert_axis,
    reduced_shape,
    remove_axis,
    total_length,
)


class TestFlatIndex(unittest.TestCase):
    def test_known_offsets(self):
        self.assertEqual(flat_index([1, 1, 1], [3, 3, 3]), 13)
        self.assertEqual(flat_index([3, 0], [4, 3]), 3)
        self.assertEqual(flat_index([2, 3, 4], [5, 5, 5]), 117)

    def test_axis_zero_varies_fastest(self):
        self.assertEqual(flat_index([1, 0], [4, 3]), 1)
        self.assertEqual(flat_index([0, 1], [4, 3]), 4)

    def test_empty_indices_map_to_zero(self):
        self.assertEqual(flat_index([], []), 0)

    def test_rank_mismatch_raises(self):
        with self.assertRaises(ValueError):
            flat_index([0, 0], [3, 3, 3])


class TestDimIndices(unittest.TestCase):
    def test_known_coordinates(self):
        self.assertEqual(dim_indices(13, [3, 3, 3]), [1, 1, 1])
        self.assertEqual(dim_indices(3, [4, 3]), [3, 0])
        self.assertEqual(dim_indices(117, [5, 5, 5]), [2, 3, 4])

    def test_round_trip_over_every_offset(self):
        for shape in ([7], [4, 3], [2, 3, 4], [3, 1, 2, 2]):
            with self.subTest(shape=shape):
                for i in range(total_length(shape)):
                    self.assertEqual(flat_index(dim_indices(i, shape), shape), i)

    def test_round_trip_over_every_coordinate(self):
        shape = [2, 3, 4]
        for coords in itertools.product(*(range(s) for s in shape)):
            self.assertEqual(dim_indices(flat_index(coords, shape), shape), list(coords))


class TestTotalLength(unittest.TestCase):
    def test_product(self):
        self.assertEqual(total_length([4, 3]), 12)
        self.assertEqual(total_length([3, 3, 3]), 27)
        self.assertEqual(total_length([5]), 5)

    def test_empty_shape_raises(self):
        with self.assertRaises(ValueError):
            total_length([])


class TestAxisHelpers(unittest.TestCase):
    def test_remove_axis(self):
        self.assertEqual(remove_axis([2, 3, 4], 1), [2, 4])
        self.assertEqual(remove_axis([5], 0), [])

    def test_insert_axis(self):
        self.assertEqual(insert_axis([2, 4], 1, 3), [2, 3, 4])
        self.assertEqual(insert_axis([2, 4], 2, 9), [2, 4, 9])
        self.assertEqual(insert_axis([], 0, 7), [7])

    def test_out_of_range_axis_raises(self):
        with self.assertRaises(ValueError):
            remove_axis([2, 3], 2)
        with self.assertRaises(ValueError):
            insert_axis([2, 3], 3, 0)
        with self.assertRaises(ValueError):
            remove_axis([2, 3], -1)

    def test_reduced_shape(self):
        self.assertEqual(reduced_shape([4, 3], 0), (3,))
        self.assertEqual(reduced_shape([4, 3], 1), (4,))
        self.assertEqual(reduced_shape([4, 3], 1, keep_dims=True), (4, 1))

    def test_reduced_shape_rank_one(self):
        self.assertEqual(reduced_shape([5], 0), (1,))
        self.assertEqual(reduced_shape([5], 0, keep_dims=True), (1,))

    def test_reduced_shape_rejects_bad_axis(self):
        with self.assertRaises(ValueError):
            reduced_shape([4, 3], 2)

    def test_numpy_integer_axis(self):
        self.assertEqual(remove_axis([2, 3, 4], np.int64(1)), [2, 4])
        self.assertEqual(insert_axis([2, 4], np.int32(1), 3), [2, 3, 4])
        self.assertEqual(reduced_shape([4, 3], np.int64(0)), (3,))
        with self.assertRaises(ValueError):
            reduced_shape([4, 3], np.int64(2))

    def test_non_integer_axis_is_type_error(self):
        with self.assertRaises(TypeError):
            reduced_shape([4, 3], 1.0)
        with self.assertRaises(TypeError):
            remove_axis([4, 3], "0")


if __name__ == "__main__":
    unittest.main()
