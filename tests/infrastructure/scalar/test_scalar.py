import math
import unittest

from trigrad import Scalar, as_scalars


class TestScalarForwardBackward(unittest.TestCase):
    def test_add(self):
        s1, s2 = Scalar(2), Scalar(3)
        result = s1.add(s2)
        self.assertEqual(result.value, 5)
        result.backward()
        self.assertEqual(result.gradient, 1)
        self.assertEqual(s1.gradient, 1)
        self.assertEqual(s2.gradient, 1)

    def test_sub(self):
        s1, s2 = Scalar(2), Scalar(3)
        result = s1.sub(s2)
        self.assertEqual(result.value, -1)
        result.backward()
        self.assertEqual(s1.gradient, 1)
        self.assertEqual(s2.gradient, -1)

    def test_mul(self):
        s1, s2 = Scalar(2), Scalar(3)
        result = s1.mul(s2)
        self.assertEqual(result.value, 6)
        result.backward()
        self.assertEqual(s1.gradient, 3)
        self.assertEqual(s2.gradient, 2)

    def test_div(self):
        s1, s2 = Scalar(2), Scalar(3)
        result = s1.div(s2)
        self.assertAlmostEqual(result.value, 2 / 3)
        result.backward()
        self.assertAlmostEqual(s1.gradient, 1 / 3)
        self.assertAlmostEqual(s2.gradient, -2 / 9)

    def test_pow(self):
        s1, s2 = Scalar(2), Scalar(3)
        result = s1.pow(s2)
        self.assertEqual(result.value, 8)
        result.backward()
        self.assertAlmostEqual(s1.gradient, 12)
        self.assertAlmostEqual(s2.gradient, math.log(2) * 8)

    def test_neg(self):
        value = Scalar(2)
        result = value.neg()
        self.assertEqual(result.value, -2)
        result.backward()
        self.assertEqual(value.gradient, -1)

    def test_exp(self):
        value = Scalar(2)
        result = value.exp()
        self.assertAlmostEqual(result.value, math.exp(2))
        result.backward()
        self.assertAlmostEqual(value.gradient, math.exp(2))

    def test_tanh(self):
        value = Scalar(2)
        result = value.tanh()
        self.assertAlmostEqual(result.value, math.tanh(2))
        result.backward()
        self.assertAlmostEqual(value.gradient, 1 - math.tanh(2) ** 2)


class TestScalarAliasing(unittest.TestCase):
    """Both operand positions contribute when a node is combined with itself."""

    def _grad_of_self_op(self, op: str, value: float) -> float:
        x = Scalar(value)
        getattr(x, op)(x).backward()
        return x.gradient

    def test_add_self(self):
        self.assertEqual(self._grad_of_self_op("add", 2), 2)

    def test_sub_self(self):
        self.assertEqual(self._grad_of_self_op("sub", 2), 0)

    def test_mul_self(self):
        self.assertEqual(self._grad_of_self_op("mul", 2), 4)

    def test_div_self(self):
        self.assertAlmostEqual(self._grad_of_self_op("div", 2), 0)

    def test_pow_self(self):
        self.assertAlmostEqual(self._grad_of_self_op("pow", 3), 56.662531794038955, places=9)


class TestScalarIEEE(unittest.TestCase):
    def test_division_by_zero_is_infinite(self):
        result = Scalar(1).div(Scalar(0))
        self.assertTrue(math.isinf(result.value))

    def test_pow_gradient_of_negative_base_is_nan(self):
        a, b = Scalar(-2), Scalar(2)
        result = a.pow(b)
        self.assertEqual(result.value, 4)
        result.backward()
        self.assertEqual(a.gradient, -4)
        self.assertTrue(math.isnan(b.gradient))


class TestScalarSugar(unittest.TestCase):
    def test_operators_and_number_promotion(self):
        x = Scalar(3)
        self.assertEqual((x + 1).value, 4)
        self.assertEqual((1 + x).value, 4)
        self.assertEqual((x - 1).value, 2)
        self.assertEqual((10 - x).value, 7)
        self.assertEqual((x * 2).value, 6)
        self.assertEqual((2 * x).value, 6)
        self.assertEqual((x / 2).value, 1.5)
        self.assertEqual((6 / x).value, 2)
        self.assertEqual((x ** 2).value, 9)
        self.assertEqual((2 ** x).value, 8)
        self.assertEqual((-x).value, -3)

    def test_promoted_number_is_leaf(self):
        x = Scalar(3)
        y = x * 2
        self.assertEqual(len(y.parents), 2)
        self.assertEqual(y.parents[1].parents, ())
        self.assertEqual(y.op, "mul")

    def test_backward_through_operators(self):
        x = Scalar(3)
        y = x * x + 2 * x
        y.backward()
        self.assertEqual(x.gradient, 8)

    def test_zero_grad(self):
        x = Scalar(3)
        (x * x).backward()
        self.assertEqual(x.gradient, 6)
        x.zero_grad()
        self.assertEqual(x.gradient, 0)

    def test_as_scalars(self):
        xs = as_scalars([1, 2, 3], label="x")
        self.assertEqual([s.value for s in xs], [1.0, 2.0, 3.0])
        self.assertTrue(all(s.label == "x" for s in xs))


class TestScalarString(unittest.TestCase):
    def test_plain(self):
        self.assertEqual(str(Scalar(2)), "<2>")

    def test_with_label(self):
        self.assertEqual(str(Scalar(2, label="value1")), "<value1:2>")

    def test_non_integral(self):
        self.assertEqual(str(Scalar(0.5)), "<0.5>")


class TestScalarPerceptron(unittest.TestCase):
    def test_perceptron(self):
        x1 = Scalar(2, label="x1")
        x2 = Scalar(0, label="x2")
        w1 = Scalar(-3, label="w1")
        w2 = Scalar(1, label="w2")
        b = Scalar(6.881373587019432, label="b")

        x1w1 = x1.mul(w1)
        x2w2 = x2.mul(w2)
        i1 = x1w1.add(x2w2)
        t1 = i1.add(b)
        o1 = t1.tanh()

        self.assertAlmostEqual(o1.value, 0.70710, delta=1e-5)
        self.assertAlmostEqual(t1.value, 0.88137, delta=1e-5)
        self.assertAlmostEqual(i1.value, -6, delta=1e-5)

        o1.backward()
        self.assertAlmostEqual(o1.gradient, 1)
        for node, expected in (
            (t1, 0.5),
            (b, 0.5),
            (i1, 0.5),
            (x1w1, 0.5),
            (x2w2, 0.5),
            (x1, -1.5),
            (x2, 0.5),
            (w1, 1.0),
            (w2, 0.0),
        ):
            with self.subTest(node=node.label or node.op):
                self.assertAlmostEqual(node.gradient, expected, delta=1e-5)


if __name__ == "__main__":
    unittest.main()
