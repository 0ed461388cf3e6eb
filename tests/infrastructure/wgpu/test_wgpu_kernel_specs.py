import unittest

from trigrad.domain import OpKind
from trigrad.infrastructure.wgpu._kernel import MAX_WORKGROUPS_PER_DIM, dispatch_grid
from trigrad.infrastructure.wgpu._shaders import (
    WORKGROUP_SIZE,
    Binding,
    BindingKind,
    KernelSpec,
    binary_backward_spec,
    binary_forward_spec,
    sum_arena_words,
    sum_backward_spec,
    sum_forward_spec,
    unary_backward_spec,
    unary_forward_spec,
)

BINARY = (OpKind.ADD, OpKind.SUB, OpKind.MUL, OpKind.DIV, OpKind.POW)
UNARY = (OpKind.NEG, OpKind.EXP, OpKind.TANH)


class TestKernelSpec(unittest.TestCase):
    def test_binding_order_enforced(self):
        with self.assertRaises(ValueError):
            KernelSpec(
                "bad",
                "",
                (Binding("out", BindingKind.OUTPUT), Binding("a", BindingKind.INPUT)),
            )

    def test_counts(self):
        spec = sum_forward_spec()
        self.assertEqual(
            (spec.arena_count, spec.input_count, spec.output_count), (1, 3, 1)
        )

    def test_sum_arena_words(self):
        self.assertEqual(sum_arena_words(1), 2)
        self.assertEqual(sum_arena_words(2), 6)
        self.assertEqual(sum_arena_words(3), 10)
        with self.assertRaises(ValueError):
            sum_arena_words(0)


class TestGeneratedKernels(unittest.TestCase):
    def test_names_are_unique(self):
        specs = (
            [binary_forward_spec(op) for op in BINARY]
            + [binary_backward_spec(op) for op in BINARY]
            + [unary_forward_spec(op) for op in UNARY]
            + [unary_backward_spec(op) for op in UNARY]
            + [sum_forward_spec(), sum_backward_spec()]
        )
        names = [s.name for s in specs]
        self.assertEqual(len(names), len(set(names)))
        self.assertIn("mul.backward", names)
        self.assertIn("sum.forward", names)

    def test_specs_are_cached(self):
        self.assertIs(binary_forward_spec(OpKind.ADD), binary_forward_spec(OpKind.ADD))
        self.assertIs(sum_backward_spec(), sum_backward_spec())

    def test_every_binding_is_declared_in_order(self):
        for spec in (binary_backward_spec(OpKind.POW), sum_forward_spec()):
            for i, b in enumerate(spec.bindings):
                with self.subTest(kernel=spec.name, binding=b.name):
                    self.assertIn(f"@binding({i})", spec.code)
                    self.assertIn(f" {b.name}:", spec.code)

    def test_entry_point_and_workgroup(self):
        code = unary_forward_spec(OpKind.TANH).code
        self.assertIn("fn main(", code)
        self.assertIn(f"@workgroup_size({WORKGROUP_SIZE})", code)
        self.assertIn("tanh(x)", code)

    def test_binary_backward_handles_aliasing(self):
        spec = binary_backward_spec(OpKind.MUL)
        self.assertIn("params.is_same", spec.code)
        self.assertEqual(
            [b.name for b in spec.bindings if b.kind is BindingKind.OUTPUT],
            ["new_grad_a", "new_grad_b"],
        )

    def test_uniform_params_binding(self):
        spec = binary_forward_spec(OpKind.DIV)
        uniforms = [b for b in spec.bindings if b.is_uniform]
        self.assertEqual(len(uniforms), 1)
        self.assertIn("var<uniform> params: Params;", spec.code)

    def test_shape_is_u32(self):
        self.assertIn(
            "var<storage, read> shape: array<u32>;", sum_backward_spec().code
        )

    def test_pow_kernels_use_real_power_helper(self):
        for spec in (binary_forward_spec(OpKind.POW), binary_backward_spec(OpKind.POW)):
            with self.subTest(kernel=spec.name):
                self.assertIn("fn spow(x: f32, y: f32) -> f32", spec.code)
                self.assertNotIn("= pow(x, y)", spec.code)
        self.assertIn("spow(x, y - 1.0)", binary_backward_spec(OpKind.POW).code)
        self.assertNotIn("spow", binary_forward_spec(OpKind.MUL).code)

    def test_invocation_index_spans_two_dimensions(self):
        for spec in (binary_forward_spec(OpKind.ADD), sum_backward_spec()):
            with self.subTest(kernel=spec.name):
                self.assertIn("(num_workgroups) nwg: vec3<u32>", spec.code)
                self.assertIn(
                    f"let i = gid.x + gid.y * nwg.x * {WORKGROUP_SIZE};", spec.code
                )

    def test_unknown_op_rejected(self):
        with self.assertRaises(KeyError):
            binary_forward_spec(OpKind.EXP)



class TestDispatchGrid(unittest.TestCase):
    def test_small_counts_use_one_row(self):
        self.assertEqual(dispatch_grid(0), (1, 1))
        self.assertEqual(dispatch_grid(1), (1, 1))
        self.assertEqual(dispatch_grid(WORKGROUP_SIZE + 1), (2, 1))

    def test_last_single_row_count(self):
        n = MAX_WORKGROUPS_PER_DIM * WORKGROUP_SIZE
        self.assertEqual(dispatch_grid(n), (MAX_WORKGROUPS_PER_DIM, 1))

    def test_folds_into_second_dimension(self):
        n = MAX_WORKGROUPS_PER_DIM * WORKGROUP_SIZE + 1
        x, y = dispatch_grid(n)
        self.assertEqual((x, y), (MAX_WORKGROUPS_PER_DIM, 2))
        self.assertGreaterEqual(x * y * WORKGROUP_SIZE, n)

    def test_grid_limit(self):
        n = MAX_WORKGROUPS_PER_DIM * MAX_WORKGROUPS_PER_DIM * WORKGROUP_SIZE
        self.assertEqual(
            dispatch_grid(n), (MAX_WORKGROUPS_PER_DIM, MAX_WORKGROUPS_PER_DIM)
        )
        with self.assertRaises(ValueError):
            dispatch_grid(n + 1)

if __name__ == "__main__":
    unittest.main()
