"""
Host-side tests for the GPU backend that need no adapter.

`RecordingContext` stands in for a `WgpuDeviceContext`: it receives the
kernel spec and the exact buffers ``ops/wgpu_ext.py`` would upload, and
answers with NumPy results. This covers argument packing, output shapes and
the replace-gradient protocol of the GPU backward steps.
"""

import asyncio
import threading
import unittest
from unittest import mock

import numpy as np

from trigrad import DeviceNotSupportedError, Tensor
from trigrad.infrastructure.wgpu import KernelCache, WgpuBackend
from trigrad.infrastructure.wgpu._shaders import binary_forward_spec
from trigrad.domain import OpKind

_FORWARD = {
    "add": np.add,
    "sub": np.subtract,
    "mul": np.multiply,
    "div": np.divide,
    "pow": np.power,
    "neg": np.negative,
    "exp": np.exp,
    "tanh": np.tanh,
}

_PARTIALS = {
    "add": lambda x, y, g: (g, g),
    "sub": lambda x, y, g: (g, -g),
    "mul": lambda x, y, g: (y * g, x * g),
    "div": lambda x, y, g: (g / y, -x / (y * y) * g),
    "pow": lambda x, y, g: (
        y * np.power(x, y - 1) * g,
        np.log(x) * np.power(x, y) * g,
    ),
    "neg": lambda x, g: -g,
    "exp": lambda x, g: np.exp(x) * g,
    "tanh": lambda x, g: (1 - np.tanh(x) ** 2) * g,
}


class RecordingContext:
    def __init__(self):
        self.calls = []

    async def run(self, spec, *, invocations, inputs, output_lengths, arena_words=()):
        self.calls.append((spec.name, invocations, list(arena_words), inputs))
        await asyncio.sleep(0)
        op, phase = spec.name.split(".")
        inputs = [np.asarray(x) for x in inputs]
        if op == "sum":
            return [self._sum(phase, inputs)]
        if phase == "forward":
            *operands, _params = inputs
            return [_FORWARD[op](*operands).astype(np.float32)]
        if len(inputs) == 6:
            a, b, ga, gb, g, params = inputs
            da, db = _PARTIALS[op](a, b, g)
            if params[1]:
                total = ga + da + db
                return [total.astype(np.float32), total.astype(np.float32)]
            return [(ga + da).astype(np.float32), (gb + db).astype(np.float32)]
        x, gx, g, _params = inputs
        return [(gx + _PARTIALS[op](x, g)).astype(np.float32)]

    @staticmethod
    def _sum(phase, inputs):
        params, shape = inputs[0], [int(s) for s in inputs[1]]
        axis = int(params[1])
        if phase == "forward":
            arr = inputs[2].reshape(shape, order="F")
            return arr.sum(axis=axis).ravel(order="F").astype(np.float32)
        gx, g = inputs[2], inputs[3]
        reduced = [s for i, s in enumerate(shape) if i != axis]
        spread = np.broadcast_to(
            np.expand_dims(g.reshape(reduced, order="F"), axis), shape
        )
        return (gx + spread.ravel(order="F")).astype(np.float32)


def _t(ctx, values, shape=None):
    shape = shape if shape is not None else [len(values)]
    return Tensor(shape, values, device="wgpu:0", gpu_context=ctx)


class TestWgpuOpsWithRecordingContext(unittest.TestCase):
    def setUp(self):
        self.ctx = RecordingContext()

    def test_forward_returns_awaitable(self):
        a = _t(self.ctx, [1, 2, 3])
        pending = a.add(a)
        self.assertTrue(asyncio.iscoroutine(pending))
        out = asyncio.run(pending)
        np.testing.assert_array_equal(out.values, [2, 4, 6])
        self.assertIs(out.gpu_context, self.ctx)

    def test_elementwise_params_block(self):
        a = _t(self.ctx, [1, 2, 3])
        asyncio.run(a.mul(_t(self.ctx, [4, 5, 6])))
        name, invocations, arena, inputs = self.ctx.calls[-1]
        self.assertEqual(name, "mul.forward")
        self.assertEqual(invocations, 3)
        self.assertEqual(arena, [])
        np.testing.assert_array_equal(inputs[-1], [3, 0, 0, 0])
        self.assertEqual(inputs[-1].dtype, np.uint32)

    def test_sum_arguments(self):
        x = _t(self.ctx, np.arange(1, 13), [4, 3])
        out = asyncio.run(x.sum(1))
        np.testing.assert_array_equal(out.values, [15, 18, 21, 24])
        name, invocations, arena, inputs = self.ctx.calls[-1]
        self.assertEqual(name, "sum.forward")
        self.assertEqual(invocations, 4)
        self.assertEqual(arena, [4 * 6])
        np.testing.assert_array_equal(inputs[0], [2, 1, 4, 12])
        np.testing.assert_array_equal(inputs[1], [4, 3])

    def test_backward_perceptron(self):
        x = _t(self.ctx, [2, 0])
        w = _t(self.ctx, [-3, 1])
        b = _t(self.ctx, [6.881373587019432])

        async def run():
            o = await (await (await (await x.mul(w)).sum(0)).add(b)).tanh()
            await o.backward()
            return o

        o = asyncio.run(run())
        np.testing.assert_allclose(o.values, [0.70710], atol=1e-5)
        np.testing.assert_allclose(x.gradient, [-1.5, 0.5], atol=1e-5)
        np.testing.assert_allclose(w.gradient, [1.0, 0.0], atol=1e-5)

    def test_backward_marks_aliased_operands(self):
        t = _t(self.ctx, [1, 2, 3, 4])

        async def run():
            r = await t.mul(t)
            await r.backward()

        asyncio.run(run())
        np.testing.assert_allclose(t.gradient, [2, 4, 6, 8])
        name, _, _, inputs = self.ctx.calls[-1]
        self.assertEqual(name, "mul.backward")
        self.assertEqual(int(inputs[-1][1]), 1)

    def test_backward_replaces_parent_gradients(self):
        a = _t(self.ctx, [1, 2])
        b = _t(self.ctx, [3, 4])
        before = a.gradient

        async def run():
            r = await a.add(b)
            await r.backward()

        asyncio.run(run())
        self.assertIsNot(a.gradient, before)
        np.testing.assert_array_equal(before, [0, 0])
        np.testing.assert_array_equal(a.gradient, [1, 1])


class TestWgpuContextResolution(unittest.TestCase):
    def test_cpu_tensor_has_no_gpu_context(self):
        with self.assertRaises(DeviceNotSupportedError):
            Tensor([1], [1]).gpu_context

    def test_backend_rejects_non_gpu_device(self):
        with self.assertRaises(ValueError):
            WgpuBackend().context("cpu")

    def test_backend_caches_context_per_device(self):
        backend = WgpuBackend()
        with mock.patch(
            "trigrad.infrastructure.wgpu._context._request_gpu_device",
            return_value=mock.MagicMock(),
        ) as request:
            first = backend.context("wgpu:0")
            second = backend.context("wgpu:0")
            other = backend.context("wgpu:1")
        self.assertIs(first, second)
        self.assertIsNot(first, other)
        self.assertEqual(request.call_count, 2)

    def test_request_failure_is_backend_error(self):
        from trigrad import BackendError

        with mock.patch(
            "trigrad.infrastructure.wgpu._context._request_gpu_device",
            side_effect=RuntimeError("no adapter"),
        ):
            with self.assertRaises(BackendError):
                WgpuBackend().context("wgpu:0")


class TestKernelCache(unittest.TestCase):
    def test_compiles_each_kernel_once_under_concurrency(self):
        gpu_device = mock.MagicMock()
        cache = KernelCache(gpu_device, "wgpu:0")
        spec = binary_forward_spec(OpKind.ADD)
        results = []

        def worker():
            results.append(cache.get(spec))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for th in threads:
            th.start()
        for th in threads:
            th.join()

        self.assertEqual(len(cache), 1)
        self.assertIn(spec.name, cache)
        self.assertTrue(all(r is results[0] for r in results))
        self.assertEqual(gpu_device.create_compute_pipeline.call_count, 1)


if __name__ == "__main__":
    unittest.main()
