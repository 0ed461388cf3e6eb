"""
WGSL kernels for the GPU backend.

Each operation has a forward and a backward kernel described by a
`KernelSpec`: the WGSL source plus an explicit binding list. Bindings always
appear in the same order, and the order is validated:

1. arena buffers (scratch memory the kernel cannot allocate itself)
2. inputs (read-only storage arrays and the uniform ``Params`` block)
3. outputs (storage arrays written by the kernel)

Elementwise backward kernels never write the incoming gradient buffers;
they emit *updated* gradient buffers (incoming gradient plus contribution).
For binary ops the ``is_same`` flag marks aliased operands, in which case both
outputs carry the sum of both partial derivatives.

The sum kernels walk coordinates with the same arithmetic as
``trigrad.infrastructure.utils.flat_index`` / ``dim_indices``. Every
invocation owns an arena slice of ``rank * 4 - 2`` u32 words holding a copy
of the shape, the reduced shape, and two coordinate buffers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
from string import Template

from ...domain._ops import OpKind

WORKGROUP_SIZE = 64


class BindingKind(IntEnum):
    """Binding categories, valued by their required position in the layout."""

    ARENA = 0
    INPUT = 1
    OUTPUT = 2


@dataclass(frozen=True)
class Binding:
    name: str
    kind: BindingKind
    is_uniform: bool = False


@dataclass(frozen=True)
class KernelSpec:
    """
    A compilable compute kernel.

    Attributes
    ----------
    name : str
        Cache key, unique per kernel (e.g. ``"mul.backward"``).
    code : str
        WGSL source with a ``main`` entry point.
    bindings : tuple[Binding, ...]
        Bindings in ``@binding`` order.
    """

    name: str
    code: str
    bindings: tuple

    def __post_init__(self) -> None:
        kinds = [int(b.kind) for b in self.bindings]
        if kinds != sorted(kinds):
            raise ValueError(
                f"{self.name}: bindings must be ordered arenas, inputs, outputs"
            )

    @property
    def arena_count(self) -> int:
        return sum(1 for b in self.bindings if b.kind is BindingKind.ARENA)

    @property
    def input_count(self) -> int:
        return sum(1 for b in self.bindings if b.kind is BindingKind.INPUT)

    @property
    def output_count(self) -> int:
        return sum(1 for b in self.bindings if b.kind is BindingKind.OUTPUT)


def sum_arena_words(rank: int) -> int:
    """u32 words of scratch one sum invocation needs for a rank-`rank` input."""
    if rank < 1:
        raise ValueError("rank must be positive")
    return rank * 4 - 2


def _arena(name: str) -> Binding:
    return Binding(name, BindingKind.ARENA)


def _input(name: str) -> Binding:
    return Binding(name, BindingKind.INPUT)


def _params() -> Binding:
    return Binding("params", BindingKind.INPUT, is_uniform=True)


def _output(name: str) -> Binding:
    return Binding(name, BindingKind.OUTPUT)


def _declare(bindings: tuple) -> str:
    lines = []
    for i, b in enumerate(bindings):
        if b.is_uniform:
            decl = f"var<uniform> {b.name}: Params;"
        elif b.kind is BindingKind.ARENA:
            decl = f"var<storage, read_write> {b.name}: array<u32>;"
        elif b.kind is BindingKind.OUTPUT:
            decl = f"var<storage, read_write> {b.name}: array<f32>;"
        elif b.name == "shape":
            decl = f"var<storage, read> {b.name}: array<u32>;"
        else:
            decl = f"var<storage, read> {b.name}: array<f32>;"
        lines.append(f"@group(0) @binding({i}) {decl}")
    return "\n".join(lines)


_ELEMENTWISE_PARAMS = """
struct Params {
    n: u32,
    is_same: u32,
    pad0: u32,
    pad1: u32,
};
"""

_SUM_PARAMS = """
struct Params {
    rank: u32,
    axis: u32,
    out_len: u32,
    in_len: u32,
};
"""

# Real power with the C99 powf special cases. WGSL pow() is undefined for a
# negative base and for a zero base with a non-positive exponent. NaN and inf
# are built from a runtime value so they are never const-evaluated.
_SPOW = """
fn spow(x: f32, y: f32) -> f32 {
    if (y == 0.0) {
        return 1.0;
    }
    let x_bits = bitcast<u32>(x);
    let is_int = y == trunc(y);
    if (x < 0.0 && !is_int) {
        return bitcast<f32>(0x7fc00000u | (x_bits & 0u));
    }
    var mag: f32;
    if (x == 0.0) {
        if (y > 0.0) {
            mag = 0.0;
        } else {
            mag = bitcast<f32>(0x7f800000u | (x_bits & 0u));
        }
    } else {
        mag = pow(abs(x), y);
    }
    let odd = is_int && abs(y) % 2.0 == 1.0;
    if ((x_bits & 0x80000000u) != 0u && odd) {
        return -mag;
    }
    return mag;
}
"""

# (forward, d/da, d/db) with x = a[i], y = b[i], g = grad_out[i]
BINARY_EXPRESSIONS = {
    OpKind.ADD: ("x + y", "g", "g"),
    OpKind.SUB: ("x - y", "g", "-g"),
    OpKind.MUL: ("x * y", "y * g", "x * g"),
    OpKind.DIV: ("x / y", "g / y", "-x / (y * y) * g"),
    OpKind.POW: ("spow(x, y)", "y * spow(x, y - 1.0) * g", "log(x) * spow(x, y) * g"),
}

# WGSL functions an expression set depends on
BINARY_HELPERS = {OpKind.POW: _SPOW}

# (forward, d/dx) with x = values[i], g = grad_out[i]
UNARY_EXPRESSIONS = {
    OpKind.NEG: ("-x", "-g"),
    OpKind.EXP: ("exp(x)", "exp(x) * g"),
    OpKind.TANH: ("tanh(x)", "(1.0 - tanh(x) * tanh(x)) * g"),
}

_MAIN_HEADER = Template(
    """
@compute @workgroup_size($wg)
fn main(
    @builtin(global_invocation_id) gid: vec3<u32>,
    @builtin(num_workgroups) nwg: vec3<u32>,
) {
    let i = gid.x + gid.y * nwg.x * $wg;
    if (i >= $limit) {
        return;
    }
"""
)

_BINARY_FORWARD_BODY = Template(
    """
    let x = a[i];
    let y = b[i];
    result[i] = $expr;
}
"""
)

_BINARY_BACKWARD_BODY = Template(
    """
    let x = a[i];
    let y = b[i];
    let g = grad_out[i];
    let da = $da;
    let db = $db;
    if (params.is_same != 0u) {
        let total = grad_a[i] + da + db;
        new_grad_a[i] = total;
        new_grad_b[i] = total;
    } else {
        new_grad_a[i] = grad_a[i] + da;
        new_grad_b[i] = grad_b[i] + db;
    }
}
"""
)

_UNARY_FORWARD_BODY = Template(
    """
    let x = values[i];
    result[i] = $expr;
}
"""
)

_UNARY_BACKWARD_BODY = Template(
    """
    let x = values[i];
    let g = grad_out[i];
    new_grad_x[i] = grad_x[i] + $dx;
}
"""
)

# Arena slice layout: shape[rank] | reduced[rank-1] | out_idx[rank-1] | in_idx[rank]
_SUM_FORWARD_BODY = """
    let rank = params.rank;
    let axis = params.axis;
    let base = i * (rank * 4u - 2u);
    let shape_at = base;
    let reduced_at = shape_at + rank;
    let out_idx_at = reduced_at + rank - 1u;
    let in_idx_at = out_idx_at + rank - 1u;

    for (var d = 0u; d < rank; d++) {
        arena[shape_at + d] = shape[d];
    }
    var r = 0u;
    for (var d = 0u; d < rank; d++) {
        if (d != axis) {
            arena[reduced_at + r] = arena[shape_at + d];
            r++;
        }
    }

    var rem = i;
    for (var d = 0u; d < rank - 1u; d++) {
        let size = arena[reduced_at + d];
        arena[out_idx_at + d] = rem % size;
        rem = rem / size;
    }

    var acc = 0.0;
    for (var k = 0u; k < arena[shape_at + axis]; k++) {
        var src = 0u;
        for (var d = 0u; d < rank; d++) {
            if (d == axis) {
                arena[in_idx_at + d] = k;
            } else {
                arena[in_idx_at + d] = arena[out_idx_at + src];
                src++;
            }
        }
        var offset = 0u;
        for (var d = rank; d > 0u; d--) {
            offset = offset * arena[shape_at + d - 1u] + arena[in_idx_at + d - 1u];
        }
        acc += values[offset];
    }
    result[i] = acc;
}
"""

# Arena slice layout: shape[rank] | reduced[rank-1] | in_idx[rank] | out_idx[rank-1]
_SUM_BACKWARD_BODY = """
    let rank = params.rank;
    let axis = params.axis;
    let base = i * (rank * 4u - 2u);
    let shape_at = base;
    let reduced_at = shape_at + rank;
    let in_idx_at = reduced_at + rank - 1u;
    let out_idx_at = in_idx_at + rank;

    for (var d = 0u; d < rank; d++) {
        arena[shape_at + d] = shape[d];
    }
    var r = 0u;
    for (var d = 0u; d < rank; d++) {
        if (d != axis) {
            arena[reduced_at + r] = arena[shape_at + d];
            r++;
        }
    }

    var rem = i;
    for (var d = 0u; d < rank; d++) {
        let size = arena[shape_at + d];
        arena[in_idx_at + d] = rem % size;
        rem = rem / size;
    }

    var dst = 0u;
    for (var d = 0u; d < rank; d++) {
        if (d != axis) {
            arena[out_idx_at + dst] = arena[in_idx_at + d];
            dst++;
        }
    }

    var offset = 0u;
    for (var d = rank - 1u; d > 0u; d--) {
        offset = offset * arena[reduced_at + d - 1u] + arena[out_idx_at + d - 1u];
    }
    new_grad_x[i] = grad_x[i] + grad_out[offset];
}
"""


def _header(limit: str) -> str:
    return _MAIN_HEADER.substitute(wg=WORKGROUP_SIZE, limit=limit)


@lru_cache(maxsize=None)
def binary_forward_spec(op: OpKind) -> KernelSpec:
    expr, _, _ = BINARY_EXPRESSIONS[op]
    bindings = (_input("a"), _input("b"), _params(), _output("result"))
    code = (
        _ELEMENTWISE_PARAMS
        + BINARY_HELPERS.get(op, "")
        + _declare(bindings)
        + _header("params.n")
        + _BINARY_FORWARD_BODY.substitute(expr=expr)
    )
    return KernelSpec(f"{op.value}.forward", code, bindings)


@lru_cache(maxsize=None)
def binary_backward_spec(op: OpKind) -> KernelSpec:
    _, da, db = BINARY_EXPRESSIONS[op]
    bindings = (
        _input("a"),
        _input("b"),
        _input("grad_a"),
        _input("grad_b"),
        _input("grad_out"),
        _params(),
        _output("new_grad_a"),
        _output("new_grad_b"),
    )
    code = (
        _ELEMENTWISE_PARAMS
        + BINARY_HELPERS.get(op, "")
        + _declare(bindings)
        + _header("params.n")
        + _BINARY_BACKWARD_BODY.substitute(da=da, db=db)
    )
    return KernelSpec(f"{op.value}.backward", code, bindings)


@lru_cache(maxsize=None)
def unary_forward_spec(op: OpKind) -> KernelSpec:
    expr, _ = UNARY_EXPRESSIONS[op]
    bindings = (_input("values"), _params(), _output("result"))
    code = (
        _ELEMENTWISE_PARAMS
        + _declare(bindings)
        + _header("params.n")
        + _UNARY_FORWARD_BODY.substitute(expr=expr)
    )
    return KernelSpec(f"{op.value}.forward", code, bindings)


@lru_cache(maxsize=None)
def unary_backward_spec(op: OpKind) -> KernelSpec:
    _, dx = UNARY_EXPRESSIONS[op]
    bindings = (
        _input("values"),
        _input("grad_x"),
        _input("grad_out"),
        _params(),
        _output("new_grad_x"),
    )
    code = (
        _ELEMENTWISE_PARAMS
        + _declare(bindings)
        + _header("params.n")
        + _UNARY_BACKWARD_BODY.substitute(dx=dx)
    )
    return KernelSpec(f"{op.value}.backward", code, bindings)


@lru_cache(maxsize=1)
def sum_forward_spec() -> KernelSpec:
    bindings = (
        _arena("arena"),
        _params(),
        _input("shape"),
        _input("values"),
        _output("result"),
    )
    code = (
        _SUM_PARAMS
        + _declare(bindings)
        + _header("params.out_len")
        + _SUM_FORWARD_BODY
    )
    return KernelSpec("sum.forward", code, bindings)


@lru_cache(maxsize=1)
def sum_backward_spec() -> KernelSpec:
    bindings = (
        _arena("arena"),
        _params(),
        _input("shape"),
        _input("grad_x"),
        _input("grad_out"),
        _output("new_grad_x"),
    )
    code = (
        _SUM_PARAMS
        + _declare(bindings)
        + _header("params.in_len")
        + _SUM_BACKWARD_BODY
    )
    return KernelSpec("sum.backward", code, bindings)
