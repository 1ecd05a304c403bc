r"""约化矩阵元与 Wigner-Eckart 定理

约定（Varshalovich 式 (13.1.2)，与 Edmonds 一致）：

.. math::

    \matrixel{n'j'm'}{\tensor{T}^{(k)}_q}{njm} =
    (-)^{j'-m'}
    \begin{pmatrix} j' & k & j \\ -m' & q & m \end{pmatrix}
    \redmatrixel{n'j'}{\tensor{T}^{(k)}}{nj}

球张量的约化矩阵元（式 (13.2.107)）：

.. math::

    \redmatrixel{\ell'}{\tensor{C}^{(k)}}{\ell}
    = \angroot{\ell} C_{\ell 0 k 0}^{\ell' 0}
    = (-)^{\ell-k}\angroot{\ell\ell'}
    \begin{pmatrix} \ell & k & \ell' \\ 0 & 0 & 0 \end{pmatrix}

耦合基 :math:`|\ell s j\rangle` 下只作用于 :math:`\ell` 的张量通过去耦公式
（式 (13.1.40)）化为 :math:`\ell` 空间的约化矩阵元，见 :func:`uncouple_first`。

态的表示
========

``rme`` / ``wigner_eckart`` 接受的"态"可以是：

- 数（int / Fraction）：单一角动量 :math:`j`（球张量要求为整数 :math:`\ell`）；
- :class:`CoupledState`：耦合态 :math:`|\ell s j\rangle`；
- :class:`~angalg.orbitals.Orbital`、:class:`~angalg.orbitals.RelativisticOrbital`；
- :class:`~angalg.orbitals.SpinOrbital`（非相对论自旋轨道额外乘 :math:`\delta_{m_s m_s'}`）。
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from numbers import Number

import sympy

from .common import as_half_integer, is_triangle, powneg1, pretty_half, triangle_range
from .coupling import CouplingKernel
from .errors import DomainError
from .linear_combination import LinearCombination
from .orbitals import SPIN_HALF, Orbital, RelativisticOrbital, SpinOrbital
from .tensors import ComponentProduct, SphericalTensor, Tensor, TensorComponent, TensorProduct, TensorScalarProduct

__all__ = [
    "CoupledState",
    "rme",
    "uncouple_first",
    "uncouple_second",
    "wigner_eckart",
    "ranks",
]


@dataclass(frozen=True)
class CoupledState:
    r"""耦合态 :math:`|\ell s j\rangle`（张量只作用于第一个子系统 :math:`\ell`）。"""

    ell: Fraction
    s: Fraction
    j: Fraction

    def __post_init__(self):
        for name in ("ell", "s", "j"):
            value = as_half_integer(getattr(self, name))
            if value < 0:
                raise DomainError(f"CoupledState.{name} 必须非负: {value}")
            object.__setattr__(self, name, value)
        if not is_triangle(self.ell, self.s, self.j):
            raise DomainError(f"耦合态不满足三角条件: ell={self.ell}, s={self.s}, j={self.j}")

    @classmethod
    def from_orbital(cls, orb: RelativisticOrbital) -> "CoupledState":
        return cls(orb.ell, SPIN_HALF, orb.j)


def _kernel(kernel):
    return kernel if kernel is not None else CouplingKernel()


def _as_state(x):
    """统一态表示：返回 (数 | CoupledState, 自旋投影 | None)。"""
    if isinstance(x, SpinOrbital):
        if x.relativistic:
            return CoupledState.from_orbital(x.orb), None
        return x.orb.ell, x.m[1]
    if isinstance(x, RelativisticOrbital):
        return CoupledState.from_orbital(x), None
    if isinstance(x, Orbital):
        return x.ell, None
    if isinstance(x, CoupledState):
        return x, None
    if isinstance(x, (Number, sympy.Basic, str)) and not isinstance(x, bool):
        return pretty_half(as_half_integer(x)), None
    raise TypeError(f"无法识别的态: {x!r}")


def _total_j(state) -> Fraction:
    return state.j if isinstance(state, CoupledState) else as_half_integer(state)


# ---------------------------------------------------------------------------
# 去耦公式
# ---------------------------------------------------------------------------


def uncouple_first(j1p, j2, Jp, j1, J, k, reduced, kernel: CouplingKernel | None = None):
    r"""作用于耦合态 :math:`|j_1 j_2 J\rangle` 第一个子系统的张量的约化矩阵元。

    .. math::

        \redmatrixel{j_1' j_2 J'}{\tensor{T}^{(k)}}{j_1 j_2 J} =
        (-)^{j_1'+j_2+J+k}\angroot{JJ'}
        \begin{Bmatrix} j_1' & J' & j_2 \\ J & j_1 & k \end{Bmatrix}
        \redmatrixel{j_1'}{\tensor{T}^{(k)}}{j_1}

    Parameters
    ----------
    reduced
        子系统约化矩阵元 :math:`\redmatrixel{j_1'}{T}{j_1}`（数）。
    """
    kernel = _kernel(kernel)
    if reduced == 0:
        return kernel.zero
    six_j = kernel.wigner_6j(j1p, Jp, j2, J, j1, k)
    if six_j == 0:
        return kernel.zero
    return _powneg1(j1p, j2, J, k) * kernel.angroot(J, Jp) * six_j * reduced


def uncouple_second(j1, j2p, Jp, j2, J, k, reduced, kernel: CouplingKernel | None = None):
    r"""作用于耦合态 :math:`|j_1 j_2 J\rangle` 第二个子系统的张量的约化矩阵元。

    .. math::

        \redmatrixel{j_1 j_2' J'}{\tensor{U}^{(k)}}{j_1 j_2 J} =
        (-)^{j_1+j_2+J'+k}\angroot{JJ'}
        \begin{Bmatrix} j_2' & J' & j_1 \\ J & j_2 & k \end{Bmatrix}
        \redmatrixel{j_2'}{\tensor{U}^{(k)}}{j_2}
    """
    kernel = _kernel(kernel)
    if reduced == 0:
        return kernel.zero
    six_j = kernel.wigner_6j(j2p, Jp, j1, J, j2, k)
    if six_j == 0:
        return kernel.zero
    return _powneg1(j1, j2, Jp, k) * kernel.angroot(J, Jp) * six_j * reduced


def _powneg1(*xs) -> int:
    return powneg1(sum(as_half_integer(x) for x in xs))


# ---------------------------------------------------------------------------
# 约化矩阵元
# ---------------------------------------------------------------------------


def _rme_single(jp, X, j, kernel: CouplingKernel):
    """单一角动量空间中的约化矩阵元 :math:`\\redmatrixel{j'}{X}{j}`。"""
    if isinstance(X, SphericalTensor):
        ellp, ell = as_half_integer(jp), as_half_integer(j)
        if ellp.denominator != 1 or ell.denominator != 1:
            raise DomainError(f"球张量只作用于整数轨道角动量: ell'={jp}, ell={j}")
        if not is_triangle(ell, X.k, ellp):
            return kernel.zero
        return kernel.angroot(ell) * kernel.clebsch_gordan(ell, 0, X.k, 0, ellp, 0)

    if isinstance(X, TensorProduct):
        return _rme_product(jp, X, j, kernel)

    if isinstance(X, TensorScalarProduct):
        k = X.k
        return _powneg1(k) * kernel.angroot(k) * _rme_product(jp, TensorProduct(X.T, X.U, 0), j, kernel)

    if isinstance(X, LinearCombination):
        return _rme_linear(lambda T: _rme_single(jp, T, j, kernel), X, kernel)

    raise TypeError(f"不支持的张量类型: {X!r}")


def _rme_product(jp, X: TensorProduct, j, kernel: CouplingKernel):
    r"""同一坐标上张量积的约化矩阵元（Edmonds 式 (7.1.1)）：

    .. math::

        \redmatrixel{j'}{[T^{(k_1)}U^{(k_2)}]^{(K)}}{j} =
        (-)^{K+j+j'}\angroot{K}\sum_{j''}
        \begin{Bmatrix} k_1 & k_2 & K \\ j & j' & j'' \end{Bmatrix}
        \redmatrixel{j'}{T}{j''}\redmatrixel{j''}{U}{j}
    """
    k1, k2, K = X.T.rank, X.U.rank, X.K
    if not is_triangle(j, K, jp):
        return kernel.zero
    inner = set(triangle_range(jp, k1)) & set(triangle_range(j, k2))
    total = kernel.zero
    for jpp in sorted(inner):
        six_j = kernel.wigner_6j(k1, k2, K, j, jp, jpp)
        if six_j == 0:
            continue
        left = _rme_single(jp, X.T, jpp, kernel)
        if left == 0:
            continue
        total += six_j * left * _rme_single(jpp, X.U, j, kernel)
    if total == 0:
        return kernel.zero
    return _powneg1(K, j, jp) * kernel.angroot(K) * total


def _rme_linear(fn, X: LinearCombination, kernel: CouplingKernel):
    total = kernel.zero
    for T, c in X.items():
        if not isinstance(T, Tensor):
            raise TypeError(f"约化矩阵元只对张量的线性组合有定义，实际原子: {T!r}")
        total += c * fn(T)
    return total


def _rme_states(bra, X, ket, kernel: CouplingKernel):
    if isinstance(bra, CoupledState) != isinstance(ket, CoupledState):
        raise TypeError(f"左右态表示不一致: {bra!r}, {ket!r}")
    if not isinstance(bra, CoupledState):
        return _rme_single(bra, X, ket, kernel)
    if bra.s != ket.s:
        return kernel.zero
    if isinstance(X, LinearCombination):
        return _rme_linear(lambda T: _rme_states(bra, T, ket, kernel), X, kernel)
    if not isinstance(X, Tensor):
        raise TypeError(f"不支持的张量类型: {X!r}")
    reduced = _rme_single(bra.ell, X, ket.ell, kernel)
    return uncouple_first(bra.ell, ket.s, bra.j, ket.ell, ket.j, X.rank, reduced, kernel)


def rme(bra, X, ket, kernel: CouplingKernel | None = None):
    r"""约化矩阵元 :math:`\redmatrixel{a}{\tensor{X}^{(k)}}{b}`。

    Parameters
    ----------
    bra, ket
        态：角动量数、:class:`CoupledState`、轨道或自旋轨道。
    X : Tensor | LinearCombination
        球张量、张量积、标量积或其线性组合。
    kernel : CouplingKernel, optional
        系数内核（决定浮点/精确与缓存）。

    Returns
    -------
    float | sympy.Expr
        违反三角条件、宇称或自旋选择规则时为 0。

    Examples
    --------
    >>> rme(1, SphericalTensor(1), 0)
    1.0
    >>> rme(0, SphericalTensor(1), 1)
    -1.0
    """
    kernel = _kernel(kernel)
    (bra_state, bra_ms), (ket_state, ket_ms) = _as_state(bra), _as_state(ket)
    if bra_ms is not None and ket_ms is not None and bra_ms != ket_ms:
        return kernel.zero
    return _rme_states(bra_state, X, ket_state, kernel)


# ---------------------------------------------------------------------------
# Wigner-Eckart
# ---------------------------------------------------------------------------


def _intermediate_states(state, k):
    """与 ``state`` 经秩 k 张量相连的全部中间态。"""
    if isinstance(state, CoupledState):
        out = []
        for ell in triangle_range(state.ell, k):
            for j in triangle_range(ell, state.s):
                out.append(CoupledState(ell, state.s, j))
        return out
    return triangle_range(state, k)


def _we_states(bra, mp, X, ket, m, kernel: CouplingKernel):
    if isinstance(X, LinearCombination):
        total = kernel.zero
        for atom, c in X.items():
            total += c * _we_states(bra, mp, atom, ket, m, kernel)
        return total

    if isinstance(X, ComponentProduct):
        first, rest = X.factors[0], X.factors[1:]
        if not rest:
            return _we_states(bra, mp, first, ket, m, kernel)
        mpp = as_half_integer(mp) - first.q
        total = kernel.zero
        for mid in _intermediate_states(bra, first.rank):
            if abs(mpp) > _total_j(mid):
                continue
            left = _we_states(bra, mp, first, mid, mpp, kernel)
            if left == 0:
                continue
            total += left * _we_states(mid, mpp, ComponentProduct(rest), ket, m, kernel)
        return total

    if isinstance(X, TensorComponent):
        jp, j = _total_j(bra), _total_j(ket)
        k, q = X.rank, X.q
        if as_half_integer(m) + q != as_half_integer(mp) or not is_triangle(j, k, jp):
            return kernel.zero
        three_j = kernel.wigner_3j(jp, k, j, -as_half_integer(mp), q, m)
        if three_j == 0:
            return kernel.zero
        reduced = _rme_states(bra, X.tensor, ket, kernel)
        return _powneg1(jp - as_half_integer(mp)) * three_j * reduced

    raise TypeError(f"wigner_eckart 需要张量分量、分量乘积或其线性组合，实际: {X!r}")


def wigner_eckart(*args, kernel: CouplingKernel | None = None):
    r"""由 Wigner-Eckart 定理计算矩阵元。

    两种调用方式：

    - ``wigner_eckart(j′, m′, X, j, m)``：:math:`\matrixel{j'm'}{X}{jm}`，
      其中 j′、j 可以是角动量数或 :class:`CoupledState`；
    - ``wigner_eckart(o′, X, o)``：自旋轨道之间的（自旋-角向部分）矩阵元。

    ``X`` 可以是 :class:`~angalg.tensors.TensorComponent`、
    :class:`~angalg.tensors.ComponentProduct`（插入中间态完备集求和）
    或它们的线性组合。:math:`m+q \neq m'` 或违反三角条件时返回 0。

    Examples
    --------
    >>> from angalg.dipoles import rhat
    >>> z = rhat[2]
    >>> wigner_eckart(0, 0, z, 1, 0)
    0.5773502691896257
    """
    kernel = _kernel(kernel)
    if len(args) == 5:
        jp, mp, X, j, m = args
        bra = jp if isinstance(jp, CoupledState) else _as_state(jp)[0]
        ket = j if isinstance(j, CoupledState) else _as_state(j)[0]
        return _we_states(bra, as_half_integer(mp), X, ket, as_half_integer(m), kernel)
    if len(args) == 3:
        op, X, o = args
        if not (isinstance(op, SpinOrbital) and isinstance(o, SpinOrbital)):
            raise TypeError(f"三参数形式需要两个 SpinOrbital: {op!r}, {o!r}")
        if op.relativistic != o.relativistic:
            raise TypeError(f"相对论与非相对论自旋轨道不能混用: {op!r}, {o!r}")
        if op.relativistic:
            return _we_states(
                CoupledState.from_orbital(op.orb), op.m[0], X, CoupledState.from_orbital(o.orb), o.m[0], kernel
            )
        if op.m[1] != o.m[1]:
            return kernel.zero
        return _we_states(op.orb.ell, op.m[0], X, o.orb.ell, o.m[0], kernel)
    raise TypeError(f"wigner_eckart 需要 3 或 5 个位置参数，实际 {len(args)} 个")


# ---------------------------------------------------------------------------
# 秩的选择规则
# ---------------------------------------------------------------------------


def _ell_and_j(x):
    if isinstance(x, SpinOrbital):
        return x.orb.ell, x.orb.j
    if isinstance(x, (Orbital, RelativisticOrbital)):
        return x.ell, x.j
    if isinstance(x, CoupledState):
        return x.ell, x.j
    v = as_half_integer(x)
    return v, v


def ranks(a, kind, b) -> list:
    r"""返回 a、b 之间秩为 k 的 ``kind`` 类张量可能非零的全部 k。

    对 :class:`~angalg.tensors.SphericalTensor`，在 ``triangle_range(j_a, j_b)``
    基础上再要求宇称守恒 :math:`\ell_a + \ell_b + k` 为偶数；
    其他张量类型只做三角条件筛选。

    Examples
    --------
    >>> ranks(1, SphericalTensor, 1)
    [0, 2]
    """
    if not (isinstance(kind, type) and issubclass(kind, Tensor)):
        raise TypeError(f"ranks 的第二个参数必须为张量类型，实际: {kind!r}")
    ell_a, j_a = _ell_and_j(a)
    ell_b, j_b = _ell_and_j(b)
    ks = triangle_range(j_a, j_b)
    if kind is SphericalTensor:
        ks = [k for k in ks if (ell_a + ell_b + k) % 2 == 0]
    return ks
