r"""不可约张量算子代数

张量种类是封闭的：

- :class:`SphericalTensor`：球张量 :math:`\tensor{C}^{(k)}_q = \sqrt{4\pi/(2k+1)}\,Y^k_q`
- :class:`TensorProduct`：张量积 :math:`[\tensor{T}^{(k_1)}\tensor{U}^{(k_2)}]^{(K)}`
- :class:`TensorScalarProduct`：标量积 :math:`(\tensor{T}^{(k)}\cdot\tensor{U}^{(k)})`

张量与其分量 :class:`TensorComponent` 都是不可变值（按结构比较相等），并且
都是可线性组合的原子，因此 ``2*C[0] - C[1]`` 之类的表达式直接得到
:class:`~angalg.linear_combination.LinearCombination`。

张量积的分量按定义（Varshalovich 式 (3.1.20)）

.. math::

    [\tensor{T}^{(k_1)}\tensor{U}^{(k_2)}]^{(K)}_Q \defd
    \tensor{T}^{(k_1)}_{q_1}\tensor{U}^{(k_2)}_{q_2} C_{k_1 q_1 k_2 q_2}^{KQ}

只作形式展开（:meth:`TensorProduct.component_expansion`），不做数值求值；
约化矩阵元引擎直接使用约化公式处理张量积。
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral

from .common import is_triangle, powneg1
from .coupling import CouplingKernel
from .errors import DomainError, InvalidComponent, RankMismatch
from .linear_combination import LinearCombination, linearly_combinable

__all__ = [
    "Tensor",
    "SphericalTensor",
    "TensorProduct",
    "TensorScalarProduct",
    "TensorComponent",
    "ComponentProduct",
    "dot",
]

_SUP = str.maketrans("0123456789-+()", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻⁺⁽⁾")
_SUB = str.maketrans("0123456789-+", "₀₁₂₃₄₅₆₇₈₉₋₊")


def superscript(x) -> str:
    return str(x).translate(_SUP)


def subscript(x) -> str:
    return str(x).translate(_SUB)


def _check_rank(k) -> int:
    if isinstance(k, bool) or not isinstance(k, Integral):
        raise DomainError(f"张量秩必须为非负整数，实际: {k!r}")
    if k < 0:
        raise DomainError(f"张量秩必须为非负整数，实际: {k}")
    return int(k)


class Tensor:
    """秩为 k 的不可约张量的抽象基类。"""

    label = "T"

    @property
    def rank(self) -> int:
        raise NotImplementedError

    def __getitem__(self, q) -> "TensorComponent":
        return TensorComponent(self, q)

    def components(self) -> list["TensorComponent"]:
        """返回 :math:`q = -k, \\ldots, k` 的全部分量。"""
        k = self.rank
        return [TensorComponent(self, q) for q in range(-k, k + 1)]


@linearly_combinable
@dataclass(frozen=True)
class SphericalTensor(Tensor):
    r"""秩为 k 的球张量 :math:`\tensor{C}^{(k)}`。

    Examples
    --------
    >>> SphericalTensor(2)
    C⁽²⁾
    """

    k: int
    label = "C"

    def __post_init__(self):
        _check_rank(self.k)

    @property
    def rank(self) -> int:
        return self.k

    def __repr__(self):
        return f"{self.label}{superscript(f'({self.k})')}"

    __str__ = __repr__


@linearly_combinable
@dataclass(frozen=True)
class TensorProduct(Tensor):
    r"""由 T（秩 :math:`k_1`）与 U（秩 :math:`k_2`）耦合而成的秩 K 张量。

    Raises
    ------
    RankMismatch
        K 不在 ``triangle_range(k1, k2)`` 中。
    """

    T: Tensor
    U: Tensor
    K: int

    def __post_init__(self):
        for X in (self.T, self.U):
            if not isinstance(X, Tensor):
                raise TypeError(f"张量积的因子必须为 Tensor，实际: {X!r}")
        _check_rank(self.K)
        if not is_triangle(self.T.rank, self.U.rank, self.K):
            raise RankMismatch(
                f"张量积秩 K={self.K} 不满足三角条件 |k1-k2| <= K <= k1+k2 "
                f"(k1={self.T.rank}, k2={self.U.rank})"
            )

    @property
    def rank(self) -> int:
        return self.K

    def component_expansion(self, Q: int, kernel: CouplingKernel | None = None) -> LinearCombination:
        r"""形式展开 :math:`X^{(K)}_Q = \sum T_{q_1} U_{q_2} C_{k_1 q_1 k_2 q_2}^{KQ}`。

        返回以 :class:`ComponentProduct` 为原子的线性组合。
        """
        kernel = kernel or CouplingKernel()
        if abs(Q) > self.K:
            raise InvalidComponent(f"分量 Q={Q} 超出秩 K={self.K}")
        k1, k2 = self.T.rank, self.U.rank
        out = LinearCombination()
        for q1 in range(-k1, k1 + 1):
            q2 = Q - q1
            if abs(q2) > k2:
                continue
            c = kernel.clebsch_gordan(k1, q1, k2, q2, self.K, Q)
            out.add_term(ComponentProduct((self.T[q1], self.U[q2])), c)
        return out

    def __repr__(self):
        return f"[{self.T}×{self.U}]{superscript(f'({self.K})')}"

    __str__ = __repr__


@linearly_combinable
@dataclass(frozen=True)
class TensorScalarProduct(Tensor):
    r"""同秩张量的标量积（秩 0），Varshalovich 式 (3.1.30)-(3.1.35)：

    .. math::

        (\tensor{T}^{(k)}\cdot\tensor{U}^{(k)}) \defd
        (-)^k \angroot{k} [\tensor{T}^{(k)}\tensor{U}^{(k)}]^{(0)}_0
        \equiv (-)^q \tensor{T}^{(k)}_q \tensor{U}^{(k)}_{-q}

    Raises
    ------
    RankMismatch
        两个张量秩不同。
    """

    T: Tensor
    U: Tensor

    def __post_init__(self):
        for X in (self.T, self.U):
            if not isinstance(X, Tensor):
                raise TypeError(f"标量积的因子必须为 Tensor，实际: {X!r}")
        if self.T.rank != self.U.rank:
            raise RankMismatch(f"标量积要求两张量同秩: rank(T)={self.T.rank}, rank(U)={self.U.rank}")

    @property
    def rank(self) -> int:
        return 0

    @property
    def k(self) -> int:
        """两个因子的公共秩。"""
        return self.T.rank

    def component_expansion(self) -> LinearCombination:
        r"""形式展开 :math:`\sum_q (-)^q T_q U_{-q}`。"""
        k = self.k
        out = LinearCombination()
        for q in range(-k, k + 1):
            out.add_term(ComponentProduct((self.T[q], self.U[-q])), powneg1(q))
        return out

    def as_tensor_product(self, kernel: CouplingKernel | None = None) -> LinearCombination:
        r"""返回 :math:`(-)^k\angroot{k}[TU]^{(0)}`。"""
        kernel = kernel or CouplingKernel()
        return LinearCombination({TensorProduct(self.T, self.U, 0): powneg1(self.k) * kernel.angroot(self.k)})

    def __repr__(self):
        return f"({self.T}⋅{self.U})"

    __str__ = __repr__


def dot(T: Tensor, U: Tensor) -> TensorScalarProduct:
    """构造两个同秩张量的标量积 :math:`T\\cdot U`。

    Examples
    --------
    >>> dot(SphericalTensor(4), SphericalTensor(4))
    (C⁽⁴⁾⋅C⁽⁴⁾)
    """
    return TensorScalarProduct(T, U)


@linearly_combinable
@dataclass(frozen=True)
class TensorComponent:
    r"""张量的第 q 个分量 :math:`T^{(k)}_q`，要求 :math:`|q| \leq k`。"""

    tensor: Tensor
    q: int

    def __post_init__(self):
        if not isinstance(self.tensor, Tensor):
            raise TypeError(f"TensorComponent 需要 Tensor，实际: {self.tensor!r}")
        if isinstance(self.q, bool) or not isinstance(self.q, Integral):
            raise InvalidComponent(f"分量指标 q 必须为整数，实际: {self.q!r}")
        if abs(self.q) > self.tensor.rank:
            raise InvalidComponent(f"分量越界: |q|={abs(self.q)} > rank={self.tensor.rank} ({self.tensor})")
        object.__setattr__(self, "q", int(self.q))

    @property
    def rank(self) -> int:
        return self.tensor.rank

    def __mul__(self, other):
        if isinstance(other, TensorComponent):
            return ComponentProduct((self, other))
        if isinstance(other, ComponentProduct):
            return ComponentProduct((self,) + other.factors)
        return LinearCombination({self: 1}).__mul__(other)

    def __repr__(self):
        return f"{self.tensor}{subscript(self.q)}"

    __str__ = __repr__


@linearly_combinable
@dataclass(frozen=True)
class ComponentProduct:
    """作用于同一坐标的张量分量之（有序）乘积 :math:`T_{q_1} U_{q_2} \\cdots`。"""

    factors: tuple

    def __post_init__(self):
        factors = tuple(self.factors)
        if not factors or not all(isinstance(f, TensorComponent) for f in factors):
            raise TypeError(f"ComponentProduct 的因子必须为非空 TensorComponent 序列: {self.factors!r}")
        object.__setattr__(self, "factors", factors)

    @property
    def q(self) -> int:
        """总投影 :math:`\\sum q_i`。"""
        return sum(f.q for f in self.factors)

    def __mul__(self, other):
        if isinstance(other, TensorComponent):
            return ComponentProduct(self.factors + (other,))
        if isinstance(other, ComponentProduct):
            return ComponentProduct(self.factors + other.factors)
        return LinearCombination({self: 1}).__mul__(other)

    def __repr__(self):
        return "".join(str(f) for f in self.factors)

    __str__ = __repr__
