r"""量子算子与轨道矩阵元

- :class:`OneBodyHamiltonian`：单体哈密顿量 :math:`\hat{h}`
- :class:`CoulombInteraction`：双电子库仑相互作用 :math:`\hat{g} = 1/r_{12}`
- :class:`CoulombInteractionMultipole`：库仑相互作用多极展开的第 k 项
- :class:`CoulombPotentialMultipole`：第 k 项对一个坐标收缩后在另一坐标上的单体势
- :class:`OrbitalMatrixElement`：轨道矩阵元 :math:`\langle a b|\hat{g}|c d\rangle`

算子是可线性组合的原子，因此 ``OneBodyHamiltonian() + CoulombInteraction()``
即给出无场哈密顿量。

库仑相互作用的多极展开（Varshalovich 式 (5.17.9)）：

.. math::

    \frac{1}{r_{12}} =
    \sum_{k}
    \frac{r_<^k}{r_>^{k+1}}
    \tensor{C}^{(k)}(1)\cdot\tensor{C}^{(k)}(2)
"""

from __future__ import annotations

from dataclasses import dataclass, field

import sympy

from .linear_combination import LinearCombination, linearly_combinable
from .tensors import SphericalTensor, TensorScalarProduct, _check_rank, dot, superscript

__all__ = [
    "OneBodyHamiltonian",
    "CoulombInteraction",
    "CoulombInteractionMultipole",
    "CoulombPotentialMultipole",
    "OrbitalMatrixElement",
    "FieldFreeHamiltonian",
]


@linearly_combinable
@dataclass(frozen=True)
class OneBodyHamiltonian:
    """单体哈密顿量（动能 + 核吸引）。"""

    arity = 1

    def __str__(self):
        return "ĥ"

    __repr__ = __str__


@linearly_combinable
@dataclass(frozen=True)
class CoulombInteraction:
    """双电子库仑相互作用 :math:`1/r_{12}`。"""

    arity = 2

    def __str__(self):
        return "ĝ"

    __repr__ = __str__


@linearly_combinable
@dataclass(frozen=True)
class CoulombInteractionMultipole:
    r"""库仑相互作用 ``g`` 多极展开的第 k 项。

    角向部分为 :math:`\tensor{C}^{(k)}(1)\cdot\tensor{C}^{(k)}(2)`（:attr:`tensor`），
    径向部分 :math:`r_<^k/r_>^{k+1}` 保持为符号。
    """

    k: int
    g: CoulombInteraction = field(default_factory=CoulombInteraction)

    arity = 2

    def __post_init__(self):
        _check_rank(self.k)

    @property
    def tensor(self) -> TensorScalarProduct:
        return dot(SphericalTensor(self.k), SphericalTensor(self.k))

    def __str__(self):
        return f"{self.g}{superscript(f'({self.k})')}"

    __repr__ = __str__


@linearly_combinable
@dataclass(frozen=True)
class CoulombPotentialMultipole:
    r"""把 :class:`CoulombInteractionMultipole` 对坐标 1 收缩得到的单体势。

    .. math::

        [a|\hat{g}^{(k)}|b](2) = \matrixel{a(1)}{\frac{r_<^k}{r_>^{k+1}}\tensor{C}^{(k)}(1)}{b(1)}
        \cdot\tensor{C}^{(k)}(2)

    作用于剩余坐标的角向部分为 :math:`\tensor{C}^{(k)}`（:attr:`tensor`），
    径向部分为以 a、b 的径向轨道命名的势函数符号（:attr:`radial`）。

    Attributes
    ----------
    a, b
        被收缩坐标上的左右轨道（自旋轨道或剥离自旋后的轨道）。
    g : CoulombInteractionMultipole
        被收缩的多极项。
    """

    a: object
    g: CoulombInteractionMultipole
    b: object

    arity = 1

    def __post_init__(self):
        if not isinstance(self.g, CoulombInteractionMultipole):
            raise TypeError(f"CoulombPotentialMultipole 需要 CoulombInteractionMultipole，实际: {self.g!r}")

    @property
    def k(self) -> int:
        return self.g.k

    @property
    def tensor(self) -> SphericalTensor:
        return SphericalTensor(self.k)

    @property
    def radial(self) -> sympy.Symbol:
        """径向势 :math:`Y^k_{ab}(r)` 的符号，以剥离自旋后的轨道命名。"""
        a, b = (getattr(o, "orb", o) for o in (self.a, self.b))
        return sympy.Symbol(f"Y{superscript(self.k)}[{a} {b}]")

    def __str__(self):
        return f"[{self.a}|{self.g}|{self.b}]"

    __repr__ = __str__


def FieldFreeHamiltonian() -> LinearCombination:
    r"""无场哈密顿量 :math:`\hat{H} = \sum_i \hat{h}_i + \sum_{i<j} \hat{g}_{ij}`。"""
    return OneBodyHamiltonian() + CoulombInteraction()


@linearly_combinable
@dataclass(frozen=True)
class OrbitalMatrixElement:
    r"""轨道矩阵元 :math:`\langle a_1 \ldots|\hat{O}|b_1 \ldots\rangle`。

    Attributes
    ----------
    bra, ket : tuple
        左右轨道（自旋轨道或剥离自旋后的轨道），长度等于算子的体数。
    op
        算子。
    """

    bra: tuple
    op: object
    ket: tuple

    def __post_init__(self):
        bra, ket = tuple(self.bra), tuple(self.ket)
        if len(bra) != len(ket):
            raise ValueError(f"左右轨道数不一致: {len(bra)} vs {len(ket)}")
        arity = getattr(self.op, "arity", None)
        if arity is not None and arity != len(bra):
            raise ValueError(f"{arity} 体算子 {self.op} 需要 {arity} 个轨道，实际: {len(bra)}")
        object.__setattr__(self, "bra", bra)
        object.__setattr__(self, "ket", ket)

    @property
    def arity(self) -> int:
        return len(self.bra)

    def __str__(self):
        bra = " ".join(str(o) for o in self.bra)
        ket = " ".join(str(o) for o in self.ket)
        return f"⟨{bra}|{self.op}|{ket}⟩"

    __repr__ = __str__
