r"""能量表达式装配

把算子在 Slater 行列式之间的矩阵元化为径向积分的线性组合：

.. math::

    \matrixel{\Phi_i}{\hat{H}}{\Phi_j}
    = \sum_{\text{项}} c\,\langle\ldots|\hat{O}|\ldots\rangle
    \;\longrightarrow\;
    \sum_{r} \gamma_r\, R_r

流程：

1. 由项生成器（默认 :func:`~angalg.terms.slater_condon_terms`）给出轨道矩阵元项；
2. 对每项做自旋-角向积分（:func:`integrate_spinor`）：库仑项按多极展开，
   其余项保持为符号；
3. 合并相同径向积分，得到 :class:`EnergyExpression`。

配置
====

数值模式、零判据、缓存容量与并行度由 :class:`IntegrationConfig` 统一给出。

Examples
--------
>>> from angalg.orbitals import spin_configurations
>>> from angalg.operators import CoulombInteraction
>>> print(energy_expression(CoulombInteraction(), spin_configurations("1s2")[0]))
⟨1s 1s|ĝ⁽⁰⁾|1s 1s⟩
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np
import sympy

from .coupling import CoefficientCache, CouplingKernel
from .linear_combination import LinearCombination
from .multipole import integrate_spinors, multipole_expand
from .operators import OrbitalMatrixElement
from .terms import slater_condon_terms

__all__ = [
    "IntegrationConfig",
    "EnergyExpression",
    "integrate_spinor",
    "integrate_spinors",
    "energy_matrix",
    "Matrix",
    "energy_expression",
]


@dataclass
class IntegrationConfig:
    r"""能量表达式装配配置。

    Attributes
    ----------
    exact : bool
        为 ``True`` 时所有角向系数为 sympy 精确数。
    atol : float
        浮点模式下系数的零判据（精确模式忽略）。
    cache_maxsize : int | None
        3j/6j 缓存容量；``None`` 为不限容量。
    n_workers : int
        并行装配矩阵元的线程数（1 表示串行）。
    verbose : bool
        打印装配统计。
    """

    exact: bool = False
    atol: float = 1e-12
    cache_maxsize: int | None = None
    n_workers: int = 1
    verbose: bool = False

    def __post_init__(self):
        if self.atol < 0:
            raise ValueError(f"atol 必须非负，当前值: {self.atol}")
        if self.n_workers < 1:
            raise ValueError(f"n_workers 必须 >= 1，当前值: {self.n_workers}")

    def kernel(self) -> CouplingKernel:
        """按配置构造带缓存的系数内核。"""
        return CouplingKernel(exact=self.exact, cache=CoefficientCache(self.cache_maxsize))

    @property
    def zero_tol(self) -> float:
        return 0.0 if self.exact else self.atol


class EnergyExpression(LinearCombination):
    """径向积分（:class:`~angalg.operators.OrbitalMatrixElement`）的线性组合。"""

    @property
    def radial_integrals(self) -> list:
        """按字符串排序的全部径向积分。"""
        return sorted(self.atoms, key=str)

    def as_sympy(self, rationalize: bool = False) -> sympy.Expr:
        """把每个径向积分换成同名 sympy 符号，返回 sympy 表达式。

        浮点系数保留为 ``sympy.Float``；``rationalize=True`` 时才用 ``sympy.nsimplify``
        猜测其精确形式（对无理系数可能给出错误的有理数）。
        """
        def coeff(c):
            c = sympy.sympify(c)
            return sympy.nsimplify(c) if rationalize else c

        return sympy.Add(*(coeff(c) * sympy.Symbol(str(r)) for r, c in self.items()))


def integrate_spinor(integral, kernel: CouplingKernel | None = None, atol: float = 0.0) -> LinearCombination:
    r"""对一个轨道矩阵元做自旋-角向积分。

    库仑矩阵元展开为多极径向积分的线性组合；其他算子的矩阵元原样保留
    （系数 1）。
    """
    kernel = kernel if kernel is not None else CouplingKernel()
    if not isinstance(integral, OrbitalMatrixElement):
        raise TypeError(f"integrate_spinor 需要 OrbitalMatrixElement，实际: {integral!r}")
    out = LinearCombination(atol=atol)
    for coeff, radial in multipole_expand(integral, kernel, atol):
        out.add_term(radial, coeff)
    return out


def _element(operator, bra, ket, overlaps, generator: Callable, kernel: CouplingKernel, atol: float) -> EnergyExpression:
    expr = EnergyExpression(atol=atol)
    for coeff, term in generator(operator, bra, ket, overlaps):
        expr.add_term(integrate_spinor(term, kernel, atol), coeff)
    return expr


def energy_matrix(
    operator,
    configurations: Sequence,
    overlaps=None,
    *,
    bra_configurations: Sequence | None = None,
    config: IntegrationConfig | None = None,
    generator: Callable = slater_condon_terms,
) -> np.ndarray:
    r"""装配算子在行列式之间的能量表达式矩阵。

    Parameters
    ----------
    operator
        算子或算子的线性组合（如 :func:`~angalg.operators.FieldFreeHamiltonian`）。
    configurations : Sequence
        ket 行列式（自旋轨道元组）列表。
    overlaps : Sequence | None, optional
        非正交轨道说明，原样传给 ``generator``。
    bra_configurations : Sequence | None, optional
        bra 行列式列表；默认与 ``configurations`` 相同。
    config : IntegrationConfig | None, optional
        装配配置；默认浮点模式、串行。
    generator : Callable, optional
        项生成器 ``generator(operator, bra, ket, overlaps)``，产出 ``(系数, OrbitalMatrixElement)``。

    Returns
    -------
    numpy.ndarray
        ``dtype=object``，形状 ``(len(bra_configurations), len(configurations))``，
        元素为 :class:`EnergyExpression`。
    """
    cfg = config or IntegrationConfig()
    kernel = cfg.kernel()
    kets = list(configurations)
    bras = kets if bra_configurations is None else list(bra_configurations)
    atol = cfg.zero_tol

    M = np.empty((len(bras), len(kets)), dtype=object)
    index = [(i, j) for i in range(len(bras)) for j in range(len(kets))]

    def work(ij):
        i, j = ij
        return _element(operator, bras[i], kets[j], overlaps, generator, kernel, atol)

    if cfg.n_workers > 1 and len(index) > 1:
        with ThreadPoolExecutor(max_workers=cfg.n_workers) as pool:
            results = list(pool.map(work, index))
    else:
        results = [work(ij) for ij in index]
    for (i, j), expr in zip(index, results):
        M[i, j] = expr

    if cfg.verbose:
        nnz = sum(1 for expr in results if expr)
        cache = kernel.cache
        print(
            f"[energy] {len(bras)}x{len(kets)} 矩阵, 非零元 {nnz}, "
            f"缓存 {len(cache)} 条 (命中 {cache.hits}, 未命中 {cache.misses})"
        )
    return M


Matrix = energy_matrix


def energy_expression(operator, configuration, overlaps=None, config: IntegrationConfig | None = None) -> EnergyExpression:
    """单个行列式的对角能量表达式 :math:`\\matrixel{\\Phi}{\\hat{O}}{\\Phi}`。"""
    return energy_matrix(operator, [configuration], overlaps, config=config)[0, 0]
