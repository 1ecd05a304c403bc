r"""双电子算子的多极展开

两个同秩张量的标量积在四个自旋轨道之间的矩阵元（Varshalovich 式 (13.1.45)
配合 Wigner-Eckart 定理）：

.. math::

    \matrixel{n_aj_am_a;n_bj_bm_b}{\tensor{P}^{(k)}\cdot\tensor{Q}^{(k)}}{n_cj_cm_c;n_dj_dm_d}
    = \frac{1}{\angroot{j_aj_b}}
    \sum_\alpha(-)^{-\alpha}
    C_{j_cm_c;k,\alpha}^{j_am_a}
    C_{j_dm_d;k,-\alpha}^{j_bm_b}
    \redmatrixel{n_aj_a}{\tensor{P}^{(k)}}{n_cj_c}
    \redmatrixel{n_bj_b}{\tensor{Q}^{(k)}}{n_dj_d}

其中 :math:`\alpha` 由 m 守恒唯一确定：:math:`\alpha = m_a - m_c = m_d - m_b`。

库仑相互作用按 :math:`1/r_{12} = \sum_k (r_<^k/r_>^{k+1})\,\tensor{C}^{(k)}(1)\cdot\tensor{C}^{(k)}(2)`
展开，k 取两侧宇称/三角条件允许的秩的交集（:func:`~angalg.rme.ranks`）。
"""

from __future__ import annotations

from .common import as_half_integer, powneg1
from .coupling import CouplingKernel
from .errors import RankMismatch
from .orbitals import SpinOrbital, jm_j
from .operators import CoulombInteraction, CoulombInteractionMultipole, CoulombPotentialMultipole, OrbitalMatrixElement
from .rme import CoupledState, _as_state, _total_j, rme, ranks
from .tensors import SphericalTensor, Tensor, TensorScalarProduct

__all__ = [
    "multipole_expand_scalar_product",
    "multipole_expand",
    "integrate_spinors",
]


def _state_jm(x):
    """返回 (rme 所用的态, j, m)。

    ``x`` 为自旋轨道，或 ``(态, m)`` 二元组（态为角动量数或 :class:`CoupledState`）。
    """
    if isinstance(x, SpinOrbital):
        j, m = jm_j(x)
        return x, j, as_half_integer(m)
    if isinstance(x, tuple) and len(x) == 2:
        state, m = x
        if not isinstance(state, CoupledState):
            state = _as_state(state)[0]
        return state, _total_j(state), as_half_integer(m)
    raise TypeError(f"多极展开需要自旋轨道或 (态, m) 二元组，实际: {x!r}")


def multipole_expand_scalar_product(a, b, P: Tensor, Q: Tensor, c, d, kernel: CouplingKernel | None = None):
    r"""计算 :math:`\matrixel{ab}{\tensor{P}^{(k)}\cdot\tensor{Q}^{(k)}}{cd}` 的自旋-角向系数。

    P 作用于坐标 1（a、c），Q 作用于坐标 2（b、d）。

    Returns
    -------
    float | sympy.Expr
        :math:`m_a - m_c \neq m_d - m_b`、违反三角/宇称条件或自旋不匹配时为 0。

    Raises
    ------
    RankMismatch
        P 与 Q 秩不同。
    """
    kernel = kernel if kernel is not None else CouplingKernel()
    if P.rank != Q.rank:
        raise RankMismatch(f"标量积要求同秩: rank(P)={P.rank}, rank(Q)={Q.rank}")
    k = P.rank
    (sa, ja, ma), (sb, jb, mb), (sc, jc, mc), (sd, jd, md) = map(_state_jm, (a, b, c, d))

    alpha = ma - mc
    if alpha != md - mb or abs(alpha) > k:
        return kernel.zero

    rme_ac = rme(sa, P, sc, kernel)
    if rme_ac == 0:
        return kernel.zero
    rme_bd = rme(sb, Q, sd, kernel)
    if rme_bd == 0:
        return kernel.zero

    cg_a = kernel.clebsch_gordan(jc, mc, k, alpha, ja, ma)
    cg_b = kernel.clebsch_gordan(jd, md, k, -alpha, jb, mb)
    if cg_a == 0 or cg_b == 0:
        return kernel.zero
    return powneg1(-alpha) * cg_a * cg_b * rme_ac * rme_bd / kernel.angroot(ja, jb)


def integrate_spinors(bra: tuple, X: TensorScalarProduct, ket: tuple, kernel: CouplingKernel | None = None):
    r"""对 :math:`\matrixel{ab}{\tensor{P}\cdot\tensor{Q}}{cd}` 做自旋-角向积分。

    Parameters
    ----------
    bra, ket : tuple
        ``(a, b)`` 与 ``(c, d)``。
    X : TensorScalarProduct
        标量积算子。
    """
    if not isinstance(X, TensorScalarProduct):
        raise TypeError(f"integrate_spinors 需要 TensorScalarProduct，实际: {X!r}")
    (a, b), (c, d) = bra, ket
    return multipole_expand_scalar_product(a, b, X.T, X.U, c, d, kernel)


def _radial_orbital(o):
    return o.orb if isinstance(o, SpinOrbital) else o


def _expand_potential(integral, kernel: CouplingKernel, atol: float) -> list[tuple]:
    r"""单体势矩阵元 :math:`\matrixel{c}{[a|\hat{g}^{(k)}|b]}{d}` 的自旋-角向系数。"""
    V = integral.op
    (c,), (d,) = integral.bra, integral.ket
    coeff = multipole_expand_scalar_product(V.a, c, V.tensor, V.tensor, V.b, d, kernel)
    if coeff == 0 or (atol and abs(coeff) <= atol):
        return []
    radial_op = CoulombPotentialMultipole(_radial_orbital(V.a), V.g, _radial_orbital(V.b))
    return [(coeff, OrbitalMatrixElement((_radial_orbital(c),), radial_op, (_radial_orbital(d),)))]


def multipole_expand(integral, kernel: CouplingKernel | None = None, atol: float = 0.0) -> list[tuple]:
    r"""将库仑矩阵元 :math:`\matrixel{ab}{\hat{g}}{cd}` 展开为多极项。

    Parameters
    ----------
    integral : OrbitalMatrixElement
        若其算子不是 :class:`~angalg.operators.CoulombInteraction` 或
        :class:`~angalg.operators.CoulombPotentialMultipole`，原样返回 ``[(1, integral)]``。
        后者给出单个收缩项 :math:`\matrixel{c}{[a|\hat{g}^{(k)}|b]}{d}`。
    atol : float, optional
        舍弃绝对值不超过 ``atol`` 的浮点系数（0 仅舍弃精确零）。

    Returns
    -------
    list[tuple]
        ``(角向系数, 径向积分)``，径向积分为剥离自旋后的
        :math:`\matrixel{n_a\ell_a\,n_b\ell_b}{\hat{g}^{(k)}}{n_c\ell_c\,n_d\ell_d}`，按 k 升序。

    Examples
    --------
    >>> from angalg.orbitals import spin_configurations
    >>> a, b = spin_configurations("1s2")[0]
    >>> multipole_expand(OrbitalMatrixElement((a, b), CoulombInteraction(), (a, b)))
    [(1.0, ⟨1s 1s|ĝ⁽⁰⁾|1s 1s⟩)]
    """
    kernel = kernel if kernel is not None else CouplingKernel()
    if isinstance(integral, OrbitalMatrixElement) and isinstance(integral.op, CoulombPotentialMultipole):
        return _expand_potential(integral, kernel, atol)
    if not (isinstance(integral, OrbitalMatrixElement) and isinstance(integral.op, CoulombInteraction)):
        return [(kernel.one, integral)]

    (a, b), (c, d) = integral.bra, integral.ket
    ks = sorted(set(ranks(a, SphericalTensor, c)) & set(ranks(b, SphericalTensor, d)))
    bra = tuple(_radial_orbital(o) for o in integral.bra)
    ket = tuple(_radial_orbital(o) for o in integral.ket)
    terms = []
    for k in ks:
        gk = CoulombInteractionMultipole(k, integral.op)
        coeff = integrate_spinors((a, b), gk.tensor, (c, d), kernel)
        if coeff == 0 or (atol and abs(coeff) <= atol):
            continue
        terms.append((coeff, OrbitalMatrixElement(bra, gk, ket)))
    return terms
