r"""基无关的矩阵元项生成（Slater-Condon 规则）

给定算子与两个 Slater 行列式，生成未做自旋-角向积分的轨道矩阵元项
``(系数, OrbitalMatrixElement)``。本模块假定自旋轨道正交归一。

规则
====

设左右行列式经置换对齐后相差 d 个自旋轨道（置换符号记为 :math:`\sigma`）：

- 单体算子：d=0 时 :math:`\sigma\sum_a \langle a|\hat{h}|a\rangle`；
  d=1 时 :math:`\sigma\langle p|\hat{h}|q\rangle`；
- 双体算子：d=0 时 :math:`\sigma\sum_{a<b}(\langle ab|\hat{g}|ab\rangle - \langle ab|\hat{g}|ba\rangle)`；
  d=1 时 :math:`\sigma\sum_c(\langle pc|\hat{g}|qc\rangle - \langle pc|\hat{g}|cq\rangle)`；
  d=2 时 :math:`\sigma(\langle p_1p_2|\hat{g}|q_1q_2\rangle - \langle p_1p_2|\hat{g}|q_2q_1\rangle)`；
- 其余情形为零。
"""

from __future__ import annotations

from typing import Iterator

from .linear_combination import LinearCombination
from .operators import OrbitalMatrixElement

__all__ = [
    "align_determinants",
    "slater_condon_terms",
]


def _parity(perm: list[int]) -> int:
    inversions = sum(1 for i in range(len(perm)) for j in range(i + 1, len(perm)) if perm[i] > perm[j])
    return -1 if inversions % 2 else 1


def align_determinants(bra, ket):
    """将 ket 行列式置换为与 bra 最大重合的次序。

    Returns
    -------
    sign : int
        置换符号。
    aligned : list
        重排后的 ket（公共自旋轨道与 bra 同位）。
    bra_only, ket_only : list
        仅出现在 bra / ket 中的自旋轨道（各自原有顺序）。
    """
    bra, ket = tuple(bra), tuple(ket)
    if len(bra) != len(ket):
        raise ValueError(f"行列式电子数不一致: {len(bra)} vs {len(ket)}")
    for det in (bra, ket):
        if len(set(det)) != len(det):
            raise ValueError(f"行列式含重复自旋轨道（违反 Pauli 原理）: {det}")
    ket_set, bra_set = set(ket), set(bra)
    bra_only = [o for o in bra if o not in ket_set]
    ket_only = [o for o in ket if o not in bra_set]
    substitutes = iter(ket_only)
    aligned = [o if o in ket_set else next(substitutes) for o in bra]
    sign = _parity([ket.index(o) for o in aligned])
    return sign, aligned, bra_only, ket_only


def _one_body(op, bra, sign, bra_only, ket_only):
    if not bra_only:
        for a in bra:
            yield sign, OrbitalMatrixElement((a,), op, (a,))
    elif len(bra_only) == 1:
        yield sign, OrbitalMatrixElement((bra_only[0],), op, (ket_only[0],))


def _two_body(op, bra, sign, bra_only, ket_only):
    if not bra_only:
        for i, a in enumerate(bra):
            for b in bra[i + 1:]:
                yield sign, OrbitalMatrixElement((a, b), op, (a, b))
                yield -sign, OrbitalMatrixElement((a, b), op, (b, a))
    elif len(bra_only) == 1:
        p, q = bra_only[0], ket_only[0]
        for c in bra:
            if c == p:
                continue
            yield sign, OrbitalMatrixElement((p, c), op, (q, c))
            yield -sign, OrbitalMatrixElement((p, c), op, (c, q))
    elif len(bra_only) == 2:
        p1, p2 = bra_only
        q1, q2 = ket_only
        yield sign, OrbitalMatrixElement((p1, p2), op, (q1, q2))
        yield -sign, OrbitalMatrixElement((p1, p2), op, (q2, q1))


def slater_condon_terms(operator, bra, ket, overlaps=None) -> Iterator[tuple]:
    r"""生成 :math:`\langle \Phi|\hat{O}|\Psi\rangle` 的未积分轨道矩阵元项。

    Parameters
    ----------
    operator
        单体/双体算子，或算子的 :class:`~angalg.linear_combination.LinearCombination`。
    bra, ket : Sequence[SpinOrbital]
        行列式（有序自旋轨道序列）。
    overlaps : Sequence | None
        非正交轨道重叠说明；本生成器只处理正交归一轨道，给出非空重叠时抛出
        :class:`NotImplementedError`，可改用自定义生成器。

    Yields
    ------
    tuple
        ``(系数, OrbitalMatrixElement)``。
    """
    if overlaps:
        raise NotImplementedError("slater_condon_terms 仅支持正交归一自旋轨道；非正交基请提供自定义项生成器")
    if isinstance(operator, LinearCombination):
        for op, c in operator.items():
            for coeff, term in slater_condon_terms(op, bra, ket):
                yield c * coeff, term
        return

    arity = getattr(operator, "arity", None)
    if arity not in (1, 2):
        raise TypeError(f"无法识别的算子（需要 arity 为 1 或 2）: {operator!r}")
    sign, _, bra_only, ket_only = align_determinants(bra, ket)
    if len(bra_only) > arity:
        return
    rule = _one_body if arity == 1 else _two_body
    yield from rule(operator, tuple(bra), sign, bra_only, ket_only)
