r"""角动量代数公共例程

本模块提供耦合系数计算中反复出现的基本量：

- :func:`powneg1`：负一的整数次幂 :math:`(-)^k`
- :func:`angroot`：归一化因子 :math:`\angroot{j_1 j_2 \ldots} = \sqrt{(2j_1+1)(2j_2+1)\cdots}`
- :func:`triangle_range`：满足三角条件的全部 k
- 半整数量子数的解析与校验

约定
====

角动量量子数为非负整数或半整数。内部统一以 :class:`fractions.Fraction` 表示半整数，
输入可为 ``int``、``Fraction``、半整数浮点（如 ``0.5``）、sympy ``Rational`` 或字符串 ``"1/2"``。

References
----------
.. [Varshalovich] Varshalovich, D. A., Moskalev, A. N., & Khersonskii, V. K. (1988)
   "Quantum Theory of Angular Momentum"
   World Scientific
"""

from __future__ import annotations

import math
from fractions import Fraction
from numbers import Integral

import sympy

from .errors import DomainError

__all__ = [
    "as_half_integer",
    "twice",
    "pretty_half",
    "powneg1",
    "angroot",
    "triangle_range",
    "is_triangle",
]


def as_half_integer(j) -> Fraction:
    """将输入解析为半整数（允许负值，用于磁量子数）。

    Raises
    ------
    DomainError
        若 ``j`` 不是整数或半整数。
    """
    if isinstance(j, bool):
        raise DomainError(f"量子数不能为布尔值: {j!r}")
    if isinstance(j, Integral):
        return Fraction(int(j))
    try:
        f = Fraction(str(j))
    except (ValueError, ZeroDivisionError) as exc:
        raise DomainError(f"无法解析的量子数: {j!r}") from exc
    if (2 * f).denominator != 1:
        raise DomainError(f"量子数必须为整数或半整数: {j!r}")
    return f


def twice(j) -> int:
    """返回 :math:`2j`（整数）。"""
    return int(2 * as_half_integer(j))


def pretty_half(f: Fraction):
    """整数值返回 ``int``，否则保留 ``Fraction``。"""
    return int(f) if f.denominator == 1 else f


def powneg1(k) -> int:
    r"""计算 :math:`(-)^k`，k 必须为整数。

    Examples
    --------
    >>> powneg1(3)
    -1
    >>> powneg1(Fraction(4, 2))
    1
    """
    if isinstance(k, Integral) and not isinstance(k, bool):
        return -1 if int(k) % 2 else 1
    f = as_half_integer(k)
    if f.denominator != 1:
        raise DomainError(f"powneg1 要求整数指数，实际: {k!r}")
    return -1 if f.numerator % 2 else 1


def angroot(*js, exact: bool = False):
    r"""计算 :math:`\sqrt{(2j_1+1)(2j_2+1)\cdots(2j_n+1)}`。

    Parameters
    ----------
    *js
        非负整数或半整数角动量。
    exact : bool, optional
        为 ``True`` 时返回 sympy 精确数（如 ``sqrt(3)``），默认返回 ``float``。

    Raises
    ------
    DomainError
        任一 :math:`j_i < 0` 或非半整数。
    """
    prod = 1
    for j in js:
        f = as_half_integer(j)
        if f < 0:
            raise DomainError(f"角动量必须非负: {j!r}")
        prod *= int(2 * f) + 1
    if exact:
        return sympy.sqrt(sympy.Integer(prod))
    return math.sqrt(prod)


def triangle_range(a, b) -> list:
    r"""返回所有满足 :math:`|a-b| \leq k \leq a+b` 的 k（整数步长，升序）。

    k 与 :math:`a+b` 相差整数。若 a 或 b 非法（负数或非半整数），返回空列表。
    注意这里不做奇偶性筛选；宇称选择规则由 :func:`angalg.rme.ranks` 处理。

    Examples
    --------
    >>> triangle_range(2, 3)
    [1, 2, 3, 4, 5]
    >>> triangle_range(1, 1)
    [0, 1, 2]
    >>> triangle_range(Fraction(1, 2), Fraction(3, 2))
    [1, 2]
    """
    try:
        fa = as_half_integer(a)
        fb = as_half_integer(b)
    except DomainError:
        return []
    if fa < 0 or fb < 0:
        return []
    lo = abs(fa - fb)
    n = int(fa + fb - lo)
    return [pretty_half(lo + i) for i in range(n + 1)]


def is_triangle(a, b, c) -> bool:
    r"""三角条件 :math:`|a-b| \leq c \leq a+b` 且 :math:`a+b+c` 为整数。"""
    ta, tb, tc = twice(a), twice(b), twice(c)
    if ta < 0 or tb < 0 or tc < 0:
        return False
    if (ta + tb + tc) % 2:
        return False
    return abs(ta - tb) <= tc <= ta + tb
