r"""角动量耦合系数模块

本模块是整个代数引擎的系数内核：

- Wigner-3j / 6j 符号与 Clebsch-Gordan 系数（通过 sympy 包装）
- 量子数定义域检查（负角动量、非半整数、:math:`j-m` 非整数）
- 线程安全的系数缓存 :class:`CoefficientCache` 与持有缓存的 :class:`CouplingKernel`

数值方案
========

``sympy.physics.wigner`` 以精确有理阶乘求 Racah 和，结果形如 :math:`s \sqrt{r}`
（:math:`s=\pm 1`，:math:`r` 为有理数），对任意大的量子数都不损失精度。
本模块在调用前把量子数转换为 ``sympy.Rational``，仅在最后一步转为浮点：

- ``exact=False``（默认）：返回 ``float``；
- ``exact=True``：返回 sympy 精确数，如 ``-sqrt(3)/3``。

相位约定
========

.. math::

    C_{j_1 m_1 j_2 m_2}^{j_3 m_3} = (-)^{j_1-j_2+m_3} \angroot{j_3}
    \begin{pmatrix} j_1 & j_2 & j_3 \\ m_1 & m_2 & -m_3 \end{pmatrix}

即 Varshalovich (1988) 式 (8.1.12)，与 ``sympy.physics.wigner.clebsch_gordan`` 一致。

References
----------
.. [Varshalovich] Varshalovich, D. A., Moskalev, A. N., & Khersonskii, V. K. (1988)
   "Quantum Theory of Angular Momentum", Eqs. (8.1.12), (8.2.1), (9.2.1)
   World Scientific
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from fractions import Fraction
from typing import Callable, Hashable

import sympy
from sympy.physics.wigner import clebsch_gordan as _sympy_clebsch_gordan
from sympy.physics.wigner import wigner_3j as _sympy_wigner_3j
from sympy.physics.wigner import wigner_6j as _sympy_wigner_6j

from .common import angroot, as_half_integer, twice
from .errors import DomainError

__all__ = [
    "wigner_3j",
    "wigner_6j",
    "clebsch_gordan_condon_shortley",
    "CoefficientCache",
    "CouplingKernel",
]


def _check_j(J: int, name: str = "j") -> None:
    if J < 0:
        raise DomainError(f"角动量 {name} 必须非负，实际 2{name}={J}")


def _check_jm(J: int, M: int) -> bool:
    """检查 (j, m) 配对：j-m 必须为整数；|m|>j 视为选择规则零。"""
    if (J + M) % 2:
        raise DomainError(f"j-m 必须为整数: j={Fraction(J, 2)}, m={Fraction(M, 2)}")
    return abs(M) <= J


def _triangle2(A: int, B: int, C: int) -> bool:
    return (A + B + C) % 2 == 0 and abs(A - B) <= C <= A + B


def _half(X: int) -> sympy.Rational:
    return sympy.Rational(X, 2)


def _finish(value, exact: bool):
    return sympy.sympify(value) if exact else float(value)


# ---------------------------------------------------------------------------
# Wigner-3j
# ---------------------------------------------------------------------------


def _wigner_3j2(J1, J2, J3, M1, M2, M3, exact: bool):
    for J, name in ((J1, "j1"), (J2, "j2"), (J3, "j3")):
        _check_j(J, name)
    in_range = all([_check_jm(J1, M1), _check_jm(J2, M2), _check_jm(J3, M3)])
    if M1 + M2 + M3 != 0 or not in_range or not _triangle2(J1, J2, J3):
        return sympy.Integer(0) if exact else 0.0
    value = _sympy_wigner_3j(*(_half(X) for X in (J1, J2, J3, M1, M2, M3)))
    return _finish(value, exact)


def wigner_3j(j1, j2, j3, m1, m2, m3, exact: bool = False):
    r"""计算 Wigner-3j 符号。

    .. math::

        \begin{pmatrix} j_1 & j_2 & j_3 \\ m_1 & m_2 & m_3 \end{pmatrix}

    Parameters
    ----------
    j1, j2, j3 : int | Fraction | float
        非负整数或半整数角动量。
    m1, m2, m3 : int | Fraction | float
        磁量子数，要求 :math:`j_i - m_i` 为整数。
    exact : bool, optional
        返回 sympy 精确数（默认返回 ``float``）。

    Returns
    -------
    float | sympy.Expr
        3j 符号；违反选择规则（:math:`\sum m_i \neq 0`、三角条件、:math:`|m_i|>j_i`）时为 0。

    Raises
    ------
    DomainError
        负角动量、非半整数输入或 :math:`j-m` 非整数。

    Examples
    --------
    >>> wigner_3j(1, 1, 0, 0, 0, 0)
    -0.5773502691896257
    >>> wigner_3j(1, 1, 0, 0, 0, 0, exact=True)
    -sqrt(3)/3
    """
    return _wigner_3j2(twice(j1), twice(j2), twice(j3), twice(m1), twice(m2), twice(m3), exact)


# ---------------------------------------------------------------------------
# Wigner-6j
# ---------------------------------------------------------------------------


def _wigner_6j2(J1, J2, J3, J4, J5, J6, exact: bool):
    for i, J in enumerate((J1, J2, J3, J4, J5, J6), start=1):
        _check_j(J, f"j{i}")
    triads = ((J1, J2, J3), (J1, J5, J6), (J4, J2, J6), (J4, J5, J3))
    if not all(_triangle2(*tr) for tr in triads):
        return sympy.Integer(0) if exact else 0.0
    value = _sympy_wigner_6j(*(_half(X) for X in (J1, J2, J3, J4, J5, J6)))
    return _finish(value, exact)


def wigner_6j(j1, j2, j3, j4, j5, j6, exact: bool = False):
    r"""计算 Wigner-6j 符号 :math:`\begin{Bmatrix} j_1 & j_2 & j_3 \\ j_4 & j_5 & j_6 \end{Bmatrix}`。

    四个三元组 :math:`(j_1 j_2 j_3), (j_1 j_5 j_6), (j_4 j_2 j_6), (j_4 j_5 j_3)`
    任一不满足三角条件时返回 0。

    Examples
    --------
    >>> wigner_6j(1, 1, 1, 1, 1, 1, exact=True)
    1/6
    """
    return _wigner_6j2(twice(j1), twice(j2), twice(j3), twice(j4), twice(j5), twice(j6), exact)


# ---------------------------------------------------------------------------
# Clebsch-Gordan
# ---------------------------------------------------------------------------


def _cg2(J1, M1, J2, M2, J3, M3, exact: bool):
    if M1 + M2 != M3:
        return sympy.Integer(0) if exact else 0.0
    for J, name in ((J1, "j1"), (J2, "j2"), (J3, "j3")):
        _check_j(J, name)
    in_range = all([_check_jm(J1, M1), _check_jm(J2, M2), _check_jm(J3, M3)])
    if not in_range or not _triangle2(J1, J2, J3):
        return sympy.Integer(0) if exact else 0.0
    value = _sympy_clebsch_gordan(*(_half(X) for X in (J1, J2, J3, M1, M2, M3)))
    return _finish(value, exact)


def clebsch_gordan_condon_shortley(j1, m1, j2, m2, j3, m3=None, exact: bool = False):
    r"""计算矢量耦合系数 :math:`\langle j_1 m_1, j_2 m_2 | j_3 m_3 \rangle`。

    采用 Condon-Shortley 相位约定与 Varshalovich (1988) 式 (8.1.12)。

    Parameters
    ----------
    j1, m1, j2, m2, j3
        量子数（整数或半整数）。
    m3 : optional
        默认 :math:`m_1+m_2`。
    exact : bool, optional
        返回 sympy 精确数。

    Returns
    -------
    float | sympy.Expr
        若 :math:`m_1+m_2 \neq m_3`、:math:`j_3` 不在 ``triangle_range(j1, j2)`` 中或
        :math:`|m_i|>j_i`，返回 0（物理零，不报错）。

    Examples
    --------
    >>> clebsch_gordan_condon_shortley(Fraction(1, 2), Fraction(1, 2), Fraction(1, 2), Fraction(-1, 2), 0)
    0.7071067811865476
    """
    if m3 is None:
        m3 = as_half_integer(m1) + as_half_integer(m2)
    return _cg2(twice(j1), twice(m1), twice(j2), twice(m2), twice(j3), twice(m3), exact)


# ---------------------------------------------------------------------------
# 缓存
# ---------------------------------------------------------------------------


class CoefficientCache:
    """耦合系数缓存（线程安全）。

    以 ``(种类, exact, 2j/2m 元组)`` 为键缓存 3j/6j 等纯函数结果。

    Parameters
    ----------
    maxsize : int | None, optional
        最大缓存条目数；``None``（默认）为不限容量，否则按 LRU 淘汰。

    Notes
    -----
    **并发**：查找与写入均在锁内完成；计算本身在锁外进行。两个线程同时
    未命中同一键时会各自计算一次，结果相同，后写入者覆盖先写入者，不会产生损坏条目。

    Examples
    --------
    >>> cache = CoefficientCache(maxsize=1024)
    >>> kernel = CouplingKernel(cache=cache)
    >>> kernel.wigner_3j(1, 1, 0, 0, 0, 0)
    -0.5773502691896257
    >>> len(cache)
    1
    """

    def __init__(self, maxsize: int | None = None):
        if maxsize is not None and (not isinstance(maxsize, int) or maxsize <= 0):
            raise ValueError(f"maxsize 必须为正整数或 None，当前值: {maxsize!r}")
        self.maxsize = maxsize
        self._data: OrderedDict[Hashable, object] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, key: Hashable, compute: Callable[[], object]):
        """返回缓存值；未命中时调用 ``compute()`` 并写入。"""
        with self._lock:
            if key in self._data:
                self.hits += 1
                if self.maxsize is not None:
                    self._data.move_to_end(key)
                return self._data[key]
            self.misses += 1

        value = compute()

        with self._lock:
            self._data[key] = value
            if self.maxsize is not None:
                self._data.move_to_end(key)
                while len(self._data) > self.maxsize:
                    self._data.popitem(last=False)
        return value

    def clear(self):
        """清空缓存与命中统计。"""
        with self._lock:
            self._data.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self):
        with self._lock:
            return len(self._data)

    def __contains__(self, key):
        with self._lock:
            return key in self._data


class CouplingKernel:
    """系数内核：持有求值模式（浮点/精确）与可选缓存。

    约化矩阵元、多极展开与能量表达式模块的所有函数都接受 ``kernel`` 参数，
    由调用方显式传入，而非依赖全局缓存。

    Parameters
    ----------
    exact : bool, optional
        为 ``True`` 时所有系数返回 sympy 精确数。
    cache : CoefficientCache | None, optional
        共享缓存；``None`` 表示不缓存。
    """

    def __init__(self, exact: bool = False, cache: CoefficientCache | None = None):
        self.exact = exact
        self.cache = cache

    def __repr__(self):
        return f"CouplingKernel(exact={self.exact}, cache={'on' if self.cache is not None else 'off'})"

    @property
    def zero(self):
        return sympy.Integer(0) if self.exact else 0.0

    @property
    def one(self):
        return sympy.Integer(1) if self.exact else 1.0

    def number(self, x):
        """将有理数/整数转换为当前模式下的数。"""
        if self.exact:
            f = Fraction(x)
            return sympy.Rational(f.numerator, f.denominator)
        return float(x)

    def angroot(self, *js):
        return angroot(*js, exact=self.exact)

    def _3j2(self, J1, J2, J3, M1, M2, M3):
        if self.cache is None:
            return _wigner_3j2(J1, J2, J3, M1, M2, M3, self.exact)
        key = ("3j", self.exact, J1, J2, J3, M1, M2, M3)
        return self.cache.get_or_compute(key, lambda: _wigner_3j2(J1, J2, J3, M1, M2, M3, self.exact))

    def wigner_3j(self, j1, j2, j3, m1, m2, m3):
        """同 :func:`wigner_3j`，经缓存。"""
        return self._3j2(twice(j1), twice(j2), twice(j3), twice(m1), twice(m2), twice(m3))

    def wigner_6j(self, j1, j2, j3, j4, j5, j6):
        """同 :func:`wigner_6j`，经缓存。"""
        args = (twice(j1), twice(j2), twice(j3), twice(j4), twice(j5), twice(j6))
        if self.cache is None:
            return _wigner_6j2(*args, self.exact)
        return self.cache.get_or_compute(("6j", self.exact) + args, lambda: _wigner_6j2(*args, self.exact))

    def clebsch_gordan(self, j1, m1, j2, m2, j3, m3=None):
        """同 :func:`clebsch_gordan_condon_shortley`，经缓存。"""
        if m3 is None:
            m3 = as_half_integer(m1) + as_half_integer(m2)
        args = (twice(j1), twice(m1), twice(j2), twice(m2), twice(j3), twice(m3))
        if self.cache is None:
            return _cg2(*args, self.exact)
        return self.cache.get_or_compute(("cg", self.exact) + args, lambda: _cg2(*args, self.exact))
