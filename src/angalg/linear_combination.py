r"""通用线性组合

任意"原子"对象（张量分量、张量本身、径向积分符号……）都可以组成线性组合

.. math::

    X = \sum_i c_i\, x_i

本模块只实现一次加法、减法、数乘与化简（合并相同原子、删除零系数），
再通过类装饰器 :func:`linearly_combinable` 把这些算术赋予任意原子类型，
避免为每种具体类型重复推导。

示例
====

.. code-block:: python

    @linearly_combinable
    @dataclass(frozen=True)
    class Sym:
        name: str

    x, y = Sym("x"), Sym("y")
    4 * x - 5 * y          # LinearCombination: 4 x - 5 y
    (2 * x) + (3 * x)      # 5 x
    x - x                  # 空组合
"""

from __future__ import annotations

from collections.abc import Mapping
from numbers import Number

import sympy

__all__ = [
    "LinearCombination",
    "linearly_combinable",
    "is_linearly_combinable",
]


def is_linearly_combinable(x) -> bool:
    """判断对象是否为可线性组合的原子。"""
    return bool(getattr(type(x), "_linearly_combinable", False))


def _is_scalar(x) -> bool:
    if isinstance(x, LinearCombination) or is_linearly_combinable(x):
        return False
    return isinstance(x, (Number, sympy.Basic))


def _format_coeff(c) -> str:
    if c == 1:
        return ""
    if c == -1:
        return "-"
    if isinstance(c, complex) or (isinstance(c, sympy.Basic) and c.is_Add):
        return f"({c}) "
    return f"{c} "


class LinearCombination:
    """原子到系数的映射，表示一般线性组合。

    Parameters
    ----------
    terms : Mapping | Sequence | None
        ``{原子: 系数}`` 映射，或原子序列（此时需同时给出 ``coeffs``）。
    coeffs : Sequence | None
        与 ``terms`` 等长的系数序列。
    atol : float, optional
        浮点系数的零判据；默认 0 表示仅删除精确为零的项。

    Notes
    -----
    **不变量**：任何原子都不会映射到零系数；相等的原子（结构相等）系数相加。
    插入顺序不影响相等性，``str`` 按原子字符串排序以保证输出稳定。
    """

    def __init__(self, terms=None, coeffs=None, atol: float = 0.0):
        self.atol = atol
        self._terms: dict = {}
        if terms is None:
            return
        if isinstance(terms, Mapping):
            items = terms.items()
        else:
            terms = list(terms)
            coeffs = [1] * len(terms) if coeffs is None else list(coeffs)
            if len(terms) != len(coeffs):
                raise ValueError(f"原子数 ({len(terms)}) 与系数个数 ({len(coeffs)}) 不一致")
            items = zip(terms, coeffs)
        for atom, c in items:
            self.add_term(atom, c)

    # -- 基本访问 ---------------------------------------------------------

    def _is_zero(self, c) -> bool:
        if c == 0:
            return True
        return bool(self.atol) and abs(c) <= self.atol

    def _new(self):
        return type(self)(atol=self.atol)

    def add_term(self, atom, coeff=1):
        """原地累加 ``coeff * atom``，系数变为零时删除该项。"""
        if isinstance(atom, LinearCombination):
            for a, c in atom.items():
                self.add_term(a, coeff * c)
            return self
        c = self._terms.get(atom, 0) + coeff
        if self._is_zero(c):
            self._terms.pop(atom, None)
        else:
            self._terms[atom] = c
        return self

    def copy(self):
        lc = self._new()
        lc._terms = dict(self._terms)
        return lc

    def items(self):
        return self._terms.items()

    @property
    def atoms(self) -> list:
        return list(self._terms)

    def coefficient(self, atom):
        """返回 ``atom`` 的系数（不存在时为 0）。"""
        return self._terms.get(atom, 0)

    def __getitem__(self, atom):
        return self._terms[atom]

    def __contains__(self, atom):
        return atom in self._terms

    def __iter__(self):
        return iter(self._terms.items())

    def __len__(self):
        return len(self._terms)

    def __bool__(self):
        return bool(self._terms)

    def expand(self, f):
        r"""将每个原子替换为 ``f(atom)``（原子、线性组合或标量）并按系数求和。"""
        out = self._new()
        for atom, c in self._terms.items():
            image = f(atom)
            if _is_scalar(image):
                raise TypeError(f"expand 的像必须为原子或线性组合，实际: {image!r}")
            out.add_term(image, c)
        return out

    # -- 算术 -------------------------------------------------------------

    def _merge(self, other, sign):
        if isinstance(other, LinearCombination):
            out = self.copy()
            for a, c in other.items():
                out.add_term(a, sign * c)
            return out
        if is_linearly_combinable(other):
            return self.copy().add_term(other, sign)
        return NotImplemented

    def __add__(self, other):
        if _is_scalar(other) and other == 0:
            return self.copy()
        return self._merge(other, 1)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if _is_scalar(other) and other == 0:
            return self.copy()
        return self._merge(other, -1)

    def __rsub__(self, other):
        out = -self
        if _is_scalar(other) and other == 0:
            return out
        return out._merge(other, 1)

    def __neg__(self):
        return self * -1

    def __mul__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        out = self._new()
        for a, c in self._terms.items():
            out.add_term(a, c * other)
        return out

    def __rmul__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        out = self._new()
        for a, c in self._terms.items():
            out.add_term(a, other * c)
        return out

    def __truediv__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        return self * (1 / other if isinstance(other, Number) else sympy.Integer(1) / other)

    # -- 比较与显示 ---------------------------------------------------------

    def __eq__(self, other):
        if isinstance(other, LinearCombination):
            return self._terms == other._terms
        if is_linearly_combinable(other):
            return self._terms == {other: 1}
        if _is_scalar(other) and other == 0:
            return not self._terms
        return NotImplemented

    __hash__ = None

    def __str__(self):
        if not self._terms:
            return "0"
        parts = []
        for atom, c in sorted(self._terms.items(), key=lambda kv: str(kv[0])):
            s = f"{_format_coeff(c)}{atom}"
            if parts:
                parts.append(f"- {s[1:]}" if s.startswith("-") else f"+ {s}")
            else:
                parts.append(s)
        return " ".join(parts)

    def __repr__(self):
        return f"{type(self).__name__}({self})"


def linearly_combinable(cls):
    """类装饰器：使 ``cls`` 的实例成为可线性组合的原子。

    为 ``cls`` 补充 ``+``、``-``、一元 ``-``、标量 ``*`` 与 ``/``，
    运算结果为 :class:`LinearCombination`。``cls`` 自行定义的同名方法不会被覆盖。
    """

    def _lift(self):
        return LinearCombination({self: 1})

    def __add__(self, other):
        return _lift(self).__add__(other)

    def __radd__(self, other):
        return _lift(self).__radd__(other)

    def __sub__(self, other):
        return _lift(self).__sub__(other)

    def __rsub__(self, other):
        return _lift(self).__rsub__(other)

    def __neg__(self):
        return LinearCombination({self: -1})

    def __mul__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        return LinearCombination({self: other})

    def __rmul__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        return LinearCombination({self: other})

    def __truediv__(self, other):
        return _lift(self).__truediv__(other)

    methods = {
        "__add__": __add__,
        "__radd__": __radd__,
        "__sub__": __sub__,
        "__rsub__": __rsub__,
        "__neg__": __neg__,
        "__mul__": __mul__,
        "__rmul__": __rmul__,
        "__truediv__": __truediv__,
    }
    for name, fn in methods.items():
        if name not in cls.__dict__:
            setattr(cls, name, fn)
    cls._linearly_combinable = True
    return cls
