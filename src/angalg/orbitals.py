r"""轨道与自旋轨道

这里给出代数引擎所需的最小轨道数据模型（只读不可变记录）：

- :class:`Orbital`：非相对论轨道 :math:`n\ell`（如 ``2p``）
- :class:`RelativisticOrbital`：相对论轨道 :math:`n\kappa`（如 ``2p-`` 即 :math:`2p_{1/2}`）
- :class:`SpinOrbital`：带投影量子数的自旋轨道：
  非相对论为 :math:`(m_\ell, m_s)`，相对论为 :math:`(m_j,)`

以及按组态字符串枚举 Slater 行列式的辅助函数 :func:`spin_configurations`。

约定
====

- 相对论轨道 :math:`\kappa<0` 对应 :math:`j=\ell+1/2`，:math:`\kappa>0` 对应 :math:`j=\ell-1/2`；
  标签中 ``-`` 后缀表示 :math:`j=\ell-1/2`。
- 半整数以 :class:`fractions.Fraction` 存储。
"""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass
from fractions import Fraction
from typing import Union

from .common import as_half_integer, pretty_half
from .errors import DomainError

__all__ = [
    "SPECTROSCOPIC",
    "SPIN_HALF",
    "Orbital",
    "RelativisticOrbital",
    "SpinOrbital",
    "Configuration",
    "parse_orbital",
    "spin_orbitals",
    "spin_configurations",
    "jm_j",
    "spin",
]

SPECTROSCOPIC = "spdfghiklmnoqrtuv"
SPIN_HALF = Fraction(1, 2)


def _ell_letter(ell: int) -> str:
    if ell < len(SPECTROSCOPIC):
        return SPECTROSCOPIC[ell]
    return f"[{ell}]"


@dataclass(frozen=True, order=True)
class Orbital:
    r"""非相对论轨道 :math:`n\ell`。

    Attributes
    ----------
    n : int
        主量子数（:math:`n \geq 1`）。
    ell : int
        轨道角动量（:math:`0 \leq \ell < n`）。
    """

    n: int
    ell: int

    def __post_init__(self):
        if self.n < 1 or not 0 <= self.ell < self.n:
            raise DomainError(f"非法轨道量子数: n={self.n}, ell={self.ell}")

    @property
    def j(self) -> int:
        """空间部分的角动量即 :math:`\\ell`。"""
        return self.ell

    @property
    def degeneracy(self) -> int:
        return 2 * (2 * self.ell + 1)

    def __str__(self):
        return f"{self.n}{_ell_letter(self.ell)}"

    __repr__ = __str__


@dataclass(frozen=True, order=True)
class RelativisticOrbital:
    r"""相对论轨道 :math:`n\kappa`。"""

    n: int
    kappa: int

    def __post_init__(self):
        if self.kappa == 0 or self.n < 1 or self.ell >= self.n:
            raise DomainError(f"非法相对论轨道量子数: n={self.n}, kappa={self.kappa}")

    @classmethod
    def from_ell_j(cls, n: int, ell: int, j) -> "RelativisticOrbital":
        j = as_half_integer(j)
        if j == ell + SPIN_HALF:
            return cls(n, -(ell + 1))
        if j == ell - SPIN_HALF and ell > 0:
            return cls(n, ell)
        raise DomainError(f"j={j} 与 ell={ell} 不相容")

    @property
    def ell(self) -> int:
        return -self.kappa - 1 if self.kappa < 0 else self.kappa

    @property
    def j(self) -> Fraction:
        return Fraction(2 * abs(self.kappa) - 1, 2)

    @property
    def degeneracy(self) -> int:
        return 2 * abs(self.kappa)

    def __str__(self):
        return f"{self.n}{_ell_letter(self.ell)}{'-' if self.kappa > 0 else ''}"

    __repr__ = __str__


AnyOrbital = Union[Orbital, RelativisticOrbital]


@dataclass(frozen=True)
class SpinOrbital:
    r"""自旋轨道。

    Attributes
    ----------
    orb : Orbital | RelativisticOrbital
        空间（或相对论）轨道。
    m : tuple
        非相对论：:math:`(m_\ell, m_s)`；相对论：:math:`(m_j,)`。
    """

    orb: AnyOrbital
    m: tuple

    def __post_init__(self):
        m = tuple(self.m)
        if isinstance(self.orb, Orbital):
            if len(m) != 2:
                raise DomainError(f"非相对论自旋轨道需要 (m_ell, m_s)，实际: {m!r}")
            ml, ms = as_half_integer(m[0]), as_half_integer(m[1])
            if ml.denominator != 1 or abs(ml) > self.orb.ell:
                raise DomainError(f"m_ell={m[0]} 与 ell={self.orb.ell} 不相容")
            if abs(ms) != SPIN_HALF:
                raise DomainError(f"m_s 必须为 ±1/2，实际: {m[1]!r}")
            m = (int(ml), ms)
        elif isinstance(self.orb, RelativisticOrbital):
            if len(m) != 1:
                raise DomainError(f"相对论自旋轨道需要 (m_j,)，实际: {m!r}")
            mj = as_half_integer(m[0])
            if (self.orb.j - mj).denominator != 1 or abs(mj) > self.orb.j:
                raise DomainError(f"m_j={m[0]} 与 j={self.orb.j} 不相容")
            m = (mj,)
        else:
            raise TypeError(f"未知轨道类型: {self.orb!r}")
        object.__setattr__(self, "m", m)

    @property
    def relativistic(self) -> bool:
        return isinstance(self.orb, RelativisticOrbital)

    @property
    def ell(self) -> int:
        return self.orb.ell

    def __str__(self):
        if self.relativistic:
            return f"{self.orb}({self.m[0]})"
        ml, ms = self.m
        ml_label = f"{ml:+d}" if ml else "0"
        return f"{self.orb}{ml_label}{'α' if ms > 0 else 'β'}"

    __repr__ = __str__


Configuration = tuple


def jm_j(o):
    r"""返回自旋轨道的角动量及其 z 投影。

    非相对论自旋轨道返回 :math:`(\ell, m_\ell)`（自旋由 :func:`spin` 单独给出），
    相对论自旋轨道返回 :math:`(j, m_j)`。
    """
    if not isinstance(o, SpinOrbital):
        raise TypeError(f"jm_j 需要 SpinOrbital，实际: {o!r}")
    if o.relativistic:
        return pretty_half(o.orb.j), pretty_half(o.m[0])
    return o.orb.ell, o.m[0]


def spin(o) -> Fraction:
    """返回非相对论自旋轨道的 :math:`m_s`。"""
    if not isinstance(o, SpinOrbital) or o.relativistic:
        raise TypeError(f"spin 仅对非相对论自旋轨道有定义: {o!r}")
    return o.m[1]


_ORBITAL_RE = re.compile(r"^(\d+)([a-z]|\[\d+\])(-?)$")
_SHELL_RE = re.compile(r"^(\d+)([a-z]|\[\d+\])(-?)(\d*)$")


def _ell_from_letter(letter: str) -> int:
    if letter.startswith("["):
        return int(letter[1:-1])
    idx = SPECTROSCOPIC.find(letter)
    if idx < 0:
        raise ValueError(f"未知的轨道字母: {letter!r}")
    return idx


def _make_orbital(n: str, letter: str, minus: str, rel: bool | None) -> AnyOrbital:
    ell = _ell_from_letter(letter)
    if minus:
        return RelativisticOrbital(int(n), ell)
    if rel:
        return RelativisticOrbital(int(n), -(ell + 1))
    return Orbital(int(n), ell)


def parse_orbital(label: str, relativistic: bool = False) -> AnyOrbital:
    """解析轨道标签。

    ``"2p"`` 给出 :class:`Orbital`；``"2p-"`` 或 ``relativistic=True`` 时给出
    :class:`RelativisticOrbital`。

    Examples
    --------
    >>> parse_orbital("2p")
    2p
    >>> parse_orbital("2p-").j
    Fraction(1, 2)
    """
    m = _ORBITAL_RE.match(label.strip())
    if m is None:
        raise ValueError(f"无法解析的轨道标签: {label!r}")
    return _make_orbital(*m.groups(), relativistic)


def spin_orbitals(orb: AnyOrbital) -> list[SpinOrbital]:
    """按固定顺序列出轨道的全部自旋轨道。"""
    if isinstance(orb, RelativisticOrbital):
        j2 = int(2 * orb.j)
        return [SpinOrbital(orb, (Fraction(mj2, 2),)) for mj2 in range(-j2, j2 + 1, 2)]
    return [
        SpinOrbital(orb, (ml, ms))
        for ml in range(-orb.ell, orb.ell + 1)
        for ms in (SPIN_HALF, -SPIN_HALF)
    ]


def spin_configurations(config: str, relativistic: bool = False) -> list[tuple]:
    r"""枚举组态的全部 Slater 行列式（自旋组态）。

    Parameters
    ----------
    config : str
        以空格分隔的壳层，如 ``"1s2 2p2"``；占据数缺省为 1。
        相对论壳层用 ``-`` 后缀，如 ``"2p-2 2p3"``。
    relativistic : bool, optional
        将无后缀的壳层解释为 :math:`j=\ell+1/2` 的相对论壳层。

    Returns
    -------
    list[tuple[SpinOrbital, ...]]
        每个元素为一个行列式（有序自旋轨道元组）。

    Examples
    --------
    >>> len(spin_configurations("1s2 2p2"))
    15
    """
    shells = []
    for token in config.split():
        m = _SHELL_RE.match(token)
        if m is None:
            raise ValueError(f"无法解析的壳层: {token!r}")
        n, letter, minus, occ = m.groups()
        orb = _make_orbital(n, letter, minus, relativistic)
        occ = int(occ) if occ else 1
        if not 0 < occ <= orb.degeneracy:
            raise ValueError(f"壳层 {token} 占据数 {occ} 超出简并度 {orb.degeneracy}")
        shells.append(list(itertools.combinations(spin_orbitals(orb), occ)))
    return [sum(choice, ()) for choice in itertools.product(*shells)]
