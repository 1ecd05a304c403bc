"""异常类型

角动量代数中区分两类情形：

- **物理零**：违反选择规则（三角条件、m 守恒、自旋不匹配），直接返回数值 0，不抛异常；
- **输入错误**：违反编程契约（|q| > k、秩不匹配、非半整数量子数等），立即抛出下列异常。

所有异常均派生自 :class:`ValueError`，调用方可统一捕获。
"""

from __future__ import annotations

__all__ = [
    "AngularMomentumError",
    "DomainError",
    "InvalidComponent",
    "RankMismatch",
]


class AngularMomentumError(ValueError):
    """角动量代数输入错误的基类。"""


class DomainError(AngularMomentumError):
    """量子数超出定义域（负角动量、非整数/半整数、要求整数却给出半整数）。"""


class InvalidComponent(AngularMomentumError):
    """张量分量越界：要求 :math:`|q| \\leq k`。"""


class RankMismatch(AngularMomentumError):
    """张量秩不相容（标量积要求同秩，张量积要求满足三角条件）。"""
