r"""偶极算子的角向部分

偶极算子是秩 1 的笛卡尔张量，可用秩 1 球张量表示：

.. math::

    \hat{\vec{r}} \equiv
    \begin{bmatrix}\hat{x}\\ \hat{y}\\ \hat{z}\end{bmatrix}
    \equiv
    \begin{bmatrix}
    \frac{1}{\sqrt{2}}[-\tensor{C}^{(1)}_1 + \tensor{C}^{(1)}_{-1}]\\
    \frac{\mathrm{i}}{\sqrt{2}}[\tensor{C}^{(1)}_1 + \tensor{C}^{(1)}_{-1}]\\
    \tensor{C}^{(1)}_0
    \end{bmatrix}

Examples
--------
>>> from angalg.rme import wigner_eckart
>>> wigner_eckart(0, 0, rhat[2], 1, 0)
0.5773502691896257
"""

from __future__ import annotations

import math

from .linear_combination import LinearCombination
from .tensors import SphericalTensor

__all__ = ["rhat", "cartesian_components"]


def cartesian_components(k1: SphericalTensor) -> tuple[LinearCombination, LinearCombination, LinearCombination]:
    """把秩 1 张量的球分量组合为笛卡尔分量 (x, y, z)。"""
    if k1.rank != 1:
        raise ValueError(f"笛卡尔分量只对秩 1 张量有定义，实际秩: {k1.rank}")
    s = 1 / math.sqrt(2)
    x = s * (-k1[1] + k1[-1])
    y = 1j * s * (k1[1] + k1[-1])
    z = LinearCombination({k1[0]: 1})
    return x, y, z


rhat = cartesian_components(SphericalTensor(1))
