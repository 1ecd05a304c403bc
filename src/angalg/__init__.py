"""angalg 包
=================

角动量耦合代数的符号引擎：把原子结构计算中的矩阵元化为径向积分的线性组合。

- 耦合系数：Wigner-3j/6j、Clebsch-Gordan（浮点或 sympy 精确），带线程安全缓存
- 张量代数：球张量、张量积、标量积及其任意线性组合
- 约化矩阵元与 Wigner-Eckart 定理（含耦合态去耦）
- 双电子算子的多极展开（库仑相互作用）
- 基于 Slater-Condon 规则的能量表达式装配

注：本项目所有文档与注释均使用中文，Docstring 采用 Sphinx + NumPy 风格，公式使用 ``:math:`` 标记。
"""

from angalg.common import angroot, powneg1, triangle_range
from angalg.coupling import (
    CoefficientCache,
    CouplingKernel,
    clebsch_gordan_condon_shortley,
    wigner_3j,
    wigner_6j,
)
from angalg.errors import AngularMomentumError, DomainError, InvalidComponent, RankMismatch
from angalg.linear_combination import LinearCombination, linearly_combinable
from angalg.tensors import SphericalTensor, TensorComponent, TensorProduct, TensorScalarProduct, dot
from angalg.orbitals import Orbital, RelativisticOrbital, SpinOrbital, spin_configurations
from angalg.rme import CoupledState, rme, ranks, wigner_eckart
from angalg.operators import CoulombInteraction, CoulombInteractionMultipole, CoulombPotentialMultipole, FieldFreeHamiltonian, OneBodyHamiltonian, OrbitalMatrixElement
from angalg.multipole import multipole_expand, multipole_expand_scalar_product
from angalg.terms import slater_condon_terms
from angalg.energy import EnergyExpression, IntegrationConfig, Matrix, energy_expression, integrate_spinor, integrate_spinors

__all__ = [
    "angroot",
    "powneg1",
    "triangle_range",
    "CoefficientCache",
    "CouplingKernel",
    "clebsch_gordan_condon_shortley",
    "wigner_3j",
    "wigner_6j",
    "AngularMomentumError",
    "DomainError",
    "InvalidComponent",
    "RankMismatch",
    "LinearCombination",
    "linearly_combinable",
    "SphericalTensor",
    "TensorComponent",
    "TensorProduct",
    "TensorScalarProduct",
    "dot",
    "Orbital",
    "RelativisticOrbital",
    "SpinOrbital",
    "spin_configurations",
    "CoupledState",
    "rme",
    "ranks",
    "wigner_eckart",
    "CoulombInteraction",
    "CoulombInteractionMultipole",
    "CoulombPotentialMultipole",
    "FieldFreeHamiltonian",
    "OneBodyHamiltonian",
    "OrbitalMatrixElement",
    "multipole_expand",
    "multipole_expand_scalar_product",
    "slater_condon_terms",
    "EnergyExpression",
    "IntegrationConfig",
    "Matrix",
    "energy_expression",
    "integrate_spinor",
    "integrate_spinors",
]

__version__ = "0.1.0"
