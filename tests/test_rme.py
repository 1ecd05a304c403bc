"""约化矩阵元与 Wigner-Eckart 定理单元测试

- 球张量约化矩阵元的已知值与宇称选择规则
- 耦合态去耦公式与显式 CG 展开一致
- 张量积约化矩阵元与插入中间态求和一致
- 恒等式 C⁽ᵏ⁾·C⁽ᵏ⁾ = 1
"""

from fractions import Fraction

import numpy as np
import pytest
import sympy

from angalg.common import angroot
from angalg.coupling import CouplingKernel, clebsch_gordan_condon_shortley
from angalg.dipoles import cartesian_components, rhat
from angalg.errors import DomainError
from angalg.orbitals import Orbital, RelativisticOrbital, SpinOrbital
from angalg.rme import CoupledState, ranks, rme, uncouple_first, uncouple_second, wigner_eckart
from angalg.tensors import ComponentProduct, SphericalTensor, TensorProduct, dot

HALF = Fraction(1, 2)
C1, C2 = SphericalTensor(1), SphericalTensor(2)


def _ms(j):
    return [j - i for i in range(int(2 * j) + 1)]


@pytest.mark.rme
@pytest.mark.quick
def test_spherical_tensor_rme_values():
    """⟨ℓ'||C⁽ᵏ⁾||ℓ⟩ 的已知值。"""
    assert np.isclose(rme(1, C1, 0), 1.0)
    assert np.isclose(rme(0, C1, 1), -1.0)
    assert np.isclose(rme(1, C2, 1), -np.sqrt(6 / 5))
    assert rme(0, C1, 1, CouplingKernel(exact=True)) == -1


@pytest.mark.rme
@pytest.mark.quick
def test_spherical_tensor_parity_and_triangle_zero():
    """宇称或三角条件违反时约化矩阵元为零。"""
    assert rme(1, C1, 1) == 0.0
    assert rme(0, C2, 0) == 0.0
    assert rme(3, C1, 0) == 0.0


@pytest.mark.rme
def test_spherical_tensor_requires_integer_ell():
    """球张量不作用于半整数角动量。"""
    with pytest.raises(DomainError):
        rme(HALF, C1, HALF)


@pytest.mark.rme
@pytest.mark.quick
def test_wigner_eckart_dipole_z():
    """⟨0 0|ẑ|1 0⟩ = 1/√3。"""
    x, y, z = rhat
    assert np.isclose(wigner_eckart(0, 0, z, 1, 0), 1 / np.sqrt(3))
    assert np.isclose(wigner_eckart(0, 0, z, 1, 1), 0.0)
    assert wigner_eckart(0, 0, C1[0], 1, 1) == 0.0
    exact = wigner_eckart(0, 0, C1[0], 1, 0, kernel=CouplingKernel(exact=True))
    assert sympy.simplify(exact - 1 / sympy.sqrt(3)) == 0


@pytest.mark.rme
def test_dipole_cartesian_components():
    """x、y 分量连接 m=±1，z 分量保持 m。"""
    x, y, z = cartesian_components(C1)
    # ⟨1 ±1|x|0 0⟩ = ∓1/√6
    assert np.isclose(wigner_eckart(1, 1, x, 0, 0), -1 / np.sqrt(6))
    assert np.isclose(wigner_eckart(1, -1, x, 0, 0), 1 / np.sqrt(6))
    assert np.isclose(wigner_eckart(1, 1, y, 0, 0), 1j / np.sqrt(6))
    assert np.isclose(wigner_eckart(1, 0, z, 0, 0), 1 / np.sqrt(3))
    with pytest.raises(ValueError):
        cartesian_components(C2)


@pytest.mark.rme
def test_wigner_eckart_spin_orbitals():
    """三参数形式：非相对论自旋轨道要求 m_s 相同。"""
    s = SpinOrbital(Orbital(1, 0), (0, HALF))
    p_up = SpinOrbital(Orbital(2, 1), (0, HALF))
    p_down = SpinOrbital(Orbital(2, 1), (0, -HALF))
    assert np.isclose(wigner_eckart(s, C1[0], p_up), 1 / np.sqrt(3))
    assert wigner_eckart(s, C1[0], p_down) == 0.0
    with pytest.raises(TypeError):
        wigner_eckart(s, C1[0])


@pytest.mark.rme
def test_uncoupling_matches_explicit_cg_sum():
    """耦合态 |ℓ ½ j⟩ 上的矩阵元等于对 CG 展开显式求和。"""
    kernel = CouplingKernel()
    for ell_p, ell, k in ((1, 0, 1), (1, 1, 2), (2, 1, 1), (2, 2, 2)):
        for jp in (ell_p - HALF, ell_p + HALF):
            for j in (ell - HALF, ell + HALF):
                if jp < 0 or j < 0:
                    continue
                bra, ket = CoupledState(ell_p, HALF, jp), CoupledState(ell, HALF, j)
                for mp in _ms(jp):
                    for m in _ms(j):
                        for q in range(-k, k + 1):
                            coupled = wigner_eckart(bra, mp, SphericalTensor(k)[q], ket, m, kernel=kernel)
                            explicit = 0.0
                            for ms in (-HALF, HALF):
                                ml, mlp = m - ms, mp - ms
                                if abs(ml) > ell or abs(mlp) > ell_p:
                                    continue
                                explicit += (
                                    clebsch_gordan_condon_shortley(ell_p, mlp, HALF, ms, jp, mp)
                                    * clebsch_gordan_condon_shortley(ell, ml, HALF, ms, j, m)
                                    * wigner_eckart(ell_p, mlp, SphericalTensor(k)[q], ell, ml)
                                )
                            assert np.isclose(coupled, explicit, atol=1e-13)


@pytest.mark.rme
def test_uncouple_second_symmetry():
    """作用于第二子系统的去耦与交换子系统后的第一子系统去耦只差相位。"""
    j1, j2p, j2, k = 1, 2, 1, 1
    for J in (1, 2):
        for Jp in (1, 2, 3):
            second = uncouple_second(j1, j2p, Jp, j2, J, k, 1.0)
            first = uncouple_first(j2p, j1, Jp, j2, J, k, 1.0)
            phase = (-1) ** (j1 + j2 - J + j1 + j2p - Jp)
            assert np.isclose(second, phase * first)


@pytest.mark.rme
def test_relativistic_orbital_rme():
    """相对论轨道 ⟨2p-||C⁽¹⁾||1s⟩。"""
    value = rme(RelativisticOrbital(2, 1), C1, RelativisticOrbital(1, -1))
    bra, ket = CoupledState(1, HALF, HALF), CoupledState(0, HALF, HALF)
    assert np.isclose(value, rme(bra, C1, ket))
    assert np.isclose(value, -np.sqrt(2 / 3))


@pytest.mark.rme
def test_spin_orbital_rme_requires_same_spin():
    """非相对论自旋轨道的约化矩阵元含 δ(m_s)。"""
    s_up = SpinOrbital(Orbital(1, 0), (0, HALF))
    p_up = SpinOrbital(Orbital(2, 1), (1, HALF))
    p_down = SpinOrbital(Orbital(2, 1), (1, -HALF))
    assert np.isclose(rme(p_up, C1, s_up), 1.0)
    assert rme(p_down, C1, s_up) == 0.0


@pytest.mark.rme
def test_scalar_product_identity():
    """C⁽ᵏ⁾·C⁽ᵏ⁾ 在同一坐标上等于 1，故 ⟨ℓ||C·C||ℓ⟩ = ∏(ℓ)。"""
    kernel = CouplingKernel(exact=True)
    for ell in range(4):
        for k in range(3):
            value = rme(ell, dot(SphericalTensor(k), SphericalTensor(k)), ell, kernel)
            assert sympy.simplify(value - angroot(ell, exact=True)) == 0


@pytest.mark.rme
def test_tensor_product_rme_matches_intermediate_states():
    """张量积约化矩阵元与分量乘积插入中间态求和一致。"""
    kernel = CouplingKernel()
    for K in (0, 1, 2):
        X = TensorProduct(C1, C1, K)
        for ell_p, ell in ((1, 1), (2, 0), (0, 2), (2, 2)):
            for Q in range(-K, K + 1):
                expansion = X.component_expansion(Q, kernel)
                for m in range(-ell, ell + 1):
                    mp = m + Q
                    if abs(mp) > ell_p:
                        continue
                    by_components = wigner_eckart(ell_p, mp, expansion, ell, m, kernel=kernel)
                    by_reduced = wigner_eckart(ell_p, mp, X[Q], ell, m, kernel=kernel)
                    assert np.isclose(by_components, by_reduced, atol=1e-13)


@pytest.mark.rme
def test_component_product_scalar_expansion():
    """Σ_q (-1)^q ⟨ℓm|C_q C_{-q}|ℓm⟩ = 1。"""
    expansion = dot(C2, C2).component_expansion()
    assert all(isinstance(atom, ComponentProduct) for atom in expansion.atoms)
    for ell in (1, 2):
        for m in range(-ell, ell + 1):
            assert np.isclose(wigner_eckart(ell, m, expansion, ell, m), 1.0)


@pytest.mark.rme
@pytest.mark.quick
def test_ranks_parity_filter():
    """球张量的秩满足三角与宇称条件。"""
    assert ranks(1, SphericalTensor, 1) == [0, 2]
    assert ranks(0, SphericalTensor, 1) == [1]
    assert ranks(2, SphericalTensor, 1) == [1, 3]
    assert ranks(Orbital(3, 2), SphericalTensor, Orbital(4, 2)) == [0, 2, 4]
    assert ranks(RelativisticOrbital(2, 1), SphericalTensor, RelativisticOrbital(2, -2)) == [2]
    assert ranks(1, TensorProduct, 1) == [0, 1, 2]
    with pytest.raises(TypeError):
        ranks(1, "C", 1)
