"""能量表达式装配测试

端到端验证：由行列式出发得到径向积分的线性组合。

- He 1s²：⟨1s 1s|g⁰|1s 1s⟩
- 1s2s 三重态：F⁰ - G⁰
- 2p² ³P（M_L=1, M_S=1）：F⁰ - F²/5
- 相对论 1s²：k=0 系数为 1
"""

from fractions import Fraction

import numpy as np
import pytest
import sympy

from angalg.energy import EnergyExpression, IntegrationConfig, Matrix, energy_expression, integrate_spinor
from angalg.operators import (
    CoulombInteraction,
    CoulombInteractionMultipole,
    FieldFreeHamiltonian,
    OneBodyHamiltonian,
    OrbitalMatrixElement,
)
from angalg.orbitals import Orbital, SpinOrbital, spin_configurations

HALF = Fraction(1, 2)
g = CoulombInteraction()
s1, s2, p2 = Orbital(1, 0), Orbital(2, 0), Orbital(2, 1)


def radial(a, b, k, c, d):
    return OrbitalMatrixElement((a, b), CoulombInteractionMultipole(k), (c, d))


@pytest.mark.energy
@pytest.mark.quick
def test_helium_ground_state():
    """He 1s²：唯一径向积分 F⁰(1s,1s)，系数 1。"""
    (config,) = spin_configurations("1s2")
    expr = energy_expression(g, config)
    assert isinstance(expr, EnergyExpression)
    assert expr == radial(s1, s1, 0, s1, s1)
    assert np.isclose(expr.coefficient(radial(s1, s1, 0, s1, s1)), 1.0)


@pytest.mark.energy
@pytest.mark.quick
def test_1s2s_triplet():
    """1s2s 两电子同为 α 自旋：直接积分减交换积分。"""
    config = (SpinOrbital(s1, (0, HALF)), SpinOrbital(s2, (0, HALF)))
    expr = energy_expression(g, config)
    assert len(expr) == 2
    assert np.isclose(expr.coefficient(radial(s1, s2, 0, s1, s2)), 1.0)
    assert np.isclose(expr.coefficient(radial(s1, s2, 0, s2, s1)), -1.0)


@pytest.mark.energy
def test_1s2s_singlet_component_has_no_exchange():
    """自旋相反时交换项被自旋选择规则消去。"""
    config = (SpinOrbital(s1, (0, HALF)), SpinOrbital(s2, (0, -HALF)))
    expr = energy_expression(g, config)
    assert expr == radial(s1, s2, 0, s1, s2)


@pytest.mark.energy
def test_2p2_triplet_p():
    """2p²（m_ℓ=1 α, m_ℓ=0 α）：F⁰ - F²/5（精确模式）。"""
    config = (SpinOrbital(p2, (1, HALF)), SpinOrbital(p2, (0, HALF)))
    expr = energy_expression(g, config, config=IntegrationConfig(exact=True))
    assert len(expr) == 2
    assert sympy.simplify(expr.coefficient(radial(p2, p2, 0, p2, p2)) - 1) == 0
    assert sympy.simplify(expr.coefficient(radial(p2, p2, 2, p2, p2)) + sympy.Rational(1, 5)) == 0


@pytest.mark.energy
def test_2p2_triplet_p_float():
    """浮点模式下得到同样的系数。"""
    config = (SpinOrbital(p2, (1, HALF)), SpinOrbital(p2, (0, HALF)))
    expr = energy_expression(g, config)
    assert np.isclose(expr.coefficient(radial(p2, p2, 0, p2, p2)), 1.0)
    assert np.isclose(expr.coefficient(radial(p2, p2, 2, p2, p2)), -0.2)


@pytest.mark.energy
def test_relativistic_helium():
    """相对论 1s²：k=0 系数为 1。"""
    (config,) = spin_configurations("1s2", relativistic=True)
    expr = energy_expression(g, config)
    ((integral, coeff),) = expr.items()
    assert integral.op == CoulombInteractionMultipole(0)
    assert np.isclose(coeff, 1.0)


@pytest.mark.energy
def test_field_free_hamiltonian_keeps_one_body_terms():
    """单体项保持为符号矩阵元。"""
    (config,) = spin_configurations("1s2")
    expr = energy_expression(FieldFreeHamiltonian(), config)
    a, b = config
    h = OneBodyHamiltonian()
    assert np.isclose(expr.coefficient(OrbitalMatrixElement((a,), h, (a,))), 1.0)
    assert np.isclose(expr.coefficient(OrbitalMatrixElement((b,), h, (b,))), 1.0)
    assert np.isclose(expr.coefficient(radial(s1, s1, 0, s1, s1)), 1.0)
    assert len(expr) == 3


@pytest.mark.energy
def test_matrix_shape_and_symmetry():
    """2p² 组态的库仑矩阵：形状与厄米性（径向积分实对称时）。"""
    configs = spin_configurations("2p2")
    M = Matrix(g, configs, config=IntegrationConfig(exact=True))
    assert M.shape == (15, 15)
    assert M.dtype == object
    for i in range(len(configs)):
        for j in range(len(configs)):
            a, b = M[i, j], M[j, i]
            # ⟨ab|g|cd⟩ 与 ⟨cd|g|ab⟩ 对实轨道相等，比较各 k 的系数和
            sum_a = sum(c for _, c in a.items())
            sum_b = sum(c for _, c in b.items())
            assert sympy.simplify(sum_a - sum_b) == 0


@pytest.mark.energy
def test_matrix_workers_agree_with_serial():
    """线程并行装配与串行结果一致。"""
    configs = spin_configurations("1s 2p")
    serial = Matrix(g, configs)
    parallel = Matrix(g, configs, config=IntegrationConfig(n_workers=4))
    assert serial.shape == parallel.shape == (12, 12)
    for a, b in zip(serial.ravel(), parallel.ravel()):
        assert a == b


@pytest.mark.energy
def test_matrix_rectangular_and_verbose(capsys):
    """指定 bra 组态得到长方矩阵，verbose 打印统计。"""
    kets = spin_configurations("1s2")
    bras = spin_configurations("1s 2s")
    M = Matrix(g, kets, bra_configurations=bras, config=IntegrationConfig(verbose=True))
    assert M.shape == (4, 1)
    assert "[energy]" in capsys.readouterr().out


@pytest.mark.energy
def test_integration_config_validation():
    """非法配置报错。"""
    with pytest.raises(ValueError, match="n_workers"):
        IntegrationConfig(n_workers=0)
    with pytest.raises(ValueError, match="atol"):
        IntegrationConfig(atol=-1.0)


@pytest.mark.energy
def test_integrate_spinor_and_as_sympy():
    """单项积分与 sympy 导出。"""
    (config,) = spin_configurations("1s2")
    a, b = config
    lc = integrate_spinor(OrbitalMatrixElement((a, b), g, (a, b)))
    assert lc == radial(s1, s1, 0, s1, s1)
    with pytest.raises(TypeError):
        integrate_spinor("not an integral")
    expr = energy_expression(g, config)
    symbol = sympy.Symbol("⟨1s 1s|ĝ⁽⁰⁾|1s 1s⟩")
    assert expr.as_sympy() == sympy.Float(1.0) * symbol
    assert expr.as_sympy(rationalize=True) == symbol
    assert expr.radial_integrals == [radial(s1, s1, 0, s1, s1)]


@pytest.mark.energy
def test_as_sympy_keeps_irrational_float_coefficients():
    """浮点无理系数原样保留为 sympy.Float，不被有理化。"""
    integral = radial(s1, p2, 1, p2, s1)
    value = -np.sqrt(2.0 / 3.0) / 7
    expr = EnergyExpression({integral: value})
    symbol = sympy.Symbol(str(integral))
    coeff = expr.as_sympy().coeff(symbol)
    assert isinstance(coeff, sympy.Float)
    assert np.isclose(float(coeff), value, rtol=1e-15, atol=0)
    exact = energy_expression(g, spin_configurations("1s2")[0], config=IntegrationConfig(exact=True))
    assert exact.as_sympy() == sympy.Symbol("⟨1s 1s|ĝ⁽⁰⁾|1s 1s⟩")
