"""线性组合单元测试

测试 linear_combination.py：合并同类项、删除零项与可线性组合原子的算术。
"""

from dataclasses import dataclass

import pytest
import sympy

from angalg.linear_combination import LinearCombination, is_linearly_combinable, linearly_combinable


@linearly_combinable
@dataclass(frozen=True)
class Sym:
    name: str

    def __str__(self):
        return self.name


x, y, z = Sym("x"), Sym("y"), Sym("z")


@pytest.mark.tensor
@pytest.mark.quick
def test_atom_arithmetic_builds_combinations():
    """原子间的算术得到线性组合。"""
    lc = 4 * x - 5 * y
    assert isinstance(lc, LinearCombination)
    assert lc.coefficient(x) == 4
    assert lc.coefficient(y) == -5
    assert lc.coefficient(z) == 0
    assert is_linearly_combinable(x)
    assert not is_linearly_combinable(lc)


@pytest.mark.tensor
@pytest.mark.quick
def test_like_terms_merge_and_zero_terms_vanish():
    """相同原子合并，系数为零的项被删除。"""
    assert (2 * x) + (3 * x) == 5 * x
    assert len(x - x) == 0
    assert x - x == 0
    lc = x + y - y
    assert lc.atoms == [x]
    assert lc == x


@pytest.mark.tensor
def test_equality_ignores_insertion_order():
    """相等性与插入顺序无关。"""
    assert x + 2 * y == 2 * y + x
    assert LinearCombination({x: 1, y: 2}) == LinearCombination([y, x], [2, 1])


@pytest.mark.tensor
def test_scalar_multiplication_and_division():
    """数乘、除法与取负。"""
    lc = 3 * x + y
    assert 2 * lc == 6 * x + 2 * y
    assert lc * 2 == 6 * x + 2 * y
    assert (lc / 2).coefficient(x) == 1.5
    assert -lc == -3 * x - y
    assert (x / 2).coefficient(x) == 0.5
    half = (x / sympy.Integer(2)).coefficient(x)
    assert half == sympy.Rational(1, 2)


@pytest.mark.tensor
def test_sum_builtin():
    """内置 sum 以 0 为初值也可用。"""
    total = sum([x, y, 2 * x])
    assert total == 3 * x + y


@pytest.mark.tensor
def test_atol_drops_roundoff():
    """atol 把浮点舍入残差视为零。"""
    lc = LinearCombination(atol=1e-12)
    lc.add_term(x, 0.1 + 0.2)
    lc.add_term(x, -0.3)
    assert len(lc) == 0


@pytest.mark.tensor
def test_expand_maps_atoms():
    """expand 把原子替换为线性组合并按系数求和。"""
    lc = 2 * x + y
    expanded = lc.expand(lambda a: z + a)
    assert expanded == 3 * z + 2 * x + y
    with pytest.raises(TypeError, match="expand"):
        lc.expand(lambda a: 1)


@pytest.mark.tensor
def test_str_is_sorted():
    """字符串按原子排序，负号合并。"""
    assert str(-y + 2 * x) == "2 x - y"
    assert str(LinearCombination()) == "0"


@pytest.mark.tensor
def test_mismatched_lengths():
    """原子与系数个数不一致时报错。"""
    with pytest.raises(ValueError, match="不一致"):
        LinearCombination([x, y], [1])


@pytest.mark.tensor
def test_complex_coefficients():
    """复系数与 sympy 系数都可作为标量。"""
    lc = 1j * x + sympy.sqrt(2) * y
    assert lc.coefficient(x) == 1j
    assert lc.coefficient(y) == sympy.sqrt(2)
