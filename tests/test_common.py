"""公共例程单元测试

测试 common.py 中的 powneg1、angroot、triangle_range 与半整数解析。
"""

from fractions import Fraction

import numpy as np
import pytest
import sympy

from angalg.common import angroot, as_half_integer, is_triangle, powneg1, triangle_range
from angalg.errors import DomainError


@pytest.mark.quick
def test_powneg1_integer_and_fraction():
    """(-1)^k 对整数与整数值 Fraction 一致。"""
    assert powneg1(0) == 1
    assert powneg1(3) == -1
    assert powneg1(-3) == -1
    assert powneg1(Fraction(4, 2)) == 1
    assert powneg1(Fraction(-2, 1)) == 1


@pytest.mark.quick
def test_powneg1_rejects_half_integer():
    """半整数指数没有实数定义。"""
    with pytest.raises(DomainError, match="整数指数"):
        powneg1(Fraction(1, 2))


@pytest.mark.quick
def test_angroot_float_and_exact():
    """∏(j1 j2) = sqrt((2j1+1)(2j2+1))。"""
    assert np.isclose(angroot(1), np.sqrt(3))
    assert np.isclose(angroot(Fraction(1, 2), 1), np.sqrt(6))
    assert angroot(0) == 1.0
    assert angroot(1, 2, exact=True) == sympy.sqrt(15)


def test_angroot_negative():
    """负角动量报错。"""
    with pytest.raises(DomainError, match="非负"):
        angroot(-1)


@pytest.mark.quick
def test_triangle_range_examples():
    """三角条件允许的 k（整数步长）。"""
    assert triangle_range(2, 3) == [1, 2, 3, 4, 5]
    assert triangle_range(1, 1) == [0, 1, 2]
    assert triangle_range(0, 0) == [0]
    assert triangle_range(Fraction(1, 2), Fraction(3, 2)) == [1, 2]
    assert triangle_range(Fraction(1, 2), 1) == [Fraction(1, 2), Fraction(3, 2)]


def test_triangle_range_invalid_is_empty():
    """非法输入返回空列表而非报错。"""
    assert triangle_range(-1, 2) == []
    assert triangle_range(Fraction(1, 3), 1) == []


def test_is_triangle():
    """三角条件与整数和条件。"""
    assert is_triangle(1, 1, 2)
    assert is_triangle(Fraction(1, 2), Fraction(1, 2), 0)
    assert not is_triangle(1, 1, 3)
    assert not is_triangle(Fraction(1, 2), 1, 1)


def test_as_half_integer_inputs():
    """int、float、字符串、sympy 输入均可解析。"""
    assert as_half_integer(2) == 2
    assert as_half_integer(0.5) == Fraction(1, 2)
    assert as_half_integer("3/2") == Fraction(3, 2)
    assert as_half_integer(sympy.Rational(-1, 2)) == Fraction(-1, 2)
    with pytest.raises(DomainError):
        as_half_integer(0.3)
    with pytest.raises(DomainError):
        as_half_integer(True)
