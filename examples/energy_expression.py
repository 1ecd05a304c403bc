#!/usr/bin/env python
"""能量表达式计算入口。

对给定组态的全部 Slater 行列式装配哈密顿量矩阵，输出各矩阵元的径向积分展开。
"""

import argparse
import json
import sys
import time
from pathlib import Path

# 添加 src 到路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from angalg.energy import IntegrationConfig, Matrix
from angalg.operators import CoulombInteraction, FieldFreeHamiltonian, OneBodyHamiltonian
from angalg.orbitals import spin_configurations


def build_operator(name):
    """根据参数选择算子。"""
    if name == "H":
        return FieldFreeHamiltonian()
    elif name == "g":
        return CoulombInteraction()
    elif name == "h":
        return OneBodyHamiltonian()
    else:
        raise ValueError(f"不支持的算子: {name}")


def print_results(M, configs, args):
    """格式化输出非零矩阵元。"""
    print("\n" + "=" * 70)
    print(f"组态 {args.config}（{len(configs)} 个行列式，算子 {args.operator}）")
    print("=" * 70)

    for i, bra in enumerate(configs):
        for j, ket in enumerate(configs):
            if args.diagonal and i != j:
                continue
            expr = M[i, j]
            if not expr:
                continue
            label_bra = " ".join(str(o) for o in bra)
            label_ket = " ".join(str(o) for o in ket)
            print(f"\n⟨{label_bra}|Ĥ|{label_ket}⟩ =")
            print(f"  {expr}")


def export_results(M, configs, path):
    """导出为 JSON（系数以字符串保存）。"""
    data = {
        "determinants": [[str(o) for o in det] for det in configs],
        "elements": [],
    }
    n, m = M.shape
    for i in range(n):
        for j in range(m):
            if not M[i, j]:
                continue
            data["elements"].append({
                "i": i,
                "j": j,
                "terms": {str(r): str(c) for r, c in M[i, j].items()},
            })
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    print(f"\n✅ 结果已导出到: {path}")


def main():
    parser = argparse.ArgumentParser(
        description="能量表达式计算入口",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("config", type=str, help='组态，如 "1s2 2p2"')
    parser.add_argument(
        "--operator", type=str, default="H", choices=["H", "g", "h"], help="算子：全哈密顿量、库仑、单体"
    )
    parser.add_argument("--relativistic", action="store_true", help="按相对论轨道解释壳层")
    parser.add_argument("--exact", action="store_true", help="精确（sympy）系数")
    parser.add_argument("--diagonal", action="store_true", help="只输出对角元")
    parser.add_argument("--workers", type=int, default=1, help="装配线程数")
    parser.add_argument("--cache-size", type=int, default=None, help="3j/6j 缓存容量（默认不限）")
    parser.add_argument("--export", type=str, default=None, help="导出结果到 JSON")
    parser.add_argument("--verbose", action="store_true", help="打印装配统计")

    args = parser.parse_args()

    configs = spin_configurations(args.config, relativistic=args.relativistic)
    cfg = IntegrationConfig(
        exact=args.exact,
        cache_maxsize=args.cache_size,
        n_workers=args.workers,
        verbose=args.verbose,
    )

    t_start = time.time()
    M = Matrix(build_operator(args.operator), configs, config=cfg)
    t_elapsed = time.time() - t_start

    print_results(M, configs, args)
    print(f"\n⏱️  总用时: {t_elapsed:.2f}s")

    if args.export:
        export_results(M, configs, args.export)


if __name__ == "__main__":
    main()
