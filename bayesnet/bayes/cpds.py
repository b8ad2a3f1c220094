#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
条件概率表（CPT）
稠密多维概率存储，按行优先步长做扁平索引
"""
import numpy as np
from typing import List, Sequence, Tuple

from bayesnet.bayes.errors import (
    CPTIndexError,
    InvalidShapeError,
    ProbabilityOutOfRangeError,
)

# 配置总和低于该值时视为退化分布，不做归一化
NORMALIZATION_EPSILON = 1e-10

# isValid 默认容差
VALIDITY_TOLERANCE = 1e-6


class ConditionalProbabilityTable:
    """
    条件概率表 P(X | Parents)

    维度约定：
    - dimensions = [父节点1状态数, ..., 父节点k状态数, 自身状态数]
    - 父节点顺序与变量的 parent_ids 一致（按ID排序）
    - 行优先存储：最后一维（自身状态）步长为1

    normalize / is_valid / 序列化都按同一行优先顺序枚举父配置，
    即第一个父节点为最高位，最后一个父节点为最低位。
    """

    def __init__(self, dimensions: Sequence[int]):
        """
        初始化全零CPT

        Args:
            dimensions: 各维大小，最后一维为变量自身状态数
        """
        dims = tuple(int(d) for d in dimensions)
        if not dims:
            raise InvalidShapeError("CPT至少需要一个维度（变量自身的状态数）")
        if any(d <= 0 for d in dims):
            raise InvalidShapeError(f"CPT维度必须为正: {list(dims)}")

        self.dimensions: Tuple[int, ...] = dims
        self.strides: Tuple[int, ...] = self._compute_strides(dims)
        self.table = np.zeros(int(np.prod(dims)), dtype=np.float64)

    @classmethod
    def from_values(cls, dimensions: Sequence[int], values: Sequence[float]) -> 'ConditionalProbabilityTable':
        """
        由行优先的扁平概率值构造CPT

        Args:
            dimensions: 各维大小
            values: 扁平概率值，长度须为各维之积

        Returns:
            CPT对象
        """
        cpt = cls(dimensions)
        flat = np.asarray(values, dtype=np.float64).ravel()
        if flat.size != cpt.table.size:
            raise CPTIndexError(
                f"概率值数量 {flat.size} 与维度 {list(cpt.dimensions)} 不匹配（应为 {cpt.table.size}）"
            )
        if np.any(np.isnan(flat)) or np.any(flat < 0.0) or np.any(flat > 1.0):
            raise ProbabilityOutOfRangeError("概率值必须在 [0, 1] 区间内")
        cpt.table[:] = flat
        return cpt

    @staticmethod
    def _compute_strides(dims: Tuple[int, ...]) -> Tuple[int, ...]:
        strides = [1] * len(dims)
        for i in range(len(dims) - 2, -1, -1):
            strides[i] = strides[i + 1] * dims[i + 1]
        return tuple(strides)

    @property
    def num_states(self) -> int:
        """变量自身状态数（最后一维）"""
        return self.dimensions[-1]

    @property
    def num_parent_configurations(self) -> int:
        """父节点配置总数"""
        return int(np.prod(self.dimensions[:-1])) if len(self.dimensions) > 1 else 1

    def _flat_index(self, parent_indices: Sequence[int], own_index: int) -> int:
        indices = list(parent_indices) + [own_index]
        if len(indices) != len(self.dimensions):
            raise CPTIndexError(
                f"索引维数不匹配: 给定 {len(parent_indices)} 个父节点索引，"
                f"CPT有 {len(self.dimensions) - 1} 个父节点维度"
            )
        flat = 0
        for axis, (index, bound, stride) in enumerate(zip(indices, self.dimensions, self.strides)):
            if index < 0 or index >= bound:
                raise CPTIndexError(f"第 {axis} 维索引 {index} 越界（上界 {bound}）")
            flat += index * stride
        return flat

    def set_probability(self, parent_indices: Sequence[int], own_index: int, value: float) -> None:
        """
        设置 P(X=own_index | parents=parent_indices)

        Args:
            parent_indices: 父节点状态索引（parent_ids 顺序）
            own_index: 自身状态索引
            value: 概率值，必须在 [0, 1]
        """
        if not 0.0 <= value <= 1.0:
            raise ProbabilityOutOfRangeError(f"概率值必须在 [0, 1] 区间内: {value}")
        self.table[self._flat_index(parent_indices, own_index)] = value

    def get_probability(self, parent_indices: Sequence[int], own_index: int) -> float:
        """读取 P(X=own_index | parents=parent_indices)，未设置时为0"""
        return float(self.table[self._flat_index(parent_indices, own_index)])

    def distribution(self, parent_indices: Sequence[int]) -> np.ndarray:
        """给定父配置下自身状态的分布（副本）"""
        start = self._flat_index(parent_indices, 0)
        return self.table[start:start + self.num_states].copy()

    def _rows(self) -> np.ndarray:
        # 每行是一个父配置，与步长约定一致的视图
        return self.table.reshape(self.num_parent_configurations, self.num_states)

    def normalize(self) -> None:
        """
        逐父配置归一化

        总和不超过 NORMALIZATION_EPSILON 的配置保持全零（退化分布）
        """
        rows = self._rows()
        sums = rows.sum(axis=1)
        mask = sums > NORMALIZATION_EPSILON
        rows[mask] /= sums[mask, np.newaxis]

    def is_valid(self, tolerance: float = VALIDITY_TOLERANCE) -> bool:
        """检查每个父配置下的分布之和是否为1"""
        sums = self._rows().sum(axis=1)
        return bool(np.all(np.abs(sums - 1.0) <= tolerance))

    def values(self) -> List[float]:
        """行优先的扁平概率值"""
        return self.table.tolist()

    def copy(self) -> 'ConditionalProbabilityTable':
        return ConditionalProbabilityTable.from_values(self.dimensions, self.table)

    def __repr__(self):
        return f"ConditionalProbabilityTable(dimensions={list(self.dimensions)})"
