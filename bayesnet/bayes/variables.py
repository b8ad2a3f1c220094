#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
贝叶斯网络变量定义
离散随机变量：名称、有序状态集合、父节点集合
"""
from typing import Dict, List, Set
from dataclasses import dataclass, field

from bayesnet.bayes.errors import InvalidNameError, InvalidStateError


@dataclass
class BayesianVariable:
    """
    贝叶斯网络随机变量

    Attributes:
        variable_id: 变量唯一标识
        name: 显示名称
        states: 可能的取值（离散状态），插入顺序即状态索引顺序
        parents: 父节点ID集合（无序、唯一）
    """
    variable_id: str
    name: str
    states: List[str]
    parents: Set[str] = field(default_factory=set)

    def __post_init__(self):
        self.states = list(self.states)
        # 网络文件按行解析，名称中不能有换行
        for label in [self.variable_id, self.name] + self.states:
            if '\n' in str(label) or '\r' in str(label):
                raise InvalidNameError(f"变量 {self.variable_id!r} 的ID、名称或状态名包含换行符: {label!r}")
        if not self.states:
            raise InvalidStateError(f"变量 {self.variable_id} 的状态列表为空")
        if len(set(self.states)) != len(self.states):
            raise InvalidStateError(f"变量 {self.variable_id} 的状态名重复: {self.states}")
        self.parents = set(self.parents)
        self._state_index: Dict[str, int] = {state: i for i, state in enumerate(self.states)}

    @property
    def num_states(self) -> int:
        """状态数"""
        return len(self.states)

    @property
    def parent_ids(self) -> List[str]:
        """
        按ID排序的父节点列表

        这是父节点的规范迭代顺序，CPT的父节点维度也按此顺序排列
        """
        return sorted(self.parents)

    def state_index(self, state: str) -> int:
        """
        获取状态名对应的索引

        Args:
            state: 状态名

        Returns:
            状态索引
        """
        try:
            return self._state_index[state]
        except KeyError:
            raise InvalidStateError(
                f"变量 {self.variable_id} 没有状态 {state!r}，可选: {self.states}"
            ) from None

    def has_state(self, state: str) -> bool:
        return state in self._state_index

    def add_parent(self, parent_id: str) -> None:
        self.parents.add(parent_id)

    def remove_parent(self, parent_id: str) -> None:
        self.parents.discard(parent_id)

    def has_parent(self, parent_id: str) -> bool:
        return parent_id in self.parents
