#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
贝叶斯网络DAG结构
维护变量集合、CPT集合，并在每次加边时保证无环
"""
from typing import Dict, List, Mapping, Sequence, Tuple
import itertools

import networkx as nx
import pandas as pd

from bayesnet.bayes.cpds import ConditionalProbabilityTable
from bayesnet.bayes.errors import (
    CycleDetectedError,
    DuplicateIdError,
    InvalidStateError,
    MissingAssignmentError,
    MissingCPTError,
    MissingParentAssignmentError,
    SelfLoopError,
    ShapeMismatchError,
    UnknownVariableError,
)
from bayesnet.bayes.variables import BayesianVariable
from bayesnet.utils.logging import setup_logger

logger = setup_logger("bayes_structure")


class BayesianNetwork:
    """
    离散贝叶斯网络

    变量之间的父子关系同时记录在各变量的 parents 集合和 networkx 有向图中。
    拓扑序在每次结构变更（加变量、加边）后整体重算；加边导致环时回滚。

    非线程安全：结构变更需要调用方加锁；查询只读，可在读锁下并发，
    但不能与结构变更并发（查询直接读取缓存的拓扑序）。
    """

    def __init__(self):
        """初始化空网络"""
        self.graph = nx.DiGraph()
        self.variables: Dict[str, BayesianVariable] = {}
        self.cpts: Dict[str, ConditionalProbabilityTable] = {}
        self.topological_order: List[str] = []
        logger.debug("初始化贝叶斯网络")

    # ============ 结构构造 ============

    def add_variable(self, variable_id: str, name: str, states: Sequence[str]) -> BayesianVariable:
        """
        添加变量

        Args:
            variable_id: 变量唯一ID
            name: 显示名称
            states: 有序状态名列表

        Returns:
            新建的变量
        """
        if variable_id in self.variables:
            raise DuplicateIdError(f"变量ID已存在: {variable_id}")

        variable = BayesianVariable(variable_id=variable_id, name=name, states=list(states))
        self.variables[variable_id] = variable
        self.graph.add_node(variable_id)
        self.topological_order = self._topological_sort()
        logger.debug(f"添加变量: {variable_id} ({name}), 状态: {variable.states}")
        return variable

    def add_edge(self, parent_id: str, child_id: str) -> None:
        """
        添加有向边（因果关系）

        加边后重新计算拓扑序；若出现环则撤销该边并抛出 CycleDetectedError，
        网络保持调用前的状态。

        Args:
            parent_id: 父节点（原因）
            child_id: 子节点（结果）
        """
        self._require(parent_id)
        self._require(child_id)
        if parent_id == child_id:
            raise SelfLoopError(f"不能添加自环: {parent_id} -> {child_id}")

        child = self.variables[child_id]
        if child.has_parent(parent_id):
            logger.debug(f"边已存在: {parent_id} -> {child_id}")
            return

        child.add_parent(parent_id)
        self.graph.add_edge(parent_id, child_id)
        try:
            order = self._topological_sort()
        except CycleDetectedError:
            child.remove_parent(parent_id)
            self.graph.remove_edge(parent_id, child_id)
            raise CycleDetectedError(f"添加边 {parent_id} -> {child_id} 会产生环") from None

        self.topological_order = order
        logger.debug(f"添加边: {parent_id} -> {child_id}")

        # 旧CPT与新的父节点集合不再匹配，卸下后该变量按缺少CPT处理
        cpt = self.cpts.get(child_id)
        if cpt is not None and cpt.dimensions != self._expected_dimensions(child_id):
            del self.cpts[child_id]
            logger.warning(
                f"变量 {child_id} 的CPT维度 {list(cpt.dimensions)} 与新的父节点集合不再匹配，"
                f"已移除，需要重新设置CPT"
            )

    def set_cpt(self, variable_id: str, cpt: ConditionalProbabilityTable) -> None:
        """
        设置（替换）变量的CPT

        Args:
            variable_id: 变量ID
            cpt: 条件概率表，维度须为 [各父节点状态数..., 自身状态数]
        """
        self._require(variable_id)
        expected = self._expected_dimensions(variable_id)
        if tuple(cpt.dimensions) != expected:
            raise ShapeMismatchError(
                f"变量 {variable_id} 的CPT维度应为 {list(expected)}，实际为 {list(cpt.dimensions)}"
            )
        self.cpts[variable_id] = cpt
        if not cpt.is_valid():
            logger.debug(f"变量 {variable_id} 的CPT未归一化")

    def create_cpt(self, variable_id: str) -> ConditionalProbabilityTable:
        """按变量当前的父节点创建全零CPT（不挂载）"""
        self._require(variable_id)
        return ConditionalProbabilityTable(self._expected_dimensions(variable_id))

    def define_cpt(
        self,
        variable_id: str,
        table: Mapping[Tuple[str, ...], Sequence[float]],
        normalize: bool = False
    ) -> ConditionalProbabilityTable:
        """
        由字典形式的表构造并挂载CPT

        Args:
            variable_id: 变量ID
            table: {父节点状态元组: [P(状态0), P(状态1), ...]}
                   元组按 parent_ids 顺序，根节点使用空元组 ()
            normalize: 挂载前是否逐配置归一化

        Returns:
            挂载的CPT
        """
        variable = self.get_variable(variable_id)
        parents = [self.variables[p] for p in variable.parent_ids]
        cpt = self.create_cpt(variable_id)

        for parent_states, probabilities in table.items():
            if isinstance(parent_states, str):
                parent_states = (parent_states,)
            parent_states = tuple(parent_states)
            if len(parent_states) != len(parents):
                raise ShapeMismatchError(
                    f"变量 {variable_id} 有 {len(parents)} 个父节点，配置 {parent_states} 长度不符"
                )
            if len(probabilities) != variable.num_states:
                raise ShapeMismatchError(
                    f"变量 {variable_id} 有 {variable.num_states} 个状态，给定 {len(probabilities)} 个概率"
                )
            parent_indices = [p.state_index(s) for p, s in zip(parents, parent_states)]
            for own_index, value in enumerate(probabilities):
                cpt.set_probability(parent_indices, own_index, value)

        if normalize:
            cpt.normalize()
        self.set_cpt(variable_id, cpt)
        return cpt

    # ============ 查询 ============

    def get_conditional_probability(
        self,
        variable_id: str,
        state: str,
        parent_states: Mapping[str, str]
    ) -> float:
        """
        查询 P(variable=state | parents=parent_states)

        Args:
            variable_id: 变量ID
            state: 变量自身状态名
            parent_states: 父节点ID到状态名的映射（可包含多余的键）

        Returns:
            条件概率
        """
        variable = self.get_variable(variable_id)
        cpt = self.cpts.get(variable_id)
        if cpt is None:
            raise MissingCPTError(f"变量 {variable_id} 未设置CPT")

        parent_indices = []
        for parent_id in variable.parent_ids:
            if parent_id not in parent_states:
                raise MissingParentAssignmentError(f"缺少父节点 {parent_id} 的取值（查询 {variable_id}）")
            parent_indices.append(self.variables[parent_id].state_index(parent_states[parent_id]))

        return cpt.get_probability(parent_indices, variable.state_index(state))

    def compute_joint_probability(self, assignment: Mapping[str, str]) -> float:
        """
        计算完整赋值的联合概率

        按拓扑序连乘 P(X | Parents(X))

        Args:
            assignment: 变量ID到状态名的完整映射

        Returns:
            联合概率
        """
        joint = 1.0
        for variable_id in self.topological_order:
            if variable_id not in assignment:
                raise MissingAssignmentError(f"赋值中缺少变量 {variable_id}")
            joint *= self.get_conditional_probability(variable_id, assignment[variable_id], assignment)
        return joint

    def validate_query(self, query_ids: Sequence[str], evidence: Mapping[str, str]) -> None:
        """
        在枚举之前校验查询变量和证据

        Args:
            query_ids: 查询变量ID列表
            evidence: 证据（变量ID到状态名）
        """
        if len(set(query_ids)) != len(query_ids):
            raise DuplicateIdError(f"查询变量重复: {list(query_ids)}")
        for variable_id in query_ids:
            self._require(variable_id)
        for variable_id, state in evidence.items():
            variable = self.get_variable(variable_id)
            if not variable.has_state(state):
                raise InvalidStateError(f"证据 {variable_id}={state!r} 不是合法状态，可选: {variable.states}")

    # ============ 内省 ============

    def get_variable_ids(self) -> List[str]:
        """所有变量ID（排序）"""
        return sorted(self.variables)

    def get_variable(self, variable_id: str) -> BayesianVariable:
        self._require(variable_id)
        return self.variables[variable_id]

    def has_cpt(self, variable_id: str) -> bool:
        return variable_id in self.cpts

    def get_cpt(self, variable_id: str) -> ConditionalProbabilityTable:
        self._require(variable_id)
        if variable_id not in self.cpts:
            raise MissingCPTError(f"变量 {variable_id} 未设置CPT")
        return self.cpts[variable_id]

    def get_parents(self, variable_id: str) -> List[str]:
        """
        获取节点的父节点

        Args:
            variable_id: 节点ID

        Returns:
            父节点列表（按ID排序）
        """
        return self.get_variable(variable_id).parent_ids

    def get_children(self, variable_id: str) -> List[str]:
        """
        获取节点的子节点

        Args:
            variable_id: 节点ID

        Returns:
            子节点列表（按ID排序）
        """
        self._require(variable_id)
        return sorted(self.graph.successors(variable_id))

    def get_markov_blanket(self, variable_id: str) -> List[str]:
        """
        获取Markov Blanket

        包含：父节点、子节点、子节点的其他父节点

        Args:
            variable_id: 节点ID

        Returns:
            Markov Blanket节点列表
        """
        markov_blanket = set(self.get_parents(variable_id))

        children = self.get_children(variable_id)
        markov_blanket.update(children)
        for child in children:
            markov_blanket.update(self.get_parents(child))

        markov_blanket.discard(variable_id)
        return sorted(markov_blanket)

    def is_acyclic(self) -> bool:
        """检查是否为有向无环图"""
        return nx.is_directed_acyclic_graph(self.graph)

    def get_topological_order(self) -> List[str]:
        """获取拓扑排序（父节点总在子节点之前，同层按ID排序）"""
        return list(self.topological_order)

    def get_edges(self) -> List[Tuple[str, str]]:
        """所有边 (parent, child)，按子节点、父节点排序"""
        return [(p, c) for c in sorted(self.variables) for p in self.variables[c].parent_ids]

    def export_structure(self) -> Dict:
        """
        导出网络结构

        Returns:
            结构字典
        """
        return {
            'nodes': {
                vid: {
                    'name': var.name,
                    'states': list(var.states),
                    'parents': var.parent_ids,
                    'has_cpt': vid in self.cpts,
                }
                for vid, var in sorted(self.variables.items())
            },
            'edges': [list(edge) for edge in self.get_edges()],
            'is_acyclic': self.is_acyclic(),
            'topological_order': self.get_topological_order(),
        }

    def cpt_frame(self, variable_id: str) -> pd.DataFrame:
        """
        以DataFrame形式查看CPT

        行为父节点配置（MultiIndex，按 parent_ids 顺序），列为自身状态
        """
        variable = self.get_variable(variable_id)
        cpt = self.get_cpt(variable_id)
        parents = [self.variables[p] for p in variable.parent_ids]

        rows = cpt.table.reshape(cpt.num_parent_configurations, cpt.num_states).copy()
        if parents:
            index = pd.MultiIndex.from_tuples(
                list(itertools.product(*(p.states for p in parents))),
                names=[p.variable_id for p in parents]
            )
        else:
            index = pd.Index(['prior'])
        return pd.DataFrame(rows, index=index, columns=list(variable.states))

    def __len__(self):
        return len(self.variables)

    def __contains__(self, variable_id):
        return variable_id in self.variables

    # ============ 内部工具 ============

    def _require(self, variable_id: str) -> None:
        if variable_id not in self.variables:
            raise UnknownVariableError(f"变量不存在: {variable_id}")

    def _expected_dimensions(self, variable_id: str) -> Tuple[int, ...]:
        variable = self.variables[variable_id]
        return tuple(self.variables[p].num_states for p in variable.parent_ids) + (variable.num_states,)

    def _topological_sort(self) -> List[str]:
        """
        Kahn算法求拓扑序

        入度为0的节点按ID从小到大出队，保证结果确定
        """
        try:
            return list(nx.lexicographical_topological_sort(self.graph))
        except nx.NetworkXUnfeasible:
            raise CycleDetectedError("图中存在环，无法进行拓扑排序") from None
