#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
置信传播（sum-product消息传递）
正向与反向（诊断）两种模式，并可追踪证据到查询变量的影响路径

消息约定：
- messages[(sender, receiver)] 是 receiver 状态上的归一化向量
- 上行消息（子 -> 父）在逆拓扑序中计算，下行消息（父 -> 子）在拓扑序中计算

近似说明：
计算某个父节点相关的消息时，子节点的其他父节点不做边缘化，而是取一个代表状态：
上行时取证据值，否则取该父节点的第一个状态；下行时取证据值，否则取其当前消息下
最可能的状态。因此只在每个节点至多一个父节点（树）的网络上结果是精确的，
多父节点时请用 BayesianInference.variable_elimination 获得精确后验。
"""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from bayesnet.bayes.cpds import NORMALIZATION_EPSILON
from bayesnet.utils.logging import setup_logger

logger = setup_logger("belief_propagation")

MessageMap = Dict[Tuple[str, str], np.ndarray]


@dataclass
class InfluenceTrace:
    """
    影响路径追踪结果

    Attributes:
        source: 证据变量
        target: 查询变量
        path: 路径字符串，正向 "A->B->C"，反向 "C<-B<-A"
        influence_strength: 目标变量置信度的均值（粗略汇总，并非信息论意义上的敏感度）
        state_influences: 目标变量各状态的置信度
    """
    source: str
    target: str
    path: str
    influence_strength: float
    state_influences: Dict[str, float] = field(default_factory=dict)


def _normalize(vector: np.ndarray) -> np.ndarray:
    total = vector.sum()
    if total > NORMALIZATION_EPSILON:
        return vector / total
    return vector


class BeliefPropagation:
    """
    两遍消息传递的置信传播

    正向与反向共享同一算法：先上行（子节点先于父节点），再下行，
    最后聚合置信度。两者的区别在于影响路径的方向：正向沿父->子的边从证据走到查询，
    反向逆着边从证据（结果）回溯到查询（原因）。

    缺少CPT的变量不发送消息，其置信度为全0，调用方需检查未归一化的输出。
    """

    def __init__(self, network):
        """
        Args:
            network: BayesianNetwork对象
        """
        self.network = network

    def propagate(
        self,
        query_ids: Sequence[str],
        evidence: Mapping[str, str],
        trace_influence: bool = True
    ) -> Tuple[Dict[str, Dict[str, float]], List[InfluenceTrace]]:
        """
        正向置信传播

        Args:
            query_ids: 查询变量ID列表
            evidence: 证据（变量ID到状态名）
            trace_influence: 是否追踪影响路径

        Returns:
            (所有变量的置信度, 影响路径列表)
        """
        return self._run(query_ids, evidence, trace_influence, reverse=False)

    def reverse_propagate(
        self,
        query_ids: Sequence[str],
        evidence: Mapping[str, str],
        trace_influence: bool = True
    ) -> Tuple[Dict[str, Dict[str, float]], List[InfluenceTrace]]:
        """
        反向（诊断）置信传播

        证据通常是观测到的结果（后代），查询通常是原因（祖先）；
        影响路径逆着边方向追踪，以 "<-" 连接。
        """
        return self._run(query_ids, evidence, trace_influence, reverse=True)

    def _run(self, query_ids, evidence, trace_influence, reverse):
        query_ids = list(query_ids)
        evidence = dict(evidence)
        self.network.validate_query(query_ids, evidence)

        mode = "反向" if reverse else "正向"
        logger.info(f"{mode}置信传播: 查询 {query_ids}, 证据 {evidence}")

        messages: MessageMap = {}
        self._upward_pass(messages, evidence)
        self._downward_pass(messages, evidence)
        beliefs = self._compute_beliefs(messages, evidence)

        traces: List[InfluenceTrace] = []
        if trace_influence:
            traces = self._trace_influence(beliefs, query_ids, evidence, reverse)
            logger.debug(f"{mode}影响路径 {len(traces)} 条")

        return beliefs, traces

    # ============ 消息计算 ============

    def _indicator(self, variable_id: str, state: str) -> np.ndarray:
        variable = self.network.get_variable(variable_id)
        vector = np.zeros(variable.num_states)
        vector[variable.state_index(state)] = 1.0
        return vector

    def _prior(self, variable_id: str) -> np.ndarray:
        # 根节点CPT只有一个父配置
        return self.network.get_cpt(variable_id).distribution([])

    def _lambda(self, variable_id: str, messages: MessageMap, evidence: Mapping[str, str],
                exclude: Optional[str] = None) -> np.ndarray:
        """来自子节点的诊断支持（观测变量为指示向量）"""
        if variable_id in evidence:
            return self._indicator(variable_id, evidence[variable_id])
        support = np.ones(self.network.get_variable(variable_id).num_states)
        for child_id in self.network.get_children(variable_id):
            if child_id == exclude:
                continue
            message = messages.get((child_id, variable_id))
            if message is not None:
                support = support * message
        return support

    def _pi(self, variable_id: str, messages: MessageMap, evidence: Mapping[str, str]) -> np.ndarray:
        """来自父节点的因果支持（根节点为先验，观测变量为指示向量）"""
        if variable_id in evidence:
            return self._indicator(variable_id, evidence[variable_id])
        variable = self.network.get_variable(variable_id)
        if not variable.parents:
            return self._prior(variable_id)
        support = np.ones(variable.num_states)
        for parent_id in variable.parent_ids:
            message = messages.get((parent_id, variable_id))
            if message is not None:
                support = support * message
        return support

    def _upward_pass(self, messages: MessageMap, evidence: Mapping[str, str]) -> None:
        """
        上行：按逆拓扑序，每个有CPT的变量向每个未观测父节点发送消息

        m(p) = Σ_x P(x | parent=p, 其他父节点=代表状态) · λ(x)
        """
        network = self.network
        for variable_id in reversed(network.topological_order):
            if not network.has_cpt(variable_id):
                logger.debug(f"变量 {variable_id} 无CPT，不发送上行消息")
                continue

            variable = network.get_variable(variable_id)
            support = self._lambda(variable_id, messages, evidence)

            for parent_id in variable.parent_ids:
                if parent_id in evidence:
                    continue
                parent = network.get_variable(parent_id)
                message = np.zeros(parent.num_states)

                for p_index, p_state in enumerate(parent.states):
                    assignment = {}
                    for other_id in variable.parent_ids:
                        if other_id == parent_id:
                            assignment[other_id] = p_state
                        elif other_id in evidence:
                            assignment[other_id] = evidence[other_id]
                        else:
                            assignment[other_id] = network.get_variable(other_id).states[0]
                    for x_index, x_state in enumerate(variable.states):
                        message[p_index] += (
                            network.get_conditional_probability(variable_id, x_state, assignment)
                            * support[x_index]
                        )

                messages[(variable_id, parent_id)] = _normalize(message)

    def _downward_pass(self, messages: MessageMap, evidence: Mapping[str, str]) -> None:
        """
        下行：按拓扑序，每个变量向每个未观测且有CPT的子节点发送消息

        m(c) = Σ_x P(c | parent=x, 其他父节点=代表状态) · π(x) · Π_{其他子节点} λ(x)
        """
        network = self.network
        for variable_id in network.topological_order:
            if variable_id not in evidence and not network.has_cpt(variable_id):
                continue

            variable = network.get_variable(variable_id)
            pi = self._pi(variable_id, messages, evidence)

            for child_id in network.get_children(variable_id):
                if child_id in evidence or not network.has_cpt(child_id):
                    continue
                child = network.get_variable(child_id)

                if variable_id in evidence:
                    support = pi
                else:
                    support = _normalize(pi * self._lambda(variable_id, messages, evidence, exclude=child_id))

                assignment = {
                    other_id: self._representative_state(other_id, child_id, messages, evidence)
                    for other_id in child.parent_ids
                    if other_id != variable_id
                }
                message = np.zeros(child.num_states)
                for c_index, c_state in enumerate(child.states):
                    for x_index, x_state in enumerate(variable.states):
                        assignment[variable_id] = x_state
                        message[c_index] += (
                            network.get_conditional_probability(child_id, c_state, assignment)
                            * support[x_index]
                        )

                messages[(variable_id, child_id)] = _normalize(message)

    def _representative_state(self, parent_id: str, child_id: str, messages: MessageMap,
                              evidence: Mapping[str, str]) -> str:
        """下行时其他父节点的代表状态：证据值 > 当前消息下最可能状态 > 第一个状态"""
        if parent_id in evidence:
            return evidence[parent_id]
        parent = self.network.get_variable(parent_id)
        message = messages.get((parent_id, child_id))
        if message is None:
            return parent.states[0]
        return parent.states[int(np.argmax(message))]

    # ============ 置信度聚合 ============

    def _compute_beliefs(self, messages: MessageMap, evidence: Mapping[str, str]) -> Dict[str, Dict[str, float]]:
        """
        聚合置信度

        观测变量为指示分布；无CPT的未观测变量为全0；
        其余变量从先验（根节点）或全1出发，逐状态乘以所有父、子消息后归一化
        """
        network = self.network
        beliefs: Dict[str, Dict[str, float]] = {}

        for variable_id in network.get_variable_ids():
            variable = network.get_variable(variable_id)

            if variable_id in evidence:
                belief = self._indicator(variable_id, evidence[variable_id])
            elif not network.has_cpt(variable_id):
                logger.warning(f"变量 {variable_id} 无CPT，置信度为全0")
                belief = np.zeros(variable.num_states)
            else:
                belief = self._prior(variable_id) if not variable.parents else np.ones(variable.num_states)
                for parent_id in variable.parent_ids:
                    message = messages.get((parent_id, variable_id))
                    if message is not None:
                        belief = belief * message
                for child_id in network.get_children(variable_id):
                    message = messages.get((child_id, variable_id))
                    if message is not None:
                        belief = belief * message
                belief = _normalize(belief)

            beliefs[variable_id] = {state: float(belief[i]) for i, state in enumerate(variable.states)}

        return beliefs

    # ============ 影响路径 ============

    def _trace_influence(
        self,
        beliefs: Mapping[str, Mapping[str, float]],
        query_ids: Sequence[str],
        evidence: Mapping[str, str],
        reverse: bool
    ) -> List[InfluenceTrace]:
        """
        枚举每个 (证据变量, 查询变量) 之间的所有有向简单路径

        深度优先，不重复访问当前路径上的节点；菱形结构会得到多条路径。
        """
        graph = self.network.graph.reverse(copy=False) if reverse else self.network.graph
        separator = "<-" if reverse else "->"
        traces = []

        for source in sorted(evidence):
            for target in query_ids:
                if source == target:
                    continue
                distribution = dict(beliefs.get(target, {}))
                strength = float(np.mean(list(distribution.values()))) if distribution else 0.0
                for path in sorted(nx.all_simple_paths(graph, source, target)):
                    traces.append(InfluenceTrace(
                        source=source,
                        target=target,
                        path=separator.join(path),
                        influence_strength=strength,
                        state_influences=dict(distribution),
                    ))
        return traces
