#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
贝叶斯推断
精确变量消元与（正向/反向）置信传播的统一入口
"""
import itertools
from typing import Dict, Iterator, List, Mapping, Sequence, Tuple

import pandas as pd
from tqdm import tqdm

from bayesnet.bayes.cpds import NORMALIZATION_EPSILON
from bayesnet.bayes.errors import MissingAssignmentError, MissingCPTError
from bayesnet.bayes.propagation import BeliefPropagation, InfluenceTrace
from bayesnet.utils.logging import setup_logger

logger = setup_logger("bayes_inference")


class BayesianInference:
    """
    贝叶斯推断器

    variable_elimination 是精确推断：对非证据、非查询变量的全部赋值求和，
    时间复杂度为这些变量状态数之积（指数级），没有做消元顺序优化。
    这是有意为之的取舍，适用于中小规模网络。
    """

    def __init__(self, network, show_progress: bool = False):
        """
        初始化推断器

        Args:
            network: BayesianNetwork对象
            show_progress: 变量消元时是否显示进度条
        """
        self.network = network
        self.show_progress = show_progress
        self.propagation = BeliefPropagation(network)

    def _generate_assignments(self, variable_ids: Sequence[str]) -> Iterator[Dict[str, str]]:
        """
        按字典序枚举变量的全部赋值（笛卡尔积，最后一个变量变化最快）
        """
        state_lists = [self.network.get_variable(v).states for v in variable_ids]
        for states in itertools.product(*state_lists):
            yield dict(zip(variable_ids, states))

    def variable_elimination(
        self,
        query_ids: Sequence[str],
        evidence: Mapping[str, str]
    ) -> Dict[Tuple[str, ...], float]:
        """
        变量消元（枚举求和）

        对每个查询赋值，累加 (证据 ∪ 查询赋值 ∪ 求和变量赋值) 的联合概率，
        最后归一化。单个赋值缺少CPT或缺少取值时按概率0处理。
        总权重不超过 1e-10 时不归一化，结果全为0（证据不可能发生）。

        Args:
            query_ids: 查询变量ID列表
            evidence: 证据（变量ID到状态名）

        Returns:
            {查询状态元组（按 query_ids 顺序）: 后验概率}
        """
        query_ids = list(query_ids)
        evidence = dict(evidence)
        self.network.validate_query(query_ids, evidence)

        query_set = set(query_ids)
        sum_ids = [
            v for v in self.network.get_variable_ids()
            if v not in evidence and v not in query_set
        ]
        logger.info(
            f"变量消元: 查询 {query_ids}, 证据 {evidence}, 求和变量 {len(sum_ids)} 个"
        )

        result: Dict[Tuple[str, ...], float] = {}
        skipped = 0
        query_assignments = list(self._generate_assignments(query_ids))

        for query_assignment in tqdm(query_assignments, desc="变量消元", disable=not self.show_progress):
            key = tuple(query_assignment[v] for v in query_ids)

            # 与证据矛盾的查询赋值概率为0
            if any(evidence.get(v, s) != s for v, s in query_assignment.items()):
                result[key] = 0.0
                continue

            weight = 0.0
            for sum_assignment in self._generate_assignments(sum_ids):
                complete = dict(evidence)
                complete.update(query_assignment)
                complete.update(sum_assignment)
                try:
                    weight += self.network.compute_joint_probability(complete)
                except (MissingCPTError, MissingAssignmentError):
                    skipped += 1
            result[key] = weight

        if skipped:
            logger.debug(f"跳过 {skipped} 个无法计算联合概率的赋值")

        total = sum(result.values())
        if total > NORMALIZATION_EPSILON:
            result = {key: value / total for key, value in result.items()}
        else:
            logger.warning("所有赋值的概率之和为0，证据可能不可能发生，结果未归一化")

        return result

    infer = variable_elimination

    def belief_propagation(
        self,
        query_ids: Sequence[str],
        evidence: Mapping[str, str],
        trace_influence: bool = True
    ) -> Tuple[Dict[str, Dict[str, float]], List[InfluenceTrace]]:
        """正向置信传播，见 BeliefPropagation.propagate"""
        return self.propagation.propagate(query_ids, evidence, trace_influence)

    def reverse_belief_propagation(
        self,
        query_ids: Sequence[str],
        evidence: Mapping[str, str],
        trace_influence: bool = True
    ) -> Tuple[Dict[str, Dict[str, float]], List[InfluenceTrace]]:
        """反向（诊断）置信传播，见 BeliefPropagation.reverse_propagate"""
        return self.propagation.reverse_propagate(query_ids, evidence, trace_influence)

    def predict(self, target_variable: str, evidence: Mapping[str, str]) -> Dict[str, float]:
        """
        单变量后验分布

        Args:
            target_variable: 目标变量ID
            evidence: 观测证据

        Returns:
            目标变量各状态的概率
        """
        result = self.variable_elimination([target_variable], evidence)
        return {key[0]: prob for key, prob in result.items()}


def results_to_frame(query_ids: Sequence[str], result: Mapping[Tuple[str, ...], float]) -> pd.DataFrame:
    """
    将变量消元结果转换为DataFrame

    Args:
        query_ids: 查询变量ID列表
        result: variable_elimination 的返回值

    Returns:
        每个查询变量一列，外加 probability 列
    """
    rows = [dict(zip(query_ids, key), probability=prob) for key, prob in result.items()]
    return pd.DataFrame(rows, columns=list(query_ids) + ['probability'])


def beliefs_to_frame(beliefs: Mapping[str, Mapping[str, float]]) -> pd.DataFrame:
    """
    将置信传播结果展开为长表

    Returns:
        variable / state / belief 三列
    """
    rows = [
        {'variable': variable_id, 'state': state, 'belief': value}
        for variable_id, distribution in beliefs.items()
        for state, value in distribution.items()
    ]
    return pd.DataFrame(rows, columns=['variable', 'state', 'belief'])
