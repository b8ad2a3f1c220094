#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
贝叶斯网络模块
包含变量、CPT、DAG结构、精确推断和置信传播等核心功能
"""
from bayesnet.bayes.variables import BayesianVariable
from bayesnet.bayes.cpds import ConditionalProbabilityTable
from bayesnet.bayes.structure import BayesianNetwork
from bayesnet.bayes.propagation import BeliefPropagation, InfluenceTrace
from bayesnet.bayes.inference import BayesianInference, results_to_frame, beliefs_to_frame

__all__ = [
    'BayesianVariable',
    'ConditionalProbabilityTable',
    'BayesianNetwork',
    'BeliefPropagation',
    'InfluenceTrace',
    'BayesianInference',
    'results_to_frame',
    'beliefs_to_frame'
]
