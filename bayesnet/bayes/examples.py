#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
示例网络
医疗诊断、经典报警网络、三节点链 A -> B -> C
"""
from typing import Callable, Dict

from bayesnet.bayes.structure import BayesianNetwork


def build_medical_network() -> BayesianNetwork:
    """
    医疗诊断网络

    Disease{None, Cold, Flu} -> Symptom1(发烧){No, Yes}
    Disease -> Symptom2(咳嗽){No, Yes}
    """
    network = BayesianNetwork()
    network.add_variable('Disease', 'Disease', ['None', 'Cold', 'Flu'])
    network.add_variable('Symptom1', 'Fever', ['No', 'Yes'])
    network.add_variable('Symptom2', 'Cough', ['No', 'Yes'])

    network.add_edge('Disease', 'Symptom1')
    network.add_edge('Disease', 'Symptom2')

    network.define_cpt('Disease', {(): [0.7, 0.2, 0.1]})
    network.define_cpt('Symptom1', {
        ('None',): [0.9, 0.1],
        ('Cold',): [0.7, 0.3],
        ('Flu',): [0.2, 0.8],
    }, normalize=True)
    network.define_cpt('Symptom2', {
        ('None',): [0.95, 0.05],
        ('Cold',): [0.3, 0.7],
        ('Flu',): [0.4, 0.6],
    }, normalize=True)
    return network


def build_alarm_network() -> BayesianNetwork:
    """
    经典报警网络（Burglary, Earthquake, Alarm, JohnCalls, MaryCalls）

    使用教科书中的CPT（Russell & Norvig），P(Burglary=True | JohnCalls, MaryCalls) ≈ 0.284。
    Alarm 的父节点按ID排序为 (Burglary, Earthquake)
    """
    network = BayesianNetwork()
    for variable_id in ['Burglary', 'Earthquake', 'Alarm', 'JohnCalls', 'MaryCalls']:
        network.add_variable(variable_id, variable_id, ['False', 'True'])

    network.add_edge('Burglary', 'Alarm')
    network.add_edge('Earthquake', 'Alarm')
    network.add_edge('Alarm', 'JohnCalls')
    network.add_edge('Alarm', 'MaryCalls')

    network.define_cpt('Burglary', {(): [0.999, 0.001]})
    network.define_cpt('Earthquake', {(): [0.998, 0.002]})
    network.define_cpt('Alarm', {
        ('False', 'False'): [0.999, 0.001],
        ('False', 'True'): [0.71, 0.29],
        ('True', 'False'): [0.06, 0.94],
        ('True', 'True'): [0.05, 0.95],
    }, normalize=True)
    network.define_cpt('JohnCalls', {
        ('False',): [0.95, 0.05],
        ('True',): [0.10, 0.90],
    }, normalize=True)
    network.define_cpt('MaryCalls', {
        ('False',): [0.99, 0.01],
        ('True',): [0.30, 0.70],
    }, normalize=True)
    return network


def build_chain_network() -> BayesianNetwork:
    """三节点链 A(原因) -> B(中间) -> C(结果)"""
    network = BayesianNetwork()
    network.add_variable('A', 'Cause', ['False', 'True'])
    network.add_variable('B', 'Intermediate', ['Low', 'High'])
    network.add_variable('C', 'Effect', ['Negative', 'Positive'])

    network.add_edge('A', 'B')
    network.add_edge('B', 'C')

    network.define_cpt('A', {(): [0.7, 0.3]})
    network.define_cpt('B', {
        ('False',): [0.8, 0.2],
        ('True',): [0.3, 0.7],
    }, normalize=True)
    network.define_cpt('C', {
        ('Low',): [0.9, 0.1],
        ('High',): [0.2, 0.8],
    }, normalize=True)
    return network


def get_example_networks() -> Dict[str, Callable[[], BayesianNetwork]]:
    """
    获取所有示例网络的构造函数

    Returns:
        名称到构造函数的映射
    """
    return {
        'medical': build_medical_network,
        'alarm': build_alarm_network,
        'chain': build_chain_network,
    }
