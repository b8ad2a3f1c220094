#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
快速入门示例
演示示例网络上的变量消元、正向与反向置信传播
"""
from bayesnet.bayes import BayesianInference
from bayesnet.bayes.examples import build_medical_network, build_alarm_network, build_chain_network


def print_beliefs(beliefs, variable_ids):
    for variable_id in variable_ids:
        print(f"  {variable_id}:")
        for state, prob in beliefs[variable_id].items():
            print(f"    P({variable_id}={state}) = {prob:.4f}")


def print_traces(traces):
    for trace in traces:
        print(f"  来源: {trace.source} -> 目标: {trace.target}")
        print(f"  路径: {trace.path}")
        print(f"  影响强度: {trace.influence_strength:.4f}")
        print("  各状态影响:")
        for state, value in trace.state_influences.items():
            print(f"    {state}: {value:.4f}")
        print()


def demonstrate_medical_diagnosis():
    """医疗诊断：已知发烧且咳嗽，求疾病后验"""
    print(f"\n{'='*80}")
    print("医疗诊断示例")
    print(f"{'='*80}")

    network = build_medical_network()
    inference = BayesianInference(network)
    evidence = {'Symptom1': 'Yes', 'Symptom2': 'Yes'}

    print(f"证据: {evidence}")
    result = inference.variable_elimination(['Disease'], evidence)
    for (state,), prob in result.items():
        print(f"  P(Disease={state}) = {prob:.4f}")


def demonstrate_alarm_network():
    """报警网络：John 和 Mary 都打电话，求入室盗窃的后验"""
    print(f"\n{'='*80}")
    print("报警网络示例")
    print(f"{'='*80}")

    network = build_alarm_network()
    inference = BayesianInference(network)
    evidence = {'JohnCalls': 'True', 'MaryCalls': 'True'}

    print(f"证据: {evidence}")
    result = inference.variable_elimination(['Burglary'], evidence)
    for (state,), prob in result.items():
        print(f"  P(Burglary={state}) = {prob:.4f}")


def demonstrate_belief_propagation():
    """链 A -> B -> C：观测 C=Positive，正向置信传播并追踪影响"""
    print(f"\n{'='*80}")
    print("置信传播与影响追踪")
    print(f"{'='*80}")

    network = build_chain_network()
    inference = BayesianInference(network)
    evidence = {'C': 'Positive'}

    print(f"证据: {evidence}")
    beliefs, traces = inference.belief_propagation(['A', 'B'], evidence, trace_influence=True)
    print("置信度:")
    print_beliefs(beliefs, ['A', 'B'])
    print("\n影响路径:")
    print_traces(traces)


def demonstrate_reverse_belief_propagation():
    """诊断网络：由观测到的症状反推疾病"""
    print(f"\n{'='*80}")
    print("反向置信传播（结果 -> 原因）")
    print(f"{'='*80}")

    network = build_medical_network()
    inference = BayesianInference(network)
    evidence = {'Symptom1': 'Yes', 'Symptom2': 'Yes'}

    print(f"证据（观测到的结果）: {evidence}")
    beliefs, traces = inference.reverse_belief_propagation(['Disease'], evidence, trace_influence=True)
    print("诊断置信度:")
    print_beliefs(beliefs, ['Disease'])
    print("\n反向影响路径:")
    print_traces(traces)


def main():
    """主函数"""
    print("="*80)
    print("无损贝叶斯网络 - 快速入门示例")
    print("="*80)

    demonstrate_medical_diagnosis()
    demonstrate_alarm_network()
    demonstrate_belief_propagation()
    demonstrate_reverse_belief_propagation()


if __name__ == '__main__':
    main()
