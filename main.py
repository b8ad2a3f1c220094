#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
主执行脚本
加载网络并执行变量消元 / 置信传播查询
"""
import os
import sys
import argparse
from typing import Dict, List

from bayesnet.bayes import BayesianInference, results_to_frame, beliefs_to_frame
from bayesnet.bayes.errors import BayesNetError
from bayesnet.bayes.examples import get_example_networks
from bayesnet.utils import load_config, setup_logger, set_log_level, ensure_dir
from bayesnet.utils.io import load_network, save_network, save_data, save_metadata

logger = setup_logger("main")


def parse_evidence(pairs: List[str]) -> Dict[str, str]:
    """
    解析 id=state 形式的证据

    Args:
        pairs: 命令行给出的证据列表

    Returns:
        证据字典
    """
    evidence = {}
    for pair in pairs:
        if '=' not in pair:
            raise argparse.ArgumentTypeError(f"证据格式应为 id=state: {pair}")
        variable_id, state = pair.split('=', 1)
        evidence[variable_id.strip()] = state.strip()
    return evidence


def run_query(network, args: argparse.Namespace, config: dict) -> None:
    """
    执行一次查询并输出结果

    Args:
        network: BayesianNetwork对象
        args: 命令行参数
        config: 配置字典
    """
    evidence = parse_evidence(args.evidence)
    inference = BayesianInference(network, show_progress=config['inference']['show_progress'])
    results_dir = config['output']['results_dir']

    if args.method == 've':
        result = inference.variable_elimination(args.query, evidence)
        df = results_to_frame(args.query, result)
        print(df.to_string(index=False))
    else:
        trace = config['inference']['trace_influence'] and not args.no_trace
        if args.method == 'bp':
            beliefs, traces = inference.belief_propagation(args.query, evidence, trace)
        else:
            beliefs, traces = inference.reverse_belief_propagation(args.query, evidence, trace)
        df = beliefs_to_frame({v: beliefs[v] for v in args.query})
        print(df.to_string(index=False))

        if traces:
            print("\n影响路径:")
            for t in traces:
                print(f"  {t.path}  强度={t.influence_strength:.4f}  "
                      + ", ".join(f"{s}={p:.4f}" for s, p in t.state_influences.items()))

    if args.output:
        ensure_dir(results_dir)
        output_path = os.path.join(results_dir, args.output)
        save_data(df, output_path)
        logger.info(f"查询结果已保存: {output_path}")


def main():
    """主函数"""
    examples = get_example_networks()

    parser = argparse.ArgumentParser(description='无损贝叶斯网络 - 精确推断与置信传播')
    parser.add_argument('--config', type=str, default='config.yaml', help='配置文件路径')
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--network', type=str, help='网络文件路径（NODES/EDGES/CPTS 文本格式）')
    source.add_argument('--example', type=str, choices=sorted(examples), help='使用内置示例网络')
    parser.add_argument('--method', type=str, choices=['ve', 'bp', 'reverse-bp'], default='ve',
                        help='推断方法：变量消元 / 正向置信传播 / 反向置信传播')
    parser.add_argument('--query', type=str, nargs='*', default=[], help='查询变量ID')
    parser.add_argument('--evidence', type=str, nargs='*', default=[], help='证据，格式 id=state')
    parser.add_argument('--no-trace', action='store_true', help='置信传播时不追踪影响路径')
    parser.add_argument('--output', type=str, help='结果文件名（保存到 output.results_dir，.csv/.parquet）')
    parser.add_argument('--export-structure', type=str, help='导出网络结构的YAML文件名（保存到 output.metadata_dir）')
    parser.add_argument('--save-network', type=str, help='将网络保存为文本格式')

    args = parser.parse_args()

    config = load_config(args.config)
    set_log_level(config['logging']['level'])

    try:
        network = load_network(args.network) if args.network else examples[args.example]()

        if args.export_structure:
            metadata_dir = config['output']['metadata_dir']
            ensure_dir(metadata_dir)
            structure_path = os.path.join(metadata_dir, args.export_structure)
            save_metadata(network.export_structure(), structure_path)
            logger.info(f"网络结构已导出: {structure_path}")

        if args.save_network:
            save_network(network, args.save_network)

        if args.query:
            run_query(network, args, config)
    except (BayesNetError, argparse.ArgumentTypeError, OSError) as e:
        logger.error(f"执行失败: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
