#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
输入输出工具
网络文本格式（NODES / EDGES / CPTS）的保存与加载，以及元数据和结果表的导出
"""
import shlex
import pandas as pd
import yaml
from typing import Dict, Any, List, Tuple

from bayesnet.bayes.cpds import ConditionalProbabilityTable
from bayesnet.bayes.errors import BayesNetError, NetworkFormatError
from bayesnet.bayes.structure import BayesianNetwork
from bayesnet.utils.logging import setup_logger

logger = setup_logger("io")

HEADER = "# Lossless Bayesian Network"
SECTIONS = ('NODES', 'EDGES', 'CPTS')


def _quote(token: str) -> str:
    return shlex.quote(str(token))


def format_network(network: BayesianNetwork) -> str:
    """
    将网络序列化为文本

    CPT按行优先顺序写出全部概率值（repr 保证浮点数无损往返）

    Args:
        network: BayesianNetwork对象

    Returns:
        文本内容
    """
    lines = [HEADER, "", "NODES"]
    for variable_id in network.get_variable_ids():
        variable = network.get_variable(variable_id)
        tokens = [variable_id, variable.name, str(variable.num_states)] + list(variable.states)
        lines.append(" ".join(_quote(t) for t in tokens))

    lines += ["", "EDGES"]
    for parent_id, child_id in network.get_edges():
        lines.append(f"{_quote(parent_id)} -> {_quote(child_id)}")

    lines += ["", "CPTS"]
    for variable_id in network.get_variable_ids():
        if not network.has_cpt(variable_id):
            continue
        cpt = network.get_cpt(variable_id)
        lines.append(_quote(variable_id))
        lines.append(" ".join(str(d) for d in [len(cpt.dimensions)] + list(cpt.dimensions)))
        lines.append(" ".join(repr(v) for v in cpt.values()))

    return "\n".join(lines) + "\n"


def save_network(network: BayesianNetwork, file_path: str) -> None:
    """
    保存网络到文件

    Args:
        network: BayesianNetwork对象
        file_path: 文件路径
    """
    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(format_network(network))
    logger.info(f"网络已保存: {file_path}（{len(network)} 个变量, {len(network.cpts)} 个CPT）")


def _tokenize(text: str) -> List[Tuple[int, List[str]]]:
    """去掉注释和空行，返回 (行号, 词列表)"""
    rows = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        try:
            rows.append((line_no, shlex.split(stripped)))
        except ValueError as e:
            raise NetworkFormatError(f"第 {line_no} 行无法解析: {e}") from e
    return rows


def _parse_int(token: str, line_no: int) -> int:
    try:
        return int(token)
    except ValueError:
        raise NetworkFormatError(f"第 {line_no} 行应为整数: {token!r}") from None


def parse_network(text: str) -> BayesianNetwork:
    """
    从文本解析网络

    依次重放 add_variable / add_edge / set_cpt，因此所有构造约束都会重新检查

    Args:
        text: format_network 产生的文本

    Returns:
        BayesianNetwork对象
    """
    network = BayesianNetwork()
    rows = _tokenize(text)
    section = None
    i = 0

    while i < len(rows):
        line_no, tokens = rows[i]
        if len(tokens) == 1 and tokens[0] in SECTIONS:
            section = tokens[0]
            i += 1
            continue

        try:
            if section == 'NODES':
                if len(tokens) < 3:
                    raise NetworkFormatError(f"第 {line_no} 行节点定义不完整")
                variable_id, name = tokens[0], tokens[1]
                count = _parse_int(tokens[2], line_no)
                states = tokens[3:]
                if len(states) != count:
                    raise NetworkFormatError(
                        f"第 {line_no} 行声明 {count} 个状态，实际给出 {len(states)} 个"
                    )
                network.add_variable(variable_id, name, states)
                i += 1

            elif section == 'EDGES':
                if len(tokens) != 3 or tokens[1] != '->':
                    raise NetworkFormatError(f"第 {line_no} 行边的格式应为 'parent -> child'")
                network.add_edge(tokens[0], tokens[2])
                i += 1

            elif section == 'CPTS':
                if i + 2 >= len(rows):
                    raise NetworkFormatError(f"第 {line_no} 行之后的CPT定义不完整")
                variable_id = tokens[0]
                dims_line, dims_tokens = rows[i + 1]
                values_line, value_tokens = rows[i + 2]

                ndims = _parse_int(dims_tokens[0], dims_line)
                dimensions = [_parse_int(t, dims_line) for t in dims_tokens[1:]]
                if len(dimensions) != ndims:
                    raise NetworkFormatError(f"第 {dims_line} 行声明 {ndims} 个维度，实际给出 {len(dimensions)} 个")
                try:
                    values = [float(t) for t in value_tokens]
                except ValueError as e:
                    raise NetworkFormatError(f"第 {values_line} 行概率值无法解析: {e}") from None

                network.set_cpt(variable_id, ConditionalProbabilityTable.from_values(dimensions, values))
                i += 3

            else:
                raise NetworkFormatError(f"第 {line_no} 行出现在任何段（{'/'.join(SECTIONS)}）之前")

        except NetworkFormatError:
            raise
        except BayesNetError as e:
            raise NetworkFormatError(f"第 {line_no} 行: {e}") from e

    return network


def load_network(file_path: str) -> BayesianNetwork:
    """
    从文件加载网络

    Args:
        file_path: 文件路径

    Returns:
        BayesianNetwork对象
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        network = parse_network(f.read())
    logger.info(f"网络已加载: {file_path}（{len(network)} 个变量, {len(network.cpts)} 个CPT）")
    return network


def save_data(df: pd.DataFrame, file_path: str) -> None:
    """
    保存结果表

    Args:
        df: DataFrame
        file_path: 文件路径（.csv 或 .parquet）
    """
    if file_path.endswith('.parquet'):
        df.to_parquet(file_path, index=False)
    elif file_path.endswith('.csv'):
        df.to_csv(file_path, index=False, encoding='utf-8-sig')
    else:
        raise ValueError(f"不支持的文件格式: {file_path}")


def save_metadata(metadata: Dict[str, Any], output_path: str) -> None:
    """
    保存元数据到YAML文件

    Args:
        metadata: 元数据字典
        output_path: 输出路径
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        yaml.dump(metadata, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
