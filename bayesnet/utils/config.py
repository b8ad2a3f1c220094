#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
配置工具
"""
import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

DEFAULT_CONFIG: Dict[str, Any] = {
    'logging': {
        'level': 'INFO',
    },
    'inference': {
        'show_progress': False,
        'trace_influence': True,
    },
    'output': {
        'metadata_dir': 'metadata',
        'results_dir': 'results',
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = "config.yaml") -> Dict[str, Any]:
    """
    加载配置文件，缺省项用 DEFAULT_CONFIG 补齐

    Args:
        config_path: 配置文件路径；为 None 或文件不存在时只返回默认配置

    Returns:
        配置字典
    """
    if config_path is None or not Path(config_path).exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f) or {}
    return _merge(DEFAULT_CONFIG, config)


def ensure_dir(directory: str) -> None:
    """
    确保目录存在，不存在则创建

    Args:
        directory: 目录路径
    """
    if directory:  # 防止空字符串
        Path(directory).mkdir(parents=True, exist_ok=True)
