#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
日志工具
"""
import os
import logging
from pathlib import Path
from typing import Optional

# 所有记录器挂在该命名空间下，便于统一调整级别
LOGGER_NAMESPACE = "bayesnet"

_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(name: str, log_dir: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    设置日志记录器

    Args:
        name: 日志记录器名称（自动加上 bayesnet. 前缀）
        log_dir: 日志目录，默认取环境变量 BAYESNET_LOG_DIR，否则为 logs；空字符串表示不写文件
        level: 日志级别，默认取环境变量 BAYESNET_LOG_LEVEL，否则为 INFO

    Returns:
        配置好的日志记录器
    """
    if log_dir is None:
        log_dir = os.environ.get("BAYESNET_LOG_DIR", "logs")
    if level is None:
        level = os.environ.get("BAYESNET_LOG_LEVEL", "INFO")

    logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
    logger.setLevel(getattr(logging, level.upper()))

    # 避免重复添加处理器
    if logger.handlers:
        return logger

    formatter = logging.Formatter(_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(
            os.path.join(log_dir, f"{name}.log"),
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # 不向根记录器重复输出
    logger.propagate = False
    return logger


def set_log_level(level: str) -> None:
    """
    统一调整所有 bayesnet 记录器的级别

    Args:
        level: 日志级别名称，如 'DEBUG'、'WARNING'
    """
    numeric = getattr(logging, level.upper())
    prefix = f"{LOGGER_NAMESPACE}."
    for logger_name, logger in logging.Logger.manager.loggerDict.items():
        if logger_name.startswith(prefix) and isinstance(logger, logging.Logger):
            logger.setLevel(numeric)
