#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
贝叶斯网络异常定义
构造期错误（重复ID、自环、环）和查询期错误（缺失CPT、缺失赋值等）
"""


class BayesNetError(Exception):
    """贝叶斯网络所有异常的基类"""


class DuplicateIdError(BayesNetError, ValueError):
    """变量ID已存在"""


class UnknownVariableError(BayesNetError, KeyError):
    """变量ID不存在"""

    def __str__(self):
        # KeyError 默认会给消息加引号
        return str(self.args[0]) if self.args else ''


class SelfLoopError(BayesNetError, ValueError):
    """试图添加自环边"""


class CycleDetectedError(BayesNetError, ValueError):
    """添加边会导致图中出现环"""


class InvalidStateError(BayesNetError, ValueError):
    """未知的状态名，或状态列表为空/重复"""


class InvalidNameError(BayesNetError, ValueError):
    """变量ID、名称或状态名包含换行符"""


class ProbabilityOutOfRangeError(BayesNetError, ValueError):
    """概率值不在 [0, 1] 区间内"""


class InvalidShapeError(BayesNetError, ValueError):
    """CPT维度非法（空维度或某一维为0）"""


class CPTIndexError(BayesNetError, IndexError):
    """CPT索引数量不匹配或越界"""


class ShapeMismatchError(BayesNetError, ValueError):
    """CPT形状与变量的父节点/状态数不一致"""


class MissingCPTError(BayesNetError, LookupError):
    """变量尚未设置CPT"""


class MissingAssignmentError(BayesNetError, KeyError):
    """赋值中缺少某个变量"""

    def __str__(self):
        return str(self.args[0]) if self.args else ''


class MissingParentAssignmentError(MissingAssignmentError):
    """条件概率查询缺少父节点的取值"""


class NetworkFormatError(BayesNetError, ValueError):
    """网络文件格式错误"""
