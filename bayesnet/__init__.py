#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
无损离散贝叶斯网络
精确推断（变量消元）与正向/反向置信传播
"""
__version__ = "0.1.0"
