#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
测试配置、日志工具和错误类型
"""
import logging
import os
import shutil
import tempfile
import unittest

from bayesnet.bayes import errors
from bayesnet.utils.config import DEFAULT_CONFIG, ensure_dir, load_config
from bayesnet.utils.logging import set_log_level, setup_logger


class TestConfig(unittest.TestCase):
    """测试配置加载"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_defaults(self):
        config = load_config(None)
        self.assertEqual(config, DEFAULT_CONFIG)
        config['logging']['level'] = 'DEBUG'
        self.assertEqual(DEFAULT_CONFIG['logging']['level'], 'INFO')

        missing = load_config(os.path.join(self.temp_dir, 'missing.yaml'))
        self.assertEqual(missing, DEFAULT_CONFIG)

    def test_partial_override(self):
        """只覆盖给出的键，其余用默认值补齐"""
        path = os.path.join(self.temp_dir, 'config.yaml')
        with open(path, 'w', encoding='utf-8') as f:
            f.write("inference:\n  show_progress: true\n")

        config = load_config(path)
        self.assertTrue(config['inference']['show_progress'])
        self.assertTrue(config['inference']['trace_influence'])
        self.assertEqual(config['output']['results_dir'], 'results')

    def test_ensure_dir(self):
        target = os.path.join(self.temp_dir, 'a', 'b')
        ensure_dir(target)
        self.assertTrue(os.path.isdir(target))
        ensure_dir('')


class TestLogging(unittest.TestCase):
    """测试日志工具"""

    def test_namespace_and_console_only(self):
        logger = setup_logger('test_console_only', log_dir='', level='WARNING')
        self.assertEqual(logger.name, 'bayesnet.test_console_only')
        self.assertEqual(logger.level, logging.WARNING)
        self.assertEqual(len(logger.handlers), 1)
        self.assertFalse(logger.propagate)

    def test_file_handler(self):
        temp_dir = tempfile.mkdtemp()
        try:
            logger = setup_logger('test_file_handler', log_dir=temp_dir)
            logger.info("写入文件")
            for handler in logger.handlers:
                handler.flush()
            self.assertTrue(os.path.exists(os.path.join(temp_dir, 'test_file_handler.log')))
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            shutil.rmtree(temp_dir)

    def test_set_log_level(self):
        logger = setup_logger('test_set_level', log_dir='')
        set_log_level('ERROR')
        try:
            self.assertEqual(logger.level, logging.ERROR)
        finally:
            set_log_level('INFO')


class TestErrorHierarchy(unittest.TestCase):
    """错误类型同时属于包内基类和对应的内置异常"""

    def test_base_class(self):
        for name in ['DuplicateIdError', 'UnknownVariableError', 'SelfLoopError', 'CycleDetectedError',
                     'InvalidStateError', 'InvalidNameError', 'ProbabilityOutOfRangeError', 'InvalidShapeError',
                     'CPTIndexError', 'ShapeMismatchError', 'MissingCPTError',
                     'MissingAssignmentError', 'MissingParentAssignmentError', 'NetworkFormatError']:
            self.assertTrue(issubclass(getattr(errors, name), errors.BayesNetError), name)

    def test_builtin_bases(self):
        self.assertTrue(issubclass(errors.UnknownVariableError, KeyError))
        self.assertTrue(issubclass(errors.CPTIndexError, IndexError))
        self.assertTrue(issubclass(errors.CycleDetectedError, ValueError))
        self.assertTrue(issubclass(errors.MissingParentAssignmentError, errors.MissingAssignmentError))

    def test_message_not_quoted(self):
        """KeyError 子类的消息不带多余引号"""
        self.assertEqual(str(errors.UnknownVariableError("变量不存在: X")), "变量不存在: X")


if __name__ == '__main__':
    unittest.main()
