#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
测试网络文本格式的保存与加载
"""
import os
import shutil
import tempfile
import unittest

import numpy as np
import pandas as pd
import yaml

from bayesnet.bayes.errors import CycleDetectedError, NetworkFormatError
from bayesnet.bayes.examples import build_alarm_network
from bayesnet.bayes.inference import BayesianInference, results_to_frame
from bayesnet.bayes.structure import BayesianNetwork
from bayesnet.utils.io import format_network, load_network, parse_network, save_data, save_metadata, save_network


class TestNetworkPersistence(unittest.TestCase):
    """测试保存/加载往返"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_round_trip(self):
        """加载后结构和CPT数值完全一致"""
        network = build_alarm_network()
        path = os.path.join(self.temp_dir, 'alarm.bn')
        save_network(network, path)
        loaded = load_network(path)

        self.assertEqual(loaded.get_variable_ids(), network.get_variable_ids())
        self.assertEqual(loaded.get_edges(), network.get_edges())
        self.assertEqual(loaded.get_topological_order(), network.get_topological_order())
        for variable_id in network.get_variable_ids():
            self.assertEqual(loaded.get_variable(variable_id).states, network.get_variable(variable_id).states)
            np.testing.assert_array_equal(loaded.get_cpt(variable_id).values(), network.get_cpt(variable_id).values())

        evidence = {'JohnCalls': 'True', 'MaryCalls': 'True'}
        self.assertEqual(
            BayesianInference(loaded).predict('Burglary', evidence),
            BayesianInference(network).predict('Burglary', evidence)
        )

    def test_names_with_spaces(self):
        network = BayesianNetwork()
        network.add_variable('temp', 'Body Temp', ['Normal', 'Very High'])
        network.define_cpt('temp', {(): [0.9, 0.1]})

        loaded = parse_network(format_network(network))
        variable = loaded.get_variable('temp')
        self.assertEqual(variable.name, 'Body Temp')
        self.assertEqual(variable.states, ['Normal', 'Very High'])

    def test_round_trip_after_cpt_detached(self):
        """先设CPT再加边后保存，文件可以重新加载"""
        network = BayesianNetwork()
        network.add_variable('A', 'A', ['F', 'T'])
        network.add_variable('B', 'B', ['F', 'T'])
        network.define_cpt('A', {(): [0.7, 0.3]})
        network.define_cpt('B', {(): [0.5, 0.5]})
        network.add_edge('A', 'B')

        path = os.path.join(self.temp_dir, 'detached.bn')
        save_network(network, path)
        loaded = load_network(path)
        self.assertEqual(loaded.get_edges(), [('A', 'B')])
        self.assertTrue(loaded.has_cpt('A'))
        self.assertFalse(loaded.has_cpt('B'))

    def test_variable_without_cpt(self):
        """未设置CPT的变量只写入 NODES 段"""
        network = BayesianNetwork()
        network.add_variable('A', 'A', ['x', 'y'])
        loaded = parse_network(format_network(network))
        self.assertIn('A', loaded)
        self.assertFalse(loaded.has_cpt('A'))


class TestNetworkFormatErrors(unittest.TestCase):
    """测试格式错误"""

    def test_cycle_reports_line(self):
        text = "\n".join([
            "NODES",
            "A A 2 x y",
            "B B 2 x y",
            "EDGES",
            "A -> B",
            "B -> A",
        ])
        with self.assertRaises(NetworkFormatError) as ctx:
            parse_network(text)
        self.assertIn('第 6 行', str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, CycleDetectedError)

    def test_state_count_mismatch(self):
        with self.assertRaises(NetworkFormatError):
            parse_network("NODES\nA A 3 x y\n")

    def test_content_before_section(self):
        with self.assertRaises(NetworkFormatError):
            parse_network("A -> B\n")

    def test_bad_edge_line(self):
        with self.assertRaises(NetworkFormatError):
            parse_network("NODES\nA A 1 x\nB B 1 x\nEDGES\nA B\n")

    def test_bad_cpt_values(self):
        """概率越界或维度不符时报告格式错误"""
        base = "NODES\nA A 2 x y\nCPTS\nA\n"
        with self.assertRaises(NetworkFormatError):
            parse_network(base + "1 2\n0.5 1.5\n")
        with self.assertRaises(NetworkFormatError):
            parse_network(base + "1 3\n0.2 0.3 0.5\n")
        with self.assertRaises(NetworkFormatError):
            parse_network(base + "1 2\n0.5 abc\n")
        with self.assertRaises(NetworkFormatError):
            parse_network(base + "1 2\n")


class TestExports(unittest.TestCase):
    """测试元数据与结果表导出"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_save_metadata(self):
        structure = build_alarm_network().export_structure()
        path = os.path.join(self.temp_dir, 'structure.yaml')
        save_metadata(structure, path)
        with open(path, 'r', encoding='utf-8') as f:
            self.assertEqual(yaml.safe_load(f), structure)

    def test_save_data_csv(self):
        result = BayesianInference(build_alarm_network()).variable_elimination(['Alarm'], {})
        df = results_to_frame(['Alarm'], result)
        path = os.path.join(self.temp_dir, 'result.csv')
        save_data(df, path)

        loaded = pd.read_csv(path, encoding='utf-8-sig')
        self.assertEqual(list(loaded.columns), ['Alarm', 'probability'])
        self.assertAlmostEqual(loaded['probability'].sum(), 1.0)

    def test_save_data_unknown_format(self):
        with self.assertRaises(ValueError):
            save_data(pd.DataFrame(), os.path.join(self.temp_dir, 'result.txt'))


if __name__ == '__main__':
    unittest.main()
