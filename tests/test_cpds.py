#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
测试条件概率表
"""
import unittest
import numpy as np

from bayesnet.bayes.cpds import ConditionalProbabilityTable
from bayesnet.bayes.errors import CPTIndexError, InvalidShapeError, ProbabilityOutOfRangeError


class TestCPTConstruction(unittest.TestCase):
    """测试CPT构造与步长"""

    def test_zero_initialized(self):
        """新建CPT全为0"""
        cpt = ConditionalProbabilityTable([3, 2])
        self.assertEqual(cpt.table.size, 6)
        self.assertTrue(np.all(cpt.table == 0.0))
        self.assertEqual(cpt.get_probability([2], 1), 0.0)

    def test_row_major_strides(self):
        """最后一维步长为1"""
        cpt = ConditionalProbabilityTable([2, 3, 4])
        self.assertEqual(cpt.strides, (12, 4, 1))
        self.assertEqual(cpt.num_parent_configurations, 6)
        self.assertEqual(cpt.num_states, 4)

    def test_invalid_shape(self):
        """空维度或零维度非法"""
        with self.assertRaises(InvalidShapeError):
            ConditionalProbabilityTable([])
        with self.assertRaises(InvalidShapeError):
            ConditionalProbabilityTable([2, 0])

    def test_from_values(self):
        """按行优先扁平值构造"""
        cpt = ConditionalProbabilityTable.from_values([2, 2], [0.1, 0.9, 0.4, 0.6])
        self.assertAlmostEqual(cpt.get_probability([1], 0), 0.4)
        with self.assertRaises(CPTIndexError):
            ConditionalProbabilityTable.from_values([2, 2], [0.5, 0.5])
        with self.assertRaises(ProbabilityOutOfRangeError):
            ConditionalProbabilityTable.from_values([2], [1.5, -0.5])


class TestCPTAccess(unittest.TestCase):
    """测试读写与索引校验"""

    def setUp(self):
        self.cpt = ConditionalProbabilityTable([3, 2])

    def test_set_and_get(self):
        self.cpt.set_probability([1], 0, 0.7)
        self.assertAlmostEqual(self.cpt.get_probability([1], 0), 0.7)
        self.assertEqual(self.cpt.get_probability([1], 1), 0.0)

    def test_probability_range(self):
        """概率值必须在 [0, 1]"""
        with self.assertRaises(ProbabilityOutOfRangeError):
            self.cpt.set_probability([0], 0, 1.2)
        with self.assertRaises(ProbabilityOutOfRangeError):
            self.cpt.set_probability([0], 0, -0.1)
        with self.assertRaises(ProbabilityOutOfRangeError):
            self.cpt.set_probability([0], 0, float('nan'))

    def test_index_validation(self):
        """索引数量不符或越界"""
        with self.assertRaises(CPTIndexError):
            self.cpt.set_probability([], 0, 0.5)
        with self.assertRaises(CPTIndexError):
            self.cpt.get_probability([0, 0], 0)
        with self.assertRaises(CPTIndexError):
            self.cpt.get_probability([3], 0)
        with self.assertRaises(CPTIndexError):
            self.cpt.set_probability([0], 2, 0.5)


class TestCPTNormalization(unittest.TestCase):
    """测试归一化与有效性检查"""

    def test_normalize_makes_valid(self):
        """归一化后每个父配置之和为1，且幂等"""
        cpt = ConditionalProbabilityTable([2, 3])
        cpt.set_probability([0], 0, 0.2)
        cpt.set_probability([0], 1, 0.2)
        cpt.set_probability([0], 2, 0.4)
        cpt.set_probability([1], 2, 0.5)
        self.assertFalse(cpt.is_valid())

        cpt.normalize()
        self.assertTrue(cpt.is_valid())
        self.assertAlmostEqual(cpt.get_probability([0], 2), 0.5)
        self.assertAlmostEqual(cpt.get_probability([1], 2), 1.0)

        before = cpt.values()
        cpt.normalize()
        np.testing.assert_allclose(cpt.values(), before)

    def test_degenerate_configuration(self):
        """全零配置保持为0，因此无效"""
        cpt = ConditionalProbabilityTable([2, 2])
        cpt.set_probability([0], 0, 0.3)
        cpt.normalize()
        self.assertAlmostEqual(cpt.get_probability([0], 0), 1.0)
        self.assertEqual(cpt.get_probability([1], 0), 0.0)
        self.assertEqual(cpt.get_probability([1], 1), 0.0)
        self.assertFalse(cpt.is_valid())

    def test_root_cpt(self):
        """无父节点的CPT"""
        cpt = ConditionalProbabilityTable([3])
        for i, value in enumerate([0.7, 0.2, 0.1]):
            cpt.set_probability([], i, value)
        self.assertTrue(cpt.is_valid())
        np.testing.assert_allclose(cpt.distribution([]), [0.7, 0.2, 0.1])

    def test_multi_parent_normalize_uses_same_layout(self):
        """多父节点且维度不同时，归一化作用于 get/set 对应的同一组单元"""
        cpt = ConditionalProbabilityTable([2, 3, 2])
        cpt.set_probability([0, 1], 0, 0.2)
        cpt.set_probability([0, 1], 1, 0.2)
        cpt.set_probability([1, 2], 0, 0.1)
        cpt.set_probability([1, 2], 1, 0.3)
        cpt.normalize()

        self.assertAlmostEqual(cpt.get_probability([0, 1], 0), 0.5)
        self.assertAlmostEqual(cpt.get_probability([0, 1], 1), 0.5)
        self.assertAlmostEqual(cpt.get_probability([1, 2], 0), 0.25)
        self.assertAlmostEqual(cpt.get_probability([1, 2], 1), 0.75)
        self.assertEqual(cpt.get_probability([1, 0], 0), 0.0)
        self.assertEqual(cpt.get_probability([0, 2], 1), 0.0)

    def test_tolerance(self):
        cpt = ConditionalProbabilityTable.from_values([2], [0.5, 0.5000001])
        self.assertTrue(cpt.is_valid())
        self.assertFalse(cpt.is_valid(tolerance=1e-9))

    def test_copy_is_independent(self):
        cpt = ConditionalProbabilityTable.from_values([2], [0.4, 0.6])
        clone = cpt.copy()
        clone.set_probability([], 0, 0.1)
        self.assertAlmostEqual(cpt.get_probability([], 0), 0.4)


if __name__ == '__main__':
    unittest.main()
