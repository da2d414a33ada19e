#!/usr/bin/env python

import unittest

from SEACR.Signal.Block import Block, BlockSet
from SEACR.Signal.Threshold import ThresholdResult
from SEACR.Signal.RegionFilter import filter_blocks


class Test_RegionFilter(unittest.TestCase):

    def setUp(self):
        self.exp = BlockSet()
        for (s, e, auc, h) in [(0, 10, 50.0, 5.0),
                               (20, 30, 8.0, 3.0),
                               (40, 60, 20.0, 1.0),
                               (70, 80, 10.0, 4.0)]:
            self.exp.add_block(Block(b"chr1", s, e, auc, h, s, e))
        self.ctrl = BlockSet()
        for (s, e, auc) in [(0, 5, 6.0),
                            (30, 35, 4.0)]:
            self.ctrl.add_block(Block(b"chr1", s, e, auc, 1.0, s, e))
        self.result = ThresholdResult("control", 10.0, 5.0, 2.0,
                                      stringent_fdr=0.0,
                                      relaxed_fdr=0.1,
                                      norm_constant=2.0)

    def test_stringent(self):
        (exp_kept, ctrl_kept) = filter_blocks(self.result, self.exp, self.ctrl, "stringent")
        # auc must be strictly above 10, so the 10.0 block goes
        self.assertEqual([b.start for b in exp_kept], [0])
        # control AUCs are scaled by 2 before the comparison
        self.assertEqual([b.start for b in ctrl_kept], [0])
        self.assertEqual([b.auc for b in ctrl_kept], [12.0])

    def test_relaxed(self):
        (exp_kept, ctrl_kept) = filter_blocks(self.result, self.exp, self.ctrl, "relaxed")
        self.assertEqual([b.start for b in exp_kept], [0, 20, 70])
        # control blocks always use the stringent cutoff
        self.assertEqual([b.start for b in ctrl_kept], [0])

    def test_without_control(self):
        result = ThresholdResult("fraction", 9.0, 9.0, 0.5)
        (exp_kept, ctrl_kept) = filter_blocks(result, self.exp)
        self.assertIsNone(ctrl_kept)
        self.assertEqual([b.start for b in exp_kept], [0, 40, 70])

    def test_bad_height(self):
        with self.assertRaises(ValueError):
            filter_blocks(self.result, self.exp, self.ctrl, "medium")
