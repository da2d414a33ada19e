#!/usr/bin/env python
# Time-stamp: <2026-10-12 15:40:07 SEACR>

import unittest

import numpy as np
import pytest

from SEACR.Signal.SignalTrack import SignalTrack
from SEACR.Signal.Block import Block, BlockSet, BlockSegmenter, segment_chrom
from SEACR.Utilities.Errors import MalformedTrackError


def build_track(records):
    track = SignalTrack()
    for r in records:
        track.add_loc(*r)
    return track


class Test_BlockSegmenter(unittest.TestCase):

    def setUp(self):
        self.records = [(b"chr1", 10, 20, 1.0),
                        (b"chr1", 20, 30, 3.0),
                        (b"chr1", 30, 40, 3.0),
                        (b"chr1", 50, 60, 2.0),
                        (b"chr2", 0, 5, 4.0),
                        (b"chr2", 5, 6, 1.0)]
        self.track = build_track(self.records)
        # chrom, start, end, auc, max signal, max start, max end
        self.expected = [(b"chr1", 10, 40, 70.0, 3.0, 20, 40),
                         (b"chr1", 50, 60, 20.0, 2.0, 50, 60),
                         (b"chr2", 0, 6, 21.0, 4.0, 0, 5)]

    def test_segment(self):
        blocks = [b.as_tuple() for b in BlockSegmenter(self.track)]
        self.assertEqual(blocks, self.expected)

    def test_restartable(self):
        seg = BlockSegmenter(self.track)
        first = [b.as_tuple() for b in seg]
        second = [b.as_tuple() for b in seg]
        self.assertEqual(first, second)

    def test_auc_conservation(self):
        blocks = BlockSegmenter(self.track).to_blockset()
        self.assertAlmostEqual(blocks.total_auc(), self.track.total_signal())

    def test_one_base_gap(self):
        track = build_track([(b"chr1", 0, 10, 1.0),
                             (b"chr1", 11, 20, 1.0)])
        blocks = BlockSegmenter(track).to_blockset()
        self.assertEqual(blocks.total, 2)

    def test_zero_interval_splits(self):
        track = build_track([(b"chr1", 0, 10, 1.0),
                             (b"chr1", 10, 20, 0.0),
                             (b"chr1", 20, 30, 1.0)])
        blocks = BlockSegmenter(track).to_blockset()
        self.assertEqual([(b.start, b.end) for b in blocks], [(0, 10), (20, 30)])

    def test_max_envelope(self):
        # ties extend the max region over lower intervals in between
        track = build_track([(b"chr1", 0, 10, 5.0),
                             (b"chr1", 10, 20, 5.0),
                             (b"chr1", 20, 30, 3.0),
                             (b"chr1", 30, 40, 5.0)])
        (b,) = list(BlockSegmenter(track))
        self.assertEqual((b.max_start, b.max_end), (0, 40))
        self.assertEqual(b.max_region(), "chr1:0-40")

    def test_max_reset(self):
        # a strictly higher value starts a new max region
        track = build_track([(b"chr1", 0, 10, 2.0),
                             (b"chr1", 10, 20, 5.0),
                             (b"chr1", 20, 30, 3.0),
                             (b"chr1", 30, 40, 7.0)])
        (b,) = list(BlockSegmenter(track))
        self.assertEqual(b.max_signal, 7.0)
        self.assertEqual((b.max_start, b.max_end), (30, 40))

    def test_empty_track(self):
        self.assertEqual(list(BlockSegmenter(SignalTrack())), [])


def test_segment_chrom_rejects_overlap():
    with pytest.raises(MalformedTrackError):
        segment_chrom(b"chr1", [0, 5], [10, 20], [1.0, 1.0])


@pytest.fixture
def blockset():
    bs = BlockSet()
    bs.add_block(Block(b"chr1", 0, 10, 50.0, 5.0, 0, 10))
    bs.add_block(Block(b"chr1", 20, 25, 10.0, 2.0, 20, 25))
    bs.add_block(Block(b"chr2", 0, 30, 30.0, 1.0, 0, 30))
    return bs


def test_blockset_arrays(blockset):
    np.testing.assert_array_equal(blockset.aucs(), [50.0, 10.0, 30.0])
    np.testing.assert_array_equal(blockset.max_signals(), [5.0, 2.0, 1.0])
    np.testing.assert_array_equal(blockset.lengths(), [10, 5, 30])
    assert blockset.total_auc() == 90.0
    assert blockset.get_chr_names() == [b"chr1", b"chr2"]
    assert len(blockset) == 3


def test_blockset_filter(blockset):
    kept = blockset.filter(10.0, 1.0)
    assert [b.start for b in kept] == [0]
    kept = blockset.filter_auc(10.0)
    assert [(b.chrom, b.start) for b in kept] == [(b"chr1", 0), (b"chr2", 0)]
    # filtering gives a new set
    assert blockset.total == 3


def test_blockset_scale_and_subset(blockset):
    scaled = blockset.scale_auc(2.0)
    np.testing.assert_array_equal(scaled.aucs(), [100.0, 20.0, 60.0])
    np.testing.assert_array_equal(scaled.max_signals(), [5.0, 2.0, 1.0])
    sub = blockset.subset({b"chr2"})
    assert sub.get_chr_names() == [b"chr2"]
    assert sub.total == 1
