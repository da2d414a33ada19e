# cython: language_level=3
# cython: profile=True

"""Module for signal blocks: maximal runs of contiguous non-zero
signal in a SignalTrack, together with their area under the curve and
peak height.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

# ------------------------------------
# python modules
# ------------------------------------

# ------------------------------------
# SEACR modules
# ------------------------------------
from SEACR.Utilities.Errors import MalformedTrackError

# ------------------------------------
# Other modules
# ------------------------------------
import cython
import numpy as np

# ------------------------------------
# Misc functions
# ------------------------------------


@cython.ccall
def segment_chrom(chrom: bytes, starts, ends, values) -> list:
    """Cut the intervals of one chromosome into Blocks.

    Two consecutive intervals are in the same Block only if the end of
    the first equals the start of the second. AUC is summed in input
    order. The max region is the envelope from the first to the last
    interval reaching the maximum value, so it may bridge lower
    intervals lying between two maximal ones.
    """
    blocks: list
    n: cython.long
    i: cython.long
    s: cython.long
    e: cython.long
    v: cython.double
    b_start: cython.long
    b_end: cython.long
    auc: cython.double
    max_v: cython.double
    max_s: cython.long
    max_e: cython.long

    blocks = []
    n = len(starts)
    if n == 0:
        return blocks

    b_start = starts[0]
    b_end = ends[0]
    auc = values[0] * (b_end - b_start)
    max_v = values[0]
    max_s = b_start
    max_e = b_end

    for i in range(1, n):
        s = starts[i]
        e = ends[i]
        v = values[i]
        if s < b_end:
            raise MalformedTrackError("unsorted or overlapping interval, previous one ends at %d: %s\t%d\t%d\t%g" %
                                      (b_end, chrom.decode(), s, e, v))
        if s == b_end:
            # touching, extend the current block
            auc += v * (e - s)
            if v > max_v:
                max_v = v
                max_s = s
                max_e = e
            elif v == max_v:
                max_e = e
            b_end = e
        else:
            blocks.append(Block(chrom, b_start, b_end, auc, max_v, max_s, max_e))
            b_start = s
            b_end = e
            auc = v * (e - s)
            max_v = v
            max_s = s
            max_e = e
    blocks.append(Block(chrom, b_start, b_end, auc, max_v, max_s, max_e))
    return blocks

# ------------------------------------
# Classes
# ------------------------------------


@cython.cclass
class Block:
    """A maximal run of contiguous non-zero signal.
    """
    chrom = cython.declare(bytes, visibility="readonly")
    start = cython.declare(cython.long, visibility="readonly")
    end = cython.declare(cython.long, visibility="readonly")
    auc = cython.declare(cython.double, visibility="readonly")
    max_signal = cython.declare(cython.double, visibility="readonly")
    max_start = cython.declare(cython.long, visibility="readonly")
    max_end = cython.declare(cython.long, visibility="readonly")

    def __init__(self,
                 chrom: bytes,
                 start: cython.long,
                 end: cython.long,
                 auc: cython.double,
                 max_signal: cython.double,
                 max_start: cython.long,
                 max_end: cython.long):
        self.chrom = chrom
        self.start = start
        self.end = end
        self.auc = auc
        self.max_signal = max_signal
        self.max_start = max_start
        self.max_end = max_end

    @property
    def length(self):
        return self.end - self.start

    @cython.ccall
    def max_region(self) -> str:
        return "%s:%d-%d" % (self.chrom.decode(), self.max_start, self.max_end)

    @cython.ccall
    def scaled(self, factor: cython.double):
        """Return a copy with auc multiplied by factor. The height
        is left untouched.
        """
        return Block(self.chrom, self.start, self.end, self.auc * factor,
                     self.max_signal, self.max_start, self.max_end)

    def as_tuple(self):
        return (self.chrom, self.start, self.end, self.auc,
                self.max_signal, self.max_start, self.max_end)

    def __str__(self):
        return "%s\t%d\t%d\t%g\t%g\t%s" % (self.chrom.decode(),
                                            self.start,
                                            self.end,
                                            self.auc,
                                            self.max_signal,
                                            self.max_region())

    def __repr__(self):
        return "Block(%s)" % (self.__str__().replace("\t", ", "))


@cython.cclass
class BlockSet:
    """Blocks of one track, by chromosome, in position order.

    Derived sets (filtered, scaled, subset) are new objects, a
    BlockSet is not changed once it has been handed to the next
    stage.
    """
    blocks = cython.declare(dict, visibility="readonly")
    total = cython.declare(cython.long, visibility="readonly")

    def __init__(self):
        self.blocks = {}
        self.total = 0

    @cython.ccall
    def add_block(self, block: Block):
        if block.chrom not in self.blocks:
            self.blocks[block.chrom] = []
        self.blocks[block.chrom].append(block)
        self.total += 1

    @cython.ccall
    def get_chr_names(self) -> list:
        return list(self.blocks.keys())

    @cython.ccall
    def get_data_by_chr(self, chrom: bytes) -> list:
        if chrom in self.blocks:
            return self.blocks[chrom]
        else:
            return []

    @cython.ccall
    def to_list(self) -> list:
        chrom: bytes
        ret: list

        ret = []
        for chrom in self.blocks:
            ret.extend(self.blocks[chrom])
        return ret

    @cython.ccall
    def aucs(self):
        """AUC of every block as a float64 numpy array, position
        order.
        """
        i: cython.long
        ret = np.zeros(self.total, dtype=np.float64)
        i = 0
        for b in self.to_list():
            ret[i] = b.auc
            i += 1
        return ret

    @cython.ccall
    def max_signals(self):
        i: cython.long
        ret = np.zeros(self.total, dtype=np.float64)
        i = 0
        for b in self.to_list():
            ret[i] = b.max_signal
            i += 1
        return ret

    @cython.ccall
    def lengths(self):
        i: cython.long
        ret = np.zeros(self.total, dtype=np.int64)
        i = 0
        for b in self.to_list():
            ret[i] = b.end - b.start
            i += 1
        return ret

    @cython.ccall
    def total_auc(self) -> cython.double:
        """Sum of all AUCs, added in position order.
        """
        s: cython.double

        s = 0
        for b in self.to_list():
            s += b.auc
        return s

    @cython.ccall
    def filter(self, auc_cutoff: cython.double, height_cutoff: cython.double):
        """Keep blocks with auc > auc_cutoff and max_signal > height_cutoff.
        """
        ret = BlockSet()
        for b in self.to_list():
            if b.auc > auc_cutoff and b.max_signal > height_cutoff:
                ret.add_block(b)
        return ret

    @cython.ccall
    def filter_auc(self, auc_cutoff: cython.double):
        """Keep blocks with auc > auc_cutoff.
        """
        ret = BlockSet()
        for b in self.to_list():
            if b.auc > auc_cutoff:
                ret.add_block(b)
        return ret

    @cython.ccall
    def scale_auc(self, factor: cython.double):
        """Return a new BlockSet with every auc multiplied by factor.
        """
        ret = BlockSet()
        for b in self.to_list():
            ret.add_block(b.scaled(factor))
        return ret

    @cython.ccall
    def subset(self, chroms):
        """Return a new BlockSet with the blocks on chroms only.
        """
        chrom: bytes

        ret = BlockSet()
        for chrom in self.blocks:
            if chrom in chroms:
                for b in self.blocks[chrom]:
                    ret.add_block(b)
        return ret

    def __iter__(self):
        return iter(self.to_list())

    def __len__(self):
        return self.total

    def __str__(self):
        ret = ""
        for b in self.to_list():
            ret += str(b) + "\n"
        return ret


class BlockSegmenter:
    """Lazy, restartable sequence of the Blocks of a SignalTrack.

    Each iteration walks the track again from the first chromosome,
    one chromosome at a time, so the track is never copied.

    Example:

        blocks = BlockSegmenter(track).to_blockset()
    """

    def __init__(self, track):
        self.track = track

    def __iter__(self):
        for chrom in self.track.get_chr_names():
            (starts, ends, values) = self.track.get_data_by_chr(chrom)
            yield from segment_chrom(chrom, starts, ends, values)

    def to_blockset(self):
        blocks = BlockSet()
        for b in self:
            blocks.add_block(b)
        return blocks
