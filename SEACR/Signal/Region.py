# cython: language_level=3
# cython: profile=True

"""Module to merge thresholded blocks into enriched regions and to
remove regions enriched in control.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

# ------------------------------------
# SEACR modules
# ------------------------------------
from SEACR.Utilities.Constants import GAP_DIVISOR
from SEACR.IO.RegionIO import RegionIO
from SEACR.Utilities.Logger import logging

# ------------------------------------
# Other modules
# ------------------------------------
import cython

logger = logging.getLogger(__name__)
debug = logger.debug

# ------------------------------------
# Misc functions
# ------------------------------------


@cython.ccall
def gap_tolerance(blocks) -> cython.double:
    """Mean block length divided by GAP_DIVISOR, 0 without blocks.
    """
    if blocks.total == 0:
        return 0.0
    return blocks.lengths().sum() / (blocks.total * GAP_DIVISOR)


@cython.ccall
def merge_blocks(blocks, gap: cython.double):
    """Merge position sorted blocks into a RegionIO.

    A block joins the region being built when it is on the same
    chromosome and starts no more than gap bps after the region's end.
    The sweep is done once, left to right, so chains of close blocks
    collapse into one region. A region's max signal region is the one
    of its first block reaching the highest max signal.
    """
    chrom: bytes
    bs: list
    i: cython.long
    s: cython.long
    e: cython.long
    auc: cython.double
    max_v: cython.double
    max_s: cython.long
    max_e: cython.long

    ret = RegionIO()
    for chrom in blocks.get_chr_names():
        bs = blocks.get_data_by_chr(chrom)
        if not bs:
            continue
        b = bs[0]
        s = b.start
        e = b.end
        auc = b.auc
        max_v = b.max_signal
        max_s = b.max_start
        max_e = b.max_end
        for i in range(1, len(bs)):
            b = bs[i]
            if b.start - e <= gap:
                if b.end > e:
                    e = b.end
                auc += b.auc
                if b.max_signal > max_v:
                    max_v = b.max_signal
                    max_s = b.max_start
                    max_e = b.max_end
            else:
                ret.add(chrom, s, e, auc, max_v, max_s, max_e)
                s = b.start
                e = b.end
                auc = b.auc
                max_v = b.max_signal
                max_s = b.max_start
                max_e = b.max_end
        ret.add(chrom, s, e, auc, max_v, max_s, max_e)
    return ret


@cython.ccall
def exclude_overlapping(regions, ctrl_blocks):
    """Return a new RegionIO without the regions sharing at least one
    base with a control block.

    Both sides are sorted and non-overlapping on each chromosome, so a
    single pointer walks the control blocks while regions are read in
    order.
    """
    chrom: bytes
    rs: list
    cs: list
    j: cython.long
    n_c: cython.long

    ret = RegionIO()
    for chrom in regions.get_chr_names():
        rs = regions.get_data_by_chr(chrom)
        cs = ctrl_blocks.get_data_by_chr(chrom)
        n_c = len(cs)
        j = 0
        for r in rs:
            # control blocks ending before this region can't overlap
            # it, nor any later one
            while j < n_c and cs[j].end <= r.start:
                j += 1
            if j < n_c and cs[j].start < r.end:
                continue
            ret.add_RegionContent(r)
    return ret


@cython.ccall
def merge_and_exclude(exp_blocks, ctrl_blocks=None):
    """Merge filtered experimental blocks with the gap tolerance
    derived from their lengths, then drop regions overlapping filtered
    control blocks if any are given.
    """
    gap: cython.double

    gap = gap_tolerance(exp_blocks)
    debug("merge blocks within %g bps" % gap)
    regions = merge_blocks(exp_blocks, gap)
    if ctrl_blocks is None:
        return regions
    ret = exclude_overlapping(regions, ctrl_blocks)
    debug("%d of %d merged regions overlap control blocks" %
          (regions.total - ret.total, regions.total))
    return ret
