# cython: language_level=3
# cython: profile=True

"""Module for empirical AUC thresholds.

Two ways to pick the cutoffs applied to experimental blocks:

* with a control track (empirical_threshold): the distributions of
  block AUC in experimental and control are compared at every
  candidate cutoff. The stringent cutoff is the peak of the curve of
  retained experimental signal discounted by its empirical FDR, the
  relaxed cutoff is the knee of that curve before the peak;

* with a fraction (fraction_threshold): the cutoff keeping the top
  blocks that together carry the given fraction of the total
  experimental signal.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

# ------------------------------------
# python modules
# ------------------------------------
import warnings

# ------------------------------------
# SEACR modules
# ------------------------------------
from SEACR.Utilities.Constants import MIN_BLOCKS
from SEACR.Utilities.Errors import (InsufficientDataError,
                                    InvalidFractionError,
                                    ControlMismatchError)
from SEACR.Utilities.Logger import logging

# ------------------------------------
# Other modules
# ------------------------------------
import cython
import numpy as np

logger = logging.getLogger(__name__)
debug = logger.debug
info = logger.info

# ------------------------------------
# constants
# ------------------------------------
# columns of a threshold curve
CURVE_DTYPE = np.dtype([('cutoff', np.float64),
                        ('n_exp', np.int64),
                        ('n_ctrl', np.int64),
                        ('fdr', np.float64),
                        ('signal', np.float64),
                        ('score', np.float64)])

# ------------------------------------
# Misc functions
# ------------------------------------


@cython.ccall
def curve_peak(values) -> cython.long:
    """Index of the global maximum of a curve, the first one on ties.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        raise InsufficientDataError("can't find the peak of an empty curve")
    return int(np.argmax(values))


@cython.ccall
def curve_knee(x, y, peak: cython.long) -> cython.long:
    """Knee of the curve (x, y) on its rising part, up to index peak.

    Both axes of the segment [0, peak] are scaled to [0, 1], then the
    knee is the point with the largest perpendicular distance to the
    chord joining the first point and the peak. The first index wins
    ties; a curve with its peak at index 0 has its knee there too.
    """
    xs: cython.double
    ys: cython.double
    cx: cython.double
    cy: cython.double
    chord: cython.double

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if peak < 0 or peak >= x.size or x.size != y.size:
        raise ValueError("peak index %d out of a curve of %d points" % (peak, x.size))
    if peak == 0:
        return 0

    x = x[:peak + 1]
    y = y[:peak + 1]
    xs = x.max() - x.min()
    ys = y.max() - y.min()
    if xs == 0 or ys == 0:
        return 0
    x = (x - x[0]) / xs
    y = (y - y[0]) / ys
    cx = x[peak]
    cy = y[peak]
    chord = np.sqrt(cx * cx + cy * cy)
    dist = np.abs(cx * y - cy * x) / chord
    return int(np.argmax(dist))


@cython.ccall
def threshold_curve(exp_auc, ctrl_auc):
    """Evaluate every candidate cutoff.

    Candidates are the distinct experimental and control AUC values
    from the lowest experimental AUC up to, not including, the
    experimental maximum. At least one experimental block passes each
    of them (a block passes when auc > cutoff), and the FDR steps at
    control values are evaluated too.

    For each cutoff c the curve holds n_exp(c), n_ctrl(c), the
    empirical FDR min(1, n_ctrl/n_exp), the experimental signal
    retained and the score signal * (1 - FDR). Return a numpy
    structured array with CURVE_DTYPE.
    """
    n: cython.long

    exp_sorted = np.sort(np.asarray(exp_auc, dtype=np.float64))
    ctrl_sorted = np.sort(np.asarray(ctrl_auc, dtype=np.float64))
    if exp_sorted.size == 0:
        return np.zeros(0, dtype=CURVE_DTYPE)

    cutoffs = np.union1d(exp_sorted, ctrl_sorted)
    cutoffs = cutoffs[(cutoffs >= exp_sorted[0]) & (cutoffs < exp_sorted[-1])]
    n = cutoffs.size
    curve = np.zeros(n, dtype=CURVE_DTYPE)
    if n == 0:
        return curve

    # index of the first block above each cutoff
    exp_idx = np.searchsorted(exp_sorted, cutoffs, side='right')
    ctrl_idx = np.searchsorted(ctrl_sorted, cutoffs, side='right')
    # suffix[i] = total AUC of exp_sorted[i:]
    suffix = np.cumsum(exp_sorted[::-1])[::-1]

    curve['cutoff'] = cutoffs
    curve['n_exp'] = exp_sorted.size - exp_idx
    curve['n_ctrl'] = ctrl_sorted.size - ctrl_idx
    fdr = np.zeros(n, dtype=np.float64)
    np.divide(curve['n_ctrl'], curve['n_exp'], out=fdr, where=curve['n_exp'] > 0)
    curve['fdr'] = np.minimum(fdr, 1.0)
    curve['signal'] = suffix[exp_idx]
    curve['score'] = curve['signal'] * (1.0 - curve['fdr'])
    return curve


@cython.ccall
def height_cutoff(exp_auc, exp_max, auc_cutoff: cython.double) -> cython.double:
    """Max signal floor paired with an AUC cutoff.

    The quantile of auc_cutoff in the experimental AUC distribution
    is looked up in the experimental max signal distribution
    (inverted CDF). The floor is the largest double below that
    observed height, so blocks reaching it pass the strict
    max_signal > floor test.
    """
    q: cython.double

    exp_auc = np.asarray(exp_auc, dtype=np.float64)
    exp_max = np.asarray(exp_max, dtype=np.float64)
    q = np.count_nonzero(exp_auc <= auc_cutoff) / exp_auc.size
    return float(np.nextafter(np.quantile(exp_max, q, method="inverted_cdf"), -np.inf))


@cython.ccall
def drop_unmatched_control(exp_blocks, ctrl_blocks):
    """Leave out control blocks on chromosomes without experimental
    blocks, with a ControlMismatchError warning.
    """
    exp_chroms: set
    missing: list
    chrom: bytes

    exp_chroms = set(exp_blocks.get_chr_names())
    missing = []
    for chrom in ctrl_blocks.get_chr_names():
        if chrom not in exp_chroms:
            missing.append(chrom.decode())
    if not missing:
        return ctrl_blocks
    warnings.warn("control chromosomes absent from the experimental track are left out of threshold modeling: %s" %
                  ",".join(missing), ControlMismatchError)
    return ctrl_blocks.subset(exp_chroms)


@cython.ccall
def empirical_threshold(exp_blocks, ctrl_blocks, normalize: cython.bint = False):
    """Derive the cutoffs from experimental and control BlockSets.

    If normalize is True, control AUCs are multiplied by total
    experimental AUC / total control AUC before being compared; the
    constant is kept in the result for the Region Filter.

    Raise InsufficientDataError if there are fewer than MIN_BLOCKS
    experimental blocks or no usable candidate cutoff.
    """
    p: cython.long
    k: cython.long
    ctrl_total: cython.double
    stringent: cython.double
    relaxed: cython.double
    secondary: cython.double

    ctrl_blocks = drop_unmatched_control(exp_blocks, ctrl_blocks)
    if exp_blocks.total < MIN_BLOCKS:
        raise InsufficientDataError("%d experimental block(s), at least %d are needed to build a threshold curve" %
                                    (exp_blocks.total, MIN_BLOCKS))

    exp_auc = exp_blocks.aucs()
    ctrl_auc = ctrl_blocks.aucs()
    norm_constant = None
    if normalize:
        ctrl_total = ctrl_blocks.total_auc()
        if ctrl_total <= 0:
            raise InsufficientDataError("control track has no signal to normalize against")
        norm_constant = exp_blocks.total_auc() / ctrl_total
        ctrl_auc = ctrl_auc * norm_constant
        debug("normalization constant: %g" % norm_constant)

    curve = threshold_curve(exp_auc, ctrl_auc)
    if curve.size == 0:
        raise InsufficientDataError("all experimental blocks share one AUC value, no threshold curve can be built")
    debug("threshold curve built on %d candidate cutoffs" % curve.size)

    p = curve_peak(curve['score'])
    k = curve_knee(curve['cutoff'], curve['score'], p)
    stringent = curve['cutoff'][p]
    relaxed = curve['cutoff'][k]
    secondary = height_cutoff(exp_auc, exp_blocks.max_signals(), stringent)
    return ThresholdResult("control",
                           stringent,
                           relaxed,
                           secondary,
                           stringent_fdr=float(curve['fdr'][p]),
                           relaxed_fdr=float(curve['fdr'][k]),
                           norm_constant=norm_constant,
                           curve=curve)


@cython.ccall
def fraction_threshold(exp_blocks, fraction: cython.double):
    """Cutoffs keeping the top blocks holding fraction of the signal.

    Blocks are ranked by AUC, the boundary is the AUC of the block at
    which the cumulative AUC reaches fraction of the total. Cutoffs
    are the largest doubles below the boundary and below the lowest
    max signal among the selected blocks, so that the strict '>'
    comparisons of the filter keep every block at or above the
    boundary. FDRs are not defined in this mode.
    """
    i: cython.long
    boundary: cython.double
    cutoff: cython.double
    secondary: cython.double

    if not (0 < fraction <= 1):
        raise InvalidFractionError("fraction threshold must be in (0, 1], got %g" % fraction)
    if exp_blocks.total < MIN_BLOCKS:
        raise InsufficientDataError("%d experimental block(s), at least %d are needed" %
                                    (exp_blocks.total, MIN_BLOCKS))

    aucs = exp_blocks.aucs()
    maxs = exp_blocks.max_signals()
    sorted_auc = aucs[np.argsort(-aucs, kind="stable")]
    cum = np.cumsum(sorted_auc)
    i = int(np.searchsorted(cum, fraction * cum[-1], side="left"))
    if i >= sorted_auc.size:
        i = sorted_auc.size - 1
    boundary = sorted_auc[i]
    cutoff = np.nextafter(boundary, -np.inf)
    secondary = np.nextafter(maxs[aucs >= boundary].min(), -np.inf)
    return ThresholdResult("fraction", cutoff, cutoff, secondary)

# ------------------------------------
# Classes
# ------------------------------------


@cython.cclass
class ThresholdResult:
    """Cutoffs computed once per run, read-only afterwards.

    stringent_fdr and relaxed_fdr are None in fraction mode;
    norm_constant is None unless normalization was requested; curve
    is the structured array from threshold_curve in control mode.
    """
    mode = cython.declare(str, visibility="readonly")
    stringent_cutoff = cython.declare(cython.double, visibility="readonly")
    relaxed_cutoff = cython.declare(cython.double, visibility="readonly")
    secondary_cutoff = cython.declare(cython.double, visibility="readonly")
    stringent_fdr = cython.declare(object, visibility="readonly")
    relaxed_fdr = cython.declare(object, visibility="readonly")
    norm_constant = cython.declare(object, visibility="readonly")
    curve = cython.declare(object, visibility="readonly")

    def __init__(self,
                 mode: str,
                 stringent_cutoff: cython.double,
                 relaxed_cutoff: cython.double,
                 secondary_cutoff: cython.double,
                 stringent_fdr=None,
                 relaxed_fdr=None,
                 norm_constant=None,
                 curve=None):
        self.mode = mode
        self.stringent_cutoff = stringent_cutoff
        self.relaxed_cutoff = relaxed_cutoff
        self.secondary_cutoff = secondary_cutoff
        self.stringent_fdr = stringent_fdr
        self.relaxed_fdr = relaxed_fdr
        self.norm_constant = norm_constant
        self.curve = curve

    @cython.ccall
    def primary_cutoff(self, height: str) -> cython.double:
        if height == "stringent":
            return self.stringent_cutoff
        elif height == "relaxed":
            return self.relaxed_cutoff
        raise ValueError("height mode must be 'stringent' or 'relaxed', not %r" % height)

    @cython.ccall
    def fdr(self, height: str):
        if height == "stringent":
            return self.stringent_fdr
        elif height == "relaxed":
            return self.relaxed_fdr
        raise ValueError("height mode must be 'stringent' or 'relaxed', not %r" % height)

    @cython.ccall
    def write_cutoff_analysis(self, fhd):
        """Write the threshold curve as a tab separated table.
        """
        if self.curve is None:
            raise ValueError("no threshold curve in %s mode" % self.mode)
        fhd.write("cutoff\tn_exp\tn_ctrl\tfdr\tretained_signal\tcurve\n")
        for row in self.curve:
            fhd.write("%.6g\t%d\t%d\t%.6g\t%.6g\t%.6g\n" % (row['cutoff'],
                                                          row['n_exp'],
                                                          row['n_ctrl'],
                                                          row['fdr'],
                                                          row['signal'],
                                                          row['score']))

    def __str__(self):
        return "mode:%s;stringent:%g;relaxed:%g;secondary:%g" % (self.mode,
                                                                 self.stringent_cutoff,
                                                                 self.relaxed_cutoff,
                                                                 self.secondary_cutoff)
