# cython: language_level=3
# cython: profile=True

"""Module to apply a ThresholdResult to experimental and control
blocks.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

# ------------------------------------
# SEACR modules
# ------------------------------------
from SEACR.Utilities.Constants import HEIGHT_MODES
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
def filter_blocks(result, exp_blocks, ctrl_blocks=None, height: str = "stringent") -> tuple:
    """Return (filtered experimental blocks, filtered control blocks).

    Experimental blocks pass with auc > the cutoff of the height mode
    and max_signal > the secondary cutoff. Control blocks, after their
    auc is multiplied by the normalization constant if there is one,
    pass with auc > the stringent cutoff whatever the height mode.
    The second item is None without control blocks.

    Control blocks on chromosomes without experimental blocks, left
    out of threshold modeling, are still filtered here; no region can
    lie on them, so they never exclude anything.
    """
    primary: cython.double

    if height not in HEIGHT_MODES:
        raise ValueError("height mode must be 'stringent' or 'relaxed', not %r" % height)
    primary = result.primary_cutoff(height)
    exp_kept = exp_blocks.filter(primary, result.secondary_cutoff)
    debug("%d of %d experimental blocks pass auc > %g and max signal > %g" %
          (exp_kept.total, exp_blocks.total, primary, result.secondary_cutoff))

    if ctrl_blocks is None:
        return (exp_kept, None)

    if result.norm_constant is not None:
        ctrl_blocks = ctrl_blocks.scale_auc(result.norm_constant)
    ctrl_kept = ctrl_blocks.filter_auc(result.stringent_cutoff)
    debug("%d of %d control blocks pass auc > %g" %
          (ctrl_kept.total, ctrl_blocks.total, result.stringent_cutoff))
    return (exp_kept, ctrl_kept)
