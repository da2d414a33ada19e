"""Module Description: validate the command line options of seacr.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

# ------------------------------------
# python modules
# ------------------------------------
import os

# ------------------------------------
# SEACR modules
# ------------------------------------
from SEACR.Utilities.Constants import NORM_MODES, HEIGHT_MODES
from SEACR.Utilities.Errors import OptionError, InvalidFractionError

# ------------------------------------
# constants
# ------------------------------------

import logging
from SEACR.Utilities.Logger import verbose_to_level
logger = logging.getLogger(__name__)

# ------------------------------------
# Misc functions
# ------------------------------------

def opt_validate_seacr ( options ):
    """Validate options from an ArgumentParser namespace.

    Adds to options:

    ctrl      : control bedGraph file or None
    fraction  : fraction threshold or None
    normalize : whether to normalize control to experimental signal
    ofile     : output file, <prefix>.<height>.bed
    cutoff_file: file for the optional cutoff analysis report

    Ret: Validated options object.
    """
    # logging object
    logging.getLogger("SEACR").setLevel(verbose_to_level(options.verbose))

    options.error   = logger.critical        # function alias
    options.warn    = logger.warning
    options.debug   = logger.debug
    options.info    = logger.info

    # experimental bedGraph
    if not os.path.isfile(options.exp):
        raise OptionError("Experimental bedGraph %s can't be found!" % options.exp)

    # control bedGraph or numeric threshold
    if os.path.isfile(options.control):
        options.ctrl = options.control
        options.fraction = None
    else:
        try:
            fraction = float(options.control)
        except ValueError:
            raise OptionError("%s is not a number or a file" % options.control) from None
        if not (0 < fraction <= 1):
            raise InvalidFractionError("Numeric threshold must be in (0, 1], got %s" % options.control)
        options.ctrl = None
        options.fraction = fraction

    # normalization
    if options.norm not in NORM_MODES:
        raise OptionError("Must specify \"norm\" for normalized or \"non\" for non-normalized data processing, got \"%s\"" % options.norm)
    options.normalize = options.norm == "norm"
    if options.normalize and options.ctrl is None:
        logger.warning("\"norm\" has no effect without a control bedGraph, proceeding without normalization")
        options.normalize = False

    # height
    if options.height not in HEIGHT_MODES:
        raise OptionError("Must specify \"stringent\" or \"relaxed\", got \"%s\"" % options.height)

    # output
    if not options.oprefix:
        raise OptionError("Output prefix can't be empty!")
    options.ofile = "%s.%s.bed" % (options.oprefix, options.height)
    options.cutoff_file = "%s.cutoff_analysis.txt" % options.oprefix

    return options
