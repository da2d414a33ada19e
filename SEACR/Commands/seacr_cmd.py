"""Description: SEACR main executable, call enriched regions from a
sparse bedGraph track using a control bedGraph or a fraction
threshold.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

# ------------------------------------
# python modules
# ------------------------------------

# ------------------------------------
# own python modules
# ------------------------------------
from SEACR.IO.BedGraphIO import bedGraphIO
from SEACR.Signal.Block import BlockSegmenter
from SEACR.Signal.Threshold import empirical_threshold, fraction_threshold
from SEACR.Signal.RegionFilter import filter_blocks
from SEACR.Signal.Region import merge_and_exclude
from SEACR.Utilities.OptValidator import opt_validate_seacr

# ------------------------------------
# Main function
# ------------------------------------

def run( options ):
    """The Main function/pipeline for SEACR.

    Nothing is written before every stage succeeded, so a fatal error
    leaves no partial output.
    """
    options = opt_validate_seacr( options )
    info = options.info
    warn = options.warn
    debug = options.debug

    if options.ctrl:
        info("Calling enriched regions with control file")
    else:
        info("Calling enriched regions without control file")

    #1 blocks
    info("#1 Read experimental bedGraph %s..." % options.exp)
    exp_track = bedGraphIO( options.exp ).read_track()
    info("#1 Creating experimental AUC blocks...")
    exp_blocks = BlockSegmenter( exp_track ).to_blockset()
    info("#1  %d blocks, total signal %.6g" % ( exp_blocks.total, exp_blocks.total_auc() ))

    ctrl_blocks = None
    if options.ctrl:
        info("#1 Read control bedGraph %s..." % options.ctrl)
        ctrl_track = bedGraphIO( options.ctrl ).read_track()
        info("#1 Creating control AUC blocks...")
        ctrl_blocks = BlockSegmenter( ctrl_track ).to_blockset()
        info("#1  %d blocks, total signal %.6g" % ( ctrl_blocks.total, ctrl_blocks.total_auc() ))

    #2 threshold
    info("#2 Calculating optimal AUC threshold...")
    if options.ctrl:
        if options.normalize:
            info("#2 Calculating threshold using normalized control")
        else:
            info("#2 Calculating threshold using non-normalized control")
        result = empirical_threshold( exp_blocks, ctrl_blocks, options.normalize )
        if result.norm_constant is not None:
            info("#2 Normalization constant = %.6g" % result.norm_constant)
        info("#2 Empirical false discovery rate = %.6g" % result.fdr( options.height ))
        debug("#2 stringent FDR = %.6g, relaxed FDR = %.6g" % ( result.stringent_fdr, result.relaxed_fdr ))
    else:
        info("#2 Using user-provided threshold: top %g of total signal" % options.fraction)
        result = fraction_threshold( exp_blocks, options.fraction )
    info("#2 AUC threshold: stringent %.6g, relaxed %.6g; max signal threshold %.6g" %
         ( result.stringent_cutoff, result.relaxed_cutoff, result.secondary_cutoff ))

    #3 filter
    info("#3 Creating thresholded feature file, %s mode..." % options.height)
    ( exp_kept, ctrl_kept ) = filter_blocks( result, exp_blocks, ctrl_blocks, options.height )
    info("#3  %d experimental blocks pass the threshold" % exp_kept.total)

    #4 merge
    info("#4 Merging nearby features and eliminating control-enriched features...")
    regions = merge_and_exclude( exp_kept, ctrl_kept )
    if regions.total == 0:
        warn("#4 No enriched regions found")
    else:
        info("#4  %d enriched regions" % regions.total)

    #5 output
    if options.cutoff_analysis:
        if result.curve is None:
            warn("#5 Cutoff analysis needs a control bedGraph, skipped")
        else:
            info("#5 Write cutoff analysis to %s..." % options.cutoff_file)
            with open( options.cutoff_file, "w" ) as fhd:
                result.write_cutoff_analysis( fhd )

    info("#5 Write enriched regions to %s..." % options.ofile)
    with open( options.ofile, "w" ) as ofhd:
        regions.write_to_bed( ofhd )
    info("Done!")
