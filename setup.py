#!/usr/bin/env python3
"""Description:

Setup script for SEACR -- Sparse Enrichment Analysis for CUT&RUN

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

import sys
from setuptools import setup, Extension
from Cython.Build import cythonize

# get SEACR version
exec(open("SEACR/Utilities/Constants.py").read())


def main():
    if sys.version_info < (3, 9):
        sys.stderr.write("CRITICAL: Python version must >= 3.9!\n")
        sys.exit(1)

    # CFLAG
    extra_c_args = ["-w", "-O3", "-g0"]

    # extensions, those have to be processed by Cython
    ext_modules = [Extension("SEACR.Signal.SignalTrack",
                             ["SEACR/Signal/SignalTrack.py"],
                             extra_compile_args=extra_c_args),
                   Extension("SEACR.Signal.Block",
                             ["SEACR/Signal/Block.py"],
                             extra_compile_args=extra_c_args),
                   Extension("SEACR.Signal.Threshold",
                             ["SEACR/Signal/Threshold.py"],
                             libraries=["m"],
                             extra_compile_args=extra_c_args),
                   Extension("SEACR.Signal.RegionFilter",
                             ["SEACR/Signal/RegionFilter.py"],
                             extra_compile_args=extra_c_args),
                   Extension("SEACR.Signal.Region",
                             ["SEACR/Signal/Region.py"],
                             extra_compile_args=extra_c_args),
                   Extension("SEACR.IO.BedGraphIO",
                             ["SEACR/IO/BedGraphIO.py"],
                             extra_compile_args=extra_c_args),
                   Extension("SEACR.IO.RegionIO",
                             ["SEACR/IO/RegionIO.py"],
                             extra_compile_args=extra_c_args)]

    setup(version=SEACR_VERSION,
          package_dir={'SEACR': 'SEACR'},
          packages=['SEACR', 'SEACR.IO', 'SEACR.Signal', 'SEACR.Commands', 'SEACR.Utilities'],
          scripts=['bin/seacr', ],
          ext_modules=cythonize(ext_modules))


if __name__ == '__main__':
    main()
