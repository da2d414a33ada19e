# cython: language_level=3
# cython: profile=True

"""Module to read bedGraph files into a SignalTrack.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

# ------------------------------------
# python modules
# ------------------------------------
import gzip
import io

# ------------------------------------
# SEACR modules
# ------------------------------------
from SEACR.Signal.SignalTrack import SignalTrack
from SEACR.Utilities.Constants import READ_BUFFER_SIZE
from SEACR.Utilities.Errors import MalformedTrackError
from SEACR.Utilities.Logger import logging

# ------------------------------------
# Other modules
# ------------------------------------
import cython

logger = logging.getLogger(__name__)
debug = logger.debug
info = logger.info

# ------------------------------------
# Classes
# ------------------------------------


@cython.cclass
class bedGraphIO:
    """Reader of sparse bedGraph files, gzipped or not.

    Every data line must have at least four whitespace separated
    fields: chromosome, start, end and value. 'track', 'browser' and
    '#' lines and empty lines are skipped.
    """
    bedGraph_filename = cython.declare(str, visibility='public')
    gzipped = cython.declare(cython.bint, visibility='readonly')

    def __init__(self, bedGraph_filename: str):
        self.bedGraph_filename = bedGraph_filename
        self.gzipped = True
        # try gzip first
        f = gzip.open(bedGraph_filename)
        try:
            f.read(10)
        except IOError:
            # not a gzipped file
            self.gzipped = False
        finally:
            f.close()

    @cython.ccall
    def open_bedGraph(self):
        if self.gzipped:
            # open with gzip.open, then wrap it with BufferedReader!
            return io.BufferedReader(gzip.open(self.bedGraph_filename, mode='rb'),
                                     buffer_size=READ_BUFFER_SIZE)
        else:
            return io.open(self.bedGraph_filename, mode='rb')

    @cython.ccall
    def read_track(self):
        """Load all intervals into a new SignalTrack.

        Raise MalformedTrackError with the file name and line number
        of the first bad record.
        """
        n: cython.long
        line: bytes
        fs: list
        startpos: cython.long
        endpos: cython.long
        value: cython.double

        track = SignalTrack()
        add_func = track.add_loc
        n = 0
        if self.gzipped:
            info("* Input file %s is gzipped." % self.bedGraph_filename)
        with self.open_bedGraph() as fhd:
            for line in fhd:
                n += 1
                if line.startswith(b"track") or line.startswith(b"browser") or line.startswith(b"#"):
                    continue
                fs = line.split()
                if not fs:
                    continue
                if len(fs) < 4:
                    raise MalformedTrackError("%s:%d: expected 4 fields, found %d: %r" %
                                              (self.bedGraph_filename, n, len(fs), line.rstrip()))
                try:
                    startpos = int(fs[1])
                    endpos = int(fs[2])
                    value = float(fs[3])
                except ValueError:
                    raise MalformedTrackError("%s:%d: non-numeric coordinate or value: %r" %
                                              (self.bedGraph_filename, n, line.rstrip())) from None
                try:
                    add_func(fs[0], startpos, endpos, value)
                except MalformedTrackError as e:
                    raise MalformedTrackError("%s:%d: %s" % (self.bedGraph_filename, n, e)) from None
        debug("%d lines read from %s, %d non-zero intervals kept" %
              (n, self.bedGraph_filename, track.total))
        return track
