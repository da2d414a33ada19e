# cython: language_level=3
# cython: profile=True

"""Module for SignalTrack class.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

# ------------------------------------
# python modules
# ------------------------------------
from array import array as pyarray

# ------------------------------------
# SEACR modules
# ------------------------------------
from SEACR.Utilities.Errors import MalformedTrackError

# ------------------------------------
# Other modules
# ------------------------------------
import cython

# ------------------------------------
# Misc functions
# ------------------------------------


@cython.cfunc
def record_str(chromosome: bytes,
               startpos: cython.long,
               endpos: cython.long,
               value: cython.double) -> str:
    return "%s\t%d\t%d\t%g" % (chromosome.decode(), startpos, endpos, value)

# ------------------------------------
# Classes
# ------------------------------------


@cython.cclass
class SignalTrack:
    """Class for sparse bedGraph type signal.

    A track keeps, for every chromosome, the non-zero intervals in
    the order they were added: three arrays holding start positions,
    end positions and values. Zero valued intervals are never stored,
    the space between two stored intervals is implicitly zero.

    Invariants checked in add_loc:

    1. end > start >= 0 and value >= 0;

    2. Sorted and non-overlapping: on one chromosome, an interval
    never starts before the end of the previously added one (zero
    valued intervals included).

    Chromosomes are kept in the order they first appear. Coordinates
    are 0-indexed and right-open.
    """
    _data: dict                 # chrom -> [starts, ends, values]
    _last_end: dict             # chrom -> end of the last added interval
    total = cython.declare(cython.long, visibility="readonly")
    maxvalue = cython.declare(cython.double, visibility="readonly")

    def __init__(self):
        self._data = {}
        self._last_end = {}
        self.total = 0
        self.maxvalue = 0

    @cython.ccall
    def add_loc(self, chromosome: bytes,
                startpos: cython.long,
                endpos: cython.long,
                value: cython.double) -> cython.bint:
        """Add a chr-start-end-value interval.

        Return True if the interval was stored, False if it carried
        zero signal. Raise MalformedTrackError if the interval breaks
        the track invariants.
        """
        c: list

        if startpos < 0:
            raise MalformedTrackError("negative start position: %s" %
                                      record_str(chromosome, startpos, endpos, value))
        if endpos <= startpos:
            raise MalformedTrackError("end must be greater than start: %s" %
                                      record_str(chromosome, startpos, endpos, value))
        if not value >= 0:
            # also catches nan
            raise MalformedTrackError("signal must be non-negative: %s" %
                                      record_str(chromosome, startpos, endpos, value))
        if chromosome in self._last_end and startpos < self._last_end[chromosome]:
            raise MalformedTrackError("unsorted or overlapping interval, previous one ends at %d: %s" %
                                      (self._last_end[chromosome],
                                       record_str(chromosome, startpos, endpos, value)))
        self._last_end[chromosome] = endpos

        if value == 0:
            return False

        if chromosome not in self._data:
            self._data[chromosome] = [pyarray('q', []),
                                      pyarray('q', []),
                                      pyarray('d', [])]
        c = self._data[chromosome]
        c[0].append(startpos)
        c[1].append(endpos)
        c[2].append(value)
        self.total += 1
        if value > self.maxvalue:
            self.maxvalue = value
        return True

    @cython.ccall
    def get_data_by_chr(self, chromosome: bytes) -> list:
        """Return [starts, ends, values] of a chromosome, [] if absent.
        """
        if chromosome in self._data:
            return self._data[chromosome]
        else:
            return []

    @cython.ccall
    def get_chr_names(self) -> list:
        """Return chromosome names in the order they appeared.
        """
        return list(self._data.keys())

    @cython.ccall
    def total_signal(self) -> cython.double:
        """Sum of value*length over all stored intervals.
        """
        chrom: bytes
        i: cython.long
        s: cython.double

        s = 0
        for chrom in self._data:
            (starts, ends, values) = self._data[chrom]
            for i in range(len(starts)):
                s += values[i] * (ends[i] - starts[i])
        return s

    def __len__(self):
        return self.total
