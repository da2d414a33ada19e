# cython: language_level=3
# cython: profile=True

"""Module for RegionIO classes: the enriched regions reported by
SEACR and their BED output.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""

# ------------------------------------
# python modules
# ------------------------------------
import sys

# ------------------------------------
# Other modules
# ------------------------------------
import cython

# ------------------------------------
# Misc functions
# ------------------------------------


@cython.cfunc
def format_value(v: cython.double) -> str:
    # integral values print without decimals, like awk does
    if abs(v) < 1e15 and v == int(v):
        return "%d" % v
    return "%.10g" % v

# ------------------------------------
# Classes
# ------------------------------------


@cython.cclass
class RegionContent:
    chrom = cython.declare(bytes, visibility="readonly")
    start = cython.declare(cython.long, visibility="readonly")
    end = cython.declare(cython.long, visibility="readonly")
    total_auc = cython.declare(cython.double, visibility="readonly")
    max_signal = cython.declare(cython.double, visibility="readonly")
    max_start = cython.declare(cython.long, visibility="readonly")
    max_end = cython.declare(cython.long, visibility="readonly")

    def __init__(self,
                 chrom: bytes,
                 start: cython.long,
                 end: cython.long,
                 total_auc: cython.double,
                 max_signal: cython.double,
                 max_start: cython.long,
                 max_end: cython.long):
        self.chrom = chrom
        self.start = start
        self.end = end
        self.total_auc = total_auc
        self.max_signal = max_signal
        self.max_start = max_start
        self.max_end = max_end

    @property
    def length(self):
        return self.end - self.start

    @property
    def max_region(self):
        return "%s:%d-%d" % (self.chrom.decode(), self.max_start, self.max_end)

    def __getitem__(self, a: str):
        if a == "chrom":
            return self.chrom
        elif a == "start":
            return self.start
        elif a == "end":
            return self.end
        elif a == "length":
            return self.end - self.start
        elif a == "total_auc":
            return self.total_auc
        elif a == "max_signal":
            return self.max_signal
        elif a == "max_region":
            return self.max_region
        raise KeyError(a)

    def __str__(self):
        return "%s\t%d\t%d\t%s\t%s\t%s" % (self.chrom.decode(),
                                            self.start,
                                            self.end,
                                            format_value(self.total_auc),
                                            format_value(self.max_signal),
                                            self.max_region)


@cython.cclass
class RegionIO:
    """IO for enriched regions.

    Regions are kept by chromosome in the order they were added, which
    is the position order of the merged blocks.
    """
    # dictionary storing region contents
    regions = cython.declare(dict, visibility="readonly")
    # total number of regions
    total = cython.declare(cython.long, visibility="readonly")

    def __init__(self):
        self.regions = {}
        self.total = 0

    @cython.ccall
    def add(self,
            chromosome: bytes,
            start: cython.long,
            end: cython.long,
            total_auc: cython.double,
            max_signal: cython.double,
            max_start: cython.long,
            max_end: cython.long):
        self.add_RegionContent(RegionContent(chromosome, start, end,
                                             total_auc, max_signal,
                                             max_start, max_end))

    @cython.ccall
    def add_RegionContent(self, regioncontent: RegionContent):
        if regioncontent.chrom not in self.regions:
            self.regions[regioncontent.chrom] = []
        self.regions[regioncontent.chrom].append(regioncontent)
        self.total += 1

    @cython.ccall
    def get_data_by_chr(self, chrom: bytes) -> list:
        if chrom in self.regions:
            return self.regions[chrom]
        else:
            return []

    @cython.ccall
    def get_chr_names(self) -> list:
        return list(self.regions.keys())

    @cython.ccall
    def to_list(self) -> list:
        chrom: bytes
        ret: list

        ret = []
        for chrom in self.regions:
            ret.extend(self.regions[chrom])
        return ret

    def _to_bed(self, print_func=sys.stdout.write):
        """
        generalization of tobed and write_to_bed
        """
        for r in self.to_list():
            print_func("%s\n" % str(r))

    def tobed(self):
        """Return regions in BED6 format as a string.
        """
        ret = []
        self._to_bed(print_func=ret.append)
        return "".join(ret)

    def write_to_bed(self, fhd):
        """Write regions to a tab separated file, fields:

        chrom, start, end, total AUC, max signal, max signal region

        No header line.
        """
        self._to_bed(print_func=fhd.write)

    def __iter__(self):
        return iter(self.to_list())

    def __len__(self):
        return self.total

    def __str__(self):
        return self.tobed()
