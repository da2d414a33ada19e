SEACR_VERSION = "1.4.0b1"
MIN_BLOCKS = 2                         # blocks needed to build a threshold curve
GAP_DIVISOR = 10                       # merge gap = mean block length / GAP_DIVISOR
READ_BUFFER_SIZE = 10000000            # 10M bytes for read buffer size

NORM_MODES = ("norm", "non")
HEIGHT_MODES = ("relaxed", "stringent")
