"""Module Description: Exceptions raised by SEACR.

Fatal conditions derive from SEACRError so the command line entry
point can catch them in one place. ControlMismatchError is a warning
category, issued through ``warnings.warn``.

This code is free software; you can redistribute it and/or modify it
under the terms of the BSD License (see the file LICENSE included with
the distribution).
"""


class SEACRError(Exception):
    """Base class of all fatal SEACR errors."""


class MalformedTrackError(SEACRError):
    """An input record breaks the bedGraph invariants.

    The message names the offending record.
    """


class InvalidFractionError(SEACRError):
    """A numeric threshold outside of (0, 1]."""


class InsufficientDataError(SEACRError):
    """Too few blocks to build a threshold curve."""


class OptionError(SEACRError):
    """A command line option can't be interpreted."""


class ControlMismatchError(UserWarning):
    """Control blocks on chromosomes missing from the experimental track.

    Not fatal: those blocks are left out of threshold modeling.
    """
