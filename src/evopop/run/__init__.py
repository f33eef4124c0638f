"""
Run Package

This package holds the configuration of an evolution and the Trial runner.

Exported Classes:
    Config: Configuration parameters, parsed from an INI file
    Trial:  Abstract base class for one run of the evolutionary algorithm
"""

from evopop.run.config import Config
from evopop.run.trial  import Trial

__all__ = ['Config',
           'Trial']
