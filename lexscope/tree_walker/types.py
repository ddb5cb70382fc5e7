"""
This module aims to express an interface agreement
between the evaluator and various kinds of data.
"""

from abc import ABC
from typing import Optional, Sequence, Union
from ..environment import Environment


NATIVE_DATA = Union[None, bool, float, str, list]

class LexValue(ABC):
	""" Root for classes that implement specialized run-time data structures """

STRICT_VALUE = Union[NATIVE_DATA, LexValue, Environment]
LAZY_VALUE = STRICT_VALUE  # ... or a Promise, which is a LexValue too.

# Actual arguments: each with the name it was passed under, if any.
ARGS = Sequence[tuple[Optional[str], LAZY_VALUE]]
