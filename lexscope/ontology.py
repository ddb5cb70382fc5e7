"""
These most-fundamental classes are separate from the rest
to avoid various circular-import scenarios.
The parse-tree, the environments, and the resolver all need them.
"""
from enum import Enum

class Kind(Enum):
	"""
	Which namespace a lookup consults.
	A name may be bound to an ordinary value and, independently, to a function.
	"""
	VALUE = "value"
	CALLABLE = "function"

class Phrase:
	def left(self) -> int:
		""" Return the offset of the leftmost character of this phrase """
		raise NotImplementedError(type(self))
	def right(self) -> int:
		""" Return the offset just past the rightmost character of this phrase """
		raise NotImplementedError(type(self))
	def span(self) -> tuple[int, int]: return self.left(), self.right()

class Nom(Phrase):
	""" Representing the occurrence of a name anywhere. """
	spot: int  # zero-spot means pre-defined term.
	def __init__(self, text, spot, width=None):
		assert isinstance(text, str)
		assert isinstance(spot, int) or spot is None, type(spot)
		self.text, self.spot = text, spot or 0
		self._width = len(text) if width is None else width
	def __repr__(self): return "<Name %r>" % self.text
	def key(self): return self.text
	def left(self): return self.spot
	def right(self): return self.spot + self._width if self.spot else 0
