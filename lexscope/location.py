"""
I want a simple, light-weight way to pass-around and manipulate points and spans within a collection of sources.
The concept is simple: Use integers, with ranges of them associated to specific files.
Each source text gets its own segment of the number line, so a single int pins down both file and offset.
"""
from bisect import bisect_right
from pathlib import Path
from typing import NamedTuple, Optional

class Span(NamedTuple):
	""" Aimed at whatever prints error messages """
	path: Optional[Path]
	slice: slice

_bases: list[int] = []
_paths: list[Optional[Path]] = []
_texts: list[str] = []

def reset_location_index():
	for it in _bases, _paths, _texts: it.clear()
	# Now prepare the "built-in" location, which is segment zero:
	start_segment(None, "")

def start_segment(path:Optional[Path], text:str) -> int:
	"""
	Register a source text and return the offset at which its segment starts.
	Offset zero belongs to the built-in segment and means "nowhere in particular".
	"""
	assert isinstance(path, Path) or path is None
	if _bases:
		base = _bases[-1] + len(_texts[-1]) + 1
	else:
		base = 0
	_bases.append(base)
	_paths.append(path)
	_texts.append(text)
	return base

def _segment(offset:int) -> int:
	return bisect_right(_bases, offset) - 1

def lookup_span(first:int, last:int) -> Span:
	index = _segment(first)
	base = _bases[index]
	return Span(_paths[index], slice(first - base, max(last, first) - base))

def source_text(first:int) -> str:
	""" The whole text of whatever source contains the given offset """
	return _texts[_segment(first)]

def excerpt(first:int, last:int) -> str:
	""" The source text between two offsets, or nothing for the built-in segment """
	if not first: return ""
	index = _segment(first)
	base = _bases[index]
	return _texts[index][first - base:last - base]

reset_location_index()
