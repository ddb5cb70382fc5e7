import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from lark.exceptions import UnexpectedInput, UnexpectedToken, UnexpectedEOF

from . import location
from .ontology import Phrase

class Report:
	"""
	The one place complaints go, and the one place chatter goes.
	Issues accumulate until somebody asks to see them;
	info() only says anything when the report is verbose.
	"""
	_issues : list["Pic"]

	def __init__(self, *, verbose:int=0, stream:Optional[TextIO]=None):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._stream = stream

	def sick(self): return bool(self._issues)

	@property
	def issues(self) -> Sequence["Pic"]: return tuple(self._issues)

	def issue(self, it:"Pic"):
		self._issues.append(it)

	def _out(self) -> TextIO:
		return self._stream or sys.stderr

	def info(self, *args):
		if self._verbose:
			print(*args, file=self._out())

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues, self._out())

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(message)

	# Methods the front-end is likely to call:

	def parse_error(self, path:Optional[Path], text:str, ex:UnexpectedInput):
		where = "%s, line %s, column %s" % (path or "<input>", ex.line, ex.column)
		if isinstance(ex, UnexpectedEOF) or (isinstance(ex, UnexpectedToken) and ex.token.type == "$END"):
			intro = "Ran out of words in " + where
		else:
			intro = "Got confused by the text at " + where
		footer = [ex.get_context(text).rstrip("\n")] if ex.pos_in_stream is not None else []
		expected = getattr(ex, "expected", None)
		if expected:
			footer.append("Expected one of: " + ", ".join(sorted(expected)))
		self.issue(Pic(intro, [], footer))

	def _file_error(self, path:Path, prefix:str):
		self.issue(Pic(prefix + " " + str(path), []))

	def no_such_file(self, path:Path):
		self._file_error(path, "I see no file called")

	def broken_file(self, path:Path):
		self._file_error(path, "Something went pear-shaped while trying to read")

	# Methods the run-time calls:

	def runtime_error(self, ex:Exception):
		"""
		File an evaluation failure. If the exception knows where it happened,
		show that and how the program got there, following dynamic links.
		"""
		intro = "Error: " + str(ex)
		site = getattr(ex, "site", None)
		frame = getattr(ex, "frame", None)
		problem = trace_stack(frame) if frame is not None else []
		if site is not None:
			problem.append(Annotation(site, "here"))
		self.issue(Pic(intro, problem))


class Annotation:
	path: Optional[Path]
	slice: slice
	caption: str
	def __init__(self, node:Phrase, caption:str=""):
		first, last = node.span()
		span = location.lookup_span(first, last)
		self.path = span.path
		self.slice = span.slice
		self.caption = caption
		self._text = location.source_text(first) if first else ""

	def illustrate(self):
		if not self._text:
			return "       | (built-in)"
		start = self.slice.start
		row = self._text.count("\n", 0, start) + 1
		line_start = self._text.rfind("\n", 0, start) + 1
		line_end = self._text.find("\n", start)
		if line_end < 0: line_end = len(self._text)
		single_line = self._text[line_start:line_end]
		col = start - line_start
		width = max(1, min(self.slice.stop, line_end) - start)
		return _illustration(single_line, col, width, prefix='% 6d |' % row, caption=self.caption)

def _illustration(single_line:str, col:int, width:int, prefix:str, caption:str) -> str:
	gutter = " " * (len(prefix) - 1) + "|"
	underline = " " * col + "^" * width
	if caption: underline += " " + caption
	return prefix + " " + single_line.expandtabs(1) + "\n" + gutter + " " + underline


class Tracer:
	def __init__(self):
		self.trace = []
	def called_from(self, site:Phrase, caption:str):
		self.trace.append(Annotation(site, caption))

def trace_stack(frame) -> list[Annotation]:
	"""
	Follow dynamic links outward from where the trouble happened,
	then read them back innermost-last so the trace reads like the program ran.
	"""
	from .environment import Frame
	tracer = Tracer()
	sites = []
	while isinstance(frame, Frame):
		if frame.site is not None: sites.append(frame.site)
		frame = frame.dynamic_link
	for site in reversed(sites):
		tracer.called_from(site, "called from here")
	return tracer.trace


class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self._intro, self._anns, self._footer = intro, anns, footer
	@property
	def description(self) -> str: return self._intro
	def as_text(self):
		# Consecutive annotations in the same file share a heading, so stack traces read sensibly.
		lines = [self._intro, ""]
		path = None
		for ann in self._anns:
			if ann.path != path:
				path = ann.path
				if path is not None: lines.append(str(path))
			lines.append(ann.illustrate())
		lines.extend(self._footer)
		return '\n'.join(lines)


def _bemoan(issues, stream:TextIO):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=stream)
	for i in issues:
		print("  -"*20, file=stream)
		print(i.as_text(), file=stream)
	stream.flush()
