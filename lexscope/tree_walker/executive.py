"""
This is the overall control for the run-time.
A Session owns the search path, knows where libraries live, and decides what gets printed.
"""
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO, Union
from .. import syntax, primitive
from ..diagnostics import Report
from ..environment import Environment, TopLevel, GLOBAL_LABEL
from ..search_path import SearchPath
from .evaluator import EvaluationError, evaluate, force
from .values import render
from . import runtime  # Populates the EVALUATE table.

LIBRARY_SUFFIX = ".R"

class Session:
	"""
	Everything one run of a program shares. The search path in particular lives here
	and gets passed along explicitly, so two sessions never see each other's attachments.
	"""
	def __init__(self, report:Report, library_path:Sequence[Union[str, Path]]=(), out:Optional[TextIO]=None):
		self.report = report
		self.library_path = [Path(p) for p in library_path]
		self.out = out
		self.search_path = SearchPath(TopLevel(GLOBAL_LABEL), primitive.base_environment())

	@property
	def global_env(self) -> TopLevel:
		return self.search_path.global_env

	def _stream(self) -> TextIO:
		return self.out or sys.stdout

	def write(self, text:str):
		self._stream().write(text)

	def display(self, value):
		print(render(value, self.global_env), file=self._stream())

	def attach(self, env:TopLevel, pos:int=2) -> TopLevel:
		self.search_path.attach(env, pos)
		self.report.info("Attached", env.name, "at position", self.search_path.position(env))
		return env

	def detach(self, which:Union[int, str]) -> TopLevel:
		env = self.search_path.detach(which)
		self.report.info("Detached", env.name)
		return env

	def find_library(self, name:str) -> Optional[Path]:
		for folder in self.library_path:
			candidate = folder / (name + LIBRARY_SUFFIX)
			if candidate.is_file(): return candidate
		return None

	def load_library(self, name:str) -> TopLevel:
		"""
		Run a library script in its own fresh top-level environment, then attach that at position two.
		A library already on the search path is left where it is.
		"""
		label = "package:" + name
		pos = self.search_path.find_label(label)
		if pos is not None:
			self.report.info("Library", name, "is already attached at position", pos)
			return self.search_path.entry(pos)
		path = self.find_library(name)
		if path is None:
			self.report.info("Looked for", name + LIBRARY_SUFFIX, "in:", *map(str, self.library_path))
			raise EvaluationError("there is no package called '%s'" % name)
		self.report.info("Loading", path)
		from ..front_end import parse_file
		script = parse_file(path, self.report)
		if script is None:
			raise EvaluationError("package '%s' could not be parsed" % name)
		package = TopLevel(label)
		run_script(script, self, package, echo=False)
		return self.attach(package)


def run_script(script:syntax.Script, session:Session, env:Optional[Environment]=None, echo:bool=True):
	"""
	Evaluate each statement in turn, in the global environment unless told otherwise.
	With echo, visible results get printed the way an R console would:
	assignments are quiet, and so is NULL.
	"""
	if env is None: env = session.global_env
	result = None
	for statement in script.statements:
		result = force(evaluate(statement, env, session))
		if echo and result is not None and not isinstance(statement, syntax.Assign):
			session.display(result)
	return result
