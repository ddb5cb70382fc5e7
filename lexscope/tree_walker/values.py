"""
This module defines the specialized value-types that the tree-walker operates in terms of.
Basic primitive values play themselves, but special things like closures need more help.
"""
import math
from abc import abstractmethod
from typing import Callable, Optional, Sequence
from .. import syntax
from ..ontology import Kind
from ..environment import Environment, Frame, environment_name
from .types import ARGS, LexValue, LAZY_VALUE, STRICT_VALUE
from ..resolver import SymbolNotFound
from .evaluator import EvaluationError, Promise, MISSING, blame, evaluate, delay, force

DOTS = "..."

###############################################################################

def assign(env:Environment, symbol:str, value:STRICT_VALUE):
	"""
	Ordinary assignment. Everything is a value; a function is also something you can call.
	Assigning a non-function leaves any function of the same name alone.
	"""
	env.define(symbol, value, Kind.VALUE)
	if isinstance(value, Function):
		env.define(symbol, value, Kind.CALLABLE)
	return value

def bind_parameter(frame:Frame, symbol:str, value:LAZY_VALUE):
	# Nobody knows whether an unforced argument is a function until somebody asks.
	frame.define(symbol, value, Kind.VALUE)
	frame.define(symbol, value, Kind.CALLABLE)

def match_arguments(formals:Sequence[str], args:ARGS, site=None, frame=None) -> tuple[dict[str, LAZY_VALUE], ARGS]:
	"""
	Pair actual arguments with formal parameters, the way R does (less partial matching):
	first exact names, then positions for whatever is left over.
	If there is a "..." formal, it soaks up the rest, names and all. Otherwise leftovers are an error.
	"""
	matched = {}
	dots = []
	named = [f for f in formals if f != DOTS]
	positional = []
	for name, value in args:
		if name is None:
			positional.append(value)
		elif name in named:
			if name in matched:
				raise EvaluationError("formal argument \"%s\" matched by multiple actual arguments" % name, site, frame)
			matched[name] = value
		elif DOTS in formals:
			dots.append((name, value))
		else:
			raise EvaluationError("unused argument (%s = %s)" % (name, _describe(value)), site, frame)
	before_dots = formals[:formals.index(DOTS)] if DOTS in formals else formals
	unfilled = [f for f in before_dots if f not in matched]
	for value in positional:
		if unfilled:
			matched[unfilled.pop(0)] = value
		elif DOTS in formals:
			dots.append((None, value))
		else:
			raise EvaluationError("unused argument (%s)" % _describe(value), site, frame)
	return matched, dots

def _describe(value) -> str:
	if isinstance(value, Promise) and not value.is_forced():
		return value.expr.source()
	return format_atom(force(value))

###############################################################################

class Function(LexValue):
	""" A run-time object that can be applied with arguments. """
	@abstractmethod
	def apply(self, args:ARGS, caller:Environment, session, site=None) -> STRICT_VALUE: pass

class Closure(Function):
	"""
	The run-time manifestation of a function: its form, tied to its natal environment.
	Both halves are fixed for life.
	"""
	__slots__ = ("_form", "_env")

	def __init__(self, form:syntax.FunctionForm, env:Environment):
		self._form = form
		self._env = env

	@property
	def form(self) -> syntax.FunctionForm: return self._form

	@property
	def env(self) -> Environment: return self._env

	@property
	def params(self) -> tuple[syntax.FormalParameter, ...]: return self._form.params

	def __str__(self):
		return self._form.source() or repr(self._form)

	def apply(self, args:ARGS, caller:Environment, session, site=None) -> STRICT_VALUE:
		# The new frame hangs off the defining environment, not the caller's.
		# That one choice is the whole difference between lexical and dynamic scope.
		frame = Frame(self._env, caller, site)
		matched, dots = match_arguments([p.key() for p in self.params], args, site, caller)
		for param in self.params:
			key = param.key()
			if key == DOTS:
				frame.define(DOTS, tuple(dots))
				continue
			if key in matched: value = matched[key]
			elif param.default is not None: value = delay(param.default, frame, session)
			else: value = MISSING
			bind_parameter(frame, key, value)
		return force(evaluate(self._form.body, frame, session))

class Primitive(Function):
	"""
	Built-in function. Ordinarily its arguments get forced and passed to the Python function by name,
	with dots in R names becoming underscores. A "special" primitive receives the session and the
	calling environment first, and gets its arguments unforced.
	"""
	def __init__(self, name:str, fn:Callable, formals:Sequence[str]=(), special:bool=False):
		self.name = name
		self._fn = fn
		self._formals = tuple(formals)
		self._special = special

	def __str__(self):
		return 'function (%s) .Primitive("%s")' % (", ".join(self._formals), self.name)

	def apply(self, args:ARGS, caller:Environment, session, site=None) -> STRICT_VALUE:
		matched, dots = match_arguments(self._formals, args, site, caller)
		dots = [value for _, value in dots]
		kwargs = {k.replace(".", "_"): v for k, v in matched.items()}
		try:
			if self._special:
				return self._fn(session, caller, *dots, **kwargs)
			for k in kwargs: kwargs[k] = force(kwargs[k])
			return self._fn(*map(force, dots), **kwargs)
		except (EvaluationError, SymbolNotFound) as ex:
			blame(ex, site, caller)
			raise

###############################################################################

def format_number(x) -> str:
	x = float(x)
	if math.isnan(x): return "NaN"
	if math.isinf(x): return "Inf" if x > 0 else "-Inf"
	if x.is_integer() and abs(x) < 1e15: return str(int(x))
	return "%.7g" % x

def format_atom(value) -> str:
	if value is None: return "NULL"
	if isinstance(value, bool): return "TRUE" if value else "FALSE"
	if isinstance(value, (int, float)): return format_number(value)
	if isinstance(value, str): return '"%s"' % value.replace("\\", "\\\\").replace('"', '\\"')
	if isinstance(value, list): return " ".join(map(format_atom, value))
	return str(value)

def render(value:STRICT_VALUE, global_env:Optional[Environment]=None) -> str:
	""" How a value looks when printed at top level. """
	if value is None: return "NULL"
	if isinstance(value, (bool, int, float, str)):
		return "[1] " + format_atom(value)
	if isinstance(value, list):
		if not value: return "character(0)"
		return "[1] " + format_atom(value)
	if isinstance(value, Closure):
		text = str(value)
		if value.env is not global_env:
			text += "\n<environment: %s>" % (environment_name(value.env) or hex(id(value.env)))
		return text
	return repr(value) if isinstance(value, Environment) else str(value)
