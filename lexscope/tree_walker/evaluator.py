"""
The generic machinery that everything needs,
without the specific methods corresponding to particular syntax.
"""

from typing import Optional
from .. import syntax
from ..environment import Environment
from .types import LexValue, LAZY_VALUE, STRICT_VALUE


class EvaluationError(Exception):
	"""
	Something went wrong while running the program.
	Knows where, if it can: the offending phrase and the environment in effect there.
	"""
	def __init__(self, message:str, site:Optional[syntax.ValueExpression]=None, frame:Optional[Environment]=None):
		super().__init__(message)
		self.site = site
		self.frame = frame


def blame(ex:Exception, site, frame:Environment):
	""" Record the innermost place an exception passed through, unless something already has. """
	if getattr(ex, "site", None) is None:
		ex.site, ex.frame = site, frame


def evaluate(expr:syntax.ValueExpression, env:Environment, session) -> LAZY_VALUE:
	assert isinstance(env, Environment), env
	try: fn = EVALUATE[type(expr)]
	except KeyError: raise NotImplementedError(type(expr), expr)
	return fn(expr, env, session)

_NO_DELAY = {syntax.Literal, syntax.FunctionForm}

def delay(expr:syntax.ValueExpression, env:Environment, session) -> LAZY_VALUE:
	# For certain kinds of expression, there is no profit to delay:
	if type(expr) in _NO_DELAY: return evaluate(expr, env, session)
	# In less trivial cases, make a promise and pass that instead.
	return Promise(expr, env, session)

def force(it:LAZY_VALUE) -> STRICT_VALUE:
	""" Force repeatedly until the result is no longer a promise, then return that result. """
	while isinstance(it, Promise): it = it.force()
	return it

EVALUATE = {}

def attach_evaluation_methods(python_scope):
	for _k, _v in list(python_scope.items()):
		if _k.startswith("_eval_"):
			_t = _v.__annotations__["expr"]
			assert isinstance(_t, type), (_k, _t)
			EVALUATE[_t] = _v


_ABSENT = object()

class Promise(LexValue):
	"""
	An argument not yet evaluated: the expression, and the environment to evaluate it in.
	Forced at most once. Afterward it lets go of the environment.
	"""
	def __init__(self, expr:syntax.ValueExpression, env:Environment, session):
		assert isinstance(expr, syntax.ValueExpression), type(expr)
		self.expr = expr
		self.env = env
		self.session = session
		self.value = _ABSENT
		self._busy = False

	def __str__(self):
		if self.value is _ABSENT:
			return "<Promise: %s>" % self.expr.source()
		else:
			return str(self.value)

	def is_forced(self) -> bool:
		return self.value is not _ABSENT

	def force(self):
		if self.value is _ABSENT:
			if self._busy:
				message = "promise already under evaluation: recursive default argument reference or earlier problems?"
				raise EvaluationError(message, self.expr, self.env)
			self._busy = True
			try: value = force(evaluate(self.expr, self.env, self.session))
			finally: self._busy = False
			self.value = value
			del self.env
			del self.session
		return self.value


class _Missing:
	""" What a formal parameter is bound to when the call supplied nothing and there is no default. """
	def __repr__(self): return "<missing>"

MISSING = _Missing()
