import math
import operator
from .. import syntax
from ..ontology import Kind
from ..environment import Environment
from ..resolver import SymbolNotFound, iter_bindings, resolve
from .types import STRICT_VALUE
from .evaluator import EvaluationError, MISSING, blame, force, evaluate, delay, attach_evaluation_methods
from .values import DOTS, Function, Closure, assign, format_atom

###############################################################################

def _divide(a, b):
	if b: return a / b
	if a and not math.isnan(a): return math.copysign(math.inf, a) * math.copysign(1, b)
	return math.nan

def _power(a, b):
	if a < 0 and not float(b).is_integer(): return math.nan
	try: return a ** b
	except ZeroDivisionError: return math.inf
	except OverflowError: return math.inf if a > 0 or float(b) % 2 == 0 else -math.inf

def _modulo(a, b):
	if not b: return math.nan
	return a % b

ARITHMETIC = {
	"+" : operator.add,
	"-" : operator.sub,
	"*" : operator.mul,
	"/" : _divide,
	"^" : _power,
	"%%" : _modulo,
}
COMPARISON = {
	"==" : operator.eq,
	"!=" : operator.ne,
	"<" : operator.lt,
	"<=" : operator.le,
	">" : operator.gt,
	">=" : operator.ge,
}
LOGICAL = {
	"&" : lambda a, b: a and b,
	"|" : lambda a, b: a or b,
}
SHORTCUT = {
	"&&":False,
	"||":True,
}

def _is_number(x) -> bool:
	return isinstance(x, (bool, int, float))

def _numeric(x, expr, env) -> float:
	if not _is_number(x):
		raise EvaluationError("non-numeric argument to binary operator", expr, env)
	return float(x)

def as_logical(x, expr, env) -> bool:
	""" What `if`, `&&`, and friends make of a value. """
	if isinstance(x, bool): return x
	if isinstance(x, (int, float)):
		if math.isnan(x): raise EvaluationError("missing value where TRUE/FALSE needed", expr, env)
		return x != 0
	if x is None: raise EvaluationError("argument is of length zero", expr, env)
	raise EvaluationError("argument is not interpretable as logical", expr, env)

def _comparable(a, b, expr, env):
	if a is None or b is None:
		raise EvaluationError("comparison with NULL", expr, env)
	if _is_number(a) and _is_number(b): return float(a), float(b)
	atomic = (bool, float, str)
	if isinstance(a, atomic) and isinstance(b, atomic):
		# Mixed with a string, the other side compares as its printed form.
		def text(x): return x if isinstance(x, str) else format_atom(x)
		return text(a), text(b)
	raise EvaluationError("comparison is possible only for atomic types", expr, env)

###############################################################################

def _strict(expr:syntax.ValueExpression, env:Environment, session) -> STRICT_VALUE:
	return force(evaluate(expr, env, session))

def _eval_literal(expr:syntax.Literal, env:Environment, session):
	return expr.value

def _eval_lookup(expr:syntax.Lookup, env:Environment, session):
	name = expr.nom.text
	if name == DOTS:
		raise EvaluationError("'...' used in an incorrect context", expr, env)
	try: value = resolve(name, env, session.search_path, Kind.VALUE)
	except SymbolNotFound as ex:
		blame(ex, expr, env)
		raise
	if value is MISSING:
		raise EvaluationError('argument "%s" is missing, with no default' % name, expr, env)
	return force(value)

def _callee(fn_exp:syntax.ValueExpression, env:Environment, session) -> Function:
	"""
	In call position a name means a function. Bindings that turn out not to be functions get skipped,
	which is how `c <- 1; c(2)` still finds the built-in `c`, were there one.
	"""
	if isinstance(fn_exp, syntax.Lookup):
		name = fn_exp.nom.text
		for value, host in iter_bindings(name, env, session.search_path, Kind.CALLABLE):
			if value is MISSING: continue
			value = force(value)
			if isinstance(value, Function): return value
		ex = SymbolNotFound(name, Kind.CALLABLE)
		blame(ex, fn_exp, env)
		raise ex
	function = _strict(fn_exp, env, session)
	if not isinstance(function, Function):
		raise EvaluationError("attempt to apply non-function", fn_exp, env)
	return function

def _dots(expr:syntax.Lookup, env:Environment, session):
	""" The arguments collected by the nearest enclosing function with a `...` formal. """
	try: return resolve(DOTS, env, session.search_path, Kind.VALUE)
	except SymbolNotFound:
		raise EvaluationError("'...' used in an incorrect context", expr, env)

def _eval_call(expr:syntax.Call, env:Environment, session):
	function = _callee(expr.fn_exp, env, session)
	args = []
	for a in expr.args:
		if a.name is None and isinstance(a.expr, syntax.Lookup) and a.expr.nom.text == DOTS:
			args.extend(_dots(a.expr, env, session))
		else:
			args.append((a.name, delay(a.expr, env, session)))
	return function.apply(args, env, session, expr)

def _eval_function_form(expr:syntax.FunctionForm, env:Environment, session):
	return Closure(expr, env)

def _eval_assign(expr:syntax.Assign, env:Environment, session):
	return assign(env, expr.nom.text, _strict(expr.expr, env, session))

def _eval_super_assign(expr:syntax.SuperAssign, env:Environment, session):
	"""
	Find the nearest enclosing environment that already binds the name, and change it there.
	Failing that, the global environment gets a new binding.
	"""
	value = _strict(expr.expr, env, session)
	name = expr.nom.text
	search_path = session.search_path
	for _, host in iter_bindings(name, env, search_path, Kind.VALUE):
		if host is env: continue
		if host is search_path.base_env:
			raise EvaluationError("cannot change value of locked binding for '%s'" % name, expr, env)
		break
	else:
		host = search_path.global_env
	return assign(host, name, value)

def _eval_bin_exp(expr:syntax.BinExp, env:Environment, session):
	a = _strict(expr.lhs, env, session)
	b = _strict(expr.rhs, env, session)
	glyph = expr.glyph
	if glyph in ARITHMETIC:
		return ARITHMETIC[glyph](_numeric(a, expr, env), _numeric(b, expr, env))
	if glyph in COMPARISON:
		return COMPARISON[glyph](*_comparable(a, b, expr, env))
	return LOGICAL[glyph](as_logical(a, expr.lhs, env), as_logical(b, expr.rhs, env))

def _eval_short_cut_exp(expr:syntax.ShortCutExp, env:Environment, session):
	lhs = as_logical(_strict(expr.lhs, env, session), expr.lhs, env)
	if lhs == SHORTCUT[expr.glyph]: return lhs
	return as_logical(_strict(expr.rhs, env, session), expr.rhs, env)

def _eval_unary_exp(expr:syntax.UnaryExp, env:Environment, session):
	arg = _strict(expr.arg, env, session)
	if expr.glyph == "!":
		return not as_logical(arg, expr.arg, env)
	if not _is_number(arg):
		raise EvaluationError("invalid argument to unary operator", expr, env)
	return -float(arg) if expr.glyph == "-" else float(arg)

def _eval_block(expr:syntax.Block, env:Environment, session):
	result = None
	for statement in expr.statements:
		result = _strict(statement, env, session)
	return result

def _eval_cond(expr:syntax.Cond, env:Environment, session):
	if as_logical(_strict(expr.if_part, env, session), expr.if_part, env):
		return _strict(expr.then_part, env, session)
	elif expr.else_part is not None:
		return _strict(expr.else_part, env, session)

attach_evaluation_methods(globals())
