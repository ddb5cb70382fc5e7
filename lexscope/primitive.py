"""
Build the base environment: the built-in functions every program can see,
because the base environment sits at the end of the search path.
"""
import math
from .ontology import Kind
from .environment import Environment, TopLevel, EMPTY, NOT_FOUND, BASE_LABEL, environment_name, list_symbols, get_binding
from .search_path import SearchPathError
from .resolver import SymbolNotFound, resolve
from .tree_walker.evaluator import EvaluationError, Promise, MISSING, force
from .tree_walker.values import Function, Closure, Primitive, assign, format_atom
from . import syntax

_BUILTINS = []

def builtin(name:str, *formals:str, special=False):
	""" Register a Python function as an R built-in with the given formal parameters. """
	def decorate(fn):
		_BUILTINS.append(Primitive(name, fn, formals, special))
		return fn
	return decorate

def base_environment() -> TopLevel:
	env = TopLevel(BASE_LABEL)
	for p in _BUILTINS:
		assign(env, p.name, p)
	env.define("pi", math.pi)
	return env

###############################################################################

def _text(x) -> str:
	""" How cat and paste see a value: strings bare, everything else as it would print. """
	if isinstance(x, str): return x
	if isinstance(x, list): return " ".join(map(_text, x))
	return format_atom(x)

def _number(x, who) -> float:
	if isinstance(x, (bool, int, float)): return float(x)
	raise EvaluationError("non-numeric argument to mathematical function %s" % who)

def _string(x, what) -> str:
	if isinstance(x, str): return x
	raise EvaluationError("invalid '%s' argument" % what)

def _environment(x, what) -> Environment:
	if isinstance(x, Environment): return x
	raise EvaluationError("invalid '%s' argument" % what)

def _symbol_name(arg, what) -> str:
	"""
	Some built-ins take a bare name, as in `library(geometry)`.
	If the argument was written as a name, that name is the answer and nothing gets evaluated.
	"""
	if isinstance(arg, Promise) and not arg.is_forced() and isinstance(arg.expr, syntax.Lookup):
		return arg.expr.nom.text
	return _string(force(arg), what)

def _mode(mode) -> Kind:
	mode = _string(mode, "mode")
	if mode == "function": return Kind.CALLABLE
	if mode in ("any", "value"): return Kind.VALUE
	raise EvaluationError("invalid 'mode' argument: %s" % mode)

###############################################################################
# Output

@builtin("print", "x", "...", special=True)
def _print(session, caller, *dots, x=None):
	session.display(force(x))

@builtin("cat", "...", "sep", special=True)
def _cat(session, caller, *dots, sep=" "):
	sep = _string(force(sep), "sep")
	session.write(sep.join(_text(force(d)) for d in dots))

@builtin("paste", "...", "sep")
def _paste(*dots, sep=" "):
	return _string(sep, "sep").join(_text(d) for d in dots)

###############################################################################
# Arithmetic

@builtin("sqrt", "x")
def _sqrt(x):
	x = _number(x, "sqrt")
	if math.isnan(x) or x < 0: return math.nan
	return math.sqrt(x)

@builtin("exp", "x")
def _exp(x):
	try: return math.exp(_number(x, "exp"))
	except OverflowError: return math.inf

@builtin("log", "x", "base")
def _log(x, base=math.e):
	""" Natural log of x over natural log of base, with R's rules where either runs out of real numbers. """
	numerator = _ln(_number(x, "log"))
	base = _number(base, "log")
	if base == math.e: return numerator
	denominator = _ln(base)
	if denominator == 0:
		if numerator == 0 or math.isnan(numerator): return math.nan
		return math.copysign(math.inf, numerator)
	return numerator / denominator

def _ln(x:float) -> float:
	if math.isnan(x) or x < 0: return math.nan
	if x == 0: return -math.inf
	return math.log(x)

@builtin("abs", "x")
def _abs(x):
	return abs(_number(x, "abs"))

###############################################################################
# Predicates and control

@builtin("identical", "x", "y")
def _identical(x, y):
	if x is y: return True
	if isinstance(x, float) and isinstance(y, float) and math.isnan(x) and math.isnan(y): return True
	if isinstance(x, (bool, float, str, list)) and type(x) is type(y): return x == y
	return False

@builtin("is.function", "x")
def _is_function(x):
	return isinstance(x, Function)

@builtin("stop", "...")
def _stop(*dots):
	raise EvaluationError("".join(_text(d) for d in dots))

###############################################################################
# Environments

@builtin("environment", "fun", special=True)
def _environment_of(session, caller, fun=None):
	fun = force(fun)
	if fun is None: return caller
	if isinstance(fun, Closure): return fun.env
	if isinstance(fun, Function): return None
	raise EvaluationError("argument is not a function")

@builtin("environmentName", "env")
def _environment_name(env):
	return environment_name(env) if isinstance(env, Environment) else ""

@builtin("globalenv", special=True)
def _globalenv(session, caller):
	return session.global_env

@builtin("emptyenv")
def _emptyenv():
	return EMPTY

@builtin("baseenv", special=True)
def _baseenv(session, caller):
	return session.search_path.base_env

@builtin("parent.env", "env")
def _parent_env(env):
	parent = _environment(env, "env").parent
	if parent is None: raise EvaluationError("the empty environment has no parent")
	return parent

@builtin("new.env", "parent", special=True)
def _new_env(session, caller, parent=None):
	parent = caller if parent is None else _environment(force(parent), "parent")
	return Environment(parent)

@builtin("ls", "envir", "sorted", "all.names", special=True)
def _ls(session, caller, envir=None, sorted=False, all_names=False):
	envir = caller if envir is None else _environment(force(envir), "envir")
	return list_symbols(envir, sort=bool(force(sorted)), all_names=bool(force(all_names)))

def _where(caller, envir) -> Environment:
	return caller if envir is None else _environment(force(envir), "envir")

@builtin("get", "x", "envir", "mode", "inherits", special=True)
def _get(session, caller, x=MISSING, envir=None, mode="any", inherits=True):
	symbol = _string(force(x), "x")
	kind = _mode(force(mode))
	envir = _where(caller, envir)
	if force(inherits):
		value = resolve(symbol, envir, session.search_path, kind)
	else:
		value = get_binding(symbol, envir, kind)
		if value is NOT_FOUND: raise SymbolNotFound(symbol, kind)
	if value is MISSING:
		raise EvaluationError('argument "%s" is missing, with no default' % symbol)
	return force(value)

@builtin("exists", "x", "envir", "mode", "inherits", special=True)
def _exists(session, caller, x=MISSING, envir=None, mode="any", inherits=True):
	symbol = _string(force(x), "x")
	kind = _mode(force(mode))
	envir = _where(caller, envir)
	if force(inherits):
		try: resolve(symbol, envir, session.search_path, kind)
		except SymbolNotFound: return False
		return True
	return get_binding(symbol, envir, kind) is not NOT_FOUND

@builtin("assign", "x", "value", "envir", special=True)
def _assign(session, caller, x=MISSING, value=None, envir=None):
	symbol = _string(force(x), "x")
	envir = _where(caller, envir)
	try: return assign(envir, symbol, force(value))
	except TypeError as ex: raise EvaluationError(str(ex))

###############################################################################
# The search path

@builtin("search", special=True)
def _search(session, caller):
	return session.search_path.names()

@builtin("attach", "what", "pos", "name", special=True)
def _attach(session, caller, what=MISSING, pos=2.0, name=None):
	"""
	Like R, attaching copies the bindings of `what` into a fresh top-level environment,
	so the original carries on unaffected.
	"""
	if isinstance(what, Promise) and not what.is_forced():
		default_name = what.expr.source()
	else:
		default_name = "attached"
	source = _environment(force(what), "what")
	name = default_name if name is None else _string(force(name), "name")
	package = TopLevel(name)
	for symbol, kind, value in source.bindings():
		package.define(symbol, value, kind)
	try: session.attach(package, int(_number(force(pos), "attach")))
	except SearchPathError as ex: raise EvaluationError(str(ex))

@builtin("detach", "name", special=True)
def _detach(session, caller, name=None):
	""" By position, by label, or by the bare name of an attached package. """
	if name is None: which = 2.0
	elif isinstance(name, Promise) and not name.is_forced() and isinstance(name.expr, syntax.Lookup):
		which = name.expr.nom.text
	else: which = force(name)
	search_path = session.search_path
	if isinstance(which, float): which = int(which)
	elif isinstance(which, str):
		if search_path.find_label(which) is None and search_path.find_label("package:"+which) is not None:
			which = "package:" + which
	else: raise EvaluationError("invalid 'name' argument")
	try: session.detach(which)
	except SearchPathError as ex: raise EvaluationError(str(ex))

@builtin("library", "package", special=True)
def _library(session, caller, package=MISSING):
	if package is MISSING: raise EvaluationError('argument "package" is missing, with no default')
	session.load_library(_symbol_name(package, "package"))
