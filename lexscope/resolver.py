"""
Resolving a free variable.

Two phases. First the lexical chain: this environment, then its parent, and so on,
until coming to a top-level environment. Then the search path, starting from wherever
that top-level environment sits on it, down through the base environment.
The first binding found in that order wins; nothing past it gets consulted.

This is a pure read. The search path is passed in explicitly, not kept in some global.
"""
from typing import Any, Iterator
from .ontology import Kind
from .environment import Environment, NOT_FOUND
from .search_path import SearchPath

class SymbolNotFound(KeyError):
	"""
	The one way resolution fails. Nobody in here catches it:
	it propagates to whoever evaluated the expression.
	"""
	def __init__(self, symbol:str, kind:Kind=Kind.VALUE):
		super().__init__(symbol, kind)
		self.symbol = symbol
		self.kind = kind
		self.site = None   # The evaluator fills these in on the way out.
		self.frame = None

	def __str__(self):
		if self.kind is Kind.CALLABLE:
			return 'could not find function "%s"' % self.symbol
		return "object '%s' not found" % self.symbol


def _chain(env:Environment, search_path:SearchPath) -> Iterator[Environment]:
	""" Every environment to consult, in order. """
	while env is not None:
		if env.is_top_level():
			yield from search_path.scan_from(env)
			return
		yield env
		env = env.parent

def iter_bindings(symbol:str, env:Environment, search_path:SearchPath, kind:Kind=Kind.VALUE) -> Iterator[tuple[Any, Environment]]:
	"""
	Yield (value, host-environment) for every binding of symbol in resolution order.
	Lazy, so a caller that wants only the first pays only for the first.
	"""
	for host in _chain(env, search_path):
		value = host.lookup_local(symbol, kind)
		if value is not NOT_FOUND:
			yield value, host

def find(symbol:str, env:Environment, search_path:SearchPath, kind:Kind=Kind.VALUE) -> tuple[Any, Environment]:
	for value, host in iter_bindings(symbol, env, search_path, kind):
		return value, host
	raise SymbolNotFound(symbol, kind)

def resolve(symbol:str, env:Environment, search_path:SearchPath, kind:Kind=Kind.VALUE) -> Any:
	return find(symbol, env, search_path, kind)[0]
