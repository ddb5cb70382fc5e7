"""
Environments: the canonical list-structured search.

Each environment maps symbols to values and carries exactly one link to a parent.
The links only ever point toward the empty environment, which has no parent,
so together all the environments form a forest rooted there.

A symbol has two slots, selected by Kind, so that a name can mean
an ordinary value and a function at the same time without either clobbering the other.
"""
from typing import Any, Iterable, Iterator, Optional
from .ontology import Kind

GLOBAL_LABEL = ".GlobalEnv"
BASE_LABEL = "package:base"

class _NotFound:
	def __repr__(self): return "NOT_FOUND"
	def __bool__(self): return False

NOT_FOUND = _NotFound()

class Environment:
	"""
	Plain environment: for instance one made with `new.env()`.
	The parent link is fixed at construction. That keeps the parent relation acyclic.
	"""
	_bindings: dict[str, dict[Kind, Any]]

	def __init__(self, parent:Optional["Environment"], name:str=""):
		self._bindings = {}
		self._parent = parent
		self.name = name

	@property
	def parent(self) -> Optional["Environment"]:
		return self._parent

	def is_top_level(self) -> bool:
		return False

	def define(self, symbol:str, value:Any, kind:Kind=Kind.VALUE):
		""" Insert or overwrite a binding in the local mapping only. """
		assert isinstance(symbol, str), symbol
		try: slots = self._bindings[symbol]
		except KeyError: slots = self._bindings[symbol] = {}
		slots[kind] = value
		return value

	def lookup_local(self, symbol:str, kind:Kind=Kind.VALUE) -> Any:
		""" Check only this environment's own mapping. Returns NOT_FOUND on a miss. """
		try: return self._bindings[symbol][kind]
		except KeyError: return NOT_FOUND

	def holds(self, symbol:str, kind:Optional[Kind]=None) -> bool:
		slots = self._bindings.get(symbol)
		if slots is None: return False
		return kind is None or kind in slots

	def symbols(self) -> Iterable[str]:
		""" Own names, in the order they were first defined. """
		return self._bindings.keys()

	def bindings(self) -> Iterator[tuple[str, Kind, Any]]:
		for symbol, slots in self._bindings.items():
			for kind, value in slots.items():
				yield symbol, kind, value

	def __repr__(self):
		return "<environment: %s>" % (environment_name(self) or hex(id(self)))


class EmptyEnvironment(Environment):
	""" The root of the forest. Nothing is bound here, and nothing may be. """
	def __init__(self):
		super().__init__(None, "R_EmptyEnv")

	def define(self, symbol:str, value:Any, kind:Kind=Kind.VALUE):
		raise TypeError("cannot assign values in the empty environment")

EMPTY = EmptyEnvironment()


class TopLevel(Environment):
	"""
	Global workspace, base environment, and attached packages.
	Their parent is the empty environment: once the lexical chain reaches one of these,
	the resolver carries on along the search path instead.
	"""
	def __init__(self, name:str):
		super().__init__(EMPTY, name)

	def is_top_level(self) -> bool:
		return True


class Frame(Environment):
	"""
	The environment made by calling a closure.
	The parent (static link) is the closure's defining environment.
	The dynamic link and call-site serve diagnostics only; resolution never follows them.
	"""
	def __init__(self, static_link:Environment, dynamic_link:Optional[Environment], site=None):
		super().__init__(static_link)
		self.dynamic_link = dynamic_link
		self.site = site


def list_symbols(environment:Environment, sort:bool=False, all_names:bool=True) -> list[str]:
	"""
	Names bound in this environment's own mapping; nothing inherited.
	Insertion order unless asked to sort. Names starting with a dot are hidden unless all_names.
	"""
	names = [s for s in environment.symbols() if all_names or not s.startswith(".")]
	if sort: names.sort()
	return names

def get_binding(symbol:str, environment:Environment, kind:Kind=Kind.VALUE) -> Any:
	return environment.lookup_local(symbol, kind)

def environment_name(environment:Environment) -> str:
	""" What R would call it: R_GlobalEnv, base, a package name, or nothing much. """
	name = environment.name
	if name == GLOBAL_LABEL: return "R_GlobalEnv"
	if name.startswith("package:"): return name[len("package:"):]
	return name
