"""
The search path: where free variables go looking once the lexical chain runs out.

Positions are counted from one, as in R's `search()`.
Position one is always the global workspace; the last position is always the base environment.
Everything else got there by being attached, and attaching puts a newcomer at position two.
Nothing here remembers positions on anyone's behalf, so a resolution sees the path as it is right now.
"""
from typing import Iterator, Optional, Union
from .environment import Environment, TopLevel, GLOBAL_LABEL, BASE_LABEL

class SearchPathError(ValueError):
	pass

class SearchPath:
	_entries: list[TopLevel]

	def __init__(self, global_env:Optional[TopLevel]=None, base_env:Optional[TopLevel]=None):
		self._entries = [
			global_env or TopLevel(GLOBAL_LABEL),
			base_env or TopLevel(BASE_LABEL),
		]

	@property
	def global_env(self) -> TopLevel: return self._entries[0]

	@property
	def base_env(self) -> TopLevel: return self._entries[-1]

	def entries(self) -> list[TopLevel]:
		return list(self._entries)

	def names(self) -> list[str]:
		return [env.name for env in self._entries]

	def entry(self, pos:int) -> TopLevel:
		if not 1 <= pos <= len(self._entries):
			raise SearchPathError("invalid 'pos' argument: %d" % pos)
		return self._entries[pos - 1]

	def position(self, env:Environment) -> Optional[int]:
		for index, each in enumerate(self._entries):
			if each is env: return index + 1
		return None

	def find_label(self, label:str) -> Optional[int]:
		for index, each in enumerate(self._entries):
			if each.name == label: return index + 1
		return None

	def attach(self, env:TopLevel, pos:int=2) -> TopLevel:
		"""
		Insert a top-level environment at `pos`, shifting later entries down.
		Position one belongs to the global workspace and the base environment stays last,
		so `pos` gets clamped between two and the current length.
		"""
		if not (isinstance(env, Environment) and env.is_top_level()):
			raise SearchPathError("only a top-level environment can be attached")
		if self.position(env) is not None:
			raise SearchPathError("%s is already attached" % env.name)
		pos = min(max(pos, 2), len(self._entries))
		self._entries.insert(pos - 1, env)
		return env

	def detach(self, which:Union[int, str]) -> TopLevel:
		""" Remove an entry, by position or by label. Later entries shift up. """
		if isinstance(which, str):
			pos = self.find_label(which)
			if pos is None:
				raise SearchPathError("invalid 'name' argument: %s" % which)
		else:
			pos = int(which)
			self.entry(pos)
		if pos == 1:
			raise SearchPathError("detaching %s is not allowed" % GLOBAL_LABEL)
		if pos == len(self._entries):
			raise SearchPathError("detaching %s is not allowed" % BASE_LABEL)
		return self._entries.pop(pos - 1)

	def scan_from(self, env:TopLevel) -> Iterator[TopLevel]:
		"""
		The part of the path a resolution consults after reaching `env`, which is included.
		A top-level environment that is not on the path (a detached package, say)
		is followed by the whole path, global workspace first.
		"""
		pos = self.position(env)
		if pos is None:
			yield env
			pos = 1
		# Read the live list each step: an attach in mid-scan is seen, as it would be by the next scan.
		index = pos - 1
		while index < len(self._entries):
			yield self._entries[index]
			index += 1
