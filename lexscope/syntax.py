"""
The set of parse-nodes in simple form.
The front-end calls these constructors with subordinate semantic-values in a bottom-up tree transduction.
Every node is a Phrase, so error messages can point at it.
"""
from pathlib import Path
from typing import Any, Optional, Sequence
from .ontology import Phrase, Nom
from . import location

class ValueExpression(Phrase):
	def source(self) -> str:
		return location.excerpt(*self.span())

class Literal(ValueExpression):
	def __init__(self, value:Any, left:int, right:int):
		self.value = value
		self._left, self._right = left, right
	def __repr__(self): return "<literal %r>" % (self.value,)
	def left(self): return self._left
	def right(self): return self._right

class Lookup(ValueExpression):
	def __init__(self, nom:Nom): self.nom = nom
	def __repr__(self): return "<ref:%s>" % self.nom.text
	def left(self): return self.nom.left()
	def right(self): return self.nom.right()

class Assign(ValueExpression):
	""" name <- expr : binds in the environment where it's evaluated. """
	def __init__(self, nom:Nom, expr:ValueExpression):
		self.nom, self.expr = nom, expr
	def __repr__(self): return "<%s <- %r>" % (self.nom.text, self.expr)
	def left(self): return self.nom.left()
	def right(self): return self.expr.right()

class SuperAssign(Assign):
	""" name <<- expr : binds wherever an enclosing environment already binds the name. """
	def __repr__(self): return "<%s <<- %r>" % (self.nom.text, self.expr)

class BinExp(ValueExpression):
	def __init__(self, lhs:ValueExpression, glyph:str, rhs:ValueExpression):
		self.lhs, self.glyph, self.rhs = lhs, glyph, rhs
	def __repr__(self): return "(%r %s %r)" % (self.lhs, self.glyph, self.rhs)
	def left(self): return self.lhs.left()
	def right(self): return self.rhs.right()

class ShortCutExp(BinExp):
	""" && and || evaluate the right-hand side only when they must. """

class UnaryExp(ValueExpression):
	def __init__(self, glyph:str, arg:ValueExpression, spot:int):
		self.glyph, self.arg, self._spot = glyph, arg, spot
	def left(self): return self._spot or self.arg.left()
	def right(self): return self.arg.right()

class Argument(Phrase):
	""" An actual argument at a call site, perhaps with a name. """
	def __init__(self, expr:ValueExpression, nom:Optional[Nom]=None):
		self.expr, self.nom = expr, nom
	@property
	def name(self) -> Optional[str]:
		return self.nom.text if self.nom else None
	def left(self): return (self.nom or self.expr).left()
	def right(self): return self.expr.right()

class Call(ValueExpression):
	def __init__(self, fn_exp:ValueExpression, args:Sequence[Argument], right:int):
		self.fn_exp, self.args, self._right = fn_exp, tuple(args), right
	def __repr__(self): return "%r%r" % (self.fn_exp, self.args)
	def left(self): return self.fn_exp.left()
	def right(self): return self._right

class FormalParameter(Phrase):
	def __init__(self, nom:Nom, default:Optional[ValueExpression]):
		self.nom, self.default = nom, default
	def key(self): return self.nom.key()
	def __repr__(self): return "<:%s>" % self.nom.text
	def left(self): return self.nom.left()
	def right(self): return (self.default or self.nom).right()

class FunctionForm(ValueExpression):
	""" Evaluating one of these makes a closure over the environment where that happens. """
	def __init__(self, spot:int, params:Sequence[FormalParameter], body:ValueExpression):
		self._spot, self.params, self.body = spot, tuple(params), body
	def __repr__(self): return "<function(%s)>" % ", ".join(p.nom.text for p in self.params)
	def left(self): return self._spot
	def right(self): return self.body.right()

class Block(ValueExpression):
	def __init__(self, left:int, statements:Sequence[ValueExpression], right:int):
		self._left, self.statements, self._right = left, tuple(statements), right
	def left(self): return self._left
	def right(self): return self._right

class Cond(ValueExpression):
	def __init__(self, spot:int, if_part:ValueExpression, then_part:ValueExpression, else_part:Optional[ValueExpression]):
		self._spot = spot
		self.if_part, self.then_part, self.else_part = if_part, then_part, else_part
	def left(self): return self._spot
	def right(self): return (self.else_part or self.then_part).right()

class Script:
	""" What the parser makes of a whole file """
	def __init__(self, path:Optional[Path], statements:Sequence[ValueExpression]):
		self.path = path
		self.statements = tuple(statements)
	def __repr__(self): return "<Script %s: %d statements>" % (self.path, len(self.statements))
