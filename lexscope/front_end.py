"""
Text in, Script out.

The grammar lives in grammar.lark. The parser is LALR, with a small post-lexer
deciding which line-breaks actually end a statement.
"""
import re
from pathlib import Path
from typing import Iterator, Optional

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedInput
from lark.lark import PostLex

from . import syntax, location
from .ontology import Nom
from .diagnostics import Report

# The parenthesized part of these is a header: the body may start on the next line.
_HEADS = frozenset(["function", "\\", "if"])
_HEAD_CLOSE = ")head"
# After these, a line-break cannot end the statement, so it must be a continuation.
_CONTINUES = frozenset([
	"+", "-", "*", "/", "^", "%%",
	"==", "!=", "<", "<=", ">", ">=",
	"!", "&", "&&", "|", "||",
	"<-", "<<-", "=", ",", "(", "{", "else", "\\", _HEAD_CLOSE,
])
# Before these, a line-break is just layout.
_ABSORBS = frozenset(["}", ")", "else"])
_WORD_TYPES = frozenset(["NAME", "NUMBER", "STRING"])

class StatementBreaks(PostLex):
	"""
	R decides statement boundaries by context.
	Inside parentheses, line-breaks do nothing; inside braces they separate statements.
	A break is also ignored after a binary operator or comma, and before `else` or a close-brace.
	After the header of a function or an `if`, a break is ignored too, so the body may start on the next line.
	Runs of breaks collapse into one, and none survive at the start or the end.
	"""
	always_accept = ("_NL",)

	def process(self, stream:Iterator[Token]) -> Iterator[Token]:
		nesting = []
		previous = None
		pending = None
		for token in stream:
			if token.type == "_NL":
				if previous is None or previous in _CONTINUES: continue
				if nesting and nesting[-1] != "{": continue
				pending = token
				continue
			text = "" if token.type in _WORD_TYPES else str(token)
			if pending is not None:
				if text not in _ABSORBS: yield pending
				pending = None
			if text == "(": nesting.append(_HEAD_CLOSE if previous in _HEADS else "(")
			elif text == "{": nesting.append(text)
			elif text in (")", "}") and nesting:
				if nesting.pop() == _HEAD_CLOSE: text = _HEAD_CLOSE
			previous = text
			yield token


_CONSTANTS = {
	"TRUE": True,
	"FALSE": False,
	"NULL": None,
	"Inf": float("inf"),
	"NaN": float("nan"),
}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}

def _unescape(text:str) -> str:
	return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), text)

@v_args(inline=True)
class TreeBuilder(Transformer):
	""" Bottom-up: turn lark's parse tree into syntax nodes, with offsets into the location index. """

	def __init__(self, path:Optional[Path], base:int):
		super().__init__()
		self._path = path
		self._base = base

	def _at(self, token:Token) -> int:
		return self._base + token.start_pos

	def _nom(self, token:Token) -> Nom:
		return Nom(str(token), self._at(token))

	def start(self, *statements):
		return syntax.Script(self._path, statements)

	def assign(self, name, expr): return syntax.Assign(self._nom(name), expr)
	def super_assign(self, name, expr): return syntax.SuperAssign(self._nom(name), expr)

	def or_else(self, lhs, rhs): return syntax.ShortCutExp(lhs, "||", rhs)
	def and_then(self, lhs, rhs): return syntax.ShortCutExp(lhs, "&&", rhs)
	def either(self, lhs, rhs): return syntax.BinExp(lhs, "|", rhs)
	def both(self, lhs, rhs): return syntax.BinExp(lhs, "&", rhs)

	def eq(self, lhs, rhs): return syntax.BinExp(lhs, "==", rhs)
	def ne(self, lhs, rhs): return syntax.BinExp(lhs, "!=", rhs)
	def lt(self, lhs, rhs): return syntax.BinExp(lhs, "<", rhs)
	def le(self, lhs, rhs): return syntax.BinExp(lhs, "<=", rhs)
	def gt(self, lhs, rhs): return syntax.BinExp(lhs, ">", rhs)
	def ge(self, lhs, rhs): return syntax.BinExp(lhs, ">=", rhs)

	def add(self, lhs, rhs): return syntax.BinExp(lhs, "+", rhs)
	def sub(self, lhs, rhs): return syntax.BinExp(lhs, "-", rhs)
	def mul(self, lhs, rhs): return syntax.BinExp(lhs, "*", rhs)
	def div(self, lhs, rhs): return syntax.BinExp(lhs, "/", rhs)
	def mod(self, lhs, rhs): return syntax.BinExp(lhs, "%%", rhs)
	def pow(self, lhs, rhs): return syntax.BinExp(lhs, "^", rhs)

	def not_(self, bang, arg): return syntax.UnaryExp("!", arg, self._at(bang))
	def neg(self, minus, arg): return syntax.UnaryExp("-", arg, self._at(minus))
	def pos(self, plus, arg): return syntax.UnaryExp("+", arg, self._at(plus))

	def call(self, fn_exp, *rest):
		# With maybe_placeholders, an empty argument list may arrive as None.
		rpar = rest[-1]
		args = rest[0] if len(rest) > 1 else None
		return syntax.Call(fn_exp, args or (), self._at(rpar) + 1)

	def arguments(self, *items):
		return [a if isinstance(a, syntax.Argument) else syntax.Argument(a) for a in items]

	def named_argument(self, name, expr):
		return syntax.Argument(expr, self._nom(name))

	def lookup(self, name):
		text = str(name)
		if text in _CONSTANTS:
			at = self._at(name)
			return syntax.Literal(_CONSTANTS[text], at, at + len(text))
		return syntax.Lookup(self._nom(name))

	def number(self, token):
		at = self._at(token)
		return syntax.Literal(float(token), at, at + len(token))

	def string(self, token):
		at = self._at(token)
		return syntax.Literal(_unescape(str(token)[1:-1]), at, at + len(token))

	def block(self, lbrace, *rest):
		rbrace = rest[-1]
		return syntax.Block(self._at(lbrace), rest[:-1], self._at(rbrace) + 1)

	def function(self, keyword, *rest):
		body = rest[-1]
		params = rest[0] if len(rest) > 1 else None
		return syntax.FunctionForm(self._at(keyword), params or (), body)

	def formals(self, *items): return list(items)

	def formal(self, name, default=None):
		return syntax.FormalParameter(self._nom(name), default)

	def cond(self, keyword, if_part, then_part, else_part=None):
		return syntax.Cond(self._at(keyword), if_part, then_part, else_part)


_parser = Lark(
	(Path(__file__).parent / "grammar.lark").read_text(encoding="utf-8"),
	parser="lalr",
	lexer="basic",
	postlex=StatementBreaks(),
	maybe_placeholders=True,
)

def parse_text(text:str, path:Optional[Path], report:Report) -> Optional[syntax.Script]:
	""" Submit text to parser; on trouble, file a complaint with the report and return None. """
	base = location.start_segment(path, text)
	try:
		tree = _parser.parse(text)
	except UnexpectedInput as ex:
		report.parse_error(path, text, ex)
		return None
	return TreeBuilder(path, base).transform(tree)

def parse_file(path:Path, report:Report) -> Optional[syntax.Script]:
	try:
		with open(path, "r", encoding="utf-8") as fh:
			text = fh.read()
	except FileNotFoundError:
		report.no_such_file(path)
		return None
	except OSError:
		report.broken_file(path)
		return None
	return parse_text(text, path, report)
