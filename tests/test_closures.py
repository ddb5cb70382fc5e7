import io
import math
import unittest

from lexscope import diagnostics
from lexscope.front_end import parse_text
from lexscope.ontology import Kind
from lexscope.environment import Frame, TopLevel
from lexscope.resolver import SymbolNotFound
from lexscope.tree_walker.evaluator import EvaluationError
from lexscope.tree_walker.executive import Session, run_script
from lexscope.tree_walker.values import Closure


class ScriptTestCase(unittest.TestCase):
	""" Run R text in a fresh session, with output captured. """

	def setUp(self):
		self.report = diagnostics.Report()
		self.out = io.StringIO()
		self.session = Session(self.report, out=self.out)

	def run_text(self, text:str, echo=False):
		script = parse_text(text, None, self.report)
		self.report.assert_no_issues("Text failed to parse")
		return run_script(script, self.session, echo=echo)

	def value(self, name:str):
		return self.session.global_env.lookup_local(name)


class ClosureTests(ScriptTestCase):

	def test_make_power(self):
		self.run_text("""
			make.power <- function(n) {
				pow <- function(x) {
					x^n
				}
				pow
			}
			square <- make.power(2)
			cube <- make.power(3)
			a <- square(3)
			b <- cube(3)
		""")
		self.assertEqual(9.0, self.value("a"))
		self.assertEqual(27.0, self.value("b"))
		square, cube = self.value("square"), self.value("cube")
		self.assertIsInstance(square, Closure)
		self.assertIsNot(square.env, cube.env)
		self.assertIs(self.session.global_env, square.env.parent)
		self.assertEqual(2.0, self.run_text('get("n", environment(square))'))

	def test_closure_is_immutable(self):
		self.run_text("f <- function(x) x")
		f = self.value("f")
		with self.assertRaises(AttributeError):
			f.env = self.session.global_env
		with self.assertRaises(AttributeError):
			f.form = None

	def test_lexical_not_dynamic(self):
		result = self.run_text("""
			y <- 10
			f <- function(x) {
				y <- 2
				y^2 + g(x)
			}
			g <- function(x) {
				x * y
			}
			f(3)
		""")
		self.assertEqual(34.0, result)

	def test_definitions_are_visible_to_existing_closures(self):
		result = self.run_text("""
			f <- function() later
			later <- "defined after f"
			f()
		""")
		self.assertEqual("defined after f", result)

	def test_frame_links(self):
		self.run_text("""
			outer <- function() inner()
			inner <- function() environment()
			e <- outer()
		""")
		frame = self.value("e")
		self.assertIsInstance(frame, Frame)
		self.assertIs(self.session.global_env, frame.parent)
		self.assertIsInstance(frame.dynamic_link, Frame)

	def test_super_assignment(self):
		self.run_text("""
			make.counter <- function() {
				i <- 0
				function() {
					i <<- i + 1
					i
				}
			}
			a <- make.counter()
			b <- make.counter()
			a(); a(); b()
			n.a <- a()
			n.b <- b()
			set.total <- function(v) total <<- v
			set.total(42)
		""")
		self.assertEqual(3.0, self.value("n.a"))
		self.assertEqual(2.0, self.value("n.b"))
		self.assertEqual(42.0, self.value("total"))
		self.assertNotIn("i", list(self.session.global_env.symbols()))

	def test_super_assignment_refuses_base(self):
		with self.assertRaises(EvaluationError) as cm:
			self.run_text("f <- function() pi <<- 3\nf()")
		self.assertIn("locked binding", str(cm.exception))


class NamespaceTests(ScriptTestCase):

	def test_value_does_not_hide_function(self):
		self.assertEqual(4.0, self.run_text("sqrt <- 16\nsqrt(sqrt)"))
		self.assertEqual(16.0, self.value("sqrt"))

	def test_function_assignment_binds_both(self):
		self.run_text("f <- function() 1\nx <- 5")
		env = self.session.global_env
		self.assertIs(env.lookup_local("f"), env.lookup_local("f", Kind.CALLABLE))
		self.assertFalse(env.holds("x", Kind.CALLABLE))

	def test_non_function_value_in_call_position(self):
		with self.assertRaises(SymbolNotFound) as cm:
			self.run_text("x <- 1\nx(2)")
		self.assertIs(Kind.CALLABLE, cm.exception.kind)
		self.assertEqual("x", cm.exception.symbol)

	def test_parameter_in_call_position(self):
		self.assertEqual(18.0, self.run_text("twice <- function(f, x) f(f(x))\ntwice(function(v) v * 3, 2)"))
		self.assertEqual(12.0, self.run_text("twice(\\(v) v + 1, 10)"))

	def test_call_skips_a_parameter_that_is_no_function(self):
		self.assertEqual(3.0, self.run_text("g <- function(abs) abs(abs)\ng(-3)"))

	def test_get_and_exists_by_mode(self):
		self.run_text("sqrt <- 16")
		self.assertTrue(self.run_text('exists("sqrt", mode = "function")'))
		self.assertEqual(16.0, self.run_text('get("sqrt")'))
		self.assertTrue(self.run_text('is.function(get("sqrt", mode = "function"))'))
		self.assertFalse(self.run_text('exists("sqrt", inherits = FALSE, mode = "function")'))
		self.assertFalse(self.run_text('exists("nothing")'))


class EvaluationTests(ScriptTestCase):

	def test_lazy_arguments(self):
		self.assertEqual(1.0, self.run_text('first <- function(a, b) a\nfirst(1, stop("boom"))'))

	def test_promise_forced_once(self):
		self.run_text("""
			say <- function(x) { cat("forced\\n"); x }
			use.twice <- function(v) v + v
			r <- use.twice(say(21))
		""")
		self.assertEqual(42.0, self.value("r"))
		self.assertEqual("forced\n", self.out.getvalue())

	def test_defaults_see_the_frame(self):
		self.run_text("area <- function(w, h = w) w * h")
		self.assertEqual(9.0, self.run_text("area(3)"))
		self.assertEqual(10.0, self.run_text("area(h = 5, w = 2)"))

	def test_argument_matching_errors(self):
		self.run_text("f <- function(a, b) a")
		for text, message in [
			("f(1, 2, 3)", "unused argument"),
			("f(c = 1)", "unused argument (c = 1)"),
			("f(a = 1, a = 2)", "matched by multiple"),
			("f()", 'argument "a" is missing'),
			("g <- function(a = b, b = a) a\ng()", "promise already under evaluation"),
		]:
			with self.subTest(text):
				with self.assertRaises(EvaluationError) as cm:
					self.run_text(text)
				self.assertIn(message, str(cm.exception))

	def test_dots_pass_through(self):
		self.run_text("""
			f <- function(...) paste(...)
			g <- function(...) paste(..., sep = "-")
			h <- function(first, ...) paste(first, ..., sep = "+")
			wrap <- function(...) f("<", ..., ">")
			both <- f("a", "b")
			joined <- g(1, 2)
			alone <- h("x")
			named <- f("x", sep = "/", "y")
			nested <- wrap("a")
		""")
		self.assertEqual("a b", self.value("both"))
		self.assertEqual("1-2", self.value("joined"))
		self.assertEqual("x", self.value("alone"))
		self.assertEqual("x/y", self.value("named"))
		self.assertEqual("< a >", self.value("nested"))

	def test_dots_stay_lazy(self):
		self.assertEqual(1.0, self.run_text("""
			first <- function(a, b) a
			f <- function(...) first(...)
			f(1, stop("boom"))
		"""))

	def test_dots_out_of_place(self):
		for text in ["h <- function(...) ...\nh(1)", "paste(...)", "k <- function(x) paste(...)\nk(1)"]:
			with self.subTest(text):
				with self.assertRaises(EvaluationError) as cm:
					self.run_text(text)
				self.assertIn("'...' used in an incorrect context", str(cm.exception))

	def test_arithmetic(self):
		for text, expect in [
			("1 + 2 * 3", 7.0),
			("2^3^2", 512.0),
			("-2^2", -4.0),
			("7 %% 3", 1.0),
			("(1 + 2) * 3", 9.0),
			("1 < 2 && 2 < 3", True),
			("!TRUE | FALSE", False),
			("\"a\" < \"b\"", True),
			("1 / 0", math.inf),
			("-1 / 0", -math.inf),
			("if (1 > 2) \"yes\" else \"no\"", "no"),
		]:
			with self.subTest(text):
				self.assertEqual(expect, self.run_text(text))
		self.assertTrue(math.isnan(self.run_text("0 / 0")))
		self.assertIsNone(self.run_text("if (FALSE) 1"))

	def test_modulo_follows_the_divisor(self):
		for text, expect in [
			("-7 %% 3", 2.0),
			("7 %% -3", -2.0),
			("5 %% Inf", 5.0),
			("-5 %% Inf", math.inf),
			("5 %% -Inf", -math.inf),
		]:
			with self.subTest(text):
				self.assertEqual(expect, self.run_text(text))
		self.assertTrue(math.isnan(self.run_text("5 %% 0")))

	def test_logarithms(self):
		self.assertAlmostEqual(3.0, self.run_text("log(8, 2)"))
		self.assertAlmostEqual(1.0, self.run_text("log(exp(1))"))
		for text, expect in [
			("log(0)", -math.inf),
			("log(5, 1)", math.inf),
			("log(0.5, 1)", -math.inf),
			("log(0.5, 0)", 0.0),
		]:
			with self.subTest(text):
				self.assertEqual(expect, self.run_text(text))
		below = self.run_text("log(5, 0)")
		self.assertEqual(0.0, below)
		self.assertEqual(-1.0, math.copysign(1.0, below))
		for text in ["log(1, 1)", "log(5, -2)", "log(-1)"]:
			with self.subTest(text):
				self.assertTrue(math.isnan(self.run_text(text)))

	def test_character_vectors_as_text(self):
		self.run_text("a <- 1\nb <- 2")
		self.assertEqual("a b", self.run_text("paste(ls())"))
		self.assertEqual("[a b]", self.run_text('paste("[", ls(), "]", sep = "")'))
		self.run_text("cat(ls())")
		self.assertEqual("a b", self.out.getvalue().strip())

	def test_short_cut(self):
		self.assertFalse(self.run_text('FALSE && stop("not reached")'))
		self.assertTrue(self.run_text('TRUE || stop("not reached")'))

	def test_echo(self):
		self.run_text("""
			x <- 8
			x
			"text"
			TRUE
			NULL
			print(2.5)
			f <- function(x) x
			f
			paste("a", 1, TRUE)
			ls()
		""", echo=True)
		expect = [
			'[1] 8',
			'[1] "text"',
			'[1] TRUE',
			'[1] 2.5',
			'function(x) x',
			'[1] "a 1 TRUE"',
			'[1] "x" "f"',
		]
		self.assertEqual(expect, self.out.getvalue().splitlines())

	def test_closure_printing_shows_foreign_environment(self):
		self.run_text("make <- function() function() 1\ng <- make()\ng", echo=True)
		lines = self.out.getvalue().splitlines()
		self.assertEqual("function() 1", lines[0])
		self.assertTrue(lines[1].startswith("<environment: 0x"))


class SearchPathBuiltinTests(ScriptTestCase):

	def test_attach_and_detach(self):
		self.run_text("""
			helpers <- new.env()
			assign("greeting", "helpers", envir = helpers)
			others <- new.env()
			assign("greeting", "others", envir = others)
			attach(helpers)
			g1 <- greeting
			attach(others)
			g2 <- greeting
		""")
		self.assertEqual("helpers", self.value("g1"))
		self.assertEqual("others", self.value("g2"))
		self.assertEqual([".GlobalEnv", "others", "helpers", "package:base"], self.run_text("search()"))
		self.run_text("detach(others)")
		self.assertEqual("helpers", self.run_text("greeting"))
		self.run_text('detach("helpers")')
		with self.assertRaises(SymbolNotFound):
			self.run_text("greeting")

	def test_attach_copies(self):
		self.run_text("""
			e <- new.env()
			assign("x", 1, envir = e)
			attach(e)
			assign("x", 2, envir = e)
		""")
		self.assertEqual(1.0, self.run_text("x"))

	def test_detach_refuses_global_and_base(self):
		for text in ["detach(1)", 'detach("package:base")', "detach(7)"]:
			with self.subTest(text):
				with self.assertRaises(EvaluationError):
					self.run_text(text)

	def test_environment_builtins(self):
		self.assertEqual("R_GlobalEnv", self.run_text("environmentName(globalenv())"))
		self.assertEqual("base", self.run_text("environmentName(baseenv())"))
		self.assertEqual("R_EmptyEnv", self.run_text("environmentName(parent.env(globalenv()))"))
		self.assertTrue(self.run_text("identical(parent.env(new.env()), globalenv())"))
		self.assertTrue(self.run_text("identical(environment(), globalenv())"))
		self.assertIsNone(self.run_text("environment(sqrt)"))
		with self.assertRaises(EvaluationError):
			self.run_text('assign("x", 1, envir = emptyenv())')

	def test_ls_options(self):
		self.run_text("e <- new.env()")
		for name in ["b", ".hidden", "a"]:
			self.run_text('assign("%s", 1, envir = e)' % name)
		self.assertEqual(["b", "a"], self.run_text("ls(e)"))
		self.assertEqual(["a", "b"], self.run_text("ls(e, sorted = TRUE)"))
		self.assertEqual([".hidden", "a", "b"], self.run_text("ls(e, sorted = TRUE, all.names = TRUE)"))

	def test_sessions_are_independent(self):
		self.run_text("e <- new.env()\nattach(e)")
		other = Session(diagnostics.Report(), out=io.StringIO())
		self.assertEqual([".GlobalEnv", "package:base"], other.search_path.names())
		self.assertIsNot(other.search_path.base_env, self.session.search_path.base_env)

	def test_library_path(self):
		with self.assertRaises(EvaluationError) as cm:
			self.run_text("library(nonesuch)")
		self.assertIn("there is no package called 'nonesuch'", str(cm.exception))

	def test_loaded_library_is_top_level(self):
		package = TopLevel("package:handmade")
		package.define("answer", 42.0)
		self.session.attach(package)
		self.assertEqual(42.0, self.run_text("answer"))
		self.assertIs(package, self.session.load_library("handmade"))


if __name__ == '__main__':
	unittest.main()
