"""
This is an interpreter for a small R-flavoured language with lexical scope.

{0}

For example:

    lexscope examples/make_power.R

will run make_power.R if possible, or else try to explain why not.

    lexscope -h

will explain all the arguments.
"""
import sys, argparse
from pathlib import Path

parser = argparse.ArgumentParser(
	prog="lexscope",
	description="Interpreter for a small lexically-scoped R dialect.",
)
parser.add_argument("program", help="try examples/make_power.R for example.")
parser.add_argument('-c', "--check", action="store_true", help="Parse the program but do not actually run it.")
parser.add_argument('-v', "--verbose", action="count", help="Say what is going on, such as libraries loaded and attached.")
parser.add_argument('-L', "--library", action="append", default=[], metavar="DIR", help="Look for libraries in DIR (may be given more than once).")

def run(args):
	from .diagnostics import Report, Pic
	from .front_end import parse_file
	from .resolver import SymbolNotFound
	from .tree_walker.evaluator import EvaluationError
	from .tree_walker.executive import Session, run_script
	report = Report(verbose=args.verbose)
	program = Path.cwd() / args.program
	report.info("Parsing", program)
	script = parse_file(program, report)
	if script is None:
		assert report.sick()
		report.complain_to_console()
		return 1
	if args.check:
		print("Looks plausible to me.", file=sys.stderr)
		return
	library_path = [Path(d) for d in args.library] + [program.parent, program.parent / "library"]
	session = Session(report, library_path)
	try:
		run_script(script, session)
	except (EvaluationError, SymbolNotFound) as ex:
		report.runtime_error(ex)
	except RecursionError:
		report.issue(Pic("Error: evaluation nested too deeply: infinite recursion?", []))
	if report.sick():
		sys.stdout.flush()
		report.complain_to_console()
		return 1

def main():
	if len(sys.argv) > 1:
		sys.exit(run(parser.parse_args()))
	else:
		print(__doc__.strip().format(parser.format_usage()))
