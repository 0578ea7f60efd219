"""
This checks the soundness of a small language with structural subtyping.

{0}

For example:

    subtle -n 200 -v

will check every law over a couple hundred random specimens and say how it went.

    subtle --scenarios -v

will type and run the worked examples, showing each type and normal form.

    subtle -h

will explain all the arguments.
"""
import sys, argparse

parser = argparse.ArgumentParser(
	prog="subtle",
	description="Soundness harness for a language with structural subtyping.",
)
parser.add_argument('-n', "--trials", type=int, default=200, help="How many specimens to try per law.")
parser.add_argument('-s', "--seed", type=int, default=0, help="Seed for the specimen generators, for reproducing a counterexample.")
parser.add_argument('-d', "--depth", type=int, default=3, help="How deeply to nest generated types and terms.")
parser.add_argument('-m', "--max-steps", type=int, default=None, help="Evaluation budget before declaring non-termination.")
parser.add_argument('-v', "--verbose", action="count", help="Say what's going on. Twice for more.")
parser.add_argument("--scenarios", action="store_true", help="Run the worked examples instead of the random laws.")

def run(args):
	from .diagnostics import Report, TooManyIssues, TypeCheckError
	from .evaluator import EvalError, DEFAULT_MAX_STEPS
	from .harness import Harness, HarnessConfig, show_scenarios
	report = Report(verbose=args.verbose)
	max_steps = args.max_steps or DEFAULT_MAX_STEPS
	if args.scenarios:
		try: show_scenarios(report, max_steps)
		except (TypeCheckError, EvalError) as ex:
			print(ex, file=sys.stderr)
			return 1
		return
	config = HarnessConfig(trials=args.trials, seed=args.seed, depth=args.depth, max_steps=max_steps)
	report.info("Configuration:", config)
	try:
		Harness(config, report).run()
	except TooManyIssues:
		report.complain_to_console()
		print(" *"*35, file=sys.stderr)
		print("Giving up after a few issues. One crisis at a time, eh?", file=sys.stderr)
		return 1
	if report.sick():
		report.complain_to_console()
		return 1
	print("Looks sound to me.", file=sys.stderr)

def main():
	if len(sys.argv) > 1:
		exit(run(parser.parse_args()))
	else:
		print(__doc__.strip().format(parser.format_usage()))
