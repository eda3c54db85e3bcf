"""
This is the compiler and virtual machine for the lalg teaching language.

{0}

For example:

	lalg program.lalg

will translate program.lalg into program.obj and then run program.obj,
or else try to explain why not.

	lalg -b program.obj

will run bytecode that was translated earlier.

	lalg -h

will explain all the arguments.
"""
import sys, argparse
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

BYTECODE_SUFFIX = ".obj"

parser = argparse.ArgumentParser(
	prog="lalg",
	description="Translator and stack machine for the lalg teaching language.",
)
parser.add_argument("program", help="try examples/count.lalg for example.")
parser.add_argument('-o', "--output", help="Where to write the bytecode. (Default: next to the program, with suffix %s)" % BYTECODE_SUFFIX)
parser.add_argument('-c', "--check", action="store_true", help="Translate and write the bytecode, but do not run it.")
parser.add_argument('-t', "--translate", action="store_true", help="Print a listing of the bytecode instead of running it.")
parser.add_argument('-b', "--bytecode", action="store_true", help="The program is already bytecode; just run it.")
parser.add_argument('-v', "--verbose", action="count", default=0, help="Say more about what is going on. Twice traces every instruction.")

def run(args) -> int:
	from .diagnostics import Report, TooManyIssues
	report = Report(verbose=args.verbose)
	try:
		if args.bytecode:
			object_path = Path(args.program)
		else:
			object_path = _translate(args, report)
			if object_path is None or args.check:
				return _verdict(report)
		return _execute(object_path, report)
	except TooManyIssues:
		return _verdict(report)

def _translate(args, report):
	from .front_end import compile_file
	from .bytecode import dump, listing
	source_path = Path(args.program)
	program = compile_file(source_path, report)
	if program is None:
		return None
	if args.translate:
		print(listing(program))
		return None
	object_path = Path(args.output) if args.output else source_path.with_suffix(BYTECODE_SUFFIX)
	try: dump(program, object_path)
	except OSError as ex:
		report.broken_file(object_path, ex)
		return None
	report.info("Wrote", object_path)
	return object_path

def _execute(object_path:Path, report) -> int:
	from .bytecode import load, BadBytecode
	from .vm import VirtualMachine
	try: program = load(object_path)
	except FileNotFoundError: report.no_such_file(object_path)
	except (OSError, UnicodeDecodeError) as ex: report.broken_file(object_path, ex)
	except BadBytecode as ex: report.bad_bytecode(object_path, ex.line_nr, ex.text, ex.why)
	else:
		VirtualMachine(program, report).run()
	return _verdict(report)

def _verdict(report) -> int:
	if report.sick():
		report.complain_to_console()
		return 1
	return 0

def main():
	if len(sys.argv) > 1:
		sys.exit(run(parser.parse_args()))
	else:
		print(__doc__.strip().format(parser.format_usage()))
