"""
Entry points for compilation: source text in, instructions (or a report) out.
"""
from pathlib import Path
from typing import Optional
from boozetools.support.failureprone import SourceText

from .scanner import tokenize
from .parser import Translator, BadSyntax, Undeclared, Redefined
from .bytecode import Instruction
from .diagnostics import Report

def compile_text(text:str, report:Report, path:Path=None) -> Optional[list[Instruction]]:
	""" Submit text to the translator; on the first problem, file a report and answer None. """
	source = SourceText(text, filename=None if path is None else str(path))
	try:
		translator = Translator(tokenize(text))
		program = translator.program()
	except BadSyntax as ex:
		report.syntax_error(source, ex.token, ex.expected)
	except Undeclared as ex:
		report.undeclared(source, ex.what, ex.token)
	except Redefined as ex:
		report.redefined(source, ex.token)
	else:
		report.info("Translated %s into %d instructions with %d global cells." % (path or "the program", len(program), translator.symbols.global_count()))
		return program

def compile_file(path:Path, report:Report) -> Optional[list[Instruction]]:
	try:
		with open(path, "r", encoding="utf-8") as fh:
			text = fh.read()
	except FileNotFoundError:
		report.no_such_file(path)
	except (OSError, UnicodeDecodeError) as ex:
		report.broken_file(path, ex)
	else:
		return compile_text(text, report, path)
