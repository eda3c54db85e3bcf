import sys
from pathlib import Path
from traceback import TracebackException
from typing import Any, Optional, Sequence
from boozetools.support.failureprone import SourceText, illustration

from .scanner import Token, UNKNOWN, END
from .bytecode import Instruction

class TooManyIssues(Exception):
	pass

class Report:
	""" Collects whatever went wrong, and says so on the console when asked. """
	_issues : list["Pic"]

	def __init__(self, *, verbose:int=0, max_issues=3):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues

	@property
	def verbose(self) -> int: return self._verbose

	@property
	def issues(self) -> Sequence["Pic"]: return tuple(self._issues)

	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)

	def issue(self, it:Any):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def reset(self):
		self._issues.clear()

	def info(self, *args, level=1):
		if self._verbose >= level:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(message)

	# Methods the front-end is likely to call:

	def syntax_error(self, source:SourceText, token:Token, expected:str):
		if token.kind == UNKNOWN:
			intro = "I don't recognize this character at line %d." % token.line
			problem = [Annotation(source, token, "here")]
			self.issue(Pic(intro, problem, ["(I was looking for %s.)" % expected]))
		elif token.kind == END:
			intro = "The program ended early, at line %d." % token.line
			self.issue(Pic(intro, [], ["(I was looking for %s.)" % expected]))
		else:
			intro = "Syntax error at line %d." % token.line
			caption = "expected %s" % expected
			self.issue(Pic(intro, [Annotation(source, token, caption)]))

	def undeclared(self, source:SourceText, what:str, token:Token):
		intro = "There is no %s called '%s' at line %d." % (what, token.lexeme, token.line)
		hint = {
			"variable": "Assign a value to a variable before using it.",
			"function": "Declare a function with 'def' before calling it.",
		}[what]
		self.issue(Pic(intro, [Annotation(source, token, "declared where?")], [hint]))

	def redefined(self, source:SourceText, token:Token):
		intro = "Function '%s' is defined more than once (again at line %d)." % (token.lexeme, token.line)
		self.issue(Pic(intro, [Annotation(source, token, "second definition")]))

	# Methods about files:

	def _file_error(self, path:Path, prefix:str, footer=()):
		self.issue(Pic(prefix+" "+str(path), [], footer))

	def no_such_file(self, path:Path):
		self._file_error(path, "I see no file called")

	def broken_file(self, path:Path, ex:Exception):
		self._file_error(path, "Something went pear-shaped while trying to read or write", [str(ex)])

	def bad_bytecode(self, path:Path, line_nr:int, text:str, why:str):
		intro = "This bytecode does not make sense (%s):" % why
		self.issue(Pic(intro, [], ["%s, line %d: %s" % (path, line_nr, text)]))

	# Methods the virtual machine calls:

	def runtime_fault(self, address:int, instruction:Optional[Instruction], ex:Exception):
		where = "past the end of the program" if instruction is None else str(instruction)
		intro = "The machine halted on a fault at address %d (%s):" % (address, where)
		footer = [type(ex).__name__ + ": " + str(ex)]
		if self._verbose:
			footer.extend(["", "Python traceback:", "".join(TracebackException.from_exception(ex).format()).rstrip()])
		self.issue(Pic(intro, [], footer))


class Annotation:
	source: SourceText
	slice: slice
	caption: str
	def __init__(self, source:SourceText, token:Token, caption:str=""):
		self.source = source
		self.slice = token.slice
		self.line = token.line
		self.caption = caption
	def illustrate(self):
		row, col = self.source.find_row_col(self.slice.start)
		single_line = self.source.line_of_text(row)
		width = max(self.slice.stop - self.slice.start, 1)
		return illustration(single_line, col, width, prefix='% 6d |' % self.line, caption=self.caption)

class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self.intro, self._anns, self._footer = intro, anns, footer
	def as_text(self):
		lines = [self.intro, ""]
		filename = None
		for ann in self._anns:
			if getattr(ann.source, "filename", None) != filename:
				filename = ann.source.filename
				if filename: lines.append(filename)
			lines.append(ann.illustrate())
		lines.extend(self._footer)
		return '\n'.join(lines)

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
