"""
A syntax-directed translator: recursive descent with one token of lookahead.

There is no tree. Each production validates its bit of syntax and, in the same breath,
asks the symbol table for addresses and the code generator for instructions.
Forward jumps go out with a placeholder operand and get backpatched
as soon as the parser has emitted whatever they need to jump over.

The first problem stops the translation. There is no attempt at recovery.
"""
from enum import Enum
from typing import Iterable, Iterator
from boozetools.parsing.interface import ParseError, SemanticError

from .scanner import Token, NAME, NUMBER, INDENT, END, DEF, IF, ELSE, WHILE, PRINT, INPUT
from .ontology import Nom, Scope
from .space import AlreadyExists
from .symbol_table import SymbolTable
from .codegen import CodeGenerator
from .bytecode import Instruction

class Context(Enum):
	""" Where a statement sequence lives, which decides how it may continue. """
	TOP_LEVEL = "top level"
	INSIDE_BLOCK = "inside a block"

STATEMENT_STARTERS = frozenset([PRINT, IF, WHILE, NAME])

RELATIONAL = {
	"==": "CMIG",
	"!=": "CMDG",
	">=": "CMAI",
	"<=": "CPMI",
	">": "CMMA",
	"<": "CMME",
}
ADDITIVE = {"+": "SOMA", "-": "SUBT"}
MULTIPLICATIVE = {"*": "MULT", "/": "DIVI"}

def describe(kind:str) -> str:
	if kind == NAME: return "a name"
	if kind == NUMBER: return "a number"
	if kind == INDENT: return "an indented block"
	if kind == END: return "the end of the program"
	if kind.isupper(): return "'%s'" % kind.lower()
	return "'%s'" % kind

class BadSyntax(ParseError):
	def __init__(self, token:Token, expected:str):
		super().__init__(token, expected)
		self.token, self.expected = token, expected
	def __str__(self):
		return "line %d: expected %s but found %s" % (self.token.line, self.expected, self.token)

class Undeclared(SemanticError):
	def __init__(self, what:str, token:Token):
		super().__init__(what, token)
		self.what, self.token = what, token
	def __str__(self):
		return "line %d: undeclared %s %r" % (self.token.line, self.what, self.token.lexeme)

class Redefined(SemanticError):
	def __init__(self, token:Token):
		super().__init__(token)
		self.token = token
	def __str__(self):
		return "line %d: function %r is defined twice" % (self.token.line, self.token.lexeme)


class Translator:
	token: Token
	_tokens: Iterator[Token]

	def __init__(self, tokens:Iterable[Token], symbols:SymbolTable=None, code:CodeGenerator=None):
		self._tokens = iter(tokens)
		self.symbols = SymbolTable() if symbols is None else symbols
		self.code = CodeGenerator() if code is None else code
		self.token = next(self._tokens)

	# Token-handling

	def _at(self, *kinds:str) -> bool:
		return self.token.kind in kinds

	def _advance(self):
		if self.token.kind != END:
			self.token = next(self._tokens)

	def _eat(self, kind:str, expected:str=None) -> Token:
		token = self.token
		if token.kind != kind:
			raise BadSyntax(token, expected or describe(kind))
		self._advance()
		return token

	# Overall structure

	def program(self) -> list[Instruction]:
		self.code.emit("INPP")
		self._declarations()
		self._statements(Context.TOP_LEVEL)
		self._eat(END, "a statement or the end of the program")
		self.code.emit("PARA")
		return self.code.program()

	def _declarations(self):
		# A name that already denotes a function begins a call, and hence the statements.
		while True:
			if self._at(DEF):
				self._function_declaration()
			elif self._at(NAME) and self.symbols.function_address(self.token.lexeme) is None:
				self._variable_declaration()
			else:
				return

	def _variable_declaration(self):
		nom = Nom.of(self._eat(NAME))
		if self._at("("):
			raise Undeclared("function", nom.token())
		self.symbols.add_variable(nom)
		self.code.emit("ALME", 1)
		self._eat("=")
		self._expression()
		self._store(nom.text)

	def _function_declaration(self):
		self._eat(DEF)
		nom = Nom.of(self._eat(NAME))
		guard = self.code.emit("DSVI", 0)
		try: self.symbols.register_function(nom, self.code.current_address())
		except AlreadyExists: raise Redefined(nom.token()) from None
		self.symbols.enter_function_scope()
		self.code.emit("ENPR")
		self._eat("(")
		parameters = self._parameters()
		self._eat(")")
		self._eat(":")
		# Arguments arrive pushed left-to-right, so the last parameter is on top.
		for address in reversed(parameters):
			self.code.emit("AMREL", address)
		self._block()
		self.symbols.exit_function_scope()
		self.code.emit("RTPR")
		self.code.patch(guard, self.code.current_address())

	def _parameters(self) -> list[int]:
		addresses = []
		if self._at(NAME):
			addresses.append(self.symbols.add_variable(Nom.of(self._eat(NAME))))
			while self._at(","):
				self._advance()
				addresses.append(self.symbols.add_variable(Nom.of(self._eat(NAME))))
		return addresses

	# Blocks and statement sequences

	def _block(self):
		self._eat(INDENT)
		self._statements(Context.INSIDE_BLOCK)

	def _statements(self, context:Context):
		# Stray indentation here comes from blank or comment-only lines.
		while self._at(INDENT):
			self._advance()
			if self._at(END, ELSE): return
		if not self._at(*STATEMENT_STARTERS): return
		self._statement()
		while self._continues(context):
			self._statement()

	def _continues(self, context:Context) -> bool:
		"""
		Decide whether another statement follows in the same sequence,
		consuming whatever indentation stands in front of it.
		Within a block, each further statement needs its own indentation;
		anything else is a dedent and ends the block.
		At the top level, statements simply follow one another.
		"""
		while True:
			if self._at(END, ELSE): return False
			if context is Context.INSIDE_BLOCK:
				if not self._at(INDENT): return False
				self._advance()
				if self._at(END, ELSE): return False
				if self._at(*STATEMENT_STARTERS): return True
				if not self._at(INDENT): return False
			else:
				if self._at(*STATEMENT_STARTERS): return True
				if not self._at(INDENT): return False
				self._advance()
				if self._at(*STATEMENT_STARTERS): return True

	# Statements

	def _statement(self):
		if self._at(PRINT):
			self._advance()
			self._eat("(")
			self._expression()
			self._eat(")")
			self.code.emit("IMPR")
		elif self._at(IF):
			self._if_statement()
		elif self._at(WHILE):
			self._while_statement()
		else:
			nom = Nom.of(self._eat(NAME, "a statement"))
			self._rest_of_name(nom)

	def _rest_of_name(self, nom:Nom):
		if self._at("="):
			self._advance()
			# Assigning to a name not yet in this scope declares it here.
			# Inside a function, that makes a local which shadows any global.
			if not self.symbols.exists_in_current_scope(nom.text):
				self.symbols.add_variable(nom)
				self.code.emit("ALME", 1)
			self._expression()
			self._store(nom.text)
		elif self._at("("):
			entry = self.symbols.function_address(nom.text)
			if entry is None:
				raise Undeclared("function", nom.token())
			return_address = self.code.emit("PUSHER", 0)
			self._advance()
			self._arguments()
			self._eat(")")
			self.code.emit("CHPR", entry)
			self.code.patch(return_address, self.code.current_address())
		else:
			raise BadSyntax(self.token, "'=' or '('")

	def _arguments(self):
		if self._at(")"): return
		self._expression()
		while self._at(","):
			self._advance()
			self._expression()

	def _if_statement(self):
		self._eat(IF)
		self._condition()
		self._eat(":")
		skip_then = self.code.emit("DSVF", 0)
		self._block()
		if self._at(ELSE):
			skip_else = self.code.emit("DSVI", 0)
			self.code.patch(skip_then, self.code.current_address())
			self._advance()
			self._eat(":")
			self._block()
			self.code.patch(skip_else, self.code.current_address())
		else:
			self.code.patch(skip_then, self.code.current_address())

	def _while_statement(self):
		self._eat(WHILE)
		top = self.code.current_address()
		self._condition()
		self._eat(":")
		exit_jump = self.code.emit("DSVF", 0)
		self._block()
		self.code.emit("DSVI", top)
		self.code.patch(exit_jump, self.code.current_address())

	# Expressions: each one leaves exactly one more value on the stack.

	def _condition(self):
		self._expression()
		op = self.token
		if op.kind not in RELATIONAL:
			raise BadSyntax(op, "a comparison operator")
		self._advance()
		self._expression()
		self.code.emit(RELATIONAL[op.kind])

	def _expression(self):
		if self._at(INPUT):
			self._advance()
			self._eat("(")
			self._eat(")")
			self.code.emit("LEIT")
			return
		self._term()
		while self.token.kind in ADDITIVE:
			op = self.token.kind
			self._advance()
			self._term()
			self.code.emit(ADDITIVE[op])

	def _term(self):
		self._factor()
		while self.token.kind in MULTIPLICATIVE:
			op = self.token.kind
			self._advance()
			self._factor()
			self.code.emit(MULTIPLICATIVE[op])

	def _factor(self):
		if self._at(NAME):
			self._load(Nom.of(self._eat(NAME)))
		elif self._at(NUMBER):
			self.code.emit("CRCT", float(self._eat(NUMBER).lexeme))
		elif self._at("("):
			self._advance()
			self._expression()
			self._eat(")")
		else:
			raise BadSyntax(self.token, "a name, a number, or '('")

	# Variable access

	def _load(self, nom:Nom):
		variable = self.symbols.variable_info(nom.text)
		if variable is None:
			raise Undeclared("variable", nom.token())
		self.code.emit("CREL" if variable.scope is Scope.LOCAL else "CRVL", variable.address)

	def _store(self, name:str):
		variable = self.symbols.variable_info(name)
		self.code.emit("AMREL" if variable.scope is Scope.LOCAL else "ARMZ", variable.address)


def translate(tokens:Iterable[Token]) -> list[Instruction]:
	return Translator(tokens).program()
