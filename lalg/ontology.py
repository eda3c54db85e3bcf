"""
The most fundamental classes about names and the things they name.
These live apart from the translator so that the symbol table,
the name-spaces, and the diagnostics can all share them
without circular imports.
"""
from enum import Enum
from .scanner import Token

class Scope(Enum):
	GLOBAL = "global"
	LOCAL = "local"

class Phrase:
	def token(self) -> Token:
		""" Return the token where this phrase appears in the source text """
		raise NotImplementedError(type(self))

class Nom(Phrase):
	""" Representing the occurrence of a name anywhere. """
	def __init__(self, text:str, token:Token):
		assert isinstance(text, str)
		self.text, self._token = text, token
	def __repr__(self): return "<Name %r>" % self.text
	def key(self): return self.text
	def token(self): return self._token

	@staticmethod
	def of(token:Token) -> "Nom":
		return Nom(token.lexeme, token)

class Symbol(Phrase):
	"""
	Any named-and-defined thing that may be found in some name-space.
	Here, that means variables and functions.
	"""
	nom: Nom

	def __init__(self, nom:Nom): self.nom = nom
	def __repr__(self): return "{%s:%s}" % (self.nom.text, type(self).__name__)
	def token(self): return self.nom.token()

class Variable(Symbol):
	""" A memory cell: absolute if global, relative to the frame pointer if local. """
	def __init__(self, nom:Nom, address:int, scope:Scope):
		super().__init__(nom)
		self.address = address
		self.scope = scope
	def __repr__(self): return "{%s:%s@%d}" % (self.nom.text, self.scope.value, self.address)

class Function(Symbol):
	def __init__(self, nom:Nom, entry:int):
		super().__init__(nom)
		self.entry = entry
