"""
Addresses for variables and entry points for functions.

There are exactly two tiers of variables. Globals take absolute addresses from a counter
that runs for the whole compilation. Locals take frame-relative addresses from a counter
that starts again at zero in each function, along with a brand-new layer of local names.
Functions never nest, so there is never more than one local layer at a time.

Lookup goes through a chain of the local layer atop the global one,
which is how a local shadows a global of the same name.
"""
from typing import Optional
from .ontology import Nom, Scope, Variable, Function
from .space import Space, Layer

class SymbolTable:
	scope: Scope
	_visible: Space[Variable]

	def __init__(self):
		self.scope = Scope.GLOBAL
		self._globals = Layer()
		self._locals = None
		self._functions = Layer()
		self._visible = self._globals
		self._next_global = 0
		self._next_local = 0

	def _current_layer(self) -> Layer:
		return self._locals if self.scope is Scope.LOCAL else self._globals

	def add_variable(self, nom:Nom) -> int:
		"""
		Answer the address of this name in the current scope,
		allocating the next free one if the name is new there.
		"""
		layer = self._current_layer()
		existing = layer.symbol(nom.key())
		if existing is not None:
			return existing.address
		if self.scope is Scope.LOCAL:
			address, self._next_local = self._next_local, self._next_local + 1
		else:
			address, self._next_global = self._next_global, self._next_global + 1
		layer.define(Variable(nom, address, self.scope))
		return address

	def variable_info(self, name:str) -> Optional[Variable]:
		return self._visible.symbol(name)

	def exists_in_current_scope(self, name:str) -> bool:
		return name in self._current_layer()

	def register_function(self, nom:Nom, address:int):
		""" Raises space.AlreadyExists if the name already denotes a function. """
		self._functions.define(Function(nom, address))

	def function_address(self, name:str) -> Optional[int]:
		fn = self._functions.symbol(name)
		return None if fn is None else fn.entry

	def enter_function_scope(self):
		assert self.scope is Scope.GLOBAL, "Functions do not nest."
		self.scope = Scope.LOCAL
		self._locals = Layer()
		self._next_local = 0
		self._visible = self._locals.atop(self._globals)

	def exit_function_scope(self):
		assert self.scope is Scope.LOCAL
		self.scope = Scope.GLOBAL
		self._visible = self._globals

	def global_count(self) -> int:
		return self._next_global
