"""
Name-spaces: plain layers that refuse duplicates, and chains of them
in which the top layer shadows whatever lies beneath.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar
from .ontology import Phrase, Symbol

T = TypeVar('T', bound=Symbol)

class AlreadyExists(KeyError): pass

class Space(ABC, Generic[T]):
	@abstractmethod
	def __contains__(self, key: str) -> bool: pass

	@abstractmethod
	def symbol(self, key: str) -> Optional[T]: pass

	def define(self, symbol: T) -> T:
		return self.mount(symbol.nom.key(), symbol.nom, symbol)

	@abstractmethod
	def mount(self, key:str, phrase:Phrase, symbol:T) -> T: pass

	def atop(self, other: "Space[T]") -> "Chain[T]":
		return Chain(self, other)


class Layer(Space[T]):
	""" Lightly enhanced dictionary: It does not like duplicate keys. """
	_locate: dict[str, Phrase]
	_symbol: dict[str, T]

	def __init__(self):
		self._locate, self._symbol = {}, {}

	def __contains__(self, key: str) -> bool:
		return key in self._symbol

	def symbol(self, key: str) -> Optional[T]:
		return self._symbol.get(key)

	def mount(self, key:str, phrase:Phrase, symbol:T) -> T:
		if key in self._locate:
			raise AlreadyExists(key)
		else:
			self._locate[key] = phrase
			self._symbol[key] = symbol
			return symbol


class Chain(Space[T]):
	def __init__(self, top:Space[T], rest:Space[T]):
		self.top = top
		self._rest = rest

	def __contains__(self, key: str) -> bool:
		return key in self.top or key in self._rest

	def symbol(self, key: str) -> Optional[T]:
		return self.top.symbol(key) or self._rest.symbol(key)

	def mount(self, key:str, phrase:Phrase, symbol:T) -> T:
		return self.top.mount(key, phrase, symbol)
