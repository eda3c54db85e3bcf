"""
The code generator is an append-only log of instructions which also permits backpatching:
a jump emitted before its destination is known gets its operand rewritten later.
"""
from .bytecode import OPCODES, OPERAND, Instruction, dumps

class BadPatch(IndexError):
	pass

class CodeGenerator:
	instructions: list[Instruction]

	def __init__(self):
		self.instructions = []

	def emit(self, mnemonic:str, operand:OPERAND=None) -> int:
		""" Append an instruction and return its address. """
		assert mnemonic in OPCODES, mnemonic
		assert OPCODES[mnemonic] == (operand is not None), (mnemonic, operand)
		self.instructions.append(Instruction(mnemonic, operand))
		return len(self.instructions) - 1

	def current_address(self) -> int:
		""" The address the next emitted instruction will get. """
		return len(self.instructions)

	def patch(self, address:int, operand:OPERAND):
		if not 0 <= address < len(self.instructions):
			raise BadPatch("No instruction at address %d" % address)
		old = self.instructions[address]
		if old.operand is None:
			raise BadPatch("%s at address %d takes no operand" % (old.mnemonic, address))
		self.instructions[address] = old._replace(operand=operand)

	def program(self) -> list[Instruction]:
		return list(self.instructions)

	def __str__(self): return dumps(self.instructions)
