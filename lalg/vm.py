"""
The stack machine which runs translated programs.

State is an operand stack of floats, a flat data memory that grows on demand,
an instruction pointer, a frame pointer, and a stack of saved frame pointers.
Globals live at absolute addresses from zero. Each function call opens an
activation record at the current end of memory; returning cuts memory back
to where that record began.

Each instruction is a function `_op_<mnemonic>(vm, operand)` which answers
the next instruction pointer if it jumps, or None to fall through.
Any fault halts the machine with a report; nothing resumes after a fault.
"""
import math
import operator
import sys
from collections import deque
from typing import Sequence, TextIO

from .bytecode import OPCODES, OPERAND, Instruction
from .diagnostics import Report

class MachineFault(Exception):
	pass

# Everything which can go wrong in one instruction, short of a bug in the machine itself.
FAULTS = (MachineFault, ArithmeticError, ValueError, EOFError)

# Data memory never grows past this many cells.
MEMORY_LIMIT = 1 << 20

def _divide(a:float, b:float) -> float:
	""" IEEE-754 rules, which Python's float division does not follow for zero divisors. """
	try: return a / b
	except ZeroDivisionError:
		if a == 0 or math.isnan(a): return math.nan
		return math.copysign(math.inf, a) * math.copysign(1.0, b)

ARITHMETIC = {
	"SOMA": operator.add,
	"SUBT": operator.sub,
	"MULT": operator.mul,
	"DIVI": _divide,
}
COMPARISON = {
	"CMIG": operator.eq,
	"CMDG": operator.ne,
	"CMAI": operator.ge,
	"CPMI": operator.le,
	"CMMA": operator.gt,
	"CMME": operator.lt,
}

def format_number(x:float) -> str:
	if x.is_integer() and abs(x) < 1e16: return str(int(x))
	return repr(x)

def _address(operand:OPERAND) -> int:
	address = int(operand)
	if address != operand: raise MachineFault("%r is not an address" % operand)
	return address


class VirtualMachine:
	program: list[Instruction]
	stack: list[float]
	memory: list[float]
	call_stack: list[int]

	def __init__(self, program:Sequence[Instruction], report:Report, *, stdin:TextIO=None, stdout:TextIO=None):
		self.program = list(program)
		self.report = report
		self._stdin, self._stdout = stdin, stdout
		self._words = deque()
		self.stack = []
		self.memory = []
		self.call_stack = []
		self.ip = 0
		self.frame_pointer = 0
		self.running = False

	def run(self) -> bool:
		""" Answer True if the program ran to completion, False if it faulted. """
		self.report.info("--- Loaded %d instructions ---" % len(self.program))
		self.ip = 0
		self.running = True
		completed = True
		while self.running and 0 <= self.ip < len(self.program):
			try: self.step()
			except FAULTS as ex:
				self.report.runtime_fault(self.ip, self.program[self.ip], ex)
				self.running = False
				completed = False
		self.running = False
		self.report.info("--- Execution finished ---")
		return completed

	def step(self):
		if not 0 <= self.ip < len(self.program):
			raise MachineFault("no instruction at address %d" % self.ip)
		mnemonic, operand = self.program[self.ip]
		try: needs_operand, operation = OPCODES[mnemonic], OPERATION[mnemonic]
		except KeyError: raise MachineFault("unknown instruction %r" % mnemonic) from None
		if needs_operand and operand is None:
			raise MachineFault("%s needs an operand" % mnemonic)
		if self.report.verbose >= 2:
			self.report.info("%04d  %-12s fp=%d stack=%r" % (self.ip, self.program[self.ip], self.frame_pointer, self.stack), level=2)
		target = operation(self, operand)
		self.ip = self.ip + 1 if target is None else target

	# Operand stack

	def push(self, value:float):
		self.stack.append(value)

	def pop(self) -> float:
		if not self.stack:
			raise MachineFault("operand stack underflow")
		return self.stack.pop()

	# Data memory

	def ensure_capacity(self, index:int):
		""" Make sure memory[index] exists, zero-filling any gap. """
		if index >= MEMORY_LIMIT:
			raise MachineFault("address %d is beyond the %d cells of memory" % (index, MEMORY_LIMIT))
		shortfall = index + 1 - len(self.memory)
		if shortfall > 0:
			self.memory.extend([0.0] * shortfall)

	def fetch(self, address:int) -> float:
		if not 0 <= address < len(self.memory):
			raise MachineFault("no memory cell at address %d" % address)
		return self.memory[address]

	def store(self, address:int, value:float):
		if address < 0:
			raise MachineFault("no memory cell at address %d" % address)
		self.ensure_capacity(address)
		self.memory[address] = value

	# Console

	def write(self, text:str):
		print(text, file=self._stdout or sys.stdout)

	def read_number(self) -> float:
		""" Numbers come one whitespace-separated word at a time, however the lines fall. """
		while not self._words:
			line = (self._stdin or sys.stdin).readline()
			if not line:
				raise EOFError("ran out of input")
			self._words.extend(line.split())
		return float(self._words.popleft())


def _op_inpp(vm:VirtualMachine, operand): pass

def _op_para(vm:VirtualMachine, operand):
	vm.running = False

def _op_alme(vm:VirtualMachine, operand):
	# The operand says how many cells, but the translator only ever asks for one.
	vm.ensure_capacity(len(vm.memory))

def _op_crct(vm:VirtualMachine, operand):
	vm.push(float(operand))

def _op_crvl(vm:VirtualMachine, operand):
	vm.push(vm.fetch(_address(operand)))

def _op_armz(vm:VirtualMachine, operand):
	vm.store(_address(operand), vm.pop())

def _op_crel(vm:VirtualMachine, operand):
	vm.push(vm.fetch(vm.frame_pointer + _address(operand)))

def _op_amrel(vm:VirtualMachine, operand):
	vm.store(vm.frame_pointer + _address(operand), vm.pop())

def _op_impr(vm:VirtualMachine, operand):
	vm.write(format_number(vm.pop()))

def _op_leit(vm:VirtualMachine, operand):
	vm.push(vm.read_number())

def _op_dsvi(vm:VirtualMachine, operand):
	return _address(operand)

def _op_dsvf(vm:VirtualMachine, operand):
	if vm.pop() == 0:
		return _address(operand)

def _op_pusher(vm:VirtualMachine, operand):
	vm.push(float(operand))

def _op_chpr(vm:VirtualMachine, operand):
	return _address(operand)

def _op_enpr(vm:VirtualMachine, operand):
	vm.call_stack.append(vm.frame_pointer)
	vm.frame_pointer = len(vm.memory)

def _op_rtpr(vm:VirtualMachine, operand):
	if not vm.call_stack:
		raise MachineFault("return without a call")
	del vm.memory[vm.frame_pointer:]
	vm.frame_pointer = vm.call_stack.pop()
	return _address(vm.pop())


def _binary(fn):
	def operation(vm:VirtualMachine, operand):
		b = vm.pop()
		a = vm.pop()
		vm.push(fn(a, b))
	return operation

def _relation(fn):
	return _binary(lambda a, b: 1.0 if fn(a, b) else 0.0)

OPERATION = {}

def attach_operations(python_scope):
	for _k, _v in list(python_scope.items()):
		if _k.startswith("_op_"):
			OPERATION[_k[4:].upper()] = _v
	for _k, _v in ARITHMETIC.items(): OPERATION[_k] = _binary(_v)
	for _k, _v in COMPARISON.items(): OPERATION[_k] = _relation(_v)

attach_operations(globals())
assert OPERATION.keys() == OPCODES.keys(), OPERATION.keys() ^ OPCODES.keys()
