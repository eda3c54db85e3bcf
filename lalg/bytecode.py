"""
The instruction set, and the flat text format in which programs travel.

A program is a sequence of instructions; an instruction's position is its address.
On disk, each instruction takes one line: the mnemonic, then the operand if there is one.
Addresses and counts are written as integers and literals as floats,
using repr so that every float comes back exactly as it went out.
"""
from pathlib import Path
from typing import NamedTuple, Optional, Sequence, Union

OPERAND = Union[int, float]

# Mnemonic : takes an operand?
OPCODES = {
	"INPP": False,  # program start
	"PARA": False,  # halt
	"ALME": True,   # allocate one memory cell
	"CRCT": True,   # push a constant
	"CRVL": True,   # push a global
	"ARMZ": True,   # pop into a global
	"CREL": True,   # push a local
	"AMREL": True,  # pop into a local
	"SOMA": False, "SUBT": False, "MULT": False, "DIVI": False,
	"CMIG": False, "CMDG": False, "CMAI": False, "CPMI": False, "CMMA": False, "CMME": False,
	"IMPR": False,  # pop and print
	"LEIT": False,  # read and push
	"DSVI": True,   # jump
	"DSVF": True,   # pop; jump if zero
	"PUSHER": True, # push the return address
	"CHPR": True,   # call
	"ENPR": False,  # open an activation record
	"RTPR": False,  # close it and return
}

class BadBytecode(ValueError):
	def __init__(self, line_nr:int, text:str, why:str):
		super().__init__(line_nr, text, why)
		self.line_nr, self.text, self.why = line_nr, text, why
	def __str__(self): return "line %d: %s: %r" % (self.line_nr, self.why, self.text)

class Instruction(NamedTuple):
	mnemonic: str
	operand: Optional[OPERAND] = None

	def __str__(self):
		if self.operand is None: return self.mnemonic
		return self.mnemonic + " " + format_operand(self.operand)

def format_operand(x:OPERAND) -> str:
	if isinstance(x, int): return str(x)
	return repr(float(x))

def parse_operand(text:str) -> OPERAND:
	try: return int(text)
	except ValueError: return float(text)

def dumps(program:Sequence[Instruction]) -> str:
	return "".join(str(i) + "\n" for i in program)

def dump(program:Sequence[Instruction], path:Path):
	with open(path, "w", encoding="utf-8") as fh:
		fh.write(dumps(program))

def loads(text:str) -> list[Instruction]:
	"""
	Blank lines are skipped. Mnemonics are not checked here:
	an unknown one is a fault for the machine to discover if it gets that far.
	"""
	program = []
	for line_nr, line in enumerate(text.splitlines(), 1):
		parts = line.split()
		if not parts: continue
		if len(parts) > 2: raise BadBytecode(line_nr, line, "too many fields")
		if len(parts) == 1:
			program.append(Instruction(parts[0]))
		else:
			try: operand = parse_operand(parts[1])
			except ValueError: raise BadBytecode(line_nr, line, "operand is not a number") from None
			program.append(Instruction(parts[0], operand))
	return program

def load(path:Path) -> list[Instruction]:
	with open(path, "r", encoding="utf-8") as fh:
		return loads(fh.read())

def listing(program:Sequence[Instruction]) -> str:
	""" Human-oriented: addresses down the left margin. """
	return "\n".join("%04d  %s" % (address, i) for address, i in enumerate(program))
