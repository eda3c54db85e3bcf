import io
import unittest

from lalg.scanner import tokenize
from lalg.parser import translate, BadSyntax, Undeclared, Redefined
from lalg.bytecode import Instruction, listing
from lalg.vm import VirtualMachine
from lalg.diagnostics import Report

def compiled(text):
	return translate(tokenize(text))

def mnemonics(program):
	return [i.mnemonic for i in program]

def I(mnemonic, operand=None):
	return Instruction(mnemonic, operand)

def jump_targets(program):
	return [i.operand for i in program if i.mnemonic in ("DSVI", "DSVF", "CHPR", "PUSHER")]

class ListingTests(unittest.TestCase):
	""" Exact translations of small programs, backpatched jumps included. """

	def assertTranslation(self, expect, text):
		program = compiled(text)
		self.assertEqual(expect, program, "\n"+listing(program))

	def test_empty_program(self):
		self.assertTranslation([I("INPP"), I("PARA")], "")

	def test_declarations_then_print(self):
		self.assertTranslation([
			I("INPP"),
			I("ALME", 1), I("CRCT", 5.0), I("ARMZ", 0),
			I("ALME", 1), I("CRVL", 0), I("CRCT", 2.0), I("MULT"), I("ARMZ", 1),
			I("CRVL", 1), I("IMPR"),
			I("PARA"),
		], "a = 5\nb = a * 2\nprint(b)")

	def test_if_else(self):
		self.assertTranslation([
			I("INPP"),
			I("ALME", 1), I("CRCT", 5.0), I("ARMZ", 0),
			I("ALME", 1), I("CRCT", 10.0), I("ARMZ", 1),
			I("CRVL", 0), I("CRVL", 1), I("CMME"),
			I("DSVF", 14),
			I("CRVL", 0), I("IMPR"),
			I("DSVI", 16),
			I("CRVL", 1), I("IMPR"),
			I("PARA"),
		], "a = 5\nb = 10\nif a < b:\n    print(a)\nelse:\n    print(b)\n")

	def test_if_without_else(self):
		self.assertTranslation([
			I("INPP"),
			I("ALME", 1), I("CRCT", 1.0), I("ARMZ", 0),
			I("CRVL", 0), I("CRCT", 1.0), I("CMIG"),
			I("DSVF", 10),
			I("CRVL", 0), I("IMPR"),
			I("PARA"),
		], "x = 1\nif x == 1:\n\tprint(x)\n")

	def test_while(self):
		self.assertTranslation([
			I("INPP"),
			I("ALME", 1), I("CRCT", 0.0), I("ARMZ", 0),
			I("CRVL", 0), I("CRCT", 3.0), I("CMME"),
			I("DSVF", 15),
			I("CRVL", 0), I("IMPR"),
			I("CRVL", 0), I("CRCT", 1.0), I("SOMA"), I("ARMZ", 0),
			I("DSVI", 4),
			I("PARA"),
		], "i = 0\nwhile i < 3:\n    print(i)\n    i = i + 1\n")

	def test_function_with_parameters(self):
		self.assertTranslation([
			I("INPP"),
			I("DSVI", 10),
			I("ENPR"),
			I("AMREL", 1), I("AMREL", 0),
			I("CREL", 0), I("CREL", 1), I("SUBT"), I("IMPR"),
			I("RTPR"),
			I("PUSHER", 14), I("CRCT", 10.0), I("CRCT", 4.0), I("CHPR", 2),
			I("PARA"),
		], "def diff(p, q):\n    print(p - q)\ndiff(10, 4)\n")

	def test_local_assignment_shadows_global(self):
		self.assertTranslation([
			I("INPP"),
			I("ALME", 1), I("CRCT", 1.0), I("ARMZ", 0),
			I("DSVI", 10),
			I("ENPR"),
			I("ALME", 1), I("CRCT", 2.0), I("AMREL", 0),
			I("RTPR"),
			I("PUSHER", 12), I("CHPR", 5),
			I("CRVL", 0), I("IMPR"),
			I("PARA"),
		], "x = 1\ndef change():\n    x = 2\nchange()\nprint(x)\n")

	def test_function_reads_globals_it_does_not_assign(self):
		program = compiled("g = 7\ndef show():\n    print(g)\nshow()\n")
		self.assertIn(I("CRVL", 0), program)
		self.assertNotIn("CREL", mnemonics(program))


class PropertyTests(unittest.TestCase):

	def test_no_placeholder_survives(self):
		text = (
			"n = 3\n"
			"def f(a):\n"
			"    if a > 1:\n"
			"        print(a)\n"
			"    else:\n"
			"        print(0)\n"
			"while n > 0:\n"
			"    f(n)\n"
			"    n = n - 1\n"
		)
		program = compiled(text)
		for target in jump_targets(program):
			with self.subTest(target=target):
				self.assertIsInstance(target, int)
				self.assertTrue(0 < target <= len(program) - 1)
		self.assertEqual(("INPP", "PARA"), (program[0].mnemonic, program[-1].mnemonic))

	def test_precedence(self):
		program = compiled("print(1 + 2 * 3 - 4 / (5 - 6))")
		self.assertEqual(
			["INPP", "CRCT", "CRCT", "CRCT", "MULT", "SOMA", "CRCT", "CRCT", "CRCT", "SUBT", "DIVI", "SUBT", "IMPR", "PARA"],
			mnemonics(program),
		)

	def test_each_comparison(self):
		for glyph, mnemonic in [("==", "CMIG"), ("!=", "CMDG"), (">=", "CMAI"), ("<=", "CPMI"), (">", "CMMA"), ("<", "CMME")]:
			with self.subTest(glyph):
				program = compiled("x = 1\nif x %s 2:\n    print(x)\n" % glyph)
				self.assertEqual(mnemonic, mnemonics(program)[6])

	def test_expressions_leave_one_value(self):
		program = compiled("a = 2\nprint((a + 1) * (a - 1) / 3)\nif a * 2 >= a + 1:\n    print(a)\n")
		vm = VirtualMachine(program, Report(), stdout=io.StringIO())
		depth_before = {}
		while vm.program[vm.ip].mnemonic != "PARA":
			mnemonic = vm.program[vm.ip].mnemonic
			if mnemonic in ("IMPR", "DSVF", "ARMZ"):
				depth_before.setdefault(mnemonic, set()).add(len(vm.stack))
			vm.step()
		self.assertEqual({"IMPR": {1}, "DSVF": {1}, "ARMZ": {1}}, depth_before)
		self.assertEqual([], vm.stack)

	def test_input_is_an_expression(self):
		self.assertIn("LEIT", mnemonics(compiled("n = input()\nprint(n)")))

	def test_blank_indented_lines_in_a_block(self):
		program = compiled("i = 0\nwhile i < 2:\n    print(i)\n    \n    i = i + 1\nprint(9)\n")
		self.assertEqual(2, mnemonics(program).count("IMPR"))
		self.assertEqual("DSVI", program[-4].mnemonic)

	def test_dedent_ends_the_block(self):
		program = compiled("x = 0\nif x == 0:\n    print(1)\nprint(2)\n")
		dsvf = next(i for i in program if i.mnemonic == "DSVF")
		self.assertEqual(I("CRCT", 2.0), program[dsvf.operand])


class ErrorTests(unittest.TestCase):

	def test_syntax_errors(self):
		for text, line in [
			("a = ", 1),
			("a = 1\nif a:\n    print(a)\n", 2),
			("a = 1\nif a > 0\n    print(a)\n", 3),
			("print 1", 1),
			("a = 1\nwhile a > 0:\nprint(a)\n", 3),
			("def f(a,):\n    print(a)\n", 1),
			("a = 5 $", 1),
			("a = 1\na\n", 3),
			("print(1)\ndef f():\n    print(2)\n", 2),
			("else:\n    print(1)\n", 1),
		]:
			with self.subTest(text):
				with self.assertRaises(BadSyntax) as cm:
					compiled(text)
				self.assertEqual(line, cm.exception.token.line)

	def test_undeclared_variable(self):
		with self.assertRaises(Undeclared) as cm:
			compiled("print(y)")
		self.assertEqual(("variable", "y"), (cm.exception.what, cm.exception.token.lexeme))

	def test_locals_do_not_escape(self):
		with self.assertRaises(Undeclared):
			compiled("def f(p):\n    print(p)\nf(1)\nprint(p)\n")

	def test_undeclared_function(self):
		for text in ["foo()", "x = 1\nif x == 1:\n    foo(x)\n"]:
			with self.subTest(text):
				with self.assertRaises(Undeclared) as cm:
					compiled(text)
				self.assertEqual(("function", "foo"), (cm.exception.what, cm.exception.token.lexeme))

	def test_function_defined_twice(self):
		with self.assertRaises(Redefined) as cm:
			compiled("def f():\n    print(1)\ndef f():\n    print(2)\n")
		self.assertEqual(3, cm.exception.token.line)

	def test_messages_name_the_line(self):
		with self.assertRaises(BadSyntax) as cm:
			compiled("a = 1\nb = (a\n")
		self.assertTrue(str(cm.exception).startswith("line 3:"), str(cm.exception))


if __name__ == '__main__':
	unittest.main()
