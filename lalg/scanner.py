"""
The tokenizer: a booze-tools miniscan definition which turns source text into Token objects.

Scanner actions only classify; each one hands the parser a kind and the slice of text it covers.
The `tokenize` generator then dresses each pair up with its lexeme and line number.

Indentation is a token in this language. One literal tab, or any run of two or more spaces,
counts as one `indent` token, no matter where on the line it appears.
"""
import sys
from bisect import bisect_right
from typing import Iterator, NamedTuple
from boozetools.scanning import miniscan
from boozetools.scanning.engine import IterableScanner

NAME = "name"
NUMBER = "number"
INDENT = "indent"
UNKNOWN = "unknown"
END = "<END>"

# A reserved word's token-kind is the word in upper case.
DEF, IF, ELSE, WHILE, PRINT, INPUT = "DEF", "IF", "ELSE", "WHILE", "PRINT", "INPUT"
RESERVED = frozenset(kind.lower() for kind in (DEF, IF, ELSE, WHILE, PRINT, INPUT))

class Token(NamedTuple):
	kind: str
	lexeme: str
	line: int
	slice: slice

	def __str__(self):
		if self.kind == END: return "the end of the program"
		if self.kind == INDENT: return "an indentation"
		return repr(self.lexeme)

_rules = miniscan.Definition()

# Single spaces and line breaks separate tokens but mean nothing by themselves.
# Miniscan ignores bare whitespace in a pattern, so spaces are escaped.
_rules.ignore(r'[\ \r\n]')

# Triple-quoted comments. The body may not contain three quotes in a row.
_rules.ignore(r'["]["]["]([^"]|["][^"]|["]["][^"])*(["]|["]["])?["]["]["]')

@_rules.on(r'\t|\ \ +')
def scan_indent(yy: IterableScanner): yy.token(INDENT, yy.slice())

@_rules.on(r'[0-9]+([.][0-9]*)?')
def scan_number(yy: IterableScanner): yy.token(NUMBER, yy.slice())

@_rules.on(r'[A-Za-z_][A-Za-z0-9_]*')
def scan_word(yy: IterableScanner):
	word = yy.match()
	if word in RESERVED: yy.token(word.upper(), yy.slice())
	else: yy.token(NAME, yy.slice())

@_rules.on(r'[=][=]|[!][=]|[<][=]|[>][=]|[+*/():,=<>\-]')
def scan_punctuation(yy: IterableScanner):
	punctuation = sys.intern(yy.match())
	yy.token(punctuation, yy.slice())

@_rules.on(r'[^A-Za-z0-9_\ \t\r\n+*/():,=<>\-]')
def scan_unknown(yy: IterableScanner): yy.token(UNKNOWN, yy.slice())


def line_breaks(text:str) -> list[int]:
	""" Offsets of every line-feed in the text, for turning offsets into line numbers. """
	return [i for i, c in enumerate(text) if c == "\n"]

def tokenize(text:str) -> Iterator[Token]:
	breaks = line_breaks(text)
	for kind, span in _rules.scan(text):
		yield Token(kind, text[span], bisect_right(breaks, span.start) + 1, span)
	yield Token(END, "", len(breaks) + 1, slice(len(text), len(text)))
