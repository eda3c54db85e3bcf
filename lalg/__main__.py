"""
Lets you say:

	python -m lalg program.lalg

which does the same as the `lalg` command.
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lalg.cmdline import main

main()
