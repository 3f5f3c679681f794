import sys

from rich import print
from rich.pretty import pprint

from argtree import *

grammar = Grammar("demo", colorful=True)
grammar.positional("output_file", Kind.PATH)

# Echo sub-command
echo = grammar.sub_command("echo", "print the given strings")
echo.positional("inputs", DataType(Kind.STRING, array=True)).required(False)

# Cat sub-command
cat = grammar.sub_command("cat", "concatenate files")
cat.positional("input_files", DataType(Kind.PATH, array=True))
cat.option("-E, --show-ends", "show_ends", Kind.BOOL).description("display $ at end of each line")
cat.option("-n, --number", "number", Kind.BOOL).description("number all output lines")
cat.option("-T, --show-tabs", "show_tabs", Kind.BOOL).description("display TAB characters as ^I")


if __name__ == '__main__':
    pprint(grammar)
    result = grammar.parse(sys.argv[1:])
    pprint(result)
    try:
        result.raise_for_errors()
    except ResolutionExit as group:
        print(group)
