"""
Configuration constants to replace magic numbers throughout GOS
"""

# Source naming
DEFAULT_SOURCE_NAME = "<input>"
STDIN_PATH = "-"

# File encoding constants
DEFAULT_FILE_ENCODING = "utf-8"

# Parser limits
MAX_NESTING_DEPTH = 64       # Deepest CST nesting accepted before NestingTooDeep
MAX_COLLECTED_ERRORS = 100   # Collect-all mode stops parsing fragments after this many errors

# Integer literals are signed 64-bit
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1

# Reserved words of the grammar
KEYWORDS = frozenset({"var", "import", "from", "as", "graph", "op", "meta", "true", "false"})

# Names that always resolve without a definition
BUILTIN_NAMES = frozenset({"builtin"})

# Boolean literal spelling of true
BOOLEAN_TRUE_LITERAL = "true"

# String literal constants
TRIPLE_QUOTES = ('"""', "'''")
DEFAULT_QUOTE_CHAR = '"'

# Error reporting constants
COLOR_ENV_VAR = "GOS_COLOR"
ERROR_POINTER_CHAR = "^"

# Output formats understood by the command line
OUTPUT_FORMATS = ("json", "pretty")
JSON_INDENT = 2
