"""
Configuration file for the SQL parser.
Contains the tunable limits applied while lexing and parsing.
"""

# ============================================================================
# Input Limits
# ============================================================================

# Maximum SQL text length accepted by the parse entry points
MAX_SQL_LENGTH = 1048576  # 1MB

# Maximum nesting of parentheses, NOT and unary signs in one expression
MAX_EXPR_DEPTH = 64

# ============================================================================
# Column Type Limits
# ============================================================================

# Largest concrete length for STRING(n) columns (characters)
MAX_STRING_LENGTH = 2621440

# Largest concrete length for BYTES(n) columns (bytes)
MAX_BYTES_LENGTH = 10485760

# ============================================================================
# Error Reporting
# ============================================================================

# Parser error messages include line and column numbers
PARSER_DETAILED_ERRORS = True

# Number of characters of remaining input kept on errors as context
ERROR_CONTEXT_LENGTH = 32
