"""Upper bounds for client-supplied numbers.

Money columns are 64-bit; these caps keep any order total well inside that
range (MAX_AMOUNT * MAX_QTY per line) and ids inside a 32-bit key.
"""
MAX_AMOUNT = 10 ** 12
MAX_QTY = 10_000
MAX_ID = 2 ** 31 - 1
