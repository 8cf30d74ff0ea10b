"""
Core of sqlexpr: the typed AST, the error hierarchy and the expression language.
"""
