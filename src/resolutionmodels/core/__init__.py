"""
Expression graph nodes: variables, constants, formulas, basis functions and
the generic density base class.
"""
