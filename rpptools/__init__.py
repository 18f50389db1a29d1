"""RPP language toolkit: lexer, constant evaluator, config readers, peephole optimizer, register VM and runtime helpers."""

__version__ = "0.1.0"