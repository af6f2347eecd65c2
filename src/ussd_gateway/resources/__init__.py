"""Packaged data files (default automaton definition)."""
