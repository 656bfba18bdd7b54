"""Binding, row selection, special values, repeat expansion and mutation dispatch."""
