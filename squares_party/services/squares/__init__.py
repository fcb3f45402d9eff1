"""Squares game engine: the grid, axis numbers, quarter winners and predictions.

Everything here works on one game at a time and reads or writes through
``db.session``; request parsing and socket pushes live in the callers.
"""
