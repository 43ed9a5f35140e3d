"""Puzzle sub-machines.

Each puzzle owns its state exclusively while active, validates input synchronously and
reports its outcome as a value. Solving flips a one-way completion flag.
"""
