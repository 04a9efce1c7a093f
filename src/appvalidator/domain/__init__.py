"""Domain layer: value kinds, field access and threshold literal parsing.

Pure logic with no I/O.
"""
