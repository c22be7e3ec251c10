"""
Property-based tests for the CHIP-8 core.

Hypothesis strategies live in ``strategies``; the test modules exercise
arithmetic flags, sprite composition and the call stack over the full
input domain.
"""
