"""Community membership service.

Kept as a regular package so ``app`` always resolves to this project.
"""
