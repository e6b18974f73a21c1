"""
Parsers turning Dockerfile text into instructions.
"""
