"""
Converters rendering reports for humans and machines.
"""
