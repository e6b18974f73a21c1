"""
Builders assembling stage and layer reports from parsed instructions.
"""
