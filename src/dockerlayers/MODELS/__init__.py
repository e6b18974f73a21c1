"""
Data models for parsed Dockerfiles and layer reports.
"""
