"""
Execution nodes and failure aggregation.
"""
