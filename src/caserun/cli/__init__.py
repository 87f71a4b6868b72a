"""
Command line interface for caserun.
"""
