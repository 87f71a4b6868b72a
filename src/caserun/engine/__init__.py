"""
Execution engine: identifiers, descriptors, discovery and execution nodes.
"""
