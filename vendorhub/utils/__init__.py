"""
Request, serialization and dependency helpers.
"""
