"""
Infrastructure layer - persistence backends.
"""
