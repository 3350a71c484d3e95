"""
Application services - authentication and product management.
"""
