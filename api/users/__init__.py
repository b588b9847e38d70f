"""
Admin user management.
"""
