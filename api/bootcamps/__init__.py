"""
Bootcamp resource.
"""
