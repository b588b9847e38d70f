"""
Course resource (nested under bootcamps).
"""
