"""
Review resource (nested under bootcamps).
"""
