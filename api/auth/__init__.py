"""
Authentication (session tokens, password flows) and authorization (roles).
"""
