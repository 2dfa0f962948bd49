"""
User profile and admin user management.
"""
