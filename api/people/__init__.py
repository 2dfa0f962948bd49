"""
People directory CRUD with contact details.
"""
