"""
Company directory CRUD with contact sources.
"""
