"""
Cookie-session authentication: email/password and Google OAuth.
"""
