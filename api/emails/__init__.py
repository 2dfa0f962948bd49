"""
Outbound email sending and tracking.
"""
