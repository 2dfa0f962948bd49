"""
Accelerator directory CRUD.
"""
