"""
API views, one module per school domain.
"""
