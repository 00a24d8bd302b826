"""
Web layer for the CMA adjustment service.
"""
