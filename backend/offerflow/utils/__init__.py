"""
Utilities - tracing, request logging, metrics
"""
