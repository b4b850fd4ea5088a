"""
Public endpoints (health, metrics)
"""
