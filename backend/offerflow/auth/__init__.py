"""
Authentication - HS256 bearer tokens
"""
