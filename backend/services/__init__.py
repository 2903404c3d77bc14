"""
Business logic for authentication and recordings
"""
