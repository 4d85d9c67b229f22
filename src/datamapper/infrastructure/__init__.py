"""
Infrastructure
SQLAlchemy record store and observability
"""
