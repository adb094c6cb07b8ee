"""
Article ingestion and keyword statistics service.
"""
