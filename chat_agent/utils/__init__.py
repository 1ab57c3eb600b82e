"""
Shared utilities - logging, errors, metrics and RAG helpers
"""
