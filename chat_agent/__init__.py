"""
Chat agent - tool-calling assistant with document Q&A and voice turns
"""

__version__ = "1.0.0"
