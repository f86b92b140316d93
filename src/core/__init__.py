"""
core - Shared configuration for the bootcamp suite.
"""
