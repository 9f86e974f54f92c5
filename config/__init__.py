"""
Configuration for Tubely video ingestion
"""
