"""
Command-line interface for campaign-sync.
"""
