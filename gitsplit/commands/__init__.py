"""
Command modules for the gitsplit CLI.
"""
