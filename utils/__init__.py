"""
SaiyanBot utility helpers and logging setup
"""
