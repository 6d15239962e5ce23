"""
SaiyanBot command cogs
"""
