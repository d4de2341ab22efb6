"""
LodgeTix command-line interface
"""
