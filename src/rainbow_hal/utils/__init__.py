"""
Utility functions for the Rainbow HAT driver layer
"""
