"""
Utility helpers shared by the generation stages.
"""
