"""
Production Python kernels.
"""
