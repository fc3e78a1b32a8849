"""
Kernel layer.

`kernels/python/` holds the integer-only curve kernels. They take and return
plain ints (or small frozen result dataclasses), never log and never read
clocks or buffers; scaling, fees and vault accounting live in `core`.
"""
