"""Core isomiR processing modules."""
