"""
Feedback Digest - turns recent product feedback into a daily AI digest
"""

__version__ = '0.1.0'
