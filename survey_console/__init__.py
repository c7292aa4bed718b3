"""
Survey Console

Administrative web console for browsing and exporting survey reports.
"""

__version__ = "1.0.0"
