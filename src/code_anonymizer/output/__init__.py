"""
Output modules for the Code Anonymizer.

This package contains output handling:
- formatter: Re-indentation and whitespace cleanup
- writer: Output file writer
- validator: Output validation
- report: Rename report generator
"""
