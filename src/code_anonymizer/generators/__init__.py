"""
Generator modules for the Code Anonymizer.

This package contains name generators:
- name_generator: Replacement name templates and collision skipping
"""
