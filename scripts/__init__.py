# scripts/__init__.py
"""
Marks scripts as a package so the command line entry points can be installed
as console scripts. Avoid importing scripts from library code.
"""
