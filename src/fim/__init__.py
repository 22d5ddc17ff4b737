"""
File Index Manager - named, lazily rebuilt file indexes over a project directory.
"""

__version__ = "0.1.0"
