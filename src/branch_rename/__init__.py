"""Branch Rename Tool

Renames the default branch of every repository selected by organization, user
or repository name: creates the new branch, retargets open pull requests,
flips the default branch, removes the old branch and rewrites content that
still refers to it.
"""

__version__ = '0.1.0'

from .cli.main import main

__all__ = ['main']
