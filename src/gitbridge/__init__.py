"""
gitbridge - git process orchestration for host applications

gitbridge shells out to the git binary, turns its textual output into
structured state and keeps long-lived status caches in sync with the
on-disk repository.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
