"""Content rewriting for references to the old branch."""

from .rewriter import ContentRewriter
from .updaters import ContentUpdater, ReadmeLinkUpdater, WorkflowBranchFilterUpdater

__all__ = [
    'ContentRewriter',
    'ContentUpdater',
    'ReadmeLinkUpdater',
    'WorkflowBranchFilterUpdater',
]
