"""Branch rename state machine, control loop and engine."""

from .engine import MigrationEngine
from .orchestrator import MigrationOrchestrator, MigrationSummary
from .strategy import (
    BranchRenameStrategy,
    MigrationOutcome,
    MigrationStatus,
    MigrationStep,
)

__all__ = [
    'BranchRenameStrategy',
    'MigrationEngine',
    'MigrationOrchestrator',
    'MigrationOutcome',
    'MigrationStatus',
    'MigrationStep',
    'MigrationSummary',
]
