"""
Pipeline module

Provides the export/restore steps and the orchestrator that runs them.
"""

from .base import PipelineComponent
from .units import TableExportUnit
from .pipeline import Pipeline, filter_ignored_tables, save_results, DEFAULT_IGNORED_TABLES
