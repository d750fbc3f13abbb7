"""pjtboard: project dashboard backend (cost-ratio status rules and Gantt timeline layout)."""

__version__ = "0.1.0"
