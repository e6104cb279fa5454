"""Pilot-versus-production configuration documenter for directory sync.

Diffs two configuration forests (connectors, attribute mappings, sync rules,
run profiles) and assembles a sectioned report model with a table of
contents for an external renderer.
"""

__version__ = "0.3.0"
