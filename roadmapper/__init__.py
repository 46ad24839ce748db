"""
Roadmapper: product roadmap planning with goals, initiatives and deliverables.
"""

__version__ = "0.1.0"
