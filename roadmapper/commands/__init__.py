"""
Click command groups for the roadmap CLI.
"""
