"""
ocap-pull: pull projects/ocap and scripts/release from open-world-agents.
"""
__version__ = "0.1.0"
