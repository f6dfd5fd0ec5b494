"""
PropLens

Back-end core of a real estate investment dashboard: multi-provider AI
agents, a resilient real estate data aggregation layer and a JSON API.
"""

__version__ = "0.1.0"
