"""
Intelligence Analyzers

Comparative market analysis and investment arithmetic used by the agent tools.
"""

from .comparable_sales_analyzer import ComparableSalesAnalyzer
from .investment_calculator import calculate_investment_metrics

__all__ = [
    'ComparableSalesAnalyzer',
    'calculate_investment_metrics',
]
