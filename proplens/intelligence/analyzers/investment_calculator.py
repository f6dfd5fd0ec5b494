"""
Investment Calculator

Mortgage, return, cash-flow and cap-rate arithmetic for a rental purchase.
Amounts are returned as strings with two decimals.
"""

from typing import Dict, Optional

DEFAULT_APPRECIATION_RATE = 3.0
APPRECIATION_YEARS = 5


def _fmt(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:.2f}"


def monthly_mortgage_payment(loan_amount: float, annual_rate_pct: float, term_years: int) -> float:
    """Fixed-rate amortized payment; a zero rate spreads principal evenly."""
    payments = term_years * 12
    monthly_rate = annual_rate_pct / 100 / 12
    if monthly_rate == 0:
        return loan_amount / payments
    growth = (1 + monthly_rate) ** payments
    return loan_amount * (monthly_rate * growth) / (growth - 1)


def calculate_investment_metrics(
    property_price: float,
    down_payment: float,
    interest_rate: float,
    loan_term: int,
    calculation_type: str = "all",
    monthly_rent: Optional[float] = None,
    monthly_expenses: Optional[float] = None,
    appreciation_rate: Optional[float] = None
) -> Dict:
    """
    Args:
        property_price: Purchase price
        down_payment: Cash down
        interest_rate: Annual rate in percent
        loan_term: Years
        calculation_type: mortgage | roi | cashflow | caprate | all
        monthly_rent: Expected rent (default 0)
        monthly_expenses: Expected expenses (default 0)
        appreciation_rate: Annual appreciation in percent (default 3)
    """
    loan_amount = property_price - down_payment
    payments = loan_term * 12
    monthly_payment = monthly_mortgage_payment(loan_amount, interest_rate, loan_term)
    total_interest = monthly_payment * payments - loan_amount

    annual_rent = (monthly_rent or 0) * 12
    annual_expenses = (monthly_expenses or 0) * 12
    annual_cash_flow = annual_rent - annual_expenses - monthly_payment * 12
    cash_on_cash = annual_cash_flow / down_payment * 100 if down_payment else None

    net_operating_income = annual_rent - annual_expenses
    cap_rate = net_operating_income / property_price * 100

    rate = DEFAULT_APPRECIATION_RATE if appreciation_rate is None else appreciation_rate
    future_value = property_price * (1 + rate / 100) ** APPRECIATION_YEARS
    appreciation_gain = future_value - property_price

    mortgage = {
        'monthly_payment': _fmt(monthly_payment),
        'total_loan_amount': _fmt(loan_amount),
        'total_interest_paid': _fmt(total_interest),
    }

    if calculation_type == "mortgage":
        return mortgage
    if calculation_type == "roi":
        return {
            'cash_on_cash_roi': _fmt(cash_on_cash),
            'annual_cash_flow': _fmt(annual_cash_flow),
            'five_year_appreciation_gain': _fmt(appreciation_gain),
        }
    if calculation_type == "cashflow":
        return {
            'monthly_cash_flow': _fmt(annual_cash_flow / 12),
            'annual_cash_flow': _fmt(annual_cash_flow),
        }
    if calculation_type == "caprate":
        return {
            'cap_rate': _fmt(cap_rate),
            'net_operating_income': _fmt(net_operating_income),
        }

    return {
        'mortgage': mortgage,
        'investment': {
            'cash_on_cash_roi': _fmt(cash_on_cash),
            'cap_rate': _fmt(cap_rate),
            'annual_cash_flow': _fmt(annual_cash_flow),
            'monthly_cash_flow': _fmt(annual_cash_flow / 12),
        },
        'appreciation': {
            'five_year_value': _fmt(future_value),
            'five_year_gain': _fmt(appreciation_gain),
            'five_year_gain_percentage': _fmt(appreciation_gain / property_price * 100),
        },
    }
