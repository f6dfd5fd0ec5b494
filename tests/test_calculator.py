from proplens.intelligence.analyzers import calculate_investment_metrics
from proplens.intelligence.analyzers.investment_calculator import monthly_mortgage_payment


def test_mortgage_payment():
    result = calculate_investment_metrics(400000, 80000, 6, 30, calculation_type="mortgage")

    assert result['monthly_payment'] == "1918.56"
    assert result['total_loan_amount'] == "320000.00"


def test_zero_rate_spreads_principal():
    assert monthly_mortgage_payment(120000, 0, 10) == 1000


def test_cap_rate():
    result = calculate_investment_metrics(
        400000, 80000, 6, 30, calculation_type="caprate", monthly_rent=3000, monthly_expenses=1000
    )

    assert result == {'cap_rate': "6.00", 'net_operating_income': "24000.00"}


def test_cash_on_cash_without_down_payment_is_not_available():
    result = calculate_investment_metrics(300000, 0, 5, 30, calculation_type="roi", monthly_rent=2500)

    assert result['cash_on_cash_roi'] == "N/A"


def test_all_uses_default_appreciation():
    result = calculate_investment_metrics(400000, 80000, 6, 30)

    assert set(result) == {'mortgage', 'investment', 'appreciation'}
    assert result['appreciation']['five_year_value'] == "463709.63"
    assert result['appreciation']['five_year_gain_percentage'] == "15.93"


def test_cashflow_subtracts_mortgage():
    result = calculate_investment_metrics(
        200000, 200000, 6, 30, calculation_type="cashflow", monthly_rent=1500, monthly_expenses=500
    )

    assert result == {'monthly_cash_flow': "1000.00", 'annual_cash_flow': "12000.00"}
