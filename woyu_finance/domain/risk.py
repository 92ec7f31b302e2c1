"""Interest-rate based risk grading for loans and investments"""

from decimal import Decimal

from woyu_finance.domain.models import RiskLevel

HIGH_RISK_RATE = Decimal("15")

# (minimum annual rate %, code, label), checked top-down
RISK_BANDS = (
    (Decimal("25"), "very_high", "極高風險"),
    (Decimal("20"), "high", "高風險"),
    (Decimal("15"), "medium_high", "中高風險"),
    (Decimal("10"), "medium", "中等風險"),
    (Decimal("5"), "low", "低風險"),
)


def risk_level(annual_rate_percent) -> RiskLevel:
    rate = Decimal(annual_rate_percent or 0)
    for threshold, code, label in RISK_BANDS:
        if rate >= threshold:
            return RiskLevel(code=code, label=label)
    return RiskLevel(code="very_low", label="極低風險")


def is_high_risk(annual_rate_percent) -> bool:
    return Decimal(annual_rate_percent or 0) >= HIGH_RISK_RATE
