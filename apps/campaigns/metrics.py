"""
Derived campaign figures: unit costs, ROI and profit projections.

All inputs are plain numbers so the same helpers serve the campaign
snapshot, aggregated stats and ad-hoc projection requests.
"""

import math
from dataclasses import dataclass, asdict

from core.dates import parse_stored_date
from core.exceptions import ValidationError

DEFAULT_CONVERSION_RATE = 5.0
DEFAULT_PROJECTION_DAYS = 30


@dataclass
class CampaignMetrics:
    cost_per_lead: float
    cpa: float
    profit: float
    roi: float

    def to_dict(self):
        data = asdict(self)
        data['performance'] = performance_label(self.roi)
        return data


@dataclass
class ProfitProjection:
    required_cases: int
    required_leads: int
    total_revenue: float
    total_ad_spend: float
    daily_ad_spend: float
    days: int

    def to_dict(self):
        return asdict(self)


def calculate_metrics(leads, cases, revenue, ad_spend):
    leads, cases = int(leads or 0), int(cases or 0)
    revenue, ad_spend = float(revenue or 0), float(ad_spend or 0)
    return CampaignMetrics(
        cost_per_lead=ad_spend / leads if leads > 0 else 0.0,
        cpa=ad_spend / cases if cases > 0 else 0.0,
        profit=revenue - ad_spend,
        # 300 back on 100 spent is a 300% return
        roi=(revenue / ad_spend) * 100 if ad_spend > 0 else 0.0,
    )


def performance_label(roi):
    if roi > 200:
        return "Excellent"
    if roi > 100:
        return "Good"
    if roi > 0:
        return "Positive"
    return "Needs Improvement"


def campaign_defaults(campaign):
    """Projection inputs implied by a campaign's own history."""
    conversion_rate = DEFAULT_CONVERSION_RATE
    cost_per_lead = 0.0
    if campaign.leads > 0:
        if campaign.cases > 0:
            conversion_rate = campaign.cases / campaign.leads * 100
        cost_per_lead = float(campaign.ad_spend) / campaign.leads
    return {
        'case_value': float(campaign.case_payout_amount),
        'conversion_rate': conversion_rate,
        'cost_per_lead': cost_per_lead,
    }


def project_profit(target_profit, case_value, conversion_rate, cost_per_lead,
                   start_date=None, end_date=None):
    if conversion_rate is None or conversion_rate <= 0:
        raise ValidationError("conversionRate must be greater than 0")

    days = DEFAULT_PROJECTION_DAYS
    if start_date and end_date:
        days = (parse_stored_date(end_date) - parse_stored_date(start_date)).days + 1
        if days <= 0:
            raise ValidationError("endDate must not be before startDate")

    leads_per_case = 100 / conversion_rate
    profit_per_case = case_value - cost_per_lead * leads_per_case
    required_cases = math.ceil(target_profit / profit_per_case) if profit_per_case > 0 else 0
    required_leads = math.ceil(required_cases * leads_per_case)
    total_ad_spend = required_leads * cost_per_lead

    return ProfitProjection(
        required_cases=required_cases,
        required_leads=required_leads,
        total_revenue=required_cases * case_value,
        total_ad_spend=total_ad_spend,
        daily_ad_spend=total_ad_spend / days,
        days=days,
    )
