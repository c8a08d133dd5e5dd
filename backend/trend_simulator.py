"""
Trend Simulator
Generates a random but plausible eight-month crisis trend data set so the
trend analysis screen can be exercised without live data feeds.
"""

import random
from typing import Dict, List

MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug']


def _change_percent(series: List[dict], value: int) -> str:
    if not series:
        return '0.0'
    previous = series[-1]["value"]
    return f"{(value - previous) / previous * 100:.1f}"


def generate_test_trend_data(rng: random.Random = None) -> Dict:
    """
    Monthly series for violent incidents, protests and terrorism.

    Apr-Jun carry a rainy-season bump, April and June carry large spikes
    (reported as critical anomalies), and terrorism rises when violence
    passes 60 in a month.
    """
    rng = rng or random.Random()

    violent_incidents: List[dict] = []
    protests: List[dict] = []
    terrorism: List[dict] = []

    for i, month in enumerate(MONTHS):
        violent = 30 + rng.randrange(20)
        protest = 25 + rng.randrange(15)
        terror = 10 + rng.randrange(8)

        # Apr-Jun: rainy season
        if 3 <= i <= 5:
            violent += 15 + rng.randrange(10)
            protest -= 5 + rng.randrange(5)

        if i == 3:
            violent += 45
        if i == 5:
            violent += 50

        if violent > 60:
            terror += 12

        violent_incidents.append({"month": month, "value": violent, "changePercent": _change_percent(violent_incidents, violent)})
        protests.append({"month": month, "value": protest, "changePercent": _change_percent(protests, protest)})
        terrorism.append({"month": month, "value": terror, "changePercent": _change_percent(terrorism, terror)})

    return {
        "timeSeries": {
            "violentIncidents": violent_incidents,
            "protests": protests,
            "terrorism": terrorism,
        },
        "regions": [
            {"name": "Northern", "currentValue": 32, "changePercent": 8.4, "trend": "increase", "riskLevel": "high"},
            {"name": "Southern", "currentValue": 4, "changePercent": -2.1, "trend": "decrease", "riskLevel": "low"},
            {"name": "Eastern", "currentValue": 12, "changePercent": 1.7, "trend": "increase", "riskLevel": "medium"},
            {"name": "Western", "currentValue": 8, "changePercent": 0.3, "trend": "stable", "riskLevel": "stable"},
        ],
        "metrics": {
            "monthOverMonth": {"value": 12.3, "trend": "increase", "percentage": 62},
            "seasonalTrend": {"value": -3.7, "trend": "decrease", "percentage": 43},
            "predictiveConfidence": {"value": 87, "percentage": 87},
            "dataQuality": {"value": 72, "percentage": 72},
        },
        "anomalies": [
            {
                "month": "April",
                "value": violent_incidents[3]["value"],
                "expectedValue": violent_incidents[3]["value"] - 45,
                "percentageDifference": 136,
                "significance": "critical",
            },
            {
                "month": "June",
                "value": violent_incidents[5]["value"],
                "expectedValue": violent_incidents[5]["value"] - 50,
                "percentageDifference": 148,
                "significance": "critical",
            },
        ],
        "forecast": {"trend": 27.3, "confidence": 87, "riskLevel": "high"},
    }
