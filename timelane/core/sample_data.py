"""
Sample Data Module.

Small hand-written item set and a synthetic large dataset generator used to
exercise virtual scrolling with thousands of items.
"""

import random
from datetime import date, timedelta
from typing import Dict, List, Optional

from timelane.core.dates import format_date_for_input

COLORS = [
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#8b5cf6",
    "#ef4444",
    "#06b6d4",
    "#ec4899",
    "#84cc16",
    "#6366f1",
    "#f97316",
]

PHASES = ["Planning", "Development", "Testing", "Review", "Deployment"]

DATASET_START = date(2024, 1, 1)

SAMPLE_ITEMS: List[Dict] = [
    {"id": 1, "name": "Project Alpha Kickoff", "startDate": "2025-01-15", "endDate": "2025-01-20", "color": "#3b82f6"},
    {"id": 2, "name": "Design Phase", "startDate": "2025-01-18", "endDate": "2025-02-05", "color": "#10b981"},
    {"id": 3, "name": "Development Sprint 1", "startDate": "2025-02-01", "endDate": "2025-02-15", "color": "#f59e0b"},
    {"id": 4, "name": "User Research", "startDate": "2025-01-22", "endDate": "2025-01-28", "color": "#8b5cf6"},
    {"id": 5, "name": "Development Sprint 2", "startDate": "2025-02-16", "endDate": "2025-03-01", "color": "#ef4444"},
    {"id": 6, "name": "QA Testing", "startDate": "2025-02-25", "endDate": "2025-03-10", "color": "#06b6d4"},
    {"id": 7, "name": "Beta Release", "startDate": "2025-03-11", "endDate": "2025-03-11", "color": "#ec4899"},
    {"id": 8, "name": "Marketing Campaign", "startDate": "2025-03-01", "endDate": "2025-03-31", "color": "#84cc16"},
]


def generate_large_dataset(
    count: int, seed: Optional[int] = None, start: date = DATASET_START
) -> List[Dict]:
    """
    Generates a synthetic item set for load testing.

    Item ``i`` starts ``(i // 10) * 7 + (i % 10) * 2`` days after ``start``
    and lasts 1 to 14 days.

    Args:
        count: Number of items to generate.
        seed: Optional random seed for reproducible durations.
        start: Date of the first item.

    Returns:
        List[Dict]: Item records with ISO date strings.
    """
    rng = random.Random(seed)
    items = []
    for i in range(count):
        item_start = start + timedelta(days=(i // 10) * 7 + (i % 10) * 2)
        item_end = item_start + timedelta(days=rng.randint(1, 14))
        items.append(
            {
                "id": i + 1,
                "name": f"Task {i + 1} - {PHASES[i % len(PHASES)]}",
                "startDate": format_date_for_input(item_start),
                "endDate": format_date_for_input(item_end),
                "color": COLORS[i % len(COLORS)],
            }
        )
    return items
