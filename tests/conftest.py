"""Shared fixtures: a realistic sanitized deck covering every slide kind."""

import pytest

from wrapped_builder.schema.themes import DEFAULT_THEME


G = DEFAULT_THEME.gradients


@pytest.fixture
def sample_slides():
    return [
        {"type": "intro", "title": "Your November Wrapped", "subtitle": "Jane, let's celebrate!",
         "icon": "🎉", "gradient": G[0]},
        {"type": "stat", "mainStat": "42", "statLabel": "Visits", "icon": "💪", "gradient": G[1]},
        {"type": "chart", "title": "Your Activity Breakdown", "gradient": G[2],
         "chartData": {"type": "bars", "data": [
             {"label": "Strength", "value": 25},
             {"label": "Cardio", "value": 18},
             {"label": "Yoga", "value": 10},
         ]}},
        {"type": "chart", "title": "Consistency Score", "gradient": G[2],
         "chartData": {"type": "progress", "percentage": 85, "label": "Monthly Goal"}},
        {"type": "grid", "title": "Your Stats at a Glance", "gradient": G[3],
         "chartData": {"items": [
             {"icon": "🔥", "value": "28", "label": "Day Streak"},
             {"icon": "⚡", "value": "3.2k", "label": "Kg Lifted"},
             {"icon": "🏆", "value": "Top 10%", "label": "Rank"},
             {"icon": "⭐", "value": "16", "label": "Classes"},
         ]}},
        {"type": "leaderboard", "gradient": G[4],
         "chartData": {"position": 45, "total": 500, "category": "Workout Consistency"}},
        {"type": "comparison", "title": "That's like lifting", "mainStat": "2 Elephants!",
         "comparison": "3,200kg = 2 baby elephants", "icon": "🐘", "gradient": G[0]},
        {"type": "closing", "title": "December Awaits!", "subtitle": "Let's make it even better",
         "icon": "🚀", "gradient": G[1]},
    ]
