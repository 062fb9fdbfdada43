from __future__ import annotations
from typing import Any, Dict, List

from .models import Module


# EWMBA200S Data & Decisions, in course order
_SYLLABUS_DATA: List[Dict[str, Any]] = [
	{
		"id": 1,
		"title": "Samples & Surveys",
		"topics": ["Population of Interest", "Sampling Frames", "Selection Bias", "Non-response Bias"],
		"cases": [
			{
				"title": "Poll-i-am-a (iOS vs Voters)",
				"description": "A startup polls 10,000 iOS users to predict the Presidential Election.",
				"data_points": ["Sample: 10,000 US iOS users", "Goal: Predict election winner", "Bias: Coverage bias (iOS users != electorate)"],
			},
			{
				"title": "Honda EV Survey",
				"description": "Honda surveys past owners about a new 'e:prototype' electric SUV.",
				"data_points": ["Frame: Past Honda owners", "Response Rate: 14%", "72% said they would buy", "Voluntary response bias"],
			},
			{
				"title": "Twitter Bot Detection",
				"description": "Elon Musk samples 100 followers of @twitter to estimate fake accounts.",
				"data_points": ["Sample: 100 followers of @twitter", "Method: Replies to math problem", "Bias: Sampling frame is not random users"],
			},
		],
	},
	{
		"id": 2,
		"title": "Sampling Variation & Quality",
		"topics": ["Standard Error", "Confidence Intervals", "Central Limit Theorem"],
		"cases": [
			{
				"title": "Hitachi Metals Pencils",
				"description": "Manufacturing high-end pencils with core thickness 3mm.",
				"data_points": ["Target: 3mm", "SD: 0.1mm", "Sample: 100 pencils", "Rule: Retool if mean < 2.95 or > 3.05"],
			},
			{
				"title": "Haas F1 Lap Times",
				"description": "Monitoring driver performance to detect anomalies.",
				"data_points": ["Mean lap: 82.3s", "SD: 1.3s", "Sample: 3 laps", "Rule: Check if avg < 80.83s or > 83.77s"],
			},
		],
	},
	{
		"id": 3,
		"title": "Statistical Tests",
		"topics": ["Hypothesis Testing", "T-tests", "Type I/II Errors"],
		"cases": [
			{
				"title": "OpenAI Employee Satisfaction",
				"description": "Testing if a new compensation plan improved morale.",
				"data_points": ["Old Mean: 7.3", "Sample (n=36): 7.6", "Sample SD: 1.1", "One-sided test"],
			},
			{
				"title": "ABAG Wastewater",
				"description": "Testing COVID concentration in sewage.",
				"data_points": ["Mean: 240", "SD: 60", "Control limits for 5% Type I error"],
			},
		],
	},
	{
		"id": 4,
		"title": "Linear Patterns",
		"topics": ["Correlation vs Causation", "Scatterplots", "Linearity"],
		"cases": [
			{
				"title": "Rent-the-Chicken",
				"description": "Weekly spend vs. Yard size.",
				"data_points": ["Avg Yard: 0.5 acres", "SD Yard: 0.1", "Avg Spend: $137", "SD Spend: $24", "R^2: 0.42"],
			},
			{
				"title": "Spotify Songs",
				"description": "Song duration vs. Popularity rating.",
				"data_points": ["n=18,835", "Slope: -0.414", "P-value: 0.009", "Intercept: 54.5"],
			},
		],
	},
	{
		"id": 5,
		"title": "Simple Regression",
		"topics": ["OLS", "Slope Interpretation", "Residuals", "R-squared"],
		"cases": [
			{
				"title": "Wobb Influencer Marketing",
				"description": "Ad spend vs Sales.",
				"data_points": ["Avg Sales: 24M", "Avg Ad Spend: 28k", "Slope claim: 1k spend -> 1M sales", "Correlation: 0.63"],
			},
			{
				"title": "Haagen-Dazs Sales",
				"description": "Ice cream sales vs Temperature (Celsius).",
				"data_points": ["Slope: 21.44", "Intercept: 44.83", "R^2: 0.9797", "n=500"],
			},
		],
	},
	{
		"id": 6,
		"title": "Multiple Regression",
		"topics": ["Partial Slopes", "Adjusted R-squared", "Multicollinearity"],
		"cases": [
			{
				"title": "Fortune 500 Wages",
				"description": "Wage determined by Education, Experience, Age.",
				"data_points": ["log(wage) model", "Educ coef: .072", "Exper coef: .014", "Age coef: .012", "n=935"],
			},
			{
				"title": "Biden Campaign 2020",
				"description": "Votes for Biden vs Votes Counted in Georgia.",
				"data_points": ["Slope: 0.2235", "Intercept: 27.68", "R^2: 0.994", "High t-stat: 154.6"],
			},
		],
	},
	{
		"id": 7,
		"title": "Building Models",
		"topics": ["F-tests", "Model Selection", "Standard Error of Regression"],
		"cases": [
			{
				"title": "EBMUD Water Demand",
				"description": "Water usage vs Price, Lot Size, Bathrooms.",
				"data_points": ["Log-Log model", "Price Elast: -1.567", "Lot Size coef: .469", "Baths coef: .166"],
			},
			{
				"title": "Used Car Prices",
				"description": "ln(Price) vs Odometer.",
				"data_points": ["Slope: -0.020", "Intercept: 13.25", "R^2: 0.0035", "Small R^2 but significant slope"],
			},
		],
	},
	{
		"id": 8,
		"title": "Predictive Analytics",
		"topics": ["Prediction Intervals", "Confidence Intervals for Mean"],
		"cases": [
			{
				"title": "Used Car Prices (Prediction)",
				"description": "Predicting price for a specific car with 50k miles.",
				"data_points": ["Prediction Interval is wider than Confidence Interval", "Root MSE = 1.17"],
			},
		],
	},
	{
		"id": 9,
		"title": "Categorical Variables",
		"topics": ["Dummy Variables", "Interaction Terms", "Reference Categories"],
		"cases": [
			{
				"title": "Wage Gap Analysis",
				"description": "Gender/Race impact on wages.",
				"data_points": ["Lurking variables", "Correlation between race and education", "Dummy variable trap"],
			},
		],
	},
]


def build_syllabus(raw: List[Dict[str, Any]]) -> List[Module]:
	"""Validate raw module dicts into an ordered, immutable syllabus.

	Empty topic or case lists are rejected by ``Module`` itself; duplicate ids
	are rejected here. The result is sorted by id, which is curriculum order.
	"""
	modules = [Module.model_validate(item) for item in raw]
	seen = set()
	for m in modules:
		if m.id in seen:
			raise ValueError(f"duplicate module id {m.id}")
		seen.add(m.id)
	return sorted(modules, key=lambda m: m.id)


SYLLABUS: List[Module] = build_syllabus(_SYLLABUS_DATA)
_BY_ID: Dict[int, Module] = {m.id: m for m in SYLLABUS}


def list_modules() -> List[Module]:
	return list(SYLLABUS)


def get_module(module_id: int) -> Module:
	try:
		return _BY_ID[module_id]
	except KeyError:
		raise KeyError(f"unknown module id {module_id}") from None
