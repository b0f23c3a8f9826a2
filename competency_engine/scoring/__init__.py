"""
scoring/ - Competency scoring models and aggregation

Modules:
    utils.py               - Decimal rounding, weight normalization, rescaling
    base.py                - ScoreModel interface and shared weighted average
    likert_model.py        - Weighted Likert
    bars_model.py          - Behaviorally Anchored Rating Scale
    rubric_model.py        - Weighted Rubric (criterion weights normalized)
    hierarchical_model.py  - Question -> competency -> category -> overall
    normalized_model.py    - 0-100 normalization over a base model
    bayesian_model.py      - Per-cycle learned competency weights
    catalog.py             - Built-in scoring systems
    registry.py            - Scoring system id -> configured model
    aggregation.py         - AggregationEngine producing a Result
"""
