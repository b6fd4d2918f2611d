"""
scoring/ - Audit Scoring Engine

Modules:
    utils.py            - Half-up rounding, safe ratios, lenient number parsing
    normalizer.py       - Flat question records -> Category/Question tree
    answer_tracker.py   - Answered state from raw stored answers
    question_scorer.py  - Binary, threshold, list-option and perfect-score rules; q1q2 ratio
    sku_metrics.py      - SKU-derived coverage ratios and counts
    aggregator.py       - Category progress/score sums and audit totals
    compliance.py       - Primary and online compliance flags
"""
