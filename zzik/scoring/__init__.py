"""
scoring/ - ZZIK Scoring Core

Pure functions over plain records; no I/O.

Modules:
    utils.py             - Numeric helpers (clamp, cosine similarity, half-up rounding)
    recommendation.py    - Hybrid popup recommendation and preference updates
    leader_matching.py   - Leader-to-campaign matching, tiers and cost estimates
    prediction.py        - Campaign success probability, risk and advice
"""
