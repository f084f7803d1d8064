"""
Recommendation engine: converts filtered dive shops and a concern profile
into ranked, explained recommendations.

Modules
-------
scorer    : compute_breakdown() + score_candidates() - additive, capped
            concern / service-quality / plan-bonus scoring.  Pure functions.
ranker    : rank_key() + rank() - deterministic total order, top-N cut.
explainer : explain() + build_reasons() - structured reasons and template
            prose for each ranked shop.
"""
