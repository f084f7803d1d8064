"""
Matching layer - concern detection and hard-constraint filtering.

Modules
-------
classifier : classify() + merge_profiles() - free text and user context
             to a ConcernProfile.
filter     : filter_candidates() - area, novice, data-quality and license
             rules over the provider catalog.
"""
