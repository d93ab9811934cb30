"""Scoring engine for BlendRec.

This module contains the TF-IDF content model, the implicit interaction store,
user-based collaborative filtering and the blend layer that merges both
signals into ranked, explained recommendations.
"""
