"""Collaborative filtering module for CoRate.

This module contains the rating store interface, the Pearson similarity
engine, neighbor search, and the recommendation and similar-product
generators built on user ratings.
"""
