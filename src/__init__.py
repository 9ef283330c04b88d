"""CoRate: rating-based product recommendation service.

This package provides a backend service for generating personalized product
recommendations and "similar products" lists using user-user collaborative
filtering over explicit star ratings.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: Rating store, similarity and recommendation logic
"""

__version__ = "0.1.0"
