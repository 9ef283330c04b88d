"""FastAPI application module for CoRate.

This module contains the FastAPI application, route handlers, and API
endpoints for the recommendation service. It provides RESTful interfaces
for querying recommendations and submitting ratings.
"""
