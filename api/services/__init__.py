"""Domain services backing the API routes.

Each service wraps one record store table and raises API exceptions
(``api.exceptions``) for domain errors.
"""
