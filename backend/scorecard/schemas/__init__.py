"""
Pydantic schemas for the scorecard API.
"""
