"""
External recipe search (Spoonacular)

Request/response client for the third-party recipe search provider. Used by
the AI-preference and seasonal generators.
"""
