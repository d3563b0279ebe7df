"""
Recipe recommendation engine

Generates, persists and serves per-user recipe recommendations from four
independent channels (AI preference, trending, similar users, seasonal) over
the shared Supabase catalog:
  recipes, recipe_recommendations, profiles, user_favorites
"""
