"""
Candidate generators

One generator per recommendation channel:
  - ai_preference   (profile-shaped external search, score 0.9)
  - trending        (catalog engagement, score 0.8)
  - similar_users   (favorite overlap, score 0.7)
  - seasonal        (month -> seasonal vocabulary search, score 0.6)

Scores are fixed per channel so each channel is independently orderable.
"""
