"""
Recipe catalog

Normalisation of external records into canonical recipes and the upsert /
read paths over the shared `recipes` table.
"""
