"""Describes the Foodora domain. Centres around the `RecipeRepository`.

A recipe owns its ingredients and nutrition facts, which live in their own
tables keyed by recipe id. Liked recipes and the meal plan are relations over
recipe ids and are kept independently of the recipes themselves, so they may
mention a recipe that is not stored.

Writes that clash with a row of the same identity are no-ops. That keeps
liking, planning and saving a recipe safe to repeat.
"""
