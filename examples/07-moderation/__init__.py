"""Moderation recipes.

- moderation.py: Blocking flagged input before the chat model is called
"""
