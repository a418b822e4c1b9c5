"""Prompt templates shipped with the package (read with ``load_prompt``)."""
