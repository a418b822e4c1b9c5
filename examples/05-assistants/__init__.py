"""Assistant recipes.

- assistant_basics.py: System messages, templates, packaged prompts,
  request transformers and invocation parameters
- per_user_memory.py: One conversation per user, with eviction
- return_types.py: Typed answers and result metadata
"""
