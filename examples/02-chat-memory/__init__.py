"""Chat memory recipes.

- chat_memory.py: Message and token windows, system message retention
- redis_memory.py: Persisting conversations in Redis
"""
