"""Chat model basics.

- hello_chat.py: First calls, the public demo key and multi-turn history
- multimodal.py: Image and video input for vision models
"""
