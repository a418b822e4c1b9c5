"""Tool calling recipes.

- logistics_tools.py: The request / execute / respond loop written out by hand
- calculator_tools.py: Decorated tools driven by an assistant
"""
