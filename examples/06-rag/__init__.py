"""Retrieval-augmented generation recipes.

- retrieval_augmentor.py: Indexing documents and augmenting questions
- miles_of_smiles.py: Routing greetings away from a RAG chat bot
"""
