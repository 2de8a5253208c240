"""
Snippetbox — Services Layer
=============================

Service Inventory:
    - SnippetStore: insert / get / latest over the `snippets` table
"""
