"""
Snippetbox — Routes Package
=============================

Route Inventory:
    - snippets.py:  GET  /                 (latest snippets)
                    GET  /snippet/view     (one snippet by ?id=N)
                    POST /snippet/create   (create, then 303 to the view page)
    - health.py:    GET  /health           (database probe)

Routes stay thin: parse the request, call the SnippetStore, render a page.
"""
