# Routes package init
"""
Snippet Manager Backend — API Routes Package
==============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - snippets.py:  GET/POST        {prefix}/
                    GET             {prefix}/{snippet_name}
                    PUT             {prefix}/{codeid}
                    DELETE          {prefix}/{id}
    - health.py:    GET             /health

Routes stay thin: extract input, call SnippetRepository, shape the
response. Validation and storage mapping live in services/.
"""
