"""Transparent Trust.

Backend service for sales and RFP enablement teams. It keeps a library of
customer profiles, knowledge skills and document templates, fills templates
with customer data (delegating free-form sections to an LLM), and routes
generated answers through a human review workflow.

Core subpackages
----------------

- ``transparent_trust.core``:

  - Database entities, repositories and API I/O models.
  - The template engine, review workflow, skill refresh/merge helpers.
  - Audit logging, capabilities, rate limiting and prompt templating.
  - The git mirror that keeps templates, customers and skills as markdown.

- ``transparent_trust.server``:

  - The FastAPI application, routers, exception handlers and middleware.

Every API response uses the ``{"data": ...}`` / ``{"error": ...}`` envelope.
"""

__version__ = "0.1.0"
