"""StepAI Admin: back-office tooling for the StepAI catalog.

Sub-packages:

- :mod:`stepai_admin.config`: environment-backed settings.
- :mod:`stepai_admin.core`: exceptions, logging, session and auth.
- :mod:`stepai_admin.catalog`: envelope-aware REST client and catalog resources.
- :mod:`stepai_admin.editor`: the ordered-list merchandising editor.
- :mod:`stepai_admin.proxy`: reverse proxy and SPA static host.
"""

__version__ = "0.1.0"
