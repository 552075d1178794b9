"""Infrastructure layer — directory taxonomy, markdown files, legacy JSON index.

This layer performs all disk I/O. It depends on the domain layer for
path rules, content safety, and the error taxonomy (infrastructure -> domain).
It must never import from services, commands, or output.
"""
