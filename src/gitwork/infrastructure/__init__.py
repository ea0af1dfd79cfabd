"""Infrastructure layer — subprocess execution and repository inspection.

This layer depends on stdlib only and talks to the outside world
(``git``/``gh`` executables). It must never import from domain,
services, commands, or output.
"""
