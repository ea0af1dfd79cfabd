"""Domain layer — workflow definitions, the registry, diagnostic rules.

This layer depends only on stdlib and pydantic (plus the config models
used to validate ``[workflows.<name>]`` tables). It must never import
from services, infrastructure, commands, or output.
"""
