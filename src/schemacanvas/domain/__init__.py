"""Domain layer - schema entities, exceptions and services.

This layer has no knowledge of output formats; code generation and
serialization live in the infrastructure layer.
"""
