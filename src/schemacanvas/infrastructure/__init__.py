"""Infrastructure layer - output formats and external resources.

This layer contains:
- Code generators (Mongoose, Prisma) and their registry
- JSON document serialization
- Local file storage for documents and generated code
"""
