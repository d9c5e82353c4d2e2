"""Code generation from collections to ORM source text."""

from schemacanvas.infrastructure.codegen.mongoose_generator import (
    MongooseGenerator,
    generate_mongoose_schema,
)
from schemacanvas.infrastructure.codegen.prisma_generator import (
    PrismaGenerator,
    generate_prisma_schema,
)
from schemacanvas.infrastructure.codegen.registry import (
    CODE_GENERATORS,
    CodeGenerator,
    GeneratorRegistry,
    create_default_registry,
    generate_code,
)

__all__ = [
    "CODE_GENERATORS",
    "CodeGenerator",
    "GeneratorRegistry",
    "MongooseGenerator",
    "PrismaGenerator",
    "create_default_registry",
    "generate_code",
    "generate_mongoose_schema",
    "generate_prisma_schema",
]
