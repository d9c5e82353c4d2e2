"""SchemaCanvas - visual MongoDB schema designer core.

Holds the schema model behind the designer canvas and turns it into
Mongoose or Prisma source code and a JSON interchange document.
"""

__version__ = "0.1.0"

from schemacanvas.domain.services import SchemaModel

__all__ = ["SchemaModel", "__version__"]
