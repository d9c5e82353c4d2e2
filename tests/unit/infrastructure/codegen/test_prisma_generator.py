"""Unit tests for PrismaGenerator."""

from schemacanvas.domain.entities import Collection, Field
from schemacanvas.infrastructure.codegen import PrismaGenerator, generate_prisma_schema


def _generate(model, name: str) -> str:
    collections = model.collections
    collection = next(c for c in collections if c.name == name)
    return generate_prisma_schema(collection, collections, model.connections)


def test_reference_field_gets_relation(blog_model):
    """Test a connected objectId becomes a scalar column plus a relation."""
    code = _generate(blog_model, "Post")

    assert code == (
        "model Post {\n"
        '  id        String   @id @default(auto()) @map("_id") @db.ObjectId\n'
        "  title     String\n"
        "  author    String   @db.ObjectId\n"
        '  authorRef User     @relation("PostAuthor", fields: [author], references: [id])\n'
        "  createdAt DateTime @default(now())\n"
        "  updatedAt DateTime @updatedAt\n"
        "}\n"
    )


def test_referenced_model_gets_back_relation(blog_model):
    """Test the target model lists its referencing records."""
    code = _generate(blog_model, "User")

    assert code == (
        "model User {\n"
        '  id          String @id @default(auto()) @map("_id") @db.ObjectId\n'
        "  email       String\n"
        '  postAuthors Post[] @relation("PostAuthor")\n'
        "\n"
        "  @@unique([email])\n"
        "}\n"
    )


def test_optional_fields_and_lists():
    """Test optional scalars get ? and arrays become lists."""
    collection = Collection(
        id="c1",
        name="Article",
        fields=[
            Field.primary_key(),
            Field(name="subtitle", type="string"),
            Field(name="tags", type="array", array_type="string"),
            Field(name="meta", type="object"),
            Field(name="blocks", type="array", array_type="object"),
        ],
    )

    code = PrismaGenerator.generate(collection, [collection], [])

    assert "  subtitle String?" in code
    assert "  tags     String[]" in code
    assert "  meta     Json?" in code
    assert "  blocks   Json[]" in code


def test_id_suffix_relation_name_and_self_relation():
    """Test `managerId` relates through `manager` with NoAction on self relations."""
    employee = Collection(
        id="e1",
        name="Employee",
        fields=[Field.primary_key(), Field(name="managerId", type="objectId", ref="e1")],
    )

    code = PrismaGenerator.generate(employee, [employee], [])

    assert (
        '@relation("EmployeeManagerId", fields: [managerId], references: [id], '
        "onDelete: NoAction, onUpdate: NoAction)"
    ) in code
    assert "  manager " in code
    assert "Employee?" in code
    assert '@relation("EmployeeManagerId")' in code


def test_mapped_names():
    """Test names that are not identifiers are mapped back to the originals."""
    collection = Collection(
        id="c1",
        name="order items",
        fields=[Field.primary_key(), Field(name="unit_price", type="number", index=True)],
    )

    code = PrismaGenerator.generate(collection, [collection], [])

    assert code.startswith("model orderItems {\n")
    assert "  @@index([unit_price])" in code
    assert '  @@map("order items")' in code


def test_defaults():
    """Test defaults render as @default attributes."""
    collection = Collection(
        id="c1",
        name="Product",
        fields=[
            Field.primary_key(),
            Field(name="status", type="string", required=True, default_value="draft"),
            Field(name="stock", type="number", required=True, default_value=0),
            Field(name="publishedAt", type="date", default_value="now"),
        ],
    )

    code = PrismaGenerator.generate(collection, [collection], [])

    assert '@default("draft")' in code
    assert "@default(0)" in code
    assert "@default(now())" in code


def test_relation_field_name_avoids_collisions():
    """Test the relation field never reuses a taken name."""
    field = Field(name="authorId", type="objectId")

    assert PrismaGenerator.relation_field_name(field, {"id", "authorId"}) == "author"
    assert PrismaGenerator.relation_field_name(field, {"id", "authorId", "author"}) == "authorRef"


def test_user_field_named_id_is_renamed():
    """Test a stored `id` field does not collide with the primary key column."""
    collection = Collection(
        id="c1",
        name="Account",
        fields=[Field.primary_key(), Field(name="id", type="string", required=True)],
    )

    code = PrismaGenerator.generate(collection, [collection], [])

    assert code == (
        "model Account {\n"
        '  id  String @id @default(auto()) @map("_id") @db.ObjectId\n'
        '  id_ String @map("id")\n'
        "}\n"
    )
    assert sum(1 for line in code.splitlines() if line.startswith("  id ")) == 1


def test_column_names_are_unique():
    """Test clashing field names get distinct columns."""
    fields = [Field(name="id", type="string"), Field(name="title", type="string")]

    assert PrismaGenerator.column_names(fields) == {"id": "id_", "title": "title"}


def test_generation_is_deterministic(blog_model):
    """Test identical input yields identical output."""
    assert _generate(blog_model, "Post") == _generate(blog_model, "Post")
    assert _generate(blog_model, "User") == _generate(blog_model, "User")


def test_unknown_type_falls_back_to_string():
    """Test imported fields with unknown types render as String."""
    collection = Collection(
        id="c1", name="Legacy", fields=[Field.primary_key(), Field(name="blob", type="buffer")]
    )

    code = PrismaGenerator.generate(collection, [collection], [])

    assert "  blob String?" in code


def test_single_timestamp_is_plain_datetime():
    """Test a lone timestamp gets no automatic attributes."""
    collection = Collection(
        id="c1",
        name="Event",
        fields=[Field.primary_key(), Field.timestamp("createdAt")],
    )

    code = PrismaGenerator.generate(collection, [collection], [])

    assert code == (
        "model Event {\n"
        '  id        String   @id @default(auto()) @map("_id") @db.ObjectId\n'
        "  createdAt DateTime\n"
        "}\n"
    )


def test_json_and_list_columns_skip_block_indexes():
    """Test unique and index flags are ignored where Prisma cannot index."""
    collection = Collection(
        id="c1",
        name="Doc",
        fields=[
            Field.primary_key(),
            Field(name="meta", type="object", unique=True),
            Field(name="tags", type="array", array_type="string", index=True),
        ],
    )

    code = PrismaGenerator.generate(collection, [collection], [])

    assert "@@unique" not in code
    assert "@@index" not in code
