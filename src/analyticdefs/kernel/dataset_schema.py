"""Schema of a dataset analytic definition."""

from functools import lru_cache

from analyticdefs.kernel.common_schema import declare_dependencies, declare_shared_types
from analyticdefs.kernel.schema import (
    BOOLEAN,
    NUMBER,
    SERVICE_ID,
    STRING,
    UNKNOWN,
    SchemaBuilder,
    SchemaGraph,
    list_of,
)

DATASET = "dataset"

# ownerId is part of the definition but cannot be deployed meaningfully:
# the target keeps its own owner whatever is sent.


@lru_cache(maxsize=None)
def dataset_schema() -> SchemaGraph:
    builder = SchemaBuilder()
    root = builder.declare(DATASET, is_tagged_union=True, ignore_discriminator=True)
    shared = declare_shared_types(builder, DATASET)
    dependencies = declare_dependencies(builder, DATASET)

    audience = builder.declare("dataset_audience")
    builder.add_fields(audience, {
        "AudienceItems": list_of(UNKNOWN),
        "isPublic": BOOLEAN,
    })

    column = builder.declare("dataset_column")
    builder.add_fields(column, {
        "alias": STRING,
        "columnId": NUMBER,
        "field": shared["fieldOrFormula"],
        "label": shared["translation"],
    })

    builder.add_fields(root, {
        "scriptid": (SERVICE_ID, {
            "required": True,
            "omit_on_reconstruct": True,
            "is_attribute": True,
            "restriction": {"regex": "^custdataset[0-9a-z_]+"},
        }),
        "name": (STRING, {
            "required": True,
            "omit_on_reconstruct": True,
            "restriction": {"max_length": 50},
        }),
        "dependencies": (dependencies, {"omit_on_reconstruct": True}),
        "definition": (STRING, {"omit_on_reconstruct": True}),
        "applicationId": UNKNOWN,
        "audience": audience,
        "baseRecord": shared["baseRecord"],
        "columns": list_of(column),
        "criteria": shared["criteria"],
        "description": shared["translation"],
        "formulas": list_of(shared["fieldOrFormula"]),
        "id": UNKNOWN,
        "ownerId": NUMBER,
        "version": STRING,
        "scriptId": UNKNOWN,
    })
    return builder.build(root)
