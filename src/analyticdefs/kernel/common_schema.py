"""Schema fragments shared by the workbook and dataset definitions.

Both definitions describe columns, criteria and formulas with the same
shapes; each kind declares its own copy under its own type-name prefix so the
host sees ``dataset_fieldReference`` and ``workbook_fieldReference`` as
distinct types.
"""

from analyticdefs.kernel.schema import (
    BOOLEAN,
    STRING,
    UNKNOWN,
    SchemaBuilder,
    list_of,
)

CODE_LIST = (
    "AND", "OR",
    "ANY_OF",
    "EMPTY", "EMPTY_NOT", "CONTAIN", "CONTAIN_NOT", "ENDWITH", "ENDWITH_NOT", "IS", "IS_NOT",
    "START_WITH", "START_WITH_NOT",
    "LESS", "GREATER", "EQUAL", "EQUAL_NOT", "GREATER_OR_EQUAL", "LESS_OR_EQUAL", "BETWEEN", "BETWEEN_NOT",
)
TARGET_FIELD_CONTEXT_NAMES = ("DEFAULT", "IDENTIFIER", "UNCONSOLIDATED", "HIERARCHY_IDENTIFIER")
FORMULA_DATA_TYPES = (
    "INTEGER", "BOOLEAN", "DATE", "DATETIME", "FLOAT", "STRING", "CLOBTEXT", "PERCENT", "DURATION",
)
VALIDITY_STATES = ("VALID",)


def declare_shared_types(builder: SchemaBuilder, prefix: str) -> dict[str, str]:
    """Declare and wire the shared types, returning their references by short name.

    ``formula`` and ``fieldOrFormula`` (and ``condition`` and ``criteria``)
    refer to each other; both are declared before any field is added.
    """
    refs = {
        "translation": builder.declare(f"{prefix}_translation"),
        "baseRecord": builder.declare(f"{prefix}_baseRecord"),
        "joinTrail": builder.declare(f"{prefix}_joinTrail"),
        "fieldReference": builder.declare(f"{prefix}_fieldReference"),
        "formulaFormula": builder.declare(
            f"{prefix}_formula_formula", is_tagged_union=True, ignore_discriminator=True
        ),
        "formula": builder.declare(f"{prefix}_formula"),
        "fieldOrFormula": builder.declare(f"{prefix}_fieldOrFormula", is_tagged_union=True),
        "expressionValue": builder.declare(f"{prefix}_criteria_expression_value"),
        "expression": builder.declare(f"{prefix}_criteria_expression"),
        "meta": builder.declare(f"{prefix}_meta"),
        "operator": builder.declare(f"{prefix}_operator"),
        "targetFieldContext": builder.declare(f"{prefix}_criteria_TargetFieldContext"),
        "filter": builder.declare(f"{prefix}_filter"),
        "condition": builder.declare(f"{prefix}_condition"),
        "criteria": builder.declare(f"{prefix}_criteria", is_tagged_union=True),
    }

    builder.add_fields(refs["translation"], {"translationScriptId": STRING})
    builder.add_fields(refs["baseRecord"], {"id": STRING, "label": STRING})
    builder.add_fields(refs["joinTrail"], {
        "baseRecord": refs["baseRecord"],
        "joins": list_of(UNKNOWN),
    })
    builder.add_fields(refs["fieldReference"], {
        "id": STRING,
        "joinTrail": refs["joinTrail"],
        "label": STRING,
        "uniqueId": STRING,
        "fieldValidityState": (STRING, {
            "restriction": {"values": VALIDITY_STATES},
            "omit_on_reconstruct": True,
        }),
    })
    builder.add_fields(refs["formulaFormula"], {
        "dataType": (STRING, {"restriction": {"values": FORMULA_DATA_TYPES}}),
        "formulaSQL": STRING,
        "id": STRING,
        "label": refs["translation"],
        "uniqueId": STRING,
    })
    builder.add_fields(refs["formula"], {
        "fields": list_of(refs["fieldOrFormula"]),
        "formula": refs["formulaFormula"],
    })
    builder.add_fields(refs["fieldOrFormula"], {
        "fieldReference": refs["fieldReference"],
        "dataSetFormula": refs["formula"],
    })
    builder.add_fields(refs["expressionValue"], {"type": STRING, "value": UNKNOWN})
    builder.add_fields(refs["expression"], {
        "label": STRING,
        "subType": UNKNOWN,
        "uiData": list_of(STRING),
        "value": refs["expressionValue"],
    })
    builder.add_fields(refs["meta"], {"selectorType": UNKNOWN, "subType": STRING})
    builder.add_fields(refs["operator"], {
        "code": (STRING, {"restriction": {"values": CODE_LIST}}),
    })
    builder.add_fields(refs["targetFieldContext"], {
        "name": (STRING, {"restriction": {"values": TARGET_FIELD_CONTEXT_NAMES}}),
    })
    builder.add_fields(refs["filter"], {
        "caseSensitive": BOOLEAN,
        "expressions": list_of(refs["expression"]),
        "operator": refs["operator"],
        "targetFieldContext": refs["targetFieldContext"],
        "field": refs["fieldOrFormula"],
        "fieldStateName": STRING,
        "meta": refs["meta"],
    })
    builder.add_fields(refs["condition"], {
        "children": list_of(refs["criteria"]),
        "operator": refs["operator"],
        "targetFieldContext": refs["targetFieldContext"],
        "meta": refs["meta"],
        "field": refs["fieldOrFormula"],
        "fieldStateName": STRING,
    })
    builder.add_fields(refs["criteria"], {
        "condition": refs["condition"],
        "filter": refs["filter"],
    })
    return refs


def declare_dependencies(builder: SchemaBuilder, prefix: str) -> str:
    ref = builder.declare(f"{prefix}_dependencies")
    builder.add_fields(ref, {"dependency": (list_of(STRING), {"required": True})})
    return ref
