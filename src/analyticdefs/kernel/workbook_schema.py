"""Schema of a workbook analytic definition.

A workbook definition holds the ``Workbook`` header plus four collections
(data views, pivots, charts and dataset links). Each collection item is a
single-variant tagged union on the wire (``<_T_>pivot</_T_>``), so the
canonical form nests the item under its tag: ``{"pivot": {...}}``.
"""

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

WORKBOOK = "workbook"


def _declare_union(builder: SchemaBuilder, name: str, variants: dict[str, str]) -> str:
    ref = builder.declare(name, is_tagged_union=True)
    builder.add_fields(ref, variants)
    return ref


def _component_fields(translation: str) -> dict:
    """Fields every workbook component (data view, pivot, chart, link) carries."""
    return {
        "applicationId": UNKNOWN,
        "datasets": list_of(STRING),
        "id": UNKNOWN,
        "name": translation,
        "scriptId": STRING,
        "version": STRING,
        "workbook": STRING,
    }


@lru_cache(maxsize=None)
def workbook_schema() -> SchemaGraph:
    builder = SchemaBuilder()
    root = builder.declare(WORKBOOK)
    shared = declare_shared_types(builder, WORKBOOK)
    dependencies = declare_dependencies(builder, WORKBOOK)
    translation = shared["translation"]

    header = builder.declare("workbook_workbook", is_tagged_union=True, ignore_discriminator=True)
    builder.add_fields(header, {
        "applicationId": UNKNOWN,
        "chartIDs": list_of(STRING),
        "dataViewIDs": list_of(STRING),
        "description": translation,
        "id": UNKNOWN,
        "name": translation,
        "ownerId": NUMBER,
        "pivotIDs": list_of(STRING),
        "scriptId": STRING,
        "version": STRING,
    })

    # conditional formatting of data view columns
    rgb_color = builder.declare("workbook_rgbColor")
    builder.add_fields(rgb_color, {"blue": NUMBER, "green": NUMBER, "red": NUMBER})
    color = _declare_union(builder, "workbook_color", {"rgbColor": rgb_color})

    style = builder.declare("workbook_style")
    builder.add_fields(style, {
        "backgroundColor": color,
        "fontColor": color,
        "fontStyle": STRING,
    })

    format_filter = builder.declare("workbook_conditionalFormatFilter")
    builder.add_fields(format_filter, {
        "expressions": list_of(shared["expression"]),
        "operator": shared["operator"],
    })
    format_filter_item = _declare_union(
        builder, "workbook_conditionalFormatFilterItem", {"conditionalFormatFilter": format_filter}
    )

    format_rule = builder.declare("workbook_conditionalFormatRule")
    builder.add_fields(format_rule, {
        "filter": format_filter_item,
        "id": STRING,
        "style": style,
    })
    format_rule_item = _declare_union(
        builder, "workbook_conditionalFormatRuleItem", {"conditionalFormatRule": format_rule}
    )

    cell_format = builder.declare("workbook_cellConditionalFormat")
    builder.add_fields(cell_format, {
        "formatRules": list_of(format_rule_item),
        "id": STRING,
    })
    conditional_format = _declare_union(
        builder, "workbook_conditionalFormat", {"cellConditionalFormat": cell_format}
    )

    # data views
    sorting = builder.declare("workbook_sorting")
    builder.add_fields(sorting, {
        "caseSensitive": (BOOLEAN, {"default_value": False}),
        "direction": STRING,
        "localeId": STRING,
        "nullFirst": (BOOLEAN, {"default_value": False}),
        "order": NUMBER,
    })

    data_view_column = builder.declare("workbook_dataViewColumn")
    builder.add_fields(data_view_column, {
        "conditionalFormat": list_of(conditional_format),
        "criterion": shared["criteria"],
        "customLabel": translation,
        "dataSetColumnId": NUMBER,
        "datasetScriptId": STRING,
        "field": shared["fieldOrFormula"],
        "fieldStateName": STRING,
        "sorting": sorting,
        "targetFieldContext": shared["targetFieldContext"],
        "width": NUMBER,
    })

    data_view = builder.declare("workbook_dataView")
    builder.add_fields(data_view, {
        **_component_fields(translation),
        "columns": list_of(data_view_column),
        "order": NUMBER,
    })
    data_view_item = _declare_union(builder, "workbook_dataViewItem", {"dataView": data_view})

    # pivots, charts and dataset links keep their layout blobs opaque
    pivot = builder.declare("workbook_pivot")
    builder.add_fields(pivot, {
        **_component_fields(translation),
        "definition": (UNKNOWN, {"omit_on_reconstruct": True}),
        "format": (UNKNOWN, {"omit_on_reconstruct": True}),
    })
    pivot_item = _declare_union(builder, "workbook_pivotItem", {"pivot": pivot})

    chart = builder.declare("workbook_chart")
    builder.add_fields(chart, {
        **_component_fields(translation),
        "category": STRING,
        "definition": (UNKNOWN, {"omit_on_reconstruct": True}),
        "format": (UNKNOWN, {"omit_on_reconstruct": True}),
        "subType": STRING,
        "type": STRING,
    })
    chart_item = _declare_union(builder, "workbook_chartItem", {"chart": chart})

    ds_link = builder.declare("workbook_dsLink")
    builder.add_fields(ds_link, {
        **_component_fields(translation),
        "mapping": (UNKNOWN, {"omit_on_reconstruct": True}),
    })
    ds_link_item = _declare_union(builder, "workbook_dsLinkItem", {"dsLink": ds_link})

    builder.add_fields(root, {
        "scriptid": (SERVICE_ID, {
            "required": True,
            "omit_on_reconstruct": True,
            "is_attribute": True,
            "restriction": {"regex": "^custworkbook[0-9a-z_]+"},
        }),
        "name": (STRING, {
            "required": True,
            "omit_on_reconstruct": True,
            "restriction": {"max_length": 50},
        }),
        "dependencies": (dependencies, {"omit_on_reconstruct": True}),
        "definition": (STRING, {"omit_on_reconstruct": True}),
        "Workbook": header,
        "charts": list_of(chart_item),
        "dataViews": list_of(data_view_item),
        "dsLinks": list_of(ds_link_item),
        "pivots": list_of(pivot_item),
    })
    return builder.build(root)
