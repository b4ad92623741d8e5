"""Generate JSON descriptions of the document schemas and the config model into schemas/."""

import json
from pathlib import Path

from analyticdefs.analytics import DOCUMENT_KINDS
from analyticdefs.config import TransformConfig


def generate_schemas():
    """Write one schema graph description per document kind, plus the config JSON schema."""
    schemas_dir = Path(__file__).parent.parent / "schemas"
    schemas_dir.mkdir(exist_ok=True)

    for name, kind in sorted(DOCUMENT_KINDS.items()):
        schema_path = schemas_dir / f"{name}.schema.json"
        with open(schema_path, 'w', encoding='utf-8') as f:
            json.dump(kind.schema.describe(), f, indent=2, ensure_ascii=False)
        print(f"Generated: {schema_path}")

    config_schema_path = schemas_dir / "transform_config.schema.json"
    with open(config_schema_path, 'w', encoding='utf-8') as f:
        json.dump(TransformConfig.model_json_schema(), f, indent=2, ensure_ascii=False)
    print(f"Generated: {config_schema_path}")

    print("\nSchema generation complete!")


if __name__ == "__main__":
    generate_schemas()
