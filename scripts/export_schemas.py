"""Export JSON schemas for StoredSettings and StoredDocument."""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from backend.app.models import StoredDocument, StoredSettings  # noqa: E402


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    # Export StoredSettings schema (settings.json)
    settings_schema = StoredSettings.model_json_schema(by_alias=True)
    settings_path = schemas_dir / "StoredSettings.schema.json"
    with open(settings_path, "w") as f:
        json.dump(settings_schema, f, indent=2)
    print(f"Exported StoredSettings schema to {settings_path}")

    # Export StoredDocument schema (document records)
    document_schema = StoredDocument.model_json_schema(by_alias=True)
    document_path = schemas_dir / "StoredDocument.schema.json"
    with open(document_path, "w") as f:
        json.dump(document_schema, f, indent=2)
    print(f"Exported StoredDocument schema to {document_path}")


if __name__ == "__main__":
    main()
