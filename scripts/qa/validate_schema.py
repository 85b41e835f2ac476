# scripts/qa/validate_schema.py
#
# Check a generated JSON file (image map, image cache, news export) against
# its schema in data/schema/.
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from jsonschema import Draft202012Validator

MAX_REPORTED = 50


def validate(data: Any, schema: dict) -> List[str]:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.path)))
    out = []
    for e in errors:
        where = "/".join(map(str, e.path)) or "(root)"
        out.append(f"Schema error at {where}: {e.message}")
    return out


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 2:
        print("Usage: python -m scripts.qa.validate_schema src/data/image-map.json data/schema/image-map.schema.json")
        return 2

    data_path = Path(argv[0])
    schema_path = Path(argv[1])

    data = json.loads(data_path.read_text(encoding="utf-8"))
    schema = json.loads(schema_path.read_text(encoding="utf-8"))

    errors = validate(data, schema)
    if errors:
        for line in errors[:MAX_REPORTED]:
            print(line)
        print(f"Total errors: {len(errors)}")
        return 1

    print("Schema validation OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
