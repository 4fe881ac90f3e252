"""
generate_json_schema
====================

This script exports JSON Schema definitions for the data contracts the
order desk exchanges with its collaborators.  It uses Pydantic's
built‑in JSON schema generator to produce schemas for
``ValidatedOrder``, ``OrderAck``, ``BalanceSnapshot``, ``BookLevel``,
``AggregatedLevel`` and ``OrderBookSnapshot`` defined in
``orderdesk/src/orderdesk/models.py``.  The resulting schema can be
used to generate types for the trading screen front end (e.g.,
TypeScript) using tools such as `json-schema-to-typescript`.

Usage
-----

Run this script from the project root and specify an output file:

.. code-block:: bash

    python scripts/generate_json_schema.py --out schemas.json

If no output file is provided, the schema will be printed to stdout.
"""

from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from orderdesk.models import (
    AggregatedLevel,
    BalanceSnapshot,
    BookLevel,
    OrderAck,
    OrderBookSnapshot,
    ValidatedOrder,
)


def collect_models() -> Dict[str, Type[BaseModel]]:
    return {
        "ValidatedOrder": ValidatedOrder,
        "OrderAck": OrderAck,
        "BalanceSnapshot": BalanceSnapshot,
        "BookLevel": BookLevel,
        "AggregatedLevel": AggregatedLevel,
        "OrderBookSnapshot": OrderBookSnapshot,
    }


def generate_schema(models: Dict[str, Type[BaseModel]]) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "definitions": {},
    }
    for name, model in models.items():
        # Pydantic puts the title at top level; we file each model under definitions
        schema["definitions"][name] = model.model_json_schema()
    return schema


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Generate JSON schemas for order desk contracts.")
    ap.add_argument("--out", help="Output file path. Defaults to stdout if omitted.")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    schema = generate_schema(collect_models())
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(schema, f, indent=2)
        print(f"Schema written to {args.out}")
    else:
        print(json.dumps(schema, indent=2))


if __name__ == "__main__":
    main()
