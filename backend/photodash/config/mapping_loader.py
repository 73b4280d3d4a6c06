"""
Utilities for loading the record field -> Baserow column mapping.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_PATH = Path(__file__).resolve().parent / "field_mappings.yaml"

DEFAULT_FIELDS: Dict[str, Dict[str, Optional[str]]] = {
    "customer_name": {"column": "Customer Name", "fallback": "Unknown"},
    "inbound_outbound": {"column": "Inbound/Outbound", "fallback": "N/A"},
    "order_type": {"column": "Order Type", "fallback": "N/A"},
    "carrier_name": {"column": "Carrier Name", "fallback": "N/A"},
    "invoiced": {"column": "Invoiced", "fallback": None},
    "photo": {"column": "Photo", "fallback": None},
}


@dataclass(frozen=True)
class FieldMapping:
    column: str
    fallback: Optional[str] = None


@lru_cache()
def load_mapping_config(path: Optional[Path] = None) -> Dict[str, Any]:
    config_path = path or CONFIG_PATH
    if not config_path.exists():
        return {}
    with open(config_path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def get_field_mapping(field: str, path: Optional[Path] = None) -> FieldMapping:
    if field not in DEFAULT_FIELDS:
        raise KeyError(f"Unknown record field '{field}'")
    merged = dict(DEFAULT_FIELDS[field])
    configured = (load_mapping_config(path).get("fields") or {}).get(field) or {}
    merged.update({k: v for k, v in configured.items() if k in merged and v is not None})
    return FieldMapping(column=str(merged["column"]), fallback=merged["fallback"])


def get_field_mappings(path: Optional[Path] = None) -> Dict[str, FieldMapping]:
    return {field: get_field_mapping(field, path) for field in DEFAULT_FIELDS}
