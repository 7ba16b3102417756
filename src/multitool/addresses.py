"""Single-record files holding the latest deployed contract address."""

from __future__ import annotations

import logging
from pathlib import Path

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def write_contract_address(path: str | Path, address: str) -> None:
    Path(path).write_text(address + "\n", encoding="utf-8")


def read_contract_address(
    path: str | Path, logger: logging.Logger | None = None
) -> str:
    """Read an address back, or return "" if the file cannot be read."""
    logger = logger or logging.getLogger("multitool")
    try:
        return Path(path).read_text(encoding="utf-8").strip()
    except OSError as exc:
        logger.error(f"Could not read contract address from {path}: {exc}")
        return ""
