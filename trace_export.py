"""Save a collected SHA-256 trace to YAML or to a SQLite database.

SQLite Schema:
    - metadata: input_text, encoding, bit_length, block_count, digest
    - schedules: block_index, word_index, word
    - rounds: block_index, round_index, a..h, s0, s1, ch, maj, temp1, temp2
    - block_digests: block_index, register_index, value
"""

from __future__ import annotations

import logging
import os
import sqlite3
from typing import IO, Any, Dict, Union

import yaml

from stages import REGISTER_NAMES, ROUND_VALUE_NAMES, Trace


logger = logging.getLogger(__name__)

BATCH_SIZE = 1000


def trace_to_dict(trace: Trace) -> Dict[str, Any]:
    """Return a plain-data view of `trace` (dicts, lists and strings only)."""
    return {
        "input_text": trace.text,
        "encoding": trace.encoding,
        "binary_form": trace.binary,
        "padded_form": trace.padded,
        "blocks": [
            {
                "block_index": block.index,
                "schedule": list(block.schedule),
                "rounds": [
                    {k: v for k, v in record.to_dict().items() if k not in ("kind", "block")}
                    for record in block.rounds
                ],
                "registers": list(block.registers),
            }
            for block in trace.blocks
        ],
        "final_digest": trace.digest,
    }


def write_yaml(trace: Trace, output: Union[str, IO[str]]) -> None:
    """Dump `trace` as YAML to a path or an open text stream."""
    data = trace_to_dict(trace)
    if isinstance(output, str):
        with open(output, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        logger.info("Wrote YAML trace with %d block(s) to %s", trace.block_count, output)
    else:
        yaml.safe_dump(data, output, default_flow_style=False, sort_keys=False)


def load_yaml(path: str) -> Dict[str, Any]:
    """Read back a trace written by `write_yaml`."""
    with open(path, "r") as f:
        return yaml.safe_load(f)


def write_sqlite(trace: Trace, output_path: str) -> None:
    """Write `trace` to a fresh SQLite database at `output_path`."""
    # Remove existing database if present
    if os.path.exists(output_path):
        os.remove(output_path)

    round_columns = [name.lower() for name in REGISTER_NAMES + ROUND_VALUE_NAMES]

    conn = sqlite3.connect(output_path)
    try:
        cursor = conn.cursor()
        cursor.executescript(f"""
            CREATE TABLE metadata (
                input_text TEXT NOT NULL,
                encoding TEXT NOT NULL,
                bit_length INTEGER NOT NULL,
                block_count INTEGER NOT NULL,
                digest TEXT NOT NULL
            );

            CREATE TABLE schedules (
                block_index INTEGER NOT NULL,
                word_index INTEGER NOT NULL,
                word TEXT NOT NULL
            );

            CREATE TABLE rounds (
                block_index INTEGER NOT NULL,
                round_index INTEGER NOT NULL,
                {", ".join(f"{col} TEXT NOT NULL" for col in round_columns)}
            );

            CREATE TABLE block_digests (
                block_index INTEGER NOT NULL,
                register_index INTEGER NOT NULL,
                value TEXT NOT NULL
            );

            CREATE INDEX idx_rounds_block ON rounds(block_index, round_index);
        """)

        cursor.execute(
            "INSERT INTO metadata VALUES (?, ?, ?, ?, ?)",
            (trace.text, trace.encoding, len(trace.binary), trace.block_count, trace.digest),
        )

        round_sql = f"INSERT INTO rounds VALUES ({', '.join('?' * (len(round_columns) + 2))})"
        round_batch = []
        for block in trace.blocks:
            cursor.executemany(
                "INSERT INTO schedules VALUES (?, ?, ?)",
                [(block.index, i, word) for i, word in enumerate(block.schedule)],
            )
            cursor.executemany(
                "INSERT INTO block_digests VALUES (?, ?, ?)",
                [(block.index, i, value) for i, value in enumerate(block.registers)],
            )
            for record in block.rounds:
                round_batch.append(
                    (block.index, record.round)
                    + tuple(getattr(record, name) for name in REGISTER_NAMES + ROUND_VALUE_NAMES)
                )

            # Commit batch periodically
            if len(round_batch) >= BATCH_SIZE:
                cursor.executemany(round_sql, round_batch)
                conn.commit()
                round_batch = []

        if round_batch:
            cursor.executemany(round_sql, round_batch)
        conn.commit()
    finally:
        conn.close()

    logger.info("Wrote SQLite trace with %d block(s) to %s", trace.block_count, output_path)
