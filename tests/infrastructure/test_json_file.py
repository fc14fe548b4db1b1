"""Tests for the shared JSON store file: locking and atomic writes."""

import os
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from fulfillment.infrastructure.persistence import json_file
from fulfillment.infrastructure.persistence.json_file import JsonFile
from fulfillment.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from tests.fakes import make_product

SRC_DIR = Path(json_file.__file__).resolve().parents[3]

# Takes one unit at a time and prints how many it got
WORKER = textwrap.dedent(
    """
    import sys
    from decimal import Decimal
    from pathlib import Path

    from fulfillment.domain.model.inventory import StockMovement
    from fulfillment.infrastructure.persistence.json_product_repository import (
        JsonProductRepository,
    )

    repo = JsonProductRepository(Path(sys.argv[1]))
    taken = 0
    for _ in range(int(sys.argv[2])):
        if repo.apply_movement(StockMovement("1", -1, 1, Decimal("15"))) is not None:
            taken += 1
    print(taken)
    """
)


class TestAtomicWrites:

    def test_failed_write_keeps_previous_content(self, tmp_path):
        store = JsonFile(tmp_path / "orders.json")
        store.persist([{"id": 1}])

        with pytest.raises(TypeError):
            store.persist([{"id": 2, "bad": object()}])

        assert store.load() == [{"id": 1}]

    def test_no_temporary_files_left(self, tmp_path):
        store = JsonFile(tmp_path / "orders.json")
        store.persist([{"id": 1}])
        store.persist([{"id": 2}])

        assert not list(tmp_path.glob("*.tmp"))
        assert store.load() == [{"id": 2}]


class TestStoreLock:

    def test_shared_between_instances(self, tmp_path):
        first = JsonFile(tmp_path / "orders.json")
        second = JsonFile(tmp_path / "orders.json")
        assert first.lock is second.lock

    def test_reentrant(self, tmp_path):
        store = JsonFile(tmp_path / "orders.json")
        with store.lock:
            with store.lock:
                store.persist([{"id": 1}])
            assert store.load() == [{"id": 1}]
        assert (tmp_path / ".orders.json.lock").exists()

    def test_processes_never_oversell(self, tmp_path):
        path = tmp_path / "products.json"
        JsonProductRepository(path).save(make_product("1", stock=12))

        workers = [
            subprocess.Popen(
                [sys.executable, "-c", WORKER, str(path), "6"],
                stdout=subprocess.PIPE,
                text=True,
                env={**os.environ, "PYTHONPATH": str(SRC_DIR)},
            )
            for _ in range(4)
        ]
        taken = [int(worker.communicate(timeout=60)[0]) for worker in workers]

        product = JsonProductRepository(path).get_by_id("1")
        assert sum(taken) == 12
        assert product.stock_quantity == 0
        assert product.sales_count == 12
