"""
Tests for the command line entrypoint.
"""

import importlib
from unittest.mock import patch

import pytest
from sqlalchemy import inspect

from crudapi.__main__ import build_parser, main
from crudapi.db.sql_client import SQLClient
from crudapi.server import APPS


class TestParser:
    def test_serve_defaults(self):
        args = build_parser().parse_args(["serve"])
        assert args.app == "memory"
        assert args.port is None
        assert args.reload is False

    def test_unknown_app_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["serve", "--app", "graphql"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    def test_serve_runs_uvicorn_with_import_string(self):
        with patch("crudapi.__main__.uvicorn.run") as mock_run:
            assert main(["serve", "--app", "database", "--host", "127.0.0.1", "--port", "8123"]) == 0

        mock_run.assert_called_once_with(
            "crudapi.server.database_app:create_app",
            factory=True,
            host="127.0.0.1",
            port=8123,
            reload=False,
        )

    def test_app_targets_are_factories(self):
        for target in APPS.values():
            module_name, attr = target.split(":")
            module = importlib.import_module(module_name)
            assert callable(getattr(module, attr))
            # Importing a module builds no app and opens no log files
            assert not hasattr(module, "app")

    def test_init_db_creates_tables(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'tasks.db'}"

        assert main(["init-db", "--url", url]) == 0

        client = SQLClient(url)
        try:
            tables = set(inspect(client.connection).get_table_names())
        finally:
            client.close()
        assert {"users", "tasks"} <= tables

    def test_init_db_failure_returns_1(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'missing' / 'tasks.db'}"
        assert main(["init-db", "--url", url]) == 1
