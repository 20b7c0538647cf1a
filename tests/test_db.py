import logging

import pytest
from sqlalchemy import create_engine, inspect

from todo_api.db import (
    DatabaseProvider,
    build_url,
    classify,
    create_db_engine,
    init_db,
    make_session_factory,
    parse_connection_string,
    try_create_db_engine,
)
from todo_api.repositories import SqlAlchemyRepository
from todo_api.schemas import TodoCreate
from todo_api.settings import DEFAULT_ODBC_DRIVER, Settings

SQL_SERVER_CS = "Server=db.internal,1433;Database=todos;User Id=app;Password=s3cret;TrustServerCertificate=True"


class TestClassify:
    @pytest.mark.parametrize(
        "connection_string",
        [
            SQL_SERVER_CS,
            "Server=localhost;Database=todos;Trusted_Connection=True",
            "Database=todos;Server=(localdb)\\mssqllocaldb",
        ],
    )
    def test_server_marker_selects_client_server(self, connection_string):
        assert classify(connection_string) is DatabaseProvider.CLIENT_SERVER

    @pytest.mark.parametrize(
        "connection_string",
        [
            "Data Source=data/app.db",
            "Data Source=/var/lib/todos/app.db",
            "Data Source=:memory:",
            # host,port pairs without a Server= entry stay embedded
            "Data Source=db.internal,1433",
            "server=lowercase-is-not-a-marker",
            "",
        ],
    )
    def test_everything_else_selects_embedded_file(self, connection_string):
        assert classify(connection_string) is DatabaseProvider.EMBEDDED_FILE


class TestConnectionStrings:
    def test_parse_connection_string(self):
        params = parse_connection_string(" Server = db ; Database=todos;;User Id=app ")
        assert params == {"server": "db", "database": "todos", "user id": "app"}

    def test_parse_rejects_segment_without_equals(self):
        with pytest.raises(ValueError):
            parse_connection_string("Data Source=x;garbage")

    def test_build_sqlite_url(self):
        url = build_url("Data Source=data/app.db", DatabaseProvider.EMBEDDED_FILE, DEFAULT_ODBC_DRIVER)
        assert url.drivername == "sqlite"
        assert url.database == "data/app.db"

    def test_build_sqlite_url_requires_data_source(self):
        with pytest.raises(ValueError):
            build_url("Cache=Shared", DatabaseProvider.EMBEDDED_FILE, DEFAULT_ODBC_DRIVER)

    def test_build_sql_server_url(self):
        url = build_url(SQL_SERVER_CS, DatabaseProvider.CLIENT_SERVER, "ODBC Driver 17 for SQL Server")
        assert url.drivername == "mssql+pyodbc"
        odbc = url.query["odbc_connect"]
        assert odbc.startswith("DRIVER={ODBC Driver 17 for SQL Server};")
        assert "SERVER=db.internal,1433" in odbc
        assert "DATABASE=todos" in odbc
        assert "UID=app" in odbc
        assert "PWD=s3cret" in odbc
        assert "TrustServerCertificate=yes" in odbc

    def test_sql_server_url_translates_ado_options(self):
        cs = (
            "Server=db;Database=todos;Integrated Security=SSPI;Encrypt=False;"
            "MultipleActiveResultSets=True;Pooling=true;Max Pool Size=50;Encrypt=strict"
        )
        odbc = build_url(cs, DatabaseProvider.CLIENT_SERVER, DEFAULT_ODBC_DRIVER).query["odbc_connect"]
        assert "Trusted_Connection=yes" in odbc
        assert "MARS_Connection=yes" in odbc
        # the later Encrypt entry wins, and non-boolean values pass through
        assert "Encrypt=strict" in odbc
        assert "Pool" not in odbc
        assert "MultipleActiveResultSets" not in odbc

    def test_sql_server_url_maps_false_to_no(self):
        cs = "Server=db;Trusted_Connection=false;TrustServerCertificate=False"
        odbc = build_url(cs, DatabaseProvider.CLIENT_SERVER, DEFAULT_ODBC_DRIVER).query["odbc_connect"]
        assert "Trusted_Connection=no" in odbc
        assert "TrustServerCertificate=no" in odbc


class TestInitDb:
    def test_creates_schema_and_parent_directory(self, tmp_path):
        db_file = tmp_path / "nested" / "dir" / "app.db"
        engine = create_db_engine(Settings(connection_string=f"Data Source={db_file}"))
        assert init_db(engine) is True
        assert db_file.exists()
        columns = {c["name"] for c in inspect(engine).get_columns("todos")}
        assert columns == {"id", "title", "done"}

    def test_is_idempotent(self, tmp_path):
        engine = create_db_engine(Settings(connection_string=f"Data Source={tmp_path / 'app.db'}"))
        assert init_db(engine) is True
        assert init_db(engine) is True

    def test_failure_is_logged_not_raised(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        engine = create_engine(f"sqlite:///{blocker / 'app.db'}")
        with caplog.at_level(logging.ERROR, logger="todo_api.db"):
            assert init_db(engine) is False
        assert "Database initialization failed" in caplog.text

    @pytest.mark.parametrize("connection_string", ["/tmp/app.db", "Data Source=x;garbage", "Cache=Shared"])
    def test_bad_connection_string_is_logged_not_raised(self, connection_string, caplog):
        with caplog.at_level(logging.ERROR, logger="todo_api.db"):
            assert try_create_db_engine(Settings(connection_string=connection_string)) is None
        assert "Database configuration failed" in caplog.text


class TestRepository:
    @pytest.fixture
    def session_factory(self, tmp_path):
        engine = create_db_engine(Settings(connection_string=f"Data Source={tmp_path / 'app.db'}"))
        init_db(engine)
        return make_session_factory(engine)

    def test_create_assigns_distinct_ids(self, session_factory):
        with session_factory() as session:
            repo = SqlAlchemyRepository(session)
            a = repo.create(TodoCreate(title="a"))
            b = repo.create(TodoCreate(title="b", done=True))
        assert a.id != b.id
        assert (b.title, b.done) == ("b", True)

    def test_list_is_read_only(self, session_factory):
        with session_factory() as session:
            SqlAlchemyRepository(session).create(TodoCreate(title="a"))

        with session_factory() as session:
            items = SqlAlchemyRepository(session).list()
            assert [t.title for t in items] == ["a"]
            assert not session.new
            assert not session.dirty

    def test_list_empty(self, session_factory):
        with session_factory() as session:
            assert SqlAlchemyRepository(session).list() == []
