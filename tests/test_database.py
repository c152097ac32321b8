from storefront.data.database import connect_args_for


class TestConnectArgs:
    def test_postgres_gets_connect_and_statement_timeouts(self):
        args = connect_args_for("postgresql://u:p@db:5432/storefront", timeout=7.5)

        assert args["connect_timeout"] == 7
        assert args["options"] == "-c statement_timeout=7500"

    def test_sqlite_waits_for_lock_and_allows_threads(self):
        assert connect_args_for("sqlite:///tmp/x.db", timeout=3) == {"check_same_thread": False, "timeout": 3}

    def test_other_drivers_untouched(self):
        assert connect_args_for("mysql://u:p@db/storefront") == {}
