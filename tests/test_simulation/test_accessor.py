# tests/test_simulation/test_accessor.py
import numpy as np


class TestLabAccessor:

    def test_csv_columns_start_with_base_columns(self, session_factory):
        accessor = session_factory("rlc_resonance").accessor()
        columns = accessor.csv_columns()
        assert columns[:4] == ["index", "V", "I", "P"]
        assert "f0" in columns and "Z" in columns

    def test_csv_rows_follow_columns_with_blank_for_missing(self, session_factory, bench_scenario):
        session = session_factory("test_bench", {"tag": "A"})
        session.step(0.1)
        session.step(0.1)
        accessor = session.accessor()
        rows = accessor.csv_rows()
        assert len(rows) == 2
        assert list(rows[0]) == ["index", "V", "I", "P", "tag", "maybe"]
        assert rows[1]["index"] == 1
        assert rows[1]["tag"] == "A"
        assert rows[1]["maybe"] == ""

    def test_series(self, session_factory):
        session = session_factory("generic")
        for vs in (1.0, 2.0, 3.0):
            session.update_params(Vs=vs)
            session.step(0.06)
        np.testing.assert_allclose(session.accessor().series("V"), [1.0, 2.0, 3.0])

    def test_latest_and_empty_curve(self, session_factory):
        accessor = session_factory("generic").accessor()
        assert accessor.latest() is None
        assert accessor.mode == "continuous"
        assert len(accessor.sweep_curve()) == 0

    def test_accessor_does_not_mutate(self, session_factory):
        session = session_factory("generic")
        session.step(0.06)
        accessor = session.accessor()
        accessor.history().clear()
        accessor.csv_rows()
        assert len(session.accessor().history()) == 1
