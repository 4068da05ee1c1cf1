"""
Tests for input loading and the progress report.
"""

import json

from bulkops.processor import IdempotencyKey, ProgressLedger, sha256
from bulkops.processor.io import load_resources, read_csv_rows
from bulkops.processor.report import LocaleProgress, collect_progress, format_progress


def write_csv(path, text):
    path.write_text(text, encoding="utf-8-sig")


class TestReadCsvRows:
    def test_skips_blank_rows_and_strips_bom(self, tmp_path):
        """Blank rows and the BOM are dropped."""
        path = tmp_path / "de.csv"
        write_csv(path, "GID,Title\ngid://shopify/Product/1,Stuhl\n,\n\ngid://shopify/Product/2,Tisch\n")

        rows = read_csv_rows(str(path))

        assert rows == [
            {"GID": "gid://shopify/Product/1", "Title": "Stuhl"},
            {"GID": "gid://shopify/Product/2", "Title": "Tisch"},
        ]


class TestLoadResources:
    def test_keys_by_resource_id(self, tmp_path):
        """Resources are keyed by their id."""
        path = tmp_path / "products.json"
        path.write_text(json.dumps([{
            "resourceId": "gid://shopify/Product/1",
            "translatableContent": [{"key": "title", "digest": "d1", "locale": "en", "value": "Chair"}],
        }]), encoding="utf-8")

        resources = load_resources(str(path))

        assert resources["gid://shopify/Product/1"].find_digest("title") == "d1"


class TestProgressReport:
    """Tests for collect_progress / format_progress."""

    def test_counts_distinct_resources_per_locale(self, tmp_path):
        """Only distinct successfully translated resources count."""
        inputs = tmp_path / "inputs"
        outputs = tmp_path / "outputs"
        inputs.mkdir()
        write_csv(inputs / "de.csv", "GID,Title\n1,a\n2,b\n3,c\n4,d\n")
        write_csv(inputs / "fr.csv", "GID,Title\n1,a\n2,b\n")
        (inputs / "notes.txt").write_text("ignored", encoding="utf-8")

        ledger = ProgressLedger()
        ledger.record_success(IdempotencyKey("1", "de", "title", "d", sha256("a")))
        ledger.record_success(IdempotencyKey("1", "de", "body_html", "d", sha256("x")))
        ledger.record_failure(IdempotencyKey("2", "de", "title", "d", sha256("b")), "boom")
        ledger.save(str(outputs / "de" / "translated.json"))

        results = collect_progress(str(inputs), str(outputs))

        assert results == [
            LocaleProgress(locale="de", input_rows=4, translated=1),
            LocaleProgress(locale="fr", input_rows=2, translated=0),
        ]

    def test_format_includes_total_line(self):
        """Every locale gets a line, followed by a total."""
        lines = format_progress([
            LocaleProgress(locale="de", input_rows=4, translated=2),
            LocaleProgress(locale="fr", input_rows=0, translated=0),
        ])

        assert lines[0] == "de          2 /      4  ( 50.0%)"
        assert lines[1] == "fr          0 /      0  (  0.0%)"
        assert lines[2] == "-" * 40
        assert lines[3] == "TOTAL       2 /      4  ( 50.0%)"

    def test_failed_only_resources_are_not_counted(self, tmp_path):
        """A resource whose only entries are failures is not translated."""
        inputs = tmp_path / "inputs"
        outputs = tmp_path / "outputs"
        inputs.mkdir()
        write_csv(inputs / "it.csv", "GID,Title\n1,a\n")

        ledger = ProgressLedger()
        ledger.record_failure(IdempotencyKey("1", "it", "title", "d", sha256("a")), "boom")
        ledger.save(str(outputs / "it" / "translated.json"))

        results = collect_progress(str(inputs), str(outputs))

        assert results == [LocaleProgress(locale="it", input_rows=1, translated=0)]
