"""Unit tests for the individual label strategies.

Strategy selection is exercised against canned schema descriptors; the
readers are exercised against small in-memory databases.
"""

import pytest

from chatlog.config import LabelResolutionConfig
from integrations.wechat.dictionary import load_labels
from integrations.wechat.schema import SchemaDescriptor
from integrations.wechat.session import QuerySession
from integrations.wechat.strategies import (
    HeuristicStrategy,
    InlineListStrategy,
    LinkTable,
    LinkTableStrategy,
    StrategyResult,
    default_strategies,
    detect_link_table,
    label_id_list_text,
    split_label_ids,
)
from tests.helpers import exec_all, make_contacts


def make_session(conn) -> QuerySession:
    """Build a query session the way the resolver does."""
    return QuerySession(conn, SchemaDescriptor.load(conn), load_labels(conn))


class TestSplitLabelIds:
    """Tests for LabelIDList parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1,2,3", [1, 2, 3]),
            (" 3 , 1 ", [3, 1]),
            ("1,,2,", [1, 2]),
            ("0,-1,2", [2]),
            ("a,1b,2", [2]),
            ("1.5,4", [4]),
            ("", []),
            ("   ", []),
            (None, []),
            ("2,2", [2, 2]),
        ],
    )
    def test_parsing(self, raw, expected):
        """Only positive decimal tokens survive, in order."""
        assert split_label_ids(raw) == expected


class TestLabelIdListText:
    """Tests for rendering stored LabelIDList values."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1,2", "1,2"),
            (5, "5"),
            (5.0, "5"),
            (b"3,4", "3,4"),
            (None, None),
        ],
    )
    def test_values(self, value, expected):
        """Numeric and byte values are rendered as text."""
        assert label_id_list_text(value) == expected


class TestStrategyResult:
    """Tests for StrategyResult."""

    def test_empty_not_applicable(self):
        """No associations means not applicable."""
        assert not StrategyResult("x").applicable

    def test_empty_lists_not_applicable(self):
        """Contacts with no names do not count."""
        assert not StrategyResult("x", {"alice": []}).applicable

    def test_add(self):
        """Evidence accumulates in order, duplicates kept."""
        result = StrategyResult("x")
        result.add("alice", "VIP")
        result.add("alice", "VIP")
        assert result.associations == {"alice": ["VIP", "VIP"]}
        assert result.applicable


class TestDetectLinkTable:
    """Tests for junction table selection over canned schemas."""

    def test_first_candidate(self):
        """rcontact_label is preferred."""
        schema = SchemaDescriptor.from_mapping(
            {
                "contact2label": ["username", "label_id_"],
                "rcontact_label": ["username", "label_id_"],
            }
        )
        assert detect_link_table(schema) == LinkTable("rcontact_label")

    def test_candidate_missing_column(self):
        """A candidate missing a column is skipped."""
        schema = SchemaDescriptor.from_mapping(
            {
                "rcontact_label": ["username"],
                "contact_label_map": ["UserName", "LABEL_ID_"],
            }
        )
        assert detect_link_table(schema) == LinkTable("contact_label_map")

    def test_wildcard(self):
        """Tables named like 'label' are tried after the candidates."""
        schema = SchemaDescriptor.from_mapping(
            {
                "contact_label": ["label_id_", "label_name_"],
                "wx_label_rel": ["username", "label_id_"],
            }
        )
        assert detect_link_table(schema) == LinkTable("wx_label_rel")

    def test_wildcard_sorted(self):
        """Wildcard matches are tried in name order."""
        schema = SchemaDescriptor.from_mapping(
            {
                "z_label": ["username", "label_id_"],
                "m_label": ["username", "label_id_"],
            }
        )
        assert detect_link_table(schema) == LinkTable("m_label")

    def test_candidate_case_insensitive(self):
        """Candidate names match tables stored with different case."""
        schema = SchemaDescriptor.from_mapping({"RContact_Label": ["UserName", "Label_ID_"]})
        assert detect_link_table(schema) == LinkTable("RContact_Label")

    def test_wildcard_skips_candidates(self):
        """A candidate already rejected is not retried by the name search."""
        schema = SchemaDescriptor.from_mapping(
            {"RContact_label": ["username"], "x_label": ["username", "label_id_"]}
        )
        assert detect_link_table(schema) == LinkTable("x_label")

    def test_wildcard_disabled(self):
        """Only candidates are tried when the wildcard search is off."""
        schema = SchemaDescriptor.from_mapping({"wx_label_rel": ["username", "label_id_"]})
        assert detect_link_table(schema, wildcard_search=False) is None

    def test_nothing_found(self):
        """No matching table gives None."""
        schema = SchemaDescriptor.from_mapping({"contact": ["username", "remark"]})
        assert detect_link_table(schema) is None

    def test_custom_candidates(self):
        """The candidate list can be overridden."""
        schema = SchemaDescriptor.from_mapping({"tags": ["username", "label_id_"]})
        assert detect_link_table(schema, ("tags",)) == LinkTable("tags")


class TestInlineListStrategy:
    """Tests for InlineListStrategy."""

    def test_reads_column(self, inline_list_db):
        """Ids resolve through the dictionary."""
        session = make_session(inline_list_db)
        result = InlineListStrategy().try_resolve(session, make_contacts("alice", "bob"))
        assert result.associations == {"alice": ["客户", "VIP"]}
        assert result.strategy == "inline_list"

    def test_column_absent(self, link_table_db):
        """Without the column the strategy contributes nothing."""
        session = make_session(link_table_db)
        result = InlineListStrategy().try_resolve(session, make_contacts("carol"))
        assert not result.applicable

    def test_column_name_case_insensitive(self, memory_db):
        """The column is found regardless of case."""
        exec_all(
            memory_db,
            "CREATE TABLE contact (username TEXT, labelidlist TEXT)",
            "CREATE TABLE contact_label (label_id_ INTEGER, label_name_ TEXT)",
            "INSERT INTO contact_label VALUES (1, 'VIP')",
            "INSERT INTO contact VALUES ('alice', '1')",
        )
        result = InlineListStrategy().try_resolve(make_session(memory_db), make_contacts("alice"))
        assert result.associations == {"alice": ["VIP"]}

    def test_integer_column_value(self, memory_db):
        """A single id stored with integer affinity is still read."""
        exec_all(
            memory_db,
            "CREATE TABLE contact (username TEXT, LabelIDList INTEGER)",
            "CREATE TABLE contact_label (label_id_ INTEGER, label_name_ TEXT)",
            "INSERT INTO contact_label VALUES (5, 'VIP')",
            "INSERT INTO contact VALUES ('alice', '5')",
        )
        assert memory_db.execute("SELECT typeof(LabelIDList) FROM contact").fetchone() == (
            "integer",
        )
        result = InlineListStrategy().try_resolve(make_session(memory_db), make_contacts("alice"))
        assert result.associations == {"alice": ["VIP"]}

    def test_table_name_case_insensitive(self, memory_db):
        """A contact table stored as 'Contact' is read."""
        exec_all(
            memory_db,
            "CREATE TABLE Contact (username TEXT, LabelIDList TEXT, remark TEXT)",
            "CREATE TABLE contact_label (label_id_ INTEGER, label_name_ TEXT)",
            "INSERT INTO contact_label VALUES (1, 'VIP')",
            "INSERT INTO Contact VALUES ('alice', '1', '')",
        )
        result = InlineListStrategy().try_resolve(make_session(memory_db), make_contacts("alice"))
        assert result.associations == {"alice": ["VIP"]}

    def test_covers_contacts_not_requested(self, inline_list_db):
        """Every row of the contact table is read in one bulk query."""
        session = make_session(inline_list_db)
        result = InlineListStrategy().try_resolve(session, make_contacts("bob"))
        assert result.associations == {"alice": ["客户", "VIP"]}


class TestLinkTableStrategy:
    """Tests for LinkTableStrategy."""

    def test_reads_rows(self, link_table_db):
        """Rows resolve in row order."""
        session = make_session(link_table_db)
        result = LinkTableStrategy().try_resolve(session, make_contacts("dave"))
        assert result.associations == {"carol": ["朋友"], "dave": ["供应商", "朋友"]}

    def test_null_rows_skipped(self, link_table_db):
        """Rows with a null username or id are ignored."""
        exec_all(link_table_db, "INSERT INTO rcontact_label VALUES (NULL, 1), ('carol', NULL)")
        session = make_session(link_table_db)
        result = LinkTableStrategy().try_resolve(session, make_contacts("carol"))
        assert result.associations["carol"] == ["朋友"]
        assert None not in result.associations


class TestHeuristicStrategy:
    """Tests for HeuristicStrategy."""

    def test_remark_needs_no_query(self, heuristic_db):
        """A remark match is decided without reading the description."""
        session = make_session(heuristic_db)
        exec_all(heuristic_db, "DROP TABLE contact")
        result = HeuristicStrategy().try_resolve(
            session, make_contacts("eva", remarks={"eva": "张三-客户"})
        )
        assert result.associations == {"eva": ["客户"]}

    def test_description_lookup(self, heuristic_db):
        """Descriptions are read one contact at a time."""
        session = make_session(heuristic_db)
        result = HeuristicStrategy().try_resolve(session, make_contacts("frank", "gina", "hank"))
        assert result.associations == {"frank": ["客户"], "hank": ["客户"]}

    def test_english_remark_marker(self, heuristic_db):
        """The English marker counts in remarks too."""
        session = make_session(heuristic_db)
        result = HeuristicStrategy().try_resolve(
            session, make_contacts("gina", remarks={"gina": "Customer Bob"})
        )
        assert result.associations == {"gina": ["客户"]}

    def test_description_in_differently_cased_table(self, memory_db):
        """Descriptions are read from a contact table stored as 'Contact'."""
        exec_all(
            memory_db,
            "CREATE TABLE Contact (username TEXT, remark TEXT, description TEXT)",
            "INSERT INTO Contact VALUES ('ivan', '', '老客户')",
        )
        result = HeuristicStrategy().try_resolve(make_session(memory_db), make_contacts("ivan"))
        assert result.associations == {"ivan": ["客户"]}


class TestDefaultStrategies:
    """Tests for default_strategies."""

    def test_order(self):
        """Strategies run inline list, link table, heuristic."""
        names = [s.name for s in default_strategies()]
        assert names == ["inline_list", "link_table", "heuristic"]

    def test_heuristic_disabled(self):
        """The heuristic tier can be left out."""
        strategies = default_strategies(LabelResolutionConfig(heuristic_fallback=False))
        assert [s.name for s in strategies] == ["inline_list", "link_table"]

    def test_wildcard_flag_passed(self):
        """The wildcard flag reaches the link table strategy."""
        strategies = default_strategies(LabelResolutionConfig(wildcard_search=False))
        assert strategies[1].wildcard_search is False
