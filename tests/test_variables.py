from postman_testgen.parser.variables import as_text, extract_variables, resolve_variables


class TestResolveVariables:
    def test_folder_wins_over_collection(self):
        assert resolve_variables("{{x}}", {"x": "C"}, {"x": "F"}) == "F"

    def test_collection_only(self):
        assert resolve_variables("{{x}}", {"x": "C"}, {}) == "C"

    def test_unknown_placeholder_unchanged(self):
        assert resolve_variables("{{x}}", {}, {}) == "{{x}}"

    def test_scopes_combine(self):
        result = resolve_variables("{{host}}/{{version}}/users", {"host": "https://api", "version": "v1"}, {"version": "v2"})
        assert result == "https://api/v2/users"

    def test_none_and_empty_passthrough(self):
        assert resolve_variables(None, {"x": "1"}, {}) is None
        assert resolve_variables("", {"x": "1"}, {}) == ""

    def test_not_transitive_within_scope(self):
        # the inserted "{{b}}" is not resolved again
        assert resolve_variables("{{a}}", {}, {"b": "B", "a": "{{b}}"}) == "{{b}}"

    def test_folder_value_filled_by_later_collection_entry(self):
        # single pass: collection entries run after folder entries
        assert resolve_variables("{{a}}", {"b": "B"}, {"a": "{{b}}"}) == "B"

    def test_literal_match_only(self):
        assert resolve_variables("{{ x }} {x} {{x}}", {"x": "1"}, {}) == "{{ x }} {x} 1"


class TestExtractVariables:
    def test_reads_key_values(self):
        assert extract_variables([{"key": "a", "value": "1"}, {"key": "b", "value": 2}]) == {"a": "1", "b": "2"}

    def test_skips_empty_keys_and_non_objects(self):
        assert extract_variables([{"key": "", "value": "x"}, "junk", {"value": "y"}]) == {}

    def test_missing_value_is_empty(self):
        assert extract_variables([{"key": "a"}, {"key": "b", "value": None}]) == {"a": "", "b": ""}

    def test_non_list_ignored(self):
        assert extract_variables({"key": "a"}) == {}
        assert extract_variables(None) == {}


class TestAsText:
    def test_scalars(self):
        assert as_text("x") == "x"
        assert as_text(3) == "3"
        assert as_text(True) == "true"

    def test_default_for_null_and_containers(self):
        assert as_text(None, "d") == "d"
        assert as_text([1], "d") == "d"
        assert as_text({}, "d") == "d"
