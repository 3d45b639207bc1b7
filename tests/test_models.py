from postman_testgen.generator.base import TestCase, TestType
from postman_testgen.parser.base import ApiEndpoint, ExampleResponse


class TestApiEndpoint:
    def test_defaults(self):
        ep = ApiEndpoint()
        assert ep.name == "Unnamed Request"
        assert ep.method == "GET"
        assert ep.collection_name == "Unnamed Collection"
        assert ep.query_params == {}
        assert ep.test_script is None

    def test_full_path(self):
        assert ApiEndpoint(name="Login").full_path == "Login"
        assert ApiEndpoint(name="Login", folder_path="Auth/v1").full_path == "Auth/v1/Login"

    def test_short_name_camel_case(self):
        assert ApiEndpoint(name="List all users").short_name == "listAllUsers"
        assert ApiEndpoint(name="Get_User-By ID").short_name == "getUserByID"

    def test_short_name_from_method_and_path(self):
        ep = ApiEndpoint(name="???", method="DELETE", path="/users/{id}")
        assert ep.short_name == "deleteEndpointId"

    def test_short_name_prefixed_when_starting_with_digit(self):
        assert ApiEndpoint(name="2fa verify").short_name == "endpoint2faVerify"

    def test_expected_status_from_example(self):
        ep = ApiEndpoint(method="POST", example_responses=[ExampleResponse(code=202), ExampleResponse(code=400)])
        assert ep.expected_status_code == 202

    def test_expected_status_by_method(self):
        assert ApiEndpoint(method="GET").expected_status_code == 200
        assert ApiEndpoint(method="POST").expected_status_code == 201
        assert ApiEndpoint(method="PUT").expected_status_code == 200
        assert ApiEndpoint(method="PATCH").expected_status_code == 200
        assert ApiEndpoint(method="DELETE").expected_status_code == 204
        assert ApiEndpoint(method="OPTIONS").expected_status_code == 200

    def test_summary_prefers_path(self):
        assert ApiEndpoint(method="GET", url="https://h/a/b", path="/a/b").summary == "GET /a/b"
        assert ApiEndpoint(method="GET", url="https://h/a/b").summary == "GET https://h/a/b"

    def test_serialization_roundtrip(self):
        ep = ApiEndpoint(
            name="Create",
            method="POST",
            example_responses=[ExampleResponse(code=201, body='{"id": 1}', json_body={"id": 1})],
        )
        ep2 = ApiEndpoint(**ep.model_dump())
        assert ep2 == ep


class TestTestCase:
    def test_add_step_numbers(self):
        case = TestCase(name="Login works")
        case.add_step("Open", "Opened")
        step = case.add_step("Submit", "Submitted", user="bob")
        assert [s.step_number for s in case.steps] == [1, 2]
        assert step.test_data == {"user": "bob"}

    def test_ids_are_unique(self):
        assert TestCase(name="a").id != TestCase(name="b").id

    def test_jira_format(self):
        case = TestCase(
            name="API Test: Login",
            description="Checks login",
            preconditions="1. Service up",
            metadata={"method": "POST"},
            tags=["api", "post"],
        )
        case.add_step("Send request", "200 OK")
        text = case.to_jira_format()
        assert text.startswith("h1. API Test: Login\n")
        assert "h2. Description\nChecks login" in text
        assert "h2. Preconditions\n1. Service up" in text
        assert "||Step||Action||Expected Result||\n|1|Send request|200 OK|" in text
        assert "* method: POST" in text
        assert "h2. Tags\n* api\n* post" in text

    def test_jira_format_omits_empty_sections(self):
        text = TestCase(name="x").to_jira_format()
        assert "Description" not in text
        assert "Metadata" not in text
        assert "Tags" not in text

    def test_method_name(self):
        assert TestCase(name="API Test: List users!").to_method_name() == "api_test_list_users"
        assert TestCase(name="123 go").to_method_name() == "test_123_go"
        assert TestCase(name="!!!").to_method_name() == "test_"

    def test_default_type(self):
        assert TestCase(name="x").type == TestType.API
