"""Rule-based enhancement: adds a fixed catalog of extra API test cases."""

from postman_testgen.generator.base import TestCase, TestType
from postman_testgen.parser.base import ApiEndpoint

# (name, description, action, expected result)
SECURITY_CATALOG = [
    (
        "Missing Authentication Test",
        "Test API without authentication",
        "Send request without authentication credentials",
        "API should return appropriate authentication error",
    ),
    (
        "Insufficient Authorization Test",
        "Test API with insufficient permissions",
        "Send request with authentication but insufficient permissions",
        "API should return appropriate authorization error",
    ),
    (
        "Injection Test",
        "Test for injection vulnerabilities",
        "Send request with potential injection payloads",
        "API should sanitize input and prevent injection attacks",
    ),
    (
        "Parameter Tampering Test",
        "Test for parameter tampering vulnerabilities",
        "Modify request parameters to attempt unauthorized access",
        "API should validate parameters and prevent tampering",
    ),
]

PERFORMANCE_CATALOG = [
    (
        "API Response Time Test",
        "Test API response time",
        "Measure the time it takes for the API to respond to requests",
        "API should respond within acceptable time thresholds",
    ),
    (
        "API Throughput Test",
        "Test API throughput",
        "Measure the number of requests the API can handle per unit of time",
        "API should handle a minimum number of requests per second",
    ),
    (
        "Concurrent Requests Test",
        "Test API performance under concurrent requests",
        "Send multiple concurrent requests to the API",
        "API should maintain response time under concurrent load",
    ),
    (
        "Data Volume Test",
        "Test API performance with large data volumes",
        "Send requests with large data payloads and retrieve large responses",
        "API should handle large data volumes efficiently",
    ),
    (
        "Long-Running Request Test",
        "Test API performance for long-running operations",
        "Initiate long-running operations and measure performance",
        "API should efficiently handle long-running operations",
    ),
]

# (scenario, action, expected result)
EDGE_CASE_CATALOG = [
    ("Missing Required Parameters", "Send request without required parameters", "API should return appropriate error response"),
    ("Invalid Parameter Values", "Send request with invalid parameter values", "API should return appropriate error response"),
    ("Rate Limiting", "Send multiple requests in quick succession", "API should handle rate limiting appropriately"),
    ("Large Payload", "Send request with a very large payload", "API should handle large payloads appropriately"),
]

EDGE_CASE_KEYWORDS = ("edge case", "validation", "invalid", "empty", "large", "missing")
SECURITY_KEYWORDS = ("security", "xss", "csrf", "injection", "authentication", "authorization")

MIN_EDGE_CASES = 5
MIN_SECURITY_TESTS = 4
MIN_PERFORMANCE_TESTS = 2


class RuleBasedEnhancer:
    """Default enhancer: deterministic, no network access."""

    def enhance(self, endpoints: list[ApiEndpoint], cases: list[TestCase]) -> list[TestCase]:
        enhanced = list(cases)
        enhanced.append(self.authentication_case(endpoints))
        enhanced.append(self.load_case(endpoints))
        enhanced.extend(self.performance_cases())
        enhanced.extend(self.security_cases())
        for endpoint in endpoints:
            enhanced.extend(self.edge_cases(endpoint))
        return enhanced

    def authentication_case(self, endpoints: list[ApiEndpoint]) -> TestCase:
        case = TestCase(
            name="API Authentication Test",
            summary="Test API authentication with various token scenarios",
            description="Test API authentication with various token scenarios",
            type=TestType.SECURITY,
            tags=["api", "security", "authentication"],
        )
        case.add_step("Authenticate with valid credentials", "Authentication should succeed and return valid token")
        if endpoints:
            ep = endpoints[0]
            case.add_step(
                f"Send {ep.method} request to {ep.url} with authentication token",
                "Request should succeed with appropriate response",
            )
            case.add_step("Send the same request with invalid token", "Request should fail with authentication error")
            case.add_step(
                "Send the same request with expired token",
                "Request should fail with authentication error or refresh token should be used",
            )
        return case

    def load_case(self, endpoints: list[ApiEndpoint]) -> TestCase:
        case = TestCase(
            name="API Performance Test",
            summary="Test API performance under load",
            description="Test API performance under load",
            type=TestType.PERFORMANCE,
            tags=["api", "performance"],
        )
        if endpoints:
            ep = endpoints[0]
            case.add_step(
                f"Send {ep.method} request to {ep.url} and measure response time",
                "Response time should be within acceptable limits",
            )
            case.add_step(
                f"Send multiple concurrent requests to {ep.url}",
                "All requests should be handled appropriately with reasonable response times",
            )
        return case

    def security_cases(self) -> list[TestCase]:
        return [_catalog_case(entry, TestType.SECURITY, "security") for entry in SECURITY_CATALOG]

    def performance_cases(self) -> list[TestCase]:
        return [_catalog_case(entry, TestType.PERFORMANCE, "performance") for entry in PERFORMANCE_CATALOG]

    def edge_cases(self, endpoint: ApiEndpoint) -> list[TestCase]:
        cases = []
        for scenario, action, expected in EDGE_CASE_CATALOG:
            case = TestCase(
                name=f"{endpoint.method} {endpoint.url} - {scenario}",
                summary=f"Test {endpoint.method} {endpoint.url} with {scenario.lower()}",
                description=f"Test {endpoint.method} {endpoint.url} with {scenario.lower()}",
                type=TestType.EDGE_CASE,
                source_url=endpoint.url,
                tags=["api", "edge-case"],
            )
            case.add_step(
                f"Prepare {endpoint.method} request to {endpoint.url}",
                "Request should be prepared with appropriate headers",
            )
            case.add_step(action, expected)
            cases.append(case)
        return cases

    def analyze_coverage_gaps(self, cases: list[TestCase]) -> str:
        """Plain-text report of case counts per type with recommendations."""
        counts = {t: 0 for t in TestType}
        for case in cases:
            counts[case.type] += 1

        edge_cases = sum(1 for c in cases if c.type == TestType.EDGE_CASE or _name_has(c, EDGE_CASE_KEYWORDS))
        security_tests = sum(1 for c in cases if c.type == TestType.SECURITY or _name_has(c, SECURITY_KEYWORDS))
        performance_tests = counts[TestType.PERFORMANCE]

        lines = ["Functional Coverage Analysis:"]
        lines += [f"- {t.value} tests: {n} test cases" for t, n in counts.items()]
        lines += ["", "Edge Case Coverage Analysis:", f"- Edge cases: {edge_cases} test cases"]
        lines += ["", "Security Coverage Analysis:", f"- Security tests: {security_tests} test cases"]
        lines += ["", "Performance Coverage Analysis:", f"- Performance tests: {performance_tests} test cases"]

        lines += ["", "Recommendations:"]
        if edge_cases < MIN_EDGE_CASES:
            lines.append("- Increase edge case coverage")
        if security_tests < MIN_SECURITY_TESTS:
            lines.append("- Increase security test coverage")
        if performance_tests < MIN_PERFORMANCE_TESTS:
            lines.append("- Increase performance test coverage")
        return "\n".join(lines) + "\n"


def _catalog_case(entry: tuple[str, str, str, str], test_type: TestType, tag: str) -> TestCase:
    name, description, action, expected = entry
    case = TestCase(name=name, summary=description, description=description, type=test_type, tags=["api", tag])
    case.add_step(action, expected)
    return case


def _name_has(case: TestCase, keywords: tuple[str, ...]) -> bool:
    name = case.name.lower()
    return any(keyword in name for keyword in keywords)
