"""Exception hierarchy for postman-testgen.

    TestGenError
    ├── CollectionFormatError   input is not a supported collection
    ├── GenerationError         nothing to generate from
    └── ConfigError             unreadable or invalid config file
"""


class TestGenError(Exception):
    """Base class for every error raised by this package."""

    __test__ = False  # not a pytest test class

    def __init__(self, message: str = "", cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class CollectionFormatError(TestGenError):
    """The document cannot be analyzed as a Postman Collection v2.x."""


class GenerationError(TestGenError):
    """A generator was given no endpoints or test cases."""


class ConfigError(TestGenError):
    """The configuration file could not be loaded."""
