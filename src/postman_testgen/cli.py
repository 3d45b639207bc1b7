"""CLI entry point for postman-testgen."""

import json
import logging
from contextlib import contextmanager
from pathlib import Path

import click

from postman_testgen.config import TestGenConfig, load_config
from postman_testgen.enhance.factory import ENHANCERS, create_enhancer
from postman_testgen.enhance.rules import RuleBasedEnhancer
from postman_testgen.errors import TestGenError
from postman_testgen.generator.base import TestCase
from postman_testgen.generator.code import CodeGenerator
from postman_testgen.generator.testcase import OUTPUT_FORMATS, TestCaseGenerator, render_cases
from postman_testgen.generator.validator import validate_files
from postman_testgen.log import configure_logging
from postman_testgen.parser.base import ApiEndpoint
from postman_testgen.parser.postman import PostmanCollectionAnalyzer

CASE_FILE_EXTENSIONS = {"jira": "txt", "markdown": "md", "yaml": "yaml"}

logger = logging.getLogger(__name__)


@contextmanager
def _reported_errors():
    """Turn package errors into a clean CLI failure (exit code 1)."""
    try:
        yield
    except TestGenError as e:
        raise click.ClickException(str(e)) from e


def _parse_collection(collection_path: Path) -> list[ApiEndpoint]:
    click.echo(f"Parsing {collection_path}...")
    with _reported_errors():
        endpoints = PostmanCollectionAnalyzer(logger=logger).analyze_collection(collection_path)
    click.echo(f"Found {len(endpoints)} endpoints.")
    return endpoints


def _build_cases(endpoints: list[ApiEndpoint], config: TestGenConfig) -> list[TestCase]:
    with _reported_errors():
        cases = TestCaseGenerator().generate(endpoints)
    if config.enhance:
        click.echo(f"Enhancing test cases ({config.enhancer})...")
        cases = create_enhancer(config.enhancer, model=config.model).enhance(endpoints, cases)
    return cases


def _write_cases(cases: list[TestCase], path: Path, fmt: str) -> None:
    text = render_cases(cases, fmt)
    # checked under its format's extension, whatever the output file is called
    check_name = path.with_suffix(f".{CASE_FILE_EXTENSIONS[fmt]}").name
    for fname, err in validate_files({check_name: text}).items():
        click.echo(f"  Validation error in {fname}: {err}", err=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _write_code(endpoints: list[ApiEndpoint], output: Path, config: TestGenConfig) -> int:
    with _reported_errors():
        files = CodeGenerator(base_url_env=config.base_url_env).generate(endpoints)

    errors = validate_files(files, collect=config.validate_code)
    for fname, err in errors.items():
        click.echo(f"  Validation error in {fname}: {err}", err=True)

    output.mkdir(parents=True, exist_ok=True)
    for filename, content in files.items():
        file_path = output / filename
        file_path.write_text(content, encoding="utf-8")
        click.echo(f"  Created {file_path}")
    return len(files)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with default generation settings.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Path | None):
    """Postman TestGen: generate API tests and test case documents from Postman collections."""
    configure_logging(verbose)
    with _reported_errors():
        ctx.obj = load_config(config_path)


@main.command()
@click.argument("collection_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the endpoints as JSON.")
def analyze(collection_path: Path, as_json: bool):
    """List the endpoints found in a collection."""
    with _reported_errors():
        endpoints = PostmanCollectionAnalyzer(logger=logger).analyze_collection(collection_path)

    if as_json:
        click.echo(json.dumps([ep.model_dump(mode="json") for ep in endpoints], indent=2, ensure_ascii=False))
        return
    for ep in endpoints:
        click.echo(f"{ep.method:<7} {ep.url}  [{ep.full_path}] -> {ep.expected_status_code}")


@main.command()
@click.argument("collection_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the test case document.")
@click.option("--format", "fmt", default=None, type=click.Choice(OUTPUT_FORMATS), help="Document format.")
@click.option("--enhance/--no-enhance", default=None, help="Add extra edge, security and performance cases.")
@click.option("--enhancer", default=None, type=click.Choice(ENHANCERS), help="Enhancement strategy.")
@click.option("--model", default=None, help="LLM model for the llm enhancer.")
@click.pass_obj
def gen_cases(config: TestGenConfig, collection_path: Path, output: Path, fmt, enhance, enhancer, model):
    """Generate a test case document from a Postman collection."""
    config = config.merged(output_format=fmt, enhance=enhance, enhancer=enhancer, model=model)
    endpoints = _parse_collection(collection_path)

    cases = _build_cases(endpoints, config)
    _write_cases(cases, output, config.output_format)
    click.echo(f"{len(cases)} test cases saved to {output}")


@main.command()
@click.argument("collection_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output directory for generated code.")
@click.option("--base-url-env", default=None, help="Environment variable holding the API base URL.")
@click.option("--validate/--no-validate", "validate", default=None, help="Run pytest --collect-only on the generated suite.")
@click.pass_obj
def gen_code(config: TestGenConfig, collection_path: Path, output: Path, base_url_env, validate):
    """Generate a pytest + requests suite from a Postman collection."""
    config = config.merged(base_url_env=base_url_env, validate_code=validate)
    endpoints = _parse_collection(collection_path)

    click.echo("Generating code...")
    count = _write_code(endpoints, output, config)
    click.echo(f"Generated {count} files in {output}")


@main.command()
@click.argument("collection_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output directory for all generated files.")
@click.option("--format", "fmt", default=None, type=click.Choice(OUTPUT_FORMATS), help="Document format.")
@click.option("--enhance/--no-enhance", default=None, help="Add extra edge, security and performance cases.")
@click.option("--enhancer", default=None, type=click.Choice(ENHANCERS), help="Enhancement strategy.")
@click.option("--model", default=None, help="LLM model for the llm enhancer.")
@click.option("--base-url-env", default=None, help="Environment variable holding the API base URL.")
@click.pass_obj
def run(config: TestGenConfig, collection_path: Path, output: Path, fmt, enhance, enhancer, model, base_url_env):
    """Full pipeline: parse collection -> test case document -> test code."""
    config = config.merged(
        output_format=fmt, enhance=enhance, enhancer=enhancer, model=model, base_url_env=base_url_env
    )
    # Step 1: Parse
    endpoints = _parse_collection(collection_path)

    # Step 2: Test cases
    cases = _build_cases(endpoints, config)
    cases_path = output / f"testcases.{CASE_FILE_EXTENSIONS[config.output_format]}"
    _write_cases(cases, cases_path, config.output_format)
    click.echo(f"  Test cases saved to {cases_path}")

    # Step 3: Code
    click.echo("Generating code...")
    count = _write_code(endpoints, output, config)
    click.echo(f"Done! Generated {count + 1} files in {output}")


@main.command()
@click.argument("collection_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--enhance/--no-enhance", default=None, help="Analyze the enhanced case set.")
@click.pass_obj
def coverage(config: TestGenConfig, collection_path: Path, enhance):
    """Report test coverage gaps for a collection."""
    config = config.merged(enhance=enhance, enhancer="rules")
    endpoints = _parse_collection(collection_path)
    cases = _build_cases(endpoints, config)
    click.echo(RuleBasedEnhancer().analyze_coverage_gaps(cases))
