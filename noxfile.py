"""Nox sessions for fabric-sync: tests, coverage and type checking."""

import nox

PYTHONS = ["3.10", "3.11", "3.12", "3.13"]

nox.options.sessions = ["tests", "type_check"]
nox.options.default_venv_backend = "uv"


@nox.session(python=PYTHONS)
def tests(session):
    """Run the unit suite without coverage."""
    session.install(".[test]")
    session.run("pytest", "tests/unit", "-q", "--no-cov", *session.posargs)


@nox.session(python=PYTHONS[-1])
def coverage(session):
    """Run the unit suite once with a coverage report."""
    session.install(".[test]")
    session.run("pytest", "tests/unit", "--cov-fail-under=90", *session.posargs)


@nox.session(python=PYTHONS)
def type_check(session):
    """Run mypy over the package."""
    session.install(".[dev]")
    session.run("mypy", *session.posargs)
