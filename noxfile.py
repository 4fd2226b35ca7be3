"""Nox automation sessions for tex_fragmenter."""

from __future__ import annotations

import nox

nox.options.sessions = ("lint", "typecheck", "tests")
nox.options.reuse_existing_virtualenvs = True


@nox.session()
def lint(session: nox.Session) -> None:
    session.install("black", "flake8")
    session.run("black", "--check", "tex_fragmenter", "tests")
    session.run("flake8", "--max-line-length", "100", "tex_fragmenter", "tests")


@nox.session()
def typecheck(session: nox.Session) -> None:
    session.install("-e", ".[dev]")
    session.run("mypy", "tex_fragmenter")


@nox.session()
def tests(session: nox.Session) -> None:
    session.install("-e", ".[test]")
    session.run("pytest", "tests")
