import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]

# Packages with C extensions that must be rebuilt per Python version.
_C_EXT_PACKAGES = ["psycopg2-binary"]


def _install(session: nox.Session) -> None:
    """Install the project with its test extra into the nox virtualenv."""
    session.install("-e", ".[test]")
    session.run(
        "pip",
        "install",
        "--force-reinstall",
        "--no-cache-dir",
        *_C_EXT_PACKAGES,
    )


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run aggregate and value object tests only (no infrastructure required)."""
    _install(session)
    session.run("pytest", "tests/cellar/domain/", "tests/cellar/bdd/test_cart_items.py")


@nox.session(python=PYTHON_VERSIONS[-1])
def api(session: nox.Session) -> None:
    """Run the HTTP API and behaviour suites."""
    _install(session)
    session.run("pytest", "-m", "integration or bdd")
