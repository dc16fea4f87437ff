# type: ignore
from invoke import task


@task
def venv(ctx):
    """Create .venv with the package and its dev and test extras."""
    ctx.run("uv venv")
    ctx.run("uv pip install -e '.[dev,test]'")


@task
def lint(ctx):
    """Static checks: ruff lint and format, then mypy."""
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """
    Run tests with coverage information.
    """
    ctx.run("pytest --cov=smartcb --cov-report=term-missing", pty=True)


@task
def mock(ctx, port=8080):
    """Serve a mock breaker on localhost for manual CLI runs."""
    ctx.run(f"smartcb mock --host 127.0.0.1 --port {port}", pty=True)


@task
def build_package(ctx):
    """Build sdist and wheel into dist/."""
    ctx.run("rm -rf dist")
    ctx.run("uv build")
