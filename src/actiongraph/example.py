# Shown when nothing has been stored yet.

EXAMPLE_WORKFLOW = """\
name: CI

on:
  push:
    branches: [main]
  pull_request:

jobs:
  lint:
    name: Lint
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - name: Ruff
        run: ruff check .

  test:
    name: Unit tests
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - uses: actions/setup-python@v5
        with:
          python-version: "3.12"
      - run: pip install -e ".[test]"
      - run: pytest -q

  build:
    name: Build image
    runs-on: ubuntu-latest
    needs: [lint, test]
    steps:
      - uses: actions/checkout@v4
      - run: docker build -t app .

  docs:
    runs-on: ubuntu-latest
    needs: lint
    steps:
      - run: make docs

  deploy:
    name: Deploy
    needs: [build, docs]
    uses: ./.github/workflows/deploy.yml
"""
