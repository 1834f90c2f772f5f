from pytest_archon import archrule


def test_filter_model_is_backend_free() -> None:
    """
    The filter model, parser and helpers must not depend on SQLAlchemy.
    Only store probing and the SQLAlchemy backend touch the database layer.
    """
    (
        archrule("model_is_backend_free")
        .match(
            "compdb_filters.model",
            "compdb_filters.parser",
            "compdb_filters.kinds",
            "compdb_filters.operators",
            "compdb_filters.escaping",
            "compdb_filters.exceptions",
        )
        .should_not_import("sqlalchemy*")
        .check("compdb_filters")
    )


def test_model_does_not_know_compilers() -> None:
    """
    Building and parsing filters never reaches into validation or compilation.
    """
    (
        archrule("model_layering")
        .match(
            "compdb_filters.model",
            "compdb_filters.parser",
            "compdb_filters.kinds",
            "compdb_filters.operators",
        )
        .should_not_import("compdb_filters.validator")
        .should_not_import("compdb_filters.translator")
        .should_not_import("compdb_filters.sqlalchemy_compiler")
        .check("compdb_filters")
    )


def test_translators_are_independent() -> None:
    """
    The string translator and the SQLAlchemy backend are siblings.
    """
    (
        archrule("translator_independence")
        .match("compdb_filters.translator")
        .should_not_import("compdb_filters.sqlalchemy_compiler")
        .check("compdb_filters")
    )
