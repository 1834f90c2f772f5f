from .capabilities import (
    Capability,
    CapabilitySet,
    SupportedFilter,
    build_capabilities,
    capabilities,
    list_supported_filters,
)
from .exceptions import (
    FilterError,
    InvalidCombinationError,
    InvalidOperatorError,
    MalformedExpressionError,
    TranslationError,
    UnsupportedFilterError,
    ValueTypeError,
)
from .kinds import (
    DEFAULT_KIND_REGISTRY,
    MSMS_SPECTRUM,
    Domain,
    FilterKind,
    FilterKindRegistry,
    KindDescriptor,
    build_default_kind_registry,
)
from .model import (
    Combination,
    FilterLeaf,
    PredicateTree,
    build_leaf,
    combine,
    compound_id_filter,
    compound_name_filter,
    filter_kinds,
    msms_mz_range_max_filter,
    msms_mz_range_min_filter,
)
from .operators import LogicalOp, Operator
from .parser import from_dict, parse
from .sqlalchemy_compiler import to_sqlalchemy
from .translator import DEFAULT_OPTIONS, TranslatorOptions, translate
from .validator import ValidatedPredicateTree, prepare, validate

__all__ = [
    # Core types
    "FilterKind",
    "Domain",
    "Operator",
    "LogicalOp",
    "FilterLeaf",
    "Combination",
    "PredicateTree",
    "ValidatedPredicateTree",
    # Kind registry
    "KindDescriptor",
    "FilterKindRegistry",
    "DEFAULT_KIND_REGISTRY",
    "MSMS_SPECTRUM",
    "build_default_kind_registry",
    # Capabilities
    "Capability",
    "CapabilitySet",
    "SupportedFilter",
    "build_capabilities",
    "capabilities",
    "list_supported_filters",
    # Construction
    "build_leaf",
    "combine",
    "filter_kinds",
    "compound_id_filter",
    "compound_name_filter",
    "msms_mz_range_min_filter",
    "msms_mz_range_max_filter",
    # Parsing
    "parse",
    "from_dict",
    # Validation / translation
    "validate",
    "prepare",
    "translate",
    "TranslatorOptions",
    "DEFAULT_OPTIONS",
    "to_sqlalchemy",
    # Exceptions
    "FilterError",
    "ValueTypeError",
    "InvalidOperatorError",
    "MalformedExpressionError",
    "InvalidCombinationError",
    "UnsupportedFilterError",
    "TranslationError",
]
