"""Feature catalog for SolEngine.

Defines the closed set of language features the default checkers report and
groups them by category.  Import-time validation ensures every feature
belongs to exactly one category.
"""

from __future__ import annotations

from enum import StrEnum

# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------


class FeatureType(StrEnum):
    # Function
    RETURNING_MULTIPLE_VALUE = "ReturningMultipleValue"
    RECURSION = "Recursion"
    FIRST_CLASS_FUNCTION = "FirstClassFunction"
    PURE_FUNCTION = "PureFunction"
    VIEW_FUNCTION = "ViewFunction"
    CONSTANT_FUNCTION = "ConstantFunction"
    FUNCTION_MODIFIER = "FunctionModifier"
    NAMED_CALL = "NamedCall"
    FREE_FUNCTION = "FreeFunction"
    RETURN_VARIABLE = "ReturnVariable"
    FALLBACK_FUNCTION = "FallbackFunction"
    RECEIVE_ETHER_FUNCTION = "ReceiveEtherFunction"
    FUNCTION_OVERLOADING = "FunctionOverloading"
    # Control flow
    LOOP = "Loop"
    CROSS_CONTRACT_INVOCATION_HIGH_LEVEL = "CrossContractInvocationHighLevel"
    CROSS_CONTRACT_INVOCATION_LOW_LEVEL = "CrossContractInvocationLowLevel"
    SEND = "Send"
    TRANSFER = "Transfer"
    CREATING_CONTRACT_VIA_NEW = "CreatingContractViaNew"
    EXCEPTION_REQUIRE_ASSERT_REVERT_THROW = "ExceptionRequireAssertRevertThrow"
    EXCEPTION_TRY_CATCH = "ExceptionTryCatch"
    # Object-oriented programming
    SINGLE_INHERITANCE = "SingleInheritance"
    MULTIPLE_INHERITANCE = "MultipleInheritance"
    SUPER_VIRTUAL_METHOD_LOOKUP = "SuperVirtualMethodLookup"
    FUNCTION_OVERRIDING = "FunctionOverriding"
    FUNCTION_MODIFIER_OVERRIDING = "FunctionModifierOverriding"
    ABSTRACT_CONTRACT = "AbstractContract"
    INTERFACE = "Interface"
    FUNCTION_VISIBILITY = "FunctionVisibility"
    STATE_VARIABLE_VISIBILITY = "StateVariableVisibility"
    LIBRARY = "Library"
    # Data structure
    ARRAY = "Array"
    STRUCT = "Struct"
    NESTED_ARRAY_OR_STRUCT = "NestedArrayOrStruct"
    ENUM = "Enum"
    EVENT = "Event"
    CONSTANT_AND_IMMUTABLE_STATE_VARIABLE = "ConstantAndImmutableStateVariable"
    # Code style
    SPDX_LICENSE_IDENTIFIER = "SpdxLicenseIdentifier"
    IMPORT_RENAMING = "ImportRenaming"
    NATSPEC_COMMENT = "NatSpecComment"
    PRAGMA_SOLIDITY_VERSION = "PragmaSolidityVersion"
    # Special mechanism
    PRAGMA_SMT_CHECKER = "PragmaSmtChecker"
    MANUAL_GAS_CONTROL = "ManualGasControl"
    INLINE_ASSEMBLY = "InlineAssembly"
    UNICODE_LITERAL = "UnicodeLiteral"
    HEXADECIMAL_LITERAL = "HexadecimalLiteral"
    ETHER_UNIT = "EtherUnit"
    TIME_UNIT = "TimeUnit"


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class FeatureCategory(StrEnum):
    FUNCTION = "function"
    CONTROL_FLOW = "control_flow"
    OBJECT_ORIENTED = "object_oriented"
    DATA_STRUCTURE = "data_structure"
    CODE_STYLE = "code_style"
    SPECIAL_MECHANISM = "special_mechanism"


CATEGORY_FEATURES: dict[FeatureCategory, tuple[FeatureType, ...]] = {
    FeatureCategory.FUNCTION: (
        FeatureType.RETURNING_MULTIPLE_VALUE,
        FeatureType.RECURSION,
        FeatureType.FIRST_CLASS_FUNCTION,
        FeatureType.PURE_FUNCTION,
        FeatureType.VIEW_FUNCTION,
        FeatureType.CONSTANT_FUNCTION,
        FeatureType.FUNCTION_MODIFIER,
        FeatureType.NAMED_CALL,
        FeatureType.FREE_FUNCTION,
        FeatureType.RETURN_VARIABLE,
        FeatureType.FALLBACK_FUNCTION,
        FeatureType.RECEIVE_ETHER_FUNCTION,
        FeatureType.FUNCTION_OVERLOADING,
    ),
    FeatureCategory.CONTROL_FLOW: (
        FeatureType.LOOP,
        FeatureType.CROSS_CONTRACT_INVOCATION_HIGH_LEVEL,
        FeatureType.CROSS_CONTRACT_INVOCATION_LOW_LEVEL,
        FeatureType.SEND,
        FeatureType.TRANSFER,
        FeatureType.CREATING_CONTRACT_VIA_NEW,
        FeatureType.EXCEPTION_REQUIRE_ASSERT_REVERT_THROW,
        FeatureType.EXCEPTION_TRY_CATCH,
    ),
    FeatureCategory.OBJECT_ORIENTED: (
        FeatureType.SINGLE_INHERITANCE,
        FeatureType.MULTIPLE_INHERITANCE,
        FeatureType.SUPER_VIRTUAL_METHOD_LOOKUP,
        FeatureType.FUNCTION_OVERRIDING,
        FeatureType.FUNCTION_MODIFIER_OVERRIDING,
        FeatureType.ABSTRACT_CONTRACT,
        FeatureType.INTERFACE,
        FeatureType.FUNCTION_VISIBILITY,
        FeatureType.STATE_VARIABLE_VISIBILITY,
        FeatureType.LIBRARY,
    ),
    FeatureCategory.DATA_STRUCTURE: (
        FeatureType.ARRAY,
        FeatureType.STRUCT,
        FeatureType.NESTED_ARRAY_OR_STRUCT,
        FeatureType.ENUM,
        FeatureType.EVENT,
        FeatureType.CONSTANT_AND_IMMUTABLE_STATE_VARIABLE,
    ),
    FeatureCategory.CODE_STYLE: (
        FeatureType.SPDX_LICENSE_IDENTIFIER,
        FeatureType.IMPORT_RENAMING,
        FeatureType.NATSPEC_COMMENT,
        FeatureType.PRAGMA_SOLIDITY_VERSION,
    ),
    FeatureCategory.SPECIAL_MECHANISM: (
        FeatureType.PRAGMA_SMT_CHECKER,
        FeatureType.MANUAL_GAS_CONTROL,
        FeatureType.INLINE_ASSEMBLY,
        FeatureType.UNICODE_LITERAL,
        FeatureType.HEXADECIMAL_LITERAL,
        FeatureType.ETHER_UNIT,
        FeatureType.TIME_UNIT,
    ),
}

FEATURE_CATEGORY: dict[FeatureType, FeatureCategory] = {
    feature: category for category, features in CATEGORY_FEATURES.items() for feature in features
}


def category_of(feature: str) -> FeatureCategory:
    """Category of a feature name.  Raises ``KeyError`` for unknown names."""
    try:
        return FEATURE_CATEGORY[FeatureType(feature)]
    except ValueError:
        raise KeyError(feature) from None


# ---------------------------------------------------------------------------
# Import-time validation
# ---------------------------------------------------------------------------


def _validate_categories() -> None:
    """Ensure every FeatureType belongs to exactly one category."""
    listed = [feature for features in CATEGORY_FEATURES.values() for feature in features]
    duplicates = {feature for feature in listed if listed.count(feature) > 1}
    if duplicates:
        raise RuntimeError(f"Features listed in more than one category: {sorted(duplicates)}")
    missing = set(FeatureType) - set(listed)
    if missing:
        raise RuntimeError(f"Features missing from CATEGORY_FEATURES: {sorted(missing)}")


_validate_categories()
