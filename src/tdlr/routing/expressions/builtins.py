"""Built-in functions for the routing expression DSL.

Categories:
- String: str::len, str::contains, str::starts_with, str::ends_with,
  str::to_lowercase, str::to_uppercase, str::trim, str::from,
  str::substring, str::replace, str::regex_matches
- Math: min, max, floor, ceil
- Logic: if

Argument kinds are checked by the evaluator against each parameter's
declared kind before the implementation is called, so implementations can
assume well-typed input.
"""

import math
from functools import lru_cache

from tdlr.routing.expressions.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    FunctionRegistry,
)
from tdlr.routing.expressions.regex import PatternCache
from tdlr.routing.expressions.values import Kind, to_display_string

IF_FUNCTION = "if"


def build_default_registry() -> FunctionRegistry:
    """Build a registry holding every built-in function."""
    return FunctionRegistry(
        _string_functions() + _math_functions() + _logic_functions()
    )


@lru_cache(maxsize=None)
def default_registry() -> FunctionRegistry:
    """The process-wide registry, built on first use."""
    return build_default_registry()


# -----------------------------------------------------------------------------
# String Functions
# -----------------------------------------------------------------------------


def _len(value: str) -> int:
    """Length in codepoints."""
    return len(value)


def _contains(value: str, sub: str) -> bool:
    return sub in value


def _starts_with(value: str, prefix: str) -> bool:
    return value.startswith(prefix)


def _ends_with(value: str, suffix: str) -> bool:
    return value.endswith(suffix)


def _to_lowercase(value: str) -> str:
    return value.lower()


def _to_uppercase(value: str) -> str:
    return value.upper()


def _trim(value: str) -> str:
    return value.strip()


def _substring(value: str, start: float, length: float) -> str:
    """Substring by 0-based start and length, clamped to the string's bounds."""
    begin = min(max(int(start), 0), len(value))
    end = min(begin + max(int(length), 0), len(value))
    return value[begin:end]


def _replace(value: str, find: str, replacement: str) -> str:
    return value.replace(find, replacement)


def _regex_matches(patterns: PatternCache, value: str, pattern: str) -> bool:
    return patterns.matches(value, pattern)


def _string_param(name: str = "s", description: str = "The input string") -> FunctionParameter:
    return FunctionParameter(name, Kind.STRING, description)


def _string_functions() -> list[FunctionDefinition]:
    return [
        FunctionDefinition(
            name="str::len",
            description="Returns the length of a string in characters",
            category=FunctionCategory.STRING,
            parameters=(_string_param(),),
            return_type=Kind.NUMBER,
            examples=('if(str::len(stem) > 40, "@long_names", "me")',),
            implementation=_len,
        ),
        FunctionDefinition(
            name="str::contains",
            description="Returns true if the string contains the substring",
            category=FunctionCategory.STRING,
            parameters=(
                _string_param(),
                _string_param("sub", "The substring to look for"),
            ),
            return_type=Kind.BOOL,
            examples=('if(str::contains(name, "screenshot"), "@screenshots", "me")',),
            implementation=_contains,
        ),
        FunctionDefinition(
            name="str::starts_with",
            description="Returns true if the string starts with the prefix",
            category=FunctionCategory.STRING,
            parameters=(_string_param(), _string_param("prefix", "The prefix")),
            return_type=Kind.BOOL,
            examples=('str::starts_with(name, "IMG_")',),
            implementation=_starts_with,
        ),
        FunctionDefinition(
            name="str::ends_with",
            description="Returns true if the string ends with the suffix",
            category=FunctionCategory.STRING,
            parameters=(_string_param(), _string_param("suffix", "The suffix")),
            return_type=Kind.BOOL,
            examples=('str::ends_with(stem, "_final")',),
            implementation=_ends_with,
        ),
        FunctionDefinition(
            name="str::to_lowercase",
            description="Converts a string to lowercase",
            category=FunctionCategory.STRING,
            parameters=(_string_param(),),
            return_type=Kind.STRING,
            examples=('str::to_lowercase(dir) == "photos"',),
            implementation=_to_lowercase,
        ),
        FunctionDefinition(
            name="str::to_uppercase",
            description="Converts a string to uppercase",
            category=FunctionCategory.STRING,
            parameters=(_string_param(),),
            return_type=Kind.STRING,
            examples=('str::to_uppercase(ext)',),
            implementation=_to_uppercase,
        ),
        FunctionDefinition(
            name="str::trim",
            description="Removes leading and trailing whitespace",
            category=FunctionCategory.STRING,
            parameters=(_string_param(),),
            return_type=Kind.STRING,
            examples=('str::trim(stem)',),
            implementation=_trim,
        ),
        FunctionDefinition(
            name="str::from",
            description="Converts any value to its canonical string form",
            category=FunctionCategory.STRING,
            parameters=(FunctionParameter("value", None, "The value to convert"),),
            return_type=Kind.STRING,
            examples=('if(str::from(year) == "2024", "@this_year", "@archive")',),
            implementation=to_display_string,
        ),
        FunctionDefinition(
            name="str::substring",
            description=(
                "Returns len characters starting at 0-based start; "
                "out-of-range bounds are clamped"
            ),
            category=FunctionCategory.STRING,
            parameters=(
                _string_param(),
                FunctionParameter("start", Kind.NUMBER, "0-based start index"),
                FunctionParameter("len", Kind.NUMBER, "Number of characters"),
            ),
            return_type=Kind.STRING,
            examples=('str::substring(stem, 0, 4) == "2024"',),
            implementation=_substring,
        ),
        FunctionDefinition(
            name="str::replace",
            description="Replaces all non-overlapping occurrences of find",
            category=FunctionCategory.STRING,
            parameters=(
                _string_param(),
                _string_param("find", "The text to replace"),
                _string_param("replacement", "The replacement text"),
            ),
            return_type=Kind.STRING,
            examples=('str::replace(dir, " ", "_")',),
            implementation=_replace,
        ),
        FunctionDefinition(
            name="str::regex_matches",
            description="Returns true if the regular expression matches anywhere in the string",
            category=FunctionCategory.STRING,
            parameters=(
                _string_param(),
                _string_param("pattern", "Regular expression"),
            ),
            return_type=Kind.BOOL,
            examples=('if(str::regex_matches(name, "^IMG_[0-9]+"), "@camera", "me")',),
            implementation=_regex_matches,
            uses_regex=True,
        ),
    ]


# -----------------------------------------------------------------------------
# Math Functions
# -----------------------------------------------------------------------------


def _min(a: float, b: float) -> float:
    return min(a, b)


def _max(a: float, b: float) -> float:
    return max(a, b)


def _number_param(name: str, description: str = "A number") -> FunctionParameter:
    return FunctionParameter(name, Kind.NUMBER, description)


def _math_functions() -> list[FunctionDefinition]:
    return [
        FunctionDefinition(
            name="min",
            description="Returns the smaller of two numbers",
            category=FunctionCategory.MATH,
            parameters=(_number_param("a"), _number_param("b")),
            return_type=Kind.NUMBER,
            examples=("min(size_mb, 100)",),
            implementation=_min,
        ),
        FunctionDefinition(
            name="max",
            description="Returns the larger of two numbers",
            category=FunctionCategory.MATH,
            parameters=(_number_param("a"), _number_param("b")),
            return_type=Kind.NUMBER,
            examples=("max(depth, 1)",),
            implementation=_max,
        ),
        FunctionDefinition(
            name="floor",
            description="Rounds down to the nearest integer",
            category=FunctionCategory.MATH,
            parameters=(_number_param("x"),),
            return_type=Kind.NUMBER,
            examples=("floor(size_mb) >= 10",),
            implementation=math.floor,
        ),
        FunctionDefinition(
            name="ceil",
            description="Rounds up to the nearest integer",
            category=FunctionCategory.MATH,
            parameters=(_number_param("x"),),
            return_type=Kind.NUMBER,
            examples=("ceil(size_mb)",),
            implementation=math.ceil,
        ),
    ]


# -----------------------------------------------------------------------------
# Logic Functions
# -----------------------------------------------------------------------------


def _logic_functions() -> list[FunctionDefinition]:
    return [
        FunctionDefinition(
            name=IF_FUNCTION,
            description=(
                "Returns then_value if condition is true, else else_value; "
                "only the selected branch is evaluated"
            ),
            category=FunctionCategory.LOGIC,
            parameters=(
                FunctionParameter("condition", Kind.BOOL, "The condition"),
                FunctionParameter("then_value", None, "Result when true"),
                FunctionParameter("else_value", None, "Result when false"),
            ),
            return_type=None,
            examples=(
                'if(is_video, "@videos", if(is_image, "@photos", "me"))',
                'if(size > 100 * MB, "@large_files", "@small_files")',
            ),
        ),
    ]
