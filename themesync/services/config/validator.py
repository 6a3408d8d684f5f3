"""
Theme Validator

Validates theme documents against the theme schema before they are
cached or shown to observers.
"""

import json
import math
import re
from typing import Any

from themesync.common.exceptions import MalformedPayloadError, SchemaViolationError
from themesync.common.logging_setup import get_service_logger
from themesync.common.theme import (
    COLOR_FIELDS,
    FONT_SIZE_FIELDS,
    FONT_WEIGHT_FIELDS,
    SPACING_FIELDS,
    Theme,
    load_theme,
)

logger = get_service_logger("config.validator")

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_COLOR = re.compile(
    r"^rgba?\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}\s*(?:,\s*(?:0|1|0?\.\d+|1\.0+)\s*)?\)$"
)


def is_color(value: Any) -> bool:
    """True for #RGB, #RGBA, #RRGGBB, #RRGGBBAA, rgb(...) and rgba(...)"""
    if not isinstance(value, str):
        return False
    value = value.strip()
    if _HEX_COLOR.match(value):
        return True
    if not _FUNC_COLOR.match(value):
        return False
    # rgb() takes exactly three channels, rgba() exactly four
    channels = value[value.index("(") + 1:-1].split(",")
    if value.startswith("rgba") != (len(channels) == 4):
        return False
    return all(0 <= int(c) <= 255 for c in channels[:3])


def is_number(value: Any) -> bool:
    """Finite int or float; bools are rejected"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


class ThemeValidator:
    """Validates theme documents"""

    def validate(self, data: Any) -> tuple[bool, list[str]]:
        """
        Validate a decoded theme document.

        Args:
            data: Decoded JSON value

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        if not isinstance(data, dict):
            return False, ["Theme must be a JSON object"]

        errors: list[str] = []
        errors.extend(self._validate_colors(data.get("colors")))
        errors.extend(self._validate_typography(data.get("typography")))
        errors.extend(self._validate_spacing(data.get("spacing")))

        is_valid = len(errors) == 0

        if not is_valid:
            logger.warning(
                f"Theme validation failed: {len(errors)} errors",
                extra={"errors": errors},
            )

        return is_valid, errors

    def parse(self, raw: str | None) -> Theme:
        """
        Decode and validate a raw theme string.

        Raises:
            MalformedPayloadError: value missing, empty, not JSON or not an object
            SchemaViolationError: JSON object that fails the theme schema
        """
        if raw is None:
            raise MalformedPayloadError("theme value is empty")
        if not isinstance(raw, str):
            raise MalformedPayloadError(
                f"theme value must be a string, got {type(raw).__name__}"
            )
        if not raw.strip():
            raise MalformedPayloadError("theme value is empty")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedPayloadError(f"invalid JSON: {e}") from e
        except (ValueError, RecursionError, TypeError) as e:
            raise MalformedPayloadError(f"undecodable JSON: {type(e).__name__}") from e

        if not isinstance(data, dict):
            raise MalformedPayloadError(
                f"expected a JSON object, got {type(data).__name__}"
            )

        is_valid, errors = self.validate(data)
        if not is_valid:
            raise SchemaViolationError(errors)

        return load_theme(data)

    def _section(self, value: Any, name: str, errors: list[str]) -> dict | None:
        if value is None:
            errors.append(f"Missing {name}")
            return None
        if not isinstance(value, dict):
            errors.append(f"{name} must be an object")
            return None
        return value

    def _validate_colors(self, colors: Any) -> list[str]:
        errors: list[str] = []
        colors = self._section(colors, "colors", errors)
        if colors is None:
            return errors

        for key in COLOR_FIELDS:
            value = colors.get(key)
            if value is None:
                errors.append(f"Missing colors.{key}")
            elif not is_color(value):
                errors.append(f"Invalid colors.{key}: {value!r}")

        return errors

    def _validate_typography(self, typography: Any) -> list[str]:
        errors: list[str] = []
        typography = self._section(typography, "typography", errors)
        if typography is None:
            return errors

        family = typography.get("fontFamily")
        if not isinstance(family, str) or not family.strip():
            errors.append("typography.fontFamily must be a non-empty string")

        sizes = self._section(typography.get("fontSize"), "typography.fontSize", errors)
        if sizes is not None:
            for key in FONT_SIZE_FIELDS:
                value = sizes.get(key)
                if value is None:
                    errors.append(f"Missing typography.fontSize.{key}")
                elif not is_number(value) or value <= 0:
                    errors.append(f"typography.fontSize.{key} must be a positive number")

        weights = self._section(
            typography.get("fontWeight"), "typography.fontWeight", errors
        )
        if weights is not None:
            for key in FONT_WEIGHT_FIELDS:
                value = weights.get(key)
                if value is None:
                    errors.append(f"Missing typography.fontWeight.{key}")
                elif not isinstance(value, str) or not value.strip():
                    errors.append(f"typography.fontWeight.{key} must be a non-empty string")

        return errors

    def _validate_spacing(self, spacing: Any) -> list[str]:
        errors: list[str] = []
        spacing = self._section(spacing, "spacing", errors)
        if spacing is None:
            return errors

        for key in SPACING_FIELDS:
            value = spacing.get(key)
            if value is None:
                errors.append(f"Missing spacing.{key}")
            elif not is_number(value) or value < 0:
                errors.append(f"spacing.{key} must be a non-negative number")

        return errors
