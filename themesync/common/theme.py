"""
Theme Dataclasses

Immutable appearance configuration exchanged with the remote source and
persisted in the local cache. JSON keys are camelCase, attributes are
snake_case; to_dict()/load_theme() convert between the two.
"""

from dataclasses import dataclass

Number = int | float

# JSON key -> attribute name, in schema order
COLOR_FIELDS: dict[str, str] = {
    "primary": "primary",
    "secondary": "secondary",
    "background": "background",
    "surface": "surface",
    "text": "text",
    "textSecondary": "text_secondary",
    "error": "error",
    "success": "success",
    "warning": "warning",
}
FONT_SIZE_FIELDS = ("small", "medium", "large", "xlarge")
FONT_WEIGHT_FIELDS = ("regular", "medium", "bold")
SPACING_FIELDS = ("xs", "sm", "md", "lg", "xl")


@dataclass(frozen=True, slots=True)
class ThemeColors:
    """Semantic color roles"""
    primary: str
    secondary: str
    background: str
    surface: str
    text: str
    text_secondary: str
    error: str
    success: str
    warning: str


@dataclass(frozen=True, slots=True)
class FontSizes:
    small: Number
    medium: Number
    large: Number
    xlarge: Number


@dataclass(frozen=True, slots=True)
class FontWeights:
    regular: str
    medium: str
    bold: str


@dataclass(frozen=True, slots=True)
class Typography:
    font_family: str
    font_size: FontSizes
    font_weight: FontWeights


@dataclass(frozen=True, slots=True)
class Spacing:
    xs: Number
    sm: Number
    md: Number
    lg: Number
    xl: Number


@dataclass(frozen=True, slots=True)
class Theme:
    """Complete theme document"""
    colors: ThemeColors
    typography: Typography
    spacing: Spacing

    def to_dict(self) -> dict:
        """Serialize to the JSON shape used on the wire and in the cache"""
        return {
            "colors": {
                key: getattr(self.colors, attr) for key, attr in COLOR_FIELDS.items()
            },
            "typography": {
                "fontFamily": self.typography.font_family,
                "fontSize": {
                    key: getattr(self.typography.font_size, key)
                    for key in FONT_SIZE_FIELDS
                },
                "fontWeight": {
                    key: getattr(self.typography.font_weight, key)
                    for key in FONT_WEIGHT_FIELDS
                },
            },
            "spacing": {key: getattr(self.spacing, key) for key in SPACING_FIELDS},
        }


def load_theme(data: dict) -> Theme:
    """
    Build a Theme from an already validated dictionary.

    Unknown keys are ignored. Raises KeyError if a required field is
    missing; callers validate first (see ThemeValidator).
    """
    typography = data["typography"]

    return Theme(
        colors=ThemeColors(
            **{attr: data["colors"][key] for key, attr in COLOR_FIELDS.items()}
        ),
        typography=Typography(
            font_family=typography["fontFamily"],
            font_size=FontSizes(
                **{key: typography["fontSize"][key] for key in FONT_SIZE_FIELDS}
            ),
            font_weight=FontWeights(
                **{key: typography["fontWeight"][key] for key in FONT_WEIGHT_FIELDS}
            ),
        ),
        spacing=Spacing(**{key: data["spacing"][key] for key in SPACING_FIELDS}),
    )


# Floor value used when neither the remote source nor the cache has a theme
DEFAULT_THEME = Theme(
    colors=ThemeColors(
        primary="#007AFF",
        secondary="#5856D6",
        background="#FFFFFF",
        surface="#F2F2F7",
        text="#000000",
        text_secondary="#8E8E93",
        error="#FF3B30",
        success="#34C759",
        warning="#FF9500",
    ),
    typography=Typography(
        font_family="System",
        font_size=FontSizes(small=12, medium=16, large=20, xlarge=24),
        font_weight=FontWeights(regular="400", medium="500", bold="700"),
    ),
    spacing=Spacing(xs=4, sm=8, md=16, lg=24, xl=32),
)
